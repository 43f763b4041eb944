from enum import Enum
from types import MappingProxyType
from typing import Optional, Union

import numpy as np

from .expr import Expression, LinearExpression, Parameter, VariableName, as_name


class VariableKind(Enum):
    """Domain of a decision variable."""

    BOOLEAN = "boolean"
    INTEGER = "integer"
    NUMERIC = "numeric"


class Variable(Expression):
    """A named decision variable.

    One class covers every variable domain, tagged by ``kind``. Integer and
    numeric variables carry a lower and upper bound (default unbounded); boolean
    variables are fixed to ``[0, 1]``. Variables are immutable: scaling or
    combining them produces new ``Parameter`` / ``LinearExpression`` objects that
    reference the variable by name.

    Variables are normally created through a ``ModelBuilder`` (``num_var``,
    ``int_var``, ``bool_var``), which guarantees name uniqueness within a model.

    Attributes:
        name (VariableName): Unique name within the model
        kind (VariableKind): BOOLEAN, INTEGER or NUMERIC
        lower_bound (float): Lower bound (``-inf`` if unbounded)
        upper_bound (float): Upper bound (``inf`` if unbounded)

    Example:
        >>> x = Variable("x", VariableKind.INTEGER, lower_bound=0)
        >>> expr = 2 * x + 1
    """

    def __init__(
        self,
        name: Union[str, VariableName],
        kind: VariableKind = VariableKind.NUMERIC,
        lower_bound: Optional[float] = None,
        upper_bound: Optional[float] = None,
    ):
        """Initialize a Variable.

        Args:
            name: Name of the variable
            kind: Variable domain. Defaults to NUMERIC.
            lower_bound: Lower bound. Defaults to ``-inf`` (``0`` for booleans).
            upper_bound: Upper bound. Defaults to ``inf`` (``1`` for booleans).

        Raises:
            ValueError: If the bounds are NaN, inverted, or not ``[0, 1]`` for a boolean
        """
        self._name = as_name(name)
        self._kind = VariableKind(kind)

        if self._kind is VariableKind.BOOLEAN:
            if lower_bound not in (None, 0) or upper_bound not in (None, 1):
                raise ValueError(
                    f"Boolean variable '{self._name}' is bounded to [0, 1], "
                    f"got [{lower_bound}, {upper_bound}]"
                )
            lower, upper = 0.0, 1.0
        else:
            lower = -np.inf if lower_bound is None else float(lower_bound)
            upper = np.inf if upper_bound is None else float(upper_bound)

        if np.isnan(lower) or np.isnan(upper):
            raise ValueError(f"Bounds of variable '{self._name}' must not be NaN")
        if lower > upper:
            raise ValueError(
                f"Variable '{self._name}' has lower bound {lower} above upper bound {upper}"
            )
        self._lower_bound = lower
        self._upper_bound = upper

    @property
    def name(self) -> VariableName:
        return self._name

    @property
    def kind(self) -> VariableKind:
        return self._kind

    @property
    def lower_bound(self) -> float:
        return self._lower_bound

    @property
    def upper_bound(self) -> float:
        return self._upper_bound

    @property
    def coefficients(self):
        return MappingProxyType({self._name: 1.0})

    def _term(self):
        return self._name, 1.0

    def _map(self, fn):
        coefficient = fn(1.0)
        if coefficient == 0.0:
            return LinearExpression()
        return Parameter(self._name, coefficient)

    def __repr__(self):
        return f"Var({str(self._name)!r})"
