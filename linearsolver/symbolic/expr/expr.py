from dataclasses import dataclass
from numbers import Real
from types import MappingProxyType
from typing import Callable, Iterable, Mapping, Optional, Tuple, Union

import numpy as np


@dataclass(frozen=True, order=True)
class VariableName:
    """Immutable identifier of a decision variable.

    Names compare and hash by value, so two ``VariableName("x")`` objects address
    the same coefficient in an expression.
    """

    value: str

    def __post_init__(self):
        if not isinstance(self.value, str) or not self.value:
            raise ValueError(f"Variable name must be a non-empty string, got {self.value!r}")

    def __str__(self):
        return self.value


def as_name(name: Union[str, VariableName]) -> VariableName:
    """Coerce a plain string (or a name) into a ``VariableName``."""
    return name if isinstance(name, VariableName) else VariableName(name)


def as_scalar(value) -> Optional[float]:
    """Return ``value`` as a finite float, or None if it is not a real number.

    Raises:
        ValueError: If ``value`` is a real number but NaN or infinite
    """
    if isinstance(value, bool) or not isinstance(value, Real):
        return None
    value = float(value)
    if not np.isfinite(value):
        raise ValueError(f"Expression arithmetic requires finite numbers, got {value}")
    return value


def format_number(value: float) -> str:
    """Render integral floats without a trailing ``.0``."""
    if float(value).is_integer():
        return str(int(value))
    return repr(float(value))


class Expression:
    """Base class for linear expressions over decision variables.

    An expression is a coefficient map from variable names to numbers plus a
    constant term. ``Variable``, ``Parameter`` and ``LinearExpression`` all share
    this interface and its operators:

    - Arithmetic: ``+``, ``-`` between expressions and/or scalars, unary ``-``,
      ``*`` and ``/`` by a scalar
    - Relations: ``<=``, ``>=``, ``==`` (build an unregistered ``Constraint``)

    Every operator returns a new, merged expression: terms for the same variable
    are summed into one entry and a scalar never becomes a variable entry.
    Multiplying two expressions is not linear and raises ``TypeError``.

    Example:
        >>> x1, x2 = Variable("x1"), Variable("x2")
        >>> expr = (2 * x1 + 3 * x2) / 2 - 4   # x1 + 1.5*x2 - 4
    """

    # Give expressions priority over numpy scalars and arrays in operations
    __array_priority__ = 1000
    __array_ufunc__ = None

    @property
    def coefficients(self) -> Mapping[VariableName, float]:
        raise NotImplementedError(f"coefficients not implemented for {self.__class__.__name__}")

    @property
    def constant(self) -> float:
        return 0.0

    def _term(self) -> Optional[Tuple[VariableName, float]]:
        """Return ``(name, coefficient)`` when this expression is a single scaled variable."""
        return None

    def _map(self, fn: Callable[[float], float]) -> "Expression":
        """Apply ``fn`` to every coefficient and the constant."""
        return LinearExpression(
            {name: fn(value) for name, value in self.coefficients.items()},
            fn(self.constant),
        )

    def _combine(self, other: "Expression", sign: float) -> "Expression":
        """Merge ``self + sign * other`` term by term."""
        left, right = self._term(), other._term()
        if left is not None and right is not None:
            (left_name, left_coefficient), (right_name, right_coefficient) = left, right
            if left_name == right_name:
                coefficient = left_coefficient + sign * right_coefficient
                if coefficient == 0.0:
                    return LinearExpression()
                return Parameter(left_name, coefficient)
            return LinearExpression({left_name: left_coefficient, right_name: sign * right_coefficient})

        merged = dict(self.coefficients)
        for name, value in other.coefficients.items():
            merged[name] = merged.get(name, 0.0) + sign * value
        return LinearExpression(merged, self.constant + sign * other.constant)

    def _shift(self, value: float) -> "LinearExpression":
        return LinearExpression(self.coefficients, self.constant + value)

    def __neg__(self):
        return self._map(lambda v: -v)

    def __pos__(self):
        return self

    def __mul__(self, other):
        scalar = as_scalar(other)
        if scalar is None:
            return NotImplemented
        if scalar == 0.0:
            return LinearExpression()
        return self._map(lambda v: v * scalar)

    def __rmul__(self, other):
        return self.__mul__(other)

    def __truediv__(self, other):
        scalar = as_scalar(other)
        if scalar is None:
            return NotImplemented
        if scalar == 0.0:
            raise ZeroDivisionError(f"Cannot divide {self} by zero")
        return self._map(lambda v: v / scalar)

    def __add__(self, other):
        scalar = as_scalar(other)
        if scalar is not None:
            return self._shift(scalar)
        if isinstance(other, Expression):
            return self._combine(other, 1.0)
        return NotImplemented

    def __radd__(self, other):
        scalar = as_scalar(other)
        if scalar is None:
            return NotImplemented
        return self._shift(scalar)

    def __sub__(self, other):
        scalar = as_scalar(other)
        if scalar is not None:
            return self._shift(-scalar)
        if isinstance(other, Expression):
            return self._combine(other, -1.0)
        return NotImplemented

    def __rsub__(self, other):
        # e.g. 5 - x  =>  -x + 5
        scalar = as_scalar(other)
        if scalar is None:
            return NotImplemented
        negated = -self
        return LinearExpression(negated.coefficients, negated.constant + scalar)

    def le(self, other) -> "Constraint":
        """Build ``self <= other`` without registering it in a model."""
        from .constraint import Constraint, Relationship

        return Constraint(self, other, Relationship.LE)

    def ge(self, other) -> "Constraint":
        """Build ``self >= other`` without registering it in a model."""
        from .constraint import Constraint, Relationship

        return Constraint(self, other, Relationship.GE)

    def eq(self, other) -> "Constraint":
        """Build ``self == other`` without registering it in a model."""
        from .constraint import Constraint, Relationship

        return Constraint(self, other, Relationship.EQ)

    def __le__(self, other):
        if not _is_operand(other):
            return NotImplemented
        return self.le(other)

    def __ge__(self, other):
        if not _is_operand(other):
            return NotImplemented
        return self.ge(other)

    def __eq__(self, other):
        if not _is_operand(other):
            return NotImplemented
        return self.eq(other)

    def __ne__(self, other):
        return self is not other

    # __eq__ builds constraints, so identity hashing keeps expressions usable in sets
    __hash__ = object.__hash__

    def evaluate(self, values: Mapping) -> float:
        """Evaluate the expression for an assignment of the variables.

        Args:
            values: Mapping from variable name (``str`` or ``VariableName``) to value

        Returns:
            float: ``sum(coefficient * value) + constant``

        Raises:
            KeyError: If a variable of the expression has no value
        """
        lookup = {str(name): value for name, value in values.items()}
        total = self.constant
        for name, coefficient in self.coefficients.items():
            if str(name) not in lookup:
                raise KeyError(f"No value for variable '{name}'")
            total += coefficient * float(lookup[str(name)])
        return total

    def variables(self) -> Tuple[VariableName, ...]:
        """Names referenced by this expression, in insertion order."""
        return tuple(self.coefficients)

    def __str__(self):
        parts = []
        for name, coefficient in self.coefficients.items():
            magnitude = abs(coefficient)
            text = str(name) if magnitude == 1.0 else f"{format_number(magnitude)}*{name}"
            if not parts:
                parts.append(text if coefficient >= 0 else f"-{text}")
            else:
                parts.append(f"+ {text}" if coefficient >= 0 else f"- {text}")
        constant = self.constant
        if constant != 0.0 or not parts:
            if not parts:
                parts.append(format_number(constant))
            else:
                parts.append(f"{'+' if constant >= 0 else '-'} {format_number(abs(constant))}")
        return " ".join(parts)


def _is_operand(value) -> bool:
    return isinstance(value, Expression) or (
        isinstance(value, Real) and not isinstance(value, bool)
    )


class Parameter(Expression):
    """A single variable scaled by a coefficient, e.g. ``3*x``.

    Parameters are produced by scaling or negating a ``Variable`` and stay
    parameters under further scaling. Combining two parameters of the same
    variable merges them into one; a coefficient that cancels to zero collapses
    to an empty ``LinearExpression`` instead.

    Attributes:
        name (VariableName): Name of the scaled variable
        coefficient (float): Finite multiplier
    """

    def __init__(self, name: Union[str, VariableName], coefficient: float):
        value = as_scalar(coefficient)
        if value is None:
            raise TypeError(f"Parameter coefficient must be a real number, got {coefficient!r}")
        self._name = as_name(name)
        self._coefficient = value

    @property
    def name(self) -> VariableName:
        return self._name

    @property
    def coefficient(self) -> float:
        return self._coefficient

    @property
    def coefficients(self) -> Mapping[VariableName, float]:
        return MappingProxyType({self._name: self._coefficient})

    def _term(self):
        return self._name, self._coefficient

    def _map(self, fn):
        coefficient = fn(self._coefficient)
        if coefficient == 0.0:
            return LinearExpression()
        return Parameter(self._name, coefficient)

    def __repr__(self):
        return f"Param({str(self._name)!r}, {self._coefficient!r})"


class LinearExpression(Expression):
    """General linear expression: coefficient map plus constant.

    Coefficients are copied on construction and exposed read-only. Entries with
    a zero value are kept (e.g. after ``(x + y) - x``); they are dropped when the
    expression is compiled into a model.

    Example:
        >>> LinearExpression({"x": 2.0, "y": -1.0}, 3.0)   # 2*x - y + 3
        >>> LinearExpression()                            # empty, evaluates to 0
    """

    def __init__(
        self,
        coefficients: Optional[Mapping[Union[str, VariableName], float]] = None,
        constant: float = 0.0,
    ):
        value = as_scalar(constant)
        if value is None:
            raise TypeError(f"Expression constant must be a real number, got {constant!r}")
        self._coefficients = {}
        for name, coefficient in (coefficients or {}).items():
            scalar = as_scalar(coefficient)
            if scalar is None:
                raise TypeError(f"Coefficient of '{name}' must be a real number, got {coefficient!r}")
            self._coefficients[as_name(name)] = scalar
        self._constant = value

    @property
    def coefficients(self) -> Mapping[VariableName, float]:
        return MappingProxyType(self._coefficients)

    @property
    def constant(self) -> float:
        return self._constant

    def __repr__(self):
        return f"LinExpr({self})"


def to_expression(value) -> Expression:
    """Wrap a scalar as a constant ``LinearExpression``; pass expressions through.

    Raises:
        TypeError: If ``value`` is neither an expression nor a real number
    """
    if isinstance(value, Expression):
        return value
    scalar = as_scalar(value)
    if scalar is None:
        raise TypeError(f"Cannot use {value!r} as a linear expression")
    return LinearExpression(constant=scalar)


def sum_expressions(expressions: Iterable) -> LinearExpression:
    """Sum expressions and scalars in a single merge pass.

    Equivalent to chaining ``+`` but without building intermediate expressions,
    which matters when summing over large tensors.

    Example:
        >>> total = sum_expressions(flows[i, j] for j in nodes)
    """
    coefficients = {}
    constant = 0.0
    for item in expressions:
        item = to_expression(item)
        for name, value in item.coefficients.items():
            coefficients[name] = coefficients.get(name, 0.0) + value
        constant += item.constant
    return LinearExpression(coefficients, constant)


def average_expressions(expressions: Iterable) -> Expression:
    """Arithmetic mean of expressions and scalars.

    Raises:
        ValueError: If ``expressions`` is empty
    """
    items = list(expressions)
    if not items:
        raise ValueError("Cannot average an empty collection of expressions")
    return sum_expressions(items) / len(items)
