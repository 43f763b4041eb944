"""Solver-ready, immutable representation of a model.

``ModelBuilder.build()`` produces a ``CompiledModel``: every constraint is
normalized to ``lower <= sum(coefficient * variable) <= upper`` and every
variable carries its kind and bounds. Backends (see ``linearsolver.solvers``)
translate this form; nothing in it refers back to the builder.
"""

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Dict, Mapping, Optional, Tuple

from linearsolver.config import SolverType
from linearsolver.symbolic.expr import Goal, VariableKind, VariableName


def _freeze(coefficients: Mapping) -> Mapping[VariableName, float]:
    return MappingProxyType(dict(coefficients))


@dataclass(frozen=True)
class CompiledVariable:
    """Declared variable with its final bounds (booleans are ``[0, 1]``)."""

    name: VariableName
    kind: VariableKind
    lower_bound: float
    upper_bound: float


@dataclass(frozen=True)
class CompiledConstraint:
    """Normalized constraint ``lower_bound <= sum(c_i * x_i) <= upper_bound``.

    Attributes:
        name: Optional user-given name
        coefficients: Non-zero coefficients by variable name (read-only)
        lower_bound: ``-inf`` for ``<=`` constraints
        upper_bound: ``inf`` for ``>=`` constraints
    """

    name: Optional[str]
    coefficients: Mapping[VariableName, float]
    lower_bound: float
    upper_bound: float

    def __post_init__(self):
        object.__setattr__(self, "coefficients", _freeze(self.coefficients))

    @property
    def is_equality(self) -> bool:
        return self.lower_bound == self.upper_bound


@dataclass(frozen=True)
class CompiledObjective:
    """Linear objective ``sum(c_i * x_i) + offset`` with its direction."""

    coefficients: Mapping[VariableName, float]
    goal: Goal
    offset: float = 0.0

    def __post_init__(self):
        object.__setattr__(self, "coefficients", _freeze(self.coefficients))


@dataclass(frozen=True)
class CompiledModel:
    """Container for everything a backend needs to solve a model.

    Attributes:
        variables: Declared variables in registration order
        constraints: Normalized constraints in registration order
        objective: Normalized objective
        solver: Solver chosen on the builder
        tolerance: Violation tolerance used when verifying a solution
        solver_args: Extra keyword arguments for the backend solver call

    Example:
        >>> model = builder.build()
        >>> model.variable_names
        (VariableName(value='x'), VariableName(value='y'))
    """

    variables: Tuple[CompiledVariable, ...]
    constraints: Tuple[CompiledConstraint, ...]
    objective: CompiledObjective
    solver: SolverType
    tolerance: float = 1e-7
    solver_args: Mapping = field(default_factory=dict)
    verbose: bool = False

    def __post_init__(self):
        object.__setattr__(self, "variables", tuple(self.variables))
        object.__setattr__(self, "constraints", tuple(self.constraints))
        object.__setattr__(self, "solver_args", MappingProxyType(dict(self.solver_args)))

    @property
    def variable_names(self) -> Tuple[VariableName, ...]:
        return tuple(variable.name for variable in self.variables)

    def variable(self, name) -> CompiledVariable:
        """Look up a compiled variable by name (``str`` or ``VariableName``)."""
        for variable in self.variables:
            if str(variable.name) == str(name):
                return variable
        raise KeyError(f"No variable named '{name}' in the compiled model")

    @property
    def is_mixed_integer(self) -> bool:
        return any(v.kind is not VariableKind.NUMERIC for v in self.variables)

    def named_constraints(self) -> Dict[str, CompiledConstraint]:
        return {c.name: c for c in self.constraints if c.name is not None}
