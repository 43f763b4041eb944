"""Results returned by a backend for a compiled model."""

import warnings
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Optional, Union

import numpy as np

from linearsolver.compiled import CompiledModel
from linearsolver.errors import SolutionVerificationWarning
from linearsolver.symbolic.expr import Expression, Parameter, Variable, VariableName, to_expression


class SolveStatus(Enum):
    """Outcome of a solve, independent of the backend's own status strings."""

    OPTIMAL = "optimal"
    FEASIBLE = "feasible"
    INFEASIBLE = "infeasible"
    UNBOUNDED = "unbounded"
    ABNORMAL = "abnormal"
    NOT_SOLVED = "not_solved"

    @property
    def has_solution(self) -> bool:
        return self in (SolveStatus.OPTIMAL, SolveStatus.FEASIBLE)


@dataclass
class Violations:
    """Entries of an assignment that violate the model by more than ``tolerance``.

    Attributes:
        constraints: Violation per constraint label (its name, or ``#index``)
        bounds: Bound violation per variable name
        integrality: Distance to the nearest integer per integer/boolean variable
        max_violation: Largest violation found, including entries within tolerance
        tolerance: Tolerance the report was computed with
    """

    constraints: Dict[str, float] = field(default_factory=dict)
    bounds: Dict[str, float] = field(default_factory=dict)
    integrality: Dict[str, float] = field(default_factory=dict)
    max_violation: float = 0.0
    tolerance: float = 0.0

    @property
    def ok(self) -> bool:
        return not (self.constraints or self.bounds or self.integrality)

    def __str__(self):
        if self.ok:
            return f"No violations beyond tolerance {self.tolerance:g}"
        parts = []
        for title, entries in (
            ("constraints", self.constraints),
            ("bounds", self.bounds),
            ("integrality", self.integrality),
        ):
            if entries:
                listed = ", ".join(f"{label}={value:.3g}" for label, value in entries.items())
                parts.append(f"{title}: {listed}")
        return f"Violations beyond tolerance {self.tolerance:g}: " + "; ".join(parts)


@dataclass
class Solution:
    """Assignment and status returned by a backend.

    Attributes:
        status: Backend-independent solve status
        objective_value: Objective value including its constant, or None
            without a solution
        values: Value per variable name (empty without a solution)
        dual_values: Dual value per named constraint, when the backend reports
            them (linear models only)
        model: The compiled model that was solved

    Example:
        >>> solution = optimize(builder)
        >>> solution[x], solution.value(x + 2 * y)
    """

    status: SolveStatus
    objective_value: Optional[float] = None
    values: Dict[str, float] = field(default_factory=dict)
    dual_values: Dict[str, float] = field(default_factory=dict)
    model: Optional[CompiledModel] = None

    @property
    def optimal(self) -> bool:
        return self.status is SolveStatus.OPTIMAL

    def __getitem__(self, key: Union[Expression, VariableName, str]) -> float:
        if isinstance(key, Variable) or (isinstance(key, Parameter) and key.coefficient == 1.0):
            key = key.name
        elif isinstance(key, Expression):
            raise TypeError(f"Index a solution with a variable, use value() for {key!r}")
        try:
            return self.values[str(key)]
        except KeyError:
            raise KeyError(f"No value for variable '{key}' ({self.status.value})") from None

    def value(self, expression) -> float:
        """Evaluate an expression (or scalar) at the returned assignment."""
        return to_expression(expression).evaluate(self.values)

    def verify(self, tolerance: Optional[float] = None) -> Violations:
        """Check the assignment against the model's constraints, bounds and integrality.

        Args:
            tolerance: Largest accepted violation. Defaults to the model tolerance.

        Returns:
            Violations: Entries beyond ``tolerance``. Empty when there is no
            assignment to check.

        Warns:
            SolutionVerificationWarning: If any entry exceeds ``tolerance``
        """
        if self.model is None:
            raise ValueError("Solution has no compiled model to verify against")
        tolerance = self.model.tolerance if tolerance is None else float(tolerance)
        if not self.status.has_solution:
            return Violations(tolerance=tolerance)

        from linearsolver.symbolic.lowerers.jax import lower_to_jax

        lowered = lower_to_jax(self.model)
        x = lowered.vector(self.values)
        constraint_violation = np.asarray(lowered.constraint_violation(x))
        bound_violation = np.asarray(lowered.bound_violation(x))
        integrality_violation = np.asarray(lowered.integrality_violation(x))

        labels = [
            c.name if c.name is not None else f"#{i}" for i, c in enumerate(self.model.constraints)
        ]
        names = [str(name) for name in lowered.variable_order]

        report = Violations(
            constraints=_beyond(labels, constraint_violation, tolerance),
            bounds=_beyond(names, bound_violation, tolerance),
            integrality=_beyond(names, integrality_violation, tolerance),
            max_violation=float(
                max(
                    constraint_violation.max(initial=0.0),
                    bound_violation.max(initial=0.0),
                    integrality_violation.max(initial=0.0),
                )
            ),
            tolerance=tolerance,
        )
        if not report.ok:
            warnings.warn(str(report), SolutionVerificationWarning, stacklevel=2)
        return report


def _beyond(labels, violations, tolerance) -> Dict[str, float]:
    return {label: float(v) for label, v in zip(labels, violations) if v > tolerance}
