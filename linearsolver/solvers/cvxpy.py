"""CVXPY-based backend adapter.

Translates a compiled model into a CVXPY problem (see
``linearsolver.symbolic.lowerers.cvxpy``), solves it with the solver named by
``model.solver`` and reads the assignment back into a ``Solution``.
"""

from collections import Counter
from typing import Dict, List, Optional, Tuple

import cvxpy as cp
import numpy as np

from linearsolver.compiled import CompiledModel
from linearsolver.errors import BackendTranslationError
from linearsolver.solution import Solution, SolveStatus
from linearsolver.symbolic.lowerers.cvxpy import LoweredCvxpyModel, lower_to_cvxpy

from .base import Backend

_STATUS_MAP = {
    "optimal": SolveStatus.OPTIMAL,
    "optimal_inaccurate": SolveStatus.FEASIBLE,
    "user_limit": SolveStatus.FEASIBLE,
    "infeasible": SolveStatus.INFEASIBLE,
    "infeasible_inaccurate": SolveStatus.INFEASIBLE,
    "unbounded": SolveStatus.UNBOUNDED,
    "unbounded_inaccurate": SolveStatus.UNBOUNDED,
    "infeasible_or_unbounded": SolveStatus.INFEASIBLE,
    "solver_error": SolveStatus.ABNORMAL,
}


def map_status(status: Optional[str]) -> SolveStatus:
    """Map a CVXPY status string to a ``SolveStatus``."""
    if status is None:
        return SolveStatus.NOT_SOLVED
    return _STATUS_MAP.get(status, SolveStatus.ABNORMAL)


class CvxpyBackend(Backend):
    """Backend adapter solving compiled models through CVXPY.

    Example:
        >>> solution = CvxpyBackend().solve(builder.build())
        >>> solution.status
        <SolveStatus.OPTIMAL: 'optimal'>

    Attributes:
        problem: The CVXPY problem of the last ``solve`` call
    """

    def __init__(self):
        self._problem: cp.Problem = None

    @property
    def problem(self) -> cp.Problem:
        return self._problem

    def solve(self, model: CompiledModel) -> Solution:
        if model.is_mixed_integer and not model.solver.supports_integers:
            raise BackendTranslationError(
                f"Solver {model.solver.value} does not support integer or boolean variables"
            )

        try:
            lowered = lower_to_cvxpy(model)
            self._problem = lowered.problem()
            self._problem.solve(
                solver=model.solver.value, verbose=model.verbose, **dict(model.solver_args)
            )
        except (cp.error.SolverError, cp.error.DCPError) as e:
            raise BackendTranslationError(
                f"CVXPY failed to solve the model with {model.solver.value}: {e}"
            ) from e

        status = map_status(self._problem.status)
        if not status.has_solution:
            return Solution(status=status, model=model)

        values, complete = _read_values(lowered)
        if not complete:
            return Solution(status=SolveStatus.ABNORMAL, model=model)
        return Solution(
            status=status,
            objective_value=float(self._problem.value),
            values=values,
            dual_values=_read_duals(lowered),
            model=model,
        )


def _read_values(lowered: LoweredCvxpyModel) -> Tuple[Dict[str, float], bool]:
    values = {}
    for name, variable in lowered.variables.items():
        if variable.value is None:
            return {}, False
        values[name] = float(np.asarray(variable.value))
    return values, True


def _read_duals(lowered: LoweredCvxpyModel) -> Dict[str, float]:
    # Constraints sharing a name (e.g. from one named block) are reported as name[i]
    counts = Counter(name for name, _ in lowered.constraint_groups if name is not None)
    seen: Counter = Counter()
    duals = {}
    for name, group in lowered.constraint_groups:
        if name is None:
            continue
        label = name
        if counts[name] > 1:
            label = f"{name}[{seen[name]}]"
            seen[name] += 1
        dual = _group_dual(group)
        if dual is not None:
            duals[label] = dual
    return duals


def _group_dual(group: List[cp.Constraint]) -> Optional[float]:
    total = 0.0
    for constraint in group:
        if constraint.dual_value is None:
            return None
        total += float(np.asarray(constraint.dual_value))
    return total
