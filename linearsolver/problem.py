"""Solve a model end to end: build, solve, verify.

Example:
    >>> builder = ModelBuilder()
    >>> x = builder.num_var("x", lower_bound=0, upper_bound=4)
    >>> builder.le(x, 3)
    >>> builder.maximize(x)
    >>> builder.solver(SolverType.SCIPY)
    >>> optimize(builder).objective_value
    3.0
"""

from typing import Optional

from linearsolver import io
from linearsolver.solution import Solution
from linearsolver.solvers.base import Backend
from linearsolver.symbolic.builder import ModelBuilder


def optimize(builder: ModelBuilder, backend: Optional[Backend] = None) -> Solution:
    """Compile ``builder``, solve the model and verify the returned assignment.

    Args:
        builder: Builder holding variables, constraints, objective and solver
        backend: Backend adapter. Defaults to ``CvxpyBackend``.

    Returns:
        Solution: Result of the backend. When it carries an assignment, it has
        been checked against the model with the builder's tolerance and a
        ``SolutionVerificationWarning`` was emitted for any violation.

    Raises:
        IncompleteModelError: If the model is missing variables, constraints,
            an objective or a solver
        UnknownVariableError: If the model references undeclared variables
        BackendTranslationError: If the backend fails
    """
    model = builder.build()
    if backend is None:
        from linearsolver.solvers.cvxpy import CvxpyBackend

        backend = CvxpyBackend()

    printing = builder.settings.dev.printing
    if printing:
        io.model_summary(model)

    solution = backend.solve(model)
    if solution.model is None:
        solution.model = model
    if solution.status.has_solution:
        solution.verify(model.tolerance)

    if printing:
        io.solution_table(solution)
    return solution
