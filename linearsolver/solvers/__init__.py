"""Backend adapters that hand compiled models to existing solver libraries.

Current Implementations:
    CVXPY Backend: Translates the compiled model into a CVXPY problem and
        solves it with the solver chosen on the builder (SCIP, HiGHS, GLPK,
        ...). CVXPY and the selected solver do all numeric work.

Custom backends implement the ``Backend`` interface from ``solvers.base``.
"""

from .base import Backend
from .cvxpy import CvxpyBackend

__all__ = [
    "Backend",
    "CvxpyBackend",
]
