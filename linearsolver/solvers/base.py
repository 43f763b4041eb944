"""Base class for backend adapters.

A backend takes an immutable ``CompiledModel`` and returns a ``Solution``. It
translates the normalized model into the vocabulary of an existing solver
library and never implements an optimization algorithm itself.

Example:
    Implementing a custom backend::

        class MyBackend(Backend):
            def solve(self, model: CompiledModel) -> Solution:
                problem = translate(model)
                result = problem.run(solver=model.solver.value)
                return Solution(status=map_status(result), values=result.values, model=model)
"""

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from linearsolver.compiled import CompiledModel
    from linearsolver.solution import Solution


class Backend(ABC):
    """Abstract base class for backend adapters."""

    @abstractmethod
    def solve(self, model: "CompiledModel") -> "Solution":
        """Solve a compiled model.

        Args:
            model: Model produced by ``ModelBuilder.build()``

        Returns:
            Solution: Status, assignment and objective value

        Raises:
            BackendTranslationError: If the model cannot be translated or the
                backend solver fails
        """
        ...
