from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Optional


class SolverType(Enum):
    """Backend solvers a compiled model can be handed to.

    Values are the solver names understood by CVXPY. Linear-only solvers reject
    models that declare integer or boolean variables.

    Example:
        >>> builder = ModelBuilder()
        >>> builder.solver(SolverType.SCIP)
    """

    # Linear programming
    GLOP = "GLOP"
    PDLP = "PDLP"
    CLARABEL = "CLARABEL"
    GLPK = "GLPK"

    # Mixed integer programming
    SCIP = "SCIP"
    CBC = "CBC"
    GLPK_MI = "GLPK_MI"
    HIGHS = "HIGHS"
    SCIPY = "SCIPY"

    # Commercial
    GUROBI = "GUROBI"
    CPLEX = "CPLEX"
    XPRESS = "XPRESS"
    MOSEK = "MOSEK"

    @property
    def supports_integers(self) -> bool:
        """Whether the solver accepts integer and boolean variables."""
        return self not in (SolverType.GLOP, SolverType.PDLP, SolverType.CLARABEL, SolverType.GLPK)


@dataclass
class SolverConfig:
    def __init__(
        self,
        solver: Optional[SolverType] = None,
        tolerance: float = 1e-7,
        solver_args: Optional[Dict] = None,
        verbose: bool = False,
    ):
        """
        Configuration class for backend solver settings.

        This class defines which solver the compiled model is handed to and how the
        returned assignment is checked.

        Main arguments:
        These are the arguments most commonly used day-to-day.

        Args:
            solver (SolverType, optional): The solver the backend should run. There is no default; a model
                cannot be built until one is chosen. SCIP is a good choice for mixed integer problems and
                GLOP for pure linear ones.
            tolerance (float): Maximum constraint, bound and integrality violation accepted when the solution
                is verified. Defaults to 1e-7.

        Other arguments:
        These arguments are less frequently used.

        Args:
            solver_args (Dict, optional): Extra keyword arguments forwarded to the backend solver call, such
                as time limits. Ensure they match the chosen solver. Defaults to an empty dictionary.
            verbose (bool): Whether the backend solver prints its own log. Defaults to False.
        """
        self.solver = solver
        self.tolerance = tolerance
        self.solver_args = solver_args if solver_args is not None else {}
        self.verbose = verbose


@dataclass
class DevConfig:
    def __init__(self, printing: bool = False):
        """
        Configuration class for development settings.

        Args:
            printing (bool): Whether to print model summaries and solution tables when a model is
                solved through ``optimize``. Defaults to False.
        """
        self.printing = printing


@dataclass
class Config:
    solver: SolverConfig = field(default_factory=SolverConfig)
    dev: DevConfig = field(default_factory=DevConfig)
