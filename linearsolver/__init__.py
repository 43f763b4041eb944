# Core symbolic expressions - flat namespace for most common names
from linearsolver.compiled import (
    CompiledConstraint,
    CompiledModel,
    CompiledObjective,
    CompiledVariable,
)
from linearsolver.config import Config, DevConfig, SolverConfig, SolverType
from linearsolver.errors import (
    AllDimensionsCollapsedError,
    BackendTranslationError,
    DuplicateVariableNameError,
    IncompleteModelError,
    InvalidKeyError,
    LinearSolverError,
    MissingComponent,
    NoConstraintsError,
    NoObjectiveError,
    NoSolverError,
    NoVariablesError,
    ObjectiveOverwriteWarning,
    SolutionVerificationWarning,
    UnknownVariableError,
)
from linearsolver.problem import optimize
from linearsolver.solution import Solution, SolveStatus, Violations
from linearsolver.solvers import Backend, CvxpyBackend
from linearsolver.symbolic.builder import ModelBuilder
from linearsolver.symbolic.expr import (
    Constraint,
    Expression,
    Goal,
    LinearExpression,
    Objective,
    Parameter,
    Relationship,
    Variable,
    VariableKind,
    VariableName,
    average_expressions,
    sum_expressions,
    to_expression,
)
from linearsolver.symbolic.tensor import ANY, NamedTensor, Selector, cartesian_product

__all__ = [
    # Main entrypoints
    "ModelBuilder",
    "optimize",
    # Core expressions
    "Expression",
    "LinearExpression",
    "Parameter",
    "Variable",
    "VariableKind",
    "VariableName",
    "to_expression",
    "sum_expressions",
    "average_expressions",
    # Constraints and objectives
    "Constraint",
    "Relationship",
    "Objective",
    "Goal",
    # Named tensors
    "NamedTensor",
    "Selector",
    "ANY",
    "cartesian_product",
    # Compiled model
    "CompiledModel",
    "CompiledVariable",
    "CompiledConstraint",
    "CompiledObjective",
    # Configuration
    "Config",
    "SolverConfig",
    "DevConfig",
    "SolverType",
    # Backends and results
    "Backend",
    "CvxpyBackend",
    "Solution",
    "SolveStatus",
    "Violations",
    # Errors and warnings
    "LinearSolverError",
    "DuplicateVariableNameError",
    "UnknownVariableError",
    "InvalidKeyError",
    "AllDimensionsCollapsedError",
    "MissingComponent",
    "IncompleteModelError",
    "NoVariablesError",
    "NoConstraintsError",
    "NoObjectiveError",
    "NoSolverError",
    "BackendTranslationError",
    "ObjectiveOverwriteWarning",
    "SolutionVerificationWarning",
]
