"""Exceptions and warnings raised while building, compiling and solving models.

Every error is raised synchronously at the offending call and leaves the
builder or tensor unchanged. Messages name the offending variable, key or
dimension so that the model definition can be fixed without inspecting
internals.

Division of an expression by zero raises the builtin ``ZeroDivisionError``.
"""

from enum import Enum


class LinearSolverError(Exception):
    """Base class for all errors raised by linearsolver."""


class DuplicateVariableNameError(LinearSolverError, ValueError):
    """A variable with the same name is already registered in the model."""

    def __init__(self, name):
        self.name = name
        super().__init__(f"Variable with name '{name}' already exists")


class UnknownVariableError(LinearSolverError, KeyError):
    """An expression references a variable that the model never declared."""

    def __init__(self, name, context: str = ""):
        self.name = name
        where = f" in {context}" if context else ""
        super().__init__(f"Unknown variable '{name}'{where}")

    def __str__(self):
        return self.args[0]


class InvalidKeyError(LinearSolverError, LookupError):
    """A tensor key is outside its dimension's domain or the key count is wrong."""

    def __init__(self, message: str, key=None, dimension=None):
        self.key = key
        self.dimension = dimension
        super().__init__(message)


class AllDimensionsCollapsedError(InvalidKeyError):
    """A sub-tensor selection collapsed every dimension; use ``get`` instead."""


class MissingComponent(Enum):
    """Which part of a model is missing when ``build()`` is called."""

    NO_VARIABLES = "At least one variable must be provided"
    NO_CONSTRAINTS = "At least one constraint must be provided"
    NO_OBJECTIVE = "Objective must be provided"
    NO_SOLVER = "A solver must be chosen"


class IncompleteModelError(LinearSolverError, RuntimeError):
    """The model cannot be compiled until the missing component is added."""

    reason: MissingComponent = None

    def __init__(self, message: str = None):
        super().__init__(message or self.reason.value)


class NoVariablesError(IncompleteModelError):
    reason = MissingComponent.NO_VARIABLES


class NoConstraintsError(IncompleteModelError):
    reason = MissingComponent.NO_CONSTRAINTS


class NoObjectiveError(IncompleteModelError):
    reason = MissingComponent.NO_OBJECTIVE


class NoSolverError(IncompleteModelError):
    reason = MissingComponent.NO_SOLVER


class BackendTranslationError(LinearSolverError, RuntimeError):
    """The backend adapter failed to translate or solve a compiled model."""


class ObjectiveOverwriteWarning(UserWarning):
    """An objective was set while another one was already active."""


class SolutionVerificationWarning(UserWarning):
    """A returned assignment violates the model beyond the configured tolerance."""
