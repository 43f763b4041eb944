# Constraints and objectives
from .constraint import Constraint, Relationship

# Core base classes and arithmetic helpers
from .expr import (
    Expression,
    LinearExpression,
    Parameter,
    VariableName,
    average_expressions,
    sum_expressions,
    to_expression,
)
from .objective import Goal, Objective

# Variable
from .variable import Variable, VariableKind

__all__ = [
    # Core base classes and arithmetic helpers
    "Expression",
    "LinearExpression",
    "Parameter",
    "VariableName",
    "to_expression",
    "sum_expressions",
    "average_expressions",
    # Variable
    "Variable",
    "VariableKind",
    # Constraints and objectives
    "Constraint",
    "Relationship",
    "Objective",
    "Goal",
]
