from enum import Enum

from .expr import Expression, to_expression


class Goal(Enum):
    """Optimization direction of an objective."""

    MIN = "min"
    MAX = "max"


class Objective:
    """Expression to optimize together with its direction.

    Example:
        >>> Objective(3 * x1 + 2 * x2, Goal.MIN)   # minimize 3*x1 + 2*x2
    """

    def __init__(self, expression, goal: Goal):
        self.expression: Expression = to_expression(expression)
        self.goal = Goal(goal)

    def __repr__(self):
        return f"Objective({self.goal.value} {self.expression})"
