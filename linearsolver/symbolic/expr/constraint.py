from enum import Enum
from typing import Optional

from .expr import Expression, to_expression


class Relationship(Enum):
    """Relational operator of a constraint."""

    LE = "<="
    EQ = "=="
    GE = ">="


class Constraint:
    """Relation between two linear expressions: ``left {<=, ==, >=} right``.

    A constraint is only a pair of expressions plus a relationship; it is not
    evaluated until the model is compiled, where it is normalized to
    ``lower <= (left - right) - constant <= upper``. Constraints built with the
    comparison operators (``x + y <= 3``) are not part of any model until they
    are registered with ``ModelBuilder.add_constraint``.

    Attributes:
        left: Left-hand side expression
        right: Right-hand side expression
        relationship: LE, EQ or GE
        name: Optional name, used in error messages and solver output

    Example:
        >>> c = x + y <= 3               # Constraint(x + y, 3, LE)
        >>> c = Constraint(5 * y, 2 * (x + 3), Relationship.EQ, name="balance")
    """

    def __init__(
        self,
        left,
        right,
        relationship: Relationship,
        name: Optional[str] = None,
    ):
        self.left: Expression = to_expression(left)
        self.right: Expression = to_expression(right)
        self.relationship = Relationship(relationship)
        self.name = name

    def named(self, name: Optional[str]) -> "Constraint":
        """Return a copy of this constraint carrying ``name``."""
        return Constraint(self.left, self.right, self.relationship, name=name)

    def normalized(self) -> Expression:
        """The single expression ``left - right`` the constraint compiles from."""
        return self.left - self.right

    def __bool__(self):
        # `x == y` builds a Constraint; it must not pass as a bool
        raise TypeError(
            f"The truth value of constraint {self!r} is undefined. "
            "Register it with ModelBuilder.add_constraint or compare variable names instead."
        )

    def __repr__(self):
        body = f"{self.left} {self.relationship.value} {self.right}"
        if self.name is not None:
            return f"Constraint({self.name!r}: {body})"
        return f"Constraint({body})"
