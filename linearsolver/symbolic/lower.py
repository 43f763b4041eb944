"""Compilation of symbolic constraints and objectives into the normalized form.

The builder keeps constraints as pairs of expressions. Compiling one moves
everything to the left-hand side and turns the relationship into a pair of
bounds on the remaining linear activity::

    delta = left - right            # sum(c_i * x_i) + k
    bound = -k
    left == right  ->  bound <= sum(c_i * x_i) <= bound
    left >= right  ->  bound <= sum(c_i * x_i) <= inf
    left <= right  -> -inf   <= sum(c_i * x_i) <= bound

Coefficients that cancel to zero are dropped. Every referenced variable must
have been declared in the model being compiled.

Example:
    >>> compile_constraint(x + y <= 3, known)
    CompiledConstraint(name=None, coefficients={x: 1.0, y: 1.0}, lower_bound=-inf, upper_bound=3.0)
"""

from typing import Container, Dict, Optional

import numpy as np

from linearsolver.compiled import CompiledConstraint, CompiledObjective, CompiledVariable
from linearsolver.errors import UnknownVariableError
from linearsolver.symbolic.expr import (
    Constraint,
    Expression,
    Objective,
    Relationship,
    Variable,
    VariableKind,
    VariableName,
)


def _nonzero_coefficients(
    expression: Expression, known: Container[VariableName], context: str
) -> Dict[VariableName, float]:
    coefficients = {}
    for name, value in expression.coefficients.items():
        if name not in known:
            raise UnknownVariableError(str(name), context)
        if value != 0.0:
            coefficients[name] = value
    return coefficients


def compile_variable(variable: Variable) -> CompiledVariable:
    if variable.kind is VariableKind.BOOLEAN:
        return CompiledVariable(variable.name, variable.kind, 0.0, 1.0)
    return CompiledVariable(variable.name, variable.kind, variable.lower_bound, variable.upper_bound)


def compile_constraint(
    constraint: Constraint, known: Container[VariableName], name: Optional[str] = None
) -> CompiledConstraint:
    """Normalize ``constraint`` to bounds on its linear activity.

    Args:
        constraint: Constraint to compile
        known: Names declared in the model
        name: Overrides ``constraint.name`` when given

    Raises:
        UnknownVariableError: If the constraint references an undeclared variable
    """
    name = name if name is not None else constraint.name
    delta = constraint.normalized()
    context = f"constraint '{name}'" if name is not None else f"constraint {constraint}"
    coefficients = _nonzero_coefficients(delta, known, context)
    bound = -delta.constant

    if constraint.relationship is Relationship.EQ:
        lower, upper = bound, bound
    elif constraint.relationship is Relationship.GE:
        lower, upper = bound, np.inf
    else:
        lower, upper = -np.inf, bound
    return CompiledConstraint(name, coefficients, lower, upper)


def compile_objective(objective: Objective, known: Container[VariableName]) -> CompiledObjective:
    """Normalize an objective, keeping its constant as ``offset``."""
    coefficients = _nonzero_coefficients(objective.expression, known, "objective")
    return CompiledObjective(coefficients, objective.goal, objective.expression.constant)
