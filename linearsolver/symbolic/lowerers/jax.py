"""Lowering of compiled models to dense, jitted JAX evaluation functions.

The CVXPY backend solves a model; this lowering checks the answer. Each
compiled constraint and the objective are lowered by ``JaxLowerer`` into a
function of the assignment vector ``x`` (ordered like ``model.variables``),
and ``lower_to_jax`` jits them together with the dense arrays of the model.
"""

from dataclasses import dataclass
from typing import Any, Callable, Dict, Mapping, Sequence, Tuple, Type

import jax
import jax.numpy as jnp
import numpy as np

from linearsolver.compiled import CompiledConstraint, CompiledModel, CompiledObjective
from linearsolver.symbolic.expr import LinearExpression, VariableKind, VariableName

# Verification compares against tolerances around 1e-7, below float32 resolution
jax.config.update("jax_enable_x64", True)

_JAX_VISITORS: Dict[Type, Callable] = {}


def visitor(node_cls: Type):
    def register(fn: Callable[[Any, Any], Callable]):
        _JAX_VISITORS[node_cls] = fn
        return fn

    return register


def dispatch(lowerer: Any, node: Any):
    fn = _JAX_VISITORS.get(type(node))
    if fn is None:
        raise NotImplementedError(
            f"{lowerer.__class__.__name__!r} has no visitor for {type(node).__name__}"
        )
    return fn(lowerer, node)


def _range_violation(value, low, high):
    """Amount by which ``value`` leaves ``[low, high]``; zero inside."""
    return jnp.maximum(jnp.maximum(low - value, value - high), 0.0)


class JaxLowerer:
    """Lowers linear expressions and compiled model parts to functions of ``x``.

    Args:
        variable_order: Variable names in the order of the entries of ``x``
    """

    def __init__(self, variable_order: Sequence[VariableName]):
        self.variable_order = tuple(variable_order)
        self._index = {str(name): i for i, name in enumerate(self.variable_order)}

    def lower(self, node) -> Callable:
        return dispatch(self, node)

    def index(self, name) -> int:
        try:
            return self._index[str(name)]
        except KeyError:
            raise ValueError(f"Variable '{name}' is not part of the variable order.") from None

    def row(self, coefficients: Mapping) -> np.ndarray:
        """Dense coefficient row for a sparse coefficient map."""
        row = np.zeros(len(self.variable_order))
        for name, coefficient in coefficients.items():
            row[self.index(name)] += coefficient
        return row

    @visitor(LinearExpression)
    def visit_linear_expression(self, node: LinearExpression):
        row = jnp.asarray(self.row(node.coefficients))
        constant = node.constant
        return lambda x: row @ x + constant

    @visitor(CompiledConstraint)
    def visit_compiled_constraint(self, node: CompiledConstraint):
        activity = self.lower(LinearExpression(node.coefficients))
        lower, upper = node.lower_bound, node.upper_bound
        return lambda x: _range_violation(activity(x), lower, upper)

    @visitor(CompiledObjective)
    def visit_compiled_objective(self, node: CompiledObjective):
        return self.lower(LinearExpression(node.coefficients, node.offset))


@dataclass
class LoweredJaxModel:
    """Dense arrays and jitted evaluation functions for one compiled model.

    Attributes:
        variable_order: Names in the order of the entries of ``x``
        A: Constraint matrix of shape ``(n_constraints, n_variables)``
        lower: Lower activity bounds (``-inf`` where absent)
        upper: Upper activity bounds (``inf`` where absent)
        c: Objective coefficients
        offset: Objective constant
        var_lower: Variable lower bounds
        var_upper: Variable upper bounds
        integer_mask: 1.0 for integer and boolean variables
        activity: ``x -> A @ x``
        objective: ``x -> c @ x + offset``
        constraint_violation: ``x -> max(lower - A x, A x - upper, 0)`` per row
        bound_violation: Same per variable for its bounds
        integrality_violation: Distance to the nearest integer for integer and
            boolean variables, zero for numeric ones
    """

    variable_order: Tuple[VariableName, ...]
    A: jnp.ndarray
    lower: jnp.ndarray
    upper: jnp.ndarray
    c: jnp.ndarray
    offset: float
    var_lower: jnp.ndarray
    var_upper: jnp.ndarray
    integer_mask: jnp.ndarray
    activity: Callable
    objective: Callable
    constraint_violation: Callable
    bound_violation: Callable
    integrality_violation: Callable

    def vector(self, values: Mapping) -> jnp.ndarray:
        """Assignment vector for a mapping from variable name to value."""
        lookup = {str(name): value for name, value in values.items()}
        missing = [str(name) for name in self.variable_order if str(name) not in lookup]
        if missing:
            raise KeyError(f"No value for variables {missing}")
        return jnp.asarray([float(lookup[str(name)]) for name in self.variable_order])


def lower_to_jax(model: CompiledModel) -> LoweredJaxModel:
    """Lower a compiled model to dense arrays and jitted evaluation functions.

    Example:
        >>> lowered = lower_to_jax(model)
        >>> x = lowered.vector(solution.values)
        >>> float(lowered.constraint_violation(x).max())
        0.0
    """
    lowerer = JaxLowerer(model.variable_names)
    n = len(lowerer.variable_order)

    rows = [lowerer.row(constraint.coefficients) for constraint in model.constraints]
    A = jnp.asarray(np.vstack(rows) if rows else np.zeros((0, n)))
    lower = jnp.asarray([constraint.lower_bound for constraint in model.constraints])
    upper = jnp.asarray([constraint.upper_bound for constraint in model.constraints])
    c = jnp.asarray(lowerer.row(model.objective.coefficients))
    offset = float(model.objective.offset)
    var_lower = jnp.asarray([variable.lower_bound for variable in model.variables])
    var_upper = jnp.asarray([variable.upper_bound for variable in model.variables])
    integer_mask = jnp.asarray(
        [0.0 if v.kind is VariableKind.NUMERIC else 1.0 for v in model.variables]
    )

    violations = [lowerer.lower(constraint) for constraint in model.constraints]
    objective = lowerer.lower(model.objective)

    def constraint_violation(x):
        if not violations:
            return jnp.zeros((0,))
        return jnp.stack([violation(x) for violation in violations])

    return LoweredJaxModel(
        variable_order=lowerer.variable_order,
        A=A,
        lower=lower,
        upper=upper,
        c=c,
        offset=offset,
        var_lower=var_lower,
        var_upper=var_upper,
        integer_mask=integer_mask,
        activity=jax.jit(lambda x: A @ x),
        objective=jax.jit(objective),
        constraint_violation=jax.jit(constraint_violation),
        bound_violation=jax.jit(lambda x: _range_violation(x, var_lower, var_upper)),
        integrality_violation=jax.jit(lambda x: jnp.abs(x - jnp.round(x)) * integer_mask),
    )
