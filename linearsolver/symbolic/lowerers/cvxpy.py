from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Tuple, Type

import cvxpy as cp
import numpy as np

from linearsolver.compiled import CompiledConstraint, CompiledModel, CompiledObjective
from linearsolver.symbolic.expr import Goal, LinearExpression, Parameter, Variable, VariableKind

_CVXPY_VISITORS: Dict[Type, Callable] = {}


def visitor(node_cls: Type):
    def register(fn: Callable[[Any, Any], Any]):
        _CVXPY_VISITORS[node_cls] = fn
        return fn

    return register


def dispatch(lowerer: Any, node: Any):
    fn = _CVXPY_VISITORS.get(type(node))
    if fn is None:
        raise NotImplementedError(
            f"{lowerer.__class__.__name__!r} has no visitor for {type(node).__name__}"
        )
    return fn(lowerer, node)


@dataclass
class LoweredCvxpyModel:
    """CVXPY objects for one compiled model.

    Attributes:
        variables: Scalar ``cp.Variable`` per model variable, keyed by name
        constraints: All CVXPY constraints, bound constraints first
        constraint_groups: ``(name, cvxpy constraints)`` per compiled constraint,
            in model order, used to read back dual values
        objective: ``cp.Minimize`` or ``cp.Maximize``
    """

    variables: Dict[str, cp.Variable] = field(default_factory=dict)
    constraints: List[cp.Constraint] = field(default_factory=list)
    constraint_groups: List[Tuple[Optional[str], List[cp.Constraint]]] = field(default_factory=list)
    objective: Any = None

    def problem(self) -> cp.Problem:
        return cp.Problem(self.objective, self.constraints)


def create_cvxpy_variables(model: CompiledModel) -> Tuple[Dict[str, cp.Variable], List[cp.Constraint]]:
    """Create one scalar CVXPY variable per model variable plus its finite bounds.

    Returns:
        Tuple of the variable map (name to ``cp.Variable``) and the list of
        bound constraints. Boolean variables carry no explicit bounds since
        ``boolean=True`` already restricts them to ``{0, 1}``.
    """
    variable_map = {}
    bounds = []
    for variable in model.variables:
        name = str(variable.name)
        if variable.kind is VariableKind.BOOLEAN:
            variable_map[name] = cp.Variable(name=name, boolean=True)
            continue
        cvx_var = cp.Variable(name=name, integer=variable.kind is VariableKind.INTEGER)
        variable_map[name] = cvx_var
        if np.isfinite(variable.lower_bound):
            bounds.append(cvx_var >= variable.lower_bound)
        if np.isfinite(variable.upper_bound):
            bounds.append(cvx_var <= variable.upper_bound)
    return variable_map, bounds


class CvxpyLowerer:
    """
    Lowers linear expressions and compiled model parts to CVXPY objects.

    CVXPY variables must be created externally (see ``create_cvxpy_variables``)
    and passed in during initialization. Expressions are lowered to affine CVXPY
    expressions, compiled constraints to lists of CVXPY constraints and the
    compiled objective to ``cp.Minimize`` / ``cp.Maximize``.
    """

    def __init__(self, variable_map: Dict[str, cp.Variable] = None):
        """
        Initialize the CVXPY lowerer.

        Args:
            variable_map: Dictionary mapping variable names to CVXPY variables.
        """
        self.variable_map = variable_map or {}

    def lower(self, node) -> Any:
        """Lower an expression or compiled model part to CVXPY."""
        return dispatch(self, node)

    def register_variable(self, name: str, cvx_var: cp.Variable):
        """Register a CVXPY variable for use in lowering."""
        self.variable_map[name] = cvx_var

    def _lookup(self, name) -> cp.Variable:
        try:
            return self.variable_map[str(name)]
        except KeyError:
            raise ValueError(f"Variable '{name}' not found in variable_map.") from None

    def _affine(self, coefficients, constant: float = 0.0) -> cp.Expression:
        terms = [coefficient * self._lookup(name) for name, coefficient in coefficients.items()]
        if not terms:
            return cp.Constant(constant)
        result = sum(terms[1:], terms[0])
        return result + constant if constant else result

    @visitor(Variable)
    def visit_variable(self, node: Variable) -> cp.Expression:
        return self._lookup(node.name)

    @visitor(Parameter)
    def visit_parameter(self, node: Parameter) -> cp.Expression:
        return node.coefficient * self._lookup(node.name)

    @visitor(LinearExpression)
    def visit_linear_expression(self, node: LinearExpression) -> cp.Expression:
        return self._affine(node.coefficients, node.constant)

    @visitor(CompiledConstraint)
    def visit_compiled_constraint(self, node: CompiledConstraint) -> List[cp.Constraint]:
        activity = self._affine(node.coefficients)
        if node.is_equality:
            return [activity == node.lower_bound]
        lowered = []
        if np.isfinite(node.lower_bound):
            lowered.append(activity >= node.lower_bound)
        if np.isfinite(node.upper_bound):
            lowered.append(activity <= node.upper_bound)
        return lowered

    @visitor(CompiledObjective)
    def visit_compiled_objective(self, node: CompiledObjective):
        expression = self._affine(node.coefficients, node.offset)
        if node.goal is Goal.MAX:
            return cp.Maximize(expression)
        return cp.Minimize(expression)


def lower_to_cvxpy(model: CompiledModel) -> LoweredCvxpyModel:
    """Translate a compiled model into CVXPY variables, constraints and objective.

    Example:
        >>> lowered = lower_to_cvxpy(builder.build())
        >>> lowered.problem().solve(solver="SCIPY")
    """
    variable_map, bounds = create_cvxpy_variables(model)
    lowerer = CvxpyLowerer(variable_map)

    lowered = LoweredCvxpyModel(variables=variable_map, constraints=list(bounds))
    for constraint in model.constraints:
        group = lowerer.lower(constraint)
        lowered.constraint_groups.append((constraint.name, group))
        lowered.constraints.extend(group)
    lowered.objective = lowerer.lower(model.objective)
    return lowered
