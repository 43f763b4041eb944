import cvxpy as cp
import numpy as np
import pytest

from linearsolver.compiled import CompiledConstraint, CompiledObjective
from linearsolver.config import SolverType
from linearsolver.symbolic.builder import ModelBuilder
from linearsolver.symbolic.expr import Goal, LinearExpression, Parameter, Variable, VariableName
from linearsolver.symbolic.lowerers.cvxpy import (
    CvxpyLowerer,
    create_cvxpy_variables,
    lower_to_cvxpy,
)


@pytest.fixture
def lowerer():
    x_cvx = cp.Variable(name="x")
    y_cvx = cp.Variable(name="y")
    x_cvx.value = np.array(2.0)
    y_cvx.value = np.array(5.0)
    return CvxpyLowerer({"x": x_cvx, "y": y_cvx})


class TestCvxpyLowerer:
    def test_variable(self, lowerer):
        result = lowerer.lower(Variable("x"))
        assert result is lowerer.variable_map["x"]

    def test_parameter(self, lowerer):
        result = lowerer.lower(Parameter("y", -3.0))
        assert isinstance(result, cp.Expression)
        assert result.value == pytest.approx(-15.0)

    def test_linear_expression(self, lowerer):
        result = lowerer.lower(LinearExpression({"x": 2.0, "y": -1.0}, 3.0))
        assert isinstance(result, cp.Expression)
        assert result.value == pytest.approx(2.0)

    def test_constant_expression(self, lowerer):
        result = lowerer.lower(LinearExpression(constant=5.0))
        assert isinstance(result, cp.Constant)
        assert result.value == 5.0

    def test_register_variable(self):
        lowerer = CvxpyLowerer()
        z_cvx = cp.Variable(name="z")
        lowerer.register_variable("z", z_cvx)
        assert lowerer.lower(Variable("z")) is z_cvx

    def test_missing_variable(self, lowerer):
        with pytest.raises(ValueError, match="Variable 'w' not found in variable_map"):
            lowerer.lower(Parameter("w", 2.0))

    def test_unregistered_node(self, lowerer):
        with pytest.raises(NotImplementedError, match="has no visitor for str"):
            lowerer.lower("x")

    def test_equality_constraint(self, lowerer):
        constraint = CompiledConstraint("balance", {VariableName("x"): 1.0, VariableName("y"): 1.0}, 7.0, 7.0)
        lowered = lowerer.lower(constraint)
        assert len(lowered) == 1
        assert isinstance(lowered[0], cp.Constraint)
        assert lowered[0].value()

    @pytest.mark.parametrize(
        "lower, upper, count, satisfied",
        [
            (-np.inf, 3.0, 1, False),
            (3.0, np.inf, 1, True),
            (0.0, 10.0, 2, True),
        ],
    )
    def test_inequality_constraints(self, lowerer, lower, upper, count, satisfied):
        constraint = CompiledConstraint(None, {VariableName("y"): 1.0}, lower, upper)
        lowered = lowerer.lower(constraint)
        assert len(lowered) == count
        assert all(c.value() for c in lowered) is satisfied

    @pytest.mark.parametrize("goal, cls", [(Goal.MIN, cp.Minimize), (Goal.MAX, cp.Maximize)])
    def test_objective(self, lowerer, goal, cls):
        objective = CompiledObjective({VariableName("x"): 3.0}, goal, offset=1.0)
        result = lowerer.lower(objective)
        assert isinstance(result, cls)
        assert result.args[0].value == pytest.approx(7.0)


class TestLowerToCvxpy:
    def build(self):
        builder = ModelBuilder()
        x = builder.num_var("x", lower_bound=0, upper_bound=4)
        n = builder.int_var("n", lower_bound=-2)
        b = builder.bool_var("b")
        builder.le(x + n, 3, name="cap")
        builder.eq(x - b, 1)
        builder.maximize(x + 2 * n + 5)
        builder.solver(SolverType.SCIPY)
        return builder.build()

    def test_variables(self):
        variable_map, bounds = create_cvxpy_variables(self.build())
        assert set(variable_map) == {"x", "n", "b"}
        assert variable_map["n"].attributes["integer"]
        assert variable_map["b"].attributes["boolean"]
        assert not variable_map["x"].attributes["integer"]
        # x has two finite bounds, n one, booleans none
        assert len(bounds) == 3

    def test_constraint_groups_follow_model_order(self):
        lowered = lower_to_cvxpy(self.build())
        assert [name for name, _ in lowered.constraint_groups] == ["cap", None]
        assert len(lowered.constraints) == 3 + 2

    def test_problem_is_mixed_integer_and_dcp(self):
        problem = lower_to_cvxpy(self.build()).problem()
        assert isinstance(problem, cp.Problem)
        assert problem.is_dcp()
        assert problem.is_mixed_integer()
        assert isinstance(problem.objective, cp.Maximize)
