"""Tests for the linear expression algebra.

This module tests Variable, Parameter and LinearExpression arithmetic:
- Coefficient merging for every operand combination
- Self-combination collapse and zero elimination
- Scalar handling (reflected operators, numpy scalars, non-finite values)
- Relational operators building constraints
- Summation helpers, evaluation and text rendering
"""

import numpy as np
import pytest

from linearsolver.symbolic.expr import (
    Constraint,
    LinearExpression,
    Parameter,
    Relationship,
    Variable,
    VariableName,
    average_expressions,
    sum_expressions,
    to_expression,
)


def coeffs(expr):
    return {str(name): value for name, value in expr.coefficients.items()}


@pytest.fixture
def x():
    return Variable("x")


@pytest.fixture
def y():
    return Variable("y")


# =============================================================================
# Scaling and Negation
# =============================================================================


def test_scaling_a_variable_gives_parameter(x):
    for expr in (x * 3, 3 * x):
        assert isinstance(expr, Parameter)
        assert expr.name == VariableName("x")
        assert expr.coefficient == 3.0


def test_scaling_a_parameter_stays_parameter(x):
    expr = (x * 3) * 2
    assert isinstance(expr, Parameter)
    assert expr.coefficient == 6.0


def test_negation(x, y):
    neg = -x
    assert isinstance(neg, Parameter)
    assert neg.coefficient == -1.0

    assert (-(2 * x)).coefficient == -2.0

    expr = -(x + 2 * y + 5)
    assert coeffs(expr) == {"x": -1.0, "y": -2.0}
    assert expr.constant == -5.0


def test_division_by_scalar(x, y):
    expr = (2 * x + 3 * y) / 2 - 4
    assert coeffs(expr) == {"x": 1.0, "y": 1.5}
    assert expr.constant == -4.0
    assert isinstance(x / 4, Parameter)
    assert (x / 4).coefficient == 0.25


@pytest.mark.parametrize(
    "build",
    [
        lambda x, y: x,
        lambda x, y: 3 * x,
        lambda x, y: x + y + 7,
        lambda x, y: -(x - 2 * y) + 1,
    ],
)
def test_scaling_by_zero_is_empty(x, y, build):
    expr = build(x, y) * 0
    assert isinstance(expr, LinearExpression)
    assert dict(expr.coefficients) == {}
    assert expr.constant == 0.0


def test_division_by_zero_raises(x):
    with pytest.raises(ZeroDivisionError):
        x / 0
    with pytest.raises(ZeroDivisionError):
        (x + 1) / 0.0


# =============================================================================
# Addition and Subtraction
# =============================================================================


def test_self_combination(x):
    double = x + x
    assert isinstance(double, Parameter)
    assert double.coefficient == 2.0

    empty = x - x
    assert isinstance(empty, LinearExpression)
    assert dict(empty.coefficients) == {}
    assert empty.constant == 0.0


def test_same_name_variable_and_parameter(x):
    assert (x + 3 * x).coefficient == 4.0
    assert (x - 3 * x).coefficient == -2.0
    assert (3 * x - x).coefficient == 2.0
    assert (2 * x + x).coefficient == 3.0


def test_cancelling_parameters_give_empty_expression(x):
    expr = 2 * x - 2 * x
    assert isinstance(expr, LinearExpression)
    assert dict(expr.coefficients) == {}


def test_different_names_give_linear_expression(x, y):
    expr = x + y
    assert isinstance(expr, LinearExpression)
    assert coeffs(expr) == {"x": 1.0, "y": 1.0}

    expr = 2 * x - 3 * y
    assert coeffs(expr) == {"x": 2.0, "y": -3.0}


def test_linear_expressions_merge_like_terms(x, y):
    z = Variable("z")
    a = 2 * x + y + 1
    b = x - 4 * z + 2
    total = a + b
    assert coeffs(total) == {"x": 3.0, "y": 1.0, "z": -4.0}
    assert total.constant == 3.0

    diff = a - b
    assert coeffs(diff) == {"x": 1.0, "y": 1.0, "z": 4.0}
    assert diff.constant == -1.0


@pytest.mark.parametrize(
    "left, right",
    [
        (lambda x, y: x, lambda x, y: y),
        (lambda x, y: 2 * x, lambda x, y: x + y),
        (lambda x, y: x + 2 * y - 1, lambda x, y: -x + 4),
        (lambda x, y: LinearExpression({"x": 1.5}), lambda x, y: 3 * y),
    ],
)
def test_sum_merges_coefficients(x, y, left, right):
    a, b = left(x, y), right(x, y)
    total = a + b
    for name in set(a.coefficients) | set(b.coefficients):
        expected = a.coefficients.get(name, 0.0) + b.coefficients.get(name, 0.0)
        assert total.coefficients.get(name, 0.0) == pytest.approx(expected)
    assert total.constant == pytest.approx(a.constant + b.constant)


def test_scalars_only_shift_the_constant(x):
    expr = 2 * x + 3
    assert coeffs(expr) == {"x": 2.0}
    assert expr.constant == 3.0

    expr = 2 + x
    assert coeffs(expr) == {"x": 1.0}
    assert expr.constant == 2.0

    expr = 5 - x
    assert coeffs(expr) == {"x": -1.0}
    assert expr.constant == 5.0

    expr = x - 1.5
    assert expr.constant == -1.5


def test_numpy_scalars_are_accepted(x):
    expr = np.float64(2.0) * x
    assert isinstance(expr, Parameter)
    assert expr.coefficient == 2.0

    expr = x + np.int64(3)
    assert expr.constant == 3.0


@pytest.mark.parametrize("value", [float("nan"), float("inf"), -np.inf])
def test_non_finite_scalars_raise(x, value):
    with pytest.raises(ValueError, match="finite"):
        x * value
    with pytest.raises(ValueError, match="finite"):
        x + value


def test_overflowing_coefficients_raise(x, y):
    with pytest.raises(ValueError, match="finite"):
        (x * 1e308 + y) * 10
    with pytest.raises(ValueError, match="finite"):
        x * 1e308 * 10
    with pytest.raises(ValueError, match="finite"):
        sum_expressions([x * 1e308, x * 1e308, y])


def test_underflowing_coefficients_collapse_to_empty(x, y):
    expr = x * 1e-200 * 1e-200
    assert isinstance(expr, LinearExpression)
    assert coeffs(expr) == {}
    assert isinstance(x * 1e-320 / 1e10, LinearExpression)
    assert isinstance((2 * y) / 1e308 / 1e308, LinearExpression)


def test_non_linear_products_raise(x, y):
    with pytest.raises(TypeError):
        x * y
    with pytest.raises(TypeError):
        (x + 1) * (y + 1)
    with pytest.raises(TypeError):
        x / y
    with pytest.raises(TypeError):
        x * True


def test_builtin_sum_works(x, y):
    expr = sum([x, 2 * y, 3, x])
    assert coeffs(expr) == {"x": 2.0, "y": 2.0}
    assert expr.constant == 3.0


# =============================================================================
# Summation helpers
# =============================================================================


def test_sum_expressions(x, y):
    expr = sum_expressions([x, 2 * x, y, 1, LinearExpression({"y": -1.0}, 2.0)])
    assert coeffs(expr) == {"x": 3.0, "y": 0.0}
    assert expr.constant == 3.0


def test_sum_expressions_of_nothing_is_empty():
    expr = sum_expressions([])
    assert dict(expr.coefficients) == {}
    assert expr.constant == 0.0


def test_average_expressions(x, y):
    expr = average_expressions([x, y, 4])
    assert coeffs(expr) == pytest.approx({"x": 1 / 3, "y": 1 / 3})
    assert expr.constant == pytest.approx(4 / 3)

    with pytest.raises(ValueError, match="empty"):
        average_expressions([])


# =============================================================================
# Relations
# =============================================================================


def test_comparison_operators_build_constraints(x, y):
    le = x + y <= 3
    assert isinstance(le, Constraint)
    assert le.relationship is Relationship.LE
    assert le.right.constant == 3.0
    assert le.name is None

    ge = x >= y
    assert ge.relationship is Relationship.GE

    eq = 2 * x == y + 1
    assert eq.relationship is Relationship.EQ


def test_reflected_comparison_swaps_direction(x):
    c = 3 <= x
    assert isinstance(c, Constraint)
    assert c.relationship is Relationship.GE
    assert c.left is x


def test_method_relations(x, y):
    assert x.le(4).relationship is Relationship.LE
    assert x.ge(y).relationship is Relationship.GE
    assert x.eq(0).relationship is Relationship.EQ


def test_constraints_have_no_truth_value(x, y):
    with pytest.raises(TypeError, match="truth value"):
        bool(x == y)
    with pytest.raises(TypeError, match="truth value"):
        y in [x]
    with pytest.raises(TypeError, match="truth value"):
        if x + 1 <= y:
            pass
    # identity still short-circuits container membership
    assert x in [x]


def test_expressions_stay_hashable(x, y):
    assert x != y
    assert not (x != x)
    assert len({x, y, x}) == 2
    assert {x: 1}[x] == 1


# =============================================================================
# Evaluation and rendering
# =============================================================================


def test_evaluate(x, y):
    expr = 2 * x + y - 3
    assert expr.evaluate({"x": 1, "y": 2}) == 1.0
    assert expr.evaluate({VariableName("x"): 0.5, VariableName("y"): 0}) == -2.0

    with pytest.raises(KeyError, match="y"):
        expr.evaluate({"x": 1})


def test_variables_in_insertion_order(x, y):
    assert (y + 2 * x).variables() == (VariableName("y"), VariableName("x"))


@pytest.mark.parametrize(
    "build, text",
    [
        (lambda x, y: 2 * x + y - 3, "2*x + y - 3"),
        (lambda x, y: -x + 0.5, "-x + 0.5"),
        (lambda x, y: x - 2.5 * y, "x - 2.5*y"),
        (lambda x, y: LinearExpression(), "0"),
        (lambda x, y: LinearExpression(constant=-4.0), "-4"),
    ],
)
def test_str(x, y, build, text):
    assert str(build(x, y)) == text


def test_reprs(x):
    assert repr(x) == "Var('x')"
    assert repr(2 * x) == "Param('x', 2.0)"
    assert repr(x + 1) == "LinExpr(x + 1)"


# =============================================================================
# Construction
# =============================================================================


def test_linear_expression_is_read_only():
    expr = LinearExpression({"x": 1.0})
    with pytest.raises(TypeError):
        expr.coefficients["x"] = 2.0


def test_linear_expression_copies_its_input():
    source = {"x": 1.0}
    expr = LinearExpression(source)
    source["x"] = 5.0
    assert expr.coefficients[VariableName("x")] == 1.0


def test_to_expression():
    x = Variable("x")
    assert to_expression(x) is x
    assert to_expression(4).constant == 4.0
    with pytest.raises(TypeError):
        to_expression("x")


def test_parameter_rejects_non_numbers():
    with pytest.raises(TypeError):
        Parameter("x", "2")
    with pytest.raises(ValueError):
        Parameter("x", float("nan"))


@pytest.mark.parametrize("value", [float("nan"), float("inf"), -np.inf])
def test_linear_expression_rejects_non_finite_coefficients(value):
    with pytest.raises(ValueError, match="finite"):
        LinearExpression({"x": 1.0, "y": value})


def test_linear_expression_rejects_non_numbers():
    with pytest.raises(TypeError, match="'y'"):
        LinearExpression({"x": 1.0, "y": "2"})


def test_variable_name():
    assert VariableName("x") == VariableName("x")
    assert hash(VariableName("x")) == hash(VariableName("x"))
    assert str(VariableName("flow_s_a")) == "flow_s_a"
    with pytest.raises(ValueError):
        VariableName("")
