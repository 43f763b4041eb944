import numpy as np
import pytest

from linearsolver.symbolic.expr import Parameter, Variable, VariableKind, VariableName


def test_numeric_variable_defaults_to_unbounded():
    x = Variable("x")
    assert x.kind is VariableKind.NUMERIC
    assert x.lower_bound == -np.inf
    assert x.upper_bound == np.inf
    assert x.name == VariableName("x")
    assert dict(x.coefficients) == {VariableName("x"): 1.0}
    assert x.constant == 0.0


def test_integer_variable_bounds():
    x = Variable("n", VariableKind.INTEGER, lower_bound=0, upper_bound=10)
    assert x.kind is VariableKind.INTEGER
    assert x.lower_bound == 0.0
    assert x.upper_bound == 10.0


def test_boolean_variable_is_fixed_to_unit_interval():
    b = Variable("b", VariableKind.BOOLEAN)
    assert (b.lower_bound, b.upper_bound) == (0.0, 1.0)

    # Restating the implicit bounds is allowed
    b = Variable("b", VariableKind.BOOLEAN, lower_bound=0, upper_bound=1)
    assert (b.lower_bound, b.upper_bound) == (0.0, 1.0)


@pytest.mark.parametrize("lower, upper", [(-1, None), (None, 2), (0.5, 1)])
def test_boolean_variable_rejects_other_bounds(lower, upper):
    with pytest.raises(ValueError, match="Boolean variable 'b'"):
        Variable("b", VariableKind.BOOLEAN, lower_bound=lower, upper_bound=upper)


def test_inverted_bounds_raise():
    with pytest.raises(ValueError, match="lower bound 5.0 above upper bound 1.0"):
        Variable("x", lower_bound=5, upper_bound=1)


def test_nan_bounds_raise():
    with pytest.raises(ValueError, match="NaN"):
        Variable("x", lower_bound=float("nan"))


def test_variable_is_read_only():
    x = Variable("x", lower_bound=0)
    with pytest.raises(AttributeError):
        x.lower_bound = 3
    with pytest.raises(AttributeError):
        x.name = "y"


def test_kind_accepts_enum_value():
    assert Variable("x", "integer").kind is VariableKind.INTEGER


def test_scaled_variable_references_it_by_name():
    x = Variable("x", VariableKind.INTEGER, lower_bound=0)
    scaled = 4 * x
    assert isinstance(scaled, Parameter)
    assert scaled.name == x.name


def test_repr():
    assert repr(Variable("flow_s_a")) == "Var('flow_s_a')"
