import pytest
import sympy as sp

from tfpv_analysis import ModelError, build_model, mutualism_model


def test_build_model_exposes_symbols_and_separable_split(mm):
    names = mm.symbols()
    assert [str(x) for x in mm.state_variables] == ["S", "C"]
    assert set(names) == {"S", "C", "k1", "km1", "k2", "e0"}
    assert mm.separable_parameters == mm.parameters
    assert mm.fixed_parameters == ()

    mut = mutualism_model()
    assert mut.n == 3 and mut.m == 11
    assert [str(p) for p in mut.fixed_parameters] == ["beta", "omega", "gamma", "alpha"]


def test_evaluate_substitutes_partial_assignment_without_mutating(mm):
    sym = mm.symbols()
    S, C, k1, km1, k2 = sym["S"], sym["C"], sym["k1"], sym["km1"], sym["k2"]

    f0 = mm.evaluate({"e0": 0})
    assert sp.expand(f0[0] - (k1 * S + km1) * C) == 0
    assert sp.expand(f0[1] + (k1 * S + km1 + k2) * C) == 0

    # Original model unchanged.
    assert sym["e0"] in mm.rhs[0].free_symbols


def test_jacobian_matches_manual_derivative(mm):
    sym = mm.symbols()
    J = mm.jacobian()
    assert J.shape == (2, 2)
    assert sp.expand(J[0, 1] - (sym["k1"] * sym["S"] + sym["km1"])) == 0


def test_non_polynomial_rhs_is_rejected():
    with pytest.raises(ModelError):
        build_model(["x"], ["a"], [True], lambda x, p: [sp.exp(p[0]) * x[0]])
    with pytest.raises(ModelError):
        build_model(["x"], ["a"], [True], lambda x, p: [p[0] / x[0]])


def test_length_and_mask_mismatches_are_rejected():
    with pytest.raises(ModelError):
        build_model(["x", "y"], ["a"], [True], lambda x, p: [p[0] * x[0]])
    with pytest.raises(ModelError):
        build_model(["x"], ["a", "b"], [True], lambda x, p: [p[0] * x[0]])


def test_unknown_symbols_are_rejected():
    z = sp.Symbol("z")
    with pytest.raises(ModelError):
        build_model(["x"], ["a"], [True], lambda x, p: [p[0] * x[0] + z])


def test_unknown_parameter_in_assignment(mm):
    with pytest.raises(ModelError):
        mm.evaluate({"nope": 0})


def test_model_error_is_a_value_error():
    assert issubclass(ModelError, ValueError)


def test_indexing_past_the_parameters_is_a_model_error():
    with pytest.raises(ModelError):
        build_model(["x"], ["a"], [True], lambda x, p: [p[5] * x[0]])
