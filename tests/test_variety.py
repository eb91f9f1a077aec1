import pytest

from tfpv_analysis import ModelError, TFPVCandidate, compute_variety
from tfpv_analysis.variety import variety_ideal


def test_small_enzyme_gives_critical_manifold_c_zero(mm):
    C = mm.symbols()["C"]
    cand = TFPVCandidate.from_small(mm, ["e0"])
    variety = compute_variety(mm, cand, 1)

    assert variety.candidate == cand
    assert variety.target_dimension == 1
    assert len(variety.components) == 1
    comp = variety.components[0]
    assert comp.index == 0
    assert comp.dimension == 1 and comp.has_target_dimension
    assert comp.generators == (C,)
    assert variety.dimension == 1


def test_slow_product_formation_has_two_components(mm):
    sym = mm.symbols()
    S, C, e0 = sym["S"], sym["C"], sym["e0"]
    cand = TFPVCandidate.from_small(mm, ["km1", "k2"])
    variety = compute_variety(mm, cand, 1)

    assert [c.dimension for c in variety.components] == [1, 1]
    assert len(variety.target_components()) == 2
    ideals = [c.ideal for c in variety.components]
    assert any(I.contains(C - e0) and not I.contains(S) for I in ideals)
    assert any(I.contains(S) and not I.contains(C - e0) for I in ideals)
    assert [c.index for c in variety.components] == [0, 1]


def test_coefficients_are_the_nonsmall_parameters(mm):
    sym = mm.symbols()
    cand = TFPVCandidate.from_small(mm, ["e0"])
    I = variety_ideal(mm, cand)
    assert I.variables == mm.state_variables
    assert I.coefficient_symbols == (sym["k1"], sym["km1"], sym["k2"])


def test_limit_cycle_components(circle):
    sym = circle.symbols()
    x, y = sym["x"], sym["y"]
    variety = compute_variety(circle, TFPVCandidate.from_small(circle, ["e"]), 1)

    assert [c.dimension for c in variety.components] == [1, 0]
    assert variety.components[0].ideal.contains(x**2 + y**2 - 1)
    assert variety.components[1].ideal.contains(x)
    assert variety.components[1].ideal.contains(y)
    assert [c.index for c in variety.target_components()] == [0]


def test_invalid_target_dimension(mm):
    with pytest.raises(ModelError):
        compute_variety(mm, TFPVCandidate.from_small(mm, ["e0"]), 2)
