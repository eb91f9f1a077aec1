import pytest
import sympy as sp

from tfpv_analysis import Manifold, TFPVCandidate, compute_variety, extract_manifold
from tfpv_analysis.manifold import ranked_dependent_sets


def target_component(model, small, index=0):
    variety = compute_variety(model, TFPVCandidate.from_small(model, small), 1)
    return variety.components[index]


def test_c_zero_manifold_is_found_and_verified(mm):
    S, C = mm.symbols()["S"], mm.symbols()["C"]
    comp = target_component(mm, ["e0"])

    manifold, ok = extract_manifold(comp, mm.state_variables, 1)
    assert ok
    assert manifold.free_variables == (S,)
    assert manifold.dependent_variables == (C,)
    assert manifold.substitution() == {C: 0}
    assert manifold.as_dict() == {S: S, C: 0}
    assert not manifold.ambiguous
    assert manifold.source == "heuristic"
    assert manifold.component_index == 0


def test_both_components_of_slow_product_formation(mm):
    sym = mm.symbols()
    S, C, e0 = sym["S"], sym["C"], sym["e0"]
    cand = TFPVCandidate.from_small(mm, ["km1", "k2"])
    variety = compute_variety(mm, cand, 1)

    found = {}
    for comp in variety.components:
        manifold, ok = extract_manifold(comp, mm.state_variables, 1)
        assert ok
        found.update(manifold.substitution())
    assert found == {C: e0, S: 0}


def test_linear_variables_rank_first(mm):
    S, C = mm.symbols()["S"], mm.symbols()["C"]
    comp = target_component(mm, ["e0"])
    assert ranked_dependent_sets(comp, mm.state_variables, 1) == [(C,), (S,)]


def test_wrong_dimension_is_rejected(circle):
    point = target_component(circle, ["e"], index=1)
    with pytest.raises(ValueError):
        extract_manifold(point, circle.state_variables, 1)


def test_circle_has_no_verified_parametrization(circle):
    comp = target_component(circle, ["e"])

    manifold, ok = extract_manifold(comp, circle.state_variables, 1)
    assert not ok
    assert manifold is not None
    assert len(manifold.free_variables) == 1

    manifold, ok = extract_manifold(comp, circle.state_variables, 1, nonlinear_fallback=False)
    assert manifold is None and not ok


def test_from_mapping():
    x, y, a = sp.symbols("x y a")
    m = Manifold.from_mapping((x, y), {y: a * x})
    assert m.free_variables == (x,)
    assert m.parametrization == (x, a * x)
    assert m.source == "override"
    assert m.restrict([x + y]) == [x + a * x]
    assert "y = a*x" in str(m)

    with pytest.raises(ValueError):
        Manifold.from_mapping((x,), {y: x})
    with pytest.raises(ValueError):
        Manifold.from_mapping((x, y), {x: y, y: x})


def test_free_coordinates_must_map_to_themselves():
    x, y = sp.symbols("x y")
    with pytest.raises(ValueError):
        Manifold((x, y), (x,), (x + 1, 0))
    with pytest.raises(ValueError):
        Manifold((x, y), (x,), (x,))
