import pytest

from tfpv_analysis import (
    ModelError,
    TFPVCandidate,
    build_model,
    enumerate_candidates,
    limit_cycle_model,
    linear_exchange_model,
)
from tfpv_analysis.candidates import all_candidates, candidate_is_kept, rank_ideal


def labels(cands):
    return [c.label for c in cands]


def test_all_candidates_is_lexicographic(mm):
    pool = all_candidates(mm)
    assert len(pool) == 16
    assert pool[0].bits == (0, 0, 0, 0)
    assert pool[1].bits == (0, 0, 0, 1)
    assert pool[-1].bits == (1, 1, 1, 1)


def test_candidate_helpers(mm):
    cand = TFPVCandidate.from_small(mm, ["e0"])
    sym = mm.symbols()
    assert cand.small_parameters == (sym["e0"],)
    assert cand.nonsmall_parameters(mm) == (sym["k1"], sym["km1"], sym["k2"])
    assert cand.substitution() == {sym["e0"]: 0}
    assert cand.label == "{e0}"
    assert str(cand) == "TFPVCandidate(small={e0})"

    with pytest.raises(ModelError):
        TFPVCandidate.from_small(mm, ["S"])
    with pytest.raises(ValueError):
        TFPVCandidate(mm.separable_parameters, (0, 1))


def test_michaelis_menten_keeps_classical_separations(mm):
    kept = labels(enumerate_candidates(mm, 1))
    assert "{e0}" in kept
    assert "{km1, k2}" in kept

    assert "{}" not in kept
    assert "{k1, km1, k2, e0}" not in kept
    assert "{km1}" not in kept


def test_rejection_reasons(mm):
    no_small = TFPVCandidate.from_small(mm, [])
    # Only the origin is stationary and the Jacobian is regular there.
    assert rank_ideal(mm, no_small, 1).is_unit()
    assert not candidate_is_kept(mm, no_small, 1)

    # Everything small: f vanishes and no 1-minor survives.
    assert not candidate_is_kept(mm, TFPVCandidate.from_small(mm, mm.parameters), 1)


def test_enumeration_is_deterministic(mm):
    assert enumerate_candidates(mm, 1) == enumerate_candidates(mm, 1)


def test_conserved_quantity_makes_every_value_critical():
    model = linear_exchange_model()
    kept = labels(enumerate_candidates(model, 1))
    assert "{}" in kept


def test_limit_cycle_has_single_candidate():
    assert labels(enumerate_candidates(limit_cycle_model(), 1)) == ["{e}"]


@pytest.mark.parametrize("s", [0, 2, -1])
def test_target_dimension_out_of_range(mm, s):
    with pytest.raises(ModelError):
        enumerate_candidates(mm, s)


def test_rank_is_judged_on_the_reduced_critical_set():
    # V(x^2) is the line x = 0, where the Jacobian vanishes; 2*a*x is not in
    # <x^2> but vanishes on the whole line.
    model = build_model(["x", "y"], ["a", "e"], [False, True], lambda v, p: [p[0] * v[0] ** 2, p[1] * v[1]])
    cand = TFPVCandidate.from_small(model, ["e"])
    assert not rank_ideal(model, cand, 1).is_unit()
    assert not candidate_is_kept(model, cand, 1)
    # Without separation only the origin is critical, where the rank is 1.
    assert labels(enumerate_candidates(model, 1)) == ["{}"]


def test_rank_test_runs_per_component():
    # Rank 1 on the line y = 1 only; the origin has a regular Jacobian.
    model = build_model(
        ["x", "y"],
        ["a", "e"],
        [False, True],
        lambda v, p: [p[0] * v[0] * (v[1] - 1) + p[1] * v[0], v[1] * (v[1] - 1)],
    )
    assert candidate_is_kept(model, TFPVCandidate.from_small(model, ["e"]), 1)
