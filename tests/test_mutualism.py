import pytest
import sympy as sp

from tfpv_analysis import (
    TFPVAnalyzer,
    TFPVCandidate,
    build_reduction,
    compute_variety,
    enumerate_candidates,
    extract_manifold,
    mutualism_model,
)

POPULATION = ["rho", "kappa", "sigma", "delta", "eps", "d", "mu"]


@pytest.fixture(scope="module")
def model():
    return mutualism_model()


@pytest.fixture(scope="module")
def fast_resource(model):
    return TFPVCandidate.from_small(model, POPULATION)


def test_fast_resource_separation_is_a_candidate(model, fast_resource):
    kept = enumerate_candidates(model, 2)
    assert len(model.separable_parameters) == 7
    assert fast_resource in kept


def test_critical_surface(model, fast_resource):
    sym = model.symbols()
    P, A, R = sym["P"], sym["A"], sym["R"]
    beta, omega, gamma, alpha = sym["beta"], sym["omega"], sym["gamma"], sym["alpha"]

    variety = compute_variety(model, fast_resource, 2)
    assert [c.dimension for c in variety.components] == [2]
    comp = variety.components[0]
    assert comp.ideal.contains(beta * P + omega - gamma * R - alpha * A * R)


def test_surface_parametrization_is_flagged_ambiguous(model, fast_resource):
    sym = model.symbols()
    P, A, R = sym["P"], sym["A"], sym["R"]
    beta, omega, gamma, alpha = sym["beta"], sym["omega"], sym["gamma"], sym["alpha"]

    comp = compute_variety(model, fast_resource, 2).components[0]
    manifold, ok = extract_manifold(comp, model.state_variables, 2)
    assert ok
    assert manifold.free_variables == (A, R)
    assert sp.simplify(manifold.substitution()[P] - (gamma * R + alpha * A * R - omega) / beta) == 0
    assert manifold.ambiguous
    assert set(manifold.alternatives) == {(P, R), (P, A)}

    only, ok = extract_manifold(comp, model.state_variables, 2, find_alternatives=False)
    assert ok and not only.ambiguous


def test_reduced_population_dynamics(model, fast_resource):
    sym = model.symbols()
    P, A, R = sym["P"], sym["A"], sym["R"]
    rho, kappa, sigma, delta = sym["rho"], sym["kappa"], sym["sigma"], sym["delta"]
    eps, d, mu = sym["eps"], sym["d"], sym["mu"]
    beta, omega, gamma, alpha = sym["beta"], sym["omega"], sym["gamma"], sym["alpha"]

    comp = compute_variety(model, fast_resource, 2).components[0]
    manifold, _ = extract_manifold(comp, model.state_variables, 2)
    red = build_reduction(model, fast_resource, manifold)
    assert red.success, red.message

    phi = (gamma * R + alpha * A * R - omega) / beta
    plants = (rho * P - kappa * P**2 + sigma * A * P - delta * P).subs(P, phi)
    pollinators = eps * A * R - d * A - mu * A**2

    eqs = red.as_dict()
    assert sp.simplify(eqs[A] - pollinators) == 0
    assert sp.simplify(eqs[R] - (beta * plants - alpha * R * pollinators) / (gamma + alpha * A)) == 0


def test_session_end_to_end(model, fast_resource):
    session = TFPVAnalyzer(model, 2)
    targets = session.variety(fast_resource).target_components()
    assert [c.index for c in targets] == [0]

    manifold, ok = session.manifold(fast_resource, 0)
    assert ok and manifold.ambiguous
    assert session.reduction(fast_resource, 0).success
    assert session.is_reduction_computed(fast_resource, 0)
