from __future__ import annotations

from typing import Optional, Sequence

from .model import PolynomialModel, build_model


def michaelis_menten_model(separable_mask: Optional[Sequence[bool]] = None) -> PolynomialModel:
    """Irreversible Michaelis--Menten mechanism with substrate S and complex C.

    Reaction scheme:
        S + E <-> C -> E + P,   with E = e0 - C eliminated.

    States: [S, C]
    Parameters: k1, km1, k2, e0 (all separable by default)

        S' = -k1 e0 S + (k1 S + km1) C
        C' =  k1 e0 S - (k1 S + km1 + k2) C
    """
    mask = list(separable_mask) if separable_mask is not None else [True] * 4

    def f(x, p):
        S, C = x
        k1, km1, k2, e0 = p
        return [
            -k1 * e0 * S + (k1 * S + km1) * C,
            k1 * e0 * S - (k1 * S + km1 + k2) * C,
        ]

    return build_model(["S", "C"], ["k1", "km1", "k2", "e0"], mask, f)


MUTUALISM_PARAMETERS = ("rho", "kappa", "sigma", "delta", "eps", "d", "mu", "beta", "omega", "gamma", "alpha")


def mutualism_model(separable_mask: Optional[Sequence[bool]] = None) -> PolynomialModel:
    """Plant-pollinator mutualism mediated by a floral resource.

    States: P (plants), A (pollinators), R (nectar / floral reward).

        P' = rho P - kappa P^2 + sigma A P - delta P
        A' = eps A R - d A - mu A^2
        R' = beta P + omega - gamma R - alpha A R

    Parameters (11): growth rho, crowding kappa, pollination benefit sigma and
    mortality delta of the plants; conversion eps, mortality d and crowding mu
    of the pollinators; nectar production beta, inflow omega, decay gamma and
    consumption alpha.

    By default the seven population parameters are separable and the four
    resource parameters are fixed: the resource is the fast subsystem.
    """
    if separable_mask is None:
        mask = [True] * 7 + [False] * 4
    else:
        mask = list(separable_mask)

    def f(x, p):
        P, A, R = x
        rho, kappa, sigma, delta, eps, d, mu, beta, omega, gamma, alpha = p
        return [
            rho * P - kappa * P**2 + sigma * A * P - delta * P,
            eps * A * R - d * A - mu * A**2,
            beta * P + omega - gamma * R - alpha * A * R,
        ]

    return build_model(["P", "A", "R"], list(MUTUALISM_PARAMETERS), mask, f)


def limit_cycle_model() -> PolynomialModel:
    """Fast attraction to the unit circle with slow rotation along it.

        x' = -a x (x^2 + y^2 - 1) - e y
        y' = -a y (x^2 + y^2 - 1) + e x

    Only ``e`` is separable. The slow manifold for e -> 0 is the circle, which
    has no rational graph over either coordinate.
    """

    def f(x, p):
        X, Y = x
        a, e = p
        g = X**2 + Y**2 - 1
        return [-a * X * g - e * Y, -a * Y * g + e * X]

    return build_model(["x", "y"], ["a", "e"], [False, True], f)


def linear_exchange_model() -> PolynomialModel:
    """Reversible first-order exchange X <-> Y.

        x' = -a x + b y
        y' =  a x - b y

    Every parameter value is critical for s = 1 (x + y is conserved).
    """

    def f(x, p):
        X, Y = x
        a, b = p
        return [-a * X + b * Y, a * X - b * Y]

    return build_model(["x", "y"], ["a", "b"], [True, True], f)
