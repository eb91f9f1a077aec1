from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

import sympy as sp

from .algebra import is_identically_zero
from .candidates import TFPVCandidate
from .manifold import Manifold
from .model import PolynomialModel

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Reduction:
    """Reduced vector field on a manifold for one TFPV candidate.

    ``candidate`` and ``manifold`` are back-references (not owned). Consumers
    must check ``success`` before trusting ``equations``.
    """

    candidate: TFPVCandidate
    manifold: Optional[Manifold]
    free_variables: Tuple[sp.Symbol, ...]
    equations: Tuple[sp.Expr, ...]
    vector_field: Tuple[sp.Expr, ...]
    success: bool
    message: str = ""

    def as_dict(self) -> Dict[sp.Symbol, sp.Expr]:
        """``{free coordinate: right-hand side}``."""
        return dict(zip(self.free_variables, self.equations))

    def __str__(self) -> str:
        status = "ok" if self.success else f"FAILED ({self.message})"
        eqs = "; ".join(f"{x}' = {sp.sstr(e)}" for x, e in zip(self.free_variables, self.equations))
        return f"Reduction[{self.candidate.label}, {status}]: {eqs}"


def slow_part(model: PolynomialModel, candidate: TFPVCandidate) -> Tuple[sp.Expr, ...]:
    """First-order term f1 of f(x, π* + ε ρ) in ε.

    Every small parameter p is scaled p -> ε p, so

        f1 = Σ_{p small} p * ∂f/∂p evaluated at π*.
    """
    sub = candidate.substitution()
    small = candidate.small_parameters
    out: List[sp.Expr] = []
    for f in model.rhs:
        # Differentiate and evaluate at π* before scaling by the direction p.
        term = sum((p * sp.diff(f, p).subs(sub) for p in small), sp.Integer(0))
        out.append(sp.expand(term))
    return tuple(out)


def _tidy(expr: sp.Expr, simplify: bool) -> sp.Expr:
    expr = sp.cancel(sp.together(expr))
    if simplify:
        expr = sp.factor(expr)
    return expr


def _failed(candidate: TFPVCandidate, manifold: Manifold, message: str) -> Reduction:
    logger.warning("reduction for %s on %s failed: %s", candidate, manifold, message)
    return Reduction(
        candidate=candidate,
        manifold=manifold,
        free_variables=manifold.free_variables,
        equations=(),
        vector_field=(),
        success=False,
        message=message,
    )


def build_reduction(
    model: PolynomialModel,
    candidate: TFPVCandidate,
    manifold: Manifold,
    *,
    simplify: bool = True,
) -> Reduction:
    """Tikhonov-Fenichel reduction of ``model`` on ``manifold`` for ``candidate``.

    With f = f0 + ε f1 + O(ε²) and the manifold written as ψ = 0 with
    ψ = x_dep - φ(x_free), the fast part factors as f0 = P ψ near the
    manifold; on the manifold Df0 = P Dψ and Dψ = [-Dφ | I], hence
    P = Df0[:, dep]. The reduced system is

        x' = (I - P (Dψ P)^{-1} Dψ) f1   restricted to x_dep = φ(x_free),

    whose free-coordinate rows are the s-dimensional reduced ODE.

    Returns a Reduction with ``success=False`` (and a message) when a
    consistency check fails; nothing is raised for that case.
    """
    if tuple(manifold.state_variables) != tuple(model.state_variables):
        raise ValueError("manifold state variables do not match the model")

    states = model.state_variables
    free = manifold.free_variables
    dep = manifold.dependent_variables
    phi = manifold.substitution()
    idx = {x: i for i, x in enumerate(states)}

    sub = candidate.substitution()
    f0 = model.evaluate(sub)
    f1 = slow_part(model, candidate)

    # The manifold must lie in V(f0).
    for i, comp in enumerate(manifold.restrict(f0)):
        if not is_identically_zero(comp):
            return _failed(candidate, manifold, f"f0[{i}] does not vanish on the manifold")

    n, r = len(states), len(dep)
    J0 = model.jacobian(sub)

    P = sp.Matrix(n, r, lambda i, j: J0[i, idx[dep[j]]]).subs(phi)

    Dpsi = sp.zeros(r, n)
    for a, d in enumerate(dep):
        Dpsi[a, idx[d]] = 1
        for z in free:
            Dpsi[a, idx[z]] = -sp.diff(phi[d], z)

    M = (Dpsi * P).applyfunc(lambda e: sp.cancel(sp.together(e)))
    det = M.det(method="berkowitz")
    if is_identically_zero(det):
        return _failed(candidate, manifold, "D(psi)·P is singular on the manifold")

    F1 = sp.Matrix(manifold.restrict(f1))
    projected = F1 - P * (M.inv() * (Dpsi * F1))
    field = [_tidy(e, simplify) for e in projected]

    # Consistency: the dependent rows must be the derivative of φ along the flow.
    reduced = {z: field[idx[z]] for z in free}
    for d in dep:
        chain = sum((sp.diff(phi[d], z) * reduced[z] for z in free), sp.Integer(0))
        if not is_identically_zero(field[idx[d]] - chain):
            return _failed(candidate, manifold, f"lifted field is not tangent to the manifold at {d}")

    logger.debug("reduction for %s on %s computed", candidate, manifold)
    return Reduction(
        candidate=candidate,
        manifold=manifold,
        free_variables=free,
        equations=tuple(reduced[z] for z in free),
        vector_field=tuple(field),
        success=True,
    )
