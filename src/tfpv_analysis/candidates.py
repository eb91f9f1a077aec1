from __future__ import annotations

import itertools
import logging
from dataclasses import dataclass
from typing import Dict, List, Sequence, Tuple

import sympy as sp

from .algebra import PolynomialIdeal, jacobian_minors
from .errors import ModelError
from .model import PolynomialModel

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TFPVCandidate:
    """A 0/1 slow-fast separation of the separable parameters.

    ``bits[i] == 1`` means ``separable_parameters[i]`` is small (scaled by ε);
    the candidate parameter point π* sets exactly those parameters to zero.
    """

    separable_parameters: Tuple[sp.Symbol, ...]
    bits: Tuple[int, ...]

    def __post_init__(self) -> None:
        if len(self.bits) != len(self.separable_parameters):
            raise ValueError("bits must have one entry per separable parameter")
        if any(b not in (0, 1) for b in self.bits):
            raise ValueError("bits must be 0 or 1")

    @classmethod
    def from_small(cls, model: PolynomialModel, small) -> "TFPVCandidate":
        """Build the candidate whose small parameters are ``small`` (symbols or names)."""
        names = {str(s) for s in small}
        sep = model.separable_parameters
        unknown = names - {str(p) for p in sep}
        if unknown:
            raise ModelError(f"not separable parameters: {sorted(unknown)}")
        return cls(sep, tuple(1 if str(p) in names else 0 for p in sep))

    @property
    def small_parameters(self) -> Tuple[sp.Symbol, ...]:
        return tuple(p for p, b in zip(self.separable_parameters, self.bits) if b)

    def nonsmall_parameters(self, model: PolynomialModel) -> Tuple[sp.Symbol, ...]:
        """Parameters of ``model`` that stay O(1) (the coefficient field)."""
        small = set(self.small_parameters)
        return tuple(p for p in model.parameters if p not in small)

    def substitution(self) -> Dict[sp.Symbol, sp.Expr]:
        """The parameter point π*: every small parameter set to zero."""
        return {p: sp.Integer(0) for p in self.small_parameters}

    @property
    def label(self) -> str:
        small = ", ".join(str(p) for p in self.small_parameters)
        return "{" + small + "}"

    def __str__(self) -> str:
        return f"TFPVCandidate(small={self.label})"


def all_candidates(model: PolynomialModel) -> List[TFPVCandidate]:
    """All 2^k assignments over the separable parameters, lexicographic in the bits."""
    sep = model.separable_parameters
    return [TFPVCandidate(sep, tuple(bits)) for bits in itertools.product((0, 1), repeat=len(sep))]


def _check_target_dimension(model: PolynomialModel, s: int) -> int:
    s = int(s)
    if not (0 < s < model.n):
        raise ModelError(f"target dimension must satisfy 0 < s < n={model.n}; got {s}")
    return s


def variety_ideal(
    model: PolynomialModel,
    candidate: TFPVCandidate,
    *,
    method: str = "buchberger",
) -> PolynomialIdeal:
    """The ideal <f(·, π*)> in Q(nonsmall parameters)[x]."""
    return PolynomialIdeal.from_generators(
        model.evaluate(candidate.substitution()),
        model.state_variables,
        coefficient_symbols=candidate.nonsmall_parameters(model),
        method=method,
    )


def rank_ideal(
    model: PolynomialModel,
    candidate: TFPVCandidate,
    s: int,
    *,
    method: str = "buchberger",
) -> PolynomialIdeal:
    """Ideal of points of V(f(·, π*)) where rank Df(·, π*) <= n - s.

    Generated by the components of f(·, π*) and all (n-s+1)-minors of the
    Jacobian, in Q(nonsmall parameters)[x].
    """
    s = _check_target_dimension(model, s)
    J0 = model.jacobian(candidate.substitution())
    minors = jacobian_minors(J0, model.n - s + 1)
    return variety_ideal(model, candidate, method=method).with_generators(minors)


def _branch_has_exact_rank(
    branch: PolynomialIdeal,
    upper: Sequence[sp.Expr],
    lower: Sequence[sp.Expr],
) -> bool:
    """True iff rank Df is exactly n - s somewhere on the prime ``branch``.

    ``upper`` are the (n-s+1)-minors and ``lower`` the (n-s)-minors.
    """
    if branch.dimension() == 0:
        # A zero-dimensional prime is maximal: a minor either vanishes on all
        # of it or nowhere.
        if not all(branch.contains(m) for m in upper):
            return False
        return not all(branch.contains(m) for m in lower)

    locus = branch.with_generators(upper)
    if locus.is_unit():
        return False
    states = set(branch.variables)
    for mnr in lower:
        if not (mnr.free_symbols & states):
            return True
        if locus.contains(mnr):
            continue
        if not locus.saturation_is_unit(mnr):
            return True
    return False


def candidate_is_kept(
    model: PolynomialModel,
    candidate: TFPVCandidate,
    s: int,
    *,
    method: str = "buchberger",
) -> bool:
    """Rank test for one candidate (see :func:`enumerate_candidates`)."""
    s = _check_target_dimension(model, s)
    J0 = model.jacobian(candidate.substitution())

    # Rank n-s must be attainable at all.
    lower = jacobian_minors(J0, model.n - s)
    if not lower:
        logger.debug("%s rejected: Jacobian rank < %d everywhere", candidate, model.n - s)
        return False

    upper = jacobian_minors(J0, model.n - s + 1)
    branches = variety_ideal(model, candidate, method=method).decompose()
    for branch in branches:
        if _branch_has_exact_rank(branch, upper, lower):
            return True

    logger.debug("%s rejected: rank is never exactly %d on %d branches", candidate, model.n - s, len(branches))
    return False


def enumerate_candidates(
    model: PolynomialModel,
    s: int,
    *,
    method: str = "buchberger",
) -> List[TFPVCandidate]:
    """Return the TFPV candidates of ``model`` for target dimension ``s``.

    All 2^k separations of the k separable parameters are examined in
    lexicographic bit order. A candidate π* is kept iff the Jacobian of
    f(·, π*) has rank exactly n - s somewhere on V(f(·, π*)). The test runs
    on each minimal prime of <f(·, π*)> separately:

    - the prime plus the (n-s+1)-minors must not be the unit ideal, and
    - some (n-s)-minor must not vanish on all of that locus (its saturation
      is not the unit ideal).

    A kept candidate therefore has a non-unit :func:`rank_ideal`. Rejected
    candidates are simply omitted. Pure function of (model, s).
    """
    s = _check_target_dimension(model, s)
    pool = all_candidates(model)
    logger.info("checking %d candidate separations (n=%d, s=%d)", len(pool), model.n, s)

    kept = [c for c in pool if candidate_is_kept(model, c, s, method=method)]

    logger.info("kept %d of %d candidates", len(kept), len(pool))
    return kept
