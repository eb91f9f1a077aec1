from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Optional, Tuple

from .algebra import PolynomialIdeal
from .candidates import TFPVCandidate, _check_target_dimension, enumerate_candidates
from .general import contains_point, general_tfpv_ideal, is_saturation_trivial
from .manifold import Manifold, extract_manifold
from .model import PolynomialModel
from .reduction import Reduction, build_reduction
from .variety import Variety, VarietyComponent, compute_variety

logger = logging.getLogger(__name__)

_Key = Tuple[TFPVCandidate, int]


@dataclass
class AnalysisOptions:
    """Tunable knobs for a reduction session."""

    groebner_method: str = "buchberger"
    find_alternative_manifolds: bool = True
    nonlinear_fallback: bool = True
    simplify: bool = True


@dataclass
class TFPVAnalyzer:
    """A computation session for one model and target dimension.

    Parameters
    ----------
    model:
        A :class:`PolynomialModel`.
    s:
        Target dimension of the reduced system (0 < s < n).
    options:
        :class:`AnalysisOptions`.

    Notes
    -----
    Results are memoized per candidate (varieties) and per (candidate,
    component index) pair (manifolds, reductions). Every cache entry is written
    once; nothing is shared between candidates.
    """

    model: PolynomialModel
    s: int
    options: AnalysisOptions = field(default_factory=AnalysisOptions)

    _candidates: Optional[List[TFPVCandidate]] = field(default=None, init=False, repr=False)
    _varieties: Dict[TFPVCandidate, Variety] = field(default_factory=dict, init=False, repr=False)
    _extracted: Dict[_Key, Tuple[Optional[Manifold], bool]] = field(default_factory=dict, init=False, repr=False)
    _overrides: Dict[_Key, Manifold] = field(default_factory=dict, init=False, repr=False)
    _reductions: Dict[_Key, Reduction] = field(default_factory=dict, init=False, repr=False)
    _general: Optional[PolynomialIdeal] = field(default=None, init=False, repr=False)

    def __post_init__(self) -> None:
        self.s = _check_target_dimension(self.model, self.s)

    # -----------------------------
    # Pipeline stages
    # -----------------------------

    def candidates(self) -> List[TFPVCandidate]:
        """TFPV candidates that pass the rank test (computed once)."""
        if self._candidates is None:
            self._candidates = enumerate_candidates(
                self.model, self.s, method=self.options.groebner_method
            )
        return list(self._candidates)

    def variety(self, candidate: TFPVCandidate) -> Variety:
        """Irreducible decomposition of V(f(·, π*)), cached per candidate."""
        if candidate not in self._varieties:
            self._varieties[candidate] = compute_variety(
                self.model, candidate, self.s, method=self.options.groebner_method
            )
        return self._varieties[candidate]

    def component(self, candidate: TFPVCandidate, index: int) -> VarietyComponent:
        comps = self.variety(candidate).components
        if not (0 <= index < len(comps)):
            raise IndexError(f"{candidate} has {len(comps)} components; no index {index}")
        return comps[index]

    def set_manifold(self, candidate: TFPVCandidate, index: int, manifold: Manifold) -> None:
        """Use ``manifold`` for component ``index`` instead of the heuristic.

        The override is asserted, not re-verified against the component; any
        reduction already cached for this pair is discarded.
        """
        comp = self.component(candidate, index)
        if not comp.has_target_dimension:
            raise ValueError(
                f"component V{index} of {candidate} has dimension {comp.dimension}, not s={self.s}"
            )
        if len(manifold.free_variables) != self.s:
            raise ValueError(f"manifold must have {self.s} free coordinates")
        key = (candidate, index)
        self._overrides[key] = manifold
        self._reductions.pop(key, None)
        logger.info("manifold override set for %s, V%d", candidate, index)

    def manifold(self, candidate: TFPVCandidate, index: int) -> Tuple[Optional[Manifold], bool]:
        """The manifold for a component: the override if any, else the heuristic."""
        key = (candidate, index)
        if key in self._overrides:
            return self._overrides[key], True

        if key not in self._extracted:
            comp = self.component(candidate, index)
            self._extracted[key] = extract_manifold(
                comp,
                self.model.state_variables,
                self.s,
                find_alternatives=self.options.find_alternative_manifolds,
                nonlinear_fallback=self.options.nonlinear_fallback,
            )
        return self._extracted[key]

    def reduction(self, candidate: TFPVCandidate, index: int) -> Reduction:
        """Reduced system on component ``index`` of ``candidate`` (cached).

        When the heuristic manifold is unverified (``success=False``) no
        reduction is attempted; the returned Reduction carries the reason and
        its flag is False. Supply an override with :meth:`set_manifold`.
        """
        key = (candidate, index)
        if key in self._reductions:
            return self._reductions[key]

        manifold, ok = self.manifold(candidate, index)
        if manifold is None or not ok:
            reason = "no manifold" if manifold is None else "manifold not verified"
            logger.warning("%s, V%d: %s; supply an override", candidate, index, reason)
            red = Reduction(
                candidate=candidate,
                manifold=manifold,
                free_variables=manifold.free_variables if manifold is not None else (),
                equations=(),
                vector_field=(),
                success=False,
                message=reason,
            )
        else:
            red = build_reduction(self.model, candidate, manifold, simplify=self.options.simplify)

        self._reductions[key] = red
        return red

    def is_reduction_computed(self, candidate: TFPVCandidate, index: int) -> bool:
        """Cache flag: True iff a successful reduction is cached for the pair."""
        red = self._reductions.get((candidate, index))
        return red is not None and red.success

    def reductions(self) -> Iterator[Reduction]:
        """Reductions for every kept candidate and every component of dimension s."""
        for cand in self.candidates():
            for comp in self.variety(cand).target_components():
                yield self.reduction(cand, comp.index)

    # -----------------------------
    # General TFPVs
    # -----------------------------

    def general_ideal(self) -> PolynomialIdeal:
        """Elimination ideal of all critical parameter values (computed once)."""
        if self._general is None:
            self._general = general_tfpv_ideal(
                self.model, self.s, method=self.options.groebner_method
            )
        return self._general

    def saturation_is_trivial(self) -> bool:
        return is_saturation_trivial(self.general_ideal(), self.model.parameters)

    def cross_validate(self) -> Dict[TFPVCandidate, bool]:
        """Check that each kept candidate's point π* lies on the general TFPV variety."""
        ideal = self.general_ideal()
        out: Dict[TFPVCandidate, bool] = {}
        for cand in self.candidates():
            out[cand] = contains_point(ideal, cand.substitution())
            if not out[cand]:
                logger.warning("%s is not on the general TFPV variety", cand)
        return out
