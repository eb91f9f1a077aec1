from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Tuple

import sympy as sp

from .algebra import PolynomialIdeal
from .candidates import TFPVCandidate, _check_target_dimension, variety_ideal
from .model import PolynomialModel

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class VarietyComponent:
    """One irreducible component of V(f(·, π*))."""

    index: int
    ideal: PolynomialIdeal
    dimension: int
    has_target_dimension: bool

    @property
    def generators(self) -> Tuple[sp.Expr, ...]:
        return self.ideal.generators

    def __str__(self) -> str:
        return f"V{self.index}: dim {self.dimension}, {self.ideal}"


@dataclass(frozen=True)
class Variety:
    """Irreducible decomposition of the zero set of f(·, π*) for one candidate."""

    candidate: TFPVCandidate
    ideal: PolynomialIdeal
    components: Tuple[VarietyComponent, ...]
    target_dimension: int

    def target_components(self) -> List[VarietyComponent]:
        """Components whose dimension equals the target dimension s."""
        return [c for c in self.components if c.has_target_dimension]

    @property
    def dimension(self) -> int:
        if not self.components:
            return -1
        return max(c.dimension for c in self.components)


def compute_variety(
    model: PolynomialModel,
    candidate: TFPVCandidate,
    s: int,
    *,
    method: str = "buchberger",
) -> Variety:
    """Decompose V(f(·, π*)) into irreducible components with dimensions.

    This may take arbitrarily long for large models; there is no timeout.
    Kernel failures propagate as AlgebraError.
    """
    s = _check_target_dimension(model, s)
    ideal = variety_ideal(model, candidate, method=method)

    components: List[VarietyComponent] = []
    for i, comp in enumerate(ideal.decompose()):
        dim = comp.dimension()
        components.append(
            VarietyComponent(index=i, ideal=comp, dimension=dim, has_target_dimension=(dim == s))
        )

    logger.debug(
        "%s: %d components, dimensions %s",
        candidate,
        len(components),
        [c.dimension for c in components],
    )
    return Variety(candidate=candidate, ideal=ideal, components=tuple(components), target_dimension=s)
