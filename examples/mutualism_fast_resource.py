"""Reduce a plant-pollinator model with a fast floral resource.

This script illustrates the **session workflow** on a three-dimensional model:

- fix the resource parameters and let the seven population parameters be small,
- decompose the critical variety (a surface in (P, A, R)-space), and
- print the reduced two-dimensional system for the pollinators and the resource.

The surface can be written as a graph over any two coordinates; the heuristic
picks one and reports the others.

Only the fast-resource separation is analyzed here. Enumerating all 128
separations is possible (``session.candidates()``) but slow.

Run:
    python examples/mutualism_fast_resource.py
"""

from __future__ import annotations

import logging

from tfpv_analysis import (
    TFPVAnalyzer,
    TFPVCandidate,
    format_reduction,
    mutualism_model,
)
from tfpv_analysis.report import format_manifold, format_variety

POPULATION = ["rho", "kappa", "sigma", "delta", "eps", "d", "mu"]


def main() -> None:
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")

    model = mutualism_model()
    print(model.summary())

    session = TFPVAnalyzer(model, 2)
    cand = TFPVCandidate.from_small(model, POPULATION)

    variety = session.variety(cand)
    print("\n".join(format_variety(variety)))

    for comp in variety.target_components():
        manifold, ok = session.manifold(cand, comp.index)
        print("\n".join(format_manifold(manifold, ok)))
        print("\n".join(format_reduction(session.reduction(cand, comp.index))))


if __name__ == "__main__":
    main()
