"""Supply a slow manifold by hand when the heuristic cannot.

The critical set of the limit-cycle model for small ``e`` is the unit circle
(plus the origin). The circle has no rational graph over either coordinate,
so the heuristic only returns an unverified branch and no reduction is built.

This script

- shows the session report before the override,
- sets the upper half circle y = sqrt(1 - x^2) as the manifold, and
- exports the critical ideal to Singular for a certified decomposition.

Run:
    python examples/manifold_override_limit_cycle.py
"""

from __future__ import annotations

import sympy as sp

from tfpv_analysis import (
    Manifold,
    TFPVAnalyzer,
    TFPVCandidate,
    format_reduction,
    format_session_report,
    limit_cycle_model,
)
from tfpv_analysis.variety import variety_ideal


def main() -> None:
    model = limit_cycle_model()
    x, y = model.state_variables
    session = TFPVAnalyzer(model, 1)

    print(format_session_report(session))

    cand = TFPVCandidate.from_small(model, ["e"])
    upper = Manifold.from_mapping(model.state_variables, {y: sp.sqrt(1 - x**2)}, component_index=0)
    session.set_manifold(cand, 0, upper)

    print("With the upper half circle as manifold:")
    print("\n".join(format_reduction(session.reduction(cand, 0))))

    sing = variety_ideal(model, cand).to_singular()
    print()
    print(sing.to_singular_script(minimal_associated_primes=True, comment="limit cycle, e -> 0"))


if __name__ == "__main__":
    main()
