"""Human-readable reporting utilities.

Plain-text helpers to summarize a reduction session:

- kept TFPV candidates,
- the components of their varieties (generators and dimensions), and
- reduced systems, rendered only when their success flag is set.

Nothing here is required for the algebra; it is strictly presentation.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Sequence

import sympy as sp

from .analyzer import TFPVAnalyzer
from .candidates import TFPVCandidate
from .manifold import Manifold
from .reduction import Reduction
from .variety import Variety


def _expr_to_str(e: sp.Expr) -> str:
    """Stable string for SymPy expressions in reports."""
    return sp.sstr(e)


def format_variety(variety: Variety, *, max_generators: int = 6) -> List[str]:
    """One line per component: index, dimension, generators."""
    out: List[str] = []
    for comp in variety.components:
        gens = [_expr_to_str(g) for g in comp.generators[: int(max_generators)]]
        if len(comp.generators) > max_generators:
            gens.append(f"... ({len(comp.generators) - max_generators} more)")
        mark = " *" if comp.has_target_dimension else ""
        out.append(f"V{comp.index} (dim {comp.dimension}){mark}: <{', '.join(gens) or '0'}>")
    return out


def format_manifold(manifold: Optional[Manifold], success: bool) -> List[str]:
    if manifold is None:
        return ["manifold: not found"]
    status = "verified" if success else "UNVERIFIED"
    lines = [f"manifold ({manifold.source}, {status}), free: " + ", ".join(str(x) for x in manifold.free_variables)]
    for x, e in manifold.substitution().items():
        lines.append(f"  {x} = {_expr_to_str(e)}")
    if manifold.ambiguous:
        alts = "; ".join(", ".join(str(x) for x in a) for a in manifold.alternatives)
        lines.append(f"  other verified free coordinates: {alts}")
    return lines


def format_reduction(reduction: Reduction) -> List[str]:
    """Reduced equations; unsuccessful reductions are not rendered."""
    if not reduction.success:
        return [f"reduction not available: {reduction.message}"]
    return [f"{x}' = {_expr_to_str(e)}" for x, e in zip(reduction.free_variables, reduction.equations)]


@dataclass
class ReportOptions:
    """Tunable knobs for report verbosity."""

    max_generators: int = 6
    include_manifolds: bool = True
    include_reductions: bool = True


def format_session_report(
    analyzer: TFPVAnalyzer,
    *,
    options: Optional[ReportOptions] = None,
) -> str:
    """Format candidates, varieties, manifolds and reductions of a session."""
    opt = options or ReportOptions()
    model = analyzer.model

    lines: List[str] = [model.summary(), "", f"Target dimension s = {analyzer.s}", ""]
    cands = analyzer.candidates()
    lines.append(f"{len(cands)} TFPV candidate(s)")

    for cand in cands:
        lines.append("")
        lines.append(f"### small: {cand.label}")
        variety = analyzer.variety(cand)
        lines.extend(format_variety(variety, max_generators=opt.max_generators))

        for comp in variety.target_components():
            if opt.include_manifolds:
                manifold, ok = analyzer.manifold(cand, comp.index)
                mlines = format_manifold(manifold, ok)
                lines.append(f"V{comp.index} {mlines[0]}")
                lines.extend(mlines[1:])
            if opt.include_reductions:
                lines.extend("  " + s for s in format_reduction(analyzer.reduction(cand, comp.index)))

    return "\n".join(lines).rstrip() + "\n"


def format_candidates(candidates: Sequence[TFPVCandidate]) -> str:
    """One line per candidate listing its small parameters."""
    return "\n".join(c.label for c in candidates) + "\n"
