"""Top-level package API for tfpv_analysis.

This package implements symbolic tools for **Tikhonov-Fenichel reductions**
of parameter-dependent polynomial ODE models: it finds the slow-fast
separations of the parameters (TFPV candidates), decomposes the critical
varieties, parametrizes the slow manifolds and computes the reduced systems.
The set of all critical parameter values is available as an elimination
ideal.

Public API:
- build_model, PolynomialModel
- enumerate_candidates, compute_variety, extract_manifold, build_reduction
- general_tfpv_ideal, is_saturation_trivial, transform_parameters
- TFPVAnalyzer (a cached session over all of the above)
- Built-in example models
"""

from .errors import AlgebraError, ManifoldExtractionFailure, ModelError
from .algebra import PolynomialIdeal
from .model import PolynomialModel, build_model
from .candidates import TFPVCandidate, enumerate_candidates
from .variety import Variety, VarietyComponent, compute_variety
from .manifold import Manifold, extract_manifold
from .reduction import Reduction, build_reduction
from .general import (
    contains_point,
    general_tfpv_ideal,
    is_saturation_trivial,
    transform_parameters,
)
from .analyzer import AnalysisOptions, TFPVAnalyzer
from .singular import SingularIdeal
from .report import (
    ReportOptions,
    format_reduction,
    format_session_report,
)
from .examples import (
    limit_cycle_model,
    linear_exchange_model,
    michaelis_menten_model,
    mutualism_model,
)

__all__ = [
    "AlgebraError",
    "ManifoldExtractionFailure",
    "ModelError",
    "PolynomialIdeal",
    "PolynomialModel",
    "build_model",
    "TFPVCandidate",
    "enumerate_candidates",
    "Variety",
    "VarietyComponent",
    "compute_variety",
    "Manifold",
    "extract_manifold",
    "Reduction",
    "build_reduction",
    "contains_point",
    "general_tfpv_ideal",
    "is_saturation_trivial",
    "transform_parameters",
    "AnalysisOptions",
    "TFPVAnalyzer",
    "SingularIdeal",
    "ReportOptions",
    "format_reduction",
    "format_session_report",
    "limit_cycle_model",
    "linear_exchange_model",
    "michaelis_menten_model",
    "mutualism_model",
]
