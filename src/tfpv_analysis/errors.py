"""Exception types raised by :mod:`tfpv_analysis`."""

from __future__ import annotations


class ModelError(ValueError):
    """The input model is malformed (non-polynomial RHS, length mismatch, ...)."""


class AlgebraError(RuntimeError):
    """The algebra kernel failed to complete a requested computation.

    Exact algebra is deterministic, so these are never retried: the original
    kernel exception is chained as ``__cause__``.
    """


class ManifoldExtractionFailure(Exception):
    """The manifold heuristic could not solve for the dependent variables.

    Used internally by :func:`tfpv_analysis.manifold.extract_manifold`; callers
    see a ``success=False`` flag instead.
    """
