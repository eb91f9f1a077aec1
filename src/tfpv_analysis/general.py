"""General TFPV search via elimination.

A parameter point π is a TFPV for dimension s (in the broad sense, not
restricted to 0/1 separations) only if some x satisfies f(x, π) = 0 with
rank Df(x, π) <= n - s. The closure of the set of such π is the variety of
the elimination ideal

    (<f> + <(n-s+1)-minors of Df>) ∩ Q[p],

computed here with a lex Groebner basis in Q[x, p]. Queries against it are
exact ideal computations.
"""

from __future__ import annotations

import logging
from typing import Mapping, Optional, Sequence, Union

import sympy as sp

from .algebra import PolynomialIdeal, is_identically_zero, jacobian_minors
from .candidates import _check_target_dimension
from .model import PolynomialModel

logger = logging.getLogger(__name__)


def general_tfpv_ideal(
    model: PolynomialModel,
    s: int,
    *,
    method: str = "buchberger",
) -> PolynomialIdeal:
    """Elimination ideal in Q[parameters] characterizing all critical parameter values."""
    s = _check_target_dimension(model, s)
    J = model.jacobian()
    minors = jacobian_minors(J, model.n - s + 1)

    full = PolynomialIdeal.from_generators(
        list(model.rhs) + minors,
        tuple(model.state_variables) + tuple(model.parameters),
        coefficient_symbols=(),
        method=method,
    )
    elim = full.eliminate(model.state_variables)
    logger.info(
        "general TFPV ideal for s=%d has %d generators", s, len(elim.generators)
    )
    return elim


def contains_point(
    ideal: PolynomialIdeal,
    point: Mapping[Union[sp.Symbol, str], sp.Expr],
) -> bool:
    """Does ``point`` lie in the variety of ``ideal``?

    ``point`` assigns values (numbers or expressions in the remaining
    parameters) to some or all of the ideal's variables; the answer is True iff
    every generator vanishes identically after substitution.
    """
    by_name = {str(v): v for v in ideal.variables}
    subs = {}
    for key, value in point.items():
        name = str(key)
        if name not in by_name:
            raise ValueError(f"'{key}' is not a variable of the ideal; known: {list(by_name)}")
        subs[by_name[name]] = sp.sympify(value)
    return all(is_identically_zero(g.subs(subs)) for g in ideal.generators)


def is_saturation_trivial(
    ideal: PolynomialIdeal,
    parameters: Optional[Sequence[sp.Symbol]] = None,
) -> bool:
    """True iff I : (Π p)^∞ is the whole ring.

    Equivalently, the variety of ``ideal`` contains no point at which all of
    ``parameters`` (default: all ring variables) are nonzero.
    """
    params = list(parameters) if parameters is not None else list(ideal.variables)
    product = sp.Mul(*params) if params else sp.Integer(1)
    return ideal.saturation_is_unit(product)


def transform_parameters(
    ideal: PolynomialIdeal,
    new_symbols: Sequence[Union[sp.Symbol, str]],
    expressions: Sequence[sp.Expr],
) -> PolynomialIdeal:
    """Critical set in aggregated parameters q_j = h_j(p).

    Returns the preimage of ``ideal`` under Q[q] -> Q[p], q_j ↦ h_j(p),
    i.e. the ideal of the closure of the image of the TFPV variety under h.
    """
    qs = [s if isinstance(s, sp.Symbol) else sp.Symbol(str(s)) for s in new_symbols]
    return ideal.preimage(qs, expressions)
