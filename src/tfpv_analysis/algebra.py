from __future__ import annotations

"""Polynomial ideals over Q(coefficients)[variables].

This is the single boundary between the reduction engine and the
commutative-algebra kernel. Everything is computed with SymPy's Groebner
machinery; no other module calls ``sympy.groebner`` directly.

The ring of an ideal is

    Q(c_1, ..., c_r)[x_1, ..., x_n],

i.e. the coefficient symbols ``c`` (typically the parameters that are *not*
set to zero by a TFPV candidate) are treated as nonzero field elements, while
the ``x`` are the ring variables.

Notes
-----
- ``decompose`` computes the minimal associated primes. The ideal is first
  split along nontrivial factors of generators and Groebner basis elements;
  every remaining piece is then reduced to the zero-dimensional case over
  Q(c, U) for a maximal independent set U (Gianni-Trager-Zacharias) and
  either split by a reducible eliminant or proven prime in shape position.
  Pieces that resist all tried linear forms raise ``AlgebraError``; export
  them to Singular via :meth:`PolynomialIdeal.to_singular` (``minAssGTZ``).
- Kernel failures are re-raised as :class:`~tfpv_analysis.errors.AlgebraError`.
"""

import itertools
import logging
from contextlib import contextmanager
from dataclasses import dataclass
from functools import lru_cache
from typing import Dict, Iterator, List, Mapping, Optional, Sequence, Tuple

import sympy as sp
from sympy.polys.polyerrors import BasePolynomialError

from .errors import AlgebraError

logger = logging.getLogger(__name__)


@contextmanager
def _kernel(operation: str) -> Iterator[None]:
    try:
        yield
    except BasePolynomialError as exc:
        raise AlgebraError(f"{operation} failed: {exc}") from exc


def coefficient_domain(symbols: Sequence[sp.Symbol]):
    """Return the SymPy domain Q(symbols) (or QQ when there are none)."""
    if not symbols:
        return sp.QQ
    return sp.QQ.frac_field(*symbols)


def is_identically_zero(expr: sp.Expr) -> bool:
    """Exact zero test for rational (and mildly algebraic) expressions."""
    expr = sp.sympify(expr)
    if expr == 0:
        return True
    num = sp.numer(sp.together(sp.expand(expr)))
    num = sp.expand(num)
    if num == 0:
        return True
    return sp.simplify(num) == 0


# Bases are shared between sessions; keep only the most recent ones.
GROEBNER_CACHE_SIZE = 256


@lru_cache(maxsize=GROEBNER_CACHE_SIZE)
def _groebner(
    generators: Tuple[sp.Expr, ...],
    gens: Tuple[sp.Symbol, ...],
    coefficient_symbols: Tuple[sp.Symbol, ...],
    order: str,
    method: str,
) -> sp.GroebnerBasis:
    with _kernel(f"groebner ({order}) over {len(gens)} variables"):
        return sp.groebner(
            list(generators),
            *gens,
            order=order,
            method=method,
            domain=coefficient_domain(coefficient_symbols),
        )


def _state_factors(expr: sp.Expr, variables: Sequence[sp.Symbol]) -> List[Tuple[sp.Expr, int]]:
    """Irreducible factors of ``expr`` that involve at least one ring variable.

    Factors depending only on coefficient symbols are units of the ring and are
    dropped.
    """
    num = sp.expand(sp.numer(sp.together(expr)))
    with _kernel("factorization"):
        _, factors = sp.factor_list(num)
    vs = set(variables)
    return [(f, int(k)) for f, k in factors if f.free_symbols & vs]


def _independent_set(supports: Sequence[frozenset], n: int) -> Optional[Tuple[int, ...]]:
    """A largest set of variable indices containing no leading support (None if none)."""
    for size in range(n, -1, -1):
        for subset in itertools.combinations(range(n), size):
            s = set(subset)
            if not any(sup <= s for sup in supports):
                return subset
    return None


def _split_along(generators: Sequence[sp.Expr], variables: Sequence[sp.Symbol]) -> Optional[List[List[sp.Expr]]]:
    """Generator lists whose varieties cover V(generators), or None.

    The first generator with a nontrivial factorization is replaced, in turn,
    by each of its distinct factors.
    """
    for i, g in enumerate(generators):
        factors = _state_factors(g, variables)
        if len(factors) > 1 or any(k > 1 for _, k in factors):
            rest = list(generators[:i]) + list(generators[i + 1:])
            logger.debug("splitting along %d factors of %s", len(factors), g)
            return [rest + [f] for f, _ in factors]
    return None


def _separating_forms(variables: Sequence[sp.Symbol]) -> Iterator[sp.Expr]:
    """The last variable, then a few integer linear forms in all variables."""
    yield variables[-1]
    if len(variables) > 1:
        for c in (1, 2, 3):
            yield sp.Add(*[c**i * v for i, v in enumerate(variables)])


def _in_shape_position(basis: Sequence[sp.Expr], variables: Sequence[sp.Symbol], w: sp.Symbol) -> bool:
    """True iff the lex basis reads {v - g_v(w) for v in variables} + {p(w)}."""
    if len(basis) != len(variables) + 1:
        return False
    vs = set(variables)
    solved = set()
    for g in basis:
        present = g.free_symbols & vs
        if len(present) != 1:
            continue
        v = next(iter(present))
        poly = sp.Poly(g, v)
        if poly.degree() == 1 and w not in poly.coeff_monomial(v).free_symbols:
            solved.add(v)
    return solved == vs


@dataclass(frozen=True)
class PolynomialIdeal:
    """An ideal in Q(coefficient_symbols)[variables] given by generators."""

    generators: Tuple[sp.Expr, ...]
    variables: Tuple[sp.Symbol, ...]
    coefficient_symbols: Tuple[sp.Symbol, ...] = ()
    method: str = "buchberger"

    @classmethod
    def from_generators(
        cls,
        generators: Sequence[sp.Expr],
        variables: Sequence[sp.Symbol],
        *,
        coefficient_symbols: Optional[Sequence[sp.Symbol]] = None,
        method: str = "buchberger",
    ) -> "PolynomialIdeal":
        gens: List[sp.Expr] = []
        seen = set()
        for g in generators:
            gg = sp.expand(sp.sympify(g))
            if gg == 0 or gg in seen:
                continue
            seen.add(gg)
            gens.append(gg)

        if coefficient_symbols is None:
            syms: set = set()
            for g in gens:
                syms |= g.free_symbols
            coefficient_symbols = sorted(syms - set(variables), key=lambda s: str(s))

        return cls(tuple(gens), tuple(variables), tuple(coefficient_symbols), str(method))

    # -----------------------------
    # Groebner bases and membership
    # -----------------------------

    def is_zero(self) -> bool:
        return not self.generators

    def groebner_basis(
        self,
        *,
        order: str = "grevlex",
        gens: Optional[Sequence[sp.Symbol]] = None,
    ) -> List[sp.Expr]:
        """Reduced Groebner basis (as expressions). Empty for the zero ideal."""
        if self.is_zero():
            return []
        ring_gens = tuple(gens) if gens is not None else self.variables
        gb = _groebner(self.generators, ring_gens, self.coefficient_symbols, order, self.method)
        return list(gb.exprs)

    def reduced(self) -> "PolynomialIdeal":
        """Same ideal, generated by its reduced grevlex Groebner basis."""
        return PolynomialIdeal(
            tuple(self.groebner_basis()), self.variables, self.coefficient_symbols, self.method
        )

    def is_unit(self) -> bool:
        """True iff the ideal is the whole ring (its variety is empty)."""
        basis = self.groebner_basis()
        return len(basis) == 1 and basis[0].is_number and basis[0] != 0

    def reduce(self, expr: sp.Expr) -> sp.Expr:
        """Normal form of ``expr`` modulo the grevlex Groebner basis."""
        expr = sp.expand(sp.sympify(expr))
        if self.is_zero() or expr == 0:
            return expr
        gb = _groebner(self.generators, self.variables, self.coefficient_symbols, "grevlex", self.method)
        with _kernel("reduction"):
            _, remainder = gb.reduce(expr)
        return remainder

    def contains(self, expr: sp.Expr) -> bool:
        """Ideal membership test."""
        if self.is_zero():
            return is_identically_zero(expr)
        return self.reduce(expr) == 0

    def contains_ideal(self, other: "PolynomialIdeal") -> bool:
        return all(self.contains(g) for g in other.generators)

    def equals(self, other: "PolynomialIdeal") -> bool:
        return self.contains_ideal(other) and other.contains_ideal(self)

    # -----------------------------
    # Dimension and decomposition
    # -----------------------------

    def independent_variables(self) -> Optional[Tuple[sp.Symbol, ...]]:
        """A maximal independent set of variables modulo the ideal.

        Read off the grevlex leading monomials; its size is the dimension.
        None for the unit ideal.
        """
        if self.is_zero():
            return self.variables
        if self.is_unit():
            return None

        gb = _groebner(self.generators, self.variables, self.coefficient_symbols, "grevlex", self.method)
        supports = []
        for p in gb.polys:
            lead = p.monoms(order="grevlex")[0]
            supports.append(frozenset(i for i, e in enumerate(lead) if e))
        subset = _independent_set(supports, len(self.variables))
        if subset is None:
            return None
        return tuple(self.variables[i] for i in subset)

    def dimension(self) -> int:
        """Krull dimension over the coefficient field; -1 for the unit ideal."""
        independent = self.independent_variables()
        return -1 if independent is None else len(independent)

    def with_generators(self, extra: Sequence[sp.Expr]) -> "PolynomialIdeal":
        return PolynomialIdeal.from_generators(
            list(self.generators) + list(extra),
            self.variables,
            coefficient_symbols=self.coefficient_symbols,
            method=self.method,
        )

    def decompose(self) -> List["PolynomialIdeal"]:
        """Split the ideal into its minimal primes (see module notes).

        Components are returned generated by their reduced Groebner bases, sorted
        by decreasing dimension and then by generator text.

        Raises
        ------
        AlgebraError
            If a component can be neither split further nor shown to be prime.
        """
        found: List[PolynomialIdeal] = []
        pending: List[PolynomialIdeal] = [self]

        while pending:
            ideal = pending.pop()
            if ideal.is_zero():
                found.append(ideal)
                continue

            # Factor the given generators first: this avoids a Groebner basis
            # of the unsplit ideal.
            branches = _split_along(ideal.generators, self.variables)
            if branches is None:
                if ideal.is_unit():
                    continue
                branches = _split_along(ideal.groebner_basis(), self.variables)

            if branches is not None:
                pending.extend(ideal._with_generator_list(b) for b in branches)
                continue

            pieces = ideal._generic_split()
            if pieces is None:
                found.append(ideal.reduced())
            else:
                pending.extend(pieces)

        components = _minimal_components(found)
        components.sort(key=lambda c: (-c.dimension(), [sp.sstr(g) for g in c.generators]))
        return components

    def _with_generator_list(self, generators: Sequence[sp.Expr]) -> "PolynomialIdeal":
        return PolynomialIdeal.from_generators(
            generators,
            self.variables,
            coefficient_symbols=self.coefficient_symbols,
            method=self.method,
        )

    def _generic_split(self) -> Optional[List["PolynomialIdeal"]]:
        """Prove the ideal prime (None) or return larger ideals covering its variety.

        With U a maximal independent set and V the other variables, the ideal
        is compared with its contraction from Q(c, U)[V] (saturation by the
        leading coefficients of a lex basis with V > U), and the zero-dimensional
        extension is checked in generic position: the eliminant of a separating
        linear form must be irreducible and the basis must be in shape position.
        """
        independent = self.independent_variables()
        if independent is None:
            return []
        U = tuple(independent)
        V = tuple(v for v in self.variables if v not in set(U))

        if U:
            h = self._leading_coefficient_product(U, V)
            if h is not None:
                saturated = self.saturate(h)
                if not saturated.equals(self):
                    logger.debug("%s splits off the zero set of %s", self, h)
                    return [saturated, self.with_generators([h])]

        field = tuple(self.coefficient_symbols) + U
        w = sp.Dummy("w")
        gens = V + (w,)
        for form in _separating_forms(V):
            basis = list(
                _groebner(self.generators + (w - form,), gens, field, "lex", self.method).exprs
            )
            eliminants = [g for g in basis if not (g.free_symbols & set(V))]
            if len(eliminants) != 1:
                raise AlgebraError(f"{self} is not zero-dimensional over Q({', '.join(map(str, field))})")

            factors = _state_factors(eliminants[0], (w,))
            if len(factors) > 1 or any(k > 1 for _, k in factors):
                logger.debug("eliminant of %s splits into %d factors", form, len(factors))
                return [self.with_generators([f.subs(w, form)]) for f, _ in factors]
            if _in_shape_position(basis, V, w):
                return None

        raise AlgebraError(f"could not establish that {self} is prime")

    def _leading_coefficient_product(self, U: Sequence[sp.Symbol], V: Sequence[sp.Symbol]) -> Optional[sp.Expr]:
        """Product of the U-dependent factors of the leading coefficients in V."""
        basis = self.groebner_basis(order="lex", gens=tuple(V) + tuple(U))
        factors = set()
        for g in basis:
            lc = sp.Poly(g, *V).LC()
            factors.update(f for f, _ in _state_factors(lc, U))
        if not factors:
            return None
        return sp.Mul(*sorted(factors, key=sp.sstr))

    # -----------------------------
    # Elimination, saturation, ring maps
    # -----------------------------

    def eliminate(self, variables: Sequence[sp.Symbol]) -> "PolynomialIdeal":
        """Return I ∩ Q(c)[remaining variables] (lex Groebner basis)."""
        drop = set(variables)
        elim = [v for v in self.variables if v in drop]
        keep = [v for v in self.variables if v not in drop]

        if self.is_zero():
            return PolynomialIdeal((), tuple(keep), self.coefficient_symbols, self.method)

        basis = self.groebner_basis(order="lex", gens=tuple(elim + keep))
        kept = [g for g in basis if not (g.free_symbols & drop)]
        return PolynomialIdeal.from_generators(
            kept, keep, coefficient_symbols=self.coefficient_symbols, method=self.method
        )

    def saturate(self, expr: sp.Expr) -> "PolynomialIdeal":
        """Return I : expr^∞ via I + <1 - t*expr> and elimination of t."""
        t = sp.Dummy("t")
        extended = PolynomialIdeal.from_generators(
            list(self.generators) + [1 - t * expr],
            (t,) + self.variables,
            coefficient_symbols=self.coefficient_symbols,
            method=self.method,
        )
        return extended.eliminate([t])

    def saturation_is_unit(self, expr: sp.Expr) -> bool:
        """True iff I : expr^∞ is the whole ring.

        Equivalent to ``saturate(expr).is_unit()`` but needs no elimination order:
        1 lies in the saturation iff 1 lies in I + <1 - t*expr>.
        """
        t = sp.Dummy("t")
        extended = PolynomialIdeal.from_generators(
            list(self.generators) + [1 - t * expr],
            self.variables + (t,),
            coefficient_symbols=self.coefficient_symbols,
            method=self.method,
        )
        return extended.is_unit()

    def preimage(
        self,
        source_symbols: Sequence[sp.Symbol],
        images: Sequence[sp.Expr],
    ) -> "PolynomialIdeal":
        """Preimage of I under the ring map Q(c)[source] -> Q(c)[variables].

        The map sends ``source_symbols[j]`` to ``images[j]``. Computed as the
        elimination ideal of the graph ideal I + <s_j - images_j>.
        """
        sources = tuple(source_symbols)
        if len(sources) != len(images):
            raise ValueError("source_symbols and images must have the same length")
        if set(sources) & set(self.variables):
            raise ValueError("source_symbols must be distinct from the ideal's variables")

        graph = list(self.generators) + [s - sp.sympify(h) for s, h in zip(sources, images)]
        extended = PolynomialIdeal.from_generators(
            graph,
            self.variables + sources,
            coefficient_symbols=self.coefficient_symbols,
            method=self.method,
        )
        return extended.eliminate(self.variables)

    def substitute(self, mapping: Mapping[sp.Symbol, sp.Expr]) -> "PolynomialIdeal":
        """Image of the generators under a substitution of variables/coefficients."""
        subs = dict(mapping)
        gens = [sp.expand(g.subs(subs)) for g in self.generators]
        variables = [v for v in self.variables if v not in subs]
        coeffs = [c for c in self.coefficient_symbols if c not in subs]
        return PolynomialIdeal.from_generators(
            gens, variables, coefficient_symbols=coeffs, method=self.method
        )

    # -----------------------------
    # Export
    # -----------------------------

    def to_singular(self):
        """Package this ideal as a :class:`~tfpv_analysis.singular.SingularIdeal`."""
        from .singular import SingularIdeal  # local import: singular.py imports this module

        return SingularIdeal.from_ideal(self)

    def __str__(self) -> str:
        gens = ", ".join(sp.sstr(g) for g in self.generators) if self.generators else "0"
        return f"<{gens}>"


def _minimal_components(ideals: Sequence[PolynomialIdeal]) -> List[PolynomialIdeal]:
    """Remove duplicates and ideals that strictly contain another ideal."""
    unique: List[PolynomialIdeal] = []
    for ideal in ideals:
        if any(ideal.equals(other) for other in unique):
            continue
        unique.append(ideal)

    # A larger ideal has a smaller variety: drop it.
    return [
        ideal
        for ideal in unique
        if not any(other is not ideal and ideal.contains_ideal(other) for other in unique)
    ]


def jacobian_minors(J: sp.Matrix, k: int) -> List[sp.Expr]:
    """All nonzero k×k minors of J, expanded and de-duplicated (up to sign)."""
    if k <= 0:
        return [sp.Integer(1)]
    if k > min(J.rows, J.cols):
        return []

    out: List[sp.Expr] = []
    seen: Dict[sp.Expr, bool] = {}
    for rows in itertools.combinations(range(J.rows), k):
        for cols in itertools.combinations(range(J.cols), k):
            minor = sp.expand(J.extract(list(rows), list(cols)).det(method="berkowitz"))
            if minor == 0 or minor in seen or -minor in seen:
                continue
            seen[minor] = True
            out.append(minor)
    return out
