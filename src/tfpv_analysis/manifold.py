from __future__ import annotations

"""Explicit parametrizations of variety components (slow manifolds).

A component of dimension s is parametrized by choosing s of the n state
variables as *free coordinates* and solving the component's generators for the
remaining n - s *dependent* variables:

    x_dep = φ(x_free).

The heuristic prefers dependent variables that appear linearly in the
generators (ideally with a coefficient free of state variables), because then
the generators can be solved as an affine system. The result is verified by
substituting φ back into every generator.

The success flag returned by :func:`extract_manifold` must be checked: a
parametrization with ``success=False`` is a best-effort guess (for example one
branch of a nonlinear solve) and does not necessarily describe the component.
"""

import itertools
import logging
from dataclasses import dataclass
from typing import Dict, List, Mapping, Optional, Sequence, Tuple

import sympy as sp
from sympy.solvers.solveset import NonlinearError

from .algebra import is_identically_zero
from .errors import ManifoldExtractionFailure
from .variety import VarietyComponent

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Manifold:
    """A map from s free coordinates to all n state variables.

    ``parametrization[i]`` is the expression for ``state_variables[i]``; free
    coordinates map to themselves.
    """

    state_variables: Tuple[sp.Symbol, ...]
    free_variables: Tuple[sp.Symbol, ...]
    parametrization: Tuple[sp.Expr, ...]
    source: str = "heuristic"
    component_index: Optional[int] = None
    alternatives: Tuple[Tuple[sp.Symbol, ...], ...] = ()

    def __post_init__(self) -> None:
        if len(self.parametrization) != len(self.state_variables):
            raise ValueError("parametrization must have one entry per state variable")
        if not set(self.free_variables) <= set(self.state_variables):
            raise ValueError("free variables must be state variables")
        free = set(self.free_variables)
        for x, expr in zip(self.state_variables, self.parametrization):
            if x in free and sp.sympify(expr) != x:
                raise ValueError(f"free coordinate {x} must map to itself")

    @classmethod
    def from_mapping(
        cls,
        state_variables: Sequence[sp.Symbol],
        dependent: Mapping[sp.Symbol, sp.Expr],
        *,
        component_index: Optional[int] = None,
        source: str = "override",
    ) -> "Manifold":
        """Build a manifold from ``{dependent variable: expression}``.

        This is how a user-supplied parametrization is entered; every state not
        listed is a free coordinate. Expressions must only involve free
        coordinates and parameters.
        """
        states = tuple(state_variables)
        unknown = set(dependent) - set(states)
        if unknown:
            raise ValueError(f"not state variables: {sorted(str(u) for u in unknown)}")

        free = tuple(x for x in states if x not in dependent)
        dep_set = set(dependent)
        for d, expr in dependent.items():
            if sp.sympify(expr).free_symbols & dep_set:
                raise ValueError(f"expression for {d} must not involve dependent variables")

        param = tuple(sp.sympify(dependent[x]) if x in dependent else x for x in states)
        return cls(
            state_variables=states,
            free_variables=free,
            parametrization=param,
            source=source,
            component_index=component_index,
        )

    @property
    def dependent_variables(self) -> Tuple[sp.Symbol, ...]:
        free = set(self.free_variables)
        return tuple(x for x in self.state_variables if x not in free)

    @property
    def ambiguous(self) -> bool:
        """True when other free-coordinate choices were also verified."""
        return bool(self.alternatives)

    def substitution(self) -> Dict[sp.Symbol, sp.Expr]:
        """``{dependent variable: φ(free)}``."""
        free = set(self.free_variables)
        return {x: e for x, e in zip(self.state_variables, self.parametrization) if x not in free}

    def as_dict(self) -> Dict[sp.Symbol, sp.Expr]:
        return dict(zip(self.state_variables, self.parametrization))

    def restrict(self, exprs: Sequence[sp.Expr]) -> List[sp.Expr]:
        """Evaluate expressions in the state variables along the manifold."""
        subs = self.substitution()
        return [sp.sympify(e).subs(subs) for e in exprs]

    def __str__(self) -> str:
        parts = [f"{x} = {sp.sstr(e)}" for x, e in self.substitution().items()]
        free = ", ".join(str(x) for x in self.free_variables)
        return f"Manifold(free: {free}; " + "; ".join(parts) + ")"


def _linear_scores(generators: Sequence[sp.Expr], states: Sequence[sp.Symbol]) -> Dict[sp.Symbol, int]:
    """Score each state by how often it appears linearly in the generators."""
    state_set = set(states)
    scores = {x: 0 for x in states}
    for g in generators:
        for x in states:
            if x not in g.free_symbols:
                continue
            poly = sp.Poly(g, x)
            if poly.degree() != 1:
                continue
            scores[x] += 1
            # Bonus: the coefficient of x involves no state variable.
            if not (poly.coeff_monomial(x).free_symbols & state_set):
                scores[x] += 1
    return scores


def ranked_dependent_sets(
    component: VarietyComponent,
    state_variables: Sequence[sp.Symbol],
    s: int,
) -> List[Tuple[sp.Symbol, ...]]:
    """All choices of n - s dependent variables, most promising first."""
    states = tuple(state_variables)
    scores = _linear_scores(component.generators, states)
    index = {x: i for i, x in enumerate(states)}
    choices = list(itertools.combinations(states, len(states) - int(s)))
    choices.sort(key=lambda dep: (-sum(scores[x] for x in dep), [index[x] for x in dep]))
    return choices


def _solve_affine(
    component: VarietyComponent,
    states: Tuple[sp.Symbol, ...],
    dependent: Tuple[sp.Symbol, ...],
) -> Dict[sp.Symbol, sp.Expr]:
    """Solve the component for ``dependent`` as an affine system, or raise."""
    free = [x for x in states if x not in dependent]
    dep_set = set(dependent)

    # Lex basis with the dependent variables first: elements free of them are
    # relations among the free coordinates.
    basis = component.ideal.groebner_basis(order="lex", gens=tuple(dependent) + tuple(free))
    if any(not (g.free_symbols & dep_set) for g in basis):
        raise ManifoldExtractionFailure(
            f"free coordinates {free} are not independent on the component"
        )

    try:
        A, b = sp.linear_eq_to_matrix(basis, list(dependent))
    except NonlinearError as exc:
        raise ManifoldExtractionFailure(f"generators are not affine in {list(dependent)}") from exc

    solutions = sp.linsolve((A, b), *dependent)
    if not isinstance(solutions, sp.FiniteSet) or len(solutions) != 1:
        raise ManifoldExtractionFailure(f"no unique solution for {list(dependent)}")

    values = next(iter(solutions))
    if any(v.free_symbols & dep_set for v in values):
        raise ManifoldExtractionFailure(f"solution for {list(dependent)} is underdetermined")

    return {d: sp.cancel(sp.together(v)) for d, v in zip(dependent, values)}


def _verified(component: VarietyComponent, substitution: Mapping[sp.Symbol, sp.Expr]) -> bool:
    for g in component.generators:
        value = g.subs(substitution)
        if value.has(sp.zoo, sp.nan) or not is_identically_zero(value):
            return False
    return True


def _manifold(
    states: Tuple[sp.Symbol, ...],
    solution: Mapping[sp.Symbol, sp.Expr],
    component: VarietyComponent,
    alternatives: Tuple[Tuple[sp.Symbol, ...], ...] = (),
) -> Manifold:
    return Manifold(
        state_variables=states,
        free_variables=tuple(x for x in states if x not in solution),
        parametrization=tuple(solution.get(x, x) for x in states),
        source="heuristic",
        component_index=component.index,
        alternatives=alternatives,
    )


def extract_manifold(
    component: VarietyComponent,
    state_variables: Sequence[sp.Symbol],
    s: int,
    *,
    find_alternatives: bool = True,
    nonlinear_fallback: bool = True,
) -> Tuple[Optional[Manifold], bool]:
    """Try to parametrize an s-dimensional component explicitly.

    Parameters
    ----------
    component:
        A variety component whose dimension equals ``s``.
    state_variables:
        The model's state variables (fixes the coordinate order).
    s:
        Target dimension (number of free coordinates).
    find_alternatives:
        If True, keep checking the remaining dependent-variable choices and
        record the verified ones in ``Manifold.alternatives``.
    nonlinear_fallback:
        If True and no affine solution verifies, try ``sympy.solve`` for the
        top-ranked choice and return its first branch with ``success=False``.

    Returns
    -------
    (manifold, success)
        ``manifold`` is None when nothing could be produced. A manifold with
        ``success=False`` must not be used without manual verification.
    """
    states = tuple(state_variables)
    if component.dimension != int(s):
        raise ValueError(
            f"component V{component.index} has dimension {component.dimension}, expected {s}"
        )

    choices = ranked_dependent_sets(component, states, s)

    verified: List[Tuple[Tuple[sp.Symbol, ...], Dict[sp.Symbol, sp.Expr]]] = []
    for dep in choices:
        try:
            solution = _solve_affine(component, states, dep)
        except ManifoldExtractionFailure as exc:
            logger.debug("V%d, dependent %s: %s", component.index, dep, exc)
            continue
        if not _verified(component, solution):
            logger.debug("V%d, dependent %s: substitution does not vanish", component.index, dep)
            continue
        verified.append((dep, solution))
        if not find_alternatives:
            break

    if verified:
        chosen_dep, solution = verified[0]
        others = tuple(
            tuple(x for x in states if x not in dep) for dep, _ in verified[1:]
        )
        if others:
            logger.warning(
                "V%d admits %d further explicit parametrizations (free coordinates %s); "
                "using free coordinates %s - supply an override to choose another",
                component.index,
                len(others),
                [tuple(str(x) for x in o) for o in others],
                [str(x) for x in states if x not in chosen_dep],
            )
        return _manifold(states, solution, component, others), True

    if nonlinear_fallback and choices:
        dep = choices[0]
        try:
            branches = sp.solve(list(component.generators), list(dep), dict=True)
        except NotImplementedError as exc:
            logger.debug("V%d: nonlinear solve not available: %s", component.index, exc)
            branches = []
        branches = [b for b in branches if set(b) == set(dep)]
        if branches:
            logger.warning(
                "V%d: no verified explicit parametrization; returning one of %d "
                "nonlinear branches unverified",
                component.index,
                len(branches),
            )
            return _manifold(states, branches[0], component), False

    logger.warning("V%d: manifold extraction failed", component.index)
    return None, False
