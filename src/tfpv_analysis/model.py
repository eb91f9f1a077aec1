from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Dict, List, Mapping, Optional, Sequence, Tuple, Union

import sympy as sp

from .errors import ModelError


def _sanitize_symbol_name(name: str) -> str:
    # SymPy symbols may include many characters, but we keep a conservative subset
    allowed = set("abcdefghijklmnopqrstuvwxyzABCDEFGHIJKLMNOPQRSTUVWXYZ0123456789_")
    if not name:
        raise ModelError("symbol names must be non-empty")
    cleaned = "".join(ch if (ch in allowed or ch.isalpha()) else "_" for ch in name)
    if cleaned[0].isdigit():
        cleaned = "x_" + cleaned
    return cleaned


def _check_names(names: Sequence[str], what: str) -> List[str]:
    cleaned = [_sanitize_symbol_name(str(nm)) for nm in names]
    if not cleaned:
        raise ModelError(f"at least one {what} is required")
    if len(set(cleaned)) != len(cleaned):
        raise ModelError(f"{what} names must be unique after sanitizing; got {cleaned}")
    return cleaned


@dataclass(frozen=True)
class PolynomialModel:
    """A polynomial ODE model x' = f(x, p).

    Parameters
    ----------
    state_variables:
        Ordered state symbols x_1, ..., x_n.
    parameters:
        Ordered parameter symbols p_1, ..., p_m.
    separable_mask:
        One flag per parameter; True marks parameters eligible for slow-fast
        separation ("separable"), False marks fixed O(1) parameters.
    rhs:
        The n expanded polynomial components of f.

    Notes
    -----
    Instances are immutable and hashable, so they can key caches. Use
    :func:`build_model` to construct a validated model.
    """

    state_variables: Tuple[sp.Symbol, ...]
    parameters: Tuple[sp.Symbol, ...]
    separable_mask: Tuple[bool, ...]
    rhs: Tuple[sp.Expr, ...]

    def __post_init__(self) -> None:
        n = len(self.state_variables)
        if n == 0:
            raise ModelError("the model needs at least one state variable")
        if len(self.separable_mask) != len(self.parameters):
            raise ModelError(
                f"separable_mask has length {len(self.separable_mask)}, "
                f"expected {len(self.parameters)} (one per parameter)"
            )
        if len(self.rhs) != n:
            raise ModelError(f"f must have {n} components (one per state); got {len(self.rhs)}")
        if set(self.state_variables) & set(self.parameters):
            raise ModelError("state and parameter symbols must be distinct")

        allowed = set(self.state_variables) | set(self.parameters)
        gens = list(self.state_variables) + list(self.parameters)
        for i, expr in enumerate(self.rhs):
            extra = expr.free_symbols - allowed
            if extra:
                names = ", ".join(sorted(str(s) for s in extra))
                raise ModelError(f"component {i} of f uses unknown symbols: {names}")
            if not expr.is_polynomial(*gens):
                raise ModelError(f"component {i} of f is not polynomial: {expr}")

    @property
    def n(self) -> int:
        """Number of state variables."""
        return len(self.state_variables)

    @property
    def m(self) -> int:
        """Number of parameters."""
        return len(self.parameters)

    @property
    def x(self) -> sp.Matrix:
        """State symbols as an n×1 vector."""
        return sp.Matrix(self.state_variables)

    @property
    def separable_parameters(self) -> Tuple[sp.Symbol, ...]:
        return tuple(p for p, sep in zip(self.parameters, self.separable_mask) if sep)

    @property
    def fixed_parameters(self) -> Tuple[sp.Symbol, ...]:
        return tuple(p for p, sep in zip(self.parameters, self.separable_mask) if not sep)

    def symbols(self) -> Dict[str, sp.Symbol]:
        """Mapping from name to symbol for every state variable and parameter."""
        out = {str(s): s for s in self.state_variables}
        out.update({str(p): p for p in self.parameters})
        return out

    def _resolve_assignment(
        self, assignment: Optional[Mapping[Union[sp.Symbol, str], sp.Expr]]
    ) -> Dict[sp.Symbol, sp.Expr]:
        if not assignment:
            return {}
        by_name = {str(p): p for p in self.parameters}
        params = set(self.parameters)
        out: Dict[sp.Symbol, sp.Expr] = {}
        for key, value in assignment.items():
            if isinstance(key, sp.Symbol) and key in params:
                sym = key
            elif str(key) in by_name:
                sym = by_name[str(key)]
            else:
                raise ModelError(f"Unknown parameter '{key}'. Known: {list(by_name)}")
            out[sym] = sp.sympify(value)
        return out

    def evaluate(
        self, assignment: Optional[Mapping[Union[sp.Symbol, str], sp.Expr]] = None
    ) -> Tuple[sp.Expr, ...]:
        """Substitute a (partial) parameter assignment into f.

        Returns a new tuple of expanded expressions; the model is unchanged.
        """
        subs = self._resolve_assignment(assignment)
        return tuple(sp.expand(f.subs(subs)) for f in self.rhs)

    def rhs_matrix(
        self, assignment: Optional[Mapping[Union[sp.Symbol, str], sp.Expr]] = None
    ) -> sp.Matrix:
        """Return f (after an optional substitution) as an n×1 SymPy Matrix."""
        return sp.Matrix(self.evaluate(assignment))

    def jacobian(
        self, assignment: Optional[Mapping[Union[sp.Symbol, str], sp.Expr]] = None
    ) -> sp.Matrix:
        """Return the n×n Jacobian Df with respect to the state variables."""
        F = self.rhs_matrix(assignment)
        return F.jacobian(self.state_variables).applyfunc(sp.expand)

    def summary(self) -> str:
        """Human-readable summary."""
        lines = []
        lines.append(f"PolynomialModel(n={self.n}, m={self.m})")
        lines.append("States: " + ", ".join(str(s) for s in self.state_variables))
        lines.append("Separable parameters: " + (", ".join(str(p) for p in self.separable_parameters) or "-"))
        lines.append("Fixed parameters: " + (", ".join(str(p) for p in self.fixed_parameters) or "-"))
        for xi, fi in zip(self.state_variables, self.rhs):
            lines.append(f"  {xi}' = {sp.sstr(fi)}")
        return "\n".join(lines)


def build_model(
    state_names: Sequence[str],
    parameter_names: Sequence[str],
    separable_mask: Sequence[bool],
    f: Callable[[List[sp.Symbol], List[sp.Symbol]], Sequence[sp.Expr]],
) -> PolynomialModel:
    """Construct and validate a :class:`PolynomialModel`.

    Parameters
    ----------
    state_names:
        Ordered names of the state variables.
    parameter_names:
        Ordered names of the parameters.
    separable_mask:
        Booleans (one per parameter) marking parameters eligible for slow-fast
        separation.
    f:
        Callable receiving the lists of state and parameter symbols and
        returning the n components of the vector field.

    Raises
    ------
    ModelError
        If names are malformed, lengths mismatch, or f is not polynomial.

    Examples
    --------
    >>> model = build_model(
    ...     ["s", "c"], ["k1", "km1", "k2", "e0"], [True] * 4,
    ...     lambda x, p: [-p[0]*p[3]*x[0] + (p[0]*x[0] + p[1])*x[1],
    ...                   p[0]*p[3]*x[0] - (p[0]*x[0] + p[1] + p[2])*x[1]],
    ... )
    """
    x_names = _check_names(state_names, "state variable")
    p_names = _check_names(parameter_names, "parameter")
    if len(set(x_names) & set(p_names)):
        raise ModelError("state and parameter names must be distinct")

    mask = tuple(bool(b) for b in separable_mask)
    if len(mask) != len(p_names):
        raise ModelError(
            f"separable_mask has length {len(mask)}, expected {len(p_names)} (one per parameter)"
        )

    x = [sp.Symbol(nm, real=True) for nm in x_names]
    p = [sp.Symbol(nm, positive=True) for nm in p_names]

    try:
        raw = f(list(x), list(p))
    except (TypeError, ValueError, IndexError, ZeroDivisionError) as exc:
        raise ModelError(f"evaluating f failed: {exc}") from exc

    if isinstance(raw, sp.MatrixBase):
        raw = list(raw)
    try:
        entries = list(raw)
    except TypeError as exc:
        raise ModelError("f must return a sequence of expressions") from exc

    if len(entries) != len(x):
        raise ModelError(f"f must have {len(x)} components (one per state); got {len(entries)}")

    rhs = []
    for i, entry in enumerate(entries):
        try:
            expr = sp.sympify(entry)
        except sp.SympifyError as exc:
            raise ModelError(f"component {i} of f is not a symbolic expression") from exc
        rhs.append(sp.expand(expr))

    return PolynomialModel(
        state_variables=tuple(x),
        parameters=tuple(p),
        separable_mask=mask,
        rhs=tuple(rhs),
    )
