from __future__ import annotations

"""Interoperability helpers for the computer algebra system **Singular**.

All computations in this package run in Python/SymPy. For larger problems, or
when a *certified* decomposition is wanted (SymPy has no primary
decomposition; :meth:`PolynomialIdeal.decompose` is a factorizing splitting),
the ideals can be exported to Singular.

This module provides:

- a `SingularIdeal` data structure carrying the ring (with parameters as
  coefficient field) and generators,
- conversion of SymPy polynomials into Singular syntax, and
- optional execution of Singular via subprocess (if installed).

Nothing here requires Singular at *import time*; only `SingularIdeal.run()`
assumes a `Singular` executable is available.

Notes
-----
- Singular identifiers must be plain ASCII. Symbols such as `α` or `k_{-1}`
  are renamed deterministically on export.
- Coefficient symbols become ring *parameters*: `ring R = (0,a,b),(x,y),dp;`
  means Q(a,b)[x,y], matching the ring of a `PolynomialIdeal`.
"""

import re
import subprocess
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence, Tuple

import sympy as sp

from .algebra import PolynomialIdeal
from .errors import AlgebraError


def _sanitize_var_name(name: str) -> str:
    """Convert an arbitrary string into a safe Singular identifier."""
    s = re.sub(r"[^0-9A-Za-z_]", "_", name)
    s = re.sub(r"_+", "_", s).strip("_")
    if not s:
        s = "v"
    if s[0].isdigit():
        s = f"v_{s}"
    return s


def make_symbol_name_map(symbols: Sequence[sp.Symbol]) -> Dict[sp.Symbol, str]:
    """Create a deterministic, collision-free mapping sympy Symbol -> Singular name."""
    used: Dict[str, int] = {}
    out: Dict[sp.Symbol, str] = {}

    for sym in sorted(set(symbols), key=lambda s: str(s)):
        base = _sanitize_var_name(str(sym))
        if base not in used:
            used[base] = 0
            out[sym] = base
        else:
            used[base] += 1
            out[sym] = f"{base}_{used[base]}"

    return out


def sympy_to_singular(expr: sp.Expr, name_map: Dict[sp.Symbol, str]) -> str:
    """Convert a SymPy polynomial to Singular syntax.

    Denominators depending only on coefficient symbols are cleared first, so
    the generator stays in the ring (it is a unit multiple of the original).
    """
    num = sp.numer(sp.together(sp.expand(expr)))
    repl = {s: sp.Symbol(name_map[s]) for s in name_map}
    s = sp.sstr(sp.expand(num).xreplace(repl))

    # Singular uses '^' for exponentiation.
    s = s.replace("**", "^")
    s = s.replace(" ", "")
    return s


@dataclass(frozen=True)
class SingularIdeal:
    """A polynomial ideal over Q(parameters)[variables] intended for Singular."""

    generators: Tuple[sp.Expr, ...]
    variables: Tuple[sp.Symbol, ...]
    parameters: Tuple[sp.Symbol, ...] = ()
    monomial_order: str = "dp"  # 'dp' = degree reverse lexicographic

    @classmethod
    def from_ideal(cls, ideal: PolynomialIdeal, *, monomial_order: str = "dp") -> "SingularIdeal":
        return cls(
            tuple(ideal.generators),
            tuple(ideal.variables),
            tuple(ideal.coefficient_symbols),
            str(monomial_order),
        )

    def name_map(self) -> Dict[sp.Symbol, str]:
        return make_symbol_name_map(list(self.variables) + list(self.parameters))

    def ring_declaration(self, ring_name: str = "R") -> str:
        nm = self.name_map()
        vars_sing = ",".join(nm[v] for v in self.variables)
        if self.parameters:
            field = "(0," + ",".join(nm[p] for p in self.parameters) + ")"
        else:
            field = "0"
        return f"ring {ring_name} = {field},({vars_sing}),{self.monomial_order};"

    def to_singular_script(
        self,
        *,
        ring_name: str = "R",
        ideal_name: str = "I",
        compute_groebner: bool = False,
        minimal_associated_primes: bool = False,
        eliminate: Optional[Sequence[sp.Symbol]] = None,
        saturate_by: Optional[sp.Expr] = None,
        comment: Optional[str] = None,
    ) -> str:
        """Render a Singular script defining the ring and ideal.

        Parameters
        ----------
        compute_groebner:
            Append `std` and print the standard basis.
        minimal_associated_primes:
            Load `primdec.lib` and print `minAssGTZ` (the irreducible
            components) with their dimensions.
        eliminate:
            Eliminate these ring variables (Singular expects their product).
        saturate_by:
            Saturate with respect to this polynomial (`elim.lib`, `sat`).
        comment:
            Optional header (each line prefixed with `// `).
        """
        nm = self.name_map()
        gens_sing = [sympy_to_singular(g, nm) for g in self.generators]

        lines: List[str] = []
        if comment:
            for ln in str(comment).splitlines():
                lines.append(f"// {ln}")
        lines.append(self.ring_declaration(ring_name))
        if not gens_sing:
            lines.append(f"ideal {ideal_name} = 0;")
        else:
            lines.append(f"ideal {ideal_name} = {','.join(gens_sing)};")
        lines.append("")

        if compute_groebner:
            lines.append(f"ideal {ideal_name}_gb = std({ideal_name});")
            lines.append(f"print({ideal_name}_gb);")
            lines.append("")

        if eliminate:
            elim_names = [nm.get(v, _sanitize_var_name(str(v))) for v in eliminate]
            lines.append(f"ideal {ideal_name}_elim = eliminate({ideal_name}, {'*'.join(elim_names)});")
            lines.append(f"print({ideal_name}_elim);")
            lines.append("")

        if saturate_by is not None:
            lines.append('LIB "elim.lib";')
            lines.append(f"poly {ideal_name}_h = {sympy_to_singular(saturate_by, nm)};")
            lines.append(f"ideal {ideal_name}_sat = sat({ideal_name}, {ideal_name}_h)[1];")
            lines.append(f"print({ideal_name}_sat);")
            lines.append("")

        if minimal_associated_primes:
            lines.append('LIB "primdec.lib";')
            lines.append(f"list {ideal_name}_min = minAssGTZ({ideal_name});")
            lines.append(f"int {ideal_name}_i;")
            lines.append(f"for ({ideal_name}_i = 1; {ideal_name}_i <= size({ideal_name}_min); {ideal_name}_i++)")
            lines.append("{")
            lines.append(f"  print({ideal_name}_min[{ideal_name}_i]);")
            lines.append(f"  print(dim(std({ideal_name}_min[{ideal_name}_i])));")
            lines.append("}")
            lines.append("")

        return "\n".join(lines)

    def run(
        self,
        *,
        singular_executable: str = "Singular",
        script: Optional[str] = None,
        timeout: Optional[int] = None,
    ) -> str:
        """Run Singular on the given script and return stdout.

        Parameters
        ----------
        singular_executable:
            Name or path of the Singular binary.
        script:
            If provided, run this script instead of `to_singular_script()`.
        timeout:
            Optional timeout in seconds; by default the computation is unbounded.

        Raises
        ------
        AlgebraError
            If Singular exits with a nonzero status.
        """
        if script is None:
            script = self.to_singular_script()
        if not script.rstrip().endswith("quit;"):
            script = script + "\nquit;\n"

        proc = subprocess.run(
            [singular_executable, "-q"],
            input=script.encode("utf-8"),
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            timeout=timeout,
            check=False,
        )
        out = proc.stdout.decode("utf-8", errors="replace")
        err = proc.stderr.decode("utf-8", errors="replace")
        if proc.returncode != 0:
            raise AlgebraError(
                f"Singular exited with code {proc.returncode}.\nSTDERR:\n{err}\nSTDOUT:\n{out}"
            )
        # Some Singular warnings are printed on stderr even on success; append them.
        if err.strip():
            out = out + "\n\n// STDERR\n" + err
        return out
