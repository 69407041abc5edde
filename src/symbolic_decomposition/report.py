"""Human-readable reporting utilities.

Small helpers that render decomposition results as plain text for the console
or Markdown:

- lumped-parameter factorizations ``f = W α + w0``,
- affine decompositions ``e = A x + b``, and
- L2-norm matches ``|A x + b|``.

Nothing here is required for the core algebra; it is strictly presentation.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Sequence

import numpy as np
import sympy as sp

from .l2norm import L2NormDecomposition


def _expr_to_str(e: sp.Expr) -> str:
    """Stable string for SymPy expressions in reports."""
    return sp.sstr(e)


@dataclass
class ReportOptions:
    """Tunable knobs for report verbosity."""

    max_terms: int = 12
    precision: int = 6
    f_prefix: str = "f"


def _format_number(value: float, precision: int) -> str:
    return f"{value:.{precision}g}"


def format_lumped_row(
    w_row: Sequence[sp.Expr],
    alpha: Sequence[sp.Expr],
    w0: sp.Expr,
    *,
    max_terms: int = 12,
) -> str:
    """Format one row as ``(w_1)*(α_1) + ... + w0``, skipping zero entries."""
    terms: List[str] = []
    for w_j, alpha_j in zip(w_row, alpha):
        if w_j == 0:
            continue
        terms.append(f"({_expr_to_str(w_j)})*({_expr_to_str(alpha_j)})")
    if w0 != 0 or not terms:
        terms.append(_expr_to_str(w0))
    if len(terms) > max_terms:
        hidden = len(terms) - max_terms
        terms = terms[:max_terms] + [f"... ({hidden} more terms)"]
    return " + ".join(terms)


def format_lumped_factorization(
    W: sp.Matrix,
    alpha: sp.Matrix,
    w0: sp.Matrix,
    *,
    options: Optional[ReportOptions] = None,
) -> str:
    """Format the output of ``decompose_lumped_parameters``."""
    opt = options or ReportOptions()
    alpha_list = list(alpha)
    lines: List[str] = []

    lines.append("Lumped parameters:")
    for j, a in enumerate(alpha_list):
        lines.append(f"  alpha{j+1} = {_expr_to_str(a)}")

    lines.append("Rows:")
    for i in range(W.rows):
        rhs = format_lumped_row(list(W.row(i)), alpha_list, w0[i, 0], max_terms=opt.max_terms)
        lines.append(f"  {opt.f_prefix}{i+1} = {rhs}")
    return "\n".join(lines)


def format_affine_decomposition(
    A: np.ndarray,
    b: np.ndarray,
    variables: Sequence[sp.Symbol],
    *,
    options: Optional[ReportOptions] = None,
) -> str:
    """Format ``A x + b`` row by row, e.g. ``f1 = 2*x - y + 1``."""
    opt = options or ReportOptions()
    lines: List[str] = []
    for i in range(A.shape[0]):
        expr = sp.Add(
            *[sp.Float(A[i, j], opt.precision) * v for j, v in enumerate(variables) if A[i, j] != 0],
            sp.Float(b[i], opt.precision) if b[i] != 0 else sp.S.Zero,
        )
        lines.append(f"{opt.f_prefix}{i+1} = {_expr_to_str(expr)}")
    return "\n".join(lines)


def format_l2_norm_decomposition(
    result: L2NormDecomposition,
    *,
    options: Optional[ReportOptions] = None,
) -> str:
    """Format an L2-norm match as ``|A x + b|`` with the rows of ``A x + b``."""
    opt = options or ReportOptions()
    if not result.is_l2norm:
        return "not an L2 norm"
    lines = ["|A x + b| with x = [" + ", ".join(str(v) for v in result.variables) + "]"]
    for i in range(result.A.shape[0]):
        row = ", ".join(_format_number(a, opt.precision) for a in result.A[i])
        lines.append(f"  [{row}] | {_format_number(result.b[i], opt.precision)}")
    return "\n".join(lines)
