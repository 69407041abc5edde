"""Monomial/coefficient view of polynomial expressions.

Thin wrappers around ``sympy.Poly`` used by the affine, quadratic and L2-norm
decompositions. Monomials are exponent tuples aligned with the ordered
variable list they were built against.
"""

from __future__ import annotations

from typing import Dict, Sequence, Tuple, Union

import sympy as sp

from .errors import NonConstantCoefficientError, NonPolynomialInputError
from .expression import is_polynomial

Monomial = Tuple[int, ...]
MonomialMap = Dict[Monomial, sp.Expr]


def require_polynomial(e: sp.Expr) -> sp.Expr:
    """Return ``e`` sympified, or raise if it is not a polynomial."""
    expr = sp.sympify(e)
    if not is_polynomial(expr):
        raise NonPolynomialInputError(
            f"While decomposing an expression, we detected a non-polynomial expression: {expr}."
        )
    return expr


def monomial_to_coefficient_map(
    e: Union[sp.Expr, sp.Poly],
    variables: Sequence[sp.Symbol],
) -> MonomialMap:
    """Return ``{exponents: coefficient}`` of ``e`` as a polynomial in ``variables``.

    Symbols of ``e`` outside ``variables`` end up in the coefficients. Zero
    coefficients are omitted, so the zero polynomial maps to ``{}``.
    """
    variables = tuple(variables)
    if isinstance(e, sp.Poly):
        poly = e if tuple(e.gens) == variables else None
        expr = e.as_expr()
    else:
        poly = None
        expr = sp.expand(sp.sympify(e))

    if not variables:
        return {} if expr == 0 else {(): expr}

    if poly is None:
        poly = sp.Poly(expr, *variables)
    return {monom: coeff for monom, coeff in poly.as_dict(native=False).items() if coeff != 0}


def total_degree(monomials: MonomialMap) -> int:
    """Largest total degree among the monomials (0 for the zero polynomial)."""
    return max((sum(m) for m in monomials), default=0)


def constant_value(coefficient: sp.Expr, e: sp.Expr) -> float:
    """Convert a numeric coefficient to ``float``.

    ``e`` is the expression the coefficient came from and is only used in the
    error message.
    """
    if coefficient.free_symbols:
        raise NonConstantCoefficientError(
            f"While decomposing an expression, we detected a non-constant expression: "
            f"{coefficient} (in {e})."
        )
    return float(coefficient)
