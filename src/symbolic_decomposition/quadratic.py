"""Quadratic decomposition of polynomials of total degree <= 2."""

from __future__ import annotations

from typing import Tuple, Union

import numpy as np
import sympy as sp

from .errors import DegreeExceededError
from .polynomial import constant_value, monomial_to_coefficient_map, require_polynomial
from .variables import VariableIndex


def decompose_quadratic_polynomial(
    poly: Union[sp.Expr, sp.Poly],
    var_index: VariableIndex,
) -> Tuple[np.ndarray, np.ndarray, float]:
    """Decompose ``poly`` as ``0.5 x'Qx + b'x + c``.

    Parameters
    ----------
    poly:
        Polynomial (SymPy expression or ``Poly``) of total degree <= 2 whose
        variables are all keys of ``var_index``.
    var_index:
        Mapping variable -> position ``0..n-1`` in ``x``.

    Returns
    -------
    (Q, b, c)
        ``Q`` is ``n×n`` and symmetric by construction: a cross term
        ``a x_i x_j`` contributes ``a`` to both ``Q[i, j]`` and ``Q[j, i]``,
        and a pure term ``a x_i^2`` contributes ``2a`` to ``Q[i, i]``.

    Raises
    ------
    DegreeExceededError
        For monomials of degree > 2.
    NonConstantCoefficientError
        If a coefficient is symbolic (e.g. ``poly`` uses variables missing
        from ``var_index``).
    """
    n = len(var_index)
    variables = tuple(sorted(var_index, key=var_index.__getitem__))
    if not isinstance(poly, sp.Poly):
        poly = require_polynomial(poly)

    Q = np.zeros((n, n))
    b = np.zeros(n)
    c = 0.0
    for monom, coeff in monomial_to_coefficient_map(poly, variables).items():
        coefficient = constant_value(coeff, poly)
        degree = sum(monom)
        if degree > 2:
            term = sp.Mul(*[v ** p for v, p in zip(variables, monom)])
            raise DegreeExceededError(
                f"{term} has order higher than 2 and it cannot be handled by "
                "decompose_quadratic_polynomial."
            )
        powers = [(var_index[v], p) for v, p in zip(variables, monom) if p]
        if len(powers) == 2:
            (i, _), (j, _) = powers
            Q[i, j] += coefficient
            Q[j, i] = Q[i, j]
        elif len(powers) == 1:
            i, p = powers[0]
            if p == 2:
                Q[i, i] += 2 * coefficient
            else:
                b[i] += coefficient
        else:
            c += coefficient
    return Q, b, c
