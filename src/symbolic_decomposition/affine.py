"""Affine and linear decompositions of polynomial expression vectors.

For expressions ``e_i`` of total degree at most one in the variables ``x``
these routines recover the numeric matrix ``M`` (and vector ``v``) with

    e = M x          (linear)
    e = M x + v      (affine).

Output arrays may be supplied through ``out=``; their shapes are checked
before any expression is inspected.
"""

from __future__ import annotations

import logging
from typing import Iterable, Optional, Sequence, Tuple, Union

import numpy as np
import sympy as sp

from .errors import DegreeExceededError, DimensionMismatchError, NonzeroConstantTermError
from .expression import as_expression_list, is_polynomial
from .polynomial import (
    MonomialMap,
    constant_value,
    monomial_to_coefficient_map,
    require_polynomial,
    total_degree,
)
from .variables import VariableIndex, extract_variables_from_expressions

logger = logging.getLogger(__name__)


def _output_buffer(out: Optional[np.ndarray], shape: Tuple[int, ...], name: str) -> np.ndarray:
    """Return a zeroed float array of ``shape``, reusing ``out`` when given."""
    if out is None:
        return np.zeros(shape)
    if not isinstance(out, np.ndarray) or out.shape != shape:
        raise DimensionMismatchError(
            f"{name} must have shape {shape}; got {getattr(out, 'shape', type(out).__name__)}"
        )
    if not np.issubdtype(out.dtype, np.floating):
        raise DimensionMismatchError(f"{name} must be a floating-point array; got dtype {out.dtype}")
    out[...] = 0.0
    return out


def _unit_monomial(j: int, n: int) -> Tuple[int, ...]:
    return tuple(1 if k == j else 0 for k in range(n))


def _degree_one_monomials(e: sp.Expr, variables: Sequence[sp.Symbol]) -> MonomialMap:
    """Monomial map of ``e`` in ``variables``; raise unless e is affine in them."""
    expr = require_polynomial(e)
    monomials = monomial_to_coefficient_map(expr, variables)
    if total_degree(monomials) > 1:
        raise DegreeExceededError(
            f"While decomposing an expression, we detected a non-linear expression: {expr} "
            f"of indeterminates {list(variables)}."
        )
    return monomials


def _fill_coefficients(row: np.ndarray, monomials: MonomialMap, n: int, e: sp.Expr) -> None:
    for j in range(n):
        coeff = monomials.get(_unit_monomial(j, n))
        row[j] = 0.0 if coeff is None else constant_value(coeff, e)


def is_affine(
    expressions: Union[sp.Expr, Iterable[sp.Expr]],
    variables: Optional[Sequence[sp.Symbol]] = None,
) -> bool:
    """True iff every expression is polynomial of total degree <= 1.

    The degree is measured in ``variables`` when given, otherwise in all of
    the expression's own variables. Non-polynomial entries are never affine,
    even when the non-polynomial part does not involve ``variables``.
    """
    if isinstance(expressions, sp.Basic) and not isinstance(expressions, sp.MatrixBase):
        expressions = [expressions]
    for e in as_expression_list(expressions):
        if not is_polynomial(e):
            return False
        vars_e = tuple(variables) if variables is not None else tuple(
            sorted(e.free_symbols, key=sp.default_sort_key)
        )
        if total_degree(monomial_to_coefficient_map(e, vars_e)) > 1:
            return False
    return True


def decompose_linear_expressions(
    expressions: Iterable[sp.Expr],
    variables: Sequence[sp.Symbol],
    *,
    out: Optional[np.ndarray] = None,
) -> np.ndarray:
    """Return ``M`` such that ``expressions == M * variables``.

    Parameters
    ----------
    expressions:
        Vector of polynomial expressions, each linear in ``variables`` and
        without a constant term.
    variables:
        Ordered variables; column ``j`` of ``M`` belongs to ``variables[j]``.
    out:
        Optional ``(len(expressions), len(variables))`` float array to fill.

    Raises
    ------
    NonPolynomialInputError, DegreeExceededError, NonzeroConstantTermError,
    NonConstantCoefficientError, DimensionMismatchError
    """
    exprs = as_expression_list(expressions)
    variables = tuple(variables)
    n = len(variables)
    M = _output_buffer(out, (len(exprs), n), "out")
    for i, e in enumerate(exprs):
        monomials = _degree_one_monomials(e, variables)
        constant = monomials.get((0,) * n)
        if constant is not None:
            raise NonzeroConstantTermError(
                f"While decomposing an expression, we detected a non-linear expression: {e} "
                f"of indeterminates {list(variables)}, with a constant term {constant}. "
                "This is an affine expression; a linear should have no constant terms."
            )
        _fill_coefficients(M[i], monomials, n, e)
    return M


def decompose_affine_expressions(
    expressions: Iterable[sp.Expr],
    variables: Sequence[sp.Symbol],
    *,
    out: Optional[Tuple[np.ndarray, np.ndarray]] = None,
) -> Tuple[np.ndarray, np.ndarray]:
    """Return ``(M, v)`` such that ``expressions == M * variables + v``.

    ``out`` is an optional pair of arrays shaped ``(rows, len(variables))``
    and ``(rows,)``.
    """
    exprs = as_expression_list(expressions)
    variables = tuple(variables)
    n = len(variables)
    M_out, v_out = out if out is not None else (None, None)
    M = _output_buffer(M_out, (len(exprs), n), "M")
    v = _output_buffer(v_out, (len(exprs),), "v")
    for i, e in enumerate(exprs):
        monomials = _degree_one_monomials(e, variables)
        _fill_coefficients(M[i], monomials, n, e)
        constant = monomials.get((0,) * n)
        v[i] = 0.0 if constant is None else constant_value(constant, e)
    return M, v


def decompose_affine_expression(
    e: sp.Expr,
    var_index: VariableIndex,
    *,
    out: Optional[np.ndarray] = None,
) -> Tuple[np.ndarray, float, int]:
    """Decompose a single affine expression as ``coeffs · x + constant``.

    Parameters
    ----------
    e:
        Polynomial expression of total degree <= 1.
    var_index:
        Mapping variable -> position in ``coeffs``; positions must be
        ``0..len(var_index)-1``.
    out:
        Optional 1-D array of length ``len(var_index)`` receiving the
        coefficients.

    Returns
    -------
    (coeffs, constant, num_nonzero)
        ``num_nonzero`` counts the variables with a non-zero coefficient, so a
        result of 0 flags a constant expression.
    """
    n = len(var_index)
    coeffs = _output_buffer(out, (n,), "out")
    variables = tuple(sorted(var_index, key=var_index.__getitem__))
    monomials = _degree_one_monomials(e, variables)

    constant = 0.0
    num_nonzero = 0
    for monom, coeff in monomials.items():
        value = constant_value(coeff, e)
        if sum(monom) == 0:
            constant = value
            continue
        var = variables[monom.index(1)]
        coeffs[var_index[var]] = value
        if value != 0:
            num_nonzero += 1
    return coeffs, constant, num_nonzero


def decompose_affine_system(
    expressions: Iterable[sp.Expr],
) -> Tuple[np.ndarray, np.ndarray, Tuple[sp.Symbol, ...]]:
    """Return ``(A, b, variables)`` with ``expressions == A * variables + b``.

    The variables are collected from the expressions themselves, in
    first-occurrence order.
    """
    exprs = as_expression_list(expressions)
    variables, index = extract_variables_from_expressions(exprs)
    A = np.zeros((len(exprs), len(variables)))
    b = np.zeros(len(exprs))
    for i, e in enumerate(exprs):
        _, b[i], _ = decompose_affine_expression(e, index, out=A[i])
    logger.debug("Decomposed %d affine expressions in %d variables", len(exprs), len(variables))
    return A, b, variables
