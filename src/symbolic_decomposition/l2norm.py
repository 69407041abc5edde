"""Recognize expressions of the form ``sqrt((A x + b)'(A x + b))``."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import NamedTuple, Optional, Tuple

import numpy as np
import sympy as sp

from .expression import ExpressionKind, expression_kind, is_polynomial, sqrt_argument
from .linalg import decompose_psd_matrix_into_xtranspose_times_x, least_squares
from .polynomial import monomial_to_coefficient_map, total_degree
from .quadratic import decompose_quadratic_polynomial
from .variables import extract_variables_from_expression

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class L2NormTolerances:
    """Tolerances for :func:`decompose_l2_norm_expression`.

    psd_tol:
        Eigenvalues of the quadratic form above ``-psd_tol`` count as
        non-negative.
    coefficient_tol:
        Maximum absolute mismatch allowed when matching the linear and
        constant coefficients.
    """

    psd_tol: float = 1e-8
    coefficient_tol: float = 1e-8

    def __post_init__(self) -> None:
        if self.psd_tol < 0:
            raise ValueError("psd_tol must be nonnegative")
        if self.coefficient_tol < 0:
            raise ValueError("coefficient_tol must be nonnegative")


class L2NormDecomposition(NamedTuple):
    """Result of :func:`decompose_l2_norm_expression`.

    When ``is_l2norm`` is True, ``e == |A @ variables + b|_2``.
    """

    is_l2norm: bool
    A: np.ndarray
    b: np.ndarray
    variables: Tuple[sp.Symbol, ...]


def _no_match(reason: str, e: sp.Expr, A=None, b=None, variables=()) -> L2NormDecomposition:
    logger.debug("%s is not an L2 norm: %s", e, reason)
    return L2NormDecomposition(
        False,
        np.zeros((0, 0)) if A is None else A,
        np.zeros(0) if b is None else b,
        tuple(variables),
    )


def _scaled_sqrt_radicand(e: sp.Expr) -> Optional[sp.Expr]:
    """Return ``c**2 * q`` for ``e = c * sqrt(q)`` with numeric c > 0, else None.

    SymPy pulls numeric content out of a square root, so ``sqrt(4*x**2)`` is
    stored as ``2*sqrt(x**2)``.
    """
    if expression_kind(e) is ExpressionKind.SQRT:
        return sqrt_argument(e)
    c, rest = e.as_coeff_Mul()
    if not c.is_positive or expression_kind(rest) is not ExpressionKind.SQRT:
        return None
    return sp.expand(c**2 * sqrt_argument(rest))


def decompose_l2_norm_expression(
    e: sp.Expr,
    psd_tol: Optional[float] = None,
    coefficient_tol: Optional[float] = None,
    *,
    tolerances: Optional[L2NormTolerances] = None,
) -> L2NormDecomposition:
    """Try to write ``e`` as the Euclidean norm ``|A x + b|_2``.

    The radicand is decomposed as ``0.5 x'Qx + r'x + s``; a PSD factor
    ``A'A = 0.5 Q`` is computed and ``b`` is the least-squares solution of
    ``A'b = 0.5 r``. The match succeeds only if that system is consistent and
    ``b'b == s``, both within ``coefficient_tol``.

    Non-matching input (not a square root, a radicand that is not a
    quadratic polynomial, an indefinite quadratic form, inconsistent
    coefficients) returns ``is_l2norm=False`` rather than raising.

    Parameters
    ----------
    e:
        Expression to inspect.
    psd_tol, coefficient_tol:
        Non-negative tolerances; override the values in ``tolerances``.
    tolerances:
        Defaults for both tolerances.
    """
    tol = tolerances or L2NormTolerances()
    tol = L2NormTolerances(
        psd_tol=tol.psd_tol if psd_tol is None else psd_tol,
        coefficient_tol=tol.coefficient_tol if coefficient_tol is None else coefficient_tol,
    )

    e = sp.sympify(e)
    arg = _scaled_sqrt_radicand(e)
    if arg is None:
        return _no_match("not a square root", e)
    if not is_polynomial(arg):
        return _no_match("the radicand is not a polynomial", e)

    variables, var_index = extract_variables_from_expression(e)
    monomials = monomial_to_coefficient_map(arg, variables)
    if total_degree(monomials) != 2:
        return _no_match("the radicand is not quadratic", e, variables=variables)

    Q, r, s = decompose_quadratic_polynomial(arg, var_index)
    Q *= 0.5

    A = decompose_psd_matrix_into_xtranspose_times_x(Q, tol.psd_tol, return_empty_if_not_psd=True)
    if A.shape[0] == 0:
        return _no_match("the quadratic form is not positive semidefinite", e, A=A, variables=variables)

    b = least_squares(A.T, 0.5 * r)
    if np.max(np.abs(A.T @ b - 0.5 * r)) > tol.coefficient_tol:
        return _no_match("the linear coefficients are inconsistent", e, A=A, b=b, variables=variables)
    if abs(s - b @ b) > tol.coefficient_tol:
        return _no_match("the constant term does not match", e, A=A, b=b, variables=variables)
    return L2NormDecomposition(True, A, b, variables)
