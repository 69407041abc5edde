"""Node-kind view of SymPy expressions.

The decomposition routines dispatch on a closed set of expression kinds.
SymPy represents some of them implicitly (a quotient is a ``Mul`` with a
negative power, a square root is ``Pow(x, 1/2)``), so this module maps a
SymPy tree onto :class:`ExpressionKind` and exposes the few structural
accessors the decomposers need.

Matching of sub-expressions elsewhere in the package is purely structural
and relies on SymPy's canonical argument order: ``2*x`` and ``x*2`` are the
same object, ``x*y`` and ``y*x`` are the same object, but ``x*(y + 1)`` and
``x*y + x`` are not.
"""

from __future__ import annotations

import enum
from typing import FrozenSet, Iterable, List, Tuple

import sympy as sp

from .errors import UnsupportedExpressionError


class ExpressionKind(enum.Enum):
    VARIABLE = "variable"
    CONSTANT = "constant"
    ADDITION = "addition"
    MULTIPLICATION = "multiplication"
    POW = "pow"
    DIVISION = "division"
    ABS = "abs"
    LOG = "log"
    EXP = "exp"
    SQRT = "sqrt"
    SIN = "sin"
    COS = "cos"
    TAN = "tan"
    ASIN = "asin"
    ACOS = "acos"
    ATAN = "atan"
    ATAN2 = "atan2"
    SINH = "sinh"
    COSH = "cosh"
    TANH = "tanh"
    MIN = "min"
    MAX = "max"
    CEIL = "ceil"
    FLOOR = "floor"
    IF_THEN_ELSE = "if_then_else"
    UNINTERPRETED_FUNCTION = "uninterpreted_function"


# Kinds whose internal structure is never decomposed, only classified by the
# variables they reference.
OPAQUE_KINDS: FrozenSet[ExpressionKind] = frozenset(
    {
        ExpressionKind.DIVISION,
        ExpressionKind.ABS,
        ExpressionKind.LOG,
        ExpressionKind.EXP,
        ExpressionKind.SQRT,
        ExpressionKind.SIN,
        ExpressionKind.COS,
        ExpressionKind.TAN,
        ExpressionKind.ASIN,
        ExpressionKind.ACOS,
        ExpressionKind.ATAN,
        ExpressionKind.ATAN2,
        ExpressionKind.SINH,
        ExpressionKind.COSH,
        ExpressionKind.TANH,
        ExpressionKind.MIN,
        ExpressionKind.MAX,
        ExpressionKind.CEIL,
        ExpressionKind.FLOOR,
        ExpressionKind.IF_THEN_ELSE,
        ExpressionKind.UNINTERPRETED_FUNCTION,
    }
)

_FUNCTION_KINDS: Tuple[Tuple[type, ExpressionKind], ...] = (
    (sp.Abs, ExpressionKind.ABS),
    (sp.log, ExpressionKind.LOG),
    (sp.exp, ExpressionKind.EXP),
    (sp.sin, ExpressionKind.SIN),
    (sp.cos, ExpressionKind.COS),
    (sp.tan, ExpressionKind.TAN),
    (sp.asin, ExpressionKind.ASIN),
    (sp.acos, ExpressionKind.ACOS),
    (sp.atan, ExpressionKind.ATAN),
    (sp.atan2, ExpressionKind.ATAN2),
    (sp.sinh, ExpressionKind.SINH),
    (sp.cosh, ExpressionKind.COSH),
    (sp.tanh, ExpressionKind.TANH),
    (sp.Min, ExpressionKind.MIN),
    (sp.Max, ExpressionKind.MAX),
    (sp.ceiling, ExpressionKind.CEIL),
    (sp.floor, ExpressionKind.FLOOR),
    (sp.Piecewise, ExpressionKind.IF_THEN_ELSE),
)


def _is_reciprocal(factor: sp.Expr) -> bool:
    """True for ``base**(-p)`` with numeric p > 0 and a non-constant base."""
    if not isinstance(factor, sp.Pow):
        return False
    base, exponent = factor.args
    return bool(exponent.is_number and exponent.is_negative and base.free_symbols)


def expression_kind(e: sp.Expr) -> ExpressionKind:
    """Classify a SymPy expression into one of the :class:`ExpressionKind` values.

    Raises
    ------
    UnsupportedExpressionError
        For relations, booleans, matrices and other non-scalar objects.
    """
    if isinstance(e, sp.Symbol):
        return ExpressionKind.VARIABLE
    if not isinstance(e, sp.Expr) or isinstance(e, sp.MatrixBase):
        raise UnsupportedExpressionError(f"Unsupported expression type {type(e).__name__}: {e}")
    if e.is_number:
        return ExpressionKind.CONSTANT
    if isinstance(e, sp.Add):
        return ExpressionKind.ADDITION
    if isinstance(e, sp.Mul):
        if any(_is_reciprocal(f) for f in e.args):
            return ExpressionKind.DIVISION
        return ExpressionKind.MULTIPLICATION
    if isinstance(e, sp.Pow):
        if e.exp == sp.S.Half:
            return ExpressionKind.SQRT
        # A bare power is a quotient only as 1/base; other exponents stay powers.
        if e.exp == sp.S.NegativeOne and e.base.free_symbols:
            return ExpressionKind.DIVISION
        return ExpressionKind.POW
    for cls, kind in _FUNCTION_KINDS:
        if isinstance(e, cls):
            return kind
    if isinstance(e, sp.Function):
        return ExpressionKind.UNINTERPRETED_FUNCTION
    raise UnsupportedExpressionError(f"Unsupported expression type {type(e).__name__}: {e}")


def is_polynomial(e: sp.Expr) -> bool:
    """True iff ``e`` is a polynomial in all of its free symbols."""
    return bool(sp.sympify(e).is_polynomial())


def addition_terms(e: sp.Expr) -> Tuple[sp.Expr, List[Tuple[sp.Expr, sp.Expr]]]:
    """Split ``e = c0 + Σ c_i e_i`` into ``(c0, [(c_i, e_i), ...])``.

    The numeric coefficients ``c_i`` are pulled off each term with
    ``as_coeff_Mul``.
    """
    c0, terms = e.as_coeff_add()
    out: List[Tuple[sp.Expr, sp.Expr]] = []
    for term in terms:
        c, rest = term.as_coeff_Mul()
        out.append((c, rest))
    return c0, out


def multiplication_factors(e: sp.Expr) -> Tuple[sp.Expr, List[sp.Expr]]:
    """Split ``e = c * Π factor_i`` into ``(c, [factor_i, ...])``.

    Each factor is either a base with unit exponent or a whole
    ``base**exponent`` unit.
    """
    c, rest = e.as_coeff_Mul()
    return c, list(sp.Mul.make_args(rest))


def sqrt_argument(e: sp.Expr) -> sp.Expr:
    """Return ``x`` for ``e = sqrt(x)``."""
    if expression_kind(e) is not ExpressionKind.SQRT:
        raise ValueError(f"{e} is not a square root")
    return e.base


def as_expression_list(expressions: Iterable[sp.Expr]) -> List[sp.Expr]:
    """Sympify a vector of expressions (iterable or SymPy matrix, row-major)."""
    if isinstance(expressions, sp.MatrixBase):
        return [sp.sympify(e) for e in list(expressions)]
    return [sp.sympify(e) for e in expressions]
