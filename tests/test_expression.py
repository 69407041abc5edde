import pytest
import sympy as sp

from symbolic_decomposition import ExpressionKind, UnsupportedExpressionError, expression_kind
from symbolic_decomposition.expression import addition_terms, multiplication_factors, sqrt_argument


@pytest.mark.parametrize(
    "build, kind",
    [
        (lambda x, y: x, ExpressionKind.VARIABLE),
        (lambda x, y: sp.Integer(3), ExpressionKind.CONSTANT),
        (lambda x, y: sp.pi, ExpressionKind.CONSTANT),
        (lambda x, y: x + y, ExpressionKind.ADDITION),
        (lambda x, y: x * y, ExpressionKind.MULTIPLICATION),
        (lambda x, y: x / 2, ExpressionKind.MULTIPLICATION),
        (lambda x, y: x / y, ExpressionKind.DIVISION),
        (lambda x, y: 1 / x, ExpressionKind.DIVISION),
        (lambda x, y: x**-2, ExpressionKind.POW),
        (lambda x, y: (x * y) ** sp.Rational(-3, 2), ExpressionKind.POW),
        (lambda x, y: sp.sqrt(x), ExpressionKind.SQRT),
        (lambda x, y: x**2, ExpressionKind.POW),
        (lambda x, y: x**y, ExpressionKind.POW),
        (lambda x, y: sp.sin(x), ExpressionKind.SIN),
        (lambda x, y: sp.exp(x), ExpressionKind.EXP),
        (lambda x, y: sp.atan2(x, y), ExpressionKind.ATAN2),
        (lambda x, y: sp.Min(x, y), ExpressionKind.MIN),
        (lambda x, y: sp.ceiling(x), ExpressionKind.CEIL),
        (lambda x, y: sp.Piecewise((x, y > 0), (0, True)), ExpressionKind.IF_THEN_ELSE),
        (lambda x, y: sp.Function("f")(x, y), ExpressionKind.UNINTERPRETED_FUNCTION),
    ],
)
def test_expression_kind(build, kind):
    x, y = sp.symbols("x y")
    assert expression_kind(build(x, y)) is kind


def test_relations_are_unsupported():
    x = sp.Symbol("x")
    with pytest.raises(UnsupportedExpressionError):
        expression_kind(sp.Eq(x, 1))


def test_multiplication_is_structurally_canonical():
    # Merging of lumped terms relies on SymPy putting products in a canonical order.
    x, m, a = sp.symbols("x m a")
    assert 2 * x == x * 2
    assert m * a == a * m
    assert hash(m * a * x) == hash(x * a * m)


def test_addition_terms_split_numeric_coefficients(xyz):
    x, y, _ = xyz
    c0, terms = addition_terms(3 + 2 * x * y - x)
    assert c0 == 3
    assert dict((e, c) for c, e in terms) == {x * y: 2, x: -1}


def test_multiplication_factors(xyz):
    x, y, _ = xyz
    c, factors = multiplication_factors(-3 * x**2 * y)
    assert c == -3
    assert set(factors) == {x**2, y}


def test_sqrt_argument(xyz):
    x, y, _ = xyz
    assert sqrt_argument(sp.sqrt(x + y)) == x + y
    with pytest.raises(ValueError):
        sqrt_argument(x + y)
