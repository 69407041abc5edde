import random

import pytest
import sympy as sp

import symbolic_decomposition.examples as examples
from symbolic_decomposition import (
    LumpedFactorization,
    LumpedParameterDecomposer,
    UnfactorableMixedTermError,
    UnimplementedFactorablePowerError,
    decompose_lumped_parameter_expression,
    decompose_lumped_parameters,
    list_available_systems,
)

m, k, l = sp.symbols("m k l")
a, g, theta, x, y, z = sp.symbols("a g theta x y z")


def _pairs(fact: LumpedFactorization):
    return {w: sp.expand(alpha) for w, alpha in zip(fact.w, fact.alpha)}


def _assert_reconstructs(W, alpha, w0, f):
    residual = W * alpha + w0 - sp.Matrix(f)
    assert all(sp.expand(r) == 0 for r in residual)


def test_two_parameter_sum():
    W, alpha, w0 = decompose_lumped_parameters([m * a + k * x], [m, k])
    assert w0 == sp.Matrix([0])
    assert W.shape == (1, 2)
    assert dict(zip(alpha, W.row(0))) == {m: a, k: x}


def test_single_expression_pairs_state_and_parameter_terms():
    w, alpha, w0 = decompose_lumped_parameter_expression(m * a + k * x, [m, k])
    assert dict(zip(w, alpha)) == {a: m, x: k}
    assert w0 == 0


def test_opaque_state_factor():
    W, alpha, w0 = decompose_lumped_parameters([m * g * sp.sin(theta)], [m])
    assert W == sp.Matrix([[g * sp.sin(theta)]])
    assert alpha == sp.Matrix([m])
    assert w0 == sp.Matrix([0])


def test_division_mixing_parameter_and_state_fails():
    with pytest.raises(UnfactorableMixedTermError) as info:
        decompose_lumped_parameter_expression(m / x, [m])
    assert info.value.expression == m / x


@pytest.mark.parametrize(
    "build",
    [
        lambda: sp.sin(m * x),
        lambda: sp.cos(m + x),
        lambda: sp.exp(m * x),
        lambda: sp.log(m * x),
        lambda: sp.Abs(m * x),
        lambda: sp.sqrt(m * x),
        lambda: sp.tanh(m * x),
        lambda: sp.atan2(m, x),
        lambda: sp.Max(m, x),
        lambda: sp.floor(m * x),
        lambda: sp.Piecewise((m, x > 0), (0, True)),
        lambda: sp.Function("f")(m, x),
        lambda: y * sp.sin(m * x) + k,
    ],
)
def test_opaque_nodes_mixing_parameter_and_state_fail(build):
    with pytest.raises(UnfactorableMixedTermError):
        decompose_lumped_parameter_expression(build(), [m, k])


def test_opaque_nodes_are_classified_by_their_variables():
    fact = decompose_lumped_parameter_expression(sp.sin(m) * x + m * sp.cos(x) + sp.exp(x), [m])
    assert _pairs(fact) == {x: sp.sin(m), sp.cos(x): m}
    assert fact.w0 == sp.exp(x)


def test_parameter_powers_are_lumped_terms():
    fact = decompose_lumped_parameter_expression(m**2 * x * y + sp.sqrt(k) * z, [m, k])
    assert _pairs(fact) == {x * y: m**2, z: sp.sqrt(k)}
    assert fact.w0 == 0


def test_expansion_splits_mixed_integer_powers():
    fact = decompose_lumped_parameter_expression((m * x + 1) ** 2, [m])
    assert _pairs(fact) == {x**2: m**2, 2 * x: m}
    assert fact.w0 == 1


def test_mixed_power_with_numeric_exponent_is_unimplemented():
    with pytest.raises(UnimplementedFactorablePowerError) as info:
        decompose_lumped_parameter_expression((m * x) ** sp.Rational(3, 2), [m])
    assert isinstance(info.value, NotImplementedError)


@pytest.mark.parametrize("exponent", [sp.Rational(-3, 2), sp.Rational(-1, 2), sp.Float(-0.5)])
def test_mixed_power_with_negative_numeric_exponent_is_unimplemented(exponent):
    e = (m * x) ** exponent
    assert isinstance(e, sp.Pow)
    with pytest.raises(UnimplementedFactorablePowerError):
        decompose_lumped_parameter_expression(e, [m])


def test_mixed_power_with_symbolic_exponent_fails():
    with pytest.raises(UnfactorableMixedTermError):
        decompose_lumped_parameter_expression(x**m, [m])


def test_constants_and_state_only_expressions_go_to_the_residual():
    fact = decompose_lumped_parameter_expression(sp.Integer(3), [m])
    assert fact == LumpedFactorization((), (), sp.Integer(3))
    fact = decompose_lumped_parameter_expression(x * y + 2, [m])
    assert fact.w == ()
    assert fact.w0 == x * y + 2


def test_sum_merges_terms_with_the_same_state_factor():
    fact = decompose_lumped_parameter_expression(m * a + k * a + 2 * m * x - k * x, [m, k])
    # Keys match exactly, not up to a constant factor.
    assert _pairs(fact) == {a: k + m, 2 * x: m, -x: k}


def test_sum_rule_is_linear():
    e1 = m * a + k * x + x**2
    e2 = k * a + sp.sin(theta) * m + 3
    d1 = decompose_lumped_parameter_expression(e1, [m, k])
    d2 = decompose_lumped_parameter_expression(e2, [m, k])
    d12 = decompose_lumped_parameter_expression(e1 + e2, [m, k])

    merged = {}
    for fact in (d1, d2):
        for w, alpha in zip(fact.w, fact.alpha):
            merged[w] = sp.expand(merged.get(w, 0) + alpha)

    assert _pairs(d12) == merged
    assert sp.expand(d12.w0 - d1.w0 - d2.w0) == 0


def test_product_rule_grows_multiplicatively_without_merging():
    decomposer = LumpedParameterDecomposer(frozenset([m, k]))
    f = decomposer.decompose(a * m + y * k + x)
    assert len(f.w) == 2

    f2 = decomposer.multiply(f, f)
    # |Wa||Wb| cross terms, plus one group per non-zero residual.
    assert len(f2.w) == 2 * 2 + 2 + 2
    assert len(set(f2.w)) < len(f2.w)

    f3 = decomposer.multiply(f2, f)
    assert len(f3.w) == 8 * 2 + 2 + 8
    assert sp.expand(f3.as_expression() - (a * m + y * k + x) ** 3) == 0


def test_product_rule_skips_zero_residuals():
    decomposer = LumpedParameterDecomposer(frozenset([m, k]))
    product = decomposer.multiply(decomposer.decompose(m * a), decomposer.decompose(k * y))
    assert product == LumpedFactorization((a * y,), (k * m,), sp.S.Zero)


def test_batch_merges_parameter_terms_across_rows():
    f, params = examples.mass_spring_damper()
    c = params[-1]
    x1_d, x2_d = sp.symbols("x1_d x2_d")

    # Within one row, c appears once per distinct state factor.
    row = decompose_lumped_parameter_expression(f[0], params)
    assert sum(1 for alpha in row.alpha if alpha == c) == 2

    W, alpha, w0 = decompose_lumped_parameters(f, params)
    columns = list(alpha)
    assert len(columns) == len(set(columns))
    j = columns.index(c)
    assert W[0, j] == x1_d - x2_d
    assert W[1, j] == x2_d - x1_d
    _assert_reconstructs(W, alpha, w0, f)


def test_duplicate_parameter_terms_are_merged_structurally():
    W, alpha, w0 = decompose_lumped_parameters([a * m, 2 * m * x, sp.Integer(1)], [m])
    assert alpha == sp.Matrix([m])
    assert W == sp.Matrix([[a], [2 * x], [0]])
    assert w0 == sp.Matrix([0, 0, 1])


def test_pendulum():
    f, params = examples.pendulum_dynamics()
    W, alpha, w0 = decompose_lumped_parameters(f, params)
    theta_, theta_d, theta_dd, tau, g_ = sp.symbols("theta theta_d theta_dd tau g")
    b_ = params[2]
    assert dict(zip(alpha, W.row(0))) == {
        l**2 * m: theta_dd,
        b_: theta_d,
        l * m: g_ * sp.sin(theta_),
    }
    assert w0 == sp.Matrix([-tau])


@pytest.mark.parametrize("name", sorted(list_available_systems()))
def test_example_systems_factor_into_state_and_parameter_parts(name):
    f, params = getattr(examples, name)()
    W, alpha, w0 = decompose_lumped_parameters(f, params)
    params = set(params)

    _assert_reconstructs(W, alpha, w0, f)
    assert all(entry.free_symbols <= params for entry in alpha)
    assert all(not (entry.free_symbols & params) for entry in W)
    assert all(not (entry.free_symbols & params) for entry in w0)


def _random_polynomial(rng, leaves, depth):
    if depth == 0:
        return rng.choice(leaves)
    op = rng.choice(["add", "mul", "pow"])
    if op == "add":
        return _random_polynomial(rng, leaves, depth - 1) + _random_polynomial(rng, leaves, depth - 1)
    if op == "mul":
        return _random_polynomial(rng, leaves, depth - 1) * _random_polynomial(rng, leaves, depth - 1)
    return _random_polynomial(rng, leaves, depth - 1) ** rng.choice([2, 3])


def test_expansion_leaves_no_mixed_integer_powers():
    rng = random.Random(1234)
    parameters = {m, k}
    leaves = [m, k, x, y, sp.Integer(2), sp.Integer(-1)]
    for _ in range(40):
        e = _random_polynomial(rng, leaves, 3)
        expanded = sp.expand(e)
        for node in sp.preorder_traversal(expanded):
            if isinstance(node, sp.Pow) and node.exp.is_Integer:
                symbols = node.base.free_symbols
                assert symbols <= parameters or not (symbols & parameters)

        fact = decompose_lumped_parameter_expression(e, parameters)
        assert sp.expand(fact.as_expression() - e) == 0
