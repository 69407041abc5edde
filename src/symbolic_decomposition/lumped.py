"""Lumped-parameter factorization.

Given parameters θ, an expression f(x, θ) is rewritten as

    f = Σ_j W_j(x) α_j(θ) + w0(x),

where ``W`` and ``w0`` only reference non-parameter variables and ``α`` only
references parameters. This is the form needed to identify physical
constants from data with linear least squares: the lumped parameters ``α``
enter linearly even when ``f`` is non-linear in the original parameters.

The expression is expanded first and then visited recursively:

- sums merge terms that share the same (scaled) non-parameter factor;
- products are combined pairwise with :meth:`LumpedParameterDecomposer.multiply`,
  which does *not* merge duplicates, so long product chains can produce
  ``O(Π |W_i|)`` terms;
- non-polynomial nodes (quotients, sqrt, trig, ...) are kept whole and must
  depend only on parameters or only on non-parameters.

Duplicate detection is structural (SymPy ``==``) and the output order follows
``sympy.default_sort_key``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable, Dict, FrozenSet, Iterable, Iterator, List, Tuple

import sympy as sp

from .errors import UnfactorableMixedTermError, UnimplementedFactorablePowerError
from .expression import (
    OPAQUE_KINDS,
    ExpressionKind,
    addition_terms,
    as_expression_list,
    expression_kind,
    multiplication_factors,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LumpedFactorization:
    """The triple ``(w, alpha, w0)`` with ``e = Σ w[j]*alpha[j] + w0``.

    ``w`` and ``alpha`` have equal length and are paired by index.
    """

    w: Tuple[sp.Expr, ...] = ()
    alpha: Tuple[sp.Expr, ...] = ()
    w0: sp.Expr = sp.S.Zero

    def __post_init__(self) -> None:
        if len(self.w) != len(self.alpha):
            raise ValueError("w and alpha must have the same length")

    def __iter__(self) -> Iterator:
        return iter((self.w, self.alpha, self.w0))

    def as_expression(self) -> sp.Expr:
        """Rebuild ``Σ w[j]*alpha[j] + w0``."""
        return sp.Add(*[wj * aj for wj, aj in zip(self.w, self.alpha)], self.w0)


def _is_zero(e: sp.Expr) -> bool:
    return e.is_zero is True


def _classify(e: sp.Expr, parameters: FrozenSet[sp.Symbol]) -> Tuple[bool, bool]:
    """Return (only parameters, no parameters) for the variables of ``e``."""
    variables = e.free_symbols
    return variables <= parameters, not (variables & parameters)


@dataclass
class LumpedParameterDecomposer:
    """Decompose expressions into lumped-parameter form for fixed parameters.

    Parameters
    ----------
    parameters:
        The variables treated as parameters. Every other variable is a
        non-parameter for this decomposer.
    """

    parameters: FrozenSet[sp.Symbol]
    _handlers: Dict[ExpressionKind, Callable[[sp.Expr], LumpedFactorization]] = field(
        init=False, repr=False, compare=False
    )

    def __post_init__(self) -> None:
        self.parameters = frozenset(self.parameters)
        handlers: Dict[ExpressionKind, Callable[[sp.Expr], LumpedFactorization]] = {
            ExpressionKind.VARIABLE: self._visit_variable,
            ExpressionKind.CONSTANT: self._visit_constant,
            ExpressionKind.ADDITION: self._visit_addition,
            ExpressionKind.MULTIPLICATION: self._visit_multiplication,
            ExpressionKind.POW: self._visit_pow,
        }
        for kind in OPAQUE_KINDS:
            handlers[kind] = self._visit_opaque
        self._handlers = handlers

    def decompose(self, e: sp.Expr) -> LumpedFactorization:
        """Expand ``e`` and return its lumped-parameter factorization.

        Raises
        ------
        UnfactorableMixedTermError
            If a sub-expression depends on both parameters and non-parameters
            in a non-multiplicative way (e.g. ``sin(m*x)`` with parameter m).
        UnimplementedFactorablePowerError
            For a mixed power with numeric exponent that survives expansion.
        """
        return self._visit(sp.expand(sp.sympify(e)))

    def _visit(self, e: sp.Expr) -> LumpedFactorization:
        return self._handlers[expression_kind(e)](e)

    def _visit_variable(self, e: sp.Expr) -> LumpedFactorization:
        if e in self.parameters:
            return LumpedFactorization((sp.S.One,), (e,), sp.S.Zero)
        return LumpedFactorization((), (), e)

    def _visit_constant(self, e: sp.Expr) -> LumpedFactorization:
        return LumpedFactorization((), (), e)

    def _visit_addition(self, e: sp.Expr) -> LumpedFactorization:
        # e = c0 + Σ c_i e_i  =>  [c_1 w_1, c_2 w_2, ...]·[α_1, α_2, ...] + (c0 + Σ c_i w0_i),
        # merging the α of terms whose scaled w is identical.
        c0, terms = addition_terms(e)
        w0 = c0
        merged: Dict[sp.Expr, sp.Expr] = {}
        for c_i, e_i in terms:
            w_i, alpha_i, w0_i = self._visit(e_i)
            w0 += c_i * w0_i
            for w_ij, alpha_ij in zip(w_i, alpha_i):
                key = c_i * w_ij
                merged[key] = merged.get(key, sp.S.Zero) + alpha_ij
        keys = sorted(merged, key=sp.default_sort_key)
        return LumpedFactorization(tuple(keys), tuple(merged[k] for k in keys), w0)

    def multiply(self, a: LumpedFactorization, b: LumpedFactorization) -> LumpedFactorization:
        """Product rule for two factorizations.

        (wa·αa + w0a)(wb·αb + w0b)
            = w0a w0b + Σ_ij (wa_i wb_j)(αa_i αb_j) + Σ_j (w0a wb_j) αb_j + Σ_i (w0b wa_i) αa_i

        Groups multiplied by an identically zero residual are skipped.
        Repeated ``w`` entries are left as they are.
        """
        w: List[sp.Expr] = []
        alpha: List[sp.Expr] = []
        for wa_i, alpha_a_i in zip(a.w, a.alpha):
            for wb_j, alpha_b_j in zip(b.w, b.alpha):
                w.append(wa_i * wb_j)
                alpha.append(alpha_a_i * alpha_b_j)
        if not _is_zero(a.w0):
            w.extend(a.w0 * wb_j for wb_j in b.w)
            alpha.extend(b.alpha)
        if not _is_zero(b.w0):
            w.extend(b.w0 * wa_i for wa_i in a.w)
            alpha.extend(a.alpha)
        return LumpedFactorization(tuple(w), tuple(alpha), a.w0 * b.w0)

    def _visit_multiplication(self, e: sp.Expr) -> LumpedFactorization:
        # e = c Π factor_i; the constant starts out in the residual slot.
        c, factors = multiplication_factors(e)
        f = LumpedFactorization((), (), c)
        for factor in factors:
            f = self.multiply(f, self._visit(factor))
        if len(f.w) > len(factors):
            logger.debug("Product %s produced %d lumped terms", e, len(f.w))
        return f

    def _visit_pow(self, e: sp.Expr) -> LumpedFactorization:
        only_parameters, no_parameters = _classify(e, self.parameters)
        if only_parameters:
            return LumpedFactorization((sp.S.One,), (e,), sp.S.Zero)
        if no_parameters:
            return LumpedFactorization((), (), e)
        if e.exp.is_number:
            # Expansion splits (m*x)**2 and (m + x)**2 apart, so this is only
            # reached for non-integer exponents such as (m*x)**(3/2).
            raise UnimplementedFactorablePowerError(
                f"{e} CAN be factored into lumped parameters, but this case has not been "
                "implemented yet.",
                e,
            )
        raise UnfactorableMixedTermError(
            f"{e} cannot be factored into lumped parameters, since it depends on both "
            "parameters and non-parameter variables in a non-multiplicative way.",
            e,
        )

    def _visit_opaque(self, e: sp.Expr) -> LumpedFactorization:
        only_parameters, no_parameters = _classify(e, self.parameters)
        if only_parameters:
            return LumpedFactorization((sp.S.One,), (e,), sp.S.Zero)
        if no_parameters:
            return LumpedFactorization((), (), e)
        raise UnfactorableMixedTermError(
            f"{e} cannot be factored into lumped parameters, since it depends on both "
            "parameters and non-parameter variables.",
            e,
        )


def decompose_lumped_parameter_expression(
    e: sp.Expr,
    parameters: Iterable[sp.Symbol],
) -> LumpedFactorization:
    """Single-expression form of :func:`decompose_lumped_parameters`."""
    return LumpedParameterDecomposer(frozenset(parameters)).decompose(e)


def decompose_lumped_parameters(
    f: Iterable[sp.Expr],
    parameters: Iterable[sp.Symbol],
) -> Tuple[sp.Matrix, sp.Matrix, sp.Matrix]:
    """Write a vector of expressions as ``f = W(n) α(p) + w0(n)``.

    Parameters
    ----------
    f:
        Vector of expressions (iterable or SymPy matrix).
    parameters:
        Variables treated as parameters; all others are non-parameters.

    Returns
    -------
    (W, alpha, w0)
        ``W`` is ``len(f) × len(alpha)``, ``alpha`` and ``w0`` are column
        matrices. Each distinct parameter term appears once in ``alpha``
        (merged across rows by structural equality); ``W[i, j]`` is zero when
        row ``i`` has no ``alpha[j]`` term.

    Examples
    --------
    >>> m, k, a, x = sp.symbols("m k a x")
    >>> W, alpha, w0 = decompose_lumped_parameters([m*a + k*x], [m, k])
    >>> W, alpha.T
    (Matrix([[x, a]]), Matrix([[k, m]]))
    """
    rows = as_expression_list(f)
    decomposer = LumpedParameterDecomposer(frozenset(parameters))

    # Column of W for each distinct α, keyed by α.
    columns: Dict[sp.Expr, List[sp.Expr]] = {}
    w0 = sp.zeros(len(rows), 1)
    for i, row in enumerate(rows):
        w, alpha, row_w0 = decomposer.decompose(row)
        w0[i, 0] = row_w0
        logger.debug("Row %d: %d lumped terms", i, len(w))
        for w_j, alpha_j in zip(w, alpha):
            column = columns.setdefault(alpha_j, [sp.S.Zero] * len(rows))
            column[i] += w_j

    keys = sorted(columns, key=sp.default_sort_key)
    W = sp.zeros(len(rows), len(keys))
    for j, key in enumerate(keys):
        for i, value in enumerate(columns[key]):
            W[i, j] = value
    return W, sp.Matrix(len(keys), 1, keys), w0
