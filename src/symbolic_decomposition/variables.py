"""Collect the variables referenced by expressions into a stable index.

The order returned here becomes the column order of every coefficient
matrix built from it, so it is part of the API: variables appear in the
order they are first met by a pre-order walk of each SymPy tree, expressions
scanned left to right.
"""

from __future__ import annotations

from typing import Dict, Iterable, Iterator, List, MutableMapping, MutableSequence, Tuple

import sympy as sp

from .expression import as_expression_list

VariableIndex = Dict[sp.Symbol, int]


def _iter_symbols(e: sp.Expr) -> Iterator[sp.Symbol]:
    """Yield free symbols of ``e`` in pre-order (duplicates included)."""
    free = e.free_symbols
    for node in sp.preorder_traversal(e):
        if isinstance(node, sp.Symbol) and node in free:
            yield node


def extract_and_append_variables_from_expression(
    e: sp.Expr,
    variables: MutableSequence[sp.Symbol],
    index: MutableMapping[sp.Symbol, int],
) -> None:
    """Append the variables of ``e`` not yet in ``index`` to ``variables``.

    ``variables`` and ``index`` are updated in place and must describe the
    same set on entry (``index[variables[i]] == i``).
    """
    if len(variables) != len(index):
        raise ValueError("variables and index must have the same size")
    for var in _iter_symbols(sp.sympify(e)):
        if var not in index:
            index[var] = len(variables)
            variables.append(var)


def extract_variables_from_expression(e: sp.Expr) -> Tuple[Tuple[sp.Symbol, ...], VariableIndex]:
    """Return ``(variables, index)`` for a single expression."""
    variables: List[sp.Symbol] = []
    index: VariableIndex = {}
    extract_and_append_variables_from_expression(e, variables, index)
    return tuple(variables), index


def extract_variables_from_expressions(
    expressions: Iterable[sp.Expr],
) -> Tuple[Tuple[sp.Symbol, ...], VariableIndex]:
    """Return ``(variables, index)`` for a vector of expressions.

    Accepts any iterable of expressions or a SymPy matrix (read in row-major
    order).
    """
    variables: List[sp.Symbol] = []
    index: VariableIndex = {}
    for e in as_expression_list(expressions):
        extract_and_append_variables_from_expression(e, variables, index)
    return tuple(variables), index
