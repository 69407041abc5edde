"""Affine, quadratic and L2-norm decompositions of small expressions.

Run:
    python examples/affine_and_l2norm.py
"""

from __future__ import annotations

import sympy as sp

from symbolic_decomposition import (
    decompose_affine_system,
    decompose_l2_norm_expression,
    decompose_quadratic_polynomial,
    extract_variables_from_expression,
    format_affine_decomposition,
    format_l2_norm_decomposition,
)


def main() -> None:
    x, y, z = sp.symbols("x y z")

    print("Affine system")
    A, b, variables = decompose_affine_system([2 * x - y + 1, 3 * z - x, y + 0.5])
    print(format_affine_decomposition(A, b, variables))

    print("\nQuadratic form 0.5 x'Qx + b'x + c")
    e = x**2 + 4 * x * y + 3 * y**2 - x + 2
    variables, index = extract_variables_from_expression(e)
    Q, b, c = decompose_quadratic_polynomial(sp.Poly(e, *variables), index)
    print("  x =", list(variables))
    print("  Q =", Q.tolist())
    print("  b =", b.tolist())
    print("  c =", c)

    print("\nL2 norm")
    for e in (
        sp.sqrt((x + 2 * y) ** 2 + (3 * x - z + 1) ** 2),
        sp.sqrt(x**2 - y**2),
    ):
        print(f"  {e}")
        print("   ", format_l2_norm_decomposition(decompose_l2_norm_expression(e)).replace("\n", "\n    "))


if __name__ == "__main__":
    main()
