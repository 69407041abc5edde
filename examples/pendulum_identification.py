"""Identify the lumped parameters of a damped pendulum from sampled data.

The inverse dynamics ``tau = m l^2 theta_dd + b theta_d + m g l sin(theta)``
is nonlinear in (m, l, b) but linear in the lumped parameters
``alpha = [b, l m, l^2 m]``. This script factors the dynamics, simulates
noisy torque measurements and recovers alpha with linear least squares.

Run:
    python examples/pendulum_identification.py
"""

from __future__ import annotations

import numpy as np
import sympy as sp

from symbolic_decomposition import decompose_lumped_parameters, format_lumped_factorization, pendulum_dynamics
from symbolic_decomposition.linalg import least_squares


def main() -> None:
    f, params = pendulum_dynamics()
    W, alpha, w0 = decompose_lumped_parameters(f, params)
    print(format_lumped_factorization(W, alpha, w0))

    theta, theta_d, theta_dd, tau, g = sp.symbols("theta theta_d theta_dd tau g")
    m, l, b = params
    truth = {m: 1.5, l: 0.8, b: 0.1, g: 9.81}
    alpha_true = np.array([float(a.subs(truth)) for a in alpha])

    # W(x) alpha + w0(x) = 0 with w0 = -tau, so each sample gives W(x) alpha = tau.
    W_fn = sp.lambdify((theta, theta_d, theta_dd, g), W, "numpy")
    rng = np.random.default_rng(0)
    rows = []
    taus = []
    for _ in range(50):
        x = rng.uniform(-np.pi, np.pi), rng.normal(), rng.normal()
        row = np.asarray(W_fn(*x, truth[g]), dtype=float).ravel()
        rows.append(row)
        taus.append(row @ alpha_true + 1e-3 * rng.normal())

    alpha_hat = least_squares(np.vstack(rows), np.array(taus))

    print("\nLumped parameter     true        estimate")
    for a, t, e in zip(alpha, alpha_true, alpha_hat):
        print(f"  {str(a):<16} {t:10.5f}  {e:10.5f}")


if __name__ == "__main__":
    main()
