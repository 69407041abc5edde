from __future__ import annotations

from typing import Dict, List, Tuple

import sympy as sp

ExampleSystem = Tuple[List[sp.Expr], List[sp.Symbol]]


def pendulum_dynamics() -> ExampleSystem:
    """Damped pendulum, inverse dynamics form.

    Equation:
        tau = m l^2 theta_dd + b theta_d + m g l sin(theta)

    The expression returned is ``m l^2 theta_dd + b theta_d + m g l sin(theta) - tau``.

    Non-parameters: theta, theta_d, theta_dd, tau, g
    Parameters: m, l, b
    """
    theta, theta_d, theta_dd, tau, g = sp.symbols("theta theta_d theta_dd tau g")
    m, l, b = sp.symbols("m l b")
    f = m * l**2 * theta_dd + b * theta_d + m * g * l * sp.sin(theta) - tau
    return [f], [m, l, b]


def mass_spring_damper() -> ExampleSystem:
    """Two masses coupled by a spring and damper, each anchored to a wall.

    Equations (residual form, one row per mass):
        m1 x1_dd + c (x1_d - x2_d) + k1 x1 + k (x1 - x2) - u1
        m2 x2_dd + c (x2_d - x1_d) + k2 x2 + k (x2 - x1) - u2

    Non-parameters: x1, x2 and their derivatives, u1, u2
    Parameters: m1, m2, k1, k2, k, c
    """
    x1, x2, x1_d, x2_d, x1_dd, x2_dd, u1, u2 = sp.symbols("x1 x2 x1_d x2_d x1_dd x2_dd u1 u2")
    m1, m2, k1, k2, k, c = sp.symbols("m1 m2 k1 k2 k c")
    f1 = m1 * x1_dd + c * (x1_d - x2_d) + k1 * x1 + k * (x1 - x2) - u1
    f2 = m2 * x2_dd + c * (x2_d - x1_d) + k2 * x2 + k * (x2 - x1) - u2
    return [f1, f2], [m1, m2, k1, k2, k, c]


def planar_quadrotor() -> ExampleSystem:
    """Planar quadrotor (x, z, theta), inverse dynamics form.

    Equations:
        m x_dd = -(u1 + u2) sin(theta)
        m z_dd =  (u1 + u2) cos(theta) - m g
        I theta_dd = r (u1 - u2)

    Non-parameters: x_dd, z_dd, theta, theta_dd, u1, u2
    Parameters: m, I, r, g
    """
    x_dd, z_dd, theta, theta_dd, u1, u2 = sp.symbols("x_dd z_dd theta theta_dd u1 u2")
    m, inertia, r, g = sp.symbols("m I r g")
    f = [
        m * x_dd + (u1 + u2) * sp.sin(theta),
        m * z_dd - (u1 + u2) * sp.cos(theta) + m * g,
        inertia * theta_dd - r * (u1 - u2),
    ]
    return f, [m, inertia, r, g]


def list_available_systems() -> Dict[str, str]:
    """Names of the built-in example systems with one-line descriptions."""
    return {
        "pendulum_dynamics": "Damped pendulum; parameters m, l, b",
        "mass_spring_damper": "Two coupled masses; parameters m1, m2, k1, k2, k, c",
        "planar_quadrotor": "Planar quadrotor; parameters m, I, r, g",
    }
