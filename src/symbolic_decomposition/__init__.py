"""Top-level package API for symbolic_decomposition.

This package converts symbolic (SymPy) expressions into the numeric and
algebraic forms consumed by linear-algebra and optimization back ends:

- affine/linear coefficient matrices ``e = A x + b``,
- quadratic forms ``e = 0.5 x'Qx + b'x + c``,
- L2-norm patterns ``e = |A x + b|_2``, and
- lumped-parameter factorizations ``f = W(x) α(θ) + w0(x)`` separating
  parameters θ from the remaining (state) variables.

Public API:
- variable indexing helpers
- affine, quadratic and L2-norm decompositions
- LumpedFactorization, LumpedParameterDecomposer, decompose_lumped_parameters
- reporting helpers and built-in example systems
"""

from .errors import (
    DecompositionError,
    NonPolynomialInputError,
    DegreeExceededError,
    NonzeroConstantTermError,
    NonConstantCoefficientError,
    DimensionMismatchError,
    UnsupportedExpressionError,
    LumpedParameterError,
    UnfactorableMixedTermError,
    UnimplementedFactorablePowerError,
)
from .expression import ExpressionKind, expression_kind
from .variables import (
    extract_variables_from_expression,
    extract_variables_from_expressions,
    extract_and_append_variables_from_expression,
)
from .affine import (
    is_affine,
    decompose_linear_expressions,
    decompose_affine_expressions,
    decompose_affine_expression,
    decompose_affine_system,
)
from .quadratic import decompose_quadratic_polynomial
from .linalg import decompose_psd_matrix_into_xtranspose_times_x
from .l2norm import L2NormDecomposition, L2NormTolerances, decompose_l2_norm_expression
from .lumped import (
    LumpedFactorization,
    LumpedParameterDecomposer,
    decompose_lumped_parameter_expression,
    decompose_lumped_parameters,
)
from .report import (
    ReportOptions,
    format_affine_decomposition,
    format_l2_norm_decomposition,
    format_lumped_factorization,
)
from .examples import (
    list_available_systems,
    mass_spring_damper,
    pendulum_dynamics,
    planar_quadrotor,
)

__all__ = [
    "DecompositionError",
    "NonPolynomialInputError",
    "DegreeExceededError",
    "NonzeroConstantTermError",
    "NonConstantCoefficientError",
    "DimensionMismatchError",
    "UnsupportedExpressionError",
    "LumpedParameterError",
    "UnfactorableMixedTermError",
    "UnimplementedFactorablePowerError",
    "ExpressionKind",
    "expression_kind",
    "extract_variables_from_expression",
    "extract_variables_from_expressions",
    "extract_and_append_variables_from_expression",
    "is_affine",
    "decompose_linear_expressions",
    "decompose_affine_expressions",
    "decompose_affine_expression",
    "decompose_affine_system",
    "decompose_quadratic_polynomial",
    "decompose_psd_matrix_into_xtranspose_times_x",
    "L2NormDecomposition",
    "L2NormTolerances",
    "decompose_l2_norm_expression",
    "LumpedFactorization",
    "LumpedParameterDecomposer",
    "decompose_lumped_parameter_expression",
    "decompose_lumped_parameters",
    "ReportOptions",
    "format_affine_decomposition",
    "format_l2_norm_decomposition",
    "format_lumped_factorization",
    "list_available_systems",
    "mass_spring_damper",
    "pendulum_dynamics",
    "planar_quadrotor",
]
