"""Exception hierarchy for the decomposition routines.

Every failure derives from :class:`DecompositionError`, which is itself a
``ValueError`` so callers that only guard against bad input keep working.
"""

from __future__ import annotations

from typing import Optional

import sympy as sp


class DecompositionError(ValueError):
    """Base class for all decomposition failures."""


class NonPolynomialInputError(DecompositionError):
    """An expression that must be polynomial is not."""


class DegreeExceededError(DecompositionError):
    """A polynomial has a higher total degree than the decomposition supports."""


class NonzeroConstantTermError(DegreeExceededError):
    """A linear decomposition received an affine expression.

    Reported as a non-linear expression: a linear form must vanish at the
    origin.
    """


class NonConstantCoefficientError(DecompositionError):
    """A monomial coefficient that must be numeric is symbolic."""


class DimensionMismatchError(DecompositionError):
    """An output buffer does not have the expected shape."""


class UnsupportedExpressionError(DecompositionError):
    """The expression is not one of the supported node kinds."""


class LumpedParameterError(DecompositionError):
    """A sub-expression could not be written in lumped-parameter form."""

    def __init__(self, message: str, expression: Optional[sp.Expr] = None) -> None:
        super().__init__(message)
        self.expression = expression


class UnfactorableMixedTermError(LumpedParameterError):
    """The term mixes parameters and non-parameters non-multiplicatively."""


class UnimplementedFactorablePowerError(LumpedParameterError, NotImplementedError):
    """A mixed power that could be factored, but is not handled."""
