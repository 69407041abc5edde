"""Dense numeric kernels used by the L2-norm decomposition."""

from __future__ import annotations

import numpy as np
import scipy.linalg


def decompose_psd_matrix_into_xtranspose_times_x(
    Y: np.ndarray,
    zero_tol: float,
    return_empty_if_not_psd: bool = False,
) -> np.ndarray:
    """Return ``X`` with ``X.T @ X == Y`` for a symmetric PSD matrix ``Y``.

    Eigenvalues in ``[-zero_tol, zero_tol]`` are treated as zero and dropped,
    so ``X`` has one row per remaining (positive) eigenvalue.

    Parameters
    ----------
    Y:
        Symmetric ``n×n`` matrix.
    zero_tol:
        Non-negative tolerance on the eigenvalues.
    return_empty_if_not_psd:
        If True, an indefinite ``Y`` gives an empty ``0×n`` array instead of
        raising.

    Raises
    ------
    ValueError
        If ``Y`` is not square and symmetric, ``zero_tol`` is negative, or
        ``Y`` has an eigenvalue below ``-zero_tol`` (unless
        ``return_empty_if_not_psd``).
    """
    Y = np.asarray(Y, dtype=float)
    if zero_tol < 0:
        raise ValueError("zero_tol must be nonnegative")
    if Y.ndim != 2 or Y.shape[0] != Y.shape[1]:
        raise ValueError(f"Y must be square; got shape {Y.shape}")
    if not np.allclose(Y, Y.T):
        raise ValueError("Y must be symmetric")

    n = Y.shape[0]
    if n == 0:
        return np.zeros((0, 0))

    eigenvalues, eigenvectors = scipy.linalg.eigh(Y)
    if eigenvalues.min() < -zero_tol:
        if return_empty_if_not_psd:
            return np.zeros((0, n))
        raise ValueError(f"Y is not positive semidefinite. Its minimal eigenvalue is {eigenvalues.min()}")

    positive = eigenvalues > zero_tol
    # Row i of X is sqrt(λ_i) v_i'.
    return np.sqrt(eigenvalues[positive])[:, None] * eigenvectors[:, positive].T


def least_squares(A: np.ndarray, b: np.ndarray) -> np.ndarray:
    """Minimum-residual solution of ``A x = b`` (column-pivoted QR)."""
    x, *_ = scipy.linalg.lstsq(np.asarray(A, dtype=float), np.asarray(b, dtype=float), lapack_driver="gelsy")
    return x
