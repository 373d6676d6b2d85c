"""Spatial covariance estimation, diagonal loading and conditioning checks.

Normalization is the biased estimate R = (1/T) Σ_t x_t x_tᴴ = (1/T) Yᵀ Ȳ, with
snapshot x_t = Y[t]ᵀ as a column, so output power is wᴴ R w for y = Y·conj(w).
Diagonal loading adds ε·I with ε = factor · trace(R) / N; the default factor is 1e-6.
"""

from __future__ import annotations

import logging
import warnings
from typing import Tuple

import numpy as np
from scipy import linalg

from .errors import ConfigurationError, NumericalInstabilityError

logger = logging.getLogger(__name__)

DEFAULT_DIAGONAL_LOADING = 1e-6
DEFAULT_MAX_CONDITION = 1e12


def validate_block(block: np.ndarray, num_elements: int | None = None, name: str = "block") -> np.ndarray:
    """Return ``block`` as a (T,N) complex128 array, checking shape and finiteness."""
    Y = np.asarray(block)
    if Y.ndim != 2:
        raise ConfigurationError(f"{name} must be 2D (T samples, N elements)")
    if Y.shape[0] < 1 or Y.shape[1] < 1:
        raise ConfigurationError(f"{name} must have at least one sample and one element")
    if num_elements is not None and Y.shape[1] != num_elements:
        raise ConfigurationError(
            f"{name} has {Y.shape[1]} columns but the array has {num_elements} elements"
        )
    Y = Y.astype(np.complex128, copy=False)
    if not np.isfinite(Y).all():
        raise ConfigurationError(f"{name} contains NaN/inf")
    return Y


def sample_covariance(block: np.ndarray) -> np.ndarray:
    """R = (1/T) Yᵀ Ȳ for a (T,N) block, symmetrized to be exactly Hermitian."""
    Y = validate_block(block)
    T = Y.shape[0]
    R = (Y.T @ Y.conj()) / float(T)
    return 0.5 * (R + R.conj().T)


def _validate_covariance(R: np.ndarray) -> np.ndarray:
    R = np.asarray(R, dtype=np.complex128)
    if R.ndim != 2 or R.shape[0] != R.shape[1]:
        raise ConfigurationError("covariance must be a square (N,N) matrix")
    if not np.isfinite(R).all():
        raise ConfigurationError("covariance contains NaN/inf")
    return R


def loading_level(R: np.ndarray, factor: float = DEFAULT_DIAGONAL_LOADING) -> float:
    """ε = factor · trace(R) / N."""
    R = _validate_covariance(R)
    if factor < 0 or not np.isfinite(factor):
        raise ConfigurationError("diagonal loading factor must be >= 0")
    return float(factor) * float(np.real(np.trace(R))) / R.shape[0]


def diagonal_load(R: np.ndarray, factor: float = DEFAULT_DIAGONAL_LOADING) -> np.ndarray:
    """Return R + ε·I (a new array)."""
    R = _validate_covariance(R)
    eps = loading_level(R, factor)
    return R + eps * np.eye(R.shape[0], dtype=np.complex128)


def condition_number(R: np.ndarray) -> float:
    """2-norm condition number; inf for singular matrices."""
    s = linalg.svdvals(_validate_covariance(R))
    if s[-1] <= 0.0:
        return float("inf")
    return float(s[0] / s[-1])


def hermitian_factor(
    M: np.ndarray,
    max_condition_number: float = DEFAULT_MAX_CONDITION,
    what: str = "covariance",
) -> Tuple[np.ndarray, bool]:
    """Cholesky-factor a Hermitian positive-definite matrix after a condition check.

    Returns the ``scipy.linalg.cho_factor`` pair. Raises
    NumericalInstabilityError when cond(M) exceeds ``max_condition_number``
    or the factorization fails.
    """
    M = _validate_covariance(M)
    cond = condition_number(M)
    logger.debug("%s condition number %.3g", what, cond)
    if not np.isfinite(cond) or cond > max_condition_number:
        raise NumericalInstabilityError(f"{what} matrix is singular or ill-conditioned", cond)
    if cond > max_condition_number / 100.0:
        warnings.warn(
            f"{what} matrix is close to the conditioning limit (cond={cond:.3g})",
            RuntimeWarning,
            stacklevel=3,
        )
    try:
        return linalg.cho_factor(M, lower=True, check_finite=False)
    except linalg.LinAlgError as e:
        raise NumericalInstabilityError(f"{what} matrix is not positive definite", cond) from e


def prepare_covariance(
    R: np.ndarray,
    diagonal_loading: float = DEFAULT_DIAGONAL_LOADING,
    max_condition_number: float = DEFAULT_MAX_CONDITION,
) -> Tuple[np.ndarray, bool]:
    """Apply diagonal loading and return a Cholesky factor of the loaded R."""
    R = _validate_covariance(R)
    if diagonal_loading:
        eps = loading_level(R, diagonal_loading)
        logger.debug("diagonal loading eps=%.3g (factor %.3g)", eps, diagonal_loading)
        R = R + eps * np.eye(R.shape[0], dtype=np.complex128)
    return hermitian_factor(R, max_condition_number, what="covariance")


def solve_factored(factor: Tuple[np.ndarray, bool], B: np.ndarray) -> np.ndarray:
    """R⁻¹ B using a factor from :func:`prepare_covariance`."""
    return linalg.cho_solve(factor, B, check_finite=False)
