from __future__ import annotations

import logging

import numpy as np

from ..config import MVDRConfig
from ..covariance import (
    DEFAULT_DIAGONAL_LOADING,
    DEFAULT_MAX_CONDITION,
    prepare_covariance,
    solve_factored,
    validate_block,
)
from ..errors import ConfigurationError, NumericalInstabilityError
from ..steering import steering_vector
from .modes import SELF_ESTIMATED, CovarianceMode, apply_weights, estimate_covariance

logger = logging.getLogger(__name__)


def mvdr_weights(
    R: np.ndarray,
    a: np.ndarray,
    diagonal_loading: float = DEFAULT_DIAGONAL_LOADING,
    max_condition_number: float = DEFAULT_MAX_CONDITION,
) -> np.ndarray:
    """Minimum variance distortionless response weights.

    Solves min wᴴ R w subject to wᴴ a = 1:

        w = R⁻¹ a / (aᴴ R⁻¹ a)

    R is loaded with ε·I, ε = diagonal_loading · trace(R)/N, before the
    solve. Raises NumericalInstabilityError if the loaded R is still
    ill-conditioned, ConfigurationError on shape mismatch.
    """
    a = np.asarray(a, dtype=np.complex128).ravel()
    R = np.asarray(R, dtype=np.complex128)
    if R.ndim != 2 or R.shape != (a.size, a.size):
        raise ConfigurationError(f"R must be ({a.size},{a.size}) to match the steering vector")
    factor = prepare_covariance(R, diagonal_loading, max_condition_number)
    Ria = solve_factored(factor, a)
    denom = np.vdot(a, Ria)
    if not np.isfinite(denom) or abs(denom) <= np.finfo(np.float64).tiny:
        raise NumericalInstabilityError("aᴴ R⁻¹ a vanished", float("inf"))
    # Complex denominator: wᴴ a == 1 up to rounding
    return (Ria / denom).astype(np.complex128)


def mvdr_spectrum(
    R: np.ndarray,
    A: np.ndarray,
    diagonal_loading: float = DEFAULT_DIAGONAL_LOADING,
    max_condition_number: float = DEFAULT_MAX_CONDITION,
) -> np.ndarray:
    """Capon spatial spectrum P_d = 1 / (a_dᴴ R⁻¹ a_d) for steering columns A (N,D)."""
    A = np.asarray(A, dtype=np.complex128)
    if A.ndim == 1:
        A = A[:, None]
    R = np.asarray(R, dtype=np.complex128)
    if R.ndim != 2 or R.shape != (A.shape[0], A.shape[0]):
        raise ConfigurationError("R and A disagree on the number of elements")
    factor = prepare_covariance(R, diagonal_loading, max_condition_number)
    RiA = solve_factored(factor, A)
    denom = np.real(np.sum(np.conjugate(A) * RiA, axis=0))
    return 1.0 / np.maximum(denom, 1e-300)


class MVDRBeamformer:
    """MVDR beamformer with self-estimated or trained covariance.

    Example
    -------
    >>> bf = MVDRBeamformer(MVDRConfig(ula, 100e6, (45, 0), weights_output=True))
    >>> y, w = bf(rx, Trained(rx_interference))
    """

    def __init__(self, config: MVDRConfig):
        if not isinstance(config, MVDRConfig):
            raise ConfigurationError("config must be an MVDRConfig")
        self.config = config
        self._steering = steering_vector(
            config.geometry, config.frequency, config.direction, config.propagation_speed
        )
        self._steering.setflags(write=False)

    @property
    def steering(self) -> np.ndarray:
        return self._steering

    def weights(self, block: np.ndarray, mode: CovarianceMode = SELF_ESTIMATED) -> np.ndarray:
        Y = validate_block(block, self.config.geometry.num_elements)
        R = estimate_covariance(Y, mode)
        logger.debug("MVDR %s weights for %d samples", type(mode).__name__, Y.shape[0])
        return mvdr_weights(
            R,
            self._steering,
            self.config.diagonal_loading,
            self.config.max_condition_number,
        )

    def apply(self, block: np.ndarray, mode: CovarianceMode = SELF_ESTIMATED) -> np.ndarray:
        return self.process(block, mode)[0]

    def process(self, block: np.ndarray, mode: CovarianceMode):
        Y = validate_block(block, self.config.geometry.num_elements)
        w = self.weights(Y, mode)
        return apply_weights(Y, w), w

    def __call__(self, block: np.ndarray, mode: CovarianceMode = SELF_ESTIMATED):
        y, w = self.process(block, mode)
        if self.config.weights_output:
            return y, w
        return y
