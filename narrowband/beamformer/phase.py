from __future__ import annotations

import numpy as np

from ..config import PhaseShiftConfig
from ..covariance import validate_block
from ..errors import ConfigurationError
from ..geometry import ArrayGeometry
from ..steering import C_MPS, DirectionLike, steering_vector
from .modes import apply_weights


def design_phase_shift_weights(
    geometry: ArrayGeometry,
    fc_hz: float,
    direction: DirectionLike,
    propagation_speed: float = C_MPS,
) -> np.ndarray:
    """Return (N,) complex weights w = a(direction) / N.

    With the package convention y = Y · conj(w), a plane wave from
    ``direction`` passes with unit gain: wᴴ a = 1 for isotropic elements.
    """
    a = steering_vector(geometry, fc_hz, direction, propagation_speed)
    return (a / float(geometry.num_elements)).astype(np.complex128)


def weights_over_band(w_fc: np.ndarray, n_freqs: int) -> np.ndarray:
    """Broadcast narrowband weights across a frequency list → (K,N)."""
    w = np.asarray(w_fc, dtype=np.complex128).ravel()
    if not isinstance(n_freqs, int) or n_freqs < 1:
        raise ConfigurationError("n_freqs must be a positive integer")
    return np.tile(w[None, :], (n_freqs, 1))


class PhaseShiftBeamformer:
    """Conventional narrowband beamformer; no training, no state."""

    def __init__(self, config: PhaseShiftConfig):
        if not isinstance(config, PhaseShiftConfig):
            raise ConfigurationError("config must be a PhaseShiftConfig")
        self.config = config
        self._weights = design_phase_shift_weights(
            config.geometry, config.frequency, config.direction, config.propagation_speed
        )
        self._weights.setflags(write=False)

    def weights(self) -> np.ndarray:
        return self._weights

    def apply(self, block: np.ndarray) -> np.ndarray:
        Y = validate_block(block, self.config.geometry.num_elements)
        return apply_weights(Y, self._weights)

    def __call__(self, block: np.ndarray):
        y = self.apply(block)
        if self.config.weights_output:
            return y, self._weights
        return y
