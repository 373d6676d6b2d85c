from __future__ import annotations

from dataclasses import dataclass
from typing import Union

import numpy as np

from ..covariance import sample_covariance, validate_block
from ..errors import ConfigurationError


@dataclass(frozen=True)
class SelfEstimated:
    """Estimate R from the block being filtered (prone to self-nulling)."""


@dataclass(frozen=True, eq=False)
class Trained:
    """Estimate R from a separate interference-plus-noise block.

    The block must not contain the desired signal and must have the same
    (T,N) shape as the blocks it is used to filter.
    """

    interference: np.ndarray

    def __post_init__(self) -> None:
        block = np.array(validate_block(self.interference, name="interference"), copy=True)
        block.setflags(write=False)
        object.__setattr__(self, "interference", block)


CovarianceMode = Union[SelfEstimated, Trained]

SELF_ESTIMATED = SelfEstimated()


def estimate_covariance(block: np.ndarray, mode: CovarianceMode) -> np.ndarray:
    """R for ``block`` under ``mode`` (biased 1/T sample covariance)."""
    if isinstance(mode, SelfEstimated):
        return sample_covariance(block)
    if isinstance(mode, Trained):
        if mode.interference.shape != np.shape(block):
            raise ConfigurationError(
                f"training block shape {mode.interference.shape} differs from "
                f"signal block shape {np.shape(block)}"
            )
        return sample_covariance(mode.interference)
    raise ConfigurationError("mode must be SelfEstimated() or Trained(interference)")


def apply_weights(block: np.ndarray, weights: np.ndarray) -> np.ndarray:
    """Beamformer output y = Y · conj(w), shape (T,)."""
    return np.asarray(block, dtype=np.complex128) @ np.conjugate(weights)
