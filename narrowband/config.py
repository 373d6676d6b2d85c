"""Beamformer configuration records.

Every config validates its fields when constructed and raises
ConfigurationError on bad input; a config that exists is usable.

Defaults
- propagation_speed: speed of light (m/s).
- diagonal_loading: 1e-6, i.e. ε = 1e-6 · trace(R)/N added to R before every
  adaptive solve. Set to 0 to disable loading.
- max_condition_number: 1e12. A loaded matrix above this raises
  NumericalInstabilityError.
- weights_output: False. When True, calling a beamformer returns (y, w).
"""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np

from .constraints import ConstraintSet
from .covariance import DEFAULT_DIAGONAL_LOADING, DEFAULT_MAX_CONDITION
from .errors import ConfigurationError
from .geometry import ArrayGeometry
from .steering import C_MPS, Direction, DirectionLike, as_direction, wavelength


def _check_geometry(geometry) -> None:
    if not isinstance(geometry, ArrayGeometry):
        raise ConfigurationError("geometry must be an ArrayGeometry")


def _check_adaptive(diagonal_loading: float, max_condition_number: float) -> None:
    if not np.isfinite(diagonal_loading) or diagonal_loading < 0:
        raise ConfigurationError("diagonal_loading must be a finite value >= 0")
    if not max_condition_number > 1.0:
        raise ConfigurationError("max_condition_number must be > 1")


@dataclass(frozen=True)
class PhaseShiftConfig:
    """Conventional (delay-and-sum) beamformer setup.

    Attributes:
        geometry: Sensor array.
        frequency: Operating (carrier) frequency in Hz.
        direction: Look direction, azimuth or (az, el) in degrees.
        propagation_speed: Wave speed in m/s.
        weights_output: Also return the weight vector on each call.
    """

    geometry: ArrayGeometry
    frequency: float
    direction: DirectionLike = Direction(0.0, 0.0)
    propagation_speed: float = C_MPS
    weights_output: bool = False

    def __post_init__(self):
        _check_geometry(self.geometry)
        wavelength(self.frequency, self.propagation_speed)
        object.__setattr__(self, "direction", as_direction(self.direction))


@dataclass(frozen=True)
class MVDRConfig:
    """MVDR beamformer setup.

    Attributes:
        geometry: Sensor array.
        frequency: Operating frequency in Hz.
        direction: Desired (distortionless) direction in degrees.
        propagation_speed: Wave speed in m/s.
        diagonal_loading: Loading factor relative to trace(R)/N.
        max_condition_number: Conditioning limit for the loaded covariance.
        weights_output: Also return the weight vector on each call.
    """

    geometry: ArrayGeometry
    frequency: float
    direction: DirectionLike = Direction(0.0, 0.0)
    propagation_speed: float = C_MPS
    diagonal_loading: float = DEFAULT_DIAGONAL_LOADING
    max_condition_number: float = DEFAULT_MAX_CONDITION
    weights_output: bool = False

    def __post_init__(self):
        _check_geometry(self.geometry)
        wavelength(self.frequency, self.propagation_speed)
        object.__setattr__(self, "direction", as_direction(self.direction))
        _check_adaptive(self.diagonal_loading, self.max_condition_number)


@dataclass(frozen=True)
class LCMVConfig:
    """LCMV beamformer setup.

    Attributes:
        constraints: Constraint matrix and desired responses.
        diagonal_loading: Loading factor relative to trace(R)/N.
        max_condition_number: Conditioning limit for the loaded covariance
            and for the constraint Gram matrix Cᴴ R⁻¹ C.
        weights_output: Also return the weight vector on each call.
    """

    constraints: ConstraintSet
    diagonal_loading: float = DEFAULT_DIAGONAL_LOADING
    max_condition_number: float = DEFAULT_MAX_CONDITION
    weights_output: bool = False

    def __post_init__(self):
        if not isinstance(self.constraints, ConstraintSet):
            raise ConfigurationError("constraints must be a ConstraintSet")
        _check_adaptive(self.diagonal_loading, self.max_condition_number)
