from __future__ import annotations

import math
from typing import NamedTuple, Tuple, Union

import numpy as np

from .errors import ConfigurationError
from .geometry import ArrayGeometry


C_MPS = 299_792_458.0  # speed of light [m/s]


class Direction(NamedTuple):
    """Arrival direction in degrees."""

    az: float
    el: float = 0.0


DirectionLike = Union[Direction, Tuple[float, float], float]


def _wrap_az_deg(az: np.ndarray | float) -> np.ndarray:
    t = np.asarray(az, dtype=np.float64)
    # Wrap to [-180, 180)
    t = (t + 180.0) % 360.0 - 180.0
    if t.ndim == 0:
        return np.array(-180.0 if float(t) == 180.0 else float(t), dtype=np.float64)
    t[t == 180.0] = -180.0
    return t


def _check_el_deg(el: np.ndarray | float) -> np.ndarray:
    e = np.asarray(el, dtype=np.float64)
    if np.any(np.abs(e) > 90.0):
        raise ConfigurationError("elevation must lie in [-90, 90] degrees")
    return e


def as_direction(direction: DirectionLike) -> Direction:
    """Coerce a scalar azimuth or an (az, el) pair to a validated Direction."""
    if np.isscalar(direction):
        az, el = float(direction), 0.0
    else:
        vals = np.asarray(direction, dtype=np.float64).ravel()
        if vals.size == 1:
            az, el = float(vals[0]), 0.0
        elif vals.size == 2:
            az, el = float(vals[0]), float(vals[1])
        else:
            raise ConfigurationError("direction must be az or (az, el) in degrees")
    if not (math.isfinite(az) and math.isfinite(el)):
        raise ConfigurationError("direction contains NaN/inf")
    _check_el_deg(el)
    return Direction(float(_wrap_az_deg(az)), el)


def _angles(az_deg, el_deg) -> Tuple[np.ndarray, np.ndarray]:
    az = np.atleast_1d(np.asarray(az_deg, dtype=np.float64)).ravel()
    el = np.atleast_1d(np.asarray(el_deg, dtype=np.float64)).ravel()
    try:
        az, el = np.broadcast_arrays(az, el)
    except ValueError as e:
        raise ConfigurationError("az and el must broadcast to a common length") from e
    if not np.isfinite(az).all() or not np.isfinite(el).all():
        raise ConfigurationError("az/el contain NaN/inf")
    return _wrap_az_deg(az.copy()), _check_el_deg(el.copy())


def _check_speed(propagation_speed: float) -> float:
    c = float(propagation_speed)
    if not np.isfinite(c) or c <= 0:
        raise ConfigurationError("propagation_speed must be positive and finite")
    return c


def wavelength(freq_hz: float, propagation_speed: float = C_MPS) -> float:
    """λ = c / f."""
    if not np.isfinite(freq_hz) or freq_hz <= 0:
        raise ConfigurationError("freq_hz must be positive and finite")
    return _check_speed(propagation_speed) / float(freq_hz)


def wavenumber(freq_hz: float, propagation_speed: float = C_MPS) -> float:
    """k = 2π/λ."""
    return 2.0 * math.pi / wavelength(freq_hz, propagation_speed)


def direction_vectors(az_deg, el_deg=0.0) -> np.ndarray:
    """Return (D,3) unit vectors û = [cos(el)cos(az), cos(el)sin(az), sin(el)]."""
    az, el = _angles(az_deg, el_deg)
    th = np.deg2rad(az)
    ph = np.deg2rad(el)
    cph = np.cos(ph)
    return np.column_stack([cph * np.cos(th), cph * np.sin(th), np.sin(ph)])


def steering_matrix(
    geometry: ArrayGeometry,
    freq_hz: float,
    az_deg,
    el_deg=0.0,
    propagation_speed: float = C_MPS,
) -> np.ndarray:
    """Plane-wave steering vectors for D directions, as columns.

    Equation
    - k = 2π f / c
    - A[i, d] = g_i(d) * exp(-j * k * p_iᵀ û_d)

    Parameters
    - geometry: array geometry (N elements).
    - freq_hz: carrier frequency in Hz (>0).
    - az_deg, el_deg: scalars or 1D arrays broadcast to length D.
    - propagation_speed: wave speed in m/s.

    Returns
    - A: (N, D) complex128. Entries have magnitude g_i (1 for isotropic).
    """
    if not isinstance(geometry, ArrayGeometry):
        raise ConfigurationError("geometry must be an ArrayGeometry")
    k = wavenumber(freq_hz, propagation_speed)
    az, el = _angles(az_deg, el_deg)
    u = direction_vectors(az, el)  # (D,3)
    phase = -1j * k * (geometry.positions() @ u.T)  # (N,D)
    A = np.exp(phase)
    if geometry.element is not None:
        A = A * geometry.element_gain(az, el, freq_hz)
    return A.astype(np.complex128)


def steering_vector(
    geometry: ArrayGeometry,
    freq_hz: float,
    direction: DirectionLike,
    propagation_speed: float = C_MPS,
) -> np.ndarray:
    """(N,) steering vector toward one direction (az or (az, el) degrees)."""
    d = as_direction(direction)
    return steering_matrix(geometry, freq_hz, d.az, d.el, propagation_speed)[:, 0]


def steering_wideband(
    geometry: ArrayGeometry,
    freqs_hz: np.ndarray,
    direction: DirectionLike,
    propagation_speed: float = C_MPS,
) -> np.ndarray:
    """Return (K,N) steering across a frequency list for one direction.

    a_ki = g_i(f_k) * exp(-j * 2π f_k * τ_i), with τ_i = p_iᵀ û / c.
    """
    f = np.asarray(freqs_hz, dtype=np.float64).ravel()
    if f.size < 1 or not np.isfinite(f).all() or np.any(f <= 0):
        raise ConfigurationError("freqs_hz must be a non-empty 1D array of positive frequencies")
    c = _check_speed(propagation_speed)
    d = as_direction(direction)
    u = direction_vectors(d.az, d.el)[0]
    tau = (geometry.positions() @ u) / c  # (N,)
    A = np.exp(-1j * 2.0 * np.pi * f[:, None] * tau[None, :])
    if geometry.element is not None:
        gains = np.stack([geometry.element_gain(d.az, d.el, fk)[:, 0] for fk in f], axis=0)
        A = A * gains
    return A.astype(np.complex128)
