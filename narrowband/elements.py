from __future__ import annotations

from typing import Callable, Tuple

import numpy as np

from .errors import ConfigurationError

# (az_deg (D,), el_deg (D,), freq_hz) -> gains broadcastable to (N, D)
ElementResponse = Callable[[np.ndarray, np.ndarray, float], np.ndarray]


def _validate_range(frequency_range: Tuple[float, float] | None) -> Tuple[float, float] | None:
    if frequency_range is None:
        return None
    lo, hi = (float(v) for v in frequency_range)
    if not (np.isfinite(lo) and np.isfinite(hi)) or lo < 0 or hi <= lo:
        raise ConfigurationError("frequency_range must be (low, high) with 0 <= low < high")
    return lo, hi


def _in_band(freq_hz: float, band: Tuple[float, float] | None) -> bool:
    return band is None or band[0] <= float(freq_hz) <= band[1]


def isotropic_element(frequency_range: Tuple[float, float] | None = None) -> ElementResponse:
    """Unit gain in every direction inside ``frequency_range`` (Hz), zero outside.

    ``None`` means an unbounded band.
    """
    band = _validate_range(frequency_range)

    def gain(az_deg: np.ndarray, el_deg: np.ndarray, freq_hz: float) -> np.ndarray:
        az = np.asarray(az_deg, dtype=np.float64)
        value = 1.0 if _in_band(freq_hz, band) else 0.0
        return np.full(az.shape, value, dtype=np.float64)

    return gain


def cosine_element(
    exponent: float | Tuple[float, float] = 1.5,
    frequency_range: Tuple[float, float] | None = None,
) -> ElementResponse:
    """cos^m(az) * cos^n(el) amplitude pattern over the front hemisphere (|az| <= 90).

    ``exponent`` is either m=n or a pair (m, n). The back hemisphere gets 0.
    """
    m, n = (exponent, exponent) if np.isscalar(exponent) else tuple(exponent)
    m, n = float(m), float(n)
    if m < 0 or n < 0:
        raise ConfigurationError("cosine exponents must be non-negative")
    band = _validate_range(frequency_range)

    def gain(az_deg: np.ndarray, el_deg: np.ndarray, freq_hz: float) -> np.ndarray:
        az = np.deg2rad(np.asarray(az_deg, dtype=np.float64))
        el = np.deg2rad(np.asarray(el_deg, dtype=np.float64))
        if not _in_band(freq_hz, band):
            return np.zeros(np.broadcast(az, el).shape, dtype=np.float64)
        ca = np.clip(np.cos(az), 0.0, None)
        ce = np.clip(np.cos(el), 0.0, None)
        return (ca ** m) * (ce ** n)

    return gain
