from __future__ import annotations

import numpy as np

from .errors import ConfigurationError


def make_az_el_grid(az_deg: np.ndarray, el_deg: np.ndarray) -> np.ndarray:
    """Return (D,2) array with columns [az_deg, el_deg].

    Parameters
    - az_deg: 1D array of azimuth angles in degrees.
    - el_deg: 1D array of elevation angles in degrees, in [-90, 90].

    Returns
    - grid: (D,2) float64, D = Naz * Nel. Azimuth varies fastest.
    """
    az = np.atleast_1d(np.asarray(az_deg, dtype=np.float64)).ravel()
    el = np.atleast_1d(np.asarray(el_deg, dtype=np.float64)).ravel()
    if az.size == 0 or el.size == 0:
        raise ConfigurationError("az_deg and el_deg must be non-empty")
    if not np.isfinite(az).all() or not np.isfinite(el).all():
        raise ConfigurationError("az_deg or el_deg contains NaN/inf")
    if np.any(np.abs(el) > 90.0):
        raise ConfigurationError("el_deg must lie in [-90, 90]")
    AZ, EL = np.meshgrid(az, el, indexing="xy")
    return np.column_stack([AZ.ravel(), EL.ravel()])


def azimuth_cut(start_deg: float = -90.0, stop_deg: float = 90.0, step_deg: float = 0.1) -> np.ndarray:
    """Inclusive azimuth scan from ``start_deg`` to ``stop_deg``."""
    if step_deg <= 0 or stop_deg < start_deg:
        raise ConfigurationError("need step_deg > 0 and stop_deg >= start_deg")
    # tolerate FP drift at the inclusive endpoint
    n_steps = int(np.floor((stop_deg - start_deg) / step_deg + 1e-9))
    return start_deg + step_deg * np.arange(n_steps + 1, dtype=np.float64)
