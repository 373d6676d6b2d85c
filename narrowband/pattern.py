"""Beam pattern evaluation: p(d) = |wᴴ a(d)|² over a grid of directions.

Patterns are read-only projections of a weight vector; nothing here modifies
weights or signals. Large grids are processed in chunks, optionally spread
over joblib workers.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator, Literal, Tuple

import numpy as np
from joblib import Parallel, delayed

from .errors import ConfigurationError
from .geometry import ArrayGeometry
from .steering import C_MPS, Direction, DirectionLike, as_direction, direction_vectors, steering_matrix

PatternKind = Literal["power", "powerdb"]

_DB_FLOOR = 1e-30


def _to_db(x: np.ndarray | float) -> np.ndarray | float:
    return 10.0 * np.log10(np.maximum(x, _DB_FLOOR))


def _validate_weights(w: np.ndarray, num_elements: int) -> np.ndarray:
    w = np.asarray(w, dtype=np.complex128).ravel()
    if w.size != num_elements:
        raise ConfigurationError(f"weights have {w.size} entries, array has {num_elements} elements")
    if not np.isfinite(w).all():
        raise ConfigurationError("weights contain NaN/inf")
    return w


def _grid(az_deg, el_deg) -> Tuple[np.ndarray, np.ndarray]:
    az = np.atleast_1d(np.asarray(az_deg, dtype=np.float64)).ravel()
    el = np.atleast_1d(np.asarray(el_deg, dtype=np.float64)).ravel()
    try:
        az, el = np.broadcast_arrays(az, el)
    except ValueError as e:
        raise ConfigurationError("az and el must broadcast to a common length") from e
    return np.array(az), np.array(el)


def array_response(
    weights: np.ndarray,
    geometry: ArrayGeometry,
    freq_hz: float,
    az_deg,
    el_deg=0.0,
    propagation_speed: float = C_MPS,
) -> np.ndarray:
    """Return (D,) complex response wᴴ a(d) for each direction."""
    w = _validate_weights(weights, geometry.num_elements)
    A = steering_matrix(geometry, freq_hz, az_deg, el_deg, propagation_speed)
    return np.conjugate(w) @ A


def _power_chunk(w, geometry, freq_hz, az, el, propagation_speed) -> np.ndarray:
    r = array_response(w, geometry, freq_hz, az, el, propagation_speed)
    return (np.abs(r) ** 2).astype(np.float64)


def _chunks(n: int, chunk: int):
    step = int(max(1, chunk))
    for start in range(0, n, step):
        yield start, min(n, start + step)


@dataclass(frozen=True, eq=False)
class BeamPattern:
    """Pattern samples on a direction grid.

    Attributes
    - az_deg, el_deg: (D,) grid directions in degrees.
    - values: (D,) power (linear) or power in dB, per ``kind``.
    - kind: "power" or "powerdb".
    - normalized: True when values are relative to the pattern peak.
    """

    az_deg: np.ndarray
    el_deg: np.ndarray
    values: np.ndarray
    kind: PatternKind = "powerdb"
    normalized: bool = False

    def __len__(self) -> int:
        return int(self.values.size)

    def __iter__(self) -> Iterator[Tuple[Direction, float]]:
        for az, el, v in zip(self.az_deg, self.el_deg, self.values):
            yield Direction(float(az), float(el)), float(v)

    def _index(self, direction: DirectionLike) -> int:
        d = as_direction(direction)
        u = direction_vectors(d.az, d.el)[0]
        U = direction_vectors(self.az_deg, self.el_deg)
        return int(np.argmax(U @ u))

    def at(self, direction: DirectionLike) -> float:
        """Value at the grid point closest (in angle) to ``direction``."""
        return float(self.values[self._index(direction)])

    def peak(self) -> Tuple[Direction, float]:
        i = int(np.argmax(self.values))
        return Direction(float(self.az_deg[i]), float(self.el_deg[i])), float(self.values[i])

    def to_db(self) -> "BeamPattern":
        if self.kind == "powerdb":
            return self
        return BeamPattern(self.az_deg, self.el_deg, _to_db(self.values), "powerdb", self.normalized)

    def to_power(self) -> "BeamPattern":
        if self.kind == "power":
            return self
        return BeamPattern(self.az_deg, self.el_deg, 10.0 ** (self.values / 10.0), "power", self.normalized)


def _finish(power: np.ndarray, kind: str, normalize: bool) -> np.ndarray:
    if normalize:
        peak = float(np.max(power)) if power.size else 0.0
        if peak <= 0.0:
            raise ConfigurationError("cannot normalize an all-zero pattern")
        power = power / peak
    if kind == "powerdb":
        return _to_db(power)
    return power


def _check_kind(kind: str) -> None:
    if kind not in ("power", "powerdb"):
        raise ConfigurationError("kind must be 'power' or 'powerdb'")


def beam_pattern(
    weights: np.ndarray,
    geometry: ArrayGeometry,
    freq_hz: float,
    az_deg,
    el_deg=0.0,
    kind: PatternKind = "powerdb",
    normalize: bool = False,
    propagation_speed: float = C_MPS,
    n_jobs: int = 1,
    chunk: int = 4096,
) -> BeamPattern:
    """Evaluate p(d) = |wᴴ a(d)|² on a direction grid.

    Parameters
    - weights: (N,) complex weights.
    - az_deg, el_deg: grid directions (broadcast to length D). Use
      :func:`narrowband.grids.make_az_el_grid` for a 2D grid.
    - kind: "power" (linear) or "powerdb".
    - normalize: scale so the peak is 1 (0 dB).
    - n_jobs: joblib workers over grid chunks (1 = serial).
    - chunk: grid points per chunk, bounds peak memory at N*chunk.

    Returns
    - BeamPattern with (D,) values.
    """
    _check_kind(kind)
    w = _validate_weights(weights, geometry.num_elements)
    az, el = _grid(az_deg, el_deg)
    spans = list(_chunks(az.size, chunk))
    if n_jobs == 1 or len(spans) == 1:
        parts = [_power_chunk(w, geometry, freq_hz, az[s:e], el[s:e], propagation_speed) for s, e in spans]
    else:
        parts = Parallel(n_jobs=n_jobs, prefer="threads")(
            delayed(_power_chunk)(w, geometry, freq_hz, az[s:e], el[s:e], propagation_speed)
            for s, e in spans
        )
    power = np.concatenate(parts) if parts else np.empty(0, dtype=np.float64)
    return BeamPattern(az, el, _finish(power, kind, normalize), kind, bool(normalize))


def iter_beam_pattern(
    weights: np.ndarray,
    geometry: ArrayGeometry,
    freq_hz: float,
    az_deg,
    el_deg=0.0,
    kind: PatternKind = "powerdb",
    propagation_speed: float = C_MPS,
    chunk: int = 256,
) -> Iterator[Tuple[Direction, float]]:
    """Lazily yield (Direction, power) pairs, one chunk of steering vectors at a time.

    Normalization needs the whole grid, so use :func:`beam_pattern` for it.
    """
    _check_kind(kind)
    w = _validate_weights(weights, geometry.num_elements)
    az, el = _grid(az_deg, el_deg)
    for s, e in _chunks(az.size, chunk):
        vals = _finish(_power_chunk(w, geometry, freq_hz, az[s:e], el[s:e], propagation_speed), kind, False)
        for a, b, v in zip(az[s:e], el[s:e], vals):
            yield Direction(float(a), float(b)), float(v)


def null_depth_db(pattern: BeamPattern, direction: DirectionLike) -> float:
    """Pattern level at ``direction`` relative to the pattern peak (dB, <= 0)."""
    p = pattern.to_db()
    return p.at(direction) - float(np.max(p.values))


def _main_lobe(values: np.ndarray, i_peak: int) -> Tuple[int, int]:
    lo = i_peak
    while lo > 0 and values[lo - 1] <= values[lo]:
        lo -= 1
    hi = i_peak
    while hi < values.size - 1 and values[hi + 1] <= values[hi]:
        hi += 1
    return lo, hi


def half_power_beamwidth(pattern: BeamPattern) -> float:
    """-3 dB main-lobe width (deg) of an azimuth cut, by linear interpolation.

    Returns inf when the main lobe does not drop 3 dB inside the cut.
    """
    p = pattern.to_db()
    az, v = p.az_deg, p.values
    if az.size < 3 or np.any(np.diff(az) <= 0):
        raise ConfigurationError("half_power_beamwidth needs an increasing azimuth cut")
    i = int(np.argmax(v))
    level = v[i] - 10.0 * np.log10(2.0)

    j = i
    while j > 0 and v[j] >= level:
        j -= 1
    if v[j] >= level:
        return float("inf")
    left = az[j] + (level - v[j]) * (az[j + 1] - az[j]) / (v[j + 1] - v[j])

    k = i
    while k < v.size - 1 and v[k] >= level:
        k += 1
    if v[k] >= level:
        return float("inf")
    right = az[k - 1] + (level - v[k - 1]) * (az[k] - az[k - 1]) / (v[k] - v[k - 1])
    return float(right - left)


def peak_sidelobe_db(pattern: BeamPattern) -> float:
    """Highest level outside the main lobe, relative to the peak (dB)."""
    p = pattern.to_db()
    v = p.values
    i = int(np.argmax(v))
    lo, hi = _main_lobe(v, i)
    outside = np.concatenate([v[:lo], v[hi + 1:]])
    if outside.size == 0:
        return float("-inf")
    return float(np.max(outside) - v[i])
