"""Simulated received signals: plane-wave superposition plus complex noise.

All randomness comes from an explicit ``numpy.random.Generator`` argument so
scenarios are reproducible and independent of each other.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Sequence

import numpy as np

from .errors import ConfigurationError
from .geometry import ArrayGeometry
from .steering import C_MPS, Direction, DirectionLike, as_direction, steering_matrix


def make_rng(seed: int | None = None) -> np.random.Generator:
    """Return a fresh PCG64 generator; same seed, same stream."""
    return np.random.default_rng(seed)


def _check_rng(rng) -> np.random.Generator:
    if not isinstance(rng, np.random.Generator):
        raise ConfigurationError("rng must be a numpy.random.Generator (see make_rng)")
    return rng


def time_axis(duration_s: float, sample_rate_hz: float) -> np.ndarray:
    """Sample times 0, 1/fs, ..., duration inclusive."""
    if duration_s < 0 or sample_rate_hz <= 0:
        raise ConfigurationError("need duration_s >= 0 and sample_rate_hz > 0")
    n = int(np.floor(duration_s * sample_rate_hz + 1e-9)) + 1
    return np.arange(n, dtype=np.float64) / float(sample_rate_hz)


def rectangular_pulse(
    num_samples: int = 301, start: int = 200, width: int = 5, amplitude: float = 1.0
) -> np.ndarray:
    """(T,) complex baseband pulse: ``amplitude`` on [start, start+width), else 0.

    Defaults give a 5-sample pulse in a 0.3 s record sampled at 1 kHz.
    """
    if num_samples < 1 or width < 0 or start < 0 or start + width > num_samples:
        raise ConfigurationError("pulse must fit inside num_samples")
    s = np.zeros(int(num_samples), dtype=np.complex128)
    s[int(start):int(start) + int(width)] = amplitude
    return s


def _as_columns(signals: np.ndarray) -> np.ndarray:
    S = np.asarray(signals, dtype=np.complex128)
    if S.ndim == 1:
        S = S[:, None]
    if S.ndim != 2 or S.shape[0] < 1:
        raise ConfigurationError("signals must be (T,) or (T,K)")
    if not np.isfinite(S).all():
        raise ConfigurationError("signals contain NaN/inf")
    return S


def _directions(directions, count: int) -> list[Direction]:
    if not np.isscalar(directions):
        directions = list(directions)
    # A single wave accepts a bare az or (az, el)
    if count == 1 and np.ndim(directions) <= 1:
        dirs = [as_direction(directions)]
    else:
        dirs = [as_direction(d) for d in directions]
    if len(dirs) != count:
        raise ConfigurationError(f"{count} signals but {len(dirs)} directions")
    return dirs


def collect_plane_wave(
    geometry: ArrayGeometry,
    signals: np.ndarray,
    directions: DirectionLike | Iterable[DirectionLike],
    freq_hz: float,
    propagation_speed: float = C_MPS,
) -> np.ndarray:
    """Received (T,N) block for K narrowband plane waves.

    Y = S · Aᵀ with S (T,K) source waveforms and A (N,K) steering vectors,
    so row t holds Σ_k s_k(t) a(d_k).
    """
    S = _as_columns(signals)
    dirs = _directions(directions, S.shape[1])
    A = steering_matrix(
        geometry,
        freq_hz,
        [d.az for d in dirs],
        [d.el for d in dirs],
        propagation_speed,
    )
    return S @ A.T


def complex_noise(shape, power: float, rng: np.random.Generator) -> np.ndarray:
    """Circular complex Gaussian noise with E|n|² = power: sqrt(p/2)(x + jy)."""
    rng = _check_rng(rng)
    if power < 0 or not np.isfinite(power):
        raise ConfigurationError("noise power must be finite and >= 0")
    scale = np.sqrt(float(power) / 2.0)
    return scale * (rng.standard_normal(shape) + 1j * rng.standard_normal(shape))


def gaussian_interference(
    num_samples: int, amplitudes: Sequence[float], rng: np.random.Generator
) -> np.ndarray:
    """(T,K) real Gaussian jammer waveforms with standard deviation ``amplitudes[k]``."""
    rng = _check_rng(rng)
    amps = np.asarray(amplitudes, dtype=np.float64).ravel()
    if num_samples < 1 or amps.size < 1:
        raise ConfigurationError("need num_samples >= 1 and at least one amplitude")
    return (rng.standard_normal((int(num_samples), amps.size)) * amps[None, :]).astype(np.complex128)


@dataclass(frozen=True, eq=False)
class Scenario:
    """Components of a synthesized reception; all (T,N)."""

    target: np.ndarray
    interference_plus_noise: np.ndarray

    @property
    def received(self) -> np.ndarray:
        return self.target + self.interference_plus_noise


def synthesize_scenario(
    geometry: ArrayGeometry,
    freq_hz: float,
    signal: np.ndarray,
    target_direction: DirectionLike,
    rng: np.random.Generator,
    interferer_directions: Iterable[DirectionLike] = (),
    interferer_amplitude: float | Sequence[float] = 10.0,
    noise_power: float = 1e-5,
    propagation_speed: float = C_MPS,
) -> Scenario:
    """Target plane wave plus Gaussian jammers plus white noise.

    The interference-plus-noise part is returned separately so it can be used
    as MVDR/LCMV training data.
    """
    rng = _check_rng(rng)
    s = _as_columns(signal)
    if s.shape[1] != 1:
        raise ConfigurationError("signal must be a single (T,) waveform")
    T = s.shape[0]
    target = collect_plane_wave(geometry, s, target_direction, freq_hz, propagation_speed)

    dirs = [as_direction(d) for d in interferer_directions]
    rest = np.zeros_like(target)
    if dirs:
        amps = np.asarray(interferer_amplitude, dtype=np.float64).ravel()
        if amps.size == 1:
            amps = np.full(len(dirs), amps[0])
        elif amps.size != len(dirs):
            raise ConfigurationError(f"{len(dirs)} interferer directions but {amps.size} amplitudes")
        jam = gaussian_interference(T, amps, rng)
        rest = rest + collect_plane_wave(geometry, jam, dirs, freq_hz, propagation_speed)
    rest = rest + complex_noise(target.shape, noise_power, rng)
    return Scenario(target=target, interference_plus_noise=rest)
