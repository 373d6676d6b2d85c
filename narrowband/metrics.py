from __future__ import annotations

import numpy as np

from .errors import ConfigurationError


def _pair(w: np.ndarray, a: np.ndarray):
    w = np.asarray(w, dtype=np.complex128).ravel()
    a = np.asarray(a, dtype=np.complex128).ravel()
    if w.shape != a.shape:
        raise ConfigurationError("w and a must have the same shape")
    return w, a


def _square(w: np.ndarray, R: np.ndarray) -> np.ndarray:
    R = np.asarray(R, dtype=np.complex128)
    if R.shape != (w.size, w.size):
        raise ConfigurationError(f"R must be ({w.size},{w.size})")
    return R


def directional_gain(w: np.ndarray, a: np.ndarray) -> float:
    """White noise gain G = |wᴴ a|² / ||w||², linear.

    Equals N for matched weights on an N-element isotropic array.
    :func:`white_noise_gain` is the same quantity in dB.
    """
    w, a = _pair(w, a)
    ww = float(np.vdot(w, w).real)
    if ww == 0.0 or not np.isfinite(ww):
        return 0.0
    num = np.vdot(w, a)
    return float((num.conjugate() * num).real / ww)


def output_power(w: np.ndarray, R: np.ndarray) -> float:
    """wᴴ R w."""
    w = np.asarray(w, dtype=np.complex128).ravel()
    R = _square(w, R)
    return float(np.real(np.vdot(w, R @ w)))


def white_noise_gain(w: np.ndarray, a: np.ndarray) -> float:
    """:func:`directional_gain` in dB: SNR gain against spatially white noise."""
    return float(10.0 * np.log10(max(directional_gain(w, a), 1e-300)))


def output_sinr(w: np.ndarray, a: np.ndarray, signal_power: float, R_in: np.ndarray) -> float:
    """SINR = σ_s |wᴴ a|² / (wᴴ R_in w), linear.

    R_in is the interference-plus-noise covariance.
    """
    w, a = _pair(w, a)
    den = output_power(w, R_in)
    if den <= 0.0:
        return float("inf")
    return float(signal_power * np.abs(np.vdot(w, a)) ** 2 / den)


def snr_gain_db(y: np.ndarray, reference: np.ndarray, element_noise_power: float) -> float:
    """Output SNR improvement over a single element, from simulated data.

    ``y`` is the beamformer output, ``reference`` the noise-free desired
    output; the residual y - reference is taken as output noise. Assumes a
    beamformer with unit gain toward the source (wᴴ a = 1).
    """
    y = np.asarray(y, dtype=np.complex128).ravel()
    ref = np.asarray(reference, dtype=np.complex128).ravel()
    if y.shape != ref.shape:
        raise ConfigurationError("y and reference must have the same length")
    if element_noise_power <= 0:
        raise ConfigurationError("element_noise_power must be positive")
    noise_out = float(np.mean(np.abs(y - ref) ** 2))
    if noise_out == 0.0:
        return float("inf")
    return float(10.0 * np.log10(element_noise_power / noise_out))
