import warnings

import numpy as np
import pytest

from narrowband.covariance import (
    condition_number,
    diagonal_load,
    hermitian_factor,
    loading_level,
    prepare_covariance,
    sample_covariance,
    solve_factored,
    validate_block,
)
from narrowband.errors import ConfigurationError, NumericalInstabilityError


def _random_block(T=200, N=6, seed=0):
    rng = np.random.default_rng(seed)
    return rng.standard_normal((T, N)) + 1j * rng.standard_normal((T, N))


def test_sample_covariance_is_hermitian_and_biased():
    Y = _random_block()
    R = sample_covariance(Y)
    assert R.shape == (6, 6)
    assert np.array_equal(R, R.conj().T)
    assert np.allclose(R, Y.T @ Y.conj() / Y.shape[0])
    assert np.all(np.linalg.eigvalsh(R) > 0)


def test_loading_level_and_diagonal_load():
    R = sample_covariance(_random_block())
    eps = loading_level(R, 1e-3)
    assert np.isclose(eps, 1e-3 * np.trace(R).real / 6)
    RL = diagonal_load(R, 1e-3)
    assert np.allclose(RL - R, eps * np.eye(6))


def test_prepared_factor_solves_loaded_system():
    R = sample_covariance(_random_block())
    b = np.arange(6) + 1j
    x = solve_factored(prepare_covariance(R, 1e-3), b)
    assert np.allclose(diagonal_load(R, 1e-3) @ x, b)


def test_rank_deficient_without_loading_raises():
    a = np.exp(1j * np.arange(4))
    R = np.outer(a, a.conj())
    with pytest.raises(NumericalInstabilityError) as info:
        prepare_covariance(R, diagonal_loading=0.0)
    assert info.value.condition_number > 1e12
    # still catchable as a linear-algebra failure
    assert isinstance(info.value, np.linalg.LinAlgError)


def test_loading_rescues_rank_deficient_matrix():
    a = np.exp(1j * np.arange(4))
    R = np.outer(a, a.conj())
    with warnings.catch_warnings():
        warnings.simplefilter("error")
        prepare_covariance(R)
    assert condition_number(diagonal_load(R)) < 1e8


def test_warns_near_condition_limit():
    M = np.diag([1.0, 1e-3]).astype(np.complex128)
    with pytest.warns(RuntimeWarning):
        hermitian_factor(M, max_condition_number=5e4)


def test_condition_limit_is_configurable():
    M = np.diag([1.0, 1e-3]).astype(np.complex128)
    with pytest.raises(NumericalInstabilityError):
        hermitian_factor(M, max_condition_number=100.0)


def test_validate_block_rejects_bad_input():
    with pytest.raises(ConfigurationError):
        validate_block(np.zeros(5))
    with pytest.raises(ConfigurationError):
        validate_block(np.zeros((5, 3)), num_elements=4)
    bad = np.zeros((5, 3))
    bad[0, 0] = np.nan
    with pytest.raises(ConfigurationError):
        validate_block(bad)


def test_covariance_matches_output_power_convention():
    a = np.exp(1j * np.array([0.0, 0.7, 1.4, 2.1]))
    s = np.exp(2j * np.pi * 0.05 * np.arange(64))
    Y = np.outer(s, a)
    R = sample_covariance(Y)
    # a plane wave s(t) a gives R = a aᴴ, not its conjugate
    assert np.allclose(R, np.outer(a, a.conj()))

    w = np.array([0.3, -0.2j, 0.1 + 0.4j, 0.5])
    y = Y @ np.conj(w)
    assert np.isclose(np.real(np.vdot(w, R @ w)), np.mean(np.abs(y) ** 2))
