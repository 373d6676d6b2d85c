import numpy as np
import pytest

from narrowband.errors import ConfigurationError
from narrowband.geometry import linear_array
from narrowband.steering import C_MPS, steering_vector
from narrowband.synthesis import (
    collect_plane_wave,
    complex_noise,
    gaussian_interference,
    make_rng,
    rectangular_pulse,
    synthesize_scenario,
    time_axis,
)


FC = 100e6
LAM = C_MPS / FC


def test_pulse_and_time_axis():
    t = time_axis(0.3, 1000.0)
    s = rectangular_pulse()
    assert t.shape == s.shape == (301,)
    assert np.isclose(t[-1], 0.3)
    assert np.flatnonzero(s).tolist() == [200, 201, 202, 203, 204]
    with pytest.raises(ConfigurationError):
        rectangular_pulse(10, start=8, width=5)


def test_collect_plane_wave_superposition():
    g = linear_array(5, LAM / 2.0)
    S = np.array([[1.0, 0.0], [0.0, 2.0], [1.0, 1.0]])
    Y = collect_plane_wave(g, S, [(10.0, 0.0), (-20.0, 0.0)], FC)
    a1 = steering_vector(g, FC, 10.0)
    a2 = steering_vector(g, FC, -20.0)
    assert Y.shape == (3, 5)
    assert np.allclose(Y[0], a1)
    assert np.allclose(Y[1], 2.0 * a2)
    assert np.allclose(Y[2], a1 + a2)


def test_direction_count_must_match_signals():
    g = linear_array(5, LAM / 2.0)
    with pytest.raises(ConfigurationError):
        collect_plane_wave(g, np.ones((3, 2)), [10.0], FC)


def test_complex_noise_power():
    n = complex_noise((20000, 4), 1e-5, make_rng(1))
    assert np.isclose(np.mean(np.abs(n) ** 2), 1e-5, rtol=0.05)
    with pytest.raises(ConfigurationError):
        complex_noise((2, 2), 1.0, np.random.RandomState(0))


def test_interference_amplitudes():
    J = gaussian_interference(50000, [10.0, 1.0], make_rng(3))
    assert J.shape == (50000, 2)
    assert np.allclose(np.std(J.real, axis=0), [10.0, 1.0], rtol=0.05)
    assert np.allclose(J.imag, 0.0)


def test_same_seed_reproduces_scenario():
    g = linear_array(10, LAM / 2.0)
    kwargs = dict(interferer_directions=(30.0, 50.0), interferer_amplitude=10.0, noise_power=1e-5)
    a = synthesize_scenario(g, FC, rectangular_pulse(), 45.0, make_rng(2008), **kwargs)
    b = synthesize_scenario(g, FC, rectangular_pulse(), 45.0, make_rng(2008), **kwargs)
    c = synthesize_scenario(g, FC, rectangular_pulse(), 45.0, make_rng(7), **kwargs)
    assert np.array_equal(a.received, b.received)
    assert not np.allclose(a.interference_plus_noise, c.interference_plus_noise)
    assert np.array_equal(a.target, c.target)
    assert np.allclose(a.received, a.target + a.interference_plus_noise)


def test_scenario_without_interferers_is_target_plus_noise():
    g = linear_array(4, LAM / 2.0)
    sc = synthesize_scenario(g, FC, rectangular_pulse(), 0.0, make_rng(0), noise_power=0.0)
    assert np.allclose(sc.interference_plus_noise, 0.0)
    assert np.allclose(sc.received[200], 1.0)


def test_interferer_amplitudes_must_match_directions():
    g = linear_array(4, LAM / 2.0)
    sc = synthesize_scenario(
        g, FC, rectangular_pulse(), 0.0, make_rng(0),
        interferer_directions=(30.0, 50.0), interferer_amplitude=[10.0, 1.0],
    )
    assert sc.interference_plus_noise.shape == (301, 4)
    with pytest.raises(ConfigurationError):
        synthesize_scenario(
            g, FC, rectangular_pulse(), 0.0, make_rng(0),
            interferer_directions=(30.0, 50.0), interferer_amplitude=[10.0, 1.0, 2.0],
        )
