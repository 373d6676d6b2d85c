import numpy as np
import pytest

from narrowband.beamformer.lcmv import LCMVBeamformer, lcmv_weights
from narrowband.beamformer.modes import SELF_ESTIMATED, Trained
from narrowband.beamformer.mvdr import MVDRBeamformer, mvdr_weights
from narrowband.config import LCMVConfig, MVDRConfig
from narrowband.constraints import ConstraintSet, flanking_directions
from narrowband.covariance import sample_covariance
from narrowband.errors import ConfigurationError, NumericalInstabilityError
from narrowband.geometry import linear_array
from narrowband.grids import azimuth_cut
from narrowband.pattern import array_response
from narrowband.steering import C_MPS, Direction, steering_matrix, steering_vector
from narrowband.synthesis import make_rng, rectangular_pulse, synthesize_scenario


FC = 100e6
LAM = C_MPS / FC


def _tone(num_samples=301, cycles_per_sample=0.05):
    return np.exp(2j * np.pi * cycles_per_sample * np.arange(num_samples))


def _setup(signal=None):
    g = linear_array(10, LAM / 2.0)
    sc = synthesize_scenario(
        g,
        FC,
        rectangular_pulse() if signal is None else signal,
        45.0,
        make_rng(2008),
        interferer_directions=(30.0, 50.0),
    )
    return g, sc


def test_constraints_are_met():
    g, sc = _setup()
    cs = ConstraintSet.from_directions(g, FC, [(43.0, 0.0), (41.0, 0.0), (45.0, 0.0)], [1.0, 1.0, 1.0])
    w = lcmv_weights(sample_covariance(sc.received), cs)
    assert np.allclose(cs.constraint.conj().T @ w, cs.desired_response, atol=1e-6)
    assert np.allclose(cs.residual(w), 0.0, atol=1e-6)


def test_single_constraint_equals_mvdr():
    g, sc = _setup()
    R = sample_covariance(sc.received)
    a = steering_vector(g, FC, 45.0)
    w_l = lcmv_weights(R, a, 1.0)
    w_m = mvdr_weights(R, a)
    assert np.allclose(w_l, w_m, rtol=1e-8, atol=1e-12)


def test_flanking_constraints_prevent_self_nulling():
    s = _tone()
    g, sc = _setup(signal=s)
    mvdr = MVDRBeamformer(MVDRConfig(g, FC, (43.0, 0.0)))
    w_mvdr = mvdr.weights(sc.received, SELF_ESTIMATED)

    cs = ConstraintSet.from_directions(g, FC, flanking_directions((43.0, 0.0), 2.0))
    lcmv = LCMVBeamformer(LCMVConfig(cs, weights_output=True))
    y, w_lcmv = lcmv(sc.received)

    band = azimuth_cut(41.0, 45.0, 0.1)
    band_db = 20.0 * np.log10(np.abs(array_response(w_lcmv, g, FC, band)))
    assert np.all(np.abs(band_db) <= 3.0)

    r_mvdr = np.abs(array_response(w_mvdr, g, FC, [43.0, 45.0]))
    r_lcmv = np.abs(array_response(w_lcmv, g, FC, 45.0))[0]
    assert 20.0 * np.log10(r_mvdr[1] / r_mvdr[0]) <= -15.0
    assert np.isclose(r_lcmv, 1.0, atol=1e-6)
    # the target survives the LCMV beamformer
    assert np.mean(np.abs(y - s) ** 2) < 0.05


def test_trained_lcmv_with_null_constraint():
    g, sc = _setup()
    cs = ConstraintSet(steering_matrix(g, FC, [45.0, 30.0]), [1.0, 0.0])
    w = LCMVBeamformer(LCMVConfig(cs)).weights(sc.received, Trained(sc.interference_plus_noise))
    r = array_response(w, g, FC, [45.0, 30.0])
    assert np.isclose(r[0], 1.0, atol=1e-6)
    assert abs(r[1]) < 1e-6


def test_flanking_directions_order():
    dirs = flanking_directions((43.0, 0.0), 2.0, count=2)
    assert dirs == [
        Direction(43.0, 0.0),
        Direction(41.0, 0.0),
        Direction(45.0, 0.0),
        Direction(39.0, 0.0),
        Direction(47.0, 0.0),
    ]


def test_constraint_set_validation():
    C = np.ones((4, 2))
    with pytest.raises(ConfigurationError):
        ConstraintSet(C, [1.0, 1.0, 1.0])
    with pytest.raises(ConfigurationError):
        ConstraintSet(np.ones((2, 3)), 1.0)
    cs = ConstraintSet(np.ones(4), 2.0)
    assert cs.num_constraints == 1
    assert np.allclose(cs.desired_response, [2.0])


def test_raw_matrix_needs_desired_response():
    g, sc = _setup()
    with pytest.raises(ConfigurationError):
        lcmv_weights(sample_covariance(sc.received), steering_matrix(g, FC, [45.0, 43.0]))


def test_duplicated_constraints_make_gram_singular():
    g, sc = _setup()
    C = steering_matrix(g, FC, [43.0, 43.0])
    with pytest.raises(NumericalInstabilityError) as info:
        lcmv_weights(sample_covariance(sc.received), C, [1.0, 1.0])
    assert info.value.condition_number > 1e12


def test_more_constraints_than_elements_rejected():
    g = linear_array(4, LAM / 2.0)
    with pytest.raises(ConfigurationError):
        ConstraintSet.from_directions(g, FC, [-40.0, -20.0, 0.0, 20.0, 40.0])
