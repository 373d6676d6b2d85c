import numpy as np
import pytest

from narrowband.elements import cosine_element, isotropic_element
from narrowband.errors import ConfigurationError
from narrowband.grids import azimuth_cut, make_az_el_grid


def test_isotropic_band_edges():
    g = isotropic_element((9e6, 110e6))
    az = np.array([0.0, 45.0])
    el = np.zeros(2)
    assert np.allclose(g(az, el, 9e6), 1.0)
    assert np.allclose(g(az, el, 110e6), 1.0)
    assert np.allclose(g(az, el, 8e6), 0.0)


def test_cosine_element_back_hemisphere_is_zero():
    g = cosine_element((1.0, 2.0))
    v = g(np.array([0.0, 60.0, 120.0]), np.array([0.0, 60.0, 0.0]), 1e9)
    assert np.allclose(v, [1.0, 0.5 * 0.25, 0.0])


def test_bad_band_rejected():
    with pytest.raises(ConfigurationError):
        isotropic_element((110e6, 9e6))


def test_az_el_grid_layout():
    grid = make_az_el_grid([-10.0, 0.0, 10.0], [0.0, 5.0])
    assert grid.shape == (6, 2)
    assert np.allclose(grid[:3, 0], [-10.0, 0.0, 10.0])
    assert np.allclose(grid[3:, 1], 5.0)
    with pytest.raises(ConfigurationError):
        make_az_el_grid([0.0], [95.0])


def test_azimuth_cut_is_inclusive():
    az = azimuth_cut(41.0, 45.0, 0.1)
    assert az.size == 41
    assert np.isclose(az[-1], 45.0)
