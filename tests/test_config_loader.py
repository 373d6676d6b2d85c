import json
import os
import tempfile

import numpy as np
import pytest

from narrowband.beamformer.lcmv import LCMVBeamformer
from narrowband.beamformer.mvdr import MVDRBeamformer
from narrowband.beamformer.phase import PhaseShiftBeamformer
from narrowband.config_loader import ConfigManager, parse_json_with_comments
from narrowband.errors import ConfigurationError
from narrowband.steering import C_MPS, Direction


CONFIG_DIR = os.path.join(os.path.dirname(__file__), os.pardir, "config")


def test_shipped_presets_load():
    cm = ConfigManager(CONFIG_DIR)
    names = cm.list_available_configs()
    assert "ula10" in names["arrays"]
    assert "lcmv_43_band" in names["beamformers"]

    ula = cm.get_array("ula10")
    fc = cm.get_frequency("ula10")
    assert fc == 100e6
    assert ula.num_elements == 10
    assert np.allclose(np.diff(ula.positions()[:, 1]), C_MPS / fc / 2.0)

    ura = cm.get_array("ura10x5")
    assert ura.num_elements == 50
    assert ura.layout == "ura"


def test_shipped_beamformers_build():
    cm = ConfigManager(CONFIG_DIR)
    ula = cm.get_array("ula10")
    fc = cm.get_frequency("ula10")

    ps = cm.get_beamformer("phaseshift_45", ula, fc)
    mvdr = cm.get_beamformer("mvdr_43", ula, fc)
    lcmv = cm.get_beamformer("lcmv_43_band", ula, fc)

    assert isinstance(ps, PhaseShiftBeamformer)
    assert isinstance(mvdr, MVDRBeamformer)
    assert mvdr.config.direction == Direction(43.0, 0.0)
    assert mvdr.config.weights_output
    assert isinstance(lcmv, LCMVBeamformer)
    assert lcmv.constraints.num_constraints == 3


def test_comments_and_trailing_commas():
    text = """
    {
      // line comment
      "a": {"url": "http://example.com", "n": 1,},  /* block */
      "b": [1, 2, 3,],
    }
    """
    with tempfile.TemporaryDirectory() as td:
        path = os.path.join(td, "c.json")
        with open(path, "w", encoding="utf-8") as f:
            f.write(text)
        data = parse_json_with_comments(path)
    assert data == {"a": {"url": "http://example.com", "n": 1}, "b": [1, 2, 3]}


def test_custom_presets_and_errors():
    arrays = {
        "tri": {"layout": "custom", "xyz": [[0, 0, 0], [0, 1, 0], [0, 0, 1]], "frequency": 150e6},
        "cos": {
            "layout": "ula",
            "num_elements": 4,
            "spacing": 0.5,
            "element": {"type": "cosine", "exponent": 2.0},
        },
        "bad": {"layout": "ula", "num_elements": 4, "spacing": 0.5, "element": {"type": "horn"}},
    }
    beamformers = {
        "lcmv_list": {"type": "lcmv", "directions": [[0, 0], [20, 0]], "responses": [1, 0]},
        "lcmv_none": {"type": "lcmv"},
        "weird": {"type": "gsc"},
    }
    with tempfile.TemporaryDirectory() as td:
        with open(os.path.join(td, "arrays.json"), "w", encoding="utf-8") as f:
            json.dump(arrays, f)
        with open(os.path.join(td, "beamformers.json"), "w", encoding="utf-8") as f:
            json.dump(beamformers, f)
        cm = ConfigManager(td)

    tri = cm.get_array("tri")
    assert tri.num_elements == 3
    assert np.allclose(tri.positions().mean(axis=0), 0.0)

    cos = cm.get_array("cos")
    assert np.allclose(cos.element_gain(60.0, 0.0, 1e6), 0.25)

    lcmv = cm.get_beamformer("lcmv_list", tri, cm.get_frequency("tri"))
    assert np.allclose(lcmv.constraints.desired_response, [1.0, 0.0])

    with pytest.raises(ConfigurationError):
        cm.get_array("bad")
    with pytest.raises(ConfigurationError):
        cm.get_array("missing")
    with pytest.raises(ConfigurationError):
        cm.get_beamformer("lcmv_none", tri, 150e6)
    with pytest.raises(ConfigurationError):
        cm.get_beamformer("weird", tri, 150e6)


def test_missing_files_give_empty_presets():
    with tempfile.TemporaryDirectory() as td:
        cm = ConfigManager(td)
    assert cm.list_available_configs() == {"arrays": [], "beamformers": []}


def test_wavelength_spacing_needs_frequency():
    arrays = {"ula_no_freq": {"layout": "ula", "num_elements": 4, "spacing_wavelengths": 0.5}}
    with tempfile.TemporaryDirectory() as td:
        with open(os.path.join(td, "arrays.json"), "w", encoding="utf-8") as f:
            json.dump(arrays, f)
        cm = ConfigManager(td)
    with pytest.raises(ConfigurationError):
        cm.get_array("ula_no_freq")
