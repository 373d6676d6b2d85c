"""Narrowband array beamforming: phase shift, MVDR and LCMV.

Public API is a thin functional core plus configured beamformer objects.
See module docstrings for equations, conventions and defaults.
"""

from .errors import BeamformingError, ConfigurationError, NumericalInstabilityError
from .elements import isotropic_element, cosine_element
from .geometry import (
    ArrayGeometry,
    linear_array,
    rectangular_array,
    custom_array,
    make_array,
)
from .grids import make_az_el_grid, azimuth_cut
from .steering import (
    C_MPS,
    Direction,
    as_direction,
    direction_vectors,
    steering_matrix,
    steering_vector,
    steering_wideband,
    wavelength,
    wavenumber,
)
from .covariance import (
    DEFAULT_DIAGONAL_LOADING,
    DEFAULT_MAX_CONDITION,
    sample_covariance,
    diagonal_load,
    loading_level,
    condition_number,
)
from .constraints import ConstraintSet, flanking_directions
from .config import PhaseShiftConfig, MVDRConfig, LCMVConfig
from .beamformer.modes import SelfEstimated, Trained, SELF_ESTIMATED
from .beamformer.phase import (
    design_phase_shift_weights,
    weights_over_band,
    PhaseShiftBeamformer,
)
from .beamformer.mvdr import mvdr_weights, mvdr_spectrum, MVDRBeamformer
from .beamformer.lcmv import lcmv_weights, LCMVBeamformer
from .pattern import (
    BeamPattern,
    array_response,
    beam_pattern,
    iter_beam_pattern,
    null_depth_db,
    half_power_beamwidth,
    peak_sidelobe_db,
)
from .synthesis import (
    make_rng,
    time_axis,
    rectangular_pulse,
    collect_plane_wave,
    complex_noise,
    gaussian_interference,
    Scenario,
    synthesize_scenario,
)
from .metrics import (
    directional_gain,
    output_power,
    white_noise_gain,
    output_sinr,
    snr_gain_db,
)
from .batch import process_blocks
from .weights_io import (
    save_weights_h5,
    load_weights_h5,
    save_pattern_json,
    load_pattern_json,
)
from .config_loader import ConfigManager, parse_json_with_comments

__all__ = [
    "BeamformingError",
    "ConfigurationError",
    "NumericalInstabilityError",
    "isotropic_element",
    "cosine_element",
    "ArrayGeometry",
    "linear_array",
    "rectangular_array",
    "custom_array",
    "make_array",
    "make_az_el_grid",
    "azimuth_cut",
    "C_MPS",
    "Direction",
    "as_direction",
    "direction_vectors",
    "steering_matrix",
    "steering_vector",
    "steering_wideband",
    "wavelength",
    "wavenumber",
    "DEFAULT_DIAGONAL_LOADING",
    "DEFAULT_MAX_CONDITION",
    "sample_covariance",
    "diagonal_load",
    "loading_level",
    "condition_number",
    "ConstraintSet",
    "flanking_directions",
    "PhaseShiftConfig",
    "MVDRConfig",
    "LCMVConfig",
    "SelfEstimated",
    "Trained",
    "SELF_ESTIMATED",
    "design_phase_shift_weights",
    "weights_over_band",
    "PhaseShiftBeamformer",
    "mvdr_weights",
    "mvdr_spectrum",
    "MVDRBeamformer",
    "lcmv_weights",
    "LCMVBeamformer",
    "BeamPattern",
    "array_response",
    "beam_pattern",
    "iter_beam_pattern",
    "null_depth_db",
    "half_power_beamwidth",
    "peak_sidelobe_db",
    "make_rng",
    "time_axis",
    "rectangular_pulse",
    "collect_plane_wave",
    "complex_noise",
    "gaussian_interference",
    "Scenario",
    "synthesize_scenario",
    "directional_gain",
    "output_power",
    "white_noise_gain",
    "output_sinr",
    "snr_gain_db",
    "process_blocks",
    "save_weights_h5",
    "load_weights_h5",
    "save_pattern_json",
    "load_pattern_json",
    "ConfigManager",
    "parse_json_with_comments",
]
