"""Named array and beamformer presets from JSON files.

``<config_dir>/arrays.json`` maps preset names to geometry parameters and
``<config_dir>/beamformers.json`` maps preset names to beamformer settings.
Both files may contain ``//`` and ``/* */`` comments and trailing commas.
"""

from __future__ import annotations

import json
import logging
import re
from pathlib import Path

import numpy as np

from .beamformer.lcmv import LCMVBeamformer
from .beamformer.mvdr import MVDRBeamformer
from .beamformer.phase import PhaseShiftBeamformer
from .config import LCMVConfig, MVDRConfig, PhaseShiftConfig
from .constraints import ConstraintSet, flanking_directions
from .elements import cosine_element, isotropic_element
from .errors import ConfigurationError
from .geometry import ArrayGeometry, make_array
from .steering import C_MPS

logger = logging.getLogger(__name__)


def parse_json_with_comments(path: str | Path) -> dict:
    with open(path, "r", encoding="utf-8") as f:
        text = f.read()
    # remove /* ... */
    text = re.sub(r"/\*.*?\*/", "", text, flags=re.S)
    # strip // comments outside string literals
    text = "\n".join(re.sub(r'^((?:[^"\n]|"[^"\n]*")*?)//.*$', r"\1", line) for line in text.splitlines())
    # remove trailing commas before ] or }
    text = re.sub(r",(\s*[\]}])", r"\1", text)
    try:
        return json.loads(text)
    except json.JSONDecodeError as e:
        raise ConfigurationError(f"failed to parse {path}: {e}") from e


class ConfigManager:
    """Build geometries and beamformers from named presets.

    Args:
        config_dir: Directory holding ``arrays.json`` and ``beamformers.json``.
    """

    def __init__(self, config_dir: str | Path = "config"):
        self.config_dir = Path(config_dir)
        self.array_configs = self._load_any("arrays.json")
        self.beamformer_configs = self._load_any("beamformers.json")

    def _load_any(self, filename: str) -> dict:
        path = self.config_dir / filename
        if not path.exists():
            logger.warning("%s not found, no presets loaded", path)
            return {}
        data = parse_json_with_comments(path)
        if not isinstance(data, dict):
            raise ConfigurationError(f"{path} must contain a JSON object of presets")
        return data

    # -------- geometry --------
    def _element(self, cfg: dict):
        elem = cfg.get("element")
        if elem is None:
            return None
        kind = str(elem.get("type", "isotropic")).lower()
        band = elem.get("frequency_range")
        if kind == "isotropic":
            return isotropic_element(band)
        if kind == "cosine":
            return cosine_element(elem.get("exponent", 1.5), band)
        raise ConfigurationError(f"unknown element type: {kind}")

    def get_array(self, name: str) -> ArrayGeometry:
        """Create an ``ArrayGeometry`` from an arrays.json preset.

        Spacing is given either in meters (``spacing``) or in wavelengths of
        the preset ``frequency`` (``spacing_wavelengths``).
        """
        if name not in self.array_configs:
            raise ConfigurationError(f"Unknown array config: {name}")
        cfg = self.array_configs[name]
        if "spacing" in cfg:
            spacing = cfg["spacing"]
        elif "spacing_wavelengths" in cfg:
            if "frequency" not in cfg:
                raise ConfigurationError(f"array config {name} gives spacing_wavelengths but no frequency")
            lam = float(cfg.get("propagation_speed", C_MPS)) / float(cfg["frequency"])
            spacing = np.asarray(cfg["spacing_wavelengths"], dtype=np.float64) * lam
            spacing = float(spacing) if spacing.ndim == 0 else tuple(spacing.tolist())
        else:
            spacing = None
        size = cfg.get("size")
        return make_array(
            cfg.get("layout", "ula"),
            num_elements=cfg.get("num_elements"),
            spacing=spacing,
            size=tuple(size) if size is not None else None,
            custom_xyz=np.asarray(cfg["xyz"], dtype=np.float64) if "xyz" in cfg else None,
            element=self._element(cfg),
        )

    def get_frequency(self, name: str) -> float:
        if name not in self.array_configs or "frequency" not in self.array_configs[name]:
            raise ConfigurationError(f"array config {name} has no frequency")
        return float(self.array_configs[name]["frequency"])

    # -------- beamformers --------
    def get_beamformer(self, name: str, geometry: ArrayGeometry, frequency: float):
        """Create a configured beamformer from a beamformers.json preset."""
        if name not in self.beamformer_configs:
            raise ConfigurationError(f"Unknown beamformer config: {name}")
        cfg = self.beamformer_configs[name]
        kind = str(cfg.get("type", "")).lower()
        speed = float(cfg.get("propagation_speed", C_MPS))
        adaptive = {
            k: cfg[k] for k in ("diagonal_loading", "max_condition_number") if k in cfg
        }
        weights_output = bool(cfg.get("weights_output", False))

        if kind == "phaseshift":
            return PhaseShiftBeamformer(
                PhaseShiftConfig(geometry, frequency, cfg.get("direction", 0.0), speed, weights_output)
            )
        if kind == "mvdr":
            return MVDRBeamformer(
                MVDRConfig(
                    geometry,
                    frequency,
                    cfg.get("direction", 0.0),
                    speed,
                    weights_output=weights_output,
                    **adaptive,
                )
            )
        if kind == "lcmv":
            if "flank" in cfg:
                fl = cfg["flank"]
                directions = flanking_directions(
                    fl["direction"], float(fl.get("offset", 2.0)), int(fl.get("count", 1))
                )
            elif "directions" in cfg:
                directions = cfg["directions"]
            else:
                raise ConfigurationError(f"lcmv preset {name} needs 'directions' or 'flank'")
            constraints = ConstraintSet.from_directions(
                geometry, frequency, directions, cfg.get("responses", 1.0), speed
            )
            return LCMVBeamformer(LCMVConfig(constraints, weights_output=weights_output, **adaptive))
        raise ConfigurationError(f"unknown beamformer type {kind!r} in preset {name}")

    def list_available_configs(self) -> dict:
        """Return {'arrays': [...], 'beamformers': [...]} preset names."""
        return {
            "arrays": sorted(self.array_configs),
            "beamformers": sorted(self.beamformer_configs),
        }
