from __future__ import annotations

import json

import h5py
import numpy as np

from .errors import ConfigurationError
from .geometry import ArrayGeometry
from .pattern import BeamPattern


def save_weights_h5(
    path: str,
    geometry: ArrayGeometry,
    fc_hz: float,
    weights: np.ndarray,
    attrs: dict | None = None,
) -> None:
    """Save weight vector(s), array positions, and metadata to HDF5.

    Datasets
    - xyz_m: (N,3) float64
    - weights: (N,) or (B,N) complex128
    Attributes
    - fc_hz: float64
    - layout: geometry layout tag
    - Any additional attrs items are saved as attributes on the file root.
    """
    xyz = np.asarray(geometry.positions(), dtype=np.float64)
    w = np.asarray(weights, dtype=np.complex128)
    if w.shape[-1] != geometry.num_elements:
        raise ConfigurationError("weights last dimension must equal the number of elements")
    with h5py.File(path, "w") as f:
        f.create_dataset("xyz_m", data=xyz)
        f.create_dataset("weights", data=w)
        f.attrs["fc_hz"] = float(fc_hz)
        f.attrs["layout"] = geometry.layout
        if attrs is not None:
            for k, v in attrs.items():
                # h5py supports many types; convert unsupported to JSON string
                try:
                    f.attrs[k] = v
                except TypeError:
                    f.attrs[k] = json.dumps(v)


def load_weights_h5(path: str) -> dict:
    """Load a file written by save_weights_h5.

    Returns a dict with keys: geometry, fc_hz, weights, attrs. The geometry is
    rebuilt from stored positions (element responses are not persisted).
    """
    with h5py.File(path, "r") as f:
        xyz = np.array(f["xyz_m"], dtype=np.float64)
        w = np.array(f["weights"], dtype=np.complex128)
        fc = float(f.attrs["fc_hz"]) if "fc_hz" in f.attrs else None
        layout = f.attrs.get("layout", "custom")
        if isinstance(layout, bytes):
            layout = layout.decode("utf-8")
        attrs = {k: f.attrs[k] for k in f.attrs.keys() if k not in ("fc_hz", "layout")}
    geometry = ArrayGeometry(xyz, layout=str(layout))
    return {"geometry": geometry, "fc_hz": fc, "weights": w, "attrs": attrs}


def save_pattern_json(path: str, pattern: BeamPattern) -> None:
    """Save a beam pattern to JSON for reporting tools."""
    obj = {
        "kind": pattern.kind,
        "normalized": bool(pattern.normalized),
        "az_deg": np.asarray(pattern.az_deg, dtype=np.float64).tolist(),
        "el_deg": np.asarray(pattern.el_deg, dtype=np.float64).tolist(),
        "values": np.asarray(pattern.values, dtype=np.float64).tolist(),
    }
    with open(path, "w", encoding="utf-8") as f:
        json.dump(obj, f)


def load_pattern_json(path: str) -> BeamPattern:
    """Load a pattern saved by save_pattern_json."""
    with open(path, "r", encoding="utf-8") as f:
        obj = json.load(f)
    az = np.array(obj["az_deg"], dtype=np.float64)
    el = np.array(obj["el_deg"], dtype=np.float64)
    vals = np.array(obj["values"], dtype=np.float64)
    if not (az.size == el.size == vals.size):
        raise ConfigurationError("JSON pattern size mismatch")
    return BeamPattern(az, el, vals, obj.get("kind", "powerdb"), bool(obj.get("normalized", False)))
