from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple

import numpy as np

from .elements import ElementResponse
from .errors import ConfigurationError


def _validate_xyz(xyz: np.ndarray) -> np.ndarray:
    if not isinstance(xyz, np.ndarray):
        raise ConfigurationError("xyz must be a numpy ndarray")
    if xyz.ndim != 2 or xyz.shape[1] != 3:
        raise ConfigurationError("xyz must have shape (N,3)")
    if xyz.shape[0] < 1:
        raise ConfigurationError("an array needs at least one element")
    if not np.isfinite(xyz).all():
        raise ConfigurationError("xyz contains NaN or inf")
    return np.asarray(xyz, dtype=np.float64)


def _ensure_unique(xyz: np.ndarray, tol: float = 1e-9) -> None:
    # Check minimum pairwise spacing >= tol using a hash on rounded coords.
    rounded = np.round(xyz / tol).astype(np.int64)
    uniq = np.unique(rounded, axis=0)
    if uniq.shape[0] != xyz.shape[0]:
        raise ConfigurationError("Element positions must be unique (>=1e-9 m apart)")


def _positive_count(value, name: str) -> int:
    if isinstance(value, bool) or not isinstance(value, (int, np.integer)) or value < 1:
        raise ConfigurationError(f"{name} must be a positive integer")
    return int(value)


def _positive_spacing(value, name: str) -> float:
    try:
        v = float(value)
    except (TypeError, ValueError) as e:
        raise ConfigurationError(f"{name} must be a number") from e
    if not np.isfinite(v) or v <= 0:
        raise ConfigurationError(f"{name} must be positive and finite")
    return v


def _centered(n: int, spacing: float) -> np.ndarray:
    return (np.arange(n, dtype=np.float64) - (n - 1) / 2.0) * spacing


@dataclass(frozen=True, eq=False)
class ArrayGeometry:
    """Immutable set of point-sensor positions plus an optional element response.

    Build instances with :func:`linear_array`, :func:`rectangular_array`,
    :func:`custom_array` or :func:`make_array`. The position array is marked
    read-only so a geometry can be shared between threads and workers.
    """

    xyz: np.ndarray
    element: ElementResponse | None = None
    layout: str = "custom"

    def __post_init__(self) -> None:
        xyz = np.array(_validate_xyz(self.xyz), dtype=np.float64, copy=True)
        _ensure_unique(xyz)
        xyz.setflags(write=False)
        object.__setattr__(self, "xyz", xyz)
        if self.element is not None and not callable(self.element):
            raise ConfigurationError("element must be callable (az_deg, el_deg, freq_hz) -> gains")

    @property
    def num_elements(self) -> int:
        return int(self.xyz.shape[0])

    def positions(self) -> np.ndarray:
        """Return the (N,3) element coordinates in meters (read-only view)."""
        return self.xyz

    def element_gain(self, az_deg, el_deg, freq_hz: float) -> np.ndarray:
        """Return (N,D) real element gains for D directions at ``freq_hz``.

        Isotropic geometries (no element response) return ones.
        """
        az = np.atleast_1d(np.asarray(az_deg, dtype=np.float64)).ravel()
        el = np.atleast_1d(np.asarray(el_deg, dtype=np.float64)).ravel()
        az, el = np.broadcast_arrays(az, el)
        N, D = self.num_elements, az.size
        if self.element is None:
            return np.ones((N, D), dtype=np.float64)
        g = np.asarray(self.element(az, el, float(freq_hz)), dtype=np.float64)
        try:
            g = np.broadcast_to(g, (N, D))
        except ValueError as e:
            raise ConfigurationError(
                f"element response returned shape {g.shape}, expected broadcastable to ({N},{D})"
            ) from e
        if not np.isfinite(g).all():
            raise ConfigurationError("element response returned NaN/inf")
        return g

    def aperture(self) -> float:
        """Largest distance between any two elements (m)."""
        if self.num_elements == 1:
            return 0.0
        diff = self.xyz[:, None, :] - self.xyz[None, :, :]
        return float(np.max(np.linalg.norm(diff, axis=2)))

    def __len__(self) -> int:
        return self.num_elements

    def __repr__(self) -> str:
        return f"ArrayGeometry(layout={self.layout!r}, num_elements={self.num_elements})"


def linear_array(
    num_elements: int, spacing: float, element: ElementResponse | None = None
) -> ArrayGeometry:
    """Uniform linear array along +y, centered at the origin (broadside = azimuth 0)."""
    n = _positive_count(num_elements, "num_elements")
    d = _positive_spacing(spacing, "spacing")
    ys = _centered(n, d)
    xyz = np.column_stack([np.zeros_like(ys), ys, np.zeros_like(ys)])
    return ArrayGeometry(xyz, element=element, layout="ula")


def rectangular_array(
    rows: int,
    cols: int,
    row_spacing: float,
    col_spacing: float | None = None,
    element: ElementResponse | None = None,
) -> ArrayGeometry:
    """Uniform rectangular array in the y-z plane, centered at the origin.

    Rows stack along z (first row on top), columns along y. Elements are
    ordered down each column first. ``col_spacing`` defaults to ``row_spacing``.
    """
    nr = _positive_count(rows, "rows")
    nc = _positive_count(cols, "cols")
    dr = _positive_spacing(row_spacing, "row_spacing")
    dc = dr if col_spacing is None else _positive_spacing(col_spacing, "col_spacing")
    zs = -_centered(nr, dr)
    ys = _centered(nc, dc)
    YY, ZZ = np.meshgrid(ys, zs, indexing="xy")  # (nr, nc)
    # Column-major flatten: element index runs down each column
    y = YY.ravel(order="F")
    z = ZZ.ravel(order="F")
    xyz = np.column_stack([np.zeros_like(y), y, z])
    return ArrayGeometry(xyz, element=element, layout="ura")


def custom_array(
    xyz: np.ndarray, element: ElementResponse | None = None, recenter: bool = True
) -> ArrayGeometry:
    """Arbitrary layout from (N,3) positions in meters, optionally re-centered to the mean."""
    if isinstance(xyz, (list, tuple)):
        xyz = np.asarray(xyz, dtype=np.float64)
    pts = _validate_xyz(xyz)
    if recenter:
        pts = pts - pts.mean(axis=0, keepdims=True)
    return ArrayGeometry(pts, element=element, layout="custom")


def make_array(
    layout: str,
    num_elements: int | None = None,
    spacing: float | Tuple[float, float] | None = None,
    size: Tuple[int, int] | None = None,
    custom_xyz: np.ndarray | None = None,
    element: ElementResponse | None = None,
) -> ArrayGeometry:
    """Build a geometry by layout name.

    Parameters
    - layout: one of {"ula", "ura", "custom"}.
      - "ula": needs ``num_elements`` and scalar ``spacing``.
      - "ura": needs ``size=(rows, cols)`` and ``spacing`` as a scalar or
        ``(row_spacing, col_spacing)``.
      - "custom": needs ``custom_xyz`` (N,3); positions are re-centered.
    - element: optional element response shared by all elements.
    """
    layout = str(layout).lower()

    if layout not in {"ula", "ura", "custom"}:
        raise ConfigurationError("layout must be one of {'ula','ura','custom'}")

    if layout == "custom":
        if custom_xyz is None:
            raise ConfigurationError("custom_xyz is required when layout='custom'")
        return custom_array(custom_xyz, element=element)

    if spacing is None:
        raise ConfigurationError("spacing must be provided for ula/ura layouts")

    if layout == "ula":
        if num_elements is None:
            raise ConfigurationError("num_elements must be provided for ula")
        return linear_array(num_elements, spacing, element=element)

    if size is None or len(size) != 2:
        raise ConfigurationError("size=(rows, cols) must be provided for ura")
    if np.isscalar(spacing):
        row_sp = col_sp = spacing
    else:
        row_sp, col_sp = spacing
    return rectangular_array(size[0], size[1], row_sp, col_sp, element=element)
