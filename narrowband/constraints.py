from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, List, Sequence

import numpy as np

from .errors import ConfigurationError
from .geometry import ArrayGeometry
from .steering import C_MPS, Direction, DirectionLike, as_direction, steering_matrix


@dataclass(frozen=True, eq=False)
class ConstraintSet:
    """Linear constraints Cᴴ w = f for the LCMV beamformer.

    - constraint: (N,K) complex matrix; columns are steering vectors or any
      weight templates. A 1D (N,) input is treated as K=1.
    - desired_response: (K,) complex responses; a scalar broadcasts to K.
    """

    constraint: np.ndarray
    desired_response: np.ndarray | complex | float = 1.0

    def __post_init__(self) -> None:
        C = np.array(self.constraint, dtype=np.complex128, copy=True)
        if C.ndim == 1:
            C = C[:, None]
        if C.ndim != 2 or C.shape[0] < 1 or C.shape[1] < 1:
            raise ConfigurationError("constraint must be a non-empty (N,K) matrix")
        if not np.isfinite(C).all():
            raise ConfigurationError("constraint contains NaN/inf")
        N, K = C.shape
        if K > N:
            raise ConfigurationError(f"{K} constraints exceed the {N} degrees of freedom")

        f = np.array(self.desired_response, dtype=np.complex128, copy=True)
        if f.ndim == 0:
            f = np.full(K, complex(f), dtype=np.complex128)
        f = f.ravel() if f.ndim == 2 and 1 in f.shape else f
        if f.ndim != 1 or f.shape[0] != K:
            raise ConfigurationError(
                f"desired_response has length {f.size} but the constraint matrix has {K} columns"
            )
        if not np.isfinite(f).all():
            raise ConfigurationError("desired_response contains NaN/inf")

        C.setflags(write=False)
        f.setflags(write=False)
        object.__setattr__(self, "constraint", C)
        object.__setattr__(self, "desired_response", f)

    @property
    def num_elements(self) -> int:
        return int(self.constraint.shape[0])

    @property
    def num_constraints(self) -> int:
        return int(self.constraint.shape[1])

    def residual(self, weights: np.ndarray) -> np.ndarray:
        """Cᴴ w - f, zero when the constraints hold."""
        w = np.asarray(weights, dtype=np.complex128).ravel()
        return self.constraint.conj().T @ w - self.desired_response

    @classmethod
    def from_directions(
        cls,
        geometry: ArrayGeometry,
        freq_hz: float,
        directions: Iterable[DirectionLike],
        responses: Sequence[complex] | complex = 1.0,
        propagation_speed: float = C_MPS,
    ) -> "ConstraintSet":
        """Steering vectors toward ``directions`` as constraint columns."""
        dirs = [as_direction(d) for d in directions]
        if not dirs:
            raise ConfigurationError("at least one constraint direction is required")
        az = np.array([d.az for d in dirs])
        el = np.array([d.el for d in dirs])
        C = steering_matrix(geometry, freq_hz, az, el, propagation_speed)
        return cls(C, responses)


def flanking_directions(
    direction: DirectionLike, offset_deg: float = 2.0, count: int = 1
) -> List[Direction]:
    """Nominal direction followed by ``count`` pairs at ∓k·offset in azimuth.

    flanking_directions((43, 0), 2.0) -> [(43,0), (41,0), (45,0)]
    """
    if offset_deg <= 0 or not np.isfinite(offset_deg):
        raise ConfigurationError("offset_deg must be positive")
    if not isinstance(count, int) or count < 0:
        raise ConfigurationError("count must be a non-negative integer")
    d = as_direction(direction)
    out = [d]
    for k in range(1, count + 1):
        out.append(as_direction((d.az - k * offset_deg, d.el)))
        out.append(as_direction((d.az + k * offset_deg, d.el)))
    return out
