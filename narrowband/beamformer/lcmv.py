from __future__ import annotations

import logging

import numpy as np

from ..config import LCMVConfig
from ..constraints import ConstraintSet
from ..covariance import (
    DEFAULT_DIAGONAL_LOADING,
    DEFAULT_MAX_CONDITION,
    hermitian_factor,
    prepare_covariance,
    solve_factored,
    validate_block,
)
from ..errors import ConfigurationError
from .modes import SELF_ESTIMATED, CovarianceMode, apply_weights, estimate_covariance

logger = logging.getLogger(__name__)


def lcmv_weights(
    R: np.ndarray,
    C: np.ndarray,
    f: np.ndarray | None = None,
    diagonal_loading: float = DEFAULT_DIAGONAL_LOADING,
    max_condition_number: float = DEFAULT_MAX_CONDITION,
) -> np.ndarray:
    """Linearly constrained minimum variance weights.

    Solves min wᴴ R w subject to Cᴴ w = f:

        w = R⁻¹ C (Cᴴ R⁻¹ C)⁻¹ f

    With a single steering-vector column and f = 1 this is the MVDR
    solution. Both R (after loading) and the Gram matrix Cᴴ R⁻¹ C are
    checked against ``max_condition_number``.
    """
    if isinstance(C, ConstraintSet):
        cs = C
    elif f is None:
        raise ConfigurationError("desired response f is required with a raw constraint matrix")
    else:
        cs = ConstraintSet(C, f)
    C, f = cs.constraint, cs.desired_response
    R = np.asarray(R, dtype=np.complex128)
    N = C.shape[0]
    if R.ndim != 2 or R.shape != (N, N):
        raise ConfigurationError(f"R must be ({N},{N}) to match the constraint matrix")

    factor = prepare_covariance(R, diagonal_loading, max_condition_number)
    RiC = solve_factored(factor, C)  # (N,K)
    G = C.conj().T @ RiC  # (K,K)
    G = 0.5 * (G + G.conj().T)
    g_factor = hermitian_factor(G, max_condition_number, what="constraint Gram")
    alpha = solve_factored(g_factor, f)  # (K,)
    return (RiC @ alpha).astype(np.complex128)


class LCMVBeamformer:
    """LCMV beamformer; preserves the responses listed in a ConstraintSet.

    Flanking constraints around a nominal look direction, each with response
    1, keep the passband flat so a slightly mis-pointed source is not
    self-nulled when R is estimated from the received data.
    """

    def __init__(self, config: LCMVConfig):
        if not isinstance(config, LCMVConfig):
            raise ConfigurationError("config must be an LCMVConfig")
        self.config = config

    @property
    def constraints(self) -> ConstraintSet:
        return self.config.constraints

    def weights(self, block: np.ndarray, mode: CovarianceMode = SELF_ESTIMATED) -> np.ndarray:
        Y = validate_block(block, self.constraints.num_elements)
        R = estimate_covariance(Y, mode)
        logger.debug(
            "LCMV %s weights, %d constraints, %d samples",
            type(mode).__name__,
            self.constraints.num_constraints,
            Y.shape[0],
        )
        return lcmv_weights(
            R,
            self.constraints,
            diagonal_loading=self.config.diagonal_loading,
            max_condition_number=self.config.max_condition_number,
        )

    def apply(self, block: np.ndarray, mode: CovarianceMode = SELF_ESTIMATED) -> np.ndarray:
        return self.process(block, mode)[0]

    def process(self, block: np.ndarray, mode: CovarianceMode):
        Y = validate_block(block, self.constraints.num_elements)
        w = self.weights(Y, mode)
        return apply_weights(Y, w), w

    def __call__(self, block: np.ndarray, mode: CovarianceMode = SELF_ESTIMATED):
        y, w = self.process(block, mode)
        if self.config.weights_output:
            return y, w
        return y
