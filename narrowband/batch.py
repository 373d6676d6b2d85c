"""Run one beamformer over many independent signal blocks.

Each call is self-contained (weights are recomputed per block for adaptive
beamformers), so blocks are farmed out with joblib and results come back in
input order.
"""

from __future__ import annotations

import logging
import time
from typing import List, Sequence, Tuple, Union

import numpy as np
from joblib import Parallel, delayed

from .beamformer.lcmv import LCMVBeamformer
from .beamformer.modes import SELF_ESTIMATED, CovarianceMode
from .beamformer.mvdr import MVDRBeamformer
from .beamformer.phase import PhaseShiftBeamformer
from .errors import ConfigurationError

logger = logging.getLogger(__name__)

Beamformer = Union[PhaseShiftBeamformer, MVDRBeamformer, LCMVBeamformer]


def _process_one(beamformer, block: np.ndarray, mode: CovarianceMode) -> Tuple[np.ndarray, np.ndarray]:
    if isinstance(beamformer, PhaseShiftBeamformer):
        return beamformer.apply(block), beamformer.weights()
    return beamformer.process(block, mode)


def process_blocks(
    beamformer: Beamformer,
    blocks: Sequence[np.ndarray],
    modes: Sequence[CovarianceMode] | None = None,
    n_jobs: int = 1,
    prefer: str = "threads",
) -> List[Tuple[np.ndarray, np.ndarray]]:
    """Beamform each block; return [(y, w), ...] in the order of ``blocks``.

    Parameters
    - beamformer: a configured phase-shift, MVDR or LCMV beamformer.
    - blocks: sequence of (T,N) signal blocks (T may differ between blocks).
    - modes: per-block covariance modes for adaptive beamformers; defaults
      to self-estimation for every block. Ignored by the phase shifter.
    - n_jobs: joblib worker count (-1 = all cores, 1 = serial).
    - prefer: joblib backend hint, "threads" or "processes".
    """
    if not isinstance(beamformer, (PhaseShiftBeamformer, MVDRBeamformer, LCMVBeamformer)):
        raise ConfigurationError("beamformer must be a PhaseShift, MVDR or LCMV beamformer")
    blocks = list(blocks)
    if modes is None:
        modes = [SELF_ESTIMATED] * len(blocks)
    else:
        modes = list(modes)
        if len(modes) != len(blocks):
            raise ConfigurationError(f"{len(blocks)} blocks but {len(modes)} modes")

    start = time.time()
    if n_jobs == 1:
        results = [_process_one(beamformer, b, m) for b, m in zip(blocks, modes)]
    else:
        results = Parallel(n_jobs=n_jobs, prefer=prefer)(
            delayed(_process_one)(beamformer, b, m) for b, m in zip(blocks, modes)
        )
    logger.info(
        "%s processed %d blocks in %.3fs (n_jobs=%s)",
        type(beamformer).__name__,
        len(blocks),
        time.time() - start,
        n_jobs,
    )
    return list(results)
