from __future__ import annotations

import numpy as np


class BeamformingError(Exception):
    """Base class for errors raised by the narrowband package."""


class ConfigurationError(BeamformingError, ValueError):
    """Invalid geometry, frequency, shape or constraint parameters.

    Subclasses ValueError so callers validating inputs the usual way still
    catch it.
    """


class NumericalInstabilityError(BeamformingError, np.linalg.LinAlgError):
    """Covariance or constraint Gram matrix too ill-conditioned to invert.

    Attributes
    - condition_number: 2-norm condition number of the offending matrix
      (after diagonal loading, if any was configured). ``inf`` when the
      matrix is exactly singular or not positive definite.
    """

    def __init__(self, message: str, condition_number: float = float("inf")):
        super().__init__(f"{message} (condition number {condition_number:.3g})")
        self.condition_number = float(condition_number)
