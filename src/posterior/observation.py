"""
Binomial observations: successes out of trials.

An observation is recorded once and never mutated. It is either given
directly as counts (N⁺, N) or derived from a sequence of {0, 1} outcomes by
summation and counting.
"""

from dataclasses import dataclass
from typing import Sequence
import numpy as np

from posterior.errors import InvalidObservation


@dataclass(frozen=True)
class Observation:
    """
    Observed successes out of a number of trials.

    Attributes
    ----------
    successes : int
        Number of successes N⁺ (0 <= N⁺ <= N).
    trials : int
        Number of trials N (>= 0).
    """

    successes: int
    trials: int

    def __post_init__(self) -> None:
        for name in ("successes", "trials"):
            value = getattr(self, name)
            message = f"{name} must be an integer. Got {value!r}"
            if isinstance(value, (bool, np.bool_, str, bytes)):
                raise InvalidObservation(message)
            try:
                integral = float(value).is_integer()
            except (TypeError, ValueError) as e:
                raise InvalidObservation(message) from e
            if not integral:
                raise InvalidObservation(message)
            # Normalise numpy integers / integral floats to int
            object.__setattr__(self, name, int(value))

        if self.trials < 0 or self.successes < 0:
            raise InvalidObservation(
                f"Counts must be non-negative. Got successes={self.successes}, "
                f"trials={self.trials}"
            )
        if self.successes > self.trials:
            raise InvalidObservation(
                f"successes ({self.successes}) cannot exceed trials ({self.trials})"
            )

    @classmethod
    def from_outcomes(cls, outcomes: Sequence[int]) -> "Observation":
        """
        Build an observation from i.i.d. Bernoulli outcomes.

        Parameters
        ----------
        outcomes : Sequence[int]
            Outcomes in {0, 1}.

        Returns
        -------
        Observation
            N⁺ = sum(outcomes), N = len(outcomes).

        Raises
        ------
        InvalidObservation
            If any outcome is not 0 or 1.
        """
        y = np.asarray(outcomes).ravel()
        if y.size and not np.all((y == 0) | (y == 1)):
            raise InvalidObservation(f"Outcomes must be 0 or 1. Got {np.unique(y)}")
        return cls(successes=int(y.sum()), trials=int(y.size))

    @property
    def failures(self) -> int:
        """Number of failures N − N⁺."""
        return self.trials - self.successes
