"""
Posterior probability of regions of a two-parameter space.

Answers questions such as "how likely is seller A better than seller B?",

    P(θ_A > k·θ_B | D),

either from a grid posterior (sum of cell masses where the predicate holds)
or from posterior samples (fraction of draws where it holds). Both
implementations share the ``RegionQuery`` contract so calling code does not
need to know which kind of posterior it holds.

Predicates receive NumPy arrays and must be vectorised, e.g.
``lambda a, b: a > 2 * b``.
"""

from abc import ABC, abstractmethod
from typing import Callable, Iterable, TYPE_CHECKING
import numpy as np
from numpy.typing import ArrayLike, NDArray

from posterior.errors import GridMismatch

if TYPE_CHECKING:
    from inference.sampler import PosteriorSampleSet

Predicate = Callable[[NDArray[np.float64], NDArray[np.float64]], ArrayLike]


class RegionQuery(ABC):
    """Base contract: predicate over (θ_A, θ_B) → posterior probability."""

    @abstractmethod
    def probability(self, predicate: Predicate) -> float:
        """Return P(predicate(θ_A, θ_B) | D) in [0, 1]."""

    @staticmethod
    def _mask(predicate: Predicate, theta_a, theta_b) -> NDArray[np.bool_]:
        """Evaluate a vectorised predicate and broadcast to the input shape."""
        mask = np.asarray(predicate(theta_a, theta_b), dtype=bool)
        return np.broadcast_to(mask, np.shape(theta_a))


class GridRegionQuery(RegionQuery):
    """
    Region probability over a 2-D grid posterior.

    Attributes
    ----------
    theta_a : NDArray[np.float64]
        θ_A at every cell, shape (n_a, n_b).
    theta_b : NDArray[np.float64]
        θ_B at every cell, shape (n_a, n_b).
    mass : NDArray[np.float64]
        Posterior mass per cell, shape (n_a, n_b).
    """

    def __init__(self, grid_a: ArrayLike, grid_b: ArrayLike, mass: ArrayLike) -> None:
        """
        Parameters
        ----------
        grid_a, grid_b : ArrayLike
            Grid values of θ_A and θ_B, shapes (n_a,) and (n_b,).
        mass : ArrayLike
            Joint posterior mass, shape (n_a, n_b).

        Raises
        ------
        GridMismatch
            If the mass shape does not match the grids.
        """
        values_a = np.asarray(grid_a, dtype=np.float64)
        values_b = np.asarray(grid_b, dtype=np.float64)
        mass = np.asarray(mass, dtype=np.float64)

        if values_a.ndim != 1 or values_b.ndim != 1:
            raise GridMismatch("grid_a and grid_b must be 1-D")
        if mass.shape != (values_a.size, values_b.size):
            raise GridMismatch(
                f"mass must have shape ({values_a.size}, {values_b.size}). "
                f"Got {mass.shape}"
            )

        self.theta_a, self.theta_b = np.meshgrid(values_a, values_b, indexing="ij")
        self.mass = mass

    def probability(self, predicate: Predicate) -> float:
        """Sum of cell masses where the predicate holds."""
        mask = self._mask(predicate, self.theta_a, self.theta_b)
        return float(np.clip(self.mass[mask].sum(), 0.0, 1.0))


class SampleRegionQuery(RegionQuery):
    """
    Region probability estimated from paired posterior draws.

    Attributes
    ----------
    samples_a, samples_b : NDArray[np.float64]
        Paired draws of θ_A and θ_B, shape (S,).
    """

    def __init__(self, samples_a: ArrayLike, samples_b: ArrayLike) -> None:
        samples_a = np.asarray(samples_a, dtype=np.float64).ravel()
        samples_b = np.asarray(samples_b, dtype=np.float64).ravel()
        if samples_a.shape != samples_b.shape:
            raise GridMismatch(
                f"Paired samples must have equal length. Got "
                f"{samples_a.size} and {samples_b.size}"
            )
        if samples_a.size == 0:
            raise ValueError("At least one posterior draw is required")

        self.samples_a = samples_a
        self.samples_b = samples_b

    @classmethod
    def from_sample_set(
        cls,
        sample_set: "PosteriorSampleSet",
        name_a: str,
        name_b: str,
    ) -> "SampleRegionQuery":
        """Pair two parameters of a sampler output (all chains pooled)."""
        return cls(sample_set.flat(name_a), sample_set.flat(name_b))

    def probability(self, predicate: Predicate) -> float:
        """Fraction of draws where the predicate holds."""
        mask = self._mask(predicate, self.samples_a, self.samples_b)
        return float(np.mean(mask))


def greater_than_scaled(k: float) -> Predicate:
    """Predicate θ_A > k·θ_B."""
    return lambda theta_a, theta_b: theta_a > k * theta_b


def probability_sweep(query: RegionQuery, ks: Iterable[float]) -> NDArray[np.float64]:
    """
    Evaluate P(θ_A > k·θ_B | D) for each k.

    For k > 0 the result is non-increasing in k.
    """
    return np.array([query.probability(greater_than_scaled(k)) for k in ks])
