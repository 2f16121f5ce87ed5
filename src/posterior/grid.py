"""
Parameter grids for discrete posterior approximation.

A grid discretises the support of a continuous parameter into an ordered
set of points with a fixed step. Posterior mass functions are then defined
point-wise on a grid (1-D) or on the Cartesian product of two grids (2-D).

The grid resolution is an explicit argument of every analysis; there is no
module-level state.
"""

from typing import Optional, Sequence
import numpy as np
from numpy.typing import NDArray


class Grid:
    """
    Immutable, strictly increasing, uniformly spaced parameter grid.

    Attributes
    ----------
    values : NDArray[np.float64]
        Grid points, shape (n,). Read-only.
    step : float
        Spacing between consecutive points (0.0 for a single-point grid).
    """

    def __init__(
        self,
        values: Sequence[float],
        validate: bool = True,
    ) -> None:
        """
        Initialize grid from explicit values.

        Parameters
        ----------
        values : Sequence[float]
            Grid points in increasing order.
        validate : bool, optional
            If True, check the grid invariants. Default is True.

        Raises
        ------
        ValueError
            If the grid is empty, not 1-D, non-finite, not strictly
            increasing, or not uniformly spaced.
        """
        values = np.array(values, dtype=np.float64)
        if validate:
            self._validate(values)

        values.flags.writeable = False
        self._values = values
        self.step: float = float(values[1] - values[0]) if values.size > 1 else 0.0

    @staticmethod
    def _validate(values: NDArray[np.float64]) -> None:
        """Check that the grid is a non-empty, finite, uniform, increasing sequence."""
        if values.ndim != 1:
            raise ValueError(f"Grid must be 1-D. Got shape {values.shape}")
        if values.size == 0:
            raise ValueError("Grid must contain at least one point")
        if not np.all(np.isfinite(values)):
            raise ValueError("Grid values must be finite")

        steps = np.diff(values)
        if np.any(steps <= 0):
            raise ValueError("Grid values must be strictly increasing")
        if steps.size and not np.allclose(steps, steps[0], rtol=1e-6, atol=0.0):
            raise ValueError(
                f"Grid must have a fixed step. Got steps in "
                f"[{steps.min():.6g}, {steps.max():.6g}]"
            )

    @classmethod
    def from_range(cls, start: float, stop: float, step: float) -> "Grid":
        """
        Build the grid start, start + step, ..., stop (inclusive).

        Parameters
        ----------
        start : float
            First grid point.
        stop : float
            Last grid point. (stop - start) must be a multiple of step.
        step : float
            Positive spacing.

        Returns
        -------
        Grid
            Uniform grid over [start, stop].
        """
        if step <= 0:
            raise ValueError(f"step must be positive. Got {step}")
        if stop < start:
            raise ValueError(f"stop must be >= start. Got start={start}, stop={stop}")

        n_intervals = (stop - start) / step
        n = int(round(n_intervals))
        if not np.isclose(n_intervals, n, rtol=0.0, atol=1e-9):
            raise ValueError(
                f"(stop - start) must be a multiple of step. Got "
                f"start={start}, stop={stop}, step={step}"
            )
        return cls(np.linspace(start, stop, n + 1), validate=False)

    @classmethod
    def unit_interval(cls, step: float = 0.01) -> "Grid":
        """Grid over [0, 1] with the given step (0.1 → 11 points, 0.01 → 101)."""
        return cls.from_range(0.0, 1.0, step)

    @property
    def values(self) -> NDArray[np.float64]:
        """Grid points (read-only view)."""
        return self._values

    def check_unit_interval(self) -> None:
        """
        Raise ValueError unless every grid point lies in [0, 1].

        Required by the binomial engine, whose parameter is a probability.
        """
        if self._values[0] < 0.0 or self._values[-1] > 1.0:
            raise ValueError(
                f"Grid values must lie in [0, 1]. Got "
                f"[{self._values[0]}, {self._values[-1]}]"
            )

    def index_of(self, value: float, atol: Optional[float] = None) -> int:
        """
        Index of the grid point closest to ``value``.

        Parameters
        ----------
        value : float
            Parameter value.
        atol : float, optional
            If given, raise ValueError when the closest point is farther
            than atol from value.
        """
        idx = int(np.argmin(np.abs(self._values - value)))
        if atol is not None and abs(self._values[idx] - value) > atol:
            raise ValueError(f"No grid point within {atol} of {value}")
        return idx

    def __len__(self) -> int:
        return int(self._values.size)

    def __getitem__(self, idx):
        return self._values[idx]

    def __array__(self, dtype=None, copy=None):
        values = self._values if dtype is None else self._values.astype(dtype)
        return values.copy() if copy else values

    def __repr__(self) -> str:
        """String representation."""
        return (
            f"Grid(n={len(self)}, start={self._values[0]:.6g}, "
            f"stop={self._values[-1]:.6g}, step={self.step:.6g})"
        )
