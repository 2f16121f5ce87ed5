"""
Unit tests for observations and parameter grids.
"""

import dataclasses

import pytest
import numpy as np
from numpy.testing import assert_allclose, assert_array_equal

from posterior.errors import InvalidObservation, PosteriorError
from posterior.grid import Grid
from posterior.observation import Observation


class TestObservation:
    """Tests for Observation."""

    def test_initialization(self) -> None:
        """Test basic initialization."""
        obs = Observation(7, 10)
        assert obs.successes == 7
        assert obs.trials == 10
        assert obs.failures == 3

    def test_from_outcomes(self) -> None:
        """Counts are derived by summing and counting."""
        obs = Observation.from_outcomes([1, 0, 1, 1, 0])
        assert obs == Observation(3, 5)

    def test_empty_outcomes(self) -> None:
        """No outcomes gives (0, 0)."""
        assert Observation.from_outcomes([]) == Observation(0, 0)

    def test_numpy_integers_are_normalised(self) -> None:
        """NumPy integers and integral floats become int."""
        obs = Observation(np.int64(2), 4.0)
        assert isinstance(obs.successes, int)
        assert isinstance(obs.trials, int)

    @pytest.mark.parametrize(
        "successes,trials",
        [(-1, 5), (3, -1), (6, 5), (2.5, 5), (True, 5), (None, 3), ("3", 4), (3, [4])],
    )
    def test_invalid_counts(self, successes, trials) -> None:
        """Negative, excessive, fractional, boolean or non-numeric counts are rejected."""
        with pytest.raises(InvalidObservation):
            Observation(successes, trials)

    def test_invalid_outcomes(self) -> None:
        """Outcomes outside {0, 1} are rejected."""
        with pytest.raises(InvalidObservation, match="0 or 1"):
            Observation.from_outcomes([0, 1, 2])

    def test_error_is_value_error(self) -> None:
        """The error hierarchy is catchable as ValueError."""
        with pytest.raises(ValueError):
            Observation(5, 3)
        assert issubclass(InvalidObservation, PosteriorError)

    def test_immutable(self) -> None:
        """Observations are frozen."""
        obs = Observation(1, 2)
        with pytest.raises(dataclasses.FrozenInstanceError):
            obs.successes = 2


class TestGrid:
    """Tests for Grid."""

    def test_from_range(self) -> None:
        """Step 0.1 over [0, 1] has 11 points."""
        grid = Grid.from_range(0.0, 1.0, 0.1)
        assert len(grid) == 11
        assert_allclose(grid[7], 0.7)
        assert_allclose(grid.step, 0.1)

    def test_unit_interval(self) -> None:
        """Default unit grid has 101 points, inclusive endpoints."""
        grid = Grid.unit_interval()
        assert len(grid) == 101
        assert grid[0] == 0.0
        assert grid[-1] == 1.0

    def test_read_only(self) -> None:
        """Backing array cannot be modified."""
        grid = Grid([0.0, 0.5, 1.0])
        with pytest.raises(ValueError):
            grid.values[0] = 0.1

    def test_as_array(self) -> None:
        """Grids convert to arrays."""
        grid = Grid([0.0, 0.5, 1.0])
        assert_array_equal(np.asarray(grid), [0.0, 0.5, 1.0])

    @pytest.mark.parametrize(
        "values",
        [[], [0.0, 0.0, 1.0], [1.0, 0.5, 0.0], [0.0, 0.1, 0.5], [0.0, np.nan]],
    )
    def test_invalid_values(self, values) -> None:
        """Empty, non-increasing, non-uniform or non-finite grids are rejected."""
        with pytest.raises(ValueError):
            Grid(values)

    def test_invalid_range(self) -> None:
        """Range must be a whole number of positive steps."""
        with pytest.raises(ValueError, match="multiple"):
            Grid.from_range(0.0, 1.0, 0.3)
        with pytest.raises(ValueError, match="positive"):
            Grid.from_range(0.0, 1.0, 0.0)

    def test_single_point(self) -> None:
        """A single point is a valid grid with step 0."""
        grid = Grid([0.5])
        assert len(grid) == 1
        assert grid.step == 0.0

    def test_unit_interval_check(self) -> None:
        """Values outside [0, 1] fail the probability check."""
        Grid([0.0, 0.5, 1.0]).check_unit_interval()
        with pytest.raises(ValueError, match=r"\[0, 1\]"):
            Grid([-0.5, 0.0, 0.5]).check_unit_interval()

    def test_index_of(self) -> None:
        """Nearest grid index, optionally with tolerance."""
        grid = Grid.from_range(0.0, 1.0, 0.1)
        assert grid.index_of(0.7) == 7
        assert grid.index_of(0.72) == 7
        with pytest.raises(ValueError):
            grid.index_of(0.75, atol=0.01)
