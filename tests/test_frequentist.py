"""
Unit tests for the frequentist comparison functions.
"""

import pytest
import numpy as np
from numpy.testing import assert_allclose

from posterior.frequentist import (
    chi_square_test,
    maximum_likelihood_estimate,
    wald_confidence_interval,
)
from posterior.observation import Observation
from simulation.simulator import DataSimulator


class TestPointEstimate:
    """Tests for the MLE."""

    def test_mle(self) -> None:
        assert maximum_likelihood_estimate(Observation(7, 10)) == 0.7

    def test_zero_trials(self) -> None:
        with pytest.raises(ValueError, match="zero trials"):
            maximum_likelihood_estimate(Observation(0, 0))


class TestWaldInterval:
    """Tests for the normal-approximation confidence interval."""

    def test_known_values(self) -> None:
        """(7, 10) at 90% is about (0.46, 0.94)."""
        lower, upper = wald_confidence_interval(Observation(7, 10), level=0.9)
        assert_allclose([lower, upper], [0.4616, 0.9384], atol=1e-3)

    def test_clipped(self) -> None:
        """Bounds stay inside [0, 1]."""
        assert wald_confidence_interval(Observation(10, 10)) == (1.0, 1.0)
        lower, upper = wald_confidence_interval(Observation(9, 10))
        assert upper == 1.0
        assert 0.0 < lower < 0.9

    def test_invalid_level(self) -> None:
        with pytest.raises(ValueError, match="level"):
            wald_confidence_interval(Observation(5, 10), level=1.0)

    def test_coverage(self) -> None:
        """About 90% of repeated intervals trap the true θ."""
        sim = DataSimulator()
        counts = sim.binomial_experiments(theta=0.5, trials=100, n_experiments=2000, random_seed=42)
        hits = 0
        for k in counts:
            lower, upper = wald_confidence_interval(Observation(int(k), 100), level=0.9)
            hits += lower <= 0.5 <= upper
        assert 0.85 <= hits / len(counts) <= 0.95


class TestChiSquare:
    """Tests for the χ² test of equal rates."""

    def test_identical_rates(self) -> None:
        """Equal proportions give statistic 0 and p-value 1."""
        result = chi_square_test(Observation(5, 10), Observation(50, 100))
        assert_allclose(result["statistic"], 0.0, atol=1e-12)
        assert_allclose(result["p_value"], 1.0)
        assert result["dof"] == 1.0

    def test_different_rates(self) -> None:
        """Very different rates are significant."""
        result = chi_square_test(Observation(90, 100), Observation(10, 100))
        assert result["p_value"] < 1e-6

    def test_continuity_correction_is_conservative(self) -> None:
        """Yates' correction lowers the statistic."""
        plain = chi_square_test(Observation(8, 10), Observation(799, 1000))
        corrected = chi_square_test(Observation(8, 10), Observation(799, 1000), correction=True)
        assert corrected["statistic"] <= plain["statistic"]

    def test_empty_column(self) -> None:
        """No successes at all makes the test undefined."""
        with pytest.raises(ValueError, match="empty"):
            chi_square_test(Observation(0, 10), Observation(0, 5))
