"""
Unit tests for the log-likelihood kernels.

Tests cover:
- 0·log(0) convention of safe_xlogy
- Log-gamma binomial coefficients
- Binomial and Bernoulli log-likelihoods at the grid boundaries
- Continuous log-densities used by the regression models
"""

import math

import pytest
import numpy as np
from numpy.testing import assert_allclose, assert_array_equal
from scipy.stats import binom, cauchy, norm

from likelihoods.kernels import (
    safe_xlogy,
    log_binomial_coefficient,
    binomial_log_likelihood,
    binomial_likelihood,
    bernoulli_log_likelihood,
    bernoulli_likelihood,
    gaussian_logpdf,
    cauchy_logpdf,
    half_cauchy_logpdf,
    softplus,
)


class TestSafeXlogy:
    """Tests for x·log(y) with 0·log(y) = 0."""

    def test_zero_times_log_zero(self) -> None:
        """0·log(0) is exactly 0."""
        assert safe_xlogy(0, 0) == 0.0

    def test_zero_times_anything(self) -> None:
        """0·log(y) is 0 for any y, including NaN."""
        result = safe_xlogy(np.zeros(4), np.array([0.0, 0.5, 1.0, np.nan]))
        assert_array_equal(result, np.zeros(4))

    def test_positive_times_log_zero(self) -> None:
        """x·log(0) is -inf for x > 0."""
        assert safe_xlogy(2, 0) == -np.inf

    def test_regular_values(self) -> None:
        """Matches x·log(y) away from zero."""
        assert_allclose(safe_xlogy(3, 0.25), 3 * np.log(0.25))

    def test_scalar_returns_float(self) -> None:
        """Scalar inputs give a Python float."""
        assert isinstance(safe_xlogy(1, 0.5), float)


class TestBinomialCoefficient:
    """Tests for log C(n, k)."""

    def test_small_values(self) -> None:
        """log C(10, 3) = log 120."""
        assert_allclose(log_binomial_coefficient(10, 3), np.log(120.0))

    def test_large_values_exact(self) -> None:
        """Matches the exact integer coefficient for large n."""
        for n, k in [(1000, 300), (10000, 5000), (10000, 1)]:
            expected = math.log(math.comb(n, k))
            assert_allclose(log_binomial_coefficient(n, k), expected, rtol=1e-9)

    def test_out_of_range_is_neg_inf(self) -> None:
        """C(n, k) = 0 for k < 0 or k > n."""
        assert log_binomial_coefficient(5, 6) == -np.inf
        assert log_binomial_coefficient(5, -1) == -np.inf

    def test_edges_are_zero(self) -> None:
        """C(n, 0) = C(n, n) = 1."""
        assert_allclose(log_binomial_coefficient(7, 0), 0.0, atol=1e-12)
        assert_allclose(log_binomial_coefficient(7, 7), 0.0, atol=1e-12)


class TestBinomialLikelihood:
    """Tests for the binomial log-likelihood."""

    def test_matches_scipy(self) -> None:
        """Likelihood equals scipy's binomial pmf."""
        theta = np.linspace(0.05, 0.95, 19)
        assert_allclose(binomial_likelihood(7, 10, theta), binom.pmf(7, 10, theta))

    def test_boundary_zero_counts(self) -> None:
        """θ = 0 with no successes gives log-likelihood 0, not NaN."""
        assert_allclose(binomial_log_likelihood(0, 2, 0.0), 0.0, atol=1e-12)
        assert_allclose(binomial_log_likelihood(2, 2, 1.0), 0.0, atol=1e-12)

    def test_boundary_impossible(self) -> None:
        """θ = 0 with a success is impossible."""
        assert binomial_log_likelihood(1, 2, 0.0) == -np.inf

    def test_never_nan_on_unit_grid(self) -> None:
        """No NaN anywhere on [0, 1] for any count."""
        theta = np.linspace(0.0, 1.0, 11)
        for k in range(4):
            assert not np.any(np.isnan(binomial_log_likelihood(k, 3, theta)))

    def test_invalid_counts(self) -> None:
        """Successes above trials give -inf everywhere."""
        result = binomial_log_likelihood(4, 3, np.array([0.2, 0.5]))
        assert_array_equal(result, np.array([-np.inf, -np.inf]))


class TestBernoulliLikelihood:
    """Tests for the Bernoulli sequence log-likelihood."""

    def test_sum_of_terms(self) -> None:
        """Equals N⁺ log θ + (N − N⁺) log(1 − θ)."""
        theta = np.array([0.2, 0.5, 0.9])
        expected = 2 * np.log(theta) + np.log(1 - theta)
        assert_allclose(bernoulli_log_likelihood([1, 0, 1], theta), expected)

    def test_shape_follows_theta(self) -> None:
        """Output has the shape of θ."""
        theta = np.linspace(0.1, 0.9, 6).reshape(2, 3)
        assert bernoulli_log_likelihood([1, 1, 0, 0], theta).shape == (2, 3)

    def test_boundary(self) -> None:
        """θ = 0 with all-failure data has likelihood 1."""
        assert_allclose(bernoulli_likelihood([0, 0], 0.0), 1.0)

    def test_differs_from_binomial_by_coefficient(self) -> None:
        """Sequence and count likelihoods differ only by log C(N, N⁺)."""
        theta = np.array([0.3, 0.6])
        outcomes = [1, 0, 1, 1, 0]
        diff = binomial_log_likelihood(3, 5, theta) - bernoulli_log_likelihood(outcomes, theta)
        assert_allclose(diff, np.log(10.0) * np.ones(2))


class TestContinuousDensities:
    """Tests for the regression log-densities."""

    def test_gaussian(self) -> None:
        """Standard normal at 0 is -log(2π)/2."""
        assert_allclose(gaussian_logpdf(0.0, 0.0, 1.0), -0.5 * np.log(2 * np.pi))
        assert_allclose(
            gaussian_logpdf(np.array([1.0, 2.0]), 0.5, 2.0),
            norm.logpdf([1.0, 2.0], 0.5, 2.0),
        )

    def test_gaussian_bad_scale(self) -> None:
        """Non-positive scales give -inf, never NaN."""
        result = gaussian_logpdf(np.zeros(2), 0.0, np.array([0.0, -1.0]))
        assert_array_equal(result, np.array([-np.inf, -np.inf]))

    def test_cauchy(self) -> None:
        """Matches scipy's Cauchy density."""
        assert_allclose(cauchy_logpdf(0.0, 0.0, 1.0), -np.log(np.pi))
        assert_allclose(cauchy_logpdf(3.0, 1.0, 2.0), cauchy.logpdf(3.0, 1.0, 2.0))
        assert cauchy_logpdf(0.0, 0.0, 0.0) == -np.inf

    def test_half_cauchy(self) -> None:
        """Half-Cauchy is twice the Cauchy density on [0, ∞)."""
        assert_allclose(half_cauchy_logpdf(0.0, 5.0), np.log(2.0 / (np.pi * 5.0)))
        assert half_cauchy_logpdf(-1.0, 5.0) == -np.inf

    def test_half_cauchy_invalid_scale(self) -> None:
        """Non-positive scale raises ValueError."""
        with pytest.raises(ValueError, match="scale"):
            half_cauchy_logpdf(1.0, 0.0)

    def test_softplus(self) -> None:
        """softplus(0) = log 2, stable for large |x|."""
        assert_allclose(softplus(0.0), np.log(2.0))
        assert_allclose(softplus(1000.0), 1000.0)
        values = softplus(np.array([-1000.0, -5.0, 5.0]))
        assert np.all(values >= 0)
        assert np.all(np.isfinite(values))
