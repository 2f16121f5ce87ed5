"""
Tests for the PyMC model builder.

Progressive sizing:
- Small (K=1-3 parameters): validation, building, repr (instant)
- Medium (K=3-10): log-density wiring through the compiled model
- Large (K=50): many parameters, regression log densities

All tests build models only; sampling is covered in test_sampler.py.
"""

import sys
import time

import numpy as np
import pytensor.tensor as pt

from inference.model_builder import LogDensityOp, ModelBuilder
from inference.regression import HeteroscedasticRegression, SimpleLinearRegression
from simulation.simulator import DataSimulator


def run_test(test_name, test_func, sample_size=None):
    """Run test with timing."""
    try:
        start = time.time()
        test_func()
        elapsed = time.time() - start
        size_str = f" (K={sample_size})" if sample_size else ""
        print(f"✓ {test_name}{size_str} [{elapsed:.3f}s]")
        return True, elapsed
    except AssertionError as e:
        print(f"✗ {test_name}: {e}")
        return False, 0
    except Exception as e:
        print(f"✗ {test_name} (error): {type(e).__name__}: {str(e)[:60]}")
        return False, 0


def standard_normal(theta):
    return -0.5 * float(np.sum(theta ** 2))


# ============================================================================
# SMALL TESTS: Validation and construction
# ============================================================================

def test_small_op_evaluates_density():
    """Test that the op returns the wrapped function's value."""
    op = LogDensityOp(standard_normal)
    value = op(pt.as_tensor_variable(np.array([1.0, 2.0]))).eval()
    assert np.isclose(value, -2.5), f"Expected -2.5, got {value}"


def test_small_builder_init():
    """Test builder initialization."""
    mb = ModelBuilder(standard_normal, ["a", "b"], initial_point=[0.5, -0.5])
    assert mb.parameter_names == ["a", "b"]
    assert np.allclose(mb.initial_point, [0.5, -0.5])
    assert mb.model is None


def test_small_default_initial_point():
    """Test that the default start is the zero vector."""
    mb = ModelBuilder(standard_normal, ["a", "b", "c"])
    assert np.array_equal(mb.initial_point, np.zeros(3))


def test_small_builder_invalid_names():
    """Test that empty or duplicated names are rejected."""
    for names in ([], ["a", "a"]):
        try:
            ModelBuilder(standard_normal, names)
            assert False, f"Should raise ValueError for {names}"
        except ValueError:
            pass


def test_small_builder_invalid_initial_point():
    """Test that a start of the wrong length is rejected."""
    try:
        ModelBuilder(standard_normal, ["a", "b"], initial_point=[0.0])
        assert False, "Should raise ValueError"
    except ValueError:
        pass


def test_small_build_rejects_infinite_start():
    """Test that a start outside the support is rejected before sampling."""
    mb = ModelBuilder(lambda theta: -np.inf, ["a"])
    try:
        mb.build()
        assert False, "Should raise ValueError"
    except ValueError as e:
        assert "initial point" in str(e)


def test_small_get_model_before_build():
    """Test that get_model() fails before build()."""
    mb = ModelBuilder(standard_normal, ["a"])
    try:
        mb.get_model()
        assert False, "Should raise RuntimeError"
    except RuntimeError:
        pass


def test_small_repr():
    """Test string representation."""
    mb = ModelBuilder(standard_normal, ["a", "b"])
    assert "ModelBuilder" in repr(mb)
    assert "'a'" in repr(mb)


# ============================================================================
# MEDIUM TESTS: Model structure and log-density wiring
# ============================================================================

def test_medium_model_has_expected_vars():
    """Test that the model holds theta and the log_joint potential."""
    model = ModelBuilder(standard_normal, ["a", "b", "c"]).build()
    assert "theta" in model.named_vars
    assert "log_joint" in model.named_vars
    assert list(model.coords["parameter"]) == ["a", "b", "c"]


def test_medium_initial_point_is_used():
    """Test that the model starts at the requested point."""
    start = np.array([0.1, 0.2, 0.3])
    model = ModelBuilder(standard_normal, ["a", "b", "c"], start).build()
    assert np.allclose(model.initial_point()["theta"], start)


def test_medium_model_logp_equals_density():
    """Test that the compiled model log-probability is the log density."""
    model = ModelBuilder(standard_normal, [f"p{i}" for i in range(10)]).build()
    logp = model.compile_logp()
    theta = np.linspace(-1.0, 1.0, 10)
    assert np.isclose(logp({"theta": theta}), standard_normal(theta))


def test_medium_regression_model():
    """Test building from a regression log-joint-density."""
    x, y = DataSimulator(n_obs=50).linear_data(random_seed=100)
    reg = SimpleLinearRegression(x, y)
    mb = ModelBuilder(reg.log_joint_density, reg.parameter_names, reg.initial_point())
    model = mb.build()
    logp = model.compile_logp()
    start = reg.initial_point()
    assert np.isclose(logp({"theta": start}), reg.log_joint_density(start))
    assert mb.get_model() is model


# ============================================================================
# LARGE TESTS: Many parameters
# ============================================================================

def test_large_many_parameters():
    """Test a 50-dimensional density."""
    names = [f"p{i}" for i in range(50)]
    model = ModelBuilder(standard_normal, names).build()
    logp = model.compile_logp()
    assert np.isclose(logp({"theta": np.ones(50)}), -25.0)


def test_large_heteroscedastic_model():
    """Test building from the heteroscedastic regression."""
    data = DataSimulator(n_obs=200).heteroscedastic_data(random_seed=7)
    reg = HeteroscedasticRegression(data["x"], data["y"])
    model = ModelBuilder(reg.log_joint_density, reg.parameter_names, reg.initial_point()).build()
    assert list(model.coords["parameter"]) == ["beta0", "beta1", "gamma0", "gamma1"]


# ============================================================================
# MAIN TEST RUNNER
# ============================================================================

def main():
    """Run all tests with progressive sizing."""
    print("\n" + "="*70)
    print("MODEL BUILDER TESTS")
    print("="*70)

    groups = [
        ("SMALL TESTS (K<=3): should be <1 second", [
            ("Op evaluates density", test_small_op_evaluates_density, 2),
            ("Builder init", test_small_builder_init, 2),
            ("Default initial point", test_small_default_initial_point, 3),
            ("Invalid names", test_small_builder_invalid_names, None),
            ("Invalid initial point", test_small_builder_invalid_initial_point, 2),
            ("Infinite start rejected", test_small_build_rejects_infinite_start, 1),
            ("get_model() before build", test_small_get_model_before_build, 1),
            ("String representation", test_small_repr, 2),
        ]),
        ("MEDIUM TESTS (K<=10): should be 1-5 seconds", [
            ("Expected variables", test_medium_model_has_expected_vars, 3),
            ("Initial point used", test_medium_initial_point_is_used, 3),
            ("Model logp equals density", test_medium_model_logp_equals_density, 10),
            ("Regression model", test_medium_regression_model, 3),
        ]),
        ("LARGE TESTS (K=50): should be 1-10 seconds", [
            ("Many parameters", test_large_many_parameters, 50),
            ("Heteroscedastic model", test_large_heteroscedastic_model, 4),
        ]),
    ]

    total_tests = 0
    total_passed = 0
    total_time = 0.0
    for title, tests in groups:
        print("\n" + "-"*70)
        print(title)
        print("-"*70)
        for test_name, test_func, sample_size in tests:
            passed, elapsed = run_test(test_name, test_func, sample_size)
            total_tests += 1
            total_passed += int(passed)
            total_time += elapsed

    print("\n" + "="*70)
    print(f"TOTAL: {total_passed}/{total_tests} passed [{total_time:.2f}s]")
    if total_passed == total_tests:
        print("\n✅ ALL TESTS PASSED")
        return 0
    print(f"\n❌ {total_tests - total_passed} TEST(S) FAILED")
    return 1


if __name__ == "__main__":
    sys.exit(main())
