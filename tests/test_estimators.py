"""
Tests for the Tikhonov and Dimension Reduction estimators.
"""

import numpy as np
import pytest

from src.deconvolution.estimators import (
    DimensionReductionEstimator,
    TikhonovEstimator,
    average_block_shifts,
)
from src.deconvolution.exceptions import ConfigurationError, NumericalError
from src.deconvolution.operators import build_regularization_matrix
from src.examples.synthetic_recovery import exponential_impulse_response


class TestTikhonovEstimator:
    """Tests for the full-resolution Tikhonov estimator."""

    def test_identity_system(self, rng):
        """Test that a unit impulse response returns the window unchanged."""
        est = TikhonovEstimator(np.array([1.0]), 50, 10.0, gamma=1e-7)
        y = rng.normal(size=50)
        np.testing.assert_allclose(est.apply(y), y, atol=1e-4)

    def test_large_gamma_drives_estimate_to_zero(self, rng):
        """Test that the regularization term dominates for very large gamma."""
        h = exponential_impulse_response(20, time_constant=4.0)
        est = TikhonovEstimator(h, 60, 10.0, gamma=1e12)
        y = 1.0 + rng.normal(size=60)
        assert np.linalg.norm(est.apply(y)) < 1e-4 * np.linalg.norm(y)

    def test_roughness_decreases_with_gamma(self, rng):
        """Test that ||Q u|| is non-increasing as gamma grows."""
        h = exponential_impulse_response(20, time_constant=4.0)
        y = np.cumsum(rng.normal(size=60))
        Q = build_regularization_matrix(60)
        roughness = [
            np.linalg.norm(Q @ TikhonovEstimator(h, 60, 10.0, gamma=g).apply(y))
            for g in (1e-4, 1e-1, 1e2, 1e5)
        ]
        assert all(a >= b * (1 - 1e-9) for a, b in zip(roughness, roughness[1:]))

    def test_small_gamma_approaches_inverse(self, rng):
        """Test convergence to H^-1 y on a well-conditioned system."""
        est = TikhonovEstimator(np.array([1.0, 0.5]), 40, 1.0, gamma=1e-12)
        y = rng.normal(size=40)
        np.testing.assert_allclose(est.apply(y), np.linalg.solve(est.H, y), atol=1e-7)

    def test_solve_operator_is_read_only(self):
        """Test that the precomputed operator cannot be modified."""
        est = TikhonovEstimator(np.array([1.0]), 10, 10.0, gamma=1e-3)
        with pytest.raises(ValueError):
            est.solve_operator[0, 0] = 5.0
        assert est.solve_operator.shape == (10, 10)

    def test_window_length_mismatch(self):
        """Test that apply rejects windows of the wrong length."""
        est = TikhonovEstimator(np.array([1.0]), 10, 10.0, gamma=1e-3)
        with pytest.raises(ValueError, match="expected 10"):
            est.apply(np.ones(9))

    def test_negative_gamma_rejected(self):
        """Test that gamma < 0 is a configuration error."""
        with pytest.raises(ConfigurationError, match="gamma"):
            TikhonovEstimator(np.array([1.0]), 10, 10.0, gamma=-1.0)

    def test_window_shorter_than_support_rejected(self):
        """Test that the window must cover the impulse response's support."""
        with pytest.raises(ConfigurationError, match="effective support"):
            TikhonovEstimator(np.ones(100), 50, 10.0, gamma=1e-3)

    def test_singular_system_raises_numerical_error(self):
        """Test that an unregularized system with a delayed response fails to build."""
        with pytest.raises(NumericalError):
            TikhonovEstimator(np.array([0.0, 1.0]), 10, 10.0, gamma=0.0)


class TestDimensionReductionEstimator:
    """Tests for the block-reduced estimator with shift averaging."""

    def test_average_block_shifts(self):
        """Test the accumulation of shifted copies on a small matrix."""
        M0 = np.arange(16.0).reshape(4, 4)
        expected = M0.copy()
        expected[:3, :3] += M0[1:, 1:]
        np.testing.assert_allclose(average_block_shifts(M0, 2), expected / 2)
        np.testing.assert_allclose(average_block_shifts(M0, 1), M0)

    def test_identity_system_interior(self):
        """Test that a constant window is recovered away from the window edges."""
        n, m = 48, 4
        est = DimensionReductionEstimator(np.array([1.0]), n, m, 10.0)
        u = est.apply(np.full(n, 3.0))
        np.testing.assert_allclose(u[m - 1:n - m + 1], 3.0, atol=1e-5)

    def test_leading_rows_are_attenuated(self):
        """Test the partial averaging of the first rows for an identity system."""
        est = DimensionReductionEstimator(np.array([1.0]), 48, 4, 10.0)
        u = est.apply(np.ones(48))
        np.testing.assert_allclose(u[:4], [0.625, 0.8125, 0.9375, 1.0], atol=1e-6)

    def test_shift_averaging_removes_block_phase(self):
        """Test that interior rows no longer depend on the block boundaries."""
        n, m = 48, 4
        est = DimensionReductionEstimator(np.array([1.0]), n, m, 1.0)
        M = est.solve_operator
        M0 = est.block_operator
        for i in range(8, 36):
            np.testing.assert_allclose(M[i, i - 6:i + 7], M[i + 1, i - 5:i + 8], atol=1e-6)
        # The plain block-reduced operator is periodic, not shift invariant
        assert not np.allclose(M0[8, 2:15], M0[9, 3:16], atol=1e-3)

    def test_window_must_be_multiple_of_block_size(self):
        """Test that no silent rounding happens inside the estimator."""
        with pytest.raises(ConfigurationError, match="not a multiple"):
            DimensionReductionEstimator(np.array([1.0]), 50, 4, 10.0)

    def test_invalid_block_size(self):
        """Test that the block size must be a positive integer."""
        with pytest.raises(ConfigurationError, match="block_size"):
            DimensionReductionEstimator(np.array([1.0]), 48, 0, 10.0)

    def test_singular_reduced_system_raises_numerical_error(self):
        """Test that a delay emptying the last block column fails to build without regularization."""
        h = np.array([0.0, 0.0, 0.0, 0.0, 1.0])
        with pytest.raises(NumericalError):
            DimensionReductionEstimator(h, 16, 4, 10.0, gamma=0.0)

    def test_operators_shapes(self):
        """Test operator shapes for the reduced problem."""
        est = DimensionReductionEstimator(np.array([1.0, 0.5]), 24, 3, 10.0, gamma=1e-6)
        assert est.L.shape == (24, 8)
        assert est.Q.shape == (8, 8)
        assert est.H.shape == (24, 24)
        assert est.solve_operator.shape == (24, 24)
