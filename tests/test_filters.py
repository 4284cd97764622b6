"""
Tests for the moving-average filter and the segment post-processor.
"""

import numpy as np
import pytest

from src.utils.filters import moving_average, postprocess_segment


class TestMovingAverage:
    """Tests for the shrinking-window moving average."""

    def test_shrinking_boundaries(self):
        """Test that windows shrink symmetrically near both ends."""
        x = np.arange(1.0, 8.0) ** 2
        expected = [
            x[0],
            x[0:3].mean(),
            x[0:5].mean(),
            x[1:6].mean(),
            x[2:7].mean(),
            x[4:7].mean(),
            x[6],
        ]
        np.testing.assert_allclose(moving_average(x, 5), expected)

    def test_even_span_is_reduced_to_odd(self):
        """Test that span 4 behaves like span 3."""
        x = np.array([3.0, 1.0, 4.0, 1.0, 5.0, 9.0])
        np.testing.assert_allclose(moving_average(x, 4), moving_average(x, 3))

    def test_span_clipped_to_length(self):
        """Test that a span longer than the data is clipped."""
        x = np.array([1.0, 2.0, 6.0, 3.0])
        np.testing.assert_allclose(moving_average(x, 50), [1.0, 3.0, 11.0 / 3.0, 3.0])

    def test_linear_sequence_unchanged(self):
        """Test that symmetric windows preserve a ramp exactly."""
        x = np.linspace(-2.0, 7.0, 25)
        np.testing.assert_allclose(moving_average(x, 5), x, atol=1e-12)

    def test_empty_and_single(self):
        """Test degenerate lengths."""
        assert moving_average(np.array([]), 5).size == 0
        np.testing.assert_array_equal(moving_average(np.array([2.5]), 5), [2.5])

    def test_nearest_mode(self):
        """Test edge replication when the boundary mode is 'nearest'."""
        np.testing.assert_allclose(moving_average(np.array([0.0, 0.0, 3.0]), 3, mode="nearest"),
                                   [0.0, 1.0, 2.0])

    def test_unknown_mode(self):
        """Test that an unknown boundary mode is rejected."""
        with pytest.raises(ValueError, match="Unknown boundary mode"):
            moving_average(np.ones(5), 3, mode="wrap")

    def test_input_not_modified(self):
        """Test that the filter works on a copy."""
        x = np.array([1.0, 5.0, 2.0, 8.0])
        before = x.copy()
        moving_average(x, 3)
        np.testing.assert_array_equal(x, before)


class TestPostprocessSegment:
    """Tests for span-5 smoothing with below-threshold suppression."""

    def test_negative_infinity_threshold_is_noop(self, rng):
        """Test that -inf leaves only the span-5 smoothing."""
        x = rng.normal(size=100)
        np.testing.assert_allclose(postprocess_segment(x, -np.inf), moving_average(x, 5))

    def test_only_low_samples_are_resmoothed(self, rng):
        """Test that the second pass works on the below-threshold subsequence only."""
        x = np.r_[rng.normal(0.0, 1.0, 60), np.full(40, 100.0), rng.normal(0.0, 1.0, 60)]
        out = postprocess_segment(x, 20.0)

        smoothed = moving_average(x, 5)
        low = smoothed < 20.0
        expected = smoothed.copy()
        expected[low] = moving_average(smoothed[low], 50)
        np.testing.assert_allclose(out, expected)
        np.testing.assert_array_equal(out[~low], smoothed[~low])
        np.testing.assert_allclose(out[64:96], 100.0)

    def test_suppression_reduces_noise(self, rng):
        """Test that below-threshold noise is strongly reduced."""
        x = rng.normal(0.0, 1.0, 500)
        out = postprocess_segment(x, 20.0)
        assert np.std(out) < 0.5 * np.std(moving_average(x, 5))

    def test_high_threshold_smooths_everything(self):
        """Test that a threshold above all samples applies the long filter to the whole segment."""
        x = np.arange(20.0)
        out = postprocess_segment(x, 1e9)
        np.testing.assert_allclose(out, moving_average(moving_average(x, 5), 50))
