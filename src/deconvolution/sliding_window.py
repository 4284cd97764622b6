#!/usr/bin/env python3
"""
sliding_window.py

Residual-deflation loop that applies a fixed-size estimator to a recording
of arbitrary length.

Each iteration estimates the input over an n-sample window of the residual,
accepts the first N samples, subtracts their predicted contribution to the
recording (conv(I, u[:N]) / SamplingRate) and drops N samples from the
front.  Accepted segments are post-processed and written left to right.

Windows depend on every earlier subtraction, so the loop is strictly
sequential.
"""

from __future__ import annotations

import numpy as np

from src.deconvolution.estimators import RegularizedEstimator
from src.deconvolution.exceptions import ConfigurationError
from src.deconvolution.operators import as_signal
from src.utils.filters import postprocess_segment


class SlidingWindowProcessor:
    """Apply an estimator over a long signal by residual deflation.

    Attributes:
        estimator:      Built estimator providing ``apply``, ``impulse``,
                        ``window_length`` and ``sampling_rate``.
        accept_length:  Samples N accepted from every window (N < n).
        base_threshold: Estimates below this value are strongly smoothed
                        (``-inf`` disables the suppression).
    """

    def __init__(self, estimator: RegularizedEstimator, accept_length: int,
                 base_threshold: float = -np.inf):
        accept_length = int(accept_length)
        if accept_length < 1:
            raise ConfigurationError(f"accept_length must be >= 1, got {accept_length}")
        if accept_length >= estimator.window_length:
            raise ConfigurationError(
                f"accept_length ({accept_length}) must be smaller than the "
                f"window length ({estimator.window_length})")
        self.estimator = estimator
        self.accept_length = accept_length
        self.base_threshold = float(base_threshold)

    def run(self, y: np.ndarray) -> np.ndarray:
        """Recover the input underlying recording *y*.

        Returns:
            Estimated input with the same length as *y*.  The trailing
            samples that never fill a complete window stay at zero.
        """
        residual = as_signal(y, "recorded signal").copy()
        n = self.estimator.window_length
        N = self.accept_length
        impulse = self.estimator.impulse
        rate = self.estimator.sampling_rate

        output = np.zeros(residual.size)
        cursor = 0
        for _ in range(residual.size // N):
            if residual.size < n:
                break
            u = self.estimator.apply(residual[:n])
            accepted = u[:N]

            reconstructed = np.convolve(impulse, accepted) / rate
            overlap = min(residual.size, reconstructed.size)
            residual[:overlap] -= reconstructed[:overlap]
            residual = residual[N:]

            output[cursor:cursor + N] = postprocess_segment(accepted, self.base_threshold)
            cursor += N
        return output

    def n_estimated(self, signal_length: int) -> int:
        """Number of leading output samples written for a signal of this length."""
        n = self.estimator.window_length
        N = self.accept_length
        if signal_length < n:
            return 0
        windows = min(signal_length // N, (signal_length - n) // N + 1)
        return windows * N

    def __repr__(self):
        return (f"SlidingWindowProcessor({self.estimator!r}, N={self.accept_length}, "
                f"base_threshold={self.base_threshold:g})")
