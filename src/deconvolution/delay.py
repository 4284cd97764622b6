"""
Constant-delay handling for impulse responses.

A transport delay at the front of the impulse response makes the leading
diagonal of the convolution matrix vanish.  The delay is detected as the
first sample exceeding a small fraction of the peak, removed from the
impulse response and the recording before deconvolution, and restored
afterwards by padding the recovered input.
"""

from typing import Optional, Tuple

import numpy as np


# Onset threshold as a fraction of the impulse-response peak
DELAY_FRACTION = 1e-4


def find_delay(h: np.ndarray, fraction: float = DELAY_FRACTION) -> int:
    """Return the first index where *h* exceeds ``fraction * max(h)`` (0 if none)."""
    h = np.asarray(h, dtype=float).ravel()
    if h.size == 0:
        return 0
    above = np.nonzero(h > fraction * np.max(h))[0]
    return int(above[0]) if above.size else 0


def trim_delay(
    h: np.ndarray,
    y: np.ndarray,
    reference: Optional[np.ndarray],
    delay: int,
) -> Tuple[np.ndarray, np.ndarray, Optional[np.ndarray]]:
    """Drop *delay* samples from the front of *h* and *y*.

    The recording at time t + delay is explained by the input at time t, so
    the reference input keeps its origin and loses *delay* samples at the end.
    """
    h = np.asarray(h, dtype=float).ravel()
    y = np.asarray(y, dtype=float).ravel()
    if delay <= 0:
        return h, y, reference
    if delay >= h.size or delay >= y.size:
        raise ValueError(
            f"delay of {delay} samples leaves no data (h: {h.size}, y: {y.size})")
    y_trim = y[delay:]
    ref_trim = None
    if reference is not None:
        ref_trim = np.asarray(reference, dtype=float).ravel()[:y_trim.size]
    return h[delay:], y_trim, ref_trim


def pad_delay(estimate: np.ndarray, delay: int) -> np.ndarray:
    """Append *delay* zeros so the estimate regains the recording's length."""
    estimate = np.asarray(estimate, dtype=float).ravel()
    if delay <= 0:
        return estimate
    return np.concatenate([estimate, np.zeros(delay)])
