"""
Smoothing and noise-suppression filters for recovered input segments.

Provides a moving-average filter whose window shrinks symmetrically near
the ends of the sequence (even spans are reduced by one), and the segment
post-processor used by the sliding-window deconvolution loop.
"""

import numpy as np


# Moving-average span applied to every accepted segment
SEGMENT_SPAN = 5

# Moving-average span applied to the below-threshold subsequence
LOW_SPAN = 50

BOUNDARY_MODES = ("shrink", "nearest")


def moving_average(x: np.ndarray, span: int = SEGMENT_SPAN, mode: str = "shrink") -> np.ndarray:
    """Centered moving average of a finite 1-D sequence.

    The span is clipped to ``len(x)`` and forced odd (an even span is
    reduced by one), so span 50 averages 49 samples.

    Boundary modes:
        ``'shrink'``:  Near the ends the window shrinks symmetrically so it
                       stays inside the data; the first and last samples
                       are returned unchanged.
        ``'nearest'``: The sequence is extended with its edge values and the
                       full window is used everywhere.

    Args:
        x: Input 1-D array.
        span: Nominal window width in samples.
        mode: Boundary handling mode, one of :data:`BOUNDARY_MODES`.

    Returns:
        Smoothed copy of *x* (same length).
    """
    if mode not in BOUNDARY_MODES:
        raise ValueError(f"Unknown boundary mode '{mode}'. Choose one of {BOUNDARY_MODES}.")
    x = np.asarray(x, dtype=float).ravel()
    n = x.size
    if n == 0:
        return x.copy()

    span = max(1, min(int(span), n))
    width = span - 1 + span % 2
    half = (width - 1) // 2
    if half == 0:
        return x.copy()

    if mode == "nearest":
        padded = np.pad(x, half, mode="edge")
        csum = np.concatenate(([0.0], np.cumsum(padded)))
        return (csum[width:] - csum[:-width]) / width

    idx = np.arange(n)
    k = np.minimum(np.minimum(idx, n - 1 - idx), half)
    csum = np.concatenate(([0.0], np.cumsum(x)))
    return (csum[idx + k + 1] - csum[idx - k]) / (2 * k + 1)


def postprocess_segment(
    segment: np.ndarray,
    base_threshold: float,
    span: int = SEGMENT_SPAN,
    low_span: int = LOW_SPAN,
) -> np.ndarray:
    """Smooth an accepted estimate and suppress noise below a threshold.

    1. Moving average of *span* over the whole segment.
    2. Samples strictly below *base_threshold* are gathered into their own
       subsequence, smoothed with a moving average of *low_span*, and
       written back.  Above-threshold neighbours do not take part.

    A threshold of ``-inf`` disables step 2.
    """
    out = moving_average(segment, span)
    low = out < base_threshold
    if np.any(low):
        out[low] = moving_average(out[low], low_span)
    return out
