#!/usr/bin/env python3
"""
recovery.py

One-call recovery functions.

Public API:
    recover_tikhonov(h, y, gamma, n, N, sampling_rate, base_threshold, u_exact)
    recover_dimension_reduction(h, y, m, n, N, sampling_rate, base_threshold, u_exact)

Each builds the estimator, runs the sliding-window deflation loop and
returns ``(U_estimated, error_norm)``; the error norm is None when no exact
input is supplied.
"""

from __future__ import annotations

from typing import Optional, Tuple

import numpy as np

from src.deconvolution.estimators import (
    DEFAULT_REDUCTION_GAMMA,
    DimensionReductionEstimator,
    TikhonovEstimator,
)
from src.deconvolution.metrics import error_norm
from src.deconvolution.sliding_window import SlidingWindowProcessor


def recover_tikhonov(
    h: np.ndarray,
    y: np.ndarray,
    gamma: float,
    n: int,
    N: int,
    sampling_rate: float,
    base_threshold: float = -np.inf,
    u_exact: Optional[np.ndarray] = None,
) -> Tuple[np.ndarray, Optional[float]]:
    """Extended Tikhonov recovery of the input behind recording *y*.

    Args:
        h:              Impulse response of the system.
        y:              Recorded data.
        gamma:          Regularization parameter.
        n:              Window size.
        N:              Samples accepted from each window (N < n).
        sampling_rate:  Sampling rate of the recording [Hz].
        base_threshold: Estimates below this value are strongly smoothed.
        u_exact:        Exact input, if known, for the error norm.

    Returns:
        Tuple of (estimated input, error norm or None).
    """
    estimator = TikhonovEstimator(h, n, sampling_rate, gamma)
    u_est = SlidingWindowProcessor(estimator, N, base_threshold).run(y)
    return u_est, error_norm(u_exact, u_est)


def recover_dimension_reduction(
    h: np.ndarray,
    y: np.ndarray,
    m: int,
    n: int,
    N: int,
    sampling_rate: float,
    base_threshold: float = -np.inf,
    u_exact: Optional[np.ndarray] = None,
    gamma: float = DEFAULT_REDUCTION_GAMMA,
) -> Tuple[np.ndarray, Optional[float]]:
    """Dimension Reduction recovery of the input behind recording *y*.

    *n* must be a multiple of the block size *m*.  Arguments otherwise
    match :func:`recover_tikhonov`; *gamma* is the (small) regularization
    of the reduced problem.
    """
    estimator = DimensionReductionEstimator(h, n, m, sampling_rate, gamma=gamma)
    u_est = SlidingWindowProcessor(estimator, N, base_threshold).run(y)
    return u_est, error_norm(u_exact, u_est)
