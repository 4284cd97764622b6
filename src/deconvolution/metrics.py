#!/usr/bin/env python3
"""
metrics.py

Quality metrics for recovered inputs.

Provides:
- error_norm:             ||reference - estimate||_2 against a known input.
- reconstruction_metrics: Re-convolve the estimate and compare it with the
                          recording (RMSE, FIT%, residual norm).
"""

from __future__ import annotations

from typing import Dict, Optional

import numpy as np


def error_norm(reference: Optional[np.ndarray], estimate: np.ndarray) -> Optional[float]:
    """Euclidean norm of (reference - estimate), or None without a reference."""
    if reference is None:
        return None
    reference = np.asarray(reference, dtype=float).ravel()
    estimate = np.asarray(estimate, dtype=float).ravel()
    if reference.size != estimate.size:
        raise ValueError(
            f"reference has {reference.size} samples but estimate has {estimate.size}")
    return float(np.linalg.norm(reference - estimate))


def reconstruction_metrics(
    y: np.ndarray,
    estimate: np.ndarray,
    impulse: np.ndarray,
    sampling_rate: float,
    n_valid: Optional[int] = None,
) -> Dict[str, float]:
    """
    Compare the recording with the re-convolved input estimate.

    The prediction is ``conv(impulse, estimate)[:len(y)] / sampling_rate``
    with *impulse* normalized to unit gain.  Only the first *n_valid*
    samples are scored (defaults to all), so callers can exclude the
    unestimated tail.

    FIT% follows the usual system-identification definition
    ``100 * (1 - ||err|| / ||y||)``.

    Returns:
        Dictionary with keys: rmse, fit_percent, residual_norm, n_valid.
    """
    y = np.asarray(y, dtype=float).ravel()
    estimate = np.asarray(estimate, dtype=float).ravel()
    y_pred = np.convolve(np.asarray(impulse, dtype=float).ravel(), estimate)[:y.size] / sampling_rate

    if n_valid is None:
        n_valid = y.size
    n_valid = int(min(n_valid, y.size))
    err = y[:n_valid] - y_pred[:n_valid]

    rmse = float(np.sqrt(np.mean(err**2))) if n_valid > 0 else 0.0
    norm_y = np.linalg.norm(y[:n_valid])
    fit = (float(100 * (1.0 - np.linalg.norm(err) / norm_y))
           if norm_y > 0 else 0.0)

    return {
        "rmse": rmse,
        "fit_percent": fit,
        "residual_norm": float(np.linalg.norm(err)),
        "n_valid": n_valid,
    }
