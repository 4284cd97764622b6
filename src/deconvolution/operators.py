#!/usr/bin/env python3
"""
operators.py

Linear operators for windowed deconvolution.

Provides:
- normalize_impulse_response:  Scale h so that sum(h) / SamplingRate == 1.
- resize_impulse_response:     Zero-pad or truncate to the window length n.
- effective_support:           Number of leading taps holding most of |h|.
- build_convolution_matrix:    Lower-triangular Toeplitz H (n x n).
- build_regularization_matrix: Second-difference Toeplitz Q (k x k).
- build_block_matrix:          Block indicator L (n x n/m).

All builders are pure functions.  The operators are built once per
configuration and never modified afterwards.
"""

from __future__ import annotations

import numpy as np
from scipy.linalg import toeplitz

from src.deconvolution.exceptions import ConfigurationError


# Pattern of the first column of Q (discrete second difference)
SECOND_DIFFERENCE = (1.0, -2.0, 1.0)

# Fraction of sum(|h|) that must fit inside the window
SUPPORT_MASS = 0.99


# ------------------------------------------------------------------ #
# Impulse response model
# ------------------------------------------------------------------ #

def as_signal(x, name: str = "signal") -> np.ndarray:
    """Return *x* as a finite, non-empty 1-D float array."""
    arr = np.asarray(x, dtype=float)
    if arr.ndim != 1:
        arr = arr.squeeze()
        if arr.ndim != 1:
            raise ConfigurationError(f"{name} must be one-dimensional, got shape {np.shape(x)}")
    if arr.size == 0:
        raise ConfigurationError(f"{name} is empty")
    if not np.isfinite(arr).all():
        raise ConfigurationError(f"{name} contains NaN or Inf values")
    return arr


def normalize_impulse_response(h: np.ndarray, sampling_rate: float) -> np.ndarray:
    """Normalize *h* to unit gain: I = h / sum(h) * sampling_rate.

    With this convention a unit step input integrates to a unit output
    once the convolution is divided by the sampling rate.

    Raises:
        ConfigurationError: If the sampling rate is not positive or the
            impulse response sums to zero.
    """
    h = as_signal(h, "impulse response")
    if not sampling_rate > 0:
        raise ConfigurationError(f"sampling_rate must be > 0, got {sampling_rate}")
    total = float(np.sum(h))
    if total == 0.0:
        raise ConfigurationError("impulse response sums to zero and cannot be normalized")
    return h / total * sampling_rate


def resize_impulse_response(I: np.ndarray, n: int) -> np.ndarray:
    """Zero-pad *I* to length *n*, or keep only its first *n* samples.

    Truncation silently drops the tail beyond the window; this is a known
    source of modelling error near window boundaries, not an error.
    """
    I = np.asarray(I, dtype=float).ravel()
    if I.size >= n:
        return I[:n].copy()
    out = np.zeros(n)
    out[:I.size] = I
    return out


def effective_support(h: np.ndarray, mass: float = SUPPORT_MASS) -> int:
    """Smallest number of leading taps whose |h| holds *mass* of the total."""
    a = np.abs(np.asarray(h, dtype=float).ravel())
    total = a.sum()
    if total == 0.0:
        return 0
    cum = np.cumsum(a) / total
    return int(np.searchsorted(cum, mass - 1e-12) + 1)


# ------------------------------------------------------------------ #
# Matrix builders
# ------------------------------------------------------------------ #

def build_convolution_matrix(I: np.ndarray, sampling_rate: float) -> np.ndarray:
    """Build H with H[i, j] = I[i - j] / sampling_rate for i >= j, else 0."""
    a = np.asarray(I, dtype=float).ravel()
    b = np.zeros_like(a)
    b[0] = a[0]
    return toeplitz(a, b) / sampling_rate


def build_regularization_matrix(k: int) -> np.ndarray:
    """Build the k x k roughness penalty Q.

    First column ``[1, -2, 1, 0, ..., 0]``, first row ``[1, 0, ..., 0]``.
    The pattern is truncated when k < 3.
    """
    if k < 1:
        raise ConfigurationError(f"regularization size must be >= 1, got {k}")
    q1 = np.zeros(k)
    head = min(k, len(SECOND_DIFFERENCE))
    q1[:head] = SECOND_DIFFERENCE[:head]
    q2 = np.zeros(k)
    q2[0] = 1.0
    return toeplitz(q1, q2)


def build_block_matrix(n: int, m: int) -> np.ndarray:
    """Build the n x (n/m) indicator of piecewise-constant blocks of m samples.

    Column i is 1 on rows ``m*i .. m*i + m - 1`` and 0 elsewhere.
    """
    if m < 1 or n % m != 0:
        raise ConfigurationError(
            f"window length {n} is not a multiple of block size {m}")
    return np.kron(np.eye(n // m), np.ones((m, 1)))
