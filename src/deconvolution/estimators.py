#!/usr/bin/env python3
"""
estimators.py

Closed-form regularized deconvolution estimators.

Methods included:
- TikhonovEstimator            (full-resolution Tikhonov inverse)
- DimensionReductionEstimator  (block-constant reduced inverse + shift averaging)

Both estimators share a common RegularizedEstimator base class that builds
a solve operator M once at construction time and then maps any length-n
observed window y to an input estimate u = M @ y.
"""

from __future__ import annotations

import warnings
from typing import Optional

import numpy as np
from scipy.linalg import LinAlgError, LinAlgWarning, solve

from src.deconvolution.exceptions import ConfigurationError, NumericalError
from src.deconvolution.operators import (
    as_signal,
    build_block_matrix,
    build_convolution_matrix,
    build_regularization_matrix,
    effective_support,
    normalize_impulse_response,
    resize_impulse_response,
)

# Regularization used by the Dimension Reduction method unless overridden
DEFAULT_REDUCTION_GAMMA = 1e-9


# =====================================================
# Helpers
# =====================================================

def _solve_normal_equations(A: np.ndarray, B: np.ndarray) -> np.ndarray:
    """Return A^-1 B for the symmetric positive-definite normal matrix A.

    Raises:
        NumericalError: If A is singular or too ill-conditioned to factorize
            at working precision.
    """
    with warnings.catch_warnings():
        warnings.simplefilter("error", LinAlgWarning)
        try:
            X = solve(A, B, assume_a="pos")
        except (LinAlgError, LinAlgWarning) as e:
            raise NumericalError(
                f"Regularized normal matrix ({A.shape[0]}x{A.shape[1]}) "
                f"cannot be inverted: {e}") from e
    if not np.isfinite(X).all():
        raise NumericalError("Solve operator contains non-finite values")
    return X


def average_block_shifts(M0: np.ndarray, m: int) -> np.ndarray:
    """Average *M0* over the m phase offsets of its block grid.

    The accumulator starts as M0; for every shift k = 1 .. m-1 the block
    M0[k:, k:] is added onto the overlapping top-left sub-block.  The sum
    is divided by m.
    """
    n = M0.shape[0]
    acc = M0.copy()
    for k in range(1, m):
        acc[:n - k, :n - k] += M0[k:, k:]
    return acc / m


# =====================================================
# Base Class
# =====================================================

class RegularizedEstimator:
    """Build-once, apply-many linear deconvolution operator.

    Attributes:
        impulse:        Normalized impulse response resized to the window (n,).
        window_length:  Window length n.
        sampling_rate:  Sampling rate of the recording [Hz].
        gamma:          Regularization weight.
        H:              Convolution matrix (n x n).
        Q:              Regularization matrix.
    """

    name = "regularized"

    def __init__(self, impulse_response: np.ndarray, window_length: int,
                 sampling_rate: float, gamma: float):
        window_length = int(window_length)
        if window_length < 1:
            raise ConfigurationError(f"window_length must be >= 1, got {window_length}")
        if gamma < 0:
            raise ConfigurationError(f"gamma must be >= 0, got {gamma}")

        h = as_signal(impulse_response, "impulse response")
        I = normalize_impulse_response(h, sampling_rate)
        support = effective_support(h)
        if window_length < support:
            raise ConfigurationError(
                f"window_length {window_length} is shorter than the impulse "
                f"response's effective support ({support} samples)")

        self.window_length = window_length
        self.sampling_rate = float(sampling_rate)
        self.gamma = float(gamma)
        self.impulse = resize_impulse_response(I, window_length)
        self.H = build_convolution_matrix(self.impulse, self.sampling_rate)
        self.Q: Optional[np.ndarray] = None
        self._M = self._build()
        self._M.setflags(write=False)
        for op in (self.impulse, self.H, self.Q):
            if op is not None:
                op.setflags(write=False)

    def _build(self) -> np.ndarray:
        raise NotImplementedError

    @property
    def solve_operator(self) -> np.ndarray:
        """Read-only n x n operator M."""
        return self._M

    def apply(self, window: np.ndarray) -> np.ndarray:
        """Estimate the input for one length-n observed window."""
        window = np.asarray(window, dtype=float).ravel()
        if window.size != self.window_length:
            raise ValueError(
                f"window has {window.size} samples, expected {self.window_length}")
        return self._M @ window

    def __repr__(self):
        return (f"{type(self).__name__}(n={self.window_length}, "
                f"gamma={self.gamma:g}, sampling_rate={self.sampling_rate:g})")


# =====================================================
# Tikhonov
# =====================================================

class TikhonovEstimator(RegularizedEstimator):
    """Full-resolution Tikhonov inverse.

    M = (H^T H + gamma Q^T Q)^-1 H^T, the minimizer of
    ||H x - y||^2 + gamma ||Q x||^2.  Building costs O(n^3), so n should
    stay in the low thousands.
    """

    name = "tikhonov"

    def _build(self) -> np.ndarray:
        n = self.window_length
        self.Q = build_regularization_matrix(n)
        A = self.H.T @ self.H + self.gamma * (self.Q.T @ self.Q)
        return _solve_normal_equations(A, self.H.T)


# =====================================================
# Dimension Reduction
# =====================================================

class DimensionReductionEstimator(RegularizedEstimator):
    """Block-reduced regularized inverse with shift averaging.

    The input is first assumed piecewise constant over blocks of m samples:

        M0 = L (L^T H^T H L + gamma Q^T Q)^-1 L^T H^T

    with Q of size n/m.  Because the block boundaries are arbitrary, M0 is
    then averaged over the m possible phase offsets of the block grid
    (see :func:`average_block_shifts`).

    The window length must already be a multiple of *block_size*; use
    ``WindowConfig.for_block_size`` to round it down beforehand.
    """

    name = "dimension_reduction"

    def __init__(self, impulse_response: np.ndarray, window_length: int,
                 block_size: int, sampling_rate: float,
                 gamma: float = DEFAULT_REDUCTION_GAMMA):
        block_size = int(block_size)
        if block_size < 1:
            raise ConfigurationError(f"block_size must be >= 1, got {block_size}")
        if int(window_length) % block_size != 0:
            raise ConfigurationError(
                f"window_length {window_length} is not a multiple of "
                f"block_size {block_size}")
        self.block_size = block_size
        self.L: Optional[np.ndarray] = None
        self.block_operator: Optional[np.ndarray] = None
        super().__init__(impulse_response, window_length, sampling_rate, gamma)

    def _build(self) -> np.ndarray:
        n, m = self.window_length, self.block_size
        self.L = build_block_matrix(n, m)
        self.Q = build_regularization_matrix(n // m)
        HL = self.H @ self.L
        A = HL.T @ HL + self.gamma * (self.Q.T @ self.Q)
        self.block_operator = self.L @ _solve_normal_equations(A, HL.T)
        self.block_operator.setflags(write=False)
        self.L.setflags(write=False)
        return average_block_shifts(self.block_operator, m)

    def __repr__(self):
        return (f"{type(self).__name__}(n={self.window_length}, m={self.block_size}, "
                f"gamma={self.gamma:g}, sampling_rate={self.sampling_rate:g})")
