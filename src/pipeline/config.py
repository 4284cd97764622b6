#!/usr/bin/env python3
"""
config.py

Dataclass-based configuration objects for the signal-recovery pipeline.

Three independent configuration groups:
- RegularizationConfig: Estimator settings (Gamma, block size m)
- WindowConfig:         Sliding-window settings (n, N, noise threshold)
- DataConfig:           Input/output files, sampling rate, delay handling

Every run builds fresh configuration values; nothing is kept between runs.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field, replace
from typing import Optional, Tuple

from src.deconvolution.exceptions import ConfigurationError

METHODS = ('tikhonov', 'dimension_reduction')


@dataclass
class RegularizationConfig:
    """Configuration for the regularized estimators.

    Attributes:
        gamma:           Tikhonov regularization parameter.
        block_size:      Dimension Reduction parameter m (samples per
                         piecewise-constant block).
        reduction_gamma: Regularization of the reduced Dimension Reduction
                         problem (kept very small).
    """
    gamma: float = 1e-7
    block_size: int = 4
    reduction_gamma: float = 1e-9

    def __post_init__(self):
        if self.gamma < 0:
            raise ConfigurationError(f"gamma must be >= 0, got {self.gamma}")
        if self.reduction_gamma < 0:
            raise ConfigurationError(
                f"reduction_gamma must be >= 0, got {self.reduction_gamma}")
        if int(self.block_size) != self.block_size or self.block_size < 1:
            raise ConfigurationError(
                f"block_size must be a positive integer, got {self.block_size}")


@dataclass
class WindowConfig:
    """Configuration for the sliding-window deflation loop.

    Attributes:
        window_length:  Samples n processed per window.  Should exceed the
                        length of the impulse response.
        accept_length:  Samples N accepted from each window (N < n).
        base_threshold: Estimates below this value are strongly smoothed.
                        Choose it from the amplified noise of a recording
                        made without a subject (its SD or maximum).
    """
    window_length: int = 1500
    accept_length: int = 900
    base_threshold: float = 20.0

    def __post_init__(self):
        if self.accept_length < 1:
            raise ConfigurationError(
                f"accept_length must be >= 1, got {self.accept_length}")
        if self.accept_length >= self.window_length:
            raise ConfigurationError(
                f"accept_length ({self.accept_length}) must be smaller than "
                f"window_length ({self.window_length})")
        if math.isnan(self.base_threshold):
            raise ConfigurationError("base_threshold must not be NaN")

    def for_block_size(self, m: int) -> 'WindowConfig':
        """Return a copy with the window length rounded down to a multiple of *m*.

        Raises:
            ConfigurationError: If the rounded window no longer exceeds the
                accepted length.
        """
        n = (self.window_length // m) * m
        if n == self.window_length:
            return self
        return replace(self, window_length=n)


@dataclass
class DataConfig:
    """Configuration for input data and outputs.

    Attributes:
        impulse_response_path: Two-column text file; the second column is
                               the impulse response.
        data_path:             Two-column text file ``[time, y]``.
        reference_path:        Optional two-column file with the exact input.
        sampling_rate:         Sampling rate [Hz].  ``None`` infers it from
                               the time column of *data_path*.
        delay_fraction:        Onset threshold (fraction of the peak) used
                               to detect the impulse-response delay.
        trim_delay:            Remove the delay before deconvolution.
                               ``None`` uses the method default (on for
                               Dimension Reduction, off for Tikhonov).
        out_dir:               Output directory.
        save_plots:            Write PNG figures of the recovered signals.
        methods:               Estimators to run.
    """
    impulse_response_path: Optional[str] = None
    data_path: Optional[str] = None
    reference_path: Optional[str] = None
    sampling_rate: Optional[float] = 10.0
    delay_fraction: float = 1e-4
    trim_delay: Optional[bool] = None
    out_dir: str = 'recovery_output'
    save_plots: bool = True
    methods: Tuple[str, ...] = field(default_factory=lambda: METHODS)

    def __post_init__(self):
        self.methods = tuple(self.methods)
        unknown = [m for m in self.methods if m not in METHODS]
        if unknown or not self.methods:
            raise ConfigurationError(
                f"methods must be a non-empty subset of {METHODS}, got {self.methods}")
        if self.sampling_rate is not None and not self.sampling_rate > 0:
            raise ConfigurationError(
                f"sampling_rate must be > 0, got {self.sampling_rate}")
        if not 0 < self.delay_fraction < 1:
            raise ConfigurationError(
                f"delay_fraction must lie in (0, 1), got {self.delay_fraction}")

    def trims_delay(self, method: str) -> bool:
        """Whether the delay is removed before running *method*."""
        if self.trim_delay is not None:
            return self.trim_delay
        return method == 'dimension_reduction'
