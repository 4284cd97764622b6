#!/usr/bin/env python3
"""
unified_pipeline.py

Command-line entry point for the signal-recovery pipeline.

Usage examples:
    python -m src.pipeline.unified_pipeline ImpulseResponse.txt Data.txt
    python -m src.pipeline.unified_pipeline ImpulseResponse.txt Data.txt \\
        --sampling-rate 10 --gamma 1e-7 --window 1500 --accept 900 \\
        --threshold 20 --method tikhonov --out-dir recovery_output
    python -m src.pipeline.unified_pipeline ImpulseResponse.txt Data.txt \\
        --reference TrueInput.txt --method dimension_reduction --block-size 4 \\
        --no-plots
"""

from __future__ import annotations

import argparse
from typing import List, Optional

from src.pipeline.config import METHODS, DataConfig, RegularizationConfig, WindowConfig
from src.pipeline.recovery_pipeline import run_recovery_pipeline


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Recover true input signals from recordings of a linear sensor "
                    "(Extended Tikhonov and Dimension Reduction methods)",
    )

    # Input options
    parser.add_argument('impulse_response',
                        help='Two-column text file; second column is the impulse response')
    parser.add_argument('data',
                        help='Two-column text file [time, recorded data]')
    parser.add_argument('--reference', type=str, default=None,
                        help='Two-column text file with the exact input, if known')
    parser.add_argument('--sampling-rate', type=float, default=None,
                        help='Sampling rate in Hz (default: inferred from the time column)')

    # Method selection
    parser.add_argument('--method', type=str, default='both',
                        choices=list(METHODS) + ['both'],
                        help='Recovery method (default: both)')

    # Regularization options
    parser.add_argument('--gamma', type=float, default=1e-7,
                        help='Tikhonov regularization parameter (default: 1e-7)')
    parser.add_argument('--block-size', type=int, default=4,
                        help='Dimension Reduction parameter m (default: 4)')
    parser.add_argument('--reduction-gamma', type=float, default=1e-9,
                        help='Regularization of the reduced problem (default: 1e-9)')

    # Window options
    parser.add_argument('--window', type=int, default=1500,
                        help='Window size n (default: 1500)')
    parser.add_argument('--accept', type=int, default=900,
                        help='Samples N accepted from each window, N < n (default: 900)')
    parser.add_argument('--threshold', type=float, default=20.0,
                        help='Noise threshold; estimates below it are strongly smoothed '
                             '(default: 20)')

    # Delay options
    parser.add_argument('--delay-fraction', type=float, default=1e-4,
                        help='Delay onset as a fraction of the impulse-response peak '
                             '(default: 1e-4)')
    delay_group = parser.add_mutually_exclusive_group()
    delay_group.add_argument('--trim-delay', dest='trim_delay', action='store_true',
                             default=None, help='Remove the delay for every method')
    delay_group.add_argument('--no-trim-delay', dest='trim_delay', action='store_false',
                             help='Never remove the delay')

    # Output options
    parser.add_argument('--out-dir', type=str, default='recovery_output',
                        help='Output directory (default: recovery_output)')
    parser.add_argument('--no-plots', dest='save_plots', action='store_false',
                        help='Do not write PNG figures')
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Parse CLI arguments and run the recovery pipeline."""
    parser = build_parser()
    args = parser.parse_args(argv)

    # Validate inputs
    if args.sampling_rate is not None and args.sampling_rate <= 0:
        parser.error("--sampling-rate must be positive")
    if args.gamma < 0 or args.reduction_gamma < 0:
        parser.error("--gamma and --reduction-gamma must be non-negative")
    if args.block_size < 1:
        parser.error("--block-size must be a positive integer")
    if args.accept < 1 or args.accept >= args.window:
        parser.error("--accept must satisfy 1 <= N < n (--window)")

    methods = METHODS if args.method == 'both' else (args.method,)

    data = DataConfig(
        impulse_response_path=args.impulse_response,
        data_path=args.data,
        reference_path=args.reference,
        sampling_rate=args.sampling_rate,
        delay_fraction=args.delay_fraction,
        trim_delay=args.trim_delay,
        out_dir=args.out_dir,
        save_plots=args.save_plots,
        methods=methods,
    )
    regularization = RegularizationConfig(
        gamma=args.gamma, block_size=args.block_size,
        reduction_gamma=args.reduction_gamma)
    window = WindowConfig(
        window_length=args.window, accept_length=args.accept,
        base_threshold=args.threshold)

    run_recovery_pipeline(data, regularization, window)
    return 0


if __name__ == '__main__':
    raise SystemExit(main())
