"""
Data I/O utilities for impulse responses and recorded time series.

Provides functions for reading two-column text files (time, value), as
written by common acquisition software, and for saving recovered inputs
in the same layout.
"""

from pathlib import Path
from typing import Tuple

import numpy as np
import pandas as pd


def load_two_column(filepath: Path) -> Tuple[np.ndarray, np.ndarray]:
    """Load the first two columns of a headerless text file.

    Columns may be separated by whitespace or commas.

    Args:
        filepath: Path to the text file.

    Returns:
        Tuple of (first column, second column) as 1-D float arrays.

    Raises:
        ValueError: If the file has fewer than two numeric columns.
    """
    df = pd.read_csv(filepath, sep=r"[\s,]+", header=None, engine="python",
                     comment="%")
    df = df.dropna(axis=1, how="all")
    if df.shape[1] < 2:
        raise ValueError(f"{filepath} must contain at least two columns")
    try:
        values = df.iloc[:, :2].to_numpy(dtype=float)
    except ValueError as e:
        raise ValueError(f"{filepath} contains non-numeric data: {e}") from e
    return values[:, 0], values[:, 1]


def load_impulse_response(filepath: Path) -> np.ndarray:
    """Return the impulse response (second column) of *filepath*."""
    _, h = load_two_column(filepath)
    return h


def load_recording(filepath: Path) -> Tuple[np.ndarray, np.ndarray]:
    """Return (time, y) from a two-column recording file."""
    return load_two_column(filepath)


def save_recovered(filepath: Path, time: np.ndarray, estimate: np.ndarray) -> Path:
    """Save (time, estimate) pairs as a two-column ASCII file.

    Returns:
        The path written.
    """
    time = np.asarray(time, dtype=float).ravel()
    estimate = np.asarray(estimate, dtype=float).ravel()
    if time.size != estimate.size:
        raise ValueError(
            f"time has {time.size} samples but estimate has {estimate.size}")
    filepath = Path(filepath)
    filepath.parent.mkdir(parents=True, exist_ok=True)
    np.savetxt(filepath, np.column_stack([time, estimate]), fmt="%.8e")
    return filepath


def infer_sampling_rate(time: np.ndarray) -> float:
    """Sampling rate [Hz] from the median spacing of a time vector."""
    time = np.asarray(time, dtype=float).ravel()
    if time.size < 2:
        raise ValueError("At least two time samples are needed to infer the sampling rate")
    dt = np.diff(time)
    if np.any(dt <= 0):
        raise ValueError("Time vector must be strictly increasing")
    return float(1.0 / np.median(dt))
