"""
Shared fixtures for the signal-recovery tests.
"""

import numpy as np
import pytest

from src.examples.synthetic_recovery import exponential_impulse_response, simulate_recording


@pytest.fixture
def rng():
    return np.random.default_rng(1234)


@pytest.fixture
def smooth_experiment():
    """Smooth input behind a fast exponential sensor, sampled at 10 Hz."""
    sampling_rate = 10.0
    t = np.arange(2000)
    u = 5.0 + np.sin(2 * np.pi * t / 200.0)
    h = exponential_impulse_response(30, time_constant=5.0)
    y = simulate_recording(u, h, sampling_rate, noise_level=1e-4, seed=7)
    return {'u': u, 'h': h, 'y': y, 'sampling_rate': sampling_rate}
