"""
Plot recorded, recovered and (when known) true input signals.

Produces one figure per recovery method, laid out like a respirometry
trace: a wide panel spanning the whole recording.
"""

from pathlib import Path
from typing import Optional

import numpy as np
import matplotlib
matplotlib.use('Agg')
import matplotlib.pyplot as plt

from src.visualization.plot_styles import configure_plot_style


def plot_recovery(
    t: np.ndarray,
    y: np.ndarray,
    u_estimated: np.ndarray,
    u_exact: Optional[np.ndarray],
    label: str,
    output_path: Path,
    ylabel: str = 'CO$_2$ concentration (ppm)',
) -> Path:
    """Plot true input, recorded data and recovered input on one axis.

    Args:
        t:           Time vector [s].
        y:           Recorded data.
        u_estimated: Recovered input.
        u_exact:     Exact input, or None when unavailable.
        label:       Method name used in the legend.
        output_path: PNG path to write.
        ylabel:      Y-axis label.

    Returns:
        Path to the saved PNG file.
    """
    configure_plot_style()

    has_reference = u_exact is not None and np.max(np.abs(u_exact)) > 0
    if u_exact is None:
        u_exact = np.zeros_like(y)

    fig, ax = plt.subplots(figsize=(12.8, 4.0))
    ax.plot(t, u_exact, 'r', linewidth=1.5,
            label='True input' if has_reference else 'True input (not available)')
    ax.plot(t, y, linewidth=2, label='Recorded data')
    ax.plot(t, u_estimated, 'm', linewidth=2, label=f'Recovered - {label}')

    ax.set_xlim(t[0], t[-1])
    y_max = float(np.max(y))
    if y_max > 0:
        ax.set_ylim(-0.2 * y_max, 2 * y_max)
    ax.set_xlabel('Time (s)')
    ax.set_ylabel(ylabel)
    ax.legend(loc='best')
    plt.tight_layout()

    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    plt.savefig(output_path, dpi=150, bbox_inches='tight')
    plt.close(fig)
    return output_path
