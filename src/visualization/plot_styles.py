"""
Shared matplotlib plot style configuration.

Provides a single function to set consistent font sizes, line widths,
and tick parameters across all figures in the project.
"""

import matplotlib.pyplot as plt


def configure_plot_style() -> None:
    """Configure matplotlib rcParams for wide time-series figures.

    Sets serif fonts sized for 12.8 x 4 inch traces:
        - Base font: 16 pt
        - Axis labels: 20 pt
        - Legend: 14 pt
    """
    plt.rcParams.update({
        'font.family': 'serif',
        'font.size': 16,
        'axes.labelsize': 20,
        'axes.titlesize': 20,
        'xtick.labelsize': 16,
        'ytick.labelsize': 16,
        'legend.fontsize': 14,
        'lines.linewidth': 2.0,
        'axes.linewidth': 1.5,
        'xtick.major.width': 1.5,
        'ytick.major.width': 1.5,
    })
