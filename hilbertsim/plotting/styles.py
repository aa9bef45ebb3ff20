"""Shared plotting style settings for deterministic figure outputs."""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any

import matplotlib
import matplotlib.pyplot as plt
import numpy as np


@dataclass(frozen=True)
class PlotStyle:
    """Plotting defaults used across report figures."""

    dpi: int = 200
    figsize_cuts_panel: tuple[float, float] = (3.2, 2.6)
    figsize_heatmap: tuple[float, float] = (5.5, 4.5)
    figsize_signs: tuple[float, float] = (8.0, 4.2)
    hist_bins: int = 60
    cut_color: str = "#8B0000"
    down_color: str = "#2166AC"
    none_color: str = "#BDBDBD"
    up_color: str = "#B2182B"
    axis_label_fontsize: int = 10
    title_fontsize: int = 11
    legend_fontsize: int = 8


DEFAULT_PLOT_STYLE = PlotStyle()


def apply_plot_style(style: PlotStyle = DEFAULT_PLOT_STYLE) -> None:
    """Apply deterministic matplotlib rcParams for report plots."""
    plt.rcParams.update(
        {
            "figure.dpi": style.dpi,
            "savefig.dpi": style.dpi,
            "savefig.facecolor": "white",
            "font.family": "DejaVu Sans",
            "axes.titlesize": style.title_fontsize,
            "axes.labelsize": style.axis_label_fontsize,
            "legend.fontsize": style.legend_fontsize,
            "axes.grid": False,
        }
    )


def plot_style_dict(style: PlotStyle = DEFAULT_PLOT_STYLE) -> dict[str, Any]:
    """Return style + dependency versions for metadata manifests."""
    d = asdict(style)
    d["matplotlib_version"] = str(matplotlib.__version__)
    d["numpy_version"] = str(np.__version__)
    return d
