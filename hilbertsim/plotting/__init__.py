"""Report figures for hilbertsim analyses."""

from hilbertsim.plotting.cuts import plot_cuts
from hilbertsim.plotting.similarity import plot_bootstrap_signs, plot_js_heatmap
from hilbertsim.plotting.styles import (
    DEFAULT_PLOT_STYLE,
    PlotStyle,
    apply_plot_style,
    plot_style_dict,
)
from hilbertsim.plotting.utils import save_figure

__all__ = [
    "DEFAULT_PLOT_STYLE",
    "PlotStyle",
    "apply_plot_style",
    "plot_style_dict",
    "plot_cuts",
    "plot_js_heatmap",
    "plot_bootstrap_signs",
    "save_figure",
]
