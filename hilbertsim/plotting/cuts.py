"""Per-channel histograms with cut positions overlaid."""

from __future__ import annotations

import math
from pathlib import Path
from typing import Any

import matplotlib.pyplot as plt
import numpy as np

from hilbertsim.core.types import CutSet
from hilbertsim.core.utils import as_sample_matrix
from hilbertsim.plotting.styles import DEFAULT_PLOT_STYLE, PlotStyle
from hilbertsim.plotting.utils import save_figure


def plot_cuts(
    samples: Any,
    cut_set: CutSet,
    *,
    out_png: str | Path | None = None,
    n_cols: int = 4,
    style: PlotStyle = DEFAULT_PLOT_STYLE,
) -> plt.Figure | None:
    """One histogram panel per channel; vertical lines mark the cuts."""
    mat, _ = as_sample_matrix(samples)
    if mat.shape[1] != cut_set.n_dims:
        raise ValueError("samples and cut_set dimension mismatch.")
    n_dims = cut_set.n_dims
    cols = max(1, min(int(n_cols), n_dims))
    rows = int(math.ceil(n_dims / cols))
    w, h = style.figsize_cuts_panel
    fig, axes = plt.subplots(rows, cols, figsize=(w * cols, h * rows), squeeze=False)

    for d, ch in enumerate(cut_set.channels):
        ax = axes[d // cols][d % cols]
        ax.hist(mat[:, d], bins=style.hist_bins, color="lightgray", edgecolor="none")
        for c in cut_set.cuts[d]:
            ax.axvline(float(c), color=style.cut_color, lw=1.0)
        eff = int(cut_set.cuts[d].size + 1)
        flag = " *" if eff < cut_set.n_bins else ""
        ax.set_title(f"{ch} ({eff} bins){flag}")
        ax.set_yticks([])
    for k in range(n_dims, rows * cols):
        axes[k // cols][k % cols].axis("off")
    fig.tight_layout()

    if out_png is not None:
        save_figure(fig, out_png, style=style)
        return None
    return fig
