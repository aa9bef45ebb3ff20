"""Figures for condition similarity and bootstrap sign counts."""

from __future__ import annotations

from pathlib import Path

import matplotlib.pyplot as plt
import numpy as np
import pandas as pd

from hilbertsim.core.types import BootstrapResult
from hilbertsim.plotting.styles import DEFAULT_PLOT_STYLE, PlotStyle
from hilbertsim.plotting.utils import save_figure


def plot_js_heatmap(
    js: pd.DataFrame,
    *,
    out_png: str | Path | None = None,
    title: str = "Jensen-Shannon distance",
    style: PlotStyle = DEFAULT_PLOT_STYLE,
) -> plt.Figure | None:
    mat = js.to_numpy(dtype=float)
    fig, ax = plt.subplots(figsize=style.figsize_heatmap)
    im = ax.imshow(mat, cmap="viridis", vmin=0.0, vmax=max(1e-12, float(np.max(mat))))
    labels = [str(c) for c in js.columns]
    ax.set_xticks(np.arange(len(labels)))
    ax.set_yticks(np.arange(len(labels)))
    ax.set_xticklabels(labels, rotation=45, ha="right")
    ax.set_yticklabels(labels)
    for i in range(mat.shape[0]):
        for j in range(mat.shape[1]):
            ax.text(j, i, f"{mat[i, j]:.2f}", ha="center", va="center", fontsize=8, color="white")
    fig.colorbar(im, ax=ax, fraction=0.046, pad=0.04)
    ax.set_title(title)
    fig.tight_layout()
    if out_png is not None:
        save_figure(fig, out_png, style=style)
        return None
    return fig


def plot_bootstrap_signs(
    result: BootstrapResult,
    condition: str,
    *,
    out_png: str | Path | None = None,
    style: PlotStyle = DEFAULT_PLOT_STYLE,
) -> plt.Figure | None:
    """Stacked down/none/up counts per tested index for one condition."""
    sub = result.table[result.table["condition"] == str(condition)]
    if sub.empty:
        raise ValueError(f"No bootstrap rows for condition '{condition}'.")
    x = np.arange(sub.shape[0])
    down = sub["n_down"].to_numpy(dtype=float)
    none = sub["n_none"].to_numpy(dtype=float)
    up = sub["n_up"].to_numpy(dtype=float)

    fig, ax = plt.subplots(figsize=style.figsize_signs)
    ax.bar(x, -down, color=style.down_color, width=1.0, label="decreased")
    ax.bar(x, up, color=style.up_color, width=1.0, label="increased")
    ax.bar(x, none, bottom=up, color=style.none_color, width=1.0, label="no change")
    thr = float(result.n_rep) * float(result.p)
    ax.axhline(thr, color="black", lw=0.8, ls="--")
    ax.axhline(-thr, color="black", lw=0.8, ls="--")
    ax.set_xlim(-0.5, float(x.size) - 0.5)
    ax.set_xlabel("tested Hilbert index (rank)")
    ax.set_ylabel("repetitions")
    ax.set_title(f"{condition} vs {result.reference} (N={result.n_rep}, ncells={result.ncells})")
    ax.legend(loc="upper right", frameon=False)
    fig.tight_layout()
    if out_png is not None:
        save_figure(fig, out_png, style=style)
        return None
    return fig
