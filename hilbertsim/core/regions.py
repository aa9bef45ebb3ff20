"""Map Hilbert indices back to value ranges in the measurement space."""

from __future__ import annotations

from typing import Any, Sequence

import numpy as np
import pandas as pd

from hilbertsim.core.errors import DataShapeError
from hilbertsim.core.hilbert import hilbert_to_bins
from hilbertsim.core.types import CutSet


def bin_intervals(cut_set: CutSet, bins: Any) -> tuple[np.ndarray, np.ndarray]:
    """Lower/upper value bounds of bins `(n, D)`; open ends are -inf/+inf."""
    arr = np.asarray(bins, dtype=np.int64)
    if arr.ndim == 1:
        arr = arr.reshape(1, -1)
    if arr.ndim != 2 or arr.shape[1] != cut_set.n_dims:
        raise DataShapeError(
            f"bins must have {cut_set.n_dims} columns; got shape {arr.shape}."
        )
    lower = np.empty(arr.shape, dtype=float)
    upper = np.empty(arr.shape, dtype=float)
    for d, cuts in enumerate(cut_set.cuts):
        col = arr[:, d]
        if np.any(col < 0) or np.any(col > cuts.size):
            raise DataShapeError(
                f"Bin index out of range for channel '{cut_set.channels[d]}' "
                f"({cuts.size + 1} bins)."
            )
        edges = np.concatenate([[-np.inf], cuts, [np.inf]])
        lower[:, d] = edges[col]
        upper[:, d] = edges[col + 1]
    return lower, upper


def describe_indices(
    indices: Sequence[Any],
    cut_set: CutSet,
    order: int,
    dim_order: Sequence[int] | np.ndarray | None = None,
) -> pd.DataFrame:
    """One row per (index, channel) with the bin and its `[lower, upper)` range."""
    idx = list(indices)
    if not idx:
        return pd.DataFrame(columns=["hilbert", "channel", "bin", "lower", "upper"])
    bins = hilbert_to_bins(np.asarray(idx, dtype=object), order, cut_set.n_dims, dim_order)
    lower, upper = bin_intervals(cut_set, bins.astype(np.int64))
    rows = []
    for i, h in enumerate(idx):
        for d, ch in enumerate(cut_set.channels):
            rows.append(
                {
                    "hilbert": h,
                    "channel": ch,
                    "bin": int(bins[i, d]),
                    "lower": float(lower[i, d]),
                    "upper": float(upper[i, d]),
                }
            )
    return pd.DataFrame(rows)
