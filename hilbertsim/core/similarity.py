"""Per-index population tables and Jensen-Shannon similarity between conditions."""

from __future__ import annotations

from typing import Any

import numpy as np
import pandas as pd
from scipy.spatial.distance import jensenshannon

from hilbertsim.core.errors import ConfigurationError, DataShapeError
from hilbertsim.core.utils import resolve_reference

JS_METRICS: tuple[str, ...] = ("distance", "divergence")


def hilbert_counts(
    hilbert: Any,
    labels: Any,
    reference: str | None = None,
) -> pd.DataFrame:
    """Count points per (Hilbert index, condition).

    Rows are the indices present in the data (sorted), columns the condition
    labels with the reference first and the others sorted.
    """
    h = np.asarray(hilbert).ravel()
    lab = np.asarray(labels).ravel().astype(str)
    if h.size != lab.size:
        raise DataShapeError(
            f"hilbert ({h.size}) and labels ({lab.size}) must have the same length."
        )
    if h.size == 0:
        raise DataShapeError("Cannot tabulate an empty sample.")
    ref, others = resolve_reference(lab, reference)
    table = pd.crosstab(pd.Series(h, name="hilbert"), pd.Series(lab, name="condition"))
    table = table.loc[:, [ref, *others]].sort_index()
    table.columns.name = "condition"
    return table.astype(np.int64)


def hilbert_proportions(counts: pd.DataFrame) -> pd.DataFrame:
    """Normalize each condition column of a count table to sum to one."""
    totals = counts.sum(axis=0)
    if (totals <= 0).any():
        empty = ", ".join(str(c) for c in totals.index[totals <= 0])
        raise DataShapeError(f"Conditions without any points: {empty}.")
    return counts.astype(float).div(totals, axis=1)


def js_divergence(p: Any, q: Any) -> float:
    """Jensen-Shannon divergence (base 2, in [0, 1]) of two distributions.

    Inputs are normalized; entries absent from one distribution must be passed
    as zeros.
    """
    a = np.asarray(p, dtype=float).ravel()
    b = np.asarray(q, dtype=float).ravel()
    if a.size != b.size:
        raise DataShapeError("p and q must have the same length.")
    if a.sum() <= 0 or b.sum() <= 0:
        raise DataShapeError("p and q must each carry positive mass.")
    d = float(jensenshannon(a, b, base=2.0))
    if not np.isfinite(d):
        d = 0.0
    return float(min(max(d * d, 0.0), 1.0))


def js_dist(counts: pd.DataFrame, metric: str = "distance") -> pd.DataFrame:
    """Pairwise Jensen-Shannon distance (or divergence) between condition columns."""
    if metric not in JS_METRICS:
        raise ConfigurationError(f"metric must be one of {', '.join(JS_METRICS)}.")
    props = hilbert_proportions(counts.fillna(0))
    names = list(props.columns)
    out = pd.DataFrame(0.0, index=names, columns=names)
    for i, a in enumerate(names):
        for b in names[i + 1 :]:
            v = js_divergence(props[a].to_numpy(), props[b].to_numpy())
            if metric == "distance":
                v = float(np.sqrt(v))
            out.loc[a, b] = v
            out.loc[b, a] = v
    out.index.name = "condition"
    out.columns.name = "condition"
    return out


def complexity_summary(counts: pd.DataFrame) -> pd.DataFrame:
    """Per-condition occupancy and Shannon entropy (bits) over Hilbert indices."""
    rows = []
    for cond in counts.columns:
        col = counts[cond].to_numpy(dtype=float)
        col = col[col > 0]
        n_idx = int(col.size)
        if n_idx == 0:
            h = 0.0
        else:
            pr = col / col.sum()
            h = float(-np.sum(pr * np.log2(pr)))
        norm = h / float(np.log2(n_idx)) if n_idx > 1 else 0.0
        rows.append(
            {
                "condition": str(cond),
                "n_points": int(col.sum()),
                "n_indices": n_idx,
                "entropy": h,
                "normalized_entropy": norm,
            }
        )
    return pd.DataFrame(rows).set_index("condition")
