"""Quantile binning with a minimum-count constraint per bin."""

from __future__ import annotations

import warnings
from typing import Any, Sequence

import numpy as np
import pandas as pd

from hilbertsim.core.errors import ConfigurationError, DataShapeError, DegenerateBinningWarning
from hilbertsim.core.types import CUT_MODES, CutSet
from hilbertsim.core.utils import as_sample_matrix, channel_positions


def _bin_counts(values: np.ndarray, cuts: np.ndarray) -> np.ndarray:
    idx = np.searchsorted(cuts, values, side="right")
    return np.bincount(idx, minlength=cuts.size + 1)


def _quantile_cuts(values: np.ndarray, n_bins: int) -> np.ndarray:
    if n_bins <= 1:
        return np.zeros(0, dtype=float)
    probs = np.arange(1, n_bins, dtype=float) / float(n_bins)
    cand = np.unique(np.quantile(values, probs))
    # A cut at (or below) the minimum would open an empty lowest bin.
    return cand[cand > float(values.min())].astype(float)


def _merge_sparse_bins(values: np.ndarray, cuts: np.ndarray, count_lim: int) -> np.ndarray:
    """Drop cuts until every bin holds at least `count_lim` values (or one bin is left).

    Empty bins are always merged, even with `count_lim=0`.
    """
    lim = max(int(count_lim), 1)
    kept = [float(c) for c in cuts]
    while kept:
        counts = _bin_counts(values, np.asarray(kept, dtype=float))
        sparse = np.flatnonzero(counts < lim)
        if sparse.size == 0:
            break
        k = int(sparse[np.argmin(counts[sparse])])
        last = counts.size - 1
        if k == 0:
            drop = 0
        elif k == last:
            drop = k - 1
        else:
            drop = k - 1 if counts[k - 1] <= counts[k + 1] else k
        del kept[drop]
    return np.asarray(kept, dtype=float)


def cut_values(values: np.ndarray, n_bins: int = 5, count_lim: int = 40) -> np.ndarray:
    """Cut points for one set of values (a column, or a pooled group of columns)."""
    x = np.asarray(values, dtype=float).ravel()
    if x.size == 0:
        raise DataShapeError("Cannot compute cuts on an empty value set.")
    n_i = int(n_bins)
    if n_i < 1:
        raise ConfigurationError("n_bins must be >= 1.")
    cand = _quantile_cuts(x, n_i)
    return _merge_sparse_bins(x, cand, int(count_lim))


def _resolve_groups(
    channels: tuple[str, ...],
    mode: str,
    groups: Sequence[Sequence[Any]] | None,
) -> tuple[tuple[int, ...], ...]:
    if mode not in CUT_MODES:
        raise ConfigurationError(f"mode must be one of {', '.join(CUT_MODES)}; got '{mode}'.")
    if mode == "independent":
        if groups is not None:
            raise ConfigurationError("groups are only meaningful with mode='combined'.")
        return ()
    if groups is None:
        return (tuple(range(len(channels))),)

    resolved = tuple(channel_positions(channels, g) for g in groups)
    seen: set[int] = set()
    for g in resolved:
        if len(g) == 0:
            raise ConfigurationError("Dimension groups must be non-empty.")
        overlap = seen.intersection(g)
        if overlap:
            names = ", ".join(channels[i] for i in sorted(overlap))
            raise ConfigurationError(f"Channels assigned to more than one group: {names}.")
        seen.update(g)
    return resolved


def make_cuts(
    samples: Any,
    n_bins: int = 5,
    count_lim: int = 40,
    *,
    mode: str = "independent",
    groups: Sequence[Sequence[Any]] | None = None,
    channels: Sequence[str] | None = None,
) -> CutSet:
    """Compute per-dimension cut points.

    Candidate cuts sit at the `k/n_bins` quantiles; bins holding fewer than
    `count_lim` values are merged into their smaller neighbour. In combined
    mode each group of channels pools its values and shares one cut vector;
    channels outside every group are cut on their own.

    Dimensions that end up with fewer bins than requested are reported through
    `DegenerateBinningWarning` and `CutSet.degraded`.
    """
    mat, names = as_sample_matrix(samples, channels)
    if int(n_bins) < 1:
        raise ConfigurationError("n_bins must be >= 1.")
    if int(count_lim) < 0:
        raise ConfigurationError("count_lim must be >= 0.")
    resolved = _resolve_groups(names, mode, groups)

    cuts: list[np.ndarray | None] = [None] * mat.shape[1]
    for g in resolved:
        shared = cut_values(mat[:, list(g)], n_bins, count_lim)
        for d in g:
            cuts[d] = shared
    for d in range(mat.shape[1]):
        if cuts[d] is None:
            cuts[d] = cut_values(mat[:, d], n_bins, count_lim)

    out = CutSet(
        channels=names,
        cuts=tuple(np.asarray(c, dtype=float) for c in cuts),
        n_bins=int(n_bins),
        count_lim=int(count_lim),
        mode=str(mode),
        groups=resolved,
    )
    degraded = out.degraded
    if degraded:
        eff = dict(zip(out.channels, out.effective_bins))
        detail = ", ".join(f"{ch}={int(eff[ch])}" for ch in degraded)
        warnings.warn(
            f"Fewer than {int(n_bins)} bins supported by the data for: {detail}.",
            DegenerateBinningWarning,
            stacklevel=2,
        )
    return out


def do_cut(samples: Any, cut_set: CutSet) -> np.ndarray:
    """Map each value to its 0-based bin index under `cut_set`."""
    if isinstance(samples, pd.DataFrame):
        by_name = {str(c): c for c in samples.columns}
        missing = [ch for ch in cut_set.channels if ch not in by_name]
        if missing:
            raise DataShapeError(f"samples are missing channels: {', '.join(missing)}.")
        samples = samples.loc[:, [by_name[ch] for ch in cut_set.channels]]
    mat, _ = as_sample_matrix(samples)
    if mat.shape[1] != cut_set.n_dims:
        raise DataShapeError(
            f"samples have {mat.shape[1]} dimensions but the cut set has {cut_set.n_dims}."
        )
    binned = np.empty(mat.shape, dtype=np.int64)
    for d, cuts in enumerate(cut_set.cuts):
        binned[:, d] = np.searchsorted(cuts, mat[:, d], side="right")
    return binned
