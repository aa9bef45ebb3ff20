"""Bootstrap sign-count test for per-index population changes between conditions."""

from __future__ import annotations

from typing import Any

import numpy as np
import pandas as pd

from hilbertsim.core.errors import ConfigurationError, DataShapeError
from hilbertsim.core.types import BootstrapResult

SIGN_COLUMNS: tuple[str, str, str] = ("n_down", "n_none", "n_up")


def fold_change_sign(count: Any, ref_count: Any, flim: float) -> Any:
    """Classify `log2(count / ref_count)` as -1, 0 or +1 against `log2(flim)`.

    A zero count is a maximal decrease (-1), whatever the reference holds,
    including 0/0. A positive count over a zero reference is +1.
    """
    if not float(flim) > 1.0:
        raise ConfigurationError("flim must be > 1.")
    c = np.asarray(count, dtype=float)
    r = np.asarray(ref_count, dtype=float)
    c, r = np.broadcast_arrays(c, r)
    thr = float(np.log2(float(flim)))

    out = np.zeros(c.shape, dtype=np.int8)
    pos = (c > 0) & (r > 0)
    fold = np.zeros(c.shape, dtype=float)
    fold[pos] = np.log2(c[pos] / r[pos])
    out[pos & (fold >= thr)] = 1
    out[pos & (fold <= -thr)] = -1
    out[(c > 0) & (r == 0)] = 1
    out[c == 0] = -1
    if out.ndim == 0:
        return int(out)
    return out


def bootstrap_ncells(totals: Any, round_to: int = 1000) -> int:
    """Common draw size: the smallest total floored to `round_to`.

    When the smallest total is below `round_to`, the granularity steps down
    by factors of ten until it fits.
    """
    arr = np.asarray(totals, dtype=float).ravel()
    if arr.size == 0:
        raise DataShapeError("totals must be non-empty.")
    smallest = int(arr.min())
    if smallest <= 0:
        raise ConfigurationError("Every condition needs at least one point to bootstrap.")
    step = int(round_to)
    if step < 1:
        raise ConfigurationError("round_to must be >= 1.")
    while step > 1 and smallest // step == 0:
        step = max(1, step // 10)
    return int((smallest // step) * step)


def _repetition_seeds(entropy: Any, start: int, end: int) -> list[np.random.SeedSequence]:
    # Same streams as SeedSequence(entropy).spawn(end)[start:end], without the spawn counter.
    return [np.random.SeedSequence(entropy, spawn_key=(i,)) for i in range(start, end)]


def _run_repetitions(
    probs: np.ndarray,
    ncells: int,
    flim: float,
    entropy: Any,
    start: int,
    end: int,
) -> np.ndarray:
    n_cond = probs.shape[0]
    n_idx = probs.shape[1] - 1
    acc = np.zeros((n_idx, n_cond - 1, 3), dtype=np.int64)
    for ss in _repetition_seeds(entropy, start, end):
        rng = np.random.default_rng(ss)
        draws = np.stack([rng.multinomial(ncells, probs[c]) for c in range(n_cond)])
        draws = draws[:, :n_idx]
        signs = fold_change_sign(draws[1:], draws[0][None, :], flim)
        for col, v in enumerate((-1, 0, 1)):
            acc[:, :, col] += (signs == v).T
    return acc


def _chunks(start: int, end: int, size: int) -> list[tuple[int, int]]:
    return [(s, min(s + size, end)) for s in range(start, end, size)]


def bootstrap_sign_counts(
    probs: np.ndarray,
    ncells: int,
    flim: float,
    entropy: Any,
    *,
    rep_start: int = 0,
    rep_end: int,
    n_jobs: int = 1,
    backend: str = "loky",
    chunk_size: int = 25,
) -> np.ndarray:
    """Accumulate sign counts over repetitions `[rep_start, rep_end)`.

    `probs` has one row per condition (reference first) and one column per
    tested index plus a final column pooling every other index. Returns an
    `(n_indices, n_conditions - 1, 3)` array of (down, none, up) counts.
    Repetition `i` always draws from the same stream, so any split of the
    range (or any `n_jobs`) sums to the same result.
    """
    pr = np.asarray(probs, dtype=float)
    if pr.ndim != 2 or pr.shape[0] < 2 or pr.shape[1] < 2:
        raise DataShapeError("probs must have shape (n_conditions >= 2, n_indices + 1).")
    start_i = int(rep_start)
    end_i = int(rep_end)
    if start_i < 0 or end_i < start_i:
        raise ValueError("Invalid repetition slice.")

    chunks = _chunks(start_i, end_i, max(1, int(chunk_size)))
    if int(n_jobs) == 1 or len(chunks) <= 1:
        parts = [_run_repetitions(pr, int(ncells), flim, entropy, s, e) for s, e in chunks]
    else:
        from joblib import Parallel, delayed

        parts = Parallel(n_jobs=int(n_jobs), backend=backend)(
            delayed(_run_repetitions)(pr, int(ncells), flim, entropy, s, e) for s, e in chunks
        )

    acc = np.zeros((pr.shape[1] - 1, pr.shape[0] - 1, 3), dtype=np.int64)
    for part in parts:
        acc += part
    return acc


def bootstrap_significance(
    counts: pd.DataFrame,
    reference: str | None = None,
    *,
    lim: int = 40,
    n_rep: int = 100,
    flim: float = 2.0,
    p: float = 0.95,
    seed: int | None = 0,
    round_to: int = 1000,
    n_jobs: int = 1,
    backend: str = "loky",
    chunk_size: int = 25,
) -> BootstrapResult:
    """Test every well-populated Hilbert index for a change against `reference`.

    Indices whose total count is below `lim` are not tested and are listed in
    `BootstrapResult.excluded`. Each repetition draws `ncells` points with
    replacement from every condition's full population; an index is
    significant when more than `n_rep * p` repetitions agree on the sign.
    `ncells` is sized from the full per-condition totals, not only the tested
    indices. When no index reaches `lim` the result has an empty table,
    `ncells=0`, and every index in `excluded`.
    """
    if not isinstance(counts, pd.DataFrame):
        raise DataShapeError("counts must be a DataFrame (index x condition).")
    if counts.shape[1] < 2:
        raise ConfigurationError("At least two conditions are required.")
    if int(n_rep) < 1:
        raise ConfigurationError("n_rep must be >= 1.")
    if not 0.0 < float(p) < 1.0:
        raise ConfigurationError("p must lie in (0, 1).")
    if not float(flim) > 1.0:
        raise ConfigurationError("flim must be > 1.")

    conditions = [str(c) for c in counts.columns]
    ref = conditions[0] if reference is None else str(reference)
    if ref not in conditions:
        raise ConfigurationError(
            f"Reference label '{ref}' not found among conditions: {', '.join(conditions)}."
        )
    ordered = [ref, *[c for c in conditions if c != ref]]
    table = counts.copy()
    table.columns = conditions
    table = table.loc[:, ordered].fillna(0).astype(np.int64)

    keep = table.sum(axis=1) >= int(lim)
    excluded = list(table.index[~keep])
    tested = table.loc[keep]
    entropy = np.random.SeedSequence(seed).entropy
    columns = ["hilbert", "condition", *SIGN_COLUMNS, "significant", "direction"]
    if tested.shape[0] == 0:
        return BootstrapResult(
            table=pd.DataFrame(columns=columns).astype(
                {"n_down": np.int64, "n_none": np.int64, "n_up": np.int64, "significant": bool}
            ),
            reference=ref,
            ncells=0,
            n_rep=int(n_rep),
            lim=int(lim),
            flim=float(flim),
            p=float(p),
            seed=seed,
            excluded=excluded,
            entropy=int(entropy),
        )

    totals = table.sum(axis=0).to_numpy(dtype=float)
    ncells = bootstrap_ncells(totals, round_to)

    inside = tested.to_numpy(dtype=float).T
    other = totals - inside.sum(axis=1)
    probs = np.column_stack([inside, other]) / totals[:, None]

    acc = bootstrap_sign_counts(
        probs,
        ncells,
        flim,
        entropy,
        rep_end=int(n_rep),
        n_jobs=n_jobs,
        backend=backend,
        chunk_size=chunk_size,
    )

    thr = float(n_rep) * float(p)
    rows = []
    for i, idx in enumerate(tested.index):
        for k, cond in enumerate(ordered[1:]):
            n_down, n_none, n_up = (int(v) for v in acc[i, k])
            if n_down > thr and n_down >= n_up:
                direction = "down"
            elif n_up > thr:
                direction = "up"
            else:
                direction = "none"
            rows.append(
                {
                    "hilbert": idx,
                    "condition": cond,
                    "n_down": n_down,
                    "n_none": n_none,
                    "n_up": n_up,
                    "significant": direction != "none",
                    "direction": direction,
                }
            )
    out = pd.DataFrame(rows, columns=columns)
    return BootstrapResult(
        table=out,
        reference=ref,
        ncells=int(ncells),
        n_rep=int(n_rep),
        lim=int(lim),
        flim=float(flim),
        p=float(p),
        seed=seed,
        excluded=excluded,
        entropy=int(entropy),
    )
