"""Typed configuration and result containers for hilbertsim core operations."""

from __future__ import annotations

from dataclasses import dataclass, field, fields
from typing import Any

import numpy as np
import pandas as pd

from hilbertsim.core.errors import ConfigurationError

CUT_MODES: tuple[str, ...] = ("independent", "combined")


@dataclass(frozen=True)
class AnalysisConfig:
    """Parameters for one end-to-end analysis run.

    - `n_bins`, `count_lim`, `cut_mode`, `groups`: binning.
    - `order`: Hilbert bits per dimension (`None` picks the smallest that fits).
    - `lim`, `n_rep`, `flim`, `p`, `seed`, `round_to`, `n_jobs`: bootstrap.
    - `reference`: reference condition label (`None` uses the first sorted label).
    """

    n_bins: int = 5
    count_lim: int = 40
    cut_mode: str = "independent"
    groups: tuple[tuple[str | int, ...], ...] | None = None
    order: int | None = None
    lim: int = 40
    n_rep: int = 100
    flim: float = 2.0
    p: float = 0.95
    seed: int | None = 0
    round_to: int = 1000
    reference: str | None = None
    n_jobs: int = 1

    def __post_init__(self) -> None:
        if int(self.n_bins) < 1:
            raise ConfigurationError("n_bins must be >= 1.")
        if int(self.count_lim) < 0:
            raise ConfigurationError("count_lim must be >= 0.")
        if self.cut_mode not in CUT_MODES:
            raise ConfigurationError(
                f"cut_mode must be one of {', '.join(CUT_MODES)}; got '{self.cut_mode}'."
            )
        if self.groups is not None and self.cut_mode != "combined":
            raise ConfigurationError("groups are only meaningful with cut_mode='combined'.")
        if self.order is not None and int(self.order) < 1:
            raise ConfigurationError("order must be >= 1.")
        if int(self.lim) < 0:
            raise ConfigurationError("lim must be >= 0.")
        if int(self.n_rep) < 1:
            raise ConfigurationError("n_rep must be >= 1.")
        if not float(self.flim) > 1.0:
            raise ConfigurationError("flim must be > 1 (fold-change threshold).")
        if not 0.0 < float(self.p) < 1.0:
            raise ConfigurationError("p must lie in (0, 1).")
        if int(self.round_to) < 1:
            raise ConfigurationError("round_to must be >= 1.")
        if int(self.n_jobs) == 0:
            raise ConfigurationError("n_jobs must be non-zero.")

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "AnalysisConfig":
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ConfigurationError(f"Unknown config keys: {', '.join(unknown)}.")
        kwargs = dict(data)
        if kwargs.get("groups") is not None:
            # Integers are channel positions; anything else is a channel name.
            kwargs["groups"] = tuple(
                tuple(c if isinstance(c, int) and not isinstance(c, bool) else str(c) for c in g)
                for g in kwargs["groups"]
            )
        return cls(**kwargs)

    def to_dict(self) -> dict[str, Any]:
        out = {f.name: getattr(self, f.name) for f in fields(self)}
        if self.groups is not None:
            out["groups"] = [list(g) for g in self.groups]
        return out


@dataclass(frozen=True)
class CutSet:
    """Per-dimension cut points.

    `cuts[d]` is strictly increasing with `effective_bins[d] - 1` entries; bin
    `k` of dimension `d` covers `[cuts[d][k-1], cuts[d][k])`.
    """

    channels: tuple[str, ...]
    cuts: tuple[np.ndarray, ...]
    n_bins: int
    count_lim: int
    mode: str = "independent"
    groups: tuple[tuple[int, ...], ...] = ()

    @property
    def n_dims(self) -> int:
        return len(self.channels)

    @property
    def effective_bins(self) -> np.ndarray:
        return np.asarray([c.size + 1 for c in self.cuts], dtype=int)

    @property
    def degraded(self) -> list[str]:
        eff = self.effective_bins
        return [ch for ch, k in zip(self.channels, eff) if int(k) < int(self.n_bins)]

    def to_frame(self) -> pd.DataFrame:
        rows = []
        for d, ch in enumerate(self.channels):
            group = next((i for i, g in enumerate(self.groups) if d in g), None)
            rows.append(
                {
                    "channel": ch,
                    "requested_bins": int(self.n_bins),
                    "effective_bins": int(self.cuts[d].size + 1),
                    "group": group,
                    "cuts": [float(v) for v in self.cuts[d]],
                }
            )
        return pd.DataFrame(rows)


@dataclass(frozen=True)
class BootstrapResult:
    """Sign counts per (Hilbert index, non-reference condition).

    `table` columns: `hilbert, condition, n_down, n_none, n_up, significant,
    direction`. `excluded` lists indices whose total count fell below `lim`;
    when every index falls below it the table is empty and `ncells` is 0.
    `entropy` is the root seed entropy actually used, so a `seed=None` run
    can be repeated with `seed=entropy`.
    """

    table: pd.DataFrame
    reference: str
    ncells: int
    n_rep: int
    lim: int
    flim: float
    p: float
    seed: int | None
    excluded: list[Any] = field(default_factory=list)
    entropy: int | None = None

    @property
    def significant(self) -> pd.DataFrame:
        return self.table[self.table["significant"]].reset_index(drop=True)


@dataclass(frozen=True)
class AnalysisResult:
    """Everything produced by `run_analysis` for one dataset."""

    config: AnalysisConfig
    channels: tuple[str, ...]
    reference: str
    cut_set: CutSet
    binned: np.ndarray
    mi: np.ndarray
    dim_order: np.ndarray
    order: int
    hilbert: np.ndarray
    counts: pd.DataFrame
    proportions: pd.DataFrame
    js: pd.DataFrame
    complexity: pd.DataFrame
    bootstrap: BootstrapResult
    metadata: dict[str, Any] = field(default_factory=dict)
