"""Pipeline I/O, logging, and sample loading helpers."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import TYPE_CHECKING, Any, Iterable, Sequence

import anndata as ad
import numpy as np
import pandas as pd
import scipy.sparse as sp

from hilbertsim.core.errors import DataShapeError

if TYPE_CHECKING:
    from hilbertsim.core.types import AnalysisResult

CONDITION_CANDIDATES = ["condition", "treatment", "group", "sample", "stim", "batch"]


def ensure_dir(path: str | Path) -> None:
    p = Path(path)
    p.mkdir(parents=True, exist_ok=True)


def write_json(path: str | Path, payload: dict[str, Any]) -> None:
    out = Path(path)
    out.parent.mkdir(parents=True, exist_ok=True)
    with out.open("w", encoding="utf-8") as f:
        json.dump(payload, f, indent=2, sort_keys=True, default=_json_default)


def _json_default(obj: Any) -> Any:
    if isinstance(obj, np.integer):
        return int(obj)
    if isinstance(obj, np.floating):
        return float(obj)
    if isinstance(obj, np.ndarray):
        return obj.tolist()
    if isinstance(obj, tuple):
        return list(obj)
    raise TypeError(f"Object of type {type(obj).__name__} is not JSON serializable")


def setup_logger(log_path: Path, logger_name: str) -> logging.Logger:
    ensure_dir(log_path.parent)
    logger = logging.getLogger(logger_name)
    logger.setLevel(logging.INFO)
    logger.handlers.clear()
    formatter = logging.Formatter("%(asctime)s | %(levelname)s | %(message)s")
    fh = logging.FileHandler(log_path, mode="w", encoding="utf-8")
    fh.setFormatter(formatter)
    logger.addHandler(fh)
    sh = logging.StreamHandler()
    sh.setFormatter(formatter)
    logger.addHandler(sh)
    return logger


def detect_obs_col(adata, provided: str | None, candidates: Iterable[str]) -> str:
    if provided is not None:
        if provided in adata.obs.columns:
            return str(provided)
        raise KeyError(f"adata.obs['{provided}'] not found.")
    for c in candidates:
        if c in adata.obs.columns:
            return str(c)
    raise KeyError(f"Required column not found. Tried: {', '.join(candidates)}")


def _dense(matrix: Any) -> np.ndarray:
    if sp.issparse(matrix):
        return matrix.toarray()
    return np.asarray(matrix)


def samples_from_adata(
    adata: ad.AnnData,
    condition_key: str | None = None,
    *,
    channels: Sequence[str] | None = None,
    layer: str | None = None,
) -> tuple[pd.DataFrame, np.ndarray]:
    """Extract a `(cells x channels)` frame and condition labels from AnnData."""
    key = detect_obs_col(adata, condition_key, CONDITION_CANDIDATES)
    var_names = [str(v) for v in adata.var_names]
    if channels is None:
        cols = list(range(len(var_names)))
    else:
        missing = [c for c in channels if str(c) not in var_names]
        if missing:
            raise KeyError(f"Channels not found in var_names: {', '.join(map(str, missing))}.")
        cols = [var_names.index(str(c)) for c in channels]
    if layer is None:
        matrix = adata.X
    else:
        if layer not in adata.layers:
            raise KeyError(f"adata.layers['{layer}'] not found.")
        matrix = adata.layers[layer]
    values = _dense(matrix[:, cols]).astype(float)
    frame = pd.DataFrame(values, columns=[var_names[i] for i in cols])
    labels = np.asarray(adata.obs[key]).astype(str)
    return frame, labels


def read_h5ad_samples(
    path: str | Path,
    condition_key: str | None = None,
    *,
    channels: Sequence[str] | None = None,
    layer: str | None = None,
) -> tuple[pd.DataFrame, np.ndarray]:
    h5ad = Path(path)
    if not h5ad.exists():
        raise FileNotFoundError(f"Input file '{h5ad}' not found.")
    adata = ad.read_h5ad(h5ad)
    return samples_from_adata(adata, condition_key, channels=channels, layer=layer)


def read_csv_samples(
    path: str | Path,
    condition_col: str,
    *,
    channels: Sequence[str] | None = None,
) -> tuple[pd.DataFrame, np.ndarray]:
    """Read a table with one row per cell, channel columns and a condition column."""
    csv_path = Path(path)
    if not csv_path.exists():
        raise FileNotFoundError(f"Input file '{csv_path}' not found.")
    df = pd.read_csv(csv_path)
    if condition_col not in df.columns:
        raise KeyError(f"Column '{condition_col}' not found in {csv_path}.")
    labels = df[condition_col].astype(str).to_numpy()
    if channels is None:
        frame = df.drop(columns=[condition_col]).select_dtypes(include=[np.number])
    else:
        missing = [c for c in channels if c not in df.columns]
        if missing:
            raise KeyError(f"Channels not found in {csv_path}: {', '.join(missing)}.")
        frame = df.loc[:, list(channels)]
    if frame.shape[1] == 0:
        raise DataShapeError(f"No numeric channel columns in {csv_path}.")
    return frame.astype(float), labels


def write_analysis_outputs(result: "AnalysisResult", outdir: str | Path) -> dict[str, Path]:
    """Write count, similarity and bootstrap tables plus `summary.json`."""
    root = Path(outdir)
    tables = root / "tables"
    ensure_dir(tables)

    paths = {
        "cuts": tables / "cuts.csv",
        "mi": tables / "mutual_information.csv",
        "counts": tables / "hilbert_counts.csv",
        "js": tables / "js_distance.csv",
        "complexity": tables / "complexity.csv",
        "bootstrap": tables / "bootstrap.csv",
        "regions": tables / "significant_regions.csv",
        "summary": root / "summary.json",
    }
    result.cut_set.to_frame().to_csv(paths["cuts"], index=False)
    pd.DataFrame(result.mi, index=result.channels, columns=result.channels).to_csv(paths["mi"])
    result.counts.to_csv(paths["counts"])
    result.js.to_csv(paths["js"])
    result.complexity.to_csv(paths["complexity"])
    result.bootstrap.table.to_csv(paths["bootstrap"], index=False)
    regions = result.metadata.get("significant_regions")
    if isinstance(regions, pd.DataFrame):
        regions.to_csv(paths["regions"], index=False)

    boot = result.bootstrap
    summary = {
        "config": result.config.to_dict(),
        "channels": list(result.channels),
        "reference": result.reference,
        "effective_bins": dict(zip(result.cut_set.channels, result.cut_set.effective_bins)),
        "degraded_channels": result.cut_set.degraded,
        "dim_order": [result.channels[i] for i in result.dim_order],
        "order": int(result.order),
        "n_indices": int(result.counts.shape[0]),
        "bootstrap": {
            "ncells": boot.ncells,
            "n_rep": boot.n_rep,
            "entropy": boot.entropy,
            "n_tested": int(boot.table["hilbert"].nunique()) if not boot.table.empty else 0,
            "n_excluded": len(boot.excluded),
            "n_significant": int(boot.table["significant"].sum()),
        },
        "metadata": {k: v for k, v in result.metadata.items() if not isinstance(v, pd.DataFrame)},
    }
    write_json(paths["summary"], summary)
    return paths
