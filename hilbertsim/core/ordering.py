"""Mutual-information dissimilarity between binned dimensions and curve ordering."""

from __future__ import annotations

import numpy as np
from scipy.cluster.hierarchy import leaves_list, linkage
from scipy.spatial.distance import squareform
from scipy.stats import entropy
from sklearn.metrics import mutual_info_score

from hilbertsim.core.errors import DataShapeError

LINKAGE_METHODS: tuple[str, ...] = ("average", "complete", "single", "weighted")


def _validate_binned(binned: np.ndarray) -> np.ndarray:
    arr = np.asarray(binned)
    if arr.ndim != 2 or arr.shape[0] == 0 or arr.shape[1] == 0:
        raise DataShapeError(f"binned must be a non-empty 2D array; got shape {arr.shape}.")
    if not np.issubdtype(arr.dtype, np.integer):
        raise DataShapeError("binned must hold integer bin indices.")
    if np.any(arr < 0):
        raise DataShapeError("binned contains negative bin indices.")
    return arr.astype(np.int64, copy=False)


def joint_entropy(a: np.ndarray, b: np.ndarray) -> float:
    """Entropy (nats) of the joint empirical distribution of two bin vectors."""
    x = np.asarray(a, dtype=np.int64).ravel()
    y = np.asarray(b, dtype=np.int64).ravel()
    width = int(y.max()) + 1 if y.size else 1
    _, counts = np.unique(x * width + y, return_counts=True)
    return float(entropy(counts))


def normalized_mi(a: np.ndarray, b: np.ndarray) -> float:
    """`1 - MI(a, b) / H(a, b)`: 0 when fully dependent, 1 when independent.

    A zero joint entropy (both vectors constant) has no information to share
    and is scored 1.0.
    """
    h_joint = joint_entropy(a, b)
    if h_joint <= 0.0:
        return 1.0
    mi = float(mutual_info_score(a, b))
    return float(np.clip(1.0 - mi / h_joint, 0.0, 1.0))


def mutual_information_matrix(binned: np.ndarray) -> np.ndarray:
    """Symmetric `D x D` matrix of `normalized_mi` over all dimension pairs.

    The diagonal is set to 0.
    """
    arr = _validate_binned(binned)
    n_dims = arr.shape[1]
    out = np.zeros((n_dims, n_dims), dtype=float)
    for i in range(n_dims):
        for j in range(i + 1, n_dims):
            v = normalized_mi(arr[:, i], arr[:, j])
            out[i, j] = v
            out[j, i] = v
    return out


def dimension_order(mi: np.ndarray, method: str = "average") -> np.ndarray:
    """Order dimensions by the leaves of a hierarchical clustering of `mi`.

    Dependent dimensions end up adjacent, so they are interleaved next to each
    other on the curve.
    """
    mat = np.asarray(mi, dtype=float)
    if mat.ndim != 2 or mat.shape[0] != mat.shape[1]:
        raise DataShapeError(f"mi must be a square matrix; got shape {mat.shape}.")
    if not np.isfinite(mat).all():
        raise DataShapeError("mi contains NaN/inf values.")
    if method not in LINKAGE_METHODS:
        raise ValueError(f"Unsupported linkage method '{method}'.")
    n_dims = mat.shape[0]
    if n_dims < 3:
        return np.arange(n_dims, dtype=int)
    sym = (mat + mat.T) / 2.0
    np.fill_diagonal(sym, 0.0)
    z = linkage(squareform(sym, checks=False), method=method)
    return np.asarray(leaves_list(z), dtype=int)
