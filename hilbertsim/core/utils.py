"""Small pure helpers for validating sample matrices and labels."""

from __future__ import annotations

from typing import Any, Sequence

import numpy as np
import pandas as pd

from hilbertsim.core.errors import ConfigurationError, DataShapeError


def default_channels(n_dims: int) -> tuple[str, ...]:
    return tuple(f"dim{i}" for i in range(int(n_dims)))


def as_sample_matrix(
    samples: Any,
    channels: Sequence[str] | None = None,
) -> tuple[np.ndarray, tuple[str, ...]]:
    """Return a clamped float matrix `(n_points, D)` and its channel names.

    Negative intensities are clamped to zero; anything non-finite left after
    the clamp is rejected.
    """
    if isinstance(samples, pd.DataFrame):
        names = tuple(str(c) for c in samples.columns)
        arr = samples.to_numpy(dtype=float)
    else:
        arr = np.asarray(samples, dtype=float)
        names = None
    if arr.ndim != 2:
        raise DataShapeError(f"samples must be 2D (n_points, n_dims); got shape {arr.shape}.")
    if arr.shape[0] == 0 or arr.shape[1] == 0:
        raise DataShapeError("samples must contain at least one point and one dimension.")

    if channels is not None:
        names = tuple(str(c) for c in channels)
    if names is None:
        names = default_channels(arr.shape[1])
    if len(names) != arr.shape[1]:
        raise DataShapeError(
            f"Got {len(names)} channel names for {arr.shape[1]} dimensions."
        )
    if len(set(names)) != len(names):
        raise DataShapeError("Channel names must be unique.")

    out = np.maximum(arr, 0.0)
    if not np.isfinite(out).all():
        raise DataShapeError("samples contain NaN/inf values.")
    return out, names


def as_labels(labels: Any, n_points: int) -> np.ndarray:
    arr = np.asarray(labels).ravel()
    if arr.size != int(n_points):
        raise DataShapeError(
            f"labels length ({arr.size}) does not match number of points ({n_points})."
        )
    return arr.astype(str)


def resolve_reference(labels: np.ndarray, reference: str | None) -> tuple[str, list[str]]:
    """Return the reference label and the remaining labels (sorted)."""
    uniq = sorted({str(v) for v in np.asarray(labels).ravel()})
    if len(uniq) < 2:
        raise ConfigurationError("At least two condition labels are required.")
    if reference is None:
        ref = uniq[0]
    else:
        ref = str(reference)
        if ref not in uniq:
            raise ConfigurationError(
                f"Reference label '{ref}' not found among conditions: {', '.join(uniq)}."
            )
    return ref, [u for u in uniq if u != ref]


def channel_positions(channels: Sequence[str], names: Sequence[Any]) -> tuple[int, ...]:
    """Map channel names (or integer positions) to positions in `channels`."""
    lookup = {ch: i for i, ch in enumerate(channels)}
    out: list[int] = []
    for name in names:
        if isinstance(name, (int, np.integer)) and not isinstance(name, bool):
            pos = int(name)
            if pos < 0 or pos >= len(channels):
                raise ConfigurationError(f"Dimension position {pos} out of range.")
        else:
            key = str(name)
            if key not in lookup:
                raise ConfigurationError(f"Unknown channel '{key}' in dimension group.")
            pos = lookup[key]
        out.append(pos)
    return tuple(out)
