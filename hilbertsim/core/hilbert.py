"""N-dimensional Hilbert curve index (Skilling's transpose algorithm).

Coordinates are integers in `[0, 2**order)` per dimension. The index of a
point is the MSB-first interleave of Skilling's "transposed" Hilbert
integer, giving a bijection onto `[0, 2**(order * n_dims))`.

Arithmetic is exact: arrays are `int64` while `order * n_dims <= 63` and
Python-int `object` arrays beyond that.

Reference: J. Skilling, "Programming the Hilbert curve", AIP Conf. Proc. 707
(2004).
"""

from __future__ import annotations

from typing import Any, Sequence

import numpy as np

from hilbertsim.core.errors import ConfigurationError, DataShapeError

INT64_INDEX_BITS = 63


def minimum_order(max_bins: int) -> int:
    """Smallest order whose address space holds `max_bins` bins per dimension."""
    n = int(max_bins)
    if n < 1:
        raise ConfigurationError("max_bins must be >= 1.")
    return max(1, (n - 1).bit_length())


def _work_dtype(order: int, n_dims: int) -> Any:
    return np.int64 if int(order) * int(n_dims) <= INT64_INDEX_BITS else object


def _axes_to_transpose(x: np.ndarray, order: int) -> None:
    """In-place: coordinates `(n_points, n_dims)` -> transposed Hilbert integer."""
    n_dims = x.shape[1]
    m = 1 << (order - 1)

    # Inverse undo: one rotation/reflection state per bit-plane, MSB first.
    q = m
    while q > 1:
        p = q - 1
        for i in range(n_dims):
            hit = ((x[:, i] & q) != 0).astype(bool)
            x[hit, 0] ^= p
            t = (x[:, 0] ^ x[:, i]) & p
            t[hit] = 0
            x[:, 0] ^= t
            x[:, i] ^= t
        q >>= 1

    # Gray encode.
    for i in range(1, n_dims):
        x[:, i] ^= x[:, i - 1]
    t = np.zeros(x.shape[0], dtype=x.dtype)
    q = m
    while q > 1:
        hit = ((x[:, n_dims - 1] & q) != 0).astype(bool)
        t[hit] ^= q - 1
        q >>= 1
    for i in range(n_dims):
        x[:, i] ^= t


def _transpose_to_axes(x: np.ndarray, order: int) -> None:
    """In-place inverse of `_axes_to_transpose`."""
    n_dims = x.shape[1]
    n_lim = 2 << (order - 1)

    # Gray decode.
    t = x[:, n_dims - 1] >> 1
    for i in range(n_dims - 1, 0, -1):
        x[:, i] ^= x[:, i - 1]
    x[:, 0] ^= t

    # Undo excess work, LSB plane first.
    q = 2
    while q != n_lim:
        p = q - 1
        for i in range(n_dims - 1, -1, -1):
            hit = ((x[:, i] & q) != 0).astype(bool)
            x[hit, 0] ^= p
            t = (x[:, 0] ^ x[:, i]) & p
            t[hit] = 0
            x[:, 0] ^= t
            x[:, i] ^= t
        q <<= 1


def _interleave(x: np.ndarray, order: int) -> np.ndarray:
    h = np.zeros(x.shape[0], dtype=x.dtype)
    for b in range(order - 1, -1, -1):
        for i in range(x.shape[1]):
            h = (h << 1) | ((x[:, i] >> b) & 1)
    return h


def _deinterleave(h: np.ndarray, order: int, n_dims: int) -> np.ndarray:
    x = np.zeros((h.shape[0], n_dims), dtype=h.dtype)
    pos = order * n_dims - 1
    for b in range(order - 1, -1, -1):
        for i in range(n_dims):
            x[:, i] |= ((h >> pos) & 1) << b
            pos -= 1
    return x


class HilbertCurve:
    """Hilbert curve over `n_dims` dimensions with `order` bits per dimension."""

    def __init__(self, n_dims: int, order: int):
        if int(n_dims) < 1:
            raise ConfigurationError("n_dims must be >= 1.")
        if int(order) < 1:
            raise ConfigurationError("order must be >= 1.")
        self.n_dims = int(n_dims)
        self.order = int(order)
        self.dtype = _work_dtype(self.order, self.n_dims)

    @property
    def side(self) -> int:
        return 1 << self.order

    @property
    def size(self) -> int:
        return 1 << (self.order * self.n_dims)

    def __repr__(self) -> str:
        return f"HilbertCurve(n_dims={self.n_dims}, order={self.order})"

    def _as_coords(self, coords: Any) -> np.ndarray:
        arr = np.asarray(coords)
        if arr.ndim == 1:
            arr = arr.reshape(1, -1)
        if arr.ndim != 2 or arr.shape[1] != self.n_dims:
            raise DataShapeError(
                f"Expected coordinates with {self.n_dims} dimensions; got shape {arr.shape}."
            )
        if arr.dtype.kind not in "iuO":
            raise DataShapeError("Hilbert coordinates must be integers.")
        if arr.size:
            lo = int(arr.min())
            hi = int(arr.max())
            if lo < 0 or hi >= self.side:
                raise DataShapeError(
                    f"Coordinates must lie in [0, {self.side}) for order {self.order}; "
                    f"got range [{lo}, {hi}]."
                )
        return arr.astype(self.dtype)

    def _as_indices(self, indices: Any) -> np.ndarray:
        arr = np.asarray(indices).ravel()
        if arr.dtype.kind not in "iuO":
            raise DataShapeError("Hilbert indices must be integers.")
        if arr.size:
            lo = int(arr.min())
            hi = int(arr.max())
            if lo < 0 or hi >= self.size:
                raise DataShapeError(
                    f"Hilbert indices must lie in [0, 2**{self.order * self.n_dims}); "
                    f"got range [{lo}, {hi}]."
                )
        return arr.astype(self.dtype)

    def encode_many(self, coords: Any) -> np.ndarray:
        """Encode `(n_points, n_dims)` coordinates to a vector of indices."""
        x = self._as_coords(coords).copy()
        if x.shape[0] == 0:
            return np.zeros(0, dtype=self.dtype)
        _axes_to_transpose(x, self.order)
        return _interleave(x, self.order)

    def decode_many(self, indices: Any) -> np.ndarray:
        """Decode a vector of indices to `(n_points, n_dims)` coordinates."""
        h = self._as_indices(indices)
        x = _deinterleave(h, self.order, self.n_dims)
        if x.shape[0]:
            _transpose_to_axes(x, self.order)
        return x

    def encode(self, coords: Sequence[int]) -> int:
        arr = np.asarray(coords)
        if arr.ndim != 1:
            raise DataShapeError("encode expects a single coordinate tuple.")
        return int(self.encode_many(arr)[0])

    def decode(self, index: int) -> tuple[int, ...]:
        return tuple(int(v) for v in self.decode_many([int(index)])[0])


def encode(coords: Sequence[int], order: int) -> int:
    return HilbertCurve(len(coords), order).encode(coords)


def decode(index: int, order: int, n_dims: int) -> tuple[int, ...]:
    return HilbertCurve(n_dims, order).decode(index)


def _resolve_dim_order(dim_order: Any, n_dims: int) -> np.ndarray:
    if dim_order is None:
        return np.arange(n_dims, dtype=int)
    perm = np.asarray(dim_order, dtype=int).ravel()
    if perm.size != n_dims or not np.array_equal(np.sort(perm), np.arange(n_dims)):
        raise ConfigurationError(f"dim_order must be a permutation of range({n_dims}).")
    return perm


def do_hilbert(
    binned: np.ndarray,
    order: int | None = None,
    dim_order: Sequence[int] | np.ndarray | None = None,
) -> np.ndarray:
    """Hilbert index of every row of a binned matrix.

    Columns are interleaved in `dim_order`. With `order=None` the smallest
    order holding the largest bin index is used.
    """
    arr = np.asarray(binned)
    if arr.ndim != 2 or arr.shape[1] == 0:
        raise DataShapeError(f"binned must be 2D (n_points, n_dims); got shape {arr.shape}.")
    n_dims = arr.shape[1]
    perm = _resolve_dim_order(dim_order, n_dims)
    max_bin = int(arr.max()) if arr.size else 0
    needed = minimum_order(max_bin + 1)
    if order is None:
        order = needed
    elif int(order) < needed:
        raise ConfigurationError(
            f"Hilbert order {int(order)} is too small for bin index {max_bin}; "
            f"need at least {needed}."
        )
    curve = HilbertCurve(n_dims, int(order))
    return curve.encode_many(arr[:, perm])


def hilbert_to_bins(
    indices: Any,
    order: int,
    n_dims: int,
    dim_order: Sequence[int] | np.ndarray | None = None,
) -> np.ndarray:
    """Decode indices back to bins, columns in the original dimension order."""
    perm = _resolve_dim_order(dim_order, int(n_dims))
    decoded = HilbertCurve(int(n_dims), int(order)).decode_many(indices)
    out = np.empty_like(decoded)
    out[:, perm] = decoded
    return out if out.dtype == object else out.astype(np.int64)
