import warnings

import numpy as np
import pandas as pd
import pytest

from hilbertsim.core.binning import cut_values, do_cut, make_cuts
from hilbertsim.core.errors import ConfigurationError, DataShapeError, DegenerateBinningWarning


def _lognormal(n: int, d: int, seed: int) -> np.ndarray:
    rng = np.random.default_rng(seed)
    return rng.lognormal(mean=1.0, sigma=0.6, size=(n, d))


def test_cuts_strictly_increasing_and_bins_in_range():
    mat = _lognormal(1000, 4, seed=0)
    with warnings.catch_warnings():
        warnings.simplefilter("error", DegenerateBinningWarning)
        cut_set = make_cuts(mat, n_bins=5, count_lim=40)
    binned = do_cut(mat, cut_set)
    assert binned.shape == mat.shape
    assert binned.dtype == np.int64
    for d, cuts in enumerate(cut_set.cuts):
        assert np.all(np.diff(cuts) > 0)
        eff = int(cut_set.effective_bins[d])
        assert eff == 5
        assert binned[:, d].min() >= 0
        assert binned[:, d].max() < eff
        counts = np.bincount(binned[:, d], minlength=eff)
        assert np.all(counts >= 40)
    assert cut_set.degraded == []


def test_constant_column_degenerates_to_single_bin():
    mat = _lognormal(300, 2, seed=1)
    mat[:, 1] = 3.5
    with pytest.warns(DegenerateBinningWarning, match="dim1=1"):
        cut_set = make_cuts(mat, n_bins=5, count_lim=10)
    binned = do_cut(mat, cut_set)
    assert cut_set.cuts[1].size == 0
    assert np.all(binned[:, 1] == 0)
    assert cut_set.degraded == ["dim1"]
    assert int(cut_set.effective_bins[0]) == 5


def test_sparse_bins_are_merged_into_neighbours():
    values = np.arange(100, dtype=float)
    cuts = cut_values(values, n_bins=4, count_lim=30)
    assert cuts.size == 1
    counts = np.bincount(np.searchsorted(cuts, values, side="right"))
    assert np.all(counts >= 30)
    assert counts.sum() == 100


def test_count_lim_zero_keeps_all_quantile_bins():
    values = np.arange(100, dtype=float)
    cuts = cut_values(values, n_bins=4, count_lim=0)
    assert cuts.size == 3


def test_mostly_zero_dimension_degrades_gracefully():
    rng = np.random.default_rng(2)
    col = np.zeros(1000)
    col[:60] = rng.uniform(1.0, 10.0, size=60)
    mat = np.column_stack([col, rng.uniform(size=1000)])
    with pytest.warns(DegenerateBinningWarning):
        cut_set = make_cuts(mat, n_bins=5, count_lim=40)
    eff = int(cut_set.effective_bins[0])
    assert 1 <= eff < 5
    binned = do_cut(mat, cut_set)
    assert np.all(np.bincount(binned[:, 0]) >= 40)


def test_negative_values_are_clamped_to_zero():
    rng = np.random.default_rng(3)
    mat = rng.normal(0.0, 1.0, size=(500, 2))
    cut_set = make_cuts(mat, n_bins=4, count_lim=20)
    clamped = np.maximum(mat, 0.0)
    np.testing.assert_array_equal(do_cut(mat, cut_set), do_cut(clamped, cut_set))
    assert all(c.min() > 0.0 for c in cut_set.cuts if c.size)


def test_non_finite_values_rejected():
    mat = _lognormal(50, 2, seed=4)
    mat[3, 1] = np.nan
    with pytest.raises(DataShapeError, match="NaN"):
        make_cuts(mat)
    mat[3, 1] = np.inf
    with pytest.raises(DataShapeError):
        make_cuts(mat)


def test_combined_mode_shares_cuts_within_group():
    mat = _lognormal(800, 3, seed=5)
    mat[:, 1] *= 3.0
    df = pd.DataFrame(mat, columns=["CD3", "CD4", "CD8"])
    cut_set = make_cuts(df, n_bins=4, count_lim=20, mode="combined", groups=[["CD3", "CD4"]])
    np.testing.assert_array_equal(cut_set.cuts[0], cut_set.cuts[1])
    assert not np.array_equal(cut_set.cuts[0], cut_set.cuts[2])
    assert cut_set.groups == ((0, 1),)
    assert cut_set.channels == ("CD3", "CD4", "CD8")

    pooled = make_cuts(df, n_bins=4, count_lim=20, mode="combined")
    assert pooled.groups == ((0, 1, 2),)
    assert all(np.array_equal(pooled.cuts[0], c) for c in pooled.cuts)


def test_group_validation():
    mat = _lognormal(200, 3, seed=6)
    with pytest.raises(ConfigurationError, match="more than one group"):
        make_cuts(mat, mode="combined", groups=[[0, 1], [1, 2]])
    with pytest.raises(ConfigurationError, match="Unknown channel"):
        make_cuts(mat, mode="combined", groups=[["nope"]])
    with pytest.raises(ConfigurationError, match="combined"):
        make_cuts(mat, mode="independent", groups=[[0, 1]])
    with pytest.raises(ConfigurationError):
        make_cuts(mat, mode="quantile")


def test_do_cut_selects_columns_by_name():
    mat = _lognormal(400, 3, seed=7)
    df = pd.DataFrame(mat, columns=["a", "b", "c"])
    cut_set = make_cuts(df, n_bins=3, count_lim=10)
    shuffled = df.loc[:, ["c", "a", "b"]]
    np.testing.assert_array_equal(do_cut(shuffled, cut_set), do_cut(df, cut_set))
    with pytest.raises(DataShapeError, match="missing channels"):
        do_cut(df.loc[:, ["a", "b"]], cut_set)


def test_cut_set_frame_reports_effective_bins():
    mat = _lognormal(300, 2, seed=8)
    mat[:, 0] = 1.0
    with pytest.warns(DegenerateBinningWarning):
        cut_set = make_cuts(mat, n_bins=4, count_lim=10)
    frame = cut_set.to_frame()
    assert list(frame["channel"]) == ["dim0", "dim1"]
    assert list(frame["effective_bins"]) == [1, 4]
    assert list(frame["requested_bins"]) == [4, 4]


def test_count_lim_zero_never_leaves_empty_bins():
    values = np.concatenate([np.zeros(50), np.full(50, 10.0)])
    cuts = cut_values(values, n_bins=4, count_lim=0)
    np.testing.assert_array_equal(cuts, [10.0])
    counts = np.bincount(np.searchsorted(cuts, values, side="right"))
    assert np.all(counts > 0)
