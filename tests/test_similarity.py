import numpy as np
import pandas as pd
import pytest

from hilbertsim.core.errors import ConfigurationError, DataShapeError
from hilbertsim.core.similarity import (
    complexity_summary,
    hilbert_counts,
    hilbert_proportions,
    js_dist,
    js_divergence,
)


def _toy_counts() -> pd.DataFrame:
    hilbert = np.array([5, 5, 2, 9, 2, 5, 7, 7, 7, 2])
    labels = np.array(["B", "A", "A", "A", "B", "A", "C", "C", "B", "A"])
    return hilbert_counts(hilbert, labels, reference="B")


def test_hilbert_counts_layout():
    counts = _toy_counts()
    assert list(counts.columns) == ["B", "A", "C"]
    assert list(counts.index) == [2, 5, 7, 9]
    assert counts.loc[5, "A"] == 2
    assert counts.loc[9, "C"] == 0
    assert counts.to_numpy().sum() == 10
    assert counts.sum(axis=0).to_dict() == {"B": 3, "A": 5, "C": 2}


def test_hilbert_counts_default_reference_is_first_label():
    counts = hilbert_counts([1, 2, 3], ["y", "x", "y"])
    assert list(counts.columns) == ["x", "y"]


def test_hilbert_counts_validation():
    with pytest.raises(ConfigurationError, match="two condition"):
        hilbert_counts([1, 2], ["A", "A"])
    with pytest.raises(ConfigurationError, match="Reference"):
        hilbert_counts([1, 2], ["A", "B"], reference="ctrl")
    with pytest.raises(DataShapeError, match="same length"):
        hilbert_counts([1, 2, 3], ["A", "B"])


def test_proportions_sum_to_one_and_input_unchanged():
    counts = _toy_counts()
    before = counts.copy()
    props = hilbert_proportions(counts)
    np.testing.assert_allclose(props.sum(axis=0).to_numpy(), 1.0)
    pd.testing.assert_frame_equal(counts, before)


def test_js_divergence_bounds_and_missing_mass():
    p = np.array([0.5, 0.5, 0.0])
    assert np.isclose(js_divergence(p, p), 0.0, atol=1e-12)
    assert np.isclose(js_divergence([1.0, 0.0], [0.0, 1.0]), 1.0)
    q = np.array([0.0, 0.5, 0.5])
    v = js_divergence(p, q)
    assert 0.0 < v < 1.0
    assert np.isclose(v, js_divergence(q, p))
    with pytest.raises(DataShapeError):
        js_divergence([0.5, 0.5], [1.0])


def test_js_dist_matrix():
    counts = _toy_counts()
    before = counts.copy()
    dist = js_dist(counts)
    div = js_dist(counts, metric="divergence")
    assert list(dist.index) == ["B", "A", "C"]
    np.testing.assert_allclose(dist.to_numpy(), dist.to_numpy().T)
    np.testing.assert_allclose(np.diag(dist.to_numpy()), 0.0)
    np.testing.assert_allclose(dist.to_numpy() ** 2, div.to_numpy(), atol=1e-12)
    assert ((dist.to_numpy() >= 0.0) & (dist.to_numpy() <= 1.0)).all()
    pd.testing.assert_frame_equal(counts, before)
    with pytest.raises(ConfigurationError):
        js_dist(counts, metric="kl")


def test_js_dist_identical_distributions_is_zero():
    counts = pd.DataFrame({"A": [10, 20, 30], "B": [20, 40, 60]}, index=[0, 3, 8])
    dist = js_dist(counts)
    assert np.isclose(dist.loc["A", "B"], 0.0, atol=1e-7)


def test_complexity_summary():
    counts = pd.DataFrame({"A": [5, 5, 5, 5], "B": [20, 0, 0, 0]}, index=[0, 1, 2, 3])
    summary = complexity_summary(counts)
    assert summary.loc["A", "n_indices"] == 4
    assert np.isclose(summary.loc["A", "entropy"], 2.0)
    assert np.isclose(summary.loc["A", "normalized_entropy"], 1.0)
    assert summary.loc["B", "n_indices"] == 1
    assert summary.loc["B", "entropy"] == 0.0
    assert summary.loc["B", "normalized_entropy"] == 0.0
    assert summary.loc["B", "n_points"] == 20
