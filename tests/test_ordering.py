import numpy as np
import pytest

from hilbertsim.core.errors import DataShapeError
from hilbertsim.core.ordering import (
    dimension_order,
    joint_entropy,
    mutual_information_matrix,
    normalized_mi,
)


def test_normalized_mi_convention():
    rng = np.random.default_rng(0)
    a = rng.integers(0, 5, size=5000)
    b = rng.integers(0, 5, size=5000)
    assert np.isclose(normalized_mi(a, a), 0.0, atol=1e-12)
    assert normalized_mi(a, (a + 1) % 5) < 1e-12
    assert normalized_mi(a, b) > 0.95


def test_zero_joint_entropy_is_maximal_dissimilarity():
    const = np.zeros(100, dtype=np.int64)
    assert joint_entropy(const, const) == 0.0
    assert normalized_mi(const, const) == 1.0


def test_one_constant_dimension_is_independent():
    rng = np.random.default_rng(1)
    a = rng.integers(0, 4, size=400)
    const = np.full(400, 2, dtype=np.int64)
    assert np.isclose(normalized_mi(a, const), 1.0)


def test_mi_matrix_symmetric_without_nan():
    rng = np.random.default_rng(2)
    binned = rng.integers(0, 4, size=(600, 5))
    binned[:, 1] = binned[:, 0]
    binned[:, 3] = 0
    binned[:, 4] = 0
    mi = mutual_information_matrix(binned)
    assert mi.shape == (5, 5)
    assert np.all(np.isfinite(mi))
    np.testing.assert_allclose(mi, mi.T)
    np.testing.assert_allclose(np.diag(mi), 0.0)
    assert np.all((mi >= 0.0) & (mi <= 1.0))
    assert mi[0, 1] < 1e-12
    assert mi[3, 4] == 1.0


def test_mi_matrix_rejects_non_integer_input():
    with pytest.raises(DataShapeError):
        mutual_information_matrix(np.ones((10, 2)) * 0.5)
    with pytest.raises(DataShapeError):
        mutual_information_matrix(np.array([[0, -1], [1, 2]]))


def test_dimension_order_keeps_dependent_pairs_adjacent():
    rng = np.random.default_rng(3)
    a = rng.integers(0, 5, size=2000)
    c = rng.integers(0, 5, size=2000)
    binned = np.column_stack([a, c, a, c, rng.integers(0, 5, size=2000)])
    mi = mutual_information_matrix(binned)
    order = dimension_order(mi)
    assert sorted(order.tolist()) == [0, 1, 2, 3, 4]
    pos = {int(d): i for i, d in enumerate(order)}
    assert abs(pos[0] - pos[2]) == 1
    assert abs(pos[1] - pos[3]) == 1
    np.testing.assert_array_equal(order, dimension_order(mi))


def test_dimension_order_small_inputs_and_validation():
    np.testing.assert_array_equal(dimension_order(np.zeros((1, 1))), [0])
    np.testing.assert_array_equal(dimension_order(np.array([[0.0, 0.3], [0.3, 0.0]])), [0, 1])
    with pytest.raises(DataShapeError):
        dimension_order(np.zeros((2, 3)))
    with pytest.raises(DataShapeError):
        dimension_order(np.array([[0.0, np.nan], [np.nan, 0.0]]))
    with pytest.raises(ValueError, match="linkage"):
        dimension_order(np.zeros((3, 3)), method="ward")
