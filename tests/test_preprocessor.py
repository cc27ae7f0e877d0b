import numpy as np
import pytest

from mobile_price.data import MinMaxNormalizer, normalize, split
from mobile_price.exceptions import InvalidInputError, ModelNotTrainedError


def test_normalize_maps_into_unit_interval(sample_records):
    vectors, ranges = normalize(sample_records)
    assert vectors.shape == (200, 20)
    assert vectors.min() >= 0.0
    assert vectors.max() <= 1.0
    # every non-constant column reaches both ends
    for j in range(20):
        if ranges.maximums[j] > ranges.minimums[j]:
            assert vectors[:, j].min() == 0.0
            assert vectors[:, j].max() == 1.0


def test_constant_column_maps_to_zero():
    X = np.array([[1.0, 5.0], [3.0, 5.0], [2.0, 5.0]])
    scaled = MinMaxNormalizer().fit_transform(X)
    np.testing.assert_array_equal(scaled[:, 1], [0.0, 0.0, 0.0])
    np.testing.assert_allclose(scaled[:, 0], [0.0, 1.0, 0.5])


def test_transform_before_fit_raises():
    with pytest.raises(ModelNotTrainedError):
        MinMaxNormalizer().transform(np.zeros((1, 20)))


def test_values_outside_training_range_are_not_clipped():
    normalizer = MinMaxNormalizer().fit(np.array([[0.0], [10.0]]))
    np.testing.assert_allclose(normalizer.transform(np.array([[20.0], [-5.0]]))[:, 0], [2.0, -0.5])


def test_from_ranges_reproduces_fitted_transform():
    X = np.random.default_rng(3).uniform(0, 100, size=(30, 4))
    fitted = MinMaxNormalizer().fit(X)
    rebuilt = MinMaxNormalizer.from_ranges(fitted.ranges)
    np.testing.assert_array_equal(fitted.transform(X), rebuilt.transform(X))


def test_fit_transform_uses_first_array_ranges():
    train = np.array([[0.0], [4.0]])
    test = np.array([[2.0], [8.0]])
    train_scaled, test_scaled = MinMaxNormalizer().fit_transform(train, test)
    np.testing.assert_allclose(test_scaled[:, 0], [0.5, 2.0])


def test_wrong_width_is_rejected():
    normalizer = MinMaxNormalizer().fit(np.zeros((2, 3)))
    with pytest.raises(InvalidInputError):
        normalizer.transform(np.zeros((1, 4)))


@pytest.mark.parametrize("n, fraction, expected_train", [(10, 0.2, 8), (7, 0.2, 5), (1000, 0.2, 800), (9, 0.5, 4)])
def test_split_sizes(n, fraction, expected_train):
    train, test = split(list(range(n)), fraction, random_state=0)
    assert len(train) == expected_train
    assert len(test) == n - expected_train


def test_split_is_a_permutation_of_the_input():
    items = list(range(50))
    train, test = split(items, 0.2, random_state=5)
    assert sorted(train + test) == items
    assert items == list(range(50))


def test_split_is_reproducible_with_seed():
    items = list(range(100))
    assert split(items, 0.2, random_state=42) == split(items, 0.2, random_state=42)
    assert split(items, 0.2, random_state=42) != split(items, 0.2, random_state=43)


@pytest.mark.parametrize("fraction", [0.0, 1.0, -0.1, 1.5])
def test_split_rejects_fraction_outside_open_interval(fraction):
    with pytest.raises(InvalidInputError):
        split(list(range(10)), fraction)


def test_split_rejects_empty_dataset():
    with pytest.raises(InvalidInputError):
        split([], 0.2)


def test_split_rejects_empty_partition():
    with pytest.raises(InvalidInputError):
        split([1], 0.2)
