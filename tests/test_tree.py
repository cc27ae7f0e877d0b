import numpy as np
import pytest

from mobile_price.exceptions import InvalidInputError, ModelNotTrainedError
from mobile_price.models import DecisionTreeClassifier, calculate_gini, find_best_split
from mobile_price.models.tree import LEAF


@pytest.mark.parametrize("labels, expected", [
    ([], 0.0),
    ([2, 2, 2], 0.0),
    ([0, 1, 2, 3], 0.75),
    ([0, 0, 1, 1], 0.5),
])
def test_gini(labels, expected):
    assert calculate_gini(labels) == pytest.approx(expected)


def test_find_best_split_separates_classes():
    X = np.array([[1.0, 9.0], [2.0, 1.0], [3.0, 8.0], [4.0, 2.0]])
    y = np.array([0, 0, 1, 1])
    split = find_best_split(X, y)
    assert split.feature == 0
    assert split.threshold == pytest.approx(2.5)
    assert split.impurity == pytest.approx(0.0)


def test_find_best_split_ties_keep_lowest_feature():
    X = np.array([[0.0, 0.0], [1.0, 1.0]])
    y = np.array([0, 1])
    assert find_best_split(X, y).feature == 0


def test_find_best_split_on_constant_features():
    assert find_best_split(np.ones((4, 3)), np.array([0, 1, 2, 3])) is None


def test_depth_zero_tree_predicts_training_majority():
    X = np.random.default_rng(1).random((6, 4))
    y = np.array([0, 1, 1, 1, 2, 3])
    tree = DecisionTreeClassifier({"max_depth": 0}).fit(X, y)
    assert tree.node_count == 1
    np.testing.assert_array_equal(tree.predict(X), np.ones(6, dtype=int))


def test_majority_ties_go_to_lowest_class():
    X = np.zeros((4, 2))
    y = np.array([3, 1, 3, 1])
    tree = DecisionTreeClassifier().fit(X, y)
    assert tree.predict(np.zeros(2))[0] == 1


def test_fits_separable_data_perfectly(separable_data):
    X, y = separable_data
    tree = DecisionTreeClassifier().fit(X, y)
    np.testing.assert_array_equal(tree.predict(X), y)
    assert tree.get_depth() == 1
    assert tree.feature_importances_[0] == pytest.approx(1.0)


def test_arena_structure(separable_data):
    X, y = separable_data
    tree = DecisionTreeClassifier().fit(X, y)
    assert tree.feature_[0] != LEAF
    left, right = tree.children_left_[0], tree.children_right_[0]
    assert tree.feature_[left] == LEAF and tree.feature_[right] == LEAF
    assert tree.n_leaves == 2
    np.testing.assert_array_equal(tree.value_[0], [20, 0, 20, 0])


def test_min_samples_split_stops_growth():
    X = np.arange(4, dtype=float).reshape(-1, 1)
    y = np.array([0, 1, 2, 3])
    tree = DecisionTreeClassifier({"min_samples_split": 5}).fit(X, y)
    assert tree.node_count == 1


def test_predict_proba_uses_leaf_frequencies():
    X = np.zeros((4, 1))
    y = np.array([0, 0, 0, 2])
    proba = DecisionTreeClassifier().fit(X, y).predict_proba(np.zeros((1, 1)))
    np.testing.assert_allclose(proba[0], [0.75, 0.0, 0.25, 0.0])


def test_batch_prediction_matches_single_rows(sample_records):
    from mobile_price.data import normalize
    X, _ = normalize(sample_records)
    y = np.array([r.price_range for r in sample_records])
    tree = DecisionTreeClassifier().fit(X, y)
    batch = tree.predict(X)
    singles = np.array([tree.predict(row)[0] for row in X])
    np.testing.assert_array_equal(batch, singles)


def test_predict_before_fit_raises():
    with pytest.raises(ModelNotTrainedError):
        DecisionTreeClassifier().predict(np.zeros((1, 20)))


def test_invalid_training_data():
    tree = DecisionTreeClassifier()
    with pytest.raises(InvalidInputError):
        tree.fit(np.zeros((0, 3)), np.zeros(0))
    with pytest.raises(InvalidInputError):
        tree.fit(np.zeros((2, 3)), np.array([0, 5]))
    with pytest.raises(InvalidInputError):
        tree.fit(np.zeros((2, 3)), np.array([0]))


def test_wrong_feature_width_at_predict(separable_data):
    X, y = separable_data
    tree = DecisionTreeClassifier().fit(X, y)
    with pytest.raises(InvalidInputError):
        tree.predict(np.zeros((1, 5)))
