import numpy as np
import pytest

from mobile_price.exceptions import InvalidInputError, ModelNotTrainedError
from mobile_price.models import RandomForestClassifier


class FixedVoteTree:
    """Stands in for a fitted tree that always predicts one label."""

    def __init__(self, label):
        self.label = label

    def predict(self, X):
        return np.full(np.atleast_2d(X).shape[0], self.label, dtype=int)


def forest_with_votes(*labels):
    forest = RandomForestClassifier()
    forest.estimators_ = [FixedVoteTree(label) for label in labels]
    forest.fitted = True
    forest.n_features_ = 2
    return forest


def test_majority_vote():
    forest = forest_with_votes(1, 1, 2)
    assert forest.predict(np.zeros((1, 2)))[0] == 1


def test_vote_ties_go_to_lowest_class():
    forest = forest_with_votes(3, 0, 3, 0)
    assert forest.predict(np.zeros((1, 2)))[0] == 0


def test_predict_proba_is_vote_fraction():
    forest = forest_with_votes(1, 1, 2, 3)
    np.testing.assert_allclose(forest.predict_proba(np.zeros((2, 2))), [[0, 0.5, 0.25, 0.25]] * 2)


def test_fit_builds_configured_number_of_trees(separable_data):
    X, y = separable_data
    forest = RandomForestClassifier({"n_estimators": 4, "random_state": 0}).fit(X, y)
    assert len(forest.estimators_) == 4
    assert all(tree.max_depth == 8 and tree.min_samples_split == 3 for tree in forest.estimators_)
    assert (forest.predict(X) == y).mean() >= 0.95


def test_same_seed_gives_same_forest(sample_records):
    from mobile_price.data import normalize
    X, _ = normalize(sample_records)
    y = np.array([r.price_range for r in sample_records])
    config = {"n_estimators": 3, "random_state": 123}
    first = RandomForestClassifier(config).fit(X, y)
    second = RandomForestClassifier(config).fit(X, y)
    np.testing.assert_array_equal(first.predict_proba(X), second.predict_proba(X))
    for a, b in zip(first.estimators_, second.estimators_):
        np.testing.assert_array_equal(a.threshold_, b.threshold_)


def test_feature_importances_average_trees(separable_data):
    X, y = separable_data
    forest = RandomForestClassifier({"n_estimators": 3, "random_state": 1}).fit(X, y)
    expected = np.mean([t.feature_importances_ for t in forest.estimators_], axis=0)
    np.testing.assert_allclose(forest.feature_importances_, expected)


def test_predict_before_fit_raises():
    with pytest.raises(ModelNotTrainedError):
        RandomForestClassifier().predict(np.zeros((1, 20)))


@pytest.mark.parametrize("config", [{"n_estimators": 0}, {"sample_fraction": 0.0}, {"sample_fraction": 1.5}])
def test_invalid_configuration(config):
    with pytest.raises(InvalidInputError):
        RandomForestClassifier(config)
