import numpy as np
import pytest

from mobile_price.data import records_to_arrays
from mobile_price.exceptions import InvalidInputError
from mobile_price.training import cross_validate


@pytest.fixture
def raw_arrays(sample_records):
    return records_to_arrays(sample_records)


def test_one_score_per_fold(raw_arrays):
    X, y = raw_arrays
    folds_seen = []
    scores = cross_validate("decisionTree", {"max_depth": 4}, X, y, n_folds=5, random_state=0,
                            on_fold=lambda done, total: folds_seen.append((done, total)))
    assert len(scores) == 5
    assert all(0.0 <= s <= 1.0 for s in scores)
    assert folds_seen == [(i, 5) for i in range(1, 6)]


def test_scores_are_reproducible_with_seed(raw_arrays):
    X, y = raw_arrays
    config = {"n_estimators": 2, "random_state": 3}
    first = cross_validate("randomForest", config, X, y, n_folds=3, random_state=1)
    second = cross_validate("randomForest", config, X, y, n_folds=3, random_state=1)
    assert first == second


def test_generated_data_is_learnable_across_folds(raw_arrays):
    X, y = raw_arrays
    scores = cross_validate("decisionTree", {}, X, y, n_folds=4, random_state=2)
    assert np.mean(scores) > 0.4


@pytest.mark.parametrize("n_folds", [1, 0, 201])
def test_invalid_fold_count(raw_arrays, n_folds):
    X, y = raw_arrays
    with pytest.raises(InvalidInputError):
        cross_validate("decisionTree", {}, X, y, n_folds=n_folds)
