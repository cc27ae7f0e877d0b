import numpy as np
import pytest

from mobile_price.data import normalize
from mobile_price.exceptions import InvalidInputError, ModelNotTrainedError
from mobile_price.models import LinearSVMClassifier


@pytest.fixture
def normalized(sample_records):
    X, _ = normalize(sample_records)
    y = np.array([r.price_range for r in sample_records])
    return X, y


def test_training_is_bitwise_deterministic(normalized):
    X, y = normalized
    first = LinearSVMClassifier({"epochs": 10}).fit(X, y)
    second = LinearSVMClassifier({"epochs": 10}).fit(X, y)
    assert np.array_equal(first.weights_, second.weights_)
    assert np.array_equal(first.bias_, second.bias_)
    assert np.array_equal(first.predict(X), second.predict(X))


def test_single_update_follows_hinge_rule():
    # One sample of class 0, one epoch: every separator starts at zero so
    # all four constraints are violated on the first step.
    X = np.array([[1.0, 2.0]])
    y = np.array([0])
    svm = LinearSVMClassifier({"epochs": 1, "learning_rate": 0.1, "regularization": 0.5}).fit(X, y)
    np.testing.assert_allclose(svm.weights_, [[0.1, 0.2], [-0.1, -0.2], [-0.1, -0.2], [-0.1, -0.2]])
    np.testing.assert_allclose(svm.bias_, [0.1, -0.1, -0.1, -0.1])


def test_learns_separable_data(separable_data):
    X, y = separable_data
    order = np.random.default_rng(2).permutation(len(y))
    X, y = X[order], y[order]
    svm = LinearSVMClassifier({"epochs": 200}).fit(X, y)
    assert (svm.predict(X) == y).mean() >= 0.9


def test_predict_is_argmax_of_decision_function(normalized):
    X, y = normalized
    svm = LinearSVMClassifier({"epochs": 5}).fit(X, y)
    np.testing.assert_array_equal(svm.predict(X), np.argmax(svm.decision_function(X), axis=1))
    np.testing.assert_array_equal(svm.predict(X), np.argmax(svm.predict_proba(X), axis=1))


def test_predict_proba_rows_sum_to_one(normalized):
    X, y = normalized
    proba = LinearSVMClassifier({"epochs": 5}).fit(X, y).predict_proba(X)
    assert proba.shape == (len(X), 4)
    np.testing.assert_allclose(proba.sum(axis=1), 1.0)
    assert np.all(proba > 0)


def test_feature_importances_normalized(normalized):
    X, y = normalized
    svm = LinearSVMClassifier({"epochs": 5}).fit(X, y)
    assert svm.feature_importances_.shape == (20,)
    assert svm.feature_importances_.sum() == pytest.approx(1.0)


def test_cancellation_is_polled_between_epochs(normalized):
    from mobile_price.exceptions import TrainingCancelledError
    from mobile_price.training import CancellationToken
    X, y = normalized
    token = CancellationToken()
    token.cancel()
    with pytest.raises(TrainingCancelledError):
        LinearSVMClassifier({"epochs": 5}).fit(X, y, cancel_token=token)


def test_predict_before_fit_raises():
    with pytest.raises(ModelNotTrainedError):
        LinearSVMClassifier().predict(np.zeros((1, 20)))


def test_invalid_epochs():
    with pytest.raises(InvalidInputError):
        LinearSVMClassifier({"epochs": 0})
