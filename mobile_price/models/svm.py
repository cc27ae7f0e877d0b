"""One-vs-rest linear SVM trained with hinge-loss subgradient descent."""

from typing import Any, Dict, Optional

import numpy as np
from loguru import logger

from ..data.schema import N_CLASSES
from ..exceptions import InvalidInputError
from .base import BaseModel, ModelFactory, check_cancelled, safe_float, safe_int


class LinearSVMClassifier(BaseModel):
    """
    Four binary linear separators, one per price range.

    Each separator is trained on labels relabeled to +1 (its class) and -1
    (all other classes). For every epoch and every sample in order::

        d = w.x + b
        if y * d < 1:  w <- w + lr * (y * x - 2 * lambda * w);  b <- b + lr * y
        else:          w <- w - lr * 2 * lambda * w

    Training is deterministic: zero initialization, fixed sample order, a
    fixed number of epochs and no early stopping.

    Config:
        learning_rate: Step size (default 0.01)
        regularization: L2 strength lambda (default 0.01)
        epochs: Passes over the training set (default 1000)
    """

    def __init__(self, config: Optional[Dict[str, Any]] = None):
        super().__init__(config)
        self.learning_rate = safe_float(self.config.get('learning_rate'), 0.01)
        self.regularization = safe_float(self.config.get('regularization'), 0.01)
        self.epochs = safe_int(self.config.get('epochs'), 1000)
        if self.epochs < 1:
            raise InvalidInputError(f"epochs must be >= 1, got {self.epochs}")

        self.weights_: Optional[np.ndarray] = None
        self.bias_: Optional[np.ndarray] = None

    def fit(self, X: np.ndarray, y: np.ndarray, cancel_token: Optional[Any] = None) -> 'LinearSVMClassifier':
        X, y = self._validate_training_data(X, y)
        n_samples, n_features = X.shape
        lr, lam = self.learning_rate, self.regularization

        # targets[c, i] is +1 when sample i belongs to class c, else -1
        targets = np.where(y[np.newaxis, :] == np.arange(N_CLASSES)[:, np.newaxis], 1.0, -1.0)
        weights = np.zeros((N_CLASSES, n_features))
        bias = np.zeros(N_CLASSES)

        # The one-vs-rest problems are independent, so the four rows are
        # stepped in lock-step over the same sample order.
        for epoch in range(self.epochs):
            check_cancelled(cancel_token)
            for i in range(n_samples):
                x = X[i]
                t = targets[:, i]
                violated = t * (weights @ x + bias) < 1
                step = np.where(violated, t, 0.0)
                weights = weights + lr * (np.outer(step, x) - 2 * lam * weights)
                bias = bias + lr * step

            if (epoch + 1) % 100 == 0:
                logger.debug(f"{self.model_name} epoch {epoch + 1}/{self.epochs}")

        self.weights_ = weights
        self.bias_ = bias
        self.fitted = True
        logger.info(f"{self.model_name} trained for {self.epochs} epochs on {n_samples} samples")
        return self

    def decision_function(self, X: np.ndarray) -> np.ndarray:
        """Raw one-vs-rest scores of shape (n_samples, 4)."""
        X = self._validate_prediction_data(X)
        return X @ self.weights_.T + self.bias_

    def predict(self, X: np.ndarray) -> np.ndarray:
        return np.argmax(self.decision_function(X), axis=1)

    def predict_proba(self, X: np.ndarray) -> np.ndarray:
        """Softmax over the decision scores."""
        scores = self.decision_function(X)
        scores = scores - scores.max(axis=1, keepdims=True)
        exp_scores = np.exp(scores)
        return exp_scores / exp_scores.sum(axis=1, keepdims=True)

    @property
    def feature_importances_(self) -> Optional[np.ndarray]:
        """Mean absolute weight per feature across the four separators, normalized."""
        if self.weights_ is None:
            return None
        magnitude = np.abs(self.weights_).mean(axis=0)
        total = magnitude.sum()
        return magnitude / total if total > 0 else magnitude


ModelFactory.register_model('svm', LinearSVMClassifier)
