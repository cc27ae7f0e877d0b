"""Bootstrap-aggregated decision trees."""

from typing import Any, Dict, List, Optional

import numpy as np
from loguru import logger

from ..data.preprocessor import as_generator
from ..data.schema import N_CLASSES
from ..exceptions import InvalidInputError
from .base import BaseModel, ModelFactory, check_cancelled, safe_float, safe_int
from .tree import DecisionTreeClassifier


class RandomForestClassifier(BaseModel):
    """
    Majority vote over trees fit on bootstrap samples.

    Each tree sees ``floor(sample_fraction * n)`` rows drawn uniformly with
    replacement. Trees are shallower than a standalone tree by default.

    Config:
        n_estimators: Number of trees (default 15)
        max_depth: Depth limit of each tree (default 8)
        min_samples_split: Split threshold of each tree (default 3)
        sample_fraction: Bootstrap sample size relative to the training set (default 0.8)
        random_state: Seed or numpy Generator for the bootstrap draws
    """

    def __init__(self, config: Optional[Dict[str, Any]] = None):
        super().__init__(config)
        self.n_estimators = safe_int(self.config.get('n_estimators'), 15)
        self.max_depth = safe_int(self.config.get('max_depth'), 8)
        self.min_samples_split = safe_int(self.config.get('min_samples_split'), 3)
        self.sample_fraction = safe_float(self.config.get('sample_fraction'), 0.8)

        if self.n_estimators < 1:
            raise InvalidInputError(f"n_estimators must be >= 1, got {self.n_estimators}")
        if not 0.0 < self.sample_fraction <= 1.0:
            raise InvalidInputError(f"sample_fraction must be in (0, 1], got {self.sample_fraction}")

        self.estimators_: List[DecisionTreeClassifier] = []

    def fit(self, X: np.ndarray, y: np.ndarray, cancel_token: Optional[Any] = None) -> 'RandomForestClassifier':
        X, y = self._validate_training_data(X, y)
        rng = as_generator(self.config.get('random_state'))
        n_samples = X.shape[0]
        sample_size = max(1, int(np.floor(n_samples * self.sample_fraction)))
        tree_config = {'max_depth': self.max_depth, 'min_samples_split': self.min_samples_split}

        estimators = []
        for i in range(self.n_estimators):
            check_cancelled(cancel_token)
            indices = rng.integers(0, n_samples, size=sample_size)
            tree = DecisionTreeClassifier(tree_config).fit(X[indices], y[indices], cancel_token)
            estimators.append(tree)
            logger.debug(f"Tree {i + 1}/{self.n_estimators}: {tree.node_count} nodes")

        self.estimators_ = estimators
        self.fitted = True
        logger.info(f"{self.model_name} trained with {len(estimators)} trees "
                    f"on {sample_size}-sample bootstraps")
        return self

    def _vote_counts(self, X: np.ndarray) -> np.ndarray:
        X = self._validate_prediction_data(X)
        counts = np.zeros((X.shape[0], N_CLASSES))
        rows = np.arange(X.shape[0])
        for tree in self.estimators_:
            counts[rows, tree.predict(X)] += 1
        return counts

    def predict(self, X: np.ndarray) -> np.ndarray:
        # First maximum wins: ties go to the lowest class index
        return np.argmax(self._vote_counts(X), axis=1)

    def predict_proba(self, X: np.ndarray) -> np.ndarray:
        return self._vote_counts(X) / len(self.estimators_)

    @property
    def feature_importances_(self) -> Optional[np.ndarray]:
        """Mean of the per-tree impurity importances."""
        if not self.estimators_:
            return None
        return np.mean([tree.feature_importances_ for tree in self.estimators_], axis=0)


ModelFactory.register_model('randomForest', RandomForestClassifier)
