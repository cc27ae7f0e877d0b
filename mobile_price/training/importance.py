"""Feature importance computed from a fitted model."""

from typing import Any, Optional, Sequence, Tuple

import numpy as np
from loguru import logger
from sklearn import inspection
from sklearn.metrics import accuracy_score

from ..data.preprocessor import SeedLike, as_generator
from ..data.schema import FEATURE_NAMES
from ..exceptions import InvalidInputError
from ..models.base import BaseModel, check_cancelled
from .bundle import FeatureImportance

METHODS = ('permutation', 'native')


def _accuracy_scorer(model: BaseModel, X: np.ndarray, y: np.ndarray) -> float:
    # sklearn's named scorers need estimator tags, which BaseModel does not carry
    return accuracy_score(y, model.predict(X))


def permutation_importance(model: BaseModel,
                           X: np.ndarray,
                           y: np.ndarray,
                           n_repeats: int = 5,
                           random_state: SeedLike = None,
                           cancel_token: Optional[Any] = None) -> np.ndarray:
    """
    Mean drop in accuracy when one feature column is shuffled.

    Delegates to ``sklearn.inspection.permutation_importance``; the token is
    polled before and after the shuffles.

    Args:
        model: Fitted model
        X: Normalized evaluation features
        y: Evaluation labels
        n_repeats: Shuffles per feature
        random_state: Seed or numpy Generator for the shuffles

    Returns:
        Array of shape (n_features,); negative values mean shuffling helped
    """
    if n_repeats < 1:
        raise InvalidInputError(f"n_repeats must be >= 1, got {n_repeats}")
    if random_state is None or isinstance(random_state, np.random.Generator):
        # sklearn takes an int seed or a RandomState
        random_state = int(as_generator(random_state).integers(0, 2**31 - 1))

    check_cancelled(cancel_token)
    result = inspection.permutation_importance(
        model, X, y,
        scoring=_accuracy_scorer,
        n_repeats=n_repeats,
        random_state=random_state,
    )
    check_cancelled(cancel_token)
    return result.importances_mean


def rank_features(scores: Sequence[float],
                  feature_names: Sequence[str] = FEATURE_NAMES) -> Tuple[FeatureImportance, ...]:
    """Pair scores with feature names, highest first (ties keep schema order)."""
    order = np.argsort(-np.asarray(scores, dtype=float), kind='stable')
    return tuple(FeatureImportance(feature_names[i], float(scores[i])) for i in order)


def compute_feature_importance(model: BaseModel,
                               X: np.ndarray,
                               y: np.ndarray,
                               method: str = 'permutation',
                               n_repeats: int = 5,
                               random_state: SeedLike = None,
                               cancel_token: Optional[Any] = None) -> Tuple[FeatureImportance, ...]:
    """
    Rank features by importance.

    ``permutation`` works for every model; ``native`` uses the model's own
    ``feature_importances_`` (impurity decrease for trees, weight magnitude for
    the SVM) and falls back to permutation when the model has none.
    """
    if method not in METHODS:
        raise InvalidInputError(f"Unknown feature importance method: {method!r}")

    if method == 'native':
        native = model.feature_importances_
        if native is not None:
            return rank_features(native)
        logger.warning(f"{model.model_name} has no native importances, using permutation")

    return rank_features(permutation_importance(model, X, y, n_repeats, random_state, cancel_token))
