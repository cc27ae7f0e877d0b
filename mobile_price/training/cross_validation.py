"""K-fold cross-validation that retrains the model on every fold."""

from typing import Any, Callable, Dict, Optional, Tuple

import numpy as np
from loguru import logger
from sklearn.metrics import accuracy_score
from sklearn.model_selection import KFold

from ..data.preprocessor import MinMaxNormalizer
from ..exceptions import InvalidInputError
from ..models.base import ModelFactory, check_cancelled


def cross_validate(algorithm: str,
                   model_config: Dict[str, Any],
                   X: np.ndarray,
                   y: np.ndarray,
                   n_folds: int = 5,
                   random_state: Optional[int] = None,
                   cancel_token: Optional[Any] = None,
                   on_fold: Optional[Callable[[int, int], None]] = None) -> Tuple[float, ...]:
    """
    Accuracy of ``algorithm`` on each of ``n_folds`` shuffled folds.

    The normalizer is refit on each fold's training part, so no validation
    values leak into the scaling.

    Args:
        algorithm: Registered algorithm identifier
        model_config: Hyper-parameters passed to the factory
        X: Raw (unnormalized) features
        y: Labels
        n_folds: Number of folds, at least 2 and at most the sample count
        random_state: Seed for the fold shuffle
        cancel_token: Optional token polled between folds
        on_fold: Called with (completed_folds, n_folds) after each fold

    Returns:
        Tuple of fold accuracies, in fold order
    """
    if not 2 <= n_folds <= len(y):
        raise InvalidInputError(f"n_folds must be between 2 and {len(y)}, got {n_folds}")

    splitter = KFold(n_splits=n_folds, shuffle=True, random_state=random_state)
    logger.info(f"Using KFold of {n_folds} folds")

    scores = []
    for fold, (train_idx, val_idx) in enumerate(splitter.split(X), 1):
        check_cancelled(cancel_token)
        normalizer = MinMaxNormalizer()
        X_train, X_val = normalizer.fit_transform(X[train_idx], X[val_idx])

        model = ModelFactory.create_model(algorithm, model_config)
        model.fit(X_train, y[train_idx], cancel_token=cancel_token)
        score = float(accuracy_score(y[val_idx], model.predict(X_val)))
        scores.append(score)

        logger.debug(f"  Fold {fold} complete - accuracy: {score:.4f}")
        if on_fold is not None:
            on_fold(fold, n_folds)

    logger.info(f"Cross-validation accuracy: {np.mean(scores):.4f}±{np.std(scores):.4f}")
    return tuple(scores)
