"""Base model interface and factory.

This module provides the foundation for every classifier in the framework.
It includes the abstract base class that fixes the shared capability contract,
the factory used to create models from algorithm identifiers, and helpers for
safe numeric conversion of configuration values.

Key Components:
    - BaseModel: Abstract base class for all models (fit / predict / predict_proba)
    - ModelFactory: Registry mapping algorithm identifiers to model classes
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, Optional, Tuple

import numpy as np
from loguru import logger

from ..data.schema import N_CLASSES
from ..exceptions import InvalidAlgorithmError, InvalidInputError, ModelNotTrainedError


def safe_int(value: Any, default: int) -> int:
    """
    Safely convert value to integer.

    Handles strings with scientific notation, floats and None values.
    Returns default if conversion fails.

    Args:
        value: Value to convert
        default: Default value if conversion fails

    Returns:
        Converted integer value or default
    """
    if value is None:
        return default
    try:
        return int(float(str(value)))
    except (TypeError, ValueError):
        return default


def safe_float(value: Any, default: float) -> float:
    """
    Safely convert value to float.

    Args:
        value: Value to convert
        default: Default value if conversion fails

    Returns:
        Converted float value or default
    """
    if value is None:
        return default
    try:
        return float(str(value))
    except (TypeError, ValueError):
        return default


def check_cancelled(cancel_token: Optional[Any]) -> None:
    """Raise if a cancellation token has been triggered."""
    if cancel_token is not None:
        cancel_token.raise_if_cancelled()


class BaseModel(ABC):
    """
    Abstract base class for all price-range classifiers.

    Every model predicts one of ``N_CLASSES`` labels (0..3) and exposes the
    same three operations, so the training orchestrator can dispatch on the
    algorithm identifier alone.

    Attributes:
        config: Hyper-parameters for the model
        fitted: Whether the model has been trained
        model_name: Name of the model class
        n_features_: Width of the training feature matrix
    """

    def __init__(self, config: Optional[Dict[str, Any]] = None):
        """
        Initialize base model.

        Args:
            config: Configuration dictionary holding hyper-parameters
                   specific to each model type
        """
        self.config = dict(config or {})
        self.fitted = False
        self.model_name = self.__class__.__name__
        self.n_features_: Optional[int] = None

    @abstractmethod
    def fit(self, X: np.ndarray, y: np.ndarray, cancel_token: Optional[Any] = None) -> 'BaseModel':
        """
        Train the model on normalized features.

        Args:
            X: Training features of shape (n_samples, n_features)
            y: Training labels of shape (n_samples,), values in 0..3
            cancel_token: Optional token polled during long training loops

        Returns:
            The fitted model
        """

    @abstractmethod
    def predict(self, X: np.ndarray) -> np.ndarray:
        """
        Predict price-range labels.

        Args:
            X: Features of shape (n_samples, n_features) or a single vector

        Returns:
            Integer labels of shape (n_samples,)
        """

    @abstractmethod
    def predict_proba(self, X: np.ndarray) -> np.ndarray:
        """
        Predict class probabilities.

        Args:
            X: Features of shape (n_samples, n_features) or a single vector

        Returns:
            Probabilities of shape (n_samples, 4), each row summing to 1
        """

    @property
    def feature_importances_(self) -> Optional[np.ndarray]:
        """Model-native importance scores, or None if the model has none."""
        return None

    def _validate_training_data(self, X: np.ndarray, y: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
        X = np.asarray(X, dtype=float)
        y = np.asarray(y)
        if X.ndim != 2:
            raise InvalidInputError(f"Expected a 2D feature matrix, got shape {X.shape}")
        if X.shape[0] == 0:
            raise InvalidInputError("Cannot fit on an empty training set")
        if y.shape != (X.shape[0],):
            raise InvalidInputError(f"Labels shape {y.shape} does not match {X.shape[0]} samples")
        if not np.all(np.isfinite(X)):
            raise InvalidInputError("Training features contain NaN or infinite values")
        if np.any((y < 0) | (y >= N_CLASSES)) or np.any(y != np.round(y)):
            raise InvalidInputError(f"Labels must be integers in 0..{N_CLASSES - 1}")
        self.n_features_ = X.shape[1]
        return X, y.astype(int)

    def _validate_prediction_data(self, X: np.ndarray) -> np.ndarray:
        if not self.fitted:
            raise ModelNotTrainedError(f"{self.model_name} must be trained before prediction")
        X = np.asarray(X, dtype=float)
        if X.ndim == 1:
            X = X.reshape(1, -1)
        if X.ndim != 2 or X.shape[1] != self.n_features_:
            raise InvalidInputError(
                f"Expected feature vectors of width {self.n_features_}, got shape {X.shape}"
            )
        return X

    def __repr__(self) -> str:
        params = ', '.join(f'{k}={v!r}' for k, v in sorted(self.config.items()) if k != 'random_state')
        return f"{self.model_name}({params})"


# ============================================================================
# FACTORY
# ============================================================================

class ModelFactory:
    """
    Factory class for creating model instances by algorithm identifier.

    Models must be registered before they can be created. The registered
    names are the algorithm selectors accepted by the training orchestrator.
    """

    _models: Dict[str, type] = {}

    @classmethod
    def register_model(cls, name: str, model_class: type) -> None:
        """
        Register a model class with the factory.

        Args:
            name: Algorithm identifier to register the model under
            model_class: Model class that inherits from BaseModel
        """
        cls._models[name] = model_class

    @classmethod
    def create_model(cls, name: str, config: Optional[Dict[str, Any]] = None, **kwargs) -> BaseModel:
        """
        Create a model instance by name.

        Args:
            name: Registered algorithm identifier
            config: Configuration dictionary for the model
            **kwargs: Additional keyword arguments merged into config

        Returns:
            Instantiated, unfitted model

        Raises:
            InvalidAlgorithmError: If the identifier is not registered
        """
        cls.validate(name)
        full_config = {**(config or {}), **kwargs}
        logger.debug(f"Creating {name} with config {full_config}")
        return cls._models[name](config=full_config)

    @classmethod
    def validate(cls, name: str) -> None:
        if not isinstance(name, str) or name not in cls._models:
            raise InvalidAlgorithmError(
                f"Unknown algorithm: {name!r}. Available: {', '.join(cls.list_models())}"
            )

    @classmethod
    def list_models(cls) -> list:
        """
        Get list of all registered algorithm identifiers.

        Returns:
            List of registered names
        """
        return list(cls._models.keys())
