"""Immutable result of one training run, with joblib persistence."""

from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from types import MappingProxyType
from typing import Any, Dict, Mapping, NamedTuple, Tuple, Union

import joblib
import numpy as np
from loguru import logger

from ..data.preprocessor import FeatureRanges
from ..data.schema import PRICE_LABELS, PhoneRecord
from ..exceptions import InvalidInputError
from ..metrics.evaluator import ModelMetrics
from ..models.base import BaseModel


class FeatureImportance(NamedTuple):
    feature: str
    importance: float


class Prediction(NamedTuple):
    """Predicted price range and the confidence for each of the four ranges."""
    price_range: int
    confidence: Tuple[float, float, float, float]

    @property
    def label(self) -> str:
        return PRICE_LABELS[self.price_range]


@dataclass(frozen=True, eq=False)
class TrainedModelBundle:
    """
    Everything produced by a training run.

    The bundle is created once and never updated; retraining produces a new
    bundle. ``ranges`` are the min-max ranges fitted on the training split and
    must be reused for every later prediction.

    Attributes:
        algorithm: Algorithm identifier (decisionTree, randomForest, svm)
        model: The fitted classifier
        ranges: Normalization ranges fitted on the training split
        test_records: Held-out records, in the order of ``predictions``
        predictions: Predicted labels for ``test_records``
        actual_values: True labels for ``test_records``
        metrics: Accuracy, confusion matrix and per-class scores on the test split
        feature_importance: (feature, score) pairs sorted by descending score
        cross_validation_scores: Accuracy of each cross-validation fold
        training_time: Wall-clock seconds spent in the training call
        params: Hyper-parameters and run settings (read-only mapping)
        created_at: Creation timestamp
    """
    algorithm: str
    model: BaseModel
    ranges: FeatureRanges
    test_records: Tuple[PhoneRecord, ...]
    predictions: np.ndarray
    actual_values: np.ndarray
    metrics: ModelMetrics
    feature_importance: Tuple[FeatureImportance, ...]
    cross_validation_scores: Tuple[float, ...]
    training_time: float
    params: Mapping[str, Any] = field(default_factory=dict)
    created_at: datetime = field(default_factory=datetime.now)

    def __post_init__(self):
        # Freeze the arrays and params so the bundle cannot be modified in place
        for name in ('predictions', 'actual_values'):
            array = np.array(getattr(self, name), dtype=int)
            array.setflags(write=False)
            object.__setattr__(self, name, array)
        object.__setattr__(self, 'params', MappingProxyType(dict(self.params)))

    def __getstate__(self) -> Dict[str, Any]:
        # mappingproxy cannot be pickled
        state = self.__dict__.copy()
        state['params'] = dict(self.params)
        return state

    def __setstate__(self, state: Dict[str, Any]) -> None:
        self.__dict__.update(state)
        self.__post_init__()

    @property
    def accuracy(self) -> float:
        return self.metrics.accuracy

    @property
    def confusion_matrix(self) -> np.ndarray:
        return self.metrics.confusion_matrix

    @property
    def test_features(self) -> np.ndarray:
        """Raw (unnormalized) feature matrix of the held-out records."""
        return np.array([record.features() for record in self.test_records], dtype=float)

    @property
    def cv_mean(self) -> float:
        return float(np.mean(self.cross_validation_scores)) if self.cross_validation_scores else float('nan')

    @property
    def cv_std(self) -> float:
        """Population standard deviation of the fold scores."""
        return float(np.std(self.cross_validation_scores)) if self.cross_validation_scores else float('nan')

    def summary(self) -> Dict[str, Any]:
        return {
            'algorithm': self.algorithm,
            'accuracy': self.accuracy,
            'metrics': self.metrics.to_dict(),
            'feature_importance': [fi._asdict() for fi in self.feature_importance],
            'cross_validation_scores': list(self.cross_validation_scores),
            'cv_mean': self.cv_mean,
            'cv_std': self.cv_std,
            'training_time': self.training_time,
            'test_size': len(self.test_records),
            'params': dict(self.params),
            'created_at': self.created_at.isoformat(),
        }

    def save(self, filepath: Union[str, Path]) -> Path:
        """Save the bundle to disk (``.joblib`` suffix enforced)."""
        filepath = Path(filepath).with_suffix('.joblib')
        filepath.parent.mkdir(parents=True, exist_ok=True)
        joblib.dump(self, filepath)
        logger.info(f"Saved {self.algorithm} bundle: {filepath}")
        return filepath

    @classmethod
    def load(cls, filepath: Union[str, Path]) -> 'TrainedModelBundle':
        """Load a bundle written by ``save``."""
        filepath = Path(filepath).with_suffix('.joblib')
        if not filepath.exists():
            raise FileNotFoundError(f"Bundle file not found: {filepath}")
        bundle = joblib.load(filepath)
        if not isinstance(bundle, cls):
            raise InvalidInputError(f"{filepath} does not contain a {cls.__name__}")
        logger.info(f"Loaded {bundle.algorithm} bundle: {filepath}")
        return bundle
