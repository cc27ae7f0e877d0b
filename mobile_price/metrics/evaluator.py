"""Classification metrics for the four price ranges, computed with sklearn.metrics."""

from dataclasses import dataclass
from typing import Dict, Sequence, Tuple

import numpy as np
from sklearn import metrics as sk_metrics

from ..data.schema import N_CLASSES, PRICE_LABELS
from ..exceptions import InvalidInputError

LABELS = list(range(N_CLASSES))


def _readonly(matrix: np.ndarray) -> np.ndarray:
    matrix = np.array(matrix, dtype=int)
    matrix.setflags(write=False)
    return matrix


@dataclass(frozen=True)
class ModelMetrics:
    """
    Accuracy plus per-class precision, recall and F1.

    Attributes:
        accuracy: trace(confusion_matrix) / sum(confusion_matrix)
        precision: Per-class TP / (TP + FP), 0 when nothing was predicted as the class
        recall: Per-class TP / (TP + FN), 0 when the class never occurs
        f1_score: Per-class harmonic mean of precision and recall, 0 when both are 0
        confusion_matrix: Read-only; rows are actual classes, columns predicted classes
    """
    accuracy: float
    precision: Tuple[float, ...]
    recall: Tuple[float, ...]
    f1_score: Tuple[float, ...]
    confusion_matrix: np.ndarray

    def __post_init__(self):
        object.__setattr__(self, 'confusion_matrix', _readonly(self.confusion_matrix))

    def __setstate__(self, state):
        # Unpickled arrays come back writable
        self.__dict__.update(state)
        self.__post_init__()

    @property
    def support(self) -> Tuple[int, ...]:
        return tuple(int(v) for v in self.confusion_matrix.sum(axis=1))

    @property
    def macro_precision(self) -> float:
        return float(np.mean(self.precision))

    @property
    def macro_recall(self) -> float:
        return float(np.mean(self.recall))

    @property
    def macro_f1(self) -> float:
        return float(np.mean(self.f1_score))

    @property
    def weighted_f1(self) -> float:
        support = np.asarray(self.support, dtype=float)
        if support.sum() == 0:
            return 0.0
        return float(np.dot(self.f1_score, support) / support.sum())

    def to_dict(self) -> Dict[str, object]:
        return {
            'accuracy': self.accuracy,
            'precision': list(self.precision),
            'recall': list(self.recall),
            'f1_score': list(self.f1_score),
            'macro_precision': self.macro_precision,
            'macro_recall': self.macro_recall,
            'macro_f1': self.macro_f1,
            'weighted_f1': self.weighted_f1,
            'confusion_matrix': self.confusion_matrix.tolist(),
        }


def _as_labels(values: Sequence[int], name: str) -> np.ndarray:
    labels = np.asarray(values)
    if labels.ndim != 1:
        raise InvalidInputError(f"{name} must be one-dimensional, got shape {labels.shape}")
    if labels.size and (np.any(labels != np.round(labels))
                        or labels.min() < 0 or labels.max() >= N_CLASSES):
        raise InvalidInputError(f"{name} must contain integer labels in 0..{N_CLASSES - 1}")
    return labels.astype(int)


def _check_pair(actual: Sequence[int], predicted: Sequence[int]) -> Tuple[np.ndarray, np.ndarray]:
    actual = _as_labels(actual, 'actual')
    predicted = _as_labels(predicted, 'predicted')
    if actual.size == 0:
        raise InvalidInputError("Cannot evaluate an empty prediction set")
    if actual.shape != predicted.shape:
        raise InvalidInputError(
            f"actual and predicted differ in length: {actual.size} vs {predicted.size}"
        )
    return actual, predicted


def confusion_matrix(actual: Sequence[int], predicted: Sequence[int]) -> np.ndarray:
    """
    Count (actual, predicted) pairs into a 4x4 matrix.

    Raises:
        InvalidInputError: Empty or mismatched inputs, or labels outside 0..3
    """
    actual, predicted = _check_pair(actual, predicted)
    return sk_metrics.confusion_matrix(actual, predicted, labels=LABELS)


def evaluate(actual: Sequence[int], predicted: Sequence[int]) -> ModelMetrics:
    """
    Compute accuracy, confusion matrix and per-class precision/recall/F1.

    Args:
        actual: Ground-truth labels
        predicted: Predicted labels, aligned with ``actual``

    Returns:
        ModelMetrics for the four price ranges
    """
    actual, predicted = _check_pair(actual, predicted)
    precision, recall, f1, _ = sk_metrics.precision_recall_fscore_support(
        actual, predicted, labels=LABELS, zero_division=0
    )
    return ModelMetrics(
        accuracy=float(sk_metrics.accuracy_score(actual, predicted)),
        precision=tuple(float(v) for v in precision),
        recall=tuple(float(v) for v in recall),
        f1_score=tuple(float(v) for v in f1),
        confusion_matrix=sk_metrics.confusion_matrix(actual, predicted, labels=LABELS),
    )


def classification_report(actual: Sequence[int], predicted: Sequence[int], digits: int = 4) -> str:
    """Per-class text report with the price-range labels as row names."""
    actual, predicted = _check_pair(actual, predicted)
    return sk_metrics.classification_report(
        actual, predicted,
        labels=LABELS,
        target_names=list(PRICE_LABELS),
        digits=digits,
        zero_division=0,
    )
