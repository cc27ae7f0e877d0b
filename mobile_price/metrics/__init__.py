"""Evaluation metrics."""

from .evaluator import (
    ModelMetrics,
    classification_report,
    confusion_matrix,
    evaluate,
)

__all__ = [
    'ModelMetrics',
    'classification_report',
    'confusion_matrix',
    'evaluate',
]
