"""Models module for the price-range classifier.

This module provides the from-scratch classifiers:
- Decision tree (Gini impurity, arena-stored nodes)
- Random forest (bootstrap aggregation of decision trees)
- Linear SVM (one-vs-rest, hinge-loss subgradient descent)

Importing the module registers every model with ModelFactory under its
algorithm identifier (decisionTree, randomForest, svm).
"""

# Base classes and factories
from .base import (
    BaseModel,
    ModelFactory,
    safe_int,
    safe_float
)

# Classifiers
from .tree import DecisionTreeClassifier, calculate_gini, find_best_split
from .forest import RandomForestClassifier
from .svm import LinearSVMClassifier

# Public API
__all__ = [
    # Base classes
    'BaseModel',
    'ModelFactory',

    # Utilities
    'safe_int',
    'safe_float',
    'calculate_gini',
    'find_best_split',

    # Classifiers
    'DecisionTreeClassifier',
    'RandomForestClassifier',
    'LinearSVMClassifier',
]
