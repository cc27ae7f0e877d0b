"""Decision tree classifier with Gini impurity splitting.

The fitted tree is stored as an arena: parallel arrays indexed by node id.
Node 0 is the root, leaves carry ``feature_ == -1`` and internal nodes refer
to their children by index.
"""

from dataclasses import dataclass
from typing import Any, Dict, List, Optional

import numpy as np
from loguru import logger

from ..data.schema import N_CLASSES
from ..exceptions import InvalidInputError
from .base import BaseModel, ModelFactory, check_cancelled, safe_int

LEAF = -1


def calculate_gini(labels) -> float:
    """Gini impurity ``1 - sum(p_c ** 2)`` of a label list over the four classes."""
    labels = np.asarray(labels, dtype=int)
    if labels.size == 0:
        return 0.0
    p = np.bincount(labels, minlength=N_CLASSES) / labels.size
    return float(1.0 - np.sum(p * p))


def _gini_rows(counts: np.ndarray, totals: np.ndarray) -> np.ndarray:
    p = counts / totals[:, np.newaxis]
    return 1.0 - np.sum(p * p, axis=1)


@dataclass(frozen=True)
class SplitCandidate:
    feature: int
    threshold: float
    impurity: float


def find_best_split(X: np.ndarray, y: np.ndarray) -> Optional[SplitCandidate]:
    """
    Search every feature for the threshold with the lowest weighted Gini.

    Candidate thresholds are midpoints between adjacent distinct values.
    Ties keep the first candidate seen: lowest feature index, then lowest
    threshold.

    Args:
        X: Features of the samples reaching the node
        y: Their labels

    Returns:
        Best split, or None when every feature is constant
    """
    n_samples, n_features = X.shape
    one_hot = np.eye(N_CLASSES, dtype=np.int64)[y]
    totals = one_hot.sum(axis=0)
    best: Optional[SplitCandidate] = None

    for feature in range(n_features):
        order = np.argsort(X[:, feature], kind='stable')
        values = X[order, feature]
        boundaries = np.flatnonzero(values[1:] != values[:-1])
        if boundaries.size == 0:
            continue

        left_counts = np.cumsum(one_hot[order], axis=0)[boundaries]
        right_counts = totals - left_counts
        n_left = (boundaries + 1).astype(float)
        n_right = n_samples - n_left
        weighted = (n_left * _gini_rows(left_counts, n_left)
                    + n_right * _gini_rows(right_counts, n_right)) / n_samples

        i = int(np.argmin(weighted))
        if best is None or weighted[i] < best.impurity:
            b = boundaries[i]
            best = SplitCandidate(feature, float((values[b] + values[b + 1]) / 2), float(weighted[i]))

    return best


class _NodeArena:
    """Growable node storage used while a tree is being built."""

    def __init__(self):
        self.feature: List[int] = []
        self.threshold: List[float] = []
        self.left: List[int] = []
        self.right: List[int] = []
        self.value: List[np.ndarray] = []
        self.depth: List[int] = []

    def add_leaf(self, counts: np.ndarray, depth: int) -> int:
        self.feature.append(LEAF)
        self.threshold.append(0.0)
        self.left.append(LEAF)
        self.right.append(LEAF)
        self.value.append(counts)
        self.depth.append(depth)
        return len(self.feature) - 1

    def set_split(self, node: int, feature: int, threshold: float, left: int, right: int) -> None:
        self.feature[node] = feature
        self.threshold[node] = threshold
        self.left[node] = left
        self.right[node] = right


class DecisionTreeClassifier(BaseModel):
    """
    CART-style classification tree over numeric features.

    Config:
        max_depth: Maximum depth of the tree (default 10, 0 gives a single leaf)
        min_samples_split: Nodes with fewer samples become leaves (default 5)
    """

    def __init__(self, config: Optional[Dict[str, Any]] = None):
        super().__init__(config)
        self.max_depth = safe_int(self.config.get('max_depth'), 10)
        self.min_samples_split = safe_int(self.config.get('min_samples_split'), 5)
        if self.max_depth < 0:
            raise InvalidInputError(f"max_depth must be >= 0, got {self.max_depth}")

        self.feature_: Optional[np.ndarray] = None
        self.threshold_: Optional[np.ndarray] = None
        self.children_left_: Optional[np.ndarray] = None
        self.children_right_: Optional[np.ndarray] = None
        self.value_: Optional[np.ndarray] = None
        self.node_depth_: Optional[np.ndarray] = None
        self._importances: Optional[np.ndarray] = None

    def fit(self, X: np.ndarray, y: np.ndarray, cancel_token: Optional[Any] = None) -> 'DecisionTreeClassifier':
        X, y = self._validate_training_data(X, y)
        arena = _NodeArena()
        importances = np.zeros(X.shape[1])

        root = arena.add_leaf(np.bincount(y, minlength=N_CLASSES), depth=0)
        stack = [(root, np.arange(len(y)))]

        while stack:
            check_cancelled(cancel_token)
            node, idx = stack.pop()
            depth = arena.depth[node]
            counts = arena.value[node]

            # Stopping rules leave the node as a majority-vote leaf
            if (depth >= self.max_depth
                    or idx.size < self.min_samples_split
                    or np.count_nonzero(counts) <= 1):
                continue

            split = find_best_split(X[idx], y[idx])
            if split is None:
                continue

            goes_left = X[idx, split.feature] <= split.threshold
            left_idx, right_idx = idx[goes_left], idx[~goes_left]
            if left_idx.size == 0 or right_idx.size == 0:
                continue

            left = arena.add_leaf(np.bincount(y[left_idx], minlength=N_CLASSES), depth + 1)
            right = arena.add_leaf(np.bincount(y[right_idx], minlength=N_CLASSES), depth + 1)
            arena.set_split(node, split.feature, split.threshold, left, right)

            importances[split.feature] += (idx.size * calculate_gini(y[idx])
                                           - left_idx.size * calculate_gini(y[left_idx])
                                           - right_idx.size * calculate_gini(y[right_idx]))

            stack.append((right, right_idx))
            stack.append((left, left_idx))

        self.feature_ = np.asarray(arena.feature, dtype=int)
        self.threshold_ = np.asarray(arena.threshold, dtype=float)
        self.children_left_ = np.asarray(arena.left, dtype=int)
        self.children_right_ = np.asarray(arena.right, dtype=int)
        self.value_ = np.vstack(arena.value).astype(float)
        self.node_depth_ = np.asarray(arena.depth, dtype=int)

        total = importances.sum()
        self._importances = importances / total if total > 0 else importances
        self.fitted = True

        logger.debug(f"{self.model_name} fitted: {self.node_count} nodes, "
                     f"{self.n_leaves} leaves, depth {self.get_depth()}")
        return self

    @property
    def node_count(self) -> int:
        return 0 if self.feature_ is None else int(self.feature_.size)

    @property
    def n_leaves(self) -> int:
        return 0 if self.feature_ is None else int(np.sum(self.feature_ == LEAF))

    def get_depth(self) -> int:
        return 0 if self.node_depth_ is None else int(self.node_depth_.max())

    @property
    def feature_importances_(self) -> Optional[np.ndarray]:
        """Impurity decrease per feature, normalized to sum to 1."""
        return self._importances

    def apply(self, X: np.ndarray) -> np.ndarray:
        """Return the index of the leaf each sample lands in."""
        X = self._validate_prediction_data(X)
        nodes = np.zeros(X.shape[0], dtype=int)
        while True:
            rows = np.flatnonzero(self.feature_[nodes] != LEAF)
            if rows.size == 0:
                return nodes
            active = nodes[rows]
            goes_left = X[rows, self.feature_[active]] <= self.threshold_[active]
            nodes[rows] = np.where(goes_left, self.children_left_[active], self.children_right_[active])

    def predict(self, X: np.ndarray) -> np.ndarray:
        # argmax returns the first maximum, so vote ties go to the lowest class
        return np.argmax(self.value_[self.apply(X)], axis=1)

    def predict_proba(self, X: np.ndarray) -> np.ndarray:
        counts = self.value_[self.apply(X)]
        return counts / counts.sum(axis=1, keepdims=True)


ModelFactory.register_model('decisionTree', DecisionTreeClassifier)
