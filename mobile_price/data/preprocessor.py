"""Min-max normalization and randomized train/test partitioning."""

from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple, TypeVar, Union

import numpy as np
from loguru import logger

from ..exceptions import InvalidInputError, ModelNotTrainedError
from .schema import FEATURE_NAMES, RecordLike, record_vector

T = TypeVar('T')
SeedLike = Union[int, np.random.Generator, None]


def as_generator(random_state: SeedLike) -> np.random.Generator:
    """Return a numpy Generator for an int seed, an existing Generator or None."""
    if isinstance(random_state, np.random.Generator):
        return random_state
    return np.random.default_rng(random_state)


@dataclass(frozen=True)
class FeatureRanges:
    """Per-feature (min, max) pairs fitted on a training set."""
    minimums: Tuple[float, ...]
    maximums: Tuple[float, ...]

    def __post_init__(self):
        if len(self.minimums) != len(self.maximums):
            raise InvalidInputError("minimums and maximums must have the same length")

    def as_dict(self) -> dict:
        return {name: (lo, hi) for name, lo, hi in zip(FEATURE_NAMES, self.minimums, self.maximums)}


class MinMaxNormalizer:
    """
    Min-max scaler that keeps its fitted ranges for later reuse.

    Each feature is mapped to ``(v - min) / (max - min)``. Features whose
    training range is empty (``max == min``) map to 0. Values outside the
    training range are not clipped.
    """

    def __init__(self):
        self.ranges: Optional[FeatureRanges] = None

    @classmethod
    def from_ranges(cls, ranges: FeatureRanges) -> 'MinMaxNormalizer':
        normalizer = cls()
        normalizer.ranges = ranges
        return normalizer

    @property
    def fitted(self) -> bool:
        return self.ranges is not None

    def fit(self, X: np.ndarray) -> 'MinMaxNormalizer':
        X = _as_matrix(X)
        if X.shape[0] == 0:
            raise InvalidInputError("Cannot fit normalizer on an empty feature matrix")
        self.ranges = FeatureRanges(
            minimums=tuple(float(v) for v in X.min(axis=0)),
            maximums=tuple(float(v) for v in X.max(axis=0)),
        )
        logger.debug(f"Fitted min-max ranges on {X.shape[0]} samples, {X.shape[1]} features")
        return self

    def transform(self, X: np.ndarray) -> np.ndarray:
        if self.ranges is None:
            raise ModelNotTrainedError("Normalizer must be fitted before transform")
        X = _as_matrix(X)
        mins = np.asarray(self.ranges.minimums)
        maxs = np.asarray(self.ranges.maximums)
        if X.shape[1] != mins.shape[0]:
            raise InvalidInputError(f"Expected {mins.shape[0]} features, got {X.shape[1]}")

        span = maxs - mins
        constant = span == 0
        scaled = (X - mins) / np.where(constant, 1.0, span)
        scaled[:, constant] = 0.0
        return scaled

    def fit_transform(self, X: np.ndarray, *arrays: np.ndarray) -> Union[np.ndarray, tuple]:
        """
        Fit on training data and transform all provided arrays.

        Returns a single array when only ``X`` is given, otherwise a tuple
        ``(X_scaled, *arrays_scaled)`` transformed with the ranges of ``X``.
        """
        X_scaled = self.fit(X).transform(X)
        if not arrays:
            return X_scaled
        return (X_scaled,) + tuple(self.transform(arr) for arr in arrays)


def _as_matrix(X) -> np.ndarray:
    X = np.asarray(X, dtype=float)
    if X.ndim == 1:
        X = X.reshape(1, -1)
    if X.ndim != 2:
        raise InvalidInputError(f"Expected a 2D feature matrix, got shape {X.shape}")
    return X


def normalize(records: Sequence[RecordLike]) -> Tuple[np.ndarray, FeatureRanges]:
    """
    Min-max normalize records over their own ranges.

    Args:
        records: Records (or mappings) to normalize

    Returns:
        Normalized vectors of shape (n, 20) and the ranges they were scaled with
    """
    if len(records) == 0:
        raise InvalidInputError("Cannot normalize an empty dataset")
    X = np.vstack([record_vector(r) for r in records])
    normalizer = MinMaxNormalizer()
    vectors = normalizer.fit_transform(X)
    return vectors, normalizer.ranges


def split(records: Sequence[T],
          test_fraction: float = 0.2,
          random_state: SeedLike = None) -> Tuple[List[T], List[T]]:
    """
    Shuffle records and slice them into train and test partitions.

    The training partition holds ``floor(n * (1 - test_fraction))`` records,
    the test partition the remainder.

    Args:
        records: Sequence to partition (left untouched)
        test_fraction: Share of records held out, strictly between 0 and 1
        random_state: Seed or numpy Generator driving the shuffle

    Returns:
        (train, test) lists

    Raises:
        InvalidInputError: Empty input, fraction out of range, or a
            partition that would end up empty
    """
    n = len(records)
    if n == 0:
        raise InvalidInputError("Cannot split an empty dataset")
    if not 0.0 < test_fraction < 1.0:
        raise InvalidInputError(f"test_fraction must be in (0, 1), got {test_fraction}")

    split_index = int(np.floor(n * (1.0 - test_fraction)))
    if split_index == 0 or split_index == n:
        raise InvalidInputError(
            f"Dataset of {n} records is too small for test_fraction={test_fraction}"
        )

    order = as_generator(random_state).permutation(n)
    train = [records[i] for i in order[:split_index]]
    test = [records[i] for i in order[split_index:]]

    logger.info(f"Train/test split: {len(train)}/{len(test)} samples "
                f"({len(train) / n:.1%}/{len(test) / n:.1%})")
    return train, test

