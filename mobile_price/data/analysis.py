"""Exploratory statistics over a phone dataset."""

from typing import Dict, Sequence

import numpy as np
import pandas as pd

from ..exceptions import InvalidInputError
from .loader import records_to_frame
from .schema import FEATURE_NAMES, LABEL_COLUMN, N_CLASSES, RecordLike


def _frame(records: Sequence[RecordLike]) -> pd.DataFrame:
    if len(records) == 0:
        raise InvalidInputError("Cannot analyse an empty dataset")
    return records_to_frame(records)


def pearson_correlation(x: Sequence[float], y: Sequence[float]) -> float:
    """Pearson correlation, defined as 0 when either series is constant."""
    with np.errstate(divide='ignore', invalid='ignore'):
        value = pd.Series(x, dtype=float).corr(pd.Series(y, dtype=float))
    return 0.0 if pd.isna(value) else float(value)


def calculate_correlations(records: Sequence[RecordLike]) -> Dict[str, float]:
    """Correlation of every feature with the price range (0 for constant features)."""
    df = _frame(records)
    with np.errstate(divide='ignore', invalid='ignore'):
        correlations = df[list(FEATURE_NAMES)].corrwith(df[LABEL_COLUMN]).fillna(0.0)
    return {name: float(correlations[name]) for name in FEATURE_NAMES}


def get_feature_stats(records: Sequence[RecordLike]) -> pd.DataFrame:
    """
    Mean, min, max and population standard deviation per column.

    Returns:
        DataFrame indexed by column name with columns mean/min/max/std
    """
    df = _frame(records)
    return pd.DataFrame({
        'mean': df.mean(),
        'min': df.min(),
        'max': df.max(),
        'std': df.std(ddof=0),
    })


def class_distribution(records: Sequence[RecordLike]) -> Dict[int, int]:
    """Number of records per price range (all four ranges present)."""
    counts = _frame(records)[LABEL_COLUMN].value_counts()
    return {c: int(counts.get(c, 0)) for c in range(N_CLASSES)}
