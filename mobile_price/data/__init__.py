"""Data handling module."""

from .schema import (
    FEATURE_NAMES,
    N_CLASSES,
    PRESETS,
    PRICE_LABELS,
    PhoneRecord,
    records_to_arrays,
)
from .preprocessor import FeatureRanges, MinMaxNormalizer, normalize, split
from .generator import generate_sample_data
from .loader import DataLoader, records_to_frame
from .analysis import calculate_correlations, class_distribution, get_feature_stats

__all__ = [
    "FEATURE_NAMES",
    "N_CLASSES",
    "PRESETS",
    "PRICE_LABELS",
    "PhoneRecord",
    "records_to_arrays",
    "FeatureRanges",
    "MinMaxNormalizer",
    "normalize",
    "split",
    "generate_sample_data",
    "DataLoader",
    "records_to_frame",
    "calculate_correlations",
    "class_distribution",
    "get_feature_stats",
]
