"""Configuration management for the price-range framework."""

import copy
from pathlib import Path
from typing import Any, Dict, Optional, Union

import yaml

from ..exceptions import InvalidAlgorithmError, InvalidInputError

DEFAULT_CONFIG: Dict[str, Any] = {
    'data': {
        'generate': {'count': 1000, 'random_state': 42},
        'test_size': 0.2,
        'random_state': 42,
    },
    'models': {
        'decisionTree': {'max_depth': 12, 'min_samples_split': 4},
        'randomForest': {'n_estimators': 15, 'max_depth': 8, 'min_samples_split': 3,
                         'sample_fraction': 0.8},
        'svm': {'learning_rate': 0.01, 'regularization': 0.01, 'epochs': 1000},
    },
    'training': {
        'algorithms': ['decisionTree', 'randomForest', 'svm'],
        'cross_validation': {'enabled': True, 'n_folds': 5},
    },
    'evaluation': {
        'feature_importance': {'method': 'permutation', 'n_repeats': 5},
    },
    'output': {
        'output_dir': 'results',
        'save_models': True,
        'save_plots': True,
    },
}


def deep_merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """Recursively merge ``override`` into a copy of ``base``."""
    merged = copy.deepcopy(base)
    for key, value in (override or {}).items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = deep_merge(merged[key], value)
        else:
            merged[key] = copy.deepcopy(value)
    return merged


class Config:
    """
    YAML configuration loader layered over built-in defaults.

    Values present in the file override the defaults key by key; sections
    missing from the file keep their defaults.
    """

    def __init__(self, config_path: Optional[Union[str, Path]] = None,
                 overrides: Optional[Dict[str, Any]] = None):
        """Load configuration from YAML file (or defaults only when no path is given)."""
        self.config_path = Path(config_path) if config_path else None
        loaded: Dict[str, Any] = {}
        if self.config_path is not None:
            if not self.config_path.exists():
                raise FileNotFoundError(f"Config file not found: {self.config_path}")
            with open(self.config_path, 'r', encoding='utf-8') as f:
                loaded = yaml.safe_load(f) or {}
            if not isinstance(loaded, dict):
                raise InvalidInputError(f"Config file {self.config_path} must contain a mapping")
        self.config = deep_merge(deep_merge(DEFAULT_CONFIG, loaded), overrides or {})

    @classmethod
    def default(cls) -> 'Config':
        return cls()

    def get_model_config(self, model_name: str) -> Dict[str, Any]:
        """
        Get hyper-parameters for an algorithm.

        Args:
            model_name: Algorithm identifier from the 'models' section

        Returns:
            Deep copy of the model config

        Raises:
            InvalidAlgorithmError: If the algorithm has no section
        """
        models = self.config.get('models', {})
        if model_name not in models:
            raise InvalidAlgorithmError(f"Model '{model_name}' not found")
        return copy.deepcopy(models[model_name] or {})

    # Simple getters for other sections
    def get_data_config(self) -> Dict[str, Any]:
        """Get data configuration."""
        return self.config.get('data', {})

    def get_training_config(self) -> Dict[str, Any]:
        """Get training configuration."""
        return self.config.get('training', {})

    def get_evaluation_config(self) -> Dict[str, Any]:
        """Get evaluation configuration."""
        return self.config.get('evaluation', {})

    def get_output_config(self) -> Dict[str, Any]:
        """Get output configuration."""
        return self.config.get('output', {})

    def __getitem__(self, key: str) -> Any:
        """Allow dict-like access to config."""
        return self.config[key]

    def get(self, key: str, default: Any = None) -> Any:
        """Get configuration value with default."""
        return self.config.get(key, default)
