import matplotlib
matplotlib.use("Agg")

import copy

import numpy as np
import pytest

from mobile_price.data import PRESETS, generate_sample_data
from mobile_price.training import TrainingOrchestrator
from mobile_price.utils import Config

# Small hyper-parameters so orchestrator tests stay fast
FAST_OVERRIDES = {
    "data": {"random_state": 7},
    "models": {
        "randomForest": {"n_estimators": 3},
        "svm": {"epochs": 5},
    },
    "training": {"cross_validation": {"enabled": True, "n_folds": 3}},
    "evaluation": {"feature_importance": {"method": "permutation", "n_repeats": 1}},
}


@pytest.fixture
def sample_records():
    """200 reproducible synthetic phones."""
    return generate_sample_data(200, random_state=11)


@pytest.fixture
def fast_overrides():
    return copy.deepcopy(FAST_OVERRIDES)


@pytest.fixture
def fast_config(fast_overrides):
    return Config(overrides=fast_overrides)


@pytest.fixture
def orchestrator(fast_config):
    return TrainingOrchestrator(fast_config)


@pytest.fixture
def phone_dict():
    """A complete, labeled record as a plain mapping."""
    return {**PRESETS["mid"], "price_range": 1}


@pytest.fixture
def separable_data():
    """Two well separated clusters on the first feature, labels 0 and 2."""
    rng = np.random.default_rng(0)
    low = rng.uniform(0.0, 0.3, size=(20, 3))
    high = rng.uniform(0.7, 1.0, size=(20, 3))
    high[:, 1:] = rng.uniform(0.0, 0.3, size=(20, 2))
    X = np.vstack([low, high])
    y = np.array([0] * 20 + [2] * 20)
    return X, y
