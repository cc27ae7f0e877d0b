"""Training pipeline, result bundles and background jobs."""

from .bundle import FeatureImportance, Prediction, TrainedModelBundle
from .importance import compute_feature_importance, permutation_importance, rank_features
from .cross_validation import cross_validate
from .orchestrator import TrainingOrchestrator
from .jobs import CancellationToken, TrainingJob, TrainingRunner, submit_training

__all__ = [
    'FeatureImportance',
    'Prediction',
    'TrainedModelBundle',
    'compute_feature_importance',
    'permutation_importance',
    'rank_features',
    'cross_validate',
    'TrainingOrchestrator',
    'CancellationToken',
    'TrainingJob',
    'TrainingRunner',
    'submit_training',
]
