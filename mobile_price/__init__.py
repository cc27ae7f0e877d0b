"""Mobile phone price-range classification framework."""

from .data import DataLoader, MinMaxNormalizer, PhoneRecord, generate_sample_data
from .models import ModelFactory
from .training import CancellationToken, Prediction, TrainedModelBundle, TrainingOrchestrator, submit_training
from .utils import Config, ModelAnalyzer
from .visualization import ReportGenerator, Plotter
from .exceptions import (
    InvalidAlgorithmError,
    InvalidInputError,
    MobilePriceError,
    ModelNotTrainedError,
    TrainingCancelledError,
)

__version__ = '1.0.0'

__all__ = [
    'DataLoader',
    'MinMaxNormalizer',
    'PhoneRecord',
    'generate_sample_data',
    'ModelFactory',
    'CancellationToken',
    'Prediction',
    'TrainedModelBundle',
    'TrainingOrchestrator',
    'submit_training',
    'Config',
    'ModelAnalyzer',
    'ReportGenerator',
    'Plotter',
    'InvalidAlgorithmError',
    'InvalidInputError',
    'MobilePriceError',
    'ModelNotTrainedError',
    'TrainingCancelledError',
]
