"""
Custom errors raised by the price-range classification core.
"""


class MobilePriceError(Exception):
    """Base class for every error raised by the framework."""
    pass


class InvalidInputError(MobilePriceError, ValueError):
    """Raised when a dataset, record or parameter fails validation."""
    pass


class InvalidAlgorithmError(MobilePriceError, ValueError):
    """Raised when an algorithm identifier is not registered."""
    pass


class ModelNotTrainedError(MobilePriceError):
    """Raised when a model or normalizer is used before it has been fitted."""
    pass


class TrainingCancelledError(MobilePriceError):
    pass
