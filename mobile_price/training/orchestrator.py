"""
Training Orchestrator
=====================

Runs the full pipeline for one algorithm and serves predictions:
split -> normalize -> fit -> evaluate -> feature importance ->
cross-validation -> immutable bundle.

"""

import time
from typing import Any, Callable, Iterable, Optional

import numpy as np
from loguru import logger

from ..data.preprocessor import MinMaxNormalizer, as_generator, split
from ..data.schema import PRESETS, RecordLike, coerce_record, record_vector, records_to_arrays
from ..exceptions import InvalidInputError, ModelNotTrainedError
from ..metrics.evaluator import evaluate
from ..models.base import ModelFactory, check_cancelled, safe_float, safe_int
from ..utils.config import Config
from .bundle import Prediction, TrainedModelBundle
from .cross_validation import cross_validate
from .importance import compute_feature_importance

ProgressCallback = Callable[[str, float], None]

# Coarse progress fractions reported at the start of each stage
STAGES = {
    'split': 0.05,
    'normalize': 0.10,
    'fit': 0.15,
    'evaluate': 0.60,
    'feature_importance': 0.65,
    'cross_validation': 0.75,
    'done': 1.0,
}


class TrainingOrchestrator:
    """
    Train price-range classifiers and predict with the resulting bundles.

    All random steps (split, bootstrap, permutation shuffles, fold
    assignment) derive from one numpy Generator seeded with
    ``data.random_state``, so a fixed seed reproduces a bundle exactly.
    """

    def __init__(self, config: Optional[Config] = None, random_state: Optional[int] = None):
        self.config = config or Config.default()
        data_config = self.config.get_data_config()
        self.random_state = random_state if random_state is not None else data_config.get('random_state')
        self.test_size = safe_float(data_config.get('test_size'), 0.2)

    def train(self,
              algorithm: str,
              dataset: Iterable[RecordLike],
              cancel_token: Optional[Any] = None,
              progress: Optional[ProgressCallback] = None) -> TrainedModelBundle:
        """
        Train one algorithm on a labeled dataset.

        Args:
            algorithm: 'decisionTree', 'randomForest' or 'svm'
            dataset: PhoneRecord instances or mappings with all fields
            cancel_token: Optional token with ``raise_if_cancelled()``
            progress: Optional ``progress(stage, fraction)`` callback

        Returns:
            Frozen TrainedModelBundle

        Raises:
            InvalidAlgorithmError: Unknown algorithm, raised before any work
            InvalidInputError: Empty or malformed dataset
            TrainingCancelledError: The token was cancelled mid-run
        """
        ModelFactory.validate(algorithm)
        records = [coerce_record(r) for r in dataset]
        if not records:
            raise InvalidInputError("Dataset is empty")

        start_time = time.perf_counter()
        rng = as_generator(self.random_state)
        logger.info(f"Training {algorithm} on {len(records)} records")

        # Split
        self._report(progress, 'split')
        train_records, test_records = split(records, self.test_size, rng)
        X_train, y_train = records_to_arrays(train_records)
        X_test, y_test = records_to_arrays(test_records)
        check_cancelled(cancel_token)

        # Normalize with ranges fitted on the training split only
        self._report(progress, 'normalize')
        normalizer = MinMaxNormalizer()
        X_train_norm, X_test_norm = normalizer.fit_transform(X_train, X_test)

        # Fit
        self._report(progress, 'fit')
        model_config = self.config.get_model_config(algorithm)
        model_config.setdefault('random_state', self._child_seed(rng))
        model = ModelFactory.create_model(algorithm, model_config)
        model.fit(X_train_norm, y_train, cancel_token=cancel_token)
        check_cancelled(cancel_token)

        # Evaluate
        self._report(progress, 'evaluate')
        predictions = model.predict(X_test_norm)
        metrics = evaluate(y_test, predictions)
        logger.info(f"{algorithm} test accuracy: {metrics.accuracy:.4f}")

        # Feature importance
        self._report(progress, 'feature_importance')
        importance_config = self.config.get_evaluation_config().get('feature_importance', {})
        importance_seed = self._child_seed(rng)
        feature_importance = compute_feature_importance(
            model, X_test_norm, y_test,
            method=importance_config.get('method', 'permutation'),
            n_repeats=safe_int(importance_config.get('n_repeats'), 5),
            random_state=importance_seed,
            cancel_token=cancel_token,
        )
        top = ', '.join(f"{fi.feature}={fi.importance:.3f}" for fi in feature_importance[:3])
        logger.info(f"Top features: {top}")

        # Cross-validation on the training split
        cv_config = self.config.get_training_config().get('cross_validation', {})
        cv_seed = self._child_seed(rng)
        cv_scores = ()
        n_folds = safe_int(cv_config.get('n_folds'), 5)
        if cv_config.get('enabled', True) and len(y_train) < 2:
            logger.warning(f"Skipping cross-validation: only {len(y_train)} training record(s)")
        elif cv_config.get('enabled', True):
            self._report(progress, 'cross_validation')
            if n_folds > len(y_train):
                logger.warning(f"Reducing cross-validation from {n_folds} to {len(y_train)} folds")
                n_folds = len(y_train)
            cv_scores = cross_validate(
                algorithm, model_config, X_train, y_train,
                n_folds=n_folds,
                random_state=cv_seed,
                cancel_token=cancel_token,
                on_fold=self._fold_reporter(progress),
            )

        training_time = time.perf_counter() - start_time
        bundle = TrainedModelBundle(
            algorithm=algorithm,
            model=model,
            ranges=normalizer.ranges,
            test_records=tuple(test_records),
            predictions=predictions,
            actual_values=y_test,
            metrics=metrics,
            feature_importance=feature_importance,
            cross_validation_scores=cv_scores,
            training_time=training_time,
            params={
                **model_config,
                'test_size': self.test_size,
                'seed': self.random_state,
                'importance_method': importance_config.get('method', 'permutation'),
            },
        )
        self._report(progress, 'done')
        logger.success(f"{algorithm} trained in {training_time:.2f}s")
        return bundle

    def predict(self, bundle: TrainedModelBundle, record: RecordLike) -> Prediction:
        """
        Predict the price range of one phone.

        The record is normalized with the ranges stored in the bundle; its
        ``price_range`` field, if any, is ignored.

        Raises:
            InvalidInputError: Malformed record or not a bundle
            ModelNotTrainedError: The bundle's model was never fitted
        """
        if not isinstance(bundle, TrainedModelBundle):
            raise InvalidInputError(f"Expected a TrainedModelBundle, got {type(bundle).__name__}")
        if bundle.model is None or not bundle.model.fitted:
            raise ModelNotTrainedError(f"{bundle.algorithm} bundle holds no fitted model")

        vector = record_vector(record)
        X = MinMaxNormalizer.from_ranges(bundle.ranges).transform(vector)
        label = int(bundle.model.predict(X)[0])
        confidence = tuple(float(p) for p in bundle.model.predict_proba(X)[0])
        return Prediction(label, confidence)

    def predict_preset(self, bundle: TrainedModelBundle, name: str) -> Prediction:
        """Predict one of the built-in phone presets (budget, mid, premium, flagship)."""
        if name not in PRESETS:
            raise InvalidInputError(f"Unknown preset {name!r}. Available: {', '.join(PRESETS)}")
        return self.predict(bundle, PRESETS[name])

    @staticmethod
    def _child_seed(rng: np.random.Generator) -> int:
        return int(rng.integers(0, 2**31 - 1))

    @staticmethod
    def _report(progress: Optional[ProgressCallback], stage: str) -> None:
        logger.debug(f"Stage: {stage}")
        if progress is not None:
            progress(stage, STAGES[stage])

    @staticmethod
    def _fold_reporter(progress: Optional[ProgressCallback]) -> Optional[Callable[[int, int], None]]:
        if progress is None:
            return None
        start, span = STAGES['cross_validation'], STAGES['done'] - STAGES['cross_validation']

        def on_fold(done: int, total: int) -> None:
            progress('cross_validation', start + span * done / total * 0.95)

        return on_fold
