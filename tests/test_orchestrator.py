import dataclasses

import numpy as np
import pytest

from mobile_price.data import FEATURE_NAMES, PRESETS, generate_sample_data
from mobile_price.exceptions import (
    InvalidAlgorithmError,
    InvalidInputError,
    ModelNotTrainedError,
    TrainingCancelledError,
)
from mobile_price.models import DecisionTreeClassifier
from mobile_price.training import CancellationToken, Prediction, TrainingOrchestrator
from mobile_price.utils import Config


@pytest.mark.parametrize("algorithm", ["decisionTree", "randomForest", "svm"])
def test_train_produces_complete_bundle(orchestrator, sample_records, algorithm):
    bundle = orchestrator.train(algorithm, sample_records)

    assert bundle.algorithm == algorithm
    assert bundle.model.fitted
    assert len(bundle.test_records) == 40
    assert bundle.predictions.shape == (40,)
    assert bundle.actual_values.shape == (40,)
    assert bundle.confusion_matrix.sum() == 40
    assert bundle.accuracy == pytest.approx(np.mean(bundle.predictions == bundle.actual_values))
    assert len(bundle.cross_validation_scores) == 3
    assert all(0.0 <= s <= 1.0 for s in bundle.cross_validation_scores)
    assert bundle.training_time > 0
    assert bundle.test_features.shape == (40, 20)


def test_actual_values_match_test_records(orchestrator, sample_records):
    bundle = orchestrator.train("decisionTree", sample_records)
    np.testing.assert_array_equal(bundle.actual_values, [r.price_range for r in bundle.test_records])


def test_prediction_round_trip_matches_bundle(orchestrator, sample_records):
    for algorithm in ("decisionTree", "randomForest", "svm"):
        bundle = orchestrator.train(algorithm, sample_records)
        for i, record in enumerate(bundle.test_records[:10]):
            prediction = orchestrator.predict(bundle, record)
            assert prediction.price_range == bundle.predictions[i]


def test_decision_tree_uses_configured_hyper_parameters(orchestrator, sample_records):
    bundle = orchestrator.train("decisionTree", sample_records)
    assert isinstance(bundle.model, DecisionTreeClassifier)
    assert bundle.model.max_depth == 12
    assert bundle.model.min_samples_split == 4
    assert bundle.params["max_depth"] == 12


def test_feature_importance_covers_all_features_sorted(orchestrator, sample_records):
    bundle = orchestrator.train("decisionTree", sample_records)
    names = [fi.feature for fi in bundle.feature_importance]
    scores = [fi.importance for fi in bundle.feature_importance]
    assert sorted(names) == sorted(FEATURE_NAMES)
    assert scores == sorted(scores, reverse=True)


def test_same_seed_reproduces_bundle(fast_config, sample_records):
    first = TrainingOrchestrator(fast_config).train("randomForest", sample_records)
    second = TrainingOrchestrator(fast_config).train("randomForest", sample_records)
    np.testing.assert_array_equal(first.predictions, second.predictions)
    assert first.test_records == second.test_records
    assert first.cross_validation_scores == second.cross_validation_scores
    assert first.feature_importance == second.feature_importance


def test_unknown_algorithm_fails_before_any_work(orchestrator, sample_records):
    stages = []
    with pytest.raises(InvalidAlgorithmError):
        orchestrator.train("knn", sample_records, progress=lambda s, f: stages.append(s))
    assert stages == []


def test_empty_dataset_is_rejected(orchestrator):
    with pytest.raises(InvalidInputError):
        orchestrator.train("svm", [])


def test_malformed_record_is_rejected(orchestrator, sample_records, phone_dict):
    del phone_dict["ram"]
    with pytest.raises(InvalidInputError):
        orchestrator.train("svm", list(sample_records) + [phone_dict])


def test_progress_reports_every_stage(orchestrator, sample_records):
    events = []
    orchestrator.train("decisionTree", sample_records, progress=lambda s, f: events.append((s, f)))
    stages = [s for s, _ in events]
    for stage in ("split", "normalize", "fit", "evaluate", "feature_importance", "cross_validation", "done"):
        assert stage in stages
    fractions = [f for _, f in events]
    assert fractions == sorted(fractions)
    assert events[-1] == ("done", 1.0)


def test_cancelled_token_stops_training(orchestrator, sample_records):
    token = CancellationToken()
    token.cancel()
    with pytest.raises(TrainingCancelledError):
        orchestrator.train("randomForest", sample_records, cancel_token=token)


def test_cross_validation_can_be_disabled(fast_overrides, sample_records):
    config = Config(overrides={**fast_overrides, "training": {"cross_validation": {"enabled": False}}})
    bundle = TrainingOrchestrator(config).train("decisionTree", sample_records)
    assert bundle.cross_validation_scores == ()
    assert np.isnan(bundle.cv_mean)


def test_predict_returns_label_and_confidences(orchestrator, sample_records):
    bundle = orchestrator.train("svm", sample_records)
    prediction = orchestrator.predict(bundle, PRESETS["flagship"])
    assert isinstance(prediction, Prediction)
    assert prediction.price_range in (0, 1, 2, 3)
    assert len(prediction.confidence) == 4
    assert sum(prediction.confidence) == pytest.approx(1.0)
    assert prediction.confidence.index(max(prediction.confidence)) == prediction.price_range


def test_predict_preset(orchestrator, sample_records):
    bundle = orchestrator.train("decisionTree", sample_records)
    assert orchestrator.predict_preset(bundle, "budget") == orchestrator.predict(bundle, PRESETS["budget"])
    with pytest.raises(InvalidInputError):
        orchestrator.predict_preset(bundle, "ultra")


def test_predict_with_unfitted_model_raises(orchestrator, sample_records):
    bundle = orchestrator.train("decisionTree", sample_records)
    stale = dataclasses.replace(bundle, model=DecisionTreeClassifier())
    with pytest.raises(ModelNotTrainedError):
        orchestrator.predict(stale, PRESETS["mid"])


def test_predict_rejects_incomplete_record(orchestrator, sample_records):
    bundle = orchestrator.train("decisionTree", sample_records)
    record = dict(PRESETS["mid"])
    del record["wifi"]
    with pytest.raises(InvalidInputError):
        orchestrator.predict(bundle, record)


def test_predict_rejects_non_bundle(orchestrator):
    with pytest.raises(InvalidInputError):
        orchestrator.predict({"model": None}, PRESETS["mid"])


@pytest.mark.parametrize("algorithm", ["decisionTree", "randomForest", "svm"])
def test_small_dataset_uses_fewer_folds(algorithm):
    # 6 records leave 4 training rows, fewer than the default 5 folds
    bundle = TrainingOrchestrator().train(algorithm, generate_sample_data(6, random_state=0))
    assert len(bundle.test_records) == 2
    assert len(bundle.cross_validation_scores) == 4


def test_single_training_record_skips_cross_validation():
    bundle = TrainingOrchestrator().train("decisionTree", generate_sample_data(2, random_state=0))
    assert len(bundle.test_records) == 1
    assert bundle.cross_validation_scores == ()


def test_predict_ignores_the_record_label(orchestrator, sample_records):
    bundle = orchestrator.train("decisionTree", sample_records)
    record = {**PRESETS["mid"], "price_range": 7}
    assert orchestrator.predict(bundle, record) == orchestrator.predict(bundle, PRESETS["mid"])
