import threading

import pytest

from mobile_price.exceptions import InvalidAlgorithmError, TrainingCancelledError
from mobile_price.training import CancellationToken, TrainedModelBundle, TrainingRunner, submit_training


def test_token_starts_clear_and_raises_once_cancelled():
    token = CancellationToken()
    assert not token.cancelled
    token.raise_if_cancelled()
    token.cancel()
    assert token.cancelled
    with pytest.raises(TrainingCancelledError):
        token.raise_if_cancelled()


def test_background_training_returns_bundle(orchestrator, sample_records):
    seen = []
    job = submit_training("decisionTree", sample_records, orchestrator,
                          on_progress=lambda stage, fraction: seen.append(stage))
    bundle = job.result(timeout=60)
    assert isinstance(bundle, TrainedModelBundle)
    assert job.done()
    assert job.progress == ("done", 1.0)
    assert seen[0] == "split"


def test_cancelling_a_running_job_yields_no_bundle(orchestrator, sample_records):
    holder = []
    ready = threading.Event()

    def on_progress(stage, fraction):
        if stage == "split":
            ready.wait(timeout=10)
            holder[0].cancel()

    job = submit_training("randomForest", sample_records, orchestrator, on_progress=on_progress)
    holder.append(job)
    ready.set()

    with pytest.raises(TrainingCancelledError):
        job.result(timeout=60)
    assert job.cancelled
    assert job.progress == ("split", 0.05)


def test_unknown_algorithm_is_rejected_on_submit(orchestrator, sample_records):
    with TrainingRunner(orchestrator) as runner:
        with pytest.raises(InvalidAlgorithmError):
            runner.submit("naiveBayes", sample_records)
        assert runner.jobs == []


def test_runner_executes_jobs_in_submission_order(orchestrator, sample_records):
    with TrainingRunner(orchestrator) as runner:
        first = runner.submit("decisionTree", sample_records)
        second = runner.submit("svm", sample_records)
    assert first.result().algorithm == "decisionTree"
    assert second.result().algorithm == "svm"
    assert len(runner.jobs) == 2
