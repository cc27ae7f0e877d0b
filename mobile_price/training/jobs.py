"""Background training on a worker thread with cooperative cancellation."""

import threading
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Iterable, List, Optional, Tuple

from loguru import logger

from ..data.schema import RecordLike
from ..exceptions import TrainingCancelledError
from ..models.base import ModelFactory
from .bundle import TrainedModelBundle
from .orchestrator import ProgressCallback, TrainingOrchestrator


class CancellationToken:
    """Thread-safe flag polled by the training pipeline."""

    def __init__(self):
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def raise_if_cancelled(self) -> None:
        if self._event.is_set():
            raise TrainingCancelledError("Training was cancelled")


class TrainingJob:
    """
    Handle to a training run executing on a worker thread.

    ``result()`` returns the bundle, or re-raises whatever stopped the run
    (``TrainingCancelledError`` after ``cancel()``). A cancelled job never
    yields a partial bundle.
    """

    def __init__(self, algorithm: str, token: CancellationToken):
        self.algorithm = algorithm
        self._future: Optional[Future] = None
        self._token = token
        self._lock = threading.Lock()
        self._progress: Tuple[str, float] = ('queued', 0.0)

    def _update(self, stage: str, fraction: float) -> None:
        with self._lock:
            self._progress = (stage, fraction)

    @property
    def progress(self) -> Tuple[str, float]:
        """Latest (stage, fraction) reported by the pipeline."""
        with self._lock:
            return self._progress

    def cancel(self) -> None:
        logger.info(f"Cancelling {self.algorithm} training")
        self._token.cancel()
        self._future.cancel()

    @property
    def cancelled(self) -> bool:
        return self._token.cancelled

    def done(self) -> bool:
        return self._future.done()

    def result(self, timeout: Optional[float] = None) -> TrainedModelBundle:
        if self._future.cancelled():
            raise TrainingCancelledError(f"{self.algorithm} training was cancelled before it started")
        return self._future.result(timeout=timeout)


class TrainingRunner:
    """
    Owns a worker pool and submits training runs to it.

    Usable as a context manager; leaving the block waits for running jobs.
    """

    def __init__(self, orchestrator: Optional[TrainingOrchestrator] = None, max_workers: int = 1):
        self.orchestrator = orchestrator or TrainingOrchestrator()
        self._executor = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix='training')
        self.jobs: List[TrainingJob] = []

    def submit(self,
               algorithm: str,
               dataset: Iterable[RecordLike],
               on_progress: Optional[ProgressCallback] = None) -> TrainingJob:
        """Queue a training run; an unknown algorithm is rejected immediately."""
        ModelFactory.validate(algorithm)
        records = list(dataset)
        token = CancellationToken()
        job = TrainingJob(algorithm, token)

        def progress(stage: str, fraction: float) -> None:
            job._update(stage, fraction)
            if on_progress is not None:
                on_progress(stage, fraction)

        def run() -> TrainedModelBundle:
            try:
                return self.orchestrator.train(algorithm, records, cancel_token=token, progress=progress)
            except TrainingCancelledError:
                logger.warning(f"{algorithm} training cancelled")
                raise

        job._future = self._executor.submit(run)

        self.jobs.append(job)
        logger.info(f"Submitted {algorithm} training ({len(records)} records)")
        return job

    def shutdown(self, wait: bool = True) -> None:
        self._executor.shutdown(wait=wait)

    def __enter__(self) -> 'TrainingRunner':
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.shutdown(wait=True)


def submit_training(algorithm: str,
                    dataset: Iterable[RecordLike],
                    orchestrator: Optional[TrainingOrchestrator] = None,
                    on_progress: Optional[ProgressCallback] = None) -> TrainingJob:
    """
    Run one training call in the background and return its job handle.

    A dedicated single-worker pool is created for the call and released once
    the job finishes.
    """
    runner = TrainingRunner(orchestrator)
    job = runner.submit(algorithm, dataset, on_progress=on_progress)
    runner.shutdown(wait=False)
    return job
