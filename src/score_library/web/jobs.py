"""In-memory registry of background push/pull jobs.

Jobs run in FastAPI's threadpool, so every read and write of the registry
goes through one lock. Only the most recent finished jobs are kept; running
jobs are never evicted.
"""

import threading
import uuid
from dataclasses import dataclass, field, replace
from typing import Optional

from score_library.domain.sync import StepResult, SyncDirection, SyncReport

RUNNING = "running"
DONE = "done"
ERROR = "error"

MAX_FINISHED_JOBS = 100


@dataclass
class Job:
    id: str
    direction: SyncDirection
    source_composer_id: str
    status: str = RUNNING
    progress: int = 0
    destination_composer_id: Optional[str] = None
    failures: list[StepResult] = field(default_factory=list)
    error: Optional[str] = None


class JobRegistry:
    """Thread-safe store of job state keyed by job id."""

    def __init__(self, max_finished: int = MAX_FINISHED_JOBS) -> None:
        self._jobs: dict[str, Job] = {}
        self._lock = threading.Lock()
        self.max_finished = max_finished

    def create(self, direction: SyncDirection, source_composer_id: str) -> Job:
        job = Job(
            id=uuid.uuid4().hex,
            direction=direction,
            source_composer_id=source_composer_id,
        )
        with self._lock:
            self._prune()
            self._jobs[job.id] = job
        return replace(job)

    def _prune(self) -> None:
        # Dicts keep insertion order, so the first finished jobs are the oldest
        finished = [job_id for job_id, job in self._jobs.items() if job.status != RUNNING]
        for job_id in finished[: max(0, len(finished) - self.max_finished)]:
            del self._jobs[job_id]

    def get(self, job_id: str) -> Optional[Job]:
        """Snapshot of a job, or None if unknown."""
        with self._lock:
            job = self._jobs.get(job_id)
            return replace(job, failures=list(job.failures)) if job else None

    def set_progress(self, job_id: str, progress: int) -> None:
        with self._lock:
            self._jobs[job_id].progress = progress

    def finish(self, job_id: str, report: SyncReport) -> None:
        with self._lock:
            job = self._jobs[job_id]
            job.status = DONE
            job.destination_composer_id = report.destination_composer_id
            job.failures = list(report.failures)

    def fail(self, job_id: str, error: str) -> None:
        with self._lock:
            job = self._jobs[job_id]
            job.status = ERROR
            job.error = error
