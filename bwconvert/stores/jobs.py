"""In-memory registry of conversion jobs for the current service process."""

from __future__ import annotations

import threading
import uuid
from collections import OrderedDict
from dataclasses import dataclass
from typing import Callable, Optional

from ..models import Notification
from ..progress import ProgressTracker

STATUS_PENDING = "pending"
STATUS_PROCESSING = "processing"
STATUS_SUCCEEDED = "succeeded"
STATUS_FAILED = "failed"
FINISHED_STATUSES = (STATUS_SUCCEEDED, STATUS_FAILED)

DEFAULT_MAX_JOBS = 100


@dataclass
class ConversionJob:
    """UI state for one submission."""

    id: str
    variant: str
    progress: ProgressTracker
    status: str = STATUS_PENDING
    notification: Optional[Notification] = None
    result_token: Optional[str] = None
    result_filename: Optional[str] = None
    generated_code: Optional[str] = None

    @property
    def is_processing(self) -> bool:
        return self.status == STATUS_PROCESSING

    @property
    def show_output(self) -> bool:
        return self.status == STATUS_SUCCEEDED and self.result_token is not None


class JobStore:
    """Thread-safe map of job id to :class:`ConversionJob`.

    Once more than ``max_size`` jobs are held, the oldest finished jobs are
    dropped and handed to ``on_evict``. Pending and processing jobs are never
    dropped.
    """

    def __init__(
        self,
        max_size: int = DEFAULT_MAX_JOBS,
        *,
        on_evict: Callable[[ConversionJob], None] | None = None,
    ) -> None:
        if max_size < 1:
            raise ValueError("max_size must be at least 1")
        self.max_size = max_size
        self._on_evict = on_evict
        self._jobs: "OrderedDict[str, ConversionJob]" = OrderedDict()
        self._lock = threading.Lock()

    def create(self, variant: str, progress: ProgressTracker) -> ConversionJob:
        job = ConversionJob(id=uuid.uuid4().hex, variant=variant, progress=progress)
        with self._lock:
            self._jobs[job.id] = job
            evicted = self._evict_finished()
        if self._on_evict is not None:
            for old in evicted:
                self._on_evict(old)
        return job

    def get(self, job_id: str) -> ConversionJob:
        with self._lock:
            try:
                return self._jobs[job_id]
            except KeyError:
                raise KeyError(f"Unknown conversion job: {job_id}") from None

    def __contains__(self, job_id: object) -> bool:
        with self._lock:
            return job_id in self._jobs

    def __len__(self) -> int:
        with self._lock:
            return len(self._jobs)

    def _evict_finished(self) -> list[ConversionJob]:
        overflow = len(self._jobs) - self.max_size
        if overflow <= 0:
            return []
        finished = [job for job in self._jobs.values() if job.status in FINISHED_STATUSES]
        evicted = finished[:overflow]
        for job in evicted:
            del self._jobs[job.id]
        return evicted


__all__ = [
    "ConversionJob",
    "DEFAULT_MAX_JOBS",
    "JobStore",
    "STATUS_FAILED",
    "STATUS_PENDING",
    "STATUS_PROCESSING",
    "STATUS_SUCCEEDED",
]
