"""In-process store for job snapshots and finished results.

Jobs live for the lifetime of the process only. Each write replaces the
stored frozen snapshot in one assignment, so readers never observe a
half-applied transition. Writes to the same id are serialized by a per-id
lock; writes to different ids only share the short registry lock.
"""

import logging
import threading
import uuid
from collections import Counter
from datetime import datetime

from bookscout.core.schemas import Job, JobResult, JobStatus

logger = logging.getLogger(__name__)


class JobStore:
    """Concurrency-safe keyed store of Job and JobResult records.

    Usage::

        store = JobStore()
        job_id = store.create("mars")
        store.set_status(job_id, JobStatus.PROCESSING, "Searching")
        job = store.get_status(job_id)
    """

    def __init__(self) -> None:
        self._jobs: dict[str, Job] = {}
        self._results: dict[str, JobResult] = {}
        self._locks: dict[str, threading.Lock] = {}
        self._registry_lock = threading.Lock()

    def __len__(self) -> int:
        return len(self._jobs)

    def create(self, topic: str) -> str:
        """Insert a new pending job and return its id."""
        with self._registry_lock:
            job_id = uuid.uuid4().hex
            while job_id in self._jobs:
                job_id = uuid.uuid4().hex
            self._jobs[job_id] = Job(id=job_id, topic=topic)
            self._locks[job_id] = threading.Lock()
        logger.debug("Created job %s for topic '%s'", job_id, topic)
        return job_id

    def set_status(
        self,
        job_id: str,
        status: JobStatus,
        message: str | None = None,
    ) -> Job | None:
        """Apply a status transition and return the new snapshot.

        Returns None without writing when the id is unknown, the job is
        already terminal, or the target status is ``pending``.
        """
        lock = self._locks.get(job_id)
        if lock is None:
            logger.warning("set_status on unknown job %s ignored", job_id)
            return None

        with lock:
            current = self._jobs[job_id]
            if current.status.is_terminal:
                logger.warning(
                    "Job %s is already %s; ignoring transition to %s",
                    job_id, current.status.value, status.value,
                )
                return None
            if status is JobStatus.PENDING:
                logger.warning("Job %s cannot return to pending", job_id)
                return None

            update: dict[str, object] = {"status": status, "message": message}
            if status.is_terminal:
                update["completed_at"] = datetime.now()
            updated = current.model_copy(update=update)
            self._jobs[job_id] = updated

        logger.debug("Job %s -> %s: %s", job_id, status.value, message)
        return updated

    def get_status(self, job_id: str) -> Job | None:
        return self._jobs.get(job_id)

    def put_result(self, job_id: str, result: JobResult) -> None:
        """Store (or overwrite) the result for a job."""
        lock = self._locks.get(job_id)
        if lock is None:
            logger.warning("put_result on unknown job %s ignored", job_id)
            return
        with lock:
            self._results[job_id] = result

    def get_result(self, job_id: str) -> JobResult | None:
        return self._results.get(job_id)

    def count_by_status(self) -> dict[str, int]:
        """Number of jobs in each status, for health reporting."""
        counts = Counter(job.status.value for job in list(self._jobs.values()))
        return {status.value: counts.get(status.value, 0) for status in JobStatus}
