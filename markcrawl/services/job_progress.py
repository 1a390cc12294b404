import logging
from typing import Callable, Optional, TypeVar

from markcrawl.domain.crawl_result import CrawlResult
from markcrawl.domain.job import CrawlJob, JobStatus
from markcrawl.exceptions import PersistenceError

logger = logging.getLogger(__name__)

T = TypeVar("T")


class JobProgress:
    """Engine-side view of one job, written through to the job store.

    The in-memory job is the source of truth while the engine runs. Every
    change is pushed to the store right away so pollers see it; a failed
    write is logged and the in-memory state stays as it is.
    """

    def __init__(self, job: CrawlJob, job_store):
        self.job = job.copy()
        self.job_store = job_store
        self.persistence_failures = 0

    def _persist(self, operation: str, fn: Callable[[], T]) -> Optional[T]:
        try:
            return fn()
        except Exception as e:
            self.persistence_failures += 1
            err = PersistenceError(operation, e)
            logger.error("Job %s: %s", self.job.id, err, exc_info=True)
            return None

    def _transition(self, status: str, **extra) -> None:
        if not JobStatus.can_transition(self.job.status, status):
            raise ValueError(f"Invalid job status transition {self.job.status} -> {status}")
        self.job.status = status
        for name, value in extra.items():
            setattr(self.job, name, value)
        self._persist("update_job", lambda: self.job_store.update_job(self.job.id, status=status, **extra))
        logger.info("Job %s -> %s", self.job.id, status)

    def start(self) -> None:
        self._transition(JobStatus.RUNNING)

    def set_total(self, total_pages: int) -> None:
        self.job.total_pages = total_pages
        self._persist("update_job", lambda: self.job_store.update_job(self.job.id, total_pages=total_pages))

    def record(self, result: CrawlResult) -> Optional[CrawlResult]:
        """Store `result` and count the page as processed."""
        if self.job.processed_pages >= self.job.total_pages:
            raise ValueError(
                f"Job {self.job.id} already processed {self.job.processed_pages}/{self.job.total_pages} pages"
            )
        stored = self._persist("create_result", lambda: self.job_store.create_result(result))
        self.job.processed_pages += 1
        processed = self.job.processed_pages
        self._persist("update_job", lambda: self.job_store.update_job(self.job.id, processed_pages=processed))
        return stored

    def complete(self) -> None:
        self._transition(JobStatus.COMPLETED)

    def fail(self) -> None:
        # processed_pages goes back to 0 so nobody mistakes a partial run for usable data
        self._transition(JobStatus.ERROR, processed_pages=0)
