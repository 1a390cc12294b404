"""Custom exceptions for MarkCrawl services."""
from typing import List, Optional


class JobValidationError(Exception):
    """Raised when a crawl job submission is rejected before the engine runs."""

    def __init__(self, errors: List[str]):
        self.errors = list(errors)
        super().__init__("; ".join(self.errors) or "invalid crawl job")


class JobNotFoundError(Exception):
    """Raised when a requested crawl job does not exist in the job store."""

    def __init__(self, job_id: int):
        self.job_id = job_id
        super().__init__(f"Crawl job {job_id} not found")


class FetchError(Exception):
    """Raised when a single page cannot be navigated to or rendered."""

    def __init__(self, url: str, original: Optional[Exception] = None, reason: Optional[str] = None):
        self.url = url
        self.original = original
        detail = reason or (str(original) if original is not None else "unknown error")
        self.reason = detail
        super().__init__(f"Fetch failed for {url}: {detail}")


class EngineError(Exception):
    """Raised when the shared render engine cannot be started or operated."""


class PersistenceError(Exception):
    """Raised when a job store write fails."""

    def __init__(self, operation: str, original: Exception):
        self.operation = operation
        self.original = original
        super().__init__(f"Job store {operation} failed: {original}")
