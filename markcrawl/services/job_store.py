from __future__ import annotations

import itertools
import threading
from dataclasses import replace
from typing import Dict, List, Optional, Protocol

from markcrawl.domain.crawl_result import CrawlResult
from markcrawl.domain.job import CrawlJob, CrawlJobConfig

# Only the engine-owned fields change after creation.
UPDATABLE_JOB_FIELDS = frozenset({"status", "total_pages", "processed_pages"})


def check_update_fields(fields: dict) -> None:
    unknown = set(fields) - UPDATABLE_JOB_FIELDS
    if unknown:
        raise ValueError(f"Cannot update job fields: {sorted(unknown)}")


class JobStore(Protocol):
    """Where jobs and their results live.

    Every call is synchronous and applies immediately; callers never batch.
    """

    def create_job(self, config: CrawlJobConfig) -> CrawlJob: ...

    def get_job(self, job_id: int) -> Optional[CrawlJob]: ...

    def list_jobs(self) -> List[CrawlJob]: ...

    def update_job(self, job_id: int, **fields) -> Optional[CrawlJob]: ...

    def create_result(self, result: CrawlResult) -> CrawlResult: ...

    def list_results(self, job_id: int) -> List[CrawlResult]: ...


class InMemoryJobStore:
    """Thread-safe in-memory job store.

    Ephemeral and single-process. Callers always get copies, so nothing
    outside the store can mutate a stored job without going through
    `update_job`.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._jobs: Dict[int, CrawlJob] = {}
        self._results: Dict[int, List[CrawlResult]] = {}
        self._job_ids = itertools.count(1)
        self._result_ids = itertools.count(1)

    def create_job(self, config: CrawlJobConfig) -> CrawlJob:
        with self._lock:
            job = CrawlJob.from_config(next(self._job_ids), config)
            self._jobs[job.id] = job
            self._results[job.id] = []
            return job.copy()

    def get_job(self, job_id: int) -> Optional[CrawlJob]:
        with self._lock:
            job = self._jobs.get(job_id)
            return job.copy() if job else None

    def list_jobs(self) -> List[CrawlJob]:
        with self._lock:
            jobs = sorted(self._jobs.values(), key=lambda j: (j.created_at, j.id), reverse=True)
            return [j.copy() for j in jobs]

    def update_job(self, job_id: int, **fields) -> Optional[CrawlJob]:
        check_update_fields(fields)
        with self._lock:
            job = self._jobs.get(job_id)
            if not job:
                return None
            for name, value in fields.items():
                setattr(job, name, value)
            return job.copy()

    def create_result(self, result: CrawlResult) -> CrawlResult:
        with self._lock:
            if result.job_id not in self._jobs:
                raise ValueError(f"Crawl job {result.job_id} does not exist")
            stored = replace(result, id=next(self._result_ids))
            self._results[result.job_id].append(stored)
            return stored

    def list_results(self, job_id: int) -> List[CrawlResult]:
        with self._lock:
            return list(self._results.get(job_id, []))


class RepositoryJobStore:
    """`JobStore` backed by the SQLAlchemy repositories."""

    def __init__(self, jobs_repo, results_repo):
        self.jobs_repo = jobs_repo
        self.results_repo = results_repo

    def create_job(self, config: CrawlJobConfig) -> CrawlJob:
        return self.jobs_repo.create_job(config)

    def get_job(self, job_id: int) -> Optional[CrawlJob]:
        return self.jobs_repo.get_job(job_id)

    def list_jobs(self) -> List[CrawlJob]:
        return self.jobs_repo.list_jobs()

    def update_job(self, job_id: int, **fields) -> Optional[CrawlJob]:
        check_update_fields(fields)
        return self.jobs_repo.update_job(job_id, **fields)

    def create_result(self, result: CrawlResult) -> CrawlResult:
        return self.results_repo.create_result(result)

    def list_results(self, job_id: int) -> List[CrawlResult]:
        return self.results_repo.list_results(job_id)
