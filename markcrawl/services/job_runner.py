from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Dict, List, Optional

from markcrawl.domain.job import CrawlJob, CrawlJobConfig

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class JobHandle:
    job_id: int
    task: "asyncio.Task[Optional[CrawlJob]]"

    def done(self) -> bool:
        return self.task.done()

    async def wait(self) -> Optional[CrawlJob]:
        """Wait for the job to finish; returns the final job, or None if the run crashed."""
        return await asyncio.shield(self.task)


class JobRunner:
    """Starts crawl jobs as background asyncio tasks.

    `submit()` returns immediately with a handle. Completion and failure are
    observed by polling the job store (or awaiting the handle); nothing the
    job does is raised back to the submitter.
    """

    def __init__(self, *, job_store, executor):
        self.job_store = job_store
        self.executor = executor
        self._tasks: Dict[int, "asyncio.Task[Optional[CrawlJob]]"] = {}

    def submit(self, config: CrawlJobConfig) -> JobHandle:
        """Create a pending job from `config` and start it. Needs a running event loop."""
        job = self.job_store.create_job(config)
        logger.info("Created crawl job %s for %s", job.id, job.base_url)
        return self.start(job.id)

    def start(self, job_id: int) -> JobHandle:
        if job_id in self._tasks:
            raise ValueError(f"Crawl job {job_id} is already running")
        loop = asyncio.get_running_loop()
        task = loop.create_task(self._run(job_id), name=f"crawl-job-{job_id}")
        self._tasks[job_id] = task
        task.add_done_callback(lambda _t: self._tasks.pop(job_id, None))
        return JobHandle(job_id=job_id, task=task)

    async def _run(self, job_id: int) -> Optional[CrawlJob]:
        try:
            return await self.executor.run(job_id)
        except asyncio.CancelledError:
            logger.warning("Crawl job %s was cancelled", job_id)
            raise
        except Exception:
            logger.exception("Crawl job %s could not be run", job_id)
            return None

    def list_active(self) -> List[int]:
        return sorted(self._tasks)

    async def shutdown(self) -> None:
        """Cancel whatever is still running; each job's render engine is released on the way out."""
        tasks = list(self._tasks.values())
        if not tasks:
            return
        logger.warning("Shutting down with %d crawl job(s) still running", len(tasks))
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
