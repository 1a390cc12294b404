import asyncio
import logging
from typing import Awaitable, Callable

from markcrawl.domain.crawl_result import CrawlResult
from markcrawl.domain.job import CrawlJob, JobStatus
from markcrawl.exceptions import EngineError, FetchError, JobNotFoundError
from markcrawl.services.content_extractor import ContentExtractor
from markcrawl.services.fetcher import PageFetcher, RenderEngine
from markcrawl.services.job_progress import JobProgress
from markcrawl.services.rate_gate import RateGate
from markcrawl.services.url_discovery import UrlDiscoveryService

logger = logging.getLogger(__name__)


class CrawlJobExecutor:
    """Runs one crawl job from `pending` to `completed` or `error`.

    This class owns the job control-flow (discovery, the sequential
    extraction loop, progress and status updates). It intentionally does NOT
    construct dependencies (that stays in the DI layer).

    Per-page problems become error results and never stop the job. Only a
    failure of the render engine itself, or anything escaping discovery,
    moves the job to `error`. Once the job is running, no exception leaves
    `run()`; the returned job and the store are the only error channel.
    """

    def __init__(
        self,
        *,
        job_store,
        render_engine: RenderEngine,
        discovery_service: UrlDiscoveryService,
        content_extractor: ContentExtractor,
        gate_factory: Callable[[int, float], RateGate] = RateGate,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self.job_store = job_store
        self.render_engine = render_engine
        self.discovery_service = discovery_service
        self.content_extractor = content_extractor
        self.gate_factory = gate_factory
        self._sleep = sleep

    async def run(self, job_id: int) -> CrawlJob:
        job = self.job_store.get_job(job_id)
        if job is None:
            raise JobNotFoundError(job_id)
        if job.status != JobStatus.PENDING:
            raise ValueError(f"Crawl job {job_id} is {job.status}; only pending jobs can be started")

        progress = JobProgress(job, self.job_store)
        progress.start()
        logger.info(
            "Starting crawl job %s: base_url=%s patterns=%s max_depth=%s max_concurrent=%s delay_ms=%s",
            job.id, job.base_url, job.pattern_rules, job.max_depth, job.max_concurrent, job.request_delay_ms,
        )

        try:
            async with self.render_engine.session() as fetcher:
                delay = job.config.request_delay_seconds
                gate = self.gate_factory(job.max_concurrent, delay)
                urls = await self.discovery_service.discover(job.config, fetcher, gate)
                progress.set_total(len(urls))
                logger.info("Job %s discovered %d matching pages", job.id, len(urls))

                for url in urls:
                    await self._sleep(delay)
                    result = await self.extract_page(job, url, fetcher, gate)
                    progress.record(result)
        except Exception as e:
            logger.error("Crawl job %s failed: %s", job.id, e, exc_info=True)
            progress.fail()
            return progress.job

        progress.complete()
        logger.info(
            "Crawl job %s completed: %d/%d pages processed, %d store write failures",
            job.id, progress.job.processed_pages, progress.job.total_pages, progress.persistence_failures,
        )
        return progress.job

    async def extract_page(self, job: CrawlJob, url: str, fetcher: PageFetcher, gate: RateGate) -> CrawlResult:
        """Fetch and extract one URL, turning any per-page failure into an error result.

        `EngineError` is not a per-page failure and propagates.
        """
        try:
            async with gate.slot():
                page = await fetcher.fetch(url)
            extracted = await asyncio.to_thread(
                self.content_extractor.extract,
                page.html,
                remove_navigation=job.remove_navigation,
                clean_formatting=job.clean_formatting,
                include_images=job.include_images,
            )
        except EngineError:
            raise
        except FetchError as e:
            logger.warning("Fetch failed for %s: %s", url, e.reason)
            return CrawlResult.failure(job.id, url, str(e))
        except Exception as e:
            logger.error("Extraction error for %s: %s", url, e, exc_info=True)
            return CrawlResult.failure(job.id, url, str(e) or type(e).__name__)

        logger.info("Extracted %s -> %r (%d chars)", url, extracted.title, extracted.byte_size)
        return CrawlResult.success(job.id, url, extracted)
