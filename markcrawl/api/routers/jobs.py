import logging
from typing import List, Optional

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel
from starlette.responses import Response

from markcrawl.exceptions import JobValidationError
from markcrawl.services.job_config_parser import JobConfigParser
from markcrawl.services.job_runner import JobRunner
from markcrawl.services.result_exporter import ResultExporter

logger = logging.getLogger(__name__)


class CrawlJobRequest(BaseModel):
    base_url: Optional[str] = None
    pattern_rules: Optional[List[str]] = None
    max_depth: Optional[int] = None
    request_delay_ms: Optional[int] = None
    max_concurrent: Optional[int] = None
    remove_navigation: Optional[bool] = None
    clean_formatting: Optional[bool] = None
    include_images: Optional[bool] = None


def create_jobs_router(job_store, job_runner: JobRunner, job_config_parser: JobConfigParser, result_exporter: ResultExporter):
    router = APIRouter(prefix="/api/crawl-jobs", tags=["Crawl jobs"])

    def _get_job_or_404(job_id: int):
        try:
            job = job_store.get_job(job_id)
        except Exception:
            logger.exception("Could not load crawl job %s", job_id)
            job = None
        if not job:
            raise HTTPException(status_code=404, detail="job not found")
        return job

    @router.post("", status_code=201)
    async def create_job(req: CrawlJobRequest):
        # bounds are checked by the parser so the API and the CLI agree on them
        try:
            config = job_config_parser.parse(req.model_dump(exclude_none=True))
        except JobValidationError as e:
            raise HTTPException(status_code=400, detail={"message": "Invalid input", "errors": e.errors})
        try:
            handle = job_runner.submit(config)
        except Exception:
            logger.exception("Could not create crawl job for %s", config.base_url)
            raise HTTPException(status_code=500, detail="failed to create crawl job")
        return _get_job_or_404(handle.job_id).to_dict()

    @router.get("")
    def list_jobs():
        try:
            jobs = job_store.list_jobs()
        except Exception:
            logger.exception("Could not list crawl jobs")
            raise HTTPException(status_code=500, detail="failed to fetch crawl jobs")
        return [j.to_dict() for j in jobs]

    @router.get("/{job_id}")
    def get_job(job_id: int):
        return _get_job_or_404(job_id).to_dict()

    @router.get("/{job_id}/results")
    def list_results(job_id: int):
        _get_job_or_404(job_id)
        try:
            results = job_store.list_results(job_id)
        except Exception:
            logger.exception("Could not list results for crawl job %s", job_id)
            raise HTTPException(status_code=500, detail="failed to fetch crawl results")
        return [r.to_dict() for r in results]

    @router.get(
        "/{job_id}/download",
        responses={
            200: {
                "content": {"application/zip": {"schema": {"type": "string", "format": "binary"}}},
                "description": "Zip archive with one Markdown file per successful page",
            }
        },
    )
    def download(job_id: int):
        _get_job_or_404(job_id)
        try:
            results = job_store.list_results(job_id)
            payload = result_exporter.build_zip(results)
        except Exception:
            logger.exception("Could not build archive for crawl job %s", job_id)
            raise HTTPException(status_code=500, detail="failed to generate download")
        return Response(
            content=payload,
            media_type="application/zip",
            headers={"Content-Disposition": f'attachment; filename="crawl-results-{job_id}.zip"'},
        )

    return router
