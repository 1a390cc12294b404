import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from markcrawl.api.routers import create_jobs_router, create_patterns_router, create_systems_router
from markcrawl.db.engine import init_orm

logger = logging.getLogger(__name__)


def create_app(container) -> FastAPI:
    """Build the FastAPI app from a configured `Container`."""
    job_store = container.job_store()
    job_runner = container.job_runner()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if container.config.MARKCRAWL_JOB_STORE() == "database":
            init_orm(container.db_engine())
            logger.info("Job tables ready")
        yield
        await job_runner.shutdown()

    app = FastAPI(title="MarkCrawl", lifespan=lifespan)
    app.include_router(
        create_jobs_router(
            job_store,
            job_runner,
            container.job_config_parser(),
            container.result_exporter(),
        )
    )
    app.include_router(create_patterns_router())
    app.include_router(create_systems_router(container.config(), job_runner))
    return app
