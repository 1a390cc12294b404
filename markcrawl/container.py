"""Dependency injection container for the application."""
from dependency_injector import containers, providers
from sqlalchemy.orm import sessionmaker

from markcrawl import config as env
from markcrawl.db.engine import make_engine
from markcrawl.repository.jobs import JobsRepository
from markcrawl.repository.results import ResultsRepository
from markcrawl.services.content_extractor import ContentExtractor
from markcrawl.services.crawl_executor import CrawlJobExecutor
from markcrawl.services.headless_browser_fetcher import PlaywrightHeadlessOptions, PlaywrightRenderEngine
from markcrawl.services.job_config_parser import JobConfigParser
from markcrawl.services.job_runner import JobRunner
from markcrawl.services.job_store import InMemoryJobStore, RepositoryJobStore
from markcrawl.services.link_extractor import LinkExtractor
from markcrawl.services.markdown_converter import MarkdownConverter
from markcrawl.services.result_exporter import ResultExporter
from markcrawl.services.url_discovery import UrlDiscoveryService


# Environment variables used by the container (read via `markcrawl.config` helpers).
#
# DATABASE_URL (str | optional)
#   SQLAlchemy connection string. Only needed when MARKCRAWL_JOB_STORE=database.
#
# MARKCRAWL_JOB_STORE (str, default: "memory")
#   "memory" keeps jobs and results in process; "database" writes them through
#   the SQLAlchemy repositories. Normalized with `.strip().lower()`.
#
# USER_AGENT (str, default: "MarkCrawl/0.1")
#   User-Agent the headless browser presents.
#
# MARKCRAWL_FETCH_TIMEOUT_MS (int milliseconds, default: 30000)
#   Navigation timeout for a single page render.
#
# MARKCRAWL_HEADLESS (bool, default: true)
#   Set to false to watch Chromium work while debugging.
#
# MARKCRAWL_HOST / MARKCRAWL_PORT (str / int, default: "0.0.0.0" / 8000)
#   Bind address for the API server started by run.py.
#
# MARKCRAWL_LOG_LEVEL (str, default: "INFO")
#   Root log level configured by the entry points.
ENV = {
    "DATABASE_URL": env.get_optional_str_env("DATABASE_URL"),
    "MARKCRAWL_JOB_STORE": env.get_str_env("MARKCRAWL_JOB_STORE", "memory").strip().lower(),
    "USER_AGENT": env.get_str_env("USER_AGENT", "MarkCrawl/0.1"),
    "MARKCRAWL_FETCH_TIMEOUT_MS": env.get_int_env("MARKCRAWL_FETCH_TIMEOUT_MS", 30_000),
    "MARKCRAWL_HEADLESS": env.get_bool_env("MARKCRAWL_HEADLESS", True),
    "MARKCRAWL_HOST": env.get_str_env("MARKCRAWL_HOST", "0.0.0.0"),
    "MARKCRAWL_PORT": env.get_int_env("MARKCRAWL_PORT", 8000),
    "MARKCRAWL_LOG_LEVEL": env.get_str_env("MARKCRAWL_LOG_LEVEL", "INFO").strip().upper(),
}


class Container(containers.DeclarativeContainer):
    """Dependency injection container for MarkCrawl application."""

    # Configuration
    config = providers.Configuration(default=ENV)

    # Database engine - Singleton to reuse connection pool
    db_engine = providers.Singleton(
        make_engine,
        database_url=config.DATABASE_URL
    )
    # Session factory bound to the engine
    session_factory = providers.Factory(
        sessionmaker,
        bind=db_engine,
        future=True
    )

    # Repositories - Singleton instances
    jobs_repository = providers.Singleton(
        JobsRepository,
        session_factory=session_factory
    )

    results_repository = providers.Singleton(
        ResultsRepository,
        session_factory=session_factory
    )

    job_store = providers.Selector(
        config.MARKCRAWL_JOB_STORE,
        memory=providers.Singleton(InMemoryJobStore),
        database=providers.Singleton(
            RepositoryJobStore,
            jobs_repo=jobs_repository,
            results_repo=results_repository,
        ),
    )

    # Services - Singleton instances
    render_engine = providers.Singleton(
        PlaywrightRenderEngine,
        user_agent=config.USER_AGENT.as_(str),
        options=providers.Factory(
            PlaywrightHeadlessOptions,
            timeout_ms=config.MARKCRAWL_FETCH_TIMEOUT_MS.as_(int),
            headless=config.MARKCRAWL_HEADLESS.as_(bool),
        ),
    )

    link_extractor = providers.Singleton(
        LinkExtractor
    )

    discovery_service = providers.Singleton(
        UrlDiscoveryService,
        link_extractor=link_extractor,
    )

    markdown_converter = providers.Singleton(
        MarkdownConverter
    )

    content_extractor = providers.Singleton(
        ContentExtractor,
        markdown_converter=markdown_converter,
    )

    crawl_executor = providers.Singleton(
        CrawlJobExecutor,
        job_store=job_store,
        render_engine=render_engine,
        discovery_service=discovery_service,
        content_extractor=content_extractor,
    )

    job_runner = providers.Singleton(
        JobRunner,
        job_store=job_store,
        executor=crawl_executor,
    )

    job_config_parser = providers.Singleton(
        JobConfigParser
    )

    result_exporter = providers.Singleton(
        ResultExporter
    )
