from typing import Optional

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine

from markcrawl.db.models import Base

# One Engine (and connection pool) per process.
_ENGINE: Optional[Engine] = None


def make_engine(database_url: Optional[str] = None) -> Engine:
    """Return the process-wide Engine, creating it for `database_url` on first use.

    Only consulted when jobs are kept in the database; the in-memory job
    store never touches it.
    """
    global _ENGINE
    if not database_url:
        raise RuntimeError("DATABASE_URL not set")
    if _ENGINE is None:
        connect_args = {}
        if database_url.startswith("sqlite"):
            # the crawl engine writes from the event loop thread, the API reads from worker threads
            connect_args["check_same_thread"] = False
        _ENGINE = create_engine(database_url, future=True, connect_args=connect_args)
    return _ENGINE


def init_orm(engine: Engine) -> None:
    """Create the job tables if they do not exist yet."""
    Base.metadata.create_all(engine)
