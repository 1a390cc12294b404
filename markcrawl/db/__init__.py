from .engine import make_engine, init_orm
from .models import Base, CrawlJob, CrawlResult

__all__ = [
    "make_engine",
    "init_orm",
    "Base",
    "CrawlJob",
    "CrawlResult",
]
