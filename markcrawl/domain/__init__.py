"""Domain objects for MarkCrawl - explicit re-exports to satisfy linters."""
from .job import CrawlJob as CrawlJob
from .job import CrawlJobConfig as CrawlJobConfig
from .job import JobStatus as JobStatus
from .crawl_result import CrawlResult as CrawlResult
from .crawl_result import ResultStatus as ResultStatus
from .extracted_page import ExtractedPage as ExtractedPage
from .frontier import Frontier as Frontier
from .rendered_page import RenderedPage as RenderedPage
from .visited_tracker import VisitedTracker as VisitedTracker

__all__ = [
    "CrawlJob",
    "CrawlJobConfig",
    "JobStatus",
    "CrawlResult",
    "ResultStatus",
    "ExtractedPage",
    "Frontier",
    "RenderedPage",
    "VisitedTracker",
]
