"""Per-page crawl result data model."""
from __future__ import annotations

from dataclasses import asdict, dataclass, field
from datetime import datetime
from typing import Optional

from markcrawl.domain.extracted_page import ExtractedPage
from markcrawl.utils.datetime_utils import utc_now


class ResultStatus:
    SUCCESS = "success"
    ERROR = "error"


@dataclass(frozen=True)
class CrawlResult:
    """Outcome of fetching and extracting one discovered URL.

    Exactly one result exists per attempted URL. Results are append-only:
    the job store assigns `id` on creation and nothing mutates them afterwards.
    """

    job_id: int
    url: str
    status: str
    title: Optional[str] = None
    raw_content: Optional[str] = None
    markdown_content: Optional[str] = None
    byte_size: int = 0
    error_message: Optional[str] = None
    id: Optional[int] = None
    created_at: datetime = field(default_factory=utc_now)

    @classmethod
    def success(cls, job_id: int, url: str, page: ExtractedPage) -> "CrawlResult":
        return cls(
            job_id=job_id,
            url=url,
            status=ResultStatus.SUCCESS,
            title=page.title,
            raw_content=page.raw_html,
            markdown_content=page.markdown,
            byte_size=page.byte_size,
        )

    @classmethod
    def failure(cls, job_id: int, url: str, error_message: str) -> "CrawlResult":
        return cls(
            job_id=job_id,
            url=url,
            status=ResultStatus.ERROR,
            error_message=error_message,
        )

    @property
    def is_success(self) -> bool:
        return self.status == ResultStatus.SUCCESS

    def to_dict(self) -> dict:
        return asdict(self)
