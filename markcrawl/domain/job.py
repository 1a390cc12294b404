from __future__ import annotations

from dataclasses import asdict, dataclass, field, replace
from datetime import datetime
from typing import Optional

from markcrawl.utils.datetime_utils import utc_now


class JobStatus:
    PENDING = "pending"
    RUNNING = "running"
    COMPLETED = "completed"
    ERROR = "error"

    # pending -> running -> completed | error; a failed start may go straight to error
    TRANSITIONS = {
        PENDING: (RUNNING, ERROR),
        RUNNING: (COMPLETED, ERROR),
        COMPLETED: (),
        ERROR: (),
    }

    @classmethod
    def can_transition(cls, current: str, new: str) -> bool:
        if current == new:
            return True
        return new in cls.TRANSITIONS.get(current, ())


# Submission bounds enforced by JobConfigParser.
MAX_DEPTH_RANGE = (1, 10)
REQUEST_DELAY_MS_RANGE = (100, 5000)
MAX_CONCURRENT_RANGE = (1, 5)


@dataclass(frozen=True)
class CrawlJobConfig:
    """What the operator asked for; immutable once a job is created."""

    base_url: str
    pattern_rules: tuple[str, ...]
    max_depth: int = 2
    request_delay_ms: int = 1000
    max_concurrent: int = 2
    remove_navigation: bool = True
    clean_formatting: bool = True
    include_images: bool = False

    @property
    def request_delay_seconds(self) -> float:
        return self.request_delay_ms / 1000.0


@dataclass
class CrawlJob:
    id: int
    base_url: str
    pattern_rules: list[str]
    max_depth: int = 2
    request_delay_ms: int = 1000
    max_concurrent: int = 2
    remove_navigation: bool = True
    clean_formatting: bool = True
    include_images: bool = False
    status: str = JobStatus.PENDING
    total_pages: int = 0
    processed_pages: int = 0
    created_at: datetime = field(default_factory=utc_now)

    @classmethod
    def from_config(cls, job_id: int, config: CrawlJobConfig, created_at: Optional[datetime] = None) -> "CrawlJob":
        return cls(
            id=job_id,
            base_url=config.base_url,
            pattern_rules=list(config.pattern_rules),
            max_depth=config.max_depth,
            request_delay_ms=config.request_delay_ms,
            max_concurrent=config.max_concurrent,
            remove_navigation=config.remove_navigation,
            clean_formatting=config.clean_formatting,
            include_images=config.include_images,
            created_at=created_at or utc_now(),
        )

    @property
    def config(self) -> CrawlJobConfig:
        return CrawlJobConfig(
            base_url=self.base_url,
            pattern_rules=tuple(self.pattern_rules),
            max_depth=self.max_depth,
            request_delay_ms=self.request_delay_ms,
            max_concurrent=self.max_concurrent,
            remove_navigation=self.remove_navigation,
            clean_formatting=self.clean_formatting,
            include_images=self.include_images,
        )

    def copy(self) -> "CrawlJob":
        return replace(self, pattern_rules=list(self.pattern_rules))

    def to_dict(self) -> dict:
        return asdict(self)

    def __repr__(self):
        return (
            f"<CrawlJob id={self.id} base_url={self.base_url} status={self.status} "
            f"progress={self.processed_pages}/{self.total_pages}>"
        )
