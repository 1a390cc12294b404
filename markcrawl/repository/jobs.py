from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from markcrawl.db.models import CrawlJob as DBCrawlJob
from markcrawl.domain import CrawlJob, CrawlJobConfig
from markcrawl.utils.datetime_utils import utc_now


class JobsRepository:
    """Repository for crawl job rows.

    Requires an explicit `session_factory` (callable returning a `Session`).
    """

    def __init__(self, session_factory):
        self.session_factory = session_factory

    def get_session(self) -> Session:
        return self.session_factory()

    @staticmethod
    def _to_domain(row: DBCrawlJob) -> CrawlJob:
        return CrawlJob(
            id=row.job_id,
            base_url=row.base_url,
            pattern_rules=list(row.pattern_rules or []),
            max_depth=row.max_depth,
            request_delay_ms=row.request_delay_ms,
            max_concurrent=row.max_concurrent,
            remove_navigation=row.remove_navigation,
            clean_formatting=row.clean_formatting,
            include_images=row.include_images,
            status=row.status,
            total_pages=row.total_pages,
            processed_pages=row.processed_pages,
            created_at=row.created_at,
        )

    def create_job(self, config: CrawlJobConfig) -> CrawlJob:
        with self.get_session() as session:
            row = DBCrawlJob(
                base_url=config.base_url,
                pattern_rules=list(config.pattern_rules),
                max_depth=config.max_depth,
                request_delay_ms=config.request_delay_ms,
                max_concurrent=config.max_concurrent,
                remove_navigation=config.remove_navigation,
                clean_formatting=config.clean_formatting,
                include_images=config.include_images,
                status="pending",
                total_pages=0,
                processed_pages=0,
                created_at=utc_now(),
            )
            session.add(row)
            session.commit()
            session.refresh(row)
            return self._to_domain(row)

    def get_job(self, job_id: int) -> Optional[CrawlJob]:
        with self.get_session() as session:
            row = session.get(DBCrawlJob, job_id)
            return self._to_domain(row) if row else None

    def list_jobs(self) -> List[CrawlJob]:
        """Return all jobs, newest first."""
        with self.get_session() as session:
            q = select(DBCrawlJob).order_by(DBCrawlJob.created_at.desc(), DBCrawlJob.job_id.desc())
            return [self._to_domain(r) for r in session.execute(q).scalars().all()]

    def update_job(self, job_id: int, **fields) -> Optional[CrawlJob]:
        with self.get_session() as session:
            # row lock so concurrent progress writes for one job apply in order
            q = select(DBCrawlJob).where(DBCrawlJob.job_id == job_id).with_for_update()
            row = session.execute(q).scalars().first()
            if not row:
                return None
            for name, value in fields.items():
                setattr(row, name, value)
            session.commit()
            session.refresh(row)
            return self._to_domain(row)
