from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from markcrawl.db.models import CrawlResult as DBCrawlResult
from markcrawl.domain import CrawlResult


class ResultsRepository:
    """Append-only repository for per-page crawl results."""

    def __init__(self, session_factory):
        self.session_factory = session_factory

    @staticmethod
    def _sanitize_text(val: Optional[str]) -> Optional[str]:
        """Remove NUL (\x00) characters; Postgres TEXT columns cannot store them."""
        if isinstance(val, str):
            return val.replace("\x00", "")
        return val

    def get_session(self) -> Session:
        return self.session_factory()

    @staticmethod
    def _to_domain(row: DBCrawlResult) -> CrawlResult:
        return CrawlResult(
            id=row.result_id,
            job_id=row.job_id,
            url=row.url,
            title=row.title,
            raw_content=row.raw_content,
            markdown_content=row.markdown_content,
            byte_size=row.byte_size,
            status=row.status,
            error_message=row.error_message,
            created_at=row.created_at,
        )

    def create_result(self, result: CrawlResult) -> CrawlResult:
        markdown = self._sanitize_text(result.markdown_content)
        with self.get_session() as session:
            row = DBCrawlResult(
                job_id=result.job_id,
                url=result.url,
                title=self._sanitize_text(result.title),
                raw_content=self._sanitize_text(result.raw_content),
                markdown_content=markdown,
                # size of the stored, NUL-free markdown
                byte_size=len(markdown) if markdown else 0,
                status=result.status,
                error_message=self._sanitize_text(result.error_message),
                created_at=result.created_at,
            )
            session.add(row)
            session.commit()
            session.refresh(row)
            return self._to_domain(row)

    def list_results(self, job_id: int) -> List[CrawlResult]:
        """Return a job's results in creation order."""
        with self.get_session() as session:
            q = select(DBCrawlResult).where(DBCrawlResult.job_id == job_id).order_by(DBCrawlResult.result_id)
            return [self._to_domain(r) for r in session.execute(q).scalars().all()]
