from __future__ import annotations


from sqlalchemy import JSON, Boolean, Column, DateTime, ForeignKey, Integer, Text, func
from sqlalchemy.orm import declarative_base, relationship


Base = declarative_base()


class CrawlJob(Base):
    __tablename__ = "crawl_jobs"

    job_id = Column(Integer, primary_key=True)
    base_url = Column(Text, nullable=False)
    pattern_rules = Column(JSON, nullable=False)
    max_depth = Column(Integer, nullable=False, default=2)
    request_delay_ms = Column(Integer, nullable=False, default=1000)
    max_concurrent = Column(Integer, nullable=False, default=2)
    remove_navigation = Column(Boolean, nullable=False, default=True)
    clean_formatting = Column(Boolean, nullable=False, default=True)
    include_images = Column(Boolean, nullable=False, default=False)
    status = Column(Text, nullable=False, default="pending")
    total_pages = Column(Integer, nullable=False, default=0)
    processed_pages = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    results = relationship("CrawlResult", back_populates="job", order_by="CrawlResult.result_id")


class CrawlResult(Base):
    __tablename__ = "crawl_results"

    result_id = Column(Integer, primary_key=True)
    job_id = Column(Integer, ForeignKey("crawl_jobs.job_id"), nullable=False, index=True)
    url = Column(Text, nullable=False)
    title = Column(Text, nullable=True)
    raw_content = Column(Text, nullable=True)
    markdown_content = Column(Text, nullable=True)
    byte_size = Column(Integer, nullable=False, default=0)
    status = Column(Text, nullable=False)
    error_message = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    job = relationship("CrawlJob", back_populates="results")
