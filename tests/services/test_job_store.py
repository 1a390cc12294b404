from datetime import timedelta
from unittest.mock import Mock

import pytest

from markcrawl.domain.crawl_result import CrawlResult
from markcrawl.domain.extracted_page import ExtractedPage
from markcrawl.domain.job import JobStatus
from markcrawl.services.job_store import InMemoryJobStore, RepositoryJobStore


def test_create_assigns_increasing_ids(job_store, make_config):
    first = job_store.create_job(make_config())
    second = job_store.create_job(make_config(base_url="https://example.org"))
    assert (first.id, second.id) == (1, 2)
    assert first.status == JobStatus.PENDING
    assert job_store.get_job(2).base_url == "https://example.org"
    assert job_store.get_job(3) is None


def test_list_jobs_newest_first(job_store, make_config):
    first = job_store.create_job(make_config())
    second = job_store.create_job(make_config())
    # force distinct timestamps regardless of clock resolution
    job_store._jobs[first.id].created_at = second.created_at - timedelta(seconds=1)
    assert [j.id for j in job_store.list_jobs()] == [second.id, first.id]


def test_returned_jobs_are_copies(job_store, make_config):
    job = job_store.create_job(make_config())
    job.status = JobStatus.ERROR
    job.pattern_rules.append("extra")
    stored = job_store.get_job(job.id)
    assert stored.status == JobStatus.PENDING
    assert stored.pattern_rules == [r".*\/blog\/.*"]


def test_update_job_only_touches_engine_fields(job_store, make_config):
    job = job_store.create_job(make_config())
    updated = job_store.update_job(job.id, status=JobStatus.RUNNING, total_pages=4)
    assert updated.status == JobStatus.RUNNING
    assert updated.total_pages == 4
    with pytest.raises(ValueError):
        job_store.update_job(job.id, base_url="https://evil.example")
    assert job_store.update_job(42, status=JobStatus.RUNNING) is None


def test_results_are_kept_in_creation_order(job_store, make_config):
    job = job_store.create_job(make_config())
    ok = job_store.create_result(
        CrawlResult.success(job.id, "https://example.com/a", ExtractedPage("A", "<p>a</p>", "a"))
    )
    failed = job_store.create_result(CrawlResult.failure(job.id, "https://example.com/b", "timeout"))
    assert ok.id is not None and failed.id is not None
    assert [r.url for r in job_store.list_results(job.id)] == ["https://example.com/a", "https://example.com/b"]
    assert job_store.list_results(99) == []


def test_result_for_unknown_job_rejected(job_store):
    with pytest.raises(ValueError):
        job_store.create_result(CrawlResult.failure(5, "https://example.com", "x"))


def test_repository_store_delegates_and_checks_fields():
    jobs_repo = Mock()
    results_repo = Mock()
    store = RepositoryJobStore(jobs_repo, results_repo)

    store.get_job(3)
    jobs_repo.get_job.assert_called_once_with(3)
    store.update_job(3, processed_pages=1)
    jobs_repo.update_job.assert_called_once_with(3, processed_pages=1)
    store.list_results(3)
    results_repo.list_results.assert_called_once_with(3)

    with pytest.raises(ValueError):
        store.update_job(3, max_depth=9)
    assert jobs_repo.update_job.call_count == 1


def test_in_memory_store_is_fresh_per_instance(make_config):
    a, b = InMemoryJobStore(), InMemoryJobStore()
    a.create_job(make_config())
    assert b.list_jobs() == []
