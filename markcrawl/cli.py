"""MarkCrawl command line.

Usage:
    markcrawl crawl JOB.yml [--output results.zip]
    markcrawl validate-pattern PATTERN

A job file holds the same fields the HTTP API accepts:

    base_url: https://example.com
    pattern_rules:
      - /blog/
    max_depth: 2
    request_delay_ms: 1000
    max_concurrent: 2
    remove_navigation: true
    clean_formatting: true
    include_images: false
"""
import argparse
import asyncio
import logging
import sys
from typing import Optional, Sequence

import yaml

from markcrawl.container import Container
from markcrawl.domain.job import JobStatus
from markcrawl.exceptions import JobValidationError
from markcrawl.services.pattern_matcher import validate_pattern

logger = logging.getLogger("markcrawl.cli")


def load_job_file(path: str) -> dict:
    with open(path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f)
    return data or {}


async def run_job(container: Container, job_data: dict, output: Optional[str]) -> int:
    config = container.job_config_parser().parse(job_data)
    runner = container.job_runner()
    handle = runner.submit(config)
    job = await handle.wait()
    if job is None:
        logger.error("Crawl job %s did not run", handle.job_id)
        return 1

    results = container.job_store().list_results(job.id)
    failed = [r for r in results if not r.is_success]
    for r in failed:
        logger.warning("Failed %s: %s", r.url, r.error_message)

    if output:
        with open(output, "wb") as f:
            count = container.result_exporter().write_zip(results, f)
        logger.info("Wrote %d Markdown files to %s", count, output)

    logger.info(
        "Job %s %s: %d/%d pages processed, %d failed",
        job.id, job.status, job.processed_pages, job.total_pages, len(failed),
    )
    return 0 if job.status == JobStatus.COMPLETED else 1


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="markcrawl", description="Crawl a site and extract pages as Markdown.")
    parser.add_argument("--log-level", default=None, help="Log level (default: MARKCRAWL_LOG_LEVEL or INFO)")
    sub = parser.add_subparsers(dest="command", required=True)

    crawl = sub.add_parser("crawl", help="Run one crawl job described by a YAML file")
    crawl.add_argument("job_file", help="Path to the job YAML file")
    crawl.add_argument("--output", "-o", default=None, help="Write successful pages to this zip file")

    check = sub.add_parser("validate-pattern", help="Check that a pattern rule compiles")
    check.add_argument("pattern")
    return parser


def main(argv: Optional[Sequence[str]] = None, container: Optional[Container] = None) -> int:
    args = build_parser().parse_args(argv)
    container = container or Container()
    logging.basicConfig(
        level=args.log_level or container.config.MARKCRAWL_LOG_LEVEL() or "INFO",
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.command == "validate-pattern":
        valid, error = validate_pattern(args.pattern)
        if valid:
            print("valid")
            return 0
        print(f"invalid: {error}")
        return 1

    # the CLI runs a single job in-process, nothing to share with a server
    container.config.MARKCRAWL_JOB_STORE.from_value("memory")
    try:
        job_data = load_job_file(args.job_file)
    except (OSError, yaml.YAMLError) as e:
        logger.error("Could not read job file %s: %s", args.job_file, e)
        return 2
    try:
        return asyncio.run(run_job(container, job_data, args.output))
    except JobValidationError as e:
        for err in e.errors:
            logger.error("Invalid job: %s", err)
        return 2


if __name__ == "__main__":
    sys.exit(main())
