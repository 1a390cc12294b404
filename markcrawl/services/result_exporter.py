import io
import logging
import re
import zipfile
from typing import BinaryIO, Iterable, List, Tuple

from markcrawl.domain.crawl_result import CrawlResult

logger = logging.getLogger(__name__)

_UNSAFE_CHARS_RE = re.compile(r"[^a-z0-9]", re.IGNORECASE)
MAX_NAME_LENGTH = 50


def sanitize_file_name(name: str) -> str:
    """Replace anything outside [a-z0-9] with `_`, lowercase, cut to 50 chars."""
    return _UNSAFE_CHARS_RE.sub("_", name).lower()[:MAX_NAME_LENGTH]


class ResultExporter:
    """Packs a job's successful Markdown results into a zip archive.

    Files are named `{n}-{sanitized title or url}.md`, where `n` is the
    1-based position of the result in the job's result list (error results
    keep their number, so gaps are expected).
    """

    def markdown_files(self, results: Iterable[CrawlResult]) -> List[Tuple[str, str]]:
        files = []
        for index, result in enumerate(results, start=1):
            if not result.is_success or not result.markdown_content:
                continue
            name = f"{index}-{sanitize_file_name(result.title or result.url)}.md"
            files.append((name, result.markdown_content))
        return files

    def write_zip(self, results: Iterable[CrawlResult], fileobj: BinaryIO) -> int:
        """Write the archive to `fileobj`; returns the number of files added."""
        files = self.markdown_files(results)
        with zipfile.ZipFile(fileobj, "w", compression=zipfile.ZIP_DEFLATED, compresslevel=9) as archive:
            for name, content in files:
                logger.debug("Adding %s (%d chars)", name, len(content))
                archive.writestr(name, content)
        logger.info("Added %d files to archive", len(files))
        return len(files)

    def build_zip(self, results: Iterable[CrawlResult]) -> bytes:
        buf = io.BytesIO()
        self.write_zip(results, buf)
        return buf.getvalue()
