import io
import zipfile

from markcrawl.domain.crawl_result import CrawlResult
from markcrawl.domain.extracted_page import ExtractedPage
from markcrawl.services.result_exporter import ResultExporter, sanitize_file_name


def _ok(url, title, markdown):
    return CrawlResult.success(1, url, ExtractedPage(title, "<p></p>", markdown))


def test_sanitize_file_name():
    assert sanitize_file_name("My Article! #1") == "my_article__1"
    assert sanitize_file_name("https://example.com/a") == "https___example_com_a"
    assert len(sanitize_file_name("x" * 80)) == 50


def test_zip_contains_only_successful_markdown():
    results = [
        _ok("https://example.com/a", "First Post", "# First"),
        CrawlResult.failure(1, "https://example.com/b", "timeout"),
        _ok("https://example.com/c", None, "# Third"),
        _ok("https://example.com/d", "Empty", ""),
    ]
    data = ResultExporter().build_zip(results)

    with zipfile.ZipFile(io.BytesIO(data)) as archive:
        names = archive.namelist()
        assert names == ["1-first_post.md", "3-https___example_com_c.md"]
        assert archive.read("1-first_post.md").decode() == "# First"
        assert archive.getinfo("1-first_post.md").compress_type == zipfile.ZIP_DEFLATED


def test_empty_result_list_gives_empty_archive():
    buf = io.BytesIO()
    assert ResultExporter().write_zip([], buf) == 0
    with zipfile.ZipFile(io.BytesIO(buf.getvalue())) as archive:
        assert archive.namelist() == []
