import re
import textwrap
from typing import Callable, Optional

import html2text

_CODE_BLOCK_RE = re.compile(r"\[code\](.*?)\[/code\]", re.DOTALL)
_EXCESS_BLANK_LINES_RE = re.compile(r"\n{3,}")


def _default_converter_factory() -> html2text.HTML2Text:
    h = html2text.HTML2Text()
    h.body_width = 0
    h.ignore_links = False
    h.ignore_images = False
    h.ignore_emphasis = False
    h.bypass_tables = False
    # <pre> blocks come out wrapped in [code]...[/code] and get fenced below
    h.mark_code = True
    return h


class MarkdownConverter:
    """HTML fragment -> Markdown with ATX headings and fenced code blocks."""

    def __init__(self, converter_factory: Optional[Callable[[], html2text.HTML2Text]] = None):
        self._converter_factory = converter_factory or _default_converter_factory

    def convert(self, html: str) -> str:
        if not html:
            return ""
        # HTML2Text keeps state between feeds, so each document gets its own
        markdown = self._converter_factory().handle(html)
        markdown = _CODE_BLOCK_RE.sub(self._fence, markdown)
        markdown = _EXCESS_BLANK_LINES_RE.sub("\n\n", markdown)
        return markdown.strip()

    @staticmethod
    def _fence(match: "re.Match[str]") -> str:
        body = textwrap.dedent(match.group(1)).strip("\n")
        return f"```\n{body}\n```"
