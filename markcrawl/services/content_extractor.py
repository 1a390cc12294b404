import logging
from dataclasses import dataclass
from typing import Callable, Optional, Sequence

from bs4 import BeautifulSoup

from markcrawl.domain.extracted_page import ExtractedPage
from markcrawl.services.markdown_converter import MarkdownConverter

logger = logging.getLogger(__name__)

UNTITLED = "Untitled"


@dataclass(frozen=True)
class ContentExtractionRules:
    """CSS selector lists driving the cleaning steps, kept as data."""

    navigation_selectors: Sequence[str] = (
        "nav", "header", "footer",
        ".navigation", ".nav", ".menu", ".sidebar",
    )
    formatting_selectors: Sequence[str] = (
        "script", "style", "noscript", "iframe", "object", "embed",
        ".advertisement", ".ads", ".social-share", ".comments",
    )
    image_selectors: Sequence[str] = ("img",)
    # Joined into one selector list, so the earliest match in the document wins.
    main_content_selectors: Sequence[str] = (
        "article", "main", ".content", ".post-content", ".entry-content", ".article-content",
    )


class ContentExtractor:
    """Turns a rendered page into a title plus cleaned Markdown.

    Steps run in a fixed order: title, navigation removal, formatting
    cleanup, image removal, main-content selection, Markdown conversion.
    The title is read before anything is removed, so a `<title>` inside a
    stripped `<header>` still counts.
    """

    def __init__(
        self,
        rules: Optional[ContentExtractionRules] = None,
        markdown_converter: Optional[MarkdownConverter] = None,
        soup_factory: Optional[Callable[[str], BeautifulSoup]] = None,
    ):
        self.rules = rules or ContentExtractionRules()
        self._markdown = markdown_converter or MarkdownConverter()
        self._soup_factory = soup_factory or (lambda html: BeautifulSoup(html, "html.parser"))

    def extract(
        self,
        html: str,
        *,
        remove_navigation: bool = True,
        clean_formatting: bool = True,
        include_images: bool = False,
    ) -> ExtractedPage:
        soup = self._soup_factory(html or "")

        title = self._extract_title(soup)

        if remove_navigation:
            self._remove(soup, self.rules.navigation_selectors)
        if clean_formatting:
            self._remove(soup, self.rules.formatting_selectors)
        if not include_images:
            self._remove(soup, self.rules.image_selectors)

        main = self._select_main_content(soup)
        raw_html = main.decode_contents() if main is not None else ""
        markdown = self._markdown.convert(raw_html)
        return ExtractedPage(title=title, raw_html=raw_html, markdown=markdown)

    def _extract_title(self, soup: BeautifulSoup) -> str:
        for tag_name in ("title", "h1"):
            tag = soup.find(tag_name)
            if tag is not None:
                text = tag.get_text().strip()
                if text:
                    return text
        return UNTITLED

    def _remove(self, soup: BeautifulSoup, selectors: Sequence[str]) -> None:
        if not selectors:
            return
        removed = 0
        for element in soup.select(", ".join(selectors)):
            # a parent matched earlier in the list may already have taken this one out
            if element.decomposed:
                continue
            element.decompose()
            removed += 1
        logger.debug("Removed %d elements matching %s", removed, selectors)

    def _select_main_content(self, soup: BeautifulSoup):
        if self.rules.main_content_selectors:
            main = soup.select_one(", ".join(self.rules.main_content_selectors))
            if main is not None:
                return main
        body = soup.find("body")
        return body if body is not None else soup
