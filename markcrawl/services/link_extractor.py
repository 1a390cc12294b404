import logging
from typing import Callable, List, Optional
from urllib.parse import urljoin

from bs4 import BeautifulSoup

logger = logging.getLogger(__name__)


class LinkExtractor:
    """Pulls same-site links out of rendered HTML. No network access."""

    def __init__(self, soup_factory: Optional[Callable[[str], BeautifulSoup]] = None):
        self._soup_factory = soup_factory or (lambda html: BeautifulSoup(html, "html.parser"))

    def extract_links(self, html: str, origin_url: str, scope_url: str) -> List[str]:
        """Return unique absolute URLs from every `<a href>` in `html`.

        Hrefs resolve against `origin_url`; only results starting with
        `scope_url` are kept. Order follows the document.
        """
        if not html:
            return []
        soup = self._soup_factory(html)
        seen = set()
        links = []
        for a in soup.find_all("a", href=True):
            href = a.get("href", "").strip()
            if not href:
                continue
            try:
                abs_url = urljoin(origin_url, href)
            except ValueError:
                logger.debug("Skipping unparseable href %r on %s", href, origin_url)
                continue
            if not abs_url.startswith(scope_url):
                logger.debug("Skipping (out of scope) %s -> not under %s", abs_url, scope_url)
                continue
            if abs_url in seen:
                continue
            seen.add(abs_url)
            links.append(abs_url)
        return links
