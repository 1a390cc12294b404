import asyncio
import logging
from typing import Dict, List, Optional

from markcrawl.domain.frontier import Frontier
from markcrawl.domain.job import CrawlJobConfig
from markcrawl.domain.visited_tracker import VisitedTracker
from markcrawl.exceptions import EngineError, FetchError
from markcrawl.services.fetcher import PageFetcher
from markcrawl.services.link_extractor import LinkExtractor
from markcrawl.services.pattern_matcher import PatternMatcher
from markcrawl.services.rate_gate import RateGate

logger = logging.getLogger(__name__)


class UrlDiscoveryService:
    """Breadth-first, wave-based discovery of crawl targets.

    Starting from the job's base URL, each wave takes up to `max_concurrent`
    URLs off the frontier, fetches them concurrently through the gate and
    queues every same-site link that has not been visited yet. Links that
    match a pattern rule are collected as crawl targets. Traversal stops
    after `max_depth` waves or when the frontier runs dry.

    The base URL is only a starting point: it is never tested against the
    pattern rules, so it becomes a target only if a page links back to it.
    """

    def __init__(self, link_extractor: Optional[LinkExtractor] = None):
        self.link_extractor = link_extractor or LinkExtractor()

    async def discover(self, config: CrawlJobConfig, fetcher: PageFetcher, gate: RateGate) -> List[str]:
        matcher = PatternMatcher(config.pattern_rules)
        visited = VisitedTracker()
        frontier = Frontier([config.base_url])
        # dict keeps insertion order, which becomes the processing order
        discovered: Dict[str, None] = {}

        waves = 0
        while frontier and waves < config.max_depth:
            wave = []
            for url in frontier.pop_wave(config.max_concurrent):
                if visited.is_visited(url):
                    logger.debug("Skipping (visited) %s", url)
                    continue
                visited.mark(url)
                wave.append(url)

            results = await asyncio.gather(
                *(self._links_from(url, config.base_url, fetcher, gate) for url in wave),
                return_exceptions=True,
            )
            for result in results:
                if isinstance(result, BaseException):
                    raise result
                for link in result:
                    if visited.is_visited(link):
                        continue
                    frontier.push(link)
                    if link not in discovered and matcher.matches(link):
                        discovered[link] = None

            waves += 1
            logger.info(
                "Discovery wave %d/%d: fetched=%d visited=%d frontier=%d discovered=%d",
                waves, config.max_depth, len(wave), len(visited), len(frontier), len(discovered),
            )

        return list(discovered)

    async def _links_from(self, url: str, scope_url: str, fetcher: PageFetcher, gate: RateGate) -> List[str]:
        try:
            async with gate.slot():
                page = await fetcher.fetch(url)
            # CPU-bound; runs in a worker thread
            return await asyncio.to_thread(self.link_extractor.extract_links, page.html, url, scope_url)
        except EngineError:
            raise
        except FetchError as e:
            logger.warning("Discovery fetch failed for %s: %s", url, e.reason)
            return []
        except Exception as e:
            logger.error("Error discovering URLs from %s: %s", url, e, exc_info=True)
            return []
