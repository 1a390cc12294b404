from typing import Iterable, Set


class VisitedTracker:
    """
    Tracks which URLs have been fetched for link discovery during one job.

    The set only grows. Discovery relies on that to terminate on cyclic link
    graphs, so unlike a bounded cache nothing is ever evicted.
    """

    def __init__(self, urls: Iterable[str] = ()):
        self._visited: Set[str] = set(urls)

    def mark(self, url: str) -> None:
        """Mark a URL as visited."""
        self._visited.add(url)

    def is_visited(self, url: str) -> bool:
        """Check if a URL has been visited."""
        return url in self._visited

    def __contains__(self, url: object) -> bool:
        return url in self._visited

    def __len__(self) -> int:
        return len(self._visited)
