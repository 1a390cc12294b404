from collections import deque
from typing import Deque, Iterable, List


class Frontier:
    """FIFO of URLs waiting to be fetched for link discovery.

    Duplicates are kept: a page linked from two pages of the same wave is
    queued twice and takes two slots of a later wave. The second pop is
    skipped by the visited check, so it costs a slot but never a fetch.
    """

    def __init__(self, urls: Iterable[str] = ()):
        self._queue: Deque[str] = deque(urls)

    def push(self, url: str) -> None:
        self._queue.append(url)

    def pop_wave(self, size: int) -> List[str]:
        """Remove and return up to `size` URLs from the front of the queue."""
        if size < 1:
            raise ValueError("wave size must be >= 1")
        wave = []
        while self._queue and len(wave) < size:
            wave.append(self._queue.popleft())
        return wave

    def __len__(self) -> int:
        return len(self._queue)

    def __bool__(self) -> bool:
        return bool(self._queue)
