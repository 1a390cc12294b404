import logging
import re
from typing import Iterable, List, Optional, Pattern, Tuple

logger = logging.getLogger(__name__)


def validate_pattern(pattern: str) -> Tuple[bool, Optional[str]]:
    """Report whether `pattern` compiles, and the compiler's message if it doesn't."""
    try:
        re.compile(pattern)
    except re.error as e:
        return False, str(e)
    return True, None


class PatternMatcher:
    """Pattern rules that select which discovered URLs become crawl targets.

    Rules are unanchored: a URL matches when any rule is found anywhere in it
    (`re.search`), so `/blog/` and `.*/blog/.*` select the same URLs.
    """

    def __init__(self, rules: Iterable[str]):
        self._rules: List[str] = list(rules)
        self._compiled: List[Pattern[str]] = [re.compile(rule) for rule in self._rules]

    def matches(self, url: str) -> bool:
        return any(pattern.search(url) for pattern in self._compiled)

    def __repr__(self):
        return f"<PatternMatcher rules={self._rules!r}>"
