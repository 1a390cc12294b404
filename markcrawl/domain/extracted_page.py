from typing import NamedTuple, Optional


class ExtractedPage(NamedTuple):
    """Cleaned content pulled out of one rendered page."""
    title: str
    raw_html: str
    markdown: Optional[str]

    @property
    def byte_size(self) -> int:
        # character count of the markdown, matching what gets written to disk
        return len(self.markdown) if self.markdown else 0
