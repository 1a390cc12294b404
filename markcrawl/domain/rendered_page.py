from typing import NamedTuple


class RenderedPage(NamedTuple):
    """Final DOM of a page after scripts have run."""
    url: str
    status_code: int
    html: str
