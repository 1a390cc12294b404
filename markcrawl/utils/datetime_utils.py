from datetime import datetime, timezone


def utc_now() -> datetime:
    """Current time as a UTC-naive datetime, the form stored in the job tables."""
    return datetime.now(timezone.utc).replace(tzinfo=None)
