from .jobs import JobsRepository
from .results import ResultsRepository

__all__ = ["JobsRepository", "ResultsRepository"]
