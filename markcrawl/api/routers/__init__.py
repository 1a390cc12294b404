"""API router factory functions."""
from .jobs import create_jobs_router
from .patterns import create_patterns_router
from .systems import create_systems_router

__all__ = [
    "create_jobs_router",
    "create_patterns_router",
    "create_systems_router",
]
