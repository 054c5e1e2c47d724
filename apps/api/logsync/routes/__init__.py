"""
Routes package.

API endpoint routers for LogSync.
"""

from .health import router as health_router
from .ingest import router as ingest_router

__all__ = [
    "health_router",
    "ingest_router",
]
