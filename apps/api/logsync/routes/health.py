"""
Health check routes.
"""

from fastapi import APIRouter

from .. import __version__
from ..parsers.registry import get_default_registry

router = APIRouter(tags=["health"])


@router.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "ok"}


@router.get("/")
async def root():
    """Root endpoint."""
    return {
        "name": "LogSync",
        "version": __version__,
        "status": "running",
        "formats": [parser.name for parser in get_default_registry()],
    }
