"""Services package."""

from .ingest_service import (
    GroupingResult,
    IngestError,
    IngestService,
    get_ingest_service,
)

__all__ = [
    "GroupingResult",
    "IngestError",
    "IngestService",
    "get_ingest_service",
]
