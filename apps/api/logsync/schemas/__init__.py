"""Schemas package."""

from .ingest import (
    IngestFolderRequest,
    ApplicationSummary,
    FolderIngestResponse,
    UploadIngestResponse,
)
from .logs import (
    LogEntry,
    FormatConfig,
    sort_entries,
    UNKNOWN,
)

__all__ = [
    # Ingest
    "IngestFolderRequest",
    "ApplicationSummary",
    "FolderIngestResponse",
    "UploadIngestResponse",
    # Logs
    "LogEntry",
    "FormatConfig",
    "sort_entries",
    "UNKNOWN",
]
