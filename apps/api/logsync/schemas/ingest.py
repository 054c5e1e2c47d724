"""
Ingest schemas for file and folder ingestion.
"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field

from .logs import LogEntry


class IngestFolderRequest(BaseModel):
    """Request body for /ingest/from_folder endpoint."""

    folder_path: Optional[str] = Field(
        None,
        description="Folder path override (defaults to the configured logs folder)"
    )


class ApplicationSummary(BaseModel):
    """One application bucket produced by grouping."""

    name: str
    file_count: int
    source_files: List[str] = Field(default_factory=list)
    entry_count: int
    first_timestamp: Optional[datetime] = None
    last_timestamp: Optional[datetime] = None


class FolderIngestResponse(BaseModel):
    """Response from folder ingestion."""

    success: bool
    applications: List[ApplicationSummary] = Field(default_factory=list)
    errors: List[str] = Field(default_factory=list, description="Inputs that could not be read")
    message: str = Field(default="Ingestion completed")


class UploadIngestResponse(BaseModel):
    """Response from single file upload."""

    success: bool
    file_name: str
    application: str
    entries: List[LogEntry] = Field(default_factory=list)
    message: str = Field(default="Ingestion completed")
