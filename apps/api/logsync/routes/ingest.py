"""
Ingest routes for folder and upload ingestion.
"""

import asyncio
import shutil
import tempfile
from pathlib import Path
from typing import Dict, Optional

from fastapi import APIRouter, File, HTTPException, Request, UploadFile

from ..core.config import settings
from ..core.logging import get_logger
from ..core.rate_limit import RATE_LIMITS, limiter
from ..parsers.folder_loader import is_supported_log_file, SUPPORTED_EXTENSIONS
from ..parsers.grouping import LogGroup, normalize_application_name
from ..schemas.ingest import (
    ApplicationSummary,
    FolderIngestResponse,
    IngestFolderRequest,
    UploadIngestResponse,
)
from ..services.ingest_service import IngestError, get_ingest_service

logger = get_logger(__name__)
router = APIRouter(prefix="/ingest", tags=["ingest"])


def _summarize(name: str, group: LogGroup) -> ApplicationSummary:
    timestamps = [e.timestamp for e in group.entries if e.timestamp is not None]
    return ApplicationSummary(
        name=name,
        file_count=group.file_count,
        source_files=sorted(group.source_files),
        entry_count=len(group.entries),
        first_timestamp=min(timestamps) if timestamps else None,
        last_timestamp=max(timestamps) if timestamps else None,
    )


@router.post("/from_folder", response_model=FolderIngestResponse)
@limiter.limit(RATE_LIMITS["ingest"])
async def ingest_from_folder(request: Request, payload: Optional[IngestFolderRequest] = None):
    """
    Parse every log file and archive in a folder and group by application.

    Reads supported files (.log, .txt, .zip, .7z, .gz) directly inside the
    folder; subfolders are not visited.
    """
    service = get_ingest_service()

    folder_path = settings.logs_folder_resolved
    if payload and payload.folder_path:
        folder_path = Path(payload.folder_path)

    if not folder_path.is_dir():
        raise HTTPException(status_code=400, detail=f"Folder not found: {folder_path}")

    try:
        result = await service.group_by_application_async([folder_path])
    except Exception as e:
        logger.error(f"Folder ingestion failed: {e}")
        raise HTTPException(status_code=500, detail=str(e))

    groups: Dict[str, LogGroup] = result.groups
    applications = [_summarize(name, group) for name, group in sorted(groups.items())]
    return FolderIngestResponse(
        success=not result.errors,
        applications=applications,
        errors=result.errors,
        message=f"Processed {result.files_processed} files into {len(applications)} applications",
    )


@router.post("/upload", response_model=UploadIngestResponse)
@limiter.limit(RATE_LIMITS["ingest"])
async def upload_log_file(request: Request, file: UploadFile = File(...)):
    """
    Upload and parse a single log file or archive.

    Accepts .log, .txt, .zip, .7z and .gz files.
    """
    service = get_ingest_service()

    file_name = Path(file.filename or "upload.log").name
    if not is_supported_log_file(file_name):
        raise HTTPException(
            status_code=400,
            detail=f"Invalid file type. Supported: {', '.join(SUPPORTED_EXTENSIONS)}"
        )

    tmp_path: Optional[Path] = None
    try:
        # Save to temp file
        with tempfile.NamedTemporaryFile(
            delete=False,
            suffix=Path(file_name).suffix,
            prefix="uploaded_",
        ) as tmp:
            shutil.copyfileobj(file.file, tmp)
            tmp_path = Path(tmp.name)

        entries = await asyncio.to_thread(service.ingest, tmp_path, file_name)

        return UploadIngestResponse(
            success=True,
            file_name=file_name,
            application=normalize_application_name(file_name),
            entries=entries,
            message=f"Parsed {file_name}: {len(entries)} entries",
        )
    except IngestError as e:
        logger.warning(f"Upload could not be parsed: {e}")
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.error(f"File upload failed: {e}")
        raise HTTPException(status_code=500, detail=str(e))
    finally:
        # Clean up temp file
        if tmp_path is not None and tmp_path.exists():
            tmp_path.unlink()
