"""
Ingest service - the single entry point for turning files into entries.

- Archives (.zip, .7z, .gz) go through the archive extractor
- Everything else goes straight to format detection
- Batches are parsed on a thread pool and grouped by application
"""

import asyncio
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, BinaryIO, Callable, Dict, Iterable, List, Optional, Union

from ..core.config import settings
from ..core.logging import get_logger
from ..parsers.archive import ArchiveExtractor
from ..parsers.detector import FormatDetector
from ..parsers.folder_loader import is_archive, scan_directory
from ..parsers.grouping import ApplicationGrouper, LogGroup
from ..schemas.logs import LogEntry

logger = get_logger(__name__)


# Progress callback type: (current, total, message, details)
ProgressCallback = Callable[[int, int, str, Dict[str, Any]], None]

PathOrStream = Union[str, Path, BinaryIO]


class IngestError(Exception):
    """A source could not be read (missing, unreadable, corrupt or over limits)."""


@dataclass
class GroupingResult:
    """Outcome of a batch: groups by application name plus per-file errors."""
    groups: Dict[str, LogGroup] = field(default_factory=dict)
    errors: List[str] = field(default_factory=list)
    files_processed: int = 0


class IngestService:
    """Dispatches sources to the extractor or detector and groups the results."""

    def __init__(
        self,
        detector: Optional[FormatDetector] = None,
        extractor: Optional[ArchiveExtractor] = None,
        max_workers: Optional[int] = None,
    ):
        self.detector = detector if detector is not None else FormatDetector()
        self.extractor = extractor if extractor is not None else ArchiveExtractor(self.detector)
        self.max_workers = max_workers if max_workers is not None else settings.ingest_max_workers
        self._progress_callback: Optional[ProgressCallback] = None

    def set_progress_callback(self, callback: Optional[ProgressCallback]) -> None:
        """Set a callback for progress updates."""
        self._progress_callback = callback

    def _report_progress(
        self,
        callback: Optional[ProgressCallback],
        current: int,
        total: int,
        message: str,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        """Report progress to callback if set."""
        if callback:
            callback(current, total, message, details or {})

    def ingest(self, source: PathOrStream, display_name: Optional[str] = None) -> List[LogEntry]:
        """
        Parse one file or stream into entries.

        Args:
            source: Path to a log/archive file, or an open binary stream
            display_name: Name used for format dispatch and stamped on the
                entries; defaults to the file name

        Returns:
            Entries in source order

        Raises:
            IngestError: The source could not be read
        """
        if isinstance(source, (str, Path)):
            path = Path(source)
            name = display_name or path.name
            try:
                with open(path, "rb") as f:
                    return self._dispatch(f, name)
            except Exception as e:
                raise IngestError(f"Failed to ingest {path}: {e}") from e

        name = display_name or Path(getattr(source, "name", "") or "stream").name
        try:
            return self._dispatch(source, name)
        except Exception as e:
            raise IngestError(f"Failed to ingest {name}: {e}") from e

    def _dispatch(self, stream: BinaryIO, name: str) -> List[LogEntry]:
        if is_archive(name):
            return self.extractor.load_stream(stream, name)
        return self.detector.parse(stream, name)

    def scan_directory(self, folder_path: Union[str, Path]) -> List[Path]:
        """Recognized log files and archives directly inside a folder."""
        return scan_directory(folder_path)

    def _expand_paths(self, paths: Iterable[Union[str, Path]], errors: List[str]) -> List[Path]:
        files: List[Path] = []
        for item in paths:
            path = Path(item)
            if path.is_dir():
                files.extend(scan_directory(path))
            elif path.is_file():
                files.append(path)
            else:
                error_msg = f"Path not found: {path}"
                logger.warning(error_msg)
                errors.append(error_msg)
        return files

    def group_by_application(
        self,
        paths: Iterable[Union[str, Path]],
        progress_callback: Optional[ProgressCallback] = None,
    ) -> GroupingResult:
        """
        Parse files and folders and group their entries by application.

        Files are parsed concurrently but merged in input order, so the
        result does not depend on scheduling. A file that fails is logged,
        recorded in ``errors`` and skipped.

        Args:
            paths: Files and/or folders (folders are scanned non-recursively)
            progress_callback: Optional callback for this call only; defaults to
                the one set with ``set_progress_callback``

        Returns:
            Finalized groups and per-file errors
        """
        callback = progress_callback or self._progress_callback

        result = GroupingResult()
        files = self._expand_paths(paths, result.errors)
        total_files = len(files)
        logger.info(f"Grouping {total_files} files by application")
        self._report_progress(callback, 0, total_files, "Starting ingestion", {"phase": "discovery"})

        grouper = ApplicationGrouper()
        if files:
            with ThreadPoolExecutor(max_workers=self.max_workers, thread_name_prefix="ingest") as executor:
                futures = [executor.submit(self.ingest, path) for path in files]
                for i, (path, future) in enumerate(zip(files, futures), 1):
                    try:
                        entries = future.result()
                    except IngestError as e:
                        error_msg = f"Error processing {path}: {e}"
                        logger.warning(error_msg)
                        result.errors.append(error_msg)
                        continue

                    grouper.add_entries(entries)
                    result.files_processed += 1
                    self._report_progress(callback, i, total_files, f"Processed {path.name}", {
                        "phase": "ingesting",
                        "file": path.name,
                        "entries": len(entries),
                    })

        result.groups = grouper.finalize()
        self._report_progress(callback, total_files, total_files, "Complete", {
            "phase": "complete",
            "applications": len(result.groups),
        })
        logger.info(
            f"Ingestion complete: {result.files_processed} files, "
            f"{len(result.groups)} applications, {len(result.errors)} errors"
        )
        return result

    async def group_by_application_async(
        self,
        paths: Iterable[Union[str, Path]],
        progress_callback: Optional[ProgressCallback] = None,
    ) -> GroupingResult:
        """Run ``group_by_application`` off the event loop."""
        return await asyncio.to_thread(self.group_by_application, list(paths), progress_callback)


# Global service instance
_ingest_service: Optional[IngestService] = None


def get_ingest_service() -> IngestService:
    """Get global ingest service instance."""
    global _ingest_service
    if _ingest_service is None:
        _ingest_service = IngestService()
    return _ingest_service
