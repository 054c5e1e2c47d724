"""
Archive extractor - recursively unpacks zip, gzip and 7z containers.

Every text member is routed through the format detector. Members that fail
to open or parse are logged and skipped; failures on the top-level
container propagate. Nesting depth and the decompressed bytes read per
top-level archive are bounded.
"""

import gzip
import io
import os
import shutil
import tempfile
import zipfile
from pathlib import Path
from typing import BinaryIO, List, Optional, Union

import py7zr

from ..core.config import settings
from ..core.logging import get_logger
from ..schemas.logs import LogEntry
from .detector import FormatDetector
from .folder_loader import is_archive, is_supported_log_file, should_skip_extension

logger = get_logger(__name__)


class ArchiveLimitError(Exception):
    """Nesting depth or decompressed size budget exceeded."""


class _Budget:
    """Decompressed bytes allowed for one top-level archive, counted at every level."""

    def __init__(self, max_total_bytes: int):
        self.max_total_bytes = max_total_bytes
        self.used = 0

    def ensure(self, size: int) -> None:
        if self.used + size > self.max_total_bytes:
            raise ArchiveLimitError(
                f"Archive expands beyond {self.max_total_bytes} bytes"
            )

    def consume(self, size: int) -> None:
        self.ensure(size)
        self.used += size


class _MeteredReader(io.RawIOBase):
    """Borrowed view of a member stream that charges every read to the budget."""

    def __init__(self, source: BinaryIO, budget: _Budget):
        super().__init__()
        self._source = source
        self._budget = budget

    def readable(self) -> bool:
        return True

    def readinto(self, buffer) -> int:
        data = self._source.read(len(buffer))
        n = len(data)
        self._budget.consume(n)
        buffer[:n] = data
        return n


class ArchiveExtractor:
    """Expands archives and parses their text members."""

    def __init__(
        self,
        detector: Optional[FormatDetector] = None,
        max_depth: Optional[int] = None,
        max_total_bytes: Optional[int] = None,
        spool_max_bytes: Optional[int] = None,
    ):
        self.detector = detector if detector is not None else FormatDetector()
        self.max_depth = max_depth if max_depth is not None else settings.archive_max_depth
        self.max_total_bytes = (
            max_total_bytes if max_total_bytes is not None else settings.archive_max_total_bytes
        )
        self.spool_max_bytes = (
            spool_max_bytes if spool_max_bytes is not None else settings.archive_spool_max_bytes
        )

    def load(self, path: Union[str, Path]) -> List[LogEntry]:
        """Open an archive file and parse every log inside it."""
        path = Path(path)
        with open(path, "rb") as f:
            return self.load_stream(f, path.name)

    def load_stream(self, stream: BinaryIO, name: str) -> List[LogEntry]:
        """
        Parse every log inside an archive stream.

        The container type is taken from ``name``. The stream is borrowed
        and left open.

        Args:
            stream: Binary stream holding the archive
            name: Archive file name (.zip, .gz or .7z)

        Returns:
            Entries of all members, in member order

        Raises:
            ArchiveLimitError: Nesting or size limits exceeded
            ValueError: ``name`` is not a supported archive
        """
        if not is_archive(name):
            raise ValueError(f"Not a supported archive: {name}")
        budget = _Budget(self.max_total_bytes)
        lower = name.lower()
        if lower.endswith(".7z") and stream.seekable():
            self._check_depth(1, name)
            return self._load_7z(stream, budget, depth=1)
        return self._load_container(stream, name, budget, depth=1)

    def _check_depth(self, depth: int, name: str) -> None:
        if depth > self.max_depth:
            logger.warning(f"Archive nesting limit ({self.max_depth}) reached at {name}")
            raise ArchiveLimitError(f"Archive nested deeper than {self.max_depth} levels: {name}")

    def _load_member(self, stream: BinaryIO, name: str, budget: _Budget, depth: int) -> List[LogEntry]:
        """Parse one member: recurse into archives, detect everything else."""
        if is_archive(name):
            return self._load_container(stream, name, budget, depth + 1)
        return self.detector.parse(_MeteredReader(stream, budget), name)

    def _load_container(self, stream: BinaryIO, name: str, budget: _Budget, depth: int) -> List[LogEntry]:
        self._check_depth(depth, name)
        lower = name.lower()
        if lower.endswith(".zip"):
            return self._load_zip(stream, budget, depth)
        if lower.endswith(".gz"):
            return self._load_gzip(stream, name, budget, depth)
        return self._load_staged_7z(stream, budget, depth)

    def _accept_member(self, name: str) -> bool:
        """Skip-listed members are only kept when they are nested archives."""
        if should_skip_extension(name) and not is_supported_log_file(name):
            logger.debug(f"Skipping archive member: {name}")
            return False
        return True

    def _load_zip(self, stream: BinaryIO, budget: _Budget, depth: int) -> List[LogEntry]:
        # zipfile needs random access; nested or unseekable input is staged first
        if depth > 1 or not stream.seekable():
            with tempfile.SpooledTemporaryFile(max_size=self.spool_max_bytes) as spool:
                shutil.copyfileobj(_MeteredReader(stream, budget), spool)
                spool.seek(0)
                return self._read_zip(spool, budget, depth)
        return self._read_zip(stream, budget, depth)

    def _read_zip(self, stream: BinaryIO, budget: _Budget, depth: int) -> List[LogEntry]:
        entries: List[LogEntry] = []
        with zipfile.ZipFile(stream) as archive:
            for info in archive.infolist():
                if info.is_dir() or not self._accept_member(info.filename):
                    continue
                try:
                    budget.ensure(info.file_size)
                    with archive.open(info) as member:
                        entries.extend(self._load_member(member, info.filename, budget, depth))
                except ArchiveLimitError:
                    raise
                except Exception as e:
                    logger.warning(f"Failed to read archive entry {info.filename}: {e}")
        return entries

    def _load_gzip(self, stream: BinaryIO, name: str, budget: _Budget, depth: int) -> List[LogEntry]:
        inner_name = name[:-3] if name.lower().endswith(".gz") else name
        with gzip.GzipFile(fileobj=stream, mode="rb") as inner:
            # app.log.gz is parsed as app.log, logs.zip.gz is opened as a zip
            if is_supported_log_file(inner_name):
                return self._load_member(inner, inner_name, budget, depth)
            return self.detector.parse(_MeteredReader(inner, budget), name)

    def _load_staged_7z(self, stream: BinaryIO, budget: _Budget, depth: int) -> List[LogEntry]:
        """Copy a 7z stream to a temporary file, parse it, always delete it."""
        staged = tempfile.NamedTemporaryFile(prefix="nested-", suffix=".7z", delete=False)
        try:
            with staged:
                shutil.copyfileobj(_MeteredReader(stream, budget), staged)
            with open(staged.name, "rb") as f:
                return self._load_7z(f, budget, depth)
        finally:
            os.unlink(staged.name)

    def _load_7z(self, source: BinaryIO, budget: _Budget, depth: int) -> List[LogEntry]:
        entries: List[LogEntry] = []
        with tempfile.TemporaryDirectory(prefix="logsync-7z-") as workdir:
            with py7zr.SevenZipFile(source, mode="r") as archive:
                members = [info for info in archive.list() if not info.is_directory]
                budget.ensure(sum(info.uncompressed or 0 for info in members))
                archive.extractall(path=workdir)

            for info in members:
                name = info.filename
                if not self._accept_member(name):
                    continue
                target = Path(workdir) / name
                if not target.is_file():
                    continue
                try:
                    with open(target, "rb") as member:
                        entries.extend(self._load_member(member, name, budget, depth))
                except ArchiveLimitError:
                    raise
                except Exception as e:
                    logger.warning(f"Failed to read archive entry {name}: {e}")
        return entries
