"""
Application grouping - buckets entries by an application name derived
from the file they came from.

Rotation numbers, dates, versions and log/archive extensions are ignored,
so access.log, access.log.1 and access.log.2.gz share one group.
"""

import re
from dataclasses import dataclass, field
from pathlib import PurePosixPath
from typing import Dict, Iterable, List, Optional, Set

from ..schemas.logs import LogEntry, sort_entries


# Applied in order, repeatedly, until the name stops changing
_SUFFIX_PATTERNS = (
    re.compile(r"\.(gz|zip|7z|log|txt|bak|old|tmp)$", re.IGNORECASE),
    re.compile(r"\.\d+$"),
    re.compile(r"[-_.]?\d{4}[-_.]?\d{2}[-_.]?\d{2}$"),
    re.compile(r"[-_.]?[vV]?\d+(\.\d+)*$"),
)

_TRAILING_SEPARATORS = re.compile(r"[-_.]+$")


def normalize_application_name(file_name: str) -> str:
    """
    Derive an application name from a log file name.

    Examples:
        access.log.2.gz -> access
        my-app-1.0.0.log -> my-app
        server-2024-01-15.log -> server

    Falls back to ``file_name`` when nothing would be left.
    """
    name = file_name
    previous = None
    while name != previous:
        previous = name
        for pattern in _SUFFIX_PATTERNS:
            name = pattern.sub("", name)

    name = _TRAILING_SEPARATORS.sub("", name)
    return name or file_name


def source_base_name(source_file: str) -> str:
    """File name part of a source path; archive member paths may use either separator."""
    return PurePosixPath(source_file.replace("\\", "/")).name


@dataclass
class LogGroup:
    """Entries of one application plus the files that contributed them."""

    entries: List[LogEntry] = field(default_factory=list)
    source_files: Set[str] = field(default_factory=set)

    @property
    def file_count(self) -> int:
        return len(self.source_files)

    def add_entry(self, entry: LogEntry) -> None:
        self.entries.append(entry)

    def add_source_file(self, source_file: str) -> None:
        self.source_files.add(source_file)

    def finalize(self) -> "LogGroup":
        """Stable-sort the entries by timestamp."""
        self.entries = sort_entries(self.entries)
        return self


class ApplicationGrouper:
    """Accumulates entries into LogGroups keyed by application name."""

    def __init__(self):
        self.groups: Dict[str, LogGroup] = {}

    def add(self, entry: LogEntry, file_name: Optional[str] = None) -> str:
        """
        Add one entry.

        Args:
            entry: Parsed entry
            file_name: Originating file; defaults to the entry's source file

        Returns:
            The application name the entry was filed under
        """
        source_name = source_base_name(file_name if file_name is not None else entry.source_file)
        app_name = normalize_application_name(source_name)

        group = self.groups.get(app_name)
        if group is None:
            group = self.groups[app_name] = LogGroup()
        group.add_entry(entry)
        group.add_source_file(source_name)
        return app_name

    def add_entries(self, entries: Iterable[LogEntry]) -> None:
        for entry in entries:
            self.add(entry)

    def finalize(self) -> Dict[str, LogGroup]:
        """Sort every group and return them by application name."""
        for group in self.groups.values():
            group.finalize()
        return self.groups
