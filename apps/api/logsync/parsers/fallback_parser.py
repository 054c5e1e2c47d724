"""
Fallback parser - every physical line becomes its own raw entry.
"""

from typing import Iterable, List, Optional

from ..schemas.logs import LogEntry
from .base import LineParser


class FallbackLogParser(LineParser):
    """Last resort when no format yields a timestamped entry."""

    name = "Fallback (Raw Lines)"

    def can_accept(self, first_line: Optional[str]) -> bool:
        return True

    def parse_lines(self, lines: Iterable[str], source_name: str) -> List[LogEntry]:
        return [LogEntry(message=line, source_file=source_name, raw_line=line) for line in lines]
