"""
Multi-pattern parser - for streams interleaving two or more emitters.

Example: a cluster manager and the database it supervises writing to the
same file, each with its own layout.
"""

from typing import List, Optional, Sequence

from ..schemas.logs import LogEntry
from .base import StructuredLineParser
from .pattern_parser import PatternBasedLogParser


class MultiPatternLogParser(StructuredLineParser):
    """Tries each delegate layout per line; the first full parse wins."""

    def __init__(self, name: str, layouts: Sequence[str]):
        self.name = name
        self.delegates: List[PatternBasedLogParser] = [PatternBasedLogParser(layout) for layout in layouts]

    def can_accept(self, first_line: Optional[str]) -> bool:
        if first_line is None:
            return False
        return any(delegate.can_accept(first_line) for delegate in self.delegates)

    def parse_line(self, line: str, source_name: str) -> Optional[LogEntry]:
        for delegate in self.delegates:
            entry = delegate.parse_line(line, source_name)
            if entry is not None:
                return entry
        return None
