"""
Pattern-based parser - driven by a compiled Logback/Log4j layout string.
"""

from typing import Optional

from ..schemas.logs import LogEntry, UNKNOWN
from .base import StructuredLineParser, group_or
from .pattern_compiler import compile_layout


class PatternBasedLogParser(StructuredLineParser):
    """Parses lines described by a layout such as ``%d{...} [%t] %level %msg``."""

    def __init__(self, layout: str, name: Optional[str] = None):
        self.layout = compile_layout(layout)
        self.name = name or f"Parameterized ({layout})"

    def can_accept(self, first_line: Optional[str]) -> bool:
        if first_line is None:
            return False
        return self.layout.regex.match(first_line) is not None

    def parse_line(self, line: str, source_name: str) -> Optional[LogEntry]:
        match = self.layout.regex.match(line)
        if match is None:
            return None

        compiled = self.layout
        timestamp = None
        if compiled.timestamp_group != -1:
            try:
                timestamp = compiled.timestamp_parser.parse(match.group(compiled.timestamp_group))
            except ValueError:
                # Shape matched but the date did not: not a new entry
                return None

        message = line
        if compiled.message_group != -1:
            message = match.group(compiled.message_group) or ""

        return LogEntry(
            timestamp=timestamp,
            level=group_or(match, compiled.level_group, UNKNOWN),
            thread=group_or(match, compiled.thread_group, UNKNOWN),
            logger_name=group_or(match, compiled.logger_group, UNKNOWN),
            source_ip=group_or(match, compiled.ip_group, UNKNOWN),
            message=message,
            source_file=source_name,
            raw_line=line,
        )
