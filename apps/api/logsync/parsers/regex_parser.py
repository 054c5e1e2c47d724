"""
Regex-configured parser - driven by an explicit FormatConfig.

Used for formats the layout mini-language cannot express, such as
tab-delimited or multi-field ISO 8601 logs.
"""

import re
from typing import Optional

from ..core.time import TimestampParser
from ..schemas.logs import FormatConfig, LogEntry, UNKNOWN
from .base import StructuredLineParser, group_or


class ConfigurableLogParser(StructuredLineParser):
    """Parses lines with a FormatConfig's regex and group indices."""

    def __init__(self, config: FormatConfig):
        self.config = config
        self.name = config.name
        self._first_line = re.compile(config.first_line_pattern)
        self._entry = re.compile(config.entry_regex)
        self._timestamps = TimestampParser.from_pattern(config.timestamp_format)

    def can_accept(self, first_line: Optional[str]) -> bool:
        if first_line is None:
            return False
        return self._first_line.fullmatch(first_line) is not None

    def parse_line(self, line: str, source_name: str) -> Optional[LogEntry]:
        match = self._entry.search(line)
        if match is None:
            return None

        config = self.config
        try:
            timestamp = None
            if config.timestamp_group != -1:
                timestamp = self._timestamps.parse(match.group(config.timestamp_group) or "")
        except ValueError:
            return None

        message = line
        if config.message_group != -1:
            message = match.group(config.message_group) or ""

        return LogEntry(
            timestamp=timestamp,
            level=group_or(match, config.level_group, UNKNOWN),
            thread=group_or(match, config.thread_group, UNKNOWN),
            logger_name=group_or(match, config.logger_group, UNKNOWN),
            source_ip=group_or(match, config.ip_group, UNKNOWN),
            message=message,
            source_file=source_name,
            raw_line=line,
        )
