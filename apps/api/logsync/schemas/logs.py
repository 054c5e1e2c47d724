"""
Log entry and log format schemas.
"""

from datetime import datetime
from typing import List, Optional, Sequence

from pydantic import BaseModel, ConfigDict, Field

from ..core.time import format_time_of_day


UNKNOWN = "UNKNOWN"


class LogEntry(BaseModel):
    """One structured log record.

    Immutable. Continuation lines produce a new entry through
    ``append_message``.
    """

    model_config = ConfigDict(frozen=True)

    timestamp: Optional[datetime] = Field(None, description="Wall-clock timestamp, None for header/raw lines")
    level: str = ""
    thread: str = ""
    logger_name: str = ""
    source_ip: str = ""
    message: str = ""
    source_file: str = Field("", description="Logical origin, e.g. archive entry path")
    raw_line: str = Field("", description="First physical line of the record")

    @classmethod
    def header(cls, lines: Sequence[str], source_file: str) -> "LogEntry":
        """Collapse leading unstructured lines into a single entry."""
        text = "\n".join(lines)
        return cls(
            timestamp=None,
            level=UNKNOWN,
            thread=UNKNOWN,
            logger_name=UNKNOWN,
            source_ip=UNKNOWN,
            message=text,
            source_file=source_file,
            raw_line=text,
        )

    @property
    def has_timestamp(self) -> bool:
        return self.timestamp is not None

    @property
    def formatted_timestamp(self) -> str:
        return format_time_of_day(self.timestamp)

    @property
    def simple_logger_name(self) -> str:
        """Last segment of the logger name; "Foo.java:105" becomes "Foo:105"."""
        if not self.logger_name:
            return ""
        clean = self.logger_name.replace(".java:", ":")
        return clean.rsplit(".", 1)[-1]

    @property
    def simple_thread_name(self) -> str:
        """Last segment of the thread name, ignoring any method-call suffix."""
        if not self.thread:
            return ""
        clean = self.thread.split("(", 1)[0]
        return clean.rsplit(".", 1)[-1]

    def append_message(self, extra: str) -> "LogEntry":
        """Return a copy with ``extra`` appended to the message."""
        return self.model_copy(update={"message": self.message + extra})

    def compare(self, other: "LogEntry") -> int:
        """
        Compare by timestamp.

        Entries without a timestamp are unordered against everything (0).
        """
        if self.timestamp is None or other.timestamp is None:
            return 0
        if self.timestamp < other.timestamp:
            return -1
        if self.timestamp > other.timestamp:
            return 1
        return 0


def sort_entries(entries: Sequence[LogEntry]) -> List[LogEntry]:
    """
    Stable-sort entries by timestamp.

    Entries without a timestamp keep their positions; the timestamped
    entries are sorted into the remaining slots.
    """
    result = list(entries)
    slots = [i for i, e in enumerate(result) if e.timestamp is not None]
    ordered = sorted((result[i] for i in slots), key=lambda e: e.timestamp)
    for slot, entry in zip(slots, ordered):
        result[slot] = entry
    return result


class FormatConfig(BaseModel):
    """Regex-driven description of a log format.

    Group indices are 1-based; -1 means the field is absent.
    """

    model_config = ConfigDict(frozen=True)

    name: str
    first_line_pattern: str = Field(..., description="Quick accept/reject regex for the first line")
    entry_regex: str = Field(..., description="Full-line extraction regex")
    timestamp_format: str = Field(..., description="Java-style date pattern or ISO8601")
    timestamp_group: int = -1
    level_group: int = -1
    thread_group: int = -1
    logger_group: int = -1
    ip_group: int = -1
    message_group: int = -1
