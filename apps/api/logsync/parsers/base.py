"""
Line parser capability and the shared multiline/header state machine.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import BinaryIO, Callable, Iterable, List, Optional, Union

from ..schemas.logs import LogEntry
from .streams import iter_text_lines


# Turns one physical line into a new entry, or None when the line does not
# start one (no structural match, or a match whose fields fail to parse).
LineReader = Callable[[str, str], Optional[LogEntry]]


class LineParser(ABC):
    """
    A log format strategy.

    Implementations are immutable after construction and may be shared
    between threads. Parsers borrow the streams they are given and never
    close them.
    """

    name: str = ""

    @abstractmethod
    def can_accept(self, first_line: Optional[str]) -> bool:
        """Quick first-line test used to pick detection candidates."""

    @abstractmethod
    def parse_lines(self, lines: Iterable[str], source_name: str) -> List[LogEntry]:
        """Parse already decoded lines into ordered entries."""

    def parse_stream(self, stream: BinaryIO, source_name: str) -> List[LogEntry]:
        """Parse a UTF-8 byte stream into ordered entries."""
        return self.parse_lines(iter_text_lines(stream), source_name)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.name!r})"


@dataclass
class _Seeking:
    """No entry started yet; unmatched lines collect as header."""
    buffer: List[str] = field(default_factory=list)


@dataclass
class _Appending:
    """An entry is open; unmatched lines are its continuation."""
    entry: LogEntry
    continuation: List[str] = field(default_factory=list)

    def finish(self) -> LogEntry:
        if not self.continuation:
            return self.entry
        return self.entry.append_message("".join("\n" + line for line in self.continuation))


def assemble_entries(
    lines: Iterable[str],
    source_name: str,
    read_line: LineReader,
) -> List[LogEntry]:
    """
    Fold physical lines into logical entries.

    - Lines before the first entry collapse into one header entry.
    - Lines after an entry that do not start a new one are appended to
      its message, newline-separated.
    - A header with no entry after it is still emitted at end of stream.
    """
    entries: List[LogEntry] = []
    state: Union[_Seeking, _Appending] = _Seeking()

    for line in lines:
        entry = read_line(line, source_name)
        if entry is not None:
            if isinstance(state, _Appending):
                entries.append(state.finish())
            elif state.buffer:
                entries.append(LogEntry.header(state.buffer, source_name))
            state = _Appending(entry)
        elif isinstance(state, _Appending):
            state.continuation.append(line)
        else:
            state.buffer.append(line)

    if isinstance(state, _Appending):
        entries.append(state.finish())
    elif state.buffer:
        entries.append(LogEntry.header(state.buffer, source_name))

    return entries


class StructuredLineParser(LineParser):
    """A parser whose lines either start an entry or continue one."""

    @abstractmethod
    def parse_line(self, line: str, source_name: str) -> Optional[LogEntry]:
        """Return a new entry for ``line`` or None if it does not start one."""

    def parse_lines(self, lines: Iterable[str], source_name: str) -> List[LogEntry]:
        return assemble_entries(lines, source_name, self.parse_line)


def group_or(match, index: int, default: str) -> str:
    """Stripped value of a capture group; ``default`` if absent or unmatched."""
    if index == -1:
        return default
    value = match.group(index)
    if value is None:
        return default
    return value.strip()
