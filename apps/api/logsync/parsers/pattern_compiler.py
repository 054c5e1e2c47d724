"""
Pattern compiler - turns Logback/Log4j layout strings into line regexes.

Supported placeholders:
    %d{format}         timestamp, format in Java date pattern syntax; captures
                       one token per space-separated part of the format
    %t, %thread        thread name
    %h                 host / client IP
    %level, %-5level   level (padding modifiers accepted)
    %logger{N}         logger name (length option ignored)
    %msg, %m           message (rest of the line)
    %n                 end of record, contributes nothing
    %c{...}, %config   skipped
    %%                 literal percent

Any other placeholder is ignored. Literal text is matched exactly, except
that a run of spaces matches any run of whitespace.
"""

import re
from dataclasses import dataclass
from typing import Optional, Pattern

from ..core.time import TimestampParser

# Logback's default when %d carries no option
DEFAULT_DATE_FORMAT = "yyyy-MM-dd HH:mm:ss,SSS"

_MODIFIER = re.compile(r"-?\d*(?:\.-?\d+)?")
_WORD = re.compile(r"[A-Za-z]*")
_WHITESPACE_RUN = re.compile(r"\s+")

_TIMESTAMP_WORDS = {"d", "date"}
_THREAD_WORDS = {"t", "thread"}
_HOST_WORDS = {"h"}
_LEVEL_WORDS = {"level", "le", "p"}
_LOGGER_WORDS = {"logger", "lo"}
_MESSAGE_WORDS = {"msg", "m", "message"}


@dataclass(frozen=True)
class CompiledLayout:
    """Regex and group map produced from a layout string."""

    layout: str
    regex: Pattern
    timestamp_group: int = -1
    level_group: int = -1
    thread_group: int = -1
    logger_group: int = -1
    ip_group: int = -1
    message_group: int = -1
    date_format: str = ""
    timestamp_parser: Optional[TimestampParser] = None


def _timestamp_regex(date_format: str) -> str:
    """Capture exactly as many whitespace-separated tokens as the date format has."""
    extra_tokens = len(_WHITESPACE_RUN.findall(date_format.strip()))
    return r"(\S+?" + r"(?:\s+\S+?)" * extra_tokens + ")"


def compile_layout(layout: str) -> CompiledLayout:
    """
    Compile a layout string.

    Args:
        layout: e.g. "%d{yyyy-MM-dd HH:mm:ss.SSS} [%t] %-5level %logger{36} - %msg%n"

    Returns:
        CompiledLayout with a ^...$ anchored regex and 1-based group indices
    """
    parts = []
    groups = {}
    date_format = ""
    next_group = 1
    i = 0
    n = len(layout)

    while i < n:
        c = layout[i]

        if c == " ":
            while i < n and layout[i] == " ":
                i += 1
            parts.append(r"\s+")
            continue

        if c != "%":
            parts.append(re.escape(c))
            i += 1
            continue

        i += 1
        if i >= n:
            break
        if layout[i] == "%":
            parts.append("%")
            i += 1
            continue

        i = _MODIFIER.match(layout, i).end()
        word = _WORD.match(layout, i).group()
        i += len(word)

        option = None
        if i < n and layout[i] == "{":
            end = layout.find("}", i)
            if end != -1:
                option = layout[i + 1:end]
                i = end + 1

        if word in _TIMESTAMP_WORDS:
            date_format = option or DEFAULT_DATE_FORMAT
            field_name, regex = "timestamp", _timestamp_regex(date_format)
        elif word in _THREAD_WORDS:
            field_name, regex = "thread", "(.*?)"
        elif word in _HOST_WORDS:
            field_name, regex = "ip", r"(\S+)"
        elif word in _LEVEL_WORDS:
            field_name, regex = "level", r"(\w+)"
        elif word in _LOGGER_WORDS:
            field_name, regex = "logger", "(.*?)"
        elif word in _MESSAGE_WORDS:
            field_name, regex = "message", "(.*)"
        else:
            # %n, %c{...} and unknown conversions emit nothing
            continue

        parts.append(regex)
        groups[f"{field_name}_group"] = next_group
        next_group += 1

    return CompiledLayout(
        layout=layout,
        regex=re.compile("^" + "".join(parts) + "$"),
        date_format=date_format,
        timestamp_parser=TimestampParser.from_pattern(date_format) if date_format else None,
        **groups,
    )
