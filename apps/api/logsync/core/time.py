"""
Time parsing and formatting utilities.
Translates Logback/Log4j date patterns into strptime formats and parses
the timestamps captured from log lines.
"""

import re
from datetime import date, datetime, time
from typing import Optional

from dateutil import parser as dateutil_parser


# Marker pattern for formats handled by dateutil's ISO 8601 parser
ISO8601 = "ISO8601"

# Pattern letter runs -> strptime directives
_DIRECTIVES = {
    "yyyy": "%Y", "uuuu": "%Y", "yy": "%y", "y": "%Y",
    "MMMM": "%B", "MMM": "%b", "MM": "%m", "M": "%m",
    "dd": "%d", "d": "%d",
    "HH": "%H", "H": "%H", "hh": "%I", "h": "%I",
    "mm": "%M", "m": "%M",
    "ss": "%S", "s": "%S",
    "EEEE": "%A", "EEE": "%a", "EE": "%a", "E": "%a",
    "a": "%p",
    "z": "%Z", "zz": "%Z", "zzz": "%Z",
    "Z": "%z", "ZZ": "%z", "ZZZ": "%z",
    "X": "%z", "XX": "%z", "XXX": "%z",
    "x": "%z", "xx": "%z", "xxx": "%z",
}

_YEAR_DIRECTIVES = ("%Y", "%y")
_DATE_DIRECTIVES = ("%Y", "%y", "%B", "%b", "%m", "%d")

# strptime's %f accepts at most six digits
_LONG_FRACTION = re.compile(r"([.,]\d{6})\d+")


def java_to_strptime(pattern: str) -> str:
    """
    Translate a Java DateTimeFormatter pattern into a strptime format.

    Args:
        pattern: Pattern such as "yyyy-MM-dd HH:mm:ss.SSS"

    Returns:
        strptime format such as "%Y-%m-%d %H:%M:%S.%f"
    """
    out = []
    i = 0
    while i < len(pattern):
        c = pattern[i]
        if c == "'":
            end = pattern.find("'", i + 1)
            if end == -1:
                end = len(pattern)
            literal = pattern[i + 1:end]
            # '' is an escaped single quote
            out.append("'" if end == i + 1 else literal.replace("%", "%%"))
            i = end + 1
            continue
        if c.isalpha():
            j = i
            while j < len(pattern) and pattern[j] == c:
                j += 1
            run = pattern[i:j]
            if c == "S":
                out.append("%f")
            elif c in "yu":
                out.append("%y" if len(run) == 2 else "%Y")
            else:
                out.append(_DIRECTIVES.get(run, run))
            i = j
            continue
        out.append("%%" if c == "%" else c)
        i += 1
    return "".join(out)


class TimestampParser:
    """
    Parses timestamps captured by a log format.

    Immutable after construction, safe to share between threads.
    """

    def __init__(self, pattern: str):
        self.pattern = pattern
        self.iso = pattern.upper() == ISO8601
        self.strptime_format = "" if self.iso else java_to_strptime(pattern)
        self.has_fraction = "%f" in self.strptime_format
        self.has_year = any(d in self.strptime_format for d in _YEAR_DIRECTIVES)
        self.has_date = any(d in self.strptime_format for d in _DATE_DIRECTIVES)
        # strptime only knows UTC, GMT and the local zone names
        self.has_zone_name = "%Z" in self.strptime_format

    @classmethod
    def from_pattern(cls, pattern: str) -> "TimestampParser":
        return cls(pattern)

    def parse(self, text: str, today: Optional[date] = None) -> datetime:
        """
        Parse a captured timestamp.

        Time-only patterns resolve against the processing date, patterns
        without a year against the current year.

        Raises:
            ValueError: If the text does not fit the pattern
        """
        text = text.strip()
        if not text:
            raise ValueError("empty timestamp")

        if self.iso:
            dt = dateutil_parser.isoparse(text)
            return dt.replace(tzinfo=None)

        if self.has_fraction:
            text = _LONG_FRACTION.sub(r"\1", text)

        if self.has_zone_name:
            today = today or date.today()
            return dateutil_parser.parse(text, default=datetime.combine(today, time()), ignoretz=True)

        fmt = self.strptime_format
        if not self.has_date:
            today = today or date.today()
            text = f"{today.isoformat()} {text}"
            fmt = f"%Y-%m-%d {fmt}"
        elif not self.has_year:
            today = today or date.today()
            text = f"{today.year} {text}"
            fmt = f"%Y {fmt}"

        dt = datetime.strptime(text, fmt)
        # Wall-clock time as written; offsets are not applied
        return dt.replace(tzinfo=None)


def format_time_of_day(dt: Optional[datetime]) -> str:
    """Format a timestamp as HH:MM:SS.mmm, empty for missing timestamps."""
    if dt is None:
        return ""
    return dt.strftime("%H:%M:%S.%f")[:-3]
