"""
Format registry - the ordered catalog of built-in log formats.

Order matters: on equal detection scores the earlier parser wins, so more
specific layouts come first.
"""

from functools import lru_cache
from typing import Iterator, Optional, Sequence, Tuple

from ..core.time import ISO8601
from ..schemas.logs import FormatConfig
from .base import LineParser
from .fallback_parser import FallbackLogParser
from .multi_pattern_parser import MultiPatternLogParser
from .pattern_parser import PatternBasedLogParser
from .regex_parser import ConfigurableLogParser


# Logback/Log4j layouts, most specific first
BUILTIN_LAYOUTS: Tuple[Tuple[str, str], ...] = (
    ("Logback Default", "%d{yyyy-MM-dd HH:mm:ss.SSS} [%t] %-5level %logger{36} - %msg%n"),
    ("PACS Server", "%d{yyyy-MM-dd HH:mm:ss,SSS} [%t] (%logger) - %msg%n"),
    ("Level-First PACS", "%level %d{yyyy-MM-dd HH:mm:ss,SSS} [%t] (%logger) - %msg%n"),
    ("Access Log", "%h - - [%d{dd/MMM/yyyy:HH:mm:ss Z}] %msg%n"),
    ("Quarkus", "%d{yyyy-MM-dd HH:mm:ss,SSS} %level [%logger] (%t) %msg%n"),
    ("Application Server", "%d{yyyy-MM-dd HH:mm:ss,SSS} %level %t [%logger] %msg%n"),
)

POSTGRES_LAYOUTS: Tuple[str, ...] = (
    "%d{yyyy-MM-dd HH:mm:ss,SSS} %level: %msg%n",
    "%d{yyyy-MM-dd HH:mm:ss.SSS} UTC [%t] %level %msg%n",
)

TRAILING_LAYOUTS: Tuple[Tuple[str, str], ...] = (
    ("Mirth Connect", "%level %d{yyyy-MM-dd HH:mm:ss.SSS} [%t] %logger: %msg%n"),
    ("Service Wrapper", "%d{yyyy-MM-dd HH:mm:ss,SSS} %level - %msg%n"),
    ("Debug Log", "[%d{MMdd/HHmmss.SSS}:%level:%logger] %msg%n"),
    ("Tomcat Localhost", "%d{dd-MMM-yyyy HH:mm:ss.SSS} %level [%t] %logger %msg%n"),
    ("Postman", "%d{EEE, dd MMM yyyy HH:mm:ss z} %level %logger > %msg%n"),
    ("Time-Only Services", "%d{HH:mm:ss.SSS} [%t] %level  %logger - %msg%n"),
    ("Starter", "%d{yyyy-MM-dd HH:mm:ss} : %msg%n"),
)

BUILTIN_CONFIGS: Tuple[FormatConfig, ...] = (
    FormatConfig(
        name="Istio Proxy",
        first_line_pattern=r"^\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}\.\d+Z\t.*",
        entry_regex=r"^(\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}\.\d+Z)\t(\w+)\t(.*?)(?:\t([a-zA-Z0-9_.-]+))?$",
        timestamp_format=ISO8601,
        timestamp_group=1,
        level_group=2,
        logger_group=4,
        message_group=3,
    ),
    FormatConfig(
        name="Spring Boot ISO8601",
        first_line_pattern=r"^\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}\.\d{3}Z\s+.*",
        entry_regex=(
            r"^(\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}\.\d{3}Z)\s+(\w+)\s+\d+\s+---\s+\[.*?\]\s+"
            r"\[(.*?)\]\s+\[.*?\]\s+(.*?)\s+:\s+(.*)$"
        ),
        timestamp_format="yyyy-MM-dd'T'HH:mm:ss.SSS'Z'",
        timestamp_group=1,
        level_group=2,
        thread_group=3,
        logger_group=4,
        message_group=5,
    ),
    FormatConfig(
        name="Legacy-Default",
        first_line_pattern=r"^\[.*\] .*",
        entry_regex=r"^\[(.*?)\]\s+(\w+)\s+(.*)$",
        timestamp_format="yyyy-MM-dd HH:mm:ss",
        timestamp_group=1,
        level_group=2,
        message_group=3,
    ),
)


class FormatRegistry:
    """Immutable, ordered collection of parsers plus the fallback."""

    def __init__(self, parsers: Sequence[LineParser], fallback: Optional[LineParser] = None):
        self._parsers: Tuple[LineParser, ...] = tuple(parsers)
        self.fallback = fallback or FallbackLogParser()

    @property
    def parsers(self) -> Tuple[LineParser, ...]:
        return self._parsers

    def extended(self, *parsers: LineParser) -> "FormatRegistry":
        """Return a new registry with ``parsers`` appended after the built-ins."""
        return FormatRegistry(self._parsers + tuple(parsers), self.fallback)

    def candidates(self, first_line: Optional[str]) -> Tuple[LineParser, ...]:
        """Parsers whose first-line test accepts ``first_line``."""
        return tuple(p for p in self._parsers if p.can_accept(first_line))

    def __iter__(self) -> Iterator[LineParser]:
        return iter(self._parsers)

    def __len__(self) -> int:
        return len(self._parsers)


def build_default_registry() -> FormatRegistry:
    """Build the built-in format catalog."""
    parsers = [PatternBasedLogParser(layout, name=name) for name, layout in BUILTIN_LAYOUTS]
    parsers.append(MultiPatternLogParser("Postgres (mixed)", POSTGRES_LAYOUTS))
    parsers.extend(PatternBasedLogParser(layout, name=name) for name, layout in TRAILING_LAYOUTS)
    parsers.extend(ConfigurableLogParser(config) for config in BUILTIN_CONFIGS)
    return FormatRegistry(parsers)


@lru_cache()
def get_default_registry() -> FormatRegistry:
    """Get the shared built-in registry."""
    return build_default_registry()
