"""
Format detector - picks the best parser for a source from a content sample.

1. Read a bounded prefix; empty or binary content yields no entries.
2. Parsers whose first-line test accepts the prefix's first line are
   scored by parsing the prefix: timestamped entries first, total entries
   as tie-break. A parser raising during the trial is skipped.
3. If no candidate produced a timestamped entry, every registered parser
   is scored the same way (files that open with a banner).
4. If still nothing has a timestamp, the fallback parser is used.
5. The prefix is stitched back in front of the rest of the stream and
   the whole source is parsed with the chosen parser.
"""

import io
from typing import BinaryIO, Iterable, List, Optional, Sequence, Tuple

from ..core.config import settings
from ..core.logging import get_logger
from ..schemas.logs import LogEntry
from .base import LineParser
from .registry import FormatRegistry, get_default_registry
from .streams import StreamChain, iter_text_lines, read_prefix

logger = get_logger(__name__)

# (timestamped entries, total entries)
Score = Tuple[int, int]


def is_binary_content(data: bytes, sample_bytes: int = 1024, control_ratio: float = 0.3) -> bool:
    """
    Sniff for binary content.

    Any NUL byte in the sample, or more than ``control_ratio`` control
    bytes (tab, LF and CR excluded), marks the data as binary.
    """
    sample = data[:sample_bytes]
    if not sample:
        return False
    if b"\x00" in sample:
        return True
    control = sum(1 for b in sample if (b < 32 and b not in (9, 10, 13)) or b == 127)
    return control / len(sample) > control_ratio


def score_entries(entries: Iterable[LogEntry]) -> Score:
    """Count timestamped and total entries."""
    timestamped = 0
    total = 0
    for entry in entries:
        total += 1
        if entry.timestamp is not None:
            timestamped += 1
    return timestamped, total


class FormatDetector:
    """Selects a parser per source and parses it. Stateless after construction."""

    def __init__(
        self,
        registry: Optional[FormatRegistry] = None,
        prefix_bytes: Optional[int] = None,
        binary_sample_bytes: Optional[int] = None,
        binary_control_ratio: Optional[float] = None,
    ):
        self.registry = registry if registry is not None else get_default_registry()
        self.prefix_bytes = prefix_bytes if prefix_bytes is not None else settings.detect_prefix_bytes
        self.binary_sample_bytes = (
            binary_sample_bytes if binary_sample_bytes is not None else settings.binary_sample_bytes
        )
        self.binary_control_ratio = (
            binary_control_ratio if binary_control_ratio is not None else settings.binary_control_ratio
        )

    def parse(self, stream: BinaryIO, source_name: str) -> List[LogEntry]:
        """
        Detect the format of ``stream`` and parse all of it.

        The stream is borrowed: it is read to the end but never closed.

        Args:
            stream: Binary stream positioned at the start of the source
            source_name: Logical name stamped on every entry

        Returns:
            Ordered entries, empty for empty or binary sources
        """
        prefix = read_prefix(stream, self.prefix_bytes)
        if not prefix:
            return []

        if is_binary_content(prefix, self.binary_sample_bytes, self.binary_control_ratio):
            logger.debug(f"Skipping binary content: {source_name}")
            return []

        parser = self.choose_parser(prefix, source_name)
        return parser.parse_stream(StreamChain(stream, prefix), source_name)

    def choose_parser(self, prefix: bytes, source_name: str = "") -> LineParser:
        """Pick the parser for a source from its prefix bytes."""
        lines = list(iter_text_lines(io.BytesIO(prefix)))
        first_line = lines[0] if lines else None

        candidates = self.registry.candidates(first_line)
        best, score = self._best_parser(candidates, lines, source_name)

        if best is None:
            remaining = [p for p in self.registry if p not in candidates]
            best, score = self._best_parser(remaining, lines, source_name)

        if best is None:
            logger.debug(f"No format matched {source_name}, using {self.registry.fallback.name}")
            return self.registry.fallback

        logger.debug(f"Detected {best.name} for {source_name} (timestamped={score[0]}, total={score[1]})")
        return best

    def _best_parser(
        self,
        parsers: Sequence[LineParser],
        lines: List[str],
        source_name: str,
    ) -> Tuple[Optional[LineParser], Score]:
        """Highest scoring parser with at least one timestamped entry; earlier wins ties."""
        best = None
        best_score: Score = (0, 0)
        for parser in parsers:
            try:
                score = score_entries(parser.parse_lines(lines, source_name))
            except Exception as e:
                logger.debug(f"Parser {parser.name} failed on {source_name}: {e}")
                continue
            if score[0] > 0 and score > best_score:
                best, best_score = parser, score
        return best, best_score
