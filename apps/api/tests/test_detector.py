"""Tests for format detection and the built-in registry."""

import io
from datetime import datetime
from typing import Iterable, List, Optional

import pytest

from logsync.parsers.base import LineParser
from logsync.parsers.detector import FormatDetector, is_binary_content, score_entries
from logsync.parsers.fallback_parser import FallbackLogParser
from logsync.parsers.pattern_parser import PatternBasedLogParser
from logsync.parsers.registry import (
    BUILTIN_LAYOUTS,
    TRAILING_LAYOUTS,
    FormatRegistry,
    build_default_registry,
    get_default_registry,
)
from logsync.schemas.logs import LogEntry


SAMPLES = {
    "Logback Default": (
        "2023-10-27 10:00:00.123 [main] INFO  de.in.lsp.Main - App started\n"
        "2023-10-27 10:00:01.456 [Thread-1] ERROR de.in.lsp.Service - Database connection failed\n"
        "java.sql.SQLException: Access denied\n"
    ),
    "Quarkus": (
        "Banner Line 1\n"
        "Banner Line 2\n"
        "2026-01-06 11:02:35,715 INFO  [io.quarkus] (main) Started\n"
    ),
    "Postgres (mixed)": (
        "2026-01-09 03:49:31,808 INFO: no action. I am (act4telerad-0), the leader with the lock\n"
        "2026-01-09 03:49:46.592 UTC [25] LOG {ticks: 0, maint: 0, retry: 0}\n"
    ),
    "Mirth Connect": (
        "INFO  2023-01-19 09:38:21.291 [Shutdown Hook Thread] com.mirth.connect.server.Mirth: shutting down mirth\n"
    ),
    "Access Log": (
        '127.0.0.6 - - [06/Jan/2026:11:02:42 +0000] "GET /viewer/index.html HTTP/1.1" 200 1373\n'
    ),
    "Time-Only Services": (
        "09:00:40.743 [restartedMain] INFO  com.pacs.client.ClientServices - Starting ClientServices\n"
    ),
    "Istio Proxy": (
        '2025-12-25T08:59:40.206963Z\tinfo\tFLAG: --concurrency="0"\tact4telerad-0_istio-proxy.log\n'
        '2025-12-25T08:59:40.206980Z\tinfo\tFLAG: --domain="apps.svc.cluster.local"\tact4telerad-0_istio-proxy.log\n'
    ),
    "Legacy-Default": (
        "[2023-10-27 10:00:00] INFO This is a test message\n"
        "[2023-10-27 10:05:00] ERROR Something went wrong\n"
    ),
    "PACS Server": (
        "2026-01-06 11:02:35,715 [main] (com.pacs.Server) - Server started\n"
    ),
    "Level-First PACS": (
        "INFO 2026-01-06 11:02:35,715 [main] (com.pacs.Server) - Server started\n"
    ),
    "Application Server": (
        "2026-01-06 11:02:35,715 INFO  main [com.app.Deployer] Deployed viewer.war\n"
    ),
    "Service Wrapper": (
        "2026-01-06 11:02:35,715 INFO - Wrapper started\n"
    ),
    "Debug Log": (
        "[0127/100000.123:INFO:main.cc(42)] Initialized\n"
    ),
    "Tomcat Localhost": (
        "06-Jan-2026 11:02:35.715 INFO [main] org.apache.catalina.startup.Catalina.start Server startup\n"
    ),
    "Postman": (
        "Mon, 15 Jan 2024 10:00:00 GMT info main > started\n"
        "Mon, 15 Jan 2024 10:00:05 CET info main > collection loaded\n"
    ),
    "Starter": (
        "2026-01-06 11:02:35 : Starter launched\n"
    ),
    "Spring Boot ISO8601": (
        "2024-01-15T10:00:00.123Z  INFO 1 --- [app] [main] [abc123] com.example.App : Started App\n"
    ),
}


class StubParser(LineParser):
    """Returns a fixed entry list regardless of input."""

    def __init__(self, name: str, entries: List[LogEntry], accept: bool = True):
        self.name = name
        self._entries = entries
        self._accept = accept

    def can_accept(self, first_line: Optional[str]) -> bool:
        return self._accept

    def parse_lines(self, lines: Iterable[str], source_name: str) -> List[LogEntry]:
        list(lines)
        return list(self._entries)


class ExplodingParser(LineParser):
    name = "Exploding"

    def can_accept(self, first_line: Optional[str]) -> bool:
        return True

    def parse_lines(self, lines: Iterable[str], source_name: str) -> List[LogEntry]:
        raise RuntimeError("boom")


def _ts(message="x"):
    return LogEntry(timestamp=datetime(2024, 1, 1), message=message)


def _raw(message="x"):
    return LogEntry(message=message)


class TestBinarySniff:
    """Test binary content classification."""

    def test_single_nul_is_binary(self):
        data = b"perfectly normal text " * 20 + b"\x00" + b"more text"
        assert is_binary_content(data)

    def test_plain_text_is_not_binary(self):
        assert not is_binary_content(b"2024-01-01 INFO hello\r\n\tindented\n")

    def test_control_ratio(self):
        assert is_binary_content(b"\x01\x02\x03ab")
        assert not is_binary_content(b"\x01" + b"a" * 9)

    def test_only_sample_is_inspected(self):
        data = b"a" * 1024 + b"\x00"
        assert not is_binary_content(data, sample_bytes=1024)
        assert is_binary_content(data, sample_bytes=2048)

    def test_empty_is_not_binary(self):
        assert not is_binary_content(b"")


class TestScoring:
    """Test score counting."""

    def test_score_entries(self):
        assert score_entries([_ts(), _raw(), _ts()]) == (2, 3)
        assert score_entries([]) == (0, 0)


class TestFormatDetector:
    """Test parser selection and full-stream parsing."""

    @pytest.mark.parametrize("expected", sorted(SAMPLES))
    def test_detects_builtin_formats(self, expected):
        detector = FormatDetector()
        parser = detector.choose_parser(SAMPLES[expected].encode("utf-8"), "sample.log")
        assert parser.name == expected

    def test_quarkus_banner_is_header(self):
        entries = FormatDetector().parse(io.BytesIO(SAMPLES["Quarkus"].encode()), "pacsgate.log")

        assert len(entries) == 2
        assert entries[0].timestamp is None
        assert entries[0].message == "Banner Line 1\nBanner Line 2"
        assert entries[1].timestamp is not None
        assert entries[1].logger_name == "io.quarkus"

    def test_empty_stream(self):
        assert FormatDetector().parse(io.BytesIO(b""), "empty.log") == []

    def test_binary_stream_yields_nothing_and_stays_open(self):
        stream = io.BytesIO(b"\x00\x01\x02binary payload")
        assert FormatDetector().parse(stream, "binary.bin") == []
        assert not stream.closed

    def test_fallback_without_timestamps(self):
        entries = FormatDetector().parse(io.BytesIO(b"just some text\nmore text\n"), "notes.txt")

        assert [e.message for e in entries] == ["just some text", "more text"]
        assert all(e.timestamp is None for e in entries)

    def test_fallback_parser_chosen(self):
        detector = FormatDetector()
        assert detector.choose_parser(b"no structure here\n") is detector.registry.fallback

    def test_tie_break_prefers_more_entries(self):
        two = StubParser("two", [_ts(), _ts()])
        three = StubParser("three", [_ts(), _ts(), _raw()])
        detector = FormatDetector(registry=FormatRegistry([two, three]))

        assert detector.choose_parser(b"line\n").name == "three"

    def test_timestamped_count_wins_over_total(self):
        many_raw = StubParser("many_raw", [_ts(), _raw(), _raw(), _raw()])
        more_ts = StubParser("more_ts", [_ts(), _ts()])
        detector = FormatDetector(registry=FormatRegistry([many_raw, more_ts]))

        assert detector.choose_parser(b"line\n").name == "more_ts"

    def test_equal_scores_keep_registry_order(self):
        first = StubParser("first", [_ts()])
        second = StubParser("second", [_ts()])
        detector = FormatDetector(registry=FormatRegistry([first, second]))

        assert detector.choose_parser(b"line\n").name == "first"

    def test_failing_parser_is_skipped(self):
        ok = StubParser("ok", [_ts()])
        detector = FormatDetector(registry=FormatRegistry([ExplodingParser(), ok]))

        assert detector.choose_parser(b"line\n").name == "ok"

    def test_second_pass_over_all_parsers(self):
        """A parser rejecting the first line can still win on the full prefix."""
        untimestamped = StubParser("candidate", [_raw()], accept=True)
        banner_tolerant = StubParser("banner", [_raw(), _ts()], accept=False)
        detector = FormatDetector(registry=FormatRegistry([untimestamped, banner_tolerant]))

        assert detector.choose_parser(b"banner line\n").name == "banner"

    def test_candidates_win_over_second_pass(self):
        candidate = StubParser("candidate", [_ts()], accept=True)
        better = StubParser("better", [_ts(), _ts(), _ts()], accept=False)
        detector = FormatDetector(registry=FormatRegistry([candidate, better]))

        assert detector.choose_parser(b"line\n").name == "candidate"

    def test_data_past_prefix_is_parsed(self):
        lines = [
            f"2023-10-27 10:00:{i % 60:02d}.{i % 1000:03d} [main] INFO  a.B - message {i}"
            for i in range(5000)
        ]
        data = ("\n".join(lines) + "\n").encode("utf-8")
        assert len(data) > 128 * 1024

        entries = FormatDetector().parse(io.BytesIO(data), "big.log")

        assert len(entries) == 5000
        assert entries[-1].message == "message 4999"

    def test_small_prefix_splitting_a_line(self):
        data = (
            b"2023-10-27 10:00:00.123 [main] INFO  a.B - first entry\n"
            b"2023-10-27 10:00:01.123 [main] INFO  a.B - second entry\n"
        )
        entries = FormatDetector(prefix_bytes=80).parse(io.BytesIO(data), "split.log")

        assert [e.message for e in entries] == ["first entry", "second entry"]

    def test_single_format_registry_is_idempotent(self):
        for name, layout in BUILTIN_LAYOUTS + TRAILING_LAYOUTS:
            parser = PatternBasedLogParser(layout, name=name)
            detector = FormatDetector(registry=FormatRegistry([parser]))
            sample = SAMPLES.get(name)
            if sample is None:
                continue
            assert detector.choose_parser(sample.encode()) is parser

    def test_empty_registry_is_kept(self):
        detector = FormatDetector(registry=FormatRegistry([]))

        assert len(detector.registry) == 0
        assert detector.choose_parser(SAMPLES["Legacy-Default"].encode()) is detector.registry.fallback

    def test_source_name_on_entries(self):
        entries = FormatDetector().parse(io.BytesIO(SAMPLES["Legacy-Default"].encode()), "legacy.log")
        assert {e.source_file for e in entries} == {"legacy.log"}


class TestFormatRegistry:
    """Test the registry catalog."""

    def test_default_registry_contents(self):
        registry = build_default_registry()
        names = [p.name for p in registry]

        assert len(registry) == 17
        assert len(set(names)) == 17
        assert names[0] == "Logback Default"
        assert names[-3:] == ["Istio Proxy", "Spring Boot ISO8601", "Legacy-Default"]
        assert isinstance(registry.fallback, FallbackLogParser)

    def test_default_registry_is_shared(self):
        assert get_default_registry() is get_default_registry()

    def test_extended_returns_new_registry(self):
        registry = build_default_registry()
        extra = StubParser("extra", [])
        extended = registry.extended(extra)

        assert len(extended) == len(registry) + 1
        assert extended.parsers[-1] is extra
        assert extra not in registry.parsers
        assert extended.fallback is registry.fallback

    def test_candidates(self):
        registry = build_default_registry()
        names = [p.name for p in registry.candidates("[2023-10-27 10:00:00] INFO hello")]

        assert "Legacy-Default" in names
        assert "Logback Default" not in names
        assert registry.candidates(None) == ()
