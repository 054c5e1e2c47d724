"""Tests for the log entry model and ordering."""

from datetime import datetime

import pytest
from pydantic import ValidationError

from logsync.schemas.logs import UNKNOWN, FormatConfig, LogEntry, sort_entries


def _entry(message, timestamp=None, **kwargs):
    return LogEntry(timestamp=timestamp, message=message, **kwargs)


class TestLogEntry:
    """Test LogEntry construction and helpers."""

    def test_header_entry(self):
        entry = LogEntry.header(["Banner 1", "Banner 2"], "app.log")

        assert entry.timestamp is None
        assert entry.message == "Banner 1\nBanner 2"
        assert entry.level == UNKNOWN
        assert entry.thread == UNKNOWN
        assert entry.logger_name == UNKNOWN
        assert entry.source_file == "app.log"

    def test_append_message_returns_copy(self):
        original = _entry("first", raw_line="first")
        updated = original.append_message("\nsecond")

        assert updated.message == "first\nsecond"
        assert updated.raw_line == "first"
        assert original.message == "first"

    def test_entry_is_immutable(self):
        entry = _entry("msg")
        with pytest.raises(ValidationError):
            entry.message = "changed"

    def test_has_timestamp(self):
        assert _entry("a", datetime(2024, 1, 1)).has_timestamp
        assert not _entry("a").has_timestamp

    def test_formatted_timestamp(self):
        assert _entry("a", datetime(2024, 1, 1, 10, 0, 1, 5000)).formatted_timestamp == "10:00:01.005"
        assert _entry("a").formatted_timestamp == ""

    def test_simple_logger_name(self):
        assert _entry("a", logger_name="de.in.lsp.Main").simple_logger_name == "Main"
        assert _entry("a", logger_name="com.foo.Bar.java:105").simple_logger_name == "Bar:105"
        assert _entry("a").simple_logger_name == ""

    def test_simple_thread_name(self):
        assert _entry("a", thread="pool-1.worker(Thread.java)").simple_thread_name == "worker"
        assert _entry("a", thread="main").simple_thread_name == "main"

    def test_compare(self):
        early = _entry("a", datetime(2024, 1, 1, 10))
        late = _entry("b", datetime(2024, 1, 1, 11))
        header = _entry("c")

        assert early.compare(late) == -1
        assert late.compare(early) == 1
        assert early.compare(early) == 0
        assert header.compare(early) == 0
        assert late.compare(header) == 0


class TestSortEntries:
    """Test the final stable sort."""

    def test_untimestamped_entries_keep_position(self):
        t1 = _entry("t1", datetime(2024, 1, 1, 1))
        t2 = _entry("t2", datetime(2024, 1, 1, 2))
        t3 = _entry("t3", datetime(2024, 1, 1, 3))
        header = _entry("header")

        result = sort_entries([t3, header, t1, t2])

        assert [e.message for e in result] == ["t1", "header", "t2", "t3"]

    def test_equal_timestamps_are_stable(self):
        ts = datetime(2024, 1, 1)
        entries = [_entry(str(i), ts) for i in range(5)]

        assert [e.message for e in sort_entries(entries)] == ["0", "1", "2", "3", "4"]

    def test_input_not_modified(self):
        entries = [_entry("b", datetime(2024, 1, 2)), _entry("a", datetime(2024, 1, 1))]
        sort_entries(entries)
        assert entries[0].message == "b"


class TestFormatConfig:
    """Test FormatConfig defaults."""

    def test_absent_groups_default_to_minus_one(self):
        config = FormatConfig(
            name="Minimal",
            first_line_pattern=r"^\d+.*",
            entry_regex=r"^(\d+) (.*)$",
            timestamp_format="yyyyMMdd",
            timestamp_group=1,
            message_group=2,
        )
        assert config.level_group == -1
        assert config.thread_group == -1
        assert config.logger_group == -1
        assert config.ip_group == -1
