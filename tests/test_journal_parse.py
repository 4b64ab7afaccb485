"""
Tests for journal line parsing and filtering.
"""

import pytest
from datetime import datetime

from svcmon.journal import filter_entries, matches, parse_line, parse_output
from svcmon.models import LogEntry


class TestParseLine:
    """Test heuristic extraction of timestamp, message and level."""

    def test_structured_level(self):
        """Test level= values are extracted and upper-cased."""
        entry = parse_line('Dec 22 19:32:42 msi clash[1397]: level=error msg="boom"', "clash.service")

        assert entry.message.startswith('level=error msg="boom"')
        assert entry.level == "ERROR"
        assert entry.service_name == "clash.service"

    def test_bracket_prefix_level(self):
        """Test a [LEVEL] message prefix sets the level."""
        entry = parse_line("[WARN] disk almost full", "app.service")
        assert entry.level == "WARN"
        assert entry.message == "[WARN] disk almost full"

    def test_colon_prefix_level_after_delimiter(self):
        """Test a LEVEL: prefix after the process delimiter sets the level."""
        entry = parse_line("Dec 22 19:32:42 host app: ERROR: failed to bind", "app.service")
        assert entry.message == "ERROR: failed to bind"
        assert entry.level == "ERROR"

    def test_warning_prefix(self):
        """Test WARN is matched before WARNING."""
        entry = parse_line("Dec 22 19:32:42 host app[7]: WARNING: low memory", "app.service")
        assert entry.level == "WARNING"

    def test_lowercase_prefix_is_normalized(self):
        """Test prefixes match case-insensitively."""
        entry = parse_line("Dec 22 19:32:42 host app[7]: [debug] cache warmed", "app.service")
        assert entry.level == "DEBUG"

    def test_prefix_overrides_structured_level(self):
        """Test a message prefix wins over level=."""
        entry = parse_line("Dec 22 19:32:42 host app[7]: [ERROR] level=info retry", "app.service")
        assert entry.level == "ERROR"

    def test_structured_level_needs_terminator(self):
        """Test level= at the end of the message is ignored."""
        entry = parse_line("Dec 22 19:32:42 host app[7]: msg=done level=warn", "app.service")
        assert entry.level == "info"

    def test_structured_level_before_quote(self):
        """Test a quote terminates the level= value."""
        entry = parse_line('Dec 22 19:32:42 host app[7]: level=debug"x"', "app.service")
        assert entry.level == "DEBUG"

    def test_timestamp_uses_current_year(self):
        """Test syslog timestamps get the current year."""
        entry = parse_line("Dec 22 19:32:42 msi systemd[1]: Started clash.service - Clash daemon.", "clash.service")

        assert entry.timestamp == datetime(datetime.now().year, 12, 22, 19, 32, 42)
        assert entry.message == "Started clash.service - Clash daemon."
        assert entry.level == "info"

    def test_single_digit_day(self):
        """Test space-padded single-digit days parse."""
        entry = parse_line("Jan  5 08:01:02 host cron[99]: job done", "cron.service")
        assert (entry.timestamp.month, entry.timestamp.day) == (1, 5)

    def test_bad_timestamp_falls_back_to_parse_time(self):
        """Test an unparseable timestamp falls back to now."""
        before = datetime.now()
        entry = parse_line("-- Boot 4f5c1c3e --", "x.service")
        after = datetime.now()
        assert before <= entry.timestamp <= after

    def test_bracket_delimiter_wins_over_earlier_colon(self):
        """Test "]: " is preferred over an earlier ": "."""
        entry = parse_line("Dec 22 19:32:42 host app[1]: key: value", "app.service")
        assert entry.message == "key: value"

    def test_delimiter_at_end_keeps_full_line(self):
        """Test a trailing delimiter leaves the whole line as message."""
        line = "Dec 22 19:32:42 host app[1]: "
        entry = parse_line(line, "app.service")
        assert entry.message == line

    @pytest.mark.parametrize("line", [
        "",
        "plain text without delimiters",
        "   ",
        "nothing-to-see-here",
    ])
    def test_total_on_unparseable_input(self, line):
        """Test arbitrary input always yields an entry."""
        entry = parse_line(line, "x.service")
        assert isinstance(entry, LogEntry)
        assert entry.message == line
        assert entry.level == "info"

    def test_entries_are_immutable(self):
        """Test log entries are frozen."""
        entry = parse_line("hello", "x.service")
        with pytest.raises(AttributeError):
            entry.message = "changed"


class TestParseOutput:
    """Test multi-line parsing and grep filtering."""

    def test_skips_blank_lines(self):
        """Test blank lines produce no entries."""
        output = "first line\n\n   \nsecond line\n"
        entries = parse_output(output, "x.service")
        assert [e.message for e in entries] == ["first line", "second line"]

    def test_matches(self):
        """Test substring matching is case-insensitive."""
        entry = LogEntry(service_name="x.service", message="Disk Almost Full")
        assert matches(entry, "almost")
        assert matches(entry, "DISK")
        assert matches(entry, "")
        assert not matches(entry, "network")

    def test_filter_entries_preserves_order(self):
        """Test filtering keeps entry order."""
        entries = parse_output("a error one\nb ok\nc ERROR two\n", "x.service")
        filtered = filter_entries(entries, "error")
        assert [e.message for e in filtered] == ["a error one", "c ERROR two"]


class TestLogEntryPresentation:
    """Test level-dependent colors and icons."""

    @pytest.mark.parametrize("level, color, icon", [
        ("ERROR", "red", "❌"),
        ("crit", "red", "❌"),
        ("warning", "yellow", "⚠️"),
        ("NOTICE", "cyan", "ℹ️"),
        ("info", "green", "✅"),
        ("DEBUG", "white", "🔍"),
        ("TRACE", "reset", "📝"),
    ])
    def test_color_and_icon(self, level, color, icon):
        """Test each level maps to a color and icon."""
        entry = LogEntry(service_name="x.service", message="m", level=level)
        assert entry.color() == color
        assert entry.icon() == icon
