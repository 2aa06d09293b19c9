"""
Unit tests for tsc_trace_analyzer.formatters.time_formatter module.
"""
import pytest
from tsc_trace_analyzer.formatters.time_formatter import format_micros, format_time


class TestFormatTime:
    """Tests for the format_time() function."""

    def test_format_milliseconds(self):
        """Test formatting times in milliseconds."""
        assert format_time(0) == "0.00 ms"
        assert format_time(10.25) == "10.25 ms"
        assert format_time(999.99) == "999.99 ms"

    def test_format_seconds(self):
        """Test formatting times in seconds."""
        assert format_time(1000) == "1.00 s"
        assert format_time(1234.567) == "1.23 s"

    def test_format_minutes(self):
        """Test formatting times in minutes and seconds."""
        assert format_time(60000) == "1m 0.00s"
        assert format_time(125500) == "2m 5.50s"
        assert format_time(7200000) == "120m 0.00s"


class TestFormatMicros:
    """Tests for the format_micros() function (trace.json time unit)."""

    def test_sub_millisecond(self):
        """Test that microsecond durations below 1 ms stay in ms."""
        assert format_micros(250) == "0.25 ms"

    def test_compiler_scale_durations(self):
        """Test typical checkSourceFile durations."""
        assert format_micros(800000) == "800.00 ms"
        assert format_micros(2500000) == "2.50 s"
        assert format_micros(90000000) == "1m 30.00s"

    def test_matches_format_time(self):
        """Test that format_micros is format_time on milliseconds."""
        assert format_micros(123456) == format_time(123.456)
