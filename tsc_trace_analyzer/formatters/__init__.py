"""Output formatting helpers."""

from .time_formatter import format_micros, format_time

__all__ = ["format_time", "format_micros"]
