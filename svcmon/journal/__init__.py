"""
Journal parsing and live streaming.
"""

from .channel import Channel
from .parse import filter_entries, matches, parse_line, parse_output
from .stream import LogStream

__all__ = [
    "Channel",
    "LogStream",
    "filter_entries",
    "matches",
    "parse_line",
    "parse_output",
]
