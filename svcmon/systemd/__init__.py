"""
systemd access for svcmon.

Provides unit status queries, unit listing, status classification and
timestamp normalization.
"""

from .classify import classify_status
from .client import SystemdClient, calculate_uptime, format_memory, parse_list_units, parse_show_output
from .timestamps import normalize_timestamp

__all__ = [
    "SystemdClient",
    "classify_status",
    "calculate_uptime",
    "format_memory",
    "normalize_timestamp",
    "parse_list_units",
    "parse_show_output",
]
