"""
svcmon - systemd service monitor.

This package polls systemd unit status and reads the journal, turning
systemctl/journalctl text into typed, filterable, streamable records.
"""

__version__ = "0.1.0"
__author__ = "svcmon contributors"
