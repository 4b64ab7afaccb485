"""
Environment-driven configuration.
"""

import logging
import os
from pathlib import Path

logger = logging.getLogger(__name__)

DEFAULT_LOG_FILE = "logs/monitor.log"
DEFAULT_STREAM_BUFFER = 100
DEFAULT_LOG_LEVEL = "WARNING"
DEFAULT_JOURNAL_IDENTIFIER = "svcmon"

_TRUE_VALUES = {"1", "true", "yes", "on"}


def use_sudo() -> bool:
    """
    Whether systemctl/journalctl should run through sudo.

    Returns:
        bool: True when SVCMON_SUDO is set to a truthy value
    """
    return os.environ.get("SVCMON_SUDO", "").strip().lower() in _TRUE_VALUES


def get_log_file() -> Path:
    """
    Get the monitor log file path.

    Returns:
        Path: Value of SVCMON_LOG_FILE, or logs/monitor.log
    """
    return Path(os.environ.get("SVCMON_LOG_FILE", DEFAULT_LOG_FILE))


def get_stream_buffer() -> int:
    """
    Get the capacity of a live log stream's entry channel.

    Returns:
        int: Value of SVCMON_STREAM_BUFFER, or 100 when unset or invalid
    """
    raw = os.environ.get("SVCMON_STREAM_BUFFER")
    if not raw:
        return DEFAULT_STREAM_BUFFER
    try:
        value = int(raw)
    except ValueError:
        logger.warning(f"Invalid SVCMON_STREAM_BUFFER {raw!r}, using {DEFAULT_STREAM_BUFFER}")
        return DEFAULT_STREAM_BUFFER
    if value < 1:
        logger.warning(f"SVCMON_STREAM_BUFFER must be positive, using {DEFAULT_STREAM_BUFFER}")
        return DEFAULT_STREAM_BUFFER
    return value


def get_log_level() -> str:
    """Logging level name for the CLI."""
    return os.environ.get("SVCMON_LOG_LEVEL", DEFAULT_LOG_LEVEL).upper()


def get_journal_identifier() -> str:
    """Identifier used when writing to the journal."""
    return os.environ.get("SVCMON_JOURNAL_IDENTIFIER", DEFAULT_JOURNAL_IDENTIFIER)
