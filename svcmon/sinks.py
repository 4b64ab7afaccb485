"""
Output sinks for monitoring results: a plain log file and the systemd journal.
"""

import logging
import shutil
from datetime import datetime
from pathlib import Path
from typing import Iterable, Optional, Union

from .runner import CommandRunner

logger = logging.getLogger(__name__)

JOURNAL_PRIORITIES = ["emerg", "alert", "crit", "err", "warning", "notice", "info", "debug"]

_STATUS_PRIORITIES = {
    "failed": "err",
    "running": "info",
    "stopped": "warning",
}


class FileLogger:
    """Appends timestamped lines to a log file."""

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self._file = open(self.path, "a", encoding="utf-8")

    def write(self, message: str) -> None:
        timestamp = datetime.now().strftime("%Y-%m-%d %H:%M:%S")
        self._file.write(f"[{timestamp}] {message}\n")
        self._file.flush()

    def write_service_status(self, service_name: str, status: str) -> None:
        self.write(f"Service {service_name} is {status}")

    def info(self, message: str) -> None:
        self.write(f"INFO: {message}")

    def error(self, error: Union[str, Exception]) -> None:
        self.write(f"ERROR: {error}")

    def close(self) -> None:
        if not self._file.closed:
            self._file.close()

    def __enter__(self) -> "FileLogger":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()


class JournalLogger:
    """Writes messages to the systemd journal through systemd-cat."""

    def __init__(self, identifier: str, runner: Optional[CommandRunner] = None):
        self.identifier = identifier
        self.runner = runner or CommandRunner()

    def write(self, message: str, priority: str = "info") -> None:
        """
        Write one message to the journal.

        Unknown priorities are written as "info".

        Raises:
            LaunchError: If systemd-cat cannot be run
        """
        if priority not in JOURNAL_PRIORITIES:
            logger.debug(f"Unknown journal priority {priority!r}, using info")
            priority = "info"
        self.runner.run(["systemd-cat", "-t", self.identifier, "-p", priority], input_text=message)

    def info(self, message: str) -> None:
        self.write(message, "info")

    def warning(self, message: str) -> None:
        self.write(message, "warning")

    def error(self, message: str) -> None:
        self.write(message, "err")

    def critical(self, message: str) -> None:
        self.write(message, "crit")

    def debug(self, message: str) -> None:
        self.write(message, "debug")

    def notice(self, message: str) -> None:
        self.write(message, "notice")

    def write_service_status(self, service_name: str, status: str) -> None:
        """Record a service status, at a priority matching its severity."""
        priority = _STATUS_PRIORITIES.get(status.lower(), "notice")
        self.write(f"Service {service_name} status: {status}", priority)

    def write_monitoring_event(self, event: str, details: str) -> None:
        self.write(f"[MONITORING] {event}: {details}", "info")

    def write_bulk(self, messages: Iterable[str], priority: str = "info") -> None:
        for message in messages:
            self.write(message, priority)


def is_journal_available() -> bool:
    """Check whether systemd-cat is on PATH."""
    return shutil.which("systemd-cat") is not None
