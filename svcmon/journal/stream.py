"""
Live journal streaming.

A LogStream owns one follow-mode journalctl process and one worker thread
that reads its stdout, parses each line and hands entries to the consumer
through a bounded channel. A read error, if any, is reported once through a
separate single-slot error channel.
"""

import logging
import subprocess
import threading
from typing import IO, Any, Optional

from ..models import LogEntry, LogOptions, grep_pattern
from .channel import Channel
from .parse import matches, parse_line

logger = logging.getLogger(__name__)

DEFAULT_BUFFER = 100

# how often a blocked send re-checks for stop()
_SEND_POLL_SECONDS = 0.2


class LogStream:
    """Entries and errors from a running follow process."""

    def __init__(
        self,
        service_name: str,
        stdout: IO[bytes],
        options: Optional[LogOptions] = None,
        process: Any = None,
        buffer_size: int = DEFAULT_BUFFER
    ):
        self.service_name = service_name
        self.options = options
        self.process = process
        self.entries: Channel[LogEntry] = Channel(buffer_size)
        self.errors: Channel[Exception] = Channel(1)
        self._stdout = stdout
        self._stop_event = threading.Event()
        self._thread = threading.Thread(
            target=self._worker,
            name=f"logstream-{service_name}",
            daemon=True,
        )

    def start(self) -> "LogStream":
        self._thread.start()
        logger.info(f"Streaming journal for {self.service_name}")
        return self

    def _deliver(self, entry: LogEntry) -> bool:
        while not self._stop_event.is_set():
            if self.entries.send(entry, timeout=_SEND_POLL_SECONDS):
                return True
        return False

    def _worker(self) -> None:
        pattern = grep_pattern(self.options)
        read_error: Optional[Exception] = None

        try:
            for raw in self._stdout:
                if self._stop_event.is_set():
                    break
                line = raw.decode("utf-8", errors="replace").rstrip("\r\n")
                if not line.strip():
                    continue
                entry = parse_line(line, self.service_name)
                if not matches(entry, pattern):
                    continue
                if not self._deliver(entry):
                    break
        except (OSError, ValueError) as e:
            # a pipe closed by stop() is an expected end
            if not self._stop_event.is_set():
                logger.warning(f"Error reading journal for {self.service_name}: {e}")
                read_error = e
        finally:
            self.entries.close()
            if read_error is not None:
                self.errors.send(read_error)
            self.errors.close()
            self._reap()
            logger.info(f"Journal stream for {self.service_name} ended")

    def _reap(self) -> None:
        if self.process is None:
            return
        if self._stop_event.is_set() and self.process.poll() is None:
            self.process.terminate()
        try:
            self.process.wait(timeout=5)
        except subprocess.TimeoutExpired as e:
            logger.warning(f"journalctl for {self.service_name} did not exit cleanly: {e}")
            self.process.kill()

    def stop(self) -> None:
        """Ask the worker to finish and terminate the follow process."""
        self._stop_event.set()
        if self.process is not None and self.process.poll() is None:
            self.process.terminate()

    def join(self, timeout: Optional[float] = None) -> None:
        self._thread.join(timeout)

    @property
    def running(self) -> bool:
        return self._thread.is_alive()

    def __iter__(self):
        return iter(self.entries)

    def __enter__(self) -> "LogStream":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.stop()
        self.join(timeout=5)
