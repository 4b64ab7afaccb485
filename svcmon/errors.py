"""
Exception types raised by svcmon.
"""

from typing import List, Optional


class SvcmonError(Exception):
    """Base class for svcmon errors."""


class LaunchError(SvcmonError):
    """An external command could not be started or exited unsuccessfully."""

    def __init__(
        self,
        message: str,
        command: Optional[List[str]] = None,
        returncode: Optional[int] = None,
        output: str = ""
    ):
        super().__init__(message)
        self.command = command or []
        self.returncode = returncode
        self.output = output


class ParseError(SvcmonError, ValueError):
    """A value from systemd output could not be interpreted."""


class ChannelClosed(SvcmonError):
    """Send attempted on a closed channel."""
