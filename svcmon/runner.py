"""
Command execution for systemctl and journalctl.

The rest of the package only talks to systemd through a CommandRunner, so
parsing and streaming can be exercised without a real systemd present.
"""

import logging
import subprocess
from typing import List, Optional

from .errors import LaunchError

logger = logging.getLogger(__name__)


class CommandRunner:
    """Runs commands, optionally prefixed with sudo."""

    def __init__(self, use_sudo: bool = False, timeout: Optional[float] = None):
        self.use_sudo = use_sudo
        self.timeout = timeout

    def build_command(self, args: List[str]) -> List[str]:
        """Prepend sudo when configured."""
        if self.use_sudo:
            return ["sudo", *args]
        return list(args)

    def run(self, args: List[str], input_text: Optional[str] = None) -> str:
        """
        Run a command to completion and return its standard output.

        Args:
            args: Command and arguments
            input_text: Text written to the command's stdin

        Returns:
            str: Captured stdout

        Raises:
            LaunchError: If the command cannot be started, times out or
                exits with a non-zero status
        """
        command = self.build_command(args)
        logger.debug(f"Running {' '.join(command)}")

        try:
            result = subprocess.run(
                command,
                input=input_text,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                text=True,
                errors="replace",
                timeout=self.timeout,
            )
        except (OSError, subprocess.SubprocessError) as e:
            logger.error(f"Failed to execute {command[0]}: {e}")
            raise LaunchError(f"failed to execute {command[0]}: {e}", command=command) from e

        if result.returncode != 0:
            detail = (result.stderr or result.stdout).strip()
            raise LaunchError(
                f"{' '.join(command)} exited with status {result.returncode}: {detail}",
                command=command,
                returncode=result.returncode,
                output=result.stdout,
            )

        return result.stdout

    def start(self, args: List[str]) -> subprocess.Popen:
        """
        Start a long-running command with its stdout as a binary pipe.

        Raises:
            LaunchError: If the command cannot be started
        """
        command = self.build_command(args)
        logger.debug(f"Starting {' '.join(command)}")

        try:
            process = subprocess.Popen(
                command,
                stdout=subprocess.PIPE,
                stderr=subprocess.DEVNULL,
                stdin=subprocess.DEVNULL,
            )
        except (OSError, subprocess.SubprocessError) as e:
            logger.error(f"Failed to start {command[0]}: {e}")
            raise LaunchError(f"failed to start {command[0]}: {e}", command=command) from e

        return process
