"""
systemd client: unit status, unit listing and journal access.
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import List, Optional

from ..errors import LaunchError, ParseError
from ..journal.parse import filter_entries, parse_output
from ..journal.stream import DEFAULT_BUFFER, LogStream
from ..models import (
    LogEntry,
    LogOptions,
    ServiceInfo,
    ServiceList,
    ensure_service_suffix,
    grep_pattern,
)
from ..runner import CommandRunner
from .classify import classify_status
from .timestamps import normalize_timestamp

logger = logging.getLogger(__name__)

# ServiceInfo fields read from `systemctl show`
STATUS_KEYS = {"ActiveState", "SubState", "MainPID", "MemoryCurrent", "ActiveEnterTimestamp"}

_MEMORY_UNITS = "KMGT"
_INT64_MAX = 2 ** 63 - 1


def format_memory(num_bytes: int) -> str:
    """
    Format a byte count using 1024-based units.

    Examples: 512 -> "512 B", 2048 -> "2.0 KB", 1048576 -> "1.0 MB"
    """
    unit = 1024
    if num_bytes < unit:
        return f"{num_bytes} B"

    div, exp = unit, 0
    n = num_bytes // unit
    while n >= unit and exp < len(_MEMORY_UNITS) - 1:
        div *= unit
        exp += 1
        n //= unit

    return f"{num_bytes / div:.1f} {_MEMORY_UNITS[exp]}B"


def calculate_uptime(timestamp: str, now: Optional[datetime] = None) -> timedelta:
    """
    Time elapsed since an ActiveEnterTimestamp value.

    Raises:
        ParseError: If the timestamp cannot be parsed
    """
    started = normalize_timestamp(timestamp)
    current = now or datetime.now(timezone.utc)
    return max(current - started, timedelta(0))


def parse_show_output(name: str, output: str, now: Optional[datetime] = None) -> ServiceInfo:
    """
    Build a ServiceInfo from `systemctl show` key=value output.

    Lines that are not key=value and values that do not parse are skipped,
    leaving the corresponding field at its default.
    """
    info = ServiceInfo(name=name)
    active_enter = ""

    for line in output.splitlines():
        line = line.strip()
        if not line:
            continue

        key, sep, value = line.partition("=")
        if not sep or key not in STATUS_KEYS:
            continue

        if key == "ActiveState":
            info.active_state = value
        elif key == "SubState":
            info.sub_state = value
        elif key == "MainPID":
            try:
                info.pid = int(value)
            except ValueError:
                logger.debug(f"{name}: ignoring MainPID {value!r}")
        elif key == "MemoryCurrent":
            try:
                memory = int(value)
            except ValueError:
                memory = None
            if memory is None or memory > _INT64_MAX:
                # e.g. "[not set]"
                info.memory_usage = value
            else:
                info.memory_usage = format_memory(memory)
        elif key == "ActiveEnterTimestamp":
            active_enter = value

    info.status = classify_status(info.active_state, info.sub_state)

    if active_enter and active_enter != "0":
        try:
            info.uptime = calculate_uptime(active_enter, now)
        except ParseError as e:
            logger.debug(f"{name}: uptime unavailable: {e}")

    info.checked_at = datetime.now()
    return info


def parse_list_units(output: str) -> ServiceList:
    """
    Build a ServiceList from `systemctl list-units` output.

    Header rows, rows flagged with "●", legend rows, rows with fewer than
    four columns and everything from the "loaded units" summary onward are ignored.
    """
    service_list = ServiceList()

    for line in output.splitlines():
        line = line.strip()
        if not line:
            continue

        if "UNIT" in line or "●" in line:
            continue

        if "loaded units" in line:
            break

        # UNIT  LOAD  ACTIVE  SUB  DESCRIPTION
        fields = line.split()
        if len(fields) < 4:
            continue

        # legend rows such as "LOAD   = Reflects whether ..."
        if fields[1] == "=":
            continue

        name, active_state, sub_state = fields[0], fields[2], fields[3]
        service_list.add_service(ServiceInfo(
            name=name,
            status=classify_status(active_state, sub_state),
            active_state=active_state,
            sub_state=sub_state,
        ))

    return service_list


class SystemdClient:
    """Queries systemd through systemctl and journalctl."""

    def __init__(
        self,
        use_sudo: bool = False,
        runner: Optional[CommandRunner] = None,
        stream_buffer: int = DEFAULT_BUFFER
    ):
        self.runner = runner or CommandRunner(use_sudo=use_sudo)
        self.stream_buffer = stream_buffer

    def list_services(self) -> ServiceList:
        """
        List all service units.

        Raises:
            LaunchError: If systemctl cannot be run
        """
        output = self.runner.run(["systemctl", "list-units", "--type=service", "--all", "--no-pager"])
        service_list = parse_list_units(output)
        logger.debug(
            f"Listed {service_list.total} services "
            f"({service_list.running} running, {service_list.failed} failed)"
        )
        return service_list

    def get_status(self, name: str) -> ServiceInfo:
        """
        Get the status of a single service.

        Args:
            name: Unit name, with or without the .service suffix

        Raises:
            LaunchError: If systemctl cannot be run
        """
        unit = ensure_service_suffix(name)
        try:
            output = self.runner.run(["systemctl", "show", unit, "--no-pager"])
        except LaunchError as e:
            raise LaunchError(
                f"failed to get service status for {unit}: {e}",
                command=e.command,
                returncode=e.returncode,
                output=e.output,
            ) from e
        return parse_show_output(unit, output)

    def get_logs(self, name: str, options: Optional[LogOptions] = None) -> List[LogEntry]:
        """
        Fetch historical journal entries for a service.

        Raises:
            LaunchError: If journalctl cannot be run
        """
        unit = ensure_service_suffix(name)
        args = ["journalctl", "-u", unit, "--no-pager"]
        if options is not None:
            args.extend(options.journal_args())

        try:
            output = self.runner.run(args)
        except LaunchError as e:
            raise LaunchError(
                f"failed to get logs for {unit}: {e}",
                command=e.command,
                returncode=e.returncode,
                output=e.output,
            ) from e

        entries = parse_output(output, unit)
        pattern = grep_pattern(options)
        if pattern:
            entries = filter_entries(entries, pattern)
        return entries

    def stream_logs(self, name: str, options: Optional[LogOptions] = None) -> LogStream:
        """
        Follow the journal for a service.

        The returned stream's worker is already running; read entries from
        stream.entries and a possible read error from stream.errors.

        Raises:
            LaunchError: If journalctl cannot be started or has no stdout pipe
        """
        unit = ensure_service_suffix(name)
        args = ["journalctl", "-u", unit, "-f", "--no-pager"]
        if options is not None:
            args.extend(options.journal_args(include_until=False))

        process = self.runner.start(args)
        if process.stdout is None:
            process.kill()
            raise LaunchError(f"failed to get stdout pipe for journalctl -u {unit}", command=args)

        stream = LogStream(
            unit,
            process.stdout,
            options=options,
            process=process,
            buffer_size=self.stream_buffer,
        )
        return stream.start()
