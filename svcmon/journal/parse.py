"""
Parsing of journalctl short-format lines.

Lines look like:

    Dec 22 19:32:42 msi clash[1397]: time="2025-12-22T19:32:42+08:00" level=info msg="Start initial configuration"
    Dec 22 19:32:42 msi systemd[1]: Started clash.service - Clash daemon.

Supervised programs log with key=value pairs while systemd and many daemons
use "[LEVEL]" or "LEVEL:" prefixes, so both conventions are checked.
"""

from datetime import datetime
from typing import Iterable, List, Optional

from ..models import LogEntry

PREFIX_LEVELS = ["ERROR", "WARN", "WARNING", "INFO", "DEBUG", "CRITICAL", "FATAL"]


def _parse_syslog_timestamp(line: str, now: datetime) -> Optional[datetime]:
    parts = line.split()
    if len(parts) < 3:
        return None
    # short format omits the year
    candidate = f"{' '.join(parts[:3])} {now.year}"
    try:
        return datetime.strptime(candidate, "%b %d %H:%M:%S %Y")
    except ValueError:
        return None


def _extract_message(line: str) -> str:
    for delimiter in ("]: ", ": "):
        index = line.find(delimiter)
        if index > 0 and index + len(delimiter) < len(line):
            return line[index + len(delimiter):]
    return line


def _structured_level(message: str) -> Optional[str]:
    start = message.find("level=")
    if start == -1:
        return None
    remaining = message[start + len("level="):]
    for index, char in enumerate(remaining):
        if char in ' "':
            return remaining[:index].upper() if index > 0 else None
    return None


def _prefixed_level(message: str) -> Optional[str]:
    upper = message.upper()
    for level in PREFIX_LEVELS:
        if upper.startswith(f"[{level}]") or upper.startswith(f"{level}:"):
            return level
    return None


def parse_line(line: str, service_name: str) -> LogEntry:
    """
    Parse one journal line into a LogEntry.

    Never fails: anything that cannot be extracted keeps its default
    (parse time, the full line as message, level "info").
    """
    now = datetime.now()
    timestamp = _parse_syslog_timestamp(line, now) or now
    message = _extract_message(line)

    level = "info"
    structured = _structured_level(message)
    if structured:
        level = structured
    prefixed = _prefixed_level(message)
    if prefixed:
        level = prefixed

    return LogEntry(
        service_name=service_name,
        message=message,
        timestamp=timestamp,
        level=level,
    )


def parse_output(output: str, service_name: str) -> List[LogEntry]:
    """Parse every non-blank line of journalctl output."""
    entries = []
    for line in output.splitlines():
        line = line.strip()
        if not line:
            continue
        entries.append(parse_line(line, service_name))
    return entries


def matches(entry: LogEntry, pattern: str) -> bool:
    """Case-insensitive substring match on the message; empty pattern matches all."""
    if not pattern:
        return True
    return pattern.lower() in entry.message.lower()


def filter_entries(entries: Iterable[LogEntry], pattern: str) -> List[LogEntry]:
    return [entry for entry in entries if matches(entry, pattern)]
