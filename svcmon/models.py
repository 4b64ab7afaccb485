"""
Data models for services and journal entries.
"""

from dataclasses import dataclass, field
from datetime import datetime, timedelta
from enum import Enum
from typing import Any, Dict, List, Optional


class ServiceStatus(Enum):
    """Canonical service status."""
    RUNNING = "running"
    STOPPED = "stopped"
    FAILED = "failed"
    UNKNOWN = "unknown"


_STATUS_ICONS = {
    ServiceStatus.RUNNING: "✅",
    ServiceStatus.FAILED: "❌",
    ServiceStatus.STOPPED: "⏸️",
}


@dataclass
class ServiceInfo:
    """Status of a single unit as observed by one query."""
    name: str
    status: ServiceStatus = ServiceStatus.UNKNOWN
    active_state: str = ""
    sub_state: str = ""
    uptime: timedelta = field(default_factory=timedelta)
    pid: int = 0
    memory_usage: str = ""
    checked_at: datetime = field(default_factory=datetime.now)

    def is_running(self) -> bool:
        return self.status == ServiceStatus.RUNNING

    def is_failed(self) -> bool:
        return self.status == ServiceStatus.FAILED

    def uptime_string(self) -> str:
        """Format uptime as e.g. "2h 15m"."""
        total_seconds = int(self.uptime.total_seconds())
        if total_seconds <= 0:
            return "0s"
        hours, remainder = divmod(total_seconds, 3600)
        return f"{hours}h {remainder // 60}m"

    def status_icon(self) -> str:
        return _STATUS_ICONS.get(self.status, "❓")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "status": self.status.value,
            "active_state": self.active_state,
            "sub_state": self.sub_state,
            "uptime_seconds": int(self.uptime.total_seconds()),
            "pid": self.pid,
            "memory_usage": self.memory_usage,
            "checked_at": self.checked_at.isoformat(),
        }


@dataclass
class ServiceList:
    """Services returned by one listing call, with per-status counters."""
    services: List[ServiceInfo] = field(default_factory=list)
    timestamp: datetime = field(default_factory=datetime.now)
    total: int = 0
    running: int = 0
    failed: int = 0
    stopped: int = 0

    def add_service(self, service: ServiceInfo) -> None:
        """Append a service and update counters."""
        self.services.append(service)
        self.total += 1
        if service.status == ServiceStatus.RUNNING:
            self.running += 1
        elif service.status == ServiceStatus.FAILED:
            self.failed += 1
        elif service.status == ServiceStatus.STOPPED:
            self.stopped += 1

    def by_status(self, status: ServiceStatus) -> List[ServiceInfo]:
        return [service for service in self.services if service.status == status]

    def filtered(self, status: ServiceStatus) -> "ServiceList":
        """
        Build a new list holding only services with the given status.

        Counters are recomputed for the new list; this list is left as is.
        """
        result = ServiceList(timestamp=self.timestamp)
        for service in self.by_status(status):
            result.add_service(service)
        return result

    def has_failures(self) -> bool:
        return self.failed > 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "services": [service.to_dict() for service in self.services],
            "timestamp": self.timestamp.isoformat(),
            "total": self.total,
            "running": self.running,
            "failed": self.failed,
            "stopped": self.stopped,
        }


_ERROR_LEVELS = {"EMERG", "ALERT", "CRIT", "ERROR", "ERR", "CRITICAL"}
_WARNING_LEVELS = {"WARN", "WARNING"}


@dataclass(frozen=True)
class LogEntry:
    """A single parsed journal line."""
    service_name: str
    message: str
    timestamp: datetime = field(default_factory=datetime.now)
    level: str = "info"

    def color(self) -> str:
        """click color name for this entry's level."""
        level = self.level.upper()
        if level in _ERROR_LEVELS:
            return "red"
        if level in _WARNING_LEVELS:
            return "yellow"
        if level == "NOTICE":
            return "cyan"
        if level == "INFO":
            return "green"
        if level == "DEBUG":
            return "white"
        return "reset"

    def icon(self) -> str:
        level = self.level.upper()
        if level in _ERROR_LEVELS:
            return "❌"
        if level in _WARNING_LEVELS:
            return "⚠️"
        if level == "NOTICE":
            return "ℹ️"
        if level == "INFO":
            return "✅"
        if level == "DEBUG":
            return "🔍"
        return "📝"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "timestamp": self.timestamp.isoformat(),
            "service_name": self.service_name,
            "message": self.message,
            "level": self.level,
        }


@dataclass
class LogOptions:
    """Journal retrieval options."""
    lines: int = 50  # 0 leaves the cap to journalctl
    follow: bool = False
    since: str = ""
    until: str = ""
    priority: str = ""
    grep: str = ""

    def journal_args(self, include_until: bool = True) -> List[str]:
        """
        Build journalctl arguments for the options that are set.

        Args:
            include_until: Whether to pass --until (meaningless when following)

        Returns:
            List of journalctl arguments
        """
        args: List[str] = []
        if self.lines > 0:
            args.extend(["-n", str(self.lines)])
        if self.since:
            args.extend(["--since", self.since])
        if include_until and self.until:
            args.extend(["--until", self.until])
        if self.priority:
            args.extend(["-p", self.priority])
        return args


def ensure_service_suffix(name: str, suffix: str = ".service") -> str:
    """Append the unit type suffix unless it is already present."""
    return name if name.endswith(suffix) else name + suffix


def grep_pattern(options: Optional[LogOptions]) -> str:
    return options.grep if options is not None else ""
