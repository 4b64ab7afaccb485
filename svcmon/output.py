"""
Terminal and JSON rendering of services and log entries.
"""

import json
from typing import Any, Dict

import click

from .models import LogEntry, ServiceInfo, ServiceList, ServiceStatus

_STATUS_COLORS = {
    ServiceStatus.RUNNING: "green",
    ServiceStatus.FAILED: "red",
    ServiceStatus.STOPPED: "yellow",
}

_WIDTH = 64


def status_color(status: ServiceStatus) -> str:
    return _STATUS_COLORS.get(status, "white")


def truncate(text: str, max_len: int) -> str:
    """Shorten text to max_len characters, ending with "..." when cut."""
    if len(text) <= max_len:
        return text
    if max_len <= 3:
        return text[:max_len]
    return text[:max_len - 3] + "..."


def print_json(data: Dict[str, Any]) -> None:
    click.echo(json.dumps(data, indent=2, ensure_ascii=False))


def print_table(service_list: ServiceList) -> None:
    """Print services as a boxed table with a summary footer."""
    click.echo("╔" + "═" * _WIDTH + "╗")
    click.echo("║" + "SYSTEMD SERVICE MONITOR".center(_WIDTH) + "║")
    click.echo("╠" + "═" * _WIDTH + "╣")
    click.echo(f"║ {'Service':<20} │ {'Status':<12} │ {'Active':<8} │ {'Uptime':<12} ║")
    click.echo("╠" + "═" * _WIDTH + "╣")

    for service in service_list.services:
        status = click.style(f"{service.status.value:<12}", fg=status_color(service.status))
        click.echo(
            f"║ {truncate(service.name, 20):<20} │ {status} │ "
            f"{truncate(service.active_state, 8):<8} │ {service.uptime_string():<12} ║"
        )

    click.echo("╠" + "═" * _WIDTH + "╣")
    summary = (
        f" Total: {service_list.total}  │ Running: {service_list.running}  │ "
        f"Failed: {service_list.failed}  │ Stopped: {service_list.stopped}"
    )
    click.echo("║" + summary.ljust(_WIDTH) + "║")
    click.echo("╚" + "═" * _WIDTH + "╝")


def print_service(service: ServiceInfo) -> None:
    """Print one service with its details."""
    marker = click.style(f"[{service.status_icon()}]", fg=status_color(service.status))
    click.echo(f"{marker} {service.name} - {service.status.value} ({service.active_state})")

    if service.pid > 0:
        click.echo(f"  PID: {service.pid}")
    if service.memory_usage:
        click.echo(f"  Memory: {service.memory_usage}")
    if service.uptime.total_seconds() > 0:
        click.echo(f"  Uptime: {service.uptime_string()}")
    click.echo()


def format_log_entry(entry: LogEntry, color: bool = True) -> str:
    timestamp = f"[{entry.timestamp.strftime('%Y-%m-%d %H:%M:%S')}]"
    if color:
        timestamp = click.style(timestamp, fg=entry.color())
    return f"{timestamp} {entry.icon()} {entry.level} {entry.message}"


def print_log_entry(entry: LogEntry, as_json: bool = False) -> None:
    if as_json:
        click.echo(json.dumps(entry.to_dict(), ensure_ascii=False))
    else:
        click.echo(format_log_entry(entry))
