"""
Click CLI for svcmon.
"""

import logging
import re
import sys
import time
from typing import Optional

import click

from . import __version__, config
from .errors import SvcmonError
from .models import LogOptions, ServiceStatus
from .output import print_json, print_log_entry, print_service, print_table
from .sinks import FileLogger, JournalLogger, is_journal_available
from .systemd import SystemdClient

logger = logging.getLogger(__name__)

STATUS_FILTERS = {
    "running": ServiceStatus.RUNNING,
    "failed": ServiceStatus.FAILED,
    "stopped": ServiceStatus.STOPPED,
}


DURATION_UNITS = {"ms": 0.001, "s": 1, "m": 60, "h": 3600}
DURATION_PART = re.compile(r"(\d+(?:\.\d+)?)(ms|s|m|h)")


class Duration(click.ParamType):
    """Seconds, given bare ("30") or with units ("1m", "1h30m", "500ms")."""

    name = "duration"

    def convert(self, value, param, ctx):
        if isinstance(value, (int, float)):
            return float(value)
        text = str(value).strip()
        try:
            seconds = float(text)
        except ValueError:
            parts = DURATION_PART.findall(text)
            if not parts or "".join(n + u for n, u in parts) != text:
                self.fail(f"{value!r} is not a duration like 30s, 1m or 1h30m", param, ctx)
            seconds = sum(float(n) * DURATION_UNITS[u] for n, u in parts)
        if seconds <= 0:
            self.fail(f"{value!r} must be greater than zero", param, ctx)
        return seconds


def _client(use_sudo: bool) -> SystemdClient:
    return SystemdClient(
        use_sudo=use_sudo or config.use_sudo(),
        stream_buffer=config.get_stream_buffer(),
    )


def _fail(message: str, code: int = 2) -> None:
    click.echo(f"❌ {message}", err=True)
    sys.exit(code)


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
@click.version_option(version=__version__)
def main(verbose: bool):
    """
    svcmon - monitor systemd services and their journal.
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else config.get_log_level(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


@main.command("list")
@click.option("--status", "status_filter", type=click.Choice(["all", *STATUS_FILTERS]), default="all",
              help="Filter by status")
@click.option("--output", "output_format", type=click.Choice(["table", "json"]), default="table",
              help="Output format")
@click.option("--sudo", "use_sudo", is_flag=True, help="Run systemctl through sudo")
def list_cmd(status_filter: str, output_format: str, use_sudo: bool):
    """
    List all systemd services. Exits with 1 if any service has failed.
    """
    try:
        service_list = _client(use_sudo).list_services()
    except SvcmonError as e:
        _fail(str(e))

    has_failures = service_list.has_failures()
    if status_filter != "all":
        service_list = service_list.filtered(STATUS_FILTERS[status_filter])

    if output_format == "json":
        print_json(service_list.to_dict())
    else:
        print_table(service_list)

    if has_failures:
        sys.exit(1)


@main.command()
@click.argument("services", nargs=-1, required=True)
@click.option("--output", "output_format", type=click.Choice(["table", "json"]), default="table",
              help="Output format")
@click.option("--sudo", "use_sudo", is_flag=True, help="Run systemctl through sudo")
def check(services: tuple, output_format: str, use_sudo: bool):
    """
    Check specific services. Exits with 1 if any of them has failed.
    """
    client = _client(use_sudo)
    has_failures = False

    for name in services:
        try:
            service = client.get_status(name)
        except SvcmonError as e:
            click.echo(f"❌ {e}", err=True)
            continue

        if service.is_failed():
            has_failures = True

        if output_format == "json":
            print_json(service.to_dict())
        else:
            print_service(service)

    if has_failures:
        sys.exit(1)


@main.command()
@click.option("--services", required=True, help="Comma-separated service names")
@click.option("--interval", type=Duration(), default="30s", show_default=True,
              help="Check interval, e.g. 30s, 1m or 1h30m (bare numbers are seconds)")
@click.option("--log-file", type=click.Path(dir_okay=False), default=None,
              help="Log file path (default: SVCMON_LOG_FILE or logs/monitor.log)")
@click.option("--sudo", "use_sudo", is_flag=True, help="Run systemctl through sudo")
def monitor(services: str, interval: float, log_file: Optional[str], use_sudo: bool):
    """
    Check services repeatedly and record their status in a log file.
    """
    names = [name.strip() for name in services.split(",") if name.strip()]
    if not names:
        _fail("--services must name at least one service", 1)

    client = _client(use_sudo)
    path = log_file or config.get_log_file()
    logger.debug(f"Monitoring {', '.join(names)} every {interval}s, logging to {path}")

    with FileLogger(path) as file_logger:
        click.echo("Monitoring services. Press Ctrl+C to stop...")
        try:
            while True:
                time.sleep(interval)
                click.echo("\n--- Checking services ---")
                for name in names:
                    try:
                        service = client.get_status(name)
                    except SvcmonError as e:
                        file_logger.error(e)
                        click.echo(f"❌ Error checking {name}: {e}", err=True)
                        continue
                    file_logger.write_service_status(service.name, service.status.value)
                    print_service(service)
                file_logger.info(f"Checked {len(names)} services")
        except KeyboardInterrupt:
            click.echo("\n👋 Stopped monitoring")


@main.command()
@click.argument("service")
@click.option("--lines", type=int, default=50, show_default=True, help="Number of lines to show")
@click.option("--follow", "-f", is_flag=True, help="Follow log output in real time")
@click.option("--since", default="", help="Show logs since (e.g. '1 hour ago', 'today')")
@click.option("--until", default="", help="Show logs until")
@click.option("--priority", default="", help="Priority filter (emerg, alert, crit, err, warning, notice, info, debug)")
@click.option("--grep", default="", help="Only show messages containing this text (case-insensitive)")
@click.option("--json", "output_json", is_flag=True, help="Output one JSON object per entry")
@click.option("--sudo", "use_sudo", is_flag=True, help="Run journalctl through sudo")
def logs(service: str, lines: int, follow: bool, since: str, until: str, priority: str,
         grep: str, output_json: bool, use_sudo: bool):
    """
    View journal entries for a service.
    """
    client = _client(use_sudo)
    options = LogOptions(
        lines=lines,
        follow=follow,
        since=since,
        until=until,
        priority=priority,
        grep=grep,
    )

    if follow:
        _follow_logs(client, service, options, output_json)
        return

    try:
        entries = client.get_logs(service, options)
    except SvcmonError as e:
        _fail(str(e))

    if not entries:
        click.echo("No logs found")
        return

    if not output_json:
        click.echo(f"Showing {len(entries)} log entries for {service}:\n")
    for entry in entries:
        print_log_entry(entry, as_json=output_json)


def _follow_logs(client: SystemdClient, service: str, options: LogOptions, output_json: bool) -> None:
    try:
        stream = client.stream_logs(service, options)
    except SvcmonError as e:
        _fail(str(e))

    if not output_json:
        click.echo(f"Following logs for {service} (Ctrl+C to stop)...\n")

    with stream:
        try:
            for entry in stream.entries:
                print_log_entry(entry, as_json=output_json)
        except KeyboardInterrupt:
            click.echo("\n👋 Stopped following logs")
            return

        error, ok = stream.errors.receive()
        if ok:
            _fail(f"Log stream failed: {error}")


@main.command("write-log")
@click.option("--message", required=True, help="Message to write to the journal")
@click.option("--priority", default="info", show_default=True,
              help="Priority level (info, warning, err, crit, debug)")
@click.option("--identifier", default=None, help="Journal identifier (default: SVCMON_JOURNAL_IDENTIFIER or svcmon)")
def write_log(message: str, priority: str, identifier: Optional[str]):
    """
    Write a message to the systemd journal.
    """
    if not is_journal_available():
        _fail("systemd-cat not found. Make sure systemd is installed.")

    identifier = identifier or config.get_journal_identifier()
    try:
        JournalLogger(identifier).write(message, priority)
    except SvcmonError as e:
        _fail(f"Error writing to journal: {e}")

    click.echo("✅ Message written to systemd journal")
    click.echo(f"   Priority: {priority}")
    click.echo(f"   Identifier: {identifier}")
    click.echo(f"\nView with: journalctl -t {identifier} -n 10")


if __name__ == "__main__":
    main()
