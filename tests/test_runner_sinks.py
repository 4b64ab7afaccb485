"""
Tests for command execution, configuration and output sinks.
"""

import subprocess

import pytest
from unittest.mock import Mock, patch

from svcmon import config
from svcmon.errors import LaunchError
from svcmon.runner import CommandRunner
from svcmon.sinks import FileLogger, JournalLogger, is_journal_available


class TestCommandRunner:
    """Test subprocess invocation and error mapping."""

    def test_build_command_with_sudo(self):
        """Test sudo is prepended only when enabled."""
        assert CommandRunner(use_sudo=True).build_command(["systemctl", "show"]) == ["sudo", "systemctl", "show"]
        assert CommandRunner().build_command(["systemctl", "show"]) == ["systemctl", "show"]

    @patch("svcmon.runner.subprocess.run")
    def test_run_returns_stdout(self, mock_run):
        """Test captured stdout is returned."""
        mock_run.return_value = subprocess.CompletedProcess(["systemctl"], 0, stdout="ActiveState=active\n", stderr="")

        output = CommandRunner(use_sudo=True).run(["systemctl", "show", "x.service"])

        assert output == "ActiveState=active\n"
        assert mock_run.call_args[0][0] == ["sudo", "systemctl", "show", "x.service"]

    @patch("svcmon.runner.subprocess.run")
    def test_run_non_zero_exit(self, mock_run):
        """Test a non-zero exit raises with stderr and return code."""
        mock_run.return_value = subprocess.CompletedProcess(
            ["journalctl"], 1, stdout="", stderr="No journal files were found.")

        with pytest.raises(LaunchError, match="No journal files") as excinfo:
            CommandRunner().run(["journalctl", "-u", "x.service"])
        assert excinfo.value.returncode == 1
        assert excinfo.value.command == ["journalctl", "-u", "x.service"]

    @patch("svcmon.runner.subprocess.run")
    def test_run_missing_binary(self, mock_run):
        """Test a missing executable raises LaunchError."""
        mock_run.side_effect = FileNotFoundError("No such file or directory: 'systemctl'")

        with pytest.raises(LaunchError, match="failed to execute systemctl"):
            CommandRunner().run(["systemctl", "list-units"])

    @patch("svcmon.runner.subprocess.run")
    def test_run_timeout(self, mock_run):
        """Test a timeout raises LaunchError."""
        mock_run.side_effect = subprocess.TimeoutExpired(["systemctl"], 1)

        with pytest.raises(LaunchError):
            CommandRunner(timeout=1).run(["systemctl", "list-units"])

    @patch("svcmon.runner.subprocess.Popen")
    def test_start_opens_stdout_pipe(self, mock_popen):
        """Test start() opens a stdout pipe."""
        CommandRunner().start(["journalctl", "-f"])

        args, kwargs = mock_popen.call_args
        assert args[0] == ["journalctl", "-f"]
        assert kwargs["stdout"] == subprocess.PIPE

    @patch("svcmon.runner.subprocess.Popen")
    def test_start_failure(self, mock_popen):
        """Test a failed start raises LaunchError."""
        mock_popen.side_effect = PermissionError("denied")

        with pytest.raises(LaunchError, match="failed to start journalctl"):
            CommandRunner().start(["journalctl", "-f"])


class TestConfig:
    """Test environment-driven configuration."""

    def test_defaults(self, monkeypatch):
        """Test defaults with no environment set."""
        for name in ["SVCMON_SUDO", "SVCMON_LOG_FILE", "SVCMON_STREAM_BUFFER",
                     "SVCMON_LOG_LEVEL", "SVCMON_JOURNAL_IDENTIFIER"]:
            monkeypatch.delenv(name, raising=False)

        assert config.use_sudo() is False
        assert str(config.get_log_file()) == "logs/monitor.log"
        assert config.get_stream_buffer() == 100
        assert config.get_log_level() == "WARNING"
        assert config.get_journal_identifier() == "svcmon"

    def test_overrides(self, monkeypatch):
        """Test environment overrides."""
        monkeypatch.setenv("SVCMON_SUDO", "yes")
        monkeypatch.setenv("SVCMON_LOG_FILE", "/tmp/svcmon.log")
        monkeypatch.setenv("SVCMON_STREAM_BUFFER", "25")
        monkeypatch.setenv("SVCMON_LOG_LEVEL", "debug")

        assert config.use_sudo() is True
        assert str(config.get_log_file()) == "/tmp/svcmon.log"
        assert config.get_stream_buffer() == 25
        assert config.get_log_level() == "DEBUG"

    @pytest.mark.parametrize("value", ["lots", "0", "-3"])
    def test_invalid_stream_buffer_falls_back(self, monkeypatch, value):
        """Test invalid buffer sizes fall back to the default."""
        monkeypatch.setenv("SVCMON_STREAM_BUFFER", value)
        assert config.get_stream_buffer() == 100


class TestFileLogger:
    """Test the append-only monitor log."""

    def test_writes_timestamped_lines(self, tmp_path):
        """Test status, info and error lines are timestamped."""
        path = tmp_path / "nested" / "monitor.log"

        with FileLogger(path) as file_logger:
            file_logger.write_service_status("nginx.service", "running")
            file_logger.info("Checked 1 services")
            file_logger.error(RuntimeError("boom"))

        lines = path.read_text().splitlines()
        assert len(lines) == 3
        assert lines[0].startswith("[")
        assert lines[0].endswith("] Service nginx.service is running")
        assert lines[1].endswith("INFO: Checked 1 services")
        assert lines[2].endswith("ERROR: boom")

    def test_appends(self, tmp_path):
        """Test reopening the log appends."""
        path = tmp_path / "monitor.log"
        with FileLogger(path) as file_logger:
            file_logger.write("one")
        with FileLogger(path) as file_logger:
            file_logger.write("two")

        assert len(path.read_text().splitlines()) == 2


class TestJournalLogger:
    """Test journal writes through systemd-cat."""

    def test_write(self):
        """Test write runs systemd-cat with the message on stdin."""
        runner = Mock()
        JournalLogger("svcmon", runner=runner).write("Service started", "warning")

        runner.run.assert_called_once_with(
            ["systemd-cat", "-t", "svcmon", "-p", "warning"], input_text="Service started")

    def test_unknown_priority_becomes_info(self):
        """Test unknown priorities fall back to info."""
        runner = Mock()
        JournalLogger("svcmon", runner=runner).write("hello", "loud")

        assert runner.run.call_args[0][0][-1] == "info"

    @pytest.mark.parametrize("status, priority", [
        ("failed", "err"),
        ("running", "info"),
        ("STOPPED", "warning"),
        ("unknown", "notice"),
    ])
    def test_service_status_priority(self, status, priority):
        """Test service status maps to a journal priority."""
        runner = Mock()
        JournalLogger("svcmon", runner=runner).write_service_status("nginx.service", status)

        args, kwargs = runner.run.call_args
        assert args[0][-1] == priority
        assert kwargs["input_text"] == f"Service nginx.service status: {status}"

    def test_shortcuts_and_bulk(self):
        """Test priority shortcuts, monitoring events and bulk writes."""
        runner = Mock()
        journal = JournalLogger("svcmon", runner=runner)

        journal.critical("c")
        journal.write_monitoring_event("check", "3 services")
        journal.write_bulk(["a", "b"], "debug")

        priorities = [c[0][0][-1] for c in runner.run.call_args_list]
        assert priorities == ["crit", "info", "debug", "debug"]
        assert runner.run.call_args_list[1][1]["input_text"] == "[MONITORING] check: 3 services"

    def test_write_failure_propagates(self):
        """Test systemd-cat failures propagate."""
        runner = Mock()
        runner.run.side_effect = LaunchError("systemd-cat exited with status 1")

        with pytest.raises(LaunchError):
            JournalLogger("svcmon", runner=runner).info("x")

    @patch("svcmon.sinks.shutil.which")
    def test_is_journal_available(self, mock_which):
        """Test detection of systemd-cat on PATH."""
        mock_which.return_value = "/usr/bin/systemd-cat"
        assert is_journal_available()
        mock_which.return_value = None
        assert not is_journal_available()
