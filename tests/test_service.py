"""
Unit tests for homehosts/service.py

Tests rendering of the launchd and systemd definitions and the
install/uninstall flow with mocked init system commands.
"""

import plistlib
from unittest.mock import call, patch

import pytest

ARGS = ["/usr/bin/python3", "-m", "homehosts", "-c", "/root/.HomeHosts/config.toml", "run", "-f", "300", "--daemon"]


@pytest.mark.unit
class TestProgramArguments:
    def test_runs_module_with_config_and_interval(self, tmp_path):
        import sys

        from homehosts.service import program_arguments

        args = program_arguments(tmp_path / "config.toml", 60)

        assert args == [sys.executable, "-m", "homehosts", "-c", str(tmp_path / "config.toml"), "run", "-f", "60", "--daemon"]

    def test_arguments_are_accepted_by_the_cli(self, config_file):
        from click.testing import CliRunner

        from homehosts.cli import cli
        from homehosts.service import program_arguments

        args = program_arguments(config_file, 60)

        with (
            patch("homehosts.cli.run_forever") as mock_run,
            patch("homehosts.cli.setup_logging") as mock_logging,
        ):
            result = CliRunner().invoke(cli, args[3:])

        assert result.exit_code == 0, result.output
        assert mock_run.call_args[0][1] == 60
        assert mock_logging.call_args.kwargs["daemon"] is True


@pytest.mark.unit
class TestLaunchdService:
    def test_render_is_a_valid_plist(self, tmp_path):
        from homehosts import config
        from homehosts.service import LaunchdService

        service = LaunchdService(tmp_path / "com.user.homehosts.plist")
        plist = plistlib.loads(service.render(ARGS).encode())

        assert plist["Label"] == "com.user.homehosts"
        assert plist["ProgramArguments"] == ARGS
        assert plist["RunAtLoad"] is True
        assert plist["KeepAlive"] == {"NetworkState": True}
        assert plist["StandardErrorPath"] == str(config.SERVICE_LOG_FILE)

    def test_render_escapes_arguments(self, tmp_path):
        from homehosts.service import LaunchdService

        args = ["/opt/a&b/python", "-m", "homehosts"]
        plist = plistlib.loads(LaunchdService(tmp_path / "x.plist").render(args).encode())

        assert plist["ProgramArguments"] == args

    def test_install_writes_plist_and_loads(self, tmp_path):
        from homehosts.service import LaunchdService

        unit_path = tmp_path / "LaunchDaemons" / "com.user.homehosts.plist"
        service = LaunchdService(unit_path)

        with patch("homehosts.service.run_command", return_value=True) as mock_run:
            assert service.install(ARGS) is True

        assert unit_path.exists()
        mock_run.assert_called_once_with(["launchctl", "load", "-w", str(unit_path)])

    def test_install_twice_raises(self, tmp_path):
        from homehosts.errors import ServiceError
        from homehosts.service import LaunchdService

        service = LaunchdService(tmp_path / "com.user.homehosts.plist")

        with patch("homehosts.service.run_command", return_value=True):
            service.install(ARGS)
            with pytest.raises(ServiceError, match="already installed"):
                service.install(ARGS)

    def test_install_reports_failed_load(self, tmp_path):
        from homehosts.service import LaunchdService

        unit_path = tmp_path / "com.user.homehosts.plist"

        with patch("homehosts.service.run_command", return_value=False):
            assert LaunchdService(unit_path).install(ARGS) is False

        assert unit_path.exists()

    def test_uninstall_unloads_and_removes(self, tmp_path):
        from homehosts.service import LaunchdService

        unit_path = tmp_path / "com.user.homehosts.plist"
        unit_path.write_text("<plist/>")

        with patch("homehosts.service.run_command", return_value=True) as mock_run:
            LaunchdService(unit_path).uninstall()

        assert not unit_path.exists()
        mock_run.assert_called_once_with(["launchctl", "unload", "-w", str(unit_path)])

    def test_uninstall_when_missing_raises(self, tmp_path):
        from homehosts.errors import ServiceError
        from homehosts.service import LaunchdService

        with pytest.raises(ServiceError, match="not installed"):
            LaunchdService(tmp_path / "missing.plist").uninstall()

    @pytest.mark.parametrize(
        "output,expected",
        [
            ('{\n\t"PID" = 412;\n\t"Label" = "com.user.homehosts";\n};', True),
            ('{\n\t"LastExitStatus" = 256;\n};', False),
            (None, False),
        ],
    )
    def test_is_running(self, tmp_path, output, expected):
        from homehosts.service import LaunchdService

        with patch("homehosts.service.run_command", return_value=output):
            assert LaunchdService(tmp_path / "x.plist").is_running() is expected


@pytest.mark.unit
class TestSystemdService:
    def test_render(self, tmp_path):
        from homehosts import config
        from homehosts.service import SystemdService

        content = SystemdService(tmp_path / "homehosts.service").render(ARGS)

        assert f"ExecStart={' '.join(ARGS)}" in content
        assert f"WorkingDirectory={config.CONFIG_DIR}" in content
        assert "After=network-online.target" in content
        assert "{{" not in content

    def test_install_enables_unit(self, tmp_path):
        from homehosts.service import SystemdService

        unit_path = tmp_path / "homehosts.service"

        with patch("homehosts.service.run_command", return_value=True) as mock_run:
            SystemdService(unit_path).install(ARGS)

        assert unit_path.exists()
        assert mock_run.call_args_list == [
            call(["systemctl", "daemon-reload"]),
            call(["systemctl", "enable", "--now", "homehosts.service"]),
        ]

    def test_install_stops_after_failed_reload(self, tmp_path):
        from homehosts.service import SystemdService

        with patch("homehosts.service.run_command", return_value=False) as mock_run:
            assert SystemdService(tmp_path / "homehosts.service").install(ARGS) is False

        mock_run.assert_called_once_with(["systemctl", "daemon-reload"])

    def test_uninstall_disables_unit(self, tmp_path):
        from homehosts.service import SystemdService

        unit_path = tmp_path / "homehosts.service"
        unit_path.write_text("[Unit]\n")

        with patch("homehosts.service.run_command", return_value=True) as mock_run:
            SystemdService(unit_path).uninstall()

        assert not unit_path.exists()
        assert mock_run.call_args_list == [
            call(["systemctl", "disable", "--now", "homehosts.service"]),
            call(["systemctl", "daemon-reload"]),
        ]

    def test_restart(self, tmp_path):
        from homehosts.service import SystemdService

        with patch("homehosts.service.run_command", return_value=True) as mock_run:
            assert SystemdService(tmp_path / "homehosts.service").restart() is True

        mock_run.assert_called_once_with(["systemctl", "restart", "homehosts.service"])


@pytest.mark.unit
class TestGetService:
    def test_platforms(self):
        from homehosts.service import LaunchdService, SystemdService, get_service

        assert isinstance(get_service("Darwin"), LaunchdService)
        assert isinstance(get_service("Linux"), SystemdService)

    def test_unsupported_platform_raises(self):
        from homehosts.errors import ServiceError
        from homehosts.service import get_service

        with pytest.raises(ServiceError):
            get_service("Windows")
