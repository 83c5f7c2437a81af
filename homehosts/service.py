"""
Background service installation for HomeHosts.

Editing the hosts file needs root, so HomeHosts is installed as a system
service: a LaunchDaemon on macOS, a systemd unit on Linux. Both run
``python -m homehosts run`` with the config path and interval baked in.
"""

import importlib.resources
import platform
import shlex
import sys
from pathlib import Path
from typing import List, Optional
from xml.sax.saxutils import escape

from . import config
from .errors import ServiceError
from .logging_config import get_logger
from .utils import run_command

logger = get_logger(__name__)


def program_arguments(config_path, interval: int) -> List[str]:
    """Command line the service runs; -c belongs to the group, before the command."""
    return [sys.executable, "-m", config.APP_NAME, "-c", str(config_path), "run", "-f", str(interval), "--daemon"]


def _read_template(name: str) -> str:
    return (importlib.resources.files(config.APP_NAME) / "templates" / name).read_text()


class ServiceManager:
    """Common install/uninstall flow; subclasses supply the init system calls."""

    system = ""
    template = ""

    def __init__(self, unit_path: Path):
        self.unit_path = Path(unit_path)

    def render(self, arguments: List[str]) -> str:
        raise NotImplementedError

    def is_installed(self) -> bool:
        return self.unit_path.exists()

    def install(self, arguments: List[str]) -> bool:
        """
        Write the service definition and start it.

        Returns:
            True if the service was started, False if only the definition
            was written.
        """
        if self.is_installed():
            raise ServiceError(f"Service is already installed at {self.unit_path}")

        content = self.render(arguments)
        try:
            self.unit_path.parent.mkdir(parents=True, exist_ok=True)
            self.unit_path.write_text(content)
        except OSError as e:
            raise ServiceError(f"Could not write {self.unit_path}: {e}") from e

        logger.info(f"Created {self.system} service definition at {self.unit_path}")
        return self._enable()

    def uninstall(self) -> None:
        """Stop the service and remove its definition."""
        if not self.is_installed():
            raise ServiceError("Service is not installed")

        self._disable()
        try:
            self.unit_path.unlink()
        except OSError as e:
            raise ServiceError(f"Could not remove {self.unit_path}: {e}") from e
        logger.info(f"Removed service definition {self.unit_path}")
        self._after_uninstall()

    def _enable(self) -> bool:
        return self.start()

    def _disable(self) -> None:
        self.stop()

    def _after_uninstall(self) -> None:
        pass

    def start(self) -> bool:
        raise NotImplementedError

    def stop(self) -> bool:
        raise NotImplementedError

    def restart(self) -> bool:
        self.stop()
        return self.start()

    def is_running(self) -> bool:
        raise NotImplementedError


class LaunchdService(ServiceManager):
    system = "launchd"
    template = "com.user.homehosts.plist"

    def __init__(self, unit_path: Path = config.LAUNCH_DAEMON_PLIST_PATH, label: str = config.SERVICE_LABEL):
        super().__init__(unit_path)
        self.label = label

    def render(self, arguments: List[str]) -> str:
        content = _read_template(self.template)
        content = content.replace("{{SERVICE_LABEL}}", self.label)
        content = content.replace(
            "{{PROGRAM_ARGUMENTS}}",
            "\n        ".join(f"<string>{escape(a)}</string>" for a in arguments),
        )
        content = content.replace("{{WORKING_DIRECTORY}}", str(config.CONFIG_DIR))
        content = content.replace("{{SERVICE_LOG_FILE}}", str(config.SERVICE_LOG_FILE))
        return content

    def start(self) -> bool:
        return run_command(["launchctl", "load", "-w", str(self.unit_path)])

    def stop(self) -> bool:
        return run_command(["launchctl", "unload", "-w", str(self.unit_path)])

    def is_running(self) -> bool:
        output = run_command(["launchctl", "list", self.label], capture=True, quiet_on_error=True)
        # A loaded job that is not running has no PID entry
        return bool(output) and '"PID" =' in output


class SystemdService(ServiceManager):
    system = "systemd"
    template = "homehosts.service"

    def __init__(self, unit_path: Path = config.SYSTEMD_UNIT_PATH):
        super().__init__(unit_path)

    @property
    def unit_name(self) -> str:
        return self.unit_path.name

    def render(self, arguments: List[str]) -> str:
        content = _read_template(self.template)
        content = content.replace("{{DESCRIPTION}}", "Switch hosts entries by Wi-Fi network")
        content = content.replace("{{PROGRAM_ARGUMENTS}}", shlex.join(arguments))
        content = content.replace("{{WORKING_DIRECTORY}}", str(config.CONFIG_DIR))
        return content

    def _enable(self) -> bool:
        return run_command(["systemctl", "daemon-reload"]) and run_command(
            ["systemctl", "enable", "--now", self.unit_name]
        )

    def _disable(self) -> None:
        run_command(["systemctl", "disable", "--now", self.unit_name])

    def _after_uninstall(self) -> None:
        run_command(["systemctl", "daemon-reload"])

    def start(self) -> bool:
        return run_command(["systemctl", "start", self.unit_name])

    def stop(self) -> bool:
        return run_command(["systemctl", "stop", self.unit_name])

    def restart(self) -> bool:
        return run_command(["systemctl", "restart", self.unit_name])

    def is_running(self) -> bool:
        return run_command(["systemctl", "is-active", "--quiet", self.unit_name], quiet_on_error=True)


def get_service(system: Optional[str] = None) -> ServiceManager:
    """Service manager for ``system`` (defaults to the running platform)."""
    system = system or platform.system()
    if system == "Darwin":
        return LaunchdService()
    if system == "Linux":
        return SystemdService()
    raise ServiceError(f"Service management is not supported on {system}")
