"""
SSID detection on macOS.

CoreWLAN is asked first. Since macOS 14.4 it only reports the SSID to
processes with Location Services access, which a root daemon usually lacks,
so a command-line tool matching the running macOS version is used as a
fallback.
"""

import platform
from typing import Callable, List, Optional, Tuple

try:
    import CoreWLAN
except ImportError:
    CoreWLAN = None

from .. import config
from ..errors import ProbeError
from ..logging_config import get_logger
from ..utils import run_command
from .probe import NetworkProbe

logger = get_logger(__name__)

AIRPORT_PATH = "/System/Library/PrivateFrameworks/Apple80211.framework/Versions/A/Resources/airport"
REDACTED_SSID = "<redacted>"

Version = Tuple[int, int, int]


def parse_macos_version(version: str) -> Optional[Version]:
    """Turn "14.4.1" or "15.0" into a comparable (major, minor, patch) tuple."""
    parts = version.strip().split(".")
    try:
        numbers = [int(p) for p in parts if p]
    except ValueError:
        return None
    if not numbers:
        return None
    numbers = (numbers + [0, 0, 0])[:3]
    return numbers[0], numbers[1], numbers[2]


def parse_system_profiler(output: str) -> Optional[str]:
    """SSID from ``system_profiler SPAirPortDataType`` output."""
    lines = output.splitlines()
    for index, line in enumerate(lines):
        if "Current Network Information:" in line and index + 1 < len(lines):
            ssid = lines[index + 1].strip()
            return ssid[:-1] if ssid.endswith(":") else ssid or None
    return None


def parse_networksetup(output: str) -> Optional[str]:
    """SSID from ``networksetup -getairportnetwork <iface>`` output."""
    for line in output.splitlines():
        # "Current Wi-Fi Network: Foo" (older releases say "AirPort")
        if line.startswith("Current") and "Network: " in line:
            return line.split(": ", 1)[1].strip() or None
    return None


def parse_key_value(output: str, key: str = "SSID") -> Optional[str]:
    """SSID from ``wdutil info`` or ``airport --getinfo`` style output."""
    for line in output.splitlines():
        name, sep, value = line.partition(":")
        if sep and name.strip() == key:
            return value.strip() or None
    return None


def ssid_command_for(version: Version, interface: str = config.WIFI_INTERFACE) -> Tuple[List[str], Callable[[str], Optional[str]]]:
    """
    Command and output parser that report the SSID on a given macOS release.

    Raises:
        ProbeError: the release predates every supported tool.
    """
    if version >= (15, 0, 0):
        return ["system_profiler", "SPAirPortDataType"], parse_system_profiler
    if version >= (14, 5, 0):
        return ["/usr/sbin/networksetup", "-getairportnetwork", interface], parse_networksetup
    if version >= (14, 4, 0):
        return ["/usr/bin/wdutil", "info"], parse_key_value
    if version >= (13, 6, 9):
        return [AIRPORT_PATH, "--getinfo"], parse_key_value
    raise ProbeError(f"macOS {'.'.join(map(str, version))} is too old for SSID detection")


class CoreWLANProbe(NetworkProbe):
    """Reads the SSID through the CoreWLAN framework."""

    name = "corewlan"

    def get_ssid(self) -> str:
        if not CoreWLAN:
            raise ProbeError("CoreWLAN not available")

        interface = CoreWLAN.CWInterface.interface()
        if not interface:
            raise ProbeError("No Wi-Fi interface found")

        ssid = interface.ssid()
        if not ssid:
            raise ProbeError("CoreWLAN did not report an SSID")
        return str(ssid)


class MacOSCommandProbe(NetworkProbe):
    """Reads the SSID by running the command suited to the macOS version."""

    name = "macos-command"

    def __init__(self, interface: str = config.WIFI_INTERFACE, version: Optional[str] = None):
        self.interface = interface
        self.version = version

    def get_ssid(self) -> str:
        version_str = self.version or platform.mac_ver()[0]
        version = parse_macos_version(version_str)
        if version is None:
            raise ProbeError(f"Could not determine macOS version from '{version_str}'")
        logger.debug(f"macOS version: {version_str}")

        command, parser = ssid_command_for(version, self.interface)
        output = run_command(command, capture=True, timeout=config.PROBE_TIMEOUT)
        if output is None:
            raise ProbeError(f"'{command[0]}' failed")

        ssid = parser(output)
        if not ssid:
            raise ProbeError("Not associated with a Wi-Fi network")
        if ssid == REDACTED_SSID:
            raise ProbeError("SSID is redacted, Location Services access is required")
        return ssid


class MacOSProbe(NetworkProbe):
    """CoreWLAN first, falling back to command-line tools."""

    name = "macos"

    def __init__(self, interface: str = config.WIFI_INTERFACE):
        self.probes = [CoreWLANProbe(), MacOSCommandProbe(interface)]

    def get_ssid(self) -> str:
        errors = []
        for probe in self.probes:
            try:
                return probe.get_ssid()
            except ProbeError as e:
                logger.debug(f"{probe.name} probe failed: {e}")
                errors.append(str(e))
        raise ProbeError("; ".join(errors))
