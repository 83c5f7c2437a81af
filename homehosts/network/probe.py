"""
Network identity probes for HomeHosts.

A probe answers one question: which Wi-Fi network (SSID) is this machine
joined to right now. Each platform gets its own implementation; the watcher
only sees the ``NetworkProbe`` interface.
"""

import platform
from typing import Optional

from ..errors import ProbeError
from ..logging_config import get_logger

logger = get_logger(__name__)


class NetworkProbe:
    """Interface for platform-specific SSID lookup."""

    name = "probe"

    def get_ssid(self) -> str:
        """
        Return the SSID of the current Wi-Fi network.

        Raises:
            ProbeError: not associated, or the SSID could not be determined.
        """
        raise NotImplementedError

    def __repr__(self):
        return f"{self.__class__.__name__}()"


class UnsupportedProbe(NetworkProbe):
    """Probe for platforms without Wi-Fi detection; always fails."""

    name = "unsupported"

    def __init__(self, system: str):
        self.system = system

    def get_ssid(self) -> str:
        raise ProbeError(f"Wi-Fi detection is not supported on {self.system or 'this platform'}")


def get_probe(system: Optional[str] = None) -> NetworkProbe:
    """Pick the probe for ``system`` (defaults to the running platform)."""
    system = system or platform.system()

    if system == "Darwin":
        from .macos import MacOSProbe

        return MacOSProbe()
    if system == "Linux":
        from .linux import LinuxProbe

        return LinuxProbe()

    logger.warning(f"No Wi-Fi probe for platform '{system}'")
    return UnsupportedProbe(system)
