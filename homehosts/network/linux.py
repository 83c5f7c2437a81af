"""
SSID detection on Linux via NetworkManager, with iwgetid as a fallback.
"""

from typing import Optional

from .. import config
from ..errors import ProbeError
from ..logging_config import get_logger
from ..utils import run_command
from .probe import NetworkProbe

logger = get_logger(__name__)


def parse_nmcli(output: str) -> Optional[str]:
    """SSID of the active entry in ``nmcli -t -f active,ssid dev wifi``."""
    for line in output.splitlines():
        if line.startswith("yes:"):
            # terse mode escapes colons inside values
            return line[len("yes:") :].replace("\\:", ":") or None
    return None


class LinuxProbe(NetworkProbe):
    name = "linux"

    def get_ssid(self) -> str:
        output = run_command(
            ["nmcli", "-t", "-f", "active,ssid", "dev", "wifi"],
            capture=True,
            timeout=config.PROBE_TIMEOUT,
            quiet_on_error=True,
        )
        if output:
            ssid = parse_nmcli(output)
            if ssid:
                return ssid

        logger.debug("nmcli gave no active SSID, trying iwgetid")
        output = run_command(["iwgetid", "-r"], capture=True, timeout=config.PROBE_TIMEOUT, quiet_on_error=True)
        if output:
            return output

        raise ProbeError("Not associated with a Wi-Fi network")
