"""
Polling loop that keeps the hosts file in step with the current Wi-Fi network.

On a home network the HomeHosts block is inserted, anywhere else (or when the
network cannot be determined) it is removed. The hosts file is only touched
when that decision differs from the last one applied.
"""

import time
from enum import Enum
from typing import Callable, Optional

from . import config
from .config import HostsConfig
from .errors import HostsFileError, MarkerInconsistency, ProbeError
from .hosts import apply_transform, insert_managed_region, remove_managed_region
from .logging_config import get_logger
from .network import NetworkProbe, get_probe

logger = get_logger(__name__)


class HostsState(Enum):
    UNKNOWN = "unknown"
    APPLIED = "applied"
    RESTORED = "restored"


def decide(ssid: Optional[str], cfg: HostsConfig) -> HostsState:
    """State the hosts file should be in for ``ssid`` (None means no network)."""
    return HostsState.APPLIED if cfg.is_home(ssid) else HostsState.RESTORED


def apply_once(cfg: HostsConfig) -> bool:
    """
    Insert the home hosts block into the configured hosts file.

    Returns:
        True if the file was rewritten.

    Raises:
        HostsFileError: the hosts file could not be read or written.
    """
    changed = apply_transform(cfg.hosts_file, lambda lines: insert_managed_region(lines, cfg.hosts))
    if changed:
        logger.info(f"Hosts file {cfg.hosts_file} modified")
    return changed


def restore_once(cfg: HostsConfig) -> bool:
    """
    Remove the home hosts block from the configured hosts file.

    Returns:
        True if the file was rewritten.

    Raises:
        HostsFileError: the hosts file could not be read or written.
        MarkerInconsistency: the markers are duplicated or out of order.
    """
    changed = apply_transform(cfg.hosts_file, remove_managed_region)
    if changed:
        logger.info(f"Hosts file {cfg.hosts_file} restored")
    return changed


class Watcher:
    """Tracks the last applied state and runs one poll per ``tick``."""

    def __init__(self, cfg: HostsConfig, probe: Optional[NetworkProbe] = None):
        self.config = cfg
        self.probe = probe or get_probe()
        self.state = HostsState.UNKNOWN

    def current_ssid(self) -> Optional[str]:
        """SSID reported by the probe, or None if it could not be determined."""
        try:
            return self.probe.get_ssid()
        except ProbeError as e:
            logger.warning(f"Could not determine Wi-Fi network: {e}")
            return None

    def tick(self) -> HostsState:
        """Probe the network and apply or restore the hosts block if needed."""
        ssid = self.current_ssid()
        target = decide(ssid, self.config)
        logger.info(f"SSID: {ssid}, home network: {'yes' if target is HostsState.APPLIED else 'no'}")

        if target is self.state:
            logger.info(f"Hosts already {target.value}, skip")
            return self.state

        action = apply_once if target is HostsState.APPLIED else restore_once
        try:
            action(self.config)
        except MarkerInconsistency as e:
            logger.warning(f"HomeHosts markers in {self.config.hosts_file} look damaged: {e}")
            return self.state
        except HostsFileError as e:
            logger.error(f"Failed to update hosts file: {e}")
            return self.state

        self.state = target
        return self.state

    def run_forever(self, interval: Optional[int] = None, sleep: Callable[[float], None] = time.sleep) -> None:
        """Tick every ``interval`` seconds until the process is stopped."""
        interval = interval or self.config.interval
        logger.info(
            f"Watching Wi-Fi every {interval}s using {self.probe!r}, home networks: {list(self.config.ssids)}"
        )
        while True:
            self.tick()
            sleep(interval)


def run_forever(
    cfg: HostsConfig,
    interval: Optional[int] = None,
    probe: Optional[NetworkProbe] = None,
    sleep: Callable[[float], None] = time.sleep,
) -> None:
    """Run the polling loop; returns only if ``sleep`` raises."""
    Watcher(cfg, probe).run_forever(interval or cfg.interval or config.DEFAULT_INTERVAL_SECONDS, sleep=sleep)
