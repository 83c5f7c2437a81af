"""
Configuration management for HomeHosts.

This module holds the application constants, the default configuration and
the TOML loader that turns ``config.toml`` into an immutable ``HostsConfig``.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Tuple, Union

import toml

from .errors import ConfigError

# --- App Constants ---
APP_NAME = "homehosts"
CONFIG_DIR = Path.home() / ".HomeHosts"
LOG_DIR = CONFIG_DIR / "logs"
LOG_FILE = LOG_DIR / "homehosts.log"
# stdout/stderr of the background service, kept apart from LOG_FILE
SERVICE_LOG_FILE = LOG_DIR / "homehosts.service.log"

# --- Service Constants ---
SERVICE_LABEL = f"com.user.{APP_NAME}"
LAUNCH_DAEMON_DIR = Path("/Library/LaunchDaemons")
LAUNCH_DAEMON_PLIST_PATH = LAUNCH_DAEMON_DIR / f"{SERVICE_LABEL}.plist"
SYSTEMD_UNIT_DIR = Path("/etc/systemd/system")
SYSTEMD_UNIT_PATH = SYSTEMD_UNIT_DIR / f"{APP_NAME}.service"

# --- Logging Constants ---
LOG_FORMAT = "%(asctime)s - %(levelname)s - %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
DEBUG_LOG_FORMAT = "%(asctime)s - %(levelname)s - %(name)s - %(message)s"
# The daemon logs every tick for as long as it runs
LOG_MAX_BYTES = 1024 * 1024
LOG_BACKUP_COUNT = 3

# --- Hosts File Constants ---
DEFAULT_HOSTS_FILE = "/etc/hosts"
LINE_SEPARATOR = "\n"
HOMEHOSTS_START_LINE = "# --- HOMEHOSTS_CONTENT_START ---"
HOMEHOSTS_END_LINE = "# --- HOMEHOSTS_CONTENT_END ---"
SWITCHHOSTS_START_LINE = "# --- SWITCHHOSTS_CONTENT_START ---"

# --- Watcher Constants ---
DEFAULT_INTERVAL_SECONDS = 300
DEFAULT_DEBUG = False
PROBE_TIMEOUT = 15  # seconds
WIFI_INTERFACE = "en0"

DEFAULT_CONFIG = {
    "settings": {
        "debug": DEFAULT_DEBUG,
        "interval": DEFAULT_INTERVAL_SECONDS,
        "hosts_file": DEFAULT_HOSTS_FILE,
    },
    "home": {
        # Wi-Fi networks that count as "home"
        "ssids": [],
        # Literal lines written between the HomeHosts markers
        "hosts": [],
    },
}


@dataclass(frozen=True)
class HostsConfig:
    """Immutable per-run configuration."""

    ssids: Tuple[str, ...] = ()
    hosts: Tuple[str, ...] = ()
    interval: int = DEFAULT_INTERVAL_SECONDS
    hosts_file: str = DEFAULT_HOSTS_FILE
    debug: bool = DEFAULT_DEBUG

    def is_home(self, ssid: Optional[str]) -> bool:
        """True when ``ssid`` is one of the recognized home networks."""
        return ssid is not None and ssid in self.ssids


def get_config_path():
    """Gets the path to the configuration file."""
    return CONFIG_DIR / "config.toml"


def _string_list(data, section, key):
    value = data.get(section, {}).get(key, [])
    if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
        raise ConfigError(f"'{section}.{key}' must be a list of strings")
    return tuple(value)


def parse_config(data: dict) -> HostsConfig:
    """Validate a raw configuration mapping and build a ``HostsConfig``."""
    if not isinstance(data.get("settings", {}), dict) or not isinstance(data.get("home", {}), dict):
        raise ConfigError("'settings' and 'home' must be tables")

    settings = data.get("settings", {})

    interval = settings.get("interval", DEFAULT_INTERVAL_SECONDS)
    # bool is an int subclass, reject it explicitly
    if isinstance(interval, bool) or not isinstance(interval, int) or interval <= 0:
        raise ConfigError(f"'settings.interval' must be a positive integer, got {interval!r}")

    hosts_file = settings.get("hosts_file", DEFAULT_HOSTS_FILE)
    if not isinstance(hosts_file, str) or not hosts_file:
        raise ConfigError("'settings.hosts_file' must be a non-empty string")

    debug = settings.get("debug", DEFAULT_DEBUG)
    if not isinstance(debug, bool):
        raise ConfigError("'settings.debug' must be true or false")

    return HostsConfig(
        ssids=_string_list(data, "home", "ssids"),
        hosts=_string_list(data, "home", "hosts"),
        interval=interval,
        hosts_file=hosts_file,
        debug=debug,
    )


def load_config_data(path: Optional[Union[str, Path]] = None) -> dict:
    """Loads the raw configuration mapping, creating a default file if needed."""
    path = Path(path) if path else get_config_path()
    try:
        if not path.exists():
            # Create a default config if one doesn't exist
            path.parent.mkdir(parents=True, exist_ok=True)
            with open(path, "w") as f:
                toml.dump(DEFAULT_CONFIG, f)

        with open(path, "r") as f:
            return toml.load(f)
    except toml.TomlDecodeError as e:
        raise ConfigError(f"Malformed configuration file {path}: {e}") from e
    except OSError as e:
        raise ConfigError(f"Could not read configuration file {path}: {e}") from e


def load_config(path: Optional[Union[str, Path]] = None) -> HostsConfig:
    """Loads the configuration from the TOML file."""
    cfg = parse_config(load_config_data(path))

    # Import logging from our centralized module
    from .logging_config import get_logger

    logger = get_logger(__name__)
    logger.debug(f"Loaded {len(cfg.ssids)} home SSIDs and {len(cfg.hosts)} hosts lines")
    return cfg


def save_config(data: dict, path: Optional[Union[str, Path]] = None) -> Path:
    """Writes a raw configuration mapping back to disk."""
    path = Path(path) if path else get_config_path()
    # Validate before touching the file
    parse_config(data)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w") as f:
        toml.dump(data, f)
    return path
