"""
Pytest configuration and shared fixtures for HomeHosts tests.

This module provides reusable fixtures and configuration for all tests.
"""

import pytest
import toml

from homehosts.errors import ProbeError

SWITCHHOSTS_BLOCK = """# --- SWITCHHOSTS_CONTENT_START ---

# My hosts
10.0.0.5 dev.example.com
"""

MACOS_HOSTS = """##
# Host Database
#
# localhost is used to configure the loopback interface
# when the system is booting.  Do not change this entry.
##
127.0.0.1	localhost
255.255.255.255	broadcasthost
::1             localhost
"""


def pytest_configure(config):
    config.addinivalue_line("markers", "unit: fast tests without system side effects")


class FakeProbe:
    """Probe returning a scripted sequence of SSIDs; None means probe failure."""

    name = "fake"

    def __init__(self, *ssids):
        self.ssids = list(ssids)
        self.calls = 0

    def get_ssid(self):
        ssid = self.ssids[min(self.calls, len(self.ssids) - 1)]
        self.calls += 1
        if ssid is None:
            raise ProbeError("not associated")
        return ssid


@pytest.fixture
def fake_probe():
    """Factory for scripted probes."""
    return FakeProbe


@pytest.fixture
def home_hosts():
    """Hosts lines written on the home network."""
    return ["192.168.1.10 nas.home", "192.168.1.20 printer.home"]


@pytest.fixture
def hosts_file(tmp_path):
    """A macOS-style hosts file without any HomeHosts block."""
    path = tmp_path / "hosts"
    path.write_text(MACOS_HOSTS)
    return path


@pytest.fixture
def switchhosts_file(tmp_path):
    """A hosts file that also carries a SwitchHosts block."""
    path = tmp_path / "hosts"
    path.write_text(MACOS_HOSTS + "\n" + SWITCHHOSTS_BLOCK)
    return path


@pytest.fixture
def mock_config(home_hosts, hosts_file):
    """Raw configuration mapping pointing at the temporary hosts file."""
    return {
        "settings": {
            "debug": False,
            "interval": 300,
            "hosts_file": str(hosts_file),
        },
        "home": {
            "ssids": ["HomeWiFi", "HomeWiFi-5G"],
            "hosts": home_hosts,
        },
    }


@pytest.fixture
def config_file(tmp_path, mock_config):
    """The mock configuration written to a config.toml."""
    path = tmp_path / "config.toml"
    with open(path, "w") as f:
        toml.dump(mock_config, f)
    return path


@pytest.fixture
def hosts_config(mock_config):
    """Parsed HostsConfig for the mock configuration."""
    from homehosts.config import parse_config

    return parse_config(mock_config)


@pytest.fixture(autouse=True)
def isolate_log_files(tmp_path, monkeypatch):
    """Keep log files written during tests inside tmp_path."""
    from homehosts import config

    log_dir = tmp_path / "logs"
    monkeypatch.setattr(config, "LOG_DIR", log_dir)
    monkeypatch.setattr(config, "LOG_FILE", log_dir / "homehosts.log")


@pytest.fixture(autouse=True)
def reset_logging():
    """Reset logging configuration between tests."""
    import logging

    root_logger = logging.getLogger()
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)
    root_logger.setLevel(logging.WARNING)
    yield
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)
