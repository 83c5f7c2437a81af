"""
Unit tests for homehosts/config.py

Tests configuration loading, validation and constants.
"""

import pytest
from pathlib import Path
from unittest.mock import patch
import toml


@pytest.mark.unit
class TestConfigLoading:
    """Tests for configuration loading."""

    def test_load_config_creates_default(self, tmp_path):
        """Test that load_config creates default config if none exists."""
        from homehosts import config

        config_file = tmp_path / "HomeHosts" / "config.toml"

        with patch("homehosts.config.get_config_path", return_value=config_file):
            result = config.load_config()

        assert config_file.exists()
        assert toml.load(config_file) == config.DEFAULT_CONFIG
        assert result.ssids == ()
        assert result.hosts == ()
        assert result.interval == config.DEFAULT_INTERVAL_SECONDS
        assert result.hosts_file == "/etc/hosts"
        assert result.debug is False

    def test_load_existing_config(self, config_file, mock_config):
        """Test loading an existing config file."""
        from homehosts import config

        result = config.load_config(config_file)

        assert result.ssids == ("HomeWiFi", "HomeWiFi-5G")
        assert list(result.hosts) == mock_config["home"]["hosts"]
        assert result.hosts_file == mock_config["settings"]["hosts_file"]

    def test_missing_keys_use_defaults(self, tmp_path):
        from homehosts import config

        config_file = tmp_path / "config.toml"
        config_file.write_text('[home]\nssids = ["HomeWiFi"]\n')

        result = config.load_config(config_file)

        assert result.ssids == ("HomeWiFi",)
        assert result.interval == config.DEFAULT_INTERVAL_SECONDS

    def test_malformed_toml_raises_config_error(self, tmp_path):
        from homehosts import config
        from homehosts.errors import ConfigError

        config_file = tmp_path / "config.toml"
        config_file.write_text("[settings\ninterval = ")

        with pytest.raises(ConfigError, match="Malformed"):
            config.load_config(config_file)

    def test_unreadable_config_raises_config_error(self, tmp_path):
        from homehosts import config
        from homehosts.errors import ConfigError

        # A directory where the file should be
        config_dir = tmp_path / "config.toml"
        config_dir.mkdir()

        with pytest.raises(ConfigError):
            config.load_config(config_dir)

    def test_is_home(self, hosts_config):
        assert hosts_config.is_home("HomeWiFi")
        assert not hosts_config.is_home("CoffeeShop")
        assert not hosts_config.is_home(None)


@pytest.mark.unit
class TestParseConfig:
    """Tests for configuration validation."""

    @pytest.mark.parametrize(
        "data",
        [
            {"settings": {"interval": 0}},
            {"settings": {"interval": -5}},
            {"settings": {"interval": "300"}},
            {"settings": {"interval": True}},
            {"settings": {"hosts_file": ""}},
            {"settings": {"debug": "yes"}},
            {"home": {"ssids": "HomeWiFi"}},
            {"home": {"hosts": ["10.0.0.1 a", 42]}},
            {"home": []},
        ],
    )
    def test_invalid_values_raise(self, data):
        from homehosts.config import parse_config
        from homehosts.errors import ConfigError

        with pytest.raises(ConfigError):
            parse_config(data)

    def test_empty_mapping_is_valid(self):
        from homehosts.config import HostsConfig, parse_config

        assert parse_config({}) == HostsConfig()

    def test_config_is_immutable(self, hosts_config):
        from dataclasses import FrozenInstanceError

        with pytest.raises(FrozenInstanceError):
            hosts_config.interval = 1


@pytest.mark.unit
class TestSaveConfig:
    def test_save_then_load(self, tmp_path, mock_config):
        from homehosts import config

        config_file = tmp_path / "nested" / "config.toml"

        assert config.save_config(mock_config, config_file) == config_file
        assert config.load_config_data(config_file) == mock_config

    def test_invalid_data_is_not_written(self, tmp_path):
        from homehosts import config
        from homehosts.errors import ConfigError

        config_file = tmp_path / "config.toml"

        with pytest.raises(ConfigError):
            config.save_config({"settings": {"interval": -1}}, config_file)

        assert not config_file.exists()


@pytest.mark.unit
class TestConfigConstants:
    """Tests for configuration constants."""

    def test_app_constants(self):
        """Test that app constants are defined."""
        from homehosts import config

        assert config.APP_NAME == "homehosts"
        assert config.SERVICE_LABEL == "com.user.homehosts"
        assert config.LAUNCH_DAEMON_PLIST_PATH.name == "com.user.homehosts.plist"
        assert config.SYSTEMD_UNIT_PATH.name == "homehosts.service"
        assert config.get_config_path() == config.CONFIG_DIR / "config.toml"

    def test_marker_constants(self):
        from homehosts import config

        assert config.HOMEHOSTS_START_LINE == "# --- HOMEHOSTS_CONTENT_START ---"
        assert config.HOMEHOSTS_END_LINE == "# --- HOMEHOSTS_CONTENT_END ---"
        assert config.SWITCHHOSTS_START_LINE == "# --- SWITCHHOSTS_CONTENT_START ---"
        assert config.LINE_SEPARATOR == "\n"

    def test_default_config_structure(self):
        """Test default configuration structure."""
        from homehosts import config

        assert set(config.DEFAULT_CONFIG) == {"settings", "home"}
        assert config.DEFAULT_CONFIG["settings"]["interval"] == 300
        assert config.DEFAULT_CONFIG["home"] == {"ssids": [], "hosts": []}
        assert isinstance(config.CONFIG_DIR, Path)
