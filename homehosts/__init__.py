"""
HomeHosts - switch hosts file entries by Wi-Fi network.

Writes a block of hosts entries while the machine is on a home Wi-Fi network
and removes it elsewhere, leaving a SwitchHosts block in the same file alone.
"""

__version__ = "0.1.0"
__license__ = "MIT"

# Make key components available at package level
from . import config, watcher, logging_config

__all__ = ["config", "watcher", "logging_config"]
