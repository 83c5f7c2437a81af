"""
Network module for HomeHosts.

This module answers which Wi-Fi network the machine is on, with one probe
implementation per platform behind the ``NetworkProbe`` interface.
"""

from .probe import NetworkProbe, UnsupportedProbe, get_probe

__all__ = [
    "NetworkProbe",
    "UnsupportedProbe",
    "get_probe",
]
