"""
Exception types raised by HomeHosts.
"""


class HomeHostsError(Exception):
    """Base class for all HomeHosts errors."""


class ConfigError(HomeHostsError):
    """The configuration file is missing, unreadable or malformed."""


class ProbeError(HomeHostsError):
    """The current Wi-Fi network could not be determined."""


class HostsFileError(HomeHostsError, OSError):
    """The hosts file could not be read or written."""


class MarkerInconsistency(HomeHostsError):
    """The HomeHosts markers in the hosts file are duplicated or out of order."""


class ServiceError(HomeHostsError):
    """The background service could not be installed or controlled."""
