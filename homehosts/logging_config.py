"""
Centralized logging configuration for HomeHosts.

Interactive commands (apply, restore, status, ...) log to ``LOG_FILE`` and to
the terminal. The background service runs ``homehosts run --daemon``; there
stderr is captured by launchd into ``SERVICE_LOG_FILE`` (or by journald), so
only warnings go there and the per-tick messages stay in a rotating
``LOG_FILE``.
"""

import logging
import logging.handlers
import sys
from typing import Optional

from . import config


class HomeHostsLogger:
    """Centralized logger configuration for HomeHosts."""

    _initialized = False
    _debug_enabled = False
    _daemon = False

    @classmethod
    def setup(cls, debug: bool = False, force_reinit: bool = False, daemon: bool = False) -> None:
        """
        Set up logging on the root logger.

        Args:
            debug: If True, log DEBUG messages and include logger names
            force_reinit: If True, replace an existing setup
            daemon: If True, rotate the log file and keep stderr to warnings
        """
        if cls._initialized and not force_reinit:
            return

        root_logger = logging.getLogger()
        for handler in root_logger.handlers[:]:
            root_logger.removeHandler(handler)
            handler.close()

        cls._debug_enabled = debug
        cls._daemon = daemon
        root_logger.setLevel(logging.DEBUG if debug else logging.INFO)

        fmt = config.DEBUG_LOG_FORMAT if debug else config.LOG_FORMAT
        formatter = logging.Formatter(fmt, datefmt=config.LOG_DATE_FORMAT)

        file_handler = cls._file_handler()
        if file_handler:
            file_handler.setFormatter(formatter)
            file_handler.setLevel(logging.DEBUG)
            root_logger.addHandler(file_handler)

        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setFormatter(formatter)
        if daemon:
            console_handler.setLevel(logging.WARNING)
        else:
            console_handler.setLevel(logging.DEBUG if debug else logging.INFO)
        root_logger.addHandler(console_handler)

        cls._initialized = True
        logging.getLogger(__name__).debug(
            f"HomeHosts logging initialized (debug={'on' if debug else 'off'}, daemon={'yes' if daemon else 'no'})"
        )

    @classmethod
    def _file_handler(cls) -> Optional[logging.Handler]:
        try:
            config.LOG_DIR.mkdir(parents=True, exist_ok=True)
            if cls._daemon:
                return logging.handlers.RotatingFileHandler(
                    config.LOG_FILE,
                    maxBytes=config.LOG_MAX_BYTES,
                    backupCount=config.LOG_BACKUP_COUNT,
                )
            return logging.FileHandler(config.LOG_FILE)
        except OSError as e:
            # Non-root runs cannot always write next to a root-owned log
            print(f"Warning: Could not set up file logging: {e}", file=sys.stderr)
            return None

    @classmethod
    def get_logger(cls, name: Optional[str] = None) -> logging.Logger:
        """Get a logger instance, ensuring HomeHosts logging is initialized."""
        if not cls._initialized:
            cls.setup()

        return logging.getLogger(name)

    @classmethod
    def is_debug_enabled(cls) -> bool:
        return cls._debug_enabled

    @classmethod
    def is_daemon(cls) -> bool:
        return cls._daemon


# Convenience functions for easy import
def setup_logging(debug: bool = False, force_reinit: bool = False, daemon: bool = False) -> None:
    """Set up centralized logging. Wrapper for HomeHostsLogger.setup()."""
    HomeHostsLogger.setup(debug=debug, force_reinit=force_reinit, daemon=daemon)


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """Get a logger instance. Wrapper for HomeHostsLogger.get_logger()."""
    return HomeHostsLogger.get_logger(name)


def is_debug_enabled() -> bool:
    """Check if debug logging is enabled. Wrapper for HomeHostsLogger.is_debug_enabled()."""
    return HomeHostsLogger.is_debug_enabled()
