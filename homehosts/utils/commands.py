"""
Command execution utilities for HomeHosts.

This module provides command execution with error handling and logging.
It is the single place where HomeHosts spawns external processes.
"""

import shlex
import subprocess

from ..logging_config import get_logger

logger = get_logger(__name__)


def run_command(command, capture=False, input=None, shell=False, timeout=None, quiet_on_error=False):
    """
    Execute a command with error handling and logging.

    Args:
        command: Command to execute (list of strings or string if shell=True)
        capture: If True, return command output; if False, return success status
        input: Optional input to send to the command's stdin
        shell: If True, execute through the shell; if False, exec directly
        timeout: Seconds to wait before giving up on the command
        quiet_on_error: If True, log expected failures (non-zero exit, missing
            executable) at debug level only

    Returns:
        If capture=True: stripped stdout, or None on any failure
        If capture=False: True on success, False on failure
    """
    if shell and isinstance(command, list):
        command = shlex.join(command)

    logger.debug(f"Running command ({'shell' if shell else 'list'}): {command}")

    try:
        result = subprocess.run(
            command,
            shell=shell,
            check=False,
            capture_output=True,
            text=True,
            encoding="utf-8",
            errors="ignore",
            input=input,
            timeout=timeout,
        )
    except FileNotFoundError:
        cmd_name = command.split()[0] if shell else command[0]
        log = logger.debug if quiet_on_error else logger.error
        log(f"Command not found: {cmd_name}")
        return None if capture else False
    except subprocess.TimeoutExpired:
        logger.warning(f"Command '{command}' timed out after {timeout}s")
        return None if capture else False
    except OSError as e:
        logger.error(f"Unexpected error running command '{command}': {e}")
        return None if capture else False

    if result.stderr:
        logger.debug(f"Command stderr: {result.stderr.strip()}")

    if result.returncode != 0:
        log = logger.debug if quiet_on_error else logger.warning
        log(f"Command '{command}' failed with status {result.returncode}")
        if result.stdout:
            logger.debug(f"Stdout: {result.stdout.strip()}")
        return None if capture else False

    return result.stdout.strip() if capture else True
