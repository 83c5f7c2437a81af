"""
Utility functions for HomeHosts.
"""

from .commands import run_command

__all__ = ["run_command"]
