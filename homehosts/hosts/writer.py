"""
Insertion and removal of the HomeHosts block.

Both operations take a list of lines and return a new list; they never touch
the filesystem (see transaction.py for that).
"""

from typing import List, Sequence

from .. import config
from ..logging_config import get_logger
from .region import (
    contains_end_marker,
    contains_managed_region,
    find_foreign_anchor,
    find_managed_region_bounds,
)

logger = get_logger(__name__)


def build_managed_block(host_lines: Sequence[str]) -> List[str]:
    """The block written to the hosts file, padding included."""
    return [
        "",
        config.HOMEHOSTS_START_LINE,
        "",
        *host_lines,
        "",
        config.HOMEHOSTS_END_LINE,
        "",
    ]


def insert_managed_region(lines: Sequence[str], host_lines: Sequence[str]) -> List[str]:
    """
    Add the HomeHosts block to ``lines``.

    The block goes right above the SwitchHosts block when there is one, at the
    end of the file otherwise. Nothing changes if the block is already present,
    if a stray end marker is left over, or if there are no hosts lines to
    write.
    """
    if not host_lines:
        logger.info("No home hosts configured, nothing to insert")
        return list(lines)

    if contains_managed_region(lines):
        logger.info("Home hosts already present, no change needed")
        return list(lines)

    if contains_end_marker(lines):
        # A second block would leave two end markers that remove can never resolve
        logger.warning("HomeHosts start marker is missing but an end marker is present, not inserting")
        return list(lines)

    block = build_managed_block(host_lines)
    anchor = find_foreign_anchor(lines)

    if anchor is None:
        logger.debug("No SwitchHosts block found, appending home hosts")
        return [*lines, *block]

    logger.debug(f"Inserting home hosts above SwitchHosts block at line {anchor + 1}")
    return [*lines[:anchor], *block, *lines[anchor:]]


def remove_managed_region(lines: Sequence[str]) -> List[str]:
    """
    Remove the HomeHosts block and its padding from ``lines``.

    Raises:
        MarkerInconsistency: propagated from the marker lookup.
    """
    bounds = find_managed_region_bounds(lines)
    if bounds is None:
        logger.info("Home hosts not present, no change needed")
        return list(lines)

    logger.debug(f"Removing {len(bounds)} lines of home hosts starting at line {bounds.start + 1}")
    return [*lines[: bounds.start], *lines[bounds.end :]]
