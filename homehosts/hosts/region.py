"""
Marker lookup for the HomeHosts block in a hosts file.

A hosts file is handled as a list of lines (the file split on "\\n"). The
HomeHosts block is written as::

    <blank>
    # --- HOMEHOSTS_CONTENT_START ---
    <blank>
    <hosts lines>
    <blank>
    # --- HOMEHOSTS_CONTENT_END ---
    <blank>

SwitchHosts keeps its own block in the same file, starting at a
``# --- SWITCHHOSTS_CONTENT_START ---`` line. Its end is never looked up;
the start line is only used as the place to insert our block in front of.
"""

from dataclasses import dataclass
from typing import List, Optional, Sequence

from .. import config
from ..errors import MarkerInconsistency
from ..logging_config import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class PaddedRange:
    """
    Half-open line range ``[start, end)`` covering a marker block.

    The range includes at most one blank line directly above the start
    marker and at most one blank line directly below the end marker, so
    deleting it removes the block together with its own padding and nothing
    else.
    """

    start: int
    end: int

    def __post_init__(self):
        if self.start < 0 or self.end < self.start:
            raise ValueError(f"Invalid range [{self.start}, {self.end})")

    def __len__(self):
        return self.end - self.start


def _is_blank(line: str) -> bool:
    return line == ""


def _marker_indexes(lines: Sequence[str], marker: str) -> List[int]:
    return [i for i, line in enumerate(lines) if marker in line]


def contains_managed_region(lines: Sequence[str]) -> bool:
    """True if any line carries the HomeHosts start marker."""
    return any(config.HOMEHOSTS_START_LINE in line for line in lines)


def contains_end_marker(lines: Sequence[str]) -> bool:
    """True if any line carries the HomeHosts end marker."""
    return any(config.HOMEHOSTS_END_LINE in line for line in lines)


def find_foreign_anchor(lines: Sequence[str]) -> Optional[int]:
    """
    Index to insert at so new content sits right above the SwitchHosts block.

    If the line above the SwitchHosts marker is blank, that blank line's
    index is returned so the separator stays below our block; otherwise the
    marker's own index. Returns None when there is no SwitchHosts marker.
    """
    for index, line in enumerate(lines):
        if config.SWITCHHOSTS_START_LINE in line:
            if index > 0 and _is_blank(lines[index - 1]):
                return index - 1
            return index
    return None


def find_managed_region_bounds(lines: Sequence[str]) -> Optional[PaddedRange]:
    """
    Locate the HomeHosts block, padding included.

    Returns None when neither marker is present, or when only one of them
    is (a warning is logged in that case since it points at a hand-edited
    or damaged file).

    Raises:
        MarkerInconsistency: a marker appears more than once, or the end
            marker comes before the start marker.
    """
    starts = _marker_indexes(lines, config.HOMEHOSTS_START_LINE)
    ends = _marker_indexes(lines, config.HOMEHOSTS_END_LINE)

    if not starts and not ends:
        return None

    if len(starts) > 1 or len(ends) > 1:
        raise MarkerInconsistency(
            f"Found {len(starts)} start and {len(ends)} end HomeHosts markers, expected one of each"
        )

    if not starts or not ends:
        missing = "start" if not starts else "end"
        logger.warning(f"HomeHosts {missing} marker is missing, treating the block as absent")
        return None

    start_marker, end_marker = starts[0], ends[0]
    if end_marker < start_marker:
        raise MarkerInconsistency(
            f"HomeHosts end marker (line {end_marker + 1}) precedes start marker (line {start_marker + 1})"
        )

    start = start_marker
    if start_marker > 0 and _is_blank(lines[start_marker - 1]):
        start = start_marker - 1

    end = end_marker + 1
    if end_marker + 1 < len(lines) and _is_blank(lines[end_marker + 1]):
        end = end_marker + 2

    return PaddedRange(start, end)
