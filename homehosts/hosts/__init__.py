"""
Hosts file handling for HomeHosts.

This package handles the HomeHosts block inside the hosts file:
- Locating the block and the SwitchHosts block it must coexist with
- Inserting and removing the block as pure list transformations
- Writing the result back atomically
"""

from .region import (
    PaddedRange,
    contains_end_marker,
    contains_managed_region,
    find_foreign_anchor,
    find_managed_region_bounds,
)
from .writer import (
    build_managed_block,
    insert_managed_region,
    remove_managed_region,
)
from .transaction import apply_transform, read_lines, write_lines

__all__ = [
    "PaddedRange",
    "contains_end_marker",
    "contains_managed_region",
    "find_foreign_anchor",
    "find_managed_region_bounds",
    "build_managed_block",
    "insert_managed_region",
    "remove_managed_region",
    "apply_transform",
    "read_lines",
    "write_lines",
]
