"""
Read-transform-write cycle for the hosts file.

The new content is written to a temporary file next to the hosts file and
renamed over it, so an interrupted write never leaves a truncated hosts file
behind.
"""

import os
import stat
import tempfile
from pathlib import Path
from typing import Callable, List, Sequence, Union

from .. import config
from ..errors import HostsFileError
from ..logging_config import get_logger

logger = get_logger(__name__)

Transform = Callable[[List[str]], List[str]]

# Hosts files are mostly ASCII; stray Latin-1 comment bytes must round-trip
ENCODING_ERRORS = "surrogateescape"


def read_lines(path: Union[str, Path]) -> List[str]:
    """Read the file and split it into lines on "\\n" exactly."""
    try:
        # newline="" keeps "\r\n" endings intact, undecodable bytes survive as surrogates
        with open(path, "r", encoding="utf-8", errors=ENCODING_ERRORS, newline="") as f:
            content = f.read()
    except (OSError, UnicodeError) as e:
        raise HostsFileError(f"Could not read {path}: {e}") from e
    return content.split(config.LINE_SEPARATOR)


def write_lines(path: Union[str, Path], lines: Sequence[str]) -> None:
    """
    Atomically replace the file with ``lines`` joined by "\\n".

    Symlinks are followed (on macOS /etc/hosts points into /private/etc), and
    the original permission bits and ownership are carried over.
    """
    target = Path(path).resolve()
    content = config.LINE_SEPARATOR.join(lines)

    try:
        original = target.stat()
    except OSError as e:
        raise HostsFileError(f"Could not open {target} for writing: {e}") from e

    tmp_path = None
    try:
        fd, tmp_path = tempfile.mkstemp(prefix=f".{target.name}.", suffix=".tmp", dir=target.parent)
        with os.fdopen(fd, "w", encoding="utf-8", errors=ENCODING_ERRORS, newline="") as f:
            f.write(content)
            f.flush()
            os.fsync(f.fileno())

        os.chmod(tmp_path, stat.S_IMODE(original.st_mode))
        if hasattr(os, "chown") and os.geteuid() == 0:
            os.chown(tmp_path, original.st_uid, original.st_gid)

        os.replace(tmp_path, target)
        tmp_path = None
    except (OSError, UnicodeError) as e:
        raise HostsFileError(f"Could not write {target}: {e}") from e
    finally:
        if tmp_path is not None and os.path.exists(tmp_path):
            os.unlink(tmp_path)

    logger.debug(f"Wrote {len(lines)} lines to {target}")


def apply_transform(path: Union[str, Path], transform: Transform) -> bool:
    """
    Run ``transform`` over the file's lines and write the result back.

    Returns:
        True if the file was rewritten, False if the transform left the
        content unchanged (the file is not touched in that case).

    Raises:
        HostsFileError: the file could not be read or written.
    """
    lines = read_lines(path)
    new_lines = transform(list(lines))

    if new_lines == lines:
        logger.debug(f"No changes for {path}, skipping write")
        return False

    write_lines(path, new_lines)
    return True
