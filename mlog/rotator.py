"""Numbered rename chain: path -> path.1 -> path.2 ... -> path.(N-1)."""

import logging
import os

from mlog.errors import ConfigError

logger = logging.getLogger(__name__)


def rotated_path(path: str, index: int) -> str:
    """Return the name of the *index*-th file in the set (0 is the active file)."""
    return path if index == 0 else f"{path}.{index}"


def rotate(path: str, max_files: int) -> None:
    """Age every numbered file up by one and free *path* for a fresh file.

    Files that do not exist are skipped, so rotating a fresh log is a no-op.
    Rename failures propagate; a failure midway can leave a gap in the numbering.
    """
    if max_files < 1:
        raise ConfigError(f"max_files must be at least 1, got {max_files}")

    if max_files == 1:
        # no room for numbered siblings
        if os.path.exists(path):
            os.remove(path)
            logger.debug("Discarded %s (max_files=1)", path)
        return

    for i in range(max_files - 1, 1, -1):
        src = rotated_path(path, i - 1)
        if os.path.exists(src):
            os.replace(src, rotated_path(path, i))

    if os.path.exists(path):
        os.replace(path, rotated_path(path, 1))
        logger.debug("Rotated %s", path)
