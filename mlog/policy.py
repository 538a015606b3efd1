"""Rotation decision for the active log file."""

from dataclasses import dataclass
from datetime import datetime
from typing import BinaryIO

from mlog.config import RotationConfig


@dataclass
class ActiveFileState:
    handle: BinaryIO
    created_at: datetime
    bytes_written: int = 0


def should_rotate(config: RotationConfig, state: ActiveFileState, now: datetime) -> bool:
    """Return True if the active file is too old or too large.

    Either limit triggers rotation on its own; a limit of 0 is disabled.
    """
    if config.max_age and (now - state.created_at).total_seconds() >= config.max_age:
        return True
    if config.max_size and state.bytes_written >= config.max_size:
        return True
    return False
