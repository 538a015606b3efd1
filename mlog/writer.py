"""Per-stream writer: optional console echo plus a lazily opened, rotated log file."""

import logging
import os
from datetime import datetime, timezone
from typing import BinaryIO

from mlog.config import LogMode, RotationConfig
from mlog.policy import ActiveFileState, should_rotate
from mlog.rotator import rotate

logger = logging.getLogger(__name__)


class StreamWriter:
    """Writes one captured stream.

    Without a RotationConfig every write is passed straight to the console
    sink. With one, content is appended to ``config.path`` (flushed per call)
    and, in TEE mode, echoed to the console sink first.
    """

    def __init__(self, config: RotationConfig | None, console: BinaryIO | None = None,
                 time_func=None):
        self._config = config
        self._console = console
        self._time_func = time_func or (lambda: datetime.now(timezone.utc))
        self._state: ActiveFileState | None = None
        self.rotations = 0

    @property
    def echoes(self) -> bool:
        """True if content written here reaches the console sink."""
        return self._config is None or self._config.mode is LogMode.TEE

    @property
    def bytes_written(self) -> int:
        return self._state.bytes_written if self._state else 0

    def _open(self) -> None:
        parent = os.path.dirname(self._config.path)
        if parent:
            os.makedirs(parent, exist_ok=True)
        handle = open(self._config.path, "ab")
        self._state = ActiveFileState(handle=handle, created_at=self._time_func())

    def _close(self) -> None:
        if self._state is not None:
            handle = self._state.handle
            self._state = None
            if not handle.closed:
                handle.flush()
                handle.close()

    def _rotate(self) -> None:
        self._close()
        rotate(self._config.path, self._config.max_files)
        self._open()
        self.rotations += 1
        logger.debug("Rotated %s (rotation #%d)", self._config.path, self.rotations)

    def echo(self, content: bytes) -> None:
        """Write *content* to the console sink, if there is one."""
        if self._console is not None:
            self._console.write(content)
            self._console.flush()

    def write(self, content: bytes) -> None:
        if self._config is None:
            self.echo(content)
            return

        # echo precedes any file work
        if self._config.mode is LogMode.TEE:
            self.echo(content)

        if self._state is None:
            # a restart always begins a fresh numbered sequence
            rotate(self._config.path, self._config.max_files)
            self._open()
        elif should_rotate(self._config, self._state, self._time_func()):
            self._rotate()

        handle = self._state.handle
        handle.write(content)
        handle.flush()
        self._state.bytes_written += len(content)

    def write_line(self, content: str) -> None:
        self.write((content + "\n").encode("utf-8"))

    def close(self) -> None:
        self._close()

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()
        return False
