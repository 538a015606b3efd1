"""mlog's own logging, optionally persisted through a rotated StreamWriter."""

import logging
import sys
import threading

from mlog.config import RotationConfig
from mlog.writer import StreamWriter

LOG_FORMAT = "%(asctime)s [mlog] %(levelname)s %(message)s"


class RotatingStreamLogHandler(logging.Handler):
    """logging.Handler writing formatted records through a StreamWriter.

    Records emitted while a record is being written (e.g. the writer's own
    rotation message) are dropped.
    """

    def __init__(self, writer: StreamWriter, level=logging.NOTSET):
        super().__init__(level)
        self._writer = writer
        self._busy = threading.local()

    def emit(self, record: logging.LogRecord) -> None:
        if getattr(self._busy, "active", False):
            return
        self._busy.active = True
        try:
            self._writer.write_line(self.format(record))
        except Exception:
            self.handleError(record)
        finally:
            self._busy.active = False

    def close(self) -> None:
        self.acquire()
        try:
            self._writer.close()
        finally:
            self.release()
        super().close()


def verbosity_level(verbosity: int) -> int:
    if verbosity >= 2:
        return logging.DEBUG
    if verbosity == 1:
        return logging.INFO
    return logging.WARNING


def setup_logging(config: RotationConfig | None, verbosity: int = 0,
                  console=None) -> logging.Logger | None:
    """Configure the root logger and return the diagnostic sink, if any.

    With no *config* records go to stderr and there is no diagnostic sink.
    Otherwise records are appended to the rotated file set described by
    *config* (echoed to *console* in TEE mode) and the ``mlog`` logger is
    returned for the orchestrator to report worker failures on.
    """
    level = verbosity_level(verbosity)
    if config is None:
        logging.basicConfig(level=level, format=LOG_FORMAT, stream=sys.stderr, force=True)
        return None

    writer = StreamWriter(config, console if console is not None else sys.stderr.buffer)
    handler = RotatingStreamLogHandler(writer)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    logging.basicConfig(level=level, handlers=[handler], force=True)
    return logging.getLogger("mlog")


def teardown_logging() -> None:
    """Detach and close any rotated diagnostic handlers on the root logger."""
    root = logging.getLogger()
    for handler in list(root.handlers):
        if isinstance(handler, RotatingStreamLogHandler):
            root.removeHandler(handler)
            handler.close()
