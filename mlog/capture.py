"""Spawn a command and capture its stdout/stderr on two worker threads."""

import logging
import subprocess
import sys
import threading
from typing import BinaryIO

from mlog.config import LogConfig
from mlog.errors import CaptureError
from mlog.handler import StreamHandler
from mlog.writer import StreamWriter

logger = logging.getLogger(__name__)


def exit_code_of(returncode: int) -> int:
    """Child return code as a process exit code; death by signal N becomes 128+N."""
    if returncode < 0:
        return 128 - returncode
    return returncode


class CaptureOrchestrator:
    """Runs *cmd* and tees or redirects its output per *config*.

    Each stream gets its own handler, writer and thread; nothing is shared
    between them. A worker failure is logged to *diagnostic_sink* when one is
    given. Without one, ``run`` raises CaptureError once the child has exited.
    """

    def __init__(self, cmd: list[str], config: LogConfig | None = None,
                 stdout_sink: BinaryIO | None = None, stderr_sink: BinaryIO | None = None,
                 diagnostic_sink: logging.Logger | None = None, time_func=None):
        if not cmd:
            raise ValueError("no command given")
        self._cmd = list(cmd)
        self._config = config or LogConfig()
        self._stdout_sink = stdout_sink if stdout_sink is not None else sys.stdout.buffer
        self._stderr_sink = stderr_sink if stderr_sink is not None else sys.stderr.buffer
        self._diagnostic_sink = diagnostic_sink
        self._time_func = time_func
        self.errors: dict[str, BaseException] = {}
        self.handlers: dict[str, StreamHandler] = {}

    def _spawn(self) -> subprocess.Popen:
        try:
            # stdin is inherited from us
            return subprocess.Popen(self._cmd, stdout=subprocess.PIPE, stderr=subprocess.PIPE)
        except FileNotFoundError as e:
            raise CaptureError(f"command not found: {self._cmd[0]}", exit_code=127) from e
        except PermissionError as e:
            raise CaptureError(f"permission denied: {self._cmd[0]}", exit_code=126) from e
        except OSError as e:
            raise CaptureError(f"failed to start {self._cmd[0]}: {e}", exit_code=126) from e

    def _worker(self, handler: StreamHandler) -> None:
        try:
            handler.process()
        except Exception as e:
            self.errors[handler.name] = e
            self._report(handler.name, e)
            try:
                handler.drain()
            except Exception as drain_err:
                logger.warning("%s: failed to drain pipe: %s", handler.name, drain_err)

    def _report(self, stream: str, error: BaseException) -> None:
        if self._diagnostic_sink is not None:
            self._diagnostic_sink.error("%s capture failed: %s", stream, error)
        else:
            logger.debug("%s capture failed: %s", stream, error)

    def run(self) -> int:
        """Run the command to completion and return its exit code."""
        child = self._spawn()
        logger.info("Started %s (pid %d)", self._cmd[0], child.pid)

        self.handlers = {
            "stdout": StreamHandler(
                "stdout", child.stdout,
                StreamWriter(self._config.stdout, self._stdout_sink, self._time_func),
            ),
            "stderr": StreamHandler(
                "stderr", child.stderr,
                StreamWriter(self._config.stderr, self._stderr_sink, self._time_func),
            ),
        }
        workers = [
            threading.Thread(target=self._worker, args=(h,), name=f"mlog-{name}", daemon=True)
            for name, h in self.handlers.items()
        ]
        for t in workers:
            t.start()
        for t in workers:
            t.join()

        returncode = child.wait()
        child.stdout.close()
        child.stderr.close()
        exit_code = exit_code_of(returncode)
        logger.info("%s exited with code %d", self._cmd[0], exit_code)

        if self.errors and self._diagnostic_sink is None:
            detail = "; ".join(f"{name}: {err}" for name, err in self.errors.items())
            raise CaptureError(f"capture failed ({detail})", exit_code=exit_code,
                               errors=self.errors)
        return exit_code
