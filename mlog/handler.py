"""Line pump from a child's output pipe into a StreamWriter."""

import logging
from typing import BinaryIO

from mlog.writer import StreamWriter

logger = logging.getLogger(__name__)


class StreamHandler:
    def __init__(self, name: str, source: BinaryIO, writer: StreamWriter):
        self.name = name
        self._source = source
        self._writer = writer
        self.lines_processed = 0
        self.bytes_processed = 0

    def _read_line(self) -> bytes:
        try:
            return self._source.readline()
        except (BrokenPipeError, ConnectionResetError):
            logger.debug("%s: pipe closed by peer, treating as end of stream", self.name)
            return b""

    def process(self) -> None:
        """Forward every line verbatim until end of stream.

        Raises OSError if reading or writing fails. The writer is closed either way.
        """
        try:
            while True:
                line = self._read_line()
                if not line:
                    break
                self._writer.write(line)
                self.lines_processed += 1
                self.bytes_processed += len(line)
        finally:
            self._writer.close()
        logger.info("%s: end of stream after %d lines (%d bytes)",
                    self.name, self.lines_processed, self.bytes_processed)

    def drain(self) -> int:
        """Consume the rest of the input after a failure so the child never blocks.

        Lines still reach the console when this stream echoes. Returns the
        number of lines drained.
        """
        drained = 0
        echo = self._writer.echoes
        while True:
            line = self._read_line()
            if not line:
                return drained
            drained += 1
            if echo:
                try:
                    self._writer.echo(line)
                except Exception as e:
                    logger.warning("%s: console echo failed while draining: %s", self.name, e)
                    echo = False
