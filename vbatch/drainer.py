"""Background draining of an encoder's diagnostic stream

The drainer is the sole reader of the child's stderr. It keeps reading for as
long as the pipe is open so the child never blocks on a full pipe, forwards
every line to a sink and feeds decodable progress to a callback.
"""

import logging
import threading
from contextlib import closing
from typing import Callable, Optional

from .progress import parse_progress

logger = logging.getLogger(__name__)

LineSink = Callable[[str], None]
ProgressCallback = Callable[[float], None]


class StreamDrainer:
    """
    Read a text stream line by line on a background thread.

    Attributes:
        lines_read (int): Lines forwarded to the sink so far
        progress_updates (int): Lines that produced a progress update
        error (Exception): The read error that ended draining, or else the
            first error raised by the sink or progress callback
        finished (threading.Event): Set once the stream is closed
    """
    def __init__(self, stream, line_sink: LineSink,
                 on_progress: Optional[ProgressCallback] = None,
                 name: str = "stderr"):
        self._stream = stream
        self._sink = line_sink
        self._on_progress = on_progress
        self.name = name
        self.lines_read = 0
        self.progress_updates = 0
        self.error: Optional[Exception] = None
        self.finished = threading.Event()
        self._thread = threading.Thread(
            target=self.drain,
            name=f"drain-{name}",
            daemon=True
        )

    def start(self) -> None:
        """Start draining on the background thread."""
        self._thread.start()

    def join(self, timeout: Optional[float] = None) -> bool:
        """Wait for draining to finish. Returns True if it did."""
        self._thread.join(timeout)
        return self.finished.is_set()

    def drain(self) -> None:
        """Read until end of stream or a read error, then close the stream."""
        try:
            with closing(self._stream) as stream:
                while True:
                    raw = stream.readline()
                    if not raw:
                        break
                    if isinstance(raw, bytes):
                        raw = raw.decode("utf-8", errors="replace")
                    self._handle_line(raw.rstrip("\r\n"))
        except (OSError, ValueError) as e:
            self.error = e
            logger.warning("Stopped reading %s after %d lines: %s", self.name, self.lines_read, e)
        finally:
            self.finished.set()
            logger.debug("Drained %d lines from %s", self.lines_read, self.name)

    def _handle_line(self, line: str) -> None:
        self.lines_read += 1
        self._notify(self._sink, line)
        percent = parse_progress(line)
        if percent is not None and self._on_progress is not None:
            self.progress_updates += 1
            self._notify(self._on_progress, percent)

    def _notify(self, callback: Callable, value) -> None:
        # A failing consumer must not stop the reads, or the child stalls on a full pipe
        try:
            callback(value)
        except Exception as e:
            if self.error is None:
                self.error = e
            logger.warning("Consumer of %s failed on line %d: %s", self.name, self.lines_read, e)
