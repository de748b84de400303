"""Supervision of one ffmpeg encode process

The supervisor owns the whole lifecycle of a single encode:

    NOT_STARTED -> STARTED -> RUNNING (draining || exited) -> COMPLETED

It launches ffmpeg with stderr piped, hands the pipe to a StreamDrainer
running on its own thread, blocks on process exit and folds both into a
JobOutcome. The drain thread is the only reader of the pipe; this thread is
the only user of the process handle.
"""

import logging
import subprocess
import time
from typing import Callable, Optional

from .command_builders import build_encode_command
from .config import Settings
from .drainer import LineSink, StreamDrainer
from .exceptions import CommandExecutionError, EncodingError
from .formatting import EncodeProgress, print_success, print_error
from .models import EncodeJob, JobOutcome, JobState

logger = logging.getLogger(__name__)
encoder_log = logging.getLogger("vbatch.encoder")

DisplayFactory = Callable[[EncodeJob], EncodeProgress]


def default_display(job: EncodeJob) -> EncodeProgress:
    return EncodeProgress(job.source.name)


class ProcessSupervisor:
    """
    Run encode jobs one at a time and report their outcomes.

    Args:
        settings: Resolved settings (encoder binary, process behaviour)
        line_sink: Optional extra consumer for every diagnostic line
        display_factory: Builds the live progress display for a job
    """
    def __init__(self, settings: Settings, line_sink: Optional[LineSink] = None,
                 display_factory: Optional[DisplayFactory] = None):
        self.settings = settings
        self.line_sink = line_sink
        self.display_factory = display_factory or default_display
        self.state = JobState.NOT_STARTED
        self.drainer: Optional[StreamDrainer] = None

    def run(self, job: EncodeJob) -> JobOutcome:
        """Encode one job and return its outcome. Never raises for job failures."""
        self.state = JobState.NOT_STARTED
        self.drainer = None
        start_time = time.time()
        cmd = build_encode_command(job, self.settings.encoder.binary)
        logger.info("Encoding %s -> %s", job.source, job.output)
        logger.debug("Running ffmpeg command:\n%s", " \\\n    ".join(cmd))

        with self.display_factory(job) as display:
            try:
                process = self._start(cmd)
            except CommandExecutionError as e:
                self.state = JobState.COMPLETED
                return self._finish(job, start_time, error=e)

            self.state = JobState.STARTED
            drainer = StreamDrainer(
                process.stderr,
                self._make_sink(display),
                on_progress=display.update,
                name=f"{job.source.name} stderr"
            )
            self.drainer = drainer
            drainer.start()
            self.state = JobState.RUNNING

            returncode = self._wait(process)
            if self.settings.process.wait_for_drain:
                if not drainer.join(self.settings.process.drain_timeout):
                    logger.warning("Diagnostics of %s still draining after exit", job.source.name)
                elif drainer.error is not None:
                    logger.warning("Diagnostics of %s were not fully handled: %s", job.source.name, drainer.error)
            self.state = JobState.COMPLETED

        error = None
        if returncode != 0:
            error = EncodingError(
                f"ffmpeg exited with code {returncode} for {job.source}",
                exit_code=returncode,
                module="supervisor"
            )
        return self._finish(job, start_time, error=error, returncode=returncode,
                            lines_read=drainer.lines_read)

    def _start(self, cmd) -> subprocess.Popen:
        """Launch the encoder with its diagnostics piped as text."""
        try:
            return subprocess.Popen(
                cmd,
                stdin=subprocess.DEVNULL,
                stdout=subprocess.DEVNULL,
                stderr=subprocess.PIPE,
                bufsize=self.settings.process.buffer_size,
                text=True,
                encoding="utf-8",
                errors="replace"
            )
        except OSError as e:
            raise CommandExecutionError(
                f"Failed to start {cmd[0]}: {e}",
                module="supervisor"
            ) from e

    def _wait(self, process: subprocess.Popen) -> int:
        try:
            return process.wait()
        except KeyboardInterrupt:
            logger.warning("Interrupted, stopping ffmpeg (pid %s)", process.pid)
            self._terminate(process)
            raise

    def _terminate(self, process: subprocess.Popen) -> None:
        process.terminate()
        try:
            process.wait(timeout=self.settings.process.terminate_grace)
        except subprocess.TimeoutExpired:
            process.kill()
            process.wait()

    def _make_sink(self, display: EncodeProgress) -> LineSink:
        echo = self.settings.batch.echo_encoder_output
        extra = self.line_sink

        def sink(line: str) -> None:
            encoder_log.debug(line)
            if echo:
                display.print_line(line)
            if extra is not None:
                extra(line)

        return sink

    def _finish(self, job: EncodeJob, start_time: float, error: Optional[Exception] = None,
                returncode: Optional[int] = None, lines_read: int = 0) -> JobOutcome:
        outcome = JobOutcome(
            job=job,
            success=error is None,
            error=error,
            returncode=returncode,
            elapsed=time.time() - start_time,
            lines_read=lines_read
        )
        if outcome.success:
            print_success(f"Conversion complete: {job.source} to {job.output}")
        else:
            logger.error("Encoding failed for %s: %s", job.source, error)
            print_error(f"Conversion failed: {job.source}")
        return outcome
