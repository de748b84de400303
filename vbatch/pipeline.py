"""High-level batch orchestration

Responsibilities:
  - Verify once that ffmpeg offers the requested encoder.
  - Walk the input folder and build one encode job per video file.
  - Supervise the jobs strictly one after another.
  - Aggregate and present a final summary of the batch.

Setup and traversal errors propagate to the caller. Per-file failures are
recorded and the walk continues, unless fail-fast is configured.
"""

import logging
import time
from pathlib import Path
from typing import Optional

from .config import Settings
from .discovery import iter_jobs
from .encoders import check_encoder_available
from .formatting import (
    format_duration, print_check, print_error, print_header,
    print_outcome_table, print_success, print_warning
)
from .models import BatchResult, JobOutcome
from .supervisor import ProcessSupervisor
from .utils import format_size, get_file_size

logger = logging.getLogger(__name__)


def _report_sizes(outcome: JobOutcome) -> None:
    try:
        input_size = get_file_size(outcome.source)
        output_size = get_file_size(outcome.output)
    except OSError as e:
        logger.debug("Could not stat %s: %s", outcome.output, e)
        return
    print_check(f"Input size:  {format_size(input_size)}")
    print_check(f"Output size: {format_size(output_size)}")
    if input_size:
        reduction = ((input_size - output_size) / input_size) * 100
        print_check(f"Reduction:   {reduction:.2f}%")


def process_directory(folder: Path, settings: Settings,
                      supervisor: Optional[ProcessSupervisor] = None) -> BatchResult:
    """
    Encode every video file under folder.

    Args:
        folder: Root of the directory tree to walk
        settings: Resolved settings
        supervisor: Optional supervisor, mainly for tests

    Returns:
        BatchResult: Outcomes in processing order

    Raises:
        DependencyError: If the encoder listing cannot be obtained
        EncoderUnavailableError: If the requested codec is not offered
        TraversalError: If the directory walk fails
    """
    folder = Path(folder)
    codec = settings.encoder.codec
    logger.info("Checking encoder %s", codec)
    check_encoder_available(codec, settings.encoder.binary, exact=settings.batch.exact_codec_match)
    print_check(f"Encoder {codec} is available")

    supervisor = supervisor or ProcessSupervisor(settings)
    result = BatchResult()
    batch_start = time.time()

    for job in iter_jobs(folder, settings):
        print_header(f"Encoding {job.source.name}")
        outcome = supervisor.run(job)
        result.outcomes.append(outcome)
        if outcome.success:
            _report_sizes(outcome)
        elif settings.batch.fail_fast:
            logger.error("Stopping batch after failure of %s", job.source)
            result.aborted = True
            break

    _print_summary(folder, result, time.time() - batch_start)
    return result


def _print_summary(folder: Path, result: BatchResult, elapsed: float) -> None:
    if not result.outcomes:
        print_warning(f"No video files found in {folder}")
        return

    print_header("Final Encoding Summary")
    print_outcome_table(result.outcomes)
    if result.failed:
        print_error(f"{len(result.failed)} of {len(result.outcomes)} files failed")
    else:
        print_success(f"All {len(result.outcomes)} files converted")
    if result.aborted:
        print_warning("Batch stopped early because fail-fast is enabled")
    print_success(f"Total execution time: {format_duration(elapsed)}")
