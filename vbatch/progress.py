"""Progress parsing for encoder diagnostic lines

A line is decodable when it carries both recognized fields, in any order and
surrounded by any other text:

    TIME_FIELD     := "time=" HH ":" MM ":" SS "." FF    (two digits each)
    DURATION_FIELD := "duration=" DIGITS "." DIGITS

e.g. ``frame=100 fps=10 time=00:01:30.50 duration=600.0``.

Lines without both markers, with malformed fields, or with a non-positive
duration are not decodable. Parsing never raises; the caller simply gets
``None`` and emits no progress update for that line.
"""

import logging
import re
from typing import Optional

from .models import ProgressSample

logger = logging.getLogger(__name__)

TIME_MARKER = "time="
DURATION_MARKER = "duration="

_TIME_RE = re.compile(r"time=(\d{2}):(\d{2}):(\d{2}\.\d{2})")
_DURATION_RE = re.compile(r"duration=(\d+\.\d+)")


def parse_timestamp(text: str) -> Optional[float]:
    """Convert the first ``time=HH:MM:SS.ss`` field in text to seconds."""
    match = _TIME_RE.search(text)
    if not match:
        return None
    try:
        hours, minutes = int(match.group(1)), int(match.group(2))
        seconds = float(match.group(3))
    except ValueError:
        return None
    return hours * 3600 + minutes * 60 + seconds


def parse_duration(text: str) -> Optional[float]:
    """Return the first ``duration=`` value in text, if well formed."""
    match = _DURATION_RE.search(text)
    if not match:
        return None
    try:
        return float(match.group(1))
    except ValueError:
        return None


def parse_progress_sample(line: str) -> Optional[ProgressSample]:
    """Decode a diagnostic line into a ProgressSample, or None."""
    if TIME_MARKER not in line or DURATION_MARKER not in line:
        return None

    elapsed = parse_timestamp(line)
    duration = parse_duration(line)
    if elapsed is None or duration is None:
        logger.debug("Unparseable progress line: %s", line)
        return None
    if duration <= 0:
        return None
    return ProgressSample(elapsed=elapsed, duration=duration)


def parse_progress(line: str) -> Optional[float]:
    """Return the completion percentage carried by line, or None."""
    sample = parse_progress_sample(line)
    if sample is None:
        return None
    return sample.percent
