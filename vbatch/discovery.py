"""Discovery of source videos and their subtitle files"""

import logging
import os
from pathlib import Path
from typing import Iterator, Optional

from .config import OUTPUT_CONTAINER, SUBTITLE_EXTENSIONS, VIDEO_EXTENSIONS, Settings
from .exceptions import TraversalError
from .models import EncodeJob

logger = logging.getLogger(__name__)


def is_video_file(path: Path) -> bool:
    """Whether path has a recognized video extension (case-insensitive)."""
    return path.suffix.lower() in VIDEO_EXTENSIONS


def build_output_path(source: Path, codec: str) -> Path:
    """Derive ``<stem>_<codec>.mp4`` next to the source."""
    return source.with_name(f"{source.stem}_{codec}{OUTPUT_CONTAINER}")


def find_subtitle(source: Path) -> Optional[Path]:
    """Return the first existing same-stem subtitle file, if any."""
    for ext in SUBTITLE_EXTENSIONS:
        candidate = source.with_suffix(ext)
        if candidate.is_file():
            return candidate
    return None


def _raise_traversal_error(error: OSError) -> None:
    raise TraversalError(
        f"Cannot read {error.filename}: {error.strerror or error}",
        path=error.filename,
        module="discovery"
    ) from error


def iter_video_files(folder: Path) -> Iterator[Path]:
    """
    Walk folder in lexical order and yield every recognized video file.

    Raises:
        TraversalError: If any directory (including folder itself) cannot be read
    """
    for dirpath, dirnames, filenames in os.walk(folder, onerror=_raise_traversal_error):
        dirnames.sort()
        for filename in sorted(filenames):
            path = Path(dirpath) / filename
            if is_video_file(path):
                yield path


def build_job(source: Path, settings: Settings) -> EncodeJob:
    """Build the encode job for one source file."""
    params = settings.encoder_params()
    subtitle = find_subtitle(source) if settings.encoder.subtitles else None
    if subtitle is not None:
        logger.info("Found subtitle for %s: %s", source.name, subtitle.name)
    return EncodeJob(
        source=source,
        output=build_output_path(source, params.codec),
        params=params,
        subtitle=subtitle
    )


def iter_jobs(folder: Path, settings: Settings) -> Iterator[EncodeJob]:
    """Yield one encode job per video file under folder."""
    for source in iter_video_files(folder):
        yield build_job(source, settings)
