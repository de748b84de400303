"""Helper functions for building ffmpeg commands"""

import logging
from pathlib import Path
from typing import List

import ffmpeg

from .models import EncodeJob

log = logging.getLogger(__name__)


def subtitle_filter(subtitle: Path) -> str:
    """Build the subtitle burn-in video filter for a subtitle file"""
    # ffmpeg's filter parser treats backslashes as escapes
    return "subtitles=" + str(subtitle).replace("\\", "/")


def build_encode_command(job: EncodeJob, binary: str = "ffmpeg") -> List[str]:
    """Build ffmpeg command for encoding one job

    The video is re-encoded with the job's codec, preset, thread count and
    CRF; audio is copied; an existing output is overwritten.
    """
    params = job.params
    output_kwargs = {
        "c:v": params.codec,
        "preset": params.preset,
        "threads": params.threads,
        "crf": params.crf,
        "c:a": "copy",
    }
    if job.subtitle is not None:
        output_kwargs["vf"] = subtitle_filter(job.subtitle)

    stream = (
        ffmpeg
        .input(str(job.source))
        .output(str(job.output), **output_kwargs)
        .global_args("-hide_banner")
        .overwrite_output()
    )
    return ffmpeg.compile(stream, cmd=binary)


def build_encoders_command(binary: str = "ffmpeg") -> List[str]:
    """Build ffmpeg command listing the available encoders"""
    return [binary, "-hide_banner", "-encoders"]
