"""Encoder capability checks against the local ffmpeg

Responsibilities:
- Run ``ffmpeg -encoders`` and keep its listing
- Decide whether a requested codec is available
- Parse encoder and codec names out of the listing for exact matching
"""

import logging
import re
import subprocess
from typing import Set

from .command_builders import build_encoders_command
from .exceptions import DependencyError, EncoderUnavailableError
from .utils import run_cmd

logger = logging.getLogger(__name__)

# " V....D libx265   libx265 H.265 / HEVC (codec hevc)"
_ENCODER_LINE_RE = re.compile(r"^\s*[VAS][A-Z.]{5}\s+(\S+)")
_CODEC_NAME_RE = re.compile(r"\(codec (\S+?)\)")


def list_encoders(binary: str = "ffmpeg") -> str:
    """
    Return the raw encoder listing printed by ffmpeg.

    Raises:
        DependencyError: If ffmpeg cannot be run or fails
    """
    try:
        result = run_cmd(build_encoders_command(binary))
    except (OSError, subprocess.CalledProcessError) as e:
        raise DependencyError(
            f"Failed to list encoders with {binary}: {e}",
            module="encoders"
        ) from e
    return result.stdout


def parse_encoder_names(listing: str) -> Set[str]:
    """Collect encoder names and the codec names they implement."""
    names = set()
    for line in listing.splitlines():
        match = _ENCODER_LINE_RE.match(line)
        if not match or match.group(1) == "=":
            continue
        names.add(match.group(1))
        names.update(_CODEC_NAME_RE.findall(line))
    return names


def codec_in_listing(codec: str, listing: str, exact: bool = False) -> bool:
    """
    Check a codec name against an encoder listing.

    The default is a plain substring test over the whole listing, so a codec
    name that is part of another name (``hevc`` in ``hevc_nvenc``) matches.
    With ``exact`` only whole encoder or codec names match.
    """
    if exact:
        return codec in parse_encoder_names(listing)
    return codec in listing


def check_encoder_available(codec: str, binary: str = "ffmpeg", exact: bool = False) -> None:
    """
    Ensure ffmpeg offers the requested encoder.

    Raises:
        DependencyError: If the encoder listing cannot be obtained
        EncoderUnavailableError: If the codec is absent from the listing
    """
    listing = list_encoders(binary)
    if not codec_in_listing(codec, listing, exact=exact):
        raise EncoderUnavailableError(codec, module="encoders")
    logger.info("Encoder %s is available", codec)
