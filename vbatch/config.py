"""Configuration settings for the vbatch transcoding pipeline

This module centralizes all configuration settings including:
- Recognized video and subtitle file extensions
- Default encoder parameters (codec, preset, CRF, threads)
- Process supervision and batch behaviour
- Log file locations

User-configurable values can be overridden through environment variables
or command-line flags; the dataclasses below carry the resolved values.
"""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from .exceptions import ConfigurationError
from .models import EncoderParams

# LOG_DIR: user definable with default of "$HOME/vbatch_logs"
LOG_DIR = Path(os.environ.get("VBATCH_LOG_DIR", str(Path.home() / "vbatch_logs")))

# Encoder binary used for both the capability listing and the encodes
FFMPEG_BIN = os.environ.get("VBATCH_FFMPEG", "ffmpeg")

# Logging configuration
LOG_LEVEL = os.environ.get("VBATCH_LOG_LEVEL", "INFO")

# Recognized extensions, matched case-insensitively
VIDEO_EXTENSIONS = frozenset({".mp4", ".mkv", ".avi", ".mov", ".flv", ".wmv", ".webm"})
# Tried in this order, first existing file wins
SUBTITLE_EXTENSIONS = (".srt", ".ass", ".ssa", ".sub", ".idx")

# Outputs are always written as <stem>_<codec>.mp4 next to the source
OUTPUT_CONTAINER = ".mp4"

# Encoding defaults
DEFAULT_CODEC = "hevc"
DEFAULT_PRESET = "medium"
DEFAULT_CRF = 28
DEFAULT_THREADS = 0  # 0 lets the encoder pick

KNOWN_CODECS = ("hevc", "hevc_qsv", "hevc_amf", "hevc_nvenc", "h264", "vp9")
KNOWN_PRESETS = (
    "ultrafast", "superfast", "veryfast", "faster", "fast",
    "medium", "slow", "slower", "veryslow",
)

# Seconds granted to the drain thread after the encoder exits
DRAIN_TIMEOUT = 5.0
# Seconds granted to a terminated encoder before it is killed
TERMINATE_GRACE = 5.0


@dataclass
class EncoderConfig:
    """Encoder parameters applied to every job in a batch."""
    codec: str = DEFAULT_CODEC
    preset: str = DEFAULT_PRESET
    crf: int = DEFAULT_CRF
    threads: int = DEFAULT_THREADS
    subtitles: bool = False
    binary: str = FFMPEG_BIN


@dataclass
class ProcessConfig:
    """Configuration for encoder process supervision."""
    buffer_size: int = 1  # Line buffered
    wait_for_drain: bool = True
    drain_timeout: float = DRAIN_TIMEOUT
    terminate_grace: float = TERMINATE_GRACE


@dataclass
class BatchConfig:
    """Configuration for the batch driver."""
    fail_fast: bool = False
    exact_codec_match: bool = False
    echo_encoder_output: bool = True


@dataclass
class Settings:
    """Main configuration class for vbatch."""
    encoder: EncoderConfig = field(default_factory=EncoderConfig)
    process: ProcessConfig = field(default_factory=ProcessConfig)
    batch: BatchConfig = field(default_factory=BatchConfig)
    log_dir: Path = LOG_DIR
    log_level: str = LOG_LEVEL

    @classmethod
    def from_environment(cls, log_dir: Optional[Path] = None, **encoder_overrides) -> "Settings":
        """Create settings from environment defaults and optional encoder overrides.

        Args:
            log_dir: Optional log directory override
            **encoder_overrides: Any ``EncoderConfig`` field, e.g. ``codec="h264"``

        Raises:
            ConfigurationError: If an override is unknown or a value is invalid
        """
        encoder = EncoderConfig()
        for name, value in encoder_overrides.items():
            if not hasattr(encoder, name):
                raise ConfigurationError(f"Unknown encoder setting: {name}", module="config")
            if value is not None:
                setattr(encoder, name, value)

        settings = cls(encoder=encoder)
        if log_dir is not None:
            settings.log_dir = Path(log_dir)
        settings.validate()
        return settings

    def validate(self) -> None:
        """Validate all configuration settings."""
        validate_encoder_config(self.encoder)
        validate_process_config(self.process)

    def encoder_params(self) -> EncoderParams:
        """Freeze the encoder configuration into per-job parameters."""
        return EncoderParams(
            codec=self.encoder.codec,
            preset=self.encoder.preset,
            crf=self.encoder.crf,
            threads=self.encoder.threads,
        )


def validate_encoder_config(config: EncoderConfig) -> None:
    """Validate encoder configuration."""
    if not config.codec or not config.codec.strip():
        raise ConfigurationError("Codec must not be empty", module="config")
    if not config.preset or not config.preset.strip():
        raise ConfigurationError("Preset must not be empty", module="config")
    if config.crf < 0:
        raise ConfigurationError(f"CRF must be non-negative: {config.crf}", module="config")
    if config.threads < 0:
        raise ConfigurationError(f"Thread count must be non-negative: {config.threads}", module="config")
    if not config.binary:
        raise ConfigurationError("Encoder binary must not be empty", module="config")


def validate_process_config(config: ProcessConfig) -> None:
    """Validate process configuration."""
    if config.buffer_size < 0:
        raise ConfigurationError(f"Buffer size must be non-negative: {config.buffer_size}", module="config")
    if config.drain_timeout <= 0:
        raise ConfigurationError(f"Drain timeout must be positive: {config.drain_timeout}", module="config")
    if config.terminate_grace <= 0:
        raise ConfigurationError(f"Terminate grace must be positive: {config.terminate_grace}", module="config")
