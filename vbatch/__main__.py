"""
Command-line interface for the vbatch transcoding pipeline
"""
import argparse
import logging
import sys
from pathlib import Path

from . import __version__
from .config import (
    DEFAULT_CODEC, DEFAULT_CRF, DEFAULT_PRESET, DEFAULT_THREADS,
    FFMPEG_BIN, KNOWN_CODECS, KNOWN_PRESETS, LOG_LEVEL, Settings
)
from .exceptions import ConfigurationError, DependencyError, TraversalError
from .formatting import print_error, print_header
from .logging import configure_logging
from .pipeline import process_directory
from .utils import check_dependencies


def parse_args(argv=None):
    """Parse command line arguments"""
    parser = argparse.ArgumentParser(
        prog="vbatch",
        description="Batch-transcode every video in a folder with ffmpeg"
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}"
    )
    parser.add_argument(
        "--folder",
        type=Path,
        default=Path("./"),
        help="Folder to convert (default: %(default)s)"
    )
    parser.add_argument(
        "--crf",
        type=int,
        default=DEFAULT_CRF,
        help="Video quality, constant rate factor (default: %(default)s)"
    )
    parser.add_argument(
        "--threads",
        type=int,
        default=DEFAULT_THREADS,
        help="Encoder threads, 0 lets the encoder decide (default: %(default)s)"
    )
    parser.add_argument(
        "--codec",
        default=DEFAULT_CODEC,
        help=f"Video encoder, e.g. {', '.join(KNOWN_CODECS)} (default: %(default)s)"
    )
    parser.add_argument(
        "--subtitles",
        action="store_true",
        help="Burn in a same-name subtitle file when one exists"
    )
    parser.add_argument(
        "--preset",
        default=DEFAULT_PRESET,
        help=f"Encoder preset, e.g. {', '.join(KNOWN_PRESETS)} (default: %(default)s)"
    )
    parser.add_argument(
        "--ffmpeg",
        dest="binary",
        default=FFMPEG_BIN,
        help="ffmpeg executable (default: %(default)s)"
    )
    parser.add_argument(
        "--fail-fast",
        dest="fail_fast",
        action="store_true",
        help="Stop the batch at the first failed file"
    )
    parser.add_argument(
        "--exact-codec-match",
        dest="exact_codec_match",
        action="store_true",
        help="Require the codec to match an encoder name exactly"
    )
    parser.add_argument(
        "--no-drain-wait",
        dest="wait_for_drain",
        action="store_false",
        help="Report a job as soon as ffmpeg exits, without waiting for its remaining output"
    )
    parser.add_argument(
        "--quiet",
        action="store_true",
        help="Do not echo ffmpeg output, only show the progress bar"
    )
    parser.add_argument(
        "--log-level",
        dest="log_level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        default=LOG_LEVEL,
        help="Set logging level (default: %(default)s)"
    )
    parser.add_argument(
        "--log-dir",
        dest="log_dir",
        type=Path,
        default=None,
        help="Directory for session log files (default: $VBATCH_LOG_DIR or ~/vbatch_logs)"
    )
    parser.add_argument(
        "--no-log-file",
        dest="file_logging",
        action="store_false",
        help="Do not write a session log file"
    )
    return parser.parse_args(argv)


def build_settings(args) -> Settings:
    """Resolve settings from parsed arguments"""
    settings = Settings.from_environment(
        log_dir=args.log_dir,
        codec=args.codec,
        preset=args.preset,
        crf=args.crf,
        threads=args.threads,
        subtitles=args.subtitles,
        binary=args.binary
    )
    settings.log_level = args.log_level
    settings.process.wait_for_drain = args.wait_for_drain
    settings.batch.fail_fast = args.fail_fast
    settings.batch.exact_codec_match = args.exact_codec_match
    settings.batch.echo_encoder_output = not args.quiet
    return settings


def main(argv=None):
    """Main entry point"""
    args = parse_args(argv)
    log = logging.getLogger("vbatch")

    try:
        settings = build_settings(args)
    except ConfigurationError as e:
        print_error(str(e))
        return 1

    log_file = configure_logging(settings.log_level, args.file_logging, settings.log_dir)
    print_header(f"vbatch v{__version__}")
    if log_file:
        log.info("Log file: %s", log_file)

    if not check_dependencies(settings.encoder.binary):
        log.error("Missing required dependencies")
        return 1

    try:
        result = process_directory(args.folder, settings)
    except DependencyError as e:
        log.error("Encoder check failed: %s", e)
        return 1
    except TraversalError as e:
        log.error("Conversion error: %s", e)
        return 1
    except KeyboardInterrupt:
        log.warning("Encoding interrupted by user")
        return 130

    return 0 if result.success else 1


if __name__ == "__main__":
    sys.exit(main())
