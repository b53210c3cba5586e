"""
Command-Line Interface (CLI) for vopt.

This module uses Python's `argparse` to define the command-line arguments,
turns them into a `BatchConfig`, configures the logger and runs the batch.
"""
import argparse
import sys
from pathlib import Path
from typing import List, Optional

from loguru import logger

from .config.common import LOG_LEVELS, LOGGER_FORMAT
from .config.video import DEFAULT_OUTPUT_DIR_NAME
from .domain.exceptions import VoptException
from .domain.media import BatchConfig
from .pipeline.normalize_pipeline import NormalizePipeline


def get_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """
    Parses command-line arguments for vopt.

    Args:
        argv: The arguments to parse. Defaults to `sys.argv[1:]`.

    Returns:
        argparse.Namespace: The parsed arguments.
    """
    parser = argparse.ArgumentParser(
        description="Normalize a folder of videos: downscale to 1920px / cap at 10 Mbps, or copy as-is."
    )
    parser.add_argument("input_dir", type=Path, help="Directory containing the videos to normalize.")
    parser.add_argument(
        "--output-dir", type=Path, default=None,
        help=f"Where normalized files are written (default: <input_dir>/{DEFAULT_OUTPUT_DIR_NAME}).",
    )
    parser.add_argument(
        "--skip-orientation-check", action="store_true",
        help="Do not read rotation metadata; treat every video as unrotated.",
    )
    parser.add_argument(
        "--stop-on-error", action="store_true",
        help="Abort the batch on the first ffprobe/ffmpeg failure instead of moving on to the next file.",
    )
    parser.add_argument(
        "--timeout", type=float, default=None,
        help="Kill an ffmpeg run that takes longer than this many seconds.",
    )
    parser.add_argument(
        "--log-level", type=str, default="INFO", choices=LOG_LEVELS,
        help="Set the logging level.",
    )
    args = parser.parse_args(argv)
    if args.timeout is not None and args.timeout <= 0:
        parser.error("--timeout must be a positive number of seconds")
    return args


def build_config(args: argparse.Namespace) -> BatchConfig:
    input_dir = args.input_dir.expanduser().resolve()
    output_dir = (
        args.output_dir.expanduser().resolve()
        if args.output_dir
        else input_dir / DEFAULT_OUTPUT_DIR_NAME
    )
    return BatchConfig(
        input_dir=input_dir,
        output_dir=output_dir,
        skip_orientation_check=args.skip_orientation_check,
        stop_on_error=args.stop_on_error,
        timeout=args.timeout,
    )


def configure_logging(level: str = "INFO"):
    logger.remove()
    logger.add(sys.stderr, level=level, format=LOGGER_FORMAT)


def main(argv: Optional[List[str]] = None) -> int:
    """
    Runs one batch from the command line.

    Returns:
        The process exit status: 0 on success (individual files may still have
        failed; see the log), 1 when the batch could not run or was aborted,
        130 when interrupted.
    """
    args = get_args(argv)
    configure_logging(args.log_level)
    logger.debug(f"Parsed arguments: {args}")

    config = build_config(args)
    try:
        result = NormalizePipeline(config).run()
    except VoptException as e:
        logger.error(f"Batch aborted: {e}")
        return 1
    except KeyboardInterrupt:
        logger.warning("Interrupted. Files finished so far are in the ledger; rerun to continue.")
        return 130

    if result.failed:
        logger.warning(f"{len(result.failed)} file(s) failed; see the error log in {config.output_dir}")
    logger.success("vopt finished.")
    return 0
