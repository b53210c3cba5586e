"""
Common configuration settings used throughout the application.

This module contains globally shared constants for logging, side-log file
names and progress tracking. It also handles the loading of user-specific
configuration from an external YAML file, so that the location of the FFmpeg
executables can be customized without modifying the source code.
"""
from pathlib import Path

import yaml
from loguru import logger

# --- User-Defined Path Configuration ---
# This block loads user-specific paths from a 'config.user.yaml' file located
# at the project root.

PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent
USER_CONFIG_PATH = PROJECT_ROOT / "config.user.yaml"


def load_module_path(config_path: Path = USER_CONFIG_PATH) -> Path | None:
    """
    Reads the FFmpeg directory from a user YAML config file.

    The file is expected to look like::

        paths:
          ffmpeg_dir: /opt/ffmpeg/bin

    Args:
        config_path: The YAML file to read.

    Returns:
        The configured directory, or None when the file is absent, unparsable
        or does not set `paths.ffmpeg_dir`.
    """
    if not config_path.is_file():
        logger.debug(f"User config '{config_path}' not found. Relying on system PATH for executables.")
        return None
    try:
        with config_path.open("r", encoding="utf-8") as f:
            user_config = yaml.safe_load(f)
    except (OSError, yaml.YAMLError) as e:
        logger.warning(f"Could not load or parse '{config_path}': {e}")
        return None
    if not isinstance(user_config, dict):
        return None
    paths_config = user_config.get("paths") or {}
    ffmpeg_dir_str = paths_config.get("ffmpeg_dir") if isinstance(paths_config, dict) else None
    return Path(ffmpeg_dir_str) if ffmpeg_dir_str else None


# The directory containing the ffmpeg and ffprobe executables. If None, the
# executables are expected to be available on the system's PATH.
MODULE_PATH: Path | None = load_module_path()


# --- Logging Configuration ---

# The format string for the Loguru logger.
LOGGER_FORMAT = (
    "<green>{time:MM-DD HH:mm:ss}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> | "
    "<level>{message}</level>"
)

LOG_LEVELS = ("TRACE", "DEBUG", "INFO", "WARNING", "ERROR")


# --- Progress Tracking and Side Logs ---

# Name of the append-only progress ledger kept inside the input directory.
LEDGER_FILE_NAME = ".vopt"

# Plain-text log of failed external process calls, written to the output directory.
ERROR_LOG_FILE_NAME = "error.txt"

# Structured YAML record of every completed action, written to the output directory.
SUCCESS_LOG_FILE_NAME = "vopt_log.yaml"

# Every transcode command line is appended here, inside the output directory.
COMMAND_TEXT = "cmd.txt"
