"""
This module provides utility functions for running the external FFmpeg tools.
It includes the process wrapper used for every transcode and the lookup of the
ffmpeg/ffprobe executables.
"""

import os
import shlex
import subprocess
import sys
from pathlib import Path
from typing import List, Optional

from loguru import logger

from ..config.common import MODULE_PATH


def resolve_executable(exe_name: str, module_path: Optional[Path] = MODULE_PATH) -> str:
    """
    Determines the command to use for an FFmpeg tool.

    The directory configured in `config.user.yaml` (`paths.ffmpeg_dir`) wins when
    it contains the executable. Otherwise the bare name is returned so the
    system PATH is searched.

    Args:
        exe_name: The tool name without extension, e.g. "ffmpeg" or "ffprobe".
        module_path: The configured tool directory, if any.

    Returns:
        An absolute path or the bare executable name.
    """
    platform_name = f"{exe_name}.exe" if sys.platform == "win32" else exe_name
    if module_path and module_path.is_dir():
        configured_path = module_path / platform_name
        if configured_path.is_file():
            logger.debug(f"Using {exe_name} from configured path: '{configured_path}'")
            return str(configured_path)
        logger.warning(
            f"`ffmpeg_dir` is configured, but '{platform_name}' was not found there. Falling back to system PATH."
        )
    return exe_name


def display_command(cmd_list: List[str]) -> str:
    """Joins a command list into a string that can be pasted into a shell."""
    if os.name == "nt":
        return subprocess.list2cmdline(cmd_list)
    return shlex.join(cmd_list)


def run_cmd(
    cmd_list: List[str],
    src_file_for_log: Path = Path(),
    show_cmd: bool = False,
    cmd_log_file_path: Optional[Path] = None,
    timeout: Optional[float] = None,
) -> Optional[subprocess.CompletedProcess]:
    """
    Executes an external command and captures its output.

    This is a wrapper around `subprocess.run` that adds logging of the command
    and its output. The call blocks until the process exits (or the optional
    timeout expires).

    Args:
        cmd_list: The command to execute as a list of arguments.
        src_file_for_log: The source file being processed, used for log context.
        show_cmd: If True, the command is logged at DEBUG level before execution.
        cmd_log_file_path: If provided, the command string is appended to this file.
        timeout: Seconds to wait before killing the process. None waits forever.

    Returns:
        A `subprocess.CompletedProcess` once the process has exited, whatever its
        return code. Returns `None` if the command could not be started or timed out.
    """
    if not cmd_list:
        logger.error("run_cmd received an empty command list.")
        return None

    display_cmd_str = display_command(cmd_list)
    if show_cmd:
        logger.debug(f"Executing: {display_cmd_str}")

    if cmd_log_file_path:
        try:
            cmd_log_file_path.parent.mkdir(parents=True, exist_ok=True)
            with cmd_log_file_path.open("a", encoding="utf-8") as cmd_f:
                cmd_f.write(display_cmd_str + "\n")
        except OSError as e:
            logger.error(f"Failed to write command to log file {cmd_log_file_path}: {e}")

    try:
        result = subprocess.run(
            cmd_list,
            capture_output=True,
            text=True,
            encoding="utf-8",
            errors="replace",
            shell=False,
            timeout=timeout,
        )
    except FileNotFoundError:
        logger.error(
            f"Error: Command not found ('{cmd_list[0]}'). Ensure it's in your system's PATH or configured in config.user.yaml."
        )
        return None
    except subprocess.TimeoutExpired:
        logger.error(f"Error: Command timed out after {timeout}s. Command: {display_cmd_str}")
        return None
    except OSError as e:
        logger.error(f"Could not start command for {src_file_for_log.name}: {e}")
        return None

    if result.stdout:
        logger.trace(f"Command stdout: {result.stdout[:500]}")
    if result.stderr and result.returncode != 0:
        logger.debug(f"Command stderr (error, rc={result.returncode}): {result.stderr}")
    elif result.stderr:
        logger.trace(f"Command stderr (non-error, rc={result.returncode}): {result.stderr}")

    return result
