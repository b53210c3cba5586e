"""
Carries out the action chosen by the transform planner.

`FFmpegTranscoder` re-encodes a file with the plan's scale and the fixed video
bitrate cap, copying the audio stream untouched. `copy_file` handles the
no-op case with a plain byte-for-byte copy.
"""
from __future__ import annotations

import shutil
from pathlib import Path
from typing import List, Optional, Protocol

from loguru import logger

from ..config.common import COMMAND_TEXT
from ..config.video import BITRATE_CAP_BPS, FFMPEG_EXE
from ..domain.exceptions import TranscodeProcessFailure
from ..domain.media import TransformPlan
from ..utils.ffmpeg_utils import resolve_executable, run_cmd

STDERR_TAIL_CHARS = 2000


class Transcoder(Protocol):
    def transcode(self, source: Path, output: Path, plan: TransformPlan) -> None: ...


def build_transcode_command(ffmpeg_cmd: str, source: Path, output: Path, plan: TransformPlan) -> List[str]:
    """
    Builds the ffmpeg argument list for a plan.

    ffmpeg applies the source's display rotation before filtering, so the scale
    filter is expressed in rotation-corrected (logical) dimensions.
    """
    cmd = [ffmpeg_cmd, "-hide_banner", "-y", "-i", str(source)]
    if plan.resize_needed:
        cmd += ["-vf", f"scale={plan.target_width}:{plan.target_height}"]
    cmd += ["-b:v", str(BITRATE_CAP_BPS), "-c:a", "copy", str(output)]
    return cmd


class FFmpegTranscoder:
    """
    Runs ffmpeg for one file and reports failure as `TranscodeProcessFailure`.

    Attributes:
        ffmpeg_cmd: The ffmpeg executable to run.
        cmd_log_file_path: Every command line is appended here when set.
        timeout: Optional per-invocation limit in seconds.
    """

    def __init__(
        self,
        cmd_log_file_path: Optional[Path] = None,
        timeout: Optional[float] = None,
        ffmpeg_cmd: Optional[str] = None,
    ):
        self.ffmpeg_cmd = ffmpeg_cmd or resolve_executable(FFMPEG_EXE)
        self.cmd_log_file_path = cmd_log_file_path
        self.timeout = timeout

    @classmethod
    def for_output_dir(cls, output_dir: Path, timeout: Optional[float] = None) -> "FFmpegTranscoder":
        return cls(cmd_log_file_path=output_dir / COMMAND_TEXT, timeout=timeout)

    def transcode(self, source: Path, output: Path, plan: TransformPlan) -> None:
        cmd = build_transcode_command(self.ffmpeg_cmd, source, output, plan)
        res = run_cmd(
            cmd,
            src_file_for_log=source,
            show_cmd=True,
            cmd_log_file_path=self.cmd_log_file_path,
            timeout=self.timeout,
        )
        if res is None:
            raise TranscodeProcessFailure(f"ffmpeg could not be run for {source.name}")
        if res.returncode != 0:
            raise TranscodeProcessFailure(
                f"ffmpeg exited with status {res.returncode} for {source.name}",
                returncode=res.returncode,
                stderr=(res.stderr or "")[-STDERR_TAIL_CHARS:],
            )
        logger.debug(f"ffmpeg finished for {source.name} -> {output.name}")


def copy_file(source: Path, output: Path) -> None:
    """Copies `source` to `output` byte for byte, replacing any existing file."""
    try:
        shutil.copyfile(source, output)
    except OSError as e:
        raise TranscodeProcessFailure(f"Could not copy {source} to {output}: {e}") from e
