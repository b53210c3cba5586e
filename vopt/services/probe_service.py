"""
Metadata extraction for a single video file.

The work is split in two:

- `FFprobeProber` is the adapter around the external prober. It runs ffprobe
  through ffmpeg-python and answers four narrow queries, each as raw optional
  strings exactly as the prober reported them.
- `extract()` is the metadata extractor. It turns those raw answers into a
  `MediaProbe`, applying the bitrate fallback, the duration default and the
  rotation-probe policy.

Any object with the same four methods can stand in for `FFprobeProber`, which
is how the pipeline is tested without ffprobe installed.
"""
from __future__ import annotations

import re
from pathlib import Path
from pprint import pformat
from typing import Optional, Protocol, Sequence, Tuple

import ffmpeg
from loguru import logger

from ..config.video import (
    FFPROBE_EXE,
    ROTATION_ALWAYS_PROBE_EXTENSIONS,
    ROTATION_PROBE_MAX_DURATION,
)
from ..domain.exceptions import ProbeProcessFailure, UnparsableResolution
from ..domain.media import MediaProbe, Rotation
from ..utils.ffmpeg_utils import resolve_executable
from ..utils.format_utils import contains_any_extensions

# width, height, stream bit_rate
StreamFields = Tuple[Optional[str], ...]


class Prober(Protocol):
    def stream_fields(self, path: Path) -> StreamFields: ...

    def format_bit_rate(self, path: Path) -> Optional[str]: ...

    def format_duration(self, path: Path) -> Optional[str]: ...

    def rotation(self, path: Path) -> Optional[str]: ...


def _scalar(value) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


class FFprobeProber:
    """
    Answers metadata queries by running ffprobe via `ffmpeg.probe`.

    Every query is a separate ffprobe run, so the rotation query (the one that
    reads stream side data) is only paid for when the extractor asks for it.
    """

    def __init__(self, cmd: Optional[str] = None):
        self.cmd = cmd or resolve_executable(FFPROBE_EXE)

    def _probe(self, path: Path, **kwargs) -> dict:
        try:
            result = ffmpeg.probe(str(path), cmd=self.cmd, **kwargs)
        except ffmpeg.Error as e:
            stderr = e.stderr.decode("utf-8", errors="replace") if isinstance(e.stderr, bytes) else e.stderr
            logger.error(f"ffprobe failed for {path}: {stderr}")
            raise ProbeProcessFailure(f"ffprobe failed for {path}: {stderr}") from e
        except (OSError, ValueError) as e:
            # OSError: ffprobe could not be launched; ValueError: output was not JSON.
            logger.error(f"Could not probe {path}: {e}")
            raise ProbeProcessFailure(f"Could not probe {path}: {e}") from e
        logger.trace(f"Probe data for {path.name}:\n{pformat(result)}")
        return result

    def _first_video_stream(self, path: Path) -> dict:
        streams = self._probe(path, select_streams="v:0").get("streams") or []
        return streams[0] if streams else {}

    def stream_fields(self, path: Path) -> StreamFields:
        stream = self._first_video_stream(path)
        return tuple(_scalar(stream.get(key)) for key in ("width", "height", "bit_rate"))

    def format_bit_rate(self, path: Path) -> Optional[str]:
        return _scalar(self._probe(path).get("format", {}).get("bit_rate"))

    def format_duration(self, path: Path) -> Optional[str]:
        return _scalar(self._probe(path).get("format", {}).get("duration"))

    def rotation(self, path: Path) -> Optional[str]:
        stream = self._first_video_stream(path)
        for side_data in stream.get("side_data_list") or []:
            if "rotation" in side_data:
                return _scalar(side_data["rotation"])
        return _scalar((stream.get("tags") or {}).get("rotate"))


def parse_int(text: Optional[str]) -> Optional[int]:
    """Parses a decimal integer field. Returns None for absent or non-numeric values ("N/A")."""
    if text is None:
        return None
    try:
        return int(text.strip())
    except ValueError:
        return None


def parse_duration(duration_str: Optional[str]) -> float:
    """
    Parses a duration string into total seconds.

    Two formats are accepted:
    1. A number of seconds (e.g., "3600.5").
    2. A timecode 'HH:MM:SS.sss' (e.g., "01:00:00.500"); hours are optional.

    Args:
        duration_str: The duration reported by the prober, or None.

    Returns:
        The duration in seconds, or 0.0 when it is absent, unparsable or negative.
    """
    if duration_str is None:
        return 0.0
    text = duration_str.strip()
    try:
        seconds = float(text)
    except ValueError:
        match = re.fullmatch(r"(?:(\d{1,2}):)?(\d{1,2}):(\d{1,2}(?:\.\d+)?)", text)
        if not match:
            logger.debug(f"Could not parse duration string: {duration_str!r}")
            return 0.0
        hours_str, minutes_str, seconds_str = match.groups()
        seconds = int(hours_str or 0) * 3600 + int(minutes_str) * 60 + float(seconds_str)
    if seconds != seconds or seconds < 0:  # NaN or negative
        return 0.0
    return seconds


def parse_resolution_fields(fields: Sequence[Optional[str]]) -> Tuple[int, int, Optional[int]]:
    """
    Parses the (width, height, bit_rate) answer of the stream query.

    Width and height must both be positive integers. The bitrate is optional and
    comes back as None when absent or non-numeric so the caller can fall back to
    the container bitrate.

    Raises:
        UnparsableResolution: If width and height cannot both be recovered.
    """
    width = parse_int(fields[0]) if len(fields) > 0 else None
    height = parse_int(fields[1]) if len(fields) > 1 else None
    if width is None or height is None or width <= 0 or height <= 0:
        raise UnparsableResolution(f"Could not read width/height from prober fields {tuple(fields)!r}")
    bitrate = parse_int(fields[2]) if len(fields) > 2 else None
    if bitrate is not None and bitrate < 0:
        bitrate = None
    return width, height, bitrate


def parse_rotation(text: Optional[str]) -> Rotation:
    """
    Maps a reported rotation to a `Rotation`.

    Absent or zero means no rotation. -180 and -270 are the same turns as 180 and
    90. Anything else, including non-numeric values, is `Rotation.UNKNOWN`.
    """
    if text is None:
        return Rotation.NONE
    try:
        value = float(text)
    except ValueError:
        return Rotation.UNKNOWN
    if not value.is_integer():
        return Rotation.UNKNOWN
    degrees = int(value)
    if degrees in (0, 360, -360):
        return Rotation.NONE
    mapping = {
        90: Rotation.CW_90,
        -270: Rotation.CW_90,
        180: Rotation.ROT_180,
        -180: Rotation.ROT_180,
        270: Rotation.CW_270,
        -90: Rotation.CCW_90,
    }
    return mapping.get(degrees, Rotation.UNKNOWN)


def should_probe_rotation(path: Path, duration_seconds: float) -> bool:
    """Rotation is read for files up to 5 minutes long (or of unknown length) and for .mov files."""
    return (
        duration_seconds <= ROTATION_PROBE_MAX_DURATION
        or contains_any_extensions(path, ROTATION_ALWAYS_PROBE_EXTENSIONS)
    )


def extract(path: Path, prober: Prober, skip_orientation_check: bool = False) -> MediaProbe:
    """
    Builds the `MediaProbe` for one file.

    Args:
        path: The video file.
        prober: The capability answering the metadata queries.
        skip_orientation_check: Never query rotation; every file is treated as unrotated.

    Returns:
        The file's metadata.

    Raises:
        UnparsableResolution: The prober did not report a usable width and height.
        ProbeProcessFailure: The prober process itself failed.
    """
    width, height, bitrate = parse_resolution_fields(prober.stream_fields(path))

    if bitrate is None:
        bitrate = parse_int(prober.format_bit_rate(path))
        if bitrate is None or bitrate < 0:
            logger.debug(f"No usable bitrate for {path.name}; treating it as unknown.")
            bitrate = 0

    duration = parse_duration(prober.format_duration(path))

    rotation = Rotation.NONE
    if not skip_orientation_check and should_probe_rotation(path, duration):
        rotation = parse_rotation(prober.rotation(path))

    probe = MediaProbe(
        width=width,
        height=height,
        bitrate_bps=bitrate,
        duration_seconds=duration,
        rotation=rotation,
    )
    logger.debug(f"Metadata for {path.name}: {probe}")
    return probe
