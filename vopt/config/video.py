"""
Configuration settings related to video processing.

This module defines the video file allow-list, the resize and bitrate limits
applied by the transform planner, the rotation-probe policy and the output
naming rules.
"""

# --- File Identification ---
# Matched case-insensitively against the file suffix. Only the top level of the
# input directory is scanned.
VIDEO_EXTENSIONS = (
    ".mp4", ".mov", ".m4v", ".mkv", ".avi", ".wmv", ".mts", ".m2ts",
    ".ts", ".3gp", ".webm", ".flv", ".mpg", ".mpeg",
)

# --- Output Settings ---
DEFAULT_OUTPUT_DIR_NAME = "comp"
# Every output is named <stem>.mp4, including plain copies of other containers.
OUTPUT_EXTENSION = ".mp4"

# --- Resize Limits ---
# Longest edge allowed for landscape and portrait videos.
MAX_LONG_EDGE = 1920
# Edge allowed for square videos.
MAX_SQUARE_EDGE = 1080

# --- Bitrate Cap ---
# Videos above this bitrate are re-encoded; every transcode targets it.
BITRATE_CAP_BPS = 10_000_000

# --- Rotation Probe Policy ---
# Rotation metadata is only read for short files or for these containers.
ROTATION_PROBE_MAX_DURATION = 300
ROTATION_ALWAYS_PROBE_EXTENSIONS = (".mov",)

# --- External Tools ---
FFMPEG_EXE = "ffmpeg"
FFPROBE_EXE = "ffprobe"
