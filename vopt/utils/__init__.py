"""
Utilities Package for vopt.

This package contains helper modules that are not specific to the decision
logic but support it.

Modules:
    - ffmpeg_utils.py: Runs external commands and locates the ffmpeg/ffprobe
      executables.
    - format_utils.py: Formats file sizes and bitrates for log messages and
      checks file extensions.
"""
