"""
Configuration Package for vopt.

This package centralizes the static configuration settings for the application.
Keeping the thresholds and names here means the decision rules can be read in
one place without digging through the pipeline code.

This package includes settings for:
- Logging format, side-log file names and the optional user YAML config.
- Video file identification, resize limits, the bitrate cap and the
  rotation-probe policy.
"""
