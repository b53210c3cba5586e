"""
Services Package for vopt.

This package contains the service layer: classes and functions that talk to the
outside world (external processes, the filesystem) on behalf of the pipeline.

- **Probe Service (`FFprobeProber`, `extract`):** Queries ffprobe and builds the
  `MediaProbe` for a file.
- **Transcode Service (`FFmpegTranscoder`, `copy_file`):** Performs the action
  chosen by the planner.
- **Ledger Service (`ProgressLedger`):** Records which sources are finished so
  reruns pick up where the last run stopped.
- **File Processing Service (`ProcessVideoFiles`):** Finds the candidate files.
- **Logging Service (`SuccessLog`, `ErrorLog`):** Writes the YAML record of
  completed actions and the plain-text error log.
- **Report Service (`build_size_report`):** Sums source and output sizes.
"""
