"""
Side logs kept in the output directory next to the normalized files.

`ErrorLog` is a human-readable record of every file whose probe or action
failed, one block per failure. `SuccessLog` is a YAML list with one entry per
finished file, so a run can be reviewed (or post-processed) after the fact.

These files are written for people and are not progress state. If one cannot
be written, the problem goes to the main logger and the batch carries on.
Progress is kept by the ledger alone.
"""

from pathlib import Path
from typing import Any, Dict, List

import yaml
from loguru import logger

from ..config.common import ERROR_LOG_FILE_NAME, SUCCESS_LOG_FILE_NAME


class Log:
    """
    Common base of the side logs: owns the target directory and file path.

    Attributes:
        log_dir (Path): Resolved directory holding the log file. Created on init.
        log_file_path (Path): The log file itself.
    """

    # Separates the blocks of the text log.
    linesep_marker: str = "=" * 50

    def __init__(self, log_dir: Path, filename: str):
        self.log_dir: Path = log_dir.resolve()
        self.log_dir.mkdir(parents=True, exist_ok=True)
        self.log_file_path: Path = self.log_dir / filename

    def write(self, *args: Any):
        raise NotImplementedError(f"{type(self).__name__} does not implement write()")


class ErrorLog(Log):
    """Appends one block per failed file to `error.txt`."""

    def __init__(self, error_log_dir: Path, filename: str = ERROR_LOG_FILE_NAME):
        super().__init__(error_log_dir, filename)

    def write(self, *lines: str):
        """
        Appends `lines` as one block, closed by the separator line.

        Args:
            *lines: The block's lines, e.g. a headline and the error details.
        """
        if not lines:
            return
        block = "".join(f"{line}\n" for line in lines) + f"{self.linesep_marker}\n"
        try:
            with self.log_file_path.open("a", encoding="utf-8") as f:
                f.write(block)
        except OSError as e:
            logger.error(f"Could not append to {self.log_file_path} ({e}); the lost entry was:")
            for line in lines:
                logger.error(f"  {line}")


class SuccessLog(Log):
    """
    Keeps `vopt_log.yaml`, a YAML list of finished files.

    Each entry gets an `index` one higher than the largest index already in the
    file, so entries from successive runs stay in order.
    """

    def __init__(self, success_log_dir: Path, filename: str = SUCCESS_LOG_FILE_NAME):
        super().__init__(success_log_dir, filename)

    def read_entries(self) -> List[Dict]:
        """Returns the stored entries. A missing, unreadable or malformed file counts as empty."""
        if not self.log_file_path.is_file():
            return []
        try:
            data = yaml.safe_load(self.log_file_path.read_text(encoding="utf-8"))
        except (OSError, yaml.YAMLError) as e:
            logger.error(f"Ignoring unreadable success log {self.log_file_path}: {e}")
            return []
        if data is None:
            return []
        if not isinstance(data, list):
            logger.warning(f"Success log {self.log_file_path} is not a YAML list; starting it over.")
            return []
        return data

    def write(self, entry: dict):
        """
        Adds `entry` (with its new `index`) and rewrites the file.

        Args:
            entry: What was done to one file. Mutated in place to carry the index.
        """
        if not isinstance(entry, dict):
            logger.error(f"SuccessLog entries must be dicts, got {type(entry).__name__}")
            return

        entries = self.read_entries()
        indices = [e.get("index", 0) for e in entries if isinstance(e, dict)]
        entry["index"] = max(indices, default=0) + 1
        entries.append(entry)

        try:
            self.log_file_path.write_text(
                yaml.dump(entries, sort_keys=False, allow_unicode=True, indent=4, width=220),
                encoding="utf-8",
            )
        except OSError as e:
            logger.error(f"Could not update success log {self.log_file_path}: {e}")
