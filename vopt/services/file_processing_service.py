"""
Provides the service that discovers the video files a batch will consider.

Only the top level of the input directory is scanned. Subdirectories, including
the default output directory, are never entered.
"""

from pathlib import Path
from typing import Tuple

from loguru import logger

from ..config.video import VIDEO_EXTENSIONS
from ..domain.exceptions import DirectoryNotFound
from ..utils.format_utils import contains_any_extensions


class ProcessVideoFiles:
    """
    Discovers candidate video files in a single directory.

    Candidates are regular files whose extension is in `VIDEO_EXTENSIONS`
    (case-insensitive). Hidden files, such as the ledger itself, are ignored.
    The result is sorted by name so every run walks the files in the same order.

    Attributes:
        source_dir (Path): The absolute input directory.
        files (Tuple[Path, ...]): The discovered candidates, in processing order.
    """

    def __init__(self, path: Path):
        """
        Args:
            path: The input directory.

        Raises:
            DirectoryNotFound: If `path` does not exist or is not a directory.
        """
        self.source_dir: Path = self._get_source_directory_from_path(path)
        self.files: Tuple[Path, ...] = tuple()
        self.set_files_to_process()

    @staticmethod
    def _get_source_directory_from_path(input_path: Path) -> Path:
        resolved_path = input_path.resolve()
        if not resolved_path.is_dir():
            logger.error(f"Input directory does not exist: {resolved_path}")
            raise DirectoryNotFound(f"Input directory does not exist: {resolved_path}")
        return resolved_path

    def set_files_to_process(self):
        discovered_video_files = [
            entry
            for entry in self.source_dir.iterdir()
            if not entry.name.startswith(".")
            and entry.is_file()
            and contains_any_extensions(entry, VIDEO_EXTENSIONS)
        ]
        self.files = tuple(sorted(discovered_video_files, key=lambda p: p.name))
        logger.debug(f"ProcessVideoFiles: Discovered {len(self.files)} video files in {self.source_dir}.")
