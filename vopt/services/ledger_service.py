"""
The progress ledger: a durable record of which source files are finished.

The ledger is a plain text file inside the input directory holding one absolute
path per line. It is read once when the batch starts and afterwards only ever
appended to. A path is appended right after its output has been produced, and
the append is flushed and fsynced before the call returns, so an interrupted
batch leaves a ledger that lists exactly the files whose work completed.

Entries are never removed. A listed file that has since been moved or deleted
just stays in the file.
"""
import os
from pathlib import Path
from typing import Set

from loguru import logger

from ..config.common import LEDGER_FILE_NAME
from ..domain.exceptions import LedgerReadFailure, LedgerWriteFailure


def ledger_key(path: Path) -> str:
    return str(path.absolute())


class ProgressLedger:
    """
    Append-only set of processed source paths.

    Attributes:
        path (Path): The backing file.
        entries (Set[str]): In-memory copy used for membership checks.
    """

    def __init__(self, path: Path):
        self.path = path
        self.entries: Set[str] = set()
        # True when the file's last line was left without a newline (e.g. by a crash).
        self._needs_newline = False
        self.load()

    @classmethod
    def for_input_dir(cls, input_dir: Path) -> "ProgressLedger":
        return cls(input_dir / LEDGER_FILE_NAME)

    def load(self):
        """
        Reads the backing file into memory. A missing file is an empty ledger.

        Raises:
            LedgerReadFailure: If the file exists but cannot be read.
        """
        self.entries = set()
        self._needs_newline = False
        if not self.path.exists():
            logger.debug(f"No ledger at {self.path}; starting with an empty one.")
            return
        try:
            content = self.path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise LedgerReadFailure(f"Could not read ledger {self.path}: {e}") from e
        self.entries = {line for line in content.splitlines() if line}
        self._needs_newline = bool(content) and not content.endswith("\n")
        logger.debug(f"Loaded {len(self.entries)} ledger entries from {self.path}")

    def __contains__(self, path: Path) -> bool:
        return self.contains(path)

    def __len__(self) -> int:
        return len(self.entries)

    def contains(self, path: Path) -> bool:
        """True if `path` was fully processed in this or an earlier run. Never touches disk."""
        return ledger_key(path) in self.entries

    def mark_processed(self, path: Path):
        """
        Durably records `path` as processed.

        The line is written, flushed and fsynced before the in-memory set is
        updated. Recording a path that is already present is a no-op.

        Raises:
            LedgerWriteFailure: If the append could not be made durable.
        """
        key = ledger_key(path)
        if key in self.entries:
            return
        line = ("\n" if self._needs_newline else "") + key + "\n"
        try:
            with self.path.open("a", encoding="utf-8") as f:
                f.write(line)
                f.flush()
                os.fsync(f.fileno())
        except OSError as e:
            raise LedgerWriteFailure(f"Could not append {key} to ledger {self.path}: {e}") from e
        self._needs_newline = False
        self.entries.add(key)
