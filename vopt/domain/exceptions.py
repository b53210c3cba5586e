"""
Defines custom exception types for vopt.

These exceptions let the pipeline tell apart the conditions it must react to
differently: a file whose resolution cannot be read is skipped and retried on
the next run, a failed external process costs only that file, and a failed
ledger write stops the whole batch.

All custom exceptions inherit from the base `VoptException`.
"""


class VoptException(Exception):
    """Base class for all custom exceptions in vopt."""

    pass


# --- Batch Setup Exceptions ---
class ConfigurationError(VoptException):
    """Raised when the batch configuration is inconsistent (e.g. output dir == input dir)."""

    pass


class DirectoryNotFound(VoptException):
    """Raised when the input directory does not exist. The batch does not start."""

    pass


# --- Probe Exceptions ---
class ProbeFailure(VoptException):
    """Base class for failures while extracting metadata from a media file."""

    pass


class UnparsableResolution(ProbeFailure):
    """
    Raised when the prober did not report both a width and a height.

    The file is skipped without being recorded in the ledger, so a later run
    tries it again.
    """

    pass


class ProbeProcessFailure(ProbeFailure):
    """
    Raised when the prober process itself fails: it could not be launched
    or exited with a non-zero status.
    """

    pass


# --- Action Exceptions ---
class TranscodeProcessFailure(VoptException):
    """
    Raised when the transcode (or copy) action for a file fails.

    Attributes:
        returncode: The exit status of the transcoder, or None when the process
                    never produced one (launch failure, timeout, copy error).
        stderr: The tail of the transcoder's error output, if any.
    """

    def __init__(self, message: str, returncode: int | None = None, stderr: str = ""):
        super().__init__(message)
        self.returncode = returncode
        self.stderr = stderr


# --- Ledger Exceptions ---
class LedgerError(VoptException):
    """Base class for progress ledger failures. Always fatal to the batch."""

    pass


class LedgerReadFailure(LedgerError):
    """Raised when an existing ledger file cannot be read at batch start."""

    pass


class LedgerWriteFailure(LedgerError):
    """
    Raised when a processed path could not be durably appended to the ledger.

    This is fatal to the batch: continuing would let the ledger silently drift
    from the work that was actually completed.
    """

    pass
