"""
This module contains helper functions for formatting data into human-readable strings.
These functions are used in log messages and the final size report to present
file sizes and bitrates in a clear and consistent way.
"""

from pathlib import Path
from typing import Iterable


def formatted_size(size_bytes: int) -> str:
    """
    Converts a size in bytes to a human-readable string (e.g., B, KB, MB, GB, TB).

    Args:
        size_bytes: The size in bytes.

    Returns:
        A formatted string with the appropriate unit.
        For example, 1536 becomes "1.50 KB", and 2097152 becomes "2 MB".
    """
    if size_bytes < 0:
        size_bytes = 0

    units = ["B", "KB", "MB", "GB", "TB", "PB"]
    factor = 1024.0

    if size_bytes == 0:
        return "0 B"

    for unit in units:
        if size_bytes < factor:
            if unit == "B":
                return f"{size_bytes} {unit}"
            else:
                # "2.00 MB" -> "2 MB"
                return f"{size_bytes:.2f} {unit}".replace(".00", "")
        size_bytes /= factor

    return f"{size_bytes:.2f} {units[-1]}".replace(".00", "")


def formatted_bitrate(bps: int) -> str:
    """
    Converts a bitrate in bits per second to a decimal-unit string.

    A bitrate of 0 means the prober could not report one and is shown as
    "unknown".
    """
    if bps <= 0:
        return "unknown"
    for factor, name in ((1e9, "Gbps"), (1e6, "Mbps"), (1e3, "kbps")):
        if bps >= factor:
            return f"{bps / factor:.2f} {name}"
    return f"{bps} bps"


def contains_any_extensions(file_path_obj: Path, extensions_to_check: Iterable[str]) -> bool:
    """
    Checks if a file's extension is present in a given list (case-insensitive).

    Args:
        file_path_obj: The file to check.
        extensions_to_check: File extensions, with or without the leading dot.

    Returns:
        True if the file's extension is in the list, False otherwise.
    """
    normalized_extensions = {
        ext.lower() if ext.startswith(".") else f".{ext.lower()}"
        for ext in extensions_to_check
    }
    if not normalized_extensions:
        return False
    return file_path_obj.suffix.lower() in normalized_extensions
