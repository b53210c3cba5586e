"""
Post-batch size summary: how much space the normalized copies take compared to
their sources.
"""
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Iterable

from loguru import logger

from ..utils.format_utils import formatted_size


@dataclass
class SizeReport:
    file_count: int = 0
    source_bytes: int = 0
    output_bytes: int = 0

    @property
    def percent_of_source(self) -> float:
        if self.source_bytes == 0:
            return 0.0
        return self.output_bytes / self.source_bytes * 100


def build_size_report(pairs: Iterable[tuple[Path, Path]]) -> SizeReport:
    """
    Sums source and output sizes over (source, output) pairs.

    The caller passes only finished files. Several sources can share one output
    (same stem, different extension); only the last pair for an output counts,
    since that source's result is what the file holds. Pairs whose files no
    longer exist are left out.
    """
    latest_source_by_output: Dict[Path, Path] = {}
    for source, output in pairs:
        latest_source_by_output[output] = source

    report = SizeReport()
    for output, source in latest_source_by_output.items():
        if not (source.is_file() and output.is_file()):
            continue
        report.file_count += 1
        report.source_bytes += source.stat().st_size
        report.output_bytes += output.stat().st_size
    return report


def log_size_report(report: SizeReport):
    logger.info(
        f"Size summary for {report.file_count} file(s): "
        f"source {formatted_size(report.source_bytes)} -> "
        f"output {formatted_size(report.output_bytes)} "
        f"({report.percent_of_source:.1f}% of source)"
    )
