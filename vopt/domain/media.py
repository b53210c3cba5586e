"""
Value types describing a video file and the decisions made about it.

Each stage of the per-file pipeline produces one of these immutable records and
hands it to the next stage: the probe yields a `MediaProbe`, the orientation
resolver turns it into `OrientedDimensions`, and the planner derives a
`TransformPlan` that fully determines the action taken.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path


class Rotation(Enum):
    """Rotation reported by the prober's display-matrix side data or rotate tag."""

    NONE = "none"
    CW_90 = "90"
    ROT_180 = "180"
    CW_270 = "270"
    CCW_90 = "-90"
    UNKNOWN = "unknown"

    @property
    def transposes(self) -> bool:
        """True when the rotation swaps the displayed width and height."""
        return self in (Rotation.CW_90, Rotation.CW_270, Rotation.CCW_90)


class Orientation(Enum):
    """Shape class of the rotation-corrected frame."""

    LANDSCAPE = "landscape"
    PORTRAIT = "portrait"
    SQUARE = "square"


class TransformAction(Enum):
    """What the pipeline does with a file: copy it as-is or re-encode it."""

    COPY = "copy"
    TRANSCODE_RESIZE = "transcodeResize"
    TRANSCODE_BITRATE_ONLY = "transcodeBitrateOnly"


@dataclass(frozen=True)
class MediaProbe:
    # bitrate_bps and duration_seconds use 0 for "unknown"
    width: int
    height: int
    bitrate_bps: int = 0
    duration_seconds: float = 0.0
    rotation: Rotation = Rotation.NONE


@dataclass(frozen=True)
class OrientedDimensions:
    logical_width: int
    logical_height: int
    orientation: Orientation


@dataclass(frozen=True)
class TransformPlan:
    """
    The single source of truth for what happens to a file.

    `target_width`/`target_height` equal the logical dimensions when no resize is
    needed. Any transcode, resize or bitrate-only, applies the fixed bitrate cap.
    """

    target_width: int
    target_height: int
    resize_needed: bool
    bitrate_cap_needed: bool
    action: TransformAction

    @property
    def needs_transcode(self) -> bool:
        return self.action is not TransformAction.COPY


class FileStatus(Enum):
    """How one file ended up in a batch run."""

    SKIPPED_LEDGER = "skipped_ledger"
    SKIPPED_UNPARSABLE = "skipped_unparsable"
    COPIED = "copied"
    TRANSCODED = "transcoded"
    FAILED = "failed"


@dataclass
class FileOutcome:
    source: Path
    status: FileStatus
    plan: TransformPlan | None = None
    error: str | None = None


@dataclass
class BatchConfig:
    """
    Resolved settings for one batch run.

    Attributes:
        input_dir: Absolute path of the directory scanned for videos.
        output_dir: Absolute path where normalized copies are written.
        skip_orientation_check: Treat every file as unrotated without probing.
        stop_on_error: Abort the batch on the first probe/transcode process
                       failure instead of moving on to the next file.
        timeout: Optional limit in seconds for each external process call.
    """

    input_dir: Path
    output_dir: Path
    skip_orientation_check: bool = False
    stop_on_error: bool = False
    timeout: float | None = None


@dataclass
class BatchState:
    """Mutable per-run state. Created at batch start and discarded at the end."""

    input_dir: Path
    output_dir: Path
    candidates: list[Path] = field(default_factory=list)
    current_index: int = 0

    @property
    def current(self) -> Path | None:
        if self.current_index < len(self.candidates):
            return self.candidates[self.current_index]
        return None

    def advance(self):
        self.current_index += 1


@dataclass
class BatchResult:
    outcomes: list[FileOutcome] = field(default_factory=list)

    def count(self, status: FileStatus) -> int:
        return sum(1 for outcome in self.outcomes if outcome.status is status)

    @property
    def processed(self) -> list[FileOutcome]:
        return [
            o for o in self.outcomes
            if o.status in (FileStatus.COPIED, FileStatus.TRANSCODED)
        ]

    @property
    def failed(self) -> list[FileOutcome]:
        return [o for o in self.outcomes if o.status is FileStatus.FAILED]
