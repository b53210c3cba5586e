"""
The batch orchestrator.

`NormalizePipeline` walks the candidate files of an input directory one at a
time. For each file it consults the ledger, extracts metadata, resolves the
orientation, plans the transform, performs it and finally records the file in
the ledger. A file is fully finished, ledger entry included, before the next
one is started.

Failure policy:
- Unreadable resolution: the file is skipped and not recorded, so the next run
  tries it again.
- Probe or transcode process failure: logged to the error log and the batch
  moves on (or stops, when `stop_on_error` is set). The file is not recorded.
- Ledger write failure: always stops the batch.
"""
from datetime import datetime
from pathlib import Path
from typing import Callable, Dict, Optional

from loguru import logger

from ..config.video import BITRATE_CAP_BPS, OUTPUT_EXTENSION
from ..domain import orientation, planner
from ..domain.exceptions import (
    ConfigurationError,
    ProbeProcessFailure,
    TranscodeProcessFailure,
    UnparsableResolution,
)
from ..domain.media import (
    BatchConfig,
    BatchResult,
    BatchState,
    FileOutcome,
    FileStatus,
    MediaProbe,
    OrientedDimensions,
    TransformAction,
    TransformPlan,
)
from ..services.file_processing_service import ProcessVideoFiles
from ..services.ledger_service import ProgressLedger
from ..services.logging_service import ErrorLog, SuccessLog
from ..services.probe_service import FFprobeProber, Prober, extract
from ..services.report_service import build_size_report, log_size_report
from ..services.transcode_service import FFmpegTranscoder, Transcoder, copy_file
from ..utils.format_utils import formatted_bitrate


def output_path_for(source: Path, output_dir: Path) -> Path:
    # Always .mp4, even when the file is only copied from another container.
    return output_dir / f"{source.stem}{OUTPUT_EXTENSION}"


def describe_decision(name: str, oriented: OrientedDimensions, bitrate_bps: int, plan: TransformPlan) -> str:
    source_res = f"{oriented.logical_width}x{oriented.logical_height}"
    cap = formatted_bitrate(BITRATE_CAP_BPS)
    if plan.action is TransformAction.TRANSCODE_RESIZE:
        return (
            f"{name}: resizing {source_res} -> {plan.target_width}x{plan.target_height}, "
            f"bitrate {formatted_bitrate(bitrate_bps)} -> {cap}"
        )
    if plan.action is TransformAction.TRANSCODE_BITRATE_ONLY:
        return f"{name}: changing bitrate {formatted_bitrate(bitrate_bps)} -> {cap} ({source_res} kept)"
    return f"{name}: {source_res}, {formatted_bitrate(bitrate_bps)}, no change needed, copying"


class NormalizePipeline:
    """
    Runs one normalization batch.

    The prober, transcoder and copy function are injectable so the decision and
    bookkeeping logic can run against fakes. When omitted, the ffprobe/ffmpeg
    adapters and a plain file copy are used.

    Attributes:
        config (BatchConfig): The resolved batch settings.
        state (BatchState | None): Per-run state, set while `run()` executes.
        ledger (ProgressLedger | None): Loaded at the start of `run()`.
        finished_outputs (Dict[Path, Path]): Output path to the ledgered source
            that last produced it. Feeds the size summary.
    """

    def __init__(
        self,
        config: BatchConfig,
        prober: Optional[Prober] = None,
        transcoder: Optional[Transcoder] = None,
        copier: Callable[[Path, Path], None] = copy_file,
    ):
        self.config = config
        self.prober = prober
        self.transcoder = transcoder
        self.copier = copier
        self.state: Optional[BatchState] = None
        self.ledger: Optional[ProgressLedger] = None
        self.error_log: Optional[ErrorLog] = None
        self.success_log: Optional[SuccessLog] = None
        # output path -> the source whose finished output it currently holds
        self.finished_outputs: Dict[Path, Path] = {}

    def _prepare(self):
        files_handler = ProcessVideoFiles(self.config.input_dir)
        input_dir = files_handler.source_dir
        output_dir = self.config.output_dir.resolve()
        if output_dir == input_dir:
            raise ConfigurationError(
                f"Output directory must differ from the input directory: {output_dir}"
            )
        output_dir.mkdir(parents=True, exist_ok=True)

        self.state = BatchState(input_dir=input_dir, output_dir=output_dir, candidates=list(files_handler.files))
        self.ledger = ProgressLedger.for_input_dir(input_dir)
        self.error_log = ErrorLog(output_dir)
        self.success_log = SuccessLog(output_dir)
        self.finished_outputs = {}
        for candidate in self.state.candidates:
            if self.ledger.contains(candidate):
                self.finished_outputs[output_path_for(candidate, output_dir)] = candidate
        if self.prober is None:
            self.prober = FFprobeProber()
        if self.transcoder is None:
            self.transcoder = FFmpegTranscoder.for_output_dir(output_dir, timeout=self.config.timeout)

    def run(self) -> BatchResult:
        """
        Processes every candidate file and prints the size summary.

        Raises:
            DirectoryNotFound: The input directory does not exist.
            ConfigurationError: The output directory is the input directory.
            LedgerError: The ledger could not be read or appended to.
            ProbeProcessFailure, TranscodeProcessFailure: Only with `stop_on_error`.
        """
        self._prepare()
        state = self.state
        logger.info(
            f"Normalizing {len(state.candidates)} video file(s) from {state.input_dir} into {state.output_dir} "
            f"({len(self.ledger)} already in ledger)"
        )

        result = BatchResult()
        try:
            while state.current is not None:
                result.outcomes.append(self.process_single_file(state.current))
                state.advance()
        finally:
            log_size_report(
                build_size_report((source, output) for output, source in self.finished_outputs.items())
            )

        logger.info(
            f"Batch finished: {result.count(FileStatus.TRANSCODED)} transcoded, "
            f"{result.count(FileStatus.COPIED)} copied, "
            f"{result.count(FileStatus.SKIPPED_LEDGER)} already done, "
            f"{result.count(FileStatus.SKIPPED_UNPARSABLE)} unreadable, "
            f"{result.count(FileStatus.FAILED)} failed"
        )
        return result

    def process_single_file(self, path: Path) -> FileOutcome:
        if self.ledger.contains(path):
            logger.info(f"{path.name}: already processed, skipping")
            return FileOutcome(path, FileStatus.SKIPPED_LEDGER)

        try:
            probe = extract(path, self.prober, self.config.skip_orientation_check)
        except UnparsableResolution as e:
            logger.warning(f"{path.name}: could not read resolution, skipping for now ({e})")
            return FileOutcome(path, FileStatus.SKIPPED_UNPARSABLE, error=str(e))
        except ProbeProcessFailure as e:
            return self._failed(path, "probe", e)

        oriented = orientation.resolve(probe)
        plan = planner.plan(oriented, probe.bitrate_bps)
        logger.info(describe_decision(path.name, oriented, probe.bitrate_bps, plan))

        output = output_path_for(path, self.state.output_dir)
        try:
            if plan.needs_transcode:
                self.transcoder.transcode(path, output, plan)
            else:
                self.copier(path, output)
        except TranscodeProcessFailure as e:
            # Whatever the failed action left at `output` is no longer a finished file.
            self.finished_outputs.pop(output, None)
            return self._failed(path, plan.action.value, e, plan)

        self.ledger.mark_processed(path)
        self.finished_outputs[output] = path
        self._write_success(path, output, probe, oriented, plan)
        status = FileStatus.TRANSCODED if plan.needs_transcode else FileStatus.COPIED
        return FileOutcome(path, status, plan=plan)

    def _failed(self, path: Path, stage: str, error: Exception, plan: Optional[TransformPlan] = None) -> FileOutcome:
        logger.error(f"{path.name}: {stage} failed: {error}")
        messages = [
            f"{datetime.now().isoformat(timespec='seconds')} {stage} failed for: {path}",
            f"{type(error).__name__}: {error}",
        ]
        if isinstance(error, TranscodeProcessFailure) and error.stderr:
            messages.append(f"Stderr: {error.stderr}")
        self.error_log.write(*messages)
        if self.config.stop_on_error:
            raise error
        return FileOutcome(path, FileStatus.FAILED, plan=plan, error=str(error))

    def _write_success(
        self,
        path: Path,
        output: Path,
        probe: MediaProbe,
        oriented: OrientedDimensions,
        plan: TransformPlan,
    ):
        self.success_log.write(
            {
                "source": str(path),
                "output": str(output),
                "action": plan.action.value,
                "source_resolution": f"{oriented.logical_width}x{oriented.logical_height}",
                "target_resolution": f"{plan.target_width}x{plan.target_height}",
                "rotation": probe.rotation.value,
                "source_bitrate_bps": probe.bitrate_bps,
                "duration_seconds": probe.duration_seconds,
                "ended_datetime": datetime.now().isoformat(timespec="seconds"),
            }
        )
