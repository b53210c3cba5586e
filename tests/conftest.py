from __future__ import annotations

from pathlib import Path

import pytest
from loguru import logger

from vopt.domain.exceptions import ProbeProcessFailure, TranscodeProcessFailure


@pytest.fixture
def caplog(caplog):
    """Route loguru records into pytest's caplog."""
    handler_id = logger.add(caplog.handler, format="{message}", level="DEBUG")
    yield caplog
    logger.remove(handler_id)


class FakeProber:
    """
    Answers probe queries from a table keyed by file name.

    Each entry may hold: "stream" (tuple of raw fields), "format_bit_rate",
    "duration", "rotation", and "fail" (raise ProbeProcessFailure).
    """

    def __init__(self, table: dict | None = None):
        self.table = dict(table or {})
        self.calls: list[tuple[str, str]] = []

    def _entry(self, query: str, path: Path) -> dict:
        self.calls.append((query, path.name))
        entry = self.table.get(path.name, {})
        if entry.get("fail"):
            raise ProbeProcessFailure(f"fake ffprobe failure for {path.name}")
        return entry

    def stream_fields(self, path: Path):
        return tuple(self._entry("stream", path).get("stream", ()))

    def format_bit_rate(self, path: Path):
        return self._entry("format_bit_rate", path).get("format_bit_rate")

    def format_duration(self, path: Path):
        return self._entry("duration", path).get("duration")

    def rotation(self, path: Path):
        return self._entry("rotation", path).get("rotation")

    def probed(self, name: str) -> bool:
        return any(probed_name == name for _, probed_name in self.calls)


class FakeTranscoder:
    """
    Records every request and writes a small output file. For listed names it
    leaves a truncated output behind and fails, as an interrupted ffmpeg does.
    """

    def __init__(self, fail_for: set[str] | None = None):
        self.fail_for = set(fail_for or ())
        self.requests = []

    def transcode(self, source: Path, output: Path, plan) -> None:
        self.requests.append((source, output, plan))
        if source.name in self.fail_for:
            output.write_bytes(b"partial")
            raise TranscodeProcessFailure(f"fake ffmpeg failure for {source.name}", returncode=1, stderr="boom")
        output.write_bytes(b"transcoded")


@pytest.fixture
def fake_prober():
    return FakeProber()


@pytest.fixture
def fake_transcoder():
    return FakeTranscoder()


def write_video(directory: Path, name: str, size: int = 64) -> Path:
    path = directory / name
    path.write_bytes(b"\0" * size)
    return path


@pytest.fixture
def make_video():
    return write_video
