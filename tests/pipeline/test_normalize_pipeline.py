from pathlib import Path

import pytest
import yaml

from vopt.domain.exceptions import (
    ConfigurationError,
    DirectoryNotFound,
    LedgerWriteFailure,
    ProbeProcessFailure,
    TranscodeProcessFailure,
)
from vopt.domain.media import BatchConfig, FileStatus, TransformAction
from vopt.pipeline.normalize_pipeline import NormalizePipeline, output_path_for
from vopt.services import ledger_service
from vopt.services.ledger_service import ledger_key


def _pipeline(input_dir: Path, prober, transcoder, **config_kwargs) -> NormalizePipeline:
    config = BatchConfig(input_dir=input_dir, output_dir=input_dir / "comp", **config_kwargs)
    return NormalizePipeline(config, prober=prober, transcoder=transcoder)


def _ledger_lines(input_dir: Path) -> list[str]:
    ledger = input_dir / ".vopt"
    if not ledger.exists():
        return []
    return [line for line in ledger.read_text(encoding="utf-8").splitlines() if line]


def test_output_path_is_always_mp4(tmp_path):
    assert output_path_for(tmp_path / "clip.MOV", tmp_path / "comp") == tmp_path / "comp" / "clip.mp4"


def test_mixed_batch(tmp_path, make_video, fake_prober, fake_transcoder):
    make_video(tmp_path, "big.mp4")
    make_video(tmp_path, "fat.mkv")
    make_video(tmp_path, "small.mov", size=100)
    fake_prober.table.update(
        {
            "big.mp4": {"stream": ("3840", "2160", "40000000"), "duration": "30"},
            "fat.mkv": {"stream": ("1280", "720", "25000000"), "duration": "30"},
            "small.mov": {"stream": ("640", "480", "1000000"), "duration": "30"},
        }
    )

    result = _pipeline(tmp_path, fake_prober, fake_transcoder).run()

    statuses = {o.source.name: o.status for o in result.outcomes}
    assert statuses == {
        "big.mp4": FileStatus.TRANSCODED,
        "fat.mkv": FileStatus.TRANSCODED,
        "small.mov": FileStatus.COPIED,
    }
    plans = {source.name: plan for source, _, plan in fake_transcoder.requests}
    assert plans["big.mp4"].action is TransformAction.TRANSCODE_RESIZE
    assert (plans["big.mp4"].target_width, plans["big.mp4"].target_height) == (1920, 1080)
    assert plans["fat.mkv"].action is TransformAction.TRANSCODE_BITRATE_ONLY
    assert "small.mov" not in plans

    out = tmp_path / "comp"
    assert (out / "fat.mp4").read_bytes() == b"transcoded"
    assert (out / "small.mp4").read_bytes() == b"\0" * 100
    assert not (out / "small.mov").exists()
    assert sorted(_ledger_lines(tmp_path)) == sorted(
        ledger_key(p) for p in (tmp_path.resolve() / n for n in ("big.mp4", "fat.mkv", "small.mov"))
    )


def test_rotated_portrait_is_resized_in_display_orientation(tmp_path, make_video, fake_prober, fake_transcoder):
    make_video(tmp_path, "phone.mov")
    fake_prober.table["phone.mov"] = {"stream": ("3840", "2160", "5000000"), "duration": "20", "rotation": "-90"}

    _pipeline(tmp_path, fake_prober, fake_transcoder).run()

    (_, output, plan), = fake_transcoder.requests
    assert output.name == "phone.mp4"
    assert (plan.target_width, plan.target_height) == (1080, 1920)


def test_rerun_is_idempotent(tmp_path, make_video, fake_prober, fake_transcoder):
    make_video(tmp_path, "a.mp4")
    make_video(tmp_path, "b.mp4")
    fake_prober.table.update(
        {
            "a.mp4": {"stream": ("3840", "2160", "40000000")},
            "b.mp4": {"stream": ("640", "480", "1000000")},
        }
    )
    _pipeline(tmp_path, fake_prober, fake_transcoder).run()
    ledger_before = _ledger_lines(tmp_path)

    fake_prober.calls.clear()
    fake_transcoder.requests.clear()
    result = _pipeline(tmp_path, fake_prober, fake_transcoder).run()

    assert [o.status for o in result.outcomes] == [FileStatus.SKIPPED_LEDGER] * 2
    assert fake_prober.calls == []
    assert fake_transcoder.requests == []
    assert _ledger_lines(tmp_path) == ledger_before


def test_unparsable_file_is_retried_next_run(tmp_path, make_video, fake_prober, fake_transcoder):
    make_video(tmp_path, "odd.mp4")
    fake_prober.table["odd.mp4"] = {"stream": ("N/A",)}

    first = _pipeline(tmp_path, fake_prober, fake_transcoder).run()
    assert first.outcomes[0].status is FileStatus.SKIPPED_UNPARSABLE
    assert _ledger_lines(tmp_path) == []
    assert not (tmp_path / "comp" / "odd.mp4").exists()

    fake_prober.table["odd.mp4"] = {"stream": ("1280", "720", "2000000")}
    second = _pipeline(tmp_path, fake_prober, fake_transcoder).run()
    assert second.outcomes[0].status is FileStatus.COPIED
    assert len(_ledger_lines(tmp_path)) == 1


def test_process_failures_are_logged_and_batch_continues(tmp_path, make_video, fake_prober, fake_transcoder):
    fake_transcoder.fail_for.add("b.mp4")
    for name in ("a.mp4", "b.mp4", "c.mp4"):
        make_video(tmp_path, name)
    fake_prober.table.update(
        {
            "a.mp4": {"fail": True},
            "b.mp4": {"stream": ("3840", "2160", "40000000")},
            "c.mp4": {"stream": ("640", "480", "1000000")},
        }
    )

    result = _pipeline(tmp_path, fake_prober, fake_transcoder).run()

    assert [o.status for o in result.outcomes] == [FileStatus.FAILED, FileStatus.FAILED, FileStatus.COPIED]
    assert [o.source.name for o in result.failed] == ["a.mp4", "b.mp4"]
    assert _ledger_lines(tmp_path) == [ledger_key(tmp_path.resolve() / "c.mp4")]

    error_text = (tmp_path / "comp" / "error.txt").read_text(encoding="utf-8")
    assert "probe failed for" in error_text
    assert "transcodeResize failed for" in error_text
    assert "Stderr: boom" in error_text


def test_stop_on_error_reraises(tmp_path, make_video, fake_prober, fake_transcoder):
    make_video(tmp_path, "a.mp4")
    make_video(tmp_path, "b.mp4")
    fake_prober.table.update({"a.mp4": {"fail": True}, "b.mp4": {"stream": ("640", "480", "1")}})

    with pytest.raises(ProbeProcessFailure):
        _pipeline(tmp_path, fake_prober, fake_transcoder, stop_on_error=True).run()
    assert not fake_prober.probed("b.mp4")


def test_stop_on_error_for_transcode(tmp_path, make_video, fake_prober, fake_transcoder):
    fake_transcoder.fail_for.add("a.mp4")
    make_video(tmp_path, "a.mp4")
    fake_prober.table["a.mp4"] = {"stream": ("3840", "2160", "1")}
    with pytest.raises(TranscodeProcessFailure):
        _pipeline(tmp_path, fake_prober, fake_transcoder, stop_on_error=True).run()


def test_ledger_write_failure_aborts_batch(tmp_path, make_video, fake_prober, fake_transcoder, monkeypatch):
    make_video(tmp_path, "a.mp4")
    make_video(tmp_path, "b.mp4")
    fake_prober.table.update(
        {"a.mp4": {"stream": ("640", "480", "1")}, "b.mp4": {"stream": ("640", "480", "1")}}
    )

    def broken_fsync(fd):
        raise OSError("disk full")

    monkeypatch.setattr(ledger_service.os, "fsync", broken_fsync)

    with pytest.raises(LedgerWriteFailure):
        _pipeline(tmp_path, fake_prober, fake_transcoder).run()
    assert not fake_prober.probed("b.mp4")


def test_success_log_records_each_completed_file(tmp_path, make_video, fake_prober, fake_transcoder):
    make_video(tmp_path, "a.mp4")
    make_video(tmp_path, "b.mov")
    fake_prober.table.update(
        {
            "a.mp4": {"stream": ("3840", "2160", "40000000"), "duration": "12.5"},
            "b.mov": {"stream": ("1920", "1080", "8000000"), "rotation": "90"},
        }
    )
    _pipeline(tmp_path, fake_prober, fake_transcoder).run()

    entries = yaml.safe_load((tmp_path / "comp" / "vopt_log.yaml").read_text(encoding="utf-8"))
    assert [e["index"] for e in entries] == [1, 2]
    assert entries[0]["action"] == "transcodeResize"
    assert entries[0]["target_resolution"] == "1920x1080"
    assert entries[0]["duration_seconds"] == 12.5
    assert entries[1]["action"] == "copy"
    assert entries[1]["source_resolution"] == "1080x1920"
    assert entries[1]["rotation"] == "90"


def test_size_report_is_logged(tmp_path, make_video, fake_prober, fake_transcoder, caplog):
    make_video(tmp_path, "a.mp4", size=1024)
    fake_prober.table["a.mp4"] = {"stream": ("640", "480", "1")}
    _pipeline(tmp_path, fake_prober, fake_transcoder).run()
    assert "Size summary for 1 file(s)" in caplog.text


def test_empty_directory_runs_cleanly(tmp_path, fake_prober, fake_transcoder):
    result = _pipeline(tmp_path, fake_prober, fake_transcoder).run()
    assert result.outcomes == []
    assert (tmp_path / "comp").is_dir()


def test_missing_input_directory(tmp_path, fake_prober, fake_transcoder):
    with pytest.raises(DirectoryNotFound):
        _pipeline(tmp_path / "missing", fake_prober, fake_transcoder).run()


def test_output_directory_must_differ(tmp_path, fake_prober, fake_transcoder):
    config = BatchConfig(input_dir=tmp_path, output_dir=tmp_path)
    with pytest.raises(ConfigurationError):
        NormalizePipeline(config, prober=fake_prober, transcoder=fake_transcoder).run()


def test_size_report_ignores_output_left_by_failed_transcode(
    tmp_path, make_video, fake_prober, fake_transcoder, caplog
):
    fake_transcoder.fail_for.add("a.mp4")
    make_video(tmp_path, "a.mp4", size=1000)
    fake_prober.table["a.mp4"] = {"stream": ("3840", "2160", "40000000")}

    result = _pipeline(tmp_path, fake_prober, fake_transcoder).run()

    assert result.outcomes[0].status is FileStatus.FAILED
    assert (tmp_path / "comp" / "a.mp4").read_bytes() == b"partial"
    assert "Size summary for 0 file(s)" in caplog.text


def test_size_report_counts_shared_stem_output_once(tmp_path, make_video, fake_prober, fake_transcoder, caplog):
    make_video(tmp_path, "a.mov", size=1000)
    make_video(tmp_path, "a.mp4", size=3000)
    fake_prober.table.update(
        {"a.mov": {"stream": ("640", "480", "1000000")}, "a.mp4": {"stream": ("640", "480", "1000000")}}
    )

    result = _pipeline(tmp_path, fake_prober, fake_transcoder).run()

    assert [o.status for o in result.outcomes] == [FileStatus.COPIED, FileStatus.COPIED]
    assert (tmp_path / "comp" / "a.mp4").stat().st_size == 3000
    assert "Size summary for 1 file(s)" in caplog.text
    assert "(100.0% of source)" in caplog.text


def test_size_report_includes_files_finished_in_earlier_runs(
    tmp_path, make_video, fake_prober, fake_transcoder, caplog
):
    make_video(tmp_path, "a.mp4", size=2048)
    fake_prober.table["a.mp4"] = {"stream": ("640", "480", "1000000")}
    _pipeline(tmp_path, fake_prober, fake_transcoder).run()
    caplog.clear()

    result = _pipeline(tmp_path, fake_prober, fake_transcoder).run()

    assert result.outcomes[0].status is FileStatus.SKIPPED_LEDGER
    assert "Size summary for 1 file(s): source 2 KB -> output 2 KB" in caplog.text
