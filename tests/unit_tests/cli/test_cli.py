"""Unit tests for CLI command behavior."""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path

import pytest
from typer.testing import CliRunner

import uimf_converter.application as application_module
from uimf_converter.application.results import ConversionOutcome
from uimf_converter.cli import cli as cli_module

runner = CliRunner()

FOUR_BIT_SEQUENCE = r"C:\IMSFiles\Sequences\4bit_24Avg.txt"


def test_help_shows_commands() -> None:
    """Ensure top-level help lists every subcommand."""
    result = runner.invoke(cli_module.app, ["--help"])
    assert result.exit_code == 0
    for command in ("convert", "mux-status", "dotd-mux-status", "validate", "doctor"):
        assert command in result.output


def test_convert_forwards_settings_and_task(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    """Ensure convert maps arguments onto manager settings and task parameters."""
    called: dict[str, object] = {}

    def fake_convert(settings, task, **kwargs: object) -> ConversionOutcome:
        called["settings"] = settings
        called["task"] = task
        called["kwargs"] = kwargs
        return ConversionOutcome(success=True, percent_complete=100.0)

    monkeypatch.setattr(application_module, "convert_dataset", fake_convert)
    remote = tmp_path / "storage" / "DS1"

    result = runner.invoke(
        cli_module.app,
        [
            "convert",
            "DS1",
            str(remote),
            str(tmp_path / "work"),
            "--converter-dir",
            str(tmp_path / "prog"),
            "--manager-name",
            "Pub-12-1",
            "--max-runtime-minutes",
            "60",
        ],
    )

    assert result.exit_code == 0, result.output
    assert "✓ Converted: DS1" in result.output
    assert called["settings"] == {
        "work_dir": tmp_path / "work",
        "converter_dir": tmp_path / "prog",
        "manager_name": "Pub-12-1",
        "debug_level": 4,
        "max_runtime_minutes": 60,
    }
    assert called["task"] == {
        "Dataset": "DS1",
        "Instrument_Class": "IMS_Agilent_TOF_DotD",
        "Storage_Vol_External": tmp_path / "storage",
        "Storage_Path": "",
        "Directory": "DS1",
    }
    assert callable(called["kwargs"]["on_progress"])


def test_convert_failure_prints_messages(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    """Ensure a failed outcome exits non-zero with closeout and eval messages."""
    monkeypatch.setattr(
        application_module,
        "convert_dataset",
        lambda settings, task, **kwargs: ConversionOutcome(
            success=False,
            closeout_msg="UIMF file validation failed",
            eval_msg="Data file is 0 bytes",
        ),
    )

    result = runner.invoke(
        cli_module.app,
        [
            "convert",
            "DS1",
            str(tmp_path / "DS1"),
            str(tmp_path / "work"),
            "--converter-dir",
            str(tmp_path),
        ],
    )

    assert result.exit_code == 1
    assert "✗ Conversion failed: UIMF file validation failed" in result.output
    assert "Data file is 0 bytes" in result.output


def test_convert_unexpected_error_uses_error_exit_code(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    """Ensure exceptions escaping the use case are printed, not raised."""

    def boom(settings, task, **kwargs: object) -> ConversionOutcome:
        raise RuntimeError("share offline")

    monkeypatch.setattr(application_module, "convert_dataset", boom)

    result = runner.invoke(
        cli_module.app,
        ["convert", "DS1", str(tmp_path), str(tmp_path), "--converter-dir", str(tmp_path)],
    )

    assert result.exit_code == 1
    assert "RuntimeError: share offline" in result.output


def test_mux_status_multiplexed(tmp_path: Path, uimf_writer: Callable[..., Path]) -> None:
    """Ensure mux-status prints the bit width of a multiplexed file."""
    path = uimf_writer(tmp_path / "DS1.uimf", frames={1: FOUR_BIT_SEQUENCE})
    result = runner.invoke(cli_module.app, ["mux-status", str(path)])
    assert result.exit_code == 0, result.output
    assert "Multiplexed (4-bit encoding)" in result.output


def test_mux_status_not_multiplexed(tmp_path: Path, uimf_writer: Callable[..., Path]) -> None:
    """Ensure mux-status reports plain files as non-multiplexed."""
    path = uimf_writer(tmp_path / "DS1.uimf", frames={1: ""})
    result = runner.invoke(cli_module.app, ["mux-status", str(path)])
    assert result.exit_code == 0, result.output
    assert "Non-Multiplexed" in result.output


def test_mux_status_error(tmp_path: Path, uimf_writer: Callable[..., Path]) -> None:
    """Ensure mux-status exits non-zero for a file without frames."""
    path = uimf_writer(tmp_path / "DS1.uimf", frames={})
    result = runner.invoke(cli_module.app, ["mux-status", str(path)])
    assert result.exit_code == 1
    assert "Problem determining UIMF file status" in result.output


def test_validate_valid_and_invalid(tmp_path: Path, uimf_writer: Callable[..., Path]) -> None:
    """Ensure validate distinguishes files with and without spectra."""
    good = uimf_writer(tmp_path / "good.uimf", frames={1: ""}, scans=[(1, 1, 10)])
    bad = uimf_writer(tmp_path / "bad.uimf", frames={1: ""}, scans=[(1, 1, 0)])

    ok = runner.invoke(cli_module.app, ["validate", str(good)])
    failed = runner.invoke(cli_module.app, ["validate", str(bad)])

    assert ok.exit_code == 0, ok.output
    assert "✓ Valid" in ok.output
    assert failed.exit_code == 1
    assert "has frame info but no scan data" in failed.output


def test_dotd_mux_status(tmp_path: Path) -> None:
    """Ensure dotd-mux-status reads IMSFrameMeth.xml."""
    acq = tmp_path / "DS1.d" / "AcqData"
    acq.mkdir(parents=True)
    (acq / "IMSFrameMeth.xml").write_text(
        "<FrameMethods><FrameMethod>"
        "<ImsMuxProcessing>1</ImsMuxProcessing>"
        "<ImsMuxSequence>4bit_seq.txt</ImsMuxSequence>"
        "</FrameMethod></FrameMethods>",
        encoding="utf-8",
    )
    result = runner.invoke(cli_module.app, ["dotd-mux-status", str(tmp_path / "DS1.d")])
    assert result.exit_code == 0, result.output
    assert "Multiplexed (sequence 4bit_seq.txt)" in result.output


def test_doctor_reports_converter(tmp_path: Path) -> None:
    """Ensure doctor reports library versions and converter presence."""
    result = runner.invoke(cli_module.app, ["doctor", "--converter-dir", str(tmp_path)])
    assert result.exit_code == 0, result.output
    assert "pydantic:" in result.output
    assert "<not found>" in result.output
