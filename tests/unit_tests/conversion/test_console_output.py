"""Unit tests for console output parsing."""

from __future__ import annotations

import logging
from pathlib import Path

import pytest

from uimf_converter.conversion.console_output import PROGRESS_LABEL, ConsoleOutputParser


def _write(path: Path, *lines: str) -> Path:
    path.write_text("\n".join(lines) + "\n", encoding="utf-8")
    return path


def test_progress_is_last_match_not_max(tmp_path: Path) -> None:
    """Use the last progress line seen, even when an earlier one was higher."""
    log = _write(
        tmp_path / "console.txt",
        "Converting frame 10 / 100",
        "Converting frame 55 / 100",
    )
    assert ConsoleOutputParser().parse(log).percent_complete == pytest.approx(55.0)

    _write(
        log,
        "Converting frame 80 / 100",
        "Converting frame 20 / 100",
    )
    assert ConsoleOutputParser().parse(log).percent_complete == pytest.approx(20.0)


def test_progress_match_is_case_insensitive(tmp_path: Path) -> None:
    """Match progress lines regardless of case."""
    log = _write(tmp_path / "console.txt", "CONVERTING FRAME 1 / 4")
    assert ConsoleOutputParser().parse(log).percent_complete == pytest.approx(25.0)


def test_zero_total_frames_does_not_produce_non_finite_percent(tmp_path: Path) -> None:
    """Ignore progress lines that would divide by zero."""
    log = _write(
        tmp_path / "console.txt",
        "Converting frame 3 / 10",
        "Converting frame 0 / 0",
    )
    summary = ConsoleOutputParser().parse(log)
    assert summary.percent_complete == pytest.approx(30.0)


def test_progress_event_emitted_with_zero_when_no_progress(tmp_path: Path) -> None:
    """Emit a progress event at the end of each pass, 0 when nothing matched."""
    events: list[tuple[str, float]] = []
    log = _write(tmp_path / "console.txt", "Starting up")
    ConsoleOutputParser(on_progress=lambda label, pct: events.append((label, pct))).parse(log)
    assert events == [(PROGRESS_LABEL, 0.0)]


def test_missing_file_is_a_no_op(tmp_path: Path) -> None:
    """Return an empty summary and no event for a missing file."""
    events: list[tuple[str, float]] = []
    parser = ConsoleOutputParser(on_progress=lambda label, pct: events.append((label, pct)))
    summary = parser.parse(tmp_path / "missing.txt")
    assert summary.percent_complete == 0.0
    assert summary.errors == ()
    assert events == []


def test_error_prefixes_are_reported(tmp_path: Path, caplog: pytest.LogCaptureFixture) -> None:
    """Report Error: and Exception in lines immediately."""
    log = _write(
        tmp_path / "console.txt",
        "error: cannot open file",
        "Exception in ReadFrame: bad header",
        "Everything else is fine",
    )
    with caplog.at_level(logging.ERROR):
        summary = ConsoleOutputParser().parse(log)

    assert summary.errors == (
        "AgilentToUIMFConverter error: error: cannot open file",
        "AgilentToUIMFConverter error: Exception in ReadFrame: bad header",
    )
    assert "cannot open file" in caplog.text


def test_unhandled_exception_captures_following_lines(tmp_path: Path) -> None:
    """Collect lines after an unhandled exception into one consolidated error."""
    log = _write(
        tmp_path / "console.txt",
        "Converting frame 2 / 4",
        "Unhandled Exception: System.IO.IOException: disk full",
        "   at Converter.Write()",
        "   at Converter.Main()",
    )
    summary = ConsoleOutputParser().parse(log)

    assert summary.errors == (
        "AgilentToUIMFConverter error: Unhandled Exception: System.IO.IOException: disk full",
        "   at Converter.Write();    at Converter.Main()",
    )
    assert summary.percent_complete == pytest.approx(50.0)


def test_error_lines_reported_during_exception_capture(tmp_path: Path) -> None:
    """Keep reporting Error: lines while capturing exception text."""
    log = _write(
        tmp_path / "console.txt",
        "Unhandled Exception: boom",
        "Error: secondary failure",
    )
    summary = ConsoleOutputParser().parse(log)
    assert "AgilentToUIMFConverter error: Error: secondary failure" in summary.errors
    assert summary.errors[-1] == "Error: secondary failure"


def test_capture_state_resets_between_calls(tmp_path: Path) -> None:
    """Start every pass without exception-capture state from the previous one."""
    log = _write(tmp_path / "console.txt", "Unhandled Exception: boom", "trace line")
    parser = ConsoleOutputParser()
    first = parser.parse(log)
    _write(log, "trace line only")
    second = parser.parse(log)

    assert len(first.errors) == 2
    assert second.errors == ()
