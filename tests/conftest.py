"""Shared pytest configuration, marker assignment and UIMF fixtures."""

from __future__ import annotations

import sqlite3
from collections.abc import Callable, Mapping, Sequence
from pathlib import Path
from typing import TypeAlias

import pytest

FRAME_PARAM_KEYS = (
    (4, "FrameType", "System.Int32"),
    (8, "MultiplexingEncodingSequence", "System.String"),
)

UimfWriter: TypeAlias = Callable[..., Path]


def pytest_collection_modifyitems(
    config: pytest.Config, items: list[pytest.Item]
) -> None:
    """Attach suite markers based on test file path."""
    del config
    for item in items:
        path = Path(str(item.fspath))
        parts = set(path.parts)
        if "e2e_tests" in parts:
            item.add_marker(pytest.mark.e2e)
        elif "integration_tests" in parts:
            item.add_marker(pytest.mark.integration)
        elif "unit_tests" in parts:
            item.add_marker(pytest.mark.unit)


def write_uimf(
    path: Path,
    frames: Mapping[int, str] | None = None,
    scans: Sequence[tuple[int, int, int]] = (),
    *,
    pad_kb: int = 0,
) -> Path:
    """Write a minimal ``.uimf`` SQLite file.

    Parameters
    ----------
    path : Path
        File to create.
    frames : Mapping[int, str], optional
        Frame number to encoding sequence (``""`` stores no sequence row).
    scans : Sequence[tuple[int, int, int]]
        ``(frame, scan, non_zero_count)`` rows for ``Frame_Scans``.
    pad_kb : int
        Extra blob bytes (in KB) to grow the file past size thresholds.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    conn = sqlite3.connect(path)
    try:
        conn.execute(
            "CREATE TABLE Frame_Param_Keys (ParamID INTEGER, ParamName TEXT, ParamDataType TEXT)"
        )
        conn.execute("CREATE TABLE Frame_Params (FrameNum INTEGER, ParamID INTEGER, ParamValue TEXT)")
        conn.execute(
            "CREATE TABLE Frame_Scans (FrameNum INTEGER, ScanNum INTEGER, "
            "NonZeroCount INTEGER, Intensities BLOB)"
        )
        conn.executemany("INSERT INTO Frame_Param_Keys VALUES (?, ?, ?)", FRAME_PARAM_KEYS)
        for frame_number, sequence in (frames or {}).items():
            conn.execute("INSERT INTO Frame_Params VALUES (?, 4, '1')", (frame_number,))
            if sequence:
                conn.execute(
                    "INSERT INTO Frame_Params VALUES (?, 8, ?)", (frame_number, sequence)
                )
        conn.executemany(
            "INSERT INTO Frame_Scans (FrameNum, ScanNum, NonZeroCount) VALUES (?, ?, ?)",
            list(scans),
        )
        if pad_kb:
            conn.execute("CREATE TABLE Padding (Data BLOB)")
            conn.execute("INSERT INTO Padding VALUES (?)", (b"\x01" * pad_kb * 1024,))
        conn.commit()
    finally:
        conn.close()
    return path


@pytest.fixture
def uimf_writer() -> UimfWriter:
    """Return the ``write_uimf`` helper."""
    return write_uimf


def build_dotd(
    root: Path,
    name: str,
    *,
    bin_files: Sequence[str] = (
        "IMSFrame.bin",
        "MSPeriodicActuals.bin",
        "MSProfile.bin",
        "MSScan.bin",
    ),
    nested: str | None = None,
) -> Path:
    """Create a fake Agilent ``.d`` directory with ``AcqData`` and ``.bin`` files."""
    dotd = root / name
    data_dir = dotd / nested if nested else dotd
    acq = data_dir / "AcqData"
    acq.mkdir(parents=True)
    for file_name in bin_files:
        (acq / file_name).write_bytes(b"\x00" * 16)
    return dotd


@pytest.fixture
def dotd_builder() -> Callable[..., Path]:
    """Return the ``build_dotd`` helper."""
    return build_dotd
