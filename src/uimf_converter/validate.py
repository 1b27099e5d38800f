"""UIMF output validation helpers."""

from __future__ import annotations

import logging
from collections.abc import Iterator, Sequence
from pathlib import Path

from uimf_converter.adapters.uimf_reader import open_uimf_reader
from uimf_converter.application.options import SizeThresholds
from uimf_converter.application.ports import UimfReader, UimfReaderFactory
from uimf_converter.application.results import FrameRecord, ScanRecord, ValidationReport

logger = logging.getLogger(__name__)

NO_FRAME_INFO = "appears corrupt (no frame info)"
NO_SCAN_DATA = "has frame info but no scan data"
READ_EXCEPTION = "appears corrupt (exception reading data)"


def file_size_to_string(size_kb: float) -> str:
    """Format a size in KB with units KB, MB or GB.

    Examples
    --------
    >>> file_size_to_string(75)
    '75 KB'
    >>> file_size_to_string(2048)
    '2.0 MB'
    """
    size_mb = size_kb / 1024.0
    size_gb = size_mb / 1024.0
    if size_gb > 1:
        return f"{size_gb:.1f} GB"
    if size_mb > 1:
        return f"{size_mb:.1f} MB"
    return f"{size_kb:.0f} KB"


def get_file_size_kb(path: Path) -> float:
    return path.stat().st_size / 1024.0


def file_too_small_message(
    description: str, path: Path, actual_kb: float, min_kb: float
) -> str:
    """Build the evaluation message for an undersized data file.

    Examples of returned text::

        Data file size is 3 KB; minimum allowed size is 5 KB
        Data file is 0 bytes
    """
    min_text = file_size_to_string(min_kb)
    logger.error(
        "%s file may be corrupt. Actual file size is %s; min allowable size is %s; see %s",
        description,
        file_size_to_string(actual_kb),
        min_text,
        path,
    )
    if abs(actual_kb) < 0.0001:
        return f"{description} file is 0 bytes"
    return (
        f"{description} file size is {file_size_to_string(actual_kb)}; "
        f"minimum allowed size is {min_text}"
    )


def iter_scan_records(
    reader: UimfReader, frames: Sequence[FrameRecord]
) -> Iterator[ScanRecord]:
    """Yield scans frame by frame, reading each spectrum only when requested."""
    for frame in frames:
        for scan in reader.frame_scans(frame.frame_number):
            yield ScanRecord(
                frame_number=frame.frame_number,
                scan=scan,
                data_point_count=reader.spectrum_point_count(
                    frame.frame_number, frame.frame_type, scan
                ),
            )


def uimf_file_has_data(
    uimf_path: Path, reader_factory: UimfReaderFactory = open_uimf_reader
) -> tuple[bool, str]:
    """Check that at least one scan in the file has a non-empty spectrum.

    Returns
    -------
    tuple[bool, str]
        Validity flag and a status message (empty when valid).
    """
    try:
        logger.debug("Opening UIMF file to look for valid data")
        with reader_factory(uimf_path) as reader:
            frames = reader.frames()
            if not frames:
                return False, NO_FRAME_INFO
            for record in iter_scan_records(reader, frames):
                if record.data_point_count > 0:
                    return True, ""
            return False, NO_SCAN_DATA
    except Exception as exc:
        logger.error("Exception in UimfFileHasData: %s", exc)
        return False, READ_EXCEPTION


def validate_uimf_file(
    uimf_path: Path,
    reader_factory: UimfReaderFactory = open_uimf_reader,
    thresholds: SizeThresholds | None = None,
) -> ValidationReport:
    """Validate a produced ``.uimf`` file.

    Parameters
    ----------
    uimf_path : Path
        File to check.
    reader_factory : UimfReaderFactory
        Opens the file for the deep content check.
    thresholds : SizeThresholds, optional
        Minimum and "small" size limits in KB.

    Returns
    -------
    ValidationReport
        ``valid`` is true only when the file exists, meets the minimum size
        and holds at least one non-empty spectrum.
    """
    thresholds = thresholds or SizeThresholds()

    if not uimf_path.is_file():
        message = f"Data file {uimf_path} not found"
        logger.error(message)
        return ValidationReport(valid=False, eval_msg=message)

    size_kb = get_file_size_kb(uimf_path)
    if size_kb < thresholds.min_size_kb:
        return ValidationReport(
            valid=False,
            eval_msg=file_too_small_message(
                "Data", uimf_path, size_kb, thresholds.min_size_kb
            ),
            size_kb=size_kb,
        )

    valid, status_message = uimf_file_has_data(uimf_path, reader_factory)
    if valid:
        return ValidationReport(valid=True, size_kb=size_kb)

    if size_kb < thresholds.small_size_kb:
        message = (
            f"Data file size is less than {thresholds.small_size_kb:.0f} KB; "
            f"it {status_message}"
        )
    else:
        message = f"Data file is {file_size_to_string(size_kb)}; it {status_message}"
    logger.error(message)
    return ValidationReport(valid=False, eval_msg=message, size_kb=size_kb)
