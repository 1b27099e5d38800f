"""Top-level API for Agilent .D to UIMF conversion."""

from __future__ import annotations

from collections.abc import Mapping
from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from uimf_converter.application.results import (
        ConversionOutcome,
        EncodingResult,
        ValidationReport,
    )

__version__ = "0.1.0"


def convert_dataset(
    settings: Mapping[str, object],
    task: Mapping[str, object],
) -> ConversionOutcome:
    """Convert the dataset described by ``task`` with default collaborators.

    Parameters
    ----------
    settings : Mapping[str, object]
        Manager settings: ``work_dir``, ``converter_dir`` and optionally
        ``manager_name``, ``debug_level``, ``max_runtime_minutes``.
    task : Mapping[str, object]
        Task parameters: ``Dataset``, ``Instrument_Class``,
        ``Storage_Vol_External``, ``Storage_Path`` and ``Directory``.

    Returns
    -------
    ConversionOutcome
        Success flag with closeout and evaluation messages.
    """
    from .application.use_cases import convert_dataset as _impl

    return _impl(settings, task)


def classify_uimf_file(uimf_path: Path) -> EncodingResult:
    """Determine whether a ``.uimf`` file is multiplexed and its bit width."""
    from .encoding import classify_uimf_file as _impl

    return _impl(Path(uimf_path))


def validate_uimf_file(uimf_path: Path) -> ValidationReport:
    """Check that a ``.uimf`` file exists, is large enough and holds spectra."""
    from .validate import validate_uimf_file as _impl

    return _impl(Path(uimf_path))


__all__ = [
    "convert_dataset",
    "classify_uimf_file",
    "validate_uimf_file",
]
