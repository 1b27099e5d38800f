"""Locate the directory that directly contains AcqData."""

from __future__ import annotations

import logging
from pathlib import Path

from uimf_converter.application.options import ACQ_DATA_DIRECTORY, DOT_D_EXTENSION
from uimf_converter.application.results import ResolvedLayout
from uimf_converter.errors import LayoutError

logger = logging.getLogger(__name__)


def _has_acq_data(directory: Path) -> bool:
    return (directory / ACQ_DATA_DIRECTORY).is_dir()


def resolve_acquisition_directory(dotd_dir: Path) -> ResolvedLayout:
    """Return the directory the converter should be pointed at.

    Some datasets nest the real acquisition one level deeper, for example
    ``001_14Sep18_RapidFire.d/sequence1.d/AcqData``.

    Raises
    ------
    LayoutError
        If neither ``dotd_dir`` nor any ``.d`` subdirectory has AcqData.
    """
    if _has_acq_data(dotd_dir):
        return ResolvedLayout(data_directory=dotd_dir)

    candidates: list[Path] = []
    if dotd_dir.is_dir():
        candidates = sorted(
            child
            for child in dotd_dir.iterdir()
            if child.is_dir()
            and child.name.lower().endswith(DOT_D_EXTENSION)
            and _has_acq_data(child)
        )

    if not candidates:
        raise LayoutError(".D directory does not have an AcqData subdirectory")

    if len(candidates) > 1:
        logger.warning(
            "Multiple nested .d directories have AcqData; using the first: %s",
            ", ".join(child.name for child in candidates),
        )

    chosen = candidates[0]
    logger.info("Using the .d directory below the primary .d subdirectory: %s", chosen)
    return ResolvedLayout(data_directory=chosen, alternate=True)
