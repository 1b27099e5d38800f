"""Stage a dataset's .D directory from storage into the work directory."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from pathlib import Path

from uimf_converter.application.options import REQUIRED_DOTD_FILES
from uimf_converter.application.ports import FileTools, LockQueue
from uimf_converter.errors import StagingError

logger = logging.getLogger(__name__)


def find_missing_files(
    directory: Path,
    required: Iterable[str] = REQUIRED_DOTD_FILES,
    pattern: str = "*.bin",
) -> list[str]:
    """Return required file names absent anywhere below ``directory``.

    Name comparison is case-insensitive; the result keeps the order of
    ``required``.
    """
    suffix = pattern.lstrip("*").lower()
    present = {
        path.name.lower()
        for path in directory.rglob("*")
        if path.is_file() and path.name.lower().endswith(suffix)
    }
    return [name for name in required if name.lower() not in present]


def missing_files_message(missing: list[str]) -> str:
    if len(missing) == 1:
        return f"Cannot convert .d to .UIMF; missing file {missing[0]}"
    return f"Cannot convert .d to .UIMF; missing files {', '.join(missing)}"


def stage_directory(
    remote_dir: Path,
    local_dir: Path,
    *,
    require_files: bool,
    file_tools: FileTools,
    lock_queue: LockQueue,
) -> bool:
    """Copy ``remote_dir`` to ``local_dir`` unless it is already staged.

    Parameters
    ----------
    remote_dir : Path
        ``.d`` directory on the storage server.
    local_dir : Path
        Target ``.d`` directory in the work directory.
    require_files : bool
        Require the IMS ``.bin`` files before copying. Older datasets may
        have had their larger files purged, which makes the converter fail.
    file_tools : FileTools
        Copy collaborator.
    lock_queue : LockQueue
        Reset before the copy so large-file lock files are not seen as stale.

    Returns
    -------
    bool
        ``True`` if a copy was made, ``False`` if ``local_dir`` already existed.

    Raises
    ------
    StagingError
        If required files are missing or the copy fails.
    """
    if local_dir.exists():
        logger.info("Using previously staged directory %s", local_dir)
        return False

    if not remote_dir.is_dir():
        raise StagingError(f".D directory not found: {remote_dir}")

    if require_files:
        missing = find_missing_files(remote_dir)
        if missing:
            raise StagingError(missing_files_message(missing))

    lock_queue.reset_timestamp()
    try:
        file_tools.copy_directory(remote_dir, local_dir)
    except OSError as exc:
        raise StagingError(
            f"Error copying {remote_dir} to {local_dir}: {exc}"
        ) from exc
    return True
