"""Put the produced .uimf file in place and clean up local temporaries."""

from __future__ import annotations

import logging
from pathlib import Path

from uimf_converter.application.options import CONVERTER_TOOL_NAME, DOT_UIMF_EXTENSION
from uimf_converter.application.ports import FileTools, LockQueue
from uimf_converter.errors import FinalizeError

logger = logging.getLogger(__name__)


def _not_created(path: Path) -> FinalizeError:
    logger.error(
        "%s did not create a .UIMF file named %s: %s",
        CONVERTER_TOOL_NAME,
        path.name,
        path,
    )
    return FinalizeError(
        f"{CONVERTER_TOOL_NAME} did not create a .UIMF file named {path.name}"
    )


def rename_alternate_output(work_dir: Path, data_directory: Path, dataset: str) -> Path:
    """Rename the output of a nested ``.d`` directory to ``<dataset>.uimf``.

    The converter names its output after the directory it was given, so a
    nested ``sequence1.d`` yields ``sequence1.uimf``.

    Returns
    -------
    Path
        Canonical output path.

    Raises
    ------
    FinalizeError
        If the converter did not produce the nested-name file.
    """
    source = work_dir / f"{data_directory.stem}{DOT_UIMF_EXTENSION}"
    target = work_dir / f"{dataset}{DOT_UIMF_EXTENSION}"
    if source.name.lower() == target.name.lower():
        return target
    if not source.is_file():
        raise _not_created(source)
    logger.debug("Renaming %s to %s", source, target.name)
    source.replace(target)
    return target


def copy_output_to_remote(
    output_path: Path,
    remote_dir: Path,
    *,
    file_tools: FileTools,
    lock_queue: LockQueue,
    debug_level: int = 4,
) -> Path:
    """Copy ``output_path`` into ``remote_dir`` and delete the local copy.

    Raises
    ------
    FinalizeError
        If the output file is missing or the copy fails.
    """
    if not output_path.is_file():
        raise _not_created(output_path)

    if debug_level >= 4:
        logger.debug("Copying %s file to the dataset directory", output_path.suffix)

    lock_queue.reset_timestamp()
    target = remote_dir / output_path.name
    try:
        file_tools.copy_file(output_path, target, overwrite=True)
    except OSError as exc:
        raise FinalizeError(f"Error copying {output_path.name} to {remote_dir}: {exc}") from exc

    if debug_level >= 4:
        logger.debug("Copy complete")

    try:
        output_path.unlink()
    except OSError as exc:
        logger.warning(
            "Exception deleting local copy of the new .UIMF file %s: %s", output_path, exc
        )
    return target


def delete_console_output(console_output_path: Path) -> None:
    """Delete the console output file, ignoring any error."""
    try:
        console_output_path.unlink(missing_ok=True)
    except OSError:
        pass


def delete_staged_directory(
    file_tools: FileTools, directory: Path, *, debug_level: int = 4
) -> None:
    """Delete the locally staged ``.d`` directory; failures are only warnings."""
    try:
        file_tools.delete_directory(directory, ignore_errors=True)
    except Exception as exc:
        logger.warning(
            "Exception deleting locally cached .d directory (%s): %s", directory, exc
        )
        return
    if debug_level >= 4:
        logger.debug("Deleted locally cached .d directory %s", directory)
