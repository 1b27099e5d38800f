"""Local filesystem adapters implementing FileTools and LockQueue ports."""

from __future__ import annotations

import logging
import shutil
from pathlib import Path

logger = logging.getLogger(__name__)


class NullLockQueue:
    """Lock queue used when no coordinator is registered; always safe to call."""

    def reset_timestamp(self) -> None:
        return None


class LocalFileTools:
    """Copy and delete files with ``shutil``."""

    def copy_directory(self, source: Path, target: Path) -> None:
        """Copy ``source`` tree to ``target``.

        Parameters
        ----------
        source : Path
            Existing directory to copy.
        target : Path
            Destination directory; parents are created as needed.
        """
        target.parent.mkdir(parents=True, exist_ok=True)
        logger.debug("Copying %s to %s", source, target)
        shutil.copytree(source, target)

    def copy_file(self, source: Path, target: Path, overwrite: bool = False) -> None:
        """Copy a single file, refusing to replace ``target`` unless ``overwrite``."""
        if target.exists() and not overwrite:
            raise FileExistsError(f"Target file already exists: {target}")
        target.parent.mkdir(parents=True, exist_ok=True)
        shutil.copy2(source, target)

    def delete_directory(self, path: Path, ignore_errors: bool = False) -> None:
        shutil.rmtree(path, ignore_errors=ignore_errors)
