"""Application ports for clean architecture boundaries."""

from __future__ import annotations

from collections.abc import Callable, Sequence
from pathlib import Path
from types import TracebackType
from typing import Protocol

from uimf_converter.application.results import FrameRecord


class LockQueue(Protocol):
    """Cooperative lock coordination shared by concurrent large-file copies."""

    def reset_timestamp(self) -> None:
        """Refresh the queue timestamp before a large copy starts."""


class FileTools(Protocol):
    """Directory and file transfer between remote storage and local disk."""

    def copy_directory(self, source: Path, target: Path) -> None:
        """Copy a directory tree; ``target`` must not exist yet."""

    def copy_file(self, source: Path, target: Path, overwrite: bool = False) -> None:
        """Copy one file, using lock files for large transfers."""

    def delete_directory(self, path: Path, ignore_errors: bool = False) -> None:
        """Delete a directory tree."""


class RunningProcess(Protocol):
    """Handle to a started child process."""

    @property
    def exit_code(self) -> int | None:
        """Exit code, or ``None`` while the process is running."""

    def poll(self) -> int | None:
        """Return the exit code if the process has exited, else ``None``."""

    def wait(self, timeout: float | None = None) -> int | None:
        """Wait up to ``timeout`` seconds and return the exit code if known."""

    def terminate(self) -> None:
        """Ask the process to stop."""

    def kill(self) -> None:
        """Force the process to stop."""


class ProcessRunner(Protocol):
    """Start external programs with console output captured to a file."""

    def start(
        self,
        executable: Path,
        arguments: Sequence[str],
        cwd: Path,
        console_output_path: Path,
    ) -> RunningProcess:
        """Launch ``executable`` and return a handle."""


class UimfReader(Protocol):
    """Read-only access to the frames and scans of a ``.uimf`` file."""

    def __enter__(self) -> UimfReader: ...

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        traceback: TracebackType | None,
    ) -> None: ...

    def frames(self) -> list[FrameRecord]:
        """Return every frame with its type and encoding sequence."""

    def frame_scans(self, frame_number: int) -> list[int]:
        """Return the scan numbers stored for one frame."""

    def spectrum_point_count(
        self, frame_number: int, frame_type: int, scan: int
    ) -> int:
        """Return the number of data points in the decoded spectrum."""


UimfReaderFactory = Callable[[Path], UimfReader]
