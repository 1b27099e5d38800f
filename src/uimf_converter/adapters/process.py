"""Subprocess-backed ProcessRunner adapter."""

from __future__ import annotations

import logging
import subprocess
from collections.abc import Sequence
from pathlib import Path
from typing import IO

logger = logging.getLogger(__name__)


class PopenProcess:
    """RunningProcess over ``subprocess.Popen`` that owns its console log handle."""

    def __init__(self, proc: subprocess.Popen[bytes], console_handle: IO[bytes]) -> None:
        self._proc = proc
        self._console_handle = console_handle

    @property
    def pid(self) -> int:
        return self._proc.pid

    @property
    def exit_code(self) -> int | None:
        return self._proc.returncode

    def poll(self) -> int | None:
        code = self._proc.poll()
        if code is not None:
            self._close_console()
        return code

    def wait(self, timeout: float | None = None) -> int | None:
        try:
            code = self._proc.wait(timeout=timeout)
        except subprocess.TimeoutExpired:
            return None
        self._close_console()
        return code

    def terminate(self) -> None:
        if self._proc.poll() is None:
            self._proc.terminate()

    def kill(self) -> None:
        if self._proc.poll() is None:
            self._proc.kill()

    def _close_console(self) -> None:
        if not self._console_handle.closed:
            self._console_handle.flush()
            self._console_handle.close()


class SubprocessRunner:
    """Start programs with combined stdout/stderr written to a console file."""

    def start(
        self,
        executable: Path,
        arguments: Sequence[str],
        cwd: Path,
        console_output_path: Path,
    ) -> PopenProcess:
        """Launch ``executable``.

        Parameters
        ----------
        executable : Path
            Program to run.
        arguments : Sequence[str]
            Positional arguments, passed without shell interpretation.
        cwd : Path
            Working directory for the child process.
        console_output_path : Path
            File receiving stdout and stderr; truncated on start.

        Returns
        -------
        PopenProcess
            Handle used by the supervisor poll loop.
        """
        console_output_path.parent.mkdir(parents=True, exist_ok=True)
        handle = console_output_path.open("wb")
        try:
            proc = subprocess.Popen(
                [str(executable), *arguments],
                cwd=str(cwd),
                stdin=subprocess.DEVNULL,
                stdout=handle,
                stderr=subprocess.STDOUT,
            )
        except Exception:
            handle.close()
            raise
        logger.debug("Started %s (pid %s)", executable.name, proc.pid)
        return PopenProcess(proc, handle)
