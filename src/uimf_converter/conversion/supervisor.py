"""Run the external converter under a poll loop with a hard runtime ceiling."""

from __future__ import annotations

import logging
import time
from collections.abc import Sequence
from pathlib import Path

from uimf_converter.application.options import CONVERTER_TOOL_NAME, MonitorOptions
from uimf_converter.application.ports import ProcessRunner, RunningProcess
from uimf_converter.application.results import ProcessResult
from uimf_converter.conversion.console_output import ConsoleOutputParser
from uimf_converter.types import Clock, Sleeper

logger = logging.getLogger(__name__)


def possibly_quote_path(path: Path | str) -> str:
    """Wrap ``path`` in double quotes when it contains a space."""
    text = str(path)
    if " " in text and not (text.startswith('"') and text.endswith('"')):
        return f'"{text}"'
    return text


class ProcessSupervisor:
    """Start the converter and wait for it with two independent timers.

    Each tick either re-parses the console output (every
    ``progress_check_seconds``) or, on ticks without a progress check, logs a
    status line once ``status_interval_minutes`` have passed. The status
    interval grows by one minute per status line, up to
    ``status_interval_max_minutes``.
    """

    def __init__(
        self,
        runner: ProcessRunner,
        parser: ConsoleOutputParser,
        options: MonitorOptions | None = None,
        *,
        clock: Clock = time.monotonic,
        sleep: Sleeper = time.sleep,
        tool_name: str = CONVERTER_TOOL_NAME,
    ) -> None:
        self.runner = runner
        self.parser = parser
        self.options = options or MonitorOptions()
        self.tool_name = tool_name
        self._clock = clock
        self._sleep = sleep
        self.reset(0.0)

    def run(
        self,
        executable: Path,
        arguments: Sequence[str],
        cwd: Path,
        console_output_path: Path,
    ) -> ProcessResult:
        """Run ``executable`` until it exits or the runtime ceiling is hit.

        Parameters
        ----------
        executable : Path
            Converter program.
        arguments : Sequence[str]
            Positional arguments (source data directory, output directory).
        cwd : Path
            Working directory of the child process.
        console_output_path : Path
            Where combined stdout/stderr is captured.

        Returns
        -------
        ProcessResult
            ``success`` is true only for exit code 0 without a timeout.
        """
        logger.info(
            "Running %s: %s %s",
            self.tool_name,
            executable,
            " ".join(possibly_quote_path(arg) for arg in arguments),
        )
        process = self.runner.start(executable, arguments, cwd, console_output_path)

        self.reset(self._clock())
        max_runtime_seconds = self.options.max_runtime_minutes * 60
        timed_out = False

        while process.poll() is None:
            now = self._clock()
            if now - self._start >= max_runtime_seconds:
                timed_out = True
                logger.error(
                    "%s timeout reported (the converter has been running for over %s minutes)",
                    self.tool_name,
                    f"{self.options.max_runtime_minutes:g}",
                )
                self._stop(process)
                break
            self.tick(now, console_output_path)
            self._sleep(self.options.poll_interval_seconds)

        elapsed_minutes = (self._clock() - self._start) / 60

        # One more pass to surface trailing error lines.
        self.parser.parse(console_output_path)

        exit_code = process.exit_code
        success = not timed_out and exit_code == 0
        if not success:
            if exit_code not in (0, None):
                logger.warning(
                    "%s returned a non-zero exit code: %s", self.tool_name, exit_code
                )
            elif not timed_out:
                logger.warning(
                    "Call to %s failed (but exit code is 0)", self.tool_name
                )
        return ProcessResult(
            success=success,
            exit_code=exit_code,
            timed_out=timed_out,
            elapsed_minutes=elapsed_minutes,
        )

    def reset(self, now: float) -> None:
        """Start both timers at ``now`` and restore the initial status interval."""
        self._start = now
        self._last_progress_check = now
        self._last_status = now
        self.status_interval_minutes = self.options.status_interval_minutes
        self.status_messages = 0

    def tick(self, now: float, console_output_path: Path) -> None:
        """Handle one wake-up of the poll loop."""
        if now - self._last_progress_check >= self.options.progress_check_seconds:
            self._last_progress_check = now
            self.parser.parse(console_output_path)
            return

        if (now - self._last_status) / 60 < self.status_interval_minutes:
            return

        self._last_status = now
        self.status_messages += 1
        logger.info(
            "%s running; %.1f minutes elapsed",
            self.tool_name,
            (now - self._start) / 60,
        )
        if self.status_interval_minutes < self.options.status_interval_max_minutes:
            self.status_interval_minutes += 1

    def _stop(self, process: RunningProcess) -> None:
        grace = self.options.terminate_grace_seconds
        process.terminate()
        if process.wait(timeout=grace) is None:
            logger.warning("%s did not exit after terminate; killing it", self.tool_name)
            process.kill()
            process.wait(timeout=grace)
