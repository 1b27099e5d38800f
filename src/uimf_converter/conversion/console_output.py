"""Parse the converter console output for progress and error markers."""

from __future__ import annotations

import logging
import re
from pathlib import Path

from uimf_converter.application.options import CONVERTER_TOOL_NAME
from uimf_converter.application.results import ConsoleOutputSummary
from uimf_converter.types import ProgressCallback

logger = logging.getLogger(__name__)

PROGRESS_LABEL = "Converting to UIMF"

_PROGRESS_RE = re.compile(
    r"Converting frame (?P<processed>\d+) / (?P<total>\d+)", re.IGNORECASE
)
_ERROR_PREFIXES = ("error:", "exception in")
_UNHANDLED_PREFIX = "unhandled exception"


class ConsoleOutputParser:
    """Re-read the whole console output file on every call.

    The converter may still be writing the file, so each call starts from
    the beginning: the percent complete is the last progress line seen and
    exception-capture state never carries over between calls.
    """

    def __init__(self, on_progress: ProgressCallback | None = None) -> None:
        self._on_progress = on_progress

    def parse(self, console_output_path: Path) -> ConsoleOutputSummary:
        """Parse ``console_output_path`` once.

        Parameters
        ----------
        console_output_path : Path
            Captured stdout/stderr of the converter.

        Returns
        -------
        ConsoleOutputSummary
            Percent complete and every error line reported in this pass.
        """
        if not console_output_path.is_file():
            return ConsoleOutputSummary()

        percent_complete = 0.0
        errors: list[str] = []
        exception_lines: list[str] = []
        capturing_exception = False

        try:
            with console_output_path.open(encoding="utf-8", errors="replace") as reader:
                for raw_line in reader:
                    line = raw_line.rstrip("\r\n")
                    if not line:
                        continue

                    match = _PROGRESS_RE.search(line)
                    if match:
                        percent = _percent(match)
                        if percent is not None:
                            percent_complete = percent
                        continue

                    if capturing_exception:
                        exception_lines.append(line)

                    lowered = line.lower()
                    if lowered.startswith(_ERROR_PREFIXES):
                        errors.append(_report(line))
                    elif lowered.startswith(_UNHANDLED_PREFIX) and not capturing_exception:
                        errors.append(_report(line))
                        capturing_exception = True

            if exception_lines:
                exception_text = "; ".join(exception_lines)
                logger.error(exception_text)
                errors.append(exception_text)

            if self._on_progress is not None:
                self._on_progress(PROGRESS_LABEL, percent_complete)
        except Exception as exc:
            logger.error("Exception in ParseConsoleOutputFile: %s", exc)

        return ConsoleOutputSummary(
            percent_complete=percent_complete, errors=tuple(errors)
        )


def _percent(match: re.Match[str]) -> float | None:
    processed = int(match.group("processed"))
    total = int(match.group("total"))
    if total <= 0:
        logger.warning("Ignoring progress line with zero total frames: %s", match.group(0))
        return None
    return min(100.0, processed / total * 100)


def _report(line: str) -> str:
    message = f"{CONVERTER_TOOL_NAME} error: {line}"
    logger.error(message)
    return message
