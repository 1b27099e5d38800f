"""Pipeline stages of a single .D to UIMF conversion."""

from __future__ import annotations

from uimf_converter.conversion.console_output import ConsoleOutputParser
from uimf_converter.conversion.finalize import (
    copy_output_to_remote,
    delete_console_output,
    delete_staged_directory,
    rename_alternate_output,
)
from uimf_converter.conversion.layout import resolve_acquisition_directory
from uimf_converter.conversion.staging import stage_directory
from uimf_converter.conversion.supervisor import ProcessSupervisor

__all__ = [
    "ConsoleOutputParser",
    "ProcessSupervisor",
    "copy_output_to_remote",
    "delete_console_output",
    "delete_staged_directory",
    "rename_alternate_output",
    "resolve_acquisition_directory",
    "stage_directory",
]
