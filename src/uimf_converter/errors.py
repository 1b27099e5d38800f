"""Exception hierarchy for the .D to UIMF conversion pipeline."""

from __future__ import annotations

class UimfConverterError(Exception):
    """Base error for conversion, validation and classification failures."""

    exit_code = 1

class ConfigurationError(UimfConverterError):
    """Raised before any I/O when settings or task parameters are unusable."""

    exit_code = 2

class StagingError(UimfConverterError):
    """Raised when the .D directory cannot be staged to the work directory."""

class LayoutError(UimfConverterError):
    """Raised when no directory with an AcqData subdirectory can be found."""

class ConverterProcessError(UimfConverterError):
    """Raised when the external converter fails or times out."""

    def __init__(
        self,
        message: str,
        *,
        return_code: int | None = None,
        timed_out: bool = False,
    ) -> None:
        super().__init__(message)
        self.return_code = return_code
        self.timed_out = timed_out

class FinalizeError(UimfConverterError):
    """Raised when the produced .uimf file cannot be renamed or copied back."""

class UimfReadError(UimfConverterError):
    """Raised when a .uimf file cannot be opened or queried."""
