"""Application-layer result objects."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from pathlib import Path


@dataclass(frozen=True)
class ConversionOutcome:
    """Structured conversion outcome returned to the caller."""

    success: bool
    closeout_msg: str = ""
    eval_msg: str = ""
    percent_complete: float = 0.0


class MultiplexingStatus(Enum):
    """Whether a dataset still needs demultiplexing."""

    NOT_MULTIPLEXED = "non-multiplexed"
    MULTIPLEXED = "multiplexed"
    ERROR = "error"


@dataclass(frozen=True)
class EncodingResult:
    """Multiplexing classification of a ``.uimf`` file or ``.d`` directory."""

    status: MultiplexingStatus
    bit_width: int = 0
    encoding_sequence: str = ""

    @property
    def is_multiplexed(self) -> bool:
        return self.status is MultiplexingStatus.MULTIPLEXED

    @classmethod
    def not_multiplexed(cls) -> EncodingResult:
        return cls(MultiplexingStatus.NOT_MULTIPLEXED)

    @classmethod
    def multiplexed(cls, bit_width: int, encoding_sequence: str = "") -> EncodingResult:
        return cls(MultiplexingStatus.MULTIPLEXED, bit_width, encoding_sequence)

    @classmethod
    def error(cls) -> EncodingResult:
        return cls(MultiplexingStatus.ERROR)


@dataclass(frozen=True)
class FrameRecord:
    """Read-only view of one frame in a ``.uimf`` file."""

    frame_number: int
    frame_type: int
    encoding_sequence: str = ""


@dataclass(frozen=True)
class ScanRecord:
    """Read-only view of one scan; ``data_point_count == 0`` means empty."""

    frame_number: int
    scan: int
    data_point_count: int


@dataclass(frozen=True)
class ResolvedLayout:
    """Directory handed to the converter and whether it was nested."""

    data_directory: Path
    alternate: bool = False


@dataclass(frozen=True)
class ProcessResult:
    """Exit information for one converter run."""

    success: bool
    exit_code: int | None
    timed_out: bool = False
    elapsed_minutes: float = 0.0


@dataclass(frozen=True)
class ConsoleOutputSummary:
    """Result of one pass over the converter console output."""

    percent_complete: float = 0.0
    errors: tuple[str, ...] = ()


@dataclass(frozen=True)
class ValidationReport:
    """Outcome of validating a produced ``.uimf`` file."""

    valid: bool
    eval_msg: str = ""
    size_kb: float = 0.0
