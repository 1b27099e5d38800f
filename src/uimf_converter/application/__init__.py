"""Application-layer use-cases and option objects."""

from __future__ import annotations

from collections.abc import Mapping
from typing import TYPE_CHECKING

from uimf_converter.application.options import (
    ConversionRequest,
    MonitorOptions,
    SizeThresholds,
)
from uimf_converter.application.ports import (
    FileTools,
    LockQueue,
    ProcessRunner,
    UimfReaderFactory,
)
from uimf_converter.application.results import (
    ConversionOutcome,
    EncodingResult,
    MultiplexingStatus,
)
from uimf_converter.types import ProgressCallback

if TYPE_CHECKING:
    from uimf_converter.schemas import ManagerSettings, TaskParameters


def convert_dataset(
    settings: ManagerSettings | Mapping[str, object],
    task: TaskParameters | Mapping[str, object],
    *,
    file_tools: FileTools | None = None,
    lock_queue: LockQueue | None = None,
    runner: ProcessRunner | None = None,
    reader_factory: UimfReaderFactory | None = None,
    monitor: MonitorOptions | None = None,
    on_progress: ProgressCallback | None = None,
) -> ConversionOutcome:
    """Convert one dataset via lazy use-case import."""
    from uimf_converter.application.use_cases import convert_dataset as _impl

    return _impl(
        settings,
        task,
        file_tools=file_tools,
        lock_queue=lock_queue,
        runner=runner,
        reader_factory=reader_factory,
        monitor=monitor,
        on_progress=on_progress,
    )


__all__ = [
    "ConversionRequest",
    "MonitorOptions",
    "SizeThresholds",
    "ConversionOutcome",
    "EncodingResult",
    "MultiplexingStatus",
    "convert_dataset",
]
