"""Typed request and option objects shared across conversion use-cases."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from uimf_converter.types import InstrumentClassName

DOT_D_EXTENSION = ".d"
DOT_UIMF_EXTENSION = ".uimf"
ACQ_DATA_DIRECTORY = "AcqData"
CONVERTER_EXE_NAME = "AgilentToUimfConverter.exe"
CONVERTER_TOOL_NAME = "AgilentToUIMFConverter"
DOTD_INSTRUMENT_CLASS: InstrumentClassName = "IMS_Agilent_TOF_DotD"

# MSPeak.bin is optional; older datasets may have had larger files purged.
REQUIRED_DOTD_FILES: tuple[str, ...] = (
    "IMSFrame.bin",
    "MSPeriodicActuals.bin",
    "MSProfile.bin",
    "MSScan.bin",
)

MAX_CONVERTER_RUNTIME_MINUTES = 180


@dataclass(frozen=True)
class ConversionRequest:
    """One dataset conversion unit.

    Parameters
    ----------
    dataset : str
        Dataset name; also the base name of the ``.d`` directory and the
        ``.uimf`` output.
    remote_directory : Path
        Dataset directory on the storage server.
    work_dir : Path
        Local working directory.
    converter_path : Path
        Full path to the converter executable.
    max_runtime_minutes : int, default=180
        Hard ceiling before the converter is terminated.
    manager_name : str, default="CTM"
        Used to name the console output file.
    """

    dataset: str
    remote_directory: Path
    work_dir: Path
    converter_path: Path
    max_runtime_minutes: int = MAX_CONVERTER_RUNTIME_MINUTES
    manager_name: str = "CTM"

    @property
    def output_path(self) -> Path:
        return self.work_dir / f"{self.dataset}{DOT_UIMF_EXTENSION}"

    @property
    def output_name(self) -> str:
        return self.output_path.name

    @property
    def local_dotd_directory(self) -> Path:
        return self.work_dir / f"{self.dataset}{DOT_D_EXTENSION}"

    @property
    def remote_dotd_directory(self) -> Path:
        return self.remote_directory / self.local_dotd_directory.name

    @property
    def console_output_path(self) -> Path:
        return self.work_dir / f"AgilentToUIMF_ConsoleOutput_{self.manager_name}.txt"


@dataclass(frozen=True)
class MonitorOptions:
    """Timing configuration for the converter poll loop."""

    max_runtime_minutes: float = MAX_CONVERTER_RUNTIME_MINUTES
    poll_interval_seconds: float = 2.0
    progress_check_seconds: float = 30.0
    status_interval_minutes: int = 5
    status_interval_max_minutes: int = 30
    terminate_grace_seconds: float = 10.0


@dataclass(frozen=True)
class SizeThresholds:
    """File-size limits (in KB) used when validating a ``.uimf`` file."""

    min_size_kb: float = 5
    small_size_kb: float = 50
