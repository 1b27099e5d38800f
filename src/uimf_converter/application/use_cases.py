"""Application use-cases orchestrating the .D to UIMF conversion workflow."""

from __future__ import annotations

import logging
import time
from collections.abc import Mapping
from dataclasses import replace
from pathlib import Path

from pydantic import ValidationError

from uimf_converter.adapters.file_tools import LocalFileTools, NullLockQueue
from uimf_converter.adapters.process import SubprocessRunner
from uimf_converter.adapters.uimf_reader import open_uimf_reader
from uimf_converter.application.options import (
    CONVERTER_TOOL_NAME,
    DOTD_INSTRUMENT_CLASS,
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
from uimf_converter.application.results import ConversionOutcome
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
from uimf_converter.errors import (
    ConfigurationError,
    ConverterProcessError,
    UimfConverterError,
)
from uimf_converter.schemas import ManagerSettings, TaskParameters
from uimf_converter.types import Clock, ProgressCallback, Sleeper
from uimf_converter.validate import validate_uimf_file

logger = logging.getLogger(__name__)

UNKNOWN_ERROR_MSG = (
    "Unknown error converting the Agilent .d directory to a .UIMF file"
)
WRONG_INSTRUMENT_MSG = (
    "AgilentToUimfConversion can only convert Agilent IMS .D directories to .UIMF"
)
VALIDATION_FAILED_MSG = "UIMF file validation failed"


class AgilentToUimfConverter:
    """Convert one dataset's Agilent ``.d`` directory to a ``.uimf`` file.

    Collaborators default to local implementations and can be replaced for
    other storage back ends or tests.
    """

    def __init__(
        self,
        request: ConversionRequest,
        *,
        file_tools: FileTools | None = None,
        lock_queue: LockQueue | None = None,
        runner: ProcessRunner | None = None,
        reader_factory: UimfReaderFactory | None = None,
        monitor: MonitorOptions | None = None,
        thresholds: SizeThresholds | None = None,
        debug_level: int = 4,
        on_progress: ProgressCallback | None = None,
        clock: Clock = time.monotonic,
        sleep: Sleeper = time.sleep,
    ) -> None:
        self.request = request
        self.file_tools = file_tools or LocalFileTools()
        self.lock_queue = lock_queue or NullLockQueue()
        self.runner = runner or SubprocessRunner()
        self.reader_factory = reader_factory or open_uimf_reader
        self.monitor = replace(
            monitor or MonitorOptions(),
            max_runtime_minutes=request.max_runtime_minutes,
        )
        self.thresholds = thresholds or SizeThresholds()
        self.debug_level = debug_level
        self.percent_complete = 0.0
        self._on_progress = on_progress
        self._clock = clock
        self._sleep = sleep

        self.error_message = ""
        self.in_failure_state = False
        if not request.converter_path.is_file():
            self.error_message = (
                f"{CONVERTER_TOOL_NAME} not found at {request.converter_path}"
            )
            self.in_failure_state = True
            logger.error(self.error_message)

    def tool_paths(self) -> list[Path]:
        """Return executables whose versions should be recorded."""
        return [self.request.converter_path]

    def run(self, instrument_class: str = DOTD_INSTRUMENT_CLASS) -> ConversionOutcome:
        """Stage, convert, copy back and validate.

        Parameters
        ----------
        instrument_class : str
            Instrument class of the dataset; only Agilent IMS ``.D`` data is
            supported.

        Returns
        -------
        ConversionOutcome
            Always returned; internal failures become a failed outcome.
        """
        self.percent_complete = 0.0

        if self.in_failure_state:
            return self._failed(self.error_message)
        if instrument_class != DOTD_INSTRUMENT_CLASS:
            logger.error(WRONG_INSTRUMENT_MSG)
            return self._failed(WRONG_INSTRUMENT_MSG)

        logger.info(
            "Performing Agilent .D to .UIMF conversion, dataset %s",
            self.request.dataset,
        )
        try:
            remote_output = self._convert()
        except UimfConverterError as exc:
            message = str(exc) or UNKNOWN_ERROR_MSG
            logger.error(message)
            return self._failed(message)
        except Exception as exc:
            message = "Exception converting .d directory to a UIMF file"
            logger.exception("%s: %s", message, exc)
            return self._failed(f"{message}: {exc}")

        report = validate_uimf_file(remote_output, self.reader_factory, self.thresholds)
        if not report.valid:
            return self._failed(VALIDATION_FAILED_MSG, eval_msg=report.eval_msg)
        return ConversionOutcome(success=True, percent_complete=self.percent_complete)

    def _convert(self) -> Path:
        request = self.request
        local_dotd = request.local_dotd_directory

        stage_directory(
            request.remote_dotd_directory,
            local_dotd,
            require_files=True,
            file_tools=self.file_tools,
            lock_queue=self.lock_queue,
        )
        layout = resolve_acquisition_directory(local_dotd)

        supervisor = ProcessSupervisor(
            self.runner,
            ConsoleOutputParser(on_progress=self._record_progress),
            self.monitor,
            clock=self._clock,
            sleep=self._sleep,
        )
        try:
            result = supervisor.run(
                request.converter_path,
                [str(layout.data_directory), str(request.work_dir)],
                request.work_dir,
                request.console_output_path,
            )
        finally:
            delete_staged_directory(
                self.file_tools, local_dotd, debug_level=self.debug_level
            )

        if not result.success:
            message = f"Error running the {CONVERTER_TOOL_NAME}"
            if result.timed_out:
                message += (
                    f" (timed out after {request.max_runtime_minutes} minutes)"
                )
            raise ConverterProcessError(
                message, return_code=result.exit_code, timed_out=result.timed_out
            )

        output_path = request.output_path
        if layout.alternate:
            output_path = rename_alternate_output(
                request.work_dir, layout.data_directory, request.dataset
            )

        remote_output = copy_output_to_remote(
            output_path,
            request.remote_directory,
            file_tools=self.file_tools,
            lock_queue=self.lock_queue,
            debug_level=self.debug_level,
        )
        delete_console_output(request.console_output_path)
        return remote_output

    def _record_progress(self, label: str, percent: float) -> None:
        self.percent_complete = max(self.percent_complete, percent)
        if self._on_progress is not None:
            self._on_progress(label, self.percent_complete)

    def _failed(self, closeout_msg: str, eval_msg: str = "") -> ConversionOutcome:
        return ConversionOutcome(
            success=False,
            closeout_msg=closeout_msg or UNKNOWN_ERROR_MSG,
            eval_msg=eval_msg,
            percent_complete=self.percent_complete,
        )


def build_conversion_request(
    settings: ManagerSettings | Mapping[str, object],
    task: TaskParameters | Mapping[str, object],
) -> tuple[ConversionRequest, TaskParameters, ManagerSettings]:
    """Validate manager settings and task parameters into a request.

    Raises
    ------
    ConfigurationError
        If either parameter set is invalid.
    """
    try:
        settings_model = (
            settings
            if isinstance(settings, ManagerSettings)
            else ManagerSettings.model_validate(dict(settings))
        )
        task_model = (
            task
            if isinstance(task, TaskParameters)
            else TaskParameters.model_validate(dict(task))
        )
    except ValidationError as exc:
        raise ConfigurationError(f"Invalid conversion parameters: {exc}") from exc

    request = ConversionRequest(
        dataset=task_model.dataset,
        remote_directory=task_model.remote_directory,
        work_dir=settings_model.work_dir,
        converter_path=settings_model.converter_path,
        max_runtime_minutes=settings_model.max_runtime_minutes,
        manager_name=settings_model.manager_name,
    )
    return request, task_model, settings_model


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
    """Use-case: convert the dataset named by ``task`` into a ``.uimf`` file.

    Invalid parameters fail fast with a failed outcome; no exception escapes.
    """
    try:
        request, task_model, settings_model = build_conversion_request(settings, task)
    except ConfigurationError as exc:
        logger.error(str(exc))
        return ConversionOutcome(success=False, closeout_msg=str(exc))

    converter = AgilentToUimfConverter(
        request,
        file_tools=file_tools,
        lock_queue=lock_queue,
        runner=runner,
        reader_factory=reader_factory,
        monitor=monitor,
        debug_level=settings_model.debug_level,
        on_progress=on_progress,
    )
    return converter.run(task_model.instrument_class)
