"""Pydantic schemas for runtime validation of manager and task parameters."""

from __future__ import annotations

from pathlib import Path

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

from uimf_converter.application.options import (
    CONVERTER_EXE_NAME,
    MAX_CONVERTER_RUNTIME_MINUTES,
)


class ManagerSettings(BaseModel):
    """Validated settings of the manager running conversions."""

    model_config = ConfigDict(extra="forbid")

    work_dir: Path
    converter_dir: Path
    manager_name: str = "CTM"
    debug_level: int = Field(default=4, ge=0, le=5)
    max_runtime_minutes: int = Field(default=MAX_CONVERTER_RUNTIME_MINUTES, gt=0)

    @field_validator("manager_name")
    @classmethod
    def _validate_manager_name(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("manager_name cannot be empty.")
        return value

    @property
    def converter_path(self) -> Path:
        return self.converter_dir / CONVERTER_EXE_NAME


class TaskParameters(BaseModel):
    """Validated parameters of one dataset conversion task."""

    model_config = ConfigDict(extra="ignore")

    dataset: str = Field(validation_alias=AliasChoices("dataset", "Dataset"))
    instrument_class: str = Field(
        validation_alias=AliasChoices("instrument_class", "Instrument_Class")
    )
    storage_vol_external: Path = Field(
        validation_alias=AliasChoices("storage_vol_external", "Storage_Vol_External")
    )
    storage_path: Path = Field(
        validation_alias=AliasChoices("storage_path", "Storage_Path")
    )
    directory: str = Field(
        validation_alias=AliasChoices("directory", "Directory", "Folder")
    )

    @field_validator("dataset", "directory")
    @classmethod
    def _validate_names(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("dataset and directory names cannot be empty.")
        if "/" in value or "\\" in value:
            raise ValueError("dataset and directory must be names, not paths.")
        return value

    @property
    def remote_directory(self) -> Path:
        """Dataset directory on the storage server."""
        return self.storage_vol_external / self.storage_path / self.directory
