"""Unit tests for manager settings and task parameter schemas."""

from __future__ import annotations

from pathlib import Path

import pytest
from pydantic import ValidationError

from uimf_converter.schemas import ManagerSettings, TaskParameters


def test_manager_settings_defaults(tmp_path: Path) -> None:
    """Fill in manager defaults and derive the converter path."""
    settings = ManagerSettings(work_dir=tmp_path / "work", converter_dir=tmp_path / "prog")
    assert settings.manager_name == "CTM"
    assert settings.debug_level == 4
    assert settings.max_runtime_minutes == 180
    assert settings.converter_path == tmp_path / "prog" / "AgilentToUimfConverter.exe"


@pytest.mark.parametrize(
    "overrides",
    [
        {"debug_level": 9},
        {"max_runtime_minutes": 0},
        {"manager_name": "   "},
        {"unknown_key": 1},
    ],
)
def test_manager_settings_rejects_invalid_values(tmp_path: Path, overrides: dict) -> None:
    """Reject out-of-range, blank and unknown settings."""
    with pytest.raises(ValidationError):
        ManagerSettings(work_dir=tmp_path, converter_dir=tmp_path, **overrides)


def test_task_parameters_accept_manager_style_keys() -> None:
    """Accept the capitalized keys used by task parameter maps."""
    task = TaskParameters.model_validate(
        {
            "Dataset": " DS1 ",
            "Instrument_Class": "IMS_Agilent_TOF_DotD",
            "Storage_Vol_External": "/storage",
            "Storage_Path": "IMS08/2024_1",
            "Folder": "DS1",
            "Job": 1234,
        }
    )
    assert task.dataset == "DS1"
    assert task.remote_directory == Path("/storage/IMS08/2024_1/DS1")


@pytest.mark.parametrize("directory", ["", "a/b", "a\\b"])
def test_task_parameters_reject_paths_as_names(directory: str) -> None:
    """Require directory to be a single name."""
    with pytest.raises(ValidationError):
        TaskParameters.model_validate(
            {
                "dataset": "DS1",
                "instrument_class": "IMS_Agilent_TOF_DotD",
                "storage_vol_external": "/storage",
                "storage_path": "",
                "directory": directory,
            }
        )
