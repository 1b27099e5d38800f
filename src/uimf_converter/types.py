"""Shared type aliases for conversion modules."""

from __future__ import annotations

from collections.abc import Callable
from typing import Literal, TypeAlias

InstrumentClassName: TypeAlias = Literal[
    "IMS_Agilent_TOF_DotD",
    "IMS_Agilent_TOF_UIMF",
]

ProgressCallback: TypeAlias = Callable[[str, float], None]
"""Receives a progress label and a percent-complete value (0-100)."""

Clock: TypeAlias = Callable[[], float]
"""Monotonic clock returning seconds."""

Sleeper: TypeAlias = Callable[[float], None]

