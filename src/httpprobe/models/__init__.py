# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Dataclass exports for httpprobe."""

from .outcome import ProbeOutcome
from .result import MeasurementResult, TaskProgress
from .spec import MeasurementDesc, ProbeSpec

__all__ = [
    "MeasurementDesc",
    "MeasurementResult",
    "ProbeOutcome",
    "ProbeSpec",
    "TaskProgress",
]
