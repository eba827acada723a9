# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""
httpprobe package entrypoint.

This package runs single, bounded HTTP probes for a network-measurement
scheduler: it fetches one URL, captures status, headers and a size-capped body
as evidence, and accounts the time and device traffic the exchange used.
HTTP is performed with httpx, and domain objects are modeled with typed
dataclasses for clarity.
"""

from .config import ProbeSettings, load_probe_settings
from .errors import ErrorCategory, MeasurementError, NetworkError, ResourceError, ValidationError
from .http import ProbeExecutor
from .log import setup_logging
from .models import MeasurementDesc, MeasurementResult, ProbeOutcome, ProbeSpec, TaskProgress
from .runtime import HttpProbe
from .tasks import MeasurementTask, ProbeTask, create_task, decode_task
from .version import __version__

__all__ = [
    "ErrorCategory",
    "HttpProbe",
    "MeasurementDesc",
    "MeasurementError",
    "MeasurementResult",
    "MeasurementTask",
    "NetworkError",
    "ProbeExecutor",
    "ProbeOutcome",
    "ProbeSettings",
    "ProbeSpec",
    "ProbeTask",
    "ResourceError",
    "TaskProgress",
    "ValidationError",
    "create_task",
    "decode_task",
    "load_probe_settings",
    "setup_logging",
    "__version__",
]
