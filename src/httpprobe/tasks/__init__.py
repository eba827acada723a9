# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Measurement task exports."""

from .base import MeasurementTask
from .http_censorship import ProbeTask
from .registry import create_task, decode_task, get_task_class, register_task_type, registered_task_types

__all__ = [
    "MeasurementTask",
    "ProbeTask",
    "create_task",
    "decode_task",
    "get_task_class",
    "register_task_type",
    "registered_task_types",
]
