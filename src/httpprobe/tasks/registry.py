# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Task type registry keyed by measurement type tag."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from ..errors import ValidationError
from .base import MeasurementTask
from .codec import read_envelope
from .http_censorship import ProbeTask

_TASK_TYPES: dict[str, type[MeasurementTask]] = {}


def register_task_type(task_cls: type[MeasurementTask]) -> type[MeasurementTask]:
    _TASK_TYPES[task_cls.TYPE] = task_cls
    return task_cls


def registered_task_types() -> list[str]:
    return sorted(_TASK_TYPES)


def get_task_class(type_tag: str) -> type[MeasurementTask]:
    try:
        return _TASK_TYPES[type_tag]
    except KeyError:
        raise ValidationError(f"Unknown measurement type: {type_tag}") from None


def create_task(type_tag: str, params: Mapping[str, Any] | None, **kwargs: Any) -> MeasurementTask:
    """Build a task of the given type from scheduler parameters."""
    return get_task_class(type_tag).from_params(params, **kwargs)


def decode_task(data: bytes, **kwargs: Any) -> MeasurementTask:
    """Rebuild a task from `encode()` output, dispatching on the stored type tag."""
    type_tag, _ = read_envelope(data)
    return get_task_class(type_tag).decode(data, **kwargs)


register_task_type(ProbeTask)


__all__ = [
    "create_task",
    "decode_task",
    "get_task_class",
    "register_task_type",
    "registered_task_types",
]
