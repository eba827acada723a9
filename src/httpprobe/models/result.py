# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Measurement result envelope handed back to the scheduler."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any

from .spec import MeasurementDesc


class TaskProgress(str, Enum):
    COMPLETED = "COMPLETED"
    FAILED = "FAILED"
    PAUSED = "PAUSED"
    RESCHEDULED = "RESCHEDULED"


def _isoformat(value: datetime | None) -> str | None:
    return value.isoformat() if value is not None else None


@dataclass
class MeasurementResult:
    """
    One measurement, tagged with the device and task that produced it.

    `timestamp` is in microseconds since the epoch.
    """

    device_id: str
    type: str
    timestamp: int
    task_progress: TaskProgress
    desc: MeasurementDesc
    properties: dict[str, Any] = field(default_factory=dict)
    values: dict[str, Any] = field(default_factory=dict)

    @property
    def success(self) -> bool:
        return self.task_progress == TaskProgress.COMPLETED

    def add_result(self, name: str, value: Any) -> None:
        self.values[name] = value

    def to_dict(self) -> dict[str, Any]:
        return {
            "device_id": self.device_id,
            "properties": dict(self.properties),
            "type": self.type,
            "timestamp": self.timestamp,
            "success": self.success,
            "task_progress": self.task_progress.value,
            "parameters": dict(self.desc.parameters),
            "measurement_desc": {
                "type": self.desc.type,
                "key": self.desc.key,
                "start_time": _isoformat(self.desc.start_time),
                "end_time": _isoformat(self.desc.end_time),
                "interval_sec": self.desc.interval_sec,
                "count": self.desc.count,
                "priority": self.desc.priority,
                "context_interval_sec": self.desc.context_interval_sec,
            },
            "values": dict(self.values),
        }

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), sort_keys=True)


__all__ = ["MeasurementResult", "TaskProgress"]
