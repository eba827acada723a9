# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""High-level facade for running probes outside the measurement scheduler."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

import httpx

from .config import ProbeSettings, load_probe_settings
from .http.executor import ProbeExecutor
from .models.result import MeasurementResult
from .tasks.base import MeasurementTask
from .tasks.http_censorship import ProbeTask
from .tasks.registry import create_task, decode_task
from .utils.device import DeviceInfo, LocalDeviceInfo
from .utils.traffic import TrafficCounter


class HttpProbe:
    """
    Convenience wrapper that shares one settings object, executor and device
    identity across every task it builds.
    """

    def __init__(
        self,
        settings: ProbeSettings | None = None,
        *,
        transport: httpx.BaseTransport | None = None,
        traffic: TrafficCounter | None = None,
        device: DeviceInfo | None = None,
    ):
        self.settings = settings or load_probe_settings()
        self.executor = ProbeExecutor(self.settings, transport=transport, traffic=traffic)
        self.device = device or LocalDeviceInfo(self.settings.device_id)

    def _wiring(self) -> dict[str, Any]:
        return {"settings": self.settings, "executor": self.executor, "device": self.device}

    def task(self, params: Mapping[str, Any], *, type_tag: str = ProbeTask.TYPE, **desc_fields: Any) -> MeasurementTask:
        return create_task(type_tag, params, **self._wiring(), **desc_fields)

    def decode(self, data: bytes) -> MeasurementTask:
        return decode_task(data, **self._wiring())

    def run(
        self,
        url: str,
        *,
        method: str | None = None,
        headers: str | None = None,
        key: str | None = None,
    ) -> MeasurementResult:
        params = {"url": url, "method": method, "headers": headers}
        task = self.task({k: v for k, v in params.items() if v is not None}, key=key)
        return task.execute()
