# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Bounded HTTP probe task."""

from __future__ import annotations

import logging
import time
from collections.abc import Mapping
from typing import Any

from ..config import ProbeSettings, load_probe_settings
from ..errors import ValidationError
from ..http.executor import ProbeExecutor
from ..models.result import MeasurementResult, TaskProgress
from ..models.spec import ProbeSpec
from ..utils.device import DeviceInfo, LocalDeviceInfo
from .codec import ParcelWriter, read_envelope, read_spec, write_envelope, write_spec

logger = logging.getLogger(__name__)


class ProbeTask:
    """
    Fetches one URL and records status, headers and a capped body as evidence.

    The task cannot be interrupted once `execute()` starts; `stop()` always
    reports False. `duration` is an advisory scheduling hint and is never
    overwritten by the measured exchange time (`time_ms` in the result).
    """

    TYPE = "httpCensorship"
    DESCRIPTOR = "HTTPCensorship"

    def __init__(
        self,
        spec: ProbeSpec,
        *,
        settings: ProbeSettings | None = None,
        executor: ProbeExecutor | None = None,
        device: DeviceInfo | None = None,
        duration: int | None = None,
        data_consumed: int = 0,
    ):
        if spec.desc.type and spec.desc.type != self.TYPE:
            raise ValidationError(f"Cannot build {self.TYPE} task from a {spec.desc.type} description")
        spec.desc.type = self.TYPE
        self.spec = spec
        self.settings = settings or (executor.settings if executor is not None else load_probe_settings())
        self.executor = executor or ProbeExecutor(self.settings)
        self.device = device or LocalDeviceInfo(self.settings.device_id)
        self._duration = 0
        self.set_duration(self.settings.default_duration_ms if duration is None else duration)
        self._data_consumed = max(0, data_consumed)

    @classmethod
    def from_params(
        cls,
        params: Mapping[str, Any] | None,
        *,
        settings: ProbeSettings | None = None,
        executor: ProbeExecutor | None = None,
        device: DeviceInfo | None = None,
        **desc_fields: Any,
    ) -> ProbeTask:
        spec = ProbeSpec.from_params(params, type=cls.TYPE, **desc_fields)
        return cls(spec, settings=settings, executor=executor, device=device)

    @classmethod
    def decode(
        cls,
        data: bytes,
        *,
        settings: ProbeSettings | None = None,
        executor: ProbeExecutor | None = None,
        device: DeviceInfo | None = None,
    ) -> ProbeTask:
        type_tag, reader = read_envelope(data)
        if type_tag != cls.TYPE:
            raise ValidationError(f"Encoded task is {type_tag}, expected {cls.TYPE}")
        spec = read_spec(reader)
        duration = reader.read_i64()
        data_consumed = reader.read_i64()
        reader.expect_end()
        return cls(
            spec,
            settings=settings,
            executor=executor,
            device=device,
            duration=duration,
            data_consumed=data_consumed,
        )

    @property
    def type(self) -> str:
        return self.TYPE

    @property
    def descriptor(self) -> str:
        return self.DESCRIPTOR

    @property
    def key(self) -> str | None:
        return self.spec.desc.key

    @property
    def duration(self) -> int:
        return self._duration

    def set_duration(self, duration: int) -> None:
        self._duration = max(0, int(duration))

    @property
    def data_consumed(self) -> int:
        """Bytes attributed to this task instance across all of its executions."""
        return self._data_consumed

    def execute(self) -> MeasurementResult:
        outcome = self.executor.execute(self.spec)
        self._data_consumed += outcome.data_consumed_delta

        # Completed regardless of status code; non-2xx responses are evidence too.
        result = MeasurementResult(
            device_id=self.device.device_id(),
            properties=self.device.device_properties(self.key),
            type=self.TYPE,
            timestamp=int(time.time() * 1_000_000),
            task_progress=TaskProgress.COMPLETED,
            desc=self.spec.desc,
            values=outcome.to_values(),
        )
        logger.info("%s", result.to_json())
        return result

    def clone(self) -> ProbeTask:
        return ProbeTask(self.spec.copy(), settings=self.settings, executor=self.executor, device=self.device)

    def encode(self) -> bytes:
        writer = ParcelWriter()
        write_envelope(writer, self.TYPE)
        write_spec(writer, self.spec)
        writer.write_i64(self._duration)
        writer.write_i64(self._data_consumed)
        return writer.getvalue()

    def stop(self) -> bool:
        return False

    def describe(self) -> str:
        desc = self.spec.desc
        return (
            f"Censorship Task [HTTP {self.spec.method}]\n"
            f"  Target: {self.spec.url}\n"
            f"  Headers: {self.spec.headers}\n"
            f"  Interval (sec): {desc.interval_sec}\n"
            f"  Next run: {desc.start_time}"
        )

    def __str__(self) -> str:
        return self.describe()


__all__ = ["ProbeTask"]
