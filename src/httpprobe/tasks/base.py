# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Capability set every measurement task type provides."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Protocol

from ..models.result import MeasurementResult


class MeasurementTask(Protocol):
    """
    Minimal protocol the scheduler relies on.

    Task types are looked up by their `TYPE` tag (see `registry`), not by
    class hierarchy. `stop()` is part of the contract even for tasks that
    cannot be interrupted; such tasks return False.
    """

    TYPE: str
    DESCRIPTOR: str

    @property
    def duration(self) -> int: ...

    @property
    def data_consumed(self) -> int: ...

    @classmethod
    def from_params(cls, params: Mapping[str, Any] | None, **kwargs: Any) -> MeasurementTask: ...

    @classmethod
    def decode(cls, data: bytes, **kwargs: Any) -> MeasurementTask: ...

    def execute(self) -> MeasurementResult: ...

    def clone(self) -> MeasurementTask: ...

    def encode(self) -> bytes: ...

    def describe(self) -> str: ...

    def stop(self) -> bool: ...

    def set_duration(self, duration: int) -> None: ...
