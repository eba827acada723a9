# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Measurement description and probe spec models."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import Any

from ..errors import ValidationError
from ..http.url import normalize_probe_url

DEFAULT_METHOD = "get"


@dataclass
class MeasurementDesc:
    """Scheduling fields shared by every measurement type."""

    type: str
    key: str | None = None
    start_time: datetime | None = None
    end_time: datetime | None = None
    interval_sec: float = 0.0
    count: int = 1
    priority: int = 0
    context_interval_sec: int = 0
    parameters: dict[str, str] = field(default_factory=dict)

    def copy(self) -> MeasurementDesc:
        return replace(self, parameters=dict(self.parameters))


@dataclass
class ProbeSpec:
    """
    Validated target of a single HTTP probe.

    Use `from_params` for caller-supplied parameters; direct construction is
    reserved for decoding already-normalized values and only checks the url.
    The raw header block is validated line by line at execution time.
    """

    url: str
    method: str = DEFAULT_METHOD
    headers: str | None = None
    desc: MeasurementDesc = field(default_factory=lambda: MeasurementDesc(type=""))

    def __post_init__(self) -> None:
        if not self.url:
            raise ValidationError("Url for http censorship task is null")
        if not self.method:
            self.method = DEFAULT_METHOD

    @classmethod
    def from_params(cls, params: Mapping[str, Any] | None, *, type: str = "", **desc_fields: Any) -> ProbeSpec:
        params = dict(params or {})
        raw_url = params.get("url")
        if not raw_url:
            raise ValidationError("Url for http censorship task is null")

        headers = params.get("headers")
        desc = MeasurementDesc(
            type=type,
            parameters={str(k): str(v) for k, v in params.items() if v is not None},
            **desc_fields,
        )
        return cls(
            url=normalize_probe_url(str(raw_url)),
            method=str(params.get("method") or DEFAULT_METHOD),
            headers=None if headers is None else str(headers),
            desc=desc,
        )

    def copy(self) -> ProbeSpec:
        return replace(self, desc=self.desc.copy())


__all__ = ["DEFAULT_METHOD", "MeasurementDesc", "ProbeSpec"]
