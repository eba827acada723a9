# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Device identity used to tag measurement results."""

from __future__ import annotations

import platform
import socket
import uuid
from typing import Any, Protocol


class DeviceInfo(Protocol):
    def device_id(self) -> str: ...

    def device_properties(self, key: str | None) -> dict[str, Any]: ...


class LocalDeviceInfo:
    """Host-derived identity for runs outside the measurement scheduler."""

    def __init__(self, device_id: str | None = None):
        self._device_id = device_id or f"{uuid.getnode():012x}"

    def device_id(self) -> str:
        return self._device_id

    def device_properties(self, key: str | None) -> dict[str, Any]:
        return {
            "task_key": key,
            "hostname": socket.gethostname(),
            "os": platform.system(),
            "os_version": platform.release(),
        }


__all__ = ["DeviceInfo", "LocalDeviceInfo"]
