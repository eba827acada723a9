# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Accounting and identity helpers."""

from .device import DeviceInfo, LocalDeviceInfo
from .traffic import PsutilTrafficCounter, TrafficCounter, consumed_since

__all__ = [
    "DeviceInfo",
    "LocalDeviceInfo",
    "PsutilTrafficCounter",
    "TrafficCounter",
    "consumed_since",
]
