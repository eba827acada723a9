# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Device network traffic counters used for data-consumption accounting."""

from __future__ import annotations

from typing import Protocol

import psutil


class TrafficCounter(Protocol):
    """Anything that can report the cumulative bytes moved over the device's interfaces."""

    def rx_tx_bytes(self) -> int: ...


class PsutilTrafficCounter:
    """Sum of received and sent bytes across all interfaces, as reported by psutil."""

    def __init__(self, interface: str | None = None):
        self.interface = interface

    def rx_tx_bytes(self) -> int:
        if self.interface is None:
            counters = psutil.net_io_counters()
        else:
            counters = psutil.net_io_counters(pernic=True).get(self.interface)
        if counters is None:
            return 0
        return int(counters.bytes_recv) + int(counters.bytes_sent)


def consumed_since(counter: TrafficCounter, baseline: int) -> int:
    """Bytes moved since `baseline`; counter resets or wraps report zero."""
    return max(0, counter.rx_tx_bytes() - baseline)


__all__ = ["PsutilTrafficCounter", "TrafficCounter", "consumed_since"]
