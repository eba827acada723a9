# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""
Byte encoding for moving tasks across a process boundary.

Layout (big-endian, format version 1):

- envelope:    [version u8][type tag str]
- description: [type str][key str?][start_time dt?][end_time dt?][interval_sec f64]
               [count i64][priority i64][context_interval_sec i32][parameters map]
- spec:        [description][url str][method str][headers str?]
- task:        [envelope][spec][duration i64][data_consumed i64]

Strings are an i32 byte length followed by UTF-8; a length of -1 encodes None.
Datetimes are a presence byte followed by i64 microseconds since the Unix epoch (UTC).
Maps are an i32 entry count followed by key/value string pairs.
"""

from __future__ import annotations

import struct
from datetime import datetime, timedelta, timezone
from typing import Any

from ..errors import ValidationError
from ..models.spec import MeasurementDesc, ProbeSpec

FORMAT_VERSION = 1

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)
_U8 = struct.Struct(">B")
_I32 = struct.Struct(">i")
_I64 = struct.Struct(">q")
_F64 = struct.Struct(">d")


class ParcelWriter:
    def __init__(self) -> None:
        self._buf = bytearray()

    def write_u8(self, value: int) -> None:
        self._buf += _U8.pack(value)

    def write_i32(self, value: int) -> None:
        self._buf += _I32.pack(value)

    def write_i64(self, value: int) -> None:
        self._buf += _I64.pack(value)

    def write_f64(self, value: float) -> None:
        self._buf += _F64.pack(value)

    def write_string(self, value: str | None) -> None:
        if value is None:
            self.write_i32(-1)
            return
        raw = value.encode("utf-8")
        self.write_i32(len(raw))
        self._buf += raw

    def write_datetime(self, value: datetime | None) -> None:
        if value is None:
            self.write_u8(0)
            return
        if value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        self.write_u8(1)
        self.write_i64((value - _EPOCH) // timedelta(microseconds=1))

    def write_string_map(self, value: dict[str, str]) -> None:
        self.write_i32(len(value))
        for key, item in value.items():
            self.write_string(key)
            self.write_string(item)

    def getvalue(self) -> bytes:
        return bytes(self._buf)


class ParcelReader:
    def __init__(self, data: bytes):
        self._data = bytes(data)
        self._pos = 0

    def _take(self, size: int) -> bytes:
        end = self._pos + size
        if size < 0 or end > len(self._data):
            raise ValidationError("Truncated measurement task encoding")
        chunk = self._data[self._pos:end]
        self._pos = end
        return chunk

    def _unpack(self, fmt: struct.Struct) -> Any:
        return fmt.unpack(self._take(fmt.size))[0]

    def read_u8(self) -> int:
        return self._unpack(_U8)

    def read_i32(self) -> int:
        return self._unpack(_I32)

    def read_i64(self) -> int:
        return self._unpack(_I64)

    def read_f64(self) -> float:
        return self._unpack(_F64)

    def read_string(self) -> str | None:
        size = self.read_i32()
        if size == -1:
            return None
        try:
            return self._take(size).decode("utf-8")
        except UnicodeDecodeError as exc:
            raise ValidationError(f"Corrupt string in measurement task encoding: {exc}") from exc

    def read_required_string(self) -> str:
        value = self.read_string()
        if value is None:
            raise ValidationError("Missing required string in measurement task encoding")
        return value

    def read_datetime(self) -> datetime | None:
        if not self.read_u8():
            return None
        micros = self.read_i64()
        try:
            return _EPOCH + timedelta(microseconds=micros)
        except (OverflowError, ValueError) as exc:
            raise ValidationError(f"Corrupt timestamp in measurement task encoding: {micros}") from exc

    def read_string_map(self) -> dict[str, str]:
        count = self.read_i32()
        if count < 0:
            raise ValidationError("Corrupt map in measurement task encoding")
        out: dict[str, str] = {}
        for _ in range(count):
            key = self.read_required_string()
            out[key] = self.read_string() or ""
        return out

    def expect_end(self) -> None:
        if self._pos != len(self._data):
            raise ValidationError(f"Unexpected {len(self._data) - self._pos} trailing bytes in measurement task encoding")


def write_envelope(writer: ParcelWriter, type_tag: str) -> None:
    writer.write_u8(FORMAT_VERSION)
    writer.write_string(type_tag)


def read_envelope(data: bytes) -> tuple[str, ParcelReader]:
    """Return the type tag of an encoded task and a reader positioned after it."""
    reader = ParcelReader(data)
    version = reader.read_u8()
    if version != FORMAT_VERSION:
        raise ValidationError(f"Unsupported measurement task encoding version: {version}")
    return reader.read_required_string(), reader


def write_desc(writer: ParcelWriter, desc: MeasurementDesc) -> None:
    writer.write_string(desc.type)
    writer.write_string(desc.key)
    writer.write_datetime(desc.start_time)
    writer.write_datetime(desc.end_time)
    writer.write_f64(desc.interval_sec)
    writer.write_i64(desc.count)
    writer.write_i64(desc.priority)
    writer.write_i32(desc.context_interval_sec)
    writer.write_string_map(desc.parameters)


def read_desc(reader: ParcelReader) -> MeasurementDesc:
    return MeasurementDesc(
        type=reader.read_required_string(),
        key=reader.read_string(),
        start_time=reader.read_datetime(),
        end_time=reader.read_datetime(),
        interval_sec=reader.read_f64(),
        count=reader.read_i64(),
        priority=reader.read_i64(),
        context_interval_sec=reader.read_i32(),
        parameters=reader.read_string_map(),
    )


def write_spec(writer: ParcelWriter, spec: ProbeSpec) -> None:
    write_desc(writer, spec.desc)
    writer.write_string(spec.url)
    writer.write_string(spec.method)
    writer.write_string(spec.headers)


def read_spec(reader: ParcelReader) -> ProbeSpec:
    desc = read_desc(reader)
    url = reader.read_required_string()
    method = reader.read_required_string()
    headers = reader.read_string()
    # Stored urls are already normalized.
    return ProbeSpec(url=url, method=method, headers=headers, desc=desc)


def encode_spec(spec: ProbeSpec) -> bytes:
    writer = ParcelWriter()
    write_spec(writer, spec)
    return writer.getvalue()


def decode_spec(data: bytes) -> ProbeSpec:
    reader = ParcelReader(data)
    spec = read_spec(reader)
    reader.expect_end()
    return spec


__all__ = [
    "FORMAT_VERSION",
    "ParcelReader",
    "ParcelWriter",
    "decode_spec",
    "encode_spec",
    "read_desc",
    "read_envelope",
    "read_spec",
    "write_desc",
    "write_envelope",
    "write_spec",
]
