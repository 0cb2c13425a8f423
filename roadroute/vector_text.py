"""Conversion between one-value-per-line text and typed value lists."""

from __future__ import annotations

import math
import re
import struct
from collections.abc import Iterable
from enum import Enum


class DataType(Enum):
    """The element types of a stored vector."""

    INT8 = "int8"
    UINT8 = "uint8"
    INT16 = "int16"
    UINT16 = "uint16"
    INT32 = "int32"
    UINT32 = "uint32"
    INT64 = "int64"
    UINT64 = "uint64"
    FLOAT32 = "float32"
    FLOAT64 = "float64"
    STRING = "string"


def _int_bounds(bits: int, signed: bool) -> tuple[int, int]:
    if signed:
        return -(1 << (bits - 1)), (1 << (bits - 1)) - 1
    return 0, (1 << bits) - 1


_INT_BOUNDS = {
    data_type: _int_bounds(int(data_type.value.lstrip("uint")), not data_type.value.startswith("u"))
    for data_type in DataType
    if "int" in data_type.value
}

_FLOAT_DIGITS = {DataType.FLOAT32: 7, DataType.FLOAT64: 16}

_INT_PATTERN = re.compile(r"\s*([+-]?[0-9]+)", re.ASCII)
_FLOAT_PATTERN = re.compile(
    r"\s*([+-]?(?:inf(?:inity)?|nan|(?:[0-9]+\.?[0-9]*|\.[0-9]+)(?:[eE][+-]?[0-9]+)?))",
    re.ASCII | re.IGNORECASE,
)


def _resolve(data_type: DataType | str) -> DataType:
    if isinstance(data_type, DataType):
        return data_type
    try:
        return DataType(data_type)
    except ValueError:
        raise ValueError(f'Unknown data type "{data_type}"') from None


def escape_string(text: str) -> str:
    """Escape backslashes and newlines so the string fits on one line."""
    return text.replace("\\", "\\\\").replace("\n", "\\n")


def unescape_string(text: str) -> str:
    """Undo :func:`escape_string`."""
    return text.replace("\\\\", "\\").replace("\\n", "\n")


def _to_float32(value: float) -> float:
    try:
        return struct.unpack("<f", struct.pack("<f", value))[0]
    except OverflowError:
        return math.copysign(math.inf, value)


def _parse_int(line: str, data_type: DataType) -> int:
    match = _INT_PATTERN.match(line)
    if match is None:
        raise ValueError(f'Could not parse "{line}" as {data_type.value}')
    value = int(match.group(1))
    low, high = _INT_BOUNDS[data_type]
    if value < low:
        raise ValueError(f'The number "{line}" is too small, min is "{low}"')
    if value > high:
        raise ValueError(f'The number "{line}" is too large, max is "{high}"')
    return value


def _parse_float(line: str, data_type: DataType) -> float:
    match = _FLOAT_PATTERN.match(line)
    if match is None:
        raise ValueError(f'Could not parse "{line}" as {data_type.value}')
    value = float(match.group(1))
    return _to_float32(value) if data_type is DataType.FLOAT32 else value


def parse_values(data_type: DataType | str, lines: Iterable[str]) -> list:
    """Parse one value per line; strings are unescaped, numbers are range checked."""
    data_type = _resolve(data_type)
    values = []
    for line in lines:
        line = line.removesuffix("\n")
        if data_type is DataType.STRING:
            values.append(unescape_string(line))
        elif data_type in _FLOAT_DIGITS:
            values.append(_parse_float(line, data_type))
        else:
            values.append(_parse_int(line, data_type))
    return values


def format_values(data_type: DataType | str, values: Iterable) -> str:
    """Render the values one per line, each followed by a newline."""
    data_type = _resolve(data_type)
    if data_type is DataType.STRING:
        rendered = (escape_string(v) for v in values)
    elif data_type in _FLOAT_DIGITS:
        digits = _FLOAT_DIGITS[data_type]
        convert = _to_float32 if data_type is DataType.FLOAT32 else float
        rendered = (f"{convert(v):.{digits}g}" for v in values)
    else:
        rendered = (str(int(v)) for v in values)
    return "".join(f"{line}\n" for line in rendered)