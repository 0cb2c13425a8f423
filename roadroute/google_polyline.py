"""Encoding and decoding of coordinates in the Google polyline format."""

from __future__ import annotations

import struct
from collections.abc import Iterable
from dataclasses import dataclass

_MASK32 = 0xFFFFFFFF
_PRECISION = 100000.0


def _f32(x: float) -> float:
    return struct.unpack("<f", struct.pack("<f", x))[0]


def _to_int32(value: int) -> int:
    value &= _MASK32
    return value - (1 << 32) if value & 0x80000000 else value


@dataclass(frozen=True)
class OneDimensionalDecodeResult:
    value: float
    remaining: str


@dataclass(frozen=True)
class PolylineDecodeResult:
    latitude: float
    longitude: float
    remaining: str


@dataclass
class GoogleOneDimensionalPolylineEncoder:
    """Encodes a stream of values as deltas to the previous value."""

    last_value: int = 0

    def encode(self, value: float) -> str:
        int_value = int(_f32(_f32(value) * _PRECISION))
        delta = _to_int32(int_value - self.last_value)
        self.last_value = int_value

        bits = (delta << 1) & _MASK32
        if delta < 0:
            bits = ~bits & _MASK32

        chunks = []
        while True:
            chunk = bits & 0x1F
            bits >>= 5
            if bits:
                chunk |= 0x20
            chunks.append(chr(chunk + 0x3F))
            if not bits:
                return "".join(chunks)


@dataclass
class GooglePolylineEncoder:
    """Encodes a stream of latitude/longitude pairs."""

    lat_encoder: GoogleOneDimensionalPolylineEncoder = None  # type: ignore[assignment]
    lon_encoder: GoogleOneDimensionalPolylineEncoder = None  # type: ignore[assignment]

    def __post_init__(self) -> None:
        if self.lat_encoder is None:
            self.lat_encoder = GoogleOneDimensionalPolylineEncoder()
        if self.lon_encoder is None:
            self.lon_encoder = GoogleOneDimensionalPolylineEncoder()

    def encode(self, latitude: float, longitude: float) -> str:
        return self.lat_encoder.encode(latitude) + self.lon_encoder.encode(longitude)


@dataclass
class GoogleOneDimensionalPolylineDecoder:
    """Decodes a stream of delta-encoded values."""

    last_value: int = 0

    def decode(self, text: str) -> OneDimensionalDecodeResult:
        bits = 0
        pos = 0
        has_next = True
        while has_next and pos < len(text):
            chunk = (ord(text[pos]) - 0x3F) & _MASK32
            has_next = bool(chunk & 0x20)
            bits |= ((chunk & 0x1F) << (5 * pos)) & _MASK32
            pos += 1

        is_negative = bits & 1
        bits >>= 1
        if is_negative:
            bits = ~bits & _MASK32

        int_value = _to_int32(_to_int32(bits) + self.last_value)
        self.last_value = int_value
        value = _f32(_f32(float(int_value)) / _PRECISION)
        return OneDimensionalDecodeResult(value, text[pos:])


@dataclass
class GooglePolylineDecoder:
    """Decodes a stream of latitude/longitude pairs."""

    lat_decoder: GoogleOneDimensionalPolylineDecoder = None  # type: ignore[assignment]
    lon_decoder: GoogleOneDimensionalPolylineDecoder = None  # type: ignore[assignment]

    def __post_init__(self) -> None:
        if self.lat_decoder is None:
            self.lat_decoder = GoogleOneDimensionalPolylineDecoder()
        if self.lon_decoder is None:
            self.lon_decoder = GoogleOneDimensionalPolylineDecoder()

    def decode(self, text: str) -> PolylineDecodeResult:
        lat = self.lat_decoder.decode(text)
        lon = self.lon_decoder.decode(lat.remaining)
        return PolylineDecodeResult(lat.value, lon.value, lon.remaining)


def encode_polyline(points: Iterable[tuple[float, float]]) -> str:
    """Encode a sequence of (latitude, longitude) pairs as one polyline string."""
    encoder = GooglePolylineEncoder()
    return "".join(encoder.encode(latitude, longitude) for latitude, longitude in points)


def decode_polyline(text: str) -> list[tuple[float, float]]:
    """Decode a polyline string into a list of (latitude, longitude) pairs."""
    decoder = GooglePolylineDecoder()
    points = []
    while text:
        result = decoder.decode(text)
        points.append((result.latitude, result.longitude))
        text = result.remaining
    return points