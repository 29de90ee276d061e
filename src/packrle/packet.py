from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Tuple, Union

from .constants import DIGEST_BYTE_SIZE, DIGEST_HEADER, PACKET_SIZE_CAP, RAW_FLAG
from .errors import InvalidPacket, MalformedPacket


class PacketKind(enum.IntEnum):
    RAW = 0
    RUN = 1
    DIGEST = 2


def _check_length(kind: PacketKind, length: int) -> None:
    if length < 1:
        raise InvalidPacket(
            f"{kind.name.lower()} packet with length {length}; lengths start at 1, 0 is the digest marker"
        )
    if length > PACKET_SIZE_CAP:
        raise InvalidPacket(f"{kind.name.lower()} packet oversized: length={length}")


def encode_header(kind: PacketKind, length: int = 0) -> int:
    if kind == PacketKind.DIGEST:
        return DIGEST_HEADER
    _check_length(kind, length)
    if kind == PacketKind.RAW:
        return RAW_FLAG | length
    return length


def parse_header(header: int) -> Tuple[PacketKind, int]:
    """Split a header byte into ``(kind, payload length)``.

    For a run the length is the repeat count; the payload itself is one byte.
    """
    if not 0 <= header <= 0xFF:
        raise MalformedPacket(f"header out of byte range: {header}")
    if header == DIGEST_HEADER:
        return PacketKind.DIGEST, DIGEST_BYTE_SIZE
    if header & RAW_FLAG:
        length = header & PACKET_SIZE_CAP
        if length == 0:
            raise MalformedPacket("raw packet header with length 0")
        return PacketKind.RAW, length
    return PacketKind.RUN, header


@dataclass(frozen=True, slots=True)
class RawPacket:
    payload: bytes

    def __post_init__(self) -> None:
        _check_length(PacketKind.RAW, len(self.payload))

    @property
    def kind(self) -> PacketKind:
        return PacketKind.RAW

    def to_bytes(self) -> bytes:
        return bytes((encode_header(PacketKind.RAW, len(self.payload)),)) + self.payload


@dataclass(frozen=True, slots=True)
class RunPacket:
    value: int
    length: int

    def __post_init__(self) -> None:
        _check_length(PacketKind.RUN, self.length)
        if not 0 <= self.value <= 0xFF:
            raise InvalidPacket(f"run value out of byte range: {self.value}")

    @property
    def kind(self) -> PacketKind:
        return PacketKind.RUN

    def to_bytes(self) -> bytes:
        return bytes((encode_header(PacketKind.RUN, self.length), self.value))


@dataclass(frozen=True, slots=True)
class DigestPacket:
    value: bytes

    def __post_init__(self) -> None:
        if len(self.value) != DIGEST_BYTE_SIZE:
            raise InvalidPacket(f"digest must be {DIGEST_BYTE_SIZE} bytes, got {len(self.value)}")

    @property
    def kind(self) -> PacketKind:
        return PacketKind.DIGEST

    def to_bytes(self) -> bytes:
        return bytes((DIGEST_HEADER,)) + self.value


Packet = Union[RawPacket, RunPacket, DigestPacket]
