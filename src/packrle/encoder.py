from __future__ import annotations

import io
import logging
import time
from dataclasses import dataclass, field
from typing import BinaryIO, Union

from .constants import DEFAULT_CHUNK_SIZE, PACKET_SIZE_CAP, SIGNATURE
from .decoder import Metrics
from .digest import IntegrityDigest
from .packet import DigestPacket, Packet, RawPacket, RunPacket


@dataclass(slots=True)
class _RawState:
    # Literal bytes not yet written. The last one is what the next byte is
    # compared against; an empty buffer compares against nothing.
    buffer: bytearray = field(default_factory=bytearray)


@dataclass(slots=True)
class _RunState:
    value: int
    length: int


_State = Union[_RawState, _RunState]


@dataclass(slots=True)
class Encoder:
    src: BinaryIO
    out: BinaryIO
    chunk_size: int = DEFAULT_CHUNK_SIZE

    def _write(self, packet: Packet, metrics: Metrics) -> None:
        data = packet.to_bytes()
        self.out.write(data)
        metrics.bytes_out += len(data)
        if isinstance(packet, RawPacket):
            metrics.raw_packets += 1
        elif isinstance(packet, RunPacket):
            metrics.run_packets += 1

    def _step(self, state: _State, b: int, metrics: Metrics) -> _State:
        if isinstance(state, _RunState):
            if b == state.value:
                state.length += 1
                if state.length == PACKET_SIZE_CAP:
                    self._write(RunPacket(state.value, state.length), metrics)
                    return _RawState()
                return state
            self._write(RunPacket(state.value, state.length), metrics)
            return _RawState(bytearray((b,)))

        buf = state.buffer
        if buf and buf[-1] == b:
            # buf[-1] and b open a run; everything before them is literal.
            if len(buf) > 1:
                self._write(RawPacket(bytes(buf[:-1])), metrics)
            return _RunState(b, 2)

        buf.append(b)
        if len(buf) == PACKET_SIZE_CAP:
            self._write(RawPacket(bytes(buf)), metrics)
            return _RawState()
        return state

    def _flush(self, state: _State, metrics: Metrics) -> None:
        if isinstance(state, _RunState):
            self._write(RunPacket(state.value, state.length), metrics)
        elif state.buffer:
            self._write(RawPacket(bytes(state.buffer)), metrics)

    def run(self) -> Metrics:
        metrics = Metrics()
        digest = IntegrityDigest()
        state: _State = _RawState()

        self.out.write(SIGNATURE)
        metrics.bytes_out += len(SIGNATURE)

        while True:
            chunk = self.src.read(self.chunk_size)
            if not chunk:
                break
            digest.update(chunk)
            metrics.bytes_in += len(chunk)
            for b in chunk:
                state = self._step(state, b, metrics)

        self._flush(state, metrics)
        self._write(DigestPacket(digest.finalize()), metrics)
        self.out.flush()

        metrics.end_ts = time.monotonic()
        logging.debug(
            "encoded %d -> %d bytes; raw=%d run=%d",
            metrics.bytes_in,
            metrics.bytes_out,
            metrics.raw_packets,
            metrics.run_packets,
        )
        return metrics


def encode(data: bytes) -> bytes:
    out = io.BytesIO()
    Encoder(io.BytesIO(data), out).run()
    return out.getvalue()
