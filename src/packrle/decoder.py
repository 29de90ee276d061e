from __future__ import annotations

import enum
import hmac
import io
import logging
import time
from dataclasses import dataclass, field
from typing import BinaryIO

from .constants import SIGNATURE
from .digest import IntegrityDigest
from .errors import BadSignature, DigestMismatch, MissingDigest, TrailingData, TruncatedPacket
from .packet import PacketKind, parse_header


@dataclass(slots=True)
class Metrics:
    bytes_in: int = 0
    bytes_out: int = 0
    raw_packets: int = 0
    run_packets: int = 0
    start_ts: float = field(default_factory=time.monotonic)
    end_ts: float | None = None

    @property
    def duration_s(self) -> float:
        if self.end_ts is None:
            return 0.0
        return max(0.0, self.end_ts - self.start_ts)

    @property
    def ratio(self) -> float:
        if self.bytes_in <= 0:
            return 0.0
        return self.bytes_out / self.bytes_in

    @property
    def throughput_mbps(self) -> float:
        if self.duration_s <= 0:
            return 0.0
        return (self.bytes_in * 8 / 1_000_000) / self.duration_s


class Stage(enum.Enum):
    EXPECT_SIGNATURE = "expect_signature"
    EXPECT_PACKET = "expect_packet"
    EXPECT_DIGEST = "expect_digest"
    DONE = "done"


@dataclass(slots=True)
class Decoder:
    src: BinaryIO
    out: BinaryIO
    stage: Stage = field(default=Stage.EXPECT_SIGNATURE, init=False)

    def _read_upto(self, n: int, metrics: Metrics) -> bytes:
        # pipes and sockets may return fewer bytes than asked before EOF
        data = b""
        while len(data) < n:
            chunk = self.src.read(n - len(data))
            if not chunk:
                break
            data += chunk
        metrics.bytes_in += len(data)
        return data

    def _read_exact(self, n: int, metrics: Metrics, what: str) -> bytes:
        data = self._read_upto(n, metrics)
        if len(data) != n:
            raise TruncatedPacket(f"{what}: expected {n} bytes, got {len(data)}")
        return data

    def _emit(self, data: bytes, digest: IntegrityDigest, metrics: Metrics) -> None:
        self.out.write(data)
        digest.update(data)
        metrics.bytes_out += len(data)

    def run(self) -> Metrics:
        metrics = Metrics()
        digest = IntegrityDigest()
        expected: bytes | None = None

        sig = self._read_upto(len(SIGNATURE), metrics)
        if sig != SIGNATURE:
            raise BadSignature(f"not an RLE stream: signature {sig!r}")
        self.stage = Stage.EXPECT_PACKET

        while True:
            head = self.src.read(1)
            if not head:
                break
            metrics.bytes_in += 1
            kind, length = parse_header(head[0])

            if kind == PacketKind.RAW:
                self._emit(self._read_exact(length, metrics, "raw packet"), digest, metrics)
                metrics.raw_packets += 1
            elif kind == PacketKind.RUN:
                value = self._read_exact(1, metrics, "run packet")
                self._emit(value * length, digest, metrics)
                metrics.run_packets += 1
            else:
                self.stage = Stage.EXPECT_DIGEST
                expected = self._read_exact(length, metrics, "digest packet")
                if self.src.read(1):
                    raise TrailingData("stream continues after the digest packet")
                break

        if expected is None:
            raise MissingDigest("stream ended without a digest packet")

        self.out.flush()
        actual = digest.finalize()
        metrics.end_ts = time.monotonic()
        logging.debug(
            "decoded %d -> %d bytes; raw=%d run=%d",
            metrics.bytes_in,
            metrics.bytes_out,
            metrics.raw_packets,
            metrics.run_packets,
        )
        if not hmac.compare_digest(actual, expected):
            raise DigestMismatch(expected, actual)
        self.stage = Stage.DONE
        return metrics


def decode(data: bytes) -> bytes:
    out = io.BytesIO()
    Decoder(io.BytesIO(data), out).run()
    return out.getvalue()
