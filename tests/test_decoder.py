from __future__ import annotations

import io
import random

import pytest

from packrle.constants import DIGEST_BYTE_SIZE, SIGNATURE
from packrle.decoder import Decoder, Stage, decode
from packrle.encoder import encode
from packrle.errors import (
    BadSignature,
    DigestMismatch,
    MalformedPacket,
    MissingDigest,
    TrailingData,
    TruncatedPacket,
)


@pytest.mark.parametrize(
    "data",
    [
        b"",
        b"a",
        b"aa",
        b"aab",
        bytes(128),
        bytes(i % 2 for i in range(128)),
        bytes(range(256)) * 3,
        b"hello world" + b"!" * 300 + b"bye",
    ],
)
def test_roundtrip(data):
    assert decode(encode(data)) == data


def test_roundtrip_random():
    rng = random.Random(7)
    for _ in range(50):
        size = rng.randint(0, 2000)
        data = bytes(rng.choice(b"ab\x00") for _ in range(size))
        assert decode(encode(data)) == data


def test_stage_done_after_success():
    out = io.BytesIO()
    d = Decoder(io.BytesIO(encode(b"abc")), out)
    metrics = d.run()
    assert d.stage is Stage.DONE
    assert out.getvalue() == b"abc"
    assert metrics.bytes_out == 3


def test_bad_signature():
    with pytest.raises(BadSignature):
        decode(b"RLX" + encode(b"abc")[3:])


def test_short_signature():
    with pytest.raises(BadSignature):
        decode(b"RL")
    with pytest.raises(BadSignature):
        decode(b"")


def test_missing_digest():
    encoded = encode(b"abcdd")
    with pytest.raises(MissingDigest):
        decode(encoded[: -(1 + DIGEST_BYTE_SIZE)])
    with pytest.raises(MissingDigest):
        decode(SIGNATURE)


def test_trailing_data():
    with pytest.raises(TrailingData):
        decode(encode(b"abc") + b"\x00")


def test_truncated_digest():
    with pytest.raises(TruncatedPacket):
        decode(encode(b"abc")[:-1])


def test_truncated_raw_payload():
    with pytest.raises(TruncatedPacket):
        decode(SIGNATURE + b"\x85ab")


def test_truncated_run_value():
    with pytest.raises(TruncatedPacket):
        decode(SIGNATURE + b"\x05")


def test_zero_length_raw_header():
    with pytest.raises(MalformedPacket):
        decode(SIGNATURE + b"\x80")


def test_mismatch_after_writing_everything():
    encoded = bytearray(encode(b"abcabc" + b"z" * 10))
    encoded[4] ^= 0x01  # first raw payload byte: 'a' -> '`'
    out = io.BytesIO()
    d = Decoder(io.BytesIO(bytes(encoded)), out)
    with pytest.raises(DigestMismatch) as exc:
        d.run()
    assert out.getvalue() == b"`bcabc" + b"z" * 10
    assert exc.value.expected != exc.value.actual
    assert d.stage is Stage.EXPECT_DIGEST


def test_any_payload_bit_flip_is_detected():
    encoded = encode(b"abcabc" + b"z" * 10)
    # 0x86 'abcabc' 0x0a 'z'
    payload_positions = [4, 5, 6, 7, 8, 9, 11]
    for pos in payload_positions:
        for bit in range(8):
            corrupt = bytearray(encoded)
            corrupt[pos] ^= 1 << bit
            with pytest.raises(DigestMismatch):
                decode(bytes(corrupt))


def test_digest_bit_flip_is_detected():
    corrupt = bytearray(encode(b"some data"))
    corrupt[-1] ^= 0x80
    with pytest.raises(DigestMismatch):
        decode(bytes(corrupt))


class _Trickle(io.RawIOBase):
    """Hands out at most two bytes per read, like a slow pipe."""

    def __init__(self, data: bytes):
        self._buf = io.BytesIO(data)

    def readable(self) -> bool:
        return True

    def read(self, n: int = -1) -> bytes:
        return self._buf.read(2 if n < 0 else min(n, 2))


def test_short_reads_are_not_truncation():
    data = b"abcdefgh" + b"q" * 40 + bytes(range(100))
    out = io.BytesIO()
    Decoder(_Trickle(encode(data)), out).run()
    assert out.getvalue() == data


def test_stage_is_not_a_constructor_argument():
    d = Decoder(io.BytesIO(b""), io.BytesIO())
    assert d.stage is Stage.EXPECT_SIGNATURE
    with pytest.raises(TypeError):
        Decoder(io.BytesIO(b""), io.BytesIO(), Stage.DONE)  # type: ignore[call-arg]


def test_decode_errors_exported():
    import packrle

    for name in ("BadSignature", "MalformedPacket", "MissingDigest", "TrailingData", "TruncatedPacket"):
        assert name in packrle.__all__
        assert getattr(packrle, name) is not None
