from __future__ import annotations

import random
import time
from dataclasses import dataclass
from typing import Literal

from .constants import PACKET_SIZE_CAP
from .decoder import decode
from .encoder import encode

PayloadKind = Literal["zeros", "alternating", "random", "mixed"]


@dataclass(frozen=True, slots=True)
class BenchmarkResult:
    kind: str
    bytes_in: int
    bytes_encoded: int
    ratio: float
    encode_s: float
    decode_s: float
    encode_mbps: float
    decode_mbps: float


def make_payload(kind: PayloadKind, size: int, seed: int = 0) -> bytes:
    rng = random.Random(seed)
    if kind == "zeros":
        return bytes(size)
    if kind == "alternating":
        return bytes(i % 2 for i in range(size))
    if kind == "random":
        return rng.randbytes(size)
    if kind == "mixed":
        out = bytearray()
        while len(out) < size:
            if rng.random() < 0.5:
                out += bytes((rng.randrange(256),)) * rng.randint(1, 3 * PACKET_SIZE_CAP)
            else:
                out += rng.randbytes(rng.randint(1, 2 * PACKET_SIZE_CAP))
        return bytes(out[:size])
    raise ValueError(f"unknown payload kind: {kind}")


def _mbps(n: int, seconds: float) -> float:
    return (n * 8 / 1_000_000) / max(0.001, seconds)


def run_benchmark(*, kind: PayloadKind = "mixed", size_bytes: int = 1_000_000, seed: int = 0) -> BenchmarkResult:
    payload = make_payload(kind, size_bytes, seed)

    t0 = time.perf_counter()
    encoded = encode(payload)
    t1 = time.perf_counter()
    decoded = decode(encoded)
    t2 = time.perf_counter()

    assert decoded == payload

    return BenchmarkResult(
        kind=kind,
        bytes_in=size_bytes,
        bytes_encoded=len(encoded),
        ratio=len(encoded) / max(1, size_bytes),
        encode_s=t1 - t0,
        decode_s=t2 - t1,
        encode_mbps=_mbps(size_bytes, t1 - t0),
        decode_mbps=_mbps(size_bytes, t2 - t1),
    )


def _fuzz_payload(rng: random.Random, max_size: int) -> bytes:
    # Bias lengths toward the packet cap, where splitting happens.
    size = rng.choice(
        [
            rng.randint(0, 3),
            rng.randint(PACKET_SIZE_CAP - 2, PACKET_SIZE_CAP + 2),
            rng.randint(0, max_size),
        ]
    )
    alphabet = rng.randint(1, 256)
    out = bytearray()
    while len(out) < size:
        value = rng.randrange(alphabet)
        out += bytes((value,)) * rng.choice([1, 1, 2, 3, rng.randint(1, 2 * PACKET_SIZE_CAP + 1)])
    return bytes(out[:size])


def run_fuzz(*, iterations: int = 1000, max_size: int = 4096, seed: int = 0) -> int:
    rng = random.Random(seed)
    for i in range(iterations):
        payload = _fuzz_payload(rng, max_size)
        encoded = encode(payload)
        if decode(encoded) != payload:
            raise AssertionError(f"round trip mismatch at iteration {i} (size={len(payload)})")
    return iterations

