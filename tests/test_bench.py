from __future__ import annotations

import pytest

from packrle.bench import make_payload, run_benchmark, run_fuzz


@pytest.mark.parametrize("kind", ["zeros", "alternating", "random", "mixed"])
def test_payload_sizes(kind):
    assert len(make_payload(kind, 1000, seed=3)) == 1000
    assert make_payload(kind, 1000, seed=3) == make_payload(kind, 1000, seed=3)


def test_unknown_kind():
    with pytest.raises(ValueError):
        make_payload("nope", 10)  # type: ignore[arg-type]


def test_benchmark_zeros_compresses():
    r = run_benchmark(kind="zeros", size_bytes=10_000)
    assert r.bytes_in == 10_000
    assert r.ratio < 0.05


def test_benchmark_random_bounded():
    r = run_benchmark(kind="random", size_bytes=10_000, seed=1)
    assert r.bytes_encoded < 10_000 * 1.1


def test_fuzz_roundtrips():
    assert run_fuzz(iterations=200, max_size=1000, seed=42) == 200
