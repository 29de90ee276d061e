from __future__ import annotations

import argparse
import json
import logging
from dataclasses import asdict

from .bench import run_benchmark, run_fuzz
from .errors import ConfigError, FormatError, IntegrityError, RleError
from .files import compress_file, uncompress_file

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_CONFIG = 2
EXIT_FORMAT = 3
EXIT_INTEGRITY = 4


def _setup_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(message)s",
    )


def _report(payload: dict, as_json: bool) -> None:
    print(json.dumps(payload, indent=2) if as_json else payload)


def exit_code_for(exc: BaseException) -> int:
    if isinstance(exc, ConfigError):
        return EXIT_CONFIG
    if isinstance(exc, FormatError):
        return EXIT_FORMAT
    if isinstance(exc, IntegrityError):
        return EXIT_INTEGRITY
    return EXIT_FAILURE


def cmd_codec(args: argparse.Namespace) -> int:
    if args.compress and args.uncompress:
        raise ConfigError("can't use both -z and -u at the same time")
    if not args.compress and not args.uncompress:
        raise ConfigError("one of -z or -u should be specified")

    if args.compress:
        metrics = compress_file(args.input, args.out, force=args.force)
        role = "compress"
    else:
        metrics = uncompress_file(
            args.input,
            args.out,
            force=args.force,
            delete_on_digest_mismatch=not args.keep_on_digest_mismatch,
        )
        role = "uncompress"

    payload = {
        "role": role,
        "bytes_in": metrics.bytes_in,
        "bytes_out": metrics.bytes_out,
        "raw_packets": metrics.raw_packets,
        "run_packets": metrics.run_packets,
        "ratio": metrics.ratio,
        "seconds": metrics.duration_s,
        "mbps": metrics.throughput_mbps,
    }
    _report(payload, args.json)
    return EXIT_OK


def cmd_bench(args: argparse.Namespace) -> int:
    r = run_benchmark(kind=args.kind, size_bytes=args.size_bytes, seed=args.seed)
    payload = {"role": "bench", **asdict(r)}
    _report(payload, args.json)
    return EXIT_OK


def cmd_fuzz(args: argparse.Namespace) -> int:
    checked = run_fuzz(iterations=args.iterations, max_size=args.max_size, seed=args.seed)
    _report({"role": "fuzz", "iterations": checked, "seed": args.seed}, args.json)
    return EXIT_OK


def _add_common(x: argparse.ArgumentParser) -> None:
    x.add_argument("--json", action="store_true")
    x.add_argument("-v", "--verbose", action="store_true")


def _run(args: argparse.Namespace) -> int:
    _setup_logging(args.verbose)
    try:
        return int(args.func(args))
    except RleError as e:
        logging.error("%s", e)
        return exit_code_for(e)
    except OSError as e:
        logging.error("I/O error: %s", e)
        return EXIT_FAILURE


def main(argv: list[str] | None = None) -> int:
    p = argparse.ArgumentParser(prog="pack-rle", description="Run-length encode/decode files (.rle).")
    _add_common(p)
    p.add_argument("-z", "--compress", action="store_true", help="Compress the input. Cannot be used with -u.")
    p.add_argument("-u", "--uncompress", action="store_true", help="Uncompress the input. Cannot be used with -z.")
    p.add_argument("-o", "--out", default=None, help="Output file name")
    p.add_argument("-f", "--force", action="store_true", help="Overwrite the output file if it exists.")
    p.add_argument(
        "--keep-on-digest-mismatch",
        action="store_true",
        help="Keep the uncompressed output when its digest does not match.",
    )
    p.add_argument("input", help="Input file name")
    p.set_defaults(func=cmd_codec)

    args = p.parse_args(argv)
    return _run(args)


def bench_main(argv: list[str] | None = None) -> int:
    p = argparse.ArgumentParser(prog="pack-rle-bench", description="Benchmark and fuzz the RLE codec.")
    sub = p.add_subparsers(dest="cmd", required=True)

    bench = sub.add_parser("bench")
    _add_common(bench)
    bench.add_argument("--kind", choices=["zeros", "alternating", "random", "mixed"], default="mixed")
    bench.add_argument("--size-bytes", type=int, default=1_000_000)
    bench.add_argument("--seed", type=int, default=0)
    bench.set_defaults(func=cmd_bench)

    fuzz = sub.add_parser("fuzz")
    _add_common(fuzz)
    fuzz.add_argument("--iterations", type=int, default=1000)
    fuzz.add_argument("--max-size", type=int, default=4096)
    fuzz.add_argument("--seed", type=int, default=0)
    fuzz.set_defaults(func=cmd_fuzz)

    args = p.parse_args(argv)
    return _run(args)


if __name__ == "__main__":
    raise SystemExit(main())
