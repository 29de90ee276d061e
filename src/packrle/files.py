"""File-level compress/uncompress.

Wraps the stream codec with the plumbing around it: default output names,
existence and overwrite checks, and a destination that never survives a
failed pass (with one opt-out, for digest mismatches).
"""
from __future__ import annotations

import logging
import os
from contextlib import contextmanager
from pathlib import Path
from typing import BinaryIO, Iterator, Literal, Tuple, Type, Union

from .constants import SUFFIX
from .decoder import Decoder, Metrics
from .encoder import Encoder
from .errors import ConfigError, DigestMismatch

PathLike = Union[str, "os.PathLike[str]"]
Mode = Literal["compress", "uncompress"]


def default_output_name(input_path: PathLike, mode: Mode) -> str:
    name = os.fspath(input_path)
    if mode == "compress":
        return name + SUFFIX
    if name.endswith(SUFFIX) and len(name) > len(SUFFIX):
        return name[: -len(SUFFIX)]
    raise ConfigError(f"can't infer output name from {name!r}; specify it explicitly")


def resolve_paths(input_path: PathLike, output_path: PathLike, force: bool) -> Tuple[Path, Path]:
    src = Path(input_path)
    dst = Path(output_path)
    if not src.is_file():
        raise ConfigError(f"input file does not exist: {src}")
    if dst.exists():
        if src.samefile(dst):
            raise ConfigError(f"input and output are the same file: {src}")
        if not force:
            raise ConfigError(f"output file exists, not overwriting without force: {dst}")
        # other hard links to the old output keep their content
        dst.unlink()
        logging.info("removed existing output %s", dst)
    return src, dst


@contextmanager
def scoped_output(path: Path, keep_on: Tuple[Type[BaseException], ...] = ()) -> Iterator[BinaryIO]:
    """Open ``path`` for writing; delete it if the block raises.

    Exceptions whose type is in ``keep_on`` still propagate but leave the
    file in place.
    """
    f = open(path, "wb")
    try:
        yield f
    except keep_on:
        f.close()
        logging.warning("keeping output %s after failure", path)
        raise
    except BaseException:
        f.close()
        path.unlink(missing_ok=True)
        logging.info("removed partial output %s", path)
        raise
    finally:
        f.close()


def compress_file(input_path: PathLike, output_path: PathLike | None = None, *, force: bool = False) -> Metrics:
    out_name = output_path if output_path is not None else default_output_name(input_path, "compress")
    src, dst = resolve_paths(input_path, out_name, force)

    logging.info("compress start; %s -> %s", src, dst)
    with open(src, "rb") as f, scoped_output(dst) as out:
        metrics = Encoder(f, out).run()
    logging.info(
        "compress done; %d -> %d bytes (ratio %.3f)",
        metrics.bytes_in,
        metrics.bytes_out,
        metrics.ratio,
    )
    return metrics


def uncompress_file(
    input_path: PathLike,
    output_path: PathLike | None = None,
    *,
    force: bool = False,
    delete_on_digest_mismatch: bool = True,
) -> Metrics:
    out_name = output_path if output_path is not None else default_output_name(input_path, "uncompress")
    src, dst = resolve_paths(input_path, out_name, force)
    keep_on: Tuple[Type[BaseException], ...] = () if delete_on_digest_mismatch else (DigestMismatch,)

    logging.info("uncompress start; %s -> %s", src, dst)
    with open(src, "rb") as f, scoped_output(dst, keep_on=keep_on) as out:
        metrics = Decoder(f, out).run()
    logging.info("uncompress done; %d -> %d bytes", metrics.bytes_in, metrics.bytes_out)
    return metrics
