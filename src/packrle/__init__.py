"""pack-rle: a streaming run-length codec with a SHA-256 integrity trailer.

Layout mirrors the stages of a pass:
- packet framing (header byte encode/decode) kept apart from the codecs
- encoder and decoder as explicit state machines over a BinaryIO
- a file layer that owns naming, overwrite checks and cleanup
"""

from .decoder import Decoder, Metrics, decode
from .encoder import Encoder, encode
from .errors import (
    BadSignature,
    ConfigError,
    DigestMismatch,
    FormatError,
    IntegrityError,
    InvalidPacket,
    MalformedPacket,
    MissingDigest,
    RleError,
    TrailingData,
    TruncatedPacket,
)
from .files import compress_file, uncompress_file

__all__ = [
    "BadSignature",
    "ConfigError",
    "Decoder",
    "DigestMismatch",
    "Encoder",
    "FormatError",
    "IntegrityError",
    "InvalidPacket",
    "MalformedPacket",
    "Metrics",
    "MissingDigest",
    "RleError",
    "TrailingData",
    "TruncatedPacket",
    "compress_file",
    "decode",
    "encode",
    "uncompress_file",
]
