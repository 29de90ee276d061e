from __future__ import annotations


class RleError(Exception):
    """Base class for everything the codec and its file layer raise on purpose."""


class ConfigError(RleError, ValueError):
    """Bad invocation: mode flags, output naming, missing input, refused overwrite."""


class FormatError(RleError, ValueError):
    pass


class BadSignature(FormatError):
    pass


class MalformedPacket(FormatError):
    pass


class TruncatedPacket(FormatError):
    pass


class MissingDigest(FormatError):
    pass


class TrailingData(FormatError):
    pass


class IntegrityError(RleError, ValueError):
    pass


class DigestMismatch(IntegrityError):
    def __init__(self, expected: bytes, actual: bytes):
        super().__init__(f"digest mismatch: expected {expected.hex()}, got {actual.hex()}")
        self.expected = expected
        self.actual = actual


class InvalidPacket(RleError, AssertionError):
    """An encoder bug: a raw/run packet with length 0 or above the cap."""
