from __future__ import annotations

import hashlib

from .constants import DIGEST_BYTE_SIZE


class IntegrityDigest:
    """SHA-256 over the uncompressed content of one encode or decode pass.

    Each Encoder/Decoder run owns its own instance; it is read out once.
    """

    def __init__(self) -> None:
        self._h = hashlib.sha256()
        self._final: bytes | None = None

    def update(self, data: bytes) -> None:
        if self._final is not None:
            raise RuntimeError("digest already finalized")
        self._h.update(data)

    def finalize(self) -> bytes:
        if self._final is not None:
            raise RuntimeError("digest already finalized")
        self._final = self._h.digest()
        assert len(self._final) == DIGEST_BYTE_SIZE
        return self._final
