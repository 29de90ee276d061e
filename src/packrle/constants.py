from __future__ import annotations

SIGNATURE = b"RLE"
SUFFIX = ".rle"

PACKET_SIZE_CAP = 127
RAW_FLAG = 0x80  # header bit 7: raw packet, low 7 bits carry the length
DIGEST_HEADER = 0x00
DIGEST_BYTE_SIZE = 32  # sha256

DEFAULT_CHUNK_SIZE = 64 * 1024
