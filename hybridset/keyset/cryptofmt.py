"""
Ciphertext Output Prefixes
==========================

Non-raw keys tag every ciphertext with a 5-byte prefix:

    start_byte (1) || key_id (4, big-endian)

TINK keys use start byte 0x01, LEGACY and CRUNCHY keys 0x00. RAW keys
add nothing. Decryption uses NON_RAW_PREFIX_SIZE as-is to decide
whether a ciphertext can carry a prefix.
"""

from __future__ import annotations

import struct
from typing import Final

from hybridset.keyset.keys import Key, OutputPrefixType

NON_RAW_PREFIX_SIZE: Final[int] = 5
RAW_PREFIX_SIZE: Final[int] = 0
RAW_PREFIX: Final[bytes] = b""

TINK_START_BYTE: Final[int] = 0x01
LEGACY_START_BYTE: Final[int] = 0x00


def output_prefix(key: Key) -> bytes:
    """Return the prefix that ciphertexts produced with key start with."""
    prefix_type = key.output_prefix_type
    if prefix_type is OutputPrefixType.TINK:
        return struct.pack(">BI", TINK_START_BYTE, key.key_id)
    if prefix_type in (OutputPrefixType.LEGACY, OutputPrefixType.CRUNCHY):
        return struct.pack(">BI", LEGACY_START_BYTE, key.key_id)
    if prefix_type is OutputPrefixType.RAW:
        return RAW_PREFIX
    raise ValueError(f"Unknown output prefix type: {prefix_type}")
