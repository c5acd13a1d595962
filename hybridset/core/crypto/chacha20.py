"""
ChaCha20-Poly1305 Segment Cipher
================================

Segment sealing for streaming hybrid encryption (RFC 8439 AEAD).

Each segment of a stream is sealed under the stream key with a
deterministic nonce:

    nonce_prefix (7) || segment_index (4, big-endian) || last_flag (1)

The last flag is 0x01 only on the final segment, so a stream cut at a
segment boundary fails authentication instead of decrypting short.
Segment order and truncation are both bound by the nonce.
"""

from __future__ import annotations

import struct
from typing import Final

from cryptography.hazmat.primitives.ciphers.aead import ChaCha20Poly1305

CHACHA_KEY_SIZE: Final[int] = 32  # 256 bits
CHACHA_NONCE_SIZE: Final[int] = 12  # 96 bits (IETF variant)
CHACHA_TAG_SIZE: Final[int] = 16  # 128 bits Poly1305
NONCE_PREFIX_SIZE: Final[int] = 7
MAX_SEGMENT_INDEX: Final[int] = 0xFFFFFFFF


def segment_nonce(nonce_prefix: bytes, index: int, last: bool) -> bytes:
    """Build the 12-byte nonce for one segment."""
    if len(nonce_prefix) != NONCE_PREFIX_SIZE:
        raise ValueError(f"Nonce prefix must be exactly {NONCE_PREFIX_SIZE} bytes")
    if not 0 <= index <= MAX_SEGMENT_INDEX:
        raise ValueError("Segment index out of range")
    return nonce_prefix + struct.pack(">IB", index, 1 if last else 0)


class SegmentCipher:
    """ChaCha20-Poly1305 keyed for one stream."""

    __slots__ = ("_chacha", "_nonce_prefix")

    def __init__(self, key: bytes, nonce_prefix: bytes) -> None:
        if len(key) != CHACHA_KEY_SIZE:
            raise ValueError(f"Key must be exactly {CHACHA_KEY_SIZE} bytes")
        if len(nonce_prefix) != NONCE_PREFIX_SIZE:
            raise ValueError(f"Nonce prefix must be exactly {NONCE_PREFIX_SIZE} bytes")
        self._chacha = ChaCha20Poly1305(key)
        self._nonce_prefix = nonce_prefix

    def seal_segment(self, plaintext: bytes, index: int, last: bool) -> bytes:
        """Encrypt one segment; returns ciphertext || tag."""
        nonce = segment_nonce(self._nonce_prefix, index, last)
        return self._chacha.encrypt(nonce, plaintext, None)

    def open_segment(self, ciphertext: bytes, index: int, last: bool) -> bytes:
        """
        Decrypt one segment.

        Raises:
            ValueError: If the segment is shorter than a tag
            cryptography.exceptions.InvalidTag: If authentication fails
        """
        if len(ciphertext) < CHACHA_TAG_SIZE:
            raise ValueError("Segment too short (missing authentication tag)")
        nonce = segment_nonce(self._nonce_prefix, index, last)
        return self._chacha.decrypt(nonce, ciphertext, None)

    def __repr__(self) -> str:
        return "SegmentCipher(key=<hidden>)"
