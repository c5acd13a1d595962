"""
AES-256-GCM Data Encapsulation
==============================

The symmetric half of the X25519 hybrid primitive.

Properties:
    - 256-bit key (taken from the KEM shared secret)
    - 96-bit random nonce, stored in front of the ciphertext
    - 128-bit authentication tag appended by GCM
    - Associated data authenticated but not encrypted

Bundle format: nonce(12) || ciphertext || tag(16)

WARNING:
    - Never reuse (key, nonce) pairs
    - InvalidTag covers wrong key, wrong associated data and tampering
      alike; callers must not try to tell them apart
"""

from __future__ import annotations

import secrets
from typing import Final, Optional

from cryptography.hazmat.primitives.ciphers.aead import AESGCM

AES_KEY_SIZE: Final[int] = 32  # 256 bits
AES_NONCE_SIZE: Final[int] = 12  # 96 bits (NIST recommended for GCM)
AES_TAG_SIZE: Final[int] = 16  # 128 bits


class AesGcmCipher:
    """
    AES-256-GCM bound to a single key.

    Usage:
        cipher = AesGcmCipher(key)
        bundle = cipher.seal(plaintext, aad=b"context")
        plaintext = cipher.open(bundle, aad=b"context")
    """

    __slots__ = ("_aesgcm",)

    def __init__(self, key: bytes) -> None:
        if len(key) != AES_KEY_SIZE:
            raise ValueError(f"Key must be exactly {AES_KEY_SIZE} bytes")
        self._aesgcm = AESGCM(key)

    def seal(self, plaintext: bytes, aad: Optional[bytes] = None) -> bytes:
        """
        Encrypt and authenticate plaintext under a fresh random nonce.

        Returns:
            nonce || ciphertext || tag
        """
        nonce = secrets.token_bytes(AES_NONCE_SIZE)
        return nonce + self._aesgcm.encrypt(nonce, plaintext, aad or None)

    def open(self, bundle: bytes, aad: Optional[bytes] = None) -> bytes:
        """
        Verify and decrypt a bundle produced by seal().

        Raises:
            ValueError: If the bundle is too short to hold nonce and tag
            cryptography.exceptions.InvalidTag: If authentication fails
        """
        if len(bundle) < AES_NONCE_SIZE + AES_TAG_SIZE:
            raise ValueError("Ciphertext too short (missing nonce or authentication tag)")

        nonce = bundle[:AES_NONCE_SIZE]
        return self._aesgcm.decrypt(nonce, bundle[AES_NONCE_SIZE:], aad or None)

    def __repr__(self) -> str:
        return "AesGcmCipher(key=<hidden>)"
