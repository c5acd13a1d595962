"""
X25519 Hybrid Encryption Primitive
==================================

Single-key hybrid public-key encryption:

    1. X25519 KEM (key encapsulation to the recipient)
    2. AES-256-GCM (data encapsulation, keyed by the KEM shared secret)

Encryption Flow:
    plaintext
        ↓ X25519 encapsulate(recipient_public) → shared_secret, enc
        ↓ AES-256-GCM seal(shared_secret, associated_data)
    ciphertext = enc (32) || nonce (12) || aes_ciphertext || tag (16)

Decryption Flow:
    ciphertext
        ↓ split enc
        ↓ X25519 decapsulate(enc, recipient_private) → shared_secret
        ↓ AES-256-GCM open (verify integrity)
    plaintext

These primitives know nothing about key identifiers or output prefixes;
the keyset wrappers add and strip those.

WARNING:
    - Any failure = complete rejection (fail-closed)
    - Associated data must match exactly between encrypt and decrypt
"""

from __future__ import annotations

from typing import Final

from hybridset.core.capabilities import HybridDecrypt, HybridEncrypt
from hybridset.core.crypto.aes_gcm import AES_NONCE_SIZE, AES_TAG_SIZE, AesGcmCipher
from hybridset.core.crypto.x25519_kem import (
    ENCAPSULATION_SIZE,
    X25519KEM,
    load_private_key,
    load_public_key,
)

MIN_CIPHERTEXT_SIZE: Final[int] = ENCAPSULATION_SIZE + AES_NONCE_SIZE + AES_TAG_SIZE


class X25519HybridEncrypt(HybridEncrypt):
    """
    Hybrid encryption to one X25519 public key.

    Usage:
        encrypter = X25519HybridEncrypt(recipient_public_key)
        ciphertext = encrypter.encrypt(plaintext, b"context")
    """

    __slots__ = ("_public_key", "_kem")

    def __init__(self, public_key: bytes) -> None:
        # Parse eagerly so bad key material fails at primitive construction.
        load_public_key(public_key)
        self._public_key = bytes(public_key)
        self._kem = X25519KEM()

    def encrypt(self, plaintext: bytes, associated_data: bytes) -> bytes:
        """
        Encrypt plaintext under a fresh ephemeral key.

        Args:
            plaintext: Data to encrypt (can be empty)
            associated_data: Authenticated but not encrypted

        Returns:
            enc || nonce || ciphertext || tag
        """
        result = self._kem.encapsulate(self._public_key)
        sealed = AesGcmCipher(result.shared_secret).seal(plaintext, associated_data)
        return result.encapsulation + sealed

    def __repr__(self) -> str:
        return "X25519HybridEncrypt()"


class X25519HybridDecrypt(HybridDecrypt):
    """
    Hybrid decryption with one X25519 private key.

    Raises on every failure: ValueError for malformed input and
    cryptography.exceptions.InvalidTag for authentication failure.
    """

    __slots__ = ("_private_key", "_kem")

    def __init__(self, private_key: bytes) -> None:
        self._private_key = load_private_key(private_key)
        self._kem = X25519KEM()

    def decrypt(self, ciphertext: bytes, associated_data: bytes) -> bytes:
        """
        Decrypt ciphertext produced by X25519HybridEncrypt.

        Args:
            ciphertext: enc || nonce || ciphertext || tag (no key prefix)
            associated_data: Must match the value used at encryption

        Returns:
            Decrypted plaintext bytes
        """
        if len(ciphertext) < MIN_CIPHERTEXT_SIZE:
            raise ValueError("Ciphertext too short")

        encapsulation = ciphertext[:ENCAPSULATION_SIZE]
        shared_secret = self._kem.decapsulate_with(encapsulation, self._private_key)
        return AesGcmCipher(shared_secret).open(ciphertext[ENCAPSULATION_SIZE:], associated_data)

    def __repr__(self) -> str:
        return "X25519HybridDecrypt(key=<hidden>)"
