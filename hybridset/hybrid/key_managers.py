"""
Hybrid Key Managers
===================

Key managers for the X25519 hybrid primitives. Key material is the raw
32-byte X25519 private or public key.
"""

from __future__ import annotations

from typing import Final

from hybridset.core.crypto.hybrid_engine import X25519HybridDecrypt, X25519HybridEncrypt
from hybridset.core.crypto.streaming import (
    X25519StreamingHybridDecrypt,
    X25519StreamingHybridEncrypt,
)
from hybridset.core.crypto.x25519_kem import load_private_key, public_key_bytes
from hybridset.keyset.registry import KeyManager, PrivateKeyManager

HYBRID_PRIVATE_TYPE_URL: Final[str] = "type.hybridset.dev/X25519HkdfAes256GcmPrivateKey"
HYBRID_PUBLIC_TYPE_URL: Final[str] = "type.hybridset.dev/X25519HkdfAes256GcmPublicKey"
STREAMING_PRIVATE_TYPE_URL: Final[str] = "type.hybridset.dev/X25519HkdfChaCha20StreamingPrivateKey"
STREAMING_PUBLIC_TYPE_URL: Final[str] = "type.hybridset.dev/X25519HkdfChaCha20StreamingPublicKey"


def _public_half(private_key: bytes) -> bytes:
    return public_key_bytes(load_private_key(private_key).public_key())


class X25519HybridPrivateKeyManager(PrivateKeyManager):
    @property
    def type_url(self) -> str:
        return HYBRID_PRIVATE_TYPE_URL

    @property
    def public_type_url(self) -> str:
        return HYBRID_PUBLIC_TYPE_URL

    def primitive(self, key_data: bytes) -> X25519HybridDecrypt:
        return X25519HybridDecrypt(key_data)

    def public_key_data(self, key_data: bytes) -> bytes:
        return _public_half(key_data)


class X25519HybridPublicKeyManager(KeyManager):
    @property
    def type_url(self) -> str:
        return HYBRID_PUBLIC_TYPE_URL

    def primitive(self, key_data: bytes) -> X25519HybridEncrypt:
        return X25519HybridEncrypt(key_data)


class X25519StreamingPrivateKeyManager(PrivateKeyManager):
    @property
    def type_url(self) -> str:
        return STREAMING_PRIVATE_TYPE_URL

    @property
    def public_type_url(self) -> str:
        return STREAMING_PUBLIC_TYPE_URL

    def primitive(self, key_data: bytes) -> X25519StreamingHybridDecrypt:
        return X25519StreamingHybridDecrypt(key_data)

    def public_key_data(self, key_data: bytes) -> bytes:
        return _public_half(key_data)


class X25519StreamingPublicKeyManager(KeyManager):
    """Builds writers with the configured default segment size."""

    @property
    def type_url(self) -> str:
        return STREAMING_PUBLIC_TYPE_URL

    def primitive(self, key_data: bytes) -> X25519StreamingHybridEncrypt:
        return X25519StreamingHybridEncrypt(key_data)
