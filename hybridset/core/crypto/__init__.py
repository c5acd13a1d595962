"""
Cryptographic Core
==================

Single-key primitives used behind the keyset wrappers.

Architecture:
    1. X25519: Key encapsulation
    2. HKDF-SHA256: Key derivation from the KEM shared secret
    3. AES-256-GCM: Data encapsulation for one-shot hybrid encryption
    4. ChaCha20-Poly1305: Segment encryption for streaming hybrid encryption

WARNING: This module handles sensitive cryptographic material.
         Incorrect usage can compromise security.
"""

from hybridset.core.crypto.aes_gcm import AesGcmCipher
from hybridset.core.crypto.chacha20 import SegmentCipher
from hybridset.core.crypto.hybrid_engine import X25519HybridDecrypt, X25519HybridEncrypt
from hybridset.core.crypto.streaming import (
    X25519StreamingHybridDecrypt,
    X25519StreamingHybridEncrypt,
)
from hybridset.core.crypto.x25519_kem import KemKeypair, X25519KEM

__all__ = [
    "AesGcmCipher",
    "SegmentCipher",
    "X25519HybridDecrypt",
    "X25519HybridEncrypt",
    "X25519StreamingHybridDecrypt",
    "X25519StreamingHybridEncrypt",
    "KemKeypair",
    "X25519KEM",
]
