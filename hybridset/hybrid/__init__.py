"""
Hybrid Encryption
=================

Keyset-level hybrid encryption and decryption.

Usage:
    from hybridset import hybrid

    hybrid.register()
    decrypter = hybrid.new_hybrid_decrypt(private_handle)
    plaintext = decrypter.decrypt(ciphertext, associated_data)
"""

from hybridset.core.capabilities import (
    HybridDecrypt,
    HybridEncrypt,
    StreamingHybridDecrypt,
    StreamingHybridEncrypt,
)
from hybridset.hybrid.decrypt_factory import (
    WrappedHybridDecrypt,
    WrappedStreamingHybridDecrypt,
    new_hybrid_decrypt,
    new_hybrid_decrypt_with_key_manager,
    new_streaming_hybrid_decrypt,
    new_streaming_hybrid_decrypt_with_key_manager,
)
from hybridset.hybrid.encrypt_factory import WrappedHybridEncrypt, new_hybrid_encrypt
from hybridset.hybrid.key_managers import (
    HYBRID_PRIVATE_TYPE_URL,
    HYBRID_PUBLIC_TYPE_URL,
    STREAMING_PRIVATE_TYPE_URL,
    STREAMING_PUBLIC_TYPE_URL,
    X25519HybridPrivateKeyManager,
    X25519HybridPublicKeyManager,
    X25519StreamingPrivateKeyManager,
    X25519StreamingPublicKeyManager,
)
from hybridset.keyset import registry


def register() -> None:
    """Register the X25519 hybrid key managers. Safe to call repeatedly."""
    registry.register_key_manager(X25519HybridPrivateKeyManager())
    registry.register_key_manager(X25519HybridPublicKeyManager())
    registry.register_key_manager(X25519StreamingPrivateKeyManager())
    registry.register_key_manager(X25519StreamingPublicKeyManager())


__all__ = [
    "HybridDecrypt",
    "HybridEncrypt",
    "StreamingHybridDecrypt",
    "StreamingHybridEncrypt",
    "WrappedHybridDecrypt",
    "WrappedStreamingHybridDecrypt",
    "WrappedHybridEncrypt",
    "new_hybrid_decrypt",
    "new_hybrid_decrypt_with_key_manager",
    "new_streaming_hybrid_decrypt",
    "new_streaming_hybrid_decrypt_with_key_manager",
    "new_hybrid_encrypt",
    "HYBRID_PRIVATE_TYPE_URL",
    "HYBRID_PUBLIC_TYPE_URL",
    "STREAMING_PRIVATE_TYPE_URL",
    "STREAMING_PUBLIC_TYPE_URL",
    "X25519HybridPrivateKeyManager",
    "X25519HybridPublicKeyManager",
    "X25519StreamingPrivateKeyManager",
    "X25519StreamingPublicKeyManager",
    "register",
]
