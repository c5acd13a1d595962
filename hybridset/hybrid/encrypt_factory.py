"""
Hybrid Encrypt Wrapper
======================

Encrypts with the primary key of a public keyset and tags the ciphertext
with that key's output prefix, so WrappedHybridDecrypt can find the key
again after rotation.
"""

from __future__ import annotations

from typing import Optional

from hybridset.core.capabilities import HybridEncrypt
from hybridset.hybrid.decrypt_factory import validate_primitive_set
from hybridset.keyset.handle import KeysetHandle
from hybridset.keyset.primitive_set import PrimitiveSet
from hybridset.keyset.registry import KeyManager
from hybridset.utils.validators import validate_bytes


class WrappedHybridEncrypt(HybridEncrypt):
    __slots__ = ("_primitive_set",)

    def __init__(self, primitive_set: PrimitiveSet) -> None:
        validate_primitive_set(primitive_set, HybridEncrypt)
        self._primitive_set = primitive_set

    def encrypt(self, plaintext: bytes, associated_data: Optional[bytes] = None) -> bytes:
        """
        Encrypt with the primary key.

        Returns:
            primary output prefix || primitive ciphertext
        """
        plaintext = validate_bytes(plaintext, "plaintext")
        associated_data = validate_bytes(associated_data, "associated_data", allow_none=True)
        primary = self._primitive_set.primary
        return primary.identifier + primary.primitive.encrypt(plaintext, associated_data)

    def __repr__(self) -> str:
        return f"WrappedHybridEncrypt({self._primitive_set!r})"


def new_hybrid_encrypt(
    handle: KeysetHandle,
    key_manager: Optional[KeyManager] = None,
) -> HybridEncrypt:
    """
    Return a HybridEncrypt for a public keyset handle.

    Raises:
        PrimitiveSetUnavailable: If the handle cannot build its primitives
        CapabilityMismatch: If any primitive is not a HybridEncrypt
    """
    return WrappedHybridEncrypt(handle.primitives(key_manager))
