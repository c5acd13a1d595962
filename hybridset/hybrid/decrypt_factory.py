"""
Hybrid Decrypt Dispatch
=======================

Wrappers that decrypt with whichever key of a keyset produced a
ciphertext, so ciphertexts made under older keys stay readable after the
primary key has been rotated.

Key selection for HybridDecrypt:
    1. Ciphertexts longer than the 5-byte output prefix are split into
       prefix and body; every entry with that prefix is tried on the body,
       in keyset order.
    2. Every raw entry is then tried on the full ciphertext, in keyset
       order.
    3. The first successful decryption wins. If none succeeds a single
       DecryptionFailed is raised.

Per-entry failures are discarded; a wrong key and a tampered ciphertext
look the same to the caller.

Streaming decryption always uses the primary key.
"""

from __future__ import annotations

import logging
from typing import BinaryIO, Optional

from hybridset.core.capabilities import HybridDecrypt, StreamingHybridDecrypt
from hybridset.core.errors import CapabilityMismatch, DecryptionFailed, StreamInitFailed
from hybridset.keyset.cryptofmt import NON_RAW_PREFIX_SIZE
from hybridset.keyset.handle import KeysetHandle
from hybridset.keyset.primitive_set import Entry, PrimitiveSet
from hybridset.keyset.registry import KeyManager
from hybridset.utils.validators import validate_bytes

_log = logging.getLogger("hybridset.hybrid")


def validate_primitive_set(primitive_set: PrimitiveSet, capability: type) -> None:
    """
    Check that the primary and every entry implement capability.

    Raises:
        CapabilityMismatch: Naming the first offending entry
    """
    primary = primitive_set.primary
    if not isinstance(primary.primitive, capability):
        raise CapabilityMismatch(
            capability.__name__,
            type(primary.primitive).__name__,
            key_id=primary.key_id,
            primary=True,
        )

    for entry in primitive_set.all_entries():
        if not isinstance(entry.primitive, capability):
            raise CapabilityMismatch(
                capability.__name__,
                type(entry.primitive).__name__,
                key_id=entry.key_id,
            )


def _try_entries(entries: tuple[Entry, ...], ciphertext: bytes, associated_data: bytes) -> Optional[bytes]:
    for entry in entries:
        try:
            return entry.primitive.decrypt(ciphertext, associated_data)
        except Exception:
            # Expected for every key but the right one.
            continue
    return None


class WrappedHybridDecrypt(HybridDecrypt):
    """
    HybridDecrypt over all keys of a primitive set.

    Stateless after construction; decrypt() may be called concurrently
    from any number of threads.
    """

    __slots__ = ("_primitive_set",)

    def __init__(self, primitive_set: PrimitiveSet) -> None:
        validate_primitive_set(primitive_set, HybridDecrypt)
        self._primitive_set = primitive_set
        _log.debug(
            "HybridDecrypt ready: %d entries, %d raw",
            len(primitive_set),
            len(primitive_set.raw_entries()),
        )

    def decrypt(self, ciphertext: bytes, associated_data: Optional[bytes] = None) -> bytes:
        """
        Decrypt ciphertext with the first key that authenticates it.

        Args:
            ciphertext: Output of a keyset HybridEncrypt, prefix included
            associated_data: Must match the value used at encryption;
                None is the same as b""

        Returns:
            Decrypted plaintext bytes

        Raises:
            ValidationError: If arguments are not bytes
            DecryptionFailed: If no key can decrypt the ciphertext
        """
        ciphertext = validate_bytes(ciphertext, "ciphertext")
        associated_data = validate_bytes(associated_data, "associated_data", allow_none=True)

        if len(ciphertext) > NON_RAW_PREFIX_SIZE:
            prefix = ciphertext[:NON_RAW_PREFIX_SIZE]
            body = ciphertext[NON_RAW_PREFIX_SIZE:]
            plaintext = _try_entries(
                self._primitive_set.entries_for_prefix(prefix), body, associated_data
            )
            if plaintext is not None:
                return plaintext

        plaintext = _try_entries(self._primitive_set.raw_entries(), ciphertext, associated_data)
        if plaintext is not None:
            return plaintext

        _log.debug("Decryption failed for all candidate keys")
        raise DecryptionFailed()

    def __repr__(self) -> str:
        return f"WrappedHybridDecrypt({self._primitive_set!r})"


class WrappedStreamingHybridDecrypt(StreamingHybridDecrypt):
    """StreamingHybridDecrypt that delegates to the primary key only."""

    __slots__ = ("_primitive_set",)

    def __init__(self, primitive_set: PrimitiveSet) -> None:
        validate_primitive_set(primitive_set, StreamingHybridDecrypt)
        self._primitive_set = primitive_set

    def new_decrypting_reader(self, source: BinaryIO, context_info: bytes) -> BinaryIO:
        """
        Open a plaintext reader over source with the primary key.

        Raises:
            StreamInitFailed: If the primary primitive cannot open the stream
        """
        primitive = self._primitive_set.primary.primitive
        try:
            return primitive.new_decrypting_reader(source, context_info)
        except Exception as e:
            raise StreamInitFailed(f"cannot open decrypting reader: {e}") from e

    def __repr__(self) -> str:
        return f"WrappedStreamingHybridDecrypt({self._primitive_set!r})"


def new_hybrid_decrypt(handle: KeysetHandle) -> HybridDecrypt:
    """Return a HybridDecrypt for all enabled keys of handle."""
    return new_hybrid_decrypt_with_key_manager(handle, None)


def new_hybrid_decrypt_with_key_manager(
    handle: KeysetHandle,
    key_manager: Optional[KeyManager],
) -> HybridDecrypt:
    """
    Return a HybridDecrypt for handle, building primitives with key_manager
    where it supports the key type.

    Raises:
        PrimitiveSetUnavailable: If the handle cannot build its primitives
        CapabilityMismatch: If any primitive is not a HybridDecrypt
    """
    return WrappedHybridDecrypt(handle.primitives(key_manager))


def new_streaming_hybrid_decrypt(handle: KeysetHandle) -> StreamingHybridDecrypt:
    return new_streaming_hybrid_decrypt_with_key_manager(handle, None)


def new_streaming_hybrid_decrypt_with_key_manager(
    handle: KeysetHandle,
    key_manager: Optional[KeyManager],
) -> StreamingHybridDecrypt:
    """
    Return a StreamingHybridDecrypt for handle.

    Raises:
        PrimitiveSetUnavailable: If the handle cannot build its primitives
        CapabilityMismatch: If any primitive is not a StreamingHybridDecrypt
    """
    return WrappedStreamingHybridDecrypt(handle.primitives(key_manager))
