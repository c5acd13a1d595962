"""
Error Taxonomy
==============

Exceptions raised by the hybrid dispatch layer.

Messages are fixed and carry no key identifiers where the
caller could otherwise learn which keys were tried during decryption.
"""

from __future__ import annotations

from typing import Optional


class HybridSetError(Exception):
    """Base class for all hybridset errors."""
    pass


class CapabilityMismatch(HybridSetError):
    """
    Raised when a primitive set contains an entry whose primitive does
    not provide the capability a wrapper requires.

    Raised only at construction time. A wrapper is never returned for
    a primitive set that fails this check.
    """

    def __init__(
        self,
        capability: str,
        primitive_type: str,
        key_id: Optional[int] = None,
        primary: bool = False,
    ) -> None:
        self.capability = capability
        self.primitive_type = primitive_type
        self.key_id = key_id
        self.primary = primary
        role = "primary" if primary else "entry"
        where = f" (key_id={key_id})" if key_id is not None else ""
        super().__init__(
            f"{role} {primitive_type}{where} is not a {capability} primitive"
        )


class PrimitiveSetUnavailable(HybridSetError):
    """
    Raised when the key-management layer cannot build a primitive set
    for a keyset handle.
    """
    pass


class DecryptionFailed(HybridSetError):
    """
    Raised when no candidate key can decrypt a ciphertext.

    This is a generic error that doesn't reveal the cause
    (to prevent information leakage).
    """

    def __init__(self, message: str = "decryption failed") -> None:
        super().__init__(message)


class StreamInitFailed(HybridSetError):
    """Raised when the primary streaming primitive cannot open a reader."""
    pass
