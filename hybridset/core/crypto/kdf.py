"""
Key Derivation Functions
========================

HKDF-SHA256 (RFC 5869) for turning KEM output into symmetric keys.
"""

from __future__ import annotations

from typing import Final

from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.kdf.hkdf import HKDF

# RFC 5869 limit for SHA-256: 255 * HashLen
HKDF_SHA256_MAX_LENGTH: Final[int] = 255 * 32


def expand_key_hkdf(
    key_material: bytes,
    length: int,
    info: bytes = b"",
    salt: bytes | None = None,
) -> bytes:
    """
    Derive key bytes from input key material using HKDF-SHA256.

    Args:
        key_material: Input key material (e.g. a Diffie-Hellman output)
        length: Output length in bytes
        info: Context/application info bound into the output
        salt: Optional salt (a zero-filled salt is used when None)

    Returns:
        Derived key bytes
    """
    if not 0 < length <= HKDF_SHA256_MAX_LENGTH:
        raise ValueError(f"HKDF output length must be between 1 and {HKDF_SHA256_MAX_LENGTH}")

    hkdf = HKDF(
        algorithm=hashes.SHA256(),
        length=length,
        salt=salt,
        info=info,
    )
    return hkdf.derive(key_material)
