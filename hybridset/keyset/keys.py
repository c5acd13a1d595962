"""
Keys and Keysets
================

In-memory description of a keyset: which keys exist, which one is
primary, and how each key marks its ciphertexts.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Iterable

from hybridset.utils.validators import (
    ValidationError,
    validate_bytes,
    validate_key_id,
    validate_type_url,
)


class KeyStatus(Enum):
    ENABLED = "enabled"
    DISABLED = "disabled"
    DESTROYED = "destroyed"


class OutputPrefixType(Enum):
    """How ciphertexts produced with a key are tagged."""

    TINK = "tink"        # 0x01 || key_id
    LEGACY = "legacy"    # 0x00 || key_id
    CRUNCHY = "crunchy"  # 0x00 || key_id
    RAW = "raw"          # no prefix


@dataclass(frozen=True, slots=True)
class Key:
    """
    One key of a keyset.

    Attributes:
        key_id: Unsigned 32-bit identifier, written into output prefixes
        type_url: Selects the key manager that turns key_data into a primitive
        key_data: Raw key material understood by that key manager
        status: Only ENABLED keys take part in primitive sets
        output_prefix_type: Ciphertext tagging for this key
    """

    key_id: int
    type_url: str
    key_data: bytes
    status: KeyStatus = KeyStatus.ENABLED
    output_prefix_type: OutputPrefixType = OutputPrefixType.TINK

    def __post_init__(self) -> None:
        validate_key_id(self.key_id)
        validate_type_url(self.type_url)
        object.__setattr__(self, "key_data", validate_bytes(self.key_data, "key_data", min_length=1))
        if not isinstance(self.status, KeyStatus):
            raise ValidationError("status must be a KeyStatus")
        if not isinstance(self.output_prefix_type, OutputPrefixType):
            raise ValidationError("output_prefix_type must be an OutputPrefixType")

    def __repr__(self) -> str:
        """Safe representation without exposing key material."""
        return (
            f"Key(key_id={self.key_id}, type_url={self.type_url!r}, "
            f"status={self.status.name}, prefix={self.output_prefix_type.name})"
        )


@dataclass(frozen=True, slots=True)
class Keyset:
    """
    An ordered collection of keys with one designated primary.

    Key order is significant: it is the order in which keys sharing an
    output prefix are tried during decryption.
    """

    primary_key_id: int
    keys: tuple[Key, ...]

    def __post_init__(self) -> None:
        object.__setattr__(self, "keys", tuple(self.keys))
        validate_key_id(self.primary_key_id)

        if not self.keys:
            raise ValidationError("Keyset must contain at least one key")

        seen: set[int] = set()
        for key in self.keys:
            if not isinstance(key, Key):
                raise ValidationError("Keyset keys must be Key instances")
            if key.key_id in seen:
                raise ValidationError(f"Duplicate key_id in keyset: {key.key_id}")
            seen.add(key.key_id)

        if self.primary_key_id not in seen:
            raise ValidationError("Primary key is not part of the keyset")
        if self.primary.status is not KeyStatus.ENABLED:
            raise ValidationError("Primary key must be enabled")

    @classmethod
    def of(cls, primary_key_id: int, keys: Iterable[Key]) -> Keyset:
        return cls(primary_key_id=primary_key_id, keys=tuple(keys))

    @property
    def primary(self) -> Key:
        for key in self.keys:
            if key.key_id == self.primary_key_id:
                return key
        raise ValidationError("Primary key is not part of the keyset")

    def __repr__(self) -> str:
        return f"Keyset(primary_key_id={self.primary_key_id}, keys={len(self.keys)})"
