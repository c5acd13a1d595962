"""
Keyset Handles
==============

A KeysetHandle wraps a validated Keyset and turns it into a PrimitiveSet
on request. Key material never leaves the handle through repr or
keyset_info().
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from hybridset.core.errors import PrimitiveSetUnavailable
from hybridset.keyset import registry
from hybridset.keyset.cryptofmt import output_prefix
from hybridset.keyset.keys import Key, Keyset, KeyStatus, OutputPrefixType
from hybridset.keyset.primitive_set import Entry, PrimitiveSet
from hybridset.keyset.registry import KeyManager, PrivateKeyManager

_log = logging.getLogger("hybridset.keyset")


@dataclass(frozen=True, slots=True)
class KeyInfo:
    """Non-secret description of one key."""

    key_id: int
    type_url: str
    status: KeyStatus
    output_prefix_type: OutputPrefixType


class KeysetHandle:
    """
    Handle to a keyset.

    Usage:
        handle = KeysetHandle(keyset)
        primitive_set = handle.primitives()
        public_handle = handle.public_keyset_handle()
    """

    __slots__ = ("_keyset",)

    def __init__(self, keyset: Keyset) -> None:
        if not isinstance(keyset, Keyset):
            raise TypeError("KeysetHandle requires a Keyset")
        self._keyset = keyset

    @property
    def primary_key_id(self) -> int:
        return self._keyset.primary_key_id

    def keyset_info(self) -> list[KeyInfo]:
        return [
            KeyInfo(
                key_id=key.key_id,
                type_url=key.type_url,
                status=key.status,
                output_prefix_type=key.output_prefix_type,
            )
            for key in self._keyset.keys
        ]

    def public_keyset_handle(self) -> KeysetHandle:
        """
        Derive a handle holding the public halves of all keys.

        Raises:
            PrimitiveSetUnavailable: If a key's manager is not a
                PrivateKeyManager or its key material is invalid
        """
        public_keys = []
        for key in self._keyset.keys:
            manager = self._manager_for(key, None)
            if not isinstance(manager, PrivateKeyManager):
                raise PrimitiveSetUnavailable(
                    f"key {key.key_id} of type {key.type_url} is not a private key"
                )
            try:
                public_data = manager.public_key_data(key.key_data)
            except ValueError as e:
                raise PrimitiveSetUnavailable(
                    f"cannot derive public key for key {key.key_id}: {e}"
                ) from e
            public_keys.append(
                Key(
                    key_id=key.key_id,
                    type_url=manager.public_type_url,
                    key_data=public_data,
                    status=key.status,
                    output_prefix_type=key.output_prefix_type,
                )
            )
        return KeysetHandle(Keyset.of(self._keyset.primary_key_id, public_keys))

    def primitives(self, key_manager: Optional[KeyManager] = None) -> PrimitiveSet:
        """
        Build the primitive set for all enabled keys.

        Args:
            key_manager: Optional manager used instead of the registry for
                every key whose type URL it supports

        Returns:
            PrimitiveSet whose entries follow keyset order

        Raises:
            PrimitiveSetUnavailable: If any enabled key cannot be turned
                into a primitive
        """
        entries: list[Entry] = []
        primary: Optional[Entry] = None

        for key in self._keyset.keys:
            if key.status is not KeyStatus.ENABLED:
                continue

            manager = self._manager_for(key, key_manager)
            try:
                primitive = manager.primitive(key.key_data)
            except ValueError as e:
                raise PrimitiveSetUnavailable(
                    f"cannot build primitive for key {key.key_id}: {e}"
                ) from e

            entry = Entry(
                primitive=primitive,
                identifier=output_prefix(key),
                key_id=key.key_id,
                status=key.status,
                output_prefix_type=key.output_prefix_type,
            )
            entries.append(entry)
            if key.key_id == self._keyset.primary_key_id:
                primary = entry

        if primary is None:
            raise PrimitiveSetUnavailable("keyset has no enabled primary key")

        _log.debug("Built primitive set with %d entries", len(entries))
        return PrimitiveSet(entries, primary)

    @staticmethod
    def _manager_for(key: Key, override: Optional[KeyManager]) -> KeyManager:
        if override is not None and override.does_support(key.type_url):
            return override
        try:
            return registry.key_manager(key.type_url)
        except registry.UnknownKeyManagerError as e:
            raise PrimitiveSetUnavailable(
                f"no key manager for key {key.key_id} of type {key.type_url}"
            ) from e

    def __repr__(self) -> str:
        return (
            f"KeysetHandle(primary_key_id={self._keyset.primary_key_id}, "
            f"keys={len(self._keyset.keys)})"
        )
