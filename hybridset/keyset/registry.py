"""
Key Manager Registry
====================

Maps key type URLs to the key managers that build primitives for them.

The registry is process-wide and guarded by a lock; registration is
expected at start-up, lookups happen whenever a keyset handle builds a
primitive set.
"""

from __future__ import annotations

import logging
import threading
from abc import ABC, abstractmethod
from typing import Any

_log = logging.getLogger("hybridset.registry")


class UnknownKeyManagerError(KeyError):
    """Raised when no key manager is registered for a type URL."""
    pass


class KeyManager(ABC):
    """Builds primitives from the key material of one key type."""

    @property
    @abstractmethod
    def type_url(self) -> str:
        ...

    @abstractmethod
    def primitive(self, key_data: bytes) -> Any:
        """
        Build a primitive from raw key material.

        Raises:
            ValueError: If the key material is invalid for this key type
        """
        ...

    def does_support(self, type_url: str) -> bool:
        return type_url == self.type_url


class PrivateKeyManager(KeyManager):
    """Key manager for private keys that can derive their public half."""

    @property
    @abstractmethod
    def public_type_url(self) -> str:
        ...

    @abstractmethod
    def public_key_data(self, key_data: bytes) -> bytes:
        ...


_lock = threading.Lock()
_key_managers: dict[str, KeyManager] = {}


def register_key_manager(key_manager: KeyManager) -> None:
    """
    Register a key manager for its type URL.

    Registering the same class again is a no-op; registering a
    different class for an already registered type URL is rejected.
    """
    type_url = key_manager.type_url
    with _lock:
        existing = _key_managers.get(type_url)
        if existing is not None:
            if type(existing) is not type(key_manager):
                raise ValueError(
                    f"A different key manager is already registered for {type_url}"
                )
            return
        _key_managers[type_url] = key_manager
    _log.debug("Registered key manager for %s", type_url)


def key_manager(type_url: str) -> KeyManager:
    with _lock:
        try:
            return _key_managers[type_url]
        except KeyError:
            raise UnknownKeyManagerError(f"No key manager registered for {type_url}") from None


def is_registered(type_url: str) -> bool:
    with _lock:
        return type_url in _key_managers


def reset() -> None:
    """Remove all registrations. Use only for testing."""
    with _lock:
        _key_managers.clear()
