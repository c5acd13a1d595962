"""
Primitive Capabilities
======================

Abstract interfaces a primitive must implement to be used by the hybrid
wrappers. Capability is checked with isinstance() once, when a wrapper
is built, never per call.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import BinaryIO


class HybridDecrypt(ABC):
    """Decrypts ciphertexts produced by the matching HybridEncrypt."""

    @abstractmethod
    def decrypt(self, ciphertext: bytes, associated_data: bytes) -> bytes:
        """
        Decrypt and authenticate ciphertext.

        Raises an exception of any kind when the ciphertext cannot be
        authenticated under this key and associated data.
        """
        ...


class HybridEncrypt(ABC):

    @abstractmethod
    def encrypt(self, plaintext: bytes, associated_data: bytes) -> bytes:
        """Encrypt plaintext so only the private key holder can decrypt it."""
        ...


class StreamingHybridDecrypt(ABC):

    @abstractmethod
    def new_decrypting_reader(self, source: BinaryIO, context_info: bytes) -> BinaryIO:
        """
        Wrap a ciphertext stream in a reader that yields plaintext.

        Header parsing and key agreement happen here; errors raised by this
        method mean the stream cannot be opened with this key.
        """
        ...


class StreamingHybridEncrypt(ABC):

    @abstractmethod
    def new_encrypting_writer(self, sink: BinaryIO, context_info: bytes) -> BinaryIO:
        """
        Wrap a sink in a writer that encrypts everything written to it.

        The writer must be closed to emit the final segment.
        """
        ...
