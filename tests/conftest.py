"""
Shared fixtures for the hybridset test suite.

Run with:  python -m pytest tests/ -v
"""

import os

import pytest

from hybridset import hybrid
from hybridset.core.capabilities import HybridDecrypt, StreamingHybridDecrypt
from hybridset.core.config import HybridSetConfig
from hybridset.core.crypto.x25519_kem import X25519KEM
from hybridset.keyset import registry
from hybridset.keyset.keys import Key, KeyStatus, OutputPrefixType

MSG = b"Rotate keys, keep reading old ciphertexts."
AD = b"hybridset-test-ad"


@pytest.fixture(autouse=True)
def clean_state(monkeypatch):
    """Fresh registry and configuration for every test."""
    for name in list(os.environ):
        if name.startswith("HYBRIDSET_"):
            monkeypatch.delenv(name)
    HybridSetConfig.reset_instance()
    registry.reset()
    hybrid.register()
    yield
    registry.reset()
    HybridSetConfig.reset_instance()


@pytest.fixture
def new_key():
    """Factory for keys with fresh X25519 key material."""
    kem = X25519KEM()

    def _new_key(
        key_id,
        prefix=OutputPrefixType.TINK,
        status=KeyStatus.ENABLED,
        type_url=hybrid.HYBRID_PRIVATE_TYPE_URL,
    ):
        return Key(
            key_id=key_id,
            type_url=type_url,
            key_data=kem.generate_keypair().private_key,
            status=status,
            output_prefix_type=prefix,
        )

    return _new_key


class RecordingDecrypt(HybridDecrypt):
    """Fake primitive that accepts exactly one ciphertext and logs every call."""

    def __init__(self, name, accepts, calls):
        self.name = name
        self.accepts = accepts
        self.calls = calls

    def decrypt(self, ciphertext, associated_data):
        self.calls.append((self.name, ciphertext))
        if ciphertext == self.accepts:
            return b"plaintext-from-" + self.name.encode()
        raise ValueError("wrong key")


class MarkerStreamingDecrypt(StreamingHybridDecrypt):
    """Fake streaming primitive returning a fixed marker instead of a reader."""

    def __init__(self, marker, calls):
        self.marker = marker
        self.calls = calls

    def new_decrypting_reader(self, source, context_info):
        self.calls.append((self.marker, context_info))
        return self.marker


class NotAPrimitive:
    def decrypt(self, ciphertext, associated_data):
        return ciphertext
