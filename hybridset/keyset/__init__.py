"""
Keyset Layer
============

Keys, keysets, keyset handles, key managers and primitive sets.
"""

from hybridset.keyset.cryptofmt import NON_RAW_PREFIX_SIZE, output_prefix
from hybridset.keyset.handle import KeyInfo, KeysetHandle
from hybridset.keyset.keys import Key, Keyset, KeyStatus, OutputPrefixType
from hybridset.keyset.primitive_set import Entry, PrimitiveSet
from hybridset.keyset.registry import KeyManager, PrivateKeyManager

__all__ = [
    "NON_RAW_PREFIX_SIZE",
    "output_prefix",
    "KeyInfo",
    "KeysetHandle",
    "Key",
    "Keyset",
    "KeyStatus",
    "OutputPrefixType",
    "Entry",
    "PrimitiveSet",
    "KeyManager",
    "PrivateKeyManager",
]
