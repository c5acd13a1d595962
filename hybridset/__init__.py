"""
hybridset - Multi-Key Hybrid Decryption
=======================================

Hybrid public-key decryption over keysets. A ciphertext produced under
any enabled key of a keyset can be decrypted while a different key is
primary, which is what makes key rotation possible without re-encrypting
stored data.

Security Notice:
- No key material or plaintext is logged
- Decryption failures carry no detail about the keys tried
- Fail-closed design pattern
"""

import logging

from hybridset.core.config import HybridSetConfig
from hybridset.core.errors import (
    CapabilityMismatch,
    DecryptionFailed,
    HybridSetError,
    PrimitiveSetUnavailable,
    StreamInitFailed,
)
from hybridset.core.logging import get_secure_logger

__version__ = "0.1.0"

logging.getLogger("hybridset").addHandler(logging.NullHandler())

__all__ = [
    "HybridSetConfig",
    "get_secure_logger",
    "CapabilityMismatch",
    "DecryptionFailed",
    "HybridSetError",
    "PrimitiveSetUnavailable",
    "StreamInitFailed",
    "__version__",
]
