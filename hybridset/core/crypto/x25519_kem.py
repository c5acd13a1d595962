"""
X25519 Key Encapsulation
========================

Diffie-Hellman based KEM over Curve25519 (RFC 7748).

Usage Pattern:
    1. Recipient holds a keypair (private for decryption, public for encryption)
    2. Encapsulate: ephemeral keypair + DH with the recipient's public key
       gives (shared_secret, encapsulation); encapsulation is the
       ephemeral public key
    3. Decapsulate: DH of the recipient private key with the encapsulation
       recovers the same shared secret

The raw DH output is never used directly. The shared secret is

    HKDF-SHA256(dh, info = KEM_LABEL || encapsulation || recipient_public)

which binds both public keys into every derived key.

Sizes:
    - Public key / encapsulation: 32 bytes
    - Private key: 32 bytes
    - Shared secret: 32 bytes
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Final

from cryptography.hazmat.primitives.asymmetric.x25519 import (
    X25519PrivateKey,
    X25519PublicKey,
)
from cryptography.hazmat.primitives.serialization import (
    Encoding,
    NoEncryption,
    PrivateFormat,
    PublicFormat,
)

from hybridset.core.crypto.kdf import expand_key_hkdf

X25519_PUBLIC_KEY_SIZE: Final[int] = 32
X25519_PRIVATE_KEY_SIZE: Final[int] = 32
ENCAPSULATION_SIZE: Final[int] = X25519_PUBLIC_KEY_SIZE
SHARED_SECRET_SIZE: Final[int] = 32

KEM_LABEL: Final[bytes] = b"hybridset-x25519-kem"


@dataclass(frozen=True, slots=True)
class KemKeypair:
    """
    Immutable X25519 keypair in raw encoding.

    Attributes:
        public_key: Used for encapsulation (can be shared)
        private_key: Used for decapsulation (must be kept secret)
    """

    public_key: bytes
    private_key: bytes

    def __repr__(self) -> str:
        """Safe representation without exposing key material."""
        return f"KemKeypair(pk_len={len(self.public_key)})"


@dataclass(frozen=True, slots=True)
class EncapsulationResult:
    """
    Result of key encapsulation.

    Attributes:
        shared_secret: 32-byte secret for symmetric encryption
        encapsulation: Ephemeral public key (send to recipient)
    """

    shared_secret: bytes
    encapsulation: bytes

    def __repr__(self) -> str:
        """Safe representation without exposing secret material."""
        return f"EncapsulationResult(enc_len={len(self.encapsulation)})"


def load_private_key(private_key: bytes) -> X25519PrivateKey:
    """Parse a raw 32-byte X25519 private key."""
    if len(private_key) != X25519_PRIVATE_KEY_SIZE:
        raise ValueError(f"Invalid private key size: {len(private_key)}")
    return X25519PrivateKey.from_private_bytes(private_key)


def load_public_key(public_key: bytes) -> X25519PublicKey:
    """Parse a raw 32-byte X25519 public key."""
    if len(public_key) != X25519_PUBLIC_KEY_SIZE:
        raise ValueError(f"Invalid public key size: {len(public_key)}")
    return X25519PublicKey.from_public_bytes(public_key)


def public_key_bytes(key: X25519PublicKey) -> bytes:
    return key.public_bytes(Encoding.Raw, PublicFormat.Raw)


def private_key_bytes(key: X25519PrivateKey) -> bytes:
    return key.private_bytes(Encoding.Raw, PrivateFormat.Raw, NoEncryption())


class X25519KEM:
    """
    X25519 Key Encapsulation Mechanism.

    Recommended Usage:
        kem = X25519KEM()

        keypair = kem.generate_keypair()

        # Sender
        result = kem.encapsulate(keypair.public_key)
        # Send result.encapsulation, key data with result.shared_secret

        # Recipient
        shared_secret = kem.decapsulate(result.encapsulation, keypair.private_key)
    """

    __slots__ = ()

    def generate_keypair(self) -> KemKeypair:
        """Generate a fresh X25519 keypair."""
        private = X25519PrivateKey.generate()
        return KemKeypair(
            public_key=public_key_bytes(private.public_key()),
            private_key=private_key_bytes(private),
        )

    def encapsulate(self, public_key: bytes) -> EncapsulationResult:
        """
        Encapsulate a shared secret to the recipient's public key.

        Raises:
            ValueError: If the public key is malformed
        """
        recipient = load_public_key(public_key)
        ephemeral = X25519PrivateKey.generate()
        encapsulation = public_key_bytes(ephemeral.public_key())

        dh = ephemeral.exchange(recipient)
        return EncapsulationResult(
            shared_secret=self._derive(dh, encapsulation, public_key),
            encapsulation=encapsulation,
        )

    def decapsulate(self, encapsulation: bytes, private_key: bytes) -> bytes:
        """
        Recover the shared secret with the recipient's private key.

        Raises:
            ValueError: If the encapsulation or key is malformed, or the
                encapsulation is a low-order point
        """
        recipient = load_private_key(private_key)
        return self.decapsulate_with(encapsulation, recipient)

    def decapsulate_with(self, encapsulation: bytes, recipient: X25519PrivateKey) -> bytes:
        """Same as decapsulate() for an already parsed private key."""
        ephemeral = load_public_key(encapsulation)
        dh = recipient.exchange(ephemeral)
        recipient_public = public_key_bytes(recipient.public_key())
        return self._derive(dh, encapsulation, recipient_public)

    @staticmethod
    def _derive(dh: bytes, encapsulation: bytes, recipient_public: bytes) -> bytes:
        return expand_key_hkdf(
            dh,
            length=SHARED_SECRET_SIZE,
            info=KEM_LABEL + encapsulation + recipient_public,
        )
