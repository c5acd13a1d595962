"""
X25519 Streaming Hybrid Encryption
==================================

Hybrid public-key encryption for data read or written incrementally.

Stream layout:

    header   = enc (32) || salt (16) || nonce_prefix (7) || segment_size (4, BE)
    segments = seg_0 || seg_1 || ... || seg_n

Every segment except the last is exactly segment_size bytes of
ciphertext (segment_size - 16 bytes of plaintext plus the Poly1305 tag).
The last segment may be shorter, may hold an empty plaintext, and is
sealed with the last-segment flag set.

The stream key is

    HKDF-SHA256(shared_secret, salt, info = context_info || segment_size)

so the context info and segment size are authenticated through the key.
"""

from __future__ import annotations

import io
import logging
import secrets
import struct
from typing import BinaryIO, Final, Optional

from cryptography.exceptions import InvalidTag

from hybridset.core.capabilities import StreamingHybridDecrypt, StreamingHybridEncrypt
from hybridset.core.config import MIN_SEGMENT_SIZE, HybridSetConfig
from hybridset.core.crypto.chacha20 import (
    CHACHA_KEY_SIZE,
    CHACHA_TAG_SIZE,
    NONCE_PREFIX_SIZE,
    SegmentCipher,
)
from hybridset.core.crypto.kdf import expand_key_hkdf
from hybridset.core.crypto.x25519_kem import (
    ENCAPSULATION_SIZE,
    X25519KEM,
    load_private_key,
    load_public_key,
)
from hybridset.core.errors import DecryptionFailed

SALT_SIZE: Final[int] = 16
HEADER_SIZE: Final[int] = ENCAPSULATION_SIZE + SALT_SIZE + NONCE_PREFIX_SIZE + 4

_log = logging.getLogger("hybridset.streaming")


def _derive_stream_key(shared_secret: bytes, salt: bytes, context_info: bytes, segment_size: int) -> bytes:
    return expand_key_hkdf(
        shared_secret,
        length=CHACHA_KEY_SIZE,
        info=bytes(context_info) + struct.pack(">I", segment_size),
        salt=salt,
    )


def _read_exact(source: BinaryIO, size: int) -> bytes:
    """Read up to size bytes, looping over short reads until EOF."""
    chunks = []
    remaining = size
    while remaining > 0:
        chunk = source.read(remaining)
        if not chunk:
            break
        chunks.append(chunk)
        remaining -= len(chunk)
    return b"".join(chunks)


class EncryptingWriter(io.RawIOBase):
    """
    Writable stream that encrypts into an underlying sink.

    The header is written on construction. close() seals the final
    segment; the sink itself is left open.
    """

    def __init__(self, sink: BinaryIO, cipher: SegmentCipher, header: bytes, segment_size: int) -> None:
        super().__init__()
        self._sink = sink
        self._cipher = cipher
        self._plaintext_segment_size = segment_size - CHACHA_TAG_SIZE
        self._buffer = bytearray()
        self._index = 0
        self._sink.write(header)

    def writable(self) -> bool:
        return True

    def write(self, data) -> int:
        if self.closed:
            raise ValueError("write to closed stream")
        chunk = bytes(data)
        self._buffer.extend(chunk)
        # Hold back at least one byte so the last segment is never sealed early.
        while len(self._buffer) > self._plaintext_segment_size:
            segment = bytes(self._buffer[:self._plaintext_segment_size])
            del self._buffer[:self._plaintext_segment_size]
            self._emit(segment, last=False)
        return len(chunk)

    def _emit(self, plaintext: bytes, last: bool) -> None:
        self._sink.write(self._cipher.seal_segment(plaintext, self._index, last))
        self._index += 1

    def close(self) -> None:
        if not self.closed:
            try:
                self._emit(bytes(self._buffer), last=True)
                self._buffer.clear()
                flush = getattr(self._sink, "flush", None)
                if flush is not None:
                    flush()
            finally:
                super().close()


class DecryptingReader(io.RawIOBase):
    """
    Readable stream that decrypts segment by segment.

    Each segment is authenticated before any of its plaintext is
    returned. Authentication failure, reordering and truncation raise
    DecryptionFailed from read().
    """

    def __init__(self, source: BinaryIO, cipher: SegmentCipher, segment_size: int) -> None:
        super().__init__()
        self._source = source
        self._cipher = cipher
        self._segment_size = segment_size
        self._index = 0
        self._pending: Optional[bytes] = None
        self._plaintext = b""
        self._offset = 0
        self._finished = False

    def readable(self) -> bool:
        return True

    def readinto(self, buffer) -> int:
        if self.closed:
            raise ValueError("read from closed stream")

        while self._offset >= len(self._plaintext):
            if self._finished:
                return 0
            self._plaintext = self._next_segment()
            self._offset = 0

        view = memoryview(buffer).cast("B")
        count = min(len(view), len(self._plaintext) - self._offset)
        view[:count] = self._plaintext[self._offset:self._offset + count]
        self._offset += count
        return count

    def _next_segment(self) -> bytes:
        if self._pending is None:
            self._pending = _read_exact(self._source, self._segment_size)

        current = self._pending
        # One segment of lookahead tells us whether current is the last one.
        self._pending = _read_exact(self._source, self._segment_size)
        last = not self._pending

        if not current:
            raise DecryptionFailed("stream truncated")

        try:
            plaintext = self._cipher.open_segment(current, self._index, last)
        except (InvalidTag, ValueError):
            _log.debug("Segment %d failed authentication", self._index)
            raise DecryptionFailed("stream segment failed authentication") from None

        self._index += 1
        if last:
            self._finished = True
        return plaintext


class X25519StreamingHybridEncrypt(StreamingHybridEncrypt):
    """
    Streaming hybrid encryption to one X25519 public key.

    Usage:
        encrypter = X25519StreamingHybridEncrypt(recipient_public_key)
        with encrypter.new_encrypting_writer(sink, b"context") as writer:
            writer.write(data)
    """

    def __init__(self, public_key: bytes, segment_size: Optional[int] = None) -> None:
        load_public_key(public_key)
        streaming = HybridSetConfig.get_instance().streaming
        if segment_size is None:
            segment_size = streaming.segment_size
        if not MIN_SEGMENT_SIZE <= segment_size <= streaming.max_segment_size:
            raise ValueError(
                f"segment_size must be between {MIN_SEGMENT_SIZE} and {streaming.max_segment_size}"
            )
        self._public_key = bytes(public_key)
        self._segment_size = segment_size
        self._kem = X25519KEM()

    @property
    def segment_size(self) -> int:
        return self._segment_size

    def new_encrypting_writer(self, sink: BinaryIO, context_info: bytes) -> EncryptingWriter:
        result = self._kem.encapsulate(self._public_key)
        salt = secrets.token_bytes(SALT_SIZE)
        nonce_prefix = secrets.token_bytes(NONCE_PREFIX_SIZE)
        header = (
            result.encapsulation
            + salt
            + nonce_prefix
            + struct.pack(">I", self._segment_size)
        )
        key = _derive_stream_key(result.shared_secret, salt, context_info, self._segment_size)
        return EncryptingWriter(sink, SegmentCipher(key, nonce_prefix), header, self._segment_size)


class X25519StreamingHybridDecrypt(StreamingHybridDecrypt):
    """Streaming hybrid decryption with one X25519 private key."""

    def __init__(self, private_key: bytes, max_segment_size: Optional[int] = None) -> None:
        self._private_key = load_private_key(private_key)
        if max_segment_size is None:
            max_segment_size = HybridSetConfig.get_instance().streaming.max_segment_size
        self._max_segment_size = max_segment_size
        self._kem = X25519KEM()

    def new_decrypting_reader(self, source: BinaryIO, context_info: bytes) -> DecryptingReader:
        """
        Read and check the stream header, then return a plaintext reader.

        Raises:
            ValueError: If the header is truncated, declares an
                unacceptable segment size, or carries an invalid
                encapsulation
        """
        header = _read_exact(source, HEADER_SIZE)
        if len(header) != HEADER_SIZE:
            raise ValueError("Stream header truncated")

        offset = 0
        encapsulation = header[offset:offset + ENCAPSULATION_SIZE]
        offset += ENCAPSULATION_SIZE
        salt = header[offset:offset + SALT_SIZE]
        offset += SALT_SIZE
        nonce_prefix = header[offset:offset + NONCE_PREFIX_SIZE]
        offset += NONCE_PREFIX_SIZE
        segment_size = struct.unpack_from(">I", header, offset)[0]

        if not MIN_SEGMENT_SIZE <= segment_size <= self._max_segment_size:
            raise ValueError(f"Unsupported segment size: {segment_size}")

        shared_secret = self._kem.decapsulate_with(encapsulation, self._private_key)
        key = _derive_stream_key(shared_secret, salt, context_info, segment_size)
        return DecryptingReader(source, SegmentCipher(key, nonce_prefix), segment_size)

    def __repr__(self) -> str:
        return "X25519StreamingHybridDecrypt(key=<hidden>)"
