"""
Keyset-level hybrid decryption: key selection, rotation and failure behaviour.
"""

import os
from concurrent.futures import ThreadPoolExecutor

import pytest

from conftest import AD, MSG, NotAPrimitive, RecordingDecrypt
from hybridset import hybrid
from hybridset.core.errors import CapabilityMismatch, DecryptionFailed, PrimitiveSetUnavailable
from hybridset.hybrid import (
    WrappedHybridDecrypt,
    new_hybrid_decrypt,
    new_hybrid_decrypt_with_key_manager,
    new_hybrid_encrypt,
)
from hybridset.keyset.cryptofmt import NON_RAW_PREFIX_SIZE
from hybridset.keyset.handle import KeysetHandle
from hybridset.keyset.keys import Key, Keyset, KeyStatus, OutputPrefixType
from hybridset.keyset.primitive_set import Entry, PrimitiveSet
from hybridset.keyset.registry import KeyManager
from hybridset.utils.validators import ValidationError


def _handles(keys, primary_key_id):
    private = KeysetHandle(Keyset.of(primary_key_id, keys))
    return private, private.public_keyset_handle()


# ── real keys ────────────────────────────────────────────────────────────────
def test_decrypt_prefixed_ciphertext(new_key):
    private, public = _handles([new_key(42)], 42)
    ct = new_hybrid_encrypt(public).encrypt(MSG, AD)
    assert ct[:NON_RAW_PREFIX_SIZE] == b"\x01\x00\x00\x00\x2a"
    assert new_hybrid_decrypt(private).decrypt(ct, AD) == MSG


def test_decrypt_raw_ciphertext(new_key):
    private, public = _handles([new_key(7, prefix=OutputPrefixType.RAW)], 7)
    ct = new_hybrid_encrypt(public).encrypt(MSG, AD)
    decrypter = new_hybrid_decrypt(private)
    assert decrypter.decrypt(ct, AD) == MSG


@pytest.mark.parametrize("prefix", [OutputPrefixType.LEGACY, OutputPrefixType.CRUNCHY])
def test_decrypt_legacy_prefixed_ciphertext(new_key, prefix):
    private, public = _handles([new_key(9, prefix=prefix)], 9)
    ct = new_hybrid_encrypt(public).encrypt(MSG, AD)
    assert ct[:NON_RAW_PREFIX_SIZE] == b"\x00\x00\x00\x00\x09"
    assert new_hybrid_decrypt(private).decrypt(ct, AD) == MSG


@pytest.mark.parametrize("prefix", list(OutputPrefixType))
def test_wrong_associated_data_fails(new_key, prefix):
    private, public = _handles(
        [new_key(1, prefix=prefix), new_key(2, prefix=OutputPrefixType.RAW)], 1
    )
    ct = new_hybrid_encrypt(public).encrypt(MSG, AD)
    with pytest.raises(DecryptionFailed):
        new_hybrid_decrypt(private).decrypt(ct, b"other-ad")


def test_rotation_old_and_new_ciphertexts_decrypt(new_key):
    k1 = new_key(1)
    k2 = new_key(2)
    before, before_public = _handles([k1, k2], 1)
    after, after_public = _handles([k1, k2], 2)

    ct_old = new_hybrid_encrypt(before_public).encrypt(MSG, AD)
    ct_new = new_hybrid_encrypt(after_public).encrypt(MSG, AD)

    assert new_hybrid_decrypt(after).decrypt(ct_old, AD) == MSG
    assert new_hybrid_decrypt(before).decrypt(ct_new, AD) == MSG


def test_rotation_from_raw_to_prefixed_key(new_key):
    legacy = new_key(1, prefix=OutputPrefixType.RAW)
    current = new_key(2)
    _, legacy_public = _handles([legacy], 1)
    after, _ = _handles([legacy, current], 2)

    ct = new_hybrid_encrypt(legacy_public).encrypt(MSG, AD)
    assert new_hybrid_decrypt(after).decrypt(ct, AD) == MSG


def test_disabled_key_no_longer_decrypts(new_key):
    k1 = new_key(1)
    _, public = _handles([k1], 1)
    ct = new_hybrid_encrypt(public).encrypt(MSG, AD)

    k1_disabled = Key(
        key_id=1,
        type_url=k1.type_url,
        key_data=k1.key_data,
        status=KeyStatus.DISABLED,
    )
    disabled = KeysetHandle(Keyset.of(2, [k1_disabled, new_key(2)]))
    with pytest.raises(DecryptionFailed):
        new_hybrid_decrypt(disabled).decrypt(ct, AD)


def test_unknown_prefix_and_no_raw_key_fails_once(new_key):
    private, _ = _handles([new_key(1), new_key(2)], 1)
    with pytest.raises(DecryptionFailed) as excinfo:
        new_hybrid_decrypt(private).decrypt(b"\x01\xff\xff\xff\xff" + os.urandom(80), AD)
    assert str(excinfo.value) == "decryption failed"
    assert excinfo.value.__cause__ is None
    assert excinfo.value.__context__ is None


def test_short_ciphertext_fails(new_key):
    private, _ = _handles([new_key(1), new_key(2, prefix=OutputPrefixType.RAW)], 1)
    with pytest.raises(DecryptionFailed):
        new_hybrid_decrypt(private).decrypt(b"\x01\x00", AD)


def test_none_associated_data_equals_empty(new_key):
    private, public = _handles([new_key(1)], 1)
    ct = new_hybrid_encrypt(public).encrypt(MSG, None)
    assert new_hybrid_decrypt(private).decrypt(ct, b"") == MSG


def test_non_bytes_ciphertext_rejected(new_key):
    private, _ = _handles([new_key(1)], 1)
    with pytest.raises(ValidationError):
        new_hybrid_decrypt(private).decrypt("not bytes", AD)


def test_concurrent_decrypt(new_key):
    private, public = _handles([new_key(1), new_key(2, prefix=OutputPrefixType.RAW)], 1)
    encrypter = new_hybrid_encrypt(public)
    messages = [MSG + bytes([i]) for i in range(32)]
    ciphertexts = [encrypter.encrypt(m, AD) for m in messages]
    decrypter = new_hybrid_decrypt(private)

    with ThreadPoolExecutor(max_workers=8) as pool:
        results = list(pool.map(lambda ct: decrypter.decrypt(ct, AD), ciphertexts))

    assert results == messages


# ── trial order, with recording fakes ────────────────────────────────────────
PREFIX = b"\x01\x00\x00\x00\x05"


def _primitive_set(*entries):
    return PrimitiveSet(entries, primary=entries[0])


def test_same_prefix_entries_tried_in_order_and_short_circuit():
    calls = []
    body = b"body-for-second"
    ps = _primitive_set(
        Entry(RecordingDecrypt("first", b"x", calls), PREFIX, key_id=5),
        Entry(RecordingDecrypt("second", body, calls), PREFIX, key_id=5),
        Entry(RecordingDecrypt("third", body, calls), PREFIX, key_id=5),
    )
    plaintext = WrappedHybridDecrypt(ps).decrypt(PREFIX + body, AD)

    assert plaintext == b"plaintext-from-second"
    assert [name for name, _ in calls] == ["first", "second"]
    assert all(ct == body for _, ct in calls)


def test_raw_entries_tried_with_full_ciphertext_after_prefix_group():
    calls = []
    ciphertext = PREFIX + b"payload"
    ps = _primitive_set(
        Entry(RecordingDecrypt("prefixed", b"nope", calls), PREFIX, key_id=5),
        Entry(RecordingDecrypt("raw-a", b"nope", calls), b"", key_id=6,
              output_prefix_type=OutputPrefixType.RAW),
        Entry(RecordingDecrypt("raw-b", ciphertext, calls), b"", key_id=7,
              output_prefix_type=OutputPrefixType.RAW),
    )
    plaintext = WrappedHybridDecrypt(ps).decrypt(ciphertext, AD)

    assert plaintext == b"plaintext-from-raw-b"
    assert calls == [
        ("prefixed", b"payload"),
        ("raw-a", ciphertext),
        ("raw-b", ciphertext),
    ]


def test_ciphertext_of_prefix_length_only_tries_raw_entries():
    calls = []
    ps = _primitive_set(
        Entry(RecordingDecrypt("prefixed", b"", calls), PREFIX, key_id=5),
        Entry(RecordingDecrypt("raw", PREFIX, calls), b"", key_id=6,
              output_prefix_type=OutputPrefixType.RAW),
    )
    assert WrappedHybridDecrypt(ps).decrypt(PREFIX, AD) == b"plaintext-from-raw"
    assert calls == [("raw", PREFIX)]


def test_exhaustion_tries_every_candidate_once():
    calls = []
    ps = _primitive_set(
        Entry(RecordingDecrypt("a", b"-", calls), PREFIX, key_id=5),
        Entry(RecordingDecrypt("b", b"-", calls), PREFIX, key_id=5),
        Entry(RecordingDecrypt("other", b"-", calls), b"\x01\x00\x00\x00\x09", key_id=9),
        Entry(RecordingDecrypt("raw", b"-", calls), b"", key_id=6,
              output_prefix_type=OutputPrefixType.RAW),
    )
    with pytest.raises(DecryptionFailed):
        WrappedHybridDecrypt(ps).decrypt(PREFIX + b"zzz", AD)
    assert [name for name, _ in calls] == ["a", "b", "raw"]


# ── construction ─────────────────────────────────────────────────────────────
def test_primary_without_capability_rejected():
    ps = _primitive_set(Entry(NotAPrimitive(), PREFIX, key_id=5))
    with pytest.raises(CapabilityMismatch) as excinfo:
        WrappedHybridDecrypt(ps)
    assert excinfo.value.primary is True
    assert excinfo.value.key_id == 5
    assert "NotAPrimitive" in str(excinfo.value)


def test_non_primary_entry_without_capability_rejected():
    ps = _primitive_set(
        Entry(RecordingDecrypt("ok", b"", []), PREFIX, key_id=5),
        Entry(NotAPrimitive(), b"\x01\x00\x00\x00\x08", key_id=8),
    )
    with pytest.raises(CapabilityMismatch) as excinfo:
        WrappedHybridDecrypt(ps)
    assert excinfo.value.key_id == 8
    assert excinfo.value.primary is False


def test_raw_entry_without_capability_rejected():
    ps = _primitive_set(
        Entry(RecordingDecrypt("ok", b"", []), PREFIX, key_id=5),
        Entry(NotAPrimitive(), b"", key_id=6, output_prefix_type=OutputPrefixType.RAW),
    )
    with pytest.raises(CapabilityMismatch):
        WrappedHybridDecrypt(ps)


def test_public_keyset_is_not_a_decrypter(new_key):
    _, public = _handles([new_key(1)], 1)
    with pytest.raises(CapabilityMismatch):
        new_hybrid_decrypt(public)


def test_streaming_keyset_is_not_a_decrypter(new_key):
    private, _ = _handles([new_key(1, type_url=hybrid.STREAMING_PRIVATE_TYPE_URL)], 1)
    with pytest.raises(CapabilityMismatch):
        new_hybrid_decrypt(private)


def test_primitive_set_unavailable_propagates(new_key):
    private = KeysetHandle(Keyset.of(1, [new_key(1, type_url="type.example/Unregistered")]))
    with pytest.raises(PrimitiveSetUnavailable):
        new_hybrid_decrypt(private)


def test_custom_key_manager_overrides_registry(new_key):
    calls = []

    class FakeManager(KeyManager):
        @property
        def type_url(self):
            return "type.example/Fake"

        def primitive(self, key_data):
            return RecordingDecrypt("fake", b"payload", calls)

    private = KeysetHandle(Keyset.of(3, [new_key(3, type_url="type.example/Fake")]))
    decrypter = new_hybrid_decrypt_with_key_manager(private, FakeManager())
    assert decrypter.decrypt(b"\x01\x00\x00\x00\x03payload", AD) == b"plaintext-from-fake"


def test_custom_key_manager_rejecting_key_material(new_key):
    class RejectingManager(KeyManager):
        @property
        def type_url(self):
            return "type.example/Fake"

        def primitive(self, key_data):
            raise ValueError("bad key material")

    private = KeysetHandle(Keyset.of(3, [new_key(3, type_url="type.example/Fake")]))
    with pytest.raises(PrimitiveSetUnavailable) as excinfo:
        new_hybrid_decrypt_with_key_manager(private, RejectingManager())
    assert isinstance(excinfo.value.__cause__, ValueError)


def test_unregistered_type_without_override_is_unavailable(new_key):
    private = KeysetHandle(Keyset.of(3, [new_key(3, type_url="type.example/Fake")]))
    with pytest.raises(PrimitiveSetUnavailable):
        new_hybrid_decrypt_with_key_manager(private, None)
