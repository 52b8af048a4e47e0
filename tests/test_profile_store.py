import dataclasses
import os
import stat

import pytest

from core.profile import Profile
from database import crypto
from database.codec import serialize_profiles
from database.errors import (
    ProfileExistsError,
    ProfileNotFoundError,
    StoreDecryptError,
    StoreDeserializeError,
    StoreIOError,
)
from database.profile_store import ProfileStore


def test_new_store_is_empty_and_unsaved(store_path, key):
    store = ProfileStore(store_path, key)
    assert len(store) == 0
    assert store.names() == []
    assert not store_path.exists()


def test_store_requires_256_bit_key(store_path):
    with pytest.raises(ValueError):
        ProfileStore(store_path, b"short")
    with pytest.raises(ValueError):
        ProfileStore(store_path, "0" * 32)


def test_get_and_require(store):
    assert store.get("rfc").digits == 8
    assert store.get("missing") is None
    assert store.require("rfc") is store.get("rfc")
    with pytest.raises(ProfileNotFoundError) as exc:
        store.require("missing")
    assert exc.value.name == "missing"


def test_add_duplicate_leaves_existing_profile(store):
    original = store.get("rfc")
    with pytest.raises(ProfileExistsError) as exc:
        store.add(Profile("rfc", b"other secret", time_step=60, digits=6))
    assert exc.value.name == "rfc"
    assert store.get("rfc") is original
    assert store.get("rfc").secret == b"12345678901234567890"


def test_remove(store):
    size = len(store)
    removed = store.remove("rfc")
    assert removed.name == "rfc"
    assert "rfc" not in store
    assert len(store) == size - 1


def test_remove_absent_name_is_noop(store):
    size = len(store)
    assert store.remove("missing") is None
    assert len(store) == size


def test_profiles_view_is_read_only(store):
    with pytest.raises(TypeError):
        store.profiles["new"] = Profile("new", b"k")
    assert [p.name for p in store] == sorted(store.profiles)


def test_write_and_load_round_trip(store, store_path, key, sample_profiles):
    store.write_to_disk()
    loaded = ProfileStore.load(store_path, key)
    assert dict(loaded.profiles) == dict(store.profiles)
    assert dict(loaded.profiles) == {p.name: p for p in sample_profiles}


def test_empty_store_round_trip(store_path, key):
    ProfileStore(store_path, key).write_to_disk()
    assert len(ProfileStore.load(store_path, key)) == 0


def test_file_layout_is_nonce_then_ciphertext_and_tag(store, store_path, key):
    store.write_to_disk()
    data = store_path.read_bytes()
    plaintext = serialize_profiles(store.profiles.values())
    assert len(data) == crypto.NONCE_LEN + len(plaintext) + crypto.TAG_LEN
    assert plaintext not in data
    assert key not in data
    assert b"12345678901234567890" not in data
    assert b"GEZDGNBV" not in data


def test_every_write_uses_a_fresh_nonce(store, store_path):
    store.write_to_disk()
    first = store_path.read_bytes()
    store.write_to_disk()
    second = store_path.read_bytes()
    assert first[:crypto.NONCE_LEN] != second[:crypto.NONCE_LEN]
    assert first != second


def test_write_replaces_previous_contents(store, store_path, key):
    store.write_to_disk()
    store.remove("rfc")
    store.write_to_disk()
    assert "rfc" not in ProfileStore.load(store_path, key)


def test_write_leaves_no_temp_files(store, store_path):
    store.write_to_disk()
    store.write_to_disk()
    assert sorted(os.listdir(store_path.parent)) == [store_path.name]


@pytest.mark.skipif(os.name != "posix", reason="POSIX file modes")
def test_store_file_is_private(store, store_path):
    store.write_to_disk()
    assert stat.S_IMODE(store_path.stat().st_mode) == 0o600


def test_write_creates_parent_directory(tmp_path, key):
    path = tmp_path / "nested" / "dir" / "store.bin"
    ProfileStore(path, key).write_to_disk()
    assert path.is_file()


def test_write_failure_raises_io_error(tmp_path, key):
    target = tmp_path / "store.bin"
    target.mkdir()
    with pytest.raises(StoreIOError):
        ProfileStore(target, key).write_to_disk()
    assert sorted(os.listdir(tmp_path)) == ["store.bin"]


def test_load_missing_file_raises_io_error(store_path, key):
    with pytest.raises(StoreIOError):
        ProfileStore.load(store_path, key)


def test_load_with_wrong_key_fails(store, store_path):
    store.write_to_disk()
    with pytest.raises(StoreDecryptError):
        ProfileStore.load(store_path, os.urandom(32))


def test_any_single_bit_flip_is_detected(store_path, key):
    small = ProfileStore(store_path, key)
    small.add(Profile("a", b"k"))
    small.write_to_disk()
    original = store_path.read_bytes()

    for i in range(len(original) * 8):
        tampered = bytearray(original)
        tampered[i // 8] ^= 1 << (i % 8)
        store_path.write_bytes(bytes(tampered))
        with pytest.raises(StoreDecryptError):
            ProfileStore.load(store_path, key)


@pytest.mark.parametrize("length", [0, 1, crypto.NONCE_LEN, crypto.NONCE_LEN + crypto.TAG_LEN - 1])
def test_truncated_file_is_rejected(store, store_path, key, length):
    store.write_to_disk()
    store_path.write_bytes(store_path.read_bytes()[:length])
    with pytest.raises(StoreDecryptError):
        ProfileStore.load(store_path, key)


def test_dropping_trailing_bytes_is_rejected(store, store_path, key):
    store.write_to_disk()
    store_path.write_bytes(store_path.read_bytes()[:-1])
    with pytest.raises(StoreDecryptError):
        ProfileStore.load(store_path, key)


def test_authentic_but_malformed_plaintext_is_rejected(store_path, key):
    store_path.write_bytes(crypto.encrypt_blob(key, b'{"version": 1, "profiles": "nope"}'))
    with pytest.raises(StoreDeserializeError):
        ProfileStore.load(store_path, key)


def test_open_missing_file_starts_empty(store_path, key):
    store = ProfileStore.open(store_path, key)
    assert len(store) == 0
    assert not store_path.exists()


def test_open_existing_file_loads_it(store, store_path, key):
    store.write_to_disk()
    assert ProfileStore.open(store_path, key).names() == store.names()


def test_open_corrupt_file_raises_and_keeps_file(store, store_path, key):
    store.write_to_disk()
    store_path.write_bytes(b"\x00" * 64)
    with pytest.raises(StoreDecryptError):
        ProfileStore.open(store_path, key)
    assert store_path.read_bytes() == b"\x00" * 64


def test_repr_does_not_leak_key(store, key):
    text = repr(store)
    assert key.hex() not in text
    assert repr(key) not in text
    assert "profiles=4" in text


def test_stored_profiles_cannot_be_changed_in_place(store, store_path, key):
    with pytest.raises(dataclasses.FrozenInstanceError):
        store.get("rfc").digits = 0
    with pytest.raises(dataclasses.FrozenInstanceError):
        store.require("rfc").name = "other"
    for profile in store:
        with pytest.raises(dataclasses.FrozenInstanceError):
            profile.time_step = -1

    store.write_to_disk()
    assert dict(ProfileStore.load(store_path, key).profiles) == dict(store.profiles)
