"""
profile_store.py — encrypted on-disk store of named TOTP profiles.

File layout:

    [ nonce (12 bytes) ][ AES-256-GCM ciphertext || tag (16 bytes) ]

The in-memory mapping and the file only meet at load()/write_to_disk().
Nothing is saved implicitly; callers write back after mutating. Single
process, single writer: no locking is done.
"""

from types import MappingProxyType
from typing import Dict, Iterator, List, Mapping, Optional
import logging
import os
import tempfile

from core.profile import Profile
from database.codec import deserialize_profiles, serialize_profiles
from database.crypto import check_key, decrypt_blob, encrypt_blob
from database.errors import ProfileExistsError, ProfileNotFoundError, StoreIOError

logger = logging.getLogger(__name__)

FILE_MODE = 0o600


class ProfileStore:
    def __init__(self, path, key: bytes):
        """Empty, unsaved store bound to ``path`` and a 32-byte ``key``."""
        self.path = os.fspath(path)
        self._key = check_key(key)
        self._profiles: Dict[str, Profile] = {}

    def __repr__(self):
        return f"ProfileStore(path={self.path!r}, profiles={len(self._profiles)})"

    # --- load / save ------------------------------------------------------
    @classmethod
    def load(cls, path, key: bytes) -> "ProfileStore":
        """
        Read, authenticate, decrypt and parse the store file at ``path``.

        Raises:
            StoreIOError: file cannot be read
            StoreDecryptError: wrong key, truncated or tampered file
            StoreDeserializeError: plaintext is not a valid profile set
        """
        store = cls(path, key)
        try:
            with open(store.path, "rb") as f:
                data = f.read()
        except OSError as e:
            raise StoreIOError(f"file could not be read: {store.path}: {e}") from e

        plaintext = decrypt_blob(store._key, data)
        store._profiles = deserialize_profiles(plaintext)
        logger.info("Loaded %d profile(s) from %s", len(store._profiles), store.path)
        return store

    @classmethod
    def open(cls, path, key: bytes) -> "ProfileStore":
        """
        load() if the file exists, otherwise a fresh empty store.

        An existing file that fails to load is an error, never replaced.
        """
        if not os.path.exists(os.fspath(path)):
            logger.debug("No store at %s, starting empty", path)
            return cls(path, key)
        return cls.load(path, key)

    def write_to_disk(self) -> None:
        """
        Encrypt the current profiles under a fresh nonce and replace the file.

        Written to a temporary file next to ``path`` then renamed over it, so
        a crash leaves either the old or the new file, never half of one.

        Raises:
            StoreSerializeError: profiles could not be encoded
            StoreIOError: file could not be written
        """
        blob = encrypt_blob(self._key, serialize_profiles(self._profiles.values()))

        directory = os.path.dirname(os.path.abspath(self.path))
        tmp_path = None
        try:
            os.makedirs(directory, exist_ok=True)
            fd, tmp_path = tempfile.mkstemp(
                prefix=".", suffix=".tmp", dir=directory
            )
            with os.fdopen(fd, "wb") as f:
                f.write(blob)
                f.flush()
                os.fsync(f.fileno())
            os.chmod(tmp_path, FILE_MODE)
            os.replace(tmp_path, self.path)
            tmp_path = None
        except OSError as e:
            raise StoreIOError(f"file could not be written: {self.path}: {e}") from e
        finally:
            if tmp_path is not None and os.path.exists(tmp_path):
                os.unlink(tmp_path)
        logger.info("Saved %d profile(s) to %s", len(self._profiles), self.path)

    # --- CRUD -------------------------------------------------------------
    def get(self, name: str) -> Optional[Profile]:
        return self._profiles.get(name)

    def require(self, name: str) -> Profile:
        """Like get(), but a missing profile raises ProfileNotFoundError."""
        profile = self._profiles.get(name)
        if profile is None:
            raise ProfileNotFoundError(name)
        return profile

    def add(self, profile: Profile) -> None:
        """Insert ``profile``; an existing name raises ProfileExistsError and nothing changes."""
        if profile.name in self._profiles:
            raise ProfileExistsError(profile.name)
        self._profiles[profile.name] = profile
        logger.debug("Added profile %r", profile.name)

    def remove(self, name: str) -> Optional[Profile]:
        profile = self._profiles.pop(name, None)
        if profile is not None:
            logger.debug("Removed profile %r", name)
        return profile

    # --- read-only views --------------------------------------------------
    @property
    def profiles(self) -> Mapping[str, Profile]:
        return MappingProxyType(self._profiles)

    def names(self) -> List[str]:
        return sorted(self._profiles)

    def __len__(self):
        return len(self._profiles)

    def __contains__(self, name):
        return name in self._profiles

    def __iter__(self) -> Iterator[Profile]:
        return (self._profiles[n] for n in self.names())
