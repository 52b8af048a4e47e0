"""
Encrypted profile store.

Profiles live in a single AES-256-GCM encrypted file; see profile_store.py
for the layout.
"""
from database.errors import (
    ProfileExistsError,
    ProfileNotFoundError,
    ProfileStoreError,
    StoreDecryptError,
    StoreDeserializeError,
    StoreIOError,
    StoreSerializeError,
)
from database.profile_store import ProfileStore

__all__ = [
    "ProfileExistsError",
    "ProfileNotFoundError",
    "ProfileStore",
    "ProfileStoreError",
    "StoreDecryptError",
    "StoreDeserializeError",
    "StoreIOError",
    "StoreSerializeError",
]
