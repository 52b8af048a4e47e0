"""Exceptions raised by the encrypted profile store."""


class ProfileStoreError(Exception):
    """Base class for every profile store failure."""


class StoreIOError(ProfileStoreError):
    """The store file could not be read or written."""


class StoreDecryptError(ProfileStoreError):
    """Authentication failed: wrong key, or a truncated/corrupted/tampered file."""


class StoreSerializeError(ProfileStoreError):
    """The in-memory profiles could not be encoded."""


class StoreDeserializeError(ProfileStoreError):
    """Decrypted plaintext is not a well-formed profile set."""


class ProfileExistsError(ProfileStoreError):
    def __init__(self, name: str):
        super().__init__(f"profile already exists with name {name!r}")
        self.name = name


class ProfileNotFoundError(ProfileStoreError):
    def __init__(self, name: str):
        super().__init__(f"profile {name!r} not found in store")
        self.name = name
