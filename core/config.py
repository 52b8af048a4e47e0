"""
config.py — store location and encryption key.

Constants at module top, overridable from the environment:

    OTP_STORE_PATH   path of the encrypted profile store (default profilestore.bin)
    OTP_STORE_KEY    64 hex characters = 256-bit AES key

The key is never derived from a passphrase and never written into the store.
Keep it out of shell history and VCS (e.g. a 0600 env file).
"""

import os
import secrets

STORE_PATH_ENV = "OTP_STORE_PATH"
STORE_KEY_ENV = "OTP_STORE_KEY"
DEFAULT_STORE_PATH = "profilestore.bin"
STORE_KEY_BYTES = 32


class ConfigError(ValueError):
    """Missing or malformed configuration value."""


def store_path(environ=None) -> str:
    environ = os.environ if environ is None else environ
    return environ.get(STORE_PATH_ENV) or DEFAULT_STORE_PATH


def parse_store_key(key_hex: str) -> bytes:
    """
    Hex text -> 32-byte key.

    Raises:
        ConfigError: if the text is not hex or not exactly 32 bytes long
    """
    try:
        key = bytes.fromhex(key_hex.strip())
    except ValueError as e:
        raise ConfigError(f"{STORE_KEY_ENV} must be hex encoded") from e
    if len(key) != STORE_KEY_BYTES:
        raise ConfigError(
            f"{STORE_KEY_ENV} must be {STORE_KEY_BYTES * 2} hex characters "
            f"({STORE_KEY_BYTES} bytes), got {len(key)} bytes"
        )
    return key


def load_store_key(environ=None) -> bytes:
    environ = os.environ if environ is None else environ
    key_hex = environ.get(STORE_KEY_ENV)
    if not key_hex:
        raise ConfigError(
            f"{STORE_KEY_ENV} is not set; generate one with `otp-cli keygen`"
        )
    return parse_store_key(key_hex)


def generate_store_key() -> str:
    """New random 256-bit key, hex encoded (suitable for OTP_STORE_KEY)."""
    return secrets.token_hex(STORE_KEY_BYTES)
