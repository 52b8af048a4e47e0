"""
crypto.py — AES-256-GCM framing cho file profile store.

Layout một blob:

    [ nonce (12 bytes) ][ ciphertext || tag (16 bytes) ]

- Nonce sinh mới bằng os.urandom cho MỖI lần mã hóa; nonce không bí mật, chỉ key là bí mật.
- AAD = STORE_AAD gắn blob với định dạng file này (blob của định dạng khác sẽ không giải mã được).
- Giải mã thất bại (sai key, file bị cắt / sửa) -> StoreDecryptError, không bao giờ trả dữ liệu dở dang.
"""

import os

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives.ciphers.aead import AESGCM

from database.errors import StoreDecryptError

KEY_LEN = 32
NONCE_LEN = 12
TAG_LEN = 16
# binds every blob to this file format
STORE_AAD = b"otp-profile-store/v1"


def check_key(key: bytes) -> bytes:
    if not isinstance(key, (bytes, bytearray)) or len(key) != KEY_LEN:
        raise ValueError("AES-256-GCM requires 32-byte key")
    return bytes(key)


def encrypt_blob(key: bytes, plaintext: bytes) -> bytes:
    """Return nonce || ciphertext || tag, with a fresh random nonce."""
    nonce = os.urandom(NONCE_LEN)
    ct = AESGCM(check_key(key)).encrypt(nonce, plaintext, STORE_AAD)
    return nonce + ct


def decrypt_blob(key: bytes, blob: bytes) -> bytes:
    """Inverse of encrypt_blob; raises StoreDecryptError, never returns partial data."""
    aesgcm = AESGCM(check_key(key))
    if len(blob) < NONCE_LEN + TAG_LEN:
        raise StoreDecryptError("store file is truncated")
    nonce = blob[:NONCE_LEN]
    ct = blob[NONCE_LEN:]
    try:
        return aesgcm.decrypt(nonce, ct, STORE_AAD)
    except InvalidTag as e:
        raise StoreDecryptError("failed to decrypt store file (wrong key or corrupted file)") from e
