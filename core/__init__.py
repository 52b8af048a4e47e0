"""
core package
============

HOTP/TOTP generation (RFC 4226 & RFC 6238, HMAC-SHA1) and the Profile record.

──────────────────────────────────────────────
Algorithm
──────────────────────────────────────────────
- HOTP: code = Truncate(HMAC-SHA1(key=secret, msg=counter)) mod 10^digits
- TOTP: HOTP with counter = floor(timestamp / time_step), default step 30s
- Dynamic truncation: 4 bytes from the MAC at offset (last byte & 0x0F),
  top bit cleared -> 31-bit integer

──────────────────────────────────────────────
Quick example
──────────────────────────────────────────────
>>> from core import Profile, decode_base32_secret
>>> p = Profile("github", decode_base32_secret("JBSWY3DPEHPK3PXP"))
>>> code = p.current_code()
"""
from core.otp_core import (
    DEFAULT_DIGITS,
    DEFAULT_TIME_STEP,
    decode_base32_secret,
    encode_base32_secret,
    format_code,
    format_otpauth_uri,
    generate_base32_secret,
    hotp,
    remaining_seconds,
    totp,
    verify_totp,
)
from core.profile import Profile

__all__ = [
    "DEFAULT_DIGITS",
    "DEFAULT_TIME_STEP",
    "Profile",
    "decode_base32_secret",
    "encode_base32_secret",
    "format_code",
    "format_otpauth_uri",
    "generate_base32_secret",
    "hotp",
    "remaining_seconds",
    "totp",
    "verify_totp",
]
