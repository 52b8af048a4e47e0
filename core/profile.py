"""
profile.py — a named TOTP credential.

The secret is kept as raw bytes; base32 only appears at display/input time.
"""

from dataclasses import dataclass, field
from typing import Optional
import time as _time

from core.otp_core import (
    DEFAULT_DIGITS,
    DEFAULT_TIME_STEP,
    MAX_DIGITS,
    encode_base32_secret,
    format_code,
    totp,
)


@dataclass(frozen=True)
class Profile:
    name: str
    secret: bytes = field(repr=False)
    time_step: int = DEFAULT_TIME_STEP
    digits: int = DEFAULT_DIGITS

    def __post_init__(self):
        if not isinstance(self.name, str) or not self.name:
            raise ValueError("profile name must be a non-empty string")
        if not isinstance(self.secret, (bytes, bytearray)):
            raise ValueError("profile secret must be bytes")
        object.__setattr__(self, "secret", bytes(self.secret))
        # bool is an int subclass; True would silently mean a 1s step
        if isinstance(self.time_step, bool) or not isinstance(self.time_step, int):
            raise ValueError("time_step must be an integer")
        if self.time_step <= 0:
            raise ValueError(f"time_step must be > 0, got {self.time_step}")
        if isinstance(self.digits, bool) or not isinstance(self.digits, int):
            raise ValueError("digits must be an integer")
        if not 1 <= self.digits <= MAX_DIGITS:
            raise ValueError(f"digits must be between 1 and {MAX_DIGITS}, got {self.digits}")

    def get_otp(self, time: int) -> int:
        """Numeric TOTP value for unix time ``time``."""
        return totp(self.secret, time, self.time_step, self.digits)

    def current_code(self, time: Optional[int] = None) -> str:
        """Zero-padded code, for ``time`` or now."""
        if time is None:
            time = int(_time.time())
        return format_code(self.get_otp(time), self.digits)

    @property
    def secret_b32(self) -> str:
        return encode_base32_secret(self.secret)
