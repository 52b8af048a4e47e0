"""
otp_core.py — Core engine cho HOTP / TOTP (RFC 4226 / RFC 6238, HMAC-SHA1).

Mục tiêu:
- Chỉ chứa hàm thuần (pure functions): không đọc/ghi file, không sửa biến global.
- Engine làm việc trên secret dạng raw bytes; chuyển đổi Base32 nằm ở các helper "boundary" bên dưới.

Lưu ý bảo mật:
- Secret là khóa chia sẻ. Không log secret, không in secret trừ khi người dùng yêu cầu.
"""

from typing import Optional
from urllib.parse import quote, urlencode
import base64
import hmac
import hashlib
import struct

import pyotp

# --- Config / constants ----------------------------------------------------
DEFAULT_DIGITS = 6          # chuẩn: 6 chữ số
DEFAULT_TIME_STEP = 30      # TOTP step (giây)
MAX_DIGITS = 9              # 10**9 vẫn nằm trong giá trị 31-bit sau truncate
DEFAULT_ISSUER = "otp-tool"


# --- RFC helpers -----------------------------------------------------------
def int_to_bytes(i: int) -> bytes:
    """
    Chuyển integer (counter) sang 8-byte big-endian như RFC4226 yêu cầu.

    Ví dụ: int_to_bytes(1) -> b'\\x00\\x00\\x00\\x00\\x00\\x00\\x00\\x01'

    Raises:
        struct.error: nếu counter âm hoặc vượt quá 64 bit
    """
    return struct.pack(">Q", i)


def dynamic_truncate(hmac_digest: bytes) -> int:
    """
    Áp dụng dynamic truncation theo RFC4226.

    - Lấy offset = last_byte & 0x0F
    - Lấy 4 bytes từ offset, clear MSB (0x7F) cho byte đầu
    - Trả về integer 31-bit (unsigned)
    """
    # offset in range 0..15 (vì SHA1 digest length 20)
    offset = hmac_digest[-1] & 0x0F
    code = (
        ((hmac_digest[offset] & 0x7F) << 24)
        | ((hmac_digest[offset + 1] & 0xFF) << 16)
        | ((hmac_digest[offset + 2] & 0xFF) << 8)
        | (hmac_digest[offset + 3] & 0xFF)
    )
    return code


def hotp(secret: bytes, counter: int, digits: int = DEFAULT_DIGITS) -> int:
    """
    Sinh giá trị HOTP theo RFC4226.

    Steps:
    1. Message = 8-byte counter (big-endian)
    2. HMAC-SHA1(key=secret, message)
    3. Dynamic truncate -> integer 31-bit
    4. otp = value % 10^digits

    Secret rỗng vẫn hợp lệ (HMAC chấp nhận key mọi độ dài). Nếu ``digits``
    rộng hơn giá trị sau truncate thì trả về nguyên giá trị đó.
    Dùng format_code() để hiển thị (zero-pad).

    Arguments:
        secret: raw secret bytes
        counter: integer counter (non-negative)
        digits: số chữ số OTP
    """
    digest = hmac.new(secret, int_to_bytes(counter), hashlib.sha1).digest()
    return dynamic_truncate(digest) % (10 ** digits)


def totp(secret: bytes, time: int, time_step: int = DEFAULT_TIME_STEP,
         digits: int = DEFAULT_DIGITS) -> int:
    """
    Sinh giá trị TOTP theo RFC6238: HOTP với counter = floor(time / time_step).

    ``time_step`` phải > 0; caller tự kiểm tra (Profile đã kiểm tra).
    """
    return hotp(secret, time // time_step, digits)


def remaining_seconds(time: int, time_step: int = DEFAULT_TIME_STEP) -> int:
    """Số giây còn lại trước khi mã của ``time`` hết hiệu lực."""
    return int(time_step - (time % time_step))


def format_code(code: int, digits: int = DEFAULT_DIGITS) -> str:
    """Zero-pad mã cho đủ ``digits`` chữ số ("000123" thay vì "123")."""
    return str(code).zfill(digits)


def verify_totp(secret: bytes, code: str, time: int,
                time_step: int = DEFAULT_TIME_STEP,
                digits: int = DEFAULT_DIGITS,
                window: int = 1) -> bool:
    """
    Xác minh mã TOTP do user nhập, cho phép lệch +/- ``window`` bước thời gian.

    So sánh constant-time. Không bao giờ thử counter âm.
    """
    if not (code.isascii() and code.isdigit()):
        return False
    counter = time // time_step
    for offset in range(-window, window + 1):
        test_counter = counter + offset
        if test_counter < 0:
            continue
        expected = format_code(hotp(secret, test_counter, digits), digits)
        if hmac.compare_digest(expected, code):
            return True
    return False


# --- Base32 boundary -------------------------------------------------------
def decode_base32_secret(secret_b32: str) -> bytes:
    """
    Base32 text -> raw secret bytes.

    Chấp nhận chữ thường, khoảng trắng / dấu gạch và thiếu padding '=',
    giống cách các app Authenticator hiển thị secret.

    Raises:
        ValueError: nếu secret Base32 không hợp lệ
    """
    cleaned = "".join(secret_b32.split()).replace("-", "").upper()
    cleaned += "=" * (-len(cleaned) % 8)
    try:
        return base64.b32decode(cleaned, casefold=True)
    except ValueError as e:
        raise ValueError(f"{secret_b32!r} is not a valid base32 string") from e


def encode_base32_secret(secret: bytes) -> str:
    """Raw secret bytes -> Base32 (RFC 4648), chữ hoa, không có padding."""
    return base64.b32encode(secret).decode("ascii").rstrip("=")


def generate_base32_secret() -> str:
    """Sinh secret ngẫu nhiên 160-bit, trả về Base32 (ví dụ "JBSWY3DPEHPK3PXP...")."""
    return pyotp.random_base32()


def format_otpauth_uri(
    secret_b32: str,
    account: str,
    issuer: Optional[str] = DEFAULT_ISSUER,
    digits: int = DEFAULT_DIGITS,
    period: int = DEFAULT_TIME_STEP,
) -> str:
    """
    Tạo otpauth:// URI cho TOTP — dễ import vào ứng dụng Authenticator.

    otpauth://totp/{issuer}:{account}?secret=...&issuer=...&algorithm=SHA1&digits=...&period=...
    """
    label = quote(f"{issuer}:{account}" if issuer else account)
    params = {"secret": secret_b32}
    if issuer:
        params["issuer"] = issuer
    params.update(algorithm="SHA1", digits=digits, period=period)
    return f"otpauth://totp/{label}?{urlencode(params)}"
