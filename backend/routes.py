"""
PROFILE API ROUTES - FLASK BLUEPRINT

Đây là file chứa các API endpoints (JSON) cho profile store đã mã hóa.
Store được giữ trong ``current_app.config["PROFILE_STORE"]`` (xem app.create_app).
Các endpoint thay đổi dữ liệu sẽ ghi store xuống đĩa trước khi trả kết quả.

VÍ DỤ:
curl http://localhost:5000/api/profiles
curl -X POST http://localhost:5000/api/profiles -H "Content-Type: application/json" -d '{"name": "github"}'
curl http://localhost:5000/api/profiles/github/totp
"""

import logging
import threading
import time

from flask import Blueprint, current_app, jsonify, request

from core.otp_core import (
    DEFAULT_DIGITS,
    DEFAULT_ISSUER,
    DEFAULT_TIME_STEP,
    decode_base32_secret,
    format_code,
    format_otpauth_uri,
    generate_base32_secret,
    hotp,
    remaining_seconds,
    verify_totp,
)
from core.profile import Profile
from database.errors import ProfileExistsError, ProfileNotFoundError, ProfileStoreError

logger = logging.getLogger(__name__)

profiles_bp = Blueprint('profiles', __name__, url_prefix='/api')

# Flask dev server chạy đa luồng: mỗi chuỗi "thay đổi store + ghi đĩa" phải giữ lock này
_store_lock = threading.Lock()


def _store():
    return current_app.config["PROFILE_STORE"]


def _profile_summary(profile):
    return {
        "name": profile.name,
        "time_step": profile.time_step,
        "digits": profile.digits,
    }


@profiles_bp.errorhandler(ProfileNotFoundError)
def handle_not_found(e):
    return jsonify({"error": str(e)}), 404


@profiles_bp.errorhandler(ProfileExistsError)
def handle_exists(e):
    return jsonify({"error": str(e)}), 409


@profiles_bp.errorhandler(ProfileStoreError)
def handle_store_error(e):
    logger.error("Profile store failure: %s", e)
    return jsonify({"error": "profile store unavailable"}), 500


@profiles_bp.route('/profiles', methods=['GET'])
def list_profiles():
    """Danh sách profile (chỉ name + tham số, KHÔNG bao giờ trả secret)."""
    return jsonify({"profiles": [_profile_summary(p) for p in _store()]})


@profiles_bp.route('/profiles', methods=['POST'])
def create_profile():
    """
    TẠO PROFILE MỚI

      curl -X POST http://localhost:5000/api/profiles -H "Content-Type: application/json" -d '{"name": "github"}'

    Body: {"name": "...", "secret": "BASE32"?, "time_step": 30?, "digits": 6?}
    - Không có field "secret" -> sinh secret ngẫu nhiên, trả về một lần duy nhất.
    - "secret": "" là secret rỗng hợp lệ (trường hợp suy biến), không bị thay thế.
    """
    data = request.get_json(silent=True) or {}
    if not isinstance(data, dict):
        return jsonify({"error": "JSON object body expected"}), 400
    name = data.get('name')
    if not name:
        return jsonify({"error": "Profile name is required"}), 400

    secret_b32 = data.get('secret')
    if secret_b32 is None:
        secret_b32 = generate_base32_secret()
    if not isinstance(secret_b32, str):
        return jsonify({"error": "secret must be a base32 string"}), 400
    try:
        profile = Profile(
            name=name,
            secret=decode_base32_secret(secret_b32),
            time_step=data.get('time_step', DEFAULT_TIME_STEP),
            digits=data.get('digits', DEFAULT_DIGITS),
        )
    except (TypeError, ValueError) as e:
        return jsonify({"error": str(e)}), 400

    store = _store()
    with _store_lock:
        store.add(profile)
        try:
            store.write_to_disk()
        except ProfileStoreError:
            # giữ bộ nhớ khớp với file vẫn còn trên đĩa
            store.remove(profile.name)
            raise
    logger.info("Created profile %r", profile.name)

    uri = format_otpauth_uri(
        profile.secret_b32,
        account=profile.name,
        issuer=data.get('issuer', DEFAULT_ISSUER),
        digits=profile.digits,
        period=profile.time_step,
    )
    return jsonify({
        "message": f"Profile '{profile.name}' created",
        "profile": _profile_summary(profile),
        "secret": profile.secret_b32,
        "otpauth_uri": uri,
    }), 201


@profiles_bp.route('/profiles/<string:name>', methods=['DELETE'])
def delete_profile(name):
    """Xóa profile. Endpoint: DELETE /api/profiles/<name>"""
    store = _store()
    with _store_lock:
        profile = store.require(name)
        store.remove(name)
        try:
            store.write_to_disk()
        except ProfileStoreError:
            store.add(profile)
            raise
    logger.info("Deleted profile %r", name)
    return jsonify({"message": f"Profile '{name}' removed"})


@profiles_bp.route('/profiles/<string:name>/totp', methods=['GET'])
def get_totp(name):
    """
    Lấy mã TOTP hiện tại của một profile.
    Endpoint: GET /api/profiles/<name>/totp
    """
    profile = _store().require(name)
    now = int(time.time())
    return jsonify({
        "code": profile.current_code(now),
        "remaining": remaining_seconds(now, profile.time_step),
        "period": profile.time_step,
        "name": profile.name,
    })


@profiles_bp.route('/profiles/<string:name>/hotp', methods=['GET'])
def get_hotp(name):
    """Mã HOTP cho ?counter=N. Endpoint: GET /api/profiles/<name>/hotp?counter=N"""
    profile = _store().require(name)
    counter = request.args.get('counter', type=int)
    if counter is None or not 0 <= counter < 2 ** 64:
        return jsonify({"error": "counter must be an integer in 0..2**64-1"}), 400
    code = hotp(profile.secret, counter, profile.digits)
    return jsonify({"code": format_code(code, profile.digits), "counter": counter})


@profiles_bp.route('/profiles/<string:name>/verify', methods=['POST'])
def verify_code(name):
    """
    Xác minh mã TOTP cho một profile.
    Endpoint: POST /api/profiles/<name>/verify
    Body: { "code": "123456" }
    """
    data = request.get_json(silent=True)
    if not isinstance(data, dict) or not isinstance(data.get("code"), str):
        return jsonify({"error": "OTP code is required in JSON body"}), 400

    profile = _store().require(name)
    is_valid = verify_totp(
        profile.secret,
        data["code"],
        int(time.time()),
        time_step=profile.time_step,
        digits=profile.digits,
        window=1  # Cho phép sai lệch 1 khoảng thời gian (time_step)
    )
    return jsonify({"valid": is_valid})


@profiles_bp.route('/profiles/<string:name>/otpauth_uri', methods=['GET'])
def get_otpauth_uri(name):
    """
    Lấy URI để tạo QR code cho một profile.
    Endpoint: GET /api/profiles/<name>/otpauth_uri
    """
    profile = _store().require(name)
    uri = format_otpauth_uri(
        profile.secret_b32,
        account=profile.name,
        issuer=request.args.get('issuer', DEFAULT_ISSUER),
        digits=profile.digits,
        period=profile.time_step,
    )
    return jsonify({"uri": uri})
