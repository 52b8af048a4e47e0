"""
FLASK APP MAIN ENTRY POINT - PROFILE STORE API SERVER
==================================================

create_app() khởi tạo Flask app, bật CORS và đăng ký các profile routes.
Store được truyền vào (khi test) hoặc mở từ OTP_STORE_PATH / OTP_STORE_KEY.
Nếu file store tồn tại nhưng không giải mã được thì server KHÔNG khởi động,
thay vì âm thầm thay bằng store rỗng.

Chạy:
    OTP_STORE_KEY=... flask --app backend.app:create_app run
"""
import logging

from flask import Flask
from flask_cors import CORS

from core import config
from database.profile_store import ProfileStore

logger = logging.getLogger(__name__)


def create_app(store=None):
    app = Flask(__name__)

    if store is None:
        store = ProfileStore.open(config.store_path(), config.load_store_key())
    app.config["PROFILE_STORE"] = store

    # BẬT CORS: cho phép frontend (chạy trên domain/port khác) gọi API đến backend
    CORS(app)

    from backend.routes import profiles_bp
    app.register_blueprint(profiles_bp)

    @app.route('/', methods=['GET'])
    def index():
        return {
            "service": "otp-profile-store",
            "profiles": len(store),
            "endpoints": sorted(
                str(rule) for rule in app.url_map.iter_rules() if str(rule).startswith("/api")
            ),
        }

    logger.info("Profile API ready (%d profile(s) in %s)", len(store), store.path)
    return app


if __name__ == '__main__':
    logging.basicConfig(level=logging.INFO)
    create_app().run(host='127.0.0.1', port=5000)
