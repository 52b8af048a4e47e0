"""
BACKEND PACKAGE INITIALIZATION FILE

Đây là file __init__.py của package backend - đánh dấu thư mục backend là một Python package.
Flask JSON API cho profile store đã mã hóa, dùng các hàm core OTP.
"""

from .app import create_app

__all__ = ['create_app']
