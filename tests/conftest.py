import os

import pytest

from core.profile import Profile
from database.profile_store import ProfileStore

# RFC 4226 / RFC 6238 test secret
RFC_SECRET = b"12345678901234567890"
RFC_SECRET_B32 = "GEZDGNBVGY3TQOJQGEZDGNBVGY3TQOJQ"


@pytest.fixture
def key():
    return os.urandom(32)


@pytest.fixture
def store_path(tmp_path):
    return tmp_path / "profilestore.bin"


@pytest.fixture
def sample_profiles():
    return [
        Profile("rfc", RFC_SECRET, time_step=30, digits=8),
        Profile("binary", b"\x00\xff\x80\x7f\xfe", time_step=60, digits=6),
        Profile("empty-secret", b"", time_step=30, digits=6),
        Profile("ünïcode name", os.urandom(20), time_step=15, digits=7),
    ]


@pytest.fixture
def store(store_path, key, sample_profiles):
    s = ProfileStore(store_path, key)
    for p in sample_profiles:
        s.add(p)
    return s
