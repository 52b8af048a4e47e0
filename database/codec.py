"""
codec.py — plaintext format of the profile store.

One JSON document, one record per profile:

    {"version": 1,
     "profiles": [{"name": "github", "secret": "JBSWY3DP...", "time_step": 30, "digits": 6}]}

Secrets are arbitrary bytes, so they are base32 encoded here and decoded
back on load. Records are written sorted by name.
"""

import json
from typing import Dict, Iterable

from core.otp_core import decode_base32_secret, encode_base32_secret
from core.profile import Profile
from database.errors import StoreDeserializeError, StoreSerializeError

FORMAT_VERSION = 1
RECORD_FIELDS = ("name", "secret", "time_step", "digits")


def profile_to_record(profile: Profile) -> dict:
    return {
        "name": profile.name,
        "secret": encode_base32_secret(profile.secret),
        "time_step": profile.time_step,
        "digits": profile.digits,
    }


def record_to_profile(record) -> Profile:
    """
    Rebuild a Profile from one decoded record.

    Raises:
        StoreDeserializeError: on a missing field, wrong type or invalid value
    """
    if not isinstance(record, dict):
        raise StoreDeserializeError(f"profile record must be an object, got {type(record).__name__}")
    missing = [f for f in RECORD_FIELDS if f not in record]
    if missing:
        raise StoreDeserializeError(f"profile record is missing field(s): {', '.join(missing)}")
    if not isinstance(record["secret"], str):
        raise StoreDeserializeError("profile secret must be a base32 string")
    try:
        secret = decode_base32_secret(record["secret"])
        return Profile(
            name=record["name"],
            secret=secret,
            time_step=record["time_step"],
            digits=record["digits"],
        )
    except ValueError as e:
        raise StoreDeserializeError(f"invalid profile record: {e}") from e


def serialize_profiles(profiles: Iterable[Profile]) -> bytes:
    """
    Encode profiles as UTF-8 JSON.

    Raises:
        StoreSerializeError: if a profile cannot be encoded
    """
    try:
        records = [profile_to_record(p) for p in sorted(profiles, key=lambda p: p.name)]
        doc = {"version": FORMAT_VERSION, "profiles": records}
        return json.dumps(doc, ensure_ascii=False, separators=(",", ":")).encode("utf-8")
    except (TypeError, ValueError, AttributeError) as e:
        raise StoreSerializeError(f"failed to serialize profiles: {e}") from e


def deserialize_profiles(data: bytes) -> Dict[str, Profile]:
    """
    Decode the output of serialize_profiles() into a name -> Profile mapping.

    Raises:
        StoreDeserializeError: on malformed JSON, unknown version, bad records
            or duplicate names
    """
    try:
        doc = json.loads(data.decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError) as e:
        raise StoreDeserializeError(f"failed to deserialize store: {e}") from e

    if not isinstance(doc, dict) or doc.get("version") != FORMAT_VERSION:
        raise StoreDeserializeError("unsupported store format version")
    records = doc.get("profiles")
    if not isinstance(records, list):
        raise StoreDeserializeError("store document has no profile list")

    profiles = {}
    for record in records:
        profile = record_to_profile(record)
        if profile.name in profiles:
            raise StoreDeserializeError(f"duplicate profile name {profile.name!r}")
        profiles[profile.name] = profile
    return profiles
