#!/usr/bin/env python3
"""
otp_cli.py — CLI wrapper cho profile store đã mã hóa

Cung cấp các subcommand:
- add    : thêm profile từ secret Base32
- show   : hiển thị mã TOTP hiện tại của profile
- remove : xóa profile
- list   : liệt kê các profile (không bao giờ in secret)
- hotp   : sinh mã HOTP của profile cho một counter
- uri    : in otpauth:// URI của profile (import vào app Authenticator)
- keygen : in ra key ngẫu nhiên mới cho OTP_STORE_KEY

Key lấy từ OTP_STORE_KEY, đường dẫn từ --store hoặc OTP_STORE_PATH.
Store chỉ được ghi lại sau add/remove.
"""

import argparse
import logging
import sys
import time

from core import config, otp_core
from core.profile import Profile
from database.errors import ProfileStoreError
from database.profile_store import ProfileStore

logger = logging.getLogger(__name__)


# --- CLI command handlers ---
def cmd_add(args, store):
    secret = otp_core.decode_base32_secret(args.secret)
    store.add(Profile(
        name=args.name,
        secret=secret,
        time_step=args.time_step,
        digits=args.length,
    ))
    print(f"[+] Added profile '{args.name}'")
    return True


def cmd_show(args, store):
    profile = store.require(args.name)
    now = int(time.time())
    code = otp_core.format_code(profile.get_otp(now), profile.digits)
    remaining = otp_core.remaining_seconds(now, profile.time_step)
    print(f"{code}  (valid ~{remaining:2d}s)")
    return False


def cmd_remove(args, store):
    store.require(args.name)
    store.remove(args.name)
    print(f"[-] Removed profile '{args.name}'")
    return True


def cmd_list(args, store):
    if not len(store):
        print("No profiles. Use `add` to create one.")
        return False
    for profile in store:
        print(f"{profile.name}\t{profile.digits} digits / {profile.time_step}s")
    return False


def cmd_hotp(args, store):
    profile = store.require(args.name)
    code = otp_core.hotp(profile.secret, args.counter, profile.digits)
    print(f"HOTP({profile.digits}d, counter={args.counter}): "
          f"{otp_core.format_code(code, profile.digits)}")
    return False


def cmd_uri(args, store):
    profile = store.require(args.name)
    print(otp_core.format_otpauth_uri(
        profile.secret_b32,
        account=args.account or profile.name,
        issuer=args.issuer,
        digits=profile.digits,
        period=profile.time_step,
    ))
    return False


def positive_int(text):
    value = int(text)
    if value <= 0:
        raise argparse.ArgumentTypeError(f"must be > 0, got {value}")
    return value


def counter_int(text):
    value = int(text)
    if not 0 <= value < 2 ** 64:
        raise argparse.ArgumentTypeError(f"counter must be in 0..2**64-1, got {value}")
    return value


# --- Argparse builder ---
def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="otp-cli", description="TOTP generator with an encrypted profile store")
    p.add_argument("--store", help=f"Store file (default: ${config.STORE_PATH_ENV} or {config.DEFAULT_STORE_PATH})")
    p.add_argument("--verbose", action="store_true", help="Verbose output")
    sub = p.add_subparsers(dest="cmd", required=True)

    pa = sub.add_parser("add", help="Add new profile to store")
    pa.add_argument("name")
    pa.add_argument("secret", help="Base32 shared secret")
    pa.add_argument("-t", "--timestep", dest="time_step", type=positive_int,
                    default=otp_core.DEFAULT_TIME_STEP, help="TOTP time step (seconds)")
    pa.add_argument("-l", "--length", type=int, default=otp_core.DEFAULT_DIGITS,
                    help="Number of OTP digits")
    pa.set_defaults(func=cmd_add)

    ps = sub.add_parser("show", help="Generate code for specified profile")
    ps.add_argument("name")
    ps.set_defaults(func=cmd_show)

    pr = sub.add_parser("remove", help="Remove profile from store")
    pr.add_argument("name")
    pr.set_defaults(func=cmd_remove)

    pl = sub.add_parser("list", help="List stored profiles")
    pl.set_defaults(func=cmd_list)

    ph = sub.add_parser("hotp", help="Generate HOTP code for a specific counter")
    ph.add_argument("name")
    ph.add_argument("--counter", type=counter_int, required=True)
    ph.set_defaults(func=cmd_hotp)

    pu = sub.add_parser("uri", help="Print otpauth URI for a profile")
    pu.add_argument("name")
    pu.add_argument("--account", help="Account label (default: profile name)")
    pu.add_argument("--issuer", default=otp_core.DEFAULT_ISSUER)
    pu.set_defaults(func=cmd_uri)

    pk = sub.add_parser("keygen", help="Print a new random key for OTP_STORE_KEY")
    pk.set_defaults(func=None)

    return p


def main(argv=None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    if args.cmd == "keygen":
        print(config.generate_store_key())
        return 0

    try:
        key = config.load_store_key()
        path = args.store or config.store_path()
        store = ProfileStore.open(path, key)
        if args.func(args, store):
            store.write_to_disk()
    except (ProfileStoreError, ValueError) as e:
        logger.debug("Command %s failed", args.cmd, exc_info=True)
        print(f"error: {e}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
