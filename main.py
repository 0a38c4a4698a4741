from __future__ import annotations
import argparse
import asyncio
import logging
import sys
from getpass import getpass

from pwhash import ConfigurationError, HasherConfig, build


def build_parser() -> argparse.ArgumentParser:
    defaults = HasherConfig()
    parser = argparse.ArgumentParser(
        prog="pwhash",
        description="pwhash - PBKDF2 password hashing with generated passwords and salts.",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Log pipeline stages")
    sub = parser.add_subparsers(dest="cmd", required=True)

    h = sub.add_parser("hash", help="Hash a password (generating password and/or salt if omitted)")
    src = h.add_mutually_exclusive_group()
    src.add_argument("--password", help="Password to hash (default: generate one)")
    src.add_argument("--prompt", action="store_true", help="Read the password from the terminal")
    h.add_argument("--salt", help="Base64 salt to reuse (default: generate one)")
    h.add_argument("--salt-length", type=int, default=defaults.salt_len, help="Generated salt length in bytes")
    h.add_argument("--iterations", type=int, default=defaults.iterations, help="PBKDF2 iteration count")
    h.add_argument("--key-length", type=int, default=defaults.key_len, help="Derived key length in bytes")
    h.add_argument("--digest", default=defaults.digest, help="PBKDF2 digest (sha1, sha256, sha512, ...)")
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING)

    try:
        hasher = build(
            saltLength=args.salt_length,
            iterations=args.iterations,
            keyLength=args.key_length,
            digest=args.digest,
        )
    except ConfigurationError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2

    password = args.password
    if args.prompt:
        password = getpass("Password: ")
        if args.salt is None and password != getpass("Confirm password: "):
            print("Error: passwords do not match.", file=sys.stderr)
            return 2

    try:
        result = asyncio.run(hasher.hash(password=password, salt=args.salt))
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    print(f"password: {result.password}")
    print(f"salt: {result.salt}")
    print(f"hash: {result.hash}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
