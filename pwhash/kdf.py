from __future__ import annotations
import base64
import binascii
import os
from dataclasses import dataclass, fields, replace
from typing import Any, Mapping

from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.kdf.pbkdf2 import PBKDF2HMAC


DEFAULT_DIGEST = "sha1"
PASSWORD_LEN = 10  # random bytes behind a generated password

# Every runtime we install on can hand a digest to PBKDF2. Kept as a switch so
# a digest-less backend can still refuse non-default digests up front.
SUPPORTS_DIGEST = True

_ALGORITHMS: dict[str, type[hashes.HashAlgorithm]] = {
    "sha1": hashes.SHA1,
    "sha224": hashes.SHA224,
    "sha256": hashes.SHA256,
    "sha384": hashes.SHA384,
    "sha512": hashes.SHA512,
    "sha512-224": hashes.SHA512_224,
    "sha512-256": hashes.SHA512_256,
    "sha3-224": hashes.SHA3_224,
    "sha3-256": hashes.SHA3_256,
    "sha3-384": hashes.SHA3_384,
    "sha3-512": hashes.SHA3_512,
}

_OPTION_NAMES = {
    "saltLength": "salt_len",
    "salt_length": "salt_len",
    "salt_len": "salt_len",
    "iterations": "iterations",
    "keyLength": "key_len",
    "key_length": "key_len",
    "key_len": "key_len",
    "digest": "digest",
}


class HasherError(Exception):
    """Base class for errors raised by pwhash itself."""


class ConfigurationError(HasherError, ValueError):
    """The hasher was built with options it cannot honour."""


@dataclass(frozen=True)
class HasherConfig:
    salt_len: int = 64
    iterations: int = 10_000
    key_len: int = 128
    digest: str = DEFAULT_DIGEST

    @classmethod
    def from_options(cls, options: Mapping[str, Any] | None = None) -> "HasherConfig":
        """Build a config from ``saltLength``/``iterations``/``keyLength``/``digest``.

        Missing options keep their defaults.
        """
        return cls().with_options(options)

    def with_options(self, options: Mapping[str, Any] | None = None) -> "HasherConfig":
        if not options:
            return self
        changes: dict[str, Any] = {}
        for name, value in options.items():
            field_name = _OPTION_NAMES.get(name)
            if field_name is None:
                raise ConfigurationError(f"Unknown hasher option: {name!r}")
            changes[field_name] = value
        return replace(self, **changes)

    def validate(self) -> "HasherConfig":
        for f in fields(self):
            if f.name == "digest":
                continue
            value = getattr(self, f.name)
            if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
                raise ConfigurationError(f"{f.name} must be a positive integer, got {value!r}")
        resolve_algorithm(self.digest)
        check_digest_support(self)
        return self


def resolve_algorithm(name: str) -> hashes.HashAlgorithm:
    if not isinstance(name, str):
        raise ConfigurationError(f"Digest must be a string, got {name!r}")
    key = name.strip().lower().replace("_", "-")
    try:
        return _ALGORITHMS[key]()
    except KeyError:
        raise ConfigurationError(f"Unsupported digest: {name!r}") from None


def check_digest_support(config: HasherConfig) -> None:
    if config.digest.strip().lower() != DEFAULT_DIGEST and not SUPPORTS_DIGEST:
        raise ConfigurationError(
            f"This runtime cannot pass a digest to PBKDF2; only {DEFAULT_DIGEST!r} is available."
        )


def new_password() -> str:
    return encode_b64(os.urandom(PASSWORD_LEN))


def new_salt(config: HasherConfig = HasherConfig()) -> bytes:
    return os.urandom(config.salt_len)


def derive_key(password: str, salt: bytes, config: HasherConfig = HasherConfig()) -> bytes:
    kdf = PBKDF2HMAC(
        algorithm=resolve_algorithm(config.digest),
        length=config.key_len,
        salt=bytes(salt),
        iterations=config.iterations,
    )
    return kdf.derive(password.encode("utf-8"))


def encode_b64(data: bytes) -> str:
    return base64.b64encode(data).decode("ascii")


def decode_salt(text: str) -> bytes:
    # Accept URL-safe alphabets and missing padding, as Node's decoder does.
    cleaned = "".join(text.split()).rstrip("=").replace("-", "+").replace("_", "/")
    cleaned += "=" * (-len(cleaned) % 4)
    try:
        return base64.b64decode(cleaned, validate=True)
    except binascii.Error as e:
        raise ValueError(f"Salt is not valid base64: {e}") from e
