# tests/test_kdf.py
import base64

import pytest

from pwhash import ConfigurationError, HasherConfig, build
from pwhash import kdf


def test_defaults():
    c = HasherConfig()
    assert (c.salt_len, c.iterations, c.key_len, c.digest) == (64, 10_000, 128, "sha1")


def test_from_options_camel_case_and_partial():
    c = HasherConfig.from_options({"saltLength": 16, "keyLength": 32})
    assert c.salt_len == 16
    assert c.key_len == 32
    assert c.iterations == 10_000
    assert c.digest == "sha1"


def test_from_options_unknown_key():
    with pytest.raises(ConfigurationError):
        HasherConfig.from_options({"rounds": 5})


@pytest.mark.parametrize("options", [
    {"iterations": 0},
    {"saltLength": -1},
    {"keyLength": True},
    {"keyLength": "32"},
    {"digest": "md42"},
    {"digest": None},
])
def test_validate_rejects_bad_options(options):
    with pytest.raises(ConfigurationError):
        HasherConfig.from_options(options).validate()


def test_digest_names_are_normalized():
    assert kdf.resolve_algorithm("SHA3_256").name == "sha3-256"
    assert kdf.resolve_algorithm("sha512").name == "sha512"


def test_non_default_digest_rejected_without_digest_support(monkeypatch):
    monkeypatch.setattr(kdf, "SUPPORTS_DIGEST", False)
    with pytest.raises(ConfigurationError):
        build({"digest": "sha3-256"})
    build({"digest": "sha1", "iterations": 1})  # no raise


def test_derive_key_matches_rfc6070_vector():
    c = HasherConfig(iterations=1, key_len=20)
    assert kdf.derive_key("password", b"salt", c).hex() == "0c60c80f961f0e71f3a9b524af6012062fe037a6"


def test_derive_key_is_deterministic():
    c = HasherConfig(iterations=2, key_len=48, digest="sha256")
    a = kdf.derive_key("hunter2", b"0123456789abcdef", c)
    b = kdf.derive_key("hunter2", b"0123456789abcdef", c)
    assert a == b
    assert len(a) == 48


def test_generated_password_and_salt_lengths():
    assert len(base64.b64decode(kdf.new_password())) == 10
    assert len(kdf.new_salt(HasherConfig(salt_len=24))) == 24


def test_decode_salt_round_trip():
    text = base64.b64encode(bytes(range(17))).decode()
    assert kdf.encode_b64(kdf.decode_salt(text)) == text


def test_decode_salt_is_lenient():
    raw = b"\xfb\xff\xfe"
    assert kdf.decode_salt("+//+") == raw
    assert kdf.decode_salt("-__-") == raw
    assert kdf.decode_salt("YWI") == b"ab"


def test_decode_salt_rejects_garbage():
    with pytest.raises(ValueError):
        kdf.decode_salt("not*base64!")
