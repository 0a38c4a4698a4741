# tests/test_main.py
import base64

from main import main


def parse(out):
    return dict(line.split(": ", 1) for line in out.strip().splitlines())


def test_hash_with_password(capsys):
    code = main(["hash", "--password", "hunter2", "--iterations", "1",
                 "--salt-length", "16", "--key-length", "32", "--digest", "sha256"])
    assert code == 0
    values = parse(capsys.readouterr().out)
    assert values["password"] == "hunter2"
    assert len(base64.b64decode(values["salt"])) == 16
    assert len(base64.b64decode(values["hash"])) == 32


def test_bad_digest_is_usage_error(capsys):
    assert main(["hash", "--digest", "md42"]) == 2
    assert "Error:" in capsys.readouterr().err


def test_bad_salt_is_runtime_error(capsys):
    assert main(["hash", "--password", "pw", "--salt", "not*base64!", "--iterations", "1"]) == 1
    assert "not valid base64" in capsys.readouterr().err
