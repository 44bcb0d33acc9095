import pytest

from coswallet.base58 import base58check
from coswallet.base58 import base58check_decode
from coswallet.base58 import base58decode
from coswallet.base58 import base58encode
from coswallet.secure import SecretBytes


def test_secret_bytes():
    secret = SecretBytes(b"\x01\x02\x03")
    assert bytes(secret) == b"\x01\x02\x03"
    assert len(secret) == 3
    assert secret[0] == 1
    assert isinstance(secret[1:], SecretBytes)
    assert secret == b"\x01\x02\x03"
    assert secret == SecretBytes(b"\x01\x02\x03")
    assert secret != b"\x01\x02\x04"
    assert secret.to_int() == 0x010203
    assert "01" not in repr(secret)


def test_wipe():
    secret = SecretBytes(b"\xff" * 4)
    secret.wipe()
    assert secret.wiped
    assert secret._buf == bytearray(4)
    with pytest.raises(ValueError):
        bytes(secret)
    with pytest.raises(ValueError):
        secret.hex()


def test_context_manager_wipes_on_error():
    with pytest.raises(RuntimeError):
        with SecretBytes(b"\xff" * 4) as secret:
            raise RuntimeError("boom")
    assert secret.wiped


def test_unhashable():
    with pytest.raises(TypeError):
        hash(SecretBytes(b"\x00"))


@pytest.mark.parametrize(
    "data,encoded",
    [
        (b"", ""),
        (b"\x00\x00\x01", "112"),
        (b"hello world", "StV1DL6CwTryKyV"),
    ],
)
def test_base58(data, encoded):
    assert base58encode(data) == encoded
    assert base58decode(encoded) == data


def test_base58check():
    assert base58check_decode(base58check(b"\x00\x01")) == b"\x00\x01"
    with pytest.raises(ValueError):
        base58check_decode("3vQB7B6MrGQZaxCuFg4oi")
    with pytest.raises(ValueError):
        base58decode("0OIl")
