import pytest

from coswallet import keys
from coswallet.bips import bip32
from coswallet.bips import bip39
from coswallet.errors import SigningFailed
from coswallet.secure import SecretBytes

MNEMONIC = "battle call once stool three mammal hybrid list sign field athlete amateur cinnamon eagle shell erupt voyage hero assist maple matrix maximum able barrel"


@pytest.fixture(scope="module")
def desmos_key():
    seed = bip39.to_seed(MNEMONIC)
    return bip32.derive_path(seed, "m/44'/852'/0'/0/0").private_key


@pytest.fixture(scope="module")
def cosmos_key():
    seed = bip39.to_seed(MNEMONIC)
    return bip32.derive_path(seed, "m/44'/118'/0'/0/0").private_key


def test_pubkey(desmos_key):
    assert (
        keys.pubkey(desmos_key).hex()
        == "02f5bf794ef934cb419bb9113f3a94c723ec6c2881a8d99eef851fd05b61ad698d"
    )
    uncompressed = keys.pubkey(desmos_key, compressed=False)
    assert len(uncompressed) == 65
    assert uncompressed[0] == 4
    assert uncompressed[1:33].hex() == "f5bf794ef934cb419bb9113f3a94c723ec6c2881a8d99eef851fd05b61ad698d"


@pytest.mark.parametrize(
    "fixture,expected",
    [
        (
            "desmos_key",
            "ce0558eb2f0847d4e58b29ca45f0a2a8764395b52c829888fa017aaf5b8b2e695e47aac9fe1cf77a66a1ba872d8a7e5302d31874b686973c0a5c196cca707667",
        ),
        (
            "cosmos_key",
            "5590171f32520497dd9ca07a3f03ef69ceff972471821902ebe31532d7f13be51021b7c8849431340fe6e91321987a90ffe5598d5e87fe4d55acf1bb90a000e9",
        ),
    ],
)
def test_sign_golden(request, fixture, expected):
    private_key = request.getfixturevalue(fixture)
    assert keys.sign(private_key, b"some simple data").hex() == expected


def test_sign_deterministic_and_low_s(desmos_key):
    for message in (b"", b"a", b"some simple data", b"\x00" * 1000):
        signature = keys.sign(desmos_key, message)
        assert len(signature) == 64
        assert signature == keys.sign(desmos_key, message)
        assert int.from_bytes(signature[32:], "big") <= keys.SECP256K1_N // 2
        assert keys.verify(keys.pubkey(desmos_key), signature, message)


def test_verify_rejects_other_message(desmos_key):
    signature = keys.sign(desmos_key, b"some simple data")
    assert not keys.verify(keys.pubkey(desmos_key), signature, b"some other data")


def test_verify_rejects_high_s(desmos_key):
    signature = keys.sign(desmos_key, b"some simple data")
    s = int.from_bytes(signature[32:], "big")
    high_s = signature[:32] + (keys.SECP256K1_N - s).to_bytes(32, "big")
    assert not keys.verify(keys.pubkey(desmos_key), high_s, b"some simple data")


def test_verify_bad_length(desmos_key):
    assert not keys.verify(keys.pubkey(desmos_key), b"\x01" * 63, b"data")


def test_recoverable(desmos_key):
    signature = keys.sign(desmos_key, b"some simple data", recoverable=True)
    assert len(signature) == 65
    assert signature[-1] in (0, 1)
    assert signature[:64] == keys.sign(desmos_key, b"some simple data")
    assert keys.recover_public_key(signature, b"some simple data") == keys.pubkey(
        desmos_key
    )
    assert keys.verify(keys.pubkey(desmos_key), signature, b"some simple data")


@pytest.mark.parametrize(
    "private_key",
    [
        b"",
        b"\x01" * 31,
        b"\x01" * 33,
        b"\x00" * 32,
        keys.SECP256K1_N.to_bytes(32, "big"),
        b"\xff" * 32,
    ],
)
def test_sign_invalid_key(private_key):
    with pytest.raises(SigningFailed):
        keys.sign(private_key, b"data")


def test_sign_accepts_secret_bytes():
    private_key = SecretBytes(b"\x01" * 32)
    assert keys.sign(private_key, b"data") == keys.sign(b"\x01" * 32, b"data")
