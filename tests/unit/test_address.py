import pytest

from coswallet import address
from coswallet.errors import InvalidAddress

# secp256k1 generator point, compressed
G = bytes.fromhex("0279BE667EF9DCBBAC55A06295CE870B07029BFCDB2DCE28D959F2815B16F81798")
G_HASH160 = bytes.fromhex("751e76e8199196d454941c45d1b3a323f1433bd6")

DESMOS_PUBKEY = bytes.fromhex(
    "02f5bf794ef934cb419bb9113f3a94c723ec6c2881a8d99eef851fd05b61ad698d"
)
DESMOS_ADDRESS = "desmos1k8u92hx3k33a5vgppkyzq6m4frxx7ewnlkyjrh"


def test_encode():
    assert address.encode(DESMOS_PUBKEY, "desmos") == DESMOS_ADDRESS


def test_decode():
    hrp, account_hash = address.decode(DESMOS_ADDRESS)
    assert hrp == "desmos"
    assert len(account_hash) == 20
    assert address.encode_hash(account_hash, hrp) == DESMOS_ADDRESS


def test_decode_uppercase():
    hrp, account_hash = address.decode(DESMOS_ADDRESS.upper())
    assert hrp == "desmos"
    assert address.encode_hash(account_hash, hrp) == DESMOS_ADDRESS


def test_encode_generator_hash():
    encoded = address.encode(G, "cosmos")
    assert address.decode(encoded) == ("cosmos", G_HASH160)


@pytest.mark.parametrize("hrp", ["", "Cosmos", "a" * 84, "cos mos", "cosm\x7fos"])
def test_encode_invalid_hrp(hrp):
    with pytest.raises(InvalidAddress):
        address.encode(DESMOS_PUBKEY, hrp)


@pytest.mark.parametrize(
    "bech",
    [
        # last char of checksum altered
        DESMOS_ADDRESS[:-1] + ("q" if DESMOS_ADDRESS[-1] != "q" else "p"),
        "desmos1K8u92hx3k33a5vgppkyzq6m4frxx7ewnlkyjrh",
        "desmos",
        "1k8u92hx3k33a5vgppkyzq6m4frxx7ewnlkyjrh",
        "a12uel5l",
        "desmos1" + "q" * 90,
    ],
)
def test_decode_invalid(bech):
    with pytest.raises(InvalidAddress):
        address.decode(bech)
    assert not address.is_valid(bech)


def test_is_valid():
    assert address.is_valid(DESMOS_ADDRESS)
    assert address.is_valid(DESMOS_ADDRESS, hrp="desmos")
    assert not address.is_valid(DESMOS_ADDRESS, hrp="cosmos")


@pytest.mark.parametrize("hrp", ["a" * 52, "a" * 60, "a" * 83])
def test_long_hrp_roundtrip(hrp):
    # beyond the 90 char BIP-173 limit once the 39 char data part is added
    encoded = address.encode(G, hrp)
    assert len(encoded) > 90
    assert address.decode(encoded) == (hrp, G_HASH160)
    assert address.is_valid(encoded, hrp=hrp)
