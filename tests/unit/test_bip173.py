import pytest

from coswallet.bips import bip173


@pytest.mark.parametrize(
    "bech",
    (
        "A12UEL5L",
        "a12uel5l",
        "an83characterlonghumanreadablepartthatcontainsthenumber1andtheexcludedcharactersbio1tt5tgs",
        "abcdef1qpzry9x8gf2tvdw0s3jn54khce6mua7lmqqqxw",
        "11qqqqqqqqqqqqqqqqqqqqqqqqqqqqqqqqqqqqqqqqqqqqqqqqqqqqqqqqqqqqqqqqqqqqqqqqqqqqqqqqqqc8247j",
        "split1checkupstagehandshakeupstreamerranterredcaperred2y9e3w",
        "?1ezyfcl",
    ),
)
def test_valid_bech32(bech):
    hrp, data = bip173.parse_bech32(bech)
    bip173.validate_bech32(hrp, data)


@pytest.mark.parametrize(
    "bech,reason",
    (
        ("\x201nwldj5", "HRP character out of range"),
        ("\x7F1axkwrx", "HRP character out of range"),
        ("\x801eym55h", "HRP character out of range"),
        (
            "an84characterslonghumanreadablepartthatcontainsthenumber1andtheexcludedcharactersbio1569pvx",
            "overall max length exceeded",
        ),
        ("pzry9x0s0muk", "No separator character"),
        ("1pzry9x0s0muk", "Empty HRP"),
        ("x1b4n0q5v", "Invalid data character"),
        ("li1dgmt3", "Too short checksum"),
        ("de1lg7wt\xff", "Invalid character in checksum"),
        # checksum calculated with uppercase form of HRP
        ("A1G7SGD8", "invalid checksum"),
        ("10a06t8", "Empty HRP"),
        ("1qzzfhee", "Empty HRP"),
        ("a12UEL5L", "mixed case string"),
    ),
)
def test_invalid_bech32(bech, reason):
    with pytest.raises(ValueError) as err:
        hrp, data = bip173.parse_bech32(bech)
        bip173.validate_bech32(hrp, data)
    assert err.value.args[0] == reason


def test_encode_decode():
    data = bip173.convertbits(bytes.fromhex("751e76e8199196d454941c45d1b3a323f1433bd6"), 8, 5)
    bech = bip173.bech32_encode("split", data)
    assert bech.startswith("split1")
    assert bip173.bech32_decode(bech) == ("split", data)
    assert bip173.bech32_decode(bech.upper()) == ("split", data)


def test_encode_lowercases_uppercase_hrp():
    assert bip173.bech32_encode("A", []) == "a12uel5l"


@pytest.mark.parametrize(
    "hrp,reason",
    (
        ("", "human readable part length not in [1,83]"),
        ("a" * 84, "human readable part length not in [1,83]"),
        ("co smos", "HRP character out of range"),
        ("Cosmos", "mixed case HRP"),
    ),
)
def test_encode_invalid_hrp(hrp, reason):
    with pytest.raises(ValueError) as err:
        bip173.bech32_encode(hrp, [0, 1, 2])
    assert err.value.args[0] == reason


def test_encode_max_length():
    with pytest.raises(ValueError) as err:
        bip173.bech32_encode("a", [0] * 83)
    assert err.value.args[0] == "overall max length exceeded"
    assert len(bip173.bech32_encode("a", [0] * 82)) == 90


def test_convertbits_padding():
    # 20 bytes -> 32 groups of 5 bits, no padding needed
    assert len(bip173.convertbits(b"\x00" * 20, 8, 5)) == 32
    # 1 byte -> 2 groups, last one zero padded
    assert bip173.convertbits(b"\x01", 8, 5) == [0, 4]
    with pytest.raises(ValueError):
        bip173.convertbits([0, 5], 5, 8, pad=False)
    with pytest.raises(ValueError):
        bip173.convertbits([0, 0, 0], 5, 8, pad=False)
    with pytest.raises(ValueError):
        bip173.convertbits([32], 5, 8)


def test_no_max_length():
    bech = bip173.bech32_encode("a", [0] * 83, max_length=None)
    assert len(bech) == 91
    with pytest.raises(ValueError) as err:
        bip173.bech32_decode(bech)
    assert err.value.args[0] == "overall max length exceeded"
    assert bip173.bech32_decode(bech, max_length=None) == ("a", [0] * 83)
