"""
https://github.com/bitcoin/bips/blob/master/bip-0173.mediawiki

Generic bech32 string codec; no segwit witness-program rules are applied,
cosmos addresses carry a plain 20 byte account hash in the data part.
"""
import typing

BECH32_MAX_LEN = 90
BECH32_CHARSET = "qpzry9x8gf2tvdw0s3jn54khce6mua7l"
BECH32_CHAR_MAP = {char: idx for idx, char in enumerate(BECH32_CHARSET)}
BECH32_SEPARATOR = "1"
BECH32_CONST = 1


def check_hrp(hrp: str):
    """
    Raises ValueError if hrp is not 1 to 83 chars of US-ASCII in [33, 126],
    or mixes upper and lower case
    """
    if not 1 <= len(hrp) <= 83:
        raise ValueError("human readable part length not in [1,83]")
    for char in hrp:
        if not 33 <= ord(char) <= 126:
            raise ValueError("HRP character out of range")
    if hrp.lower() != hrp and hrp.upper() != hrp:
        raise ValueError("mixed case HRP")


def parse_bech32(
    bech: str, max_length: typing.Optional[int] = BECH32_MAX_LEN
) -> typing.Tuple[str, str]:
    """
    Split bech32 string into (hrp, data part), lowercased

    Args:
        max_length: Optional[int], overall length limit, None for no limit

    >>> parse_bech32("A12UEL5L")
    ('a', '2uel5l')
    """
    if max_length is not None and len(bech) > max_length:
        raise ValueError("overall max length exceeded")
    if bech.lower() != bech and bech.upper() != bech:
        raise ValueError("mixed case string")
    bech = bech.lower()
    if BECH32_SEPARATOR not in bech:
        raise ValueError("No separator character")
    hrp, _, data = bech.rpartition(BECH32_SEPARATOR)
    if not hrp:
        raise ValueError("Empty HRP")
    return hrp, data


def validate_bech32(hrp: str, data: str, constant: int = BECH32_CONST):
    """
    Test for valid bech32 format and checksum. Raises ValueError with the
    reason on failure
    """
    for char in hrp:
        if not 33 <= ord(char) <= 126:
            raise ValueError("HRP character out of range")
    if not 1 <= len(hrp) <= 83:
        raise ValueError("human readable part length not in [1,83]")
    checksum = data[-6:]
    if len(checksum) != 6:
        raise ValueError("Too short checksum")
    for char in checksum:
        if char not in BECH32_CHAR_MAP:
            raise ValueError("Invalid character in checksum")
    for char in data:
        if char not in BECH32_CHAR_MAP:
            raise ValueError("Invalid data character")
    if not bech32_verify_checksum(
        hrp, [BECH32_CHAR_MAP[char] for char in data], constant=constant
    ):
        raise ValueError("invalid checksum")


def convertbits(
    data: typing.Iterable[int], frombits: int, tobits: int, pad: bool = True
) -> typing.List[int]:
    """
    Regroup a sequence of frombits-wide integers into tobits-wide integers

    Args:
        pad: bool, zero-pad a trailing partial group (encoding direction).
            When False, leftover bits must be fewer than frombits and zero
    >>> convertbits(b"\\xff", 8, 5)
    [31, 28]
    >>> convertbits([31, 28], 5, 8, pad=False)
    [255]
    """
    acc = 0
    bits = 0
    ret = []
    maxv = (1 << tobits) - 1
    for value in data:
        if value < 0 or value >> frombits:
            raise ValueError(f"value out of range for {frombits} bit group: {value}")
        acc = (acc << frombits) | value
        bits += frombits
        while bits >= tobits:
            bits -= tobits
            ret.append((acc >> bits) & maxv)
    if pad:
        if bits:
            ret.append((acc << (tobits - bits)) & maxv)
    elif bits >= frombits:
        raise ValueError(f"zero padding of more than {frombits - 1} bits")
    elif (acc << (tobits - bits)) & maxv:
        raise ValueError(f"non-zero padding in {frombits}-to-{tobits} conversion")
    return ret


def bech32_encode(
    hrp: str,
    data: typing.Sequence[int],
    constant: int = BECH32_CONST,
    max_length: typing.Optional[int] = BECH32_MAX_LEN,
) -> str:
    """
    https://github.com/bitcoin/bips/blob/master/bip-0173.mediawiki#bech32
    Args:
        hrp: str, human readable part
        data: Sequence[int], 5-bit data part values (without checksum)
        max_length: Optional[int], overall length limit, None for no limit
    Returns:
        lowercase bech32 string
    """
    check_hrp(hrp)
    hrp = hrp.lower()
    if (
        max_length is not None
        and len(hrp) + len(BECH32_SEPARATOR) + len(data) + 6 > max_length
    ):
        raise ValueError("overall max length exceeded")
    checksum = bech32_create_checksum(hrp, list(data), constant=constant)
    return (
        hrp
        + BECH32_SEPARATOR
        + "".join(BECH32_CHARSET[value] for value in list(data) + checksum)
    )


def bech32_decode(
    bech: str,
    constant: int = BECH32_CONST,
    max_length: typing.Optional[int] = BECH32_MAX_LEN,
) -> typing.Tuple[str, typing.List[int]]:
    """
    Decode and validate bech32 string
    Returns:
        (hrp, data), with data as 5-bit values, checksum discarded
    """
    hrp, data = parse_bech32(bech, max_length=max_length)
    validate_bech32(hrp, data, constant=constant)
    return hrp, [BECH32_CHAR_MAP[char] for char in data[:-6]]


# The following code is found in
# https://github.com/bitcoin/bips/blob/master/bip-0173.mediawiki#checksum
# but with type hints and docstrings added
#
# Copyright notice per https://github.com/bitcoin/bips/blob/master/bip-0173.mediawiki#user-content-Copyright
# Copyright (c) 2017 Peter Wiulle / Greg Maxwell
#
# Redistribution and use in source and binary forms, with or without modification, are
# permitted provided that the following conditions are met:
#
# 1. Redistributions of source code must retain the above copyright notice, this list of
# conditions and the following disclaimer.
#
# 2. Redistributions in binary form must reproduce the above copyright notice, this list
# of conditions and the following disclaimer in the documentation and/or other materials
# provided with the distribution.
#
# THIS SOFTWARE IS PROVIDED BY THE COPYRIGHT HOLDERS AND CONTRIBUTORS “AS IS” AND ANY
# EXPRESS OR IMPLIED WARRANTIES, INCLUDING, BUT NOT LIMITED TO, THE IMPLIED WARRANTIES
# OF MERCHANTABILITY AND FITNESS FOR A PARTICULAR PURPOSE ARE DISCLAIMED. IN NO EVENT
# SHALL THE COPYRIGHT HOLDER OR CONTRIBUTORS BE LIABLE FOR ANY DIRECT, INDIRECT,
# INCIDENTAL, SPECIAL, EXEMPLARY, OR CONSEQUENTIAL DAMAGES (INCLUDING, BUT NOT LIMITED
# TO, PROCUREMENT OF SUBSTITUTE GOODS OR SERVICES; LOSS OF USE, DATA, OR PROFITS; OR
# BUSINESS INTERRUPTION) HOWEVER CAUSED AND ON ANY THEORY OF LIABILITY, WHETHER IN
# CONTRACT, STRICT LIABILITY, OR TORT (INCLUDING NEGLIGENCE OR OTHERWISE) ARISING IN ANY
# WAY OUT OF THE USE OF THIS SOFTWARE, EVEN IF ADVISED OF THE POSSIBILITY OF SUCH DAMAGE.


def bech32_polymod(values: typing.List[int]) -> int:
    GEN = [0x3B6A57B2, 0x26508E6D, 0x1EA119FA, 0x3D4233DD, 0x2A1462B3]
    chk = 1
    for v in values:
        b = chk >> 25
        chk = (chk & 0x1FFFFFF) << 5 ^ v
        for i in range(5):
            chk ^= GEN[i] if ((b >> i) & 1) else 0
    return chk


def bech32_hrp_expand(s: str) -> typing.List[int]:
    return [ord(x) >> 5 for x in s] + [0] + [ord(x) & 31 for x in s]


def bech32_verify_checksum(hrp: str, data: typing.List[int], constant: int = 1) -> bool:
    """
    Args:
        data: List[int], data part values including checksum
    """
    return bech32_polymod(bech32_hrp_expand(hrp) + data) == constant


def bech32_create_checksum(
    hrp: str, data: typing.List[int], constant: int = 1
) -> typing.List[int]:
    """
    Args:
        data: List[int], (non-checksum) data part values
    """
    values = bech32_hrp_expand(hrp) + data
    polymod = bech32_polymod(values + [0, 0, 0, 0, 0, 0]) ^ constant
    return [(polymod >> 5 * (5 - i)) & 31 for i in range(6)]
