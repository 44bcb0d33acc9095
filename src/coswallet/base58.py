"""
Base58(check) encoding / decoding, used for BIP32 extended key serialization
"""
import typing

from coswallet.crypto import hash256

ALPHABET = "123456789ABCDEFGHJKLMNPQRSTUVWXYZabcdefghijkmnopqrstuvwxyz"
ALPHABET_MAP = {char: idx for idx, char in enumerate(ALPHABET)}


def base58encode(data: bytes) -> str:
    """
    >>> base58encode(b"hello world")
    'StV1DL6CwTryKyV'
    """
    zeros = len(data) - len(data.lstrip(b"\x00"))
    integer = int.from_bytes(data, "big")
    encoded = ""
    while integer:
        integer, idx = divmod(integer, 58)
        encoded = ALPHABET[idx] + encoded
    return ALPHABET[0] * zeros + encoded


def base58decode(data: typing.Union[str, bytes]) -> bytes:
    """
    >>> base58decode("StV1DL6CwTryKyV")
    b'hello world'
    """
    if isinstance(data, bytes):
        data = data.decode("ascii")
    ones = len(data) - len(data.lstrip(ALPHABET[0]))
    integer = 0
    for char in data:
        try:
            integer = integer * 58 + ALPHABET_MAP[char]
        except KeyError:
            raise ValueError(f"invalid base58 character: {char!r}")
    decoded = integer.to_bytes((integer.bit_length() + 7) // 8, "big")
    return b"\x00" * ones + decoded


def base58check(data: bytes) -> str:
    """
    base58 of data with 4 byte HASH256 checksum appended

    >>> base58check(b"hello world")
    '3vQB7B6MrGQZaxCuFg4oh'
    """
    return base58encode(data + hash256(data)[:4])


def base58check_decode(data: typing.Union[str, bytes]) -> bytes:
    """
    >>> base58check_decode("3vQB7B6MrGQZaxCuFg4oh")
    b'hello world'
    """
    decoded = base58decode(data)
    payload, checksum = decoded[:-4], decoded[-4:]
    if len(checksum) != 4 or hash256(payload)[:4] != checksum:
        raise ValueError("invalid checksum")
    return payload
