"""
Bech32 account addresses, e.g. cosmos1...

The data part is the 20 byte RIPEMD160(SHA256(pubkey)) account hash of a
compressed secp256k1 public key, regrouped into 5 bit words. The 90 character
BIP-173 length limit is not applied, any valid hrp (up to 83 chars) encodes
"""
import typing

from coswallet.bips import bip173
from coswallet.crypto import hash160
from coswallet.errors import InvalidAddress


def encode(pubkey: bytes, hrp: str) -> str:
    """
    Bech32 address of pubkey under hrp
    Args:
        pubkey: bytes, 33 byte compressed public key
        hrp: str, human readable part, e.g. "cosmos"
    Raises:
        InvalidAddress
    """
    return encode_hash(hash160(pubkey), hrp)


def encode_hash(account_hash: bytes, hrp: str) -> str:
    try:
        return bip173.bech32_encode(
            hrp, bip173.convertbits(account_hash, 8, 5), max_length=None
        )
    except ValueError as err:
        raise InvalidAddress(f"invalid hrp {hrp!r}: {err}") from err


def decode(address: str) -> typing.Tuple[str, bytes]:
    """
    Inverse of encode, up to the hash
    Returns:
        (hrp, account hash)
    Raises:
        InvalidAddress
    """
    try:
        hrp, data = bip173.bech32_decode(address, max_length=None)
        account_hash = bytes(bip173.convertbits(data, 5, 8, pad=False))
    except ValueError as err:
        raise InvalidAddress(f"{err}: {address!r}") from err
    if not account_hash:
        raise InvalidAddress(f"empty data part: {address!r}")
    return hrp, account_hash


def is_valid(address: str, hrp: typing.Optional[str] = None) -> bool:
    """
    True if address decodes, and has hrp if given
    """
    try:
        decoded_hrp, _ = decode(address)
    except InvalidAddress:
        return False
    return hrp is None or decoded_hrp == hrp.lower()
