"""
BIP32
https://github.com/bitcoin/bips/blob/master/bip-0032.mediawiki

Curve arithmetic is delegated to the ecdsa package; this module only does
the HMAC-SHA512 chaining, range checks and key serialization.
"""
import functools
import hashlib
import hmac
import logging
import typing
from dataclasses import dataclass

from ecdsa import SECP256k1
from ecdsa import SigningKey
from ecdsa import VerifyingKey
from ecdsa.ellipticcurve import INFINITY

from coswallet.base58 import base58check
from coswallet.base58 import base58check_decode
from coswallet.crypto import hash160
from coswallet.errors import InvalidChildKey
from coswallet.errors import InvalidDerivationPath
from coswallet.secure import SecretBytes

log = logging.getLogger(__name__)

VERSION_PUBLIC_MAINNET = b"\x04\x88\xb2\x1e"
VERSION_PRIVATE_MAINNET = b"\x04\x88\xAD\xE4"
VERSION_PUBLIC_TESTNET = b"\x04\x35\x87\xCF"
VERSION_PRIVATE_TESTNET = b"\x04\x35\x83\x94"

HARDENED_OFFSET = 0x80000000
SECP256K1_N = SECP256k1.order

HARDENED_MARKERS = ("'", "h", "H")


@dataclass(frozen=True)
class PathElement:
    index: int
    hardened: bool = False

    @property
    def child_number(self) -> int:
        return self.index + HARDENED_OFFSET if self.hardened else self.index

    def __str__(self) -> str:
        return f"{self.index}'" if self.hardened else str(self.index)


@dataclass(frozen=True)
class DerivationPath:
    """
    >>> str(parse_path("m/44h/118h/0h/0/0"))
    "m/44'/118'/0'/0/0"
    """

    elements: typing.Tuple[PathElement, ...] = ()

    def __iter__(self) -> typing.Iterator[PathElement]:
        return iter(self.elements)

    def __len__(self) -> int:
        return len(self.elements)

    def __str__(self) -> str:
        return "/".join(["m"] + [str(element) for element in self.elements])


def parse_path(path: str) -> DerivationPath:
    """
    Parse derivation path text, e.g. m/44'/118'/0'/0/0
    Args:
        path: str, "m" followed by "/"-separated indices, hardened indices
            suffixed with ', h or H
    Raises:
        InvalidDerivationPath
    """
    if not path or not path.strip():
        raise InvalidDerivationPath("empty derivation path")
    segments = path.strip().split("/")
    if segments[0] != "m":
        raise InvalidDerivationPath(f"derivation path must start with 'm': {path}")
    elements = []
    for segment in segments[1:]:
        hardened = segment[-1:] in HARDENED_MARKERS
        digits = segment[:-1] if hardened else segment
        if not digits or not (digits.isascii() and digits.isdigit()):
            raise InvalidDerivationPath(f"invalid path segment {segment!r} in {path}")
        index = int(digits)
        if index >= HARDENED_OFFSET:
            raise InvalidDerivationPath(f"path index out of range: {index}")
        elements.append(PathElement(index, hardened))
    return DerivationPath(tuple(elements))


# https://github.com/bitcoin/bips/blob/master/bip-0032.mediawiki#conventions
def point(p: int) -> bytes:
    """
    serP(point(p)), i.e. the SEC1 compressed encoding of p*G
    """
    sk = SigningKey.from_secret_exponent(p, curve=SECP256k1)
    return sk.get_verifying_key().to_string("compressed")


def ser_32(i: int) -> bytes:
    return i.to_bytes(4, "big")


def ser_256(p: int) -> bytes:
    return p.to_bytes(32, "big")


def parse_256(p: bytes) -> int:
    return int.from_bytes(p, "big")


### child key derivation (ckd) functions
##
def CKDpriv(k_parent: int, c_parent: bytes, i: int) -> typing.Tuple[int, bytes]:
    """
    private parent to private child
    https://github.com/bitcoin/bips/blob/master/bip-0032.mediawiki#private-parent-key--private-child-key

    Raises:
        InvalidChildKey: if I_L >= n or the resulting key is 0. The caller
            has to pick another index, nothing is skipped here
    """
    if i >= HARDENED_OFFSET:
        msg = b"\x00" + ser_256(k_parent) + ser_32(i)
    else:
        msg = point(k_parent) + ser_32(i)
    I = hmac.new(c_parent, msg, digestmod=hashlib.sha512).digest()
    I_L, I_R = parse_256(I[:32]), I[32:]
    if I_L >= SECP256K1_N:
        raise InvalidChildKey(f"I_L >= n for child index {i}")
    k_i = (I_L + k_parent) % SECP256K1_N
    if k_i == 0:
        raise InvalidChildKey(f"derived private key is zero for child index {i}")
    return k_i, I_R


def CKDpub(K_parent: bytes, c_parent: bytes, i: int) -> typing.Tuple[bytes, bytes]:
    """
    public parent to public child
    https://github.com/bitcoin/bips/blob/master/bip-0032.mediawiki#public-parent-key--public-child-key
    """
    if i >= HARDENED_OFFSET:
        raise InvalidChildKey("hardened child derivation requires a private parent key")
    msg = K_parent + ser_32(i)
    I = hmac.new(c_parent, msg, digestmod=hashlib.sha512).digest()
    I_L, I_R = parse_256(I[:32]), I[32:]
    if I_L >= SECP256K1_N:
        raise InvalidChildKey(f"I_L >= n for child index {i}")
    parent_point = VerifyingKey.from_string(K_parent, curve=SECP256k1).pubkey.point
    K_i = SECP256k1.generator * I_L + parent_point
    if K_i == INFINITY:
        raise InvalidChildKey(f"derived public key is the point at infinity for child index {i}")
    child = VerifyingKey.from_public_point(K_i, curve=SECP256k1)
    return child.to_string("compressed"), I_R


@dataclass(frozen=True)
class ExtendedKey:
    """
    BIP32 extended key, private (32 byte scalar held in SecretBytes) or
    public (33 byte compressed point)
    """

    key: typing.Union[SecretBytes, bytes]
    chain_code: bytes
    depth: int = 0
    parent_fingerprint: bytes = b"\x00\x00\x00\x00"
    child_number: int = 0

    def __post_init__(self):
        if len(self.chain_code) != 32:
            raise ValueError("chain code must be 32 bytes")
        if isinstance(self.key, SecretBytes):
            if len(self.key) != 32:
                raise ValueError("private key must be 32 bytes")
        elif len(self.key) != 33:
            raise ValueError("public key must be 33 bytes (compressed)")

    def __repr__(self) -> str:
        kind = "private" if self.is_private else "public"
        return (
            f"ExtendedKey(<{kind}>, depth={self.depth}, "
            f"parent_fingerprint={self.parent_fingerprint.hex()}, "
            f"child_number={self.child_number})"
        )

    @property
    def is_private(self) -> bool:
        return isinstance(self.key, SecretBytes)

    @property
    def private_key(self) -> SecretBytes:
        if not self.is_private:
            raise ValueError("public extended key has no private key")
        return self.key

    @functools.cached_property
    def public_key(self) -> bytes:
        if self.is_private:
            return point(self.key.to_int())
        return bytes(self.key)

    @property
    def identifier(self) -> bytes:
        return hash160(self.public_key)

    @property
    def fingerprint(self) -> bytes:
        return self.identifier[:4]

    def public(self) -> "ExtendedKey":
        """
        N(), private extended key to public extended key
        """
        return ExtendedKey(
            self.public_key,
            self.chain_code,
            depth=self.depth,
            parent_fingerprint=self.parent_fingerprint,
            child_number=self.child_number,
        )

    def serialize(self, testnet: bool = False) -> str:
        """
        Base58check encoded xprv / xpub (tprv / tpub for testnet)
        """
        if self.is_private:
            version = VERSION_PRIVATE_TESTNET if testnet else VERSION_PRIVATE_MAINNET
            ser_key = b"\x00" + bytes(self.key)
        else:
            version = VERSION_PUBLIC_TESTNET if testnet else VERSION_PUBLIC_MAINNET
            ser_key = self.key
        payload = (
            version
            + self.depth.to_bytes(1, "big")
            + self.parent_fingerprint
            + ser_32(self.child_number)
            + self.chain_code
            + ser_key
        )
        return base58check(payload)

    @classmethod
    def deserialize(cls, xkey: typing.Union[str, bytes]) -> "ExtendedKey":
        """
        De-serialize extended key. Checks for invalid keys
        """
        decoded = base58check_decode(xkey)
        if len(decoded) != 78:
            raise ValueError(f"extended key must be 78 bytes: {len(decoded)}")
        version = decoded[:4]
        if version not in [
            VERSION_PRIVATE_MAINNET,
            VERSION_PUBLIC_MAINNET,
            VERSION_PRIVATE_TESTNET,
            VERSION_PUBLIC_TESTNET,
        ]:
            raise ValueError(f"unknown extended key version: {version.hex()}")
        depth = decoded[4]
        parent_fingerprint = decoded[5:9]
        child_number = parse_256(decoded[9:13])
        if depth == 0:
            if parent_fingerprint != b"\x00\x00\x00\x00":
                raise ValueError("zero depth with non-zero parent fingerprint")
            elif child_number != 0:
                raise ValueError("zero depth with non-zero index")
        chain_code = decoded[13:45]
        ser_key = decoded[45:]
        prefix = ser_key[0:1]
        if version in [VERSION_PUBLIC_MAINNET, VERSION_PUBLIC_TESTNET]:
            if prefix == b"\x00":
                raise ValueError("pubkey version / prvkey mismatch")
            elif prefix not in [b"\x02", b"\x03"]:
                raise ValueError(f"invalid pubkey prefix {prefix.hex()}")
            # raises on a point that is not on the curve
            VerifyingKey.from_string(ser_key, curve=SECP256k1)
            key = ser_key
        else:
            if prefix in [b"\x02", b"\x03"]:
                raise ValueError("prvkey version / pubkey mismatch")
            elif prefix != b"\x00":
                raise ValueError(f"invalid prvkey prefix {prefix.hex()}")
            if not 0 < parse_256(ser_key[1:]) < SECP256K1_N:
                raise ValueError("private key not in range [1, n-1]")
            key = SecretBytes(ser_key[1:])
        return cls(
            key,
            chain_code,
            depth=depth,
            parent_fingerprint=parent_fingerprint,
            child_number=child_number,
        )

    def wipe(self):
        if self.is_private:
            self.key.wipe()

    def __enter__(self) -> "ExtendedKey":
        return self

    def __exit__(self, exc_type, exc, tb):
        self.wipe()


def master_key(seed: typing.Union[bytes, SecretBytes]) -> ExtendedKey:
    """
    Defined in BIP32
    https://github.com/bitcoin/bips/blob/master/bip-0032.mediawiki#master-key-generation

    Args:
        seed: seed of chosen length (between 128 and 512 bits)
    """
    I = hmac.new(b"Bitcoin seed", bytes(seed), digestmod=hashlib.sha512).digest()
    master_secret_key = parse_256(I[:32])
    if master_secret_key == 0 or master_secret_key >= SECP256K1_N:
        raise InvalidChildKey("master secret key not in range [1, n-1]")
    return ExtendedKey(SecretBytes(I[:32]), I[32:])


def derive_child(parent: ExtendedKey, index: int, hardened: bool = False) -> ExtendedKey:
    """
    Derive the child at index from parent. Private parents give private
    children, public parents give public children (non-hardened only)

    Raises:
        InvalidChildKey
        InvalidDerivationPath: index out of range, or depth would exceed 255
    """
    if not 0 <= index < HARDENED_OFFSET:
        raise InvalidDerivationPath(f"child index out of range: {index}")
    if parent.depth >= 255:
        raise InvalidDerivationPath("maximum derivation depth (255) exceeded")
    i = index + HARDENED_OFFSET if hardened else index
    if parent.is_private:
        k_i, c_i = CKDpriv(parent.private_key.to_int(), parent.chain_code, i)
        key = SecretBytes(ser_256(k_i))
    else:
        key, c_i = CKDpub(parent.key, parent.chain_code, i)
    return ExtendedKey(
        key,
        c_i,
        depth=parent.depth + 1,
        parent_fingerprint=parent.fingerprint,
        child_number=i,
    )


def derive_path(
    seed: typing.Union[bytes, SecretBytes],
    path: typing.Union[str, DerivationPath],
) -> ExtendedKey:
    """
    Master key from seed, then one derive_child per path element.
    Intermediate private keys are wiped, including on failure
    """
    if isinstance(path, str):
        path = parse_path(path)
    key = master_key(seed)
    try:
        for element in path:
            child = derive_child(key, element.index, hardened=element.hardened)
            key.wipe()
            key = child
    except Exception:
        key.wipe()
        raise
    log.debug(f"derived {'private' if key.is_private else 'public'} key at {path}")
    return key


def public_key(key: typing.Union[ExtendedKey, SecretBytes, bytes]) -> bytes:
    """
    33 byte compressed public key of an extended key or raw 32 byte private key
    """
    if isinstance(key, ExtendedKey):
        return key.public_key
    if len(key) != 32:
        raise ValueError("private key must be 32 bytes")
    return point(parse_256(bytes(key)))
