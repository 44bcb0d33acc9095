import hashlib


def ripemd160(msg: bytes) -> bytes:
    return hashlib.new("ripemd160", msg).digest()


def sha256(msg: bytes) -> bytes:
    return hashlib.sha256(msg).digest()


def hash160(msg: bytes) -> bytes:
    """
    RIPEMD160(SHA256(msg)), the 20 byte account address of a secp256k1 pubkey
    """
    return ripemd160(sha256(msg))


def hash256(msg: bytes) -> bytes:
    """
    SHA256(SHA256(msg)), base58check checksums
    """
    return sha256(sha256(msg))
