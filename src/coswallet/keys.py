"""
secp256k1 keys and signatures

Signatures are over SHA256(message) with an RFC6979 deterministic nonce,
normalized to low-S and encoded as 64 byte r || s (the cosmos-sdk format)
"""
import hashlib
import logging
import typing

from ecdsa import BadSignatureError
from ecdsa import SECP256k1
from ecdsa import SigningKey
from ecdsa import VerifyingKey
from ecdsa.ecdsa import Signature
from ecdsa.util import MalformedSignature
from ecdsa.util import sigdecode_string
from ecdsa.util import sigencode_string_canonize

from coswallet.errors import SigningFailed
from coswallet.secure import SecretBytes

log = logging.getLogger(__name__)

SECP256K1_N = SECP256k1.order
SIGNATURE_LEN = 64


def _signing_key(private_key: typing.Union[bytes, SecretBytes]) -> SigningKey:
    if len(private_key) != 32:
        raise SigningFailed(f"private key must be 32 bytes: {len(private_key)}")
    k = int.from_bytes(bytes(private_key), "big")
    if not 0 < k < SECP256K1_N:
        raise SigningFailed("private key not in range [1, n-1]")
    return SigningKey.from_string(bytes(private_key), curve=SECP256k1)


def pubkey(
    private_key: typing.Union[bytes, SecretBytes], compressed: bool = True
) -> bytes:
    """
    SEC1 encoded public key, 33 bytes compressed or 65 bytes uncompressed
    """
    vk = _signing_key(private_key).get_verifying_key()
    return vk.to_string("compressed" if compressed else "uncompressed")


def sign(
    private_key: typing.Union[bytes, SecretBytes],
    message: bytes,
    recoverable: bool = False,
) -> bytes:
    """
    Sign message
    Args:
        private_key: bytes, 32 byte secret scalar
        message: bytes, message to sign; hashed with SHA256 here
        recoverable: bool, append a one byte recovery id (0 or 1)
    Returns:
        64 byte r || s, or 65 bytes if recoverable
    Raises:
        SigningFailed
    """
    sk = _signing_key(private_key)
    signature = sk.sign_deterministic(
        message, hashfunc=hashlib.sha256, sigencode=sigencode_string_canonize
    )
    log.trace(f"signed {len(message)} byte message")
    if recoverable:
        compressed = sk.get_verifying_key().to_string("compressed")
        signature += bytes([recovery_id(signature, message, compressed)])
    return signature


def recovery_id(signature: bytes, message: bytes, public_key: bytes) -> int:
    """
    Index of public_key among the keys recoverable from signature
    """
    for recid, candidate in enumerate(_recover_candidates(signature, message)):
        if candidate == public_key:
            return recid
    raise SigningFailed("unable to determine recovery id")


def _recover_candidates(signature: bytes, message: bytes) -> typing.List[bytes]:
    r, s = sigdecode_string(signature[:SIGNATURE_LEN], SECP256K1_N)
    e = int.from_bytes(hashlib.sha256(message).digest(), "big")
    candidates = Signature(r, s).recover_public_keys(e, SECP256k1.generator)
    return [
        VerifyingKey.from_public_point(pk.point, curve=SECP256k1).to_string(
            "compressed"
        )
        for pk in candidates
    ]


def recover_public_key(signature: bytes, message: bytes) -> bytes:
    """
    Compressed public key from a 65 byte recoverable signature
    """
    if len(signature) != SIGNATURE_LEN + 1:
        raise ValueError("recoverable signature must be 65 bytes")
    recid = signature[-1]
    candidates = _recover_candidates(signature, message)
    if recid >= len(candidates):
        raise ValueError(f"unsupported recovery id: {recid}")
    return candidates[recid]


def verify(public_key: bytes, signature: bytes, message: bytes) -> bool:
    """
    Verify a (low-S) r || s signature over SHA256(message). A trailing
    recovery id byte is ignored
    """
    if len(signature) == SIGNATURE_LEN + 1:
        signature = signature[:SIGNATURE_LEN]
    if len(signature) != SIGNATURE_LEN:
        return False
    if int.from_bytes(signature[32:], "big") > SECP256K1_N // 2:
        return False
    vk = VerifyingKey.from_string(public_key, curve=SECP256k1)
    try:
        return vk.verify(
            signature, message, hashfunc=hashlib.sha256, sigdecode=sigdecode_string
        )
    except (BadSignatureError, MalformedSignature):
        return False
