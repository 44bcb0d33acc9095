"""
https://github.com/bitcoin/bips/blob/master/bip-0039.mediawiki
"""
import functools
import hashlib
import logging
import secrets
import typing
import unicodedata
from dataclasses import dataclass

from mnemonic import Mnemonic as _ReferenceMnemonic

from coswallet.errors import InvalidChecksum
from coswallet.errors import InvalidMnemonic
from coswallet.errors import InvalidWord
from coswallet.errors import InvalidWordCount
from coswallet.secure import SecretBytes

log = logging.getLogger(__name__)

WORD_COUNTS = (12, 15, 18, 21, 24)
ITERATIONS = 2048


@dataclass(frozen=True)
class Mnemonic:
    words: typing.Tuple[str, ...]
    language: str = "english"

    def __str__(self) -> str:
        return " ".join(self.words)

    def __repr__(self) -> str:
        return f"Mnemonic(<{len(self.words)} words>, language={self.language!r})"

    @property
    def phrase(self) -> str:
        return str(self)


@functools.lru_cache(maxsize=None)
def load_wordlist(language: str = "english") -> typing.Tuple[str, ...]:
    """
    Wordlist as shipped with python-mnemonic, the BIP39 reference implementation
    """
    try:
        words = _ReferenceMnemonic(language).wordlist
    except Exception as err:
        raise InvalidMnemonic(f"unsupported wordlist language: {language}") from err
    assert len(words) == 2048, "wordlist must have 2048 words"
    return tuple(words)


@functools.lru_cache(maxsize=None)
def _word_index(language: str) -> typing.Dict[str, int]:
    return {word: idx for idx, word in enumerate(load_wordlist(language))}


def checksum_bits(entropy: bytes) -> int:
    """
    First len(entropy) * 8 // 32 bits of SHA256(entropy)
    """
    cs_len = len(entropy) * 8 // 32
    return hashlib.sha256(entropy).digest()[0] >> (8 - cs_len)


def from_entropy(entropy: bytes, language: str = "english") -> Mnemonic:
    """
    >>> str(from_entropy(bytes.fromhex("6610b25967cdcca9d59875f5cb50b0ea75433311869e930b")))
    'gravity machine north sort system female filter attitude volume fold club stay feature office ecology stable narrow fog'
    """
    strength = len(entropy) * 8
    if strength not in [128, 160, 192, 224, 256]:
        raise InvalidWordCount(
            "entropy strength must be in range [128, 256] bits and multiple of 32"
        )
    words = load_wordlist(language)

    ENT = strength // 32
    data = int.from_bytes(entropy, "big") << ENT | checksum_bits(entropy)
    bit_groups = []  # groups of 11 bits
    for idx in range((strength + ENT) // 11):
        bit_groups.append((data >> idx * 11) & 0x7FF)
    return Mnemonic(
        tuple(words[bit_group] for bit_group in reversed(bit_groups)),
        language=language,
    )


def generate(word_count: int = 24, language: str = "english") -> Mnemonic:
    """
    Generate a new mnemonic from fresh entropy
    Args:
        word_count: int, one of 12, 15, 18, 21 or 24
    """
    if word_count not in WORD_COUNTS:
        raise InvalidWordCount(f"word count must be one of {WORD_COUNTS}: {word_count}")
    strength = word_count * 11 * 32 // 33
    with SecretBytes(secrets.token_bytes(strength // 8)) as entropy:
        mnemonic = from_entropy(bytes(entropy), language=language)
    log.debug(f"generated {word_count} word mnemonic")
    return mnemonic


def _split_words(words: typing.Union[str, typing.Sequence[str], Mnemonic]) -> list:
    if isinstance(words, Mnemonic):
        words = words.words
    if isinstance(words, str):
        words = words.split()
    return [unicodedata.normalize("NFKD", word).strip() for word in words]


def to_entropy(
    words: typing.Union[str, typing.Sequence[str], Mnemonic],
    language: str = "english",
) -> bytes:
    """
    Inverse of from_entropy(entropy)
    Get original entropy from mnemonic, validating word count, words and checksum

    >>> to_entropy("gravity machine north sort system female filter attitude volume fold club stay feature office ecology stable narrow fog").hex()
    '6610b25967cdcca9d59875f5cb50b0ea75433311869e930b'
    """
    words = _split_words(words)
    if len(words) not in WORD_COUNTS:
        raise InvalidWordCount(
            f"word length does not indicate a valid entropy bit length: {len(words)}"
        )
    checksum_bitlen = len(words) // 3
    entropy_bitlen = len(words) * 11 - checksum_bitlen

    index = _word_index(language)
    data = 0
    for position, word in enumerate(words):
        try:
            data = data << 11 | index[word]
        except KeyError:
            raise InvalidWord(f"word #{position + 1} not in {language} wordlist: {word}")

    checksum = data & (2**checksum_bitlen - 1)
    entropy = (data >> checksum_bitlen).to_bytes(entropy_bitlen // 8, "big")
    if checksum_bits(entropy) != checksum:
        raise InvalidChecksum("checksum validation error")
    return entropy


def validate(
    words: typing.Union[str, typing.Sequence[str], Mnemonic],
    language: str = "english",
) -> Mnemonic:
    """
    Validate a phrase (or word sequence) against the wordlist and its checksum
    Returns:
        Mnemonic
    Raises:
        InvalidWordCount, InvalidWord, InvalidChecksum
    """
    normalized = tuple(_split_words(words))
    to_entropy(normalized, language=language)
    return Mnemonic(normalized, language=language)


def to_seed(
    mnemonic: typing.Union[str, Mnemonic], passphrase: str = ""
) -> SecretBytes:
    """
    Defined in BIP39
    https://github.com/bitcoin/bips/blob/master/bip-0039.mediawiki#from-mnemonic-to-seed
    """
    return SecretBytes(
        hashlib.pbkdf2_hmac(
            "sha512",
            unicodedata.normalize("NFKD", str(mnemonic)).encode("utf-8"),
            unicodedata.normalize("NFKD", "mnemonic" + passphrase).encode("utf-8"),
            ITERATIONS,
        )
    )
