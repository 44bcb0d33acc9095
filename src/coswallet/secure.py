"""
Scoped ownership of sensitive byte buffers (seeds, private scalars, entropy)

Contents live in a bytearray so they can be zeroed in place; a SecretBytes is
wiped on explicit wipe(), on leaving a with block (also when an exception
propagates) and when it is garbage collected.
"""
import hmac
import typing


def secure_memcmp(a: bytes, b: bytes) -> bool:
    """
    Constant time comparison
    """
    return hmac.compare_digest(bytes(a), bytes(b))


def zero(buf: bytearray):
    """
    Overwrite buf with zeros in place
    """
    for i in range(len(buf)):
        buf[i] = 0


class SecretBytes:
    """
    Owned, wipeable byte buffer

    >>> s = SecretBytes(b"\\x01\\x02")
    >>> s.hex()
    '0102'
    >>> s.wipe()
    >>> s.wiped
    True
    """

    __slots__ = ("_buf", "_wiped")

    def __init__(self, data: typing.Union[bytes, bytearray, "SecretBytes"]):
        if isinstance(data, SecretBytes):
            data = data._buf
        self._buf = bytearray(data)
        self._wiped = False

    @property
    def wiped(self) -> bool:
        return self._wiped

    def _check(self):
        if self._wiped:
            raise ValueError("secret has been wiped")

    def __bytes__(self) -> bytes:
        self._check()
        return bytes(self._buf)

    def __len__(self) -> int:
        return len(self._buf)

    def __getitem__(self, key):
        self._check()
        item = self._buf[key]
        if isinstance(key, slice):
            return SecretBytes(item)
        return item

    def __eq__(self, other) -> bool:
        if isinstance(other, SecretBytes):
            other = other._buf
        if not isinstance(other, (bytes, bytearray)):
            return NotImplemented
        return secure_memcmp(self._buf, other)

    __hash__ = None

    def __repr__(self) -> str:
        # never leak contents into logs or tracebacks
        return f"SecretBytes(<{len(self._buf)} bytes{', wiped' if self._wiped else ''}>)"

    def hex(self) -> str:
        self._check()
        return self._buf.hex()

    def to_int(self) -> int:
        self._check()
        return int.from_bytes(self._buf, "big")

    def wipe(self):
        zero(self._buf)
        self._wiped = True

    def __enter__(self) -> "SecretBytes":
        return self

    def __exit__(self, exc_type, exc, tb):
        self.wipe()

    def __del__(self):
        try:
            zero(self._buf)
        except AttributeError:
            pass
