"""
C-style boundary over the wallet

Wallets cross the boundary as opaque integer handles (never 0) with an
explicit create / free pair. Failures return a sentinel (0, None or a
negative int) and leave a message in a per-thread last error slot, read
with the three call protocol:

    clear_last_error()
    if not wallet_from_mnemonic(phrase, path):
        length = last_error_length()
        buf = bytearray(length)
        error_message_utf8(buf, length)

The last error is only overwritten by the next failure on the same thread,
or reset by clear_last_error().
"""
import itertools
import logging
import threading
import typing

from coswallet.bips import bip39
from coswallet.errors import WalletError
from coswallet.wallet import Wallet

log = logging.getLogger(__name__)

INVALID_ARGUMENTS = -1
BUFFER_TOO_SMALL = -2

_local = threading.local()

_registry: typing.Dict[int, Wallet] = {}
_registry_lock = threading.Lock()
_handles = itertools.count(1)


def _set_last_error(err: Exception):
    message = str(err) or err.__class__.__name__
    if isinstance(err, WalletError):
        message = f"{err.__class__.__name__}: {message}"
    _local.last_error = message
    log.debug(f"boundary error: {message}")


def _get_last_error() -> typing.Optional[str]:
    return getattr(_local, "last_error", None)


def clear_last_error():
    _local.last_error = None


def last_error_length() -> int:
    """
    Length of the last error message in UTF-8 bytes, including the NUL
    terminator; 0 if there is no error
    """
    message = _get_last_error()
    if message is None:
        return 0
    return len(message.encode("utf-8")) + 1


def error_message_utf8(out_buf: bytearray, buf_size: int) -> int:
    """
    Copy the NUL terminated last error message into out_buf
    Returns:
        bytes written including the terminator, 0 if there is no error,
        -1 if out_buf is missing or buf_size is invalid, -2 if buf_size is
        too small for the message (nothing is written)
    """
    message = _get_last_error()
    if message is None:
        return 0
    if out_buf is None or buf_size < 0 or buf_size > len(out_buf):
        return INVALID_ARGUMENTS
    encoded = message.encode("utf-8") + b"\x00"
    if len(encoded) > buf_size:
        return BUFFER_TOO_SMALL
    out_buf[: len(encoded)] = encoded
    return len(encoded)


def _get_wallet(handle: int) -> Wallet:
    with _registry_lock:
        wallet = _registry.get(handle)
    if wallet is None:
        raise ValueError(f"invalid wallet handle: {handle}")
    return wallet


def wallet_random_mnemonic() -> typing.Optional[str]:
    """
    24 word mnemonic, or None on error
    """
    try:
        return bip39.generate(24).phrase
    except Exception as err:
        _set_last_error(err)
        return None


def wallet_from_mnemonic(
    mnemonic: typing.Optional[str], derivation_path: typing.Optional[str]
) -> int:
    """
    Returns:
        wallet handle, to be released with wallet_free, or 0 on error
    """
    if mnemonic is None or derivation_path is None:
        _set_last_error(ValueError("mnemonic and derivation path are required"))
        return 0
    try:
        wallet = Wallet.from_mnemonic(mnemonic, derivation_path)
    except Exception as err:
        _set_last_error(err)
        return 0
    with _registry_lock:
        handle = next(_handles)
        _registry[handle] = wallet
    return handle


def wallet_free(handle: int):
    """
    Release a wallet, wiping its key material. Unknown handles are ignored
    """
    with _registry_lock:
        wallet = _registry.pop(handle, None)
    if wallet is not None:
        wallet.close()


def wallet_get_bech32_address(handle: int, hrp: typing.Optional[str]) -> typing.Optional[str]:
    """
    Returns:
        bech32 address of the wallet under hrp, or None on error
    """
    try:
        if hrp is None:
            raise ValueError("hrp is required")
        return _get_wallet(handle).address(hrp)
    except Exception as err:
        _set_last_error(err)
        return None


def wallet_get_public_key(
    handle: int, compressed: bool, out_buffer: typing.Optional[bytearray], size: int
) -> int:
    """
    Write the wallet public key into out_buffer[:size]
    Returns:
        bytes written, -1 on invalid arguments, -2 if the key does not fit
        into size bytes. Nothing is written past size
    """
    if out_buffer is None or size < 0 or size > len(out_buffer):
        _set_last_error(ValueError("invalid output buffer"))
        return INVALID_ARGUMENTS
    try:
        public_key = _get_wallet(handle).public_key(compressed=bool(compressed))
    except Exception as err:
        _set_last_error(err)
        return INVALID_ARGUMENTS
    if len(public_key) > size:
        _set_last_error(
            ValueError(f"buffer too small: public key is {len(public_key)} bytes, buffer {size}")
        )
        return BUFFER_TOO_SMALL
    out_buffer[: len(public_key)] = public_key
    return len(public_key)


def wallet_sign(handle: int, data: typing.Optional[bytes]) -> typing.Optional[bytes]:
    """
    Returns:
        64 byte signature over SHA256(data), or None on error
    """
    try:
        if data is None:
            raise ValueError("data is required")
        return _get_wallet(handle).sign(bytes(data))
    except Exception as err:
        _set_last_error(err)
        return None
