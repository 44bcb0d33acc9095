"""
Wallet error taxonomy

Every failure of the core is deterministic given its inputs, so none of these
are retryable; a caller must supply different inputs to get a different outcome.
"""


class WalletError(Exception):
    """Base exception for wallet errors"""

    pass


class InvalidMnemonic(WalletError):
    pass


class InvalidWordCount(InvalidMnemonic):
    pass


class InvalidWord(InvalidMnemonic):
    pass


class InvalidChecksum(InvalidMnemonic):
    pass


class InvalidDerivationPath(WalletError):
    pass


class InvalidChildKey(WalletError):
    """Derivation produced a scalar outside [1, n) or the point at infinity"""

    pass


class InvalidAddress(WalletError):
    pass


class SigningFailed(WalletError):
    pass


class InvalidTransactionInput(WalletError):
    pass
