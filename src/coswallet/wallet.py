"""
In memory secp256k1 wallet derived from a BIP39 mnemonic
"""
import logging
import typing
from dataclasses import dataclass

from coswallet import address
from coswallet import keys
from coswallet import tx
from coswallet.bips import bip32
from coswallet.bips import bip39
from coswallet.bips import bip173
from coswallet.errors import InvalidAddress
from coswallet.secure import SecretBytes

log = logging.getLogger(__name__)

COSMOS_DERIVATION_PATH = "m/44'/118'/0'/0/0"
COSMOS_HRP = "cosmos"


@dataclass(frozen=True)
class Keychain:
    """
    Extended private key and its public counterpart at the same path
    """

    private_key: bip32.ExtendedKey
    public_key: bip32.ExtendedKey

    @classmethod
    def from_private(cls, private_key: bip32.ExtendedKey) -> "Keychain":
        return cls(private_key, private_key.public())

    @classmethod
    def derive(
        cls,
        seed: typing.Union[bytes, SecretBytes],
        path: typing.Union[str, bip32.DerivationPath],
    ) -> "Keychain":
        return cls.from_private(bip32.derive_path(seed, path))

    def wipe(self):
        self.private_key.wipe()

    def __enter__(self) -> "Keychain":
        return self

    def __exit__(self, exc_type, exc, tb):
        self.wipe()


class Wallet:
    """
    Wallet holding the seed of a mnemonic and the keychain at its current
    derivation path

    Use as a context manager (or call close()) to wipe the seed and private
    key material when done:

        with Wallet.from_mnemonic(phrase, "m/44'/118'/0'/0/0") as wallet:
            wallet.address()
    """

    def __init__(
        self,
        mnemonic: bip39.Mnemonic,
        derivation_path: typing.Union[str, bip32.DerivationPath],
        hrp: str = COSMOS_HRP,
        passphrase: str = "",
    ):
        try:
            bip173.check_hrp(hrp)
        except ValueError as err:
            raise InvalidAddress(f"invalid hrp {hrp!r}: {err}") from err
        if isinstance(derivation_path, str):
            derivation_path = bip32.parse_path(derivation_path)
        self.hrp = hrp
        self._mnemonic = mnemonic
        self._seed = bip39.to_seed(mnemonic, passphrase)
        self._derivation_path = derivation_path
        try:
            self._keychain = Keychain.derive(self._seed, derivation_path)
        except Exception:
            self._seed.wipe()
            raise
        self._closed = False
        log.debug(f"opened wallet at {derivation_path}")

    @classmethod
    def from_mnemonic(
        cls,
        phrase: typing.Union[str, typing.Sequence[str], bip39.Mnemonic],
        derivation_path: typing.Union[str, bip32.DerivationPath],
        hrp: str = COSMOS_HRP,
        passphrase: str = "",
    ) -> "Wallet":
        """
        Raises:
            InvalidMnemonic, InvalidDerivationPath, InvalidChildKey, InvalidAddress
        """
        return cls(bip39.validate(phrase), derivation_path, hrp=hrp, passphrase=passphrase)

    @classmethod
    def random(
        cls,
        derivation_path: typing.Union[str, bip32.DerivationPath],
        hrp: str = COSMOS_HRP,
        word_count: int = 24,
    ) -> typing.Tuple["Wallet", str]:
        """
        New wallet from a freshly generated mnemonic
        Returns:
            (wallet, phrase)
        """
        mnemonic = bip39.generate(word_count)
        return cls(mnemonic, derivation_path, hrp=hrp), mnemonic.phrase

    def __repr__(self) -> str:
        return (
            f"Wallet(derivation_path={str(self._derivation_path)!r}, "
            f"hrp={self.hrp!r}{', closed' if self._closed else ''})"
        )

    def _check_open(self):
        if self._closed:
            raise ValueError("wallet is closed")

    @property
    def mnemonic(self) -> bip39.Mnemonic:
        self._check_open()
        return self._mnemonic

    @property
    def derivation_path(self) -> bip32.DerivationPath:
        return self._derivation_path

    @property
    def keychain(self) -> Keychain:
        self._check_open()
        return self._keychain

    def set_derivation_path(
        self, derivation_path: typing.Union[str, bip32.DerivationPath]
    ) -> Keychain:
        """
        Re-derive the keychain at derivation_path. Nothing happens if the path
        is unchanged; otherwise the previous keychain is wiped
        """
        self._check_open()
        if isinstance(derivation_path, str):
            derivation_path = bip32.parse_path(derivation_path)
        if derivation_path == self._derivation_path:
            return self._keychain
        keychain = Keychain.derive(self._seed, derivation_path)
        previous, self._keychain = self._keychain, keychain
        self._derivation_path = derivation_path
        previous.wipe()
        log.debug(f"wallet derivation path set to {derivation_path}")
        return keychain

    def public_key(self, compressed: bool = True) -> bytes:
        """
        SEC1 public key, 33 bytes compressed or 65 bytes uncompressed
        """
        self._check_open()
        if compressed:
            return self._keychain.public_key.public_key
        return keys.pubkey(self._keychain.private_key.private_key, compressed=False)

    def address(self, hrp: typing.Optional[str] = None) -> str:
        """
        Bech32 account address under hrp, or the wallet's default hrp
        """
        return address.encode(self.public_key(), hrp if hrp is not None else self.hrp)

    @property
    def bech32_address(self) -> str:
        return self.address()

    def sign(self, data: bytes, recoverable: bool = False) -> bytes:
        """
        64 byte low-S r || s signature over SHA256(data)
        """
        self._check_open()
        return keys.sign(
            self._keychain.private_key.private_key, data, recoverable=recoverable
        )

    def sign_tx(
        self,
        messages: typing.Sequence[tx.Message],
        fee: tx.Fee,
        chain_id: str,
        account_number: int,
        sequence: int,
        memo: str = "",
        timeout_height: int = 0,
    ) -> tx.SignedTx:
        """
        Build and sign a single signer transaction with this wallet's key
        """
        sign_doc = tx.build_sign_doc(
            messages,
            fee,
            self.public_key(),
            sequence,
            chain_id,
            account_number,
            memo=memo,
            timeout_height=timeout_height,
        )
        return tx.sign_tx(sign_doc, [self])

    def close(self):
        if self._closed:
            return
        self._keychain.wipe()
        self._seed.wipe()
        self._closed = True
        log.debug("closed wallet")

    def __enter__(self) -> "Wallet":
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
