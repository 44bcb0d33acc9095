"""
Cosmos SDK transactions, SIGN_MODE_DIRECT

https://github.com/cosmos/cosmos-sdk/blob/main/docs/architecture/adr-020-protobuf-transaction-encoding.md

Messages are opaque google.protobuf.Any values; only the cosmos.tx.v1beta1
envelope (TxBody, AuthInfo, SignDoc, TxRaw) is encoded here.
"""
import hashlib
import logging
import typing
from dataclasses import dataclass
from dataclasses import field

from coswallet import keys
from coswallet import proto
from coswallet.errors import InvalidTransactionInput
from coswallet.secure import SecretBytes

log = logging.getLogger(__name__)

PUBKEY_TYPE_URL = "/cosmos.crypto.secp256k1.PubKey"
SIGN_MODE_DIRECT = 1

# ModeInfo{single: Single{mode: SIGN_MODE_DIRECT}}
MODE_INFO_DIRECT = proto.message_field(1, proto.uint64_field(1, SIGN_MODE_DIRECT))


@dataclass(frozen=True)
class Message:
    """
    google.protobuf.Any
    """

    type_url: str
    value: bytes = b""

    def to_bytes(self) -> bytes:
        return proto.string_field(1, self.type_url) + proto.bytes_field(2, self.value)

    @classmethod
    def from_bytes(cls, data: bytes) -> "Message":
        fields = proto.fields_dict(data)
        return cls(
            fields.get(1, [b""])[-1].decode("utf-8"),
            fields.get(2, [b""])[-1],
        )


@dataclass(frozen=True)
class Coin:
    denom: str
    amount: str

    def __post_init__(self):
        if isinstance(self.amount, int):
            object.__setattr__(self, "amount", str(self.amount))

    def to_bytes(self) -> bytes:
        return proto.string_field(1, self.denom) + proto.string_field(2, self.amount)


@dataclass(frozen=True)
class Fee:
    amount: typing.Tuple[Coin, ...]
    gas_limit: int
    payer: str = ""
    granter: str = ""

    def __post_init__(self):
        if isinstance(self.amount, Coin):
            object.__setattr__(self, "amount", (self.amount,))
        else:
            object.__setattr__(self, "amount", tuple(self.amount))

    def to_bytes(self) -> bytes:
        return (
            proto.repeated_message_field(1, [coin.to_bytes() for coin in self.amount])
            + proto.uint64_field(2, self.gas_limit)
            + proto.string_field(3, self.payer)
            + proto.string_field(4, self.granter)
        )


def pubkey_any(public_key: bytes) -> bytes:
    """
    Any{type_url: /cosmos.crypto.secp256k1.PubKey, value: PubKey{key}}
    """
    return Message(PUBKEY_TYPE_URL, proto.bytes_field(1, public_key)).to_bytes()


def signer_info(public_key: bytes, sequence: int) -> bytes:
    return (
        proto.message_field(1, pubkey_any(public_key))
        + proto.message_field(2, MODE_INFO_DIRECT)
        + proto.uint64_field(3, sequence)
    )


def tx_body(
    messages: typing.Sequence[Message], memo: str = "", timeout_height: int = 0
) -> bytes:
    return (
        proto.repeated_message_field(1, [msg.to_bytes() for msg in messages])
        + proto.string_field(2, memo)
        + proto.uint64_field(3, timeout_height)
    )


def auth_info(signer_infos: typing.Sequence[bytes], fee: Fee) -> bytes:
    return proto.repeated_message_field(1, signer_infos) + proto.message_field(
        2, fee.to_bytes()
    )


def signer_public_keys(auth_info_bytes: bytes) -> typing.List[bytes]:
    """
    Public keys of the signer infos in auth_info_bytes, in order
    """
    public_keys = []
    for info in proto.fields_dict(auth_info_bytes).get(1, []):
        any_ = Message.from_bytes(proto.fields_dict(info).get(1, [b""])[-1])
        if any_.type_url != PUBKEY_TYPE_URL:
            raise InvalidTransactionInput(f"unsupported public key type: {any_.type_url}")
        public_keys.append(proto.fields_dict(any_.value).get(1, [b""])[-1])
    return public_keys


@dataclass(frozen=True)
class SignDoc:
    body_bytes: bytes
    auth_info_bytes: bytes
    chain_id: str
    account_number: int

    def to_bytes(self) -> bytes:
        return (
            proto.bytes_field(1, self.body_bytes)
            + proto.bytes_field(2, self.auth_info_bytes)
            + proto.string_field(3, self.chain_id)
            + proto.uint64_field(4, self.account_number)
        )

    @property
    def public_keys(self) -> typing.List[bytes]:
        return signer_public_keys(self.auth_info_bytes)


@dataclass(frozen=True)
class SignedTx:
    """
    cosmos.tx.v1beta1.TxRaw. The encoding is byte for byte the same as the
    equivalent cosmos.tx.v1beta1.Tx
    """

    body_bytes: bytes
    auth_info_bytes: bytes
    signatures: typing.Tuple[bytes, ...] = field(default_factory=tuple)

    def to_bytes(self) -> bytes:
        return (
            proto.bytes_field(1, self.body_bytes)
            + proto.bytes_field(2, self.auth_info_bytes)
            + proto.repeated_bytes_field(3, self.signatures)
        )

    @classmethod
    def from_bytes(cls, data: bytes) -> "SignedTx":
        fields = proto.fields_dict(data)
        return cls(
            fields.get(1, [b""])[-1],
            fields.get(2, [b""])[-1],
            tuple(fields.get(3, [])),
        )

    @property
    def txhash(self) -> str:
        """
        Uppercase hex SHA256 of the tx bytes, as reported by cosmos nodes
        """
        return hashlib.sha256(self.to_bytes()).hexdigest().upper()


def _check_uint64(name: str, value: int):
    if not isinstance(value, int) or not 0 <= value <= proto.UINT64_MAX:
        raise InvalidTransactionInput(f"{name} must be a uint64: {value!r}")


def _check_fee(fee: Fee):
    _check_uint64("gas limit", fee.gas_limit)
    if fee.gas_limit == 0:
        raise InvalidTransactionInput("gas limit must be greater than zero")
    for coin in fee.amount:
        if not coin.denom:
            raise InvalidTransactionInput("fee denom must not be empty")
        amount = coin.amount
        if not (isinstance(amount, str) and amount.isascii() and amount.isdigit()):
            raise InvalidTransactionInput(
                f"fee amount must be a non-negative integer: {coin.amount!r}"
            )


def build_sign_doc(
    messages: typing.Sequence[Message],
    fee: Fee,
    public_keys: typing.Union[bytes, typing.Sequence[bytes]],
    sequences: typing.Union[int, typing.Sequence[int]],
    chain_id: str,
    account_number: int,
    memo: typing.Optional[str] = "",
    timeout_height: int = 0,
) -> SignDoc:
    """
    Assemble the SIGN_MODE_DIRECT sign document

    Args:
        messages: Sequence[Message], at least one
        fee: Fee
        public_keys: 33 byte compressed public key of each signer (or a single
            key for a single signer)
        sequences: account sequence of each signer (or a single int)
        chain_id: str
        account_number: int, account number of the first signer
        memo: Optional[str]
        timeout_height: int, 0 for none
    Raises:
        InvalidTransactionInput
    """
    if isinstance(public_keys, (bytes, bytearray)):
        public_keys = [public_keys]
    if isinstance(sequences, int):
        sequences = [sequences]
    public_keys, sequences = list(public_keys), list(sequences)
    memo = memo or ""

    if not messages:
        raise InvalidTransactionInput("at least one message is required")
    for msg in messages:
        if not msg.type_url:
            raise InvalidTransactionInput("message type url must not be empty")
    _check_fee(fee)
    if not chain_id:
        raise InvalidTransactionInput("chain id must not be empty")
    if not public_keys:
        raise InvalidTransactionInput("at least one signer is required")
    if len(public_keys) != len(sequences):
        raise InvalidTransactionInput(
            f"{len(public_keys)} public keys but {len(sequences)} sequences"
        )
    for public_key in public_keys:
        if len(public_key) != 33:
            raise InvalidTransactionInput("public keys must be 33 bytes (compressed)")
    for sequence in sequences:
        _check_uint64("sequence", sequence)
    _check_uint64("account number", account_number)
    _check_uint64("timeout height", timeout_height)

    body_bytes = tx_body(messages, memo=memo, timeout_height=timeout_height)
    auth_info_bytes = auth_info(
        [signer_info(bytes(pk), seq) for pk, seq in zip(public_keys, sequences)],
        fee,
    )
    log.debug(
        f"built sign doc for chain {chain_id} with {len(messages)} message(s) "
        f"and {len(public_keys)} signer(s)"
    )
    return SignDoc(body_bytes, auth_info_bytes, chain_id, account_number)


Signer = typing.Union[bytes, SecretBytes, typing.Any]


def _signer_public_key(signer: Signer) -> bytes:
    if isinstance(signer, (bytes, bytearray, SecretBytes)):
        return keys.pubkey(signer)
    return signer.public_key()


def _signer_sign(signer: Signer, data: bytes) -> bytes:
    if isinstance(signer, (bytes, bytearray, SecretBytes)):
        return keys.sign(signer, data)
    return signer.sign(data)


def sign_tx(sign_doc: SignDoc, signers: typing.Sequence[Signer]) -> SignedTx:
    """
    Sign sign_doc with each signer, signatures ordered as the signer infos in
    sign_doc.auth_info_bytes

    Args:
        signers: 32 byte private keys, or objects with public_key() and
            sign(data) such as a Wallet, in any order
    Raises:
        InvalidTransactionInput: a signer is missing for a signer info
    """
    by_public_key = {}
    for signer in signers:
        by_public_key[_signer_public_key(signer)] = signer
    data = sign_doc.to_bytes()
    signatures = []
    for public_key in sign_doc.public_keys:
        if public_key not in by_public_key:
            raise InvalidTransactionInput(
                f"no signer for public key {public_key.hex()}"
            )
        signatures.append(_signer_sign(by_public_key[public_key], data))
    return SignedTx(sign_doc.body_bytes, sign_doc.auth_info_bytes, tuple(signatures))


class TxBuilder:
    """
    Single signer transaction builder

    >>> builder = (
    ...     TxBuilder("testchain")
    ...     .memo("Test memo")
    ...     .account_info(sequence=1, number=5)
    ...     .fee("stake", "10", 300_000)
    ...     .add_message("/cosmos.bank.v1beta1.MsgSend", b"")
    ... )
    """

    def __init__(self, chain_id: str):
        self.chain_id = chain_id
        self._memo = ""
        self._timeout_height = 0
        self._messages: typing.List[Message] = []
        self._account_info: typing.Optional[typing.Tuple[int, int]] = None
        self._fee: typing.Optional[Fee] = None

    def memo(self, memo: str) -> "TxBuilder":
        self._memo = memo
        return self

    def timeout_height(self, timeout_height: int) -> "TxBuilder":
        self._timeout_height = timeout_height
        return self

    def account_info(self, sequence: int, number: int) -> "TxBuilder":
        self._account_info = (sequence, number)
        return self

    def fee(
        self, denom: str, amount: typing.Union[str, int], gas_limit: int
    ) -> "TxBuilder":
        self._fee = Fee((Coin(denom, amount),), gas_limit)
        return self

    def add_message(self, type_url: str, value: bytes) -> "TxBuilder":
        self._messages.append(Message(type_url, value))
        return self

    def sign_doc(self, public_key: bytes) -> SignDoc:
        if self._account_info is None:
            raise InvalidTransactionInput("no account info")
        if self._fee is None:
            raise InvalidTransactionInput("no fee")
        sequence, number = self._account_info
        return build_sign_doc(
            self._messages,
            self._fee,
            public_key,
            sequence,
            self.chain_id,
            number,
            memo=self._memo,
            timeout_height=self._timeout_height,
        )

    def sign(self, wallet) -> SignedTx:
        """
        Sign with wallet (SIGN_MODE_DIRECT)
        """
        return sign_tx(self.sign_doc(wallet.public_key()), [wallet])
