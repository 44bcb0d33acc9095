"""
coswallet cli
"""
import argparse
import json
import os
import sys
from getpass import getpass

import coswallet
import coswallet.address
import coswallet.tx
from coswallet import __version__
from coswallet.bips import bip32
from coswallet.bips import bip39
from coswallet.config import Config
from coswallet.config import DEFAULT_CONFIG_DIR
from coswallet.errors import InvalidMnemonic
from coswallet.wallet import Wallet


class RawDescriptionDefaultsHelpFormatter(
    argparse.RawDescriptionHelpFormatter, argparse.ArgumentDefaultsHelpFormatter
):
    pass


class ExplicitOption(argparse.Action):
    """
    Custom Action used for checking whether an option has been set explicitly
    (rather than by default)
    """

    def __call__(self, parser, namespace, values, option_string=None):
        setattr(namespace, self.dest, values)
        setattr(namespace, self.dest + "__explicit", True)


def format_option(o):
    format_map = {
        "b": "bin",
        "x": "hex",
        "raw": "raw",
        "bin": "bin",
        "hex": "hex",
    }
    return format_map[o]


def coin_option(o: str) -> coswallet.tx.Coin:
    """
    DENOM:AMOUNT, e.g. stake:10
    """
    denom, sep, amount = o.partition(":")
    if not sep:
        raise argparse.ArgumentTypeError(f"expected DENOM:AMOUNT, got {o!r}")
    return coswallet.tx.Coin(denom, amount)


def message_option(o: str) -> coswallet.tx.Message:
    """
    TYPE_URL:HEX, e.g. /cosmos.bank.v1beta1.MsgSend:0a2d...
    """
    type_url, sep, value = o.rpartition(":")
    if not sep:
        raise argparse.ArgumentTypeError(f"expected TYPE_URL:HEX, got {o!r}")
    try:
        return coswallet.tx.Message(type_url, bytes.fromhex(value))
    except ValueError:
        raise argparse.ArgumentTypeError(f"message value is not hex: {value!r}")


def add_common_arguments(
    parser: argparse.ArgumentParser,
    include_hrp: bool = False,
    include_log_level: bool = True,
):
    parser.add_argument(
        "--config-dir",
        type=str,
        action=ExplicitOption,
        help="Directory to look for optional config file (config.toml or config.json). "
        + "TOML will take precedence over JSON if both files are defined, "
        + "but TOML is only available for python 3.11+ ",
        default=DEFAULT_CONFIG_DIR,
    )
    if include_hrp:
        parser.add_argument(
            "--hrp",
            metavar="HRP",
            type=str,
            default="cosmos",
            action=ExplicitOption,
            help="bech32 human readable part, e.g. 'cosmos' or 'desmos'",
        )
    if include_log_level:
        parser.add_argument(
            "-L",
            "--log-level",
            default="error",
            action=ExplicitOption,
            metavar="LOG_LEVEL",
            choices=["trace", "debug", "info", "warning", "error"],
            help="log level, e.g. 'trace', 'debug', 'info', 'warning', or 'error'",
        )


def add_path_argument(parser: argparse.ArgumentParser):
    # omitted optional positionals still run their action; the config
    # derivation_path is applied in main() instead
    parser.add_argument(
        "path",
        metavar="PATH",
        nargs="?",
        default=None,
        help="derivation path, e.g. m/44'/118'/0'/0/0 (default: from config)",
    )


def add_input_arguments(
    parser: argparse.ArgumentParser,
    in_file_help: str = "input data file",
    include_input_format: bool = True,
):
    parser.add_argument(
        "--in-file",
        "-in",
        "-i",
        default="-",
        type=argparse.FileType("r"),
        help=in_file_help,
    )
    if include_input_format:
        parser.add_argument(
            "-1",
            "--input-format",
            metavar="INPUT_FORMAT",
            nargs="?",
            default="hex",
            const="raw",
            action=ExplicitOption,
            type=format_option,
            help="raw binary (-1), binary string (-1b), or hexadecimal string (-1x)",
        )


def add_output_arguments(
    parser: argparse.ArgumentParser,
    out_file_help: str = "output data file",
    include_output_format: bool = True,
):
    parser.add_argument(
        "--out-file",
        "-out",
        "-o",
        default="-",
        type=argparse.FileType("w"),
        help=out_file_help,
    )
    if include_output_format:
        parser.add_argument(
            "-0",
            "--output-format",
            metavar="OUTPUT_FORMAT",
            default="hex",
            const="raw",
            nargs="?",
            action=ExplicitOption,
            type=format_option,
            help="raw binary (-0), binary string (-0b), or hexadecimal string (-0x)",
        )


def add_mnemonic_file_argument(parser: argparse.ArgumentParser):
    parser.add_argument(
        "--mnemonic-file",
        "-m",
        required=True,
        type=argparse.FileType("r"),
        help="file containing the mnemonic phrase",
    )


def setup_parser() -> argparse.ArgumentParser:
    """
    Setup argument parser
    Returns:
        argparse.ArgumentParser
    """
    parser = argparse.ArgumentParser(
        prog="coswallet",
        description="""coswallet is a cli tool and Python library for cosmos-sdk keys.

Generate BIP39 mnemonics, derive BIP32 keys and bech32 addresses, and sign
SIGN_MODE_DIRECT transactions.

Examples:
    $ coswallet mnemonic

    $ coswallet mnemonic | coswallet address --hrp desmos "m/44'/852'/0'/0/0"
""",
        formatter_class=RawDescriptionDefaultsHelpFormatter,
    )
    parser.add_argument("-v", "-V", "--version", action="version", version=__version__)
    add_common_arguments(parser)

    sub_parser = parser.add_subparsers(
        title="subcommands",
        dest="subcommand",
        metavar="{mnemonic,hd,address,sign,bech32,tx}",
    )

    mnemonic_parser = sub_parser.add_parser(
        "mnemonic",
        help="Generate (or convert) mnemonic phrases",
        formatter_class=RawDescriptionDefaultsHelpFormatter,
        description="""
Generate (or convert) mnemonic phrase.

This command with no further options will generate a new 24 word mnemonic phrase.
Use --words (-W) to choose another length, or provide entropy bytes as input with
--from-entropy. --to-entropy recovers the original entropy, --to-seed computes the
BIP39 seed and --check validates the phrase (exit status 1 on failure).

Examples:

    1. Generate a mnemonic

        $ coswallet mnemonic

    2. Generate a 12 word mnemonic

        $ coswallet mnemonic -W 12

    3. Generate a mnemonic from provided entropy

        $ head -c 32 /dev/urandom | coswallet mnemonic -1 --from-entropy

    4. Retrieve original entropy

        $ echo <mnemonic-phrase> | coswallet mnemonic --to-entropy

    5. Convert mnemonic to seed, prompting for a passphrase

        $ echo <mnemonic-phrase> | coswallet mnemonic --to-seed -p""",
    )
    mnemonic_parser.add_argument(
        "--words",
        "-W",
        metavar="WORDS",
        type=int,
        default=24,
        choices=list(bip39.WORD_COUNTS),
        help="number of words for mnemonic generation",
    )
    mnemonic_mutually_exclusive_group = mnemonic_parser.add_mutually_exclusive_group()
    mnemonic_mutually_exclusive_group.add_argument(
        "--from-entropy",
        action="store_true",
        help="convert entropy (in_file) to mnemonic phrase",
    )
    mnemonic_mutually_exclusive_group.add_argument(
        "--to-entropy",
        action="store_true",
        help="convert mnemonic phrase (in_file) back to original entropy",
    )
    mnemonic_mutually_exclusive_group.add_argument(
        "--to-seed",
        action="store_true",
        help="convert mnemonic phrase (in_file) to seed per BIP39",
    )
    mnemonic_mutually_exclusive_group.add_argument(
        "--check",
        action="store_true",
        help="validate mnemonic phrase (in_file)",
    )
    mnemonic_parser.add_argument(
        "--passphrase",
        "-p",
        action="store_true",
        help="prompt for a BIP39 passphrase (--to-seed)",
    )
    add_common_arguments(mnemonic_parser)
    add_input_arguments(mnemonic_parser)
    add_output_arguments(mnemonic_parser)

    hd_parser = sub_parser.add_parser(
        "hd",
        help="Derive extended keys",
        formatter_class=RawDescriptionDefaultsHelpFormatter,
        description="""
Derive the extended key at PATH from the mnemonic phrase read from in_file.

Outputs the base58check xprv, or xpub with --xpub.
Use --dump to decode the derived key, and output json object to stderr.
""",
    )
    add_path_argument(hd_parser)
    hd_parser.add_argument(
        "--xpub",
        "-xpub",
        default=False,
        action="store_true",
        help="Use this flag to output the extended public key",
    )
    hd_parser.add_argument(
        "--testnet",
        action="store_true",
        help="use testnet version bytes (tprv / tpub)",
    )
    hd_parser.add_argument(
        "--dump",
        action="store_true",
        help="Decode extended key as json. Write to stderr.",
    )
    add_common_arguments(hd_parser)
    add_input_arguments(
        hd_parser, in_file_help="mnemonic phrase file", include_input_format=False
    )
    add_output_arguments(hd_parser, include_output_format=False)

    address_parser = sub_parser.add_parser(
        "address",
        help="Derive bech32 account address",
        formatter_class=RawDescriptionDefaultsHelpFormatter,
        description="""
Bech32 address of the key at PATH, derived from the mnemonic phrase read from in_file.

Examples:

    $ echo <mnemonic-phrase> | coswallet address --hrp desmos "m/44'/852'/0'/0/0"
""",
    )
    add_path_argument(address_parser)
    add_common_arguments(address_parser, include_hrp=True)
    add_input_arguments(
        address_parser, in_file_help="mnemonic phrase file", include_input_format=False
    )
    add_output_arguments(address_parser, include_output_format=False)

    sign_parser = sub_parser.add_parser(
        "sign",
        help="Sign data",
        formatter_class=RawDescriptionDefaultsHelpFormatter,
        description="""
Sign in_file data with the key at PATH. The signature is over SHA256(data),
64 bytes r || s, low-S normalized.

Examples:

    $ echo -n hello | coswallet sign -1 -m mnemonic.txt
""",
    )
    add_path_argument(sign_parser)
    add_mnemonic_file_argument(sign_parser)
    sign_parser.add_argument(
        "--recoverable",
        action="store_true",
        help="append recovery id byte to signature",
    )
    add_common_arguments(sign_parser)
    add_input_arguments(sign_parser)
    add_output_arguments(sign_parser)

    bech32_parser = sub_parser.add_parser(
        "bech32",
        help="Encode (or decode) bech32",
        formatter_class=RawDescriptionDefaultsHelpFormatter,
        description="""
Encode in_file data (e.g. a 20 byte account hash) as bech32 with --hrp,
or decode a bech32 string with --decode, outputting json.
""",
    )
    bech32_parser.add_argument(
        "--decode", action="store_true", help="decode bech32 string (in_file)"
    )
    add_common_arguments(bech32_parser, include_hrp=True)
    add_input_arguments(bech32_parser)
    add_output_arguments(bech32_parser, include_output_format=False)

    tx_parser = sub_parser.add_parser(
        "tx",
        help="Build and sign transactions",
        formatter_class=RawDescriptionDefaultsHelpFormatter,
        description="""
Build a single signer SIGN_MODE_DIRECT transaction and sign it with the key at PATH.
Outputs the TxRaw bytes ready for broadcast, or the SignDoc bytes with --sign-doc.

Examples:

    $ coswallet tx -m mnemonic.txt --chain-id testchain --account-number 5 \\
        --sequence 1 --fee stake:10 --gas 300000 \\
        --msg /cosmos.bank.v1beta1.MsgSend:<hex>
""",
    )
    add_path_argument(tx_parser)
    add_mnemonic_file_argument(tx_parser)
    tx_parser.add_argument(
        "--chain-id",
        type=str,
        default="",
        action=ExplicitOption,
        help="chain id",
    )
    tx_parser.add_argument("--account-number", type=int, required=True)
    tx_parser.add_argument("--sequence", type=int, required=True)
    tx_parser.add_argument(
        "--fee",
        type=coin_option,
        action="append",
        default=[],
        metavar="DENOM:AMOUNT",
        help="fee coin, may be repeated",
    )
    tx_parser.add_argument("--gas", type=int, required=True, help="gas limit")
    tx_parser.add_argument(
        "--msg",
        type=message_option,
        action="append",
        default=[],
        metavar="TYPE_URL:HEX",
        help="message as Any type url and hex encoded value, may be repeated",
    )
    tx_parser.add_argument("--memo", type=str, default="")
    tx_parser.add_argument("--timeout-height", type=int, default=0)
    tx_parser.add_argument(
        "--sign-doc",
        action="store_true",
        help="output the SignDoc bytes instead of the signed transaction",
    )
    add_common_arguments(tx_parser)
    add_output_arguments(tx_parser)
    return parser


def main():
    parser = setup_parser()
    args = parser.parse_args()

    config = Config(**vars(args))
    config.load_config(config_dir=args.config_dir)
    explicit_options = {
        option: value
        for option, value in vars(args).items()
        if getattr(args, option + "__explicit", False)
    }
    config.update(**explicit_options)
    log = coswallet.init_logging(config.log_level)
    log.trace(f"config: {vars(config)}")
    derivation_path = getattr(args, "path", None) or config.derivation_path

    if not args.subcommand:
        parser.print_help()
    elif args.subcommand == "mnemonic":
        if args.from_entropy:
            entropy = coswallet.read_bytes(args.in_file, input_format=config.input_format)
            mnemonic = bip39.from_entropy(entropy)
            args.out_file.write(mnemonic.phrase + os.linesep)
        elif args.to_entropy:
            phrase = coswallet.read_text(args.in_file)
            coswallet.write_bytes(
                bip39.to_entropy(phrase),
                args.out_file,
                output_format=config.output_format,
            )
        elif args.to_seed:
            mnemonic = bip39.validate(coswallet.read_text(args.in_file))
            passphrase = getpass(prompt="passphrase: ") if args.passphrase else ""
            with bip39.to_seed(mnemonic, passphrase=passphrase) as seed:
                coswallet.write_bytes(
                    bytes(seed), args.out_file, output_format=config.output_format
                )
        elif args.check:
            try:
                bip39.validate(coswallet.read_text(args.in_file))
            except InvalidMnemonic as err:
                sys.stderr.write(f"invalid mnemonic: {err}" + os.linesep)
                sys.exit(1)
        else:
            args.out_file.write(bip39.generate(args.words).phrase + os.linesep)
    elif args.subcommand == "hd":
        mnemonic = bip39.validate(coswallet.read_text(args.in_file))
        with bip39.to_seed(mnemonic) as seed:
            derived_key = bip32.derive_path(seed, derivation_path)
        with derived_key:
            if args.xpub:
                derived_key = derived_key.public()
            if args.dump:
                sys.stderr.write(
                    json.dumps(
                        {
                            "path": derivation_path,
                            "depth": derived_key.depth,
                            "parent_fingerprint": derived_key.parent_fingerprint.hex(),
                            "child_number": derived_key.child_number,
                            "chain_code": derived_key.chain_code.hex(),
                            "public_key": derived_key.public_key.hex(),
                        }
                    )
                    + os.linesep
                )
            args.out_file.write(derived_key.serialize(testnet=args.testnet) + os.linesep)
    elif args.subcommand == "address":
        phrase = coswallet.read_text(args.in_file)
        with Wallet.from_mnemonic(
            phrase, derivation_path, hrp=config.hrp
        ) as wallet:
            args.out_file.write(wallet.address() + os.linesep)
    elif args.subcommand == "sign":
        phrase = coswallet.read_text(args.mnemonic_file)
        data = coswallet.read_bytes(args.in_file, input_format=config.input_format)
        with Wallet.from_mnemonic(phrase, derivation_path) as wallet:
            signature = wallet.sign(data, recoverable=args.recoverable)
        coswallet.write_bytes(
            signature, args.out_file, output_format=config.output_format
        )
    elif args.subcommand == "bech32":
        if args.decode:
            bech = coswallet.read_text(args.in_file)
            hrp, data = coswallet.address.decode(bech)
            args.out_file.write(
                json.dumps({"hrp": hrp, "data": data.hex()}) + os.linesep
            )
            return
        data = coswallet.read_bytes(args.in_file, input_format=config.input_format)
        args.out_file.write(coswallet.address.encode_hash(data, config.hrp) + os.linesep)
    elif args.subcommand == "tx":
        phrase = coswallet.read_text(args.mnemonic_file)
        fee = coswallet.tx.Fee(tuple(args.fee), args.gas)
        with Wallet.from_mnemonic(phrase, derivation_path) as wallet:
            sign_doc = coswallet.tx.build_sign_doc(
                args.msg,
                fee,
                wallet.public_key(),
                args.sequence,
                config.chain_id,
                args.account_number,
                memo=args.memo,
                timeout_height=args.timeout_height,
            )
            if args.sign_doc:
                output = sign_doc.to_bytes()
            else:
                output = coswallet.tx.sign_tx(sign_doc, [wallet]).to_bytes()
        coswallet.write_bytes(output, args.out_file, output_format=config.output_format)


if __name__ == "__main__":
    main()
