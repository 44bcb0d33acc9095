"""
Test __main__ cli entrypoints / functions
"""
import json
import sys
from subprocess import PIPE
from subprocess import Popen

MNEMONIC = "battle call once stool three mammal hybrid list sign field athlete amateur cinnamon eagle shell erupt voyage hero assist maple matrix maximum able barrel"
ABANDON_ABOUT = " ".join(["abandon"] * 11 + ["about"])


def coswallet(args, config_dir):
    return [sys.executable, "-m", "coswallet"] + args + ["--config-dir", str(config_dir)]


def run(args, config_dir, stdin: bytes = b""):
    with Popen(coswallet(args, config_dir), stdin=PIPE, stdout=PIPE, stderr=PIPE) as proc:
        stdout, stderr = proc.communicate(stdin)
    return proc.returncode, stdout, stderr


def test_help(tmp_path):
    with Popen([sys.executable, "-m", "coswallet", "-h"], stdout=PIPE) as proc:
        proc.communicate()
        assert proc.returncode == 0, "retcode non-zero"


def test_mnemonic_generate(tmp_path):
    retcode, stdout, _ = run(["mnemonic"], tmp_path)
    assert retcode == 0, "retcode non-zero"
    assert len(stdout.decode("utf8").split()) == 24

    retcode, stdout, _ = run(["mnemonic", "-W", "12"], tmp_path)
    assert retcode == 0, "retcode non-zero"
    assert len(stdout.decode("utf8").split()) == 12


def test_mnemonic_entropy(tmp_path):
    retcode, stdout, _ = run(
        ["mnemonic", "--from-entropy"], tmp_path, b"00000000000000000000000000000000\n"
    )
    assert retcode == 0, "retcode non-zero"
    assert stdout.decode("utf8").strip() == ABANDON_ABOUT

    retcode, stdout, _ = run(["mnemonic", "--to-entropy"], tmp_path, ABANDON_ABOUT.encode())
    assert retcode == 0, "retcode non-zero"
    assert stdout.decode("utf8").strip() == "00000000000000000000000000000000"


def test_mnemonic_to_seed(tmp_path):
    retcode, stdout, _ = run(["mnemonic", "--to-seed"], tmp_path, ABANDON_ABOUT.encode())
    assert retcode == 0, "retcode non-zero"
    assert stdout.decode("utf8").strip().startswith("5eb00bbddcf069084889a8ab9155568165f5")


def test_mnemonic_check(tmp_path):
    retcode, _, _ = run(["mnemonic", "--check"], tmp_path, MNEMONIC.encode())
    assert retcode == 0, "retcode non-zero"
    retcode, _, stderr = run(
        ["mnemonic", "--check"], tmp_path, " ".join(["abandon"] * 12).encode()
    )
    assert retcode == 1
    assert b"invalid mnemonic" in stderr


def test_address(tmp_path):
    retcode, stdout, _ = run(
        ["address", "--hrp", "desmos", "m/44'/852'/0'/0/0"], tmp_path, MNEMONIC.encode()
    )
    assert retcode == 0, "retcode non-zero"
    assert stdout.decode("utf8").strip() == "desmos1k8u92hx3k33a5vgppkyzq6m4frxx7ewnlkyjrh"

    # default hrp and derivation path
    retcode, stdout, _ = run(["address"], tmp_path, MNEMONIC.encode())
    assert retcode == 0, "retcode non-zero"
    assert stdout.decode("utf8").strip() == "cosmos1dzczdka6wpzwvmawpps7tf8047gkft0e5cupun"


def test_address_from_config(tmp_path):
    (tmp_path / "config.json").write_text(
        json.dumps({"hrp": "desmos", "derivation_path": "m/44'/852'/0'/0/0"})
    )
    retcode, stdout, _ = run(["address"], tmp_path, MNEMONIC.encode())
    assert retcode == 0, "retcode non-zero"
    assert stdout.decode("utf8").strip() == "desmos1k8u92hx3k33a5vgppkyzq6m4frxx7ewnlkyjrh"


def test_hd(tmp_path):
    retcode, stdout, stderr = run(["hd", "--xpub", "--dump"], tmp_path, MNEMONIC.encode())
    assert retcode == 0, "retcode non-zero"
    assert stdout.decode("utf8").strip().startswith("xpub")
    dump = json.loads(stderr.decode("utf8"))
    assert dump["depth"] == 5
    assert dump["path"] == "m/44'/118'/0'/0/0"


def test_sign(tmp_path):
    mnemonic_file = tmp_path / "mnemonic.txt"
    mnemonic_file.write_text(MNEMONIC + "\n")
    retcode, stdout, _ = run(
        ["sign", "-1", "-m", str(mnemonic_file), "m/44'/852'/0'/0/0"],
        tmp_path,
        b"some simple data",
    )
    assert retcode == 0, "retcode non-zero"
    assert stdout.decode("utf8").strip() == (
        "ce0558eb2f0847d4e58b29ca45f0a2a8764395b52c829888fa017aaf5b8b2e69"
        "5e47aac9fe1cf77a66a1ba872d8a7e5302d31874b686973c0a5c196cca707667"
    )


def test_bech32(tmp_path):
    retcode, stdout, _ = run(
        ["bech32", "--hrp", "cosmos"], tmp_path, b"751e76e8199196d454941c45d1b3a323f1433bd6"
    )
    assert retcode == 0, "retcode non-zero"
    encoded = stdout.decode("utf8").strip()
    assert encoded.startswith("cosmos1")

    retcode, stdout, _ = run(["bech32", "--decode"], tmp_path, encoded.encode())
    assert retcode == 0, "retcode non-zero"
    assert json.loads(stdout) == {
        "hrp": "cosmos",
        "data": "751e76e8199196d454941c45d1b3a323f1433bd6",
    }


def test_tx(tmp_path):
    mnemonic_file = tmp_path / "mnemonic.txt"
    mnemonic_file.write_text(MNEMONIC)
    args = [
        "tx",
        "-m",
        str(mnemonic_file),
        "--chain-id",
        "test-chain",
        "--account-number",
        "1",
        "--sequence",
        "0",
        "--fee",
        "stake:10",
        "--gas",
        "200000",
        "--msg",
        "/test.Msg:01",
    ]
    retcode, stdout, _ = run(args + ["--sign-doc"], tmp_path)
    assert retcode == 0, "retcode non-zero"
    sign_doc = bytes.fromhex(stdout.decode("utf8").strip())
    assert sign_doc.startswith(bytes.fromhex("0a100a0e0a092f746573742e4d7367120101"))
    assert sign_doc.endswith(b"\x1a\x0atest-chain\x20\x01")

    retcode, stdout, _ = run(args, tmp_path)
    assert retcode == 0, "retcode non-zero"
    signed = bytes.fromhex(stdout.decode("utf8").strip())
    assert signed.startswith(bytes.fromhex("0a100a0e0a092f746573742e4d7367120101"))


def test_tx_invalid_gas(tmp_path):
    mnemonic_file = tmp_path / "mnemonic.txt"
    mnemonic_file.write_text(MNEMONIC)
    retcode, _, stderr = run(
        [
            "tx",
            "-m",
            str(mnemonic_file),
            "--chain-id",
            "test-chain",
            "--account-number",
            "1",
            "--sequence",
            "0",
            "--gas",
            "0",
            "--msg",
            "/test.Msg:01",
        ],
        tmp_path,
    )
    assert retcode != 0
    assert b"InvalidTransactionInput" in stderr
