import json

import pytest

from coswallet import config as config_module
from coswallet.config import Config


def test_defaults():
    config = Config()
    assert config.log_level == "error"
    assert config.hrp == "cosmos"
    assert config.derivation_path == "m/44'/118'/0'/0/0"
    assert config.chain_id == ""
    assert config.input_format == "hex"
    assert config.output_format == "hex"


def test_unknown_keys_ignored():
    config = Config(hrp="desmos", subcommand="address")
    assert config.hrp == "desmos"
    assert not hasattr(config, "subcommand")


def test_load_json(tmp_path):
    (tmp_path / "config.json").write_text(
        json.dumps({"hrp": "desmos", "chain_id": "morpheus", "unknown": 1})
    )
    config = Config()
    config.load_config(config_dir=str(tmp_path))
    assert config.hrp == "desmos"
    assert config.chain_id == "morpheus"
    assert not hasattr(config, "unknown")


@pytest.mark.skipif(not config_module.HAS_TOMLLIB, reason="tomllib requires python 3.11+")
def test_toml_takes_precedence(tmp_path):
    (tmp_path / "config.json").write_text(json.dumps({"hrp": "desmos"}))
    (tmp_path / "config.toml").write_text('hrp = "juno"\nlog_level = "debug"\n')
    config = Config()
    config.load_config(config_dir=str(tmp_path))
    assert config.hrp == "juno"
    assert config.log_level == "debug"


def test_missing_config_dir(tmp_path):
    config = Config(hrp="desmos")
    config.load_config(config_dir=str(tmp_path / "missing"))
    assert config.hrp == "desmos"


def test_update():
    config = Config()
    config.update(derivation_path="m/44'/852'/0'/0/0", bogus=True)
    assert config.derivation_path == "m/44'/852'/0'/0/0"
    assert config.hrp == "cosmos"
    assert not hasattr(config, "bogus")
