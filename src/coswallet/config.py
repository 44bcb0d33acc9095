import copy
import json
import os

try:
    import tomllib

    HAS_TOMLLIB = True
except ImportError:
    HAS_TOMLLIB = False

DEFAULT_CONFIG_DIR = os.path.join(os.path.expanduser("~"), ".coswallet")


class Config(object):
    """
    coswallet cli configuration

    Defaults are overridden by the optional config file, which is in turn
    overridden by options given explicitly on the command line
    """

    def __init__(self, **kwargs):
        self.log_level = kwargs.get("log_level", "error")

        self.hrp = kwargs.get("hrp", "cosmos")
        self.derivation_path = kwargs.get("derivation_path", "m/44'/118'/0'/0/0")
        self.chain_id = kwargs.get("chain_id", "")

        self.input_format = kwargs.get("input_format", "hex")
        self.output_format = kwargs.get("output_format", "hex")

    def load_config(self, config_dir: str = DEFAULT_CONFIG_DIR):
        """
        Look for configuration file in config_dir and load, if present
        """
        if HAS_TOMLLIB and os.path.exists(os.path.join(config_dir, "config.toml")):
            with open(os.path.join(config_dir, "config.toml"), "rb") as config_file:
                config_file_dict = tomllib.load(config_file)
        elif os.path.exists(os.path.join(config_dir, "config.json")):
            with open(os.path.join(config_dir, "config.json")) as config_file:
                config_file_dict = json.load(config_file)
        else:
            config_file_dict = {}

        if config_file_dict:
            # re __init__ so unknown keys in the file are dropped
            config_update = copy.deepcopy(vars(self))
            config_update.update(config_file_dict)
            self.__init__(**config_update)

    def update(self, **kwargs):
        """
        Update Config with kwargs, ignoring keys not defined in __init__
        """
        updated_attrs = copy.deepcopy(vars(self))
        updated_attrs.update(kwargs)
        self.__init__(**updated_attrs)
