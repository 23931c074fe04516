import copy
import dataclasses
import os
import tempfile
from pathlib import Path

import yaml

from homeferry.errors import FatalError
from homeferry.globals import Globals
from homeferry.log import logger
from homeferry.registry import PURPOSES, Purpose

DEFAULT_CONFIG = {
    "home": None,
    "mount_point": Globals.DEFAULT_MOUNT_POINT,
    "mount_hint": Globals.DEFAULT_MOUNT_HINT,
    "group": Globals.DEFAULT_GROUP,
    "tmp_dir": None,
    "refresh_stale": False,
    "purposes": {},
}

PURPOSE_OVERRIDES = {
    "backup_path": str,
    "base_dir": str,
    "items": list,
    "exclude": list,
    "skip": list,
    "refresh_stale": bool,
}


def default_config() -> dict:
    return copy.deepcopy(DEFAULT_CONFIG)


def find_config_file():
    """
    Looks for the default configuration file in each of `Globals.DEFAULT_CONFIG_DIRS`.

    Returns:
        Path | None: The first configuration file found, or None.
    """
    for config_dir in Globals.DEFAULT_CONFIG_DIRS:
        candidate = Path(config_dir).expanduser() / Globals.DEFAULT_CONFIG_FILE
        if candidate.is_file():
            return candidate
    return None


def parse_config(path_to_config):
    """
    Parses a YAML configuration file and merges it over the defaults.

    Parameters:
        path_to_config (str | Path | None): Explicit configuration file. When None,
            the default locations are searched and built-in defaults are used if
            nothing is found.

    Returns:
        dict: The merged configuration.

    Raises:
        FatalError: If an explicit file does not exist, the YAML is invalid, or
            the file contains unknown keys.
    """
    config = default_config()

    if path_to_config is None:
        path_to_config = find_config_file()
        if path_to_config is None:
            logger.debug("No configuration file found, using defaults.")
            return config

    try:
        with open(path_to_config) as f:
            loaded = yaml.safe_load(f) or {}
    except FileNotFoundError:
        raise FatalError(f"Configuration file \"{path_to_config}\" not found.")
    except yaml.YAMLError as e:
        raise FatalError(f"Invalid YAML in configuration file \"{path_to_config}\": {e}")

    if not isinstance(loaded, dict):
        raise FatalError(f"Configuration file \"{path_to_config}\" must contain a mapping.")

    unknown = set(loaded) - set(DEFAULT_CONFIG)
    if unknown:
        raise FatalError(f"Unknown configuration keys: {', '.join(sorted(unknown))}")

    config.update({key: value for key, value in loaded.items() if value is not None})
    logger.debug(f"Configuration loaded from {path_to_config}.")
    return config


def get_home(config: dict) -> Path:
    """Home directory: configuration first, then `Globals.HOME_ENV_VAR`, then the real home."""
    if config.get("home"):
        return Path(config["home"]).expanduser()
    env_home = os.environ.get(Globals.HOME_ENV_VAR)
    return Path(env_home).expanduser() if env_home else Path.home()


def get_tmp_dir(config: dict) -> Path:
    return Path(config.get("tmp_dir") or tempfile.gettempdir()).expanduser()


def get_purpose(config: dict, name: str) -> Purpose:
    """
    Returns the purpose with any overrides from the `purposes` section applied.

    Raises:
        FatalError: If the purpose or one of its override keys is unknown, or an
            override has the wrong type.
    """
    if name not in PURPOSES:
        raise FatalError(f"Unknown purpose \"{name}\". Available: {', '.join(PURPOSES)}")

    purposes_section = config.get("purposes") or {}
    unknown_purposes = set(purposes_section) - set(PURPOSES)
    if unknown_purposes:
        raise FatalError(f"Unknown purposes in configuration: {', '.join(sorted(unknown_purposes))}")

    overrides = purposes_section.get(name) or {}
    if not isinstance(overrides, dict):
        raise FatalError(f"Settings for purpose \"{name}\" must be a mapping.")
    unknown = set(overrides) - set(PURPOSE_OVERRIDES)
    if unknown:
        raise FatalError(f"Unknown settings for purpose \"{name}\": {', '.join(sorted(unknown))}")

    changes = {}
    for key, value in overrides.items():
        expected = PURPOSE_OVERRIDES[key]
        valid = isinstance(value, expected)
        if valid and expected is list:
            valid = all(isinstance(element, str) for element in value)
        if not valid:
            kind = "list of strings" if expected is list else expected.__name__
            raise FatalError(f"Setting \"{key}\" of purpose \"{name}\" must be a {kind}, got {value!r}")
        changes[key] = tuple(value) if expected is list else value

    return dataclasses.replace(PURPOSES[name], **changes)
