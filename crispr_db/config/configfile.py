##############################################################################
# Copyright (c) crispr_db Project developers. See top-level LICENSE and
# COPYRIGHT files for dates and other details. No copyright assignment is
# required to contribute to crispr_db.
##############################################################################

"""
This module provides functionality for locating, loading and defaulting the
application configuration file.

It houses the `CONFIG` object that's used throughout crispr_db's codebase. The
object is built lazily by `get_config_object` the first time it is needed.
"""
import logging
import os
from typing import Dict, Optional

from crispr_db.config import Config
from crispr_db.config.config_filepaths import APP_FILENAME, CONFIG_PATH_FILE, CRISPR_DB_HOME, DEFAULT_DB_PATH
from crispr_db.utils import load_yaml


LOG: logging.Logger = logging.getLogger(__name__)

CONFIG: Optional[Config] = None
IS_LOCAL_MODE: bool = False


def set_local_mode(enable: bool = True):
    """
    Sets crispr_db to run in local mode, which doesn't read a configuration file.

    Args:
        enable (bool): True to enable local mode, False to disable it.
    """
    global IS_LOCAL_MODE, CONFIG  # pylint: disable=global-statement
    IS_LOCAL_MODE = enable
    CONFIG = None
    if enable:
        LOG.info("Running crispr_db in local mode (no configuration file required)")


def is_local_mode() -> bool:
    """
    Checks if crispr_db is running in local mode.

    Returns:
        True if running in local mode, False otherwise.
    """
    return IS_LOCAL_MODE


def load_config(filepath: str) -> Optional[Dict]:
    """
    Reads a YAML configuration file and returns its contents as a dictionary.

    Args:
        filepath (str): The path to the YAML configuration file.

    Returns:
        A dictionary containing the contents of the YAML file or None if file doesn't exist.
    """
    if not os.path.isfile(filepath):
        LOG.info(f"No app config file at {filepath}")
        return None
    LOG.info(f"Reading app config from file {filepath}")
    return load_yaml(filepath) or {}


def find_config_file(path: str = None) -> Optional[str]:
    """
    Locate the application configuration file (`app.yaml`).

    If no directory is provided the following locations are searched in order:
      1. `app.yaml` in the current working directory.
      2. The file named inside `CONFIG_PATH_FILE`, if that exists.
      3. `app.yaml` in the `CRISPR_DB_HOME` directory.

    Args:
        path (str, optional): A specific directory to look for `app.yaml`.

    Returns:
        The full path to the `app.yaml` file if found, otherwise `None`.
    """
    if path is None:
        local_app = os.path.join(os.getcwd(), APP_FILENAME)
        if os.path.isfile(local_app):
            return local_app

        if os.path.isfile(CONFIG_PATH_FILE):
            with open(CONFIG_PATH_FILE, "r") as f:
                config_path = f.read().strip()
            if os.path.isfile(config_path):
                return config_path

        path_app = os.path.join(CRISPR_DB_HOME, APP_FILENAME)
        if os.path.isfile(path_app):
            return path_app

        return None

    app_path = os.path.join(path, APP_FILENAME)
    if os.path.exists(app_path):
        return app_path

    return None


def get_default_config() -> Dict:
    """
    Creates a minimal default configuration.

    Returns:
        A configuration dictionary with essential default values.
    """
    return {
        "database": {
            "path": DEFAULT_DB_PATH,
            "foreign_keys": True,
            "journal_mode": "WAL",
        },
        "logging": {
            "level": "INFO",
            "colors": True,
        },
    }


def load_defaults(config: Dict):
    """
    Fill in every setting missing from `config` with its default value.

    Args:
        config (Dict): The configuration dictionary to be updated with default values.
    """
    for section, defaults in get_default_config().items():
        if not isinstance(config.get(section), dict):
            config[section] = {}
        for key, value in defaults.items():
            config[section].setdefault(key, value)
    config["database"]["path"] = os.path.abspath(os.path.expanduser(config["database"]["path"]))


def get_config(path: Optional[str] = None) -> Dict:
    """
    Loads a configuration file and returns a dictionary containing the configuration data.

    When no file can be found, or when running in local mode, the default
    configuration is returned instead.

    Args:
        path (str, optional): The directory path to search for the configuration file.
            If `None`, default search paths are used.

    Returns:
        A dictionary containing all the configuration data.
    """
    config = None
    if is_local_mode():
        LOG.info("Using default configuration (local mode)")
    else:
        filepath: Optional[str] = find_config_file(path)
        if filepath is None:
            LOG.info(f"No {APP_FILENAME} found, using the default configuration")
        else:
            config = load_config(filepath)

    if config is None:
        config = get_default_config()
    load_defaults(config)
    return config


def get_config_object(path: Optional[str] = None) -> Config:
    """
    Return the process-wide `CONFIG` object, loading it on first use.

    Args:
        path (str, optional): The directory path to search for the configuration file.
            Passing a path always reloads the configuration.

    Returns:
        The loaded [`Config`][config.Config] object.
    """
    global CONFIG  # pylint: disable=global-statement
    if CONFIG is None or path is not None:
        CONFIG = Config(get_config(path))
    return CONFIG


def is_debug() -> bool:
    """
    Determines whether the application is running in debug mode.

    Returns:
        True if `CRISPR_DB_DEBUG` is set to `1` in the environment, otherwise False.
    """
    if "CRISPR_DB_DEBUG" in os.environ and int(os.environ["CRISPR_DB_DEBUG"]) == 1:
        return True
    return False


def default_config_info() -> Dict:
    """
    Returns information about crispr_db's default configurations.

    Returns:
        A dictionary containing the following keys:\n
            - `config_file` (str): Path to the configuration file.
            - `is_debug` (bool): Whether debug mode is enabled.
            - `crispr_db_home` (str): Path to the crispr_db home directory.
            - `crispr_db_home_exists` (bool): True if the home directory exists, otherwise False.
    """
    return {
        "config_file": find_config_file(),
        "is_debug": is_debug(),
        "crispr_db_home": CRISPR_DB_HOME,
        "crispr_db_home_exists": os.path.exists(CRISPR_DB_HOME),
    }
