##############################################################################
# Copyright (c) crispr_db Project developers. See top-level LICENSE and
# COPYRIGHT files for dates and other details. No copyright assignment is
# required to contribute to crispr_db.
##############################################################################

"""
Tests for the configfile.py module.
"""

import logging
import os

import pytest
import yaml
from _pytest.logging import LogCaptureFixture
from pytest_mock import MockerFixture

from crispr_db.config import configfile
from crispr_db.config.configfile import (
    default_config_info,
    find_config_file,
    get_config,
    get_config_object,
    get_default_config,
    is_debug,
    is_local_mode,
    load_config,
    load_defaults,
    set_local_mode,
)
from tests.fixture_types import FixtureStr


@pytest.fixture
def configfile_testing_dir(tmp_path) -> FixtureStr:
    """
    Fixture to create a temporary directory holding an `app.yaml` file.

    Args:
        tmp_path: PyTest's per-test temporary directory.

    Returns:
        The path to the directory.
    """
    app = {
        "database": {"path": os.path.join(str(tmp_path), "custom.db"), "journal_mode": "DELETE"},
        "logging": {"level": "DEBUG"},
    }
    with open(os.path.join(str(tmp_path), "app.yaml"), "w") as app_yaml:
        yaml.dump(app, app_yaml)
    return str(tmp_path)


def test_local_mode_toggle_and_logging(caplog: LogCaptureFixture):
    """
    Test that local mode can be turned on and off and that turning it on is logged.

    Args:
        caplog: A built-in fixture from the pytest library to capture logs.
    """
    caplog.set_level(logging.INFO)
    assert not is_local_mode()

    set_local_mode()
    assert is_local_mode()
    assert "Running crispr_db in local mode" in caplog.text

    set_local_mode(False)
    assert not is_local_mode()


def test_default_config_structure_and_values():
    """
    Test that the default configuration has both sections and the expected values.
    """
    config = get_default_config()
    assert config["database"]["foreign_keys"] is True
    assert config["database"]["journal_mode"] == "WAL"
    assert config["database"]["path"].endswith("crispr.db")
    assert config["logging"] == {"level": "INFO", "colors": True}


def test_load_config(configfile_testing_dir: FixtureStr):
    """
    Test that a YAML file is read into a dictionary.

    Args:
        configfile_testing_dir: The directory holding an `app.yaml` file.
    """
    config = load_config(os.path.join(configfile_testing_dir, "app.yaml"))
    assert config["logging"] == {"level": "DEBUG"}


def test_load_config_invalid_file():
    """
    Test that a missing file loads as None.
    """
    assert load_config("/invalid/filepath/app.yaml") is None


def test_find_config_file_path_provided(configfile_testing_dir: FixtureStr):
    """
    Test that `find_config_file` looks inside a given directory.

    Args:
        configfile_testing_dir: The directory holding an `app.yaml` file.
    """
    assert find_config_file(configfile_testing_dir) == os.path.join(configfile_testing_dir, "app.yaml")
    assert find_config_file(os.path.join(configfile_testing_dir, "missing")) is None


def test_find_config_file_local_app_yaml_exists(mocker: MockerFixture, configfile_testing_dir: FixtureStr):
    """
    Test that an `app.yaml` in the current working directory is found first.

    Args:
        mocker: PyTest mocker fixture.
        configfile_testing_dir: The directory holding an `app.yaml` file.
    """
    mocker.patch("os.getcwd", return_value=configfile_testing_dir)
    assert find_config_file() == os.path.join(configfile_testing_dir, "app.yaml")


def test_find_config_file_config_path_file(mocker: MockerFixture, tmp_path, configfile_testing_dir: FixtureStr):
    """
    Test that the file named in the config path file is used when there's no local `app.yaml`.

    Args:
        mocker: PyTest mocker fixture.
        tmp_path: PyTest's per-test temporary directory.
        configfile_testing_dir: The directory holding an `app.yaml` file.
    """
    empty_dir = tmp_path / "empty"
    empty_dir.mkdir()
    config_path_file = tmp_path / "config_path.txt"
    config_path_file.write_text(os.path.join(configfile_testing_dir, "app.yaml") + "\n")
    mocker.patch("os.getcwd", return_value=str(empty_dir))
    mocker.patch.object(configfile, "CONFIG_PATH_FILE", str(config_path_file))

    assert find_config_file() == os.path.join(configfile_testing_dir, "app.yaml")


def test_find_config_file_home_app_yaml_exists(mocker: MockerFixture, tmp_path, configfile_testing_dir: FixtureStr):
    """
    Test that `app.yaml` in the crispr_db home directory is the last place looked.

    Args:
        mocker: PyTest mocker fixture.
        tmp_path: PyTest's per-test temporary directory.
        configfile_testing_dir: The directory holding an `app.yaml` file.
    """
    empty_dir = tmp_path / "empty"
    empty_dir.mkdir()
    mocker.patch("os.getcwd", return_value=str(empty_dir))
    mocker.patch.object(configfile, "CONFIG_PATH_FILE", str(empty_dir / "config_path.txt"))
    mocker.patch.object(configfile, "CRISPR_DB_HOME", configfile_testing_dir)

    assert find_config_file() == os.path.join(configfile_testing_dir, "app.yaml")

    mocker.patch.object(configfile, "CRISPR_DB_HOME", str(empty_dir))
    assert find_config_file() is None


def test_load_defaults():
    """
    Test that missing settings are filled in without touching the ones given.
    """
    config = {"database": {"path": "~/my.db", "foreign_keys": False}, "logging": None}
    load_defaults(config)

    assert config["database"]["foreign_keys"] is False
    assert config["database"]["journal_mode"] == "WAL"
    assert config["database"]["path"] == os.path.join(os.path.expanduser("~"), "my.db")
    assert config["logging"] == {"level": "INFO", "colors": True}


def test_get_config(configfile_testing_dir: FixtureStr):
    """
    Test that a found file is loaded and completed with the defaults.

    Args:
        configfile_testing_dir: The directory holding an `app.yaml` file.
    """
    config = get_config(configfile_testing_dir)
    assert config["database"]["path"] == os.path.join(configfile_testing_dir, "custom.db")
    assert config["database"]["journal_mode"] == "DELETE"
    assert config["database"]["foreign_keys"] is True
    assert config["logging"]["level"] == "DEBUG"
    assert config["logging"]["colors"] is True


def test_get_config_local_mode_ignores_files(configfile_testing_dir: FixtureStr):
    """
    Test that local mode uses the defaults even when a file exists.

    Args:
        configfile_testing_dir: The directory holding an `app.yaml` file.
    """
    set_local_mode()
    assert get_config(configfile_testing_dir) == get_config(os.path.join(configfile_testing_dir, "missing"))
    assert get_config(configfile_testing_dir)["logging"]["level"] == "INFO"


def test_get_config_object_is_cached(mocker: MockerFixture, configfile_testing_dir: FixtureStr):
    """
    Test that the config object is built once unless a path is passed.

    Args:
        mocker: PyTest mocker fixture.
        configfile_testing_dir: The directory holding an `app.yaml` file.
    """
    mocker.patch(
        "crispr_db.config.configfile.find_config_file",
        side_effect=lambda path=None: None if path is None else os.path.join(path, "app.yaml"),
    )
    first = get_config_object()
    assert get_config_object() is first
    assert first.logging.level == "INFO"

    reloaded = get_config_object(configfile_testing_dir)
    assert reloaded is not first
    assert reloaded.logging.level == "DEBUG"
    assert configfile.CONFIG is reloaded


@pytest.mark.parametrize("value, expected", [(None, False), ("0", False), ("1", True)])
def test_is_debug(mocker: MockerFixture, value, expected):
    """
    Test that debug mode follows the `CRISPR_DB_DEBUG` environment variable.

    Args:
        mocker: PyTest mocker fixture.
        value: The value of the environment variable, if set.
        expected: Whether debug mode should be on.
    """
    environ = {} if value is None else {"CRISPR_DB_DEBUG": value}
    mocker.patch.dict(os.environ, environ, clear=True)
    assert is_debug() is expected


def test_default_config_info(mocker: MockerFixture):
    """
    Test that `default_config_info` reports where configuration comes from.

    Args:
        mocker: PyTest mocker fixture.
    """
    mocker.patch("crispr_db.config.configfile.find_config_file", return_value="/path/to/app.yaml")
    mocker.patch("crispr_db.config.configfile.is_debug", return_value=False)
    mocker.patch("os.path.exists", return_value=True)

    info = default_config_info()
    assert info["config_file"] == "/path/to/app.yaml"
    assert info["is_debug"] is False
    assert info["crispr_db_home_exists"] is True
    assert info["crispr_db_home"] == configfile.CRISPR_DB_HOME
