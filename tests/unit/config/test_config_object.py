##############################################################################
# Copyright (c) crispr_db Project developers. See top-level LICENSE and
# COPYRIGHT files for dates and other details. No copyright assignment is
# required to contribute to crispr_db.
##############################################################################

"""
Test the functionality of the Config object.
"""

from copy import copy
from types import SimpleNamespace

from crispr_db.config import Config


class TestConfig:
    """
    Class for testing the Config object. We'll store a valid `app_dict`
    as an attribute here so that each test doesn't have to redefine it
    each time.
    """

    app_dict = {
        "database": {"path": "/path/to/crispr.db", "foreign_keys": True, "journal_mode": "WAL"},
        "logging": {"level": "INFO", "colors": False},
    }

    def test_config_creation(self):
        """
        Test the creation of the Config object. Each section should become a
        namespace saved to its respective attribute.
        """
        config = Config(self.app_dict)
        assert config.database == SimpleNamespace(**self.app_dict["database"])
        assert config.logging == SimpleNamespace(**self.app_dict["logging"])

    def test_missing_sections(self):
        """
        Test that a section missing from the dictionary is left as None.
        """
        config = Config({"logging": {"level": "DEBUG"}})
        assert config.database is None
        assert config.logging.level == "DEBUG"

    def test_copy(self):
        """
        Test that a copy holds equal but separate sections.
        """
        config = Config(self.app_dict)
        copied = copy(config)
        assert copied.database == config.database
        assert copied.database is not config.database

        copied.database.path = "/elsewhere.db"
        assert config.database.path == "/path/to/crispr.db"

    def test_str(self):
        """
        Test the string representation, including an empty section.
        """
        config = Config({"database": self.app_dict["database"]})
        expected = (
            "config:\n"
            "  database:\n"
            "    path: '/path/to/crispr.db'\n"
            "    foreign_keys: True\n"
            "    journal_mode: 'WAL'\n"
            "  logging:\n"
            "    None"
        )
        assert str(config) == expected
