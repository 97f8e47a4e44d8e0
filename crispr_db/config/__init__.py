##############################################################################
# Copyright (c) crispr_db Project developers. See top-level LICENSE and
# COPYRIGHT files for dates and other details. No copyright assignment is
# required to contribute to crispr_db.
##############################################################################

"""
Used to store the application configuration.

The `config` package loads the settings defined in an `app.yaml` file and
exposes them to the rest of crispr_db.

Modules:
    config_filepaths.py: Constants for the locations of configuration files.
    configfile.py: Handles the discovery, loading and defaulting of application
        configuration files.
"""
from copy import copy
from types import SimpleNamespace
from typing import Dict, List, Optional

from crispr_db.utils import nested_dict_to_namespaces


# Pylint complains that there's too few methods here but this class is the
# single place configuration is read from so we'll ignore it
class Config:  # pylint: disable=R0903
    """
    The Config class, meant to store all crispr_db config settings in one place.

    Attributes:
        database (Optional[SimpleNamespace]): A namespace containing database settings
            (`path`, `foreign_keys`, `journal_mode`).
        logging (Optional[SimpleNamespace]): A namespace containing logging settings
            (`level`, `colors`).

    Methods:
        __copy__: Creates a shallow copy of the Config instance.
        __str__: Returns a formatted string representation of the Config instance.
        load_app_into_namespaces: Converts the provided configuration dictionary into namespaces
            and assigns them to the Config instance's attributes.
    """

    sections: List[str] = ["database", "logging"]

    def __init__(self, app_dict: Dict):
        """
        Initializes the Config instance with configuration data from a dictionary.

        Args:
            app_dict: A dictionary containing configuration data for the application.
                Each of the keys in `sections` is converted into a `SimpleNamespace`
                and assigned to the corresponding attribute of the Config instance.
        """
        self.database: Optional[SimpleNamespace] = None
        self.logging: Optional[SimpleNamespace] = None
        self.load_app_into_namespaces(app_dict)

    def __copy__(self) -> "Config":
        """
        Creates a shallow copy of the Config instance.

        Returns:
            A new Config instance with copied section attributes.
        """
        cls = self.__class__
        result = cls.__new__(cls)
        result.__dict__.update({name: copy(self.__dict__[name]) for name in self.sections})
        return result

    def __str__(self) -> str:
        """
        Returns a formatted string representation of the Config instance.

        Returns:
            A string containing the values of every configuration section.
        """
        formatted_str = "config:"
        for name in self.sections:
            attr = getattr(self, name)
            if attr is not None:
                items = (f"    {k}: {v!r}" for k, v in attr.__dict__.items())
                joined_items = "\n".join(items)
                formatted_str += f"\n  {name}:\n{joined_items}"
            else:
                formatted_str += f"\n  {name}:\n    None"
        return formatted_str

    def load_app_into_namespaces(self, app_dict: Dict):
        """
        Converts the provided application dictionary into namespaces and assigns them
        to the Config instance's attributes.

        Args:
            app_dict: A dictionary containing configuration data for the application.
        """
        for field in self.sections:
            try:
                setattr(self, field, nested_dict_to_namespaces(app_dict[field]))
            except KeyError:
                # The sections are optional
                pass
