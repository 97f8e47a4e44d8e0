##############################################################################
# Copyright (c) crispr_db Project developers. See top-level LICENSE and
# COPYRIGHT files for dates and other details. No copyright assignment is
# required to contribute to crispr_db.
##############################################################################

"""
Module for project-wide utility functions.
"""

import logging
from types import SimpleNamespace
from typing import Any, Dict, Iterable, List

import yaml


LOG = logging.getLogger(__name__)


def load_yaml(filepath: str) -> Dict:
    """
    Safely read a YAML file and return its contents.

    Args:
        filepath: The file path to the YAML file to be read.

    Returns:
        A dict representing the contents of the YAML file.
    """
    with open(filepath, "r") as _file:
        return yaml.safe_load(_file)


def nested_dict_to_namespaces(dic: Dict) -> SimpleNamespace:
    """
    Convert a nested dictionary into a nested SimpleNamespace structure.

    Each key in the dictionary becomes an attribute of a SimpleNamespace, allowing
    for attribute-style access to the data.

    Args:
        dic: The nested dictionary to be converted.

    Returns:
        A SimpleNamespace object representing the nested structure of the input dictionary.

    Raises:
        TypeError: If the input is not a dictionary.
    """

    def recurse(dic):
        if not isinstance(dic, dict):
            return dic
        for key, val in list(dic.items()):
            dic[key] = recurse(val)
        return SimpleNamespace(**dic)

    if not isinstance(dic, dict):
        raise TypeError(f"Expected a dictionary, got {type(dic).__name__}")

    return recurse(dic)


def dedupe_by(items: Iterable[Any], key) -> List[Any]:
    """
    Remove duplicates from `items` while keeping the first occurrence of each key.

    Args:
        items: The items to deduplicate.
        key: A callable returning the value used to detect duplicates.

    Returns:
        A list with the duplicates removed, in the original order.
    """
    seen = set()
    unique = []
    for item in items:
        item_key = key(item)
        if item_key in seen:
            continue
        seen.add(item_key)
        unique.append(item)
    return unique
