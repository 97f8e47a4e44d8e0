##############################################################################
# Copyright (c) crispr_db Project developers. See top-level LICENSE and
# COPYRIGHT files for dates and other details. No copyright assignment is
# required to contribute to crispr_db.
##############################################################################

"""
Tests for the `identity_cache.py` module.
"""

import pytest

from crispr_db.db_scripts.data_models import Primer
from crispr_db.db_scripts.identity_cache import IdentityCache
from crispr_db.exceptions import IdentityCacheError


class TestIdentityCache:
    """Tests for the `IdentityCache` class."""

    def test_lookup_miss(self):
        """
        Test that an unknown row gives None.
        """
        assert IdentityCache().lookup("primer", 1) is None

    def test_insert_then_lookup(self):
        """
        Test that a registered instance is returned as the same object.
        """
        cache = IdentityCache()
        primer = Primer(primer_id=10)
        cache.insert("primer", 10, primer)
        assert cache.lookup("primer", 10) is primer
        assert ("primer", 10) in cache
        assert len(cache) == 1

    def test_types_are_separate(self):
        """
        Test that the same id under two types refers to two entries.
        """
        cache = IdentityCache()
        cache.insert("primer", 1, "a primer")
        cache.insert("crRNA", 1, "a guide")
        assert cache.lookup("primer", 1) == "a primer"
        assert cache.lookup("crRNA", 1) == "a guide"

    def test_duplicate_insert_raises(self):
        """
        Test that registering a second instance for a row is refused.
        """
        cache = IdentityCache()
        first = Primer(primer_id=10)
        cache.insert("primer", 10, first)
        with pytest.raises(IdentityCacheError):
            cache.insert("primer", 10, Primer(primer_id=10))
        assert cache.lookup("primer", 10) is first

    def test_insert_without_id_raises(self):
        """
        Test that an entity without an id can't be cached.
        """
        with pytest.raises(IdentityCacheError):
            IdentityCache().insert("primer", None, Primer())

    def test_revert(self):
        """
        Test that reverting a registration forgets it, and reverting an unknown row does nothing.
        """
        cache = IdentityCache()
        cache.insert("primer", 3, Primer(primer_id=3))
        cache.revert("primer", 3)
        cache.revert("plate", 99)
        assert cache.lookup("primer", 3) is None
        assert len(cache) == 0
