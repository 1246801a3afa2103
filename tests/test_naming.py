"""Unit tests for database name derivation."""

import re

import pytest

from churchreg.utils.naming import database_name_for, is_valid_database_name


def test_simple_name():
    """Spaces become underscores and letters are lowercased."""
    assert database_name_for("Grace Chapel") == "grace_chapel"


def test_whitespace_runs_collapse():
    """A run of whitespace becomes one underscore."""
    assert database_name_for("Igreja  \t Batista\nCentral") == "igreja_batista_central"


def test_invalid_characters_dropped():
    """Punctuation and non-ASCII letters are removed."""
    assert database_name_for("St. Mary's Church!") == "st_marys_church"
    assert database_name_for("Igreja São João") == "igreja_so_joo"


@pytest.mark.parametrize(
    "name",
    ["Grace Chapel", "  padded  ", "ÁÉÍ óú", "a-b-c", "MiXeD 123 __ x", ""],
)
def test_idempotent_and_restricted(name):
    """Slugging twice changes nothing and only [a-z0-9_] remains."""
    slug = database_name_for(name)
    assert database_name_for(slug) == slug
    assert re.fullmatch(r"[a-z0-9_]*", slug)


def test_valid_database_name():
    """Empty, over-long and unslugged names are invalid."""
    assert is_valid_database_name("grace_chapel")
    assert not is_valid_database_name("")
    assert not is_valid_database_name("a" * 64)
    assert is_valid_database_name("a" * 63)
    assert not is_valid_database_name("Grace Chapel")
