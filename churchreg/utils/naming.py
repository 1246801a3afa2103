"""Database name derivation."""

import re

# PostgreSQL truncates identifiers longer than this
MAX_DATABASE_NAME_LENGTH = 63

_WHITESPACE = re.compile(r"\s+")
_INVALID = re.compile(r"[^a-z0-9_]")


def database_name_for(organization_name: str) -> str:
    """Slug an organization name into a database name.

    Whitespace runs become a single underscore, the result is lowercased and
    anything outside ``[a-z0-9_]`` is dropped. The function is idempotent.
    """
    slug = _WHITESPACE.sub("_", organization_name).lower()
    return _INVALID.sub("", slug)


def is_valid_database_name(name: str) -> bool:
    return bool(name) and len(name) <= MAX_DATABASE_NAME_LENGTH and not _INVALID.search(name)
