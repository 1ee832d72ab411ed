"""
Translation between external field names and users table columns.

External names are the camelCase keys used by request bodies and query
parameters. Lookups are case-sensitive; anything outside the fixed set is
"unrecognized" and maps to None.
"""
from __future__ import annotations

import logging
from types import MappingProxyType
from typing import Mapping, Optional

logger = logging.getLogger(__name__)

USER_ID = "user_id"
FIRST_NAME = "first_name"
LAST_NAME = "last_name"
EMAIL = "email"
PASSWORD = "password"
NICKNAME = "nickname"
COUNTRY = "country"

# Column order of the users table.
COLUMNS: tuple[str, ...] = (
    USER_ID,
    FIRST_NAME,
    LAST_NAME,
    EMAIL,
    PASSWORD,
    NICKNAME,
    COUNTRY,
)

FIELD_COLUMNS: Mapping[str, str] = MappingProxyType({
    "userID": USER_ID,
    "firstName": FIRST_NAME,
    "lastName": LAST_NAME,
    "emailAddress": EMAIL,
    "password": PASSWORD,
    "nickname": NICKNAME,
    "country": COUNTRY,
})

COLUMN_FIELDS: Mapping[str, str] = MappingProxyType({v: k for k, v in FIELD_COLUMNS.items()})

# Fields accepted as search criteria, in table order; passwords are never searchable.
SEARCH_FIELD_ORDER: tuple[str, ...] = tuple(COLUMN_FIELDS[c] for c in COLUMNS if c != PASSWORD)
SEARCH_FIELDS = frozenset(SEARCH_FIELD_ORDER)

# Identity fields cannot change after creation.
IMMUTABLE_FIELDS = frozenset({"userID", "emailAddress"})
UPDATE_FIELDS = frozenset(FIELD_COLUMNS) - IMMUTABLE_FIELDS


def to_column(name: str, allowed: frozenset[str] | None = None) -> Optional[str]:
    """
    Return the column for an external field name, or None if unrecognized.

    ``allowed`` narrows the recognized names (e.g. SEARCH_FIELDS).
    """
    if allowed is not None and name not in allowed:
        logger.warning("supplied field %s is invalid", name)
        return None
    column = FIELD_COLUMNS.get(name)
    if column is None:
        logger.warning("supplied field %s is invalid", name)
    return column


def map_fields(
    data: Mapping[str, str],
    allowed: frozenset[str] | None = None,
    *,
    skip_empty: bool = False,
) -> dict[str, str]:
    """
    Translate a mapping of external names to a column selector.

    Unrecognized names are logged and dropped. With ``skip_empty`` an empty
    string value means "not supplied" and is dropped as well.
    """
    selector: dict[str, str] = {}
    for name, value in data.items():
        if skip_empty and (value is None or value == ""):
            continue
        column = to_column(name, allowed)
        if column is not None:
            selector[column] = value
    return selector
