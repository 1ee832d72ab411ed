from __future__ import annotations

import re
from typing import Any, Mapping

from .fields import COLUMNS

# MySQL ER_DUP_ENTRY
MYSQL_DUP_ENTRY = 1062
# SQLite extended result codes
SQLITE_CONSTRAINT_PRIMARYKEY = 1555
SQLITE_CONSTRAINT_UNIQUE = 2067
# PostgreSQL unique_violation
PG_UNIQUE_VIOLATION = "23505"


def _validate_identifier(name: str, identifier_type: str = "identifier") -> str:
    """
    Validate that an identifier (table/column name) is safe for SQL interpolation.

    Identifiers are interpolated into statement text, values never are.
    Identifiers MUST still come from trusted configuration, not from callers.

    Raises:
        TypeError: If identifier is not a string
        ValueError: If identifier contains unsafe characters or is invalid
    """
    if not isinstance(name, str):
        raise TypeError(f"{identifier_type} must be a string, got {type(name).__name__}")

    if not name:
        raise ValueError(f"{identifier_type} cannot be empty")

    if not re.match(r'^[a-zA-Z_][a-zA-Z0-9_]*$', name):
        raise ValueError(
            f"Invalid {identifier_type} {name!r}: "
            "must start with letter/underscore and contain only alphanumeric characters and underscores"
        )

    if len(name) > 64:
        raise ValueError(f"{identifier_type} {name!r} exceeds MySQL's 64-character limit")

    return name


def _validate_column(name: str) -> str:
    _validate_identifier(name, "column name")
    if name not in COLUMNS:
        raise ValueError(f"Unknown column {name!r}; expected one of {', '.join(COLUMNS)}")
    return name


def build_where(selector: Mapping[str, Any], prefix: str = "where") -> tuple[str, dict[str, Any]]:
    """
    Build a conjunctive equality predicate from a column selector.

    Returns the ``WHERE ...`` fragment and its bind parameters. An empty
    selector yields an empty fragment, i.e. an unconditional query; callers
    that treat "no criteria" as an error must reject it first.

    Example:
        >>> build_where({"country": "UK", "nickname": "J"})
        ('WHERE country = :where_country AND nickname = :where_nickname',
         {'where_country': 'UK', 'where_nickname': 'J'})
    """
    clauses = []
    params: dict[str, Any] = {}
    # sorted keys for deterministic SQL
    for col, val in sorted(selector.items()):
        col = _validate_column(col)
        param_name = f"{prefix}_{col}"
        clauses.append(f"{col} = :{param_name}")
        params[param_name] = val

    if not clauses:
        return "", params
    return "WHERE " + " AND ".join(clauses), params


def build_set(selector: Mapping[str, Any], prefix: str = "set") -> tuple[str, dict[str, Any]]:
    """
    Build an assignment list from a column selector.

    Returns the ``SET ...`` fragment and its bind parameters. Each column
    appears at most once.

    Raises:
        ValueError: If the selector is empty. An empty update is a caller
                    error and is never executed as a no-op.
    """
    if not selector:
        raise ValueError("update requires at least one column to set")

    assignments = []
    params: dict[str, Any] = {}
    for col, val in sorted(selector.items()):
        col = _validate_column(col)
        param_name = f"{prefix}_{col}"
        assignments.append(f"{col} = :{param_name}")
        params[param_name] = val

    return "SET " + ", ".join(assignments), params


def is_unique_violation(exc: BaseException) -> bool:
    """
    Classify a backend failure as a uniqueness violation or not.

    Only structured driver error codes are inspected, never message text.
    Accepts either a SQLAlchemy DBAPIError (its ``orig`` is unwrapped) or a
    raw driver exception. This is the single place that knows about
    backend-specific codes.
    """
    orig = getattr(exc, "orig", None) or exc

    # PyMySQL / mysqlclient: args[0] is the server error number
    args = getattr(orig, "args", ())
    if args and args[0] == MYSQL_DUP_ENTRY:
        return True

    # sqlite3 (Python 3.11+)
    if getattr(orig, "sqlite_errorcode", None) in (
        SQLITE_CONSTRAINT_UNIQUE,
        SQLITE_CONSTRAINT_PRIMARYKEY,
    ):
        return True

    # psycopg / asyncpg
    sqlstate = getattr(orig, "sqlstate", None) or getattr(orig, "pgcode", None)
    return sqlstate == PG_UNIQUE_VIOLATION
