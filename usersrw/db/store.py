from __future__ import annotations

import functools
import logging
import time
from typing import Any, Callable, Mapping

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from ..config import DEFAULT_TABLE, DbConfig
from .fields import COLUMN_FIELDS, COLUMNS, USER_ID
from .helpers import _validate_identifier, build_set, build_where, is_unique_violation
from .metrics import observe_store_op
from .models import Status, UserRecord
from .session import DbSession

logger = logging.getLogger(__name__)

# Failures that are reported as BACKEND_ERROR rather than raised.
# RuntimeError covers DbSession's row count checks.
BACKEND_FAILURES = (SQLAlchemyError, RuntimeError)


def _observed(operation: str) -> Callable:
    def decorator(fn: Callable) -> Callable:
        @functools.wraps(fn)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            start_time = time.monotonic()
            result = fn(*args, **kwargs)
            status = result[1] if isinstance(result, tuple) else result
            observe_store_op(operation, status.value, time.monotonic() - start_time)
            return result
        return wrapper
    return decorator


class RecordStore:
    """
    Record access layer for the users table.

    Every public operation runs in its own short DbSession on the shared,
    pooled engine and reports its outcome as a Status. Engine and driver
    exceptions never escape; the store holds no state besides the engine.

    Usage:
        store = RecordStore(create_engine(url, pool_pre_ping=True))
        store.ensure_schema()
        status = store.create_record(record)
    """

    def __init__(self, engine: Engine, table: str = DEFAULT_TABLE) -> None:
        self.engine = engine
        self.table = _validate_identifier(table, "table")

    @classmethod
    def from_config(cls, config: DbConfig, **engine_kwargs: Any) -> "RecordStore":
        engine_kwargs.setdefault("pool_pre_ping", True)
        engine = create_engine(config.url, **engine_kwargs)
        return cls(engine, table=config.table)

    def ensure_schema(self) -> None:
        """
        Create the users table if it does not exist.

        Runs once at startup; failures propagate so the service does not start
        against an unusable database.
        """
        ddl = (
            f"CREATE TABLE IF NOT EXISTS {self.table} ("
            "user_id VARCHAR(36) NOT NULL, "
            "first_name VARCHAR(50), "
            "last_name VARCHAR(50), "
            "email VARCHAR(150) NOT NULL, "
            "password VARCHAR(50), "
            "nickname VARCHAR(50), "
            "country VARCHAR(50), "
            "PRIMARY KEY (user_id), "
            "UNIQUE (email))"
        )
        try:
            with DbSession(self.engine) as session:
                session.execute_ddl(ddl)
        except SQLAlchemyError:
            logger.exception("error creating %s table", self.table)
            raise

    @_observed("create")
    def create_record(self, record: UserRecord) -> Status:
        """
        Insert one user row.

        ALREADY_EXISTS is returned for a duplicate key. The primary key is
        derived from the email, so a duplicate id and a duplicate email are
        the same conflict.
        """
        cols = ", ".join(COLUMNS)
        placeholders = ", ".join(f":{c}" for c in COLUMNS)
        sql = f"INSERT INTO {self.table} ({cols}) VALUES ({placeholders})"
        params = {col: getattr(record, COLUMN_FIELDS[col]) for col in COLUMNS}

        try:
            with DbSession(self.engine) as session:
                session.execute(sql, params)
        except IntegrityError as exc:
            if is_unique_violation(exc):
                logger.info(
                    "user %s with email %s already exists", record.userID, record.emailAddress
                )
                return Status.ALREADY_EXISTS
            logger.error("could not add user %s to db: %s", record.userID, exc)
            return Status.BACKEND_ERROR
        except BACKEND_FAILURES as exc:
            logger.error("could not add user %s to db: %s", record.userID, exc)
            return Status.BACKEND_ERROR

        logger.info("created record for user %s with email %s", record.userID, record.emailAddress)
        return Status.CREATED

    @_observed("update")
    def update_record(self, user_id: str, selector: Mapping[str, str]) -> Status:
        """
        Apply the selector's assignments to the row with ``user_id``.

        Raises:
            ValueError: If the selector is empty or names an unknown column.
                        Callers must reject empty updates before this point.
        """
        set_sql, params = build_set(selector)
        sql = f"UPDATE {self.table} {set_sql} WHERE {USER_ID} = :id_value"
        params["id_value"] = user_id

        try:
            with DbSession(self.engine) as session:
                rows = session.execute(sql, params)
                if rows > 1:
                    # raising inside the session rolls the update back
                    raise RuntimeError(f"update matched {rows} rows for a single user id")
        except BACKEND_FAILURES as exc:
            logger.error("could not update user %s: %s", user_id, exc)
            return Status.BACKEND_ERROR

        if rows == 0:
            logger.info("could not update user %s as they do not exist", user_id)
            return Status.NOT_FOUND

        logger.info("updated user %s fields: %s", user_id, ", ".join(sorted(selector)))
        return Status.UPDATED

    @_observed("retrieve")
    def retrieve_records(self, selector: Mapping[str, str]) -> tuple[list[UserRecord], Status]:
        """
        Return all users matching every entry of the selector.

        An empty selector matches every row. NULL columns are returned as
        empty strings. Order is whatever the backend returns.
        """
        where_sql, params = build_where(selector)
        cols = ", ".join(COLUMNS)
        sql = f"SELECT {cols} FROM {self.table} {where_sql}".rstrip()
        logger.debug("retrieve query is %s", sql)

        try:
            with DbSession(self.engine) as session:
                rows = session.fetch_all(sql, params)
        except BACKEND_FAILURES as exc:
            logger.error("failed to retrieve users: %s", exc)
            return [], Status.BACKEND_ERROR

        records = [_row_to_record(row) for row in rows]
        if not records:
            logger.info("found no users matching criteria on %s", ", ".join(sorted(selector)))
            return [], Status.NOT_FOUND

        logger.info("found %d users matching criteria", len(records))
        return records, Status.OK

    @_observed("delete")
    def delete_record(self, user_id: str) -> Status:
        sql = f"DELETE FROM {self.table} WHERE {USER_ID} = :id_value"

        try:
            with DbSession(self.engine) as session:
                rows = session.execute(sql, {"id_value": user_id})
                if rows > 1:
                    raise RuntimeError(f"delete matched {rows} rows for a single user id")
        except BACKEND_FAILURES as exc:
            logger.error("could not delete user %s from db: %s", user_id, exc)
            return Status.BACKEND_ERROR

        if rows == 0:
            logger.info("could not delete user %s from db as they do not exist", user_id)
            return Status.NOT_FOUND

        logger.info("user %s removed from db", user_id)
        return Status.DELETED

    def active_connection(self) -> bool:
        """Liveness probe: True iff a round trip to the database succeeds."""
        try:
            with DbSession(self.engine) as session:
                return session.execute_scalar("SELECT 1") == 1
        except SQLAlchemyError as exc:
            logger.error("could not connect to db: %s", exc)
            return False


def _row_to_record(row: Mapping[str, Any]) -> UserRecord:
    return UserRecord(**{
        COLUMN_FIELDS[col]: "" if row.get(col) is None else str(row[col])
        for col in COLUMNS
    })
