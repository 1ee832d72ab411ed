from __future__ import annotations

from typing import Any, ContextManager, Mapping

from sqlalchemy import text
from sqlalchemy.engine import Connection, CursorResult, Engine
from sqlalchemy.sql import TextClause

Statement = str | TextClause


class DbSession:
    """
    Scope of a single users-table operation.

    RecordStore opens one session per create, update, retrieve or delete call.
    The session borrows a pooled connection inside ``Engine.begin()``, so a
    clean exit commits and an exception (including the store's own
    "more than one row matched" guard) rolls the write back before the
    connection returns to the pool.

        with DbSession(engine) as session:
            rows = session.execute("DELETE FROM Users WHERE user_id = :id_value", {"id_value": uid})
    """

    def __init__(self, engine: Engine) -> None:
        self.engine = engine
        self._scope: ContextManager[Connection] | None = None
        self._conn: Connection | None = None

    def __enter__(self) -> "DbSession":
        if self._scope is not None:
            raise RuntimeError("DbSession is already open; one operation per session")
        self._scope = self.engine.begin()
        self._conn = self._scope.__enter__()
        return self

    def __exit__(self, exc_type, exc, tb) -> bool:
        scope = self._scope
        self._scope = None
        self._conn = None
        if scope is not None:
            scope.__exit__(exc_type, exc, tb)
        return False

    def _run(self, sql: Statement, params: Mapping[str, Any] | None = None) -> CursorResult:
        if self._conn is None:
            raise RuntimeError("DbSession is not open; use it as a context manager")
        stmt = text(sql) if isinstance(sql, str) else sql
        return self._conn.execute(stmt, dict(params or {}))

    def execute(self, sql: Statement, params: Mapping[str, Any] | None = None) -> int:
        """
        Run an INSERT, UPDATE or DELETE and return how many user rows it touched.

        The store relies on this count to tell NOT_FOUND from UPDATED or
        DELETED, so a driver that cannot report it is an error.

        Raises:
            RuntimeError: If the driver reports no row count
        """
        result = self._run(sql, params)
        if result.rowcount is None or result.rowcount < 0:
            raise RuntimeError(f"driver reported no row count ({result.rowcount!r})")
        return int(result.rowcount)

    def execute_scalar(self, sql: Statement, params: Mapping[str, Any] | None = None) -> Any:
        # used by the liveness check
        return self._run(sql, params).scalar_one_or_none()

    def execute_ddl(self, sql: Statement) -> None:
        self._run(sql)

    def fetch_all(self, sql: Statement, params: Mapping[str, Any] | None = None) -> list[dict[str, Any]]:
        """Rows keyed by column name, as RecordStore turns them into UserRecords."""
        return [dict(row) for row in self._run(sql, params).mappings()]
