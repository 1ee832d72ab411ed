from __future__ import annotations

import pytest

from usersrw.db.session import DbSession
from usersrw.db.store import RecordStore


def _insert(session: DbSession, table: str, user_id: str, email: str, nickname: str = "n") -> int:
    return session.execute(
        f"INSERT INTO {table} (user_id, email, nickname) VALUES (:user_id, :email, :nickname)",
        {"user_id": user_id, "email": email, "nickname": nickname},
    )


def test_transaction_commits_on_success(store: RecordStore) -> None:
    with DbSession(store.engine) as session:
        assert _insert(session, store.table, "u1", "a@b.com") == 1

    with DbSession(store.engine) as session2:
        rows = session2.fetch_all(f"SELECT user_id, email FROM {store.table}")
        assert rows == [{"user_id": "u1", "email": "a@b.com"}]


def test_transaction_rolls_back_on_exception(store: RecordStore) -> None:
    with pytest.raises(RuntimeError):
        with DbSession(store.engine) as session:
            _insert(session, store.table, "u1", "a@b.com")
            raise RuntimeError("boom")

    with DbSession(store.engine) as session2:
        assert session2.fetch_all(f"SELECT user_id FROM {store.table}") == []


def test_connection_is_closed_after_exit(store: RecordStore) -> None:
    with DbSession(store.engine) as session:
        conn = session._conn
        assert conn is not None

    assert conn.closed is True


def test_nested_usage_raises_runtime_error(store: RecordStore) -> None:
    with DbSession(store.engine) as session:
        with pytest.raises(RuntimeError):
            with session:
                pass


def test_use_outside_context_manager_raises(store: RecordStore) -> None:
    session = DbSession(store.engine)

    with pytest.raises(RuntimeError):
        session.fetch_all(f"SELECT user_id FROM {store.table}")


def test_execute_returns_rowcount_for_update_and_delete(store: RecordStore) -> None:
    with DbSession(store.engine) as session:
        _insert(session, store.table, "u1", "a@b.com")
        _insert(session, store.table, "u2", "c@d.com")

        assert session.execute(
            f"UPDATE {store.table} SET nickname = :nickname WHERE user_id = :id",
            {"id": "u1", "nickname": "changed"},
        ) == 1
        assert session.execute(f"DELETE FROM {store.table} WHERE user_id = :id", {"id": "missing"}) == 0
        assert session.execute(f"DELETE FROM {store.table}") == 2


def test_fetch_all_returns_dicts_keyed_by_column(store: RecordStore) -> None:
    with DbSession(store.engine) as session:
        _insert(session, store.table, "u1", "a@b.com", nickname="first")
        _insert(session, store.table, "u2", "c@d.com", nickname="second")
        rows = session.fetch_all(f"SELECT user_id, nickname FROM {store.table} ORDER BY user_id")

    assert rows == [
        {"user_id": "u1", "nickname": "first"},
        {"user_id": "u2", "nickname": "second"},
    ]


def test_execute_scalar_returns_scalar_value(store: RecordStore) -> None:
    with DbSession(store.engine) as session:
        assert session.execute_scalar("SELECT 123") == 123
        assert session.execute_scalar("SELECT NULL") is None


def test_session_reopens_after_exit(store: RecordStore) -> None:
    session = DbSession(store.engine)
    with session:
        _insert(session, store.table, "u1", "a@b.com")
    with session:
        assert session.execute_scalar(f"SELECT COUNT(*) FROM {store.table}") == 1
