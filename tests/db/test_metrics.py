from __future__ import annotations

from usersrw.db.metrics import observe_store_op
from usersrw.db.models import Status, UserRecord, derive_user_id
from usersrw.db.store import RecordStore
from usersrw.metrics.registry import STORE_OPERATION_LATENCY_SECONDS, STORE_OPERATIONS_TOTAL


def _count(operation: str, status: str) -> float:
    return STORE_OPERATIONS_TOTAL.labels(operation=operation, status=status)._value.get()


class TestObserveStoreOp:
    def test_increments_counter_with_labels(self) -> None:
        initial = _count("create", "created")

        observe_store_op("create", "created", 0.01)

        assert _count("create", "created") == initial + 1

    def test_records_latency_in_histogram(self) -> None:
        observe_store_op("delete", "deleted", 0.25)

        samples = list(STORE_OPERATION_LATENCY_SECONDS.labels(operation="delete").collect())
        assert len(samples) > 0


class TestStoreOperationsAreObserved:
    def test_create_and_duplicate_are_counted_by_status(self, store: RecordStore) -> None:
        email = "metrics@example.com"
        user = UserRecord(userID=derive_user_id(email), emailAddress=email)
        created = _count("create", Status.CREATED.value)
        exists = _count("create", Status.ALREADY_EXISTS.value)

        store.create_record(user)
        store.create_record(user)

        assert _count("create", Status.CREATED.value) == created + 1
        assert _count("create", Status.ALREADY_EXISTS.value) == exists + 1

    def test_retrieve_status_is_taken_from_result_tuple(self, store: RecordStore) -> None:
        initial = _count("retrieve", Status.NOT_FOUND.value)

        store.retrieve_records({"country": "Nowhere"})

        assert _count("retrieve", Status.NOT_FOUND.value) == initial + 1
