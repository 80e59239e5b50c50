"""Tests for DocumentSync (point read, record-scoped events, mutations)."""

import pytest

from schoolsync.application.sync.document_sync import DocumentSync, split_path
from schoolsync.domain.enums import OperationKind
from schoolsync.infrastructure.store.client import StoreConnection
from schoolsync.infrastructure.store.memory import InMemoryStore
from schoolsync.infrastructure.store.types import ChangeEvent, ChangeKind


async def _open(store: InMemoryStore, error_channel, path: str) -> DocumentSync:
    doc = DocumentSync(StoreConnection.for_store(store), error_channel, path)
    await doc.open()
    return doc


def test_split_path() -> None:
    assert split_path("students/s1") == ("students", "s1")
    assert split_path("students/") == ("students", None)
    assert split_path("students") == ("students", None)


class TestRead:
    @pytest.mark.asyncio
    async def test_reads_and_normalizes_record(self, error_channel) -> None:
        store = InMemoryStore({"students": [{"id": "s1", "first_name": "Ravi"}]})
        doc = await _open(store, error_channel, "students/s1")

        assert doc.state.data == {"id": "s1", "firstName": "Ravi"}
        assert doc.state.loading is False

    @pytest.mark.asyncio
    async def test_not_found_is_success_without_events(self, error_channel, published) -> None:
        doc = await _open(InMemoryStore(), error_channel, "students/missing")

        assert doc.data is None
        assert doc.loading is False
        assert published == []
        assert doc.is_open

    @pytest.mark.asyncio
    async def test_read_denied_publishes_get_event(self, error_channel, published) -> None:
        store = InMemoryStore({"students": [{"id": "s1"}]})
        store.deny("students", OperationKind.GET)
        doc = await _open(store, error_channel, "students/s1")

        assert doc.data is None
        assert doc.loading is False
        assert [(e.resource_path, e.operation) for e in published] == [
            ("students/s1", OperationKind.GET)
        ]
        assert store.subscription_count == 0

    @pytest.mark.asyncio
    async def test_missing_id_does_not_subscribe(self, store, error_channel) -> None:
        doc = await _open(store, error_channel, "students/")
        assert doc.loading is True
        assert store.subscription_count == 0


class TestLiveEvents:
    @pytest.mark.asyncio
    async def test_update_event_replaces_data(self, error_channel) -> None:
        store = InMemoryStore({"students": [{"id": "s1", "grade": 4}]})
        doc = await _open(store, error_channel, "students/s1")

        await store.update("students", "s1", {"grade": 5})

        assert doc.data == {"id": "s1", "grade": 5}

    @pytest.mark.asyncio
    async def test_other_records_do_not_leak_in(self, error_channel) -> None:
        store = InMemoryStore({"students": [{"id": "s1"}, {"id": "s2"}]})
        doc = await _open(store, error_channel, "students/s1")

        await store.update("students", "s2", {"grade": 9})
        store.broadcast(ChangeEvent(ChangeKind.UPDATE.value, "students", new={"id": "s2"}))

        assert doc.data == {"id": "s1"}

    @pytest.mark.asyncio
    async def test_insert_after_not_found_populates(self, error_channel) -> None:
        store = InMemoryStore()
        doc = await _open(store, error_channel, "hostels/h1")

        await store.insert("hostels", {"id": "h1", "room_count": 20})

        assert doc.data == {"id": "h1", "roomCount": 20}

    @pytest.mark.asyncio
    async def test_delete_event_clears_data(self, error_channel) -> None:
        store = InMemoryStore({"students": [{"id": "s1"}]})
        doc = await _open(store, error_channel, "students/s1")

        await store.delete("students", "s1")

        assert doc.data is None
        assert doc.loading is False


class TestMutations:
    @pytest.mark.asyncio
    async def test_update_sends_wire_format_and_waits_for_event(self, error_channel) -> None:
        store = InMemoryStore({"fees": [{"id": "f1", "amount_paid": 0}]})
        doc = await _open(store, error_channel, "fees/f1")

        await doc.update({"amountPaid": 250})

        assert await store.get("fees", "f1") == {"id": "f1", "amount_paid": 250}
        assert doc.data == {"id": "f1", "amountPaid": 250}

    @pytest.mark.asyncio
    async def test_update_is_not_optimistic(self, error_channel, published) -> None:
        store = InMemoryStore({"fees": [{"id": "f1", "amount_paid": 0}]})
        doc = await _open(store, error_channel, "fees/f1")
        store.deny("fees", OperationKind.UPDATE)

        await doc.update({"amountPaid": 250})

        assert doc.data == {"id": "f1", "amountPaid": 0}
        assert published[0].operation is OperationKind.UPDATE
        assert published[0].resource_path == "fees/f1"
        assert published[0].request_resource_data == {"amountPaid": 250}

    @pytest.mark.asyncio
    async def test_set_upserts_with_path_id(self, error_channel) -> None:
        store = InMemoryStore()
        doc = await _open(store, error_channel, "hostel_rooms/r1")

        await doc.set({"roomNumber": "101", "capacity": 2})

        assert await store.get("hostel_rooms", "r1") == {
            "room_number": "101",
            "capacity": 2,
            "id": "r1",
        }
        assert doc.data == {"roomNumber": "101", "capacity": 2, "id": "r1"}

    @pytest.mark.asyncio
    async def test_set_denied_publishes_create(self, error_channel, published) -> None:
        store = InMemoryStore()
        store.deny("hostel_rooms", OperationKind.CREATE)
        doc = await _open(store, error_channel, "hostel_rooms/r1")

        await doc.set({"roomNumber": "101"})

        assert published[0].operation is OperationKind.CREATE
        assert published[0].request_resource_data == {"roomNumber": "101"}
        assert doc.data is None

    @pytest.mark.asyncio
    async def test_delete_denied_publishes_delete(self, error_channel, published) -> None:
        store = InMemoryStore({"notices": [{"id": "n1"}]})
        store.deny("notices", OperationKind.DELETE)
        doc = await _open(store, error_channel, "notices/n1")

        await doc.delete()

        assert published[0].operation is OperationKind.DELETE
        assert doc.data == {"id": "n1"}

    @pytest.mark.asyncio
    async def test_mutations_without_id_or_connection_are_no_ops(
        self, store, error_channel, published
    ) -> None:
        no_id = DocumentSync(StoreConnection.for_store(store), error_channel, "fees/")
        await no_id.update({"amountPaid": 1})
        await no_id.set({"amountPaid": 1})
        await no_id.delete()

        def broken(_settings):
            raise ValueError("no config")

        no_conn = DocumentSync(StoreConnection(factory=broken), error_channel, "fees/f1")
        await no_conn.update({"amountPaid": 1})
        await no_conn.set({"amountPaid": 1})

        assert published == []
        assert await store.query("fees") == []


class TestRetarget:
    @pytest.mark.asyncio
    async def test_retarget_switches_record(self, error_channel) -> None:
        store = InMemoryStore({"students": [{"id": "s1"}, {"id": "s2", "name": "B"}]})
        doc = await _open(store, error_channel, "students/s1")

        await doc.retarget("students/s2")
        await store.update("students", "s1", {"name": "A"})

        assert doc.record_id == "s2"
        assert doc.data == {"id": "s2", "name": "B"}
        assert store.subscription_count == 1
