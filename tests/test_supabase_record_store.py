"""Tests for the Supabase record store adapter."""

from dataclasses import dataclass, field

import pytest

from photo_curation.adapters.supabase_record_store import SupabaseRecordStore
from photo_curation.services.records import PHOTOS, VARIATIONS, owned_by


@dataclass
class FakeResponse:
    data: list[dict[str, object]] | None


@dataclass
class FakeTable:
    name: str
    response_queue: dict[str, list[list[dict[str, object]]]] = field(
        default_factory=lambda: {"select": [], "upsert": [], "delete": []}
    )
    last_payload: object | None = None
    last_conflict: str | None = None
    last_filters: list[tuple[str, object]] = field(default_factory=list)
    last_order: str | None = None

    def queue(self, action: str, data: list[dict[str, object]]) -> None:
        self.response_queue[action].append(data)

    def select(self, *_args) -> "FakeTable":
        self._action = "select"
        return self

    def upsert(self, payload, on_conflict: str = "") -> "FakeTable":  # type: ignore
        self._action = "upsert"
        self.last_payload = payload
        self.last_conflict = on_conflict
        return self

    def delete(self) -> "FakeTable":
        self._action = "delete"
        return self

    def eq(self, column: str, value) -> "FakeTable":  # type: ignore[no-untyped-def]
        self.last_filters.append((column, value))
        return self

    def limit(self, _count: int) -> "FakeTable":
        return self

    def order(self, column: str, desc: bool = False) -> "FakeTable":
        self.last_order = column
        return self

    def execute(self) -> FakeResponse:
        action = getattr(self, "_action", "select")
        queue = self.response_queue.get(action, [])
        data = queue.pop(0) if queue else []
        return FakeResponse(data=data)


@dataclass
class FakeSupabaseClient:
    tables: dict[str, FakeTable] = field(default_factory=dict)

    def table(self, name: str) -> FakeTable:
        if name not in self.tables:
            self.tables[name] = FakeTable(name=name)
        return self.tables[name]


def test_supabase_record_store_get() -> None:
    client = FakeSupabaseClient()
    photos = client.table(PHOTOS)
    photos.queue("select", [{"id": "p1", "data": {"status": "pending"}}])

    store = SupabaseRecordStore(client)
    record = store.get(PHOTOS, "p1")

    assert record == {"id": "p1", "status": "pending"}
    assert photos.last_filters == [("id", "p1")]
    assert store.get(PHOTOS, "p2") is None


def test_supabase_record_store_put_upserts_by_id() -> None:
    client = FakeSupabaseClient()
    photos = client.table(PHOTOS)
    photos.queue("upsert", [{"id": "p1"}])

    SupabaseRecordStore(client).put(PHOTOS, {"id": "p1", "status": "approved"})

    assert photos.last_payload == {
        "id": "p1",
        "data": {"id": "p1", "status": "approved"},
    }
    assert photos.last_conflict == "id"


def test_supabase_record_store_put_raises_without_data() -> None:
    client = FakeSupabaseClient()

    with pytest.raises(RuntimeError):
        SupabaseRecordStore(client).put(PHOTOS, {"id": "p1"})


def test_supabase_record_store_list_filters_in_order() -> None:
    client = FakeSupabaseClient()
    variations = client.table(VARIATIONS)
    variations.queue(
        "select",
        [
            {"id": "v1", "data": {"photoId": "p1"}},
            {"id": "v2", "data": {"photoId": "p2"}},
            {"id": "v3", "data": None},
        ],
    )

    records = SupabaseRecordStore(client).list(VARIATIONS, owned_by("p1"))

    assert records == [{"id": "v1", "photoId": "p1"}]
    assert variations.last_order == "inserted_at"


def test_supabase_record_store_delete() -> None:
    client = FakeSupabaseClient()
    variations = client.table(VARIATIONS)

    SupabaseRecordStore(client).delete(VARIATIONS, "v1")

    assert variations.last_filters == [("id", "v1")]
