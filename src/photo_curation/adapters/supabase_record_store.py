"""Supabase-backed record store."""

from dataclasses import dataclass

from supabase import Client

from photo_curation.services.records import (
    Predicate,
    Record,
    Records,
    RecordStore,
)


@dataclass
class SupabaseRecordStore(RecordStore):
    """Stores each collection in a table with `id`, `data` and `inserted_at` columns."""

    client: Client

    def get(self, collection: str, record_id: str) -> Record | None:
        """Return a record by id, if present."""
        response = (
            self.client.table(collection)
            .select("id, data")
            .eq("id", record_id)
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return _row_to_record(response.data[0])

    def list(self, collection: str, predicate: Predicate | None = None) -> Records:
        """Return records ordered by insertion time, optionally filtered."""
        response = (
            self.client.table(collection)
            .select("id, data")
            .order("inserted_at")
            .execute()
        )
        records = [_row_to_record(row) for row in response.data or []]
        if predicate is None:
            return records
        return [record for record in records if predicate(record)]

    def put(self, collection: str, record: Record) -> None:
        """Upsert a record row keyed by id."""
        response = (
            self.client.table(collection)
            .upsert({"id": str(record["id"]), "data": record}, on_conflict="id")
            .execute()
        )
        if not response.data:
            raise RuntimeError(f"Failed to store {collection} record {record['id']}")

    def delete(self, collection: str, record_id: str) -> None:
        """Delete a record row by id."""
        self.client.table(collection).delete().eq("id", record_id).execute()


def _row_to_record(row: dict[str, object]) -> Record:
    data = row.get("data")
    record = dict(data) if isinstance(data, dict) else {}
    record["id"] = row["id"]
    return record
