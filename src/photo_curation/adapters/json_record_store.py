"""JSON-file-backed record store."""

import json
import logging
import os
import threading
from dataclasses import dataclass, field
from pathlib import Path

from photo_curation.services.records import (
    COLLECTIONS,
    Predicate,
    Record,
    Records,
    RecordStore,
)

_logger = logging.getLogger(__name__)


@dataclass
class JsonFileRecordStore(RecordStore):
    """Keeps each collection as a JSON array in `<data_dir>/<collection>.json`."""

    data_dir: Path
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False)

    @classmethod
    def create(cls, data_dir: str) -> "JsonFileRecordStore":
        """Create a store, initializing empty collection files."""
        store = cls(data_dir=Path(data_dir))
        store.data_dir.mkdir(parents=True, exist_ok=True)
        for collection in COLLECTIONS:
            if not store._path(collection).exists():
                store._write(collection, [])
        return store

    def get(self, collection: str, record_id: str) -> Record | None:
        """Return a record by id, if present."""
        with self._lock:
            for record in self._read(collection):
                if record.get("id") == record_id:
                    return record
        return None

    def list(self, collection: str, predicate: Predicate | None = None) -> Records:
        """Return records in file order, optionally filtered."""
        with self._lock:
            records = self._read(collection)
        if predicate is None:
            return records
        return [record for record in records if predicate(record)]

    def put(self, collection: str, record: Record) -> None:
        """Replace the record with the same id in place, or append it."""
        with self._lock:
            records = self._read(collection)
            for index, existing in enumerate(records):
                if existing.get("id") == record["id"]:
                    records[index] = record
                    break
            else:
                records.append(record)
            self._write(collection, records)

    def delete(self, collection: str, record_id: str) -> None:
        """Drop a record if present."""
        with self._lock:
            records = self._read(collection)
            remaining = [record for record in records if record.get("id") != record_id]
            if len(remaining) != len(records):
                self._write(collection, remaining)

    def _path(self, collection: str) -> Path:
        return self.data_dir / f"{collection}.json"

    def _read(self, collection: str) -> Records:
        path = self._path(collection)
        try:
            payload = json.loads(path.read_text(encoding="utf-8"))
        except FileNotFoundError:
            return []
        except (OSError, ValueError):
            _logger.warning("Unreadable collection file, treating as empty: %s", path)
            return []
        return payload if isinstance(payload, list) else []

    def _write(self, collection: str, records: Records) -> None:
        path = self._path(collection)
        tmp_path = path.with_suffix(".json.tmp")
        tmp_path.write_text(json.dumps(records, indent=2), encoding="utf-8")
        os.replace(tmp_path, path)
