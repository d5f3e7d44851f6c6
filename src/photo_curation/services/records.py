"""Record store abstraction and record conversions."""

import copy
import threading
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime
from typing import Protocol

from photo_curation.domain.photos import (
    Approval,
    Photo,
    PhotoStatus,
    Variation,
)

PHOTOS = "photos"
VARIATIONS = "variations"
APPROVALS = "approvals"
COLLECTIONS = (PHOTOS, VARIATIONS, APPROVALS)

Record = dict[str, object]
Records = list[Record]
Predicate = Callable[[Record], bool]


class RecordStore(Protocol):
    """Generic CRUD over record collections keyed by id."""

    def get(self, collection: str, record_id: str) -> Record | None:
        """Return a record by id, if present."""

    def list(self, collection: str, predicate: Predicate | None = None) -> Records:
        """Return records in insertion order, optionally filtered."""

    def put(self, collection: str, record: Record) -> None:
        """Insert or replace a record by its id."""

    def delete(self, collection: str, record_id: str) -> None:
        """Delete a record by id; absent ids are ignored."""


@dataclass
class InMemoryRecordStore(RecordStore):
    """Process-local record store."""

    _collections: dict[str, dict[str, Record]] = field(default_factory=dict)
    _lock: threading.Lock = field(default_factory=threading.Lock)

    def get(self, collection: str, record_id: str) -> Record | None:
        """Return a copy of the stored record."""
        with self._lock:
            record = self._collections.get(collection, {}).get(record_id)
            return copy.deepcopy(record) if record is not None else None

    def list(self, collection: str, predicate: Predicate | None = None) -> Records:
        """Return copies of stored records in insertion order."""
        with self._lock:
            records = [
                copy.deepcopy(record)
                for record in self._collections.get(collection, {}).values()
            ]
        if predicate is None:
            return records
        return [record for record in records if predicate(record)]

    def put(self, collection: str, record: Record) -> None:
        """Upsert a record; updates keep the original position."""
        with self._lock:
            records = self._collections.setdefault(collection, {})
            records[str(record["id"])] = copy.deepcopy(record)

    def delete(self, collection: str, record_id: str) -> None:
        """Remove a record if present."""
        with self._lock:
            self._collections.get(collection, {}).pop(record_id, None)


def photo_to_record(photo: Photo) -> Record:
    return {
        "id": photo.id,
        "sourceRef": photo.source_ref,
        "status": photo.status.value,
        "createdAt": photo.created_at.isoformat(),
    }


def photo_from_record(record: Record) -> Photo:
    return Photo(
        id=str(record["id"]),
        source_ref=str(record["sourceRef"]),
        status=PhotoStatus(record["status"]),
        created_at=datetime.fromisoformat(str(record["createdAt"])),
    )


def variation_to_record(variation: Variation) -> Record:
    return {
        "id": variation.id,
        "photoId": variation.photo_id,
        "intensity": variation.intensity,
        "label": variation.label,
        "imageRef": variation.image_ref,
    }


def variation_from_record(record: Record) -> Variation:
    return Variation(
        id=str(record["id"]),
        photo_id=str(record["photoId"]),
        intensity=int(record["intensity"]),
        label=str(record["label"]),
        image_ref=str(record["imageRef"]),
    )


def approval_to_record(approval: Approval) -> Record:
    return {
        "id": approval.id,
        "photoId": approval.photo_id,
        "variationId": approval.variation_id,
        "feedback": approval.feedback,
        "approvedAt": approval.approved_at.isoformat(),
    }


def approval_from_record(record: Record) -> Approval:
    return Approval(
        id=str(record["id"]),
        photo_id=str(record["photoId"]),
        variation_id=str(record["variationId"]),
        feedback=str(record.get("feedback") or ""),
        approved_at=datetime.fromisoformat(str(record["approvedAt"])),
    )


def owned_by(photo_id: str) -> Predicate:
    """Predicate selecting records that reference a photo."""
    return lambda record: record.get("photoId") == photo_id
