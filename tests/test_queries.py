"""Tests for dashboard queries."""

from datetime import UTC, datetime, timedelta

from photo_curation.domain.photos import Approval, Photo, PhotoStatus, Variation
from photo_curation.services.queries import QueryService
from photo_curation.services.records import (
    APPROVALS,
    PHOTOS,
    VARIATIONS,
    InMemoryRecordStore,
    approval_to_record,
    photo_to_record,
    variation_to_record,
)

_NOW = datetime(2024, 5, 1, 12, 0, tzinfo=UTC)


def _add_photo(
    store: InMemoryRecordStore, photo_id: str, status: PhotoStatus, minutes: int
) -> None:
    photo = Photo(
        id=photo_id,
        source_ref=f"{photo_id}-original.jpg",
        status=status,
        created_at=_NOW + timedelta(minutes=minutes),
    )
    store.put(PHOTOS, photo_to_record(photo))


def _add_variation(store: InMemoryRecordStore, photo_id: str, intensity: int) -> None:
    variation = Variation(
        id=f"{photo_id}-{intensity}",
        photo_id=photo_id,
        intensity=intensity,
        label=str(intensity),
        image_ref=f"{photo_id}-var-{intensity}.jpg",
    )
    store.put(VARIATIONS, variation_to_record(variation))


def test_pending_approvals_filters_and_orders(
    record_store: InMemoryRecordStore, query_service: QueryService
) -> None:
    _add_photo(record_store, "late", PhotoStatus.VARIATIONS_READY, minutes=5)
    _add_photo(record_store, "pending", PhotoStatus.PENDING, minutes=0)
    _add_photo(record_store, "early", PhotoStatus.VARIATIONS_READY, minutes=1)
    _add_photo(record_store, "approved", PhotoStatus.APPROVED, minutes=2)
    _add_photo(record_store, "published", PhotoStatus.PUBLISHED, minutes=3)
    for intensity in (4, 1, 3):
        _add_variation(record_store, "early", intensity)
    _add_variation(record_store, "approved", 2)

    pending = query_service.pending_approvals()

    assert [entry.photo.id for entry in pending] == ["early", "late"]
    assert [variation.intensity for variation in pending[0].variations] == [1, 3, 4]
    assert pending[1].variations == []


def test_pending_approvals_empty(query_service: QueryService) -> None:
    assert query_service.pending_approvals() == []


def test_get_photo(
    record_store: InMemoryRecordStore, query_service: QueryService
) -> None:
    _add_photo(record_store, "p1", PhotoStatus.APPROVED, minutes=0)

    photo = query_service.get_photo("p1")

    assert photo is not None
    assert photo.status is PhotoStatus.APPROVED
    assert photo.created_at == _NOW
    assert query_service.get_photo("missing") is None


def test_approvals_for_keeps_recorded_order(
    record_store: InMemoryRecordStore, query_service: QueryService
) -> None:
    for index, photo_id in enumerate(["p1", "p2", "p1"]):
        approval = Approval(
            id=f"a{index}",
            photo_id=photo_id,
            variation_id=f"v{index}",
            feedback="",
            approved_at=_NOW,
        )
        record_store.put(APPROVALS, approval_to_record(approval))

    approvals = query_service.approvals_for("p1")

    assert [approval.id for approval in approvals] == ["a0", "a2"]
