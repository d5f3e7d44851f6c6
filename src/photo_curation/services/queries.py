"""Read views over stored photos, variations and approvals."""

from dataclasses import dataclass

from photo_curation.domain.photos import Approval, Photo, PhotoStatus, Variation
from photo_curation.domain.workflow import PendingApproval
from photo_curation.services.records import (
    APPROVALS,
    PHOTOS,
    VARIATIONS,
    RecordStore,
    approval_from_record,
    owned_by,
    photo_from_record,
    variation_from_record,
)


@dataclass
class QueryService:
    """Side-effect free queries for the curation dashboard."""

    record_store: RecordStore

    def pending_approvals(self) -> list[PendingApproval]:
        """Return photos ready for review with their variations."""
        records = self.record_store.list(
            PHOTOS,
            lambda record: record.get("status") == PhotoStatus.VARIATIONS_READY.value,
        )
        photos = sorted(
            (photo_from_record(record) for record in records),
            key=lambda photo: photo.created_at,
        )
        return [
            PendingApproval(photo=photo, variations=self.variations_for(photo.id))
            for photo in photos
        ]

    def get_photo(self, photo_id: str) -> Photo | None:
        """Return a photo by id, if present."""
        record = self.record_store.get(PHOTOS, photo_id)
        return photo_from_record(record) if record is not None else None

    def variations_for(self, photo_id: str) -> list[Variation]:
        """Return a photo's variations ordered by intensity."""
        variations = [
            variation_from_record(record)
            for record in self.record_store.list(VARIATIONS, owned_by(photo_id))
        ]
        return sorted(variations, key=lambda variation: variation.intensity)

    def approvals_for(self, photo_id: str) -> list[Approval]:
        """Return a photo's approvals in the order they were recorded."""
        return [
            approval_from_record(record)
            for record in self.record_store.list(APPROVALS, owned_by(photo_id))
        ]
