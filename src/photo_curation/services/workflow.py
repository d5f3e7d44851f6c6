"""Workflow state machine for curating uploaded photos."""

import asyncio
import io
import logging
import weakref
from dataclasses import dataclass, field
from datetime import UTC, datetime
from uuid import uuid4

from PIL import Image, UnidentifiedImageError

from photo_curation.domain.errors import (
    GenerationFailed,
    InvalidImageFormat,
    InvalidRequest,
    NotFound,
)
from photo_curation.domain.photos import (
    Approval,
    Photo,
    PhotoStatus,
    Publication,
    Variation,
)
from photo_curation.domain.workflow import Preview
from photo_curation.services.blobs import BlobStore
from photo_curation.services.captions import CaptionService
from photo_curation.services.publishing import Publisher
from photo_curation.services.records import (
    APPROVALS,
    PHOTOS,
    VARIATIONS,
    RecordStore,
    approval_to_record,
    owned_by,
    photo_from_record,
    photo_to_record,
    variation_from_record,
)
from photo_curation.services.variations import VariationGenerator, encode_jpeg

ORIGINAL_JPEG_QUALITY = 95
DEFAULT_PREVIEW_INTENSITY = 3
DEFAULT_PUBLISH_CAPTION = "Beautiful photo shared! ✨"

_logger = logging.getLogger(__name__)


@dataclass
class WorkflowService:
    """Drives photos through pending, variations_ready, approved and published."""

    record_store: RecordStore
    blob_store: BlobStore
    generator: VariationGenerator
    caption_service: CaptionService
    publisher: Publisher
    original_quality: int = ORIGINAL_JPEG_QUALITY
    _generation_locks: weakref.WeakValueDictionary[str, asyncio.Lock] = field(
        default_factory=weakref.WeakValueDictionary, init=False, repr=False
    )
    _status_locks: weakref.WeakValueDictionary[str, asyncio.Lock] = field(
        default_factory=weakref.WeakValueDictionary, init=False, repr=False
    )
    _tasks: set[asyncio.Task[None]] = field(
        default_factory=set, init=False, repr=False
    )

    async def upload(self, image_bytes: bytes) -> Photo:
        """Store a JPEG original as a pending photo and start generation."""
        if not image_bytes:
            raise InvalidRequest("No file provided")
        original = await asyncio.to_thread(
            _normalize_original, image_bytes, self.original_quality
        )
        photo_id = str(uuid4())
        source_ref = f"{photo_id}-original.jpg"
        await asyncio.to_thread(self.blob_store.put, source_ref, original)
        photo = Photo(
            id=photo_id,
            source_ref=source_ref,
            status=PhotoStatus.PENDING,
            created_at=datetime.now(tz=UTC),
        )
        self.record_store.put(PHOTOS, photo_to_record(photo))
        _logger.info("Photo uploaded: photo_id=%s bytes=%s", photo_id, len(original))

        task = asyncio.create_task(self._generate_after_upload(photo_id))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return photo

    async def regenerate(self, photo_id: str) -> list[Variation]:
        """Replace a photo's variations with a freshly generated set."""
        photo = self._require_photo(photo_id)
        async with self._generation_lock(photo_id):
            source = await asyncio.to_thread(self.blob_store.get, photo.source_ref)
            if source is None:
                raise NotFound("Original file not found")
            variations = await self._replace_variations(photo_id, source)
            await self._advance_status(photo_id, PhotoStatus.VARIATIONS_READY)
        return variations

    async def approve(
        self,
        photo_id: str | None,
        variation_id: str | None,
        feedback: str | None = None,
    ) -> tuple[Approval, Photo]:
        """Record an approval and move the photo to approved."""
        if not photo_id or not variation_id:
            raise InvalidRequest("photoId and variationId are required")
        self._require_photo(photo_id)
        record = self.record_store.get(VARIATIONS, variation_id)
        if record is None or record.get("photoId") != photo_id:
            raise NotFound("Variation not found for this photo")

        approval = Approval(
            id=str(uuid4()),
            photo_id=photo_id,
            variation_id=variation_id,
            feedback=feedback or "",
            approved_at=datetime.now(tz=UTC),
        )
        self.record_store.put(APPROVALS, approval_to_record(approval))
        photo = await self._advance_status(photo_id, PhotoStatus.APPROVED)
        _logger.info(
            "Variation approved: photo_id=%s variation_id=%s", photo_id, variation_id
        )
        return approval, photo

    async def preview(self, photo_id: str, variation_id: str | None = None) -> Preview:
        """Select a variation and caption it without changing state."""
        photo = self._require_photo(photo_id)
        variations = [
            variation_from_record(record)
            for record in self.record_store.list(VARIATIONS, owned_by(photo_id))
        ]
        selected = _select_variation(variations, variation_id)
        if selected is None:
            raise NotFound("No variations found for this photo")
        caption = await self.caption_service.caption_for(selected.image_ref)
        return Preview(photo=photo, variation=selected, caption=caption)

    async def publish(
        self, photo_id: str | None, caption: str | None = None
    ) -> Publication:
        """Publish a photo and mark it published."""
        if not photo_id:
            raise InvalidRequest("photoId is required")
        self._require_photo(photo_id)
        publication = await self.publisher.publish(
            photo_id, caption or DEFAULT_PUBLISH_CAPTION
        )
        await self._advance_status(photo_id, PhotoStatus.PUBLISHED)
        return publication

    async def wait_for_generations(self) -> None:
        """Wait for background generations started by uploads."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    async def _generate_after_upload(self, photo_id: str) -> None:
        async with self._generation_lock(photo_id):
            photo = self._find_photo(photo_id)
            if photo is None:
                _logger.error("Photo vanished before generation: photo_id=%s", photo_id)
                return
            if photo.status.rank >= PhotoStatus.VARIATIONS_READY.rank:
                _logger.info(
                    "Variations already generated, skipping: photo_id=%s", photo_id
                )
                return
            source = await asyncio.to_thread(self.blob_store.get, photo.source_ref)
            if source is None:
                _logger.error("Original missing for generation: photo_id=%s", photo_id)
                return
            try:
                await self._replace_variations(photo_id, source)
            except GenerationFailed:
                _logger.exception(
                    "Error generating variations, photo stays pending: photo_id=%s",
                    photo_id,
                )
                return
            await self._advance_status(photo_id, PhotoStatus.VARIATIONS_READY)

    async def _replace_variations(
        self, photo_id: str, source: bytes
    ) -> list[Variation]:
        """Generate a new set, then drop the previous one.

        A failed batch is removed again so the previous set (or none, for a
        fresh upload) stays the only one visible.
        """
        previous = [
            variation_from_record(record)
            for record in self.record_store.list(VARIATIONS, owned_by(photo_id))
        ]
        previous_ids = {variation.id for variation in previous}
        try:
            variations = await self.generator.generate_variations(photo_id, source)
        except GenerationFailed:
            partial = [
                variation_from_record(record)
                for record in self.record_store.list(VARIATIONS, owned_by(photo_id))
                if record["id"] not in previous_ids
            ]
            await self._discard_variations(partial)
            raise
        await self._discard_variations(previous)
        return variations

    async def _discard_variations(self, variations: list[Variation]) -> None:
        for variation in variations:
            self.record_store.delete(VARIATIONS, variation.id)
            if not await asyncio.to_thread(self.blob_store.delete, variation.image_ref):
                _logger.info("Variation image already gone: %s", variation.image_ref)

    async def _advance_status(self, photo_id: str, target: PhotoStatus) -> Photo:
        """Move a photo forward to the target status; never moves it back."""
        async with self._status_lock(photo_id):
            photo = self._require_photo(photo_id)
            if target.rank <= photo.status.rank:
                return photo
            updated = Photo(
                id=photo.id,
                source_ref=photo.source_ref,
                status=target,
                created_at=photo.created_at,
            )
            self.record_store.put(PHOTOS, photo_to_record(updated))
            _logger.info(
                "Photo status changed: photo_id=%s %s -> %s",
                photo_id,
                photo.status.value,
                target.value,
            )
            return updated

    def _find_photo(self, photo_id: str) -> Photo | None:
        record = self.record_store.get(PHOTOS, photo_id)
        return photo_from_record(record) if record is not None else None

    def _require_photo(self, photo_id: str) -> Photo:
        photo = self._find_photo(photo_id)
        if photo is None:
            raise NotFound("Photo not found")
        return photo

    def _generation_lock(self, photo_id: str) -> asyncio.Lock:
        return _lock_for(self._generation_locks, photo_id)

    def _status_lock(self, photo_id: str) -> asyncio.Lock:
        return _lock_for(self._status_locks, photo_id)


def _lock_for(
    locks: weakref.WeakValueDictionary[str, asyncio.Lock], photo_id: str
) -> asyncio.Lock:
    """Return the photo's lock; entries vanish once no holder or waiter remains."""
    lock = locks.get(photo_id)
    if lock is None:
        lock = asyncio.Lock()
        locks[photo_id] = lock
    return lock


def _normalize_original(image_bytes: bytes, quality: int) -> bytes:
    """Validate that bytes are a JPEG and re-encode them for storage."""
    try:
        with Image.open(io.BytesIO(image_bytes)) as image:
            if image.format != "JPEG":
                raise InvalidImageFormat("Only JPG files are allowed")
            rgb = image.convert("RGB")
    except (UnidentifiedImageError, OSError) as exc:
        raise InvalidImageFormat("Only JPG files are allowed") from exc
    return encode_jpeg(rgb, quality)


def _select_variation(
    variations: list[Variation], variation_id: str | None
) -> Variation | None:
    """Pick the requested variation, else Medium, else the first stored."""
    if variation_id:
        for variation in variations:
            if variation.id == variation_id:
                return variation
    for variation in variations:
        if variation.intensity == DEFAULT_PREVIEW_INTENSITY:
            return variation
    return variations[0] if variations else None
