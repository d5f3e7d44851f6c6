"""Publishing of approved photos."""

import logging
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Protocol
from uuid import uuid4

from photo_curation.domain.photos import Publication

_logger = logging.getLogger(__name__)


class Publisher(Protocol):
    """Interface for publishing a photo to a social network."""

    async def publish(self, photo_id: str, caption: str) -> Publication:
        """Publish a photo and return the publication record."""


@dataclass
class MockPublisher(Publisher):
    """Publisher that always succeeds without calling a real network."""

    post_id_prefix: str = "mock-ig-"

    async def publish(self, photo_id: str, caption: str) -> Publication:
        """Return a publication with a generated external post id."""
        publication = Publication(
            id=str(uuid4()),
            photo_id=photo_id,
            caption=caption,
            external_post_id=f"{self.post_id_prefix}{uuid4()}",
            published_at=datetime.now(tz=UTC),
        )
        _logger.info(
            "Published photo (mocked): photo_id=%s external_post_id=%s",
            photo_id,
            publication.external_post_id,
        )
        return publication
