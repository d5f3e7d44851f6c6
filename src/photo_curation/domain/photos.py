"""Domain models for photos, variations and approvals."""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum


class PhotoStatus(str, Enum):
    """Lifecycle position of an uploaded photo."""

    PENDING = "pending"
    VARIATIONS_READY = "variations_ready"
    APPROVED = "approved"
    PUBLISHED = "published"

    @property
    def rank(self) -> int:
        """Position of the status along the workflow."""
        return _STATUS_ORDER.index(self)


_STATUS_ORDER = (
    PhotoStatus.PENDING,
    PhotoStatus.VARIATIONS_READY,
    PhotoStatus.APPROVED,
    PhotoStatus.PUBLISHED,
)


@dataclass(frozen=True)
class Photo:
    """Represents one uploaded source image."""

    id: str
    source_ref: str
    status: PhotoStatus
    created_at: datetime


@dataclass(frozen=True)
class Variation:
    """Derived image of a photo at one intensity level."""

    id: str
    photo_id: str
    intensity: int
    label: str
    image_ref: str


@dataclass(frozen=True)
class Approval:
    """Append-only acceptance of a variation."""

    id: str
    photo_id: str
    variation_id: str
    feedback: str
    approved_at: datetime


@dataclass(frozen=True)
class Publication:
    """Result of publishing a photo."""

    id: str
    photo_id: str
    caption: str
    external_post_id: str
    published_at: datetime
    status: str = "published"
