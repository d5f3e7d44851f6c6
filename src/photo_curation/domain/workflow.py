"""Read models returned by the workflow and query services."""

from dataclasses import dataclass

from photo_curation.domain.photos import Photo, Variation


@dataclass(frozen=True)
class PendingApproval:
    """Photo awaiting approval with its current variation set."""

    photo: Photo
    variations: list[Variation]


@dataclass(frozen=True)
class Preview:
    """Selected variation of a photo with a generated caption."""

    photo: Photo
    variation: Variation
    caption: str
