"""Variation generation from intensity presets."""

import asyncio
import io
import logging
from dataclasses import dataclass
from uuid import uuid4

from PIL import Image, ImageEnhance, UnidentifiedImageError

from photo_curation.domain.errors import GenerationFailed
from photo_curation.domain.photos import Variation
from photo_curation.services.blobs import BlobStore
from photo_curation.services.records import (
    VARIATIONS,
    RecordStore,
    variation_to_record,
)

INTENSITY_PRESETS: tuple[tuple[int, str], ...] = (
    (1, "Subtle"),
    (2, "Light"),
    (3, "Medium"),
    (4, "Strong"),
    (5, "Intense"),
)
MAX_INTENSITY = len(INTENSITY_PRESETS)
VARIATION_JPEG_QUALITY = 90

_logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Adjustment:
    """Image adjustment parameters for one intensity level."""

    brightness: float
    contrast: float
    saturation: float
    warmth: int

    @property
    def blue_shift(self) -> float:
        return -0.5 * self.warmth


def label_for(intensity: int) -> str:
    """Return the preset label for an intensity level."""
    for level, label in INTENSITY_PRESETS:
        if level == intensity:
            return label
    raise ValueError(f"Intensity must be between 1 and {MAX_INTENSITY}: {intensity}")


def adjustment_for(intensity: int) -> Adjustment:
    """Derive adjustment parameters as affine functions of intensity."""
    if not 1 <= intensity <= MAX_INTENSITY:
        raise ValueError(
            f"Intensity must be between 1 and {MAX_INTENSITY}: {intensity}"
        )
    factor = intensity / MAX_INTENSITY
    return Adjustment(
        brightness=1 + 0.15 * factor,
        contrast=1 + 0.30 * factor,
        saturation=1 + 0.25 * factor,
        warmth=round(10 * factor),
    )


def apply_adjustment(image: Image.Image, adjustment: Adjustment) -> Image.Image:
    """Return an adjusted copy of an RGB image.

    Brightness and saturation are applied first, then contrast, then the
    warmth channel bias. The input image is left untouched.
    """
    adjusted = ImageEnhance.Brightness(image).enhance(adjustment.brightness)
    adjusted = ImageEnhance.Color(adjusted).enhance(adjustment.saturation)
    contrast_lut = _channel_lut(adjustment.contrast, 0.0)
    adjusted = adjusted.point(contrast_lut * 3)
    warmth_lut = (
        _channel_lut(1.0, adjustment.warmth)
        + _channel_lut(1.0, 0.0)
        + _channel_lut(1.0, adjustment.blue_shift)
    )
    return adjusted.point(warmth_lut)


def decode_rgb(image_bytes: bytes) -> Image.Image:
    """Decode image bytes into a fully loaded RGB image."""
    with Image.open(io.BytesIO(image_bytes)) as source:
        return source.convert("RGB")


def encode_jpeg(image: Image.Image, quality: int) -> bytes:
    """Encode an image as JPEG bytes."""
    output = io.BytesIO()
    image.save(output, format="JPEG", quality=quality)
    return output.getvalue()


@dataclass
class VariationGenerator:
    """Renders, stores and records the five intensity variations of a photo."""

    record_store: RecordStore
    blob_store: BlobStore
    quality: int = VARIATION_JPEG_QUALITY

    async def generate_variations(
        self, photo_id: str, source_image: bytes
    ) -> list[Variation]:
        """Generate one variation per preset from the untouched source."""
        try:
            source = await asyncio.to_thread(decode_rgb, source_image)
        except (UnidentifiedImageError, OSError) as exc:
            raise GenerationFailed(f"Could not decode source image: {exc}") from exc

        variations: list[Variation] = []
        for level, label in INTENSITY_PRESETS:
            variation_id = str(uuid4())
            image_ref = f"{photo_id}-var-{level}-{variation_id}.jpg"
            try:
                encoded = await asyncio.to_thread(
                    self._render, source, adjustment_for(level)
                )
                await asyncio.to_thread(self.blob_store.put, image_ref, encoded)
                variation = Variation(
                    id=variation_id,
                    photo_id=photo_id,
                    intensity=level,
                    label=label,
                    image_ref=image_ref,
                )
                self.record_store.put(VARIATIONS, variation_to_record(variation))
            except Exception as exc:
                _logger.exception(
                    "Variation generation failed: photo_id=%s level=%s",
                    photo_id,
                    level,
                )
                raise GenerationFailed(
                    f"Failed to generate {label} variation for photo {photo_id}"
                ) from exc
            variations.append(variation)

        _logger.info(
            "Generated variations: photo_id=%s count=%s", photo_id, len(variations)
        )
        return variations

    def _render(self, source: Image.Image, adjustment: Adjustment) -> bytes:
        return encode_jpeg(apply_adjustment(source, adjustment), self.quality)


def _channel_lut(scale: float, offset: float) -> list[int]:
    """Build a clamped 256-entry lookup table for v * scale + offset."""
    return [min(255, max(0, round(value * scale + offset))) for value in range(256)]
