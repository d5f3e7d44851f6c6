"""Caption generation for selected variations."""

import asyncio
import base64
import logging
import re
from dataclasses import dataclass
from typing import Protocol

from photo_curation.services.blobs import BlobStore

FALLBACK_CAPTION = "Beautiful moment captured! ✨"
UNCONFIGURED_CAPTION = "Beautiful photo ready to share! 📸✨"
MAX_CAPTION_LENGTH = 150
CAPTION_PROMPT = (
    "Generate a short, snappy Instagram caption (max 150 characters) for this "
    "photo. No hashtags, just creative and engaging text. "
    "Respond with only the caption, nothing else."
)

_HASHTAG_PATTERN = re.compile(r"#\w+")
_logger = logging.getLogger(__name__)


class CaptionClient(Protocol):
    """Interface for an LLM that writes captions from images."""

    async def caption(
        self, *, model: str, image_data_url: str, prompt: str
    ) -> str:
        """Return raw caption text for an image."""


@dataclass
class CaptionService:
    """Produces captions and falls back to a fixed caption on any failure."""

    client: CaptionClient | None
    blob_store: BlobStore
    model: str
    fallback: str = FALLBACK_CAPTION
    unconfigured: str = UNCONFIGURED_CAPTION

    async def caption_for(self, image_ref: str) -> str:
        """Return a caption for a stored image; never raises."""
        if self.client is None:
            _logger.info("Caption client not configured, using fallback caption")
            return self.unconfigured
        try:
            image_bytes = await asyncio.to_thread(self.blob_store.get, image_ref)
            if image_bytes is None:
                _logger.warning("Caption image missing: image_ref=%s", image_ref)
                return self.fallback
            raw = await self.client.caption(
                model=self.model,
                image_data_url=_to_data_url(image_bytes),
                prompt=CAPTION_PROMPT,
            )
        except Exception:
            _logger.exception("Caption generation failed: image_ref=%s", image_ref)
            return self.fallback
        return clean_caption(raw) or self.fallback


def clean_caption(raw: str) -> str:
    """Strip hashtags and quotes and cap the caption length."""
    text = _HASHTAG_PATTERN.sub("", raw or "")
    text = " ".join(text.split()).strip().strip('"').strip()
    if len(text) > MAX_CAPTION_LENGTH:
        text = text[: MAX_CAPTION_LENGTH - 1].rstrip() + "…"
    return text


def _to_data_url(image_bytes: bytes) -> str:
    """Convert JPEG bytes to a base64 data URL for image input."""
    encoded = base64.b64encode(image_bytes).decode("utf-8")
    return f"data:image/jpeg;base64,{encoded}"
