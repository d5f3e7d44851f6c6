"""Blob storage interface for original and derived images."""

from typing import Protocol


class BlobStore(Protocol):
    """Id-addressed storage for image bytes."""

    def put(self, ref: str, data: bytes) -> str:
        """Store bytes under a reference and return it."""

    def get(self, ref: str) -> bytes | None:
        """Return stored bytes, if present."""

    def exists(self, ref: str) -> bool:
        """Return true when bytes are stored under the reference."""

    def delete(self, ref: str) -> bool:
        """Delete stored bytes; return false when nothing was stored."""
