"""Filesystem-backed blob store."""

import os
from dataclasses import dataclass
from pathlib import Path

from photo_curation.services.blobs import BlobStore


@dataclass
class LocalBlobStore(BlobStore):
    """Stores image bytes as files in a single upload directory."""

    root: Path

    @classmethod
    def create(cls, upload_dir: str) -> "LocalBlobStore":
        """Create a blob store, making the upload directory if needed."""
        root = Path(upload_dir)
        root.mkdir(parents=True, exist_ok=True)
        return cls(root=root)

    def put(self, ref: str, data: bytes) -> str:
        """Write bytes via a temp file so readers never see partial images."""
        path = self._path(ref)
        tmp_path = path.with_name(f".{path.name}.tmp")
        tmp_path.write_bytes(data)
        os.replace(tmp_path, path)
        return ref

    def get(self, ref: str) -> bytes | None:
        """Read stored bytes."""
        path = self._path(ref)
        if not path.is_file():
            return None
        return path.read_bytes()

    def exists(self, ref: str) -> bool:
        """Check whether a file exists for the reference."""
        return self._path(ref).is_file()

    def delete(self, ref: str) -> bool:
        """Remove the file for a reference if present."""
        try:
            self._path(ref).unlink()
        except FileNotFoundError:
            return False
        return True

    def _path(self, ref: str) -> Path:
        name = Path(ref).name
        if not name or name != ref or name.startswith("."):
            raise ValueError(f"Invalid blob reference: {ref!r}")
        return self.root / name
