"""Shared test fixtures."""

import io
from dataclasses import dataclass, field
from pathlib import Path

import pytest
from PIL import Image

from photo_curation.config import Settings
from photo_curation.containers import AppContainer
from photo_curation.services.blobs import BlobStore
from photo_curation.services.captions import CaptionClient, CaptionService
from photo_curation.services.publishing import MockPublisher
from photo_curation.services.queries import QueryService
from photo_curation.services.records import InMemoryRecordStore
from photo_curation.services.variations import VariationGenerator
from photo_curation.services.workflow import WorkflowService


def make_jpeg(
    size: tuple[int, int] = (100, 100), color: tuple[int, int, int] = (120, 100, 80)
) -> bytes:
    """Encode a solid-color JPEG."""
    output = io.BytesIO()
    Image.new("RGB", size, color).save(output, format="JPEG", quality=95)
    return output.getvalue()


def make_png(size: tuple[int, int] = (20, 20)) -> bytes:
    """Encode a solid-color PNG."""
    output = io.BytesIO()
    Image.new("RGB", size, (10, 200, 10)).save(output, format="PNG")
    return output.getvalue()


@dataclass
class InMemoryBlobStore(BlobStore):
    """In-memory blob store for tests."""

    blobs: dict[str, bytes] = field(default_factory=dict)

    def put(self, ref: str, data: bytes) -> str:
        self.blobs[ref] = data
        return ref

    def get(self, ref: str) -> bytes | None:
        return self.blobs.get(ref)

    def exists(self, ref: str) -> bool:
        return ref in self.blobs

    def delete(self, ref: str) -> bool:
        return self.blobs.pop(ref, None) is not None


@dataclass
class FailingBlobStore(InMemoryBlobStore):
    """Blob store that fails once a number of variation writes succeeded."""

    fail_after: int = 2
    variation_writes: int = 0

    def put(self, ref: str, data: bytes) -> str:
        if "-var-" in ref:
            if self.variation_writes >= self.fail_after:
                raise OSError("disk full")
            self.variation_writes += 1
        return super().put(ref, data)


@dataclass
class FakeCaptionClient(CaptionClient):
    """Fake caption client returning a fixed caption."""

    text: str = "Golden hour, zero filters needed."
    calls: list[str] = field(default_factory=list)

    async def caption(self, *, model: str, image_data_url: str, prompt: str) -> str:
        self.calls.append(image_data_url)
        return self.text


@dataclass
class BrokenCaptionClient(CaptionClient):
    """Caption client that always fails."""

    async def caption(self, *, model: str, image_data_url: str, prompt: str) -> str:
        raise RuntimeError("network down")


def build_workflow(
    record_store: InMemoryRecordStore,
    blob_store: BlobStore,
    caption_client: CaptionClient | None = None,
) -> WorkflowService:
    """Wire a workflow service around in-memory collaborators."""
    return WorkflowService(
        record_store=record_store,
        blob_store=blob_store,
        generator=VariationGenerator(record_store=record_store, blob_store=blob_store),
        caption_service=CaptionService(
            client=caption_client, blob_store=blob_store, model="gpt-4o-mini"
        ),
        publisher=MockPublisher(),
    )


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    return Settings(
        data_dir=str(tmp_path / "data"),
        upload_dir=str(tmp_path / "data" / "uploads"),
        record_backend="memory",
        openai_api_key=None,
        max_file_size=1024 * 1024,
    )


@pytest.fixture
def jpeg_bytes() -> bytes:
    return make_jpeg()


@pytest.fixture
def record_store() -> InMemoryRecordStore:
    return InMemoryRecordStore()


@pytest.fixture
def blob_store() -> InMemoryBlobStore:
    return InMemoryBlobStore()


@pytest.fixture
def caption_client() -> FakeCaptionClient:
    return FakeCaptionClient()


@pytest.fixture
def workflow_service(
    record_store: InMemoryRecordStore,
    blob_store: InMemoryBlobStore,
    caption_client: FakeCaptionClient,
) -> WorkflowService:
    return build_workflow(record_store, blob_store, caption_client)


@pytest.fixture
def query_service(record_store: InMemoryRecordStore) -> QueryService:
    return QueryService(record_store)


@pytest.fixture
def container(
    settings: Settings,
    record_store: InMemoryRecordStore,
    blob_store: InMemoryBlobStore,
    workflow_service: WorkflowService,
    query_service: QueryService,
) -> AppContainer:
    async def close_resources() -> None:
        await workflow_service.wait_for_generations()

    return AppContainer(
        settings=settings,
        record_store=record_store,
        blob_store=blob_store,
        workflow_service=workflow_service,
        query_service=query_service,
        close_resources=close_resources,
    )
