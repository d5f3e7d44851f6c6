"""Dependency container wiring for the application."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from supabase import create_client

from photo_curation.adapters.json_record_store import JsonFileRecordStore
from photo_curation.adapters.local_blob_store import LocalBlobStore
from photo_curation.adapters.openai_caption_client import OpenAICaptionClient
from photo_curation.adapters.supabase_record_store import SupabaseRecordStore
from photo_curation.config import Settings
from photo_curation.services.blobs import BlobStore
from photo_curation.services.captions import CaptionService
from photo_curation.services.publishing import MockPublisher
from photo_curation.services.queries import QueryService
from photo_curation.services.records import InMemoryRecordStore, RecordStore
from photo_curation.services.variations import VariationGenerator
from photo_curation.services.workflow import WorkflowService


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    record_store: RecordStore
    blob_store: BlobStore
    workflow_service: WorkflowService
    query_service: QueryService
    close_resources: Callable[[], Awaitable[None]]


def build_record_store(settings: Settings) -> RecordStore:
    """Create the record store selected by `record_backend`."""
    if settings.record_backend == "memory":
        return InMemoryRecordStore()
    if settings.record_backend == "supabase":
        if not settings.supabase_url or not settings.supabase_service_key:
            raise ValueError("Supabase backend requires url and service key")
        return SupabaseRecordStore(
            create_client(settings.supabase_url, settings.supabase_service_key)
        )
    if settings.record_backend == "json":
        return JsonFileRecordStore.create(settings.data_dir)
    raise ValueError(f"Unknown record backend: {settings.record_backend}")


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    record_store = build_record_store(resolved_settings)
    blob_store = LocalBlobStore.create(resolved_settings.upload_dir)
    caption_client = (
        OpenAICaptionClient.create(resolved_settings.openai_api_key)
        if resolved_settings.openai_api_key
        else None
    )
    caption_service = CaptionService(
        client=caption_client,
        blob_store=blob_store,
        model=resolved_settings.openai_model,
    )
    workflow_service = WorkflowService(
        record_store=record_store,
        blob_store=blob_store,
        generator=VariationGenerator(record_store=record_store, blob_store=blob_store),
        caption_service=caption_service,
        publisher=MockPublisher(),
    )
    query_service = QueryService(record_store)

    async def close_resources() -> None:
        await workflow_service.wait_for_generations()
        if caption_client is not None:
            await caption_client.close()

    return AppContainer(
        settings=resolved_settings,
        record_store=record_store,
        blob_store=blob_store,
        workflow_service=workflow_service,
        query_service=query_service,
        close_resources=close_resources,
    )
