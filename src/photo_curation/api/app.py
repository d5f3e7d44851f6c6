"""FastAPI application factory."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from datetime import UTC, datetime

from fastapi import FastAPI, File, Query, Request, UploadFile
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response

from photo_curation.api.models import ApproveRequest, PublishRequest
from photo_curation.app_logging import configure_logging
from photo_curation.config import parse_allowed_origins
from photo_curation.containers import AppContainer
from photo_curation.domain.errors import (
    CurationError,
    InvalidImageFormat,
    InvalidRequest,
    NotFound,
    PayloadTooLarge,
)
from photo_curation.domain.photos import Approval, Photo, Publication, Variation

_JPEG_CONTENT_TYPES = {"image/jpeg", "image/jpg"}


def create_app(container: AppContainer) -> FastAPI:
    """Create a FastAPI app configured with dependencies."""
    configure_logging(container.settings.log_level)
    logger = logging.getLogger(__name__)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        logger.info(
            "Photo curation API ready: data_dir=%s upload_dir=%s",
            container.settings.data_dir,
            container.settings.upload_dir,
        )
        yield
        await app.state.container.close_resources()

    app = FastAPI(lifespan=lifespan)
    app.state.container = container
    app.add_middleware(
        CORSMiddleware,
        allow_origins=parse_allowed_origins(container.settings.allowed_origins),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(CurationError)
    async def curation_error_handler(
        request: Request, exc: CurationError
    ) -> JSONResponse:
        if exc.status_code >= 500:
            logger.error("Request failed: %s %s: %s", request.method, request.url, exc)
        return JSONResponse(status_code=exc.status_code, content={"error": exc.message})

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        return await curation_error_handler(
            request, InvalidRequest(_describe_validation_error(exc))
        )

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Simple health check endpoint."""
        return {"status": "ok"}

    @app.get("/api/health")
    async def api_health() -> dict[str, object]:
        """Health check with server details."""
        return {
            "status": "ok",
            "server": "picture-curation-api",
            "port": container.settings.port,
            "timestamp": datetime.now(tz=UTC).isoformat(),
        }

    @app.post("/api/upload")
    async def upload(
        request: Request, file: UploadFile | None = File(default=None)
    ) -> dict[str, object]:
        """Upload a JPEG and start generating variations."""
        state_container: AppContainer = request.app.state.container
        if file is None:
            raise InvalidRequest("No file provided")
        if file.content_type not in _JPEG_CONTENT_TYPES:
            raise InvalidImageFormat("Only JPG files are allowed")
        content = await file.read()
        if len(content) > state_container.settings.max_file_size:
            raise PayloadTooLarge("File exceeds the maximum upload size")
        photo = await state_container.workflow_service.upload(content)
        return {
            "success": True,
            "photo": _serialize_photo(photo),
            "message": "Photo uploaded. Variations are being generated...",
        }

    @app.get("/api/pending-approvals")
    async def pending_approvals(request: Request) -> dict[str, object]:
        """Return photos waiting for approval with their variations."""
        state_container: AppContainer = request.app.state.container
        pending = state_container.query_service.pending_approvals()
        return {
            "success": True,
            "data": [
                {
                    "photo": _serialize_photo(entry.photo),
                    "variations": [
                        _serialize_variation(variation)
                        for variation in entry.variations
                    ],
                }
                for entry in pending
            ],
            "total": len(pending),
        }

    @app.post("/api/regenerate/{photo_id}")
    async def regenerate(photo_id: str, request: Request) -> dict[str, object]:
        """Replace a photo's variations with a new set."""
        state_container: AppContainer = request.app.state.container
        variations = await state_container.workflow_service.regenerate(photo_id)
        return {
            "success": True,
            "variations": [_serialize_variation(variation) for variation in variations],
            "message": "New variations generated",
        }

    @app.post("/api/approve")
    async def approve(payload: ApproveRequest, request: Request) -> dict[str, object]:
        """Approve a variation for a photo."""
        state_container: AppContainer = request.app.state.container
        approval, photo = await state_container.workflow_service.approve(
            payload.photo_id, payload.variation_id, payload.feedback
        )
        return {
            "success": True,
            "approval": _serialize_approval(approval),
            "photo": _serialize_photo(photo),
        }

    @app.get("/api/preview/{photo_id}")
    async def preview(
        photo_id: str,
        request: Request,
        variation_id: str | None = Query(default=None, alias="variationId"),
    ) -> dict[str, object]:
        """Return a photo with its selected variation and an AI caption."""
        state_container: AppContainer = request.app.state.container
        result = await state_container.workflow_service.preview(
            photo_id, variation_id
        )
        return {
            "success": True,
            "photo": _serialize_photo(result.photo),
            "selectedVariation": _serialize_variation(result.variation),
            "caption": result.caption,
        }

    @app.post("/api/publish")
    async def publish(payload: PublishRequest, request: Request) -> dict[str, object]:
        """Publish a photo (mocked)."""
        state_container: AppContainer = request.app.state.container
        publication = await state_container.workflow_service.publish(
            payload.photo_id, payload.caption
        )
        return {
            "success": True,
            "message": "Photo published successfully (mocked)",
            "publication": _serialize_publication(publication),
        }

    @app.get("/uploads/{ref}")
    async def uploaded_image(ref: str, request: Request) -> Response:
        """Serve stored original and variation images."""
        state_container: AppContainer = request.app.state.container
        try:
            data = state_container.blob_store.get(ref)
        except ValueError:
            data = None
        if data is None:
            raise NotFound("Image not found")
        return Response(content=data, media_type="image/jpeg")

    return app


def _describe_validation_error(exc: RequestValidationError) -> str:
    """Summarize the first validation error as `field: message`."""
    errors = exc.errors()
    if not errors:
        return "Invalid request"
    first = errors[0]
    location = [str(part) for part in first.get("loc", ()) if part != "body"]
    message = str(first.get("msg", "Invalid value"))
    return f"{'.'.join(location)}: {message}" if location else message


def _image_url(ref: str) -> str:
    return f"/uploads/{ref}"


def _serialize_photo(photo: Photo) -> dict[str, object]:
    return {
        "id": photo.id,
        "status": photo.status.value,
        "createdAt": photo.created_at.isoformat(),
        "filename": photo.source_ref,
        "originalUrl": _image_url(photo.source_ref),
    }


def _serialize_variation(variation: Variation) -> dict[str, object]:
    return {
        "id": variation.id,
        "photoId": variation.photo_id,
        "intensity": variation.intensity,
        "label": variation.label,
        "url": _image_url(variation.image_ref),
    }


def _serialize_approval(approval: Approval) -> dict[str, object]:
    return {
        "id": approval.id,
        "photoId": approval.photo_id,
        "variationId": approval.variation_id,
        "feedback": approval.feedback,
        "approvedAt": approval.approved_at.isoformat(),
    }


def _serialize_publication(publication: Publication) -> dict[str, object]:
    return {
        "id": publication.id,
        "photoId": publication.photo_id,
        "caption": publication.caption,
        "instagramPostId": publication.external_post_id,
        "publishedAt": publication.published_at.isoformat(),
        "status": publication.status,
    }
