"""ASGI entrypoint served by uvicorn."""

from photo_curation.api.app import create_app
from photo_curation.config import Settings
from photo_curation.containers import build_container

settings = Settings()
app = create_app(build_container(settings))
