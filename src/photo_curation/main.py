"""Command-line entrypoint that serves the API with uvicorn."""

import uvicorn

from photo_curation.config import Settings


def main() -> None:
    """Run the photo curation API server."""
    settings = Settings()
    print(f"Photo Curation API starting on http://{settings.host}:{settings.port}")
    uvicorn.run("photo_curation.api.asgi:app", host=settings.host, port=settings.port)


if __name__ == "__main__":
    main()
