"""Workflow error taxonomy."""


class CurationError(Exception):
    """Base error surfaced to API callers."""

    status_code = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class InvalidRequest(CurationError):
    """Required fields are missing or malformed."""

    status_code = 400


class NotFound(CurationError):
    """A referenced photo, variation or image is absent."""

    status_code = 404


class InvalidImageFormat(CurationError):
    """Upload is not a JPEG image."""

    status_code = 400


class PayloadTooLarge(CurationError):
    """Upload exceeds the configured size limit."""

    status_code = 413


class GenerationFailed(CurationError):
    """Variation rendering or storage failed mid-batch."""

    status_code = 500
