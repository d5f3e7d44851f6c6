"""Pydantic models for API request payloads."""

from pydantic import BaseModel, ConfigDict, Field


class ApproveRequest(BaseModel):
    """Approval of one variation of a photo."""

    model_config = ConfigDict(populate_by_name=True)

    photo_id: str | None = Field(default=None, alias="photoId")
    variation_id: str | None = Field(default=None, alias="variationId")
    feedback: str | None = None


class PublishRequest(BaseModel):
    """Publication of a photo with an optional caption."""

    model_config = ConfigDict(populate_by_name=True)

    photo_id: str | None = Field(default=None, alias="photoId")
    caption: str | None = None
