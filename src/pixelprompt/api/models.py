"""Pydantic request models for the PixelPrompt API.

These models define the JSON schema for every API endpoint.  FastAPI uses
them for automatic request validation and OpenAPI documentation.  JSON keys
are camelCase (``aspectRatio``, ``isPublic``, ``imageId``) to match the
browser client; snake_case names are accepted as well.

Models
------
GenerateRequest
    Payload for ``POST /api/generate``.
CreateImageRequest
    Payload for ``POST /api/images`` (an image to save).
ImageActionRequest
    Payload for ``PATCH /api/images`` (``like`` or ``togglePublic``).
CreateUserRequest
    Payload for ``POST /api/user``.
UpdateUserRequest
    Payload for ``PATCH /api/user``.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from pixelprompt.core.records import ANONYMOUS_USER_ID, ImageRecord, new_record_id, utcnow


class _ApiModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class GenerateRequest(_ApiModel):
    """Request body for the ``POST /api/generate`` endpoint.

    Attributes:
        prompt: Free-text description of the image.  Emptiness is checked by
            the generation client so the caller gets a 400 with a message.
        aspect_ratio: Aspect ratio tag, e.g. ``"1:1"`` or ``"16:9"``.
        quality: Quality tier controlling the prompt suffix.
    """

    prompt: str = Field(
        default="",
        description="Text prompt describing the image.",
    )
    aspect_ratio: str = Field(
        default="1:1",
        description="Aspect ratio tag (e.g. '1:1', '16:9').",
    )
    quality: Literal["standard", "high"] = Field(
        default="standard",
        description="Quality tier: 'standard' or 'high'.",
    )


class CreateImageRequest(_ApiModel):
    """Request body for the ``POST /api/images`` endpoint.

    Every field except ``url`` may be omitted; the server fills in a
    time-based id, the anonymous owner, the current time and private
    visibility.  Likes always start at zero regardless of the payload.
    """

    id: str | None = Field(default=None, description="Image id (server default: time-based).")
    user_id: str | None = Field(default=None, description="Owner id (default 'anonymous').")
    username: str | None = Field(default=None, description="Owner display name.")
    url: str = Field(..., min_length=1, description="Image URL.")
    prompt: str = Field(default="", description="Prompt the user typed.")
    enhanced_prompt: str = Field(default="", description="Prompt sent to the generator.")
    aspect_ratio: str | None = Field(default=None, description="Aspect ratio tag.")
    quality: str | None = Field(default=None, description="Quality tier.")
    is_public: bool | None = Field(default=None, description="Share with the community.")
    created_at: datetime | None = Field(default=None, description="Creation time.")

    def to_record(self) -> ImageRecord:
        """Build the stored record, applying server-side defaults."""
        return ImageRecord(
            id=self.id or new_record_id(),
            user_id=self.user_id or ANONYMOUS_USER_ID,
            username=self.username,
            url=self.url,
            prompt=self.prompt,
            enhanced_prompt=self.enhanced_prompt,
            aspect_ratio=self.aspect_ratio or "1:1",
            quality=self.quality or "standard",
            is_public=bool(self.is_public),
            likes=0,
            created_at=self.created_at or utcnow(),
        )


class ImageActionRequest(_ApiModel):
    """Request body for the ``PATCH /api/images`` endpoint.

    Attributes:
        image_id: Target image.
        action: ``"like"`` (anyone, community images only) or
            ``"togglePublic"`` (owner only).
        user_id: Caller identity, required for ``togglePublic``.
    """

    image_id: str = Field(..., description="Id of the image to update.")
    action: Literal["like", "togglePublic"] = Field(..., description="Action to apply.")
    user_id: str | None = Field(default=None, description="Caller's user id.")


class CreateUserRequest(_ApiModel):
    """Request body for the ``POST /api/user`` endpoint."""

    username: str | None = Field(default=None, description="Unique username (required).")
    email: str | None = Field(default=None, description="Optional email address.")


class UpdateUserRequest(_ApiModel):
    """Request body for the ``PATCH /api/user`` endpoint.

    Attributes:
        user_id: Profile to update.
        updates: Field/value pairs; only ``bio``, ``email`` and ``avatar``
            are applied, anything else is ignored.
    """

    user_id: str | None = Field(default=None, description="Id of the user to update.")
    updates: dict[str, Any] = Field(default_factory=dict, description="Fields to change.")
