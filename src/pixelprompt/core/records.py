"""Image and user records stored by the gallery.

Records are Pydantic models so the same class validates incoming JSON,
travels through the stores, and serialises back out.  Field names are
snake_case in Python and camelCase on the wire (``isPublic``,
``enhancedPrompt``, ``createdAt``), matching what the browser UI sends.

Use :func:`dump_record` to produce the JSON-ready camelCase dictionary.
"""

from __future__ import annotations

import time
from datetime import datetime, timezone
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

ANONYMOUS_USER_ID = "anonymous"

# Profile fields a user may change through ``PATCH /api/user``.
MUTABLE_USER_FIELDS = ("bio", "email", "avatar")


def new_record_id() -> str:
    """Return a time-based identifier (milliseconds since the epoch)."""
    return str(int(time.time() * 1000))


def utcnow() -> datetime:
    """Return the current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


class _Record(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        validate_assignment=True,
    )


class ImageRecord(_Record):
    """A generated image plus its ownership and visibility state.

    Attributes:
        id: Time-based identifier; not guaranteed unique.
        user_id: Owner identifier, ``"anonymous"`` when no profile exists.
        username: Display name of the owner, if known.
        prompt: Text the user typed.
        enhanced_prompt: Prompt actually sent to the generation service.
        url: Where the image can be displayed from.
        aspect_ratio: Aspect ratio tag such as ``"16:9"``.
        quality: Quality tier, ``"standard"`` or ``"high"``.
        is_public: Whether the image is listed in the community gallery.
        likes: Like counter, never negative.
        created_at: Creation time (UTC).
    """

    id: str = Field(default_factory=new_record_id)
    user_id: str = ANONYMOUS_USER_ID
    username: str | None = None
    prompt: str = ""
    enhanced_prompt: str = ""
    url: str = ""
    aspect_ratio: str = "1:1"
    quality: str = "standard"
    is_public: bool = False
    likes: int = Field(default=0, ge=0)
    created_at: datetime = Field(default_factory=utcnow)

    @field_validator("created_at")
    @classmethod
    def _ensure_utc(cls, value: datetime) -> datetime:
        # Naive timestamps are treated as UTC so ordering never mixes naive
        # and aware datetimes.
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value


class UserRecord(_Record):
    """A user profile.

    ``total_images`` and ``total_likes`` are set once at creation and are not
    recomputed when images are saved or liked.
    """

    id: str = Field(default_factory=new_record_id)
    username: str
    email: str = ""
    avatar: str = ""
    bio: str = ""
    total_images: int = 0
    total_likes: int = 0
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime | None = None

    def summary(self) -> dict[str, Any]:
        """Public subset returned when listing every user."""
        return {
            "id": self.id,
            "username": self.username,
            "avatar": self.avatar,
            "totalImages": self.total_images,
            "totalLikes": self.total_likes,
        }


def dump_record(record: BaseModel) -> dict[str, Any]:
    """Serialise a record to a camelCase, JSON-compatible dictionary."""
    return record.model_dump(mode="json", by_alias=True, exclude_none=True)


def community_sort_key(record: ImageRecord) -> tuple[int, float]:
    """Sort key for the community listing (most liked, then newest, first).

    Use with ``sorted(..., key=community_sort_key, reverse=True)``.
    """
    return record.likes, record.created_at.timestamp()
