"""Gallery store abstraction and the in-memory backend.

The API layer talks to a :class:`GalleryStore`, never to raw collections.
Two backends implement it:

- :class:`InMemoryGalleryStore` (this module) keeps ``user images``,
  ``community images`` and ``users`` in process-local lists.  Nothing
  survives a restart and separate worker processes each hold their own
  copy.
- :class:`~pixelprompt.core.sqlite_store.SQLiteGalleryStore` keeps the same
  data in a SQLite file, one transaction per operation.

Ownership checks live here rather than in the routes: ``toggle_public`` and
``delete_image`` only touch a record whose ``user_id`` equals the caller's
identifier.

Community invariant
-------------------
An image is in the community collection if and only if ``is_public`` is
true.  ``create_image`` and ``toggle_public`` are the only operations that
change visibility and both maintain the invariant.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Any

from pixelprompt.core.config import PixelPromptConfig
from pixelprompt.core.errors import UsernameTakenError
from pixelprompt.core.records import (
    MUTABLE_USER_FIELDS,
    ImageRecord,
    UserRecord,
    community_sort_key,
    utcnow,
)

logger = logging.getLogger(__name__)


class GalleryStore(ABC):
    """Storage interface for image and user records."""

    backend_name: str = "base"

    # --- Images --------------------------------------------------------------

    @abstractmethod
    def create_image(self, record: ImageRecord) -> ImageRecord:
        """Save an image; public images also join the community listing."""

    @abstractmethod
    def list_user_images(self, user_id: str | None = None) -> list[ImageRecord]:
        """Return images owned by ``user_id`` (all images when None), oldest first."""

    @abstractmethod
    def list_community_images(self) -> list[ImageRecord]:
        """Return public images, most liked first, newest first on ties."""

    @abstractmethod
    def get_image(self, image_id: str) -> ImageRecord | None:
        """Return the first saved image with ``image_id``."""

    @abstractmethod
    def like_image(self, image_id: str) -> int | None:
        """Add one like to the oldest public image with ``image_id``.

        Returns:
            The new like count, or None when no public image has that id.
        """

    @abstractmethod
    def toggle_public(self, image_id: str, user_id: str | None) -> bool | None:
        """Flip the visibility of the caller's own image.

        Returns:
            The new ``is_public`` value, or None when the caller owns no
            image with that id.
        """

    @abstractmethod
    def delete_image(self, image_id: str, user_id: str | None) -> bool:
        """Delete the caller's own image from every collection.

        Returns:
            True if something was removed.  Deleting an unknown image is
            not an error.
        """

    # --- Users ---------------------------------------------------------------

    @abstractmethod
    def create_user(self, username: str, email: str = "", avatar: str = "") -> UserRecord:
        """Create a profile.

        Raises:
            UsernameTakenError: If ``username`` already exists (exact match).
        """

    @abstractmethod
    def get_user(self, user_id: str) -> UserRecord | None:
        """Look a user up by identifier."""

    @abstractmethod
    def get_user_by_username(self, username: str) -> UserRecord | None:
        """Look a user up by exact username."""

    @abstractmethod
    def list_users(self) -> list[UserRecord]:
        """Return every user in creation order."""

    @abstractmethod
    def update_user(self, user_id: str, updates: dict[str, Any]) -> UserRecord | None:
        """Apply allow-listed profile changes.

        Keys outside ``MUTABLE_USER_FIELDS`` are ignored.

        Returns:
            The updated user, or None if ``user_id`` is unknown.
        """

    # --- Aggregates ----------------------------------------------------------

    def stats(self) -> dict[str, int]:
        """Return simple gallery-wide counts."""
        images = self.list_user_images()
        return {
            "totalImages": len(images),
            "publicImages": sum(1 for image in images if image.is_public),
            "totalLikes": sum(image.likes for image in images),
            "totalUsers": len(self.list_users()),
        }


def filter_user_updates(updates: dict[str, Any]) -> dict[str, Any]:
    """Keep only the profile fields users are allowed to change."""
    return {key: value for key, value in updates.items() if key in MUTABLE_USER_FIELDS}


class InMemoryGalleryStore(GalleryStore):
    """Process-local store backed by plain lists.

    The community list holds the same record objects as the user list, so a
    like applied to one is visible through the other.  Identifiers are not
    unique, so community membership is tracked by object identity.  None of
    the methods await, so within one event loop each call completes before
    another request can observe the lists.
    """

    backend_name = "memory"

    def __init__(self) -> None:
        self._user_images: list[ImageRecord] = []
        self._community_images: list[ImageRecord] = []
        self._users: list[UserRecord] = []

    def create_image(self, record: ImageRecord) -> ImageRecord:
        self._user_images.append(record)
        if record.is_public:
            self._community_images.append(record)
        logger.info(f"Saved image {record.id} for {record.user_id} (public={record.is_public})")
        return record

    def list_user_images(self, user_id: str | None = None) -> list[ImageRecord]:
        if user_id is None:
            return list(self._user_images)
        return [image for image in self._user_images if image.user_id == user_id]

    def list_community_images(self) -> list[ImageRecord]:
        return sorted(self._community_images, key=community_sort_key, reverse=True)

    def get_image(self, image_id: str) -> ImageRecord | None:
        return next((image for image in self._user_images if image.id == image_id), None)

    def like_image(self, image_id: str) -> int | None:
        image = next(
            (
                image
                for image in self._user_images
                if image.id == image_id and image.is_public
            ),
            None,
        )
        if image is None:
            return None

        image.likes += 1
        logger.debug(f"Image {image_id} now has {image.likes} likes")
        return image.likes

    def toggle_public(self, image_id: str, user_id: str | None) -> bool | None:
        image = next(
            (
                image
                for image in self._user_images
                if image.id == image_id and image.user_id == user_id
            ),
            None,
        )
        if image is None:
            return None

        image.is_public = not image.is_public

        if image.is_public:
            if not any(entry is image for entry in self._community_images):
                self._community_images.append(image)
        else:
            self._community_images = [
                entry for entry in self._community_images if entry is not image
            ]

        logger.info(f"Image {image_id} is now {'public' if image.is_public else 'private'}")
        return image.is_public

    def delete_image(self, image_id: str, user_id: str | None) -> bool:
        def owned(image: ImageRecord) -> bool:
            return image.id == image_id and image.user_id == user_id

        before = len(self._user_images) + len(self._community_images)
        self._user_images = [image for image in self._user_images if not owned(image)]
        self._community_images = [image for image in self._community_images if not owned(image)]
        removed = before != len(self._user_images) + len(self._community_images)

        if removed:
            logger.info(f"Deleted image {image_id} for {user_id}")
        return removed

    def create_user(self, username: str, email: str = "", avatar: str = "") -> UserRecord:
        if self.get_user_by_username(username) is not None:
            raise UsernameTakenError(username)

        user = UserRecord(username=username, email=email or "", avatar=avatar)
        self._users.append(user)
        logger.info(f"Created user {user.username} ({user.id})")
        return user

    def get_user(self, user_id: str) -> UserRecord | None:
        return next((user for user in self._users if user.id == user_id), None)

    def get_user_by_username(self, username: str) -> UserRecord | None:
        return next((user for user in self._users if user.username == username), None)

    def list_users(self) -> list[UserRecord]:
        return list(self._users)

    def update_user(self, user_id: str, updates: dict[str, Any]) -> UserRecord | None:
        user = self.get_user(user_id)
        if user is None:
            return None

        # Validate the whole change set before touching the stored record.
        changes = filter_user_updates(updates)
        validated = UserRecord.model_validate({**user.model_dump(), **changes})
        for key in changes:
            setattr(user, key, getattr(validated, key))
        user.updated_at = utcnow()
        logger.info(f"Updated user {user_id}: {sorted(changes)}")
        return user


def create_store(settings: PixelPromptConfig) -> GalleryStore:
    """Build the store selected by ``settings.store_backend``.

    Args:
        settings: Application configuration.

    Returns:
        A ready-to-use GalleryStore.
    """
    if settings.store_backend == "sqlite":
        from pixelprompt.core.sqlite_store import SQLiteGalleryStore

        return SQLiteGalleryStore(settings.database_path)
    return InMemoryGalleryStore()
