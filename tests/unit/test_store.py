"""Tests for the gallery stores.

Every test in this module runs against both backends through the
parametrized ``store`` fixture in conftest (``memory`` and ``sqlite``).
"""

from datetime import datetime, timedelta, timezone

import pytest
from pydantic import ValidationError

from pixelprompt.core.config import PixelPromptConfig
from pixelprompt.core.errors import UsernameTakenError
from pixelprompt.core.records import ImageRecord
from pixelprompt.core.sqlite_store import SQLiteGalleryStore
from pixelprompt.core.store import InMemoryGalleryStore, create_store, filter_user_updates

BASE_TIME = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)


def make_image(image_id: str, user_id: str = "u1", **kwargs) -> ImageRecord:
    """Build an image record with a fixed id and owner."""
    kwargs.setdefault("url", f"https://img.test/{image_id}.png")
    kwargs.setdefault("created_at", BASE_TIME)
    return ImageRecord(id=image_id, user_id=user_id, **kwargs)


def community_ids(store) -> list[str]:
    return [image.id for image in store.list_community_images()]


# ---------------------------------------------------------------------------
# Saving and listing
# ---------------------------------------------------------------------------


class TestCreateAndList:
    def test_private_image_not_in_community(self, store):
        store.create_image(make_image("1"))

        assert [image.id for image in store.list_user_images("u1")] == ["1"]
        assert store.list_community_images() == []

    def test_public_image_in_both_listings(self, store):
        store.create_image(make_image("1", is_public=True))

        assert [image.id for image in store.list_user_images("u1")] == ["1"]
        assert community_ids(store) == ["1"]

    def test_user_listing_filters_by_owner_and_keeps_order(self, store):
        store.create_image(make_image("1", user_id="u1"))
        store.create_image(make_image("2", user_id="u2"))
        store.create_image(make_image("3", user_id="u1"))

        assert [image.id for image in store.list_user_images("u1")] == ["1", "3"]
        assert [image.id for image in store.list_user_images("u2")] == ["2"]
        assert store.list_user_images("nobody") == []

    def test_listing_without_owner_returns_everything(self, store):
        store.create_image(make_image("1", user_id="u1"))
        store.create_image(make_image("2", user_id="u2"))

        assert [image.id for image in store.list_user_images()] == ["1", "2"]

    def test_saved_fields_round_trip(self, store):
        store.create_image(
            make_image(
                "1",
                username="ada",
                prompt="a red fox",
                enhanced_prompt="a red fox, sharp details",
                aspect_ratio="16:9",
                quality="high",
            )
        )

        image = store.get_image("1")
        assert image.username == "ada"
        assert image.prompt == "a red fox"
        assert image.enhanced_prompt == "a red fox, sharp details"
        assert image.aspect_ratio == "16:9"
        assert image.quality == "high"
        assert image.created_at == BASE_TIME

    def test_get_unknown_image(self, store):
        assert store.get_image("missing") is None


class TestCommunityOrdering:
    def test_most_liked_first_then_newest(self, store):
        store.create_image(make_image("old", is_public=True, likes=3))
        store.create_image(
            make_image("new", is_public=True, likes=3, created_at=BASE_TIME + timedelta(hours=1))
        )
        store.create_image(
            make_image("fresh", is_public=True, created_at=BASE_TIME + timedelta(days=1))
        )
        store.create_image(make_image("top", is_public=True, likes=10))

        assert community_ids(store) == ["top", "new", "old", "fresh"]

    def test_ordering_follows_likes(self, store):
        store.create_image(make_image("a", is_public=True))
        store.create_image(make_image("b", is_public=True, created_at=BASE_TIME - timedelta(1)))

        assert community_ids(store) == ["a", "b"]
        store.like_image("b")
        assert community_ids(store) == ["b", "a"]


# ---------------------------------------------------------------------------
# Likes
# ---------------------------------------------------------------------------


class TestLikes:
    def test_like_increments_by_one(self, store):
        store.create_image(make_image("1", is_public=True))

        assert store.like_image("1") == 1
        assert store.like_image("1") == 2

    def test_like_visible_in_both_listings(self, store):
        store.create_image(make_image("1", is_public=True))
        store.like_image("1")

        assert store.list_community_images()[0].likes == 1
        assert store.list_user_images("u1")[0].likes == 1
        assert store.get_image("1").likes == 1

    def test_like_private_image_not_found(self, store):
        store.create_image(make_image("1"))

        assert store.like_image("1") is None
        assert store.get_image("1").likes == 0

    def test_like_unknown_image(self, store):
        assert store.like_image("missing") is None


# ---------------------------------------------------------------------------
# Visibility
# ---------------------------------------------------------------------------


class TestTogglePublic:
    def test_toggle_adds_to_and_removes_from_community(self, store):
        store.create_image(make_image("1"))

        assert store.toggle_public("1", "u1") is True
        assert community_ids(store) == ["1"]
        assert store.get_image("1").is_public is True

        assert store.toggle_public("1", "u1") is False
        assert community_ids(store) == []
        assert store.get_image("1").is_public is False

    def test_double_toggle_restores_state(self, store):
        store.create_image(make_image("1", is_public=True))
        store.toggle_public("1", "u1")
        store.toggle_public("1", "u1")

        assert community_ids(store) == ["1"]

    def test_repeated_publish_never_duplicates(self, store):
        store.create_image(make_image("1"))
        for _ in range(5):
            store.toggle_public("1", "u1")

        assert community_ids(store) == ["1"]

    def test_toggle_requires_owner(self, store):
        store.create_image(make_image("1", user_id="u1"))

        assert store.toggle_public("1", "intruder") is None
        assert store.toggle_public("1", None) is None
        assert store.get_image("1").is_public is False

    def test_likes_survive_unpublish_and_republish(self, store):
        store.create_image(make_image("1", is_public=True))
        store.like_image("1")
        store.toggle_public("1", "u1")
        store.toggle_public("1", "u1")

        assert store.list_community_images()[0].likes == 1


class TestDuplicateIds:
    """Images sharing an id stay independent of each other."""

    def test_unpublish_leaves_other_owners_image_listed(self, store):
        store.create_image(make_image("42", user_id="ada", is_public=True))
        store.create_image(make_image("42", user_id="bob", is_public=True))

        assert store.toggle_public("42", "bob") is False

        community_owners = [image.user_id for image in store.list_community_images()]
        public_owners = [image.user_id for image in store.list_user_images() if image.is_public]
        assert community_owners == ["ada"]
        assert public_owners == ["ada"]

    def test_like_goes_to_the_public_image_only(self, store):
        store.create_image(make_image("7", user_id="bob"))
        store.create_image(make_image("7", user_id="ada", is_public=True))

        assert store.like_image("7") == 1

        likes = {image.user_id: image.likes for image in store.list_user_images()}
        assert likes == {"bob": 0, "ada": 1}


# ---------------------------------------------------------------------------
# Deletion
# ---------------------------------------------------------------------------


class TestDeleteImage:
    def test_delete_removes_from_every_listing(self, store):
        store.create_image(make_image("1", is_public=True))

        assert store.delete_image("1", "u1") is True
        assert store.list_user_images("u1") == []
        assert store.list_community_images() == []
        assert store.get_image("1") is None

    def test_delete_requires_owner(self, store):
        store.create_image(make_image("1", is_public=True))

        assert store.delete_image("1", "intruder") is False
        assert store.get_image("1") is not None
        assert community_ids(store) == ["1"]

    def test_delete_unknown_image_is_noop(self, store):
        store.create_image(make_image("1"))

        assert store.delete_image("missing", "u1") is False
        assert len(store.list_user_images()) == 1


# ---------------------------------------------------------------------------
# Users
# ---------------------------------------------------------------------------


class TestUsers:
    def test_create_user_defaults(self, store):
        user = store.create_user("ada", email="ada@example.com", avatar="https://avatar.test/a")

        assert user.username == "ada"
        assert user.email == "ada@example.com"
        assert user.avatar == "https://avatar.test/a"
        assert user.bio == ""
        assert user.total_images == 0
        assert user.total_likes == 0
        assert user.id.isdigit()

    def test_duplicate_username_rejected(self, store):
        store.create_user("ada")

        with pytest.raises(UsernameTakenError) as exc_info:
            store.create_user("ada")

        assert exc_info.value.status_code == 409
        assert len(store.list_users()) == 1

    def test_username_match_is_exact(self, store):
        store.create_user("ada")
        store.create_user("Ada")

        assert [user.username for user in store.list_users()] == ["ada", "Ada"]

    def test_lookup_by_id_and_username(self, store):
        user = store.create_user("ada")

        assert store.get_user(user.id).username == "ada"
        assert store.get_user_by_username("ada").id == user.id
        assert store.get_user("missing") is None
        assert store.get_user_by_username("grace") is None

    def test_update_applies_allow_listed_fields_only(self, store):
        user = store.create_user("ada")

        updated = store.update_user(
            user.id,
            {
                "id": "hijack",
                "bio": "Mathematician",
                "email": "ada@example.com",
                "username": "hacker",
                "totalLikes": 99,
            },
        )

        assert updated.id == user.id
        assert updated.bio == "Mathematician"
        assert updated.email == "ada@example.com"
        assert updated.username == "ada"
        assert updated.total_likes == 0
        assert updated.updated_at is not None

        stored = store.get_user(user.id)
        assert stored.bio == "Mathematician"
        assert store.get_user("hijack") is None
        assert stored.username == "ada"

    def test_update_unknown_user(self, store):
        assert store.update_user("missing", {"bio": "x"}) is None

    def test_invalid_update_leaves_user_untouched(self, store):
        user = store.create_user("ada")

        with pytest.raises(ValidationError):
            store.update_user(user.id, {"bio": "ok", "email": ["not", "a", "string"]})

        stored = store.get_user(user.id)
        assert stored.bio == ""
        assert stored.email == ""


class TestStats:
    def test_counts(self, store):
        store.create_user("ada")
        store.create_image(make_image("1", is_public=True))
        store.create_image(make_image("2"))
        store.like_image("1")
        store.like_image("1")

        assert store.stats() == {
            "totalImages": 2,
            "publicImages": 1,
            "totalLikes": 2,
            "totalUsers": 1,
        }


# ---------------------------------------------------------------------------
# Backend-specific behaviour
# ---------------------------------------------------------------------------


class TestInMemoryStore:
    def test_like_on_shared_record_counts_once(self):
        store = InMemoryGalleryStore()
        record = store.create_image(make_image("1", is_public=True))

        store.like_image("1")

        assert record.likes == 1


class TestSQLiteStore:
    def test_data_survives_reopen(self, temp_dir):
        db_path = temp_dir / "gallery.db"
        first = SQLiteGalleryStore(db_path)
        first.create_image(make_image("1", is_public=True))
        first.create_user("ada")

        reopened = SQLiteGalleryStore(db_path)

        assert community_ids(reopened) == ["1"]
        assert reopened.get_user_by_username("ada") is not None

    def test_creates_missing_directory(self, temp_dir):
        db_path = temp_dir / "a" / "b" / "gallery.db"
        SQLiteGalleryStore(db_path)
        assert db_path.exists()


class TestCreateStore:
    def test_memory_backend(self, test_config):
        assert isinstance(create_store(test_config), InMemoryGalleryStore)

    def test_sqlite_backend(self, temp_dir):
        settings = PixelPromptConfig(
            _env_file=None, store_backend="sqlite", database_path=temp_dir / "db" / "g.db"
        )
        store = create_store(settings)
        assert isinstance(store, SQLiteGalleryStore)
        assert store.db_path == temp_dir / "db" / "g.db"


def test_filter_user_updates():
    assert filter_user_updates({"bio": "b", "avatar": "a", "id": "x", "username": "y"}) == {
        "bio": "b",
        "avatar": "a",
    }
