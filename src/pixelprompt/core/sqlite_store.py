"""SQLite-backed gallery store.

Every store operation runs in its own ``BEGIN IMMEDIATE`` transaction, so
read-modify-write sequences such as toggling visibility cannot interleave,
and likes are applied with ``likes = likes + 1`` inside SQLite so concurrent
likes are never lost.

The community listing is simply the ``is_public = 1`` subset of the
``images`` table, which keeps the community invariant by construction.
Image identifiers are not unique (the in-memory store does not enforce it
either); rows are addressed by an internal ``row_id`` and operations act on
the oldest row carrying the requested id.
"""

import logging
import sqlite3
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import Any

from pixelprompt.core.errors import UsernameTakenError
from pixelprompt.core.records import ImageRecord, UserRecord, community_sort_key, utcnow
from pixelprompt.core.store import GalleryStore, filter_user_updates

logger = logging.getLogger(__name__)

_SCHEMA = (
    """
    CREATE TABLE IF NOT EXISTS images (
        row_id INTEGER PRIMARY KEY AUTOINCREMENT,
        id TEXT NOT NULL,
        user_id TEXT NOT NULL,
        username TEXT,
        prompt TEXT NOT NULL DEFAULT '',
        enhanced_prompt TEXT NOT NULL DEFAULT '',
        url TEXT NOT NULL DEFAULT '',
        aspect_ratio TEXT NOT NULL DEFAULT '1:1',
        quality TEXT NOT NULL DEFAULT 'standard',
        is_public INTEGER NOT NULL DEFAULT 0,
        likes INTEGER NOT NULL DEFAULT 0 CHECK (likes >= 0),
        created_at TEXT NOT NULL
    )
    """,
    "CREATE INDEX IF NOT EXISTS idx_images_id ON images(id)",
    "CREATE INDEX IF NOT EXISTS idx_images_user ON images(user_id)",
    """
    CREATE TABLE IF NOT EXISTS users (
        row_id INTEGER PRIMARY KEY AUTOINCREMENT,
        id TEXT NOT NULL,
        username TEXT NOT NULL UNIQUE,
        email TEXT NOT NULL DEFAULT '',
        avatar TEXT NOT NULL DEFAULT '',
        bio TEXT NOT NULL DEFAULT '',
        total_images INTEGER NOT NULL DEFAULT 0,
        total_likes INTEGER NOT NULL DEFAULT 0,
        created_at TEXT NOT NULL,
        updated_at TEXT
    )
    """,
)

_IMAGE_COLUMNS = (
    "id, user_id, username, prompt, enhanced_prompt, url, aspect_ratio, "
    "quality, is_public, likes, created_at"
)
_USER_COLUMNS = (
    "id, username, email, avatar, bio, total_images, total_likes, created_at, updated_at"
)


def _image_from_row(row: sqlite3.Row) -> ImageRecord:
    data = dict(row)
    data["is_public"] = bool(data["is_public"])
    return ImageRecord.model_validate(data)


def _user_from_row(row: sqlite3.Row) -> UserRecord:
    return UserRecord.model_validate(dict(row))


class SQLiteGalleryStore(GalleryStore):
    """Gallery store persisted to a SQLite database file.

    Args:
        db_path: Path to the SQLite database file (created if missing).
    """

    backend_name = "sqlite"

    def __init__(self, db_path: Path | str):
        self.db_path = Path(db_path)
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self._initialize_db()
        logger.info(f"Initialized gallery database at {self.db_path}")

    @contextmanager
    def _transaction(self) -> Iterator[sqlite3.Connection]:
        """Open a connection and run the block in one immediate transaction."""
        conn = sqlite3.connect(self.db_path, isolation_level=None)
        conn.row_factory = sqlite3.Row
        try:
            conn.execute("BEGIN IMMEDIATE")
            try:
                yield conn
            except BaseException:
                conn.execute("ROLLBACK")
                raise
            conn.execute("COMMIT")
        finally:
            conn.close()

    def _initialize_db(self) -> None:
        """Create the schema if it doesn't exist."""
        with self._transaction() as conn:
            for statement in _SCHEMA:
                conn.execute(statement)

    # --- Images --------------------------------------------------------------

    def create_image(self, record: ImageRecord) -> ImageRecord:
        with self._transaction() as conn:
            conn.execute(
                f"INSERT INTO images ({_IMAGE_COLUMNS}) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)",
                (
                    record.id,
                    record.user_id,
                    record.username,
                    record.prompt,
                    record.enhanced_prompt,
                    record.url,
                    record.aspect_ratio,
                    record.quality,
                    int(record.is_public),
                    record.likes,
                    record.created_at.isoformat(),
                ),
            )
        logger.info(f"Saved image {record.id} for {record.user_id} (public={record.is_public})")
        return record

    def list_user_images(self, user_id: str | None = None) -> list[ImageRecord]:
        with self._transaction() as conn:
            if user_id is None:
                rows = conn.execute(
                    f"SELECT {_IMAGE_COLUMNS} FROM images ORDER BY row_id"
                ).fetchall()
            else:
                rows = conn.execute(
                    f"SELECT {_IMAGE_COLUMNS} FROM images WHERE user_id = ? ORDER BY row_id",
                    (user_id,),
                ).fetchall()
        return [_image_from_row(row) for row in rows]

    def list_community_images(self) -> list[ImageRecord]:
        with self._transaction() as conn:
            rows = conn.execute(
                f"SELECT {_IMAGE_COLUMNS} FROM images WHERE is_public = 1 ORDER BY row_id"
            ).fetchall()
        # Timestamps may carry different UTC offsets, so order on parsed values.
        images = [_image_from_row(row) for row in rows]
        return sorted(images, key=community_sort_key, reverse=True)

    def get_image(self, image_id: str) -> ImageRecord | None:
        with self._transaction() as conn:
            row = conn.execute(
                f"SELECT {_IMAGE_COLUMNS} FROM images WHERE id = ? ORDER BY row_id LIMIT 1",
                (image_id,),
            ).fetchone()
        return _image_from_row(row) if row else None

    def like_image(self, image_id: str) -> int | None:
        with self._transaction() as conn:
            row = conn.execute(
                "SELECT row_id FROM images WHERE id = ? AND is_public = 1 "
                "ORDER BY row_id LIMIT 1",
                (image_id,),
            ).fetchone()
            if row is None:
                return None

            conn.execute("UPDATE images SET likes = likes + 1 WHERE row_id = ?", (row["row_id"],))
            likes = conn.execute(
                "SELECT likes FROM images WHERE row_id = ?", (row["row_id"],)
            ).fetchone()["likes"]

        logger.debug(f"Image {image_id} now has {likes} likes")
        return likes

    def toggle_public(self, image_id: str, user_id: str | None) -> bool | None:
        with self._transaction() as conn:
            row = conn.execute(
                "SELECT row_id, is_public FROM images WHERE id = ? AND user_id = ? "
                "ORDER BY row_id LIMIT 1",
                (image_id, user_id),
            ).fetchone()
            if row is None:
                return None

            is_public = not bool(row["is_public"])
            conn.execute(
                "UPDATE images SET is_public = ? WHERE row_id = ?",
                (int(is_public), row["row_id"]),
            )

        logger.info(f"Image {image_id} is now {'public' if is_public else 'private'}")
        return is_public

    def delete_image(self, image_id: str, user_id: str | None) -> bool:
        with self._transaction() as conn:
            cursor = conn.execute(
                "DELETE FROM images WHERE id = ? AND user_id = ?",
                (image_id, user_id),
            )
            removed = cursor.rowcount > 0

        if removed:
            logger.info(f"Deleted image {image_id} for {user_id}")
        return removed

    # --- Users ---------------------------------------------------------------

    def create_user(self, username: str, email: str = "", avatar: str = "") -> UserRecord:
        user = UserRecord(username=username, email=email or "", avatar=avatar)
        try:
            with self._transaction() as conn:
                conn.execute(
                    f"INSERT INTO users ({_USER_COLUMNS}) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)",
                    (
                        user.id,
                        user.username,
                        user.email,
                        user.avatar,
                        user.bio,
                        user.total_images,
                        user.total_likes,
                        user.created_at.isoformat(),
                        None,
                    ),
                )
        except sqlite3.IntegrityError as e:
            raise UsernameTakenError(username) from e

        logger.info(f"Created user {user.username} ({user.id})")
        return user

    def get_user(self, user_id: str) -> UserRecord | None:
        with self._transaction() as conn:
            row = conn.execute(
                f"SELECT {_USER_COLUMNS} FROM users WHERE id = ? ORDER BY row_id LIMIT 1",
                (user_id,),
            ).fetchone()
        return _user_from_row(row) if row else None

    def get_user_by_username(self, username: str) -> UserRecord | None:
        with self._transaction() as conn:
            row = conn.execute(
                f"SELECT {_USER_COLUMNS} FROM users WHERE username = ?",
                (username,),
            ).fetchone()
        return _user_from_row(row) if row else None

    def list_users(self) -> list[UserRecord]:
        with self._transaction() as conn:
            rows = conn.execute(f"SELECT {_USER_COLUMNS} FROM users ORDER BY row_id").fetchall()
        return [_user_from_row(row) for row in rows]

    def update_user(self, user_id: str, updates: dict[str, Any]) -> UserRecord | None:
        changes = filter_user_updates(updates)

        with self._transaction() as conn:
            row = conn.execute(
                f"SELECT {_USER_COLUMNS} FROM users WHERE id = ? ORDER BY row_id LIMIT 1",
                (user_id,),
            ).fetchone()
            if row is None:
                return None

            user = UserRecord.model_validate({**dict(row), **changes})
            user.updated_at = utcnow()
            conn.execute(
                "UPDATE users SET email = ?, avatar = ?, bio = ?, updated_at = ? WHERE id = ?",
                (user.email, user.avatar, user.bio, user.updated_at.isoformat(), user_id),
            )

        logger.info(f"Updated user {user_id}: {sorted(changes)}")
        return user
