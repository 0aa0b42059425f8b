"""HTTP client the UI uses to talk to the PixelPrompt REST API.

The UI never touches the store or the generation service directly; every
action goes through the same routes a browser client would use.
"""

import logging
from typing import Any

import httpx

logger = logging.getLogger(__name__)


class ApiClientError(Exception):
    """An API call failed.

    The message is the server's ``error`` field when there is one, so it can
    be shown to the user as-is.
    """

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class GalleryApiClient:
    """Synchronous wrapper around the REST routes.

    Args:
        base_url: API root, e.g. ``http://127.0.0.1:8000``.  Ignored when
            ``http_client`` is given.
        http_client: Pre-built ``httpx.Client`` (for example a FastAPI
            ``TestClient``) to send requests through.
    """

    def __init__(self, base_url: str | None = None, http_client: httpx.Client | None = None):
        if http_client is None and base_url is None:
            raise ValueError("Either base_url or http_client is required")
        # Generation has no server-side timeout, so neither does the UI.
        self._http = http_client or httpx.Client(base_url=base_url, timeout=None)

    def _request(self, method: str, path: str, **kwargs) -> dict[str, Any]:
        response = self._http.request(method, path, **kwargs)

        try:
            data = response.json()
        except ValueError:
            data = {}

        if not response.is_success:
            message = data.get("error") if isinstance(data, dict) else None
            logger.warning(f"{method} {path} failed with {response.status_code}: {message}")
            raise ApiClientError(
                message or f"Request failed ({response.status_code})",
                status_code=response.status_code,
            )
        return data

    # --- Generation ----------------------------------------------------------

    def generate(self, prompt: str, aspect_ratio: str, quality: str) -> dict[str, Any]:
        """Generate an image and return its (unsaved) record."""
        data = self._request(
            "POST",
            "/api/generate",
            json={"prompt": prompt, "aspectRatio": aspect_ratio, "quality": quality},
        )
        return data["image"]

    # --- Images --------------------------------------------------------------

    def save_image(self, image: dict[str, Any]) -> dict[str, Any]:
        """Save an image record; returns the stored record."""
        return self._request("POST", "/api/images", json=image)["image"]

    def list_user_images(self, user_id: str | None) -> list[dict[str, Any]]:
        params = {"type": "user"}
        if user_id:
            params["userId"] = user_id
        return self._request("GET", "/api/images", params=params)["images"]

    def list_community_images(self) -> list[dict[str, Any]]:
        return self._request("GET", "/api/images", params={"type": "community"})["images"]

    def like_image(self, image_id: str) -> int:
        """Like a community image; returns the new like count."""
        data = self._request("PATCH", "/api/images", json={"imageId": image_id, "action": "like"})
        return data["likes"]

    def toggle_public(self, image_id: str, user_id: str | None) -> bool:
        """Flip an owned image's visibility; returns the new value."""
        data = self._request(
            "PATCH",
            "/api/images",
            json={"imageId": image_id, "action": "togglePublic", "userId": user_id},
        )
        return data["isPublic"]

    def delete_image(self, image_id: str, user_id: str | None) -> None:
        params = {"imageId": image_id}
        if user_id:
            params["userId"] = user_id
        self._request("DELETE", "/api/images", params=params)

    # --- Users ---------------------------------------------------------------

    def create_user(self, username: str, email: str = "") -> dict[str, Any]:
        return self._request("POST", "/api/user", json={"username": username, "email": email})[
            "user"
        ]

    def get_user(self, user_id: str) -> dict[str, Any]:
        return self._request("GET", "/api/user", params={"userId": user_id})["user"]

    def update_user(self, user_id: str, updates: dict[str, Any]) -> dict[str, Any]:
        data = self._request("PATCH", "/api/user", json={"userId": user_id, "updates": updates})
        return data["user"]

    def close(self) -> None:
        self._http.close()
