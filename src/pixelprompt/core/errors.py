"""Exception types shared by the generation client, stores and routes.

Each exception carries the HTTP status code the API layer should answer
with, so route handlers can let them propagate and a single exception handler
in ``pixelprompt.api.main`` turns them into ``{"error": ..., "details": ...}``
responses.
"""

from typing import Any


class PixelPromptError(Exception):
    """Base class for errors that map onto an HTTP response.

    Attributes:
        message: Human-readable message, returned as the ``error`` field
        status_code: HTTP status code for the response
        details: Optional extra payload, returned as the ``details`` field
    """

    status_code: int = 500

    def __init__(self, message: str, status_code: int | None = None, details: Any = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code
        self.details = details

    def to_payload(self) -> dict[str, Any]:
        """Build the JSON error body for this exception."""
        payload: dict[str, Any] = {"error": self.message}
        if self.details is not None:
            payload["details"] = self.details
        return payload


class GenerationError(PixelPromptError):
    """Image generation failed (bad prompt, upstream error, or no image URL)."""


class UsernameTakenError(PixelPromptError):
    """A user with the requested username already exists."""

    status_code = 409

    def __init__(self, username: str):
        super().__init__("Username already exists")
        self.username = username
