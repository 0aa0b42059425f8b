"""Data models for PixelPrompt UI state and presentation constants."""

import logging
from dataclasses import dataclass, field
from typing import Any

logger = logging.getLogger(__name__)


@dataclass
class UIState:
    """Session state for the Gradio UI.

    Each browser session gets its own UIState.  Images and the user profile
    are kept in the JSON shape the API returns (camelCase keys).

    Attributes
    ----------
    api_client : Any | None
        GalleryApiClient used to reach the REST API (created lazily)
    current_user : dict | None
        Active profile, or None for a guest
    is_generating : bool
        True while a generation request is in flight
    generated_image : dict | None
        Most recently generated image (the preview)
    error : str | None
        Message shown in the error banner
    user_images : list[dict]
        Cached personal gallery
    community_images : list[dict]
        Cached community gallery (ranked by the server)
    liked_images : set[str]
        Ids liked during this session; each image can be liked once
    selected_community_id : str | None
        Image selected in the community gallery
    selected_user_image_id : str | None
        Image selected in the personal gallery
    """

    api_client: Any | None = None  # GalleryApiClient instance

    current_user: dict[str, Any] | None = None
    is_generating: bool = False
    generated_image: dict[str, Any] | None = None
    error: str | None = None

    user_images: list[dict[str, Any]] = field(default_factory=list)
    community_images: list[dict[str, Any]] = field(default_factory=list)
    liked_images: set[str] = field(default_factory=set)

    selected_community_id: str | None = None
    selected_user_image_id: str | None = None

    def is_initialized(self) -> bool:
        """Check if the API client has been created."""
        return self.api_client is not None

    @property
    def user_id(self) -> str | None:
        """Identifier of the active profile, if any."""
        return self.current_user.get("id") if self.current_user else None

    @property
    def selected_community_image(self) -> dict[str, Any] | None:
        return _find(self.community_images, self.selected_community_id)

    @property
    def selected_user_image(self) -> dict[str, Any] | None:
        return _find(self.user_images, self.selected_user_image_id)

    def __repr__(self) -> str:
        """String representation for debugging."""
        username = self.current_user.get("username") if self.current_user else None
        return (
            f"UIState(initialized={self.is_initialized()}, user={username}, "
            f"user_images={len(self.user_images)}, "
            f"community_images={len(self.community_images)})"
        )


def _find(images: list[dict[str, Any]], image_id: str | None) -> dict[str, Any] | None:
    if image_id is None:
        return None
    return next((image for image in images if image.get("id") == image_id), None)


# (label, value) pairs for the prompt form
ASPECT_RATIOS = [
    ("Square (1:1)", "1:1"),
    ("Landscape (16:9)", "16:9"),
    ("Portrait (9:16)", "9:16"),
    ("Standard (4:3)", "4:3"),
    ("Photo (3:2)", "3:2"),
]

QUALITY_OPTIONS = [
    ("Standard", "standard"),
    ("High Quality", "high"),
]

PROMPT_SUGGESTIONS = [
    "A serene mountain landscape at golden hour",
    "Futuristic cityscape with neon lights",
    "Adorable robot character in a garden",
    "Abstract geometric art with vibrant colors",
    "Cozy coffee shop interior with warm lighting",
    "Majestic dragon flying over ancient castle",
]

STYLE_MODIFIERS = [
    "photorealistic",
    "digital art",
    "oil painting",
    "watercolor",
    "minimalist",
    "cyberpunk",
    "fantasy",
    "vintage",
]

# Key under which the profile is kept in browser local storage
PROFILE_STORAGE_KEY = "pixelprompt_current_user"
