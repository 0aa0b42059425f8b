"""View rendering for the PixelPrompt Gradio interface.

Handlers never build Gradio updates piecemeal.  They change the
:class:`UIState` and then call :func:`render_view`, which derives every
visible widget from the state.  ``VIEW_KEYS`` fixes the order in which
``app.py`` wires those values to components.
"""

from datetime import datetime
from typing import Any

import gradio as gr

from .models import UIState

VIEW_KEYS = (
    "browser_profile",
    "profile_card",
    "create_profile_group",
    "edit_profile_group",
    "edit_email",
    "edit_bio",
    "generate_button",
    "error_banner",
    "dismiss_error_button",
    "preview_group",
    "preview_image",
    "preview_caption",
    "share_button",
    "community_gallery",
    "community_details",
    "like_button",
    "user_gallery_header",
    "user_gallery",
    "user_details",
    "toggle_public_button",
    "delete_button",
)

_CAPTION_LENGTH = 60


def _format_month_year(timestamp: str | None) -> str:
    if not timestamp:
        return ""
    try:
        return datetime.fromisoformat(timestamp.replace("Z", "+00:00")).strftime("%B %Y")
    except ValueError:
        return ""


def _shorten(text: str, limit: int = _CAPTION_LENGTH) -> str:
    return text if len(text) <= limit else text[: limit - 1].rstrip() + "…"


def format_profile_card(user: dict[str, Any] | None) -> str:
    """Markdown for the profile card (guest prompt or the user's profile)."""
    if not user:
        return (
            "### Welcome, Guest!\n\n"
            "Create a profile to save and share your images."
        )

    lines = [f"### {user.get('username', '')}"]
    if user.get("avatar"):
        lines.insert(0, f"![avatar]({user['avatar']})")
    if user.get("email"):
        lines.append(user["email"])
    if user.get("bio"):
        lines.append(f"> {user['bio']}")
    lines.append(
        f"**{user.get('totalImages', 0)}** images · **{user.get('totalLikes', 0)}** likes"
    )
    member_since = _format_month_year(user.get("createdAt"))
    if member_since:
        lines.append(f"*Member since {member_since}*")
    return "\n\n".join(lines)


def format_gallery_items(
    images: list[dict[str, Any]], show_community_info: bool = False
) -> list[tuple[str, str]]:
    """Turn image records into ``(url, caption)`` pairs for ``gr.Gallery``."""
    items = []
    for image in images:
        caption = _shorten(image.get("prompt", ""))
        if show_community_info:
            author = image.get("username") or "Anonymous"
            caption = f"{caption} · by {author} · ♥ {image.get('likes', 0)}"
        items.append((image.get("url", ""), caption))
    return items


def format_image_details(image: dict[str, Any] | None, show_community_info: bool = False) -> str:
    """Markdown describing the selected image."""
    if image is None:
        return "*Select an image to see its details*"

    lines = [f"**Prompt:** {image.get('prompt', '')}"]
    if image.get("enhancedPrompt"):
        lines.append(f"**Enhanced prompt:** {image['enhancedPrompt']}")

    badges = [image.get("aspectRatio"), image.get("quality")]
    if not show_community_info:
        badges.append("Public" if image.get("isPublic") else "Private")
    lines.append(" · ".join(f"`{badge}`" for badge in badges if badge))

    if show_community_info:
        lines.append(f"**By:** {image.get('username') or 'Anonymous'}")
    lines.append(f"**Likes:** {image.get('likes', 0)}")
    return "\n\n".join(lines)


def like_button_label(image: dict[str, Any] | None, liked: bool) -> str:
    likes = image.get("likes", 0) if image else 0
    return f"{'♥' if liked else '♡'} {likes} Likes"


def render_view(state: UIState) -> dict[str, Any]:
    """Derive every view output from the session state.

    Args:
        state: UI state

    Returns:
        Mapping of ``VIEW_KEYS`` to component values or ``gr.update`` dicts
    """
    user = state.current_user
    has_user = user is not None
    preview = state.generated_image

    community_image = state.selected_community_image
    liked = community_image is not None and community_image["id"] in state.liked_images

    own_image = state.selected_user_image

    if has_user:
        user_header = f"### Your Gallery ({len(state.user_images)})"
    else:
        user_header = (
            "### Create a profile to save your images\n\n"
            "Sign up to keep track of your creations and share them with the community."
        )

    return {
        "browser_profile": user,
        "profile_card": format_profile_card(user),
        "create_profile_group": gr.update(visible=not has_user),
        "edit_profile_group": gr.update(visible=has_user),
        "edit_email": (user or {}).get("email", ""),
        "edit_bio": (user or {}).get("bio", ""),
        "generate_button": gr.update(
            value="Generating..." if state.is_generating else "Generate Image",
            interactive=not state.is_generating,
        ),
        "error_banner": gr.update(
            value=f"**Error:** {state.error}" if state.error else "",
            visible=bool(state.error),
        ),
        "dismiss_error_button": gr.update(visible=bool(state.error)),
        "preview_group": gr.update(visible=preview is not None),
        "preview_image": preview.get("url") if preview else None,
        "preview_caption": f"**Prompt:** {preview.get('prompt', '')}" if preview else "",
        "share_button": gr.update(
            visible=has_user and preview is not None,
            value="Make Private" if preview and preview.get("isPublic") else "Share with Community",
        ),
        "community_gallery": format_gallery_items(
            state.community_images, show_community_info=True
        ),
        "community_details": format_image_details(community_image, show_community_info=True),
        "like_button": gr.update(
            value=like_button_label(community_image, liked),
            interactive=community_image is not None and not liked,
        ),
        "user_gallery_header": user_header,
        "user_gallery": format_gallery_items(state.user_images),
        "user_details": format_image_details(own_image),
        "toggle_public_button": gr.update(
            value="Make Private" if own_image and own_image.get("isPublic") else "Make Public",
            interactive=own_image is not None,
        ),
        "delete_button": gr.update(interactive=own_image is not None),
    }
