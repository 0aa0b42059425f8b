"""Community and personal gallery handlers (select, like, share, delete)."""

import logging
from typing import Any

import gradio as gr

from ..components import render_view
from ..models import UIState
from ..state import initialize_ui_state, refresh_galleries

logger = logging.getLogger(__name__)


def refresh_gallery_view(state: UIState) -> tuple[UIState, dict[str, Any]]:
    """Reload both galleries from the API.

    Args:
        state: UI state

    Returns:
        Tuple of (updated_state, view)
    """
    state = initialize_ui_state(state)
    try:
        refresh_galleries(state)
    except Exception as e:
        logger.error(f"Error refreshing galleries: {e}", exc_info=True)
        state.error = str(e) or "Failed to load images"
    return state, render_view(state)


def select_community_image(
    evt: gr.SelectData, state: UIState
) -> tuple[UIState, dict[str, Any]]:
    """Remember which community image was clicked.

    Args:
        evt: Gradio SelectData event containing the selected index
        state: UI state

    Returns:
        Tuple of (updated_state, view)
    """
    index = evt.index
    if isinstance(index, int) and 0 <= index < len(state.community_images):
        state.selected_community_id = state.community_images[index]["id"]
    else:
        state.selected_community_id = None
    return state, render_view(state)


def select_user_image(evt: gr.SelectData, state: UIState) -> tuple[UIState, dict[str, Any]]:
    """Remember which personal image was clicked.

    Args:
        evt: Gradio SelectData event containing the selected index
        state: UI state

    Returns:
        Tuple of (updated_state, view)
    """
    index = evt.index
    if isinstance(index, int) and 0 <= index < len(state.user_images):
        state.selected_user_image_id = state.user_images[index]["id"]
    else:
        state.selected_user_image_id = None
    return state, render_view(state)


def like_selected_image(state: UIState) -> tuple[UIState, dict[str, Any]]:
    """Like the selected community image, at most once per session.

    The server does not deduplicate likes; ``liked_images`` is the only
    guard and it is lost when the page reloads.

    Args:
        state: UI state

    Returns:
        Tuple of (updated_state, view)
    """
    state = initialize_ui_state(state)
    image_id = state.selected_community_id
    if image_id is None or image_id in state.liked_images:
        return state, render_view(state)

    try:
        state.api_client.like_image(image_id)
        state.liked_images.add(image_id)
        refresh_galleries(state)
    except Exception as e:
        logger.error(f"Error liking image {image_id}: {e}", exc_info=True)
        state.error = str(e) or "Failed to like image"

    return state, render_view(state)


def _toggle_public(state: UIState, image_id: str) -> UIState:
    is_public = state.api_client.toggle_public(image_id, state.user_id)
    if state.generated_image and state.generated_image.get("id") == image_id:
        state.generated_image = {**state.generated_image, "isPublic": is_public}
    refresh_galleries(state)
    return state


def toggle_selected_image(state: UIState) -> tuple[UIState, dict[str, Any]]:
    """Share or unshare the selected personal image.

    Args:
        state: UI state

    Returns:
        Tuple of (updated_state, view)
    """
    state = initialize_ui_state(state)
    image_id = state.selected_user_image_id
    if image_id is None or state.current_user is None:
        return state, render_view(state)

    try:
        _toggle_public(state, image_id)
    except Exception as e:
        logger.error(f"Error toggling visibility of {image_id}: {e}", exc_info=True)
        state.error = str(e) or "Failed to update image"

    return state, render_view(state)


def share_generated_image(state: UIState) -> tuple[UIState, dict[str, Any]]:
    """Share or unshare the image shown in the preview.

    Only available with a profile, since only saved images can be shared.

    Args:
        state: UI state

    Returns:
        Tuple of (updated_state, view)
    """
    state = initialize_ui_state(state)
    if state.generated_image is None or state.current_user is None:
        return state, render_view(state)

    try:
        _toggle_public(state, state.generated_image["id"])
    except Exception as e:
        logger.error(f"Error sharing generated image: {e}", exc_info=True)
        state.error = str(e) or "Failed to update image"

    return state, render_view(state)


def delete_selected_image(state: UIState) -> tuple[UIState, dict[str, Any]]:
    """Delete the selected personal image.

    Args:
        state: UI state

    Returns:
        Tuple of (updated_state, view)
    """
    state = initialize_ui_state(state)
    image_id = state.selected_user_image_id
    if image_id is None:
        return state, render_view(state)

    try:
        state.api_client.delete_image(image_id, state.user_id)
        state.selected_user_image_id = None
        refresh_galleries(state)
    except Exception as e:
        logger.error(f"Error deleting image {image_id}: {e}", exc_info=True)
        state.error = str(e) or "Failed to delete image"

    return state, render_view(state)


def dismiss_error(state: UIState) -> tuple[UIState, dict[str, Any]]:
    """Hide the error banner."""
    state.error = None
    return state, render_view(state)
