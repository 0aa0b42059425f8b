"""State management utilities for the PixelPrompt UI.

This module handles lazy initialization of the per-session UI state and the
gallery refreshes shared by several handlers.
"""

import logging
from typing import Any

from pixelprompt.core.config import config

from .api_client import ApiClientError, GalleryApiClient
from .models import UIState

logger = logging.getLogger(__name__)


def initialize_ui_state(state: UIState | None = None) -> UIState:
    """Initialize or ensure UI state is ready.

    Args:
        state: Existing UIState or None

    Returns:
        UIState with an API client attached
    """
    if state is None:
        logger.info("Creating new UIState")
        state = UIState()

    if state.is_initialized():
        return state

    logger.info(f"Connecting UI to API at {config.api_base_url}")
    state.api_client = GalleryApiClient(base_url=config.api_base_url)
    return state


def restore_profile(state: UIState, stored_profile: Any) -> UIState:
    """Adopt a profile previously saved in browser storage.

    Anything that does not look like a user record is ignored.

    Args:
        state: UI state
        stored_profile: Value read from browser local storage

    Returns:
        Updated state
    """
    if isinstance(stored_profile, dict) and stored_profile.get("id"):
        state.current_user = stored_profile
        logger.info(f"Restored profile {stored_profile.get('username')}")
    return state


def verify_profile(state: UIState) -> UIState:
    """Replace a restored profile with the API's current copy.

    A profile the API no longer knows (for example after the in-memory store
    restarted) is dropped, which also clears it from browser storage.

    Args:
        state: Initialized UI state with a current user

    Returns:
        Updated state

    Raises:
        ApiClientError: For failures other than an unknown user
    """
    try:
        state.current_user = state.api_client.get_user(state.user_id)
    except ApiClientError as e:
        if e.status_code != 404:
            raise
        logger.info(f"Stored profile {state.user_id} no longer exists, continuing as guest")
        state.current_user = None
    return state


def refresh_galleries(state: UIState) -> UIState:
    """Reload the community gallery and, for a profile, the personal gallery.

    Selections pointing at images that no longer exist are cleared.

    Args:
        state: Initialized UI state

    Returns:
        Updated state

    Raises:
        ApiClientError: If the API rejects a listing request
    """
    state.community_images = state.api_client.list_community_images()
    if state.current_user:
        state.user_images = state.api_client.list_user_images(state.user_id)
    else:
        state.user_images = []

    if state.selected_community_image is None:
        state.selected_community_id = None
    if state.selected_user_image is None:
        state.selected_user_image_id = None

    return state


def cleanup_ui_state(state: UIState) -> None:
    """Release session resources when Gradio discards the session.

    Args:
        state: UI state to clean up
    """
    if not state.is_initialized():
        return

    logger.info("Closing UI session API client")
    try:
        state.api_client.close()
    except Exception as e:
        logger.error(f"Error closing API client: {e}")
    state.api_client = None
