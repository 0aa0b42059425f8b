"""Profile handlers: session restore, profile creation and editing."""

import logging
from typing import Any

from ..components import render_view
from ..models import UIState
from ..state import initialize_ui_state, refresh_galleries, restore_profile, verify_profile

logger = logging.getLogger(__name__)


def load_session(stored_profile: Any, state: UIState) -> tuple[UIState, dict[str, Any]]:
    """Initialize a page visit.

    Rehydrates the profile kept in browser storage, checks it against the
    API and loads the galleries.

    Args:
        stored_profile: Profile dict from browser local storage, or None
        state: UI state

    Returns:
        Tuple of (updated_state, view)
    """
    state = initialize_ui_state(state)
    restore_profile(state, stored_profile)

    try:
        if state.current_user:
            verify_profile(state)
        refresh_galleries(state)
    except Exception as e:
        logger.error(f"Error loading galleries: {e}", exc_info=True)
        state.error = str(e) or "Failed to load images"

    return state, render_view(state)


def create_profile(username: str, email: str, state: UIState) -> tuple[UIState, dict[str, Any]]:
    """Create a profile and make it the session's current user.

    Args:
        username: Requested username (required)
        email: Optional email address
        state: UI state

    Returns:
        Tuple of (updated_state, view)
    """
    state = initialize_ui_state(state)

    username = (username or "").strip()
    if not username:
        state.error = "Username is required"
        return state, render_view(state)

    try:
        state.current_user = state.api_client.create_user(username, (email or "").strip())
        state.error = None
        logger.info(f"Created profile {username}")
        refresh_galleries(state)
    except Exception as e:
        logger.error(f"Error creating profile: {e}", exc_info=True)
        state.error = str(e) or "Failed to create profile"

    return state, render_view(state)


def update_profile(email: str, bio: str, state: UIState) -> tuple[UIState, dict[str, Any]]:
    """Save edits to the current profile's email and bio.

    Args:
        email: New email address
        bio: New bio
        state: UI state

    Returns:
        Tuple of (updated_state, view)
    """
    state = initialize_ui_state(state)
    if state.current_user is None:
        return state, render_view(state)

    try:
        state.current_user = state.api_client.update_user(
            state.user_id, {"email": email or "", "bio": bio or ""}
        )
        logger.info(f"Updated profile {state.current_user.get('username')}")
    except Exception as e:
        logger.error(f"Error updating profile: {e}", exc_info=True)
        state.error = str(e) or "Failed to update profile"

    return state, render_view(state)
