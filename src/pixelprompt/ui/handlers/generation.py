"""Image generation handlers."""

import logging
from typing import Any

from ..components import render_view
from ..models import UIState
from ..state import initialize_ui_state, refresh_galleries

logger = logging.getLogger(__name__)


def start_generation(state: UIState) -> tuple[UIState, dict[str, Any]]:
    """Enter the in-progress state before the request is sent.

    Clears the previous preview and error and disables the generate button.

    Args:
        state: UI state

    Returns:
        Tuple of (updated_state, view)
    """
    state = initialize_ui_state(state)
    state.is_generating = True
    state.error = None
    state.generated_image = None
    return state, render_view(state)


def generate_image(
    prompt: str, aspect_ratio: str, quality: str, state: UIState
) -> tuple[UIState, dict[str, Any]]:
    """Generate an image and, for a profile, save it to the personal gallery.

    The image is tagged with the current user's id and username (or
    ``anonymous``) before saving.  Any failure ends in the error banner; the
    in-progress flag is always cleared.

    Args:
        prompt: Prompt text from the form
        aspect_ratio: Selected aspect ratio tag
        quality: Selected quality tier
        state: UI state

    Returns:
        Tuple of (updated_state, view)
    """
    state = initialize_ui_state(state)

    prompt = (prompt or "").strip()
    if not prompt:
        state.is_generating = False
        return state, render_view(state)

    try:
        image = state.api_client.generate(prompt, aspect_ratio, quality)

        user = state.current_user
        image = {
            **image,
            "userId": user["id"] if user else "anonymous",
            "username": user["username"] if user else "Anonymous",
        }
        state.generated_image = image
        logger.info(f"Generated image {image.get('id')}")

        if user:
            state.api_client.save_image(image)
            refresh_galleries(state)

    except Exception as e:
        logger.error(f"Error generating image: {e}", exc_info=True)
        state.error = str(e) or "Failed to generate image"

    finally:
        state.is_generating = False

    return state, render_view(state)
