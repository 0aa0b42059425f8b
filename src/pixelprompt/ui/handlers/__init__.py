"""UI event handlers organized by feature area.

This package provides handlers for all Gradio UI events:
- generation: Prompt submission and the in-progress state
- gallery: Community/personal galleries, likes, sharing and deletion
- profile: Session restore, profile creation and editing
- prompt: Suggestion and style-modifier helpers for the prompt form

Every state-changing handler returns ``(state, view)`` where ``view`` comes
from :func:`pixelprompt.ui.components.render_view`.
"""

from .gallery import (
    delete_selected_image,
    dismiss_error,
    like_selected_image,
    refresh_gallery_view,
    select_community_image,
    select_user_image,
    share_generated_image,
    toggle_selected_image,
)
from .generation import (
    generate_image,
    start_generation,
)
from .profile import (
    create_profile,
    load_session,
    update_profile,
)
from .prompt import (
    add_style_modifier,
    add_suggestion,
)

__all__ = [
    # Generation handlers
    "generate_image",
    "start_generation",
    # Gallery handlers
    "delete_selected_image",
    "dismiss_error",
    "like_selected_image",
    "refresh_gallery_view",
    "select_community_image",
    "select_user_image",
    "share_generated_image",
    "toggle_selected_image",
    # Profile handlers
    "create_profile",
    "load_session",
    "update_profile",
    # Prompt helpers
    "add_style_modifier",
    "add_suggestion",
]
