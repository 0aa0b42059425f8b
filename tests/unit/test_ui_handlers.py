"""Tests for the Gradio event handlers.

The API client is a MagicMock attached to the UIState, so handlers run
without any server.  Views are the dictionaries produced by render_view;
``gr.update`` entries are plain dicts.
"""

from types import SimpleNamespace
from unittest.mock import MagicMock

import pytest

from pixelprompt.ui.api_client import ApiClientError
from pixelprompt.ui.handlers import (
    add_style_modifier,
    add_suggestion,
    create_profile,
    delete_selected_image,
    dismiss_error,
    generate_image,
    like_selected_image,
    load_session,
    refresh_gallery_view,
    select_community_image,
    select_user_image,
    share_generated_image,
    start_generation,
    toggle_selected_image,
    update_profile,
)
from pixelprompt.ui.models import UIState
from pixelprompt.ui.state import (
    cleanup_ui_state,
    initialize_ui_state,
    refresh_galleries,
    restore_profile,
    verify_profile,
)

ADA = {"id": "7", "username": "ada", "email": "", "bio": ""}
GENERATED = {
    "id": "100",
    "url": "https://img.test/fox.png",
    "prompt": "a red fox",
    "enhancedPrompt": "a red fox, high quality, detailed, professional photography, sharp details",
    "aspectRatio": "1:1",
    "quality": "standard",
    "isPublic": False,
}


@pytest.fixture
def api():
    client = MagicMock()
    client.list_community_images.return_value = []
    client.list_user_images.return_value = []
    client.generate.return_value = dict(GENERATED)
    client.get_user.return_value = dict(ADA)
    return client


@pytest.fixture
def state(api) -> UIState:
    return UIState(api_client=api)


@pytest.fixture
def user_state(api) -> UIState:
    return UIState(api_client=api, current_user=dict(ADA))


# ---------------------------------------------------------------------------
# State helpers
# ---------------------------------------------------------------------------


class TestStateHelpers:
    def test_initialize_creates_client(self):
        state = initialize_ui_state()
        assert state.is_initialized()
        state.api_client.close()

    def test_initialize_keeps_existing_client(self, state, api):
        assert initialize_ui_state(state).api_client is api

    @pytest.mark.parametrize("stored", [None, "", [], {"username": "x"}, {"id": ""}])
    def test_restore_ignores_invalid_profile(self, state, stored):
        restore_profile(state, stored)
        assert state.current_user is None

    def test_restore_valid_profile(self, state):
        restore_profile(state, dict(ADA))
        assert state.user_id == "7"

    def test_refresh_clears_stale_selection(self, user_state, api):
        user_state.selected_community_id = "gone"
        user_state.selected_user_image_id = "gone"

        refresh_galleries(user_state)

        assert user_state.selected_community_id is None
        assert user_state.selected_user_image_id is None
        api.list_user_images.assert_called_once_with("7")

    def test_refresh_guest_skips_user_listing(self, state, api):
        refresh_galleries(state)
        api.list_user_images.assert_not_called()
        assert state.user_images == []

    def test_verify_profile_refreshes_stored_copy(self, user_state, api):
        api.get_user.return_value = {**ADA, "bio": "Updated elsewhere"}

        verify_profile(user_state)

        api.get_user.assert_called_once_with("7")
        assert user_state.current_user["bio"] == "Updated elsewhere"

    def test_verify_profile_drops_unknown_user(self, user_state, api):
        api.get_user.side_effect = ApiClientError("User not found", 404)

        verify_profile(user_state)

        assert user_state.current_user is None

    def test_verify_profile_propagates_other_failures(self, user_state, api):
        api.get_user.side_effect = ApiClientError("Request failed (502)", 502)

        with pytest.raises(ApiClientError):
            verify_profile(user_state)

        assert user_state.current_user == ADA

    def test_cleanup_closes_client(self, state, api):
        cleanup_ui_state(state)

        api.close.assert_called_once()
        assert not state.is_initialized()

    def test_cleanup_uninitialized_state(self):
        state = UIState()
        cleanup_ui_state(state)
        assert state.api_client is None


# ---------------------------------------------------------------------------
# Generation
# ---------------------------------------------------------------------------


class TestGeneration:
    def test_start_generation(self, state):
        state.error = "old"
        state.generated_image = dict(GENERATED)

        state, view = start_generation(state)

        assert state.is_generating is True
        assert state.error is None
        assert state.generated_image is None
        assert view["generate_button"]["interactive"] is False

    def test_guest_generation_is_not_saved(self, state, api):
        state.is_generating = True

        state, view = generate_image("  a red fox  ", "1:1", "standard", state)

        api.generate.assert_called_once_with("a red fox", "1:1", "standard")
        api.save_image.assert_not_called()
        assert state.generated_image["userId"] == "anonymous"
        assert state.generated_image["username"] == "Anonymous"
        assert state.is_generating is False
        assert view["preview_group"]["visible"] is True
        assert view["share_button"]["visible"] is False

    def test_user_generation_is_saved_and_tagged(self, user_state, api):
        saved = {**GENERATED, "userId": "7", "username": "ada"}
        api.list_user_images.return_value = [saved]

        state, view = generate_image("a red fox", "16:9", "high", user_state)

        saved_payload = api.save_image.call_args.args[0]
        assert saved_payload["userId"] == "7"
        assert saved_payload["username"] == "ada"
        assert saved_payload["isPublic"] is False
        assert state.user_images == [saved]
        assert view["user_gallery_header"] == "### Your Gallery (1)"

    @pytest.mark.parametrize("prompt", ["", "   ", None])
    def test_empty_prompt_does_nothing(self, state, api, prompt):
        state.is_generating = True

        state, _ = generate_image(prompt, "1:1", "standard", state)

        api.generate.assert_not_called()
        assert state.is_generating is False
        assert state.error is None

    def test_failure_shows_error_and_resets(self, state, api):
        api.generate.side_effect = ApiClientError("Image generation failed", 503)
        state.is_generating = True

        state, view = generate_image("a red fox", "1:1", "standard", state)

        assert state.error == "Image generation failed"
        assert state.is_generating is False
        assert state.generated_image is None
        assert view["error_banner"]["visible"] is True
        assert view["generate_button"]["interactive"] is True

    def test_failure_without_message_uses_fallback(self, state, api):
        api.generate.side_effect = RuntimeError()

        state, _ = generate_image("a red fox", "1:1", "standard", state)

        assert state.error == "Failed to generate image"

    def test_dismiss_error(self, state):
        state.error = "boom"

        state, view = dismiss_error(state)

        assert state.error is None
        assert view["error_banner"]["visible"] is False


# ---------------------------------------------------------------------------
# Galleries
# ---------------------------------------------------------------------------


class TestGalleries:
    def test_refresh_view_reports_errors(self, state, api):
        api.list_community_images.side_effect = ApiClientError("Request failed (502)", 502)

        state, view = refresh_gallery_view(state)

        assert state.error == "Request failed (502)"
        assert view["error_banner"]["visible"] is True

    def test_select_community_image(self, state):
        state.community_images = [{"id": "1"}, {"id": "2"}]

        state, _ = select_community_image(SimpleNamespace(index=1), state)

        assert state.selected_community_id == "2"

    def test_select_out_of_range_clears_selection(self, state):
        state.community_images = [{"id": "1"}]
        state.selected_community_id = "1"

        state, _ = select_community_image(SimpleNamespace(index=5), state)

        assert state.selected_community_id is None

    def test_select_user_image(self, user_state):
        user_state.user_images = [{"id": "9"}]

        state, view = select_user_image(SimpleNamespace(index=0), user_state)

        assert state.selected_user_image_id == "9"
        assert view["delete_button"]["interactive"] is True

    def test_like_once_per_session(self, state, api):
        state.community_images = [{"id": "1", "likes": 0}]
        state.selected_community_id = "1"
        api.list_community_images.return_value = [{"id": "1", "likes": 1}]

        state, view = like_selected_image(state)
        state, view = like_selected_image(state)

        api.like_image.assert_called_once_with("1")
        assert "1" in state.liked_images
        assert view["like_button"]["interactive"] is False
        assert view["like_button"]["value"] == "♥ 1 Likes"

    def test_failed_like_can_be_retried(self, state, api):
        state.community_images = [{"id": "1", "likes": 0}]
        state.selected_community_id = "1"
        api.like_image.side_effect = ApiClientError("Image not found or action not supported", 404)

        state, _ = like_selected_image(state)

        assert state.liked_images == set()
        assert state.error == "Image not found or action not supported"

    def test_like_without_selection(self, state, api):
        like_selected_image(state)
        api.like_image.assert_not_called()

    def test_toggle_selected_image(self, user_state, api):
        user_state.user_images = [{"id": "9", "isPublic": False}]
        user_state.selected_user_image_id = "9"
        api.toggle_public.return_value = True
        api.list_user_images.return_value = [{"id": "9", "isPublic": True}]

        state, view = toggle_selected_image(user_state)

        api.toggle_public.assert_called_once_with("9", "7")
        assert view["toggle_public_button"]["value"] == "Make Private"

    def test_toggle_requires_profile(self, state, api):
        state.user_images = [{"id": "9"}]
        state.selected_user_image_id = "9"

        toggle_selected_image(state)

        api.toggle_public.assert_not_called()

    def test_share_generated_image_updates_preview(self, user_state, api):
        user_state.generated_image = dict(GENERATED)
        api.toggle_public.return_value = True

        state, view = share_generated_image(user_state)

        api.toggle_public.assert_called_once_with("100", "7")
        assert state.generated_image["isPublic"] is True
        assert view["share_button"]["value"] == "Make Private"

    def test_share_requires_profile(self, state, api):
        state.generated_image = dict(GENERATED)

        share_generated_image(state)

        api.toggle_public.assert_not_called()

    def test_delete_selected_image(self, user_state, api):
        user_state.user_images = [{"id": "9"}]
        user_state.selected_user_image_id = "9"

        state, view = delete_selected_image(user_state)

        api.delete_image.assert_called_once_with("9", "7")
        assert state.selected_user_image_id is None
        assert state.user_images == []
        assert view["delete_button"]["interactive"] is False


# ---------------------------------------------------------------------------
# Profiles
# ---------------------------------------------------------------------------


class TestProfiles:
    def test_load_session_restores_profile(self, state, api):
        state, view = load_session(dict(ADA), state)

        assert state.current_user == ADA
        assert view["browser_profile"] == ADA
        api.list_user_images.assert_called_once_with("7")

    def test_load_session_drops_unknown_profile(self, state, api):
        api.get_user.side_effect = ApiClientError("User not found", 404)

        state, view = load_session(dict(ADA), state)

        assert state.current_user is None
        assert view["browser_profile"] is None
        assert view["create_profile_group"]["visible"] is True
        api.list_user_images.assert_not_called()

    def test_load_session_as_guest(self, state, api):
        state, view = load_session(None, state)

        assert state.current_user is None
        assert view["create_profile_group"]["visible"] is True
        api.list_community_images.assert_called_once()

    def test_create_profile(self, state, api):
        api.create_user.return_value = dict(ADA)

        state, view = create_profile("  ada ", " ada@example.com ", state)

        api.create_user.assert_called_once_with("ada", "ada@example.com")
        assert state.current_user == ADA
        assert view["browser_profile"] == ADA
        assert view["edit_profile_group"]["visible"] is True

    def test_create_profile_requires_username(self, state, api):
        state, view = create_profile("   ", "", state)

        api.create_user.assert_not_called()
        assert state.error == "Username is required"
        assert view["error_banner"]["visible"] is True

    def test_duplicate_username_keeps_guest(self, state, api):
        api.create_user.side_effect = ApiClientError("Username already exists", 409)

        state, _ = create_profile("ada", "", state)

        assert state.current_user is None
        assert state.error == "Username already exists"

    def test_update_profile(self, user_state, api):
        api.update_user.return_value = {**ADA, "bio": "Mathematician"}

        state, view = update_profile("ada@example.com", "Mathematician", user_state)

        api.update_user.assert_called_once_with(
            "7", {"email": "ada@example.com", "bio": "Mathematician"}
        )
        assert state.current_user["bio"] == "Mathematician"
        assert view["browser_profile"]["bio"] == "Mathematician"

    def test_update_profile_as_guest(self, state, api):
        update_profile("x", "y", state)
        api.update_user.assert_not_called()


# ---------------------------------------------------------------------------
# Prompt helpers
# ---------------------------------------------------------------------------


class TestPromptHelpers:
    def test_add_suggestion_to_empty_prompt(self):
        assert add_suggestion("Futuristic cityscape", "") == "Futuristic cityscape"

    def test_add_suggestion_appends(self):
        assert add_suggestion("at dusk", "a castle") == "a castle, at dusk"

    def test_add_style_modifier(self):
        assert add_style_modifier("watercolor", "a castle") == "a castle, watercolor"

    def test_style_modifier_not_repeated(self):
        assert add_style_modifier("watercolor", "A Watercolor castle") == "A Watercolor castle"
