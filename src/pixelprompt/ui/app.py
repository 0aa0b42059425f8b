"""Gradio UI for PixelPrompt."""

import functools
import logging
from collections.abc import Callable

import gradio as gr

from pixelprompt.core.config import config, configure_logging

from .components import VIEW_KEYS
from .handlers import (
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
from .models import (
    ASPECT_RATIOS,
    PROFILE_STORAGE_KEY,
    PROMPT_SUGGESTIONS,
    QUALITY_OPTIONS,
    STYLE_MODIFIERS,
    UIState,
)
from .state import cleanup_ui_state

logger = logging.getLogger(__name__)

CUSTOM_CSS = """
.error-banner {
    border: 1px solid #dc2626;
    border-radius: 6px;
    padding: 8px 12px;
    background: rgba(220, 38, 38, 0.08);
}
.suggestion-row button {
    font-size: 0.8rem;
}
"""


def with_view_outputs(handler: Callable) -> Callable:
    """Adapt a ``(state, view)`` handler to Gradio's positional outputs.

    The wrapper keeps the handler's signature visible so Gradio still
    injects ``gr.SelectData`` arguments.

    Args:
        handler: Handler returning ``(state, view_dict)``

    Returns:
        Function returning ``(state, *view values in VIEW_KEYS order)``
    """

    @functools.wraps(handler)
    def wrapper(*args):
        state, view = handler(*args)
        return (state, *(view[key] for key in VIEW_KEYS))

    return wrapper


def create_ui() -> tuple[gr.Blocks, str]:
    """Create the Gradio UI.

    Returns:
        Tuple of (Gradio Blocks app, custom CSS string)
    """
    app = gr.Blocks(title="PixelPrompt")

    with app:
        # Session state - one instance per user, released when the session ends
        ui_state = gr.State(UIState(), delete_callback=cleanup_ui_state)
        # Profile survives reloads in the browser's local storage
        browser_profile = gr.BrowserState(None, storage_key=PROFILE_STORAGE_KEY)

        gr.Markdown(
            """
            # PixelPrompt
            ### Create stunning images with AI
            """
        )

        view: dict[str, gr.components.Component] = {"browser_profile": browser_profile}

        with gr.Row():
            with gr.Column(scale=1):
                profile_inputs = create_profile_card(view)

            with gr.Column(scale=3):
                prompt_inputs = create_prompt_section(view)

        with gr.Tabs():
            with gr.Tab("Community Gallery", id="community_tab"):
                create_community_tab(view)

            with gr.Tab("My Images", id="user_tab"):
                create_user_tab(view)

        outputs = [ui_state, *(view[key] for key in VIEW_KEYS)]

        # --- Page load: restore profile, load galleries --------------------
        app.load(
            fn=with_view_outputs(load_session),
            inputs=[browser_profile, ui_state],
            outputs=outputs,
        )

        # --- Generation ----------------------------------------------------
        # Two steps so the in-progress state renders before the request.
        view["generate_button"].click(
            fn=with_view_outputs(start_generation),
            inputs=[ui_state],
            outputs=outputs,
        ).then(
            fn=with_view_outputs(generate_image),
            inputs=[*prompt_inputs, ui_state],
            outputs=outputs,
        )

        view["dismiss_error_button"].click(
            fn=with_view_outputs(dismiss_error),
            inputs=[ui_state],
            outputs=outputs,
        )
        view["share_button"].click(
            fn=with_view_outputs(share_generated_image),
            inputs=[ui_state],
            outputs=outputs,
        )

        # --- Profile -------------------------------------------------------
        profile_inputs["create_button"].click(
            fn=with_view_outputs(create_profile),
            inputs=[profile_inputs["username"], profile_inputs["email"], ui_state],
            outputs=outputs,
        )
        profile_inputs["save_button"].click(
            fn=with_view_outputs(update_profile),
            inputs=[view["edit_email"], view["edit_bio"], ui_state],
            outputs=outputs,
        )

        # --- Galleries -----------------------------------------------------
        view["community_gallery"].select(
            fn=with_view_outputs(select_community_image),
            inputs=[ui_state],
            outputs=outputs,
        )
        view["like_button"].click(
            fn=with_view_outputs(like_selected_image),
            inputs=[ui_state],
            outputs=outputs,
        )
        view["user_gallery"].select(
            fn=with_view_outputs(select_user_image),
            inputs=[ui_state],
            outputs=outputs,
        )
        view["toggle_public_button"].click(
            fn=with_view_outputs(toggle_selected_image),
            inputs=[ui_state],
            outputs=outputs,
        )
        view["delete_button"].click(
            fn=with_view_outputs(delete_selected_image),
            inputs=[ui_state],
            outputs=outputs,
        )
        for refresh_button in (view["community_refresh"], view["user_refresh"]):
            refresh_button.click(
                fn=with_view_outputs(refresh_gallery_view),
                inputs=[ui_state],
                outputs=outputs,
            )

    return app, CUSTOM_CSS


def create_profile_card(view: dict) -> dict[str, gr.components.Component]:
    """Create the profile sidebar.

    Args:
        view: Registry of view components, filled in place

    Returns:
        Input components that are not part of the rendered view
    """
    view["profile_card"] = gr.Markdown()

    with gr.Group(visible=True) as create_group:
        gr.Markdown("**Create Your Profile**")
        username = gr.Textbox(label="Username *", placeholder="Enter your username")
        email = gr.Textbox(label="Email (optional)", placeholder="Enter your email")
        create_button = gr.Button("Create Profile", variant="primary")
    view["create_profile_group"] = create_group

    with gr.Group(visible=False) as edit_group:
        view["edit_email"] = gr.Textbox(label="Email")
        view["edit_bio"] = gr.Textbox(label="Bio", lines=3, placeholder="Tell us about yourself...")
        save_button = gr.Button("Save Profile")
    view["edit_profile_group"] = edit_group

    return {
        "username": username,
        "email": email,
        "create_button": create_button,
        "save_button": save_button,
    }


def create_prompt_section(view: dict) -> list[gr.components.Component]:
    """Create the prompt form, error banner and generated-image preview.

    Args:
        view: Registry of view components, filled in place

    Returns:
        ``[prompt, aspect_ratio, quality]`` inputs for the generate handler
    """
    gr.Markdown("## Create Amazing Images with AI")

    prompt = gr.Textbox(
        label="Describe your image",
        placeholder="A majestic dragon soaring through clouds at sunset...",
        lines=4,
    )

    gr.Markdown("**Try a suggestion**")
    with gr.Row(elem_classes="suggestion-row"):
        for suggestion in PROMPT_SUGGESTIONS:
            gr.Button(suggestion, size="sm").click(
                fn=functools.partial(add_suggestion, suggestion),
                inputs=[prompt],
                outputs=[prompt],
            )

    gr.Markdown("**Add a style**")
    with gr.Row(elem_classes="suggestion-row"):
        for modifier in STYLE_MODIFIERS:
            gr.Button(modifier, size="sm").click(
                fn=functools.partial(add_style_modifier, modifier),
                inputs=[prompt],
                outputs=[prompt],
            )

    with gr.Row():
        aspect_ratio = gr.Dropdown(label="Aspect Ratio", choices=ASPECT_RATIOS, value="1:1")
        quality = gr.Radio(label="Quality", choices=QUALITY_OPTIONS, value="standard")

    view["generate_button"] = gr.Button("Generate Image", variant="primary")

    with gr.Row():
        view["error_banner"] = gr.Markdown(visible=False, elem_classes="error-banner")
        view["dismiss_error_button"] = gr.Button("Dismiss", size="sm", visible=False)

    with gr.Group(visible=False) as preview_group:
        gr.Markdown("### Your Generated Image")
        view["preview_image"] = gr.Image(label="Generated Image", interactive=False)
        view["preview_caption"] = gr.Markdown()
        view["share_button"] = gr.Button("Share with Community", visible=False)
    view["preview_group"] = preview_group

    return [prompt, aspect_ratio, quality]


def create_community_tab(view: dict) -> None:
    """Create the community gallery tab.

    Args:
        view: Registry of view components, filled in place
    """
    gr.Markdown(
        "### Community Creations\n\nDiscover amazing images created by our community"
    )
    view["community_gallery"] = gr.Gallery(
        label="Community",
        columns=4,
        height=480,
        object_fit="cover",
        allow_preview=True,
    )
    with gr.Row():
        with gr.Column(scale=3):
            view["community_details"] = gr.Markdown()
        with gr.Column(scale=1):
            view["like_button"] = gr.Button("♡ 0 Likes", interactive=False)
            view["community_refresh"] = gr.Button("Refresh", size="sm")


def create_user_tab(view: dict) -> None:
    """Create the personal gallery tab.

    Args:
        view: Registry of view components, filled in place
    """
    view["user_gallery_header"] = gr.Markdown()
    view["user_gallery"] = gr.Gallery(
        label="My Images",
        columns=4,
        height=480,
        object_fit="cover",
        allow_preview=True,
    )
    with gr.Row():
        with gr.Column(scale=3):
            view["user_details"] = gr.Markdown()
        with gr.Column(scale=1):
            view["toggle_public_button"] = gr.Button("Make Public", interactive=False)
            view["delete_button"] = gr.Button("Delete", variant="stop", interactive=False)
            view["user_refresh"] = gr.Button("Refresh", size="sm")


def main():
    """Main entry point for the UI."""
    configure_logging()
    logger.info("Starting PixelPrompt UI...")
    logger.info(f"API base URL: {config.api_base_url}")

    app, custom_css = create_ui()

    logger.info(f"Launching Gradio UI on {config.ui_server_name}:{config.ui_server_port}")

    app.launch(
        server_name=config.ui_server_name,
        server_port=config.ui_server_port,
        share=config.ui_share,
        show_error=True,
        inbrowser=False,
        css=custom_css,
    )


if __name__ == "__main__":
    main()
