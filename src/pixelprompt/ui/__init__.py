"""Gradio user interface for PixelPrompt.

The UI talks to the REST API through :class:`~pixelprompt.ui.api_client.GalleryApiClient`
and keeps per-session view state in :class:`~pixelprompt.ui.models.UIState`.
"""
