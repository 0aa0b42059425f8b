"""PixelPrompt - Prompt-to-image generation with a community gallery."""

__version__ = "0.1.0"

from pixelprompt.core.config import PixelPromptConfig, config

__all__ = [
    "PixelPromptConfig",
    "config",
]
