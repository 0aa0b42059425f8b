"""Core functionality for prompt-to-image generation and the gallery.

The core package holds everything the API and UI layers build on:

- **PixelPromptConfig / config**: Configuration management using Pydantic
  Settings (``PIXELPROMPT_`` environment variables)
- **ImageGenerationClient**: Async client for the hosted generation service
- **ImageRecord / UserRecord**: Pydantic records with camelCase wire names
- **GalleryStore**: Storage interface with in-memory and SQLite backends

Architecture Overview
---------------------
1. **Configuration Layer** (config.py)
2. **Generation Layer** (generation_client.py):
   - Enhanced prompt construction
   - Single-attempt call to the external endpoint
3. **Storage Layer** (records.py, store.py, sqlite_store.py):
   - Image/user records and the community invariant
   - Ownership checks at the store boundary

Usage Example
-------------
    from pixelprompt.core import ImageRecord, config, create_store

    store = create_store(config)
    store.create_image(ImageRecord(url="https://...", is_public=True))
"""

from pixelprompt.core.config import PixelPromptConfig, config
from pixelprompt.core.errors import GenerationError, PixelPromptError, UsernameTakenError
from pixelprompt.core.generation_client import (
    GeneratedImage,
    ImageGenerationClient,
    build_enhanced_prompt,
)
from pixelprompt.core.records import ImageRecord, UserRecord
from pixelprompt.core.store import GalleryStore, InMemoryGalleryStore, create_store

__all__ = [
    "PixelPromptConfig",
    "config",
    "PixelPromptError",
    "GenerationError",
    "UsernameTakenError",
    "GeneratedImage",
    "ImageGenerationClient",
    "build_enhanced_prompt",
    "ImageRecord",
    "UserRecord",
    "GalleryStore",
    "InMemoryGalleryStore",
    "create_store",
]
