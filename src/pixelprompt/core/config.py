"""Configuration management for PixelPrompt.

This module provides centralized configuration management using Pydantic Settings.
All configuration is loaded from environment variables with the PIXELPROMPT_ prefix,
allowing easy customization without code changes.

Environment Variable Loading
-----------------------------
Configuration values are loaded in the following priority order:
1. Environment variables (PIXELPROMPT_* prefix)
2. .env file in the project root
3. Default values defined in PixelPromptConfig

Example .env file:
    PIXELPROMPT_GENERATION_ENDPOINT=https://oi-server.onrender.com/chat/completions
    PIXELPROMPT_GENERATION_API_KEY=sk-...
    PIXELPROMPT_STORE_BACKEND=sqlite
    PIXELPROMPT_DATABASE_PATH=data/pixelprompt.db

Global Configuration Instance
------------------------------
A global `config` instance is created automatically at module import time.
This ensures a single source of truth for all configuration values across
the application.

Usage Example
-------------
    from pixelprompt.core.config import config

    print(config.generation_endpoint)
    print(config.store_backend)

Store Backends
--------------
- memory: process-local lists, lost on restart, not shared between workers
- sqlite: a single SQLite file at ``database_path``; its parent directory is
  created on initialization
"""

import logging
from pathlib import Path
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_AVATAR_URL = (
    "https://storage.googleapis.com/workspace-0f70711f-8b4e-4d94-86f1-2a93ccde5887/"
    "image/a89a3900-eaa9-4dc1-b914-cecaae1409ba.png"
)


class PixelPromptConfig(BaseSettings):
    """Main configuration for PixelPrompt.

    Values are loaded from environment variables with the PIXELPROMPT_ prefix,
    with fallback to defaults defined here.

    Attributes
    ----------
    Generation Service:
        generation_endpoint : str
            URL of the chat-completion-style image generation endpoint
        generation_model : str
            Model identifier sent in the request body
        generation_api_key : str
            Bearer token for the ``Authorization`` header
        generation_customer_id : str
            Value of the ``customerId`` header
        generation_timeout : float | None
            Seconds before the outbound call is abandoned (None = wait forever)

    Storage:
        store_backend : Literal["memory", "sqlite"]
            Which GalleryStore implementation backs the API
        database_path : Path
            SQLite file used by the sqlite backend

    Profiles:
        default_avatar_url : str
            Avatar assigned to newly created users

    Server Settings:
        server_host : str
            API bind address
        server_port : int
            API port (1024-65535)
        api_base_url : str
            Base URL the UI uses to reach the API

    UI Settings:
        ui_server_name : str
            Gradio bind address
        ui_server_port : int
            Gradio port (1024-65535)
        ui_share : bool
            Create public gradio.live link (keep False for local-only)

    Logging:
        log_level : str
            Root log level used by the entry points

    Examples
    --------
        >>> custom_config = PixelPromptConfig(
        ...     store_backend="sqlite",
        ...     database_path="/tmp/gallery.db",
        ... )
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="PIXELPROMPT_",
        case_sensitive=False,
    )

    # Generation service
    generation_endpoint: str = Field(
        default="https://oi-server.onrender.com/chat/completions",
        description="Chat-completion-style endpoint that returns an image URL",
    )
    generation_model: str = Field(
        default="replicate/black-forest-labs/flux-1.1-pro",
        description="Model identifier sent to the generation endpoint",
    )
    generation_api_key: str = Field(
        default="",
        description="Bearer token for the generation endpoint",
    )
    generation_customer_id: str = Field(
        default="",
        description="customerId header expected by the generation endpoint",
    )
    generation_timeout: float | None = Field(
        default=None,
        description="Outbound request timeout in seconds (None disables the timeout)",
        gt=0,
    )

    # Storage
    store_backend: Literal["memory", "sqlite"] = Field(
        default="memory",
        description="Gallery store backend (memory or sqlite)",
    )
    database_path: Path = Field(
        default=Path("data/pixelprompt.db"),
        description="SQLite database file for the sqlite backend",
    )

    # Profiles
    default_avatar_url: str = Field(
        default=DEFAULT_AVATAR_URL,
        description="Avatar URL assigned to new users",
    )

    # API server
    server_host: str = Field(
        default="0.0.0.0",
        description="API server bind address",
    )
    server_port: int = Field(
        default=8000,
        description="API server port",
        ge=1024,
        le=65535,
    )
    api_base_url: str = Field(
        default="http://127.0.0.1:8000",
        description="Base URL the UI uses to call the API",
    )

    # UI settings
    ui_server_name: str = Field(
        default="0.0.0.0",
        description="Gradio server bind address (0.0.0.0 for local network)",
    )
    ui_server_port: int = Field(
        default=7860,
        description="Gradio server port",
        ge=1024,
        le=65535,
    )
    ui_share: bool = Field(
        default=False,
        description="Create public gradio.live link (keep False for local-only)",
    )

    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="INFO",
        description="Root log level for the entry points",
    )

    def __init__(self, **kwargs):
        """Initialize configuration and create the database directory.

        The database directory is only created for the sqlite backend; the
        memory backend never touches the file system.

        Args:
            **kwargs: Configuration overrides (typically from environment variables)
        """
        super().__init__(**kwargs)

        if self.store_backend == "sqlite":
            self.database_path.parent.mkdir(parents=True, exist_ok=True)


def configure_logging(level: str | None = None) -> None:
    """Configure root logging for the CLI entry points.

    Args:
        level: Log level name; defaults to ``config.log_level``
    """
    logging.basicConfig(
        level=level or config.log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


# Global configuration instance
# Loads values from environment variables (PIXELPROMPT_* prefix) and .env file.
config = PixelPromptConfig()
