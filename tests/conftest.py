"""Shared pytest fixtures for PixelPrompt tests."""

import shutil
import tempfile
from collections.abc import Callable
from pathlib import Path
from typing import Generator

import httpx
import pytest
from fastapi.testclient import TestClient

from pixelprompt.api.main import app, get_generation_client, get_store
from pixelprompt.core.config import PixelPromptConfig
from pixelprompt.core.generation_client import ImageGenerationClient
from pixelprompt.core.sqlite_store import SQLiteGalleryStore
from pixelprompt.core.store import GalleryStore, InMemoryGalleryStore

FOX_URL = "https://images.example.com/red-fox.png"


@pytest.fixture
def anyio_backend() -> str:
    """Run async tests on asyncio only."""
    return "asyncio"


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for test files.

    Yields:
        Path to temporary directory

    Cleanup:
        Directory is removed after test completes
    """
    temp_path = Path(tempfile.mkdtemp())
    try:
        yield temp_path
    finally:
        shutil.rmtree(temp_path, ignore_errors=True)


@pytest.fixture
def test_config(temp_dir: Path) -> PixelPromptConfig:
    """Create a test configuration that never reads a .env file.

    Args:
        temp_dir: Temporary directory from fixture

    Returns:
        PixelPromptConfig instance for testing
    """
    return PixelPromptConfig(
        _env_file=None,
        generation_endpoint="https://generator.test/chat/completions",
        generation_model="test/flux",
        generation_api_key="test-key",
        generation_customer_id="cus_test",
        database_path=temp_dir / "gallery.db",
    )


@pytest.fixture(params=["memory", "sqlite"])
def store(request, temp_dir: Path) -> GalleryStore:
    """Yield each store backend in turn.

    Args:
        request: pytest request carrying the backend name
        temp_dir: Temporary directory for the SQLite file

    Returns:
        Empty GalleryStore
    """
    if request.param == "sqlite":
        return SQLiteGalleryStore(temp_dir / "gallery.db")
    return InMemoryGalleryStore()


def completion_response(content: str | None = FOX_URL, status_code: int = 200) -> httpx.Response:
    """Build a chat-completion style response carrying ``content``."""
    if content is None:
        return httpx.Response(status_code, json={"choices": []})
    return httpx.Response(
        status_code, json={"choices": [{"message": {"role": "assistant", "content": content}}]}
    )


@pytest.fixture
def upstream_requests() -> list[httpx.Request]:
    """Requests received by the fake generation service."""
    return []


@pytest.fixture
def upstream_handler(upstream_requests) -> dict[str, Callable[[httpx.Request], httpx.Response]]:
    """Swappable behaviour of the fake generation service.

    Tests replace ``upstream_handler["respond"]`` to simulate failures.
    """
    return {"respond": lambda request: completion_response()}


@pytest.fixture
def generation_client(
    test_config: PixelPromptConfig, upstream_handler, upstream_requests
) -> ImageGenerationClient:
    """ImageGenerationClient wired to an in-process mock transport."""

    def handle(request: httpx.Request) -> httpx.Response:
        upstream_requests.append(request)
        return upstream_handler["respond"](request)

    http_client = httpx.AsyncClient(transport=httpx.MockTransport(handle))
    return ImageGenerationClient(test_config, http_client=http_client)


@pytest.fixture
def memory_store() -> InMemoryGalleryStore:
    return InMemoryGalleryStore()


@pytest.fixture
def test_client(
    memory_store: InMemoryGalleryStore, generation_client: ImageGenerationClient
) -> Generator[TestClient, None, None]:
    """FastAPI TestClient with a fresh store and a mocked generation service."""
    app.dependency_overrides[get_store] = lambda: memory_store
    app.dependency_overrides[get_generation_client] = lambda: generation_client
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()
