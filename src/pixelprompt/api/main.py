"""PixelPrompt FastAPI Application.

This module is the single entry point for the REST API.  It defines the
FastAPI ``app`` instance, all routes, the error-to-JSON translation, and the
``main()`` CLI function that launches the uvicorn server.

Architecture
------------
- **Image generation** is delegated to
  :class:`~pixelprompt.core.generation_client.ImageGenerationClient`, which
  calls the hosted generation service once per request.
- **Gallery state** lives behind a
  :class:`~pixelprompt.core.store.GalleryStore` chosen by
  ``PIXELPROMPT_STORE_BACKEND`` (in-memory by default, SQLite optionally).
- **Errors** are always answered as ``{"error": ..., "details": ...}`` JSON
  bodies; see :func:`handle_pixelprompt_error` and friends.

Both collaborators are created in the lifespan handler and reached through
the :func:`get_store` and :func:`get_generation_client` dependencies, so
tests can swap them with ``app.dependency_overrides``.

Endpoints
---------
========  ==========================  ======================================
Method    Path                        Purpose
========  ==========================  ======================================
GET       ``/api/generate``           Describe the generation endpoint
POST      ``/api/generate``           Generate an image from a prompt
POST      ``/api/images``             Save an image record
GET       ``/api/images``             List user or community images
GET       ``/api/images/{id}``        Single image record
PATCH     ``/api/images``             Like / toggle public visibility
DELETE    ``/api/images``             Delete an owned image
POST      ``/api/user``               Create a profile
GET       ``/api/user``               Look up one user or list all users
PATCH     ``/api/user``               Update allow-listed profile fields
GET       ``/api/stats``              Gallery statistics
========  ==========================  ======================================

Usage
-----
CLI (installed entry point)::

    pixelprompt

Direct invocation::

    python -m pixelprompt.api.main
"""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import httpx
from fastapi import Depends, FastAPI, HTTPException, Query, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import ValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from pixelprompt import __version__
from pixelprompt.api.models import (
    CreateImageRequest,
    CreateUserRequest,
    GenerateRequest,
    ImageActionRequest,
    UpdateUserRequest,
)
from pixelprompt.core.config import PixelPromptConfig, config, configure_logging
from pixelprompt.core.errors import GenerationError, PixelPromptError
from pixelprompt.core.generation_client import ImageGenerationClient
from pixelprompt.core.records import dump_record
from pixelprompt.core.store import GalleryStore, create_store

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Application lifecycle: store and generation client setup and teardown.
# ---------------------------------------------------------------------------


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Manage application startup and shutdown lifecycle.

    On startup:
        Creates the configured :class:`GalleryStore` and an
        :class:`ImageGenerationClient` and stores both on ``app.state``.

    On shutdown:
        Closes the generation client's HTTP connection pool.

    Args:
        app: The FastAPI application instance.

    Yields:
        Control back to the application for the duration of its lifetime.
    """
    # --- Startup -----------------------------------------------------------
    app.state.store = create_store(config)
    app.state.generation_client = ImageGenerationClient(config)
    logger.info(f"Gallery store ready (backend={app.state.store.backend_name}).")

    yield  # Application runs here.

    # --- Shutdown ----------------------------------------------------------
    await app.state.generation_client.aclose()
    logger.info("Generation client closed on shutdown.")


# ---------------------------------------------------------------------------
# FastAPI application instance.
# ---------------------------------------------------------------------------
app = FastAPI(
    title="PixelPrompt",
    description="Prompt-to-image generation API with a community gallery.",
    version=__version__,
    lifespan=lifespan,
)

# Allow cross-origin requests so the UI can be served from a different port.
# In production, restrict ``allow_origins`` to the actual deployment domain.
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ---------------------------------------------------------------------------
# Dependencies.
# ---------------------------------------------------------------------------


def get_settings() -> PixelPromptConfig:
    """Return the global configuration."""
    return config


def get_store(request: Request) -> GalleryStore:
    """Return the gallery store created at startup."""
    return request.app.state.store


def get_generation_client(request: Request) -> ImageGenerationClient:
    """Return the generation client created at startup."""
    return request.app.state.generation_client


# ---------------------------------------------------------------------------
# Error translation.
#
# Every failure leaves the API as ``{"error": message}`` plus an optional
# ``details`` field, whatever raised it.
# ---------------------------------------------------------------------------


@app.exception_handler(PixelPromptError)
async def handle_pixelprompt_error(request: Request, exc: PixelPromptError) -> JSONResponse:
    """Translate domain errors using the status code they carry."""
    return JSONResponse(status_code=exc.status_code, content=exc.to_payload())


@app.exception_handler(StarletteHTTPException)
async def handle_http_exception(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Render ``HTTPException`` detail under the ``error`` key."""
    return JSONResponse(status_code=exc.status_code, content={"error": exc.detail})


@app.exception_handler(RequestValidationError)
@app.exception_handler(ValidationError)
async def handle_validation_error(
    request: Request, exc: RequestValidationError | ValidationError
) -> JSONResponse:
    """Schema violations are client errors (400), not 422s."""
    return JSONResponse(
        status_code=400,
        content={
            "error": "Invalid request",
            "details": jsonable_encoder(exc.errors(), exclude={"ctx", "url"}),
        },
    )


@app.exception_handler(Exception)
async def handle_unexpected_error(request: Request, exc: Exception) -> JSONResponse:
    """Last-resort handler: log the traceback and answer 500."""
    logger.error(f"Unhandled error on {request.method} {request.url.path}: {exc}", exc_info=exc)
    return JSONResponse(
        status_code=500,
        content={"error": "Internal server error", "details": str(exc)},
    )


# ---------------------------------------------------------------------------
# Generation routes.
# ---------------------------------------------------------------------------


@app.get("/api/generate")
async def describe_generation() -> dict:
    """Describe the generation endpoint.

    Returns:
        Dictionary with a ``message`` and the supported ``endpoints``.
    """
    return {
        "message": "Image generation API",
        "endpoints": {"POST": "Generate new image with prompt"},
    }


@app.post("/api/generate")
async def generate_image(
    req: GenerateRequest,
    client: ImageGenerationClient = Depends(get_generation_client),
) -> dict:
    """Generate one image from a text prompt.

    The image is not saved; the UI saves it through ``POST /api/images``
    once it knows who the owner is.

    Args:
        req: Validated :class:`GenerateRequest` payload.
        client: Generation client dependency.

    Returns:
        Dictionary with keys ``success``, ``image`` and ``message``.

    Raises:
        GenerationError: 400 for an empty prompt, the upstream status code
            for upstream failures, 500 when no image URL came back.
    """
    try:
        image = await client.generate(req.prompt, req.aspect_ratio, req.quality)
    except httpx.HTTPError as e:
        logger.error(f"Image generation transport error: {e}", exc_info=True)
        raise GenerationError("Internal server error", status_code=500, details=str(e)) from e

    return {
        "success": True,
        "image": image.to_dict(),
        "message": "Image generated successfully",
    }


# ---------------------------------------------------------------------------
# Image routes.
# ---------------------------------------------------------------------------


@app.post("/api/images")
async def create_image(
    req: CreateImageRequest,
    store: GalleryStore = Depends(get_store),
) -> dict:
    """Save an image record.

    Public images are also added to the community listing.

    Args:
        req: Validated :class:`CreateImageRequest` payload.
        store: Gallery store dependency.

    Returns:
        Dictionary with ``success``, the saved ``image`` and ``message``.
    """
    record = store.create_image(req.to_record())
    return {
        "success": True,
        "image": dump_record(record),
        "message": "Image saved successfully",
    }


@app.get("/api/images")
async def list_images(
    user_id: str | None = Query(default=None, alias="userId"),
    listing: str = Query(default="user", alias="type"),
    store: GalleryStore = Depends(get_store),
) -> dict:
    """List images.

    Args:
        user_id: Owner to filter by (user listing only; all images if omitted).
        listing: ``"community"`` for public images ranked by likes then
            recency; anything else returns the user listing.
        store: Gallery store dependency.

    Returns:
        Dictionary with ``success``, ``images`` and ``total``.
    """
    if listing == "community":
        images = store.list_community_images()
    else:
        images = store.list_user_images(user_id)

    return {
        "success": True,
        "images": [dump_record(image) for image in images],
        "total": len(images),
    }


@app.get("/api/images/{image_id}")
async def get_image(image_id: str, store: GalleryStore = Depends(get_store)) -> dict:
    """Return a single image record.

    Raises:
        HTTPException: 404 if the image is not found.
    """
    image = store.get_image(image_id)
    if image is None:
        raise HTTPException(status_code=404, detail="Image not found")
    return {"success": True, "image": dump_record(image)}


@app.patch("/api/images")
async def update_image(
    req: ImageActionRequest,
    store: GalleryStore = Depends(get_store),
) -> dict:
    """Like an image or toggle its community visibility.

    ``like`` adds exactly one like and does not check who is liking;
    the UI limits each session to one like per image.  ``togglePublic``
    only succeeds for the image's owner.

    Args:
        req: Validated :class:`ImageActionRequest` payload.
        store: Gallery store dependency.

    Returns:
        ``{"success": True, "likes": n}`` or ``{"success": True, "isPublic": flag}``.

    Raises:
        HTTPException: 404 if no matching image exists for the action.
    """
    if req.action == "like":
        likes = store.like_image(req.image_id)
        if likes is not None:
            return {"success": True, "likes": likes}
    elif req.action == "togglePublic":
        is_public = store.toggle_public(req.image_id, req.user_id)
        if is_public is not None:
            return {"success": True, "isPublic": is_public}

    raise HTTPException(status_code=404, detail="Image not found or action not supported")


@app.delete("/api/images")
async def delete_image(
    image_id: str | None = Query(default=None, alias="imageId"),
    user_id: str | None = Query(default=None, alias="userId"),
    store: GalleryStore = Depends(get_store),
) -> dict:
    """Delete the caller's image from the user and community listings.

    Deleting an image that does not exist (or is not owned by ``userId``)
    succeeds without changing anything.

    Raises:
        HTTPException: 400 if ``imageId`` is missing.
    """
    if not image_id:
        raise HTTPException(status_code=400, detail="Image ID is required")

    store.delete_image(image_id, user_id)
    return {"success": True, "message": "Image deleted successfully"}


# ---------------------------------------------------------------------------
# User routes.
# ---------------------------------------------------------------------------


@app.post("/api/user")
async def create_user(
    req: CreateUserRequest,
    store: GalleryStore = Depends(get_store),
    settings: PixelPromptConfig = Depends(get_settings),
) -> dict:
    """Create a user profile with zeroed counters.

    Raises:
        HTTPException: 400 if ``username`` is missing.
        UsernameTakenError: 409 if the username already exists.
    """
    if not req.username:
        raise HTTPException(status_code=400, detail="Username is required")

    user = store.create_user(
        req.username,
        email=req.email or "",
        avatar=settings.default_avatar_url,
    )
    return {
        "success": True,
        "user": dump_record(user),
        "message": "User created successfully",
    }


@app.get("/api/user")
async def get_user(
    user_id: str | None = Query(default=None, alias="userId"),
    username: str | None = Query(default=None),
    store: GalleryStore = Depends(get_store),
) -> dict:
    """Look up a user by id or username, or list every user.

    Without query parameters the response carries ``users``: a summary
    (id, username, avatar, counters) of every profile.

    Raises:
        HTTPException: 404 if the requested user does not exist.
    """
    if user_id or username:
        user = store.get_user(user_id) if user_id else store.get_user_by_username(username)
        if user is None:
            raise HTTPException(status_code=404, detail="User not found")
        return {"success": True, "user": dump_record(user)}

    return {"success": True, "users": [user.summary() for user in store.list_users()]}


@app.patch("/api/user")
async def update_user(
    req: UpdateUserRequest,
    store: GalleryStore = Depends(get_store),
) -> dict:
    """Update a profile's ``bio``, ``email`` or ``avatar``.

    Other keys in ``updates`` are ignored.

    Raises:
        HTTPException: 400 if ``userId`` is missing, 404 if the user is unknown.
    """
    if not req.user_id:
        raise HTTPException(status_code=400, detail="User ID is required")

    user = store.update_user(req.user_id, req.updates)
    if user is None:
        raise HTTPException(status_code=404, detail="User not found")

    return {
        "success": True,
        "user": dump_record(user),
        "message": "User updated successfully",
    }


@app.get("/api/stats")
async def get_stats(store: GalleryStore = Depends(get_store)) -> dict:
    """Return gallery statistics.

    Returns:
        Dictionary with ``totalImages``, ``publicImages``, ``totalLikes``
        and ``totalUsers``.
    """
    return store.stats()


# ---------------------------------------------------------------------------
# CLI entry point.
# ---------------------------------------------------------------------------


def main() -> None:
    """Launch the uvicorn ASGI server.

    Reads host and port from :data:`~pixelprompt.core.config.config` (which
    loads from ``PIXELPROMPT_SERVER_HOST`` and ``PIXELPROMPT_SERVER_PORT``).
    Defaults to ``0.0.0.0:8000``.

    This function is registered as the ``pixelprompt`` console script in
    ``pyproject.toml``.
    """
    import uvicorn

    configure_logging()
    uvicorn.run(
        "pixelprompt.api.main:app",
        host=config.server_host,
        port=config.server_port,
        reload=False,
    )


if __name__ == "__main__":
    main()
