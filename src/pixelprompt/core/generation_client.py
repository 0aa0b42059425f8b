"""Client for the hosted image generation service.

The service speaks a chat-completion-style protocol: the enhanced prompt is
sent as a single user message and the image URL comes back as the content of
the first choice::

    POST <generation_endpoint>
    {"model": "...", "messages": [{"role": "user", "content": "<prompt>"}]}

    200 OK
    {"choices": [{"message": {"content": "https://.../image.png"}}]}

Each call is a single attempt.  There is no retry, and unless
``generation_timeout`` is configured there is no timeout either, so a hung
upstream holds only the request waiting on it.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

import httpx

from pixelprompt.core.config import PixelPromptConfig
from pixelprompt.core.errors import GenerationError
from pixelprompt.core.records import new_record_id, utcnow

logger = logging.getLogger(__name__)

QUALITY_STANDARD = "standard"
QUALITY_HIGH = "high"

_BASE_QUALIFIERS = "high quality, detailed, professional photography"
_QUALITY_SUFFIXES = {
    QUALITY_HIGH: "ultra-detailed, 8K resolution",
    QUALITY_STANDARD: "sharp details",
}


def build_enhanced_prompt(prompt: str, quality: str = QUALITY_STANDARD) -> str:
    """Append the fixed quality qualifiers to a prompt.

    Any quality other than ``"high"`` gets the standard suffix.

    Args:
        prompt: The user's prompt text.
        quality: Quality tier.

    Returns:
        The enhanced prompt, e.g. ``"a red fox, high quality, detailed,
        professional photography, sharp details"``.
    """
    suffix = _QUALITY_SUFFIXES.get(quality, _QUALITY_SUFFIXES[QUALITY_STANDARD])
    return f"{prompt}, {_BASE_QUALIFIERS}, {suffix}"


@dataclass
class GeneratedImage:
    """Result of a successful generation call (not yet saved anywhere)."""

    url: str
    prompt: str
    enhanced_prompt: str
    aspect_ratio: str
    quality: str
    id: str = field(default_factory=new_record_id)
    created_at: datetime = field(default_factory=utcnow)
    is_public: bool = False

    def to_dict(self) -> dict[str, Any]:
        """Wire representation (camelCase keys, ISO timestamp)."""
        return {
            "id": self.id,
            "url": self.url,
            "prompt": self.prompt,
            "enhancedPrompt": self.enhanced_prompt,
            "aspectRatio": self.aspect_ratio,
            "quality": self.quality,
            "createdAt": self.created_at.isoformat(),
            "isPublic": self.is_public,
        }


def extract_image_url(payload: Any) -> str | None:
    """Pull ``choices[0].message.content`` out of a completion response.

    Returns:
        The URL string, or None if any level of the structure is missing.
    """
    if not isinstance(payload, dict):
        return None
    choices = payload.get("choices")
    if not isinstance(choices, list) or not choices:
        return None
    first = choices[0]
    if not isinstance(first, dict):
        return None
    message = first.get("message")
    if not isinstance(message, dict):
        return None
    content = message.get("content")
    if not isinstance(content, str) or not content.strip():
        return None
    return content.strip()


class ImageGenerationClient:
    """Async client for the external generation endpoint.

    Args:
        settings: Configuration holding the endpoint, model and credentials.
        http_client: Optional pre-built ``httpx.AsyncClient``.  When omitted
            the client creates and owns one; pass your own (for example with
            an ``httpx.MockTransport``) to control transport behaviour.
    """

    def __init__(
        self,
        settings: PixelPromptConfig,
        http_client: httpx.AsyncClient | None = None,
    ):
        self.settings = settings
        self._owns_http_client = http_client is None
        self._http = http_client or httpx.AsyncClient(
            timeout=httpx.Timeout(settings.generation_timeout)
        )

    def _headers(self) -> dict[str, str]:
        return {
            "customerId": self.settings.generation_customer_id,
            "Content-Type": "application/json",
            "Authorization": f"Bearer {self.settings.generation_api_key}",
        }

    async def generate(
        self,
        prompt: str,
        aspect_ratio: str = "1:1",
        quality: str = QUALITY_STANDARD,
    ) -> GeneratedImage:
        """Generate one image for ``prompt``.

        Args:
            prompt: Free-text prompt; must contain non-whitespace text.
            aspect_ratio: Aspect ratio tag recorded with the image.
            quality: ``"standard"`` or ``"high"``; selects the prompt suffix.

        Returns:
            The generated image metadata with a fresh time-based id.

        Raises:
            GenerationError: 400 for an empty prompt, the upstream status
                code when the service answers with a non-success status, or
                500 when the response carries no image URL.
        """
        if not prompt or not prompt.strip():
            raise GenerationError("Prompt is required", status_code=400)

        enhanced_prompt = build_enhanced_prompt(prompt, quality)
        body = {
            "model": self.settings.generation_model,
            "messages": [{"role": "user", "content": enhanced_prompt}],
        }

        logger.info(f"Requesting image generation ({quality}, {aspect_ratio})")
        response = await self._http.post(
            self.settings.generation_endpoint,
            headers=self._headers(),
            json=body,
        )

        if not response.is_success:
            logger.error(f"Generation service error {response.status_code}: {response.text}")
            raise GenerationError(
                "Image generation failed",
                status_code=response.status_code,
                details=response.text,
            )

        try:
            payload = response.json()
        except ValueError:
            payload = None

        image_url = extract_image_url(payload)
        if image_url is None:
            logger.error("Generation service response did not contain an image URL")
            raise GenerationError("No image generated", status_code=500)

        return GeneratedImage(
            url=image_url,
            prompt=prompt,
            enhanced_prompt=enhanced_prompt,
            aspect_ratio=aspect_ratio,
            quality=quality,
        )

    async def aclose(self) -> None:
        """Close the underlying HTTP client if this instance created it."""
        if self._owns_http_client:
            await self._http.aclose()
