"""Generative image provider client for Bannercraft.

This module provides :class:`GeminiImageProvider`, the single point of
contact with the external image generation API.  Route handlers call it only
after the request guard has approved a request; failures from the provider
are reported to the caller, never retried by the guard.

Key Responsibilities
--------------------
- **Model fallback**: the configured models are tried in order.  A non-2xx
  response, a transport error, a response without inline image data, or
  undecodable image data moves on to the next model, as does a response
  shaped differently than expected.  The first model that returns a
  decodable image wins.
- **Strict decoding**: base64 payloads are stripped of whitespace,
  checked against the base64 alphabet, re-padded, decoded, and verified as
  an image with Pillow before being accepted.  Formats outside
  ``STORABLE_MIME_TYPES`` are re-encoded to PNG, so the stored file's
  extension always matches its content.
- **Key in header**: the API key travels in the ``x-goog-api-key`` header,
  never in the URL, so it cannot leak into access or client logs.

Usage
-----
::

    from bannercraft.core.config import config
    from bannercraft.core.image_provider import GeminiImageProvider

    provider = GeminiImageProvider(config)
    image = await provider.generate("Create a professional banner image ...")
    await provider.aclose()

See Also
--------
- :mod:`bannercraft.api.prompt_builder`: builds the prompt passed in here.
- :mod:`bannercraft.api.main`: owns the provider for the app lifetime.
"""

from __future__ import annotations

import base64
import binascii
import io
import logging
import re
from dataclasses import dataclass
from typing import Any

import httpx
from PIL import Image

from bannercraft.core.config import BannercraftConfig

logger = logging.getLogger(__name__)

_BASE64_RE = re.compile(r"[A-Za-z0-9+/]*={0,2}")
_WHITESPACE_RE = re.compile(r"\s")

# Formats stored as-is.  Anything else Pillow can read is re-encoded to PNG.
STORABLE_MIME_TYPES: tuple[str, ...] = ("image/png", "image/jpeg", "image/webp", "image/gif")

# Pillow modes the PNG encoder accepts without conversion.
_PNG_MODES = ("1", "L", "LA", "P", "RGB", "RGBA", "I", "I;16")


class ImageGenerationError(Exception):
    """The provider could not produce an image."""


class ProviderConfigurationError(ImageGenerationError):
    """The provider is not configured (e.g. missing API key)."""


@dataclass
class GeneratedImage:
    """Decoded image returned by the provider.

    Attributes:
        image_bytes: Raw encoded image data.
        mime_type: MIME type of ``image_bytes``.
        model: Name of the model that produced the image.
        width: Pixel width reported by the decoder.
        height: Pixel height reported by the decoder.
    """

    image_bytes: bytes
    mime_type: str
    model: str
    width: int
    height: int


def decode_base64_image(data: str) -> tuple[bytes, str | None, int, int]:
    """Decode and verify a base64-encoded image.

    Args:
        data: Base64 text, possibly containing whitespace or missing padding.

    Returns:
        Tuple of ``(image_bytes, mime_type, width, height)``.  ``mime_type``
        is None if Pillow does not know a MIME type for the format.

    Raises:
        ImageGenerationError: If the text is not base64 or not an image.
    """
    cleaned = _WHITESPACE_RE.sub("", data)
    if not cleaned or not _BASE64_RE.fullmatch(cleaned):
        raise ImageGenerationError("Invalid base64 format")

    padded = cleaned + "=" * (-len(cleaned) % 4)
    try:
        image_bytes = base64.b64decode(padded, validate=True)
    except (binascii.Error, ValueError) as e:
        raise ImageGenerationError(f"Base64 decoding failed: {e}") from e

    try:
        with Image.open(io.BytesIO(image_bytes)) as image:
            width, height = image.size
            mime_type = Image.MIME.get(image.format or "")
            image.verify()
    except (OSError, SyntaxError, ValueError) as e:
        raise ImageGenerationError(f"Decoded data is not an image: {e}") from e

    return image_bytes, mime_type, width, height


def to_png(image_bytes: bytes) -> bytes:
    """Re-encode any image Pillow can read as PNG.

    Raises:
        ImageGenerationError: If the image cannot be decoded or re-encoded.
    """
    try:
        with Image.open(io.BytesIO(image_bytes)) as image:
            converted = image if image.mode in _PNG_MODES else image.convert("RGBA")
            buffer = io.BytesIO()
            converted.save(buffer, format="PNG")
    except (OSError, SyntaxError, ValueError) as e:
        raise ImageGenerationError(f"Could not convert image to PNG: {e}") from e
    return buffer.getvalue()


class GeminiImageProvider:
    """Client for the Gemini ``generateContent`` image endpoint.

    Args:
        config: Application configuration (API key, base URL, models, timeout).
        client: Optional pre-built ``httpx.AsyncClient``.  When omitted the
            provider creates and owns one; :meth:`aclose` closes only a
            client the provider created itself.
    """

    def __init__(
        self,
        config: BannercraftConfig,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self.api_key = config.ai_api_key
        self.models = list(config.ai_models)
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(
            base_url=config.ai_base_url,
            timeout=config.ai_timeout_seconds,
        )

    async def aclose(self) -> None:
        """Close the HTTP client if this provider created it."""
        if self._owns_client:
            await self._client.aclose()

    async def generate(self, prompt: str) -> GeneratedImage:
        """Generate one image for *prompt*, falling back across models.

        Args:
            prompt: Compiled banner prompt.

        Returns:
            The first image any configured model produced.

        Raises:
            ProviderConfigurationError: No API key or no models configured.
            ImageGenerationError: Every model failed; the message is the
                last model's failure.
        """
        if not self.api_key:
            raise ProviderConfigurationError("AI API key not configured")
        if not self.models:
            raise ProviderConfigurationError("No AI models configured")

        last_error: ImageGenerationError | None = None

        for model in self.models:
            try:
                image = await self._generate_with_model(model, prompt)
            except ImageGenerationError as e:
                logger.warning(f"Model {model} failed: {e}")
                last_error = e
                continue

            logger.info(
                f"Model {model} produced a {image.width}x{image.height} image "
                f"({len(image.image_bytes)} bytes)"
            )
            return image

        raise last_error or ImageGenerationError("All AI models failed")

    async def _generate_with_model(self, model: str, prompt: str) -> GeneratedImage:
        """Call a single model and decode its first inline image."""
        logger.info(f"Requesting banner image from model {model}")
        try:
            response = await self._client.post(
                f"/v1beta/models/{model}:generateContent",
                headers={"x-goog-api-key": self.api_key},
                json={"contents": [{"parts": [{"text": prompt}]}]},
            )
        except httpx.HTTPError as e:
            raise ImageGenerationError(f"Model {model} request failed: {e}") from e

        if response.is_error:
            logger.error(
                f"Model {model} returned {response.status_code}: {response.text[:500]}"
            )
            raise ImageGenerationError(
                f"Model {model} failed: {response.status_code} {response.reason_phrase}"
            )

        try:
            payload = response.json()
        except ValueError as e:
            raise ImageGenerationError(f"Model {model} returned invalid JSON") from e

        inline = self._find_inline_data(payload)
        if inline is None:
            raise ImageGenerationError(f"No image data received from {model}")

        image_bytes, mime_type, width, height = decode_base64_image(inline["data"])
        if mime_type not in STORABLE_MIME_TYPES:
            logger.info(f"Model {model} returned {mime_type or 'an unknown format'}; converting to PNG")
            image_bytes, mime_type = to_png(image_bytes), "image/png"
        return GeneratedImage(
            image_bytes=image_bytes,
            mime_type=mime_type,
            model=model,
            width=width,
            height=height,
        )

    @staticmethod
    def _find_inline_data(payload: Any) -> dict | None:
        """Return the first ``inlineData`` part carrying data, or None."""
        if not isinstance(payload, dict):
            return None
        candidates = payload.get("candidates")
        if not isinstance(candidates, list):
            return None
        for candidate in candidates:
            if not isinstance(candidate, dict):
                continue
            content = candidate.get("content")
            if not isinstance(content, dict):
                continue
            parts = content.get("parts")
            if not isinstance(parts, list):
                continue
            for part in parts:
                if not isinstance(part, dict):
                    continue
                inline = part.get("inlineData")
                if isinstance(inline, dict) and isinstance(inline.get("data"), str):
                    return inline
        return None
