"""Core services for Bannercraft.

- **BannercraftConfig** / **config**: configuration via Pydantic Settings
  (``BANNERCRAFT_`` environment variables and ``.env``).
- **GeminiImageProvider**: client for the external image generation API,
  with model fallback and image verification.

The request guard lives in :mod:`bannercraft.guard`; the HTTP layer in
:mod:`bannercraft.api`.
"""

from bannercraft.core.config import BannercraftConfig, config
from bannercraft.core.image_provider import (
    GeminiImageProvider,
    GeneratedImage,
    ImageGenerationError,
    ProviderConfigurationError,
)

__all__ = [
    "BannercraftConfig",
    "GeminiImageProvider",
    "GeneratedImage",
    "ImageGenerationError",
    "ProviderConfigurationError",
    "config",
]
