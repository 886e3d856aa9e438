"""Configuration management for Bannercraft.

This module provides centralized configuration management using Pydantic Settings.
All configuration is loaded from environment variables with the BANNERCRAFT_ prefix,
allowing easy customization without code changes.

Environment Variable Loading
-----------------------------
Configuration values are loaded in the following priority order:
1. Environment variables (BANNERCRAFT_* prefix)
2. .env file in the project root
3. Default values defined in BannercraftConfig

Example .env file:
    BANNERCRAFT_AI_API_KEY=AIza...
    BANNERCRAFT_SERVER_PORT=8000
    BANNERCRAFT_STORAGE_DIR=storage
    BANNERCRAFT_AUTH_TOKENS={"dev-token": "user-1"}

Global Configuration Instance
------------------------------
A global `config` instance is created automatically at module import time.
This ensures a single source of truth for all configuration values across
the application.

Usage Example
-------------
    from bannercraft.core.config import config

    print(config.generate_rate_limit)
    print(config.storage_dir)

Rate Limits
-----------
Two request quotas are enforced per authenticated user, both over the same
fixed window (``rate_limit_window_ms``):

- banner generation: ``generate_rate_limit`` (5 per minute)
- file uploads: ``upload_rate_limit`` (10 per minute)

Windows are fixed, not sliding: a client can land up to twice the quota in a
short span that straddles a window boundary.

See Also
--------
- BannercraftConfig: Full configuration class documentation
- bannercraft.guard.rate_limiter: The limiter these settings drive
"""

from pathlib import Path
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

# Package-relative data directory holding the bundled banner catalog.
_PACKAGE_DIR = Path(__file__).resolve().parent.parent


class BannercraftConfig(BaseSettings):
    """Main configuration for Bannercraft.

    Values are loaded from environment variables with the BANNERCRAFT_ prefix,
    with fallback to defaults defined here. ``storage_dir`` is created on
    initialisation if it does not exist.

    Attributes
    ----------
    Server Settings:
        server_host : str
            Bind address for uvicorn
        server_port : int
            Port for uvicorn (1024-65535)
        log_level : Literal["debug", "info", "warning", "error"]
            Log level passed to uvicorn

    Paths:
        data_dir : Path
            Directory holding ``banner_configs.json``
        storage_dir : Path
            Directory for stored assets (generated banners, logos, uploads)
        gallery_db_name : str
            File name of the gallery metadata JSON inside ``storage_dir``
        usage_db_name : str
            File name of the usage event log inside ``storage_dir``

    Image Provider:
        ai_api_key : str
            API key for the generative image provider
        ai_base_url : str
            Base URL of the provider REST API
        ai_models : list[str]
            Model names tried in order until one returns an image
        ai_timeout_seconds : float
            Per-request timeout for provider calls

    Authentication:
        auth_tokens : dict[str, str]
            Bearer token -> user id map for the bundled token verifier

    Request Guard:
        generate_rate_limit : int
            Banner generations allowed per user per window
        upload_rate_limit : int
            File uploads allowed per user per window
        rate_limit_window_ms : int
            Fixed window length in milliseconds
        rate_limit_cleanup_interval_seconds : float
            Interval of the expired-entry sweep
        max_upload_bytes : int
            Largest accepted upload
        max_text_length : int
            Truncation length for the main banner text
        max_context_length : int
            Truncation length for the additional context
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="BANNERCRAFT_",
        case_sensitive=False,
    )

    # Server settings
    server_host: str = Field(
        default="0.0.0.0",
        description="Server bind address (0.0.0.0 for local network)",
    )
    server_port: int = Field(
        default=8000,
        description="Server port",
        ge=1024,
        le=65535,
    )
    log_level: Literal["debug", "info", "warning", "error"] = Field(
        default="info",
        description="Log level handed to uvicorn",
    )

    # Paths
    data_dir: Path = Field(
        default=_PACKAGE_DIR / "data",
        description="Directory holding banner_configs.json",
    )
    storage_dir: Path = Field(
        default=Path("storage"),
        description="Directory for generated banners, logos and uploads",
    )
    gallery_db_name: str = Field(
        default="gallery.json",
        description="Gallery metadata file name inside storage_dir",
    )
    usage_db_name: str = Field(
        default="usage.json",
        description="Usage event log file name inside storage_dir",
    )

    # Image provider
    ai_api_key: str = Field(
        default="",
        description="API key for the generative image provider",
    )
    ai_base_url: str = Field(
        default="https://generativelanguage.googleapis.com",
        description="Base URL of the provider REST API",
    )
    ai_models: list[str] = Field(
        default=[
            "gemini-2.5-flash-image-preview",
            "gemini-2.0-flash-exp",
            "gemini-1.5-flash",
        ],
        description="Models tried in order until one returns an image",
    )
    ai_timeout_seconds: float = Field(
        default=60.0,
        description="Per-request timeout for provider calls",
        gt=0,
    )

    # Authentication
    auth_tokens: dict[str, str] = Field(
        default_factory=dict,
        description="Bearer token -> user id map for the bundled verifier",
    )

    # Request guard
    generate_rate_limit: int = Field(default=5, ge=1)
    upload_rate_limit: int = Field(default=10, ge=1)
    rate_limit_window_ms: int = Field(default=60_000, ge=1)
    rate_limit_cleanup_interval_seconds: float = Field(default=300.0, gt=0)
    max_upload_bytes: int = Field(default=5 * 1024 * 1024, ge=1)
    max_text_length: int = Field(default=500, ge=1)
    max_context_length: int = Field(default=1000, ge=1)

    def __init__(self, **kwargs):
        """Initialize configuration and create the storage directory.

        Args:
            **kwargs: Configuration overrides (typically from environment variables)
        """
        super().__init__(**kwargs)

        self.storage_dir.mkdir(parents=True, exist_ok=True)

    @property
    def gallery_db(self) -> Path:
        """Path to the gallery metadata file."""
        return self.storage_dir / self.gallery_db_name

    @property
    def usage_db(self) -> Path:
        """Path to the usage event log."""
        return self.storage_dir / self.usage_db_name


# Global configuration instance
# It loads values from environment variables (BANNERCRAFT_* prefix) and .env file.
config = BannercraftConfig()
