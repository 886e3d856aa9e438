"""Shared pytest fixtures for Bannercraft tests."""

import io
import shutil
import tempfile
from pathlib import Path
from typing import Generator

import pytest
from fastapi.testclient import TestClient
from PIL import Image

from bannercraft.api.auth import StaticTokenVerifier, get_token_verifier
from bannercraft.api.main import app, get_image_provider, get_rate_limiter, get_settings
from bannercraft.core.config import BannercraftConfig
from bannercraft.core.image_provider import GeneratedImage, ImageGenerationError
from bannercraft.guard.rate_limiter import FixedWindowRateLimiter

VALID_API_KEY = "AIza" + "A" * 35


class FakeClock:
    """Manually advanced millisecond clock for the rate limiter."""

    def __init__(self, start: float = 1_000_000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, ms: float) -> None:
        self.now += ms


class FakeImageProvider:
    """Stand-in for GeminiImageProvider that never touches the network.

    Records every prompt it receives.  Set ``error`` to make ``generate``
    raise it instead of returning an image.
    """

    def __init__(self, image_bytes: bytes) -> None:
        self.image_bytes = image_bytes
        self.prompts: list[str] = []
        self.error: ImageGenerationError | None = None

    async def generate(self, prompt: str) -> GeneratedImage:
        self.prompts.append(prompt)
        if self.error is not None:
            raise self.error
        return GeneratedImage(
            image_bytes=self.image_bytes,
            mime_type="image/png",
            model="fake-model",
            width=8,
            height=4,
        )

    async def aclose(self) -> None:
        pass


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
def test_config(temp_dir: Path) -> BannercraftConfig:
    """Create a test configuration with a temporary storage directory.

    Two users are configured: ``alice`` (token ``token-alice``) and ``bob``
    (token ``token-bob``).

    Args:
        temp_dir: Temporary directory from fixture

    Returns:
        BannercraftConfig instance for testing
    """
    return BannercraftConfig(
        storage_dir=temp_dir / "storage",
        ai_api_key=VALID_API_KEY,
        auth_tokens={"token-alice": "alice", "token-bob": "bob"},
        _env_file=None,
    )


@pytest.fixture
def fake_clock() -> FakeClock:
    """Clock starting at an arbitrary fixed instant."""
    return FakeClock()


@pytest.fixture
def limiter(fake_clock: FakeClock) -> FixedWindowRateLimiter:
    """Rate limiter driven by the fake clock."""
    return FixedWindowRateLimiter(clock=fake_clock)


@pytest.fixture
def png_bytes() -> bytes:
    """A real 8x4 PNG image."""
    buffer = io.BytesIO()
    Image.new("RGB", (8, 4), color=(37, 99, 235)).save(buffer, format="PNG")
    return buffer.getvalue()


@pytest.fixture
def fake_provider(png_bytes: bytes) -> FakeImageProvider:
    """Image provider returning ``png_bytes`` for every prompt."""
    return FakeImageProvider(png_bytes)


@pytest.fixture
def valid_banner_payload() -> dict:
    """A complete, valid ``POST /api/generate-banner`` body.

    Returns:
        JSON-ready dictionary using the API's camelCase field names
    """
    return {
        "size": {
            "id": "linkedin-banner",
            "name": "LinkedIn Banner",
            "width": 1584,
            "height": 396,
            "category": "social",
        },
        "theme": {
            "id": "modern-tech",
            "name": "Modern Tech",
            "style": "modern",
            "colorPalette": {"id": "professional-blue", "primary": "#2563eb"},
            "fontFamily": "Inter",
        },
        "useCase": {"id": "personal-branding", "name": "Personal Branding"},
        "customText": "Hello World",
        "context": "Senior data engineer",
        "backgroundColor": "#ffffff",
        "fontColor": "#000000",
        "fontSize": "24",
        "logoPosition": "top-right",
    }


@pytest.fixture
def app_limiter(fake_clock: FakeClock) -> FixedWindowRateLimiter:
    """Rate limiter used by the test client, driven by ``fake_clock``."""
    return FixedWindowRateLimiter(clock=fake_clock)


@pytest.fixture
def test_client(
    test_config: BannercraftConfig,
    app_limiter: FixedWindowRateLimiter,
    fake_provider: FakeImageProvider,
) -> Generator[TestClient, None, None]:
    """FastAPI TestClient with all external state replaced.

    The lifespan is not run; configuration, rate limiter, image provider
    and token verifier are injected through ``app.dependency_overrides``.
    """
    app.dependency_overrides[get_settings] = lambda: test_config
    app.dependency_overrides[get_rate_limiter] = lambda: app_limiter
    app.dependency_overrides[get_image_provider] = lambda: fake_provider
    app.dependency_overrides[get_token_verifier] = lambda: StaticTokenVerifier(
        test_config.auth_tokens
    )
    try:
        yield TestClient(app, raise_server_exceptions=False)
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
def alice_headers() -> dict:
    """Authorization header for user ``alice``."""
    return {"Authorization": "Bearer token-alice"}


@pytest.fixture
def bob_headers() -> dict:
    """Authorization header for user ``bob``."""
    return {"Authorization": "Bearer token-bob"}
