"""Bannercraft — FastAPI Application.

This module is the single entry point for the web application.  It defines
the FastAPI ``app`` instance, all REST API routes, and the ``main()`` CLI
function that launches the uvicorn server.

Architecture
------------
Every request-accepting endpoint runs the same pipeline, in this order:

1. **Authentication**: a bearer token is resolved to a user id by the
   :class:`~bannercraft.api.auth.TokenVerifier` on ``app.state``.
2. **Rate limiting**: the user id is charged against a fixed-window quota
   (:class:`~bannercraft.guard.rate_limiter.FixedWindowRateLimiter`).
3. **Validation**: the body or upload goes through :mod:`bannercraft.guard`.
4. **Work**: only then is the image provider called or a file stored.

Route code raises; the exception handlers registered below translate guard,
provider and HTTP errors into ``{"error": <message>}`` JSON bodies.

- **Banner catalog** (sizes, themes, palettes, use cases) is loaded from
  ``banner_configs.json`` and served with the guard's allowed values via
  ``GET /api/config``.
- **Assets** (generated banners, logos, uploads) are written under the
  storage directory and served by ``StaticFiles`` at ``/storage/...``.
- **Gallery persistence** uses a single ``gallery.json`` file, no database
  required.
- **Usage tracking** appends generation and download events to
  ``usage.json``; ``GET /api/usage`` counts them per calendar month.

Endpoints
---------
=======  ================================  ==================================
Method   Path                              Purpose
=======  ================================  ==================================
GET      ``/api/health``                   Liveness and version
GET      ``/api/config``                   Banner catalog and allowed values
POST     ``/api/generate-banner``          Generate a banner image (5/min)
POST     ``/api/upload-logo``              Upload a logo image (10/min)
POST     ``/api/upload-image``             Upload a background image (10/min)
POST     ``/api/save-to-gallery``          Save a stored banner to the gallery
GET      ``/api/gallery``                  The caller's banners, paginated
GET      ``/api/gallery/public``           Newest public banners
GET      ``/api/gallery/{id}``             Single gallery entry
POST     ``/api/gallery/visibility``       Toggle public visibility
POST     ``/api/gallery/{id}/download``    Record a download, return the URL
DELETE   ``/api/gallery/{id}``             Delete banner and gallery entry
GET      ``/api/usage``                    The caller's monthly usage counts
OPTIONS  every POST path                   CORS preflight
=======  ================================  ==================================

Usage
-----
CLI (installed entry point)::

    bannercraft

Direct invocation::

    python -m bannercraft.api.main
"""

from __future__ import annotations

import asyncio
import contextlib
import json
import logging
import re
import time
import uuid
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import Depends, FastAPI, File, HTTPException, Query, Request, Response, UploadFile
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from starlette.exceptions import HTTPException as StarletteHTTPException

from bannercraft import __version__
from bannercraft.api.auth import (
    StaticTokenVerifier,
    get_current_user_id,
    get_optional_user_id,
)
from bannercraft.api.gallery_store import (
    VISIBILITY_FILTERS,
    asset_url,
    download_filename,
    filename_from_url,
    filter_gallery_entries,
    load_gallery_entries,
    paginate_gallery_entries,
    public_gallery_entries,
    save_asset,
    save_gallery_entries,
)
from bannercraft.api.models import BannerRequest, SaveToGalleryRequest, VisibilityRequest
from bannercraft.api.prompt_builder import build_banner_prompt
from bannercraft.api.usage_store import (
    EVENT_DOWNLOAD,
    EVENT_GENERATION,
    load_usage_events,
    month_of,
    parse_month,
    record_usage_event,
    usage_summary,
)
from bannercraft.core.config import BannercraftConfig, config
from bannercraft.core.image_provider import GeminiImageProvider, ImageGenerationError
from bannercraft.guard import (
    FixedWindowRateLimiter,
    GuardError,
    RateLimited,
    RateLimitRule,
    UploadedFile,
    ValidationError,
    sanitize_text,
    validate_api_key,
    validate_banner_request,
    validate_file,
)
from bannercraft.guard.validation import (
    ALLOWED_BACKGROUND_COLORS,
    ALLOWED_FONT_COLORS,
    ALLOWED_FONT_SIZES,
    ALLOWED_LOGO_POSITIONS,
    ALLOWED_MIME_TYPES,
    MAX_DIMENSION,
)

logger = logging.getLogger(__name__)

# File extension used when storing an accepted upload or generated image.
# Derived from the validated MIME type, never from the client's file name.
_MIME_EXTENSIONS: dict[str, str] = {
    "image/jpeg": "jpg",
    "image/png": "png",
    "image/webp": "webp",
    "image/gif": "gif",
}

MAX_TAGS = 20
MAX_TAG_LENGTH = 50

PREFLIGHT_HEADERS: dict[str, str] = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "POST, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type, Authorization",
}

# POST routes whose OPTIONS requests are answered with PREFLIGHT_HEADERS.
_PREFLIGHT_PATH_RE = re.compile(
    r"/api/(generate-banner|upload-logo|upload-image|save-to-gallery"
    r"|gallery/visibility|gallery/[^/]+/download)"
)

# ---------------------------------------------------------------------------
# Application lifecycle: guard state, provider client, sweep task.
# ---------------------------------------------------------------------------


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Manage application startup and shutdown lifecycle.

    On startup:
        Creates the rate limiter, the image provider and the token verifier
        and stores them on ``app.state``, then starts the periodic sweep of
        expired rate limit entries.  A malformed or missing API key is
        reported but does not prevent startup; generation requests will fail
        with a provider error instead.

    On shutdown:
        Cancels the sweep task and closes the provider's HTTP client.

    Args:
        app: The FastAPI application instance.

    Yields:
        Control back to the application for the duration of its lifetime.
    """
    # --- Startup -----------------------------------------------------------
    limiter = FixedWindowRateLimiter()
    app.state.rate_limiter = limiter
    app.state.image_provider = GeminiImageProvider(config)
    app.state.token_verifier = StaticTokenVerifier(config.auth_tokens)

    if not validate_api_key(config.ai_api_key):
        logger.warning("AI API key is missing or malformed; banner generation will fail.")
    if not config.auth_tokens:
        logger.warning("No auth tokens configured; authenticated endpoints will reject all calls.")

    cleanup_task = asyncio.create_task(
        limiter.run_periodic_cleanup(config.rate_limit_cleanup_interval_seconds)
    )
    logger.info(f"Bannercraft {__version__} started (storage: {config.storage_dir}).")

    yield  # Application runs here.

    # --- Shutdown ----------------------------------------------------------
    cleanup_task.cancel()
    with contextlib.suppress(asyncio.CancelledError):
        await cleanup_task
    await app.state.image_provider.aclose()
    logger.info("Bannercraft shut down.")


# ---------------------------------------------------------------------------
# FastAPI application instance.
# ---------------------------------------------------------------------------
app = FastAPI(
    title="Bannercraft",
    description="AI banner generation API with request validation and rate limiting.",
    version=__version__,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["GET", "POST", "DELETE", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization"],
)


# Registered after CORSMiddleware, so it runs first.
@app.middleware("http")
async def post_route_preflight(request: Request, call_next):
    """Answer OPTIONS on the POST routes with the fixed allow headers.

    Browser preflights (``Origin`` plus ``Access-Control-Request-*``) and
    plain OPTIONS requests get the same response; ``CORSMiddleware`` only
    sees preflights for the remaining routes.
    """
    if request.method == "OPTIONS" and _PREFLIGHT_PATH_RE.fullmatch(request.url.path):
        return Response(status_code=200, headers=PREFLIGHT_HEADERS)
    return await call_next(request)


app.mount("/storage", StaticFiles(directory=str(config.storage_dir)), name="storage")


# ---------------------------------------------------------------------------
# Dependencies.  Tests override these through ``app.dependency_overrides``.
# ---------------------------------------------------------------------------


def get_settings() -> BannercraftConfig:
    """Return the active configuration."""
    return config


def get_rate_limiter(request: Request) -> FixedWindowRateLimiter:
    return request.app.state.rate_limiter


def get_image_provider(request: Request) -> GeminiImageProvider:
    return request.app.state.image_provider


# ---------------------------------------------------------------------------
# Exception handlers.
# ---------------------------------------------------------------------------


@app.exception_handler(GuardError)
async def guard_error_handler(request: Request, exc: GuardError) -> JSONResponse:
    """Translate request guard errors into JSON error responses."""
    headers = None
    if isinstance(exc, RateLimited):
        headers = {
            "Retry-After": str(exc.retry_after),
            "X-RateLimit-Limit": str(exc.limit),
        }
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.message},
        headers=headers,
    )


@app.exception_handler(ImageGenerationError)
async def image_generation_error_handler(
    request: Request, exc: ImageGenerationError
) -> JSONResponse:
    """Report provider failures as 500 with the provider's message."""
    logger.error(f"Banner generation failed: {exc}")
    return JSONResponse(status_code=500, content={"error": str(exc)})


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Render ``HTTPException`` with the same body shape as guard errors."""
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.detail},
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(RequestValidationError)
async def request_validation_error_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Report malformed bodies and query parameters as 400."""
    errors = exc.errors()
    location = ".".join(str(part) for part in errors[0].get("loc", ())) if errors else ""
    message = f"Invalid request data: {location}" if location else "Invalid request data"
    return JSONResponse(status_code=400, content={"error": message})


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Last-resort handler; never leaks internals to the client."""
    logger.exception(f"Unhandled error on {request.method} {request.url.path}")
    return JSONResponse(status_code=500, content={"error": "Internal server error"})


# ---------------------------------------------------------------------------
# JSON helpers.
# ---------------------------------------------------------------------------


def _load_json(path: Path, default):
    """Load a JSON file from disk, returning *default* if it is missing or invalid.

    Args:
        path: Absolute path to the JSON file.
        default: Value to return if the file cannot be read or parsed.

    Returns:
        The parsed JSON content, or *default*.
    """
    if path.exists():
        try:
            with open(path, encoding="utf-8") as f:
                return json.load(f)
        except (OSError, ValueError):
            logger.warning(f"Could not read {path}; using defaults")
            return default
    return default


def _load_catalog(data_dir: Path) -> dict:
    """Load the banner catalog and attach each theme's color palette.

    Themes reference their palette by ``palette_id`` in
    ``banner_configs.json``; the API serves the palette embedded as
    ``colorPalette`` so a theme object can be posted back unchanged.
    """
    raw = _load_json(data_dir / "banner_configs.json", {})
    palettes = raw.get("color_palettes", [])
    palettes_by_id = {palette["id"]: palette for palette in palettes}

    themes = []
    for theme in raw.get("themes", []):
        resolved = {key: value for key, value in theme.items() if key != "palette_id"}
        resolved["colorPalette"] = palettes_by_id.get(theme.get("palette_id"), {})
        themes.append(resolved)

    return {
        "sizes": raw.get("sizes", []),
        "color_palettes": palettes,
        "themes": themes,
        "use_cases": raw.get("use_cases", []),
    }


def _rule(max_requests: int, settings: BannercraftConfig) -> RateLimitRule:
    return RateLimitRule(max_requests=max_requests, window_ms=settings.rate_limit_window_ms)


def _find_entry(gallery: list[dict], banner_id: str) -> dict | None:
    return next((g for g in gallery if g.get("id") == banner_id), None)


def _find_visible_entry(gallery: list[dict], banner_id: str, user_id: str | None) -> dict:
    """Return an entry that is public or owned by *user_id*, or raise 404."""
    entry = _find_entry(gallery, banner_id)
    if not entry or not (entry.get("is_public") or entry.get("user_id") == user_id):
        raise HTTPException(status_code=404, detail="Banner not found")
    return entry


def _find_owned_entry(gallery: list[dict], banner_id: str, user_id: str) -> dict:
    """Return the caller's gallery entry or raise 404.

    Entries owned by someone else are reported as missing rather than
    forbidden, so ids cannot be probed.
    """
    entry = _find_entry(gallery, banner_id)
    if not entry or entry.get("user_id") != user_id:
        raise HTTPException(status_code=404, detail="Banner not found")
    return entry


def _clean_tags(tags: list[str]) -> list[str]:
    """Sanitize, de-duplicate and cap the gallery tags."""
    cleaned: list[str] = []
    for tag in tags[:MAX_TAGS]:
        value = sanitize_text(tag, MAX_TAG_LENGTH, field="tags")
        if value and value not in cleaned:
            cleaned.append(value)
    return cleaned


# ---------------------------------------------------------------------------
# Routes.
# ---------------------------------------------------------------------------


@app.get("/api/health")
async def health() -> dict:
    """Liveness probe."""
    return {"status": "ok", "version": __version__}


@app.get("/api/config")
async def get_config(settings: BannercraftConfig = Depends(get_settings)) -> dict:
    """Return the banner catalog and the request guard's allowed values.

    The allowed values are the validator's own tuples, so the selectors the
    frontend renders always match what the validator accepts.

    Returns:
        Dictionary with ``version``, the catalog lists (``sizes``,
        ``themes``, ``color_palettes``, ``use_cases``), the allowed option
        values and the numeric ``limits``.
    """
    catalog = _load_catalog(settings.data_dir)
    return {
        "version": __version__,
        **catalog,
        "background_colors": list(ALLOWED_BACKGROUND_COLORS),
        "font_colors": list(ALLOWED_FONT_COLORS),
        "font_sizes": list(ALLOWED_FONT_SIZES),
        "logo_positions": list(ALLOWED_LOGO_POSITIONS),
        "limits": {
            "max_text_length": settings.max_text_length,
            "max_context_length": settings.max_context_length,
            "max_dimension": MAX_DIMENSION,
            "max_upload_bytes": settings.max_upload_bytes,
            "allowed_mime_types": list(ALLOWED_MIME_TYPES),
            "generate_per_window": settings.generate_rate_limit,
            "upload_per_window": settings.upload_rate_limit,
            "window_ms": settings.rate_limit_window_ms,
        },
    }


@app.post("/api/generate-banner")
async def generate_banner(
    req: BannerRequest,
    user_id: str = Depends(get_current_user_id),
    settings: BannercraftConfig = Depends(get_settings),
    limiter: FixedWindowRateLimiter = Depends(get_rate_limiter),
    provider: GeminiImageProvider = Depends(get_image_provider),
) -> dict:
    """Generate a banner image for an authenticated user.

    This endpoint:

    1. Charges the user's generation quota.
    2. Validates and sanitizes the request.
    3. Compiles the prompt and calls the image provider.
    4. Stores the image under ``ai-generated/<user_id>/`` and records a
       ``banner_generation`` usage event.

    Args:
        req: Parsed :class:`BannerRequest` payload.

    Returns:
        Dictionary with ``success``, ``imageUrl``, ``fileName``, ``width``,
        ``height`` and ``model``.

    Raises:
        RateLimited: Quota exhausted (429).
        ValidationError: The request failed validation (400).
        ImageGenerationError: The provider produced no image (500).
    """
    limiter.check(user_id, _rule(settings.generate_rate_limit, settings))

    validated = validate_banner_request(
        req,
        max_text_length=settings.max_text_length,
        max_context_length=settings.max_context_length,
    )
    prompt = build_banner_prompt(validated)

    image = await provider.generate(prompt)

    extension = _MIME_EXTENSIONS[image.mime_type]
    filename = save_asset(
        settings.storage_dir, f"ai-generated/{user_id}", image.image_bytes, extension
    )
    record_usage_event(settings.usage_db, EVENT_GENERATION, user_id, request=validated)

    return {
        "success": True,
        "imageUrl": asset_url(filename),
        "fileName": filename,
        "width": image.width,
        "height": image.height,
        "model": image.model,
    }


async def _store_upload(
    upload: UploadFile | None,
    folder: str,
    user_id: str,
    settings: BannercraftConfig,
    limiter: FixedWindowRateLimiter,
) -> str:
    """Charge the upload quota, validate *upload* and store it.

    At most ``max_upload_bytes + 1`` bytes are read, which is enough to tell
    an oversized file from an acceptable one.

    Returns:
        The stored file's path relative to the storage directory.
    """
    limiter.check(user_id, _rule(settings.upload_rate_limit, settings))

    if upload is None:
        raise ValidationError("No file provided")

    data = await upload.read(settings.max_upload_bytes + 1)
    meta = UploadedFile(
        name=upload.filename or "",
        size_bytes=len(data),
        mime_type=upload.content_type or "",
    )
    validate_file(meta, max_size=settings.max_upload_bytes)

    return save_asset(
        settings.storage_dir, f"{folder}/{user_id}", data, _MIME_EXTENSIONS[meta.mime_type]
    )


@app.post("/api/upload-logo")
async def upload_logo(
    logo: UploadFile | None = File(default=None),
    user_id: str = Depends(get_current_user_id),
    settings: BannercraftConfig = Depends(get_settings),
    limiter: FixedWindowRateLimiter = Depends(get_rate_limiter),
) -> dict:
    """Store a logo image from the multipart field ``logo``.

    Returns:
        Dictionary with ``success``, ``logoUrl`` and ``fileName``.
    """
    filename = await _store_upload(logo, "logos", user_id, settings, limiter)
    return {"success": True, "logoUrl": asset_url(filename), "fileName": filename}


@app.post("/api/upload-image")
async def upload_image(
    image: UploadFile | None = File(default=None),
    user_id: str = Depends(get_current_user_id),
    settings: BannercraftConfig = Depends(get_settings),
    limiter: FixedWindowRateLimiter = Depends(get_rate_limiter),
) -> dict:
    """Store a banner or background image from the multipart field ``image``.

    Returns:
        Dictionary with ``success``, ``imageUrl`` and ``fileName``.
    """
    filename = await _store_upload(image, "banners", user_id, settings, limiter)
    return {"success": True, "imageUrl": asset_url(filename), "fileName": filename}


@app.post("/api/save-to-gallery")
async def save_to_gallery(
    req: SaveToGalleryRequest,
    user_id: str = Depends(get_current_user_id),
    settings: BannercraftConfig = Depends(get_settings),
) -> dict:
    """Save a previously stored banner to the caller's gallery.

    The banner data is validated exactly like a generation request.  The
    image must be a file this service stored for the same user.

    Args:
        req: Parsed :class:`SaveToGalleryRequest` payload.

    Returns:
        Dictionary with ``success`` and the new ``banner`` entry.

    Raises:
        ValidationError: Invalid banner data or an unknown image URL (400).
    """
    validated = validate_banner_request(
        req.banner_data,
        max_text_length=settings.max_text_length,
        max_context_length=settings.max_context_length,
    )

    filename = filename_from_url(req.local_image_url, settings.storage_dir)
    # Stored assets live at <folder>/<user_id>/<name>.
    parts = filename.split("/") if filename else []
    if len(parts) < 3 or parts[1] != user_id:
        raise ValidationError("Image not found")

    entry = {
        "id": str(uuid.uuid4()),
        "user_id": user_id,
        "filename": filename,
        "image_url": asset_url(filename),
        "logo_url": validated.logo_url,
        "request": validated.model_dump(by_alias=True),
        "tags": _clean_tags(req.tags),
        "is_public": req.is_public,
        "width": validated.size.width,
        "height": validated.size.height,
        "created_at": time.time(),
    }

    gallery = load_gallery_entries(settings.gallery_db, settings.storage_dir)
    # Insert newest first so the gallery is in reverse-chronological order.
    gallery.insert(0, entry)
    save_gallery_entries(settings.gallery_db, gallery)

    logger.info(f"Saved banner {entry['id']} to gallery for {user_id}")
    return {"success": True, "banner": entry}


@app.get("/api/gallery")
async def get_gallery(
    visibility: str = "all",
    search: str | None = None,
    page: int = 1,
    per_page: int = Query(default=20, ge=1, le=100),
    user_id: str = Depends(get_current_user_id),
    settings: BannercraftConfig = Depends(get_settings),
) -> dict:
    """Return a paginated listing of the caller's banners.

    Args:
        visibility: ``all``, ``public`` or ``private``.
        search: Case-insensitive match on use case, theme, size and tags.
        page: Page number (1-indexed, clamped to the valid range).
        per_page: Number of banners per page (1-100).

    Returns:
        Dictionary with keys ``total``, ``page``, ``per_page``, ``pages``,
        and ``banners``.

    Raises:
        HTTPException: 400 for an unknown visibility filter.
    """
    if visibility not in VISIBILITY_FILTERS:
        raise HTTPException(status_code=400, detail="Invalid visibility filter")

    gallery = load_gallery_entries(settings.gallery_db, settings.storage_dir)
    filtered = filter_gallery_entries(
        gallery, user_id=user_id, visibility=visibility, search=search
    )
    return paginate_gallery_entries(filtered, page, per_page)


@app.get("/api/gallery/public")
async def get_public_gallery(
    limit: int = Query(default=20, ge=1, le=100),
    settings: BannercraftConfig = Depends(get_settings),
) -> dict:
    """Return the newest public banners from all users."""
    gallery = load_gallery_entries(settings.gallery_db, settings.storage_dir)
    return {"banners": public_gallery_entries(gallery, limit)}


@app.get("/api/gallery/{banner_id}")
async def get_banner(
    banner_id: str,
    user_id: str | None = Depends(get_optional_user_id),
    settings: BannercraftConfig = Depends(get_settings),
) -> dict:
    """Return a single gallery entry.

    Public banners are visible to anyone; private ones only to their owner.

    Raises:
        HTTPException: 404 if the banner does not exist or is not visible.
    """
    gallery = load_gallery_entries(settings.gallery_db, settings.storage_dir)
    return _find_visible_entry(gallery, banner_id, user_id)


@app.post("/api/gallery/{banner_id}/download")
async def download_banner(
    banner_id: str,
    user_id: str = Depends(get_current_user_id),
    settings: BannercraftConfig = Depends(get_settings),
) -> dict:
    """Record a download of a gallery banner and return where to fetch it.

    Any signed-in user may download a public banner; private banners only
    their owner.  The download is attributed to the caller.

    Returns:
        Dictionary with ``success``, ``imageUrl`` and a suggested
        ``fileName``.

    Raises:
        HTTPException: 404 if the banner does not exist or is not visible.
    """
    gallery = load_gallery_entries(settings.gallery_db, settings.storage_dir)
    entry = _find_visible_entry(gallery, banner_id, user_id)

    record_usage_event(settings.usage_db, EVENT_DOWNLOAD, user_id, banner_id=banner_id)

    return {
        "success": True,
        "imageUrl": asset_url(entry["filename"]),
        "fileName": download_filename(entry),
    }


@app.post("/api/gallery/visibility")
async def set_visibility(
    req: VisibilityRequest,
    user_id: str = Depends(get_current_user_id),
    settings: BannercraftConfig = Depends(get_settings),
) -> dict:
    """Make one of the caller's banners public or private.

    Returns:
        Dictionary with ``success``, ``id`` and ``isPublic``.
    """
    gallery = load_gallery_entries(settings.gallery_db, settings.storage_dir)
    entry = _find_owned_entry(gallery, req.banner_id, user_id)

    entry["is_public"] = req.is_public
    save_gallery_entries(settings.gallery_db, gallery)

    return {"success": True, "id": req.banner_id, "isPublic": req.is_public}


@app.delete("/api/gallery/{banner_id}")
async def delete_banner(
    banner_id: str,
    user_id: str = Depends(get_current_user_id),
    settings: BannercraftConfig = Depends(get_settings),
) -> dict:
    """Delete one of the caller's banners.

    Removes both the image file and the metadata entry.

    Returns:
        Dictionary with ``success`` and ``deleted`` keys.
    """
    gallery = load_gallery_entries(settings.gallery_db, settings.storage_dir)
    entry = _find_owned_entry(gallery, banner_id, user_id)

    filepath = settings.storage_dir / entry["filename"]
    if filepath.exists():
        filepath.unlink()

    gallery = [g for g in gallery if g.get("id") != banner_id]
    save_gallery_entries(settings.gallery_db, gallery)

    logger.info(f"Deleted banner {banner_id} for {user_id}")
    return {"success": True, "deleted": banner_id}


@app.get("/api/usage")
async def get_usage(
    month: str | None = None,
    user_id: str = Depends(get_current_user_id),
    settings: BannercraftConfig = Depends(get_settings),
) -> dict:
    """Return the caller's generation and download counts for one month.

    Args:
        month: Calendar month as ``YYYY-MM`` (UTC); defaults to the current
            month.

    Returns:
        Dictionary with ``month``, ``generations`` and ``downloads``.

    Raises:
        HTTPException: 400 for a malformed month.
    """
    if month is None:
        month = month_of(time.time())
    else:
        try:
            month = parse_month(month)
        except ValueError:
            raise HTTPException(status_code=400, detail="Invalid month") from None

    events = load_usage_events(settings.usage_db)
    return usage_summary(events, user_id, month)


# ---------------------------------------------------------------------------
# CLI entry point.
# ---------------------------------------------------------------------------


def main() -> None:
    """Launch the uvicorn ASGI server.

    Reads host, port and log level from
    :data:`~bannercraft.core.config.config` (``BANNERCRAFT_SERVER_HOST``,
    ``BANNERCRAFT_SERVER_PORT``, ``BANNERCRAFT_LOG_LEVEL``).

    This function is registered as the ``bannercraft`` console script in
    ``pyproject.toml``.
    """
    import uvicorn

    uvicorn.run(
        "bannercraft.api.main:app",
        host=config.server_host,
        port=config.server_port,
        log_level=config.log_level,
        reload=False,
    )


if __name__ == "__main__":
    main()
