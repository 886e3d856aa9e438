"""Validation of banner generation requests and uploaded files.

The allowed-value tuples in this module are the single source of truth for
the selectable options: ``/api/config`` publishes them unchanged, so the
frontend selectors and the validator cannot drift apart.

Every check short-circuits on the first failure.  ``validate_banner_request``
never mutates its argument; it returns a validated copy.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import TYPE_CHECKING

from .errors import (
    FileTooLarge,
    InvalidDimensions,
    InvalidEnum,
    InvalidFileType,
    MissingField,
)
from .sanitizer import sanitize_text

if TYPE_CHECKING:
    from bannercraft.api.models import BannerRequest

logger = logging.getLogger(__name__)

MAX_TEXT_LENGTH = 500
MAX_CONTEXT_LENGTH = 1000
MAX_DIMENSION = 4000
MAX_FILE_SIZE = 5 * 1024 * 1024

# "" is the "Auto" choice in both palettes.
ALLOWED_BACKGROUND_COLORS: tuple[str, ...] = (
    "",
    "#ffffff",
    "#f3f4f6",
    "#6b7280",
    "#374151",
    "#000000",
    "#3b82f6",
    "#6366f1",
    "#8b5cf6",
    "#ec4899",
    "#ef4444",
    "#f97316",
    "#eab308",
    "#22c55e",
    "#14b8a6",
    "#06b6d4",
)

ALLOWED_FONT_COLORS: tuple[str, ...] = (
    "",
    "#000000",
    "#ffffff",
    "#374151",
    "#6b7280",
    "#9ca3af",
    "#3b82f6",
    "#6366f1",
    "#8b5cf6",
    "#ec4899",
    "#ef4444",
    "#f97316",
    "#eab308",
    "#22c55e",
    "#14b8a6",
    "#06b6d4",
)

# Pixel sizes, without the "px" suffix.
ALLOWED_FONT_SIZES: tuple[str, ...] = ("12", "14", "16", "18", "20", "24", "28", "32", "36", "48")

# Omitting the position (None or "") means automatic placement.
ALLOWED_LOGO_POSITIONS: tuple[str, ...] = (
    "top-left",
    "top-right",
    "bottom-left",
    "bottom-right",
    "center",
)

ALLOWED_MIME_TYPES: tuple[str, ...] = ("image/jpeg", "image/png", "image/webp", "image/gif")

DANGEROUS_EXTENSIONS: tuple[str, ...] = (
    ".exe",
    ".bat",
    ".cmd",
    ".scr",
    ".pif",
    ".com",
    ".js",
    ".html",
    ".htm",
    ".php",
    ".asp",
    ".jsp",
    ".py",
    ".sh",
    ".ps1",
)

_GEMINI_KEY_RE = re.compile(r"AIza[0-9A-Za-z\-_]{35}")


@dataclass(frozen=True)
class UploadedFile:
    """Metadata view over an uploaded binary payload.

    Attributes:
        name: Client-supplied file name.
        size_bytes: Payload size in bytes.
        mime_type: Client-declared content type.
    """

    name: str
    size_bytes: int
    mime_type: str

    @property
    def extension(self) -> str:
        """Lower-cased extension without the dot, or ``""``."""
        _, dot, ext = self.name.rpartition(".")
        return ext.lower() if dot else ""


def validate_banner_request(
    request: BannerRequest,
    *,
    max_text_length: int = MAX_TEXT_LENGTH,
    max_context_length: int = MAX_CONTEXT_LENGTH,
) -> BannerRequest:
    """Validate and sanitize a banner generation request.

    Checks run in a fixed order and the first failure wins:

    1. ``size``, ``theme`` and ``useCase`` are present with an ``id``.
    2. ``customText`` is sanitized and truncated to ``max_text_length``.
    3. ``context`` is sanitized and truncated to ``max_context_length``.
    4. ``backgroundColor`` is in the background palette.
    5. ``fontColor`` is in the font palette.
    6. ``fontSize`` is one of the fixed pixel sizes.
    7. ``logoPosition`` is one of the five positions.
    8. Width and height are in ``(0, MAX_DIMENSION]``.

    Re-validating the result returns an equal request, except when
    truncation left trailing whitespace in a text field: the second pass
    trims it.

    Args:
        request: Parsed request.  It is not modified.
        max_text_length: Truncation length for ``customText``.
        max_context_length: Truncation length for ``context``.

    Returns:
        A validated copy of the request.

    Raises:
        MissingField: A required section is missing.
        ContentRejected: Free text matched the denylist.
        InvalidEnum: A color, font size or logo position is not allowed.
        InvalidDimensions: Width or height is out of range.
    """
    required = (
        ("size", request.size),
        ("theme", request.theme),
        ("useCase", request.use_case),
    )
    for field, section in required:
        if section is None or not section.id:
            raise MissingField(field)

    updates: dict = {}

    if request.custom_text:
        updates["custom_text"] = sanitize_text(
            request.custom_text, max_text_length, field="customText"
        )

    if request.context:
        updates["context"] = sanitize_text(request.context, max_context_length, field="context")

    if request.background_color and request.background_color not in ALLOWED_BACKGROUND_COLORS:
        raise InvalidEnum("backgroundColor", "background color")

    if request.font_color and request.font_color not in ALLOWED_FONT_COLORS:
        raise InvalidEnum("fontColor", "font color")

    if request.font_size and request.font_size not in ALLOWED_FONT_SIZES:
        raise InvalidEnum("fontSize", "font size")

    if request.logo_position and request.logo_position not in ALLOWED_LOGO_POSITIONS:
        raise InvalidEnum("logoPosition", "logo position")

    width, height = request.size.width, request.size.height
    if width <= 0 or height <= 0:
        raise InvalidDimensions("Invalid banner dimensions", MAX_DIMENSION)
    if width > MAX_DIMENSION or height > MAX_DIMENSION:
        raise InvalidDimensions("Banner dimensions too large", MAX_DIMENSION)

    return request.model_copy(update=updates)


def validate_file(file: UploadedFile, *, max_size: int = MAX_FILE_SIZE) -> None:
    """Check an uploaded file's size, declared type, and name.

    Args:
        file: Metadata of the upload.
        max_size: Largest accepted payload in bytes.

    Raises:
        FileTooLarge: The payload exceeds ``max_size``.
        InvalidFileType: The MIME type is not an allowed image type, or the
            name ends in an executable or script extension.
    """
    if file.size_bytes > max_size:
        raise FileTooLarge(max_size)

    if file.mime_type not in ALLOWED_MIME_TYPES:
        raise InvalidFileType(
            "Invalid file type. Only JPEG, PNG, WebP, and GIF images are allowed."
        )

    if file.name.lower().endswith(DANGEROUS_EXTENSIONS):
        logger.warning(f"Rejected upload with dangerous extension ({file.size_bytes} bytes)")
        raise InvalidFileType("Invalid file type detected.")


def validate_api_key(api_key: str | None) -> bool:
    """Return True if *api_key* looks like a Gemini API key."""
    if not api_key or not isinstance(api_key, str):
        return False
    return bool(_GEMINI_KEY_RE.fullmatch(api_key))
