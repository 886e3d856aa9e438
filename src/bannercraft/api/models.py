"""Pydantic request models for the Bannercraft API.

These models define the JSON schema for every API endpoint.  FastAPI uses
them for request parsing, serialisation, and OpenAPI documentation
generation.  JSON field names are camelCase; Python attributes are
snake_case (``populate_by_name`` accepts either on input).

The models only describe *shape*.  Business rules (required sections,
allowed colors, dimension limits, text screening) are enforced by
:func:`bannercraft.guard.validation.validate_banner_request` so the API can
report them as 400 responses with field-level messages.

Models
------
BannerSize, ColorPalette, Theme, UseCase
    Catalog objects selected in the banner editor.
BannerRequest
    Payload for ``POST /api/generate-banner`` and the ``bannerData`` part of
    ``POST /api/save-to-gallery``.
SaveToGalleryRequest
    Payload for ``POST /api/save-to-gallery``.
VisibilityRequest
    Payload for ``POST /api/gallery/visibility``.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class BannerSize(BaseModel):
    """A banner format (e.g. LinkedIn banner, 1584x396)."""

    model_config = ConfigDict(populate_by_name=True)

    id: str = ""
    name: str = ""
    width: int = 0
    height: int = 0
    category: str = ""
    description: str = ""


class ColorPalette(BaseModel):
    """Named set of theme colors."""

    model_config = ConfigDict(populate_by_name=True)

    id: str = ""
    name: str = ""
    primary: str = ""
    secondary: str = ""
    accent: str = ""
    background: str = ""
    text: str = ""


class Theme(BaseModel):
    """Visual theme: palette, font family and style keyword."""

    model_config = ConfigDict(populate_by_name=True)

    id: str = ""
    name: str = ""
    description: str = ""
    style: str = ""
    color_palette: ColorPalette = Field(default_factory=ColorPalette, alias="colorPalette")
    font_family: str = Field(default="", alias="fontFamily")


class UseCase(BaseModel):
    """What the banner is for (personal branding, product launch, ...)."""

    model_config = ConfigDict(populate_by_name=True)

    id: str = ""
    name: str = ""
    description: str = ""
    category: str = ""
    suggested_text: list[str] = Field(default_factory=list, alias="suggestedText")
    suggested_themes: list[str] = Field(default_factory=list, alias="suggestedThemes")


class BannerRequest(BaseModel):
    """Request body for ``POST /api/generate-banner``.

    ``size``, ``theme`` and ``use_case`` are required by the request guard
    rather than by the schema, so that a missing section yields a 400 naming
    the field instead of a generic 422.

    Attributes:
        size: Selected banner format.
        theme: Selected visual theme.
        use_case: Selected use case.
        custom_text: Main banner text (sanitized, at most 500 characters).
        context: Additional context for the generator (at most 1000).
        background_color: Palette hex color, or ``""`` for automatic.
        font_color: Palette hex color, or ``""`` for automatic.
        font_size: Pixel size token such as ``"24"``.
        logo_position: One of the five logo positions; omitted for automatic.
        background_image: Optional background image URL.
        logo_url: Location of the stored logo, set after a logo upload.
    """

    model_config = ConfigDict(populate_by_name=True)

    size: BannerSize | None = None
    theme: Theme | None = None
    use_case: UseCase | None = Field(default=None, alias="useCase")
    custom_text: str | None = Field(default=None, alias="customText")
    context: str | None = None
    background_color: str | None = Field(default=None, alias="backgroundColor")
    font_color: str | None = Field(default=None, alias="fontColor")
    font_size: str | None = Field(default=None, alias="fontSize")
    logo_position: str | None = Field(default=None, alias="logoPosition")
    background_image: str | None = Field(default=None, alias="backgroundImage")
    logo_url: str | None = Field(default=None, alias="logoUrl")


class SaveToGalleryRequest(BaseModel):
    """Request body for ``POST /api/save-to-gallery``.

    Attributes:
        local_image_url: URL of a banner previously stored by this service.
        banner_data: The request the banner was generated from.
        tags: Free-form tags used by gallery search.
        is_public: Whether the banner appears in the public gallery.
    """

    model_config = ConfigDict(populate_by_name=True)

    local_image_url: str = Field(..., alias="localImageUrl")
    banner_data: BannerRequest = Field(..., alias="bannerData")
    tags: list[str] = Field(default_factory=list)
    is_public: bool = Field(default=False, alias="isPublic")


class VisibilityRequest(BaseModel):
    """Request body for ``POST /api/gallery/visibility``."""

    model_config = ConfigDict(populate_by_name=True)

    banner_id: str = Field(..., alias="bannerId")
    is_public: bool = Field(..., alias="isPublic")
