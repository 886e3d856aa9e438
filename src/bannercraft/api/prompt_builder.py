"""Banner prompt compilation for the image provider.

The prompt is assembled from a *validated* :class:`BannerRequest` as a
sequence of short sentences, one per selected option, ending with a fixed
quality directive.  Options the user left on "Auto" (``None`` or ``""``)
contribute nothing.

Prompt Structure::

    Create a professional banner image for [Use Case], [W]x[H] pixels.
    The main text should be: "[Custom Text]".            (optional)
    Additional context: [Context].                       (optional)
    Style: [style] theme with [primary] as primary color.
    Background color: [hex].                             (optional)
    Text color: [hex].                                   (optional)
    Font size should be [N]px.                           (optional)
    Leave space for a logo to be positioned at [pos].    (optional)
    [Fixed quality directive]

Sentences are joined with single spaces.

Usage
-----
::

    validated = validate_banner_request(request)
    prompt = build_banner_prompt(validated)
"""

from __future__ import annotations

from bannercraft.api.models import BannerRequest

# ---------------------------------------------------------------------------
# Fixed closing directive.
# Kept constant so every banner shares the same baseline quality request and
# the logo area stays free of generated text.
# ---------------------------------------------------------------------------

_QUALITY_DIRECTIVE = (
    "The banner should be professional, high-quality, and suitable for online use. "
    "No text overlays on the logo area."
)


def build_banner_prompt(request: BannerRequest) -> str:
    """Compile the generation prompt for a validated banner request.

    The request must already have passed
    :func:`~bannercraft.guard.validation.validate_banner_request`; this
    function does no screening of its own and assumes ``size``, ``theme``
    and ``use_case`` are present.

    Args:
        request: Validated banner request.

    Returns:
        The prompt string sent to the image provider.
    """
    size = request.size
    theme = request.theme
    use_case = request.use_case

    parts: list[str] = [
        f"Create a professional banner image for {use_case.name or use_case.id}, "
        f"{size.width}x{size.height} pixels."
    ]

    # --- Free text -------------------------------------------------------
    if request.custom_text:
        parts.append(f'The main text should be: "{request.custom_text}".')
    if request.context:
        parts.append(f"Additional context: {request.context}.")

    # --- Theme -----------------------------------------------------------
    style = theme.style or "modern"
    primary = theme.color_palette.primary
    if primary:
        parts.append(f"Style: {style} theme with {primary} as primary color.")
    else:
        parts.append(f"Style: {style} theme.")

    # --- Optional overrides ----------------------------------------------
    if request.background_color:
        parts.append(f"Background color: {request.background_color}.")
    if request.font_color:
        parts.append(f"Text color: {request.font_color}.")
    if request.font_size:
        parts.append(f"Font size should be {request.font_size}px.")
    if request.logo_position:
        parts.append(f"Leave space for a logo to be positioned at {request.logo_position}.")

    parts.append(_QUALITY_DIRECTIVE)

    return " ".join(parts)
