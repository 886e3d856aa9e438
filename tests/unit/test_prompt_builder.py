"""Tests for bannercraft.api.prompt_builder — banner prompt compilation.

Tests cover:
- Opening sentence with use case and pixel size.
- Optional sentences appear only for selected options.
- Theme style and primary color fallbacks.
- Fixed closing directive and single-space joining.
"""

from __future__ import annotations

from bannercraft.api.models import BannerRequest
from bannercraft.api.prompt_builder import build_banner_prompt
from bannercraft.guard.validation import validate_banner_request


def _build(payload: dict, **overrides) -> str:
    request = BannerRequest.model_validate({**payload, **overrides})
    return build_banner_prompt(validate_banner_request(request))


class TestBuildBannerPrompt:
    """Test build_banner_prompt()."""

    def test_full_prompt(self, valid_banner_payload):
        """Every selected option contributes its sentence, in order."""
        prompt = _build(valid_banner_payload)
        assert prompt == (
            "Create a professional banner image for Personal Branding, 1584x396 pixels. "
            'The main text should be: "Hello World". '
            "Additional context: Senior data engineer. "
            "Style: modern theme with #2563eb as primary color. "
            "Background color: #ffffff. "
            "Text color: #000000. "
            "Font size should be 24px. "
            "Leave space for a logo to be positioned at top-right. "
            "The banner should be professional, high-quality, and suitable for online use. "
            "No text overlays on the logo area."
        )

    def test_minimal_prompt(self, valid_banner_payload):
        """Only the opening, style and closing sentences for a bare request."""
        payload = {k: valid_banner_payload[k] for k in ("size", "theme", "useCase")}
        prompt = _build(payload)
        assert "main text" not in prompt
        assert "Additional context" not in prompt
        assert "Background color" not in prompt
        assert "Leave space for a logo" not in prompt
        assert prompt.startswith("Create a professional banner image for Personal Branding")
        assert prompt.endswith("No text overlays on the logo area.")

    def test_auto_options_omitted(self, valid_banner_payload):
        """Empty ("Auto") color and position choices add nothing."""
        prompt = _build(valid_banner_payload, backgroundColor="", fontColor="", logoPosition="")
        assert "Background color" not in prompt
        assert "Text color" not in prompt
        assert "Leave space for a logo" not in prompt

    def test_use_case_id_when_name_missing(self, valid_banner_payload):
        """The use case id stands in for a missing name."""
        prompt = _build(valid_banner_payload, useCase={"id": "product-launch"})
        assert prompt.startswith("Create a professional banner image for product-launch,")

    def test_style_defaults_to_modern(self, valid_banner_payload):
        """A theme without style reads as modern."""
        theme = {"id": "plain", "colorPalette": {"primary": "#000000"}}
        prompt = _build(valid_banner_payload, theme=theme)
        assert "Style: modern theme with #000000 as primary color." in prompt

    def test_theme_without_primary(self, valid_banner_payload):
        """No primary color drops the color clause."""
        prompt = _build(valid_banner_payload, theme={"id": "plain", "style": "bold"})
        assert "Style: bold theme." in prompt

    def test_sanitized_text_is_used(self, valid_banner_payload):
        """The prompt carries the sanitized text, not the raw input."""
        prompt = _build(valid_banner_payload, customText="  <b>Launch</b> day ")
        assert 'The main text should be: "Launch day".' in prompt

    def test_single_spaces_between_sentences(self, valid_banner_payload):
        """Sentences are joined with exactly one space."""
        assert "  " not in _build(valid_banner_payload)
