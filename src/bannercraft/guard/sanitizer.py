"""Denylist content filter for short free-text banner fields.

The banner text and context fields are forwarded to the image provider as
part of a prompt; they are never rendered as HTML.  This filter is a
second screening layer over those fields, not an HTML sanitizer:

- it rejects text matching a fixed list of known-dangerous substrings
  (script tags, inline event handlers, ``javascript:`` URIs, browser
  globals, ...);
- it removes anything that still looks like a tag with a single regex
  rather than a parser;
- it truncates silently to the field's maximum length.

A denylist is incomplete by construction.  It also has false positives:
ordinary copy such as "cookie" or "our location." is rejected.  Both are
accepted characteristics of the filter.
"""

from __future__ import annotations

import logging
import re

from .errors import ContentRejected

logger = logging.getLogger(__name__)

DEFAULT_MAX_LENGTH = 500

# Checked against the trimmed input before anything is stripped, and again
# after tag stripping so that split payloads ("java<b>script:") are caught.
DANGEROUS_PATTERNS: tuple[re.Pattern[str], ...] = tuple(
    re.compile(pattern, re.IGNORECASE)
    for pattern in (
        r"<script\b[^>]*>",
        r"javascript:",
        r"on\w+\s*=",
        r"<iframe\b[^>]*>",
        r"<object\b[^>]*>",
        r"<embed\b[^>]*>",
        r"<link\b[^>]*>",
        r"<meta\b[^>]*>",
        r"eval\s*\(",
        r"function\s*\(",
        r"setTimeout\s*\(",
        r"setInterval\s*\(",
        r"document\.",
        r"window\.",
        r"location\.",
        r"history\.",
        r"navigator\.",
        r"alert\s*\(",
        r"confirm\s*\(",
        r"prompt\s*\(",
        r"XMLHttpRequest",
        r"fetch\s*\(",
        r"import\s*\(",
        r"require\s*\(",
        r"process\.env",
        r"\.env",
        r"localStorage",
        r"sessionStorage",
        r"cookie",
        r"\.innerHTML",
        r"\.outerHTML",
        r"\.insertAdjacentHTML",
        r"\.write\(",
        r"\.writeln\(",
    )
)

_TAG_RE = re.compile(r"<[^>]*>")


def contains_dangerous_content(text: str) -> bool:
    """Return True if any denylisted pattern occurs in *text*."""
    return any(pattern.search(text) for pattern in DANGEROUS_PATTERNS)


def sanitize_text(
    text: str | None,
    max_length: int = DEFAULT_MAX_LENGTH,
    *,
    field: str | None = None,
) -> str:
    """Trim, screen, strip tags from, and truncate a free-text field.

    Order matters: the denylist runs on the unstripped text so a script tag
    always raises before it could be stripped away, and truncation runs last
    so it can never cut a payload in half to slip it through.

    Sanitizing the result again returns it unchanged, unless the cut at
    ``max_length`` landed just after whitespace.  The text is trimmed before
    it is truncated, so that whitespace survives the first pass and is
    trimmed by the second.

    Args:
        text: Raw user input.  ``None`` and non-strings yield ``""``.
        max_length: Maximum length of the result.
        field: Name of the request field, attached to the error.

    Returns:
        The sanitized text, at most ``max_length`` characters long.

    Raises:
        ContentRejected: If the text matches the denylist.
    """
    if not text or not isinstance(text, str):
        return ""

    sanitized = text.strip()

    if contains_dangerous_content(sanitized):
        logger.warning(f"Rejected dangerous content in field {field or '<text>'}")
        raise ContentRejected(field)

    stripped = _TAG_RE.sub("", sanitized)
    if stripped != sanitized:
        if contains_dangerous_content(stripped):
            logger.warning(f"Rejected tag-split content in field {field or '<text>'}")
            raise ContentRejected(field)
        sanitized = stripped.strip()

    return sanitized[:max_length]
