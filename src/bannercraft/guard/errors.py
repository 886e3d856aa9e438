"""Error taxonomy for the request guard.

Every error carries a user-facing ``message`` and the HTTP ``status_code``
the API boundary should answer with.  Messages name the offending field or
the limit that was violated; they never echo the rejected input back.

Hierarchy::

    GuardError
    ├── ValidationError
    │   ├── MissingField
    │   ├── InvalidEnum
    │   ├── InvalidDimensions
    │   ├── ContentRejected
    │   ├── FileTooLarge          (413)
    │   └── InvalidFileType
    └── RateLimited               (429)

``RateLimited`` sits outside ``ValidationError``: a quota denial
is an expected outcome the client should back off from, not bad input.
"""

from __future__ import annotations

CONTENT_REJECTED_MESSAGE = (
    "Invalid content detected. Please remove any scripts or special characters."
)


class GuardError(Exception):
    """Base class for every error raised by the request guard."""

    status_code: int = 400

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ValidationError(GuardError):
    """User-friendly validation error.

    The message is intended to be displayed directly to the user.
    """


class MissingField(ValidationError):
    """A required request field is absent or has no identifier."""

    def __init__(self, field: str) -> None:
        super().__init__(f"Missing required field: {field}")
        self.field = field


class InvalidEnum(ValidationError):
    """A field holds a value outside its fixed set of allowed tokens."""

    def __init__(self, field: str, label: str | None = None) -> None:
        super().__init__(f"Invalid {label or field} selected")
        self.field = field


class InvalidDimensions(ValidationError):
    """Banner width or height is outside ``(0, max_dimension]``."""

    def __init__(self, message: str, max_dimension: int) -> None:
        super().__init__(message)
        self.max_dimension = max_dimension


class ContentRejected(ValidationError):
    """Free text matched the dangerous-pattern denylist."""

    def __init__(self, field: str | None = None) -> None:
        super().__init__(CONTENT_REJECTED_MESSAGE)
        self.field = field


class FileTooLarge(ValidationError):
    """Uploaded file exceeds the size limit."""

    status_code = 413

    def __init__(self, max_bytes: int) -> None:
        max_mb = max_bytes / (1024 * 1024)
        super().__init__(f"File size too large. Maximum size is {max_mb:g}MB.")
        self.max_bytes = max_bytes


class InvalidFileType(ValidationError):
    """Uploaded file has a disallowed MIME type or a dangerous extension."""


class RateLimited(GuardError):
    """The identity has used up its quota for the current window.

    Attributes:
        limit: Maximum requests allowed per window.
        retry_after: Whole seconds until the window resets.
    """

    status_code = 429

    def __init__(self, limit: int, retry_after: int) -> None:
        super().__init__("Rate limit exceeded")
        self.limit = limit
        self.retry_after = retry_after
