"""Request guard: validation, sanitization and rate limiting.

Every request-accepting endpoint runs its input through this package after
authentication and before any call to the image provider or the gallery
store.  Nothing here performs I/O.

Modules
-------
errors
    Error taxonomy with HTTP status codes for the API boundary.
sanitizer
    Denylist content filter for free-text fields.
validation
    Banner request and uploaded file validation, and the allowed-value sets.
rate_limiter
    Fixed-window per-identity quotas with an injectable store and clock.
"""

from .errors import (
    ContentRejected,
    FileTooLarge,
    GuardError,
    InvalidDimensions,
    InvalidEnum,
    InvalidFileType,
    MissingField,
    RateLimited,
    ValidationError,
)
from .rate_limiter import (
    FixedWindowRateLimiter,
    InMemoryRateLimitStore,
    RateLimitEntry,
    RateLimitRule,
    RateLimitStore,
)
from .sanitizer import sanitize_text
from .validation import UploadedFile, validate_api_key, validate_banner_request, validate_file

__all__ = [
    "ContentRejected",
    "FileTooLarge",
    "FixedWindowRateLimiter",
    "GuardError",
    "InMemoryRateLimitStore",
    "InvalidDimensions",
    "InvalidEnum",
    "InvalidFileType",
    "MissingField",
    "RateLimitEntry",
    "RateLimitRule",
    "RateLimitStore",
    "RateLimited",
    "UploadedFile",
    "ValidationError",
    "sanitize_text",
    "validate_api_key",
    "validate_banner_request",
    "validate_file",
]
