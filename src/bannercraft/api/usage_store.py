"""Usage tracking for the Bannercraft API.

Every successful banner generation and every banner download is appended as
an event to a single ``usage.json`` file in the storage directory.  Monthly
per-user counts are computed from that log on demand, the same way gallery
listings are computed from ``gallery.json``.

Events record what was generated, never the free text that went into it:

- ``banner_generation``: user id, the chosen size/theme/use case ids and
  whether text, context and a logo were supplied
- ``banner_download``: user id of the downloader and the banner id

Months are calendar months in UTC, written ``YYYY-MM``.
"""

from __future__ import annotations

import json
import logging
import re
import time
from datetime import datetime, timezone
from pathlib import Path

from bannercraft.api.models import BannerRequest

logger = logging.getLogger(__name__)

EVENT_GENERATION = "banner_generation"
EVENT_DOWNLOAD = "banner_download"
EVENT_TYPES = (EVENT_GENERATION, EVENT_DOWNLOAD)

_MONTH_RE = re.compile(r"(\d{4})-(\d{2})")


def load_usage_events(usage_db: Path) -> list[dict]:
    """Load the usage log, returning an empty list if it is missing or invalid."""
    if not usage_db.exists():
        return []
    try:
        with open(usage_db, encoding="utf-8") as handle:
            events = json.load(handle)
    except (OSError, ValueError):
        logger.warning(f"Unreadable usage log at {usage_db}; starting empty")
        return []
    if not isinstance(events, list):
        return []
    return [event for event in events if isinstance(event, dict)]


def save_usage_events(usage_db: Path, events: list[dict]) -> None:
    with open(usage_db, "w", encoding="utf-8") as handle:
        json.dump(events, handle, indent=2)


def request_summary(request: BannerRequest) -> dict:
    """Describe a generation request by its catalog ids and flags only."""
    return {
        "size": request.size.id if request.size else "",
        "theme": request.theme.id if request.theme else "",
        "useCase": request.use_case.id if request.use_case else "",
        "hasCustomText": bool(request.custom_text),
        "hasLogo": bool(request.logo_url),
        "hasContext": bool(request.context),
    }


def record_usage_event(
    usage_db: Path,
    event_type: str,
    user_id: str,
    *,
    banner_id: str | None = None,
    request: BannerRequest | None = None,
    timestamp: float | None = None,
) -> dict:
    """Append one usage event to the log.

    Args:
        usage_db: Path to ``usage.json``.
        event_type: ``banner_generation`` or ``banner_download``.
        user_id: The user the event is attributed to.
        banner_id: Gallery entry id, for downloads.
        request: The validated generation request, for generations.
        timestamp: Event time in seconds since the epoch (default: now).

    Returns:
        The stored event.

    Raises:
        ValueError: For an unknown event type.
    """
    if event_type not in EVENT_TYPES:
        raise ValueError(f"Unknown usage event type: {event_type}")

    event: dict = {
        "type": event_type,
        "user_id": user_id,
        "timestamp": time.time() if timestamp is None else timestamp,
    }
    if banner_id is not None:
        event["banner_id"] = banner_id
    if request is not None:
        event["request"] = request_summary(request)

    events = load_usage_events(usage_db)
    events.append(event)
    save_usage_events(usage_db, events)

    logger.info(f"Recorded {event_type} for {user_id}")
    return event


def parse_month(month: str) -> str:
    """Validate a ``YYYY-MM`` month string and return it normalized.

    Raises:
        ValueError: If *month* is not a valid calendar month.
    """
    match = _MONTH_RE.fullmatch(month.strip()) if isinstance(month, str) else None
    if not match or not 1 <= int(match.group(2)) <= 12:
        raise ValueError(f"Invalid month: {month!r}")
    return f"{match.group(1)}-{match.group(2)}"


def month_of(timestamp: float) -> str:
    """The UTC ``YYYY-MM`` month containing *timestamp*."""
    return datetime.fromtimestamp(timestamp, tz=timezone.utc).strftime("%Y-%m")


def count_usage(
    events: list[dict],
    user_id: str,
    month: str,
    event_type: str = EVENT_GENERATION,
) -> int:
    """Count a user's events of one type within a calendar month."""
    count = 0
    for event in events:
        if event.get("type") != event_type or event.get("user_id") != user_id:
            continue
        timestamp = event.get("timestamp")
        if isinstance(timestamp, (int, float)) and month_of(timestamp) == month:
            count += 1
    return count


def usage_summary(events: list[dict], user_id: str, month: str) -> dict:
    """Generation and download counts for *user_id* in *month*."""
    return {
        "month": month,
        "generations": count_usage(events, user_id, month, EVENT_GENERATION),
        "downloads": count_usage(events, user_id, month, EVENT_DOWNLOAD),
    }
