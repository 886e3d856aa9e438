"""Gallery metadata and asset storage helpers for the Bannercraft API.

This module isolates the file-backed persistence from
``bannercraft.api.main`` so route handlers can focus on HTTP concerns while
the store remains testable as a small unit.

The store is intentionally simple:

- assets (generated banners, logos, uploads) live under the storage
  directory, in per-purpose folders, and are served at ``/storage/...``
- gallery metadata lives in a single ``gallery.json`` file
- list order is reverse-chronological (newest first)

Because files can be removed from the storage directory outside the
application, the gallery is reconciled against the directory whenever it is
loaded.  Missing asset files are treated as deleted items and pruned from
``gallery.json`` automatically.
"""

from __future__ import annotations

import json
import logging
import re
import time
import uuid
from datetime import datetime, timezone
from pathlib import Path

logger = logging.getLogger(__name__)

STORAGE_URL_PREFIX = "/storage/"

VISIBILITY_FILTERS = ("all", "public", "private")

_SLUG_SEPARATOR_RE = re.compile(r"[^a-z0-9]+")


def save_asset(storage_dir: Path, folder: str, data: bytes, extension: str) -> str:
    """Write an asset under *folder* with a unique, timestamped name.

    Args:
        storage_dir: Root storage directory.
        folder: Relative folder (e.g. ``"logos/<user_id>"``).
        data: File content.
        extension: File extension without the dot.

    Returns:
        The asset's path relative to *storage_dir*, using forward slashes.
    """
    timestamp = int(time.time() * 1000)
    relative = f"{folder.strip('/')}/{timestamp}-{uuid.uuid4().hex[:8]}.{extension or 'png'}"
    target = storage_dir / relative
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_bytes(data)
    logger.info(f"Stored asset {relative} ({len(data)} bytes)")
    return relative


def asset_url(filename: str) -> str:
    """Public URL of a stored asset."""
    return f"{STORAGE_URL_PREFIX}{filename}"


def filename_from_url(url: str, storage_dir: Path) -> str | None:
    """Map a storage URL back to its relative filename.

    Returns None for URLs outside the storage prefix, for paths that would
    escape *storage_dir*, and for files that do not exist.
    """
    if not url.startswith(STORAGE_URL_PREFIX):
        return None

    relative = url[len(STORAGE_URL_PREFIX):]
    try:
        root = storage_dir.resolve()
        resolved = (storage_dir / relative).resolve()
    except (ValueError, OSError):
        return None

    if root not in resolved.parents or not resolved.is_file():
        logger.warning("Rejected storage URL outside the storage directory")
        return None
    return resolved.relative_to(root).as_posix()


def load_gallery_entries(gallery_db: Path, storage_dir: Path) -> list[dict]:
    """Load the gallery metadata and reconcile it against files on disk.

    The reconciliation rule is intentionally conservative:

    - if the JSON file is missing or invalid, return an empty gallery
    - if an entry has no filename, drop it
    - if the referenced asset file does not exist, drop the entry

    When stale entries are removed, the cleaned list is persisted immediately
    so future reads observe the corrected counts and pagination.

    Args:
        gallery_db: Path to ``gallery.json``.
        storage_dir: Directory that should contain the asset files.

    Returns:
        List of surviving gallery entry dictionaries in persisted order.
    """
    if gallery_db.exists():
        try:
            with open(gallery_db, encoding="utf-8") as handle:
                raw_entries = json.load(handle)
        except (OSError, ValueError):
            logger.warning(f"Unreadable gallery metadata at {gallery_db}; starting empty")
            raw_entries = []
    else:
        raw_entries = []

    if not isinstance(raw_entries, list):
        raw_entries = []

    cleaned_entries: list[dict] = []

    for entry in raw_entries:
        if not isinstance(entry, dict):
            continue

        filename = entry.get("filename")
        if not filename:
            continue

        if not (storage_dir / filename).exists():
            continue

        cleaned_entries.append(entry)

    if cleaned_entries != raw_entries:
        save_gallery_entries(gallery_db, cleaned_entries)

    return cleaned_entries


def save_gallery_entries(gallery_db: Path, entries: list[dict]) -> None:
    """Persist the gallery metadata list to disk.

    Args:
        gallery_db: Path to ``gallery.json``.
        entries: Gallery entry dictionaries to persist.
    """
    with open(gallery_db, "w", encoding="utf-8") as handle:
        json.dump(entries, handle, indent=2)


def _matches_search(entry: dict, needle: str) -> bool:
    request = entry.get("request") or {}
    haystack = [
        (request.get("useCase") or {}).get("name", ""),
        (request.get("theme") or {}).get("name", ""),
        (request.get("size") or {}).get("name", ""),
        *entry.get("tags", []),
    ]
    return any(needle in str(value).lower() for value in haystack)


def filter_gallery_entries(
    entries: list[dict],
    *,
    user_id: str | None = None,
    visibility: str = "all",
    search: str | None = None,
) -> list[dict]:
    """Apply owner, visibility and search filters to gallery entries.

    Args:
        entries: Source gallery entries.
        user_id: Keep only entries owned by this user.
        visibility: ``"all"``, ``"public"`` or ``"private"``.
        search: Case-insensitive substring matched against the use case,
            theme and size names and the tags.

    Returns:
        Filtered gallery entries in their original order.
    """
    filtered_entries = entries

    if user_id is not None:
        filtered_entries = [entry for entry in filtered_entries if entry.get("user_id") == user_id]

    if visibility == "public":
        filtered_entries = [entry for entry in filtered_entries if entry.get("is_public")]
    elif visibility == "private":
        filtered_entries = [entry for entry in filtered_entries if not entry.get("is_public")]

    if search and search.strip():
        needle = search.strip().lower()
        filtered_entries = [entry for entry in filtered_entries if _matches_search(entry, needle)]

    return filtered_entries


def public_gallery_entries(entries: list[dict], limit: int = 20) -> list[dict]:
    """Return the newest *limit* public entries."""
    return filter_gallery_entries(entries, visibility="public")[: max(limit, 0)]


def _slug(value) -> str:
    return _SLUG_SEPARATOR_RE.sub("-", str(value or "").lower()).strip("-") or "banner"


def download_filename(entry: dict) -> str:
    """Suggested file name for downloading a gallery banner.

    Built from the size and theme names and the UTC creation date, e.g.
    ``banner-linkedin-banner-modern-tech-2024-05-01.png``.  The extension is
    the stored file's.
    """
    request = entry.get("request") or {}
    size = _slug((request.get("size") or {}).get("name", ""))
    theme = _slug((request.get("theme") or {}).get("name", ""))
    created = datetime.fromtimestamp(entry.get("created_at") or 0, tz=timezone.utc)
    extension = Path(entry.get("filename", "")).suffix or ".png"
    return f"banner-{size}-{theme}-{created:%Y-%m-%d}{extension}"


def paginate_gallery_entries(entries: list[dict], page: int, per_page: int) -> dict:
    """Paginate gallery entries and clamp the requested page to valid bounds.

    Clamping matters after deletes: removing the last banner on the last page
    makes the previous page the new last page.

    Args:
        entries: Filtered gallery entries.
        page: Requested one-based page number.
        per_page: Requested items per page.

    Returns:
        Dictionary containing ``total``, ``page``, ``per_page``, ``pages``, and
        ``banners`` for the resolved page.
    """
    total = len(entries)
    pages = (total + per_page - 1) // per_page if total > 0 else 1
    resolved_page = min(max(page, 1), pages)

    start = (resolved_page - 1) * per_page
    end = start + per_page

    return {
        "total": total,
        "page": resolved_page,
        "per_page": per_page,
        "pages": pages,
        "banners": entries[start:end],
    }
