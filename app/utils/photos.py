"""
Gahoi Sathi — Photo list helpers.

A user's photos are stored as a JSON list of ``{url, is_primary, order}``
dicts.  Every helper here returns a *new* list (JSON columns are not
mutation-tracked) already in display order: the primary photo first,
then ascending ``order``.
"""

from __future__ import annotations

from typing import Iterable

from app.errors import NotFoundError, ValidationError


def sort_photos(photos: Iterable[dict]) -> list[dict]:
    """Return photos in display order (primary first, then ``order``)."""
    return sorted(
        (dict(p) for p in photos),
        key=lambda p: (not p.get("is_primary", False), p.get("order", 0)),
    )


def primary_photo(photos: Iterable[dict]) -> dict | None:
    ordered = sort_photos(photos)
    return ordered[0] if ordered else None


def _reindex(photos: list[dict]) -> list[dict]:
    # Dense order values follow the current display order.
    ordered = sort_photos(photos)
    for i, photo in enumerate(ordered):
        photo["order"] = i
    if ordered and not any(p["is_primary"] for p in ordered):
        ordered[0]["is_primary"] = True
    return ordered


def add_photos(photos: list[dict] | None, urls: list[str], max_photos: int) -> list[dict]:
    """Append uploaded photo URLs.

    The first photo added to an empty list becomes primary; new photos are
    ordered after the existing ones.
    """
    current = [dict(p) for p in (photos or [])]
    if not urls:
        raise ValidationError("No photos uploaded")
    if len(current) + len(urls) > max_photos:
        raise ValidationError(
            f"Maximum {max_photos} photos allowed. You have {len(current)} photos."
        )

    has_primary = any(p.get("is_primary") for p in current)
    for i, url in enumerate(urls):
        current.append(
            {
                "url": url,
                "is_primary": not has_primary and i == 0,
                "order": len(photos or []) + i,
            }
        )
    return sort_photos(current)


def remove_photo(photos: list[dict] | None, index: int) -> tuple[list[dict], dict]:
    """Remove the photo at ``index`` (display order).

    Returns ``(remaining, removed)``.  If the primary photo was removed the
    next photo in display order is promoted.
    """
    ordered = sort_photos(photos or [])
    if index < 0 or index >= len(ordered):
        raise NotFoundError("Photo not found")
    removed = ordered.pop(index)
    return _reindex(ordered), removed


def set_primary(photos: list[dict] | None, index: int) -> list[dict]:
    """Make the photo at ``index`` (display order) the single primary."""
    ordered = sort_photos(photos or [])
    if index < 0 or index >= len(ordered):
        raise NotFoundError("Photo not found")
    for i, photo in enumerate(ordered):
        photo["is_primary"] = i == index
    return sort_photos(ordered)
