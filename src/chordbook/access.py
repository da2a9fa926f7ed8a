"""Visibility, ownership and save-validation rules for chord sheets.

These are pure functions: no store access, no I/O.  Callers apply them to
whatever the storage backend returns, since the backend itself enforces no
authorization.
"""

from collections.abc import Iterable

from .exceptions import ValidationError
from .models import ChordSheet, SheetFields


def can_view(sheet: ChordSheet, viewer_id: str | None) -> bool:
    """Return True if *viewer_id* (None for anonymous) may read *sheet*."""
    return sheet.is_public or (viewer_id is not None and viewer_id == sheet.author_id)


def can_edit(sheet: ChordSheet, requester_id: str | None) -> bool:
    """Return True if *requester_id* owns *sheet*."""
    return requester_id is not None and requester_id == sheet.author_id


def normalize_tags(tags: str | Iterable[str] | None) -> list[str] | None:
    """Normalise tags to an ordered, de-duplicated list, or None when empty.

    A string is split on commas first: ``" a , b ,, "`` -> ``["a", "b"]``.
    """
    if tags is None:
        return None
    raw = tags.split(",") if isinstance(tags, str) else tags

    result: list[str] = []
    for tag in raw:
        tag = tag.strip()
        if tag and tag not in result:
            result.append(tag)
    return result or None


def validate_for_save(
    title: str,
    artist: str,
    content: str = "",
    tags: str | Iterable[str] | None = None,
    is_public: bool = True,
) -> SheetFields:
    """Validate and normalise sheet input.

    Raises :class:`~chordbook.exceptions.ValidationError` when the title or
    artist is empty after trimming.  Content is kept verbatim.
    """
    title = (title or "").strip()
    artist = (artist or "").strip()
    if not title:
        raise ValidationError(ValidationError.EMPTY_TITLE)
    if not artist:
        raise ValidationError(ValidationError.EMPTY_ARTIST)
    return SheetFields(
        title=title,
        artist=artist,
        content=content or "",
        tags=normalize_tags(tags),
        is_public=bool(is_public),
    )
