"""Chord sheet queries and mutations.

:class:`ChordSheetService` sits between callers and the storage backend.  It
applies the rules of :mod:`chordbook.access` to everything it reads or
writes, and joins sheets with their authors' display names.

Reads never raise for missing or hidden sheets; they return None or leave
the sheet out.  Mutations raise :class:`~chordbook.exceptions.ValidationError`,
:class:`~chordbook.exceptions.AuthorizationError` or
:class:`~chordbook.exceptions.NotFoundError`, and write nothing when they do.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable

from .access import can_edit, can_view, validate_for_save
from .exceptions import AuthorizationError, NotFoundError
from .models import ChordSheet, SheetWithAuthor
from .stores.base import DEFAULT_LIMIT, AuthProvider, ChordSheetStore

logger = logging.getLogger(__name__)


def _check_limit(limit: int) -> None:
    if limit < 1:
        raise ValueError(f"limit must be at least 1, got {limit}")


class ChordSheetService:
    def __init__(self, store: ChordSheetStore, auth: AuthProvider):
        self.store = store
        self.auth = auth

    # --- Queries ---

    def list(self, limit: int = DEFAULT_LIMIT) -> list[SheetWithAuthor]:
        """Return the latest public sheets."""
        _check_limit(limit)
        return self._visible_with_authors(self.store.query_public_latest(limit))

    def get_by_id(self, sheet_id: str) -> SheetWithAuthor | None:
        """Return the sheet, or None if it is missing or not visible."""
        sheet = self.store.get(sheet_id)
        if sheet is None or not can_view(sheet, self.auth.current_user_id()):
            return None
        return self._with_author(sheet)

    def my_chord_sheets(self) -> list[SheetWithAuthor]:
        """Return every sheet of the current user, or [] when anonymous."""
        user_id = self.auth.current_user_id()
        if user_id is None:
            return []
        return self._visible_with_authors(self.store.query_by_author(user_id))

    def search(self, query: str, limit: int = DEFAULT_LIMIT) -> list[SheetWithAuthor]:
        """Return public sheets whose title matches *query*."""
        _check_limit(limit)
        if not query.strip():
            return []
        results = self.store.search_by_title(query.strip(), is_public=True, limit=limit)
        return self._visible_with_authors(results)

    # --- Mutations ---

    def create(
        self,
        title: str,
        artist: str,
        content: str,
        tags: str | Iterable[str] | None = None,
        is_public: bool = True,
    ) -> str:
        """Create a sheet owned by the current user and return its id."""
        user_id = self.auth.current_user_id()
        if user_id is None:
            raise AuthorizationError("Must be logged in to create chord sheets")

        fields = validate_for_save(title, artist, content, tags, is_public)
        sheet_id = self.store.insert(fields, user_id)
        logger.info("Created chord sheet %s (%r) for %s", sheet_id, fields.title, user_id)
        return sheet_id

    def update(
        self,
        sheet_id: str,
        title: str,
        artist: str,
        content: str,
        tags: str | Iterable[str] | None = None,
        is_public: bool = True,
    ) -> None:
        """Replace the editable fields of a sheet the current user owns."""
        user_id = self.auth.current_user_id()
        if user_id is None:
            raise AuthorizationError("Must be logged in to update chord sheets")

        fields = validate_for_save(title, artist, content, tags, is_public)

        sheet = self.store.get(sheet_id)
        if sheet is None:
            raise NotFoundError(sheet_id)
        if not can_edit(sheet, user_id):
            logger.warning("User %s denied update of sheet %s", user_id, sheet_id)
            raise AuthorizationError("Can only update your own chord sheets")

        self.store.patch(sheet_id, fields)
        logger.info("Updated chord sheet %s", sheet_id)

    # --- Internal helpers ---

    def _with_author(self, sheet: ChordSheet) -> SheetWithAuthor:
        return SheetWithAuthor(sheet=sheet, author_name=self.auth.display_name(sheet.author_id))

    def _visible_with_authors(self, sheets: list[ChordSheet]) -> list[SheetWithAuthor]:
        viewer = self.auth.current_user_id()
        return [self._with_author(s) for s in sheets if can_view(s, viewer)]
