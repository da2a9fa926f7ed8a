"""In-process store and auth provider.

Used by the tests and as the base of :class:`~chordbook.stores.jsonfile.JsonFileStore`.
Sheets are kept in insertion order, so "newest first" is reverse insertion
order.
"""

import dataclasses
import logging
import uuid
from collections.abc import Mapping
from datetime import datetime, timezone

from ..models import ChordSheet, SheetFields, User
from .base import DEFAULT_LIMIT, AuthProvider, ChordSheetStore, title_matches

logger = logging.getLogger(__name__)


class InMemoryStore(ChordSheetStore):
    """Dict-backed :class:`~chordbook.stores.base.ChordSheetStore`."""

    def __init__(self, sheets: list[ChordSheet] | None = None):
        self._sheets: dict[str, ChordSheet] = {s.id: s for s in sheets or []}

    def get(self, sheet_id: str) -> ChordSheet | None:
        return self._sheets.get(sheet_id)

    def insert(self, fields: SheetFields, author_id: str) -> str:
        sheet = ChordSheet(
            id=uuid.uuid4().hex,
            title=fields.title,
            artist=fields.artist,
            content=fields.content,
            author_id=author_id,
            is_public=fields.is_public,
            created_at=datetime.now(timezone.utc),
            tags=list(fields.tags) if fields.tags else None,
        )
        self._sheets[sheet.id] = sheet
        logger.debug("Inserted sheet %s by %s", sheet.id, author_id)
        return sheet.id

    def patch(self, sheet_id: str, fields: SheetFields) -> None:
        current = self._sheets[sheet_id]
        # Readers see either the old object or the new one, never a mix.
        self._sheets[sheet_id] = dataclasses.replace(
            current,
            title=fields.title,
            artist=fields.artist,
            content=fields.content,
            is_public=fields.is_public,
            tags=list(fields.tags) if fields.tags else None,
        )
        logger.debug("Patched sheet %s", sheet_id)

    def query_by_author(self, author_id: str) -> list[ChordSheet]:
        return [s for s in self._newest_first() if s.author_id == author_id]

    def query_public_latest(self, limit: int = DEFAULT_LIMIT) -> list[ChordSheet]:
        return [s for s in self._newest_first() if s.is_public][:limit]

    def search_by_title(
        self, text: str, is_public: bool = True, limit: int = DEFAULT_LIMIT
    ) -> list[ChordSheet]:
        return [
            s
            for s in self._newest_first()
            if s.is_public == is_public and title_matches(s.title, text)
        ][:limit]

    def _newest_first(self) -> list[ChordSheet]:
        return list(reversed(self._sheets.values()))


class StaticAuth(AuthProvider):
    """Auth provider over a fixed current user and a user directory."""

    def __init__(self, current_user_id: str | None, users: Mapping[str, User] | None = None):
        self._current = current_user_id
        self._users = users if users is not None else {}

    def current_user_id(self) -> str | None:
        return self._current

    def display_name(self, user_id: str) -> str:
        user = self._users.get(user_id)
        return user.display_name if user else "Anonymous"
