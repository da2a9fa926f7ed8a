from abc import ABC, abstractmethod

from ..models import ChordSheet, SheetFields

DEFAULT_LIMIT = 20


class ChordSheetStore(ABC):
    """Abstract base class for chord sheet storage backends.

    Stores perform no authorization of their own; callers apply
    :mod:`chordbook.access` to everything they return.
    """

    @abstractmethod
    def get(self, sheet_id: str) -> ChordSheet | None:
        """Return the sheet with *sheet_id*, or None if it does not exist."""

    @abstractmethod
    def insert(self, fields: SheetFields, author_id: str) -> str:
        """Store a new sheet and return its id.

        The store assigns ``id`` and ``created_at``.
        """

    @abstractmethod
    def patch(self, sheet_id: str, fields: SheetFields) -> None:
        """Replace the editable fields of an existing sheet in one step.

        ``id``, ``author_id`` and ``created_at`` are kept.
        """

    @abstractmethod
    def query_by_author(self, author_id: str) -> list[ChordSheet]:
        """Return every sheet by *author_id*, newest first."""

    @abstractmethod
    def query_public_latest(self, limit: int = DEFAULT_LIMIT) -> list[ChordSheet]:
        """Return up to *limit* public sheets, newest first."""

    @abstractmethod
    def search_by_title(
        self, text: str, is_public: bool = True, limit: int = DEFAULT_LIMIT
    ) -> list[ChordSheet]:
        """Return up to *limit* sheets whose title matches *text*."""


class AuthProvider(ABC):
    """Identity of the current user and display names of others."""

    @abstractmethod
    def current_user_id(self) -> str | None:
        """Return the logged-in user's id, or None when anonymous."""

    @abstractmethod
    def display_name(self, user_id: str) -> str:
        """Return a human-readable name for *user_id*."""


def title_matches(title: str, text: str) -> bool:
    """Return True if every term of *text* prefixes a word of *title*.

    Matching is case-insensitive: ``"twin star"`` matches "Twinkle Little Star".
    """
    words = title.lower().split()
    terms = text.lower().split()
    if not terms:
        return False
    return all(any(word.startswith(term) for word in words) for term in terms)
