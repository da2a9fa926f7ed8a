from dataclasses import dataclass
from datetime import datetime
from enum import Enum


@dataclass(frozen=True)
class ChordSheet:
    """A stored chord sheet.

    ``content`` holds lyrics with chords embedded inline in bracket notation:
    "[C]Twinkle, twinkle, [F]little [C]star".
    """

    id: str
    title: str
    artist: str
    content: str
    author_id: str
    is_public: bool
    created_at: datetime
    tags: list[str] | None = None  # None means "no tags"


@dataclass(frozen=True)
class SheetFields:
    """The user-editable fields of a sheet, validated and normalised."""

    title: str
    artist: str
    content: str
    tags: list[str] | None = None
    is_public: bool = True


@dataclass(frozen=True)
class SheetWithAuthor:
    """A sheet joined with its author's display name."""

    sheet: ChordSheet
    author_name: str


@dataclass(frozen=True)
class User:
    id: str
    name: str | None = None
    email: str | None = None

    @property
    def display_name(self) -> str:
        return self.name or self.email or "Anonymous"


class SegmentKind(Enum):
    TEXT = "text"
    CHORD = "chord"


@dataclass(frozen=True)
class Segment:
    """A typed fragment of a parsed line.

    ``position`` is the offset in the line's lyric text (markers removed).
    A chord's position is where the lyric it sits above begins.
    """

    kind: SegmentKind
    content: str
    position: int


@dataclass(frozen=True)
class ParsedLine:
    """One source line: ordered segments, or none at all for a blank line."""

    segments: tuple[Segment, ...] = ()
    padding: str = ""  # whitespace of a blank line, kept for plain-text output

    @property
    def is_blank(self) -> bool:
        return not self.segments

    @property
    def chords(self) -> list[Segment]:
        return [s for s in self.segments if s.kind is SegmentKind.CHORD]

    @property
    def lyric(self) -> str:
        return "".join(s.content for s in self.segments if s.kind is SegmentKind.TEXT)


# ---------------------------------------------------------------------------
# Records
# ---------------------------------------------------------------------------


def sheet_to_record(sheet: ChordSheet) -> dict:
    """Return the JSON-ready record for *sheet* (camelCase keys)."""
    record = {
        "id": sheet.id,
        "title": sheet.title,
        "artist": sheet.artist,
        "content": sheet.content,
        "authorId": sheet.author_id,
        "isPublic": sheet.is_public,
        "createdAt": sheet.created_at.isoformat(),
    }
    if sheet.tags:
        record["tags"] = list(sheet.tags)
    return record


def sheet_from_record(record: dict) -> ChordSheet:
    """Build a :class:`ChordSheet` from a record written by :func:`sheet_to_record`."""
    return ChordSheet(
        id=str(record["id"]),
        title=record["title"],
        artist=record["artist"],
        content=record.get("content", ""),
        author_id=str(record["authorId"]),
        is_public=bool(record["isPublic"]),
        created_at=datetime.fromisoformat(record["createdAt"]),
        tags=list(record["tags"]) if record.get("tags") else None,
    )


def fields_to_record(fields: SheetFields) -> dict:
    record = {
        "title": fields.title,
        "artist": fields.artist,
        "content": fields.content,
        "isPublic": fields.is_public,
    }
    if fields.tags:
        record["tags"] = list(fields.tags)
    return record
