"""Store backed by a single local JSON file.

File layout::

    {
      "sheets": [ {"id": ..., "title": ..., "authorId": ..., ...}, ... ],
      "users":  { "<user id>": {"name": ..., "email": ...}, ... }
    }

Sheets are listed oldest first.  Every write rewrites the whole document
into a temporary file next to the target and swaps it in with
:func:`os.replace`, so a reader never sees a half-written file.
"""

import json
import logging
import os
import tempfile
from pathlib import Path

from ..exceptions import StoreFileError
from ..models import ChordSheet, SheetFields, User, sheet_from_record, sheet_to_record
from .memory import InMemoryStore

logger = logging.getLogger(__name__)


class JsonFileStore(InMemoryStore):
    """:class:`InMemoryStore` persisted to *path* after every write."""

    def __init__(self, path: str | Path):
        self.path = Path(path)
        self.users: dict[str, User] = {}
        sheets: list[ChordSheet] = []

        if self.path.exists():
            sheets = self._load()
            logger.debug("Loaded %d sheets from %s", len(sheets), self.path)

        super().__init__(sheets)

    def _load(self) -> list[ChordSheet]:
        try:
            data = json.loads(self.path.read_text(encoding="utf-8") or "{}")
            sheets = [sheet_from_record(r) for r in data.get("sheets", [])]
            self.users = {
                uid: User(id=uid, name=info.get("name"), email=info.get("email"))
                for uid, info in data.get("users", {}).items()
            }
        except json.JSONDecodeError as exc:
            raise StoreFileError(str(self.path), f"invalid JSON ({exc.msg}, line {exc.lineno})") from exc
        except (KeyError, TypeError, ValueError, AttributeError) as exc:
            raise StoreFileError(str(self.path), f"unexpected layout ({exc!r})") from exc
        return sheets

    def insert(self, fields: SheetFields, author_id: str) -> str:
        sheet_id = super().insert(fields, author_id)
        try:
            self._flush()
        except BaseException:
            del self._sheets[sheet_id]
            raise
        return sheet_id

    def patch(self, sheet_id: str, fields: SheetFields) -> None:
        previous = self._sheets[sheet_id]
        super().patch(sheet_id, fields)
        try:
            self._flush()
        except BaseException:
            self._sheets[sheet_id] = previous
            raise

    def save_user(self, user: User) -> None:
        """Add or replace *user* in the directory."""
        if self.users.get(user.id) == user:
            return
        self.users[user.id] = user
        self._flush()

    def _flush(self) -> None:
        data = {
            "sheets": [sheet_to_record(s) for s in self._sheets.values()],
            "users": {
                uid: {"name": u.name, "email": u.email} for uid, u in self.users.items()
            },
        }
        directory = self.path.parent
        directory.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(dir=directory, prefix=f".{self.path.name}.", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                json.dump(data, fh, indent=2, ensure_ascii=False)
                fh.write("\n")
            os.replace(tmp_name, self.path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise
        logger.debug("Wrote %d sheets to %s", len(data["sheets"]), self.path)
