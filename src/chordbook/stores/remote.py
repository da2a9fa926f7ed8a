"""Store client for a hosted chordbook REST backend.

Endpoints (JSON bodies use the record format of :mod:`chordbook.models`)::

    GET   /sheets/{id}                          → record, 404 if missing
    POST  /sheets                               → {"id": ...}
    PATCH /sheets/{id}
    GET   /sheets?author=<id>                   → [record, ...]
    GET   /sheets?public=true&limit=N           → [record, ...]
    GET   /sheets/search?q=...&public=true&limit=N → [record, ...]

The backend authenticates with a bearer token but does not filter by
visibility beyond what the query asks for.
"""

import logging
from urllib.parse import quote

import httpx

from ..exceptions import StoreError
from ..models import ChordSheet, SheetFields, fields_to_record, sheet_from_record
from .base import DEFAULT_LIMIT, ChordSheetStore

logger = logging.getLogger(__name__)


def _sheet_path(sheet_id: str) -> str:
    # Ids are opaque; each one stays a single path segment.
    return f"/sheets/{quote(sheet_id, safe='')}"


class RemoteStore(ChordSheetStore):
    """:class:`~chordbook.stores.base.ChordSheetStore` over HTTP."""

    def __init__(
        self,
        base_url: str,
        token: str | None = None,
        client: httpx.Client | None = None,
        timeout: float = 15,
    ):
        headers = {"Accept": "application/json"}
        if token:
            headers["Authorization"] = f"Bearer {token}"
        self._client = client or httpx.Client(base_url=base_url, timeout=timeout)
        self._client.headers.update(headers)

    def close(self) -> None:
        self._client.close()

    def get(self, sheet_id: str) -> ChordSheet | None:
        resp = self._request("GET", _sheet_path(sheet_id), allow_404=True)
        if resp is None:
            return None
        return sheet_from_record(resp.json())

    def insert(self, fields: SheetFields, author_id: str) -> str:
        body = {**fields_to_record(fields), "authorId": author_id}
        resp = self._request("POST", "/sheets", json=body)
        return str(resp.json()["id"])

    def patch(self, sheet_id: str, fields: SheetFields) -> None:
        body = fields_to_record(fields)
        # An explicit null clears tags on the server.
        body.setdefault("tags", None)
        self._request("PATCH", _sheet_path(sheet_id), json=body)

    def query_by_author(self, author_id: str) -> list[ChordSheet]:
        return self._list("/sheets", {"author": author_id})

    def query_public_latest(self, limit: int = DEFAULT_LIMIT) -> list[ChordSheet]:
        return self._list("/sheets", {"public": "true", "limit": limit})

    def search_by_title(
        self, text: str, is_public: bool = True, limit: int = DEFAULT_LIMIT
    ) -> list[ChordSheet]:
        params = {"q": text, "public": "true" if is_public else "false", "limit": limit}
        return self._list("/sheets/search", params)

    # -----------------------------------------------------------------------
    # Internal helpers
    # -----------------------------------------------------------------------

    def _list(self, path: str, params: dict) -> list[ChordSheet]:
        resp = self._request("GET", path, params=params)
        return [sheet_from_record(r) for r in resp.json()]

    def _request(self, method: str, path: str, allow_404: bool = False, **kwargs) -> httpx.Response | None:
        logger.debug("%s %s", method, path)
        try:
            resp = self._client.request(method, path, **kwargs)
        except httpx.RequestError as exc:
            raise StoreError(str(exc.request.url), 0) from exc
        url = str(resp.request.url)
        if allow_404 and resp.status_code == 404:
            return None
        if not resp.is_success:
            raise StoreError(url, resp.status_code)
        return resp
