from pathlib import Path

from .stores.base import ChordSheetStore
from .stores.jsonfile import JsonFileStore
from .stores.remote import RemoteStore

DEFAULT_STORE_PATH = "chordbook.json"


def get_store(
    store_path: str | Path | None = None,
    backend_url: str | None = None,
    token: str | None = None,
) -> ChordSheetStore:
    """Return the store selected by configuration.

    A backend URL wins over a local file; with neither, the default
    ``chordbook.json`` in the working directory is used.
    """
    if backend_url:
        return RemoteStore(backend_url, token=token)
    return JsonFileStore(store_path or DEFAULT_STORE_PATH)
