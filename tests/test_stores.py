import json
from unittest.mock import patch

import pytest

from chordbook.exceptions import StoreFileError
from chordbook.models import SheetFields, User
from chordbook.registry import get_store
from chordbook.stores.base import title_matches
from chordbook.stores.jsonfile import JsonFileStore
from chordbook.stores.memory import InMemoryStore, StaticAuth
from chordbook.stores.remote import RemoteStore


def _fields(title="Dark Star", **kwargs) -> SheetFields:
    defaults = dict(artist="Grateful Dead", content="[A]Dark star [G]crashes")
    defaults.update(kwargs)
    return SheetFields(title=title, **defaults)


# ---------------------------------------------------------------------------
# title_matches
# ---------------------------------------------------------------------------


def test_title_matches_case_insensitive_prefix():
    assert title_matches("Dark Star", "dark")
    assert title_matches("Dark Star", "STA")


def test_title_matches_needs_every_term():
    assert title_matches("Dark Star", "star dark")
    assert not title_matches("Dark Star", "dark moon")


def test_title_matches_is_not_substring_match():
    assert not title_matches("Dark Star", "ark")


def test_title_matches_empty_query():
    assert not title_matches("Dark Star", "  ")


# ---------------------------------------------------------------------------
# InMemoryStore
# ---------------------------------------------------------------------------


def test_insert_assigns_id_and_timestamp():
    store = InMemoryStore()
    sheet_id = store.insert(_fields(tags=["jam"]), "jerry")
    sheet = store.get(sheet_id)
    assert sheet.id == sheet_id
    assert sheet.author_id == "jerry"
    assert sheet.created_at.tzinfo is not None
    assert sheet.tags == ["jam"]


def test_insert_ids_are_unique():
    store = InMemoryStore()
    assert store.insert(_fields(), "a") != store.insert(_fields(), "a")


def test_get_missing_returns_none():
    assert InMemoryStore().get("missing") is None


def test_patch_swaps_whole_record():
    store = InMemoryStore()
    sheet_id = store.insert(_fields(), "jerry")
    before = store.get(sheet_id)
    store.patch(sheet_id, _fields(title="Playing in the Band", is_public=False))
    after = store.get(sheet_id)
    assert after is not before
    assert before.title == "Dark Star"
    assert after.title == "Playing in the Band"
    assert after.is_public is False
    assert after.created_at == before.created_at


def test_query_public_latest_order_and_limit():
    store = InMemoryStore()
    ids = [store.insert(_fields(title=f"Song {n}"), "a") for n in range(3)]
    store.insert(_fields(title="Private", is_public=False), "a")
    assert [s.id for s in store.query_public_latest(limit=2)] == [ids[2], ids[1]]


def test_query_by_author():
    store = InMemoryStore()
    mine = store.insert(_fields(), "a")
    store.insert(_fields(), "b")
    assert [s.id for s in store.query_by_author("a")] == [mine]


def test_search_by_title_filters_visibility():
    store = InMemoryStore()
    public = store.insert(_fields(title="Dark Star"), "a")
    private = store.insert(_fields(title="Dark Hollow", is_public=False), "a")
    assert [s.id for s in store.search_by_title("dark")] == [public]
    assert [s.id for s in store.search_by_title("dark", is_public=False)] == [private]


# ---------------------------------------------------------------------------
# StaticAuth
# ---------------------------------------------------------------------------


def test_static_auth_current_user():
    assert StaticAuth("a").current_user_id() == "a"
    assert StaticAuth(None).current_user_id() is None


def test_static_auth_display_names():
    auth = StaticAuth(None, {"a": User(id="a", name="Ada")})
    assert auth.display_name("a") == "Ada"
    assert auth.display_name("zed") == "Anonymous"


# ---------------------------------------------------------------------------
# JsonFileStore
# ---------------------------------------------------------------------------


def test_missing_file_is_empty_store(tmp_path):
    store = JsonFileStore(tmp_path / "sheets.json")
    assert store.query_public_latest() == []
    assert not (tmp_path / "sheets.json").exists()


def test_insert_persists(tmp_path):
    path = tmp_path / "sheets.json"
    sheet_id = JsonFileStore(path).insert(_fields(tags=["jam"]), "jerry")

    data = json.loads(path.read_text(encoding="utf-8"))
    assert data["sheets"][0]["id"] == sheet_id
    assert data["sheets"][0]["authorId"] == "jerry"

    reopened = JsonFileStore(path).get(sheet_id)
    assert reopened.title == "Dark Star"
    assert reopened.tags == ["jam"]


def test_order_survives_reload(tmp_path):
    path = tmp_path / "sheets.json"
    store = JsonFileStore(path)
    first = store.insert(_fields(title="First"), "a")
    second = store.insert(_fields(title="Second"), "a")
    assert [s.id for s in JsonFileStore(path).query_public_latest()] == [second, first]


def test_patch_persists(tmp_path):
    path = tmp_path / "sheets.json"
    store = JsonFileStore(path)
    sheet_id = store.insert(_fields(), "a")
    store.patch(sheet_id, _fields(title="Renamed"))
    assert JsonFileStore(path).get(sheet_id).title == "Renamed"


def test_no_temp_files_left_behind(tmp_path):
    store = JsonFileStore(tmp_path / "sheets.json")
    store.insert(_fields(), "a")
    assert [p.name for p in tmp_path.iterdir()] == ["sheets.json"]


def test_failed_write_rolls_back_patch(tmp_path):
    store = JsonFileStore(tmp_path / "sheets.json")
    sheet_id = store.insert(_fields(), "a")
    with patch("chordbook.stores.jsonfile.os.replace", side_effect=OSError("disk full")):
        with pytest.raises(OSError):
            store.patch(sheet_id, _fields(title="Renamed"))
    assert store.get(sheet_id).title == "Dark Star"
    assert JsonFileStore(tmp_path / "sheets.json").get(sheet_id).title == "Dark Star"
    assert [p.name for p in tmp_path.iterdir()] == ["sheets.json"]


def test_failed_write_rolls_back_insert(tmp_path):
    store = JsonFileStore(tmp_path / "sheets.json")
    with patch("chordbook.stores.jsonfile.os.replace", side_effect=OSError("disk full")):
        with pytest.raises(OSError):
            store.insert(_fields(), "a")
    assert store.query_by_author("a") == []


def test_users_persist(tmp_path):
    path = tmp_path / "sheets.json"
    JsonFileStore(path).save_user(User(id="a", name="Ada", email="ada@example.com"))
    assert JsonFileStore(path).users["a"] == User(id="a", name="Ada", email="ada@example.com")


@pytest.mark.parametrize(
    "text",
    [
        "{not json",
        "[]",
        '{"sheets": [{"id": "x"}]}',
        '{"sheets": [{"id": "x", "title": "T", "artist": "A", "authorId": "a",'
        ' "isPublic": true, "createdAt": "yesterday"}]}',
        '{"users": {"a": "Ada"}}',
    ],
)
def test_unreadable_file_raises_store_file_error(tmp_path, text):
    path = tmp_path / "sheets.json"
    path.write_text(text, encoding="utf-8")
    with pytest.raises(StoreFileError) as exc_info:
        JsonFileStore(path)
    assert exc_info.value.path == str(path)
    assert str(path) in str(exc_info.value)


# ---------------------------------------------------------------------------
# registry
# ---------------------------------------------------------------------------


def test_get_store_defaults_to_json_file(tmp_path):
    store = get_store(tmp_path / "x.json")
    assert isinstance(store, JsonFileStore)
    assert store.path == tmp_path / "x.json"


def test_get_store_backend_url_wins(tmp_path):
    store = get_store(tmp_path / "x.json", backend_url="https://chords.example.com")
    assert isinstance(store, RemoteStore)
    store.close()
