from datetime import datetime, timezone

from chordbook.chordpro import ChordProFormatter
from chordbook.models import ChordSheet


def _sheet(**kwargs) -> ChordSheet:
    defaults = dict(
        id="s1",
        title="Dark Star",
        artist="Grateful Dead",
        content="[A]Dark star [G]crashes",
        author_id="jerry",
        is_public=True,
        created_at=datetime(2024, 1, 1, tzinfo=timezone.utc),
    )
    defaults.update(kwargs)
    return ChordSheet(**defaults)


def _render(sheet: ChordSheet) -> str:
    return ChordProFormatter().render(sheet)


# ---------------------------------------------------------------------------
# Metadata
# ---------------------------------------------------------------------------


def test_title_and_artist_in_output():
    out = _render(_sheet())
    assert "{title: Dark Star}" in out
    assert "{artist: Grateful Dead}" in out


def test_tags_omitted_when_none():
    assert "{tag:" not in _render(_sheet())


def test_one_tag_directive_per_tag():
    out = _render(_sheet(tags=["jam", "live"]))
    assert "{tag: jam}\n{tag: live}" in out


# ---------------------------------------------------------------------------
# Body
# ---------------------------------------------------------------------------


def test_content_kept_inline():
    assert "[A]Dark star [G]crashes" in _render(_sheet())


def test_blank_line_between_metadata_and_body():
    assert "{artist: Grateful Dead}\n\n[A]Dark star" in _render(_sheet())


def test_empty_content_has_only_metadata():
    assert _render(_sheet(content="")) == "{title: Dark Star}\n{artist: Grateful Dead}\n"


def test_crlf_normalised():
    out = _render(_sheet(content="[A]one\r\n[G]two"))
    assert "\r" not in out
    assert "[A]one\n[G]two" in out


# ---------------------------------------------------------------------------
# Formatting
# ---------------------------------------------------------------------------


def test_output_ends_with_single_newline():
    out = _render(_sheet(content="[A]line\n\n\n"))
    assert out.endswith("line\n")


def test_metadata_comes_before_body():
    out = _render(_sheet())
    assert out.index("{title:") < out.index("[A]")
