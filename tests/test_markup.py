from datetime import datetime, timezone

from bs4 import BeautifulSoup

from chordbook.annotation import RenderMode, render_content
from chordbook.markup import render_html, render_sheet_page
from chordbook.models import ChordSheet, SheetWithAuthor


def _soup(html: str) -> BeautifulSoup:
    return BeautifulSoup(html, "html.parser")


def _item(**kwargs) -> SheetWithAuthor:
    defaults = dict(
        id="s1",
        title="Twinkle Twinkle",
        artist="Traditional",
        content="[C]Twinkle, twinkle, [F]little [C]star\n\n[F]How I [C]wonder",
        author_id="u1",
        is_public=True,
        created_at=datetime(2024, 3, 9, tzinfo=timezone.utc),
    )
    defaults.update(kwargs)
    return SheetWithAuthor(sheet=ChordSheet(**defaults), author_name="Ada")


# ---------------------------------------------------------------------------
# render_html
# ---------------------------------------------------------------------------


def test_one_element_per_line():
    soup = _soup(render_html(render_content("[C]a\n\nb")))
    assert len(soup.select("div.line")) == 2
    assert len(soup.select("div.blank")) == 1


def test_chord_overlay_and_placeholder():
    soup = _soup(render_html(render_content("[Am]Hello", RenderMode.READ_ONLY)))
    assert soup.select_one(".chord").get_text() == "Am"
    assert soup.select_one(".placeholder").get_text() == "__"
    assert soup.select_one(".lyric").get_text() == "Hello"


def test_preview_placeholder_unpadded():
    soup = _soup(render_html(render_content("[C]Hello", RenderMode.PREVIEW)))
    assert soup.select_one(".placeholder").get_text() == "_"


def test_blank_line_height_follows_mode():
    read_only = _soup(render_html(render_content("\n", RenderMode.READ_ONLY)))
    preview = _soup(render_html(render_content("\n", RenderMode.PREVIEW)))
    assert "1.5em" in read_only.select_one(".blank")["style"]
    assert "height: 1em" in preview.select_one(".blank")["style"]


def test_lyrics_and_chords_are_escaped():
    html = render_html(render_content("[<b>]<script>alert(1)</script>"))
    soup = _soup(html)
    assert soup.find("script") is None
    assert soup.find("b") is None
    assert soup.select_one(".chord").get_text() == "<b>"


def test_lyric_text_round_trips_through_html():
    soup = _soup(render_html(render_content("[C]Twinkle, twinkle, [F]little [C]star")))
    lyric = "".join(span.get_text() for span in soup.select(".lyric"))
    assert lyric == "Twinkle, twinkle, little star"


# ---------------------------------------------------------------------------
# render_sheet_page
# ---------------------------------------------------------------------------


def test_page_has_metadata():
    soup = _soup(render_sheet_page(_item()))
    assert soup.find("h1").get_text() == "Twinkle Twinkle"
    assert soup.select_one(".artist").get_text() == "by Traditional"
    assert soup.select_one(".author").get_text() == "by Ada"
    assert soup.select_one(".date").get_text() == "2024-03-09"


def test_page_lists_tags():
    soup = _soup(render_sheet_page(_item(tags=["kids", "easy"])))
    assert [t.get_text() for t in soup.select(".tag")] == ["kids", "easy"]


def test_page_without_tags_has_no_tag_block():
    soup = _soup(render_sheet_page(_item()))
    assert soup.select_one(".tags") is None


def test_page_renders_content():
    soup = _soup(render_sheet_page(_item()))
    assert [c.get_text() for c in soup.select(".content .chord")] == ["C", "F", "C", "F", "C"]
