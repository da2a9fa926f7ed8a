"""ChordPro export.

Sheet content already uses ChordPro's inline chord notation (``[D]lyric``),
so export only adds the metadata directives in front of it::

    {title: Twinkle Twinkle}
    {artist: Traditional}
    {tag: kids}

    [C]Twinkle, twinkle, [F]little [C]star

Usage::

    from chordbook.chordpro import ChordProFormatter
    text = ChordProFormatter().render(sheet)
    Path("output.cho").write_text(text)
"""

from .models import ChordSheet


class ChordProFormatter:
    """Render a :class:`~chordbook.models.ChordSheet` to ChordPro text."""

    def render(self, sheet: ChordSheet) -> str:
        """Return ChordPro text for *sheet*.

        The returned string ends with a single newline and uses Unix line
        endings (``\\n``) throughout.
        """
        parts: list[str] = []

        # --- Metadata block ---
        parts.append(f"{{title: {sheet.title}}}")
        parts.append(f"{{artist: {sheet.artist}}}")
        for tag in sheet.tags or []:
            parts.append(f"{{tag: {tag}}}")

        # --- Body ---
        body = sheet.content.replace("\r\n", "\n").rstrip("\n")
        if body:
            parts.append("")
            parts.append(body)

        return "\n".join(parts) + "\n"
