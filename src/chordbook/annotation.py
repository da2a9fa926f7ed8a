"""Inline chord annotation: parse ``[Chord]`` markers and lay them out.

Content is plain text with chords written inline, in front of the lyric
they apply to::

    [C]Twinkle, twinkle, [F]little [C]star

The pipeline is:

  1. parse()        : scan each line into TEXT / CHORD segments
  2. render()       : place every chord above the lyric that follows it
  3. plain_text()   : strip chords again (the lyric as typed)
     format_text()  : chords-over-lyrics rows for a monospace terminal

Both parse and render are total: any string is accepted.  A ``[`` that is
never closed on its line, and an empty ``[]``, stay in the lyric as literal
text.  Nothing is cached; layouts are rebuilt from ``content`` on every call.
"""

from dataclasses import dataclass
from enum import Enum, auto

from .models import ParsedLine, Segment, SegmentKind

# Editor quick-insert palette.
COMMON_CHORDS = (
    "C", "D", "E", "F", "G", "A", "B",
    "Am", "Dm", "Em", "Fm", "Gm",
    "C7", "D7", "G7",
)


# ---------------------------------------------------------------------------
# Parsing
# ---------------------------------------------------------------------------


class _State(Enum):
    IN_TEXT = auto()
    IN_CHORD = auto()


def parse(content: str) -> list[ParsedLine]:
    """Parse *content* into one :class:`~chordbook.models.ParsedLine` per line.

    Lines are split on ``"\\n"``.  Empty and whitespace-only lines come back
    blank (no segments).
    """
    return [parse_line(line) for line in content.split("\n")]


def parse_line(line: str) -> ParsedLine:
    """Scan a single line left to right.

    In ``IN_TEXT`` every character is lyric until a ``[`` opens a marker.  In
    ``IN_CHORD`` characters collect into the chord name until the first
    ``]``.  Markers do not nest: a second ``[`` is just part of the name.
    """
    if not line.strip():
        return ParsedLine(padding=line)

    segments: list[Segment] = []
    text = ""
    chord = ""
    offset = 0  # lyric characters emitted so far
    state = _State.IN_TEXT

    for ch in line:
        if state is _State.IN_TEXT:
            if ch == "[":
                state = _State.IN_CHORD
                chord = ""
            else:
                text += ch
            continue

        if ch != "]":
            chord += ch
            continue

        state = _State.IN_TEXT
        if not chord:
            text += "[]"
            continue
        if text:
            segments.append(Segment(SegmentKind.TEXT, text, offset))
            offset += len(text)
            text = ""
        segments.append(Segment(SegmentKind.CHORD, chord, offset))

    if state is _State.IN_CHORD:
        # Unclosed marker: what was read so far is lyric.
        text += "[" + chord
    if text:
        segments.append(Segment(SegmentKind.TEXT, text, offset))

    return ParsedLine(segments=tuple(segments))


# ---------------------------------------------------------------------------
# Layout
# ---------------------------------------------------------------------------


class RenderMode(Enum):
    PREVIEW = "preview"  # editor preview
    READ_ONLY = "read_only"  # sheet viewer


class NodeKind(Enum):
    TEXT = "text"
    CHORD = "chord"
    BLANK = "blank"


# Minimum placeholder width for a chord in the baseline.
_MIN_PLACEHOLDER = {
    RenderMode.PREVIEW: 0,
    RenderMode.READ_ONLY: 2,
}

# Vertical space of a blank line, in line-height units.
BLANK_SPACING = {
    RenderMode.PREVIEW: 1.0,
    RenderMode.READ_ONLY: 1.5,
}


@dataclass(frozen=True)
class LayoutNode:
    """One positioned node of a rendered line.

    ``position`` is the column in the baseline where the node starts.  A
    CHORD node is drawn as an overlay at that column; its ``placeholder``
    (underscores) occupies the baseline underneath so lyrics stay aligned.
    """

    kind: NodeKind
    content: str
    position: int
    placeholder: str = ""


@dataclass(frozen=True)
class LayoutLine:
    key: int  # source line index
    nodes: tuple[LayoutNode, ...]
    spacing: float = 0.0

    @property
    def is_blank(self) -> bool:
        return bool(self.nodes) and self.nodes[0].kind is NodeKind.BLANK

    @property
    def baseline(self) -> str:
        """Lyric row with chord placeholders in place."""
        return "".join(
            n.placeholder if n.kind is NodeKind.CHORD else n.content
            for n in self.nodes
            if n.kind is not NodeKind.BLANK
        )

    @property
    def chord_row(self) -> str:
        """Chord names at their columns, space-padded."""
        row = ""
        for node in self.nodes:
            if node.kind is not NodeKind.CHORD:
                continue
            if len(row) > node.position:
                row += " "
            row = row.ljust(node.position) + node.content
        return row


def render(lines: list[ParsedLine], mode: RenderMode = RenderMode.READ_ONLY) -> list[LayoutLine]:
    """Lay out parsed lines for display in *mode*."""
    min_width = _MIN_PLACEHOLDER[mode]
    layout: list[LayoutLine] = []

    for key, line in enumerate(lines):
        if line.is_blank:
            node = LayoutNode(NodeKind.BLANK, line.padding, 0)
            layout.append(LayoutLine(key=key, nodes=(node,), spacing=BLANK_SPACING[mode]))
            continue

        nodes: list[LayoutNode] = []
        column = 0
        for segment in line.segments:
            if segment.kind is SegmentKind.CHORD:
                placeholder = "_" * max(len(segment.content), min_width)
                nodes.append(LayoutNode(NodeKind.CHORD, segment.content, column, placeholder))
                column += len(placeholder)
            else:
                nodes.append(LayoutNode(NodeKind.TEXT, segment.content, column))
                column += len(segment.content)
        layout.append(LayoutLine(key=key, nodes=tuple(nodes)))

    return layout


def render_content(content: str, mode: RenderMode = RenderMode.READ_ONLY) -> list[LayoutLine]:
    """Convenience: ``render(parse(content), mode)``."""
    return render(parse(content), mode)


# ---------------------------------------------------------------------------
# Text output
# ---------------------------------------------------------------------------


def plain_text(layout: list[LayoutLine]) -> str:
    """Return the lyric text of *layout* with all chords stripped."""
    rows = []
    for line in layout:
        rows.append(
            "".join(n.content for n in line.nodes if n.kind in (NodeKind.TEXT, NodeKind.BLANK))
        )
    return "\n".join(rows)


def format_text(layout: list[LayoutLine]) -> str:
    """Return monospace chords-over-lyrics text, ending with a newline.

    Placeholders become spaces, so ``[C]Twinkle, twinkle, [F]little [C]star``
    in read-only mode gives::

        C                   F        C
          Twinkle, twinkle,   little   star
    """
    rows: list[str] = []
    for line in layout:
        if line.is_blank:
            rows.append("")
            continue
        chords = line.chord_row.rstrip()
        lyric = "".join(
            " " * len(n.placeholder) if n.kind is NodeKind.CHORD else n.content
            for n in line.nodes
        )
        if chords:
            rows.append(chords)
        if lyric.strip() or not chords:
            rows.append(lyric)
    return "\n".join(rows) + "\n"


# ---------------------------------------------------------------------------
# Editing
# ---------------------------------------------------------------------------


def insert_chord(content: str, chord: str, start: int, end: int | None = None) -> tuple[str, int]:
    """Replace ``content[start:end]`` with ``[chord]``.

    Returns the new content and the caret position just after the marker.
    """
    start = max(0, min(start, len(content)))
    end = start if end is None else max(start, min(end, len(content)))
    marker = f"[{chord}]"
    return content[:start] + marker + content[end:], start + len(marker)
