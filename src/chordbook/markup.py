"""HTML rendering of chord sheet layouts.

Markup produced for one line::

    <div class="line">
      <span class="segment"><span class="chord">C</span><span class="placeholder">__</span></span>
      <span class="segment"><span class="lyric">Twinkle</span></span>
    </div>

The ``placeholder`` span is meant to be styled transparent; ``chord`` is
positioned absolutely above it.  Blank lines become an empty
``<div class="blank">`` whose height is the layout's spacing in ``em``.
"""

from html import escape

from .annotation import LayoutLine, NodeKind, RenderMode, render_content
from .models import SheetWithAuthor

_STYLE = """\
.content { font-family: monospace; line-height: 2.5; }
.line { position: relative; white-space: pre; }
.segment { position: relative; display: inline-block; }
.chord { position: absolute; top: -1.2em; font-weight: bold; color: #2563eb; }
.placeholder { color: transparent; user-select: none; }
.tag { display: inline-block; padding: 0 .5em; border-radius: 1em; background: #dbeafe; }
"""


def render_html(layout: list[LayoutLine]) -> str:
    """Return an HTML fragment for *layout*, one element per line."""
    parts: list[str] = []
    for line in layout:
        if line.is_blank:
            parts.append(f'<div class="blank" style="height: {line.spacing:g}em"></div>')
            continue
        spans = "".join(_render_node(n.kind, n.content, n.placeholder) for n in line.nodes)
        parts.append(f'<div class="line" data-key="{line.key}">{spans}</div>')
    return "\n".join(parts)


def _render_node(kind: NodeKind, content: str, placeholder: str) -> str:
    if kind is NodeKind.CHORD:
        inner = (
            f'<span class="chord">{escape(content)}</span>'
            f'<span class="placeholder">{placeholder}</span>'
        )
    else:
        inner = f'<span class="lyric">{escape(content)}</span>'
    return f'<span class="segment">{inner}</span>'


def render_sheet_page(item: SheetWithAuthor, mode: RenderMode = RenderMode.READ_ONLY) -> str:
    """Return a standalone HTML document showing a whole sheet."""
    sheet = item.sheet
    title = escape(sheet.title)
    tags = "".join(f'<span class="tag">{escape(t)}</span>' for t in sheet.tags or [])
    body = render_html(render_content(sheet.content, mode))

    return "\n".join([
        "<!DOCTYPE html>",
        '<html><head><meta charset="utf-8">',
        f"<title>{title} - {escape(sheet.artist)}</title>",
        f"<style>{_STYLE}</style>",
        "</head><body>",
        f"<h1>{title}</h1>",
        f'<p class="artist">by {escape(sheet.artist)}</p>',
        f'<p class="meta"><span class="author">by {escape(item.author_name)}</span>'
        f' &bull; <span class="date">{sheet.created_at.date().isoformat()}</span></p>',
        f'<div class="tags">{tags}</div>' if tags else "",
        f'<div class="content">\n{body}\n</div>',
        "</body></html>",
        "",
    ])
