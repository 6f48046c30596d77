"""HTML renderer for layout node sequences.

Wrappers render as plain ``<div>`` elements with their attributes in order;
content chunks are handed to patitas. LayoutMarker nodes render as nothing.

Output:
    spread  -> <div class="spread ..." data-spread="name" ...>
    page    -> <div class="page ..." data-page="name" ...>
    section -> <div class="region ..." data-section="name" data-region="..." ...>
    break   -> <div class="md-break" aria-hidden="true"></div>

Thread Safety:
Each render() call uses its own StringBuilder. A renderer instance can be
shared across threads.

"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from typing import Any

import patitas
from patitas.renderers.html import html_escape
from patitas.stringbuilder import StringBuilder

from patitas_paged.nodes import LayoutMarker, MarkdownChunk, PageBreak, ScopeClose, ScopeOpen


def format_attributes(attrs: Iterable[tuple[str, str]]) -> str:
    """Format ordered attributes as `` name="value"`` pairs."""
    return "".join(f' {name}="{html_escape(value)}"' for name, value in attrs)


def _render_chunk_default(chunk: MarkdownChunk) -> str:
    return patitas.render(chunk.document, source=chunk.source)


class LayoutHtmlRenderer:
    """Render a transformed node sequence to HTML.

    Usage:
        >>> from patitas_paged.nodes import PageBreak
        >>> LayoutHtmlRenderer().render([PageBreak()])
        '<div class="md-break" aria-hidden="true"></div>\\n'

    """

    __slots__ = ("_render_chunk",)

    def __init__(self, render_chunk: Callable[[MarkdownChunk], str] | None = None) -> None:
        """Initialize renderer.

        Args:
            render_chunk: Renders one content chunk to HTML. Defaults to
                patitas.render() on the chunk's blocks alone.
        """
        self._render_chunk = render_chunk or _render_chunk_default

    def render(self, nodes: Iterable[Any]) -> str:
        """Render nodes in order and return the HTML string."""
        sb = StringBuilder()
        for node in nodes:
            self._render_node(node, sb)
        return sb.build()

    def _render_node(self, node: Any, sb: StringBuilder) -> None:
        match node:
            case ScopeOpen():
                sb.append_line(f"<{node.tag}{format_attributes(node.attrs)}>")
            case ScopeClose():
                sb.append_line(f"</{node.tag}>")
            case PageBreak():
                sb.append_line(f"<{node.tag}{format_attributes(node.attrs)}></{node.tag}>")
            case MarkdownChunk():
                sb.append(self._render_chunk(node))
            case LayoutMarker():
                pass  # Consumed by the scope transform


__all__ = ["LayoutHtmlRenderer", "format_attributes"]
