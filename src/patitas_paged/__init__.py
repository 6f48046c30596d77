"""
patitas-paged — print-layout markers for Patitas Markdown

Adds an opt-in marker sublanguage so authors can describe print structure
without nesting containers:

    @spread ch1 template=spread
    @page left
    @section hero region=left .hero
    # Hello
    @break

Markers are flat; the scope transform turns them into properly nested
``<div>`` wrappers (spread ⊇ page ⊇ section) and reports every structural
fix-up as a Diagnostic. Documents without markers render exactly as patitas
renders them.

Quick Start:
    >>> from patitas_paged import PagedMarkdown
    >>> md = PagedMarkdown()
    >>> diagnostics = []
    >>> html = md("@section intro\\nHello\\n", diagnostics=diagnostics)
    >>> [d.type.value for d in diagnostics]
    ['implicit_page']

Core pieces (usable without a host parser):
    >>> from patitas_paged import parse_marker_line, rewrite
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from typing import Any

import patitas
from patitas.nodes import Document, FootnoteDef

from patitas_paged.config import (
    LayoutConfig,
    get_layout_config,
    layout_config_context,
    reset_layout_config,
    set_layout_config,
)
from patitas_paged.diagnostics import Diagnostic, DiagnosticType, diagnostics_to_json
from patitas_paged.errors import LayoutConfigError, PagedError
from patitas_paged.markers import Marker, MarkerKind, parse_marker_line, tokenize_marker_line
from patitas_paged.nodes import (
    LayoutMarker,
    MarkdownChunk,
    PageBreak,
    ScopeClose,
    ScopeKind,
    ScopeOpen,
)
from patitas_paged.renderer import LayoutHtmlRenderer
from patitas_paged.source import MarkedSource, mark_source, split_document, split_rendered
from patitas_paged.transform import TransformResult, rewrite

__version__ = "0.1.0"

_FOOTNOTES_OPEN = '<section class="footnotes">\n'


@dataclass(frozen=True, slots=True)
class PagedDocument:
    """A parsed document with layout wrappers applied.

    Attributes:
        nodes: MarkdownChunk, ScopeOpen, ScopeClose and PageBreak nodes in order
        diagnostics: Layout diagnostics in emission order
        source_file: Optional source path, carried for reporting
        document: The single patitas Document the chunks were cut from
        source: Marked source the document was parsed from
        marker_count: Number of marker lines claimed from the source

    """

    nodes: tuple[Any, ...]
    diagnostics: tuple[Diagnostic, ...] = ()
    source_file: str | None = None
    document: Document | None = None
    source: str = ""
    marker_count: int = 0


class PagedMarkdown:
    """Markdown processor with layout markers.

    Content between markers is parsed and rendered by a patitas Markdown
    instance, so patitas plugins and highlighting apply as usual.

    Usage:
        >>> md = PagedMarkdown(LayoutConfig(implicit_page=False), plugins=["table"])
        >>> doc = md.parse("@page cover\\n# Title\\n")
        >>> html = md.render(doc)

    Thread Safety:
        Config is immutable and scope state is created per parse. Safe to
        share one instance across threads.

    """

    __slots__ = ("_config", "_markdown", "_renderer")

    def __init__(
        self,
        config: LayoutConfig | None = None,
        *,
        plugins: list[str] | None = None,
        highlight: bool = False,
    ) -> None:
        """Initialize processor.

        Args:
            config: Layout options (defaults to the active context config at
                parse time)
            plugins: patitas plugin names for content (e.g. ["table", "math"])
            highlight: Enable syntax highlighting for code blocks
        """
        self._config = config
        self._markdown = patitas.Markdown(plugins=plugins, highlight=highlight)
        self._renderer = LayoutHtmlRenderer(self._render_chunk)

    def __call__(self, source: str, *, diagnostics: list[Diagnostic] | None = None) -> str:
        """Parse and render in one call.

        Args:
            source: Markdown source text
            diagnostics: Optional caller-owned list; diagnostics are appended
                in emission order. When omitted they are not recorded.

        Returns:
            HTML string
        """
        doc = self.parse(source)
        if diagnostics is not None:
            diagnostics.extend(doc.diagnostics)
        return self.render(doc)

    def parse(self, source: str, *, source_file: str | None = None) -> PagedDocument:
        """Parse source into a PagedDocument.

        The whole document is parsed once, so link reference definitions
        and footnotes resolve across markers.
        """
        marked = mark_source(source)
        document = self._markdown.parse(marked.text, source_file=source_file)
        result = rewrite(split_document(document, marked), self._config)
        return PagedDocument(
            nodes=result.nodes,
            diagnostics=result.diagnostics,
            source_file=source_file,
            document=document,
            source=marked.text,
            marker_count=len(marked.markers),
        )

    def render(self, doc: PagedDocument) -> str:
        """Render a PagedDocument to HTML.

        The full document is rendered in one pass (heading ids stay unique,
        footnotes are numbered once) and cut at the marker sentinels; each
        chunk is replaced by its slice. The footnotes section is emitted
        after every wrapper has closed.
        """
        if doc.document is None:
            return self._renderer.render(doc.nodes)

        html = self._markdown.render(doc.document, source=doc.source)
        fragments = split_rendered(html, doc.marker_count)

        trailer = ""
        if any(isinstance(block, FootnoteDef) for block in doc.document.children):
            at = fragments[-1].rfind(_FOOTNOTES_OPEN)
            if at != -1:
                fragments[-1], trailer = fragments[-1][:at], fragments[-1][at:]

        used = {node.index for node in doc.nodes if isinstance(node, MarkdownChunk)}
        leftover = "".join(f for i, f in enumerate(fragments) if i not in used)

        renderer = LayoutHtmlRenderer(lambda chunk: fragments[chunk.index])
        return renderer.render(doc.nodes) + leftover + trailer

    def _render_chunk(self, chunk: MarkdownChunk) -> str:
        return self._markdown.render(chunk.document, source=chunk.source)


def parse(
    source: str,
    *,
    source_file: str | None = None,
    config: LayoutConfig | None = None,
    plugins: list[str] | None = None,
) -> PagedDocument:
    """Parse Markdown with layout markers.

    Example:
        >>> doc = parse("@spread s1\\nInside\\n@break\\n")
        >>> [type(n).__name__ for n in doc.nodes]
        ['ScopeOpen', 'MarkdownChunk', 'ScopeClose', 'PageBreak']
    """
    return PagedMarkdown(config, plugins=plugins).parse(source, source_file=source_file)


def render(doc: PagedDocument, *, highlight: bool = False) -> str:
    """Render a PagedDocument to HTML."""
    return PagedMarkdown(highlight=highlight).render(doc)


def render_nodes(nodes: Iterable[Any]) -> str:
    """Render an already-transformed node sequence with default settings."""
    return LayoutHtmlRenderer().render(nodes)


__all__ = [  # noqa: RUF022 — grouped by category
    # Version
    "__version__",
    # High-level
    "PagedDocument",
    "PagedMarkdown",
    "parse",
    "render",
    "render_nodes",
    # Marker parsing
    "Marker",
    "MarkerKind",
    "parse_marker_line",
    "tokenize_marker_line",
    # Scope transform
    "TransformResult",
    "rewrite",
    # Nodes
    "LayoutMarker",
    "MarkdownChunk",
    "PageBreak",
    "ScopeClose",
    "ScopeKind",
    "ScopeOpen",
    # Line dispatch
    "MarkedSource",
    "mark_source",
    "split_document",
    # Rendering
    "LayoutHtmlRenderer",
    # Diagnostics
    "Diagnostic",
    "DiagnosticType",
    "diagnostics_to_json",
    # Configuration
    "LayoutConfig",
    "get_layout_config",
    "layout_config_context",
    "reset_layout_config",
    "set_layout_config",
    # Errors
    "LayoutConfigError",
    "PagedError",
]
