"""Scope transform: rewrite marker nodes into nested wrappers.

Markers are flat (``@page`` does not need a matching close), but output
must be properly nested: spread ⊇ page ⊇ section. The transform walks the
node sequence once, tracking which of the three scopes is open, and emits
ScopeOpen/ScopeClose/PageBreak nodes in place of each LayoutMarker.

Rules:
- @spread closes whatever is open (section, page, spread) before opening.
- @page closes the open section and page, never the spread.
- @section closes the open section; with no open page it either opens an
  implicit page "auto" or renders unwrapped, depending on config.
- @break closes exactly the nearest open scope (section, then page, then
  spread) and always emits a break node.
- End of document closes everything still open.

Thread Safety:
All scope state lives in a ScopeTransform created per rewrite() call.

"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Any

from patitas_paged.config import LayoutConfig, get_layout_config
from patitas_paged.diagnostics import Diagnostic, DiagnosticType
from patitas_paged.markers import Marker, MarkerKind
from patitas_paged.nodes import LayoutMarker, PageBreak, ScopeClose, ScopeKind, ScopeOpen

logger = logging.getLogger(__name__)

IMPLICIT_PAGE_NAME = "auto"


@dataclass(slots=True)
class ScopeStack:
    """Which scopes are open. One slot per kind, never deeper."""

    spread: bool = False
    page: bool = False
    section: bool = False
    spread_has_pages: bool = False

    @property
    def any_open(self) -> bool:
        return self.spread or self.page or self.section


@dataclass(frozen=True, slots=True)
class TransformResult:
    """Rewritten node sequence plus diagnostics in emission order."""

    nodes: tuple[Any, ...]
    diagnostics: tuple[Diagnostic, ...] = ()


@dataclass(slots=True)
class ScopeTransform:
    """Single-use state machine behind rewrite()."""

    config: LayoutConfig
    scopes: ScopeStack = field(default_factory=ScopeStack)
    out: list[Any] = field(default_factory=list)
    diagnostics: list[Diagnostic] = field(default_factory=list)

    def run(self, nodes: Iterable[Any]) -> TransformResult:
        for node in nodes:
            if isinstance(node, LayoutMarker):
                self._handle(node.marker)
            else:
                self.out.append(node)

        if self.scopes.spread and not self.scopes.spread_has_pages:
            self._warn(DiagnosticType.SPREAD_EOF_CLOSE, 0, None)
        self._close_spread()

        return TransformResult(nodes=tuple(self.out), diagnostics=tuple(self.diagnostics))

    def _handle(self, marker: Marker) -> None:
        match marker.kind:
            case MarkerKind.SPREAD:
                if self.scopes.spread:
                    self._warn(DiagnosticType.NESTED_SPREAD, marker.lineno, marker)
                self._close_spread()
                self._open_spread(marker)
            case MarkerKind.PAGE:
                self._close_page()
                self._open_page(marker.name, marker.attributes, marker.lineno, marker)
            case MarkerKind.SECTION:
                self._handle_section(marker)
            case MarkerKind.BREAK:
                self._handle_break(marker)

    def _handle_section(self, marker: Marker) -> None:
        self._close_section()

        if not self.scopes.page:
            if self.config.implicit_page:
                self._warn(DiagnosticType.IMPLICIT_PAGE, marker.lineno, marker)
                self._open_page(IMPLICIT_PAGE_NAME, (), marker.lineno, marker, implicit=True)
            else:
                self._warn(DiagnosticType.SECTION_WITHOUT_PAGE, marker.lineno, marker)

        if self.scopes.spread and not self.scopes.spread_has_pages:
            self._warn(DiagnosticType.SPREAD_WITHOUT_PAGES, marker.lineno, marker)

        self.out.append(
            ScopeOpen.from_marker(
                ScopeKind.SECTION, marker.name, marker.attributes, lineno=marker.lineno
            )
        )
        self.scopes.section = True

    def _handle_break(self, marker: Marker) -> None:
        if not self.scopes.any_open and self.config.warn_on_break_without_scope:
            self._warn(DiagnosticType.BREAK_WITHOUT_SCOPE, marker.lineno, marker)

        if self.scopes.section:
            self._close_section()
        elif self.scopes.page:
            self._close_page()
        elif self.scopes.spread:
            self._close_spread()

        self.out.append(PageBreak(lineno=marker.lineno))

    # =========================================================================
    # Open / close helpers
    # =========================================================================

    def _open_spread(self, marker: Marker) -> None:
        self.out.append(
            ScopeOpen.from_marker(
                ScopeKind.SPREAD, marker.name, marker.attributes, lineno=marker.lineno
            )
        )
        self.scopes.spread = True
        self.scopes.spread_has_pages = False

    def _open_page(
        self,
        name: str | None,
        attributes: tuple[tuple[str, str], ...],
        lineno: int,
        marker: Marker,
        *,
        implicit: bool = False,
    ) -> None:
        self.out.append(
            ScopeOpen.from_marker(
                ScopeKind.PAGE, name, attributes, lineno=lineno, implicit=implicit
            )
        )
        self.scopes.page = True

        if self.scopes.spread:
            self.scopes.spread_has_pages = True
        elif self.config.prefer_pages_in_spreads:
            self._warn(DiagnosticType.PAGE_OUTSIDE_SPREAD, lineno, marker)

    def _close_section(self) -> None:
        if not self.scopes.section:
            return
        self.out.append(ScopeClose(ScopeKind.SECTION))
        self.scopes.section = False

    # Inner scopes close first even when the outer slot is empty: a section
    # opened without a page still sits inside the spread.

    def _close_page(self) -> None:
        self._close_section()
        if not self.scopes.page:
            return
        self.out.append(ScopeClose(ScopeKind.PAGE))
        self.scopes.page = False

    def _close_spread(self) -> None:
        self._close_page()
        if not self.scopes.spread:
            return
        self.out.append(ScopeClose(ScopeKind.SPREAD))
        self.scopes.spread = False
        self.scopes.spread_has_pages = False

    def _warn(self, type: DiagnosticType, line: int, marker: Marker | None) -> None:
        diagnostic = Diagnostic.create(type, line, marker)
        logger.debug("layout diagnostic at line %d: %s", line, type.value)
        self.diagnostics.append(diagnostic)


def rewrite(nodes: Iterable[Any], config: LayoutConfig | None = None) -> TransformResult:
    """Rewrite a document's node sequence into balanced layout wrappers.

    Non-marker nodes are passed through untouched and in order. A sequence
    with no LayoutMarker is returned unchanged with no diagnostics.

    Args:
        nodes: Content nodes interleaved with LayoutMarker nodes
        config: Layout options (defaults to the active context config)

    Returns:
        TransformResult with the rewritten nodes and diagnostics

    Example:
        >>> from patitas_paged.markers import parse_marker_line
        >>> result = rewrite([LayoutMarker(parse_marker_line("@section intro", 1))])
        >>> [d.type.value for d in result.diagnostics]
        ['implicit_page']
    """
    items = tuple(nodes)
    if not any(isinstance(node, LayoutMarker) for node in items):
        return TransformResult(nodes=items)

    transform = ScopeTransform(config=config or get_layout_config())
    return transform.run(items)


__all__ = [
    "IMPLICIT_PAGE_NAME",
    "ScopeStack",
    "ScopeTransform",
    "TransformResult",
    "rewrite",
]
