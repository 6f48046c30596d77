"""Layout nodes produced by line dispatch and the scope transform.

Node Hierarchy:
LayoutNode (base)
├── LayoutMarker   intermediate node for a claimed ``@`` line
├── ScopeOpen      opening wrapper for spread/page/section
├── ScopeClose     closing wrapper
└── PageBreak      void hard-break node
MarkdownChunk      host content (top-level blocks between two markers)

Wrappers describe markup without producing it: an element tag, an ordered
attribute set, and whether the node opens, closes, or is void. Rendering
lives in patitas_paged.renderer.

Thread Safety:
All nodes are frozen (immutable) and safe to share across threads.

"""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import TYPE_CHECKING, ClassVar

from patitas_paged.markers import Marker

if TYPE_CHECKING:
    from patitas.nodes import Document


class ScopeKind(StrEnum):
    """Wrapper scopes, outermost first."""

    SPREAD = "spread"
    PAGE = "page"
    SECTION = "section"

    @property
    def base_class(self) -> str:
        """CSS class every wrapper of this kind starts with."""
        return _BASE_CLASSES[self]

    @property
    def data_attribute(self) -> str:
        """Attribute that carries the marker name."""
        return f"data-{self.value}"


_BASE_CLASSES: dict[ScopeKind, str] = {
    ScopeKind.SPREAD: "spread",
    ScopeKind.PAGE: "page",
    ScopeKind.SECTION: "region",
}

# Attributes promoted to fixed positions (or consumed) when building wrappers
_RESERVED_ATTRIBUTES = frozenset({"class", "id", "template", "region"})


@dataclass(frozen=True, slots=True)
class LayoutNode:
    """Base class for layout nodes."""

    tag: ClassVar[str] = "div"


@dataclass(frozen=True, slots=True)
class LayoutMarker(LayoutNode):
    """A claimed marker line awaiting the scope transform.

    Renders as nothing; the transform replaces it with wrappers.
    """

    marker: Marker

    @property
    def lineno(self) -> int:
        return self.marker.lineno


@dataclass(frozen=True, slots=True)
class ScopeOpen(LayoutNode):
    """Opening wrapper for a spread, page, or section.

    Attributes:
        kind: Scope being opened
        attrs: Ordered (name, value) HTML attributes
        lineno: Line of the marker that caused the open
        implicit: True for a page synthesized around a bare section

    """

    kind: ScopeKind
    attrs: tuple[tuple[str, str], ...] = ()
    lineno: int = 0
    implicit: bool = False

    @classmethod
    def from_marker(
        cls,
        kind: ScopeKind,
        name: str | None,
        attributes: tuple[tuple[str, str], ...],
        *,
        lineno: int = 0,
        implicit: bool = False,
    ) -> ScopeOpen:
        """Build a wrapper from a marker's name and attributes."""
        return cls(
            kind=kind,
            attrs=wrapper_attributes(kind, name, attributes),
            lineno=lineno,
            implicit=implicit,
        )

    def get(self, name: str) -> str | None:
        for k, v in self.attrs:
            if k == name:
                return v
        return None


@dataclass(frozen=True, slots=True)
class ScopeClose(LayoutNode):
    """Closing wrapper. Carries no attributes."""

    kind: ScopeKind


@dataclass(frozen=True, slots=True)
class PageBreak(LayoutNode):
    """Void node forcing a hard page break."""

    lineno: int = 0

    attrs: ClassVar[tuple[tuple[str, str], ...]] = (
        ("class", "md-break"),
        ("aria-hidden", "true"),
    )


@dataclass(frozen=True, slots=True)
class MarkdownChunk:
    """Host content for one contiguous run of top-level blocks between markers.

    Attributes:
        source: Full marked source; code blocks are sliced from it when rendering
        document: The parsed document narrowed to this run's blocks
        lineno: Line where the run's first block starts
        index: Number of markers before this run

    """

    source: str
    document: Document
    lineno: int = 1
    index: int = 0


def wrapper_attributes(
    kind: ScopeKind,
    name: str | None,
    attributes: tuple[tuple[str, str], ...],
) -> tuple[tuple[str, str], ...]:
    """Compute the ordered HTML attributes for a wrapper.

    Order: class, data-<kind>, data-template, data-region, id, then every
    other non-empty attribute as data-<key> in author order.

    Example:
        >>> wrapper_attributes(ScopeKind.SECTION, "hero", (("region", "left"),))
        (('class', 'region'), ('data-section', 'hero'), ('data-region', 'left'))
    """
    values = dict(attributes)
    result: list[tuple[str, str]] = []

    classes = " ".join(c for c in (kind.base_class, values.get("class", "")) if c)
    result.append(("class", classes))

    if name:
        result.append((kind.data_attribute, name))
    if values.get("template"):
        result.append(("data-template", values["template"]))
    if values.get("region"):
        result.append(("data-region", values["region"]))
    if values.get("id"):
        result.append(("id", values["id"]))

    for key, value in values.items():
        if not value or key in _RESERVED_ATTRIBUTES:
            continue
        result.append((f"data-{key}", value))

    return tuple(result)


__all__ = [
    "LayoutMarker",
    "LayoutNode",
    "MarkdownChunk",
    "PageBreak",
    "ScopeClose",
    "ScopeKind",
    "ScopeOpen",
    "wrapper_attributes",
]
