"""Marker line parser for layout directives.

A marker is a single line starting with ``@``:

    @spread [name] [key=value ...] [#id] [.class ...]
    @page   [name] [key=value ...] [#id] [.class ...]
    @section [name] [key=value ...] [#id] [.class ...]
    @break

Lines with any other leading word are not markers and fall through to
normal Markdown handling. Parsing is a pure function of the line text.

Thread Safety:
Marker is frozen. parse_marker_line() holds no state.

"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import StrEnum


class MarkerKind(StrEnum):
    """Recognized marker keywords."""

    SPREAD = "spread"
    PAGE = "page"
    SECTION = "section"
    BREAK = "break"


_CLASS_SPLIT_RE = re.compile(r"[,\s]+")
_QUOTES = frozenset("\"'")


@dataclass(frozen=True, slots=True)
class Marker:
    """Parsed representation of one ``@`` line.

    Attributes:
        kind: Marker keyword
        name: Optional name token (always None for break)
        attributes: Ordered (key, value) pairs; ``class`` holds the
            space-joined class list and ``id`` the ``#`` shorthand
        lineno: 1-based source line (0 when unknown)

    """

    kind: MarkerKind
    name: str | None = None
    attributes: tuple[tuple[str, str], ...] = ()
    lineno: int = 0

    def get(self, key: str, default: str | None = None) -> str | None:
        """Look up an attribute value by key."""
        for k, v in self.attributes:
            if k == key:
                return v
        return default

    def as_dict(self) -> dict[str, str]:
        """Return attributes as a new dict (insertion ordered)."""
        return dict(self.attributes)

    @property
    def classes(self) -> tuple[str, ...]:
        """Author classes in source order."""
        value = self.get("class")
        return tuple(value.split(" ")) if value else ()


def tokenize_marker_line(text: str) -> list[str]:
    """Split a marker line into tokens.

    Whitespace separates tokens. A single- or double-quoted span is part of
    the surrounding token with its quotes stripped; the matching quote always
    ends the span (no escape sequences). Empty tokens are dropped.

    Example:
        >>> tokenize_marker_line('@section hero title="Big one"')
        ['@section', 'hero', 'title=Big one']
    """
    tokens: list[str] = []
    buf: list[str] = []
    quote: str | None = None

    for ch in text:
        if quote is not None:
            if ch == quote:
                quote = None
            else:
                buf.append(ch)
            continue

        if ch in _QUOTES:
            quote = ch
            continue

        if ch.isspace():
            if buf:
                tokens.append("".join(buf))
                buf.clear()
            continue

        buf.append(ch)

    if buf:
        tokens.append("".join(buf))
    return tokens


def parse_marker_line(line: str, lineno: int = 0) -> Marker | None:
    """Parse one source line into a Marker.

    Args:
        line: Raw line text (surrounding whitespace is ignored)
        lineno: 1-based line number recorded on the marker

    Returns:
        Marker, or None if the line is not a recognized marker

    Example:
        >>> m = parse_marker_line("@spread s1 class=fullbleed", 3)
        >>> m.kind, m.name, m.get("class")
        (<MarkerKind.SPREAD: 'spread'>, 's1', 'fullbleed')
        >>> parse_marker_line("@foo bar") is None
        True
    """
    trimmed = line.strip()
    if not trimmed.startswith("@"):
        return None

    tokens = tokenize_marker_line(trimmed)
    if not tokens:
        return None

    try:
        kind = MarkerKind(tokens[0][1:])
    except ValueError:
        return None

    if kind is MarkerKind.BREAK:
        return Marker(kind=kind, lineno=lineno)

    idx = 1
    name: str | None = None
    if idx < len(tokens):
        candidate = tokens[idx]
        if "=" not in candidate and not candidate.startswith((".", "#")):
            name = candidate
            idx += 1

    attrs: dict[str, str] = {}
    classes: list[str] = []
    element_id: str | None = None

    for token in tokens[idx:]:
        if token.startswith("."):
            cls = token[1:].strip()
            if cls:
                classes.append(cls)
            continue

        if token.startswith("#"):
            ident = token[1:].strip()
            if ident:
                element_id = ident
            continue

        eq = token.find("=")
        if eq <= 0:
            continue
        key = token[:eq].strip()
        value = token[eq + 1 :].strip()
        if not key:
            continue

        if key == "class":
            classes.extend(c for c in _CLASS_SPLIT_RE.split(value) if c)
        elif key == "id":
            # Only the #shorthand assigns an element id
            continue
        else:
            attrs[key] = value

    if element_id is not None:
        attrs["id"] = element_id
    if classes:
        attrs["class"] = " ".join(classes)

    return Marker(kind=kind, name=name, attributes=tuple(attrs.items()), lineno=lineno)


__all__ = [
    "Marker",
    "MarkerKind",
    "parse_marker_line",
    "tokenize_marker_line",
]
