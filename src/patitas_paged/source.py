"""Line dispatch: claim marker lines and mark their place in the source.

Each line not claimed by an enclosing block is offered to the marker
parser. A claimed line is replaced in place by a sentinel HTML comment,
so the whole document still parses in one pass (link references, heading
slugs and footnotes are shared across markers) and every block keeps its
original line number. After parsing, the document's top-level blocks are
split at the sentinels into MarkdownChunk and LayoutMarker nodes.

Lines never offered to the marker parser:
- anything inside a fenced code block (``` or ~~~)
- lines indented four or more columns (indented code / lazy continuation)

Thread Safety:
All functions are pure. All state is local to the call.

"""

from __future__ import annotations

import dataclasses
import logging
import re
from collections.abc import Iterator
from dataclasses import dataclass
from typing import TYPE_CHECKING

from patitas.nodes import HtmlBlock

from patitas_paged.markers import Marker, parse_marker_line
from patitas_paged.nodes import LayoutMarker, MarkdownChunk

if TYPE_CHECKING:
    from patitas.nodes import Block, Document

logger = logging.getLogger(__name__)

_FENCE_OPEN_RE = re.compile(r"^ {0,3}(?P<fence>`{3,}|~{3,})(?P<info>.*)$")
_FENCE_CLOSE_RE = re.compile(r"^ {0,3}(?P<fence>`{3,}|~{3,})[ \t]*$")
_CODE_INDENT = 4
_TAB_WIDTH = 4

SENTINEL_PREFIX = "<!--patitas-paged:"
SENTINEL_SUFFIX = "-->"


def sentinel(index: int) -> str:
    """Placeholder comment standing in for marker ``index``."""
    return f"{SENTINEL_PREFIX}{index}{SENTINEL_SUFFIX}"


@dataclass(frozen=True, slots=True)
class MarkedSource:
    """Source with marker lines replaced by sentinels.

    Attributes:
        text: Source for the host parser; same line count as the input
        markers: Claimed markers, in order; marker ``i`` sits at sentinel ``i``

    """

    text: str
    markers: tuple[Marker, ...] = ()


def iter_lines(source: str) -> Iterator[str]:
    """Yield lines with their ``\\n`` terminator.

    Only ``\\n`` ends a line (``\\r\\n`` keeps its ``\\r``); form feeds and
    Unicode separators are ordinary characters.
    """
    start = 0
    length = len(source)
    while start < length:
        end = source.find("\n", start)
        if end == -1:
            yield source[start:]
            return
        yield source[start : end + 1]
        start = end + 1


def _indent_width(line: str) -> int:
    width = 0
    for ch in line:
        if ch == " ":
            width += 1
        elif ch == "\t":
            width += _TAB_WIDTH - (width % _TAB_WIDTH)
        else:
            break
    return width


@dataclass(slots=True)
class _FenceTracker:
    """Tracks whether the scan is inside a fenced code block."""

    char: str = ""
    length: int = 0

    @property
    def active(self) -> bool:
        return self.length > 0

    def feed(self, line: str) -> bool:
        """Update fence state for one line.

        Returns:
            True if the line belongs to a fence (opener, body, or closer)
        """
        if self.active:
            match = _FENCE_CLOSE_RE.match(line)
            if match:
                fence = match.group("fence")
                if fence[0] == self.char and len(fence) >= self.length:
                    self.char, self.length = "", 0
            return True

        match = _FENCE_OPEN_RE.match(line)
        if match is None:
            return False
        fence = match.group("fence")
        # Backtick fences cannot carry backticks in their info string
        if fence[0] == "`" and "`" in match.group("info"):
            return False
        self.char, self.length = fence[0], len(fence)
        return True


def mark_source(source: str) -> MarkedSource:
    """Claim marker lines, replacing each with a sentinel comment.

    Line count is preserved, so line numbers in the marked text match the
    input. Sentinel lines always end in a bare ``\\n``.

    Example:
        >>> marked = mark_source("Before\\n@break\\nAfter\\n")
        >>> marked.text
        'Before\\n<!--patitas-paged:0-->\\nAfter\\n'
        >>> marked.markers[0].lineno
        2
    """
    fences = _FenceTracker()
    parts: list[str] = []
    markers: list[Marker] = []

    for lineno, raw in enumerate(iter_lines(source), start=1):
        body = raw.rstrip("\n").rstrip("\r")

        marker = None
        if not fences.feed(body) and _indent_width(body) < _CODE_INDENT:
            marker = parse_marker_line(body, lineno)

        if marker is None:
            parts.append(raw)
            continue

        parts.append(sentinel(len(markers)) + ("\n" if raw.endswith("\n") else ""))
        markers.append(marker)

    logger.debug("claimed %d marker lines", len(markers))
    return MarkedSource(text="".join(parts), markers=tuple(markers))


def split_document(
    document: Document, marked: MarkedSource
) -> list[MarkdownChunk | LayoutMarker]:
    """Split a parsed document's blocks at the marker sentinels.

    A sentinel normally parses as its own HTML comment block. When it was
    swallowed by a preceding raw HTML block, that block is cut in two at
    the sentinel line.

    Chunk ``index`` counts the sentinels before it, so chunk ``i`` lines up
    with the ``i``-th slice of the document's rendered HTML (see
    split_rendered). Empty runs produce no chunk.
    """
    result: list[MarkdownChunk | LayoutMarker] = []
    pending: list[Block] = []
    expected = 0

    def flush() -> None:
        if pending:
            result.append(
                MarkdownChunk(
                    source=marked.text,
                    document=dataclasses.replace(document, children=tuple(pending)),
                    lineno=pending[0].location.lineno,
                    index=expected,
                )
            )
            pending.clear()

    for block in document.children:
        if not isinstance(block, HtmlBlock) or SENTINEL_PREFIX not in block.html:
            pending.append(block)
            continue

        # Sentinels are matched in order so author-written look-alikes stay content
        kept: list[str] = []
        for line in iter_lines(block.html):
            if expected < len(marked.markers) and line.strip() == sentinel(expected):
                if "".join(kept).strip():
                    pending.append(dataclasses.replace(block, html="".join(kept)))
                kept.clear()
                flush()
                result.append(LayoutMarker(marked.markers[expected]))
                expected += 1
            else:
                kept.append(line)
        if "".join(kept).strip():
            pending.append(dataclasses.replace(block, html="".join(kept)))

    flush()
    if expected != len(marked.markers):
        logger.debug("%d marker sentinels not found", len(marked.markers) - expected)
    return result


def split_rendered(html: str, count: int) -> list[str]:
    """Cut rendered HTML at the first ``count`` sentinel lines.

    Returns:
        ``count + 1`` fragments; fragment ``i`` is the output of chunk ``i``
    """
    fragments: list[str] = []
    pos = 0
    for index in range(count):
        needle = sentinel(index)
        at = html.find(needle, pos)
        if at == -1:
            break
        fragments.append(html[pos:at])
        pos = at + len(needle)
        if html.startswith("\n", pos):
            pos += 1
    fragments.append(html[pos:])
    fragments.extend("" for _ in range(count + 1 - len(fragments)))
    return fragments


__all__ = [
    "MarkedSource",
    "iter_lines",
    "mark_source",
    "sentinel",
    "split_document",
    "split_rendered",
]
