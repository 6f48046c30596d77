"""Non-fatal layout diagnostics.

The scope transform never fails on odd marker structure. Each decision it
makes on the author's behalf (auto-closing a spread, synthesizing a page,
dropping a stray break) is reported as a Diagnostic instead.

Diagnostics are returned from the transform in emission order; hosts merge
them into whatever collection they keep.

Thread Safety:
Diagnostic is frozen. All functions are pure.

"""

from __future__ import annotations

import json
from dataclasses import dataclass
from enum import StrEnum
from typing import Any, Iterable

from patitas_paged.markers import Marker


class DiagnosticType(StrEnum):
    """Fixed set of diagnostic categories."""

    IMPLICIT_PAGE = "implicit_page"
    NESTED_SPREAD = "nested_spread"
    BREAK_WITHOUT_SCOPE = "break_without_scope"
    SPREAD_EOF_CLOSE = "spread_eof_close"
    PAGE_OUTSIDE_SPREAD = "page_outside_spread"
    SECTION_WITHOUT_PAGE = "section_without_page"
    SPREAD_WITHOUT_PAGES = "spread_without_pages"


MESSAGES: dict[DiagnosticType, str] = {
    DiagnosticType.IMPLICIT_PAGE: (
        '@section used without an open @page; wrapping it in an implicit page (data-page="auto").'
    ),
    DiagnosticType.NESTED_SPREAD: (
        "@spread encountered while another spread is open; the previous spread was closed."
    ),
    DiagnosticType.BREAK_WITHOUT_SCOPE: (
        "@break used with no open spread, page, or section; it still forces a page break."
    ),
    DiagnosticType.SPREAD_EOF_CLOSE: (
        "An open @spread reached the end of the document and was closed automatically. "
        "Add @break to return to the default flow."
    ),
    DiagnosticType.PAGE_OUTSIDE_SPREAD: (
        "@page used outside of a spread; allowed, but spreads group pages deliberately."
    ),
    DiagnosticType.SECTION_WITHOUT_PAGE: (
        "@section used without an open @page; the region renders without a page wrapper."
    ),
    DiagnosticType.SPREAD_WITHOUT_PAGES: (
        "@section inside a spread that has no explicit @page; allowed, but @page markers "
        "give stronger control."
    ),
}


@dataclass(frozen=True, slots=True)
class Diagnostic:
    """One layout warning.

    Attributes:
        line: 1-based line of the marker involved (0 at end of document)
        type: Diagnostic category
        message: Human-readable explanation
        marker: Marker that triggered the diagnostic, if any

    """

    line: int
    type: DiagnosticType
    message: str
    marker: Marker | None = None

    @classmethod
    def create(
        cls, type: DiagnosticType, line: int = 0, marker: Marker | None = None
    ) -> Diagnostic:
        """Build a diagnostic with the standard message for its type."""
        return cls(line=line, type=type, message=MESSAGES[type], marker=marker)

    def __str__(self) -> str:
        return f"{self.line}: {self.type.value}: {self.message}"

    def to_dict(self) -> dict[str, Any]:
        """Convert to a JSON-compatible dict."""
        marker: dict[str, Any] | None = None
        if self.marker is not None:
            marker = {
                "kind": self.marker.kind.value,
                "name": self.marker.name,
                "attributes": self.marker.as_dict(),
            }
        return {
            "line": self.line,
            "type": self.type.value,
            "message": self.message,
            "marker": marker,
        }


def diagnostics_to_json(diagnostics: Iterable[Diagnostic], *, indent: int | None = None) -> str:
    """Serialize diagnostics to a JSON array.

    Keys are sorted so output is stable across runs.
    """
    return json.dumps([d.to_dict() for d in diagnostics], sort_keys=True, indent=indent)


__all__ = [
    "MESSAGES",
    "Diagnostic",
    "DiagnosticType",
    "diagnostics_to_json",
]
