"""Tests for line dispatch (claiming marker lines and splitting the document)."""

import patitas

from patitas_paged.markers import MarkerKind
from patitas_paged.nodes import LayoutMarker, MarkdownChunk
from patitas_paged.source import iter_lines, mark_source, sentinel, split_document, split_rendered


def kinds(source: str) -> list[str]:
    marked = mark_source(source)
    parts = split_document(patitas.parse(marked.text), marked)
    return [
        p.marker.kind.value if isinstance(p, LayoutMarker) else "text"
        for p in parts
    ]


def claimed(source: str) -> list[str]:
    return [m.kind.value for m in mark_source(source).markers]


class TestIterLines:
    """Only \\n ends a line."""

    def test_keeps_terminators(self) -> None:
        assert list(iter_lines("a\nb\r\nc")) == ["a\n", "b\r\n", "c"]

    def test_empty(self) -> None:
        assert list(iter_lines("")) == []

    def test_form_feed_and_separators_are_not_breaks(self) -> None:
        text = "text @break\x0c@page p @section s\x1c@break\n"
        assert list(iter_lines(text)) == [text]


class TestMarkSource:
    """Claiming marker lines."""

    def test_no_markers_unchanged(self) -> None:
        source = "# Title\n\nBody text.\n"
        marked = mark_source(source)
        assert marked.text == source
        assert marked.markers == ()

    def test_empty_source(self) -> None:
        assert mark_source("").text == ""

    def test_marker_replaced_in_place(self) -> None:
        marked = mark_source("Before\n@break\nAfter\n")
        assert marked.text == f"Before\n{sentinel(0)}\nAfter\n"
        assert marked.markers[0].lineno == 2

    def test_line_count_preserved(self) -> None:
        source = "a\n\n@page p\n@section s\nb\n@break"
        marked = mark_source(source)
        assert marked.text.count("\n") == source.count("\n")
        assert [(m.kind, m.lineno) for m in marked.markers] == [
            (MarkerKind.PAGE, 3),
            (MarkerKind.SECTION, 4),
            (MarkerKind.BREAK, 6),
        ]

    def test_unknown_keyword_stays_content(self) -> None:
        assert mark_source("@mention someone\n").markers == ()

    def test_crlf_line_endings(self) -> None:
        marked = mark_source("x\r\n@page p\r\ny\r\n")
        assert marked.markers[0].name == "p"
        assert marked.text == f"x\r\n{sentinel(0)}\ny\r\n"

    def test_small_indent_still_marker(self) -> None:
        assert claimed("   @page p\n") == ["page"]

    def test_form_feed_does_not_split_a_line(self) -> None:
        source = "text @break\nnext @page\x0c@page p\nlast\n"
        marked = mark_source(source)
        assert marked.markers == ()
        assert marked.text == source

    def test_line_numbers_after_separator_characters(self) -> None:
        marked = mark_source("a b\x1dc\n@page p\n")
        assert marked.markers[0].lineno == 2


class TestCodeBlocks:
    """Lines claimed by code blocks are never markers."""

    def test_backtick_fence(self) -> None:
        marked = mark_source("```\n@page inside\n```\n@page outside\n")
        assert [m.name for m in marked.markers] == ["outside"]
        assert marked.text.startswith("```\n@page inside\n```\n")

    def test_tilde_fence(self) -> None:
        assert claimed("~~~md\n@break\n~~~\n") == []

    def test_shorter_closing_fence_does_not_close(self) -> None:
        assert claimed("````\n```\n@break\n````\n@break\n") == ["break"]

    def test_other_fence_char_does_not_close(self) -> None:
        assert claimed("```\n~~~\n@break\n```\n") == []

    def test_unclosed_fence_runs_to_end(self) -> None:
        assert claimed("```\n@break\n@page\n") == []

    def test_backtick_in_info_string_is_not_a_fence(self) -> None:
        assert claimed("``` a`b\n@break\n") == ["break"]

    def test_indented_code(self) -> None:
        assert claimed("    @page p\n") == []

    def test_tab_indent(self) -> None:
        assert claimed("\t@break\n") == []


class TestSplitDocument:
    """Cutting the parsed document at sentinels."""

    def test_markers_split_blocks(self) -> None:
        assert kinds("Before.\n\n@spread s1\nInside.\n@break\nAfter.\n") == [
            "text", "spread", "text", "break", "text",
        ]  # fmt: skip

    def test_marker_interrupts_paragraph(self) -> None:
        assert kinds("line one\n@break\nline two\n") == ["text", "break", "text"]

    def test_adjacent_markers_make_no_empty_chunk(self) -> None:
        assert kinds("@page a\n\n\n@page b\n") == ["page", "page"]

    def test_chunk_index_counts_markers_before(self) -> None:
        marked = mark_source("a\n@page p\n@section s\nb\n")
        parts = split_document(patitas.parse(marked.text), marked)
        chunks = [p for p in parts if isinstance(p, MarkdownChunk)]
        assert [(c.index, c.lineno) for c in chunks] == [(0, 1), (2, 4)]

    def test_chunks_share_marked_source(self) -> None:
        marked = mark_source("a\n@break\nb\n")
        parts = split_document(patitas.parse(marked.text), marked)
        assert all(p.source == marked.text for p in parts if isinstance(p, MarkdownChunk))

    def test_author_comment_is_content(self) -> None:
        assert kinds(f"{sentinel(0)}\n\ntext\n") == ["text"]

    def test_sentinel_inside_raw_html_block(self) -> None:
        assert kinds("<div>\n@page p\n</div>\n") == ["text", "page", "text"]


class TestSplitRendered:
    """Cutting rendered HTML at sentinels."""

    def test_fragments_per_marker(self) -> None:
        html = f"<p>a</p>\n{sentinel(0)}\n<p>b</p>\n{sentinel(1)}\n"
        assert split_rendered(html, 2) == ["<p>a</p>\n", "<p>b</p>\n", ""]

    def test_no_markers(self) -> None:
        assert split_rendered("<p>a</p>\n", 0) == ["<p>a</p>\n"]

    def test_missing_sentinel_pads(self) -> None:
        assert split_rendered("<p>a</p>\n", 2) == ["<p>a</p>\n", "", ""]
