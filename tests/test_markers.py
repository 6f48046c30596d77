"""Tests for marker line parsing."""

import pytest

from patitas_paged.markers import Marker, MarkerKind, parse_marker_line, tokenize_marker_line


class TestTokenizer:
    """Whitespace and quote handling."""

    def test_whitespace_split(self) -> None:
        assert tokenize_marker_line("@page  left\tright") == ["@page", "left", "right"]

    def test_double_quoted_span(self) -> None:
        assert tokenize_marker_line('@page title="A B C"') == ["@page", "title=A B C"]

    def test_single_quoted_span(self) -> None:
        assert tokenize_marker_line("@page 'two words'") == ["@page", "two words"]

    def test_other_quote_inside_span_is_literal(self) -> None:
        assert tokenize_marker_line("@page t=\"it's\"") == ["@page", "t=it's"]

    def test_no_escape_sequences(self) -> None:
        # Backslash does not escape; the quote ends the span
        assert tokenize_marker_line('@page t="a\\"b') == ["@page", "t=a\\b"]

    def test_empty_quotes_produce_no_token(self) -> None:
        assert tokenize_marker_line('@page "" x') == ["@page", "x"]

    def test_unterminated_quote_runs_to_end(self) -> None:
        assert tokenize_marker_line('@page t="a b') == ["@page", "t=a b"]


class TestRejection:
    """Lines that are not markers."""

    @pytest.mark.parametrize(
        "line",
        [
            "",
            "   ",
            "Hello world",
            "email me @ home",
            "# @page heading",
            "@",
            "@ page",
            "@foo bar",
            "@pages",
            "@Spread",
            "@spreadsheet x",
        ],
    )
    def test_not_a_marker(self, line: str) -> None:
        assert parse_marker_line(line) is None


class TestMarkerKinds:
    """Keyword recognition."""

    @pytest.mark.parametrize(
        ("line", "kind"),
        [
            ("@spread", MarkerKind.SPREAD),
            ("@page", MarkerKind.PAGE),
            ("@section", MarkerKind.SECTION),
            ("@break", MarkerKind.BREAK),
        ],
    )
    def test_bare_markers(self, line: str, kind: MarkerKind) -> None:
        marker = parse_marker_line(line)
        assert marker == Marker(kind=kind)
        assert marker.name is None
        assert marker.attributes == ()

    def test_surrounding_whitespace_is_trimmed(self) -> None:
        marker = parse_marker_line("   @page p1   ")
        assert marker is not None
        assert marker.name == "p1"

    def test_break_ignores_trailing_tokens(self) -> None:
        marker = parse_marker_line("@break now .big #x key=v")
        assert marker == Marker(kind=MarkerKind.BREAK)

    def test_lineno_recorded(self) -> None:
        assert parse_marker_line("@page", 12).lineno == 12
        assert parse_marker_line("@break", 7).lineno == 7


class TestNameSlot:
    """Optional name as the second token."""

    def test_name(self) -> None:
        assert parse_marker_line("@spread s1").name == "s1"

    @pytest.mark.parametrize("token", ["key=value", ".cls", "#ident"])
    def test_attribute_token_is_not_a_name(self, token: str) -> None:
        assert parse_marker_line(f"@page {token}").name is None

    def test_quoted_name(self) -> None:
        assert parse_marker_line('@section "Opening act"').name == "Opening act"

    def test_only_second_token_can_be_name(self) -> None:
        marker = parse_marker_line("@page a b c")
        assert marker.name == "a"
        assert marker.attributes == ()


class TestAttributes:
    """Attribute token classification."""

    def test_key_value(self) -> None:
        marker = parse_marker_line("@page left template=spread-left region=left")
        assert marker.as_dict() == {"template": "spread-left", "region": "left"}

    def test_later_duplicate_key_wins(self) -> None:
        marker = parse_marker_line("@page t=a t=b")
        assert marker.get("t") == "b"

    def test_class_value_split_on_commas_and_spaces(self) -> None:
        marker = parse_marker_line('@section class="a, b,c  d"')
        assert marker.get("class") == "a b c d"
        assert marker.classes == ("a", "b", "c", "d")

    def test_shorthand_classes(self) -> None:
        marker = parse_marker_line("@section .one .two")
        assert marker.get("class") == "one two"

    def test_empty_shorthands_ignored(self) -> None:
        marker = parse_marker_line("@section . #")
        assert marker.attributes == ()

    def test_last_hash_wins(self) -> None:
        assert parse_marker_line("@page #a #b").get("id") == "b"

    def test_class_and_id_precedence(self) -> None:
        marker = parse_marker_line("@page class=foo .bar id=x #y")
        assert marker.get("class") == "foo bar"
        assert marker.get("id") == "y"

    def test_id_key_is_ignored(self) -> None:
        marker = parse_marker_line("@page id=x")
        assert marker.get("id") is None
        assert marker.attributes == ()

    def test_unclassified_tokens_ignored(self) -> None:
        marker = parse_marker_line("@page p stray =novalue")
        assert marker.name == "p"
        assert marker.attributes == ()

    def test_value_may_contain_equals(self) -> None:
        assert parse_marker_line("@page expr=a=b").get("expr") == "a=b"

    def test_empty_value_kept(self) -> None:
        assert parse_marker_line("@page note=").as_dict() == {"note": ""}

    def test_no_class_attribute_without_classes(self) -> None:
        marker = parse_marker_line("@spread s1 class=")
        assert marker.get("class") is None

    def test_marker_is_frozen(self) -> None:
        marker = parse_marker_line("@page p")
        with pytest.raises(AttributeError):
            marker.name = "q"  # type: ignore[misc]
