"""Tests for quote anchoring."""

import pytest

from script_bible.anchor.locator import QuoteLocator, Span, highlight, whitespace_pattern
from script_bible.extract.extractor import LocalExtractor


@pytest.fixture
def locator():
    return QuoteLocator(prefix_length=20)


class TestExactMatch:
    """Verbatim quotes."""

    def test_round_trip(self, locator):
        """Test that a verbatim quote maps back to itself."""
        source = "场景：客厅\n老人：你好。\n护工：您好，需要帮忙吗？"
        quote = "护工：您好，需要帮忙吗？"
        span = locator.locate(quote, source)

        assert span.strategy == "exact"
        assert source[span.start:span.end] == quote
        assert span.text(source) == quote

    def test_first_occurrence_wins(self, locator):
        """Test that the first occurrence is returned."""
        assert locator.locate("甲乙", "甲乙丙甲乙") == Span(0, 2, "exact")

    def test_every_extracted_quote_anchors(self):
        """Test that every local source quote anchors exactly."""
        text = "场景：客厅\n角色：小明【浑身是伤】\n老人：你好。\n道具：古剑\n灯光：暖光"
        result = LocalExtractor().extract(text)
        quotes = [
            item.source_quote
            for collection in (result.characters, result.scenes, result.props, result.lighting)
            for item in collection
        ]
        locator = QuoteLocator()

        assert len(quotes) == 5
        for quote in quotes:
            assert locator.locate(quote, text).text(text) == quote


class TestWhitespaceMatch:
    """Quotes that differ from the manuscript only by whitespace."""

    def test_line_wrap(self, locator):
        """Test a quote whose space became a newline."""
        source = "前文。老人慢慢地\n走进了房间。后文。"
        span = locator.locate("老人慢慢地 走进了房间。", source)

        assert span.strategy == "whitespace"
        assert span.text(source) == "老人慢慢地\n走进了房间。"

    def test_collapsed_runs(self, locator):
        """Test a single space matching a run of whitespace."""
        source = "they say hello\n\n   world now"
        span = locator.locate("hello world", source)
        assert span.text(source) == "hello\n\n   world"

    def test_quote_with_extra_newlines(self, locator):
        """Test a quote carrying extra newlines."""
        source = "hello world"
        span = locator.locate("hello\n\n\nworld", source)
        assert span.text(source) == "hello world"

    def test_break_inside_unspaced_quote(self, locator):
        """Test a quote without spaces whose passage was split by a newline."""
        source = "前文。老人慢慢地\n走进了房间。后文。"
        span = locator.locate("老人慢慢地走进了房间。", source)

        assert span == Span(3, 15, "whitespace")
        assert span.text(source) == "老人慢慢地\n走进了房间。"

    def test_pattern_escapes_regex_characters(self):
        """Test that regex metacharacters are matched literally."""
        pattern = whitespace_pattern("a.b (c)")
        assert pattern.search("a.b\n(c)")
        assert not pattern.search("axb (c)")


class TestPrefixProbe:
    """Best-effort highlighting of approximately-correct regions."""

    def test_prefix_span_uses_quote_length(self, locator):
        """Test that a prefix match spans the quote length."""
        source = "ABCDEFGHIJKLMNOPQRSTUVWXYZ0123456789"
        quote = "CDEFGHIJKLMNOPQRSTUVWX-changed"
        span = locator.locate(quote, source)

        assert span == Span(2, 2 + len(quote), "prefix")

    def test_prefix_span_clamped_to_source(self):
        """Test that a prefix span stops at the end of the source."""
        source = "ABCDEFGHIJKLMNOPQRSTUVWXYZ"
        span = QuoteLocator(prefix_length=5).locate("VWXYZ-and-more", source)
        assert span == Span(21, 26, "prefix")


class TestNotFound:
    """Anchoring failures are values, not errors."""

    def test_missing_quote(self, locator):
        """Test that an absent quote yields None."""
        assert locator.locate("完全不存在的句子", "场景：客厅") is None

    @pytest.mark.parametrize("quote", [None, "", "   "])
    def test_empty_quote(self, locator, quote):
        """Test that an empty quote yields None."""
        assert locator.locate(quote, "场景：客厅") is None

    def test_empty_source(self, locator):
        """Test that an empty source yields None."""
        assert locator.locate("客厅", "") is None

    def test_highlight_without_span(self):
        """Test that highlight without a span returns the source untouched."""
        assert highlight("原文", None) == ("原文", "", "")


class TestPurity:
    """Same arguments, same answer."""

    def test_idempotent(self, locator):
        """Test that repeated calls agree."""
        source = "老人慢慢地\n走进了房间。"
        quote = "老人慢慢地 走进了房间。"
        assert locator.locate(quote, source) == locator.locate(quote, source)

    def test_highlight_parts_rebuild_source(self, locator):
        """Test that highlight parts concatenate to the source."""
        source = "前文。老人：你好。后文。"
        span = locator.locate("老人：你好。", source)
        before, marked, after = highlight(source, span)

        assert marked == "老人：你好。"
        assert before + marked + after == source
