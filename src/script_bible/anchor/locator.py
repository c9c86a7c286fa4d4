"""Quote anchoring: map an evidence quote back to a span of the manuscript.

Three strategies are tried in order, each one only when the previous one
found nothing:

1. Exact substring (first occurrence)
2. Whitespace-tolerant match of the whole quote
3. Prefix probe: locate the first characters of the quote and highlight
   the quote's length from there

All functions here are pure; the source text is never modified.
"""

import re
from typing import NamedTuple

from ..config import get_settings


class Span(NamedTuple):
    """Half-open [start, end) character range into the source text."""

    start: int
    end: int
    strategy: str = "exact"  # exact, whitespace, prefix

    def text(self, source: str) -> str:
        return source[self.start:self.end]


def whitespace_pattern(quote: str) -> re.Pattern | None:
    """Compile a pattern matching ``quote`` with optional whitespace between any two characters.

    Whitespace in the quote itself is dropped, so re-flowed manuscripts
    match whether the line break falls at a space or inside a CJK run.
    """
    chars = "".join(quote.split())
    if not chars:
        return None
    return re.compile(r"\s*".join(re.escape(char) for char in chars))


class QuoteLocator:
    """Locates evidence quotes in source text.

    Usage:
        span = QuoteLocator().locate(character.source_quote, text)
        if span:
            before, marked, after = highlight(text, span)
    """

    def __init__(self, prefix_length: int | None = None):
        """Initialize the locator.

        Args:
            prefix_length: Characters of the quote used by the prefix probe
        """
        self.prefix_length = prefix_length or get_settings().anchor_prefix_length

    def locate(self, quote: str | None, source: str) -> Span | None:
        """Find the best span for ``quote`` in ``source``.

        Returns:
            Span, or None when no strategy succeeds
        """
        if not quote or not quote.strip() or not source:
            return None

        return (
            self.locate_exact(quote, source)
            or self.locate_whitespace(quote, source)
            or self.locate_prefix(quote, source)
        )

    def locate_exact(self, quote: str, source: str) -> Span | None:
        index = source.find(quote)
        if index == -1:
            return None
        return Span(index, index + len(quote), "exact")

    def locate_whitespace(self, quote: str, source: str) -> Span | None:
        pattern = whitespace_pattern(quote)
        if pattern is None:
            return None
        match = pattern.search(source)
        if not match:
            return None
        return Span(match.start(), match.end(), "whitespace")

    def locate_prefix(self, quote: str, source: str) -> Span | None:
        prefix = quote[:self.prefix_length]
        index = source.find(prefix)
        if index == -1:
            return None
        return Span(index, min(index + len(quote), len(source)), "prefix")


def locate(quote: str | None, source: str) -> Span | None:
    """Locate ``quote`` in ``source`` with default settings."""
    return QuoteLocator().locate(quote, source)


def highlight(source: str, span: Span | None) -> tuple[str, str, str]:
    """Split source into (before, highlighted, after) for rendering.

    Without a span the whole text is returned unhighlighted.
    """
    if span is None:
        return source, "", ""
    return source[:span.start], source[span.start:span.end], source[span.end:]
