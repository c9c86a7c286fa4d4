"""Source anchoring for extracted evidence."""

from .locator import QuoteLocator, Span, highlight, locate

__all__ = ["QuoteLocator", "Span", "highlight", "locate"]
