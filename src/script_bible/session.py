"""Analysis session: one manuscript, its current result and highlight.

The session is the seam between view layers and the core. It owns the
re-entrancy guard around analysis, keeps the previous result when the
smart extractor fails, and applies user edits as whole-collection
replacements.
"""

from typing import Callable, Optional

from pydantic import BaseModel

from .anchor.locator import QuoteLocator, Span
from .errors import (
    AnalysisInProgressError,
    EmptyManuscriptError,
    ExtractionError,
    UnknownCollectionError,
)
from .extract.extractor import LocalExtractor
from .models.result import COLLECTIONS, AnalysisResult
from .smart import SmartExtractor


MODES = ("local", "smart")


class AnalysisSession:
    """Holds manuscript text and the result derived from it.

    Usage:
        session = AnalysisSession(text, smart_extractor=SmartExtractor(LLMClient()))
        result = session.analyze("local")
        span = session.locate(result.characters[0].source_quote)
    """

    def __init__(
        self,
        text: str = "",
        smart_extractor: Optional[SmartExtractor] = None,
        local_extractor: Optional[LocalExtractor] = None,
        locator: Optional[QuoteLocator] = None,
        progress_callback: Optional[Callable[[str], None]] = None,
    ):
        """Initialize the session.

        Args:
            text: Manuscript text
            smart_extractor: LLM-backed extractor; smart mode is unavailable without one
            local_extractor: Heuristic extractor (default: LocalExtractor())
            locator: Quote locator used for highlighting
            progress_callback: Optional callback for progress updates
        """
        self.text = text
        self.smart_extractor = smart_extractor
        self.local_extractor = local_extractor or LocalExtractor(progress_callback=progress_callback)
        self.locator = locator or QuoteLocator()
        self.progress = progress_callback or (lambda x: None)

        self.result: AnalysisResult | None = None
        self.highlight_quote: str | None = None
        self.is_analyzing = False

    def analyze(self, mode: str = "local") -> AnalysisResult:
        """Run an analysis of the current text.

        Raises:
            EmptyManuscriptError: text is empty; nothing changes
            AnalysisInProgressError: another analysis is running
            ExtractionError: the smart extractor failed; the previous result is kept
            ValueError: unknown mode, or smart mode without a smart extractor
        """
        if mode not in MODES:
            raise ValueError(f"Unknown analysis mode: {mode}")
        if not self.text.strip():
            raise EmptyManuscriptError("Manuscript is empty")
        if self.is_analyzing:
            raise AnalysisInProgressError("An analysis is already running")
        if mode == "smart" and self.smart_extractor is None:
            raise ValueError("Smart mode needs a smart extractor")

        self.is_analyzing = True
        # Anchors belong to the result they were computed for
        self.highlight_quote = None
        try:
            self.progress(f"Analyzing ({mode})...")
            if mode == "smart":
                result = self.smart_extractor.extract(self.text)
            else:
                result = self.local_extractor.extract(self.text)
        except ExtractionError as e:
            self.progress(f"Analysis failed: {e}")
            raise
        finally:
            self.is_analyzing = False

        self.result = result
        return result

    def set_text(self, text: str) -> None:
        """Replace the manuscript; the old result and highlight no longer apply."""
        self.text = text
        self.result = None
        self.highlight_quote = None

    def locate(self, quote: str | None) -> Span | None:
        """Highlight ``quote`` in the manuscript.

        Returns:
            The span, or None when the quote cannot be anchored
        """
        self.highlight_quote = quote or None
        if not quote:
            return None
        return self.locator.locate(quote, self.text)

    @property
    def highlight_span(self) -> Span | None:
        if not self.highlight_quote:
            return None
        return self.locator.locate(self.highlight_quote, self.text)

    def clear_highlight(self) -> None:
        self.highlight_quote = None

    # Whole-collection edits

    def _require_result(self) -> AnalysisResult:
        if self.result is None:
            raise ValueError("No analysis result to edit")
        return self.result

    def replace_collection(self, collection: str, items) -> AnalysisResult:
        """Replace a whole collection with ``items``."""
        self.result = self._require_result().replace(collection, items)
        return self.result

    def _records(self, collection: str, by_id: bool = False) -> list:
        """Current records of a collection, checking it can be edited that way."""
        record_type = COLLECTIONS.get(collection)
        if record_type is None:
            raise UnknownCollectionError(collection)
        if by_id and "id" not in record_type.model_fields:
            raise ValueError(f"{collection} records have no id; edit them by index")
        return list(getattr(self._require_result(), collection))

    def delete_item(self, collection: str, item_id: str) -> AnalysisResult:
        """Remove the record with ``item_id`` from a collection."""
        items = self._records(collection, by_id=True)
        return self.replace_collection(collection, [item for item in items if item.id != item_id])

    def update_item(self, collection: str, item: BaseModel) -> AnalysisResult:
        """Replace the record whose id matches ``item.id``."""
        items = self._records(collection, by_id=True)
        return self.replace_collection(
            collection, [item if old.id == item.id else old for old in items]
        )

    def delete_at(self, collection: str, index: int) -> AnalysisResult:
        """Remove the record at ``index``; the way to edit relationships."""
        items = self._records(collection)
        del items[index]
        return self.replace_collection(collection, items)

    def update_at(self, collection: str, index: int, item) -> AnalysisResult:
        """Replace the record at ``index``."""
        items = self._records(collection)
        items[index] = item
        return self.replace_collection(collection, items)

    def move_item(self, collection: str, from_index: int, to_index: int) -> AnalysisResult:
        """Move one record to another position, keeping the rest in order."""
        items = self._records(collection)
        items.insert(to_index, items.pop(from_index))
        return self.replace_collection(collection, items)
