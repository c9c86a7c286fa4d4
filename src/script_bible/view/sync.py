"""Scroll synchronization between the source pane and the result pane.

Setting one pane's offset programmatically fires that pane's scroll
handler, which would move the first pane again, and so on. Each direction
therefore holds a guard while it is driving; the opposite handler ignores
events until the guard has settled.
"""

import time
from dataclasses import dataclass
from typing import Callable, Optional

from ..config import get_settings


@dataclass
class ScrollMetrics:
    """Scroll geometry of one pane, in pixels."""

    scroll_top: float = 0.0
    scroll_height: float = 0.0
    client_height: float = 0.0

    @property
    def max_scroll(self) -> float:
        return max(self.scroll_height - self.client_height, 0.0)

    def scroll_ratio(self) -> float:
        """Position as a fraction of the scrollable range (0 when not scrollable)."""
        if self.max_scroll <= 0:
            return 0.0
        return min(max(self.scroll_top / self.max_scroll, 0.0), 1.0)

    def scroll_to_ratio(self, ratio: float) -> float:
        self.scroll_top = ratio * self.max_scroll
        return self.scroll_top


class ScrollSynchronizer:
    """Keeps two panes at the same relative scroll position.

    Usage:
        sync = ScrollSynchronizer(source_pane, result_pane)
        sync.enabled = True
        source_pane.scroll_top = 400
        sync.on_source_scroll()  # result pane follows
    """

    def __init__(
        self,
        source: ScrollMetrics,
        result: ScrollMetrics,
        settle_delay: Optional[float] = None,
        clock: Optional[Callable[[], float]] = None,
    ):
        """Initialize the synchronizer.

        Args:
            source: Metrics of the manuscript pane
            result: Metrics of the result pane
            settle_delay: Seconds a direction stays "driving" after it scrolls
            clock: Monotonic clock in seconds (injectable for tests)
        """
        self.source = source
        self.result = result
        self.settle_delay = settle_delay if settle_delay is not None else get_settings().sync_settle_delay
        self.clock = clock or time.monotonic
        self.enabled = False
        self._source_driving_until = float("-inf")
        self._result_driving_until = float("-inf")

    @property
    def source_driving(self) -> bool:
        return self.clock() < self._source_driving_until

    @property
    def result_driving(self) -> bool:
        return self.clock() < self._result_driving_until

    def on_source_scroll(self) -> float | None:
        """Source pane scrolled; move the result pane.

        Returns:
            New result-pane offset, or None if the event was suppressed
        """
        if not self.enabled or self.result_driving:
            return None
        self._source_driving_until = self.clock() + self.settle_delay
        return self.result.scroll_to_ratio(self.source.scroll_ratio())

    def on_result_scroll(self) -> float | None:
        """Result pane scrolled; move the source pane.

        Returns:
            New source-pane offset, or None if the event was suppressed
        """
        if not self.enabled or self.source_driving:
            return None
        self._result_driving_until = self.clock() + self.settle_delay
        return self.source.scroll_to_ratio(self.result.scroll_ratio())

    def reset(self) -> None:
        """Drop both guards."""
        self._source_driving_until = float("-inf")
        self._result_driving_until = float("-inf")
