"""Boundary helpers for view layers."""

from .sync import ScrollMetrics, ScrollSynchronizer

__all__ = ["ScrollMetrics", "ScrollSynchronizer"]
