"""Manuscript ingestion."""

from script_bible.ingest.loader import load_manuscript
from script_bible.ingest.splitter import split_into_lines

__all__ = ["load_manuscript", "split_into_lines"]
