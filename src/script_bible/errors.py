"""Error types shared across the analysis pipeline.

Every error here is recoverable at the granularity of a single operation.
"""


class ScriptBibleError(Exception):
    """Base class for Script Bible errors."""


class EmptyManuscriptError(ScriptBibleError):
    """The manuscript is empty or whitespace only; analysis never starts."""


class AnalysisInProgressError(ScriptBibleError):
    """An analysis was requested while another one is still running."""


class ExtractionError(ScriptBibleError):
    """The smart (LLM) extractor failed to produce a usable result."""


class UnknownCollectionError(ScriptBibleError, KeyError):
    """A collection edit named a collection that does not exist."""
