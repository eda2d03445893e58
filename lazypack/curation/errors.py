"""Failure taxonomy for the curation pipeline."""

from __future__ import annotations


class CurationError(RuntimeError):
    """Base class for every curation pipeline failure."""


class FetchFailure(CurationError):
    """All retrieval routes failed for one URL.

    Never escapes the fetcher: it is recorded as a sentinel
    :class:`~lazypack.curation.models.ScrapedContent` instead.
    """


class ScrapeFailure(CurationError):
    """No source produced usable content."""


class ArchitectFailure(CurationError):
    """The structural drafting stage could not produce valid drafts."""


class EditorFailure(CurationError):
    """The writing stage could not produce HTML."""


__all__ = [
    "ArchitectFailure",
    "CurationError",
    "EditorFailure",
    "FetchFailure",
    "ScrapeFailure",
]
