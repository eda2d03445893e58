"""Curation pipeline package."""

from __future__ import annotations

from .architect import ArchitectStage
from .backend import GenerationBackend, GenerationError, LiteLLMBackend, StubBackend, build_backend
from .editor import EditorStage
from .errors import ArchitectFailure, CurationError, EditorFailure, FetchFailure, ScrapeFailure
from .fetcher import SourceFetcher
from .models import ArchitectDraft, CurationRequest, CurationResult, CurationStatus, ScrapedContent
from .pipeline import CurationPipeline, StatusTracker, generate_curated_article
from .scraper import ScrapeCoordinator

__all__ = [
    "ArchitectDraft",
    "ArchitectFailure",
    "ArchitectStage",
    "CurationError",
    "CurationPipeline",
    "CurationRequest",
    "CurationResult",
    "CurationStatus",
    "EditorFailure",
    "EditorStage",
    "FetchFailure",
    "GenerationBackend",
    "GenerationError",
    "LiteLLMBackend",
    "ScrapeCoordinator",
    "ScrapeFailure",
    "ScrapedContent",
    "SourceFetcher",
    "StatusTracker",
    "StubBackend",
    "build_backend",
    "generate_curated_article",
]
