"""Internal link analysis for existing articles."""

from __future__ import annotations

import json
from collections.abc import Sequence
from typing import Any

from loguru import logger
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from lazypack.config.curation import LinkingConfig
from lazypack.curation.backend import GenerationBackend
from lazypack.curation.prompts import LINKER_SYSTEM_PROMPT, build_linker_prompt, strip_code_fences

LINK_ANALYSIS_SCHEMA: dict[str, Any] = {
    "type": "object",
    "properties": {
        "revisedArticle": {"type": "string"},
        "suggestions": {
            "type": "array",
            "items": {
                "type": "object",
                "properties": {
                    "originalSegment": {"type": "string"},
                    "revisedSegment": {"type": "string"},
                    "anchorText": {"type": "string"},
                    "targetUrl": {"type": "string"},
                    "reason": {"type": "string"},
                },
                "required": ["anchorText", "targetUrl", "reason", "revisedSegment"],
            },
        },
    },
    "required": ["revisedArticle", "suggestions"],
}


class LinkAnalysisError(RuntimeError):
    """Raised when the model cannot produce a usable link analysis."""


class LinkSuggestion(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    anchor_text: str = Field(..., alias="anchorText")
    target_url: str = Field(..., alias="targetUrl")
    reason: str
    revised_segment: str = Field(..., alias="revisedSegment")
    original_segment: str | None = Field(None, alias="originalSegment")


class AnalysisResult(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    revised_article: str = Field(..., alias="revisedArticle")
    suggestions: list[LinkSuggestion] = Field(default_factory=list)


class InternalLinker:
    """Ask the model to weave sitemap URLs into an article as internal links."""

    def __init__(self, backend: GenerationBackend, *, max_urls: int = 500) -> None:
        self._backend = backend
        self._max_urls = max_urls

    @classmethod
    def from_config(cls, backend: GenerationBackend, config: LinkingConfig) -> "InternalLinker":
        return cls(backend, max_urls=config.max_urls)

    async def analyze(self, article: str, urls: Sequence[str]) -> AnalysisResult:
        if not article.strip():
            raise LinkAnalysisError("Article content is empty")
        offered = list(urls)[: self._max_urls]
        if len(urls) > len(offered):
            logger.info("Offering the first {} of {} sitemap URLs", len(offered), len(urls))

        prompt = build_linker_prompt(article, offered)
        try:
            text = await self._backend.generate(prompt, LINKER_SYSTEM_PROMPT, LINK_ANALYSIS_SCHEMA)
        except Exception as exc:  # noqa: BLE001
            raise LinkAnalysisError(f"Link analysis failed: {exc}") from exc
        if not text or not text.strip():
            raise LinkAnalysisError("Link analysis returned an empty response")

        try:
            result = AnalysisResult.model_validate(json.loads(strip_code_fences(text)))
        except (json.JSONDecodeError, ValidationError) as exc:
            raise LinkAnalysisError(f"Link analysis response is malformed: {exc}") from exc

        allowed = set(offered)
        kept = [item for item in result.suggestions if item.target_url in allowed]
        if len(kept) < len(result.suggestions):
            logger.warning(
                "Dropped {} suggestions pointing outside the sitemap",
                len(result.suggestions) - len(kept),
            )
        logger.info("Link analysis produced {} suggestions", len(kept))
        return result.model_copy(update={"suggestions": kept})


__all__ = [
    "AnalysisResult",
    "InternalLinker",
    "LINK_ANALYSIS_SCHEMA",
    "LinkAnalysisError",
    "LinkSuggestion",
]
