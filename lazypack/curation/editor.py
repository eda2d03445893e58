"""Writing stage: structured drafts -> styled HTML fragment."""

from __future__ import annotations

from collections.abc import Sequence

from loguru import logger

from lazypack.config.curation import DEFAULT_BANNED_PHRASES, EditorConfig

from .backend import GenerationBackend
from .errors import EditorFailure
from .models import ArchitectDraft, ScrapedContent
from .prompts import build_editor_prompt, build_editor_system_prompt, strip_code_fences


def source_metadata(sources: Sequence[ScrapedContent]) -> dict[int, dict[str, str]]:
    return {source.id: {"url": source.url, "title": source.title} for source in sources}


class EditorStage:
    """Expand drafts into the final article with one free-form generation call.

    Style rules travel with the request as instructions; they are not
    checked after generation.
    """

    def __init__(
        self,
        backend: GenerationBackend,
        *,
        language: str = "Traditional Chinese (繁體中文)",
        section_length: str = "200-400 characters",
        banned_phrases: Sequence[str] = DEFAULT_BANNED_PHRASES,
    ) -> None:
        self._backend = backend
        self._system_prompt = build_editor_system_prompt(
            language=language,
            section_length=section_length,
            banned_phrases=banned_phrases,
        )

    @classmethod
    def from_config(cls, backend: GenerationBackend, config: EditorConfig) -> "EditorStage":
        return cls(
            backend,
            language=config.language,
            section_length=config.section_length,
            banned_phrases=config.banned_phrases,
        )

    @property
    def system_prompt(self) -> str:
        return self._system_prompt

    async def write(
        self,
        topic: str,
        intro: str,
        drafts: Sequence[ArchitectDraft],
        sources: Sequence[ScrapedContent],
    ) -> str:
        prompt = build_editor_prompt(topic, intro, drafts, source_metadata(sources))
        try:
            text = await self._backend.generate(prompt, self._system_prompt)
        except Exception as exc:  # noqa: BLE001
            raise EditorFailure(f"Editor generation failed: {exc}") from exc

        html = strip_code_fences(text or "")
        if not html:
            raise EditorFailure("Editor generation returned an empty response")
        logger.info("Editor produced {} chars of HTML", len(html))
        return html


__all__ = ["EditorStage", "source_metadata"]
