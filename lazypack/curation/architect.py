"""Structural drafting stage: outline + sources -> per-section drafts."""

from __future__ import annotations

import json
from collections.abc import Iterable, Sequence

from loguru import logger
from pydantic import TypeAdapter, ValidationError

from lazypack.config.curation import DEFAULT_OUTLINE, ArchitectConfig

from .backend import GenerationBackend
from .errors import ArchitectFailure
from .models import ArchitectDraft, ScrapedContent
from .prompts import ARCHITECT_SCHEMA, ARCHITECT_SYSTEM_PROMPT, build_architect_prompt, strip_code_fences

_DRAFTS_ADAPTER = TypeAdapter(list[ArchitectDraft])


def parse_drafts(text: str) -> list[ArchitectDraft]:
    """Parse generator output into drafts, raising on any schema mismatch."""

    payload = json.loads(strip_code_fences(text))
    return _DRAFTS_ADAPTER.validate_python(payload)


def check_drafts(
    drafts: Sequence[ArchitectDraft],
    outline: Sequence[str],
    source_ids: Iterable[int],
) -> list[str]:
    """Return every contract violation found in ``drafts``.

    The section titles must reproduce ``outline`` exactly and in order,
    and every referenced source id must belong to the current run.
    """

    problems: list[str] = []
    titles = [draft.section_title for draft in drafts]
    if titles != list(outline):
        missing = [heading for heading in outline if heading not in titles]
        invented = [title for title in titles if title not in outline]
        if missing:
            problems.append(f"missing sections: {missing}")
        if invented:
            problems.append(f"unexpected sections: {invented}")
        if not missing and not invented:
            problems.append(f"sections out of order: expected {list(outline)}, got {titles}")

    known = set(source_ids)
    for draft in drafts:
        dangling = sorted(set(draft.source_ids) - known)
        if dangling:
            problems.append(f"section '{draft.section_title}' cites unknown source ids {dangling}")
    return problems


class ArchitectStage:
    """Turn scraped evidence into an outline-aligned plan with one generation call."""

    def __init__(
        self,
        backend: GenerationBackend,
        *,
        min_content_length: int = 100,
        default_outline: Sequence[str] = DEFAULT_OUTLINE,
    ) -> None:
        self._backend = backend
        self._min_content_length = min_content_length
        self._default_outline = tuple(default_outline)

    @classmethod
    def from_config(cls, backend: GenerationBackend, config: ArchitectConfig) -> "ArchitectStage":
        return cls(backend, min_content_length=config.min_content_length, default_outline=config.default_outline)

    async def draft(
        self,
        topic: str,
        outline: Sequence[str],
        sources: Sequence[ScrapedContent],
    ) -> list[ArchitectDraft]:
        headings = list(outline) or list(self._default_outline)
        if not outline:
            logger.info("No outline supplied; using the default {}-heading outline", len(headings))

        evidence = [source for source in sources if len(source.content) > self._min_content_length]
        logger.info("Architect planning {} sections from {} sources", len(headings), len(evidence))

        prompt = build_architect_prompt(topic, headings, evidence)
        try:
            text = await self._backend.generate(prompt, ARCHITECT_SYSTEM_PROMPT, ARCHITECT_SCHEMA)
        except Exception as exc:  # noqa: BLE001
            raise ArchitectFailure(f"Architect generation failed: {exc}") from exc

        if not text or not text.strip():
            raise ArchitectFailure("Architect generation returned an empty response")

        try:
            drafts = parse_drafts(text)
        except (json.JSONDecodeError, ValidationError) as exc:
            raise ArchitectFailure(f"Architect response does not match the draft schema: {exc}") from exc

        problems = check_drafts(drafts, headings, (source.id for source in evidence))
        if problems:
            logger.error("Architect response rejected: {}", "; ".join(problems))
            raise ArchitectFailure("Architect response violates the outline contract: " + "; ".join(problems))

        logger.info("Architect produced {} drafts", len(drafts))
        return drafts


__all__ = ["ArchitectStage", "check_drafts", "parse_drafts"]
