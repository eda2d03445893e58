from __future__ import annotations

import asyncio
import json

import pytest

from lazypack.config.curation import DEFAULT_OUTLINE
from lazypack.curation.architect import ArchitectStage, check_drafts, parse_drafts
from lazypack.curation.errors import ArchitectFailure
from lazypack.curation.models import NO_SOURCE_MARKER, ArchitectDraft, ScrapedContent
from lazypack.curation.prompts import ARCHITECT_SCHEMA, extract_json_block

from ..utils import ScriptedBackend

SOURCES = [
    ScrapedContent(id=1, url="https://a.example.com", title="A", content="Evidence about pricing. " * 10),
    ScrapedContent(id=2, url="https://b.example.com", title="B", content="Evidence about features. " * 10),
]


def _draft_json(*sections: tuple[str, str, list[int]]) -> str:
    return json.dumps(
        [{"sectionTitle": title, "contentDraft": draft, "sourceIds": ids} for title, draft, ids in sections]
    )


def _draft(title: str, ids: list[int]) -> ArchitectDraft:
    return ArchitectDraft(section_title=title, content_draft="notes", source_ids=ids)


def test_parse_drafts_accepts_fenced_json() -> None:
    text = "```json\n" + _draft_json(("Overview", "notes", [1])) + "\n```"

    drafts = parse_drafts(text)

    assert drafts == [ArchitectDraft(sectionTitle="Overview", contentDraft="notes", sourceIds=[1])]


def test_parse_drafts_rejects_missing_fields() -> None:
    with pytest.raises(Exception):
        parse_drafts(json.dumps([{"sectionTitle": "Overview"}]))


def test_check_drafts_reports_omitted_section() -> None:
    problems = check_drafts([_draft("Overview", [1])], ["Overview", "Pricing"], [1, 2])

    assert problems == ["missing sections: ['Pricing']"]


def test_check_drafts_reports_reordered_sections() -> None:
    problems = check_drafts([_draft("Pricing", [1]), _draft("Overview", [2])], ["Overview", "Pricing"], [1, 2])

    assert len(problems) == 1
    assert problems[0].startswith("sections out of order")


def test_check_drafts_reports_invented_section() -> None:
    problems = check_drafts([_draft("Overview", [1]), _draft("Bonus", [1])], ["Overview"], [1])

    assert problems == ["unexpected sections: ['Bonus']"]


def test_check_drafts_flags_dangling_source_ids() -> None:
    problems = check_drafts([_draft("Overview", [1, 99])], ["Overview"], [1, 2])

    assert problems == ["section 'Overview' cites unknown source ids [99]"]


def test_draft_returns_outline_aligned_sections() -> None:
    backend = ScriptedBackend(
        _draft_json(("Overview", "A and B compared", [1, 2]), ("Pricing", "A is cheaper", [1]))
    )
    stage = ArchitectStage(backend)

    drafts = asyncio.run(stage.draft("Widgets", ["Overview", "Pricing"], SOURCES))

    assert [d.section_title for d in drafts] == ["Overview", "Pricing"]
    assert drafts[1].source_ids == [1]
    prompt, _, schema = backend.calls[0]
    assert schema == ARCHITECT_SCHEMA
    assert extract_json_block(prompt, "outline") == ["Overview", "Pricing"]
    assert [doc["id"] for doc in extract_json_block(prompt, "sources")] == [1, 2]


def test_draft_accepts_no_source_marker() -> None:
    backend = ScriptedBackend(_draft_json(("Overview", NO_SOURCE_MARKER, [])))

    drafts = asyncio.run(ArchitectStage(backend).draft("Widgets", ["Overview"], SOURCES))

    assert drafts[0].has_sources is False


def test_draft_uses_default_outline_when_empty() -> None:
    sections = [(heading, "notes", [1]) for heading in DEFAULT_OUTLINE]
    backend = ScriptedBackend(_draft_json(*sections))

    drafts = asyncio.run(ArchitectStage(backend).draft("Widgets", [], SOURCES))

    assert [d.section_title for d in drafts] == list(DEFAULT_OUTLINE)
    assert extract_json_block(backend.calls[0][0], "outline") == list(DEFAULT_OUTLINE)


def test_draft_excludes_thin_sources_from_evidence() -> None:
    thin = ScrapedContent(id=3, url="https://c.example.com", title="C", content="Too short to cite.")
    backend = ScriptedBackend(_draft_json(("Overview", "notes", [1])))

    asyncio.run(ArchitectStage(backend).draft("Widgets", ["Overview"], [*SOURCES, thin]))

    assert [doc["id"] for doc in extract_json_block(backend.calls[0][0], "sources")] == [1, 2]


def test_draft_rejects_reordered_outline() -> None:
    backend = ScriptedBackend(_draft_json(("Pricing", "notes", [1]), ("Overview", "notes", [2])))

    with pytest.raises(ArchitectFailure, match="outline contract"):
        asyncio.run(ArchitectStage(backend).draft("Widgets", ["Overview", "Pricing"], SOURCES))


def test_draft_rejects_dangling_source_id() -> None:
    backend = ScriptedBackend(_draft_json(("Overview", "notes", [99])))

    with pytest.raises(ArchitectFailure, match=r"unknown source ids \[99\]"):
        asyncio.run(ArchitectStage(backend).draft("Widgets", ["Overview"], SOURCES))


@pytest.mark.parametrize("response", ["not json at all", "", '{"sectionTitle": "Overview"}'])
def test_draft_rejects_unusable_responses(response: str) -> None:
    backend = ScriptedBackend(response)

    with pytest.raises(ArchitectFailure):
        asyncio.run(ArchitectStage(backend).draft("Widgets", ["Overview"], SOURCES))


def test_draft_wraps_backend_errors() -> None:
    backend = ScriptedBackend(RuntimeError("quota exceeded"))

    with pytest.raises(ArchitectFailure, match="quota exceeded"):
        asyncio.run(ArchitectStage(backend).draft("Widgets", ["Overview"], SOURCES))


def test_parse_drafts_keeps_fences_inside_drafts() -> None:
    text = "```json\n" + _draft_json(("Overview", "Run ```make``` first", [1])) + "\n```"

    drafts = parse_drafts(text)

    assert drafts[0].content_draft == "Run ```make``` first"
