"""Prompt templates and text helpers shared by the architect and editor stages.

Prompts carry their structured context in tagged blocks (``<outline>``,
``<sources>`` ...) holding JSON, so any backend, including the offline stub,
reads the same payload the model sees.
"""

from __future__ import annotations

import json
import re
from collections.abc import Iterable, Mapping, Sequence
from html import escape
from typing import Any

from .models import NO_SOURCE_MARKER, ArchitectDraft, ScrapedContent

CITATION_TEMPLATE = '(延伸閱讀：<a href="{url}" target="_blank">{title}</a>)'

ARCHITECT_SCHEMA: dict[str, Any] = {
    "type": "array",
    "items": {
        "type": "object",
        "properties": {
            "sectionTitle": {"type": "string"},
            "contentDraft": {"type": "string"},
            "sourceIds": {"type": "array", "items": {"type": "integer"}},
        },
        "required": ["sectionTitle", "contentDraft", "sourceIds"],
    },
}

ARCHITECT_SYSTEM_PROMPT = f"""You are a meticulous Content Architect. Your job is to read the provided source documents and plan a summary article that follows the user's outline exactly.

**CRITICAL RULES:**
1. Return one entry per heading in <outline>, in the same order. Copy every heading verbatim into `sectionTitle`. Do not omit, merge, reorder, rename or invent headings.
2. `contentDraft` holds detailed notes (facts, figures, quotes) taken only from the source documents. Do not add outside knowledge.
3. `sourceIds` lists the `id` of every source document a section draws from. Only use ids that appear in <sources>.
4. If no source supports a heading, write "{NO_SOURCE_MARKER}" in `contentDraft` and leave `sourceIds` empty. Never fabricate a source reference.
5. Your entire response must be ONLY the JSON array described by the schema. Do not wrap it in Markdown.
"""

EDITOR_SYSTEM_PROMPT = """You are a Senior Content Curator. Your job is to turn the section drafts provided into a cohesive, SEO-friendly "lazy pack" summary article.

Instructions:
1. **Title**: Start with an engaging, SEO-friendly <h1> title based on the topic.
2. **Tone**: Analyze the <intro> and mimic its tone exactly. Open the article with a polished version of that intro in a <p>.
3. **Structure**: Write exactly one <h2> per entry in <drafts>, in the same order, using the `sectionTitle` text as the heading. Phrase headings as they are given; do not number them.
4. **Length**: Each section body should be about {section_length}. Use <p>, <ul>, <li> and <strong> only.
5. **Sources**: Only state what the section draft supports. When a draft contains "{no_source_marker}", write a short transitional paragraph and no citation.
6. **Citation**: Directly after each section's prose, add one <p> holding a citation for every id in that draft's `sourceIds`, using the matching entry of <source_metadata>. STRICTLY use this format for each source, separated by a single space:
{citation_template}
Do NOT translate or alter the citation wording.
7. **Language**: {language}. Use full-width punctuation (，。、：「」) and consistent terminology.
8. **Banned phrases**: Never use any of: {banned_phrases}.
9. **Format**: Return ONLY raw HTML for the body content. Do not include <html>, <head> or <body> tags and do not use Markdown or code fences.
"""

LINKER_SYSTEM_PROMPT = """You are an SEO internal-linking specialist. Insert contextually relevant internal links into the article using only URLs from <sitemap>.

Rules:
1. Choose anchor text that already exists in the article or a natural rewrite of one sentence; keep the original headings and structure.
2. Link each target URL at most once and never link the same sentence twice.
3. Return `revisedArticle` as the full article in Markdown with links written as [anchor](url).
4. For every link, add one entry to `suggestions` with the anchor text, target URL, the revised sentence, the original sentence and the reason in Traditional Chinese (繁體中文).
"""

_LEADING_FENCE_RE = re.compile(r"\A```[\w-]*[ \t]*\n?")
_TRAILING_FENCE_RE = re.compile(r"\n?[ \t]*```\Z")


def render_citation(url: str, title: str) -> str:
    """Render the fixed inline "further reading" citation for one source."""

    return CITATION_TEMPLATE.format(url=escape(url, quote=True), title=escape(title, quote=False))


def strip_code_fences(text: str) -> str:
    """Remove a Markdown code fence wrapping the whole of ``text``.

    Only the opening and closing fence lines are dropped; fences inside the
    body (code samples, quoted drafts) are kept. Clean text passes through
    unchanged apart from trimming.
    """

    cleaned = _LEADING_FENCE_RE.sub("", text.strip(), count=1)
    return _TRAILING_FENCE_RE.sub("", cleaned, count=1).strip()


def tagged_block(tag: str, payload: Any) -> str:
    body = payload if isinstance(payload, str) else json.dumps(payload, ensure_ascii=False, indent=2)
    return f"<{tag}>\n{body}\n</{tag}>"


def extract_block(text: str, tag: str) -> str | None:
    """Return the raw body of the ``<tag>`` block built by :func:`tagged_block`.

    The block runs to the last closing tag line, so payloads may contain the
    closing tag themselves.
    """

    match = re.search(rf"^<{tag}>\n(.*)\n</{tag}>$", text, re.DOTALL | re.MULTILINE)
    return match.group(1) if match else None


def extract_json_block(text: str, tag: str) -> Any:
    body = extract_block(text, tag)
    if body is None:
        return None
    return json.loads(body)


def build_architect_prompt(topic: str, outline: Sequence[str], sources: Iterable[ScrapedContent]) -> str:
    documents = [{"id": s.id, "title": s.title, "content": s.content} for s in sources]
    return "\n\n".join(
        [
            f"Topic: {topic}",
            tagged_block("outline", list(outline)),
            tagged_block("sources", documents),
        ]
    )


def build_editor_prompt(
    topic: str,
    intro: str,
    drafts: Sequence[ArchitectDraft],
    metadata: Mapping[int, Mapping[str, str]],
) -> str:
    draft_payload = [draft.model_dump(by_alias=True) for draft in drafts]
    metadata_payload = {str(source_id): dict(meta) for source_id, meta in metadata.items()}
    return "\n\n".join(
        [
            f"Topic: {topic}",
            tagged_block("intro", intro),
            tagged_block("drafts", draft_payload),
            tagged_block("source_metadata", metadata_payload),
        ]
    )


def build_editor_system_prompt(*, language: str, section_length: str, banned_phrases: Sequence[str]) -> str:
    banned = "、".join(f"「{phrase}」" for phrase in banned_phrases) or "(none)"
    return EDITOR_SYSTEM_PROMPT.format(
        section_length=section_length,
        no_source_marker=NO_SOURCE_MARKER,
        citation_template=CITATION_TEMPLATE.format(url="{Original_URL}", title="{Original_Title}"),
        language=language,
        banned_phrases=banned,
    )


def build_linker_prompt(article: str, urls: Sequence[str]) -> str:
    return "\n\n".join(
        [
            tagged_block("article", article),
            tagged_block("sitemap", "\n".join(urls)),
        ]
    )


__all__ = [
    "ARCHITECT_SCHEMA",
    "ARCHITECT_SYSTEM_PROMPT",
    "CITATION_TEMPLATE",
    "EDITOR_SYSTEM_PROMPT",
    "LINKER_SYSTEM_PROMPT",
    "build_architect_prompt",
    "build_editor_prompt",
    "build_editor_system_prompt",
    "build_linker_prompt",
    "extract_block",
    "extract_json_block",
    "render_citation",
    "strip_code_fences",
    "tagged_block",
]
