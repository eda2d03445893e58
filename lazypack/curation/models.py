"""Data models used by the curation pipeline."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

UNTITLED_TITLE = "Untitled Article"
FAILED_TITLE = "Load Failed"
NO_SOURCE_MARKER = "[NO_SOURCE_DATA]"


class CurationStatus(str, Enum):
    """Progress of a single pipeline run, in transition order."""

    IDLE = "idle"
    SCRAPING = "scraping"
    ANALYZING = "analyzing"
    WRITING = "writing"
    DONE = "done"

    @property
    def rank(self) -> int:
        return _STATUS_ORDER.index(self)


_STATUS_ORDER: tuple[CurationStatus, ...] = tuple(CurationStatus)


@dataclass(frozen=True, slots=True)
class ScrapedContent:
    """One fetched-and-cleaned source document."""

    id: int
    url: str
    title: str
    content: str

    @classmethod
    def failed_fetch(cls, source_id: int, url: str) -> "ScrapedContent":
        return cls(id=source_id, url=url, title=FAILED_TITLE, content="")

    @property
    def failed(self) -> bool:
        return self.title == FAILED_TITLE and not self.content


class ArchitectDraft(BaseModel):
    """Structured plan for one article section."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    section_title: str = Field(..., alias="sectionTitle")
    content_draft: str = Field(..., alias="contentDraft")
    source_ids: list[int] = Field(..., alias="sourceIds")

    @property
    def has_sources(self) -> bool:
        return bool(self.source_ids) and NO_SOURCE_MARKER not in self.content_draft


@dataclass(frozen=True, slots=True)
class CurationRequest:
    """Input contract of a curation run."""

    topic: str
    intro: str
    outline: tuple[str, ...] = ()
    urls: tuple[str, ...] = ()

    @classmethod
    def create(
        cls,
        topic: str,
        intro: str,
        outline: Iterable[str] = (),
        urls: Iterable[str] = (),
    ) -> "CurationRequest":
        return cls(topic=topic, intro=intro, outline=tuple(outline), urls=tuple(urls))

    @classmethod
    def from_text(cls, topic: str, intro: str, outline_text: str, urls_text: str) -> "CurationRequest":
        """Build a request from multi-line form input.

        Outline lines are stripped and blank lines dropped; only URL lines
        starting with ``http`` are kept.
        """

        outline = [line.strip() for line in outline_text.splitlines() if line.strip()]
        urls = [line.strip() for line in urls_text.splitlines() if line.strip().startswith("http")]
        return cls.create(topic.strip(), intro.strip(), outline, urls)


@dataclass(slots=True)
class CurationResult:
    """Everything a finished run produced."""

    html: str
    sources: list[ScrapedContent]
    drafts: list[ArchitectDraft]
    statuses: list[CurationStatus] = field(default_factory=list)


__all__ = [
    "ArchitectDraft",
    "CurationRequest",
    "CurationResult",
    "CurationStatus",
    "FAILED_TITLE",
    "NO_SOURCE_MARKER",
    "ScrapedContent",
    "UNTITLED_TITLE",
]
