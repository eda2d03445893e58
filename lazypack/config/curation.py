"""Curation pipeline configuration models."""

from __future__ import annotations

from pydantic import Field, field_validator

from lazypack.config.base import BaseConfig

DEFAULT_ROUTES: tuple[str, ...] = (
    "{url}",
    "https://corsproxy.io/?{quoted}",
    "https://api.allorigins.win/raw?url={quoted}",
)

DEFAULT_OUTLINE: tuple[str, ...] = (
    "背景與現況",
    "核心重點整理",
    "優缺點分析",
    "總結與建議",
)

DEFAULT_BANNED_PHRASES: tuple[str, ...] = (
    "總而言之",
    "綜上所述",
    "在這個快速變化的時代",
    "不可否認",
    "值得一提的是",
    "讓我們一起來看看",
)


class FetchConfig(BaseConfig):
    """Network settings for retrieving a single source page."""

    routes: list[str] = Field(
        default_factory=lambda: list(DEFAULT_ROUTES),
        description="Ordered retrieval routes; '{url}' is the raw URL, '{quoted}' the percent-encoded one",
        min_length=1,
    )
    timeout: float = Field(10.0, gt=0, description="Seconds allowed per retrieval attempt")
    min_body_length: int = Field(200, ge=0, description="Bodies at or below this length count as a failed route")
    content_budget: int = Field(15000, ge=1, description="Maximum characters of cleaned text kept per source")
    user_agent: str = Field(
        "Mozilla/5.0 (compatible; LazyPack/0.1; +https://github.com/lazypack/lazypack)",
        description="User-Agent header sent with every request",
    )

    @field_validator("routes")
    @classmethod
    def _require_placeholder(cls, routes: list[str]) -> list[str]:
        for route in routes:
            if "{url}" not in route and "{quoted}" not in route:
                raise ValueError(f"Route '{route}' must contain '{{url}}' or '{{quoted}}'")
        return routes


class ScrapeConfig(BaseConfig):
    """Fan-out limits for the scrape stage."""

    max_sources: int = Field(5, ge=1, description="Only the first N URLs of a request are fetched")
    min_content_length: int = Field(50, ge=0, description="Sources with this many characters or fewer are discarded")


class ArchitectConfig(BaseConfig):
    """Controls for the structural drafting stage."""

    min_content_length: int = Field(100, ge=0, description="Minimum source length passed to the architect")
    default_outline: list[str] = Field(
        default_factory=lambda: list(DEFAULT_OUTLINE),
        description="Outline used when the request does not provide one",
        min_length=1,
    )


class EditorConfig(BaseConfig):
    """Style settings for the final writing stage."""

    language: str = Field("Traditional Chinese (繁體中文)", description="Output language of the article")
    section_length: str = Field("200-400 characters", description="Target prose length per section")
    banned_phrases: list[str] = Field(
        default_factory=lambda: list(DEFAULT_BANNED_PHRASES),
        description="Phrases the writer must avoid",
    )


class CurationConfig(BaseConfig):
    """Complete curation pipeline configuration."""

    model: str = Field(..., description="LLM alias used by the architect and editor stages")
    fetch: FetchConfig = Field(default_factory=FetchConfig)
    scrape: ScrapeConfig = Field(default_factory=ScrapeConfig)
    architect: ArchitectConfig = Field(default_factory=ArchitectConfig)
    editor: EditorConfig = Field(default_factory=EditorConfig)


class LinkingConfig(BaseConfig):
    """Settings for the internal link analyzer."""

    model: str = Field(..., description="LLM alias used for link analysis")
    max_urls: int = Field(500, ge=1, description="Sitemap URLs offered to the model per request")


__all__ = [
    "ArchitectConfig",
    "CurationConfig",
    "EditorConfig",
    "FetchConfig",
    "LinkingConfig",
    "ScrapeConfig",
]
