"""Application-level configuration models."""

from __future__ import annotations

from pydantic import Field

from lazypack.config.base import BaseConfig
from lazypack.config.curation import CurationConfig, LinkingConfig
from lazypack.config.llm import LLMConfig
from lazypack.config.web import WebConfig


class AppConfig(BaseConfig):
    """Top-level runtime configuration for the entire application."""

    logging_level: str = Field("INFO", description="Log level: DEBUG, INFO, WARNING, ERROR")
    curation: CurationConfig | None = Field(None, description="Curation pipeline configuration")
    linking: LinkingConfig | None = Field(None, description="Internal link analyzer configuration")
    web: WebConfig | None = Field(None, description="HTTP service configuration")
    llms: list[LLMConfig] = Field(default_factory=list, description="Available LLM configurations")

    def resolve_llm(self, alias: str) -> LLMConfig:
        for llm in self.llms:
            if llm.alias == alias:
                return llm
        raise ValueError(f"LLM alias '{alias}' not found in configuration")


__all__ = ["AppConfig"]
