"""Configuration namespace for lazypack."""

from __future__ import annotations

from .app import AppConfig
from .base import BaseConfig, load_config
from .curation import (
    ArchitectConfig,
    CurationConfig,
    EditorConfig,
    FetchConfig,
    LinkingConfig,
    ScrapeConfig,
)
from .llm import LLMConfig
from .utils import resolve_env_reference
from .web import WebConfig

__all__ = [
    "BaseConfig",
    "AppConfig",
    "load_config",
    "ArchitectConfig",
    "CurationConfig",
    "EditorConfig",
    "FetchConfig",
    "LinkingConfig",
    "LLMConfig",
    "ScrapeConfig",
    "WebConfig",
    "resolve_env_reference",
]
