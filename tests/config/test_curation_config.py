"""Unit tests for curation, linking and web configuration models."""

from __future__ import annotations

from pathlib import Path

import pytest
from pydantic import ValidationError

from lazypack.config import CurationConfig, FetchConfig, LinkingConfig, WebConfig, load_config


def test_curation_config_defaults() -> None:
    cfg = CurationConfig(model="stub-llm")

    assert cfg.fetch.routes[0] == "{url}"
    assert cfg.fetch.timeout == 10.0
    assert cfg.fetch.min_body_length == 200
    assert cfg.fetch.content_budget == 15000
    assert cfg.scrape.max_sources == 5
    assert cfg.scrape.min_content_length == 50
    assert cfg.architect.min_content_length == 100
    assert len(cfg.architect.default_outline) == 4
    assert cfg.editor.language.startswith("Traditional Chinese")
    assert "總而言之" in cfg.editor.banned_phrases


def test_curation_config_from_toml(tmp_path: Path) -> None:
    config_file = tmp_path / "curation.toml"
    config_file.write_text(
        """
        model = "gemini-flash"

        [fetch]
        routes = ["https://proxy.example.com/?{quoted}"]
        timeout = 3.5

        [scrape]
        max_sources = 3
        """.strip(),
        encoding="utf-8",
    )

    cfg = load_config(CurationConfig, config_file)

    assert cfg.model == "gemini-flash"
    assert cfg.fetch.routes == ["https://proxy.example.com/?{quoted}"]
    assert cfg.fetch.timeout == 3.5
    assert cfg.scrape.max_sources == 3
    assert cfg.scrape.min_content_length == 50


def test_fetch_config_rejects_route_without_placeholder() -> None:
    with pytest.raises(ValidationError, match="must contain"):
        FetchConfig(routes=["https://proxy.example.com/"])


def test_fetch_config_rejects_empty_routes() -> None:
    with pytest.raises(ValidationError):
        FetchConfig(routes=[])


def test_curation_config_rejects_extra_fields() -> None:
    with pytest.raises(ValidationError):
        CurationConfig(model="stub-llm", retries=3)


def test_linking_config_requires_positive_limit() -> None:
    with pytest.raises(ValidationError):
        LinkingConfig(model="stub-llm", max_urls=0)


def test_web_config_normalises_origins() -> None:
    cfg = WebConfig(allowed_origins=[" https://app.example.com/ ", "", "http://localhost:5173"])

    assert cfg.allowed_origins == ["https://app.example.com", "http://localhost:5173"]
