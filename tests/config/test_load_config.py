from __future__ import annotations

from pathlib import Path

import pytest

from lazypack.config import AppConfig, BaseConfig, load_config


class ExampleConfig(BaseConfig):
    output_dir: Path
    feature_enabled: bool


def test_load_config_success(tmp_path: Path) -> None:
    sample = tmp_path / "config.toml"
    sample.write_text(
        """
        output_dir = "./exports"
        feature_enabled = true
        """.strip(),
        encoding="utf-8",
    )

    cfg = load_config(ExampleConfig, sample)

    assert cfg.output_dir == Path("./exports")
    assert cfg.feature_enabled is True


def test_load_config_missing_file(tmp_path: Path) -> None:
    missing = tmp_path / "missing.toml"
    with pytest.raises(FileNotFoundError):
        load_config(ExampleConfig, missing)


def test_app_config_example_file() -> None:
    """Load the shipped example.toml with every section populated."""
    config_path = Path(__file__).resolve().parents[2] / "config" / "example.toml"
    cfg = load_config(AppConfig, config_path)

    assert cfg.logging_level == "INFO"

    # Curation pipeline
    assert cfg.curation is not None
    assert cfg.curation.model == "stub-llm"
    assert len(cfg.curation.fetch.routes) == 3
    assert cfg.curation.fetch.routes[0] == "{url}"
    assert cfg.curation.fetch.timeout == 10.0
    assert cfg.curation.fetch.content_budget == 15000
    assert cfg.curation.scrape.max_sources == 5
    assert cfg.curation.architect.default_outline == ["背景與現況", "核心重點整理", "優缺點分析", "總結與建議"]

    # Link analysis and web service
    assert cfg.linking is not None
    assert cfg.linking.max_urls == 500
    assert cfg.web is not None
    assert cfg.web.allowed_origins == ["http://localhost:3000", "http://localhost:5173"]

    # LLM configurations
    assert len(cfg.llms) == 2
    assert cfg.resolve_llm("stub-llm").is_stub is True
    gemini = cfg.resolve_llm("gemini-flash")
    assert gemini.api_key == "env:GEMINI_API_KEY"
    assert gemini.is_stub is False


def test_resolve_llm_unknown_alias() -> None:
    cfg = AppConfig()
    with pytest.raises(ValueError, match="LLM alias 'missing' not found in configuration"):
        cfg.resolve_llm("missing")
