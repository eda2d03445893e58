"""Command line interface for the lazypack toolkit."""

from __future__ import annotations

import asyncio
import json
import sys
from dataclasses import dataclass
from pathlib import Path

import typer
import uvicorn
from loguru import logger

from .config import AppConfig, load_config
from .config.curation import DEFAULT_ROUTES
from .curation import CurationError, CurationPipeline, CurationRequest, CurationStatus
from .curation.backend import build_backend
from .export import export_document
from .linking import InternalLinker, LinkAnalysisError
from .sitemap import SitemapClient, SitemapFetchError, parse_url_list
from .web import create_app

_sink_id: int | None = None
_default_sink_removed = False


@dataclass(slots=True)
class CLIState:
    """Holds shared state between Typer commands."""

    config_path: Path
    _config: AppConfig | None = None

    def ensure_config(self) -> AppConfig:
        if self._config is None:
            logger.info("Loading configuration from {}", self.config_path)
            self._config = load_config(AppConfig, self.config_path)
            _configure_logging(self._config.logging_level)
        return self._config


app = typer.Typer(help="LazyPack SEO content helpers")


def _default_config_path() -> Path:
    repo_root = Path(__file__).resolve().parents[1]
    return repo_root / "config" / "example.toml"


def _configure_logging(level: str) -> None:
    """Route loguru output to the current stderr at ``level``."""

    global _sink_id, _default_sink_removed
    if not _default_sink_removed:
        logger.remove(0)
        _default_sink_removed = True
    if _sink_id is not None:
        logger.remove(_sink_id)
    _sink_id = logger.add(lambda message: sys.stderr.write(message), level=level.upper())


def _get_state(ctx: typer.Context) -> CLIState:
    state = ctx.obj
    if not isinstance(state, CLIState):  # pragma: no cover - defensive guard
        raise RuntimeError("CLI context is not initialised")
    return state


def _exit(code: int) -> None:
    raise typer.Exit(code)


def _read_lines(path: Path) -> list[str]:
    return [line.strip() for line in path.read_text(encoding="utf-8").splitlines() if line.strip()]


@app.callback(invoke_without_command=True)
def main_callback(
    ctx: typer.Context,
    config: Path = typer.Option(
        _default_config_path(),
        help="Path to the TOML configuration file",
    ),
) -> None:
    """Initialise CLI state."""

    ctx.obj = CLIState(config_path=config.resolve())
    if ctx.invoked_subcommand is None:
        logger.warning("No command provided. Try 'status' or 'curate --help'.")
        _exit(0)


@app.command(help="Show configuration status")
def status(ctx: typer.Context) -> None:
    state = _get_state(ctx)
    try:
        config = state.ensure_config()
    except FileNotFoundError as exc:
        logger.error("{}", exc)
        _exit(2)
        return
    _report_system_status(config)


@app.command(help="Generate a curated summary article from source URLs")
def curate(
    ctx: typer.Context,
    topic: str = typer.Option(..., "--topic", help="Article topic"),
    intro: str = typer.Option(..., "--intro", help="Tone-setting introduction"),
    heading: list[str] = typer.Option(None, "--heading", help="Outline heading (repeatable, in order)"),
    outline_file: Path | None = typer.Option(None, "--outline-file", help="File with one heading per line"),
    url: list[str] = typer.Option(None, "--url", help="Source URL (repeatable)"),
    urls_file: Path | None = typer.Option(None, "--urls-file", help="File with one URL per line or sitemap XML"),
    output: Path | None = typer.Option(None, "--output", help="Write a standalone HTML document here"),
) -> None:
    state = _get_state(ctx)
    config = state.ensure_config()
    if config.curation is None:
        logger.error("Curation pipeline is not configured")
        _exit(1)

    outline = list(heading or [])
    if outline_file is not None:
        outline.extend(_read_lines(outline_file))
    urls = list(url or [])
    if urls_file is not None:
        urls.extend(parse_url_list(urls_file.read_text(encoding="utf-8")))
    urls = [item for item in urls if item.startswith("http")]
    if not urls:
        logger.error("Provide at least one http(s) URL via --url or --urls-file")
        _exit(1)

    try:
        pipeline = CurationPipeline(config)
    except (ValueError, EnvironmentError) as exc:
        logger.error("Cannot initialise curation pipeline: {}", exc)
        _exit(1)
        return

    def _on_status(value: CurationStatus) -> None:
        typer.echo(f"[{value.value}]", err=True)

    request = CurationRequest.create(topic, intro, outline, urls)
    try:
        result = asyncio.run(pipeline.run_detailed(request, _on_status))
    except CurationError as exc:
        logger.error("Curation failed: {}", exc)
        _exit(1)
        return

    logger.info("Article built from {} sources", len(result.sources))
    if output is None:
        typer.echo(result.html)
        return
    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_text(export_document(result.html), encoding="utf-8")
    logger.info("Article written to {}", output)


@app.command("extract-urls", help="Extract article URLs from a sitemap or listing page")
def extract_urls_command(
    ctx: typer.Context,
    file: Path | None = typer.Option(None, "--file", help="Sitemap XML or URL list saved locally"),
    site: str | None = typer.Option(None, "--site", help="Sitemap or listing page URL to download"),
) -> None:
    if (file is None) == (site is None):
        logger.error("Pass exactly one of --file or --site")
        _exit(1)

    if file is not None:
        urls = parse_url_list(file.read_text(encoding="utf-8"))
    else:
        config = _get_state(ctx).ensure_config()
        routes = config.curation.fetch.routes if config.curation else list(DEFAULT_ROUTES)
        try:
            urls = SitemapClient(routes).fetch(site or "")
        except SitemapFetchError as exc:
            logger.error("{}", exc)
            _exit(1)
            return

    if not urls:
        logger.warning("No URLs found")
        _exit(1)
    for item in urls:
        typer.echo(item)


@app.command(help="Suggest internal links for an article using a URL list")
def link(
    ctx: typer.Context,
    article: Path = typer.Option(..., "--article", help="Article file (Markdown or HTML)"),
    urls_file: Path = typer.Option(..., "--urls-file", help="Sitemap XML or one URL per line"),
) -> None:
    state = _get_state(ctx)
    config = state.ensure_config()
    if config.linking is None:
        logger.error("Link analysis is not configured")
        _exit(1)
        return

    try:
        backend = build_backend(config.resolve_llm(config.linking.model))
    except (ValueError, EnvironmentError) as exc:
        logger.error("Cannot initialise link analysis: {}", exc)
        _exit(1)
        return

    linker = InternalLinker.from_config(backend, config.linking)
    urls = parse_url_list(urls_file.read_text(encoding="utf-8"))
    try:
        result = asyncio.run(linker.analyze(article.read_text(encoding="utf-8"), urls))
    except LinkAnalysisError as exc:
        logger.error("Link analysis failed: {}", exc)
        _exit(1)
        return

    typer.echo(json.dumps(result.model_dump(by_alias=True), indent=2, ensure_ascii=False))


@app.command(help="Run the HTTP API server")
def serve(
    ctx: typer.Context,
    host: str = typer.Option("127.0.0.1", help="Host to bind the API server to"),
    port: int = typer.Option(8787, help="Port to bind the API server to"),
) -> None:
    state = _get_state(ctx)
    config = state.ensure_config()
    app_instance = create_app(config)
    logger.info("Starting API server on {}:{}", host, port)
    uvicorn.run(app_instance, host=host, port=port)


def _report_system_status(config: AppConfig) -> None:
    logger.info("=== General Configuration ===")
    logger.info("Logging level: {}", config.logging_level)

    logger.info("=== Curation Pipeline ===")
    if config.curation:
        cp = config.curation
        logger.info("Model alias: {}", cp.model)
        logger.info("Retrieval routes: {} (timeout={}s)", len(cp.fetch.routes), cp.fetch.timeout)
        logger.info("Max sources: {}, content budget: {}", cp.scrape.max_sources, cp.fetch.content_budget)
        logger.info("Default outline: {}", " / ".join(cp.architect.default_outline))
        logger.info("Editor language: {}", cp.editor.language)
    else:
        logger.info("Not configured")

    logger.info("=== Link Analysis ===")
    if config.linking:
        logger.info("Model alias: {} (max_urls={})", config.linking.model, config.linking.max_urls)
    else:
        logger.info("Not configured")

    logger.info("=== LLM Configurations ===")
    if config.llms:
        logger.info("Available LLMs: {}", len(config.llms))
        for llm in config.llms:
            logger.info("  - {}: {} (stub={})", llm.alias, llm.name, llm.is_stub)
    else:
        logger.info("No LLMs configured")


def main(argv: list[str] | None = None) -> int:
    """Entry point compatible with console scripts."""

    try:
        result = app(args=argv, standalone_mode=False)
    except typer.Exit as exc:  # pragma: no cover - Typer translates exit codes
        return exc.exit_code
    if isinstance(result, int):
        return result
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
