"""High-level orchestration for the curation pipeline."""

from __future__ import annotations

from collections.abc import Callable, Sequence

from loguru import logger

from lazypack.config import AppConfig, CurationConfig

from .architect import ArchitectStage
from .backend import GenerationBackend, build_backend
from .editor import EditorStage
from .fetcher import ContentFetcher, SourceFetcher
from .models import CurationRequest, CurationResult, CurationStatus
from .scraper import ScrapeCoordinator

StatusCallback = Callable[[CurationStatus], None]


class StatusTracker:
    """Forward-only status machine that reports each transition once."""

    def __init__(self, callback: StatusCallback | None = None) -> None:
        self._callback = callback
        self._status = CurationStatus.IDLE
        self.history: list[CurationStatus] = []

    @property
    def status(self) -> CurationStatus:
        return self._status

    def advance(self, status: CurationStatus) -> None:
        if status.rank <= self._status.rank:
            raise RuntimeError(f"Illegal status transition {self._status.value} -> {status.value}")
        self._status = status
        self.history.append(status)
        logger.info("Curation status: {}", status.value)
        if self._callback is None:
            return
        try:
            self._callback(status)
        except Exception as exc:  # noqa: BLE001
            logger.warning("Status callback raised for '{}': {}", status.value, exc)


class CurationPipeline:
    """Wire together scraping, architect drafting and editor writing.

    Stages run strictly in sequence. Any stage failure propagates to the
    caller unchanged and the run never reaches ``done``; there is no resume,
    so a retry means a new run from scratch.
    """

    def __init__(
        self,
        config: AppConfig,
        *,
        backend: GenerationBackend | None = None,
        fetcher: ContentFetcher | None = None,
    ) -> None:
        if config.curation is None:
            raise ValueError("curation config is required for curation runs")
        self._config = config
        self._pipeline_cfg: CurationConfig = config.curation
        if backend is None:
            backend = build_backend(config.resolve_llm(self._pipeline_cfg.model))
        self._backend = backend
        self._fetcher = fetcher or SourceFetcher.from_config(self._pipeline_cfg.fetch)
        self._scraper = ScrapeCoordinator.from_config(self._fetcher, self._pipeline_cfg.scrape)
        self._architect = ArchitectStage.from_config(backend, self._pipeline_cfg.architect)
        self._editor = EditorStage.from_config(backend, self._pipeline_cfg.editor)

    async def run(self, request: CurationRequest, on_status: StatusCallback | None = None) -> str:
        result = await self.run_detailed(request, on_status)
        return result.html

    async def run_detailed(
        self,
        request: CurationRequest,
        on_status: StatusCallback | None = None,
    ) -> CurationResult:
        tracker = StatusTracker(on_status)
        logger.info("Curating '{}' from {} URLs", request.topic, len(request.urls))

        tracker.advance(CurationStatus.SCRAPING)
        sources = await self._scraper.scrape(request.urls)

        tracker.advance(CurationStatus.ANALYZING)
        drafts = await self._architect.draft(request.topic, request.outline, sources)

        tracker.advance(CurationStatus.WRITING)
        html = await self._editor.write(request.topic, request.intro, drafts, sources)

        tracker.advance(CurationStatus.DONE)
        return CurationResult(html=html, sources=sources, drafts=drafts, statuses=list(tracker.history))


async def generate_curated_article(
    topic: str,
    intro: str,
    outline: Sequence[str],
    urls: Sequence[str],
    on_status: StatusCallback | None = None,
    *,
    config: AppConfig,
    backend: GenerationBackend | None = None,
    fetcher: ContentFetcher | None = None,
) -> str:
    """Run one curation pipeline and return the finished HTML fragment."""

    pipeline = CurationPipeline(config, backend=backend, fetcher=fetcher)
    request = CurationRequest.create(topic, intro, outline, urls)
    return await pipeline.run(request, on_status)


__all__ = ["CurationPipeline", "StatusCallback", "StatusTracker", "generate_curated_article"]
