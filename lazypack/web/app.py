"""FastAPI application factory and routing definitions."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from fastapi import FastAPI, HTTPException, status
from fastapi.middleware.cors import CORSMiddleware
from loguru import logger
from pydantic import BaseModel, ConfigDict, Field

from lazypack.config.app import AppConfig
from lazypack.config.web import WebConfig
from lazypack.curation import CurationError, CurationPipeline, CurationRequest
from lazypack.curation.backend import GenerationBackend, build_backend
from lazypack.curation.fetcher import ContentFetcher
from lazypack.linking import InternalLinker, LinkAnalysisError
from lazypack.sitemap import extract_urls, parse_url_list

SERVICE_VERSION = "0.1.0"


class CurateBody(BaseModel):
    topic: str = Field(..., min_length=1)
    intro: str = Field(..., min_length=1)
    outline: list[str] = Field(default_factory=list)
    urls: list[str] = Field(..., min_length=1)


class AnalyzeBody(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    article_content: str = Field(..., alias="articleContent", min_length=1)
    url_list: list[str] = Field(default_factory=list, alias="urlList")


class SitemapBody(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    text: str = Field(..., min_length=1)
    base_url: str | None = Field(None, alias="baseUrl")


def create_app(
    config: AppConfig,
    *,
    backend: GenerationBackend | None = None,
    fetcher: ContentFetcher | None = None,
) -> FastAPI:
    """Create the API exposing curation, link analysis and URL extraction."""

    web_config = config.web or WebConfig()

    app = FastAPI(
        title=web_config.title,
        description="SEO content curation and internal-linking API.",
        version=SERVICE_VERSION,
    )
    app.add_middleware(
        CORSMiddleware,
        allow_origins=web_config.allowed_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization"],
    )

    @app.get("/health", summary="Health Check", tags=["Monitoring"])
    async def health_check() -> dict[str, Any]:
        """Check if the API is running and which features are configured."""
        return {
            "status": "ok",
            "version": SERVICE_VERSION,
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "curation": config.curation is not None,
            "linking": config.linking is not None,
        }

    @app.post("/api/curate", summary="Generate a curated article", tags=["Curation"])
    async def curate(body: CurateBody) -> dict[str, Any]:
        if config.curation is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Curation is not configured.")

        try:
            pipeline = CurationPipeline(config, backend=backend, fetcher=fetcher)
        except (ValueError, EnvironmentError) as exc:
            logger.error("Cannot initialise curation pipeline: {}", exc)
            raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(exc)) from exc

        request = CurationRequest.create(body.topic, body.intro, body.outline, body.urls)
        try:
            result = await pipeline.run_detailed(request)
        except CurationError as exc:
            logger.error("Curation request for '{}' failed: {}", body.topic, exc)
            raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(exc)) from exc

        return {
            "html": result.html,
            "statuses": [item.value for item in result.statuses],
            "sources": [{"id": s.id, "url": s.url, "title": s.title} for s in result.sources],
        }

    @app.post("/api/analyze", summary="Suggest internal links", tags=["Linking"])
    async def analyze(body: AnalyzeBody) -> dict[str, Any]:
        if config.linking is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Link analysis is not configured.")

        try:
            link_backend = backend or build_backend(config.resolve_llm(config.linking.model))
        except (ValueError, EnvironmentError) as exc:
            logger.error("Cannot initialise link analysis: {}", exc)
            raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(exc)) from exc
        linker = InternalLinker.from_config(link_backend, config.linking)
        try:
            result = await linker.analyze(body.article_content, body.url_list)
        except LinkAnalysisError as exc:
            logger.error("Link analysis failed: {}", exc)
            raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(exc)) from exc
        return result.model_dump(by_alias=True)

    @app.post("/api/sitemap", summary="Extract URLs from sitemap text", tags=["Linking"])
    async def sitemap(body: SitemapBody) -> dict[str, Any]:
        if body.base_url:
            urls = extract_urls(body.text, base_url=body.base_url)
        else:
            urls = parse_url_list(body.text)
        return {"count": len(urls), "urls": urls}

    return app


__all__ = ["create_app"]
