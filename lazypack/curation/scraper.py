"""Concurrent fan-out of the source fetcher."""

from __future__ import annotations

import asyncio
from collections.abc import Sequence

from loguru import logger

from lazypack.config.curation import ScrapeConfig

from .errors import ScrapeFailure
from .fetcher import ContentFetcher
from .models import ScrapedContent


class ScrapeCoordinator:
    """Fetch the first ``max_sources`` URLs concurrently and keep the usable ones.

    Ids are assigned from input order before the fan-out, so a failed fetch
    never renumbers the sources that follow it. The join waits for every
    fetch to settle; one failure never cancels its siblings.
    """

    def __init__(self, fetcher: ContentFetcher, *, max_sources: int = 5, min_content_length: int = 50) -> None:
        self._fetcher = fetcher
        self._max_sources = max_sources
        self._min_content_length = min_content_length

    @classmethod
    def from_config(cls, fetcher: ContentFetcher, config: ScrapeConfig) -> "ScrapeCoordinator":
        return cls(fetcher, max_sources=config.max_sources, min_content_length=config.min_content_length)

    async def scrape(self, urls: Sequence[str]) -> list[ScrapedContent]:
        selected = list(urls)[: self._max_sources]
        if len(urls) > len(selected):
            logger.info("Scraping the first {} of {} URLs", len(selected), len(urls))

        assignments = list(enumerate(selected, start=1))
        results = await asyncio.gather(
            *(self._fetcher.fetch(url, source_id) for source_id, url in assignments),
            return_exceptions=True,
        )

        usable: list[ScrapedContent] = []
        for (source_id, url), result in zip(assignments, results):
            if isinstance(result, BaseException):
                if not isinstance(result, Exception):
                    raise result
                logger.error("Fetching source {} ({}) raised unexpectedly: {}", source_id, url, result)
                continue
            if len(result.content) <= self._min_content_length:
                logger.warning(
                    "Discarding source {} ({}): {} chars of content",
                    source_id,
                    url,
                    len(result.content),
                )
                continue
            usable.append(result)

        logger.info("Scraped {}/{} sources successfully", len(usable), len(selected))
        if not usable:
            raise ScrapeFailure("Could not scrape any provided URLs. Please check the links.")
        return usable


__all__ = ["ScrapeCoordinator"]
