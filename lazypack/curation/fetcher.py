"""Retrieve and clean a single source page."""

from __future__ import annotations

import asyncio
import re
from dataclasses import dataclass, field
from typing import Protocol
from urllib.parse import quote

import httpx
from bs4 import BeautifulSoup
from loguru import logger

from lazypack.config.curation import DEFAULT_ROUTES, FetchConfig

from .errors import FetchFailure
from .models import UNTITLED_TITLE, ScrapedContent

NOISE_TAGS: tuple[str, ...] = (
    "script",
    "style",
    "noscript",
    "nav",
    "footer",
    "header",
    "aside",
    "iframe",
    "svg",
    "form",
    "button",
    "input",
    "select",
    "textarea",
)

AD_TOKENS = frozenset({"ad", "ads", "advert", "advertisement", "adsbygoogle", "sponsor", "sponsored", "promo", "banner"})

_WHITESPACE_RE = re.compile(r"\s+")
_TOKEN_SPLIT_RE = re.compile(r"[\s_-]+")


class ContentFetcher(Protocol):
    async def fetch(self, url: str, source_id: int) -> ScrapedContent:
        """Return a cleaned document, or the failure sentinel."""
        ...


def build_route_url(route: str, url: str) -> str:
    """Fill a route template with the raw and percent-encoded target URL."""

    return route.replace("{quoted}", quote(url, safe="")).replace("{url}", url)


def clean_html(html: str, *, content_budget: int) -> tuple[str, str]:
    """Return ``(title, text)`` extracted from an HTML document."""

    soup = BeautifulSoup(html, "html.parser")

    title = UNTITLED_TITLE
    if soup.title is not None:
        raw_title = _WHITESPACE_RE.sub(" ", soup.title.get_text()).strip()
        if raw_title:
            title = raw_title

    for tag in soup.find_all(list(NOISE_TAGS)) + soup.find_all(_is_ad_container):
        if not tag.decomposed:
            tag.decompose()

    root = soup.body or soup
    text = _WHITESPACE_RE.sub(" ", root.get_text(" ")).strip()
    return title, text[:content_budget]


def _is_ad_container(tag) -> bool:
    if tag.name in ("html", "body"):
        return False
    values: list[str] = []
    classes = tag.get("class") or []
    if isinstance(classes, str):
        classes = [classes]
    values.extend(classes)
    tag_id = tag.get("id")
    if isinstance(tag_id, str):
        values.append(tag_id)
    for value in values:
        if any(token in AD_TOKENS for token in _TOKEN_SPLIT_RE.split(value.lower()) if token):
            return True
    return False


@dataclass(slots=True)
class SourceFetcher:
    """Fetch one URL through an ordered chain of retrieval routes.

    Every attempt is bounded by ``timeout`` seconds. A route only counts
    as successful when it answers 2xx with a body longer than
    ``min_body_length``; proxy services tend to return short error pages
    with a success status. When every route fails the fetcher returns the
    ``Load Failed`` sentinel instead of raising.
    """

    routes: tuple[str, ...] = DEFAULT_ROUTES
    timeout: float = 10.0
    min_body_length: int = 200
    content_budget: int = 15000
    user_agent: str = "Mozilla/5.0 (compatible; LazyPack/0.1)"
    transport: httpx.AsyncBaseTransport | None = field(default=None, repr=False)

    @classmethod
    def from_config(cls, config: FetchConfig, *, transport: httpx.AsyncBaseTransport | None = None) -> "SourceFetcher":
        return cls(
            routes=tuple(config.routes),
            timeout=config.timeout,
            min_body_length=config.min_body_length,
            content_budget=config.content_budget,
            user_agent=config.user_agent,
            transport=transport,
        )

    async def fetch(self, url: str, source_id: int) -> ScrapedContent:
        try:
            html = await self._retrieve(url)
        except FetchFailure as exc:
            logger.warning("Source {} unavailable: {}", source_id, exc)
            return ScrapedContent.failed_fetch(source_id, url)

        title, text = clean_html(html, content_budget=self.content_budget)
        logger.debug("Source {} cleaned: '{}' ({} chars)", source_id, title, len(text))
        return ScrapedContent(id=source_id, url=url, title=title, content=text)

    async def _retrieve(self, url: str) -> str:
        async with httpx.AsyncClient(
            follow_redirects=True,
            headers={"User-Agent": self.user_agent},
            timeout=httpx.Timeout(self.timeout),
            transport=self.transport,
        ) as client:
            for index, route in enumerate(self.routes, start=1):
                target = build_route_url(route, url)
                try:
                    response = await asyncio.wait_for(client.get(target), timeout=self.timeout)
                except asyncio.TimeoutError:
                    logger.warning("Route {} timed out after {}s for {}", index, self.timeout, url)
                    continue
                except httpx.HTTPError as exc:
                    logger.warning("Route {} failed for {}: {}: {}", index, url, type(exc).__name__, exc)
                    continue

                if not response.is_success:
                    logger.warning("Route {} returned HTTP {} for {}", index, response.status_code, url)
                    continue
                body = response.text
                if len(body) <= self.min_body_length:
                    logger.warning("Route {} returned an implausibly short body ({} chars) for {}", index, len(body), url)
                    continue
                logger.info("Fetched {} via route {} ({} chars)", url, index, len(body))
                return body

        raise FetchFailure(f"All {len(self.routes)} retrieval routes failed for {url}")


__all__ = [
    "ContentFetcher",
    "SourceFetcher",
    "build_route_url",
    "clean_html",
]
