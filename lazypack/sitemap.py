"""Extract candidate article URLs from sitemaps, listing pages and pasted text."""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from urllib.parse import urljoin, urlparse
from xml.etree import ElementTree as ET

import requests
from bs4 import BeautifulSoup
from loguru import logger

from lazypack.config.curation import DEFAULT_ROUTES
from lazypack.curation.fetcher import build_route_url


class SitemapFetchError(RuntimeError):
    """Raised when a sitemap cannot be downloaded or yields no URLs."""


def _dedupe(urls: Iterable[str]) -> list[str]:
    seen: set[str] = set()
    ordered: list[str] = []
    for url in urls:
        if url and url not in seen:
            seen.add(url)
            ordered.append(url)
    return ordered


def _origin(url: str) -> str:
    parsed = urlparse(url)
    return f"{parsed.scheme}://{parsed.netloc}"


def extract_sitemap_locs(text: str) -> list[str]:
    """Return the ``<loc>`` entries of an XML sitemap or sitemap index."""

    try:
        root = ET.fromstring(text.strip())
    except ET.ParseError:
        return []
    locs = [
        (element.text or "").strip()
        for element in root.iter()
        if isinstance(element.tag, str) and element.tag.rsplit("}", 1)[-1] == "loc"
    ]
    return _dedupe(locs)


def extract_links(html: str, base_url: str) -> list[str]:
    """Return same-origin absolute links found in an HTML page."""

    soup = BeautifulSoup(html, "html.parser")
    base_origin = _origin(base_url)
    links: list[str] = []
    for anchor in soup.find_all("a", href=True):
        href = anchor["href"].strip()
        if not href or href.startswith(("#", "mailto:", "javascript:", "tel:")):
            continue
        full_url = urljoin(base_url, href)
        if full_url.startswith(base_origin):
            links.append(full_url)
    return _dedupe(links)


def extract_urls(text: str, base_url: str | None = None) -> list[str]:
    """Parse ``text`` as an XML sitemap, falling back to an HTML link crawl."""

    locs = extract_sitemap_locs(text)
    if locs:
        return locs
    if base_url is None:
        return []
    return extract_links(text, base_url)


def parse_url_list(text: str) -> list[str]:
    """Parse manually pasted input: sitemap XML or one URL per line."""

    if "<loc>" in text:
        locs = extract_sitemap_locs(text)
        if locs:
            return locs
    lines = [line.strip() for line in text.splitlines()]
    return _dedupe(line for line in lines if line.startswith("http"))


def normalize_site_url(value: str) -> str:
    target = value.strip()
    if not target.startswith("http"):
        target = "https://" + target
    return target


class SitemapClient:
    """Download a sitemap or listing page through the configured retrieval routes."""

    def __init__(
        self,
        routes: Sequence[str] = DEFAULT_ROUTES,
        *,
        timeout: float = 15.0,
        session: requests.Session | None = None,
    ) -> None:
        self.routes = tuple(routes)
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers.update({"User-Agent": "LazyPack/0.1"})

    def fetch(self, url: str) -> list[str]:
        target = normalize_site_url(url)
        content = self._download(target)
        urls = extract_urls(content, base_url=target)
        if not urls:
            raise SitemapFetchError(f"No URLs found at {target}; is it a sitemap or a listing page?")
        logger.info("Extracted {} URLs from {}", len(urls), target)
        return urls

    def _download(self, target: str) -> str:
        for index, route in enumerate(self.routes, start=1):
            route_url = build_route_url(route, target)
            try:
                response = self.session.get(route_url, timeout=self.timeout)
                response.raise_for_status()
            except requests.RequestException as exc:
                logger.warning("Sitemap route {} failed for {}: {}", index, target, exc)
                continue
            return response.text
        raise SitemapFetchError(f"Unable to download {target} through any retrieval route")


__all__ = [
    "SitemapClient",
    "SitemapFetchError",
    "extract_links",
    "extract_sitemap_locs",
    "extract_urls",
    "normalize_site_url",
    "parse_url_list",
]
