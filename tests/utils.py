"""Fakes shared across the test suite."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any

from lazypack.config import (
    AppConfig,
    CurationConfig,
    LinkingConfig,
    LLMConfig,
    WebConfig,
)
from lazypack.curation.models import ScrapedContent

WIDGET_A_URL = "https://widgets.example.com/a"
WIDGET_B_URL = "https://widgets.example.com/b"

WIDGET_PAGES: dict[str, tuple[str, str]] = {
    WIDGET_A_URL: (
        "Widget A",
        "Widget A is a compact gadget for home offices. It costs 10 dollars per month. "
        "Reviewers praise its battery life and quiet operation in small rooms.",
    ),
    WIDGET_B_URL: (
        "Widget B",
        "Widget B is an industrial gadget built for warehouses. It costs 25 dollars per month. "
        "Its larger motor handles heavy loads but needs regular maintenance.",
    ),
}


class ScriptedBackend:
    """Generation backend that replays canned responses in order."""

    def __init__(self, *responses: str | Exception) -> None:
        self.responses = list(responses)
        self.calls: list[tuple[str, str, dict[str, Any] | None]] = []

    async def generate(
        self,
        prompt: str,
        system_instruction: str,
        schema: dict[str, Any] | None = None,
    ) -> str:
        self.calls.append((prompt, system_instruction, schema))
        if not self.responses:
            raise AssertionError("ScriptedBackend ran out of responses")
        item = self.responses.pop(0)
        if isinstance(item, Exception):
            raise item
        return item


class StaticFetcher:
    """Content fetcher answering from an in-memory page table."""

    def __init__(
        self,
        pages: Mapping[str, tuple[str, str]] | None = None,
        *,
        raising: Iterable[str] = (),
    ) -> None:
        self.pages = dict(pages or {})
        self.raising = set(raising)
        self.calls: list[tuple[str, int]] = []

    async def fetch(self, url: str, source_id: int) -> ScrapedContent:
        self.calls.append((url, source_id))
        if url in self.raising:
            raise RuntimeError(f"unexpected crash for {url}")
        if url not in self.pages:
            return ScrapedContent.failed_fetch(source_id, url)
        title, content = self.pages[url]
        return ScrapedContent(id=source_id, url=url, title=title, content=content)


def make_app_config(*, include_curation: bool = True, include_linking: bool = True) -> AppConfig:
    """Construct an in-memory AppConfig backed by the stub LLM."""

    llm = LLMConfig(
        alias="stub-llm",
        name="stub/echo",
        base_url="stub://local",
        api_key="dummy",
        temperature=0.0,
        top_p=1.0,
    )
    return AppConfig(
        logging_level="INFO",
        curation=CurationConfig(model=llm.alias) if include_curation else None,
        linking=LinkingConfig(model=llm.alias, max_urls=50) if include_linking else None,
        web=WebConfig(allowed_origins=["http://localhost:3000"]),
        llms=[llm],
    )
