"""Generation backends behind the narrow ``generate`` capability."""

from __future__ import annotations

import json
from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Any, Dict, Protocol

import litellm
from loguru import logger

from lazypack.config.llm import LLMConfig

from .models import NO_SOURCE_MARKER
from .prompts import extract_block, extract_json_block, render_citation


class GenerationError(RuntimeError):
    """Raised when a backend cannot return text for a request."""


class GenerationBackend(Protocol):
    async def generate(
        self,
        prompt: str,
        system_instruction: str,
        schema: dict[str, Any] | None = None,
    ) -> str:
        """Return raw model text; JSON conforming to ``schema`` when one is given."""
        ...


_SUPPORTS_RESPONSE_SCHEMA = getattr(litellm, "supports_response_schema", None)
_GET_SUPPORTED_OPENAI_PARAMS = getattr(litellm, "get_supported_openai_params", None)


def build_backend(config: LLMConfig) -> GenerationBackend:
    if config.is_stub:
        logger.debug("Using stub generation backend for alias {}", config.alias)
        return StubBackend(config)
    logger.debug("Using LiteLLM generation backend for alias {}", config.alias)
    return LiteLLMBackend(config)


def _check_json_schema_support(model: str) -> bool:
    if _SUPPORTS_RESPONSE_SCHEMA is None:
        return False
    try:
        return bool(_SUPPORTS_RESPONSE_SCHEMA(model=model, custom_llm_provider=None))  # type: ignore[misc]
    except Exception as exc:  # noqa: BLE001
        logger.debug("LiteLLM schema support probe failed for model {}: {}", model, exc)
        return False


def _check_response_format_support(model: str) -> bool:
    if _GET_SUPPORTED_OPENAI_PARAMS is None:
        return False
    try:
        params = _GET_SUPPORTED_OPENAI_PARAMS(model=model, custom_llm_provider=None)  # type: ignore[misc]
    except Exception as exc:  # noqa: BLE001
        logger.debug("LiteLLM response_format probe failed for model {}: {}", model, exc)
        return False
    return _contains_response_format(params)


def _contains_response_format(params: Any) -> bool:
    if params is None:
        return False
    if isinstance(params, dict):
        candidates: Iterable[str] = params.keys()
    elif isinstance(params, Iterable):
        candidates = params
    else:
        return False
    return any(str(item) == "response_format" for item in candidates)


@dataclass(slots=True)
class LiteLLMBackend:
    """Backend that delegates generation calls to LiteLLM."""

    config: LLMConfig
    api_key: str = field(init=False, repr=False)
    _supports_json_schema: bool = field(init=False, repr=False, default=False)
    _supports_response_format: bool = field(init=False, repr=False, default=False)

    def __post_init__(self) -> None:
        self.api_key = self.config.api_key_secret
        self._supports_json_schema = _check_json_schema_support(self.config.name)
        self._supports_response_format = _check_response_format_support(self.config.name)
        logger.debug(
            "LiteLLM backend ready for alias {} (model {}) - json_schema_supported={}, response_format_supported={}",
            self.config.alias,
            self.config.name,
            self._supports_json_schema,
            self._supports_response_format,
        )

    async def generate(
        self,
        prompt: str,
        system_instruction: str,
        schema: dict[str, Any] | None = None,
    ) -> str:
        call_kwargs: Dict[str, Any] = {
            "model": self.config.name,
            "messages": [
                {"role": "system", "content": system_instruction},
                {"role": "user", "content": prompt},
            ],
            "temperature": self.config.temperature,
            "top_p": self.config.top_p,
            "api_key": self.api_key,
            "timeout": self.config.timeout,
        }
        base_url = self.config.base_url.strip()
        if base_url:
            call_kwargs["api_base"] = base_url
        if self.config.reasoning_effort:
            call_kwargs["reasoning_effort"] = self.config.reasoning_effort

        if schema is not None:
            if self._supports_json_schema:
                call_kwargs["response_format"] = {
                    "type": "json_schema",
                    "json_schema": {"name": "lazypack_response", "schema": schema},
                }
            elif self._supports_response_format:
                call_kwargs["response_format"] = {"type": "json_object"}

        try:
            response = await litellm.acompletion(**call_kwargs)
        except Exception as exc:  # noqa: BLE001
            raise GenerationError(f"LLM request failed: {exc}") from exc

        text = _extract_content(response)
        logger.debug("LLM {} returned {} chars", self.config.alias, len(text))
        return text


def _extract_content(response: Any) -> str:
    choices = getattr(response, "choices", None)
    if choices is None and isinstance(response, dict):
        choices = response.get("choices")
    if not choices:
        return ""

    choice = choices[0]
    message = getattr(choice, "message", None)
    if message is None and isinstance(choice, dict):
        message = choice.get("message")
    if message is None:
        return ""

    content = getattr(message, "content", None)
    if content is None and isinstance(message, dict):
        content = message.get("content")

    if isinstance(content, str):
        return content.strip()
    if isinstance(content, list):
        parts = [str(part).strip() for part in content if str(part).strip()]
        return "\n".join(parts).strip()
    if content is None:
        return ""
    return str(content).strip()


@dataclass(slots=True)
class StubBackend:
    """Deterministic offline stand-in for a real model.

    Reads the tagged JSON blocks of the prompt and answers the way a
    well-behaved model would: architect drafts that follow the outline,
    editor HTML with one citation line per section, and link analyses that
    leave the article unchanged.
    """

    config: LLMConfig | None = None
    calls: list[tuple[str, str, dict[str, Any] | None]] = field(default_factory=list)

    async def generate(
        self,
        prompt: str,
        system_instruction: str,
        schema: dict[str, Any] | None = None,
    ) -> str:
        self.calls.append((prompt, system_instruction, schema))
        if schema is not None and schema.get("type") == "array":
            return json.dumps(self._architect(prompt), ensure_ascii=False)
        if schema is not None:
            return json.dumps(self._linker(prompt), ensure_ascii=False)
        return self._editor(prompt)

    def _architect(self, prompt: str) -> list[dict[str, Any]]:
        outline = extract_json_block(prompt, "outline") or []
        sources = extract_json_block(prompt, "sources") or []
        drafts: list[dict[str, Any]] = []
        for index, heading in enumerate(outline):
            if not sources:
                drafts.append({"sectionTitle": heading, "contentDraft": NO_SOURCE_MARKER, "sourceIds": []})
                continue
            source = sources[index % len(sources)]
            drafts.append(
                {
                    "sectionTitle": heading,
                    "contentDraft": _first_sentences(source.get("content", ""), limit=2),
                    "sourceIds": [source["id"]],
                }
            )
        return drafts

    def _editor(self, prompt: str) -> str:
        topic = ""
        for line in prompt.splitlines():
            if line.startswith("Topic: "):
                topic = line[len("Topic: "):].strip()
                break
        intro = (extract_block(prompt, "intro") or "").strip()
        drafts = extract_json_block(prompt, "drafts") or []
        metadata = extract_json_block(prompt, "source_metadata") or {}

        parts = [f"<h1>{topic}</h1>"]
        if intro:
            parts.append(f"<p>{intro}</p>")
        for draft in drafts:
            parts.append(f"<h2>{draft['sectionTitle']}</h2>")
            parts.append(f"<p>{draft['contentDraft']}</p>")
            citations = [
                render_citation(metadata[str(source_id)]["url"], metadata[str(source_id)]["title"])
                for source_id in draft.get("sourceIds", [])
                if str(source_id) in metadata
            ]
            if citations:
                parts.append(f"<p>{' '.join(citations)}</p>")
        return "\n".join(parts)

    def _linker(self, prompt: str) -> dict[str, Any]:
        article = extract_block(prompt, "article") or ""
        return {"revisedArticle": article, "suggestions": []}


def _first_sentences(text: str, *, limit: int) -> str:
    sentences: list[str] = []
    for chunk in text.replace("\n", " ").split("."):
        cleaned = chunk.strip()
        if cleaned:
            sentences.append(cleaned + ".")
        if len(sentences) >= limit:
            break
    return " ".join(sentences)


__all__ = [
    "GenerationBackend",
    "GenerationError",
    "LiteLLMBackend",
    "StubBackend",
    "build_backend",
]
