from __future__ import annotations

import pytest

from lazypack.curation.models import ScrapedContent
from lazypack.curation.prompts import (
    build_architect_prompt,
    build_linker_prompt,
    extract_block,
    extract_json_block,
    render_citation,
    strip_code_fences,
)


def test_render_citation_uses_fixed_wording() -> None:
    assert render_citation("https://a.example.com/x", "Widget A") == (
        '(延伸閱讀：<a href="https://a.example.com/x" target="_blank">Widget A</a>)'
    )


def test_render_citation_escapes_markup() -> None:
    citation = render_citation('https://a.example.com/?q="x"&y=1', "Tips & <Tricks>")

    assert 'href="https://a.example.com/?q=&quot;x&quot;&amp;y=1"' in citation
    assert ">Tips &amp; &lt;Tricks&gt;</a>" in citation


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("```html\n<h1>T</h1>\n```", "<h1>T</h1>"),
        ("```\n[1, 2]\n```", "[1, 2]"),
        ("  <p>plain</p>  ", "<p>plain</p>"),
        ("```json[]```", "[]"),
    ],
)
def test_strip_code_fences(raw: str, expected: str) -> None:
    cleaned = strip_code_fences(raw)

    assert cleaned == expected
    assert strip_code_fences(cleaned) == cleaned


def test_architect_prompt_round_trips_blocks() -> None:
    sources = [ScrapedContent(id=2, url="https://b.example.com", title="B", content="Body text")]

    prompt = build_architect_prompt("Widgets", ["Overview"], sources)

    assert prompt.splitlines()[0] == "Topic: Widgets"
    assert extract_json_block(prompt, "outline") == ["Overview"]
    assert extract_json_block(prompt, "sources") == [{"id": 2, "title": "B", "content": "Body text"}]
    assert extract_json_block(prompt, "missing") is None


def test_linker_prompt_lists_urls_one_per_line() -> None:
    prompt = build_linker_prompt("# Article", ["https://s.example.com/1", "https://s.example.com/2"])

    assert extract_block(prompt, "article") == "# Article"
    assert extract_block(prompt, "sitemap") == "https://s.example.com/1\nhttps://s.example.com/2"


def test_strip_code_fences_keeps_inner_fences() -> None:
    body = "<p>Install it:</p>\n<pre><code>```bash\npip install widget\n```</code></pre>"

    assert strip_code_fences(body) == body
    assert strip_code_fences(f"```html\n{body}\n```") == body


def test_extract_block_keeps_payload_with_closing_tag() -> None:
    article = "<article><p>Intro</p></article>\n</article>\n<p>Tail</p>"
    prompt = build_linker_prompt(article, ["https://s.example.com/1"])

    assert extract_block(prompt, "article") == article
    assert extract_block(prompt, "sitemap") == "https://s.example.com/1"
