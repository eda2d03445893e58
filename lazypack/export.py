"""Sanitize generated HTML and wrap it into a downloadable document."""

from __future__ import annotations

from bs4 import BeautifulSoup
from jinja2 import BaseLoader, Environment

UNSAFE_TAGS: tuple[str, ...] = ("script", "style", "iframe", "object", "embed", "link", "meta", "base")
_URL_ATTRIBUTES = ("href", "src", "action", "formaction")

_DOCUMENT_TEMPLATE = """<!DOCTYPE html>
<html lang="{{ lang }}">
<head>
<meta charset="utf-8">
<title>{{ title | e }}</title>
</head>
<body>
{{ body }}
</body>
</html>
"""

_env = Environment(loader=BaseLoader(), autoescape=False, trim_blocks=True, lstrip_blocks=True)
_document = _env.from_string(_DOCUMENT_TEMPLATE)


def sanitize_html(fragment: str) -> str:
    """Strip active content (scripts, event handlers, ``javascript:`` URLs)."""

    soup = BeautifulSoup(fragment, "html.parser")
    for tag in soup.find_all(list(UNSAFE_TAGS)):
        if not tag.decomposed:
            tag.decompose()
    for tag in soup.find_all(True):
        for attr in list(tag.attrs):
            if attr.lower().startswith("on"):
                del tag.attrs[attr]
            elif attr.lower() in _URL_ATTRIBUTES:
                value = str(tag.attrs[attr]).strip().lower()
                if value.startswith(("javascript:", "vbscript:", "data:text/html")):
                    del tag.attrs[attr]
    return str(soup).strip()


def document_title(fragment: str, fallback: str = "Article") -> str:
    soup = BeautifulSoup(fragment, "html.parser")
    heading = soup.find("h1")
    if heading is not None and heading.get_text(strip=True):
        return heading.get_text(strip=True)
    return fallback


def export_document(fragment: str, *, title: str | None = None, lang: str = "zh-Hant") -> str:
    """Return a standalone HTML document for ``fragment``."""

    body = sanitize_html(fragment)
    resolved_title = title or document_title(body)
    return _document.render(title=resolved_title, body=body, lang=lang)


__all__ = ["document_title", "export_document", "sanitize_html"]
