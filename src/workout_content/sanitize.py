"""
HTML cleanup for third-party exercise descriptions.
"""

from __future__ import annotations

import re

from bs4 import BeautifulSoup

ALLOWED_TAGS = frozenset({"p", "ul", "ol", "li", "strong", "em", "br"})
_DROP_WITH_CONTENT = ["script", "style", "iframe", "object", "embed", "template"]
_WS = re.compile(r"\s+")


def clean_html(html: str) -> str:
    """
    Keep only structural tags from ``ALLOWED_TAGS``.

    Script-like elements are removed with their content, other tags are
    unwrapped (text kept), and allowed tags lose every attribute, which
    includes inline event handlers.
    """
    if not html:
        return ""
    soup = BeautifulSoup(html, "html.parser")
    for tag in soup.find_all(_DROP_WITH_CONTENT):
        tag.decompose()
    for tag in soup.find_all(True):
        if tag.name in ALLOWED_TAGS:
            tag.attrs = {}
        else:
            tag.unwrap()
    return str(soup).strip()


def html_to_text(html: str) -> str:
    """Plain-text rendering: bullets for list items, tags stripped, whitespace collapsed."""
    if not html:
        return ""
    soup = BeautifulSoup(html, "html.parser")
    for li in soup.find_all("li"):
        li.insert(0, "• ")
    text = soup.get_text(" ")
    return _WS.sub(" ", text).strip()
