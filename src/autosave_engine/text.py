"""Plain-text projection and word counting for rich-text content."""

from __future__ import annotations

import html
import re

_TAG_RE = re.compile(r"<[^>]*>")
_BLOCK_END_RE = re.compile(r"</(p|div|li|h[1-6])>|<br\s*/?>", re.IGNORECASE)


def to_plain_text(content: str) -> str:
    """Strip markup from editor HTML, keeping block boundaries as whitespace."""
    if not content:
        return ""
    text = _BLOCK_END_RE.sub(" ", content)
    text = _TAG_RE.sub("", text)
    return html.unescape(text).strip()


def count_words(text: str) -> int:
    return len(text.split())
