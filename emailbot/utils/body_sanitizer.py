"""Text cleanup for inbound mail bodies, run as a pipeline of (text, content_type) -> text steps."""

import html
import re
from typing import Callable

from bs4 import BeautifulSoup

Sanitizer = Callable[[str, str], str]

MAX_BODY_CHARS = 10000


def html_to_text(text: str, content_type: str) -> str:
    """Strip HTML to text, keeping line breaks at block elements."""
    if content_type.lower() != "html" or not text.strip():
        return text

    soup = BeautifulSoup(text, "lxml")
    for el in soup(["script", "style", "head", "meta", "link"]):
        el.decompose()
    for br in soup.find_all("br"):
        br.replace_with("\n")
    for tag in soup.find_all(["p", "div", "tr", "li", "h1", "h2", "h3", "h4", "h5", "h6"]):
        tag.insert_before("\n")
        tag.insert_after("\n")
    return html.unescape(soup.get_text(separator=" "))


_TYPOGRAPHY = {
    "\u2018": "'",
    "\u2019": "'",
    "\u201c": '"',
    "\u201d": '"',
    "\u2013": "-",
    "\u2014": "-",
    "\u2026": "...",
    "\u00a0": " ",
    "\r\n": "\n",
    "\r": "\n",
}


def decode_special_characters(text: str, content_type: str) -> str:
    """Drop zero-width characters and fold typographic punctuation to ASCII."""
    text = re.sub(r"[\u200b\u200c\u200d\ufeff]", "", text)
    for old, new in _TYPOGRAPHY.items():
        text = text.replace(old, new)
    return text


def normalize_whitespace(text: str, content_type: str) -> str:
    """Collapse runs of spaces, keep at most two blank lines in a row, strip the ends."""
    text = re.sub(r"[^\S\n]+", " ", text)
    result = []
    blanks = 0
    for line in (line.strip() for line in text.split("\n")):
        if not line:
            blanks += 1
            if blanks > 2:
                continue
        else:
            blanks = 0
        result.append(line)
    return "\n".join(result).strip()


def truncate_long_content(text: str, content_type: str, max_chars: int = MAX_BODY_CHARS) -> str:
    """Cut very long bodies at a paragraph, line or sentence break near max_chars."""
    if len(text) <= max_chars:
        return text
    for sep in ("\n\n", "\n", ". ", " "):
        pos = text.rfind(sep, 0, max_chars)
        if pos > max_chars * 0.8:
            return text[: pos + len(sep)] + "\n\n[Content truncated...]"
    return text[:max_chars] + "\n\n[Content truncated...]"


DEFAULT_PIPELINE: list[Sanitizer] = [
    decode_special_characters,
    html_to_text,
    normalize_whitespace,
    truncate_long_content,
]


def sanitize_email_body(
    text: str,
    content_type: str = "text",
    pipeline: list[Sanitizer] | None = None,
) -> str:
    if not text:
        return ""
    for sanitizer in (pipeline or DEFAULT_PIPELINE):
        text = sanitizer(text, content_type)
    return text
